import os


def _env_bool(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Application configuration from environment variables."""

    # Database
    DATABASE_URL = os.environ.get('DATABASE_URL', 'sqlite:///fuellog.db')
    SLOW_QUERY_THRESHOLD_MS = int(os.environ.get('SLOW_QUERY_THRESHOLD_MS', 500))

    # What to do with the old store when a schema upgrade fails: "recreate" or "quarantine"
    MIGRATION_FAILURE_POLICY = os.environ.get('MIGRATION_FAILURE_POLICY', 'recreate')

    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
    FLASK_ENV = os.environ.get('FLASK_ENV', 'production')
    DEBUG = FLASK_ENV == 'development'
    FLASK_HOST = os.environ.get('FLASK_HOST', '127.0.0.1')
    FLASK_PORT = int(os.environ.get('FLASK_PORT', 8080))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Default preference values (see settings.Settings)
    UNITS = os.environ.get('FUELLOG_UNITS', 'MPG_US')
    PLOT_DATE_RANGE = os.environ.get('FUELLOG_PLOT_DATE_RANGE', 'PAST_MONTH')
    DATA_ENTRY_MODE = os.environ.get('FUELLOG_DATA_ENTRY_MODE', 'CALCULATE_PRICE')
    COST_REQUIRED = _env_bool('FUELLOG_COST_REQUIRED', True)
    CURRENCY = os.environ.get('FUELLOG_CURRENCY', 'USD')

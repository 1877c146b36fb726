"""
FuelLog - Flask Application

JSON API over the fuel log: vehicles, refuel records, mileage, CSV
import/export and statistics.
"""

import logging

from flask import Flask, jsonify

from .config import Config
from .core import FuelLogCore
from .exceptions import (
    ConfigurationError,
    DuplicateNameError,
    DuplicateOdometerError,
    FuelLogError,
    InconsistentInputError,
    InsufficientDataError,
    MalformedLineError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .routes import register_blueprints
from .routes.helpers import EXTENSION_KEY

# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# first match wins
ERROR_STATUS = (
    (NotFoundError, 404),
    (DuplicateNameError, 409),
    (DuplicateOdometerError, 409),
    (ValidationError, 400),
    (MalformedLineError, 400),
    (ConfigurationError, 400),
    (InsufficientDataError, 422),
    (InconsistentInputError, 422),
    (StorageError, 500),
)


def status_for(error: FuelLogError) -> int:
    for error_type, status in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def register_error_handlers(app):
    """Render FuelLog errors as JSON {"error", "details"}."""

    @app.errorhandler(FuelLogError)
    def handle_fuellog_error(error):
        status = status_for(error)
        if status >= 500:
            logger.error(f"Request failed: {error}")
        else:
            logger.warning(f"Request rejected ({status}): {error}")
        return jsonify({'error': error.message, 'details': error.details}), status

    @app.errorhandler(404)
    def not_found_error(error):
        return jsonify({'error': 'Not found', 'details': {}}), 404

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        return jsonify({'error': 'Method not allowed', 'details': {}}), 405


def create_app(core: FuelLogCore = None, config=Config) -> Flask:
    """
    Create the Flask app.

    Args:
        core: FuelLogCore to serve; opened from ``config`` when omitted
        config: Configuration object
    """
    app = Flask(__name__)
    app.config.from_object(config)

    if core is None:
        core = FuelLogCore.from_config(config)
    app.extensions[EXTENSION_KEY] = core

    register_blueprints(app)
    register_error_handlers(app)

    logger.info(f"FuelLog app ready (units={core.settings.units.value})")
    return app


if __name__ == '__main__':
    create_app().run(host=Config.FLASK_HOST, port=Config.FLASK_PORT, debug=Config.DEBUG)

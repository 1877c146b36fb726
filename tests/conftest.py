"""
Pytest fixtures for FuelLog tests.
"""

import os

# Set DATABASE_URL BEFORE importing the app so Config never points at a file
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('LOG_LEVEL', 'WARNING')

from datetime import datetime

import pytest

from fuellog.app import create_app
from fuellog.core import FuelLogCore
from fuellog.database import create_database_engine, create_session_factory
from fuellog.entities import Vehicle
from fuellog.migrations import migrate
from fuellog.repository import FuelLogRepository
from fuellog.settings import Settings


@pytest.fixture
def engine():
    """Fresh in-memory database at the current schema version."""
    engine = create_database_engine('sqlite://')
    migrate(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def bare_engine():
    """In-memory database with no tables."""
    engine = create_database_engine('sqlite://')
    yield engine
    engine.dispose()


@pytest.fixture
def repository(engine):
    return FuelLogRepository(create_session_factory(engine))


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def core(repository, settings):
    return FuelLogCore(repository, settings)


@pytest.fixture
def app(core):
    """Create application for testing."""
    flask_app = create_app(core)
    flask_app.config['TESTING'] = True
    yield flask_app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def vehicle(repository):
    """A stored vehicle with a 16 gallon tank."""
    vehicle = Vehicle(name="Test Car", tank_capacity=16.0)
    repository.create_vehicle(vehicle)
    return vehicle


@pytest.fixture
def now():
    """Fixed reference instant for date range tests."""
    return datetime(2014, 6, 20, 12, 0)

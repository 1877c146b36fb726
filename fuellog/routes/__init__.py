"""
Routes module for FuelLog Flask blueprints.

This module contains Flask blueprints that handle different areas of the API.
"""

from .export import export_bp
from .records import records_bp
from .statistics import statistics_bp
from .vehicles import vehicles_bp

__all__ = [
    "vehicles_bp",
    "records_bp",
    "export_bp",
    "statistics_bp",
]


def register_blueprints(app):
    """Register all blueprints with the Flask app."""
    app.register_blueprint(vehicles_bp, url_prefix="/api")
    app.register_blueprint(records_bp, url_prefix="/api")
    app.register_blueprint(export_bp, url_prefix="/api")
    app.register_blueprint(statistics_bp, url_prefix="/api")

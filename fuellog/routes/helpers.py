"""
Request helpers shared by the FuelLog blueprints.
"""

from datetime import datetime

from flask import current_app, request

from ..core import FuelLogCore
from ..exceptions import ValidationError
from ..settings import Settings

EXTENSION_KEY = 'fuellog'


def get_core() -> FuelLogCore:
    """
    Core for the current request.

    Query parameters named after settings keys (units, plot_date_range,
    currency, ...) override the app's settings for this request only.
    """
    core: FuelLogCore = current_app.extensions[EXTENSION_KEY]
    overrides = {key: value for key, value in request.args.items() if key in core.settings.to_dict()}
    if overrides:
        return core.with_settings(Settings.from_mapping(overrides, defaults=core.settings))
    return core


def get_json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def number_field(data: dict, name: str, default=None, cast=float):
    """Read a numeric field; bools and non-numeric strings are rejected."""
    value = data.get(name, default)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number", field=name, value=value)
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number", field=name, value=value)


def bool_field(data: dict, name: str, default: bool = False) -> bool:
    value = data.get(name, default)
    if not isinstance(value, bool):
        raise ValidationError(f"{name} must be true or false", field=name, value=value)
    return value


def datetime_field(data: dict, name: str, default: datetime = None) -> datetime:
    value = data.get(name)
    if value is None:
        return default or datetime.now()
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an ISO date/time", field=name, value=value)

"""
Custom exceptions for FuelLog.

This module provides a hierarchy of exceptions so that every failure
carries enough context (field name, line number, id) for a caller to
render an actionable message.
"""


class FuelLogError(Exception):
    """Base exception for all FuelLog errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ValidationError(FuelLogError):
    """A value supplied for an entity field is not acceptable."""

    def __init__(self, message: str, field: str = None, value=None, line_number: int = None):
        details = {}
        if field:
            details['field'] = field
        if value is not None:
            details['value'] = value
        if line_number:
            details['line_number'] = line_number
        super().__init__(message, details)
        self.field = field
        self.value = value
        self.line_number = line_number


class OutOfRangeError(ValidationError):
    """Numeric value exceeds the caps allowed for its field."""

    def __init__(
        self,
        message: str,
        field: str = None,
        value=None,
        expected_range: tuple = None,
        line_number: int = None
    ):
        super().__init__(message, field=field, value=value, line_number=line_number)
        self.expected_range = expected_range
        if expected_range:
            self.details['expected_range'] = expected_range


class InvalidNameError(ValidationError):
    """Vehicle name is empty, too long, or not a safe file basename."""

    def __init__(self, message: str, value: str = None):
        super().__init__(message, field='name', value=value)


class DuplicateNameError(FuelLogError):
    """Vehicle name collides with an existing vehicle."""

    def __init__(self, name: str):
        super().__init__(f"Vehicle name already exists: {name}", {'name': name})
        self.name = name


class DuplicateOdometerError(FuelLogError):
    """A record with this odometer value already exists for the vehicle."""

    def __init__(self, vehicle_id: int, odometer: int, line_number: int = None):
        details = {'vehicle_id': vehicle_id, 'odometer': odometer}
        if line_number:
            details['line_number'] = line_number
        super().__init__("Duplicate odometer value", details)
        self.vehicle_id = vehicle_id
        self.odometer = odometer
        self.line_number = line_number


class NotFoundError(FuelLogError):
    """Requested vehicle or record does not exist."""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} not found", {'entity': entity, 'id': entity_id})
        self.entity = entity
        self.entity_id = entity_id


class MalformedLineError(FuelLogError):
    """A CSV line cannot be parsed."""

    def __init__(self, line_number: int = None, reason: str = None, field: str = None):
        details = {}
        if line_number:
            details['line_number'] = line_number
        if field:
            details['field'] = field
        message = reason or "Malformed CSV line"
        if line_number:
            message = f"{message} (line {line_number})"
        super().__init__(message, details)
        self.line_number = line_number
        self.reason = reason
        self.field = field


class InconsistentInputError(FuelLogError):
    """Mileage engine input violates its ordering assumptions."""

    def __init__(self, message: str, odometer: int = None):
        details = {}
        if odometer is not None:
            details['odometer'] = odometer
        super().__init__(message, details)
        self.odometer = odometer


class InsufficientDataError(FuelLogError):
    """Not enough data to compute a result (no full-tank record)."""

    pass


class StorageError(FuelLogError):
    """Underlying repository operation failed."""

    def __init__(self, message: str, cause=None):
        details = {}
        if isinstance(cause, str):
            details['cause'] = cause
        elif cause is not None:
            details['cause'] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, details)
        self.cause = cause


class MigrationError(StorageError):
    """Schema upgrade could not be applied."""

    def __init__(self, from_version: int, to_version: int, cause=None):
        super().__init__(f"Schema migration {from_version} -> {to_version} failed", cause)
        self.from_version = from_version
        self.to_version = to_version
        self.details['from_version'] = from_version
        self.details['to_version'] = to_version


class ConfigurationError(FuelLogError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, config_key: str = None):
        details = {}
        if config_key:
            details['config_key'] = config_key
        super().__init__(message, details)
        self.config_key = config_key

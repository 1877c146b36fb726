"""
FuelLog Calculation Module

Unit systems, efficiency formulas, data entry derivations and the constants
they share.

The mileage engine lives in ``calculations.mileage``; it depends on the
entity types and is imported from there directly.

Usage:
    from fuellog.calculations import Units, derive_price
    from fuellog.calculations.mileage import calculate_mileage
"""

from .constants import (
    DEFAULT_TANK_GALLONS,
    DEFAULT_TANK_LITERS,
    IMPERIAL_GAL_PER_LITER,
    MAX_COST,
    MAX_ODOMETER,
    MAX_PRICE,
    MAX_TANK_CAPACITY,
    MAX_VOLUME,
    MILES_PER_KM,
)
from .entry import (
    DataEntryMode,
    EntryValues,
    complete_entry,
    derive_cost,
    derive_price,
    derive_volume,
    validate_cost,
)
from .units import Units

__all__ = [
    # Units
    "Units",
    # Entry
    "DataEntryMode",
    "EntryValues",
    "complete_entry",
    "derive_cost",
    "derive_price",
    "derive_volume",
    "validate_cost",
    # Constants
    "IMPERIAL_GAL_PER_LITER",
    "MILES_PER_KM",
    "MAX_ODOMETER",
    "MAX_VOLUME",
    "MAX_COST",
    "MAX_PRICE",
    "MAX_TANK_CAPACITY",
    "DEFAULT_TANK_GALLONS",
    "DEFAULT_TANK_LITERS",
]

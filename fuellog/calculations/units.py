"""
Units of Measurement

Supported unit systems for distance, fuel volume and fuel efficiency:
- Labels for each quantity
- Efficiency formula per system
- Default tank capacity per volume unit
"""

from enum import Enum

from ..exceptions import ConfigurationError
from .constants import (
    DEFAULT_TANK_GALLONS,
    DEFAULT_TANK_LITERS,
    IMPERIAL_GAL_PER_LITER,
    MILES_PER_KM,
)

MILES = "miles"
KILOMETERS = "kilometers"
GALLONS = "gallons"
LITERS = "liters"


class Units(str, Enum):
    """Unit systems, declared in stored preference order (0-5)."""

    MPG_US = "MPG_US"
    KM_PER_L = "KM_PER_L"
    L_PER_100KM = "L_PER_100KM"
    MPG_UK_MI_L = "MPG_UK_MI_L"
    MPG_UK_KM_L = "MPG_UK_KM_L"
    KM_PER_GAL = "KM_PER_GAL"

    @classmethod
    def from_preference(cls, value) -> "Units":
        """
        Resolve a stored preference value.

        Accepts a Units member, its name, or the preference integer
        (as int or digit string).

        Examples:
            >>> Units.from_preference("2")
            <Units.L_PER_100KM: 'L_PER_100KM'>
        """
        if isinstance(value, cls):
            return value
        members = list(cls)
        try:
            if isinstance(value, int) or str(value).strip().isdigit():
                return members[int(value)]
            return cls[str(value).strip().upper()]
        except (IndexError, KeyError):
            raise ConfigurationError(f"Invalid units preference: {value!r}", config_key="units")

    @property
    def preference_value(self) -> int:
        return list(Units).index(self)

    @property
    def distance_label(self) -> str:
        return _UNIT_TABLE[self][0].capitalize()

    @property
    def distance_label_lower(self) -> str:
        return _UNIT_TABLE[self][0]

    @property
    def volume_label(self) -> str:
        return _UNIT_TABLE[self][1].capitalize()

    @property
    def volume_label_lower(self) -> str:
        return _UNIT_TABLE[self][1]

    @property
    def efficiency_label(self) -> str:
        return _UNIT_TABLE[self][2]

    @property
    def distance_ratio_label(self) -> str:
        """Label for a value per distance unit, e.g. "per mile"."""
        return "per mile" if _UNIT_TABLE[self][0] == MILES else "per kilometer"

    @property
    def volume_ratio_label(self) -> str:
        """Label for a value per volume unit, e.g. "per gallon"."""
        return "per gallon" if _UNIT_TABLE[self][1] == GALLONS else "per liter"

    @property
    def default_tank_capacity(self) -> float:
        if _UNIT_TABLE[self][1] == GALLONS:
            return DEFAULT_TANK_GALLONS
        return DEFAULT_TANK_LITERS

    def efficiency(self, distance: float, volume: float) -> float:
        """
        Calculate fuel efficiency in this unit system.

        Args:
            distance: Distance driven (miles or km, per this system)
            volume: Fuel consumed (gallons or liters, per this system)

        Returns:
            Efficiency value, or 0.0 when distance or volume is not positive

        Examples:
            >>> Units.MPG_US.efficiency(300, 12)
            25.0
            >>> Units.L_PER_100KM.efficiency(500, 40)
            8.0
        """
        if distance is None or volume is None or distance <= 0 or volume <= 0:
            return 0.0

        if self in (Units.MPG_US, Units.KM_PER_L, Units.KM_PER_GAL):
            return distance / volume

        if self is Units.L_PER_100KM:
            return (volume * 100.0) / distance

        imperial_gallons = volume * IMPERIAL_GAL_PER_LITER
        if self is Units.MPG_UK_MI_L:
            return distance / imperial_gallons

        # MPG_UK_KM_L: odometer in kilometers, volume in liters
        return (distance * MILES_PER_KM) / imperial_gallons


# distance unit, volume unit, efficiency label
_UNIT_TABLE = {
    Units.MPG_US: (MILES, GALLONS, "mpg"),
    Units.KM_PER_L: (KILOMETERS, LITERS, "km/L"),
    Units.L_PER_100KM: (KILOMETERS, LITERS, "L/100km"),
    Units.MPG_UK_MI_L: (MILES, LITERS, "mpg"),
    Units.MPG_UK_KM_L: (KILOMETERS, LITERS, "mpg"),
    Units.KM_PER_GAL: (KILOMETERS, GALLONS, "km/gal"),
}

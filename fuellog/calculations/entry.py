"""
Data Entry Calculations

When entering a purchase, two of {price per unit, total cost, volume} are
typed in and the third is derived:
- Cost from price and volume
- Volume from cost and price
- Price from cost and volume
"""

import math
from dataclasses import dataclass
from enum import Enum

from ..exceptions import ConfigurationError, OutOfRangeError, ValidationError
from .constants import MAX_COST, MAX_PRICE, MAX_VOLUME


class DataEntryMode(str, Enum):
    """Which value the calculator derives, in stored preference order (0-2)."""

    CALCULATE_PRICE = "CALCULATE_PRICE"
    CALCULATE_VOLUME = "CALCULATE_VOLUME"
    CALCULATE_COST = "CALCULATE_COST"

    @classmethod
    def from_preference(cls, value) -> "DataEntryMode":
        if isinstance(value, cls):
            return value
        members = list(cls)
        try:
            if isinstance(value, int) or str(value).strip().isdigit():
                return members[int(value)]
            return cls[str(value).strip().upper()]
        except (IndexError, KeyError):
            raise ConfigurationError(
                f"Invalid data entry mode preference: {value!r}", config_key="data_entry_mode"
            )


@dataclass(frozen=True)
class EntryValues:
    price: float
    volume: float
    cost: float


def _check(field_name: str, value: float, maximum: float) -> float:
    if value is None or math.isnan(value) or value < 0 or value > maximum:
        raise OutOfRangeError(
            f"{field_name} out of range",
            field=field_name,
            value=value,
            expected_range=(0, maximum),
        )
    return value


def derive_cost(price: float, volume: float) -> float:
    """
    Examples:
        >>> derive_cost(3.5, 10.0)
        35.0
    """
    _check("price", price, MAX_PRICE)
    _check("volume", volume, MAX_VOLUME)
    return _check("cost", price * volume, MAX_COST)


def derive_volume(cost: float, price: float) -> float:
    """
    Examples:
        >>> derive_volume(35.0, 3.5)
        10.0
        >>> derive_volume(35.0, 0)
        0.0
    """
    _check("cost", cost, MAX_COST)
    _check("price", price, MAX_PRICE)
    if price == 0:
        return 0.0
    return _check("volume", cost / price, MAX_VOLUME)


def derive_price(cost: float, volume: float) -> float:
    """
    Examples:
        >>> derive_price(35.0, 10.0)
        3.5
    """
    _check("cost", cost, MAX_COST)
    _check("volume", volume, MAX_VOLUME)
    if volume == 0:
        return 0.0
    return _check("price", cost / volume, MAX_PRICE)


def complete_entry(
    mode: DataEntryMode,
    price: float = None,
    volume: float = None,
    cost: float = None,
) -> EntryValues:
    """
    Fill in the value selected by ``mode`` from the other two.

    Raises:
        ValidationError: one of the two required inputs is missing
        OutOfRangeError: an input or the derived value exceeds its cap
    """
    mode = DataEntryMode.from_preference(mode)

    required = {
        DataEntryMode.CALCULATE_COST: (("price", price), ("volume", volume)),
        DataEntryMode.CALCULATE_VOLUME: (("cost", cost), ("price", price)),
        DataEntryMode.CALCULATE_PRICE: (("cost", cost), ("volume", volume)),
    }[mode]
    for field_name, value in required:
        if value is None:
            raise ValidationError(f"{field_name} is required", field=field_name)

    if mode is DataEntryMode.CALCULATE_COST:
        cost = derive_cost(price, volume)
    elif mode is DataEntryMode.CALCULATE_VOLUME:
        volume = derive_volume(cost, price)
    else:
        price = derive_price(cost, volume)

    return EntryValues(price=price, volume=volume, cost=cost)


def validate_cost(cost: float, cost_required: bool) -> float:
    """Reject an unknown (zero) cost when the settings require one."""
    _check("cost", cost, MAX_COST)
    if cost_required and cost == 0:
        raise ValidationError("cost is required", field="cost", value=cost)
    return cost

"""
User preference snapshot consumed by the core.

The core never listens for preference changes; callers build a new
Settings value and recompute whatever they display.
"""

from dataclasses import dataclass, replace
from typing import Mapping

from .calculations.entry import DataEntryMode
from .calculations.units import Units
from .config import Config
from .utils.date_range import PlotDateRange

KEY_UNITS = "units"
KEY_PLOT_DATE_RANGE = "plot_date_range"
KEY_DATA_ENTRY_MODE = "data_entry_mode"
KEY_COST_REQUIRED = "cost_required"
KEY_CURRENCY = "currency"


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


@dataclass(frozen=True)
class Settings:
    units: Units = Units.MPG_US
    plot_date_range: PlotDateRange = PlotDateRange.PAST_MONTH
    data_entry_mode: DataEntryMode = DataEntryMode.CALCULATE_PRICE
    cost_required: bool = True
    currency: str = "USD"

    @classmethod
    def from_mapping(cls, values: Mapping, defaults: "Settings" = None) -> "Settings":
        """
        Build settings from stored preference values (names or integers).

        Keys missing from ``values`` keep the value from ``defaults``.
        """
        base = defaults or cls()
        return cls(
            units=Units.from_preference(values.get(KEY_UNITS, base.units)),
            plot_date_range=PlotDateRange.from_preference(
                values.get(KEY_PLOT_DATE_RANGE, base.plot_date_range)
            ),
            data_entry_mode=DataEntryMode.from_preference(
                values.get(KEY_DATA_ENTRY_MODE, base.data_entry_mode)
            ),
            cost_required=_as_bool(values.get(KEY_COST_REQUIRED, base.cost_required)),
            currency=str(values.get(KEY_CURRENCY, base.currency)).upper(),
        )

    @classmethod
    def from_config(cls, config=Config) -> "Settings":
        return cls.from_mapping({
            KEY_UNITS: config.UNITS,
            KEY_PLOT_DATE_RANGE: config.PLOT_DATE_RANGE,
            KEY_DATA_ENTRY_MODE: config.DATA_ENTRY_MODE,
            KEY_COST_REQUIRED: config.COST_REQUIRED,
            KEY_CURRENCY: config.CURRENCY,
        })

    def with_changes(self, **changes) -> "Settings":
        return replace(self, **changes)

    def to_dict(self):
        return {
            KEY_UNITS: self.units.value,
            KEY_PLOT_DATE_RANGE: self.plot_date_range.value,
            KEY_DATA_ENTRY_MODE: self.data_entry_mode.value,
            KEY_COST_REQUIRED: self.cost_required,
            KEY_CURRENCY: self.currency,
        }

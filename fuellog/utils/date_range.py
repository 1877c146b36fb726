"""
Plot/report date ranges.

Resolves the date range preference to a concrete [start, end) window of
whole calendar months, in local time:
- end is midnight on the first day of next month
- start is midnight on the first day of the earliest month in range
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta

from ..calculations.constants import MAX_PLOT_MONTHS_BACK
from ..exceptions import ConfigurationError


class PlotDateRange(str, Enum):
    """Date range preference values, in stored preference order (0-4)."""

    PAST_MONTH = "PAST_MONTH"
    PAST_6_MONTHS = "PAST_6_MONTHS"
    PAST_12_MONTHS = "PAST_12_MONTHS"
    YEAR_TO_DATE = "YEAR_TO_DATE"
    ALL = "ALL"

    @classmethod
    def from_preference(cls, value) -> "PlotDateRange":
        if isinstance(value, cls):
            return value
        members = list(cls)
        try:
            if isinstance(value, int) or str(value).strip().isdigit():
                return members[int(value)]
            return cls[str(value).strip().upper()]
        except (IndexError, KeyError):
            raise ConfigurationError(
                f"Invalid date range preference: {value!r}", config_key="plot_date_range"
            )

    @property
    def summary(self) -> str:
        return _SUMMARIES[self]


_SUMMARIES = {
    PlotDateRange.PAST_MONTH: "Past month",
    PlotDateRange.PAST_6_MONTHS: "Past 6 months",
    PlotDateRange.PAST_12_MONTHS: "Past 12 months",
    PlotDateRange.YEAR_TO_DATE: "Year to date",
    PlotDateRange.ALL: "All",
}

_MONTHS_BACK = {
    PlotDateRange.PAST_MONTH: 0,
    PlotDateRange.PAST_6_MONTHS: 5,
    PlotDateRange.PAST_12_MONTHS: 11,
    PlotDateRange.ALL: MAX_PLOT_MONTHS_BACK,
}


def month_start(value: datetime) -> datetime:
    """Midnight on the first day of the month containing ``value``."""
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


@dataclass(frozen=True)
class DateRange:
    """A resolved [start, end) window for a PlotDateRange preference."""

    variant: PlotDateRange
    start: datetime
    end: datetime

    @classmethod
    def resolve(cls, variant, now: Optional[datetime] = None) -> "DateRange":
        """
        Resolve a preference to concrete dates.

        Examples:
            >>> r = DateRange.resolve(PlotDateRange.PAST_6_MONTHS, datetime(2014, 6, 15, 8, 30))
            >>> r.start, r.end
            (datetime.datetime(2014, 1, 1, 0, 0), datetime.datetime(2014, 7, 1, 0, 0))
        """
        variant = PlotDateRange.from_preference(variant)
        current = month_start(now or datetime.now())

        if variant is PlotDateRange.YEAR_TO_DATE:
            start = current.replace(month=1)
        else:
            start = current - relativedelta(months=_MONTHS_BACK[variant])

        end = current + relativedelta(months=1)
        return cls(variant=variant, start=start, end=end)

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant <= self.end

    @property
    def last_instant(self) -> datetime:
        """Latest instant strictly inside the range."""
        return self.end - relativedelta(microseconds=1)

    def to_dict(self):
        return {
            'range': self.variant.value,
            'summary': self.variant.summary,
            'start': self.start.isoformat(),
            'end': self.end.isoformat(),
        }

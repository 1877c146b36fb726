"""Utility modules for FuelLog: CSV codec, date ranges and currency formatting."""

from .csv_codec import (
    format_line,
    parse_line,
    read_records,
    write_records,
)
from .currency import CurrencyFormatter
from .date_range import (
    DateRange,
    PlotDateRange,
    month_start,
)

__all__ = [
    'format_line',
    'parse_line',
    'read_records',
    'write_records',
    'CurrencyFormatter',
    'DateRange',
    'PlotDateRange',
    'month_start',
]

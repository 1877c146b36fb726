"""
Statistics report for FuelLog.

Builds per-month totals and a summary for a date range from a MonthlyTrips
aggregation. The report can be serialized for the API or rendered as
plain-text tables.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from tabulate import tabulate

from ..calculations.units import Units
from ..entities import Month, RefuelRecord, TripRecord
from ..utils.currency import CurrencyFormatter
from ..utils.date_range import DateRange
from .monthly_trips import MonthlyTrips

logger = logging.getLogger(__name__)

NO_VALUE = "-"


@dataclass
class StatisticsSummary:
    """Totals and averages across every month in the report."""

    months: int
    distance: int
    volume: float
    cost: float
    distance_per_month: float
    volume_per_month: float
    cost_per_month: float
    cost_per_distance: float
    average_price: Optional[float]
    efficiency_min: Optional[float]
    efficiency_avg: Optional[float]
    efficiency_max: Optional[float]
    efficiency_count: int

    def to_dict(self):
        return {
            'months': self.months,
            'distance': self.distance,
            'volume': round(self.volume, 3),
            'cost': round(self.cost, 2),
            'distance_per_month': round(self.distance_per_month, 1),
            'volume_per_month': round(self.volume_per_month, 3),
            'cost_per_month': round(self.cost_per_month, 2),
            'cost_per_distance': round(self.cost_per_distance, 3),
            'average_price': round(self.average_price, 3) if self.average_price is not None else None,
            'efficiency': {
                'min': round(self.efficiency_min, 2) if self.efficiency_min is not None else None,
                'avg': round(self.efficiency_avg, 2) if self.efficiency_avg is not None else None,
                'max': round(self.efficiency_max, 2) if self.efficiency_max is not None else None,
                'count': self.efficiency_count,
            },
        }


def efficiency_values(records: List[RefuelRecord]) -> List[float]:
    """Efficiency of every closed segment, skipping records hidden from calculations."""
    ordered = sorted(records, key=lambda r: r.odometer)
    return [
        r.segment.efficiency()
        for r in ordered
        if r.segment is not None and not r.hide_from_calc
    ]


def summarize(trips: List[TripRecord]) -> StatisticsSummary:
    """Summarize a list of monthly trip totals (one entry per month)."""
    months = len(trips)
    total = TripRecord.empty(trips[0].start_date) if trips else None
    for trip in trips:
        total.append(trip)

    distance = total.distance if total else 0
    volume = total.volume if total else 0.0
    cost = total.cost if total else 0.0

    efficiencies = efficiency_values(total.records) if total else []
    count = len(efficiencies)

    return StatisticsSummary(
        months=months,
        distance=distance,
        volume=volume,
        cost=cost,
        distance_per_month=distance / months if months else 0.0,
        volume_per_month=volume / months if months else 0.0,
        cost_per_month=cost / months if months else 0.0,
        cost_per_distance=cost / distance if distance > 0 else 0.0,
        average_price=cost / volume if volume > 0 else None,
        efficiency_min=min(efficiencies) if count else None,
        efficiency_avg=sum(efficiencies) / count if count else None,
        efficiency_max=max(efficiencies) if count else None,
        efficiency_count=count,
    )


class StatisticsReport:
    """
    Monthly statistics over a date range.

    Month tables are ordered newest first. The summary is only produced
    when the range covers more than one month.
    """

    def __init__(
        self,
        monthly: MonthlyTrips,
        date_range: DateRange,
        units: Units = Units.MPG_US,
        formatter: CurrencyFormatter = None,
        title: str = "",
    ):
        self.date_range = date_range
        self.units = units
        self.formatter = formatter or CurrencyFormatter()
        self.fractional_formatter = CurrencyFormatter(self.formatter.currency, extra_digits=1)
        self.title = title or date_range.variant.summary

        self.months: List[Tuple[Month, TripRecord]] = [
            (month, monthly.trips_for(month)) for month in monthly.months(date_range)
        ]
        self.months.reverse()

        self.summary: Optional[StatisticsSummary] = None
        if len(self.months) > 1:
            self.summary = summarize([trips for _, trips in self.months])

        logger.debug(f"Statistics report '{self.title}' covers {len(self.months)} months")

    def to_dict(self):
        return {
            'title': self.title,
            'range': self.date_range.to_dict(),
            'units': {
                'system': self.units.value,
                'distance': self.units.distance_label_lower,
                'volume': self.units.volume_label_lower,
                'efficiency': self.units.efficiency_label,
            },
            'currency': self.formatter.currency,
            'months': [
                {'month': month.long_label, 'year': month.year, **trips.to_dict()}
                for month, trips in self.months
            ],
            'summary': self.summary.to_dict() if self.summary else None,
        }

    def _efficiency_text(self, value: Optional[float]) -> str:
        if value is None:
            return NO_VALUE
        return f"{value:.2f} {self.units.efficiency_label}"

    def summary_rows(self) -> List[List[str]]:
        s = self.summary
        distance_unit = self.units.distance_label_lower
        volume_unit = self.units.volume_label_lower
        price = NO_VALUE
        if s.average_price is not None:
            price = f"{self.formatter(s.average_price)} {self.units.volume_ratio_label}"
        return [
            ["Average efficiency", self._efficiency_text(s.efficiency_avg)],
            ["Minimum efficiency", self._efficiency_text(s.efficiency_min)],
            ["Maximum efficiency", self._efficiency_text(s.efficiency_max)],
            ["Distance", f"{s.distance} {distance_unit} ({s.distance_per_month:.1f} per month)"],
            ["Volume", f"{s.volume:.3f} {volume_unit} ({s.volume_per_month:.3f} per month)"],
            ["Cost", (f"{self.formatter(s.cost)} ({self.formatter(s.cost_per_month)} per month, "
                      f"{self.fractional_formatter(s.cost_per_distance)} {self.units.distance_ratio_label})")],
            ["Price", price],
        ]

    def month_rows(self) -> List[List[str]]:
        rows = []
        for month, trips in self.months:
            price = self.formatter(trips.price) if trips.volume > 0 else NO_VALUE
            rows.append([
                month.long_label,
                trips.distance,
                f"{trips.volume:.3f}",
                self.formatter(trips.cost),
                price,
            ])
        return rows

    def to_text(self) -> str:
        """Render the report as plain-text tables."""
        sections = []
        if self.summary:
            sections.append(tabulate(self.summary_rows(), headers=[f"Summary: {self.title}", ""],
                                     tablefmt="simple"))
        headers = [
            "Month",
            self.units.distance_label,
            self.units.volume_label,
            "Cost",
            f"Price ({self.units.volume_ratio_label})",
        ]
        sections.append(tabulate(self.month_rows(), headers=headers, tablefmt="simple"))
        return "\n\n".join(sections) + "\n"

"""
Services module for FuelLog reporting.

Aggregation and reporting built on top of mileage-annotated records,
kept separate from the Flask route handlers.
"""

from .monthly_trips import MonthlyTrips
from .statistics_service import (
    StatisticsReport,
    StatisticsSummary,
    efficiency_values,
    summarize,
)

__all__ = [
    # Monthly trips
    'MonthlyTrips',
    # Statistics
    'StatisticsReport',
    'StatisticsSummary',
    'efficiency_values',
    'summarize',
]

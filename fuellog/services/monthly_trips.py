"""
Monthly trip aggregation for FuelLog.

Folds a vehicle's refuel records into one TripRecord per calendar month.
Each trip spans two successive records and is attributed to the month of
the later one; the first record forms a zero-distance trip of its own.
"""

import logging
from datetime import datetime
from typing import Dict, Iterator, List, Optional

from ..entities import Month, RefuelRecord, TripRecord
from ..utils.date_range import DateRange, PlotDateRange

logger = logging.getLogger(__name__)


class MonthlyTrips:
    """
    Trip totals keyed by Month.

    Args:
        records: Records for one vehicle, sorted by odometer
        now: Reference instant used as ``earliest`` when there are no records
    """

    def __init__(self, records: List[RefuelRecord], now: Optional[datetime] = None):
        self._trips: Dict[Month, TripRecord] = {}
        self.earliest: datetime = now or datetime.now()

        if records:
            previous = records[0]
            self._add(TripRecord.between(previous, previous))
            for record in records[1:]:
                self._add(TripRecord.between(previous, record))
                previous = record

        logger.debug(f"Aggregated {len(records)} records into {len(self._trips)} months")

    def _add(self, trip: TripRecord) -> None:
        month = Month.from_datetime(trip.end_date)
        existing = self._trips.get(month)
        if existing is None:
            self._trips[month] = trip
        else:
            existing.append(trip)

        if trip.end_date < self.earliest:
            self.earliest = trip.end_date

    def trips_for(self, month: Month) -> TripRecord:
        """Trips recorded during ``month``; zero-filled when there are none."""
        trips = self._trips.get(month)
        if trips is None:
            trips = TripRecord.empty(month.start)
        return trips

    def months(self, date_range: DateRange) -> Iterator[Month]:
        """
        Yield months in ascending order across ``date_range``.

        For ALL the range start is moved forward to the earliest month with
        data, but never earlier than the range's own start.
        """
        start = Month.from_datetime(date_range.start)
        if date_range.variant is PlotDateRange.ALL:
            start = max(start, Month.from_datetime(self.earliest))
        end = Month.from_datetime(date_range.last_instant)

        month = start
        while not end.before(month):
            yield month
            month = month.increment()

    def total(self) -> TripRecord:
        """All trips summed into a single TripRecord."""
        total = TripRecord.empty(self.earliest)
        for month in sorted(self._trips):
            total.append(self._trips[month])
        return total

    def __len__(self):
        return len(self._trips)

    def __contains__(self, month: Month):
        return month in self._trips

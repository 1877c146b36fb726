"""
Mileage Calculations

Derives fuel efficiency from refuel records:
- Segments between successive full-tank records
- Estimates for a partial fill from the fuel gauge position
- Lookups over odometer-ordered record lists
"""

import bisect
import logging
from typing import Dict, List, Optional

from ..entities import MileageSegment, RefuelRecord
from ..exceptions import InconsistentInputError, InsufficientDataError, OutOfRangeError
from .constants import GAUGE_EMPTY, GAUGE_FULL
from .units import Units

logger = logging.getLogger(__name__)


def calculate_mileage(records: List[RefuelRecord], units: Units = Units.MPG_US) -> List[RefuelRecord]:
    """
    Attach a MileageSegment to every record that closes a segment.

    The list is sorted in place by odometer. A segment opens at a full tank
    and is closed by the next full tank; every record after the opening one,
    up to and including the closing one, adds its volume.

    Args:
        records: Records for a single vehicle (mutated in place)
        units: Unit system the segments are interpreted in

    Returns:
        The same list, sorted by odometer

    Raises:
        InconsistentInputError: two records share an odometer value

    Examples:
        >>> a = RefuelRecord(odometer=1000, volume=0, full_tank=True)
        >>> b = RefuelRecord(odometer=1300, volume=12, full_tank=True)
        >>> calculate_mileage([b, a])[1].segment.efficiency()
        25.0
    """
    if not records:
        return records

    records.sort(key=lambda r: r.odometer)

    for previous, current in zip(records, records[1:]):
        if previous.odometer == current.odometer:
            raise InconsistentInputError(
                "Duplicate odometer value in mileage input", odometer=current.odometer
            )

    segment: Optional[MileageSegment] = None
    for record in records:
        record.segment = None
        if segment is None:
            if record.full_tank:
                segment = MileageSegment.open_at(record, units)
            continue

        segment.add(record)
        if record.full_tank:
            record.segment = segment
            segment = MileageSegment.open_at(record, units)

    return records


def has_full_tank(records: List[RefuelRecord]) -> bool:
    return any(r.full_tank for r in records)


def require_full_tank(records: List[RefuelRecord]) -> None:
    """Raise InsufficientDataError when no record can open a segment."""
    if not has_full_tank(records):
        raise InsufficientDataError(
            "No full tank recorded; mileage cannot be calculated",
            {'record_count': len(records)},
        )


def find_record(records: List[RefuelRecord], odometer: int) -> int:
    """
    Binary search an odometer-sorted list.

    Returns:
        Index of the record with this odometer, or -1
    """
    odometers = [r.odometer for r in records]
    index = bisect.bisect_left(odometers, odometer)
    if index < len(records) and records[index].odometer == odometer:
        return index
    return -1


def find_previous_full_tank(records: List[RefuelRecord], index: int) -> int:
    """
    Index of the closest full-tank record before ``index``, or -1.
    """
    for position in range(min(index, len(records)) - 1, -1, -1):
        if records[position].full_tank:
            return position
    return -1


def segments_by_id(records: List[RefuelRecord]) -> Dict[int, MileageSegment]:
    """Map record id to attached segment for records that close one."""
    return {r.id: r.segment for r in records if r.segment is not None and r.id is not None}


def estimate_mileage(
    records: List[RefuelRecord],
    index: int,
    tank_capacity: float,
    gauge: float,
    units: Units = Units.MPG_US,
) -> MileageSegment:
    """
    Estimate the segment a partial fill would close had the tank been topped up.

    The fuel needed to fill the tank is taken from the gauge position
    (0.0 empty, 1.0 full) and the vehicle's tank capacity. The caller's list
    is not modified.

    Args:
        records: Odometer-sorted records for one vehicle
        index: Position of the partial-tank record to evaluate
        tank_capacity: Vehicle tank size in the current volume unit
        gauge: Fuel gauge position after the purchase
        units: Unit system for the resulting segment

    Returns:
        The hypothetical closed segment

    Raises:
        OutOfRangeError: gauge outside [0, 1] or index outside the list
        InconsistentInputError: the record is already a full tank
        InsufficientDataError: no full tank precedes the record

    Examples:
        >>> full = RefuelRecord(odometer=1000, volume=0, full_tank=True)
        >>> partial = RefuelRecord(odometer=1100, volume=5, full_tank=False)
        >>> round(estimate_mileage([full, partial], 1, 16, 0.25).efficiency(), 2)
        5.88
    """
    if gauge is None or not GAUGE_EMPTY <= gauge <= GAUGE_FULL:
        raise OutOfRangeError("Gauge position out of range", field="gauge", value=gauge,
                              expected_range=(GAUGE_EMPTY, GAUGE_FULL))
    if not 0 <= index < len(records):
        raise OutOfRangeError("Record index out of range", field="index", value=index,
                              expected_range=(0, len(records) - 1))

    record = records[index]
    if record.full_tank:
        raise InconsistentInputError(
            "Estimates apply only to partial fills", odometer=record.odometer
        )

    start = find_previous_full_tank(records, index)
    if start < 0:
        raise InsufficientDataError(
            "No full tank precedes this record", {'odometer': record.odometer}
        )

    prefix = [r.copy() for r in records[start:index + 1]]

    virtual = prefix[-1]
    virtual.volume = record.volume + tank_capacity * (GAUGE_FULL - gauge)
    virtual.full_tank = True

    calculate_mileage(prefix, units)
    logger.debug(
        f"Estimated segment for odometer {record.odometer} at gauge {gauge}: {virtual.segment}"
    )
    return virtual.segment

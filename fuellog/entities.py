"""
Domain entities for FuelLog.

Plain value types passed between the repository, the mileage engine, the
monthly aggregator and the reporters. None of them know how they are
stored; models.py maps them to tables.
"""

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Set

from .calculations.constants import (
    MAX_COST,
    MAX_NAME_LENGTH,
    MAX_ODOMETER,
    MAX_PRICE,
    MAX_TANK_CAPACITY,
    MAX_VOLUME,
    MIN_NAME_LENGTH,
    VEHICLE_NAME_PATTERN,
)
from .calculations.units import Units
from .exceptions import InvalidNameError, OutOfRangeError

_NAME_RE = re.compile(VEHICLE_NAME_PATTERN)

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def truncate_to_millis(value: datetime) -> datetime:
    """Drop sub-millisecond precision from a timestamp."""
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def clean_notes(notes: Optional[str]) -> str:
    """Notes are single-line free text."""
    if not notes:
        return ""
    return notes.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


def validate_vehicle_name(name) -> str:
    if name is None:
        raise InvalidNameError("Vehicle name is required")
    if not MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH:
        raise InvalidNameError(
            f"Vehicle name must be {MIN_NAME_LENGTH}-{MAX_NAME_LENGTH} characters", value=name
        )
    if not _NAME_RE.fullmatch(name):
        raise InvalidNameError(
            "Vehicle name may contain only letters, digits, spaces and dashes", value=name
        )
    return name


def check_range(field_name: str, value, minimum, maximum, line_number: int = None,
                include_minimum: bool = True):
    """Raise OutOfRangeError unless minimum <= value <= maximum. NaN is never in range."""
    too_low = value < minimum if include_minimum else value <= minimum
    if math.isnan(value) or too_low or value > maximum:
        raise OutOfRangeError(
            f"{field_name} out of range",
            field=field_name,
            value=value,
            expected_range=(minimum, maximum),
            line_number=line_number,
        )
    return value


@dataclass(eq=False)
class Vehicle:
    """A vehicle whose refuels are logged. Equality is by id."""

    name: str
    tank_capacity: float = None
    id: Optional[int] = None

    def __post_init__(self):
        if self.tank_capacity is None:
            self.tank_capacity = Units.MPG_US.default_tank_capacity

    @classmethod
    def for_units(cls, name: str, units: Units, tank_capacity: float = None) -> "Vehicle":
        """Create a vehicle whose default tank size matches the unit system."""
        if tank_capacity is None:
            tank_capacity = units.default_tank_capacity
        return cls(name=name, tank_capacity=tank_capacity)

    def validate(self) -> None:
        validate_vehicle_name(self.name)
        check_range("tank_capacity", self.tank_capacity, 0.0, MAX_TANK_CAPACITY,
                    include_minimum=False)

    @property
    def export_filename(self) -> str:
        return f"{self.name}.csv"

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'tank_capacity': self.tank_capacity,
        }

    def __eq__(self, other):
        if not isinstance(other, Vehicle):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    def __str__(self):
        return self.name


@dataclass(eq=False)
class MileageSegment:
    """
    Fuel used between two successive full-tank records.

    Attached to the record that closes the segment. The opening full tank's
    own volume is not counted; the closing record's volume is.
    """

    start_odometer: int
    end_odometer: int
    fuel_consumed: float = 0.0
    units: Units = Units.MPG_US

    @classmethod
    def open_at(cls, record: "RefuelRecord", units: Units) -> "MileageSegment":
        return cls(start_odometer=record.odometer, end_odometer=record.odometer,
                   fuel_consumed=0.0, units=units)

    def add(self, record: "RefuelRecord") -> None:
        self.end_odometer = record.odometer
        self.fuel_consumed += record.volume

    @property
    def distance(self) -> int:
        return self.end_odometer - self.start_odometer

    def efficiency(self) -> float:
        return self.units.efficiency(self.distance, self.fuel_consumed)

    @property
    def efficiency_string(self) -> str:
        return f"{self.efficiency():.2f}"

    @property
    def fuel_consumed_string(self) -> str:
        return f"{self.fuel_consumed:.3f}"

    def to_dict(self):
        return {
            'start_odometer': self.start_odometer,
            'end_odometer': self.end_odometer,
            'distance': self.distance,
            'fuel_consumed': round(self.fuel_consumed, 3),
            'efficiency': round(self.efficiency(), 2),
            'units': self.units.value,
            'label': self.units.efficiency_label,
        }

    def __repr__(self):
        return (f"MileageSegment(start={self.start_odometer}, end={self.end_odometer}, "
                f"fuel={self.fuel_consumed}, units={self.units.efficiency_label})")


@dataclass(eq=False)
class RefuelRecord:
    """A single fuel purchase."""

    timestamp: datetime = field(default_factory=datetime.now)
    odometer: int = 0
    volume: float = 0.0
    cost: float = 0.0
    full_tank: bool = False
    hide_from_calc: bool = False
    notes: str = ""
    vehicle_id: Optional[int] = None
    id: Optional[int] = None
    segment: Optional[MileageSegment] = field(default=None, repr=False)

    def __post_init__(self):
        self.timestamp = truncate_to_millis(self.timestamp)
        self.notes = clean_notes(self.notes)
        self.cost = 0.0 if self.cost is None else self.cost

    @property
    def price_per_unit(self) -> float:
        """Derived, never stored: cost / volume, 0 when volume is 0."""
        if not self.volume:
            return 0.0
        return self.cost / self.volume

    @property
    def has_cost(self) -> bool:
        return self.cost > 0

    @property
    def has_segment(self) -> bool:
        return self.segment is not None

    def validate(self, line_number: int = None) -> None:
        """Range-check every numeric field."""
        check_range("odometer", self.odometer, 0, MAX_ODOMETER, line_number)
        check_range("volume", self.volume, 0.0, MAX_VOLUME, line_number, include_minimum=False)
        check_range("cost", self.cost, 0.0, MAX_COST, line_number)
        check_range("price_per_unit", self.price_per_unit, 0.0, MAX_PRICE, line_number)

    def copy(self) -> "RefuelRecord":
        """Detached copy of the stored attributes (no segment)."""
        return RefuelRecord(
            timestamp=self.timestamp,
            odometer=self.odometer,
            volume=self.volume,
            cost=self.cost,
            full_tank=self.full_tank,
            hide_from_calc=self.hide_from_calc,
            notes=self.notes,
            vehicle_id=self.vehicle_id,
            id=self.id,
        )

    def _identity(self):
        return (self.id, self.vehicle_id, self.timestamp, self.volume, self.odometer,
                self.cost, self.notes, self.full_tank, self.hide_from_calc, self.price_per_unit)

    def __eq__(self, other):
        if not isinstance(other, RefuelRecord):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self):
        return hash(self._identity())

    def to_dict(self):
        return {
            'id': self.id,
            'vehicle_id': self.vehicle_id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'odometer': self.odometer,
            'volume': self.volume,
            'cost': self.cost,
            'price_per_unit': round(self.price_per_unit, 3),
            'full_tank': self.full_tank,
            'hide_from_calc': self.hide_from_calc,
            'notes': self.notes,
            'segment': self.segment.to_dict() if self.segment else None,
        }


@dataclass(frozen=True, order=True)
class Month:
    """A calendar month; month is 0-based (0 = January)."""

    year: int
    month: int

    def __post_init__(self):
        if not 0 <= self.month <= 11:
            raise ValueError(f"month must be 0-11, got {self.month}")

    @classmethod
    def from_datetime(cls, value: datetime) -> "Month":
        return cls(value.year, value.month - 1)

    def before(self, other: "Month") -> bool:
        return self < other

    def increment(self) -> "Month":
        if self.month == 11:
            return Month(self.year + 1, 0)
        return Month(self.year, self.month + 1)

    def decrement(self) -> "Month":
        if self.month == 0:
            return Month(self.year - 1, 11)
        return Month(self.year, self.month - 1)

    @property
    def start(self) -> datetime:
        """Midnight on the first day of the month."""
        return datetime(self.year, self.month + 1, 1)

    @property
    def label(self) -> str:
        return MONTH_LABELS[self.month]

    @property
    def long_label(self) -> str:
        return f"{self.label} {self.year}"

    def __str__(self):
        return self.label


@dataclass
class TripRecord:
    """Distance, fuel and cost rolled up over one or more trips."""

    start_date: datetime
    end_date: datetime
    distance: int = 0
    volume: float = 0.0
    cost: float = 0.0
    records: List[RefuelRecord] = field(default_factory=list, repr=False)
    _seen: Set[int] = field(default_factory=set, init=False, repr=False, compare=False)

    def __post_init__(self):
        self._seen = {id(r) for r in self.records}

    @classmethod
    def empty(cls, date: datetime) -> "TripRecord":
        return cls(start_date=date, end_date=date)

    @classmethod
    def between(cls, start: RefuelRecord, end: RefuelRecord) -> "TripRecord":
        """A single hop from one refuel to the next, attributed to the end record."""
        return cls(
            start_date=start.timestamp,
            end_date=end.timestamp,
            distance=end.odometer - start.odometer,
            volume=end.volume,
            cost=end.cost,
            records=[end],
        )

    def append(self, other: "TripRecord") -> None:
        if other.start_date < self.start_date:
            self.start_date = other.start_date
        if other.end_date > self.end_date:
            self.end_date = other.end_date
        self.distance += other.distance
        self.volume += other.volume
        self.cost += other.cost
        for record in other.records:
            if id(record) not in self._seen:
                self._seen.add(id(record))
                self.records.append(record)

    @property
    def record_ids(self) -> Set[int]:
        return {r.id for r in self.records if r.id is not None}

    @property
    def price(self) -> float:
        if self.volume > 0:
            return self.cost / self.volume
        return 0.0

    def to_dict(self):
        return {
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'distance': self.distance,
            'volume': round(self.volume, 3),
            'cost': round(self.cost, 2),
            'price': round(self.price, 3),
            'record_ids': sorted(self.record_ids),
        }

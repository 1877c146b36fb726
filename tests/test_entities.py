"""Tests for the domain entities."""

from datetime import datetime

import pytest

from fuellog.calculations.units import Units
from fuellog.entities import (
    MileageSegment,
    RefuelRecord,
    TripRecord,
    Vehicle,
    clean_notes,
    validate_vehicle_name,
)
from fuellog.exceptions import InvalidNameError, OutOfRangeError
from tests.factories import RecordFactory


class TestVehicle:

    def test_default_tank_capacity(self):
        assert Vehicle(name="Car").tank_capacity == 16.0

    def test_for_units(self):
        assert Vehicle.for_units("Car", Units.KM_PER_L).tank_capacity == 60.0
        assert Vehicle.for_units("Car", Units.KM_PER_L, 45.0).tank_capacity == 45.0

    def test_equality_by_id(self):
        assert Vehicle(name="A", id=1) == Vehicle(name="B", tank_capacity=3, id=1)
        assert Vehicle(name="A", id=1) != Vehicle(name="A", id=2)

    def test_export_filename(self):
        assert Vehicle(name="My Car").export_filename == "My Car.csv"

    @pytest.mark.parametrize("name", ["A", "Mazda 3", "F-150", "x" * 20])
    def test_valid_names(self, name):
        assert validate_vehicle_name(name) == name

    @pytest.mark.parametrize("name", [None, "", "x" * 21, "-lead", "a/b", "a.csv", "tab\there"])
    def test_invalid_names(self, name):
        with pytest.raises(InvalidNameError):
            validate_vehicle_name(name)

    def test_tank_capacity_cap(self):
        with pytest.raises(OutOfRangeError):
            Vehicle(name="Tanker", tank_capacity=1000.5).validate()

    def test_nan_tank_capacity(self):
        with pytest.raises(OutOfRangeError) as exc_info:
            Vehicle(name="Tanker", tank_capacity=float("nan")).validate()
        assert exc_info.value.field == "tank_capacity"


class TestRefuelRecord:

    def test_price_per_unit(self):
        assert RecordFactory.build(volume=10.0, cost=35.0).price_per_unit == 3.5
        assert RefuelRecord(volume=0, cost=10).price_per_unit == 0.0

    def test_unknown_cost(self):
        record = RefuelRecord(cost=None)
        assert record.cost == 0.0
        assert not record.has_cost

    def test_timestamp_truncated_to_millis(self):
        record = RefuelRecord(timestamp=datetime(2014, 1, 1, 0, 0, 0, 123456))
        assert record.timestamp.microsecond == 123000

    def test_notes_single_line(self):
        assert clean_notes("a\r\nb\nc\rd") == "a b c d"
        assert RefuelRecord(notes=None).notes == ""

    def test_equality_covers_every_stored_field(self):
        record = RecordFactory.build()

        assert record == record.copy()
        changed = record.copy()
        changed.hide_from_calc = True
        assert record != changed

    def test_equality_ignores_segment(self):
        record = RecordFactory.build()
        other = record.copy()
        other.segment = MileageSegment(1000, 1300, 12.0)
        assert record == other

    @pytest.mark.parametrize("changes,field", [
        ({"odometer": -1}, "odometer"),
        ({"odometer": 10_000_000}, "odometer"),
        ({"volume": 0}, "volume"),
        ({"volume": float("nan")}, "volume"),
        ({"cost": float("nan")}, "cost"),
        ({"cost": -0.5}, "cost"),
        ({"volume": 0.001, "cost": 999_999.0}, "price_per_unit"),
    ])
    def test_validate(self, changes, field):
        with pytest.raises(OutOfRangeError) as exc_info:
            RecordFactory.build(**changes).validate(line_number=9)
        assert exc_info.value.field == field
        assert exc_info.value.line_number == 9

    def test_to_dict(self):
        data = RecordFactory.build(volume=10.0, cost=35.0).to_dict()

        assert data['timestamp'] == '2014-06-15T08:30:00'
        assert data['price_per_unit'] == 3.5
        assert data['segment'] is None


class TestMileageSegment:

    def test_distance_and_efficiency(self):
        segment = MileageSegment(1000, 1300, 12.0)

        assert segment.distance == 300
        assert segment.efficiency_string == "25.00"
        assert segment.fuel_consumed_string == "12.000"

    def test_to_dict(self):
        data = MileageSegment(1000, 1500, 40.0, Units.L_PER_100KM).to_dict()

        assert data['efficiency'] == 8.0
        assert data['label'] == 'L/100km'
        assert data['units'] == 'L_PER_100KM'


class TestTripRecord:

    def test_between(self):
        start = RecordFactory.build(odometer=1000, timestamp=datetime(2014, 1, 1))
        end = RecordFactory.build(odometer=1250, volume=9.0, cost=30.0, timestamp=datetime(2014, 1, 8))

        trip = TripRecord.between(start, end)

        assert trip.distance == 250
        assert trip.volume == 9.0
        assert trip.records == [end]

    def test_append_widens_dates(self):
        trip = TripRecord(datetime(2014, 1, 10), datetime(2014, 1, 12), distance=100, volume=4.0, cost=12.0)

        trip.append(TripRecord(datetime(2014, 1, 5), datetime(2014, 1, 20), distance=50, volume=2.0, cost=6.0))

        assert trip.start_date == datetime(2014, 1, 5)
        assert trip.end_date == datetime(2014, 1, 20)
        assert trip.distance == 150
        assert trip.price == pytest.approx(3.0)

    def test_empty_price(self):
        assert TripRecord.empty(datetime(2014, 1, 1)).price == 0.0

    def test_append_counts_each_record_once(self):
        end = RecordFactory.build(odometer=1250, timestamp=datetime(2014, 1, 8))
        first = TripRecord(datetime(2014, 1, 1), datetime(2014, 1, 8), distance=250, volume=9.0, records=[end])
        total = TripRecord.empty(datetime(2014, 1, 1))

        total.append(first)
        total.append(TripRecord(datetime(2014, 1, 8), datetime(2014, 1, 9), records=[end]))

        assert total.records == [end]
        assert total == TripRecord(datetime(2014, 1, 1), datetime(2014, 1, 9), distance=250, volume=9.0,
                                   records=[end])

"""
Tests for FuelLogCore.
"""

import io
from datetime import datetime, timedelta

import pytest

from fuellog.calculations.entry import DataEntryMode
from fuellog.calculations.units import Units
from fuellog.core import FuelLogCore
from fuellog.entities import Month
from fuellog.exceptions import InsufficientDataError, NotFoundError, ValidationError
from fuellog.migrations import SCHEMA_VERSION
from fuellog.settings import Settings
from fuellog.utils.date_range import PlotDateRange
from tests.factories import RecordFactory


class TestOpen:

    def test_open_in_memory(self):
        core = FuelLogCore.open('sqlite://', Settings(units=Units.KM_PER_L))
        try:
            assert core.migration.created
            assert core.repository.schema_version() == SCHEMA_VERSION
            assert core.settings.units is Units.KM_PER_L
        finally:
            core.close()

    def test_open_file_twice(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'fuellog.db'}"
        first = FuelLogCore.open(url)
        first.new_vehicle("Saved")
        first.close()

        second = FuelLogCore.open(url)
        try:
            assert second.migration.from_version == SCHEMA_VERSION
            assert [v.name for v in second.repository.list_vehicles()] == ["Saved"]
        finally:
            second.close()

    def test_from_config(self):
        class TestConfig:
            DATABASE_URL = 'sqlite://'
            MIGRATION_FAILURE_POLICY = 'quarantine'
            UNITS = '1'
            PLOT_DATE_RANGE = 'ALL'
            DATA_ENTRY_MODE = 'CALCULATE_COST'
            COST_REQUIRED = False
            CURRENCY = 'CAD'

        core = FuelLogCore.from_config(TestConfig)
        try:
            assert core.settings.units is Units.KM_PER_L
            assert core.settings.plot_date_range is PlotDateRange.ALL
            assert core.formatter.currency == 'CAD'
        finally:
            core.close()


class TestSettingsSnapshot:

    def test_with_settings_shares_repository(self, core):
        changed = core.with_settings(core.settings.with_changes(units=Units.L_PER_100KM))

        assert changed.repository is core.repository
        assert core.settings.units is Units.MPG_US

    def test_new_vehicle_uses_unit_tank_default(self, core):
        metric = core.with_settings(Settings(units=Units.L_PER_100KM))

        assert metric.new_vehicle("Metric").tank_capacity == 60.0
        assert core.new_vehicle("Imperial").tank_capacity == 16.0
        assert core.new_vehicle("Custom", 9.5).tank_capacity == 9.5

    def test_prepare_record_checks_cost(self, core):
        record = RecordFactory.build(cost=0)

        with pytest.raises(ValidationError):
            core.prepare_record(record)

        lenient = core.with_settings(Settings(cost_required=False))
        assert lenient.prepare_record(record) is record

    def test_calculate_entry_uses_configured_mode(self, core):
        assert core.calculate_entry(volume=10, cost=35).price == 3.5

        by_cost = core.with_settings(Settings(data_entry_mode=DataEntryMode.CALCULATE_COST))
        assert by_cost.calculate_entry(price=3.5, volume=10).cost == 35.0


class TestMileage:

    def test_records_with_mileage(self, core, repository, vehicle):
        RecordFactory.create_history(repository, vehicle.id, [(1000, 10, True), (1150, 5, False), (1400, 15, True)])

        records = core.records_with_mileage(vehicle.id)

        assert records[2].segment.efficiency() == pytest.approx(20.0)

    def test_estimate(self, core, repository, vehicle):
        records = RecordFactory.create_history(repository, vehicle.id, [(1000, 10, True), (1100, 5, False)])

        segment = core.estimate(records[1].id, 0.25)

        assert segment.efficiency() == pytest.approx(5.88, abs=0.005)

    def test_estimate_uses_vehicle_tank(self, core, repository):
        small = core.new_vehicle("Small", 8.0)
        records = RecordFactory.create_history(repository, small.id, [(1000, 10, True), (1100, 5, False)])

        segment = core.estimate(records[1].id, 0.5)

        assert segment.fuel_consumed == pytest.approx(9.0)

    def test_estimate_missing_record(self, core):
        with pytest.raises(NotFoundError):
            core.estimate(404, 0.5)

    def test_estimate_without_full_tank(self, core, repository, vehicle):
        records = RecordFactory.create_history(repository, vehicle.id, [(1000, 10, False), (1100, 5, False)])

        with pytest.raises(InsufficientDataError):
            core.estimate(records[1].id, 0.5)


class TestReports:

    def test_statistics_report(self, core, repository, vehicle, now):
        RecordFactory.create_history(
            repository, vehicle.id, [(1000, 10, True), (1300, 12, True), (1550, 10, True)],
            start=datetime(2014, 4, 10), step=timedelta(days=30),
        )
        core = core.with_settings(Settings(plot_date_range=PlotDateRange.PAST_6_MONTHS))

        report = core.statistics_report(vehicle.id, now)

        assert report.title == "Test Car (Past 6 months)"
        assert len(report.months) == 6
        assert report.summary.distance == 550
        assert report.summary.efficiency_count == 2

    def test_statistics_report_unknown_vehicle(self, core):
        with pytest.raises(NotFoundError):
            core.statistics_report(8)

    def test_monthly_trips_and_range(self, core, repository, vehicle, now):
        RecordFactory.create_history(repository, vehicle.id, [(1000, 10, True), (1300, 12, True)],
                                     start=datetime(2014, 6, 2))

        monthly = core.monthly_trips(vehicle.id, now)
        months = list(monthly.months(core.date_range(now)))

        assert months == [Month(2014, 5)]
        assert monthly.trips_for(months[0]).distance == 300
        assert monthly.total().distance == 300

    def test_import_export(self, core, repository, vehicle):
        core.import_records(vehicle.id, "06/15/2014 08:30,1000,10,true,false\n06/22/2014 08:30,1500,40,true,false\n")
        metric = core.with_settings(Settings(units=Units.L_PER_100KM))
        sink = io.StringIO()

        assert metric.export_records(vehicle.id, sink) == 2
        assert sink.getvalue().splitlines()[1].endswith(",8.00")

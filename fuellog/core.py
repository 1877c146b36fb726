"""
FuelLog core: repository plus the settings snapshot it computes under.

The core is the single entry point used by the web app and the CLI. It
holds no global state; a settings change produces a new core sharing the
same repository.
"""

import logging
from datetime import datetime
from typing import IO, List, Optional

from .calculations.entry import DataEntryMode, EntryValues, complete_entry, validate_cost
from .calculations.mileage import calculate_mileage, estimate_mileage, find_record
from .config import Config
from .database import create_database_engine, create_session_factory
from .entities import MileageSegment, RefuelRecord, Vehicle
from .exceptions import NotFoundError
from .migrations import MigrationResult, migrate
from .repository import FuelLogRepository
from .services.monthly_trips import MonthlyTrips
from .services.statistics_service import StatisticsReport
from .settings import Settings
from .utils.currency import CurrencyFormatter
from .utils.date_range import DateRange

logger = logging.getLogger(__name__)


class FuelLogCore:
    """Owns the repository and the active settings."""

    def __init__(self, repository: FuelLogRepository, settings: Settings = None,
                 migration: MigrationResult = None):
        self.repository = repository
        self.settings = settings or Settings()
        self.migration = migration

    @classmethod
    def open(cls, database_url: str = None, settings: Settings = None,
             policy: str = None) -> "FuelLogCore":
        """Open (and migrate) the store at ``database_url``."""
        engine = create_database_engine(database_url)
        migration = migrate(engine, policy)
        if migration.data_lost:
            logger.warning("Store was rebuilt during migration; previous records are not available")
        repository = FuelLogRepository(create_session_factory(engine))
        return cls(repository, settings or Settings.from_config(), migration)

    @classmethod
    def from_config(cls, config=None) -> "FuelLogCore":
        config = config or Config
        return cls.open(config.DATABASE_URL, Settings.from_config(config),
                        config.MIGRATION_FAILURE_POLICY)

    def with_settings(self, settings: Settings) -> "FuelLogCore":
        return FuelLogCore(self.repository, settings, self.migration)

    def close(self) -> None:
        self.repository.engine.dispose()

    @property
    def formatter(self) -> CurrencyFormatter:
        return CurrencyFormatter(self.settings.currency)

    # Vehicles

    def new_vehicle(self, name: str, tank_capacity: float = None) -> Vehicle:
        vehicle = Vehicle.for_units(name, self.settings.units, tank_capacity)
        self.repository.create_vehicle(vehicle)
        return vehicle

    # Records

    def prepare_record(self, record: RefuelRecord) -> RefuelRecord:
        """Validate a record against entity caps and the cost setting."""
        record.validate()
        validate_cost(record.cost, self.settings.cost_required)
        return record

    def calculate_entry(self, price: float = None, volume: float = None,
                        cost: float = None, mode: DataEntryMode = None) -> EntryValues:
        """Derive the missing purchase value, using the configured entry mode by default."""
        return complete_entry(mode or self.settings.data_entry_mode, price=price, volume=volume, cost=cost)

    def records_with_mileage(self, vehicle_id: int) -> List[RefuelRecord]:
        """Records for a vehicle, odometer ascending, with segments attached."""
        records = self.repository.list_records(vehicle_id)
        return calculate_mileage(records, self.settings.units)

    def estimate(self, record_id: int, gauge: float) -> MileageSegment:
        """Estimated segment for a partial fill from the gauge position after it."""
        record = self.repository.get_record(record_id)
        vehicle = self.repository.get_vehicle(record.vehicle_id)
        records = self.repository.list_records(vehicle.id)
        index = find_record(records, record.odometer)
        if index < 0:
            raise NotFoundError("Record", record_id)
        return estimate_mileage(records, index, vehicle.tank_capacity, gauge, self.settings.units)

    # Reports

    def monthly_trips(self, vehicle_id: int, now: Optional[datetime] = None) -> MonthlyTrips:
        return MonthlyTrips(self.records_with_mileage(vehicle_id), now=now)

    def date_range(self, now: Optional[datetime] = None) -> DateRange:
        return DateRange.resolve(self.settings.plot_date_range, now)

    def statistics_report(self, vehicle_id: int, now: Optional[datetime] = None) -> StatisticsReport:
        vehicle = self.repository.get_vehicle(vehicle_id)
        return StatisticsReport(
            self.monthly_trips(vehicle_id, now),
            self.date_range(now),
            units=self.settings.units,
            formatter=self.formatter,
            title=f"{vehicle.name} ({self.settings.plot_date_range.summary})",
        )

    # CSV

    def import_records(self, vehicle_id: int, source) -> int:
        return self.repository.import_records(vehicle_id, source)

    def export_records(self, vehicle_id: int, sink: IO) -> int:
        return self.repository.export_records(vehicle_id, sink, self.settings.units)

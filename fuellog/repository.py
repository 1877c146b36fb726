"""
Repository for vehicles and refuel records.

Every public method runs in its own session and transaction. Uniqueness
(vehicle names, odometer values per vehicle) is enforced by the database;
unique constraint violations come back as the typed duplicate errors and
any other database failure, including other integrity errors, as
StorageError.
"""

import logging
from contextlib import contextmanager
from typing import IO, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .calculations.mileage import calculate_mileage
from .calculations.units import Units
from .entities import RefuelRecord, Vehicle
from .exceptions import (
    DuplicateNameError,
    DuplicateOdometerError,
    FuelLogError,
    MalformedLineError,
    NotFoundError,
    StorageError,
)
from .migrations import read_version
from .models import RefuelRow, VehicleRow
from .utils.csv_codec import read_records, write_records

logger = logging.getLogger(__name__)


def is_unique_violation(error: IntegrityError) -> bool:
    """True when the integrity failure is a UNIQUE constraint, not NOT NULL or a foreign key."""
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


class FuelLogRepository:
    """CRUD, import and export over a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @property
    def engine(self):
        return self._session_factory.kw['bind']

    @contextmanager
    def _transaction(self, action: str):
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except FuelLogError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise StorageError(f"Failed to {action}", e)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # Vehicles

    @staticmethod
    def _vehicle_row(session: Session, vehicle_id) -> VehicleRow:
        row = session.get(VehicleRow, vehicle_id) if vehicle_id is not None else None
        if row is None:
            raise NotFoundError("Vehicle", vehicle_id)
        return row

    def create_vehicle(self, vehicle: Vehicle) -> int:
        vehicle.validate()
        with self._transaction("create vehicle") as session:
            row = VehicleRow()
            row.update_from(vehicle)
            session.add(row)
            try:
                session.flush()
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                raise DuplicateNameError(vehicle.name)
            vehicle.id = row.id
        logger.info(f"Created vehicle {vehicle.id} ({vehicle.name})")
        return vehicle.id

    def update_vehicle(self, vehicle: Vehicle) -> None:
        vehicle.validate()
        with self._transaction("update vehicle") as session:
            row = self._vehicle_row(session, vehicle.id)
            row.update_from(vehicle)
            try:
                session.flush()
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                raise DuplicateNameError(vehicle.name)
        logger.info(f"Updated vehicle {vehicle.id}")

    def delete_vehicle(self, vehicle_id: int) -> None:
        """Delete a vehicle and all of its records in one transaction."""
        with self._transaction("delete vehicle") as session:
            row = self._vehicle_row(session, vehicle_id)
            deleted = session.query(RefuelRow).filter(RefuelRow.vehicle_id == vehicle_id).delete(
                synchronize_session=False
            )
            session.delete(row)
        logger.info(f"Deleted vehicle {vehicle_id} and {deleted} records")

    def get_vehicle(self, vehicle_id: int) -> Vehicle:
        with self._transaction("read vehicle") as session:
            return self._vehicle_row(session, vehicle_id).to_entity()

    def list_vehicles(self) -> List[Vehicle]:
        """All vehicles ordered by name."""
        with self._transaction("list vehicles") as session:
            rows = session.query(VehicleRow).order_by(VehicleRow.name).all()
            return [row.to_entity() for row in rows]

    # Records

    @staticmethod
    def _record_row(session: Session, record_id) -> RefuelRow:
        row = session.get(RefuelRow, record_id) if record_id is not None else None
        if row is None:
            raise NotFoundError("Record", record_id)
        return row

    def create_record(self, vehicle_id: int, record: RefuelRecord) -> int:
        record.validate()
        with self._transaction("create record") as session:
            self._vehicle_row(session, vehicle_id)
            row = RefuelRow(vehicle_id=vehicle_id)
            row.update_from(record)
            session.add(row)
            try:
                session.flush()
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                raise DuplicateOdometerError(vehicle_id, record.odometer)
            record.id = row.id
            record.vehicle_id = vehicle_id
        logger.debug(f"Created record {record.id} for vehicle {vehicle_id} at odometer {record.odometer}")
        return record.id

    def update_record(self, record: RefuelRecord) -> None:
        record.validate()
        with self._transaction("update record") as session:
            row = self._record_row(session, record.id)
            row.update_from(record)
            try:
                session.flush()
            except IntegrityError as e:
                if not is_unique_violation(e):
                    raise
                raise DuplicateOdometerError(row.vehicle_id, record.odometer)
            record.vehicle_id = row.vehicle_id
        logger.debug(f"Updated record {record.id}")

    def delete_record(self, record_id: int) -> None:
        with self._transaction("delete record") as session:
            session.delete(self._record_row(session, record_id))
        logger.debug(f"Deleted record {record_id}")

    def get_record(self, record_id: int) -> RefuelRecord:
        with self._transaction("read record") as session:
            return self._record_row(session, record_id).to_entity()

    def list_records(self, vehicle_id: int) -> List[RefuelRecord]:
        """Records for a vehicle ordered by odometer (ascending, no ties)."""
        with self._transaction("list records") as session:
            rows = (
                session.query(RefuelRow)
                .filter(RefuelRow.vehicle_id == vehicle_id)
                .order_by(RefuelRow.odometer)
                .all()
            )
            return [row.to_entity() for row in rows]

    def max_odometer(self, vehicle_id: int) -> Optional[int]:
        """Highest odometer value logged for a vehicle, None when it has no records."""
        with self._transaction("read max odometer") as session:
            return session.query(func.max(RefuelRow.odometer)).filter(
                RefuelRow.vehicle_id == vehicle_id
            ).scalar()

    # CSV

    def import_records(self, vehicle_id: int, source) -> int:
        """
        Import CSV records for a vehicle, all or nothing.

        Args:
            vehicle_id: Vehicle the records belong to
            source: CSV text, bytes, or a text/binary stream

        Returns:
            Number of records imported

        Raises:
            MalformedLineError, OutOfRangeError: a line cannot be parsed
            DuplicateOdometerError: a line repeats an odometer value
            NotFoundError: unknown vehicle
            StorageError: the database or the source stream failed
        """
        count = 0
        with self._transaction("import records") as session:
            self._vehicle_row(session, vehicle_id)
            try:
                for line_number, record in read_records(source):
                    row = RefuelRow(vehicle_id=vehicle_id)
                    row.update_from(record)
                    session.add(row)
                    try:
                        session.flush()
                    except IntegrityError as e:
                        if not is_unique_violation(e):
                            raise
                        raise DuplicateOdometerError(vehicle_id, record.odometer, line_number)
                    count += 1
            except UnicodeDecodeError:
                raise MalformedLineError(reason="Source is not valid UTF-8 text")
            except OSError as e:
                logger.warning(f"Import for vehicle {vehicle_id} aborted after {count} lines: {e}")
                raise StorageError("Import aborted: source could not be read", e)
        logger.info(f"Imported {count} records for vehicle {vehicle_id}")
        return count

    def export_records(self, vehicle_id: int, sink: IO, units: Units = Units.MPG_US) -> int:
        """Write a vehicle's records as CSV, with efficiency recalculated in ``units``."""
        self.get_vehicle(vehicle_id)
        records = calculate_mileage(self.list_records(vehicle_id), units)
        count = write_records(records, sink)
        logger.info(f"Exported {count} records for vehicle {vehicle_id}")
        return count

    def schema_version(self) -> Optional[int]:
        try:
            return read_version(self.engine)
        except SQLAlchemyError as e:
            raise StorageError("Failed to read schema version", e)

from sqlalchemy import (
    Column, Integer, String, Float, Boolean,
    DateTime, ForeignKey, Text, UniqueConstraint, create_engine, event
)
from sqlalchemy.orm import declarative_base, relationship

from .entities import RefuelRecord, Vehicle


Base = declarative_base()


class VehicleRow(Base):
    """A vehicle whose refuels are logged."""

    __tablename__ = 'vehicles'

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(20), unique=True, nullable=False)
    tank_capacity = Column(Float, nullable=False, default=16.0)

    # Relationships
    records = relationship('RefuelRow', back_populates='vehicle', cascade='all, delete-orphan',
                           passive_deletes=True)

    def to_entity(self) -> Vehicle:
        return Vehicle(name=self.name, tank_capacity=self.tank_capacity, id=self.id)

    def update_from(self, vehicle: Vehicle):
        self.name = vehicle.name
        self.tank_capacity = vehicle.tank_capacity

    def to_dict(self):
        return self.to_entity().to_dict()


class RefuelRow(Base):
    """One fuel purchase. Odometer values are unique per vehicle."""

    __tablename__ = 'records'
    __table_args__ = (
        UniqueConstraint('vehicle_id', 'odometer'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, ForeignKey('vehicles.id', ondelete='CASCADE'), nullable=False)
    timestamp = Column(DateTime, nullable=False)
    odometer = Column(Integer, nullable=False)
    volume = Column(Float, nullable=False)
    full_tank = Column(Boolean, nullable=False, default=False)
    hide_from_calc = Column(Boolean, nullable=False, default=False)
    cost = Column(Float, nullable=False, default=0.0)
    notes = Column(Text)

    # Relationships
    vehicle = relationship('VehicleRow', back_populates='records')

    def to_entity(self) -> RefuelRecord:
        return RefuelRecord(
            id=self.id,
            vehicle_id=self.vehicle_id,
            timestamp=self.timestamp,
            odometer=self.odometer,
            volume=self.volume,
            cost=self.cost,
            full_tank=bool(self.full_tank),
            hide_from_calc=bool(self.hide_from_calc),
            notes=self.notes or "",
        )

    def update_from(self, record: RefuelRecord):
        self.timestamp = record.timestamp
        self.odometer = record.odometer
        self.volume = record.volume
        self.cost = record.cost
        self.full_tank = record.full_tank
        self.hide_from_calc = record.hide_from_calc
        self.notes = record.notes

    def to_dict(self):
        return self.to_entity().to_dict()


class SchemaInfo(Base):
    """Single-row table holding the schema version of the store."""

    __tablename__ = 'schema_info'

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(database_url, **kwargs):
    """Create database engine. SQLite connections enforce foreign keys."""
    if database_url.startswith('sqlite'):
        engine = create_engine(database_url, **kwargs)
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
        return engine
    return create_engine(database_url, pool_pre_ping=True, **kwargs)

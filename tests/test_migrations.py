"""
Tests for schema migrations.

Legacy stores are built with raw DDL matching what each older schema
version created.
"""

from datetime import datetime

import pytest
from sqlalchemy import inspect

from fuellog.database import create_session_factory
from fuellog.exceptions import ConfigurationError, MigrationError
from fuellog.migrations import (
    SCHEMA_VERSION,
    infer_version,
    migrate,
    read_version,
)
from fuellog.repository import FuelLogRepository

V1_VEHICLES = "CREATE TABLE vehicles (id INTEGER PRIMARY KEY AUTOINCREMENT, name VARCHAR(20) NOT NULL UNIQUE)"
V4_VEHICLES = (
    "CREATE TABLE vehicles (id INTEGER PRIMARY KEY AUTOINCREMENT, name VARCHAR(20) NOT NULL UNIQUE, "
    "tank_capacity REAL NOT NULL DEFAULT 16.0)"
)
V1_RECORDS = (
    "CREATE TABLE records (id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "vehicle_id INTEGER NOT NULL REFERENCES vehicles(id) ON DELETE CASCADE, "
    "timestamp DATETIME NOT NULL, odometer INTEGER NOT NULL, volume FLOAT NOT NULL, "
    "full_tank BOOLEAN NOT NULL, UNIQUE (vehicle_id, odometer))"
)
V3_RECORDS = (
    "CREATE TABLE records (id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "vehicle_id INTEGER NOT NULL REFERENCES vehicles(id) ON DELETE CASCADE, "
    "timestamp DATETIME NOT NULL, odometer INTEGER NOT NULL, volume FLOAT NOT NULL, "
    "full_tank BOOLEAN NOT NULL, hide_from_calc INTEGER NOT NULL DEFAULT 0, "
    "UNIQUE (vehicle_id, odometer))"
)


def execute(engine, *statements):
    with engine.begin() as conn:
        for statement in statements:
            conn.exec_driver_sql(statement)


def seed_legacy_rows(engine):
    execute(
        engine,
        "INSERT INTO vehicles (id, name) VALUES (1, 'Old Car')",
        "INSERT INTO records (vehicle_id, timestamp, odometer, volume, full_tank) "
        "VALUES (1, '2014-06-01 08:30:00.000000', 1000, 9.5, 1)",
        "INSERT INTO records (vehicle_id, timestamp, odometer, volume, full_tank) "
        "VALUES (1, '2014-06-08 18:00:00.000000', 1300, 12.0, 1)",
    )


def table_names(engine):
    return set(inspect(engine).get_table_names())


class TestVersionDetection:

    def test_empty_database(self, bare_engine):
        assert infer_version(bare_engine) is None
        assert read_version(bare_engine) is None

    def test_v1_layout(self, bare_engine):
        execute(bare_engine, V1_VEHICLES, V1_RECORDS)
        assert infer_version(bare_engine) == 1

    def test_v3_layout(self, bare_engine):
        execute(bare_engine, V1_VEHICLES, V3_RECORDS)
        assert infer_version(bare_engine) == 3

    def test_v4_layout(self, bare_engine):
        execute(bare_engine, V4_VEHICLES, V3_RECORDS)
        assert infer_version(bare_engine) == 4

    def test_stored_version_wins(self, engine):
        assert read_version(engine) == SCHEMA_VERSION


class TestMigrate:

    def test_new_store(self, bare_engine):
        result = migrate(bare_engine)

        assert result.from_version is None
        assert result.created
        assert not result.upgraded
        assert not result.data_lost
        assert {'vehicles', 'records', 'schema_info'} <= table_names(bare_engine)
        assert read_version(bare_engine) == SCHEMA_VERSION

    def test_current_store_untouched(self, engine):
        result = migrate(engine)

        assert result.from_version == SCHEMA_VERSION
        assert not result.upgraded
        assert not result.created

    @pytest.mark.parametrize("records_ddl,version", [(V1_RECORDS, 1), (V3_RECORDS, 3)])
    def test_upgrade_keeps_data(self, bare_engine, records_ddl, version):
        execute(bare_engine, V1_VEHICLES, records_ddl)
        seed_legacy_rows(bare_engine)

        result = migrate(bare_engine)

        assert result.from_version == version
        assert result.upgraded
        assert not result.data_lost
        assert read_version(bare_engine) == SCHEMA_VERSION

        repository = FuelLogRepository(create_session_factory(bare_engine))
        vehicle = repository.list_vehicles()[0]
        assert vehicle.name == 'Old Car'
        assert vehicle.tank_capacity == 16.0
        records = repository.list_records(vehicle.id)
        assert [r.odometer for r in records] == [1000, 1300]
        assert records[0].timestamp == datetime(2014, 6, 1, 8, 30)
        assert all(r.cost == 0.0 and r.notes == "" and not r.hide_from_calc for r in records)

    def test_upgraded_store_accepts_new_fields(self, bare_engine):
        execute(bare_engine, V4_VEHICLES, V3_RECORDS)
        migrate(bare_engine)
        repository = FuelLogRepository(create_session_factory(bare_engine))

        execute(bare_engine, "INSERT INTO vehicles (name, tank_capacity) VALUES ('New Car', 12.0)")
        execute(
            bare_engine,
            "INSERT INTO records (vehicle_id, timestamp, odometer, volume, full_tank, hide_from_calc, cost, notes) "
            "VALUES (1, '2014-06-01 08:30:00.000000', 1000, 9.5, 1, 0, 33.25, 'Shell')",
        )

        record = repository.list_records(1)[0]
        assert record.cost == 33.25
        assert record.notes == 'Shell'

    def test_failed_upgrade_recreates(self, bare_engine):
        # a v3 store without its vehicles table cannot take the v4 column
        execute(bare_engine, V3_RECORDS)

        result = migrate(bare_engine, "recreate")

        assert result.from_version == 3
        assert result.data_lost
        assert result.quarantined_tables == []
        assert read_version(bare_engine) == SCHEMA_VERSION
        columns = {c['name'] for c in inspect(bare_engine).get_columns('records')}
        assert {'cost', 'notes', 'hide_from_calc'} <= columns

    def test_failed_upgrade_quarantines(self, bare_engine):
        execute(bare_engine, V3_RECORDS)

        result = migrate(bare_engine, "quarantine")

        assert result.data_lost
        assert len(result.quarantined_tables) == 1
        quarantined = result.quarantined_tables[0]
        assert quarantined.startswith('records_v3_')
        names = table_names(bare_engine)
        assert quarantined in names
        assert {'vehicles', 'records', 'schema_info'} <= names
        assert read_version(bare_engine) == SCHEMA_VERSION

    def test_newer_store_rejected(self, engine):
        execute(engine, "UPDATE schema_info SET version = 6")

        with pytest.raises(MigrationError) as exc_info:
            migrate(engine)

        assert exc_info.value.from_version == 6
        assert exc_info.value.to_version == SCHEMA_VERSION
        assert read_version(engine) == 6

    def test_unknown_policy(self, bare_engine):
        with pytest.raises(ConfigurationError) as exc_info:
            migrate(bare_engine, "shrug")
        assert exc_info.value.config_key == "MIGRATION_FAILURE_POLICY"

    def test_result_to_dict(self, bare_engine):
        assert migrate(bare_engine).to_dict() == {
            'from_version': None,
            'to_version': SCHEMA_VERSION,
            'created': True,
            'data_lost': False,
            'quarantined_tables': [],
        }

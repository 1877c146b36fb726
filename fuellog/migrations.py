"""
Schema migrations for the FuelLog store.

The schema version lives in the single-row ``schema_info`` table. Stores
written before that table existed have their version inferred from the
columns they carry. Upgrades run one step at a time:

    v1 -> v2: no changes
    v2 -> v3: records.hide_from_calc
    v3 -> v4: vehicles.tank_capacity
    v4 -> v5: records.cost, records.notes

When an upgrade fails the store is rebuilt empty at the current version.
With the "quarantine" failure policy the old tables are renamed aside
first instead of being dropped.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, inspect, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from .config import Config
from .exceptions import ConfigurationError, MigrationError
from .models import Base, RefuelRow, SchemaInfo, VehicleRow

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 5

POLICY_RECREATE = "recreate"
POLICY_QUARANTINE = "quarantine"
FAILURE_POLICIES = (POLICY_RECREATE, POLICY_QUARANTINE)

RECORDS_TABLE = RefuelRow.__tablename__
VEHICLES_TABLE = VehicleRow.__tablename__
SCHEMA_TABLE = SchemaInfo.__tablename__

# statements that take the store from version N to N + 1
UPGRADES = {
    1: [],
    2: [
        f"ALTER TABLE {RECORDS_TABLE} ADD COLUMN hide_from_calc INTEGER NOT NULL DEFAULT 0",
    ],
    3: [
        f"ALTER TABLE {VEHICLES_TABLE} ADD COLUMN tank_capacity REAL NOT NULL DEFAULT 16.0",
    ],
    4: [
        f"ALTER TABLE {RECORDS_TABLE} ADD COLUMN cost REAL NOT NULL DEFAULT 0.0",
        f"ALTER TABLE {RECORDS_TABLE} ADD COLUMN notes TEXT",
    ],
}


@dataclass
class MigrationResult:
    """Outcome of bringing a store up to SCHEMA_VERSION."""

    from_version: Optional[int]
    to_version: int
    created: bool = False
    data_lost: bool = False
    quarantined_tables: List[str] = field(default_factory=list)

    @property
    def upgraded(self) -> bool:
        return self.from_version is not None and self.from_version < self.to_version

    def to_dict(self):
        return {
            'from_version': self.from_version,
            'to_version': self.to_version,
            'created': self.created,
            'data_lost': self.data_lost,
            'quarantined_tables': list(self.quarantined_tables),
        }


def infer_version(engine: Engine) -> Optional[int]:
    """
    Work out the version of a store that has no schema_info row.

    Returns None for an empty database. Versions 1 and 2 share a layout,
    so either is reported as 1.
    """
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())
    if RECORDS_TABLE not in tables and VEHICLES_TABLE not in tables:
        return None

    record_columns = set()
    vehicle_columns = set()
    if RECORDS_TABLE in tables:
        record_columns = {c['name'] for c in inspector.get_columns(RECORDS_TABLE)}
    if VEHICLES_TABLE in tables:
        vehicle_columns = {c['name'] for c in inspector.get_columns(VEHICLES_TABLE)}

    if 'cost' in record_columns:
        return 5
    if 'tank_capacity' in vehicle_columns:
        return 4
    if 'hide_from_calc' in record_columns:
        return 3
    return 1


def read_version(engine: Engine) -> Optional[int]:
    """Stored schema version, falling back to inference. None when empty."""
    if inspect(engine).has_table(SCHEMA_TABLE):
        with engine.connect() as conn:
            version = conn.execute(select(SchemaInfo.version)).scalar()
        if version is not None:
            return version
    return infer_version(engine)


def _write_version(conn, version: int) -> None:
    conn.execute(delete(SchemaInfo))
    conn.execute(SchemaInfo.__table__.insert().values(id=1, version=version))


def _upgrade(engine: Engine, from_version: int) -> None:
    with engine.begin() as conn:
        for version in range(from_version, SCHEMA_VERSION):
            logger.info(f"Upgrading schema v{version} -> v{version + 1}")
            for statement in UPGRADES[version]:
                logger.debug(statement)
                conn.execute(text(statement))
        Base.metadata.create_all(conn)
        _write_version(conn, SCHEMA_VERSION)


def _rebuild(engine: Engine, from_version: int, policy: str) -> MigrationResult:
    quarantined = []
    tables = set(inspect(engine).get_table_names())
    stamp = datetime.now().strftime("%Y%m%d%H%M%S")

    with engine.begin() as conn:
        if policy == POLICY_QUARANTINE:
            for name in (RECORDS_TABLE, VEHICLES_TABLE, SCHEMA_TABLE):
                if name in tables:
                    target = f"{name}_v{from_version}_{stamp}"
                    conn.execute(text(f"ALTER TABLE {name} RENAME TO {target}"))
                    quarantined.append(target)
        else:
            Base.metadata.drop_all(conn)
        Base.metadata.create_all(conn)
        _write_version(conn, SCHEMA_VERSION)

    if quarantined:
        logger.warning(f"Rebuilt store at v{SCHEMA_VERSION}; old tables kept as {', '.join(quarantined)}")
    else:
        logger.warning(f"Rebuilt store at v{SCHEMA_VERSION}; previous data was dropped")

    return MigrationResult(
        from_version=from_version,
        to_version=SCHEMA_VERSION,
        created=True,
        data_lost=True,
        quarantined_tables=quarantined,
    )


def migrate(engine: Engine, policy: str = None) -> MigrationResult:
    """
    Bring the store behind ``engine`` up to SCHEMA_VERSION.

    Args:
        engine: Engine for the store
        policy: "recreate" or "quarantine" (Config.MIGRATION_FAILURE_POLICY by default)

    Returns:
        MigrationResult; data_lost is set when a failed upgrade forced a rebuild

    Raises:
        ConfigurationError: unknown failure policy
        MigrationError: the store was written by a newer schema, or the
            rebuild after a failed upgrade also failed
    """
    policy = (policy or Config.MIGRATION_FAILURE_POLICY).strip().lower()
    if policy not in FAILURE_POLICIES:
        raise ConfigurationError(
            f"Unknown migration failure policy: {policy!r}", config_key="MIGRATION_FAILURE_POLICY"
        )

    try:
        current = read_version(engine)
    except SQLAlchemyError as e:
        raise MigrationError(None, SCHEMA_VERSION, e)

    if current is None:
        with engine.begin() as conn:
            Base.metadata.create_all(conn)
            _write_version(conn, SCHEMA_VERSION)
        logger.info(f"Created new store at schema v{SCHEMA_VERSION}")
        return MigrationResult(from_version=None, to_version=SCHEMA_VERSION, created=True)

    if current > SCHEMA_VERSION:
        raise MigrationError(current, SCHEMA_VERSION, "store was written by a newer schema")

    try:
        _upgrade(engine, current)
    except SQLAlchemyError as e:
        logger.error(f"Schema upgrade v{current} -> v{SCHEMA_VERSION} failed: {e}")
        try:
            return _rebuild(engine, current, policy)
        except SQLAlchemyError as rebuild_error:
            raise MigrationError(current, SCHEMA_VERSION, rebuild_error)

    if current < SCHEMA_VERSION:
        logger.info(f"Schema upgraded v{current} -> v{SCHEMA_VERSION}")
    return MigrationResult(from_version=current, to_version=SCHEMA_VERSION)

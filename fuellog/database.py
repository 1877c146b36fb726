"""
Database engine and session management for FuelLog.

Provides the engine and session factory the repository is built on, so
the app, the CLI and the tests create them the same way.
"""

import logging
import time

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Config
from .models import get_engine

logger = logging.getLogger(__name__)

# Add slow query logging
SLOW_QUERY_THRESHOLD_MS = Config.SLOW_QUERY_THRESHOLD_MS


@event.listens_for(Engine, "before_cursor_execute")
def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Record query start time."""
    conn.info.setdefault("query_start_time", []).append(time.time())


@event.listens_for(Engine, "after_cursor_execute")
def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Log slow queries."""
    total_time = time.time() - conn.info["query_start_time"].pop(-1)
    duration_ms = total_time * 1000

    if duration_ms > SLOW_QUERY_THRESHOLD_MS:
        # Truncate long queries for logging
        truncated_query = statement[:200] + "..." if len(statement) > 200 else statement
        logger.warning(
            f"Slow query detected: {duration_ms:.2f}ms - {truncated_query}", extra={"duration_ms": duration_ms}
        )


def create_database_engine(database_url: str = None) -> Engine:
    """
    Create the engine for a database URL (Config.DATABASE_URL by default).

    In-memory SQLite shares one connection so every session sees the
    same database.
    """
    database_url = database_url or Config.DATABASE_URL
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        engine = get_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = get_engine(database_url)
    logger.debug(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory used by the repository; objects stay readable after commit."""
    return sessionmaker(bind=engine, expire_on_commit=False)

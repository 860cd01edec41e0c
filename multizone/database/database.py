"""Database engine, session factory and schema management for multizone.

This module supports both:
- PostgreSQL (the cluster datastore) built from the DB_* settings
- SQLite via `DATABASE_URL` for local runs and tests
"""

import logging
from typing import List

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def _is_sqlite_memory_url(database_url: str) -> bool:
    if not _is_sqlite_url(database_url):
        return False
    return database_url.rstrip("/").endswith("sqlite:") or ":memory:" in database_url


def get_engine_kwargs(database_url: str, *, debug: bool = False, pool_size: int = 5,
                      max_overflow: int = 5, pool_timeout: int = 30) -> dict:
    """Return deterministic create_engine kwargs for a DB URL.

    This is separated to allow deterministic unit testing without connecting.
    """
    engine_kwargs: dict = {
        "echo": debug,
        "pool_pre_ping": True,
    }

    if _is_sqlite_url(database_url):
        # Handlers run in FastAPI's threadpool, so connections cross threads.
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if _is_sqlite_memory_url(database_url):
            # Every connection to :memory: is a fresh database; share one.
            engine_kwargs["poolclass"] = StaticPool
        return engine_kwargs

    engine_kwargs["pool_size"] = pool_size
    engine_kwargs["max_overflow"] = max_overflow
    engine_kwargs["pool_timeout"] = pool_timeout
    return engine_kwargs


def build_engine(database_url: str, **kwargs) -> Engine:
    """Create an engine and install SQLite pragmas when applicable."""
    engine = create_engine(database_url, **get_engine_kwargs(database_url, **kwargs))

    if _is_sqlite_url(database_url):
        @event.listens_for(engine, "connect")
        def set_sqlite_pragmas(dbapi_conn, connection_record):
            """Enable foreign keys and WAL for better concurrent reads."""
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)


def _table_columns(engine: Engine, table_name: str) -> List[str]:
    return [column["name"] for column in inspect(engine).get_columns(table_name)]


def ensure_schema_compat(engine: Engine) -> List[str]:
    """Add model columns that are missing from already-existing tables.

    `create_all()` never alters existing tables, so columns introduced after a
    table was first created are patched in place. Additive only: nothing is
    dropped or renamed. Added columns are nullable so existing rows stay valid.

    Returns:
        "table.column" names that were added
    """
    existing_tables = set(inspect(engine).get_table_names())
    missing = []
    for table in Base.metadata.sorted_tables:
        if table.name not in existing_tables:
            continue
        present = set(_table_columns(engine, table.name))
        missing.extend((table, column) for column in table.columns if column.name not in present)

    if not missing:
        return []

    added: List[str] = []
    preparer = engine.dialect.identifier_preparer
    with engine.begin() as conn:
        for table, column in missing:
            column_type = column.type.compile(dialect=engine.dialect)
            conn.execute(
                text(
                    f"ALTER TABLE {preparer.quote(table.name)} "
                    f"ADD COLUMN {preparer.quote(column.name)} {column_type}"
                )
            )
            added.append(f"{table.name}.{column.name}")
            logger.warning(f"Added missing column {table.name}.{column.name} ({column_type})")

    return added


def init_db(engine: Engine) -> None:
    """Create tables and bring existing ones up to the current model (idempotent)."""
    # Register models on Base.metadata before create_all.
    from multizone.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    ensure_schema_compat(engine)
    logger.info("Database schema is up to date")

"""Versioned schema management.

Schema changes are an ordered list of numbered steps. Each applied step
is recorded in `schema_migrations`, so running the list again against an
up-to-date database does nothing. Version 1 creates the five record
tables with create-if-absent semantics, which also adopts database files
created before versioning existed.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Tuple

from sqlalchemy import func, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.engine import Connection
from sqlmodel import SQLModel, select

from . import models
from .database import RecordStore

logger = logging.getLogger("academia.store")

RECORD_TABLES = [
    models.Department.__table__,
    models.Faculty.__table__,
    models.Student.__table__,
    models.Course.__table__,
    models.ScheduleEntry.__table__,
]


def _create_record_tables(conn: Connection) -> None:
    SQLModel.metadata.create_all(conn, tables=RECORD_TABLES, checkfirst=True)


MIGRATIONS: List[Tuple[int, str, Callable[[Connection], None]]] = [
    (1, "create record tables", _create_record_tables),
]


def current_version(store: RecordStore) -> int:
    """Return the highest applied schema version, or 0 for a fresh store."""
    SQLModel.metadata.create_all(store.engine, tables=[models.SchemaMigration.__table__])
    with store.session() as session:
        version = session.exec(select(func.max(models.SchemaMigration.version))).one()
    return version or 0


def apply_migrations(store: RecordStore) -> List[int]:
    """Apply every migration newer than the current version, in order.

    Each step and its bookkeeping row commit together. A version that a
    concurrent process recorded first is rolled back here and skipped.
    Returns the list of versions applied by this call.
    """
    applied = []
    start = current_version(store)
    for version, name, step in MIGRATIONS:
        if version <= start:
            continue
        logger.info("applying schema migration %s: %s", version, name)
        try:
            with store.engine.begin() as conn:
                step(conn)
                conn.execute(
                    insert(models.SchemaMigration.__table__).values(
                        version=version, name=name, applied_at=datetime.now(timezone.utc)
                    )
                )
        except IntegrityError:
            # a concurrent migrator recorded this version first; its step ran too
            logger.info("schema migration %s already applied by another process", version)
            continue
        applied.append(version)
    return applied


def create_schema(store: RecordStore) -> int:
    """Create or upgrade the schema and return the resulting version.

    Failures propagate unchanged; callers treat them as fatal.
    """
    applied = apply_migrations(store)
    version = current_version(store)
    if applied:
        logger.info("schema at version %s (applied %s)", version, applied)
    else:
        logger.info("schema at version %s, nothing to apply", version)
    return version

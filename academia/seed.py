"""Starter dataset loaded into an empty store.

The count check and every insert run in one transaction. Dependent rows
point at the id captured from the inserted Computer Science department,
so nothing relies on ids starting at 1. A second process racing through
first-run startup either hits the unique department name or finds the
store locked by the first; both roll back and skip seeding.
"""

import logging

from sqlalchemy import exc as sa_exc
from sqlmodel import Session

from . import models, repositories
from .database import RecordStore
from .errors import ErrorKind, translate

logger = logging.getLogger("academia.seed")

SEED_DEPARTMENTS = ["Computer Science", "Architecture", "Engineering", "Business"]


def _seed_rows(session: Session) -> None:
    departments = [models.Department(name=name) for name in SEED_DEPARTMENTS]
    session.add_all(departments)
    session.flush()
    home_id = departments[0].id

    session.add_all([
        models.Faculty(first_name="Alan", last_name="Turing", department_id=home_id,
                       avatar_url="https://ui-avatars.com/api/?name=Prof+A&background=random"),
        models.Faculty(first_name="Grace", last_name="Hopper", department_id=home_id,
                       avatar_url="https://ui-avatars.com/api/?name=Prof+G&background=random"),
    ])
    session.add(models.Student(
        student_id="#ST-2024-001", first_name="John", last_name="Doe", department_id=home_id,
        status="Admitted", class_year=2026, avatar_initials="JD", avatar_color="blue",
    ))
    session.add(models.Course(course_code="CS-101", name="Data Structures", department_id=home_id))


def seed_if_empty(store: RecordStore) -> bool:
    """Insert the starter dataset when no departments exist.

    Returns True when this call seeded the store, False when it was
    already populated (including by a concurrent seeder).
    """
    with store.session() as session:
        try:
            if repositories.DepartmentRepository(session).count() > 0:
                return False
            logger.info("Seeding database...")
            _seed_rows(session)
            session.commit()
        except (sa_exc.IntegrityError, sa_exc.OperationalError) as exc:
            session.rollback()
            err = translate(exc)
            if err.kind is ErrorKind.CONFLICT:
                logger.info("store was seeded concurrently, skipping")
                return False
            if err.kind is ErrorKind.STORAGE_UNAVAILABLE and "locked" in err.message.lower():
                # another process holds the write lock while it seeds
                logger.warning("seeding skipped, store is locked by another writer: %s", err.message)
                return False
            raise err from exc
    logger.info("Database seeded successfully.")
    return True

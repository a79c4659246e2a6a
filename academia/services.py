"""Business logic services used by HTTP controllers.

This module holds small service classes that derive presentation
fields, persist records via repositories and assemble the aggregated
dashboard views. Services receive the `RecordStore` (or a session
opened from it) explicitly; none of them reach for global state.
"""

import asyncio
import logging
import random
from typing import Optional
from urllib.parse import quote_plus

from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from . import models, repositories
from .database import RecordStore

logger = logging.getLogger("academia.services")

AVATAR_COLORS = ("blue", "amber", "rose", "cyan")
AVATAR_URL_TEMPLATE = "https://ui-avatars.com/api/?name={name}&background=random"
# Placeholder shown on the dashboard; there is no fee data to aggregate.
FEE_COLLECTION = "$2.4M"
RECENT_ENROLLMENTS_LIMIT = 5


def avatar_initials(first_name: Optional[str], last_name: Optional[str]) -> str:
    """Return the first letter of each name, skipping empty names."""
    return (first_name or "")[:1] + (last_name or "")[:1]


def pick_avatar_color(rng=random) -> str:
    return rng.choice(AVATAR_COLORS)


def faculty_avatar_url(first_name: Optional[str], last_name: Optional[str]) -> str:
    """Build the generated-avatar URL for a faculty member's full name."""
    name = f"{quote_plus(first_name or '')}+{quote_plus(last_name or '')}"
    return AVATAR_URL_TEMPLATE.format(name=name)


class StudentService:
    """Create student records with derived avatar fields."""
    def __init__(self, session: Session, rng=random):
        self.session = session
        self.rng = rng
        self.student_repo = repositories.StudentRepository(session)

    def create(self, student_id: str, first_name: str, last_name: str, email: Optional[str] = None,
               department_id: Optional[int] = None, class_year: Optional[int] = None) -> dict:
        """Insert a student and return `{message, id}`.

        `status` is left to the store default (Pending). A duplicate
        `student_id` raises a CONFLICT `StoreError`; the existing row is
        left untouched.
        """
        student = models.Student(
            student_id=student_id,
            first_name=first_name,
            last_name=last_name,
            email=email,
            department_id=department_id,
            class_year=class_year,
            avatar_initials=avatar_initials(first_name, last_name),
            avatar_color=pick_avatar_color(self.rng),
        )
        created = self.student_repo.create(student)
        logger.info("student %s saved with id %s", created.student_id, created.id)
        return {"message": "Student saved successfully!", "id": created.id}


class FacultyService:
    """Create faculty records with a derived avatar URL."""
    def __init__(self, session: Session):
        self.session = session
        self.faculty_repo = repositories.FacultyRepository(session)

    def create(self, first_name: str, last_name: str, email: Optional[str] = None,
               department_id: Optional[int] = None) -> dict:
        faculty = models.Faculty(
            first_name=first_name,
            last_name=last_name,
            email=email,
            department_id=department_id,
            avatar_url=faculty_avatar_url(first_name, last_name),
        )
        created = self.faculty_repo.create(faculty)
        logger.info("faculty member saved with id %s", created.id)
        return {"message": "Faculty saved successfully!", "id": created.id}


class StatsService:
    """Dashboard counters built from three independent count queries."""
    def __init__(self, store: RecordStore):
        self.store = store

    def _count_students(self) -> int:
        with self.store.session() as session:
            return repositories.StudentRepository(session).count()

    def _count_active_courses(self) -> int:
        with self.store.session() as session:
            return repositories.CourseRepository(session).count_active()

    def _count_faculty(self) -> int:
        with self.store.session() as session:
            return repositories.FacultyRepository(session).count()

    async def get_stats(self) -> dict:
        """Run the three counts concurrently and combine them.

        Each count uses its own session on a worker thread. If any count
        fails its `StoreError` propagates and no partial result is
        returned.
        """
        total_students, active_courses, faculty_staff = await asyncio.gather(
            run_in_threadpool(self._count_students),
            run_in_threadpool(self._count_active_courses),
            run_in_threadpool(self._count_faculty),
        )
        return {
            "total_students": total_students,
            "active_courses": active_courses,
            "faculty_staff": faculty_staff,
            "fee_collection": FEE_COLLECTION,
        }


class EnrollmentService:
    """Read-side view of the most recent student enrollments."""
    def __init__(self, session: Session):
        self.session = session
        self.student_repo = repositories.StudentRepository(session)

    def recent(self, limit: int = RECENT_ENROLLMENTS_LIMIT) -> list:
        return self.student_repo.recent_with_department(limit=limit)

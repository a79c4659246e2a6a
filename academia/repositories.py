"""Repository classes encapsulating database operations.

Each repository is small and focused on a single table. Inserts commit
and refresh so the store-assigned id is available to the caller. Driver
failures are re-raised as `StoreError`.
"""

from typing import List
from sqlmodel import Session, select
from sqlalchemy import func
from . import models
from .errors import store_errors


class _Repository:
    def __init__(self, session: Session):
        self.session = session

    def _insert(self, row):
        with store_errors(self.session):
            self.session.add(row)
            self.session.commit()
            self.session.refresh(row)
        return row

    def _count(self, stmt) -> int:
        with store_errors(self.session):
            return self.session.exec(stmt).one()


class DepartmentRepository(_Repository):
    """Counts for `Department` rows."""

    def count(self) -> int:
        return self._count(select(func.count()).select_from(models.Department))


class FacultyRepository(_Repository):
    """Inserts and counts for `Faculty` rows."""

    def create(self, faculty: models.Faculty) -> models.Faculty:
        return self._insert(faculty)

    def count(self) -> int:
        return self._count(select(func.count()).select_from(models.Faculty))


class StudentRepository(_Repository):
    """Student inserts, counts and the recent-enrollment feed."""

    def create(self, student: models.Student) -> models.Student:
        """Persist a new student; a duplicate `student_id` is a CONFLICT."""
        return self._insert(student)

    def count(self) -> int:
        return self._count(select(func.count()).select_from(models.Student))

    def recent_with_department(self, limit: int = 5) -> List[dict]:
        """Return the newest students with their department name attached.

        Students are left-joined to departments, so a student without a
        department is still returned with `department_name` set to None.
        Rows are ordered by id descending (creation order, newest first).
        """
        stmt = (
            select(models.Student, models.Department.name)
            .join(
                models.Department,
                models.Student.department_id == models.Department.id,
                isouter=True,
            )
            .order_by(models.Student.id.desc())
            .limit(limit)
        )
        with store_errors(self.session):
            rows = self.session.exec(stmt).all()
        out = []
        for student, department_name in rows:
            item = student.model_dump()
            item["department_name"] = department_name
            out.append(item)
        return out


class CourseRepository(_Repository):
    """Active-course counts."""

    def count_active(self) -> int:
        """Count courses whose `isActive` flag is true."""
        stmt = select(func.count()).select_from(models.Course).where(models.Course.is_active == True)  # noqa: E712
        return self._count(stmt)

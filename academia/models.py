"""SQLModel data models.

This module defines the five academic record tables plus the
`schema_migrations` bookkeeping table. Table and column names match the
persisted schema so existing database files stay readable.
"""

from typing import Optional
from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, CheckConstraint, Column, String, true
from datetime import datetime, timezone

STUDENT_STATUSES = ("Admitted", "Pending", "Waitlist")


class Department(SQLModel, table=True):
    """An academic department.

    `name` is unique; the constraint also stops a second seeding pass
    from inserting the starter departments twice.
    """
    __tablename__ = "departments"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, unique=True)


class Faculty(SQLModel, table=True):
    """A faculty member. `avatar_url` is derived from the name on creation."""
    __tablename__ = "faculty"

    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str = Field(nullable=False)
    last_name: str = Field(nullable=False)
    email: Optional[str] = None
    department_id: Optional[int] = Field(default=None, foreign_key="departments.id")
    avatar_url: Optional[str] = None


class Student(SQLModel, table=True):
    """An enrolled or applying student.

    Fields:
    - `student_id`: external student code, globally unique
    - `status`: one of Admitted, Pending, Waitlist (store default Pending)
    - `avatar_initials` / `avatar_color`: fixed at creation time
    """
    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint(
            "status IN ('Admitted', 'Pending', 'Waitlist')",
            name="ck_students_status",
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: str = Field(nullable=False, unique=True)
    first_name: str = Field(nullable=False)
    last_name: str = Field(nullable=False)
    email: Optional[str] = None
    department_id: Optional[int] = Field(default=None, foreign_key="departments.id")
    status: Optional[str] = Field(
        default="Pending",
        sa_column=Column(String, server_default="Pending"),
    )
    class_year: Optional[int] = None
    avatar_initials: Optional[str] = None
    avatar_color: Optional[str] = None


class Course(SQLModel, table=True):
    """A course offered by a department; `is_active` maps to `isActive`."""
    __tablename__ = "courses"

    id: Optional[int] = Field(default=None, primary_key=True)
    course_code: str = Field(nullable=False, unique=True)
    name: str = Field(nullable=False)
    department_id: Optional[int] = Field(default=None, foreign_key="departments.id")
    is_active: Optional[bool] = Field(
        default=True,
        sa_column=Column("isActive", Boolean, server_default=true()),
    )


class ScheduleEntry(SQLModel, table=True):
    """A scheduled class meeting for a course taught by a faculty member."""
    __tablename__ = "schedule"

    id: Optional[int] = Field(default=None, primary_key=True)
    course_id: Optional[int] = Field(default=None, foreign_key="courses.id")
    faculty_id: Optional[int] = Field(default=None, foreign_key="faculty.id")
    start_time: Optional[str] = None
    location: Optional[str] = None


class SchemaMigration(SQLModel, table=True):
    """One applied schema version."""
    __tablename__ = "schema_migrations"

    version: int = Field(primary_key=True)
    name: str
    applied_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

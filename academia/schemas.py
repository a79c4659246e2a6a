"""Pydantic request/response schemas used by the API.

Request schemas only coerce types; required-ness and uniqueness are left
to the store, so a missing name is reported by the database constraint
rather than by the schema.
"""

from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Optional


class _FormFriendly(BaseModel):
    # JSON clients may send codes and names as numbers; the columns are TEXT
    model_config = ConfigDict(coerce_numbers_to_str=True)

    @field_validator("department_id", "class_year", mode="before", check_fields=False)
    @classmethod
    def _blank_to_none(cls, value):
        # HTML forms submit "" for untouched optional fields
        if isinstance(value, str) and not value.strip():
            return None
        return value


class StudentIn(_FormFriendly):
    """Payload for `POST /api/students`."""
    student_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    department_id: Optional[int] = None
    class_year: Optional[int] = None


class FacultyIn(_FormFriendly):
    """Payload for `POST /api/faculty`."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    department_id: Optional[int] = None


class CreatedOut(BaseModel):
    message: str
    id: int


class StatsOut(BaseModel):
    """Dashboard counters."""
    total_students: int
    active_courses: int
    faculty_staff: int
    fee_collection: str


class EnrollmentOut(BaseModel):
    """A student row with its department name attached."""
    id: int
    student_id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    department_id: Optional[int] = None
    status: Optional[str] = None
    class_year: Optional[int] = None
    avatar_initials: Optional[str] = None
    avatar_color: Optional[str] = None
    department_name: Optional[str] = None


class RecentEnrollmentsOut(BaseModel):
    data: List[EnrollmentOut]


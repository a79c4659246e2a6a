import asyncio
import random

import pytest
from sqlalchemy import exc as sa_exc, text
from sqlmodel import select

from academia import models, services
from academia.errors import ErrorKind, StoreError, translate
from academia.seed import seed_if_empty


@pytest.mark.parametrize("first,last,expected", [
    ("John", "Doe", "JD"),
    ("", "Doe", "D"),
    ("John", "", "J"),
    ("", "", ""),
    (None, "Hopper", "H"),
])
def test_avatar_initials(first, last, expected):
    assert services.avatar_initials(first, last) == expected


def test_avatar_color_comes_from_palette():
    rng = random.Random(7)
    seen = {services.pick_avatar_color(rng) for _ in range(200)}
    assert seen == {"blue", "amber", "rose", "cyan"}


def test_faculty_avatar_url_embeds_full_name():
    url = services.faculty_avatar_url("Ada", "Lovelace")
    assert url == "https://ui-avatars.com/api/?name=Ada+Lovelace&background=random"
    assert "name=Mary+Ann+Smith" in services.faculty_avatar_url("Mary Ann", "Smith")


def test_create_student_derives_avatar_and_default_status(store):
    with store.session() as s:
        out = services.StudentService(s).create(
            student_id="#ST-2025-010", first_name="Ada", last_name="Lovelace",
            email="ada@example.edu", class_year=2027,
        )
        assert out["message"] == "Student saved successfully!"
        row = s.get(models.Student, out["id"])
    assert row.avatar_initials == "AL"
    assert row.avatar_color in services.AVATAR_COLORS
    assert row.status == "Pending"
    assert row.class_year == 2027


def test_duplicate_student_id_is_a_conflict(store):
    with store.session() as s:
        svc = services.StudentService(s)
        first = svc.create(student_id="#ST-1", first_name="A", last_name="B")
        with pytest.raises(StoreError) as exc_info:
            svc.create(student_id="#ST-1", first_name="C", last_name="D")
        assert exc_info.value.kind is ErrorKind.CONFLICT
        kept = s.exec(select(models.Student).where(models.Student.student_id == "#ST-1")).one()
    assert kept.id == first["id"]
    assert kept.first_name == "A"


def test_missing_name_fails_in_the_store(store):
    with store.session() as s:
        with pytest.raises(StoreError) as exc_info:
            services.StudentService(s).create(student_id="#ST-2", first_name=None, last_name="Doe")
    assert exc_info.value.kind is ErrorKind.INTERNAL


def test_create_faculty(store):
    with store.session() as s:
        out = services.FacultyService(s).create(first_name="Barbara", last_name="Liskov")
        row = s.get(models.Faculty, out["id"])
    assert out["message"] == "Faculty saved successfully!"
    assert row.avatar_url.endswith("name=Barbara+Liskov&background=random")


def test_stats_match_table_counts(store):
    seed_if_empty(store)
    with store.session() as s:
        s.add(models.Course(course_code="CS-201", name="Algorithms", is_active=False))
        s.add(models.Course(course_code="CS-301", name="Compilers"))
        s.commit()
        services.StudentService(s).create(student_id="#ST-3", first_name="E", last_name="F")
    stats = asyncio.run(services.StatsService(store).get_stats())
    assert stats == {
        "total_students": 2,
        "active_courses": 2,
        "faculty_staff": 2,
        "fee_collection": "$2.4M",
    }


def test_stats_fail_as_a_whole(store):
    with store.engine.begin() as conn:
        conn.execute(text("DROP TABLE schedule"))
        conn.execute(text("DROP TABLE faculty"))
    with pytest.raises(StoreError) as exc_info:
        asyncio.run(services.StatsService(store).get_stats())
    assert exc_info.value.kind is ErrorKind.INTERNAL


def test_recent_enrollments_window_and_order(store):
    seed_if_empty(store)
    with store.session() as s:
        svc = services.StudentService(s)
        ids = [svc.create(student_id=f"#R-{i}", first_name="N", last_name=str(i), department_id=1)["id"]
               for i in range(6)]
        rows = services.EnrollmentService(s).recent()
    assert len(rows) == 5
    assert [r["id"] for r in rows] == sorted(ids, reverse=True)[:5]
    assert all(r["department_name"] == "Computer Science" for r in rows)


def test_recent_enrollments_keep_students_without_department(store):
    with store.session() as s:
        out = services.StudentService(s).create(student_id="#ND-1", first_name="No", last_name="Dept")
        rows = services.EnrollmentService(s).recent()
    assert rows[0]["id"] == out["id"]
    assert rows[0]["department_id"] is None
    assert rows[0]["department_name"] is None


@pytest.mark.parametrize("message,kind", [
    ("database is locked", ErrorKind.STORAGE_UNAVAILABLE),
    ("unable to open database file", ErrorKind.STORAGE_UNAVAILABLE),
    ("no such table: faculty", ErrorKind.INTERNAL),
    ('near "SELEC": syntax error', ErrorKind.INTERNAL),
])
def test_operational_errors_are_split_by_cause(message, kind):
    err = translate(sa_exc.OperationalError("SELECT 1", {}, Exception(message)))
    assert err.kind is kind
    assert err.message == message


def test_unknown_department_is_rejected_by_foreign_key(store):
    with store.session() as s:
        with pytest.raises(StoreError) as exc_info:
            services.StudentService(s).create(student_id="#FK-1", first_name="F", last_name="K", department_id=99)
    assert exc_info.value.kind is ErrorKind.INTERNAL
    assert "FOREIGN KEY" in exc_info.value.message

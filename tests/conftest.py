# tests/conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

from models import AbsenceRecord, ScheduleEntry, SubstitutionRequest, Teacher


def teacher(
    teacher_id: str,
    subjects: tuple[str, ...] = (),
    grades: tuple[str, ...] = (),
    workload: int | None = 0,
    name: str | None = None,
) -> Teacher:
    return Teacher(
        teacher_id=teacher_id,
        name=name or f"Teacher {teacher_id}",
        subjects=frozenset(subjects),
        grades=frozenset(grades),
        workload=workload,
    )


def entry(time: str, class_name: str, subject: str, teacher_id: str, day: str = "Monday") -> ScheduleEntry:
    return ScheduleEntry(day=day, time=time, class_name=class_name, subject=subject, teacher_id=teacher_id)


def request(
    teachers: list[Teacher],
    timetable: list[ScheduleEntry],
    absent_ids: list[str],
    day: str = "Monday",
) -> SubstitutionRequest:
    by_id = {t.teacher_id: t for t in teachers}
    absences = [AbsenceRecord(teacher=by_id[tid], day=day, reason="sick") for tid in absent_ids]
    return SubstitutionRequest(absences=absences, teachers=teachers, timetable=timetable, day=day)


@pytest.fixture
def make_teacher():
    return teacher


@pytest.fixture
def make_entry():
    return entry


@pytest.fixture
def make_request():
    return request


@pytest.fixture
def monday_school() -> SubstitutionRequest:
    """
    A absent on Monday with Math 5A at 08:00 and Math 5B at 09:00.
    B teaches Math (load 3), C teaches Science (load 1); both free all morning.
    """
    teachers = [
        teacher("A", ("Math",), ("5A", "5B"), workload=2, name="Alice"),
        teacher("B", ("Math",), (), workload=3, name="Bob"),
        teacher("C", ("Science",), (), workload=1, name="Cara"),
    ]
    timetable = [
        entry("08:00", "5A", "Math", "A"),
        entry("09:00", "5B", "Math", "A"),
    ]
    return request(teachers, timetable, ["A"])


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Repository root (where pyproject.toml lives)."""
    return Path(__file__).resolve().parents[1]

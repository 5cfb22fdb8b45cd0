from __future__ import annotations

from typing import Any

from errors import ValidationError
from models import AbsenceRecord, ScheduleEntry, SubstitutionRequest, Teacher
from slot_time import parse_slot_time

REQUIRED_FIELDS = ["absentTeachersInfo", "allTeachers", "timetable", "absenceDay"]
ENTRY_FIELDS = ["day", "time", "class", "subject", "teacherId"]


def fail(msg: str) -> None:
    raise ValidationError(msg)


def require_fields(body: Any) -> None:
    if not isinstance(body, dict):
        fail(f"malformed_body: expected a JSON object, got {type(body).__name__}")
    missing = [f for f in REQUIRED_FIELDS if body.get(f) is None or body.get(f) == ""]
    if missing:
        fail(f"missing_field: {', '.join(missing)}")


def as_id(value: Any, where: str) -> str:
    # ids arrive as strings or numbers; bools are a mistake, not 0/1
    if isinstance(value, bool) or value is None:
        fail(f"{where}: missing or invalid id: {value!r}")
    s = str(value).strip()
    if not s:
        fail(f"{where}: blank id")
    return s


def as_str_set(value: Any, where: str) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        # "Math|Science" or a single value
        return frozenset(x.strip() for x in value.split("|") if x.strip())
    if not isinstance(value, (list, tuple, set)):
        fail(f"{where}: expected a list, got {type(value).__name__}")
    return frozenset(str(x).strip() for x in value if str(x).strip())


def parse_day(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        fail(f"malformed_day: {value!r}")
    return value.strip()


def parse_teacher(raw: Any, where: str) -> Teacher:
    if not isinstance(raw, dict):
        fail(f"{where}: expected an object, got {type(raw).__name__}")

    workload = raw.get("workload")
    if workload is not None:
        if isinstance(workload, bool):
            fail(f"{where}: workload must be an int, got {workload!r}")
        try:
            workload = int(workload)
        except (TypeError, ValueError):
            fail(f"{where}: workload must be an int, got {workload!r}")
        if workload < 0:
            fail(f"{where}: workload must be >= 0, got {workload}")

    grades = raw.get("grades")
    if grades is None:
        grades = raw.get("classes")

    return Teacher(
        teacher_id=as_id(raw.get("id"), where),
        name=str(raw.get("name") or "").strip(),
        subjects=as_str_set(raw.get("subjects"), f"{where}.subjects"),
        grades=as_str_set(grades, f"{where}.grades"),
        workload=workload,
    )


def parse_entry(raw: Any, where: str) -> ScheduleEntry:
    if not isinstance(raw, dict):
        fail(f"{where}: expected an object, got {type(raw).__name__}")
    missing = [f for f in ENTRY_FIELDS if raw.get(f) in (None, "")]
    if missing:
        fail(f"{where}: missing {missing}")

    time = str(raw["time"]).strip()
    try:
        parse_slot_time(time)
    except ValueError as e:
        fail(f"{where}: bad time {time!r}: {e}")

    return ScheduleEntry(
        day=str(raw["day"]).strip(),
        time=time,
        class_name=str(raw["class"]).strip(),
        subject=str(raw["subject"]).strip(),
        teacher_id=as_id(raw["teacherId"], f"{where}.teacherId"),
    )


def parse_request(body: Any) -> SubstitutionRequest:
    """
    Turn the request body into typed records. Raises ValidationError before
    any planning work happens.
    """
    require_fields(body)
    day = parse_day(body["absenceDay"])

    for f in ["absentTeachersInfo", "allTeachers", "timetable"]:
        if not isinstance(body[f], list):
            fail(f"malformed_field: {f} must be a list")

    teachers = [parse_teacher(t, f"allTeachers[{i}]") for i, t in enumerate(body["allTeachers"])]
    timetable = [parse_entry(e, f"timetable[{i}]") for i, e in enumerate(body["timetable"])]

    absences: list[AbsenceRecord] = []
    seen: set[str] = set()
    for i, info in enumerate(body["absentTeachersInfo"]):
        where = f"absentTeachersInfo[{i}]"
        if not isinstance(info, dict) or "teacher" not in info:
            fail(f"{where}: expected {{teacher, reason}}")
        teacher = parse_teacher(info["teacher"], f"{where}.teacher")
        if teacher.teacher_id in seen:
            # one record per absent teacher per request
            continue
        seen.add(teacher.teacher_id)
        absences.append(
            AbsenceRecord(teacher=teacher, day=day, reason=str(info.get("reason") or "").strip())
        )

    return SubstitutionRequest(absences=absences, teachers=teachers, timetable=timetable, day=day)

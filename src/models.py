from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# minutes since midnight
Minute = int

UnresolvedReason = Literal["no_eligible_candidate"]
MatchCriterion = Literal["subject", "grade", "workload"]


@dataclass(frozen=True)
class Teacher:
    teacher_id: str
    name: str
    subjects: frozenset[str]
    grades: frozenset[str]
    # slots already taught that day; None means "derive from the timetable"
    workload: int | None = None


@dataclass(frozen=True)
class ScheduleEntry:
    day: str
    time: str
    class_name: str
    subject: str
    teacher_id: str


@dataclass(frozen=True)
class AbsenceRecord:
    teacher: Teacher
    day: str
    reason: str = ""


@dataclass(frozen=True)
class VacantSlot:
    entry: ScheduleEntry
    absent_teacher_id: str
    absent_teacher_name: str

    @property
    def time(self) -> str:
        return self.entry.time

    @property
    def class_name(self) -> str:
        return self.entry.class_name

    @property
    def subject(self) -> str:
        return self.entry.subject


@dataclass(frozen=True)
class Substitution:
    day: str
    time: str
    class_name: str
    subject: str
    absent_teacher_id: str
    absent_teacher_name: str
    substitute_teacher_id: str
    substitute_teacher_name: str
    justification: str

    def to_dict(self) -> dict[str, str]:
        return {
            "day": self.day,
            "time": self.time,
            "class": self.class_name,
            "subject": self.subject,
            "absentTeacherId": self.absent_teacher_id,
            "absentTeacherName": self.absent_teacher_name,
            "substituteTeacherId": self.substitute_teacher_id,
            "substituteTeacherName": self.substitute_teacher_name,
            "justification": self.justification,
        }


@dataclass(frozen=True)
class UnresolvedSlot:
    day: str
    slot: VacantSlot
    reason: UnresolvedReason = "no_eligible_candidate"
    # teacher_id -> rejection codes, diagnostics only
    rejected: dict[str, list[str]] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, str]:
        return {
            "day": self.day,
            "time": self.slot.time,
            "class": self.slot.class_name,
            "subject": self.slot.subject,
            "absentTeacherId": self.slot.absent_teacher_id,
            "absentTeacherName": self.slot.absent_teacher_name,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class SubstitutionRequest:
    absences: list[AbsenceRecord]
    teachers: list[Teacher]
    timetable: list[ScheduleEntry]
    day: str

    @property
    def absent_ids(self) -> set[str]:
        return {a.teacher.teacher_id for a in self.absences}

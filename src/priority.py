from __future__ import annotations

import re
from collections.abc import Iterable

from models import MatchCriterion, Teacher, VacantSlot
from run_context import RunContext

_DIGITS_RE = re.compile(r"\d+")


def grade_of(class_name: str) -> str:
    # "5A" -> "5", "Class5A" -> "5", "4 Bestari" -> "4"; no digits -> the name itself
    m = _DIGITS_RE.search(class_name)
    if m:
        return str(int(m.group(0)))
    return class_name.strip().upper()


def teacher_id_key(teacher_id: str) -> tuple[int, int, str]:
    # numeric ids compare as numbers and come before non-numeric ones
    if teacher_id.isdecimal():
        return (0, int(teacher_id), teacher_id)
    return (1, 0, teacher_id)


def subject_match(teacher: Teacher, slot: VacantSlot) -> bool:
    wanted = slot.subject.strip().casefold()
    return any(s.strip().casefold() == wanted for s in teacher.subjects)


def grade_match(teacher: Teacher, slot: VacantSlot) -> bool:
    cls = slot.class_name.strip().upper()
    if cls in {g.strip().upper() for g in teacher.grades}:
        return True
    return grade_of(cls) in {grade_of(g) for g in teacher.grades}


def score_key(teacher: Teacher, slot: VacantSlot, ctx: RunContext) -> tuple:
    return (
        not subject_match(teacher, slot),
        not grade_match(teacher, slot),
        ctx.workload(teacher.teacher_id),
        teacher_id_key(teacher.teacher_id),
    )


def rank(candidates: Iterable[Teacher], slot: VacantSlot, ctx: RunContext) -> list[Teacher]:
    """
    Most preferred first: same subject, then same grade, then lightest
    current load, then smallest teacher id. Total order, no randomness.
    """
    return sorted(candidates, key=lambda t: score_key(t, slot, ctx))


def match_criterion(teacher: Teacher, slot: VacantSlot) -> MatchCriterion:
    if subject_match(teacher, slot):
        return "subject"
    if grade_match(teacher, slot):
        return "grade"
    return "workload"

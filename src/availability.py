from __future__ import annotations

from models import Teacher, VacantSlot
from run_context import RunContext


def absence_reasons(teacher: Teacher, absent_ids: set[str]) -> list[str]:
    if teacher.teacher_id in absent_ids:
        return ["is_absent"]
    return []


def clash_reasons(teacher: Teacher, slot: VacantSlot, ctx: RunContext) -> list[str]:
    """
    Clash check against the teacher's own lessons that day, then against
    covers already handed out earlier in this run.
    """
    reasons: list[str] = []

    lesson = ctx.index.teaching_entry_at(teacher.teacher_id, slot.time)
    if lesson is not None:
        reasons.append(f"timetable_clash({lesson.class_name}@{lesson.time})")

    covering = ctx.committed_slot_at(teacher.teacher_id, slot.time)
    if covering is not None:
        reasons.append(f"already_covering({covering.class_name}@{covering.time})")

    return reasons


def eligibility_reasons(
    teacher: Teacher,
    slot: VacantSlot,
    absent_ids: set[str],
    ctx: RunContext,
) -> list[str]:
    reasons: list[str] = []
    reasons += absence_reasons(teacher, absent_ids)
    reasons += clash_reasons(teacher, slot, ctx)
    return reasons


def eligible_teachers_for_slot(
    slot: VacantSlot,
    absent_ids: set[str],
    ctx: RunContext,
) -> tuple[list[Teacher], dict[str, list[str]]]:
    eligible: list[Teacher] = []
    rejected: dict[str, list[str]] = {}

    for t in ctx.index.teachers_by_id.values():
        reasons = eligibility_reasons(t, slot, absent_ids, ctx)
        if reasons:
            rejected[t.teacher_id] = reasons
        else:
            eligible.append(t)

    return eligible, rejected


def candidates(slot: VacantSlot, absent_ids: set[str], ctx: RunContext) -> set[Teacher]:
    """Teachers free to cover `slot`. Empty is a normal answer, not an error."""
    eligible, _rejected = eligible_teachers_for_slot(slot, absent_ids, ctx)
    return set(eligible)

from __future__ import annotations

import logging

from availability import eligible_teachers_for_slot
from models import Substitution, Teacher, UnresolvedSlot, VacantSlot
from priority import grade_of, match_criterion, rank, teacher_id_key
from run_context import RunContext
from slot_time import normalize_label, slot_sort_key
from timetable_index import TimetableIndex

logger = logging.getLogger(__name__)

SlotKey = tuple[str, str, str]  # (absent_teacher_id, time label, class)
SlotOutcome = Substitution | UnresolvedSlot


def slot_key(slot: VacantSlot, index: TimetableIndex) -> SlotKey:
    return (
        slot.absent_teacher_id,
        index.slot_time(slot.time).label,
        normalize_label(slot.class_name),
    )


def vacant_slot_order(slot: VacantSlot) -> tuple:
    return (
        slot_sort_key(slot.time),
        slot.class_name,
        slot.subject,
        teacher_id_key(slot.absent_teacher_id),
    )


def justification(teacher: Teacher, slot: VacantSlot, load: int, suggested: bool = False) -> str:
    criterion = match_criterion(teacher, slot)
    if criterion == "subject":
        why = f"Teaches {slot.subject} (same subject)"
    elif criterion == "grade":
        why = f"Teaches grade {grade_of(slot.class_name)} (same grade as {slot.class_name})"
    elif suggested:
        # a hint is taken as given, so it need not be the lightest
        why = "Free to cover, spreading the workload"
    else:
        why = "Lightest workload among free teachers"

    text = f"{why}; covering for {slot.absent_teacher_name}. Load before this cover: {load} slot(s)."
    if suggested:
        text = f"Suggested and verified free at {slot.time}. {text}"
    return text


def assign_slot(
    slot: VacantSlot,
    absent_ids: set[str],
    ctx: RunContext,
    hinted_teacher_id: str | None = None,
) -> SlotOutcome:
    eligible, rejected = eligible_teachers_for_slot(slot, absent_ids, ctx)

    if not eligible:
        logger.debug(
            "unresolved %s %s (%s): no eligible candidate",
            slot.time,
            slot.class_name,
            slot.absent_teacher_id,
        )
        return UnresolvedSlot(day=ctx.day, slot=slot, rejected=rejected)

    chosen: Teacher | None = None
    suggested = False
    if hinted_teacher_id is not None:
        for t in eligible:
            if t.teacher_id == hinted_teacher_id:
                chosen, suggested = t, True
                break
        if chosen is None:
            # lost to an earlier commitment; fall back to plain ranking
            logger.debug(
                "hint %s for %s %s lost reconciliation: %s",
                hinted_teacher_id,
                slot.time,
                slot.class_name,
                rejected.get(hinted_teacher_id, ["not_a_candidate"]),
            )

    if chosen is None:
        chosen = rank(eligible, slot, ctx)[0]

    load = ctx.workload(chosen.teacher_id)
    ctx.commit(chosen.teacher_id, slot)
    logger.debug(
        "commit %s %s (%s) -> %s, load %d -> %d",
        slot.time,
        slot.class_name,
        slot.absent_teacher_id,
        chosen.teacher_id,
        load,
        load + 1,
    )

    return Substitution(
        day=ctx.day,
        time=slot.time,
        class_name=slot.class_name,
        subject=slot.subject,
        absent_teacher_id=slot.absent_teacher_id,
        absent_teacher_name=slot.absent_teacher_name,
        substitute_teacher_id=chosen.teacher_id,
        substitute_teacher_name=chosen.name,
        justification=justification(chosen, slot, load, suggested=suggested),
    )


def assign_day(
    vacant: list[VacantSlot],
    absent_ids: set[str],
    ctx: RunContext,
    hints: dict[SlotKey, str] | None = None,
) -> list[SlotOutcome]:
    """
    Resolve every vacant slot of the day against one shared RunContext.

    Strictly sequential: each commitment changes who is free and how loaded
    they are for every later slot. Hints (already-validated oracle picks) are
    honoured only while the hinted teacher is still a candidate.
    """
    hints = hints or {}
    outcomes: list[SlotOutcome] = []

    for slot in sorted(vacant, key=vacant_slot_order):
        outcomes.append(
            assign_slot(slot, absent_ids, ctx, hinted_teacher_id=hints.get(slot_key(slot, ctx.index)))
        )

    return outcomes

from __future__ import annotations

import logging

from assigner import assign_day
from models import AbsenceRecord, SubstitutionRequest
from oracle import Oracle, build_contexts, collect_suggestions, validate_suggestions
from plan_assembler import SubstitutionPlan, assemble_plan, audit_plan
from run_context import RunContext
from settings import Settings
from slot_time import same_day
from timetable_index import TimetableIndex

logger = logging.getLogger(__name__)


def unique_absences(request: SubstitutionRequest) -> list[AbsenceRecord]:
    # one record per absent teacher; later repeats of the same id are dropped
    out: list[AbsenceRecord] = []
    seen: set[str] = set()
    for a in request.absences:
        if not same_day(a.day, request.day) or a.teacher.teacher_id in seen:
            continue
        seen.add(a.teacher.teacher_id)
        out.append(a)
    return out


def build_substitution_plan(
    request: SubstitutionRequest,
    oracle: Oracle | None = None,
    settings: Settings | None = None,
) -> SubstitutionPlan:
    """
    One day, one RunContext, every vacant slot in a single shared pool.

    The oracle (if any) only produces hints up front; the assigner decides.
    """
    settings = settings or Settings()

    index = TimetableIndex(request.teachers, request.timetable, request.day)
    absences = unique_absences(request)
    absent_ids = {a.teacher.teacher_id for a in absences}
    vacant = index.vacant_slots(absences)

    hints = {}
    if oracle is not None and vacant:
        day_schedule = [e for e in request.timetable if same_day(e.day, request.day)]
        contexts = build_contexts(absences, vacant, index, day_schedule)
        suggestions = collect_suggestions(
            oracle,
            contexts,
            timeout_sec=settings.oracle_timeout_sec,
            max_retries=settings.oracle_max_retries,
            max_workers=settings.oracle_max_workers,
        )
        hints = validate_suggestions(suggestions, index, absent_ids, vacant)
        logger.info("oracle: %d suggestion(s), %d usable", len(suggestions), len(hints))

    ctx = RunContext(index=index)
    outcomes = assign_day(vacant, absent_ids, ctx, hints=hints)

    plan = assemble_plan(request.day, outcomes)
    audit_plan(plan, absent_ids, vacant)

    logger.info(
        "plan for %s: %d absent, %d vacant, %d covered, %d unresolved",
        request.day,
        len(absent_ids),
        len(vacant),
        len(plan.substitutions),
        len(plan.unresolved),
    )
    return plan

from __future__ import annotations

import json
import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from assigner import SlotKey, slot_key
from errors import OracleFailure
from models import AbsenceRecord, ScheduleEntry, Teacher, VacantSlot
from slot_time import normalize_label, same_day
from timetable_index import TimetableIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OracleContext:
    day: str
    absent_teacher: Teacher
    reason: str
    vacant_slots: list[VacantSlot]
    candidate_pool: list[Teacher]
    schedule: list[ScheduleEntry]


# Anything that turns a context into Substitution-shaped dicts, e.g. an LLM call.
Oracle = Callable[[OracleContext], Any]


@dataclass(frozen=True)
class Suggestion:
    absent_teacher_id: str
    time: str
    class_name: str
    substitute_teacher_id: str


def build_contexts(
    absences: list[AbsenceRecord],
    vacant: list[VacantSlot],
    index: TimetableIndex,
    day_schedule: list[ScheduleEntry],
) -> list[OracleContext]:
    absent_ids = {a.teacher.teacher_id for a in absences}
    pool = [t for t in index.teachers_by_id.values() if t.teacher_id not in absent_ids]

    out: list[OracleContext] = []
    for a in absences:
        mine = [v for v in vacant if v.absent_teacher_id == a.teacher.teacher_id]
        if not mine:
            continue
        out.append(
            OracleContext(
                day=index.day,
                absent_teacher=a.teacher,
                reason=a.reason,
                vacant_slots=mine,
                candidate_pool=pool,
                schedule=day_schedule,
            )
        )
    return out


def parse_response(raw: Any, ctx: OracleContext) -> list[Suggestion]:
    """
    Accepts a list of dicts (or a JSON string of one) shaped like
    Substitution. Items missing the fields we need are skipped.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise OracleFailure(f"oracle_malformed_json: {e}") from e

    if not isinstance(raw, list):
        raise OracleFailure(f"oracle_not_a_list: got {type(raw).__name__}")
    if not raw:
        raise OracleFailure("oracle_empty_response")

    out: list[Suggestion] = []
    for item in raw:
        if not isinstance(item, dict):
            logger.debug("oracle item skipped (not an object): %r", item)
            continue
        time = item.get("time")
        cls = item.get("class")
        sub = item.get("substituteTeacherId")
        if not (time and cls and sub not in (None, "")):
            logger.debug("oracle item skipped (missing time/class/substituteTeacherId): %r", item)
            continue
        if item.get("day") and not same_day(str(item["day"]), ctx.day):
            logger.debug("oracle item skipped (day %r): %r", item["day"], item)
            continue
        out.append(
            Suggestion(
                absent_teacher_id=ctx.absent_teacher.teacher_id,
                time=str(time),
                class_name=str(cls),
                substitute_teacher_id=str(sub),
            )
        )
    return out


def suggestion_reasons(
    s: Suggestion,
    index: TimetableIndex,
    absent_ids: set[str],
    vacant_keys: set[SlotKey],
) -> list[str]:
    if s.substitute_teacher_id not in index.teachers_by_id:
        return ["oracle_unknown_teacher"]

    try:
        key = (s.absent_teacher_id, index.slot_time(s.time).label, normalize_label(s.class_name))
    except ValueError:
        return ["oracle_unknown_slot"]
    if key not in vacant_keys:
        return ["oracle_unknown_slot"]

    if s.substitute_teacher_id in absent_ids or index.is_teaching_at(s.substitute_teacher_id, s.time):
        return ["oracle_not_free"]
    return []


def validate_suggestions(
    suggestions: list[Suggestion],
    index: TimetableIndex,
    absent_ids: set[str],
    vacant: list[VacantSlot],
) -> dict[SlotKey, str]:
    """
    Keep only suggestions that name a real teacher, a real vacant slot, and a
    time that teacher is actually free. Cross-teacher clashes are left for
    the assigner's reconciliation pass.
    """
    vacant_keys = {slot_key(v, index) for v in vacant}
    hints: dict[SlotKey, str] = {}

    for s in suggestions:
        reasons = suggestion_reasons(s, index, absent_ids, vacant_keys)
        if reasons:
            logger.info(
                "discarding suggestion %s for %s %s: %s",
                s.substitute_teacher_id,
                s.time,
                s.class_name,
                reasons,
            )
            continue
        key = (s.absent_teacher_id, index.slot_time(s.time).label, normalize_label(s.class_name))
        hints.setdefault(key, s.substitute_teacher_id)

    return hints


def _run_batch(
    oracle: Oracle,
    batch: list[OracleContext],
    timeout_sec: float,
    results: dict[str, list[Suggestion]],
    last_error: dict[str, str],
) -> list[OracleContext]:
    """Run one batch on its own threads; returns the contexts that need another try."""
    # fresh threads per batch: a call that hung earlier never holds a worker this batch needs
    pool = ThreadPoolExecutor(max_workers=len(batch))
    try:
        futures: dict[Future, OracleContext] = {pool.submit(oracle, c): c for c in batch}
        done, not_done = wait(futures, timeout=timeout_sec)
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    failed: list[OracleContext] = []
    for f in not_done:
        c = futures[f]
        last_error[c.absent_teacher.teacher_id] = f"oracle_timeout: {timeout_sec}s"
        failed.append(c)

    for f in done:
        c = futures[f]
        tid = c.absent_teacher.teacher_id
        try:
            results[tid] = parse_response(f.result(), c)
        except OracleFailure as e:
            last_error[tid] = str(e)
            failed.append(c)
        except Exception as e:
            last_error[tid] = f"oracle_error: {e!r}"
            failed.append(c)
    return failed


def collect_suggestions(
    oracle: Oracle,
    contexts: list[OracleContext],
    timeout_sec: float,
    max_retries: int,
    max_workers: int,
) -> list[Suggestion]:
    """
    One oracle task per absent teacher, up to `max_workers` at a time. Each
    task gets `timeout_sec` from when it starts; failed or timed-out tasks are
    retried up to `max_retries` more times. Whatever still fails is logged and
    dropped; those slots are simply resolved without a hint.
    """
    if not contexts:
        return []

    results: dict[str, list[Suggestion]] = {}
    pending = list(contexts)
    last_error: dict[str, str] = {}
    width = max(1, max_workers)

    for attempt in range(max_retries + 1):
        if not pending:
            break

        retry: list[OracleContext] = []
        for start in range(0, len(pending), width):
            retry.extend(_run_batch(oracle, pending[start : start + width], timeout_sec, results, last_error))

        if retry:
            logger.warning(
                "oracle attempt %d/%d failed for %s",
                attempt + 1,
                max_retries + 1,
                sorted(c.absent_teacher.teacher_id for c in retry),
            )
        # keep the caller's order so retries stay deterministic
        retry_ids = {c.absent_teacher.teacher_id for c in retry}
        pending = [c for c in pending if c.absent_teacher.teacher_id in retry_ids]

    for c in pending:
        tid = c.absent_teacher.teacher_id
        logger.warning(
            "oracle gave nothing usable for %s after %d attempt(s) (%s); using ranking only",
            tid,
            max_retries + 1,
            last_error.get(tid, "unknown"),
        )

    out: list[Suggestion] = []
    for c in contexts:
        out.extend(results.get(c.absent_teacher.teacher_id, []))
    return out


class SuggestionFileOracle:
    """
    Serves precomputed suggestions from a JSON file: either a flat list of
    Substitution-shaped objects or {absent_teacher_id: [...]}.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        try:
            self._data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise OracleFailure(f"suggestions_unreadable: {self.path}: {e}") from e

    def __call__(self, ctx: OracleContext) -> list[dict]:
        tid = ctx.absent_teacher.teacher_id
        if isinstance(self._data, dict):
            return list(self._data.get(tid, []))
        if isinstance(self._data, list):
            return [
                item
                for item in self._data
                if isinstance(item, dict)
                and str(item.get("absentTeacherId", tid)) == tid
            ]
        raise OracleFailure(f"suggestions_bad_shape: {type(self._data).__name__}")

from __future__ import annotations

import json
import threading
import time

import pytest

from errors import OracleFailure
from oracle import (
    OracleContext,
    Suggestion,
    SuggestionFileOracle,
    collect_suggestions,
    parse_response,
    validate_suggestions,
)
from planner import build_substitution_plan
from settings import Settings
from timetable_index import TimetableIndex

FAST = Settings(oracle_timeout_sec=2.0, oracle_max_retries=1, oracle_max_workers=4)


def _ctx(make_teacher, teacher_id: str = "A") -> OracleContext:
    return OracleContext(
        day="Monday",
        absent_teacher=make_teacher(teacher_id),
        reason="",
        vacant_slots=[],
        candidate_pool=[],
        schedule=[],
    )


def _two_absences(make_teacher, make_entry, make_request):
    teachers = [
        make_teacher("A", ("Math",), name="Alice"),
        make_teacher("D", ("Math",), name="Dan"),
        make_teacher("B", ("Math",), workload=3, name="Bob"),
        make_teacher("C", ("Science",), workload=1, name="Cara"),
        make_teacher("E", ("Art",), workload=0, name="Eve"),
    ]
    timetable = [
        make_entry("08:00", "5A", "Math", "A"),
        make_entry("08:00", "5B", "Math", "D"),
        make_entry("08:00", "3C", "Art", "E"),
    ]
    return make_request(teachers, timetable, ["A", "D"])


def test_parse_response_accepts_json_text(make_teacher) -> None:
    raw = json.dumps(
        [
            {"day": "Monday", "time": "08:00", "class": "5A", "substituteTeacherId": 7},
            {"time": "08:00", "class": "5B"},
            {"day": "Tuesday", "time": "08:00", "class": "5A", "substituteTeacherId": "B"},
            "junk",
        ]
    )
    out = parse_response(raw, _ctx(make_teacher))
    assert out == [Suggestion("A", "08:00", "5A", "7")]


@pytest.mark.parametrize("raw", ["not json", {"time": "08:00"}, [], None])
def test_parse_response_failures(raw, make_teacher) -> None:
    with pytest.raises(OracleFailure):
        parse_response(raw, _ctx(make_teacher))


def test_validate_discards_bad_suggestions(make_teacher, make_entry, make_request) -> None:
    req = _two_absences(make_teacher, make_entry, make_request)
    index = TimetableIndex(req.teachers, req.timetable, req.day)
    vacant = index.vacant_slots(req.absences)

    hints = validate_suggestions(
        [
            Suggestion("A", "08:00", "5A", "ZZ"),  # unknown teacher
            Suggestion("A", "09:00", "5A", "B"),  # no such vacant slot
            Suggestion("A", "08:00", "5A", "E"),  # E is teaching then
            Suggestion("A", "08:00", "5A", "D"),  # D is absent
            Suggestion("A", "8:00", "5a", "C"),
            Suggestion("A", "08:00", "5A", "B"),  # second pick for the same slot
        ],
        index,
        req.absent_ids,
        vacant,
    )
    assert hints == {("A", "08:00", "5A"): "C"}


def test_collect_retries_then_gives_up(make_teacher) -> None:
    calls: dict[str, int] = {}

    def oracle(ctx):
        tid = ctx.absent_teacher.teacher_id
        calls[tid] = calls.get(tid, 0) + 1
        if tid == "A" and calls[tid] == 1:
            raise RuntimeError("rate limited")
        if tid == "D":
            return []
        return [{"time": "08:00", "class": "5A", "substituteTeacherId": "C"}]

    out = collect_suggestions(
        oracle,
        [_ctx(make_teacher, "A"), _ctx(make_teacher, "D")],
        timeout_sec=2.0,
        max_retries=2,
        max_workers=2,
    )
    assert out == [Suggestion("A", "08:00", "5A", "C")]
    assert calls == {"A": 2, "D": 3}


def test_collect_times_out(make_teacher) -> None:
    release = threading.Event()

    def slow(ctx):
        release.wait(5)
        return [{"time": "08:00", "class": "5A", "substituteTeacherId": "C"}]

    try:
        out = collect_suggestions(slow, [_ctx(make_teacher)], timeout_sec=0.05, max_retries=0, max_workers=1)
    finally:
        release.set()
    assert out == []


def test_retry_runs_after_a_hung_call(make_teacher) -> None:
    release = threading.Event()
    calls: list[int] = []

    def hangs_once(ctx):
        calls.append(1)
        if len(calls) == 1:
            release.wait(5)
        return [{"time": "08:00", "class": "5A", "substituteTeacherId": "C"}]

    try:
        out = collect_suggestions(hangs_once, [_ctx(make_teacher)], timeout_sec=0.2, max_retries=2, max_workers=4)
    finally:
        release.set()
    assert out == [Suggestion("A", "08:00", "5A", "C")]
    assert len(calls) == 2


def test_queued_tasks_get_their_own_timeout(make_teacher) -> None:
    def takes_a_moment(ctx):
        time.sleep(0.2)
        return [{"time": "08:00", "class": "5A", "substituteTeacherId": ctx.absent_teacher.teacher_id}]

    ids = ["A", "B", "C", "D"]
    out = collect_suggestions(
        takes_a_moment,
        [_ctx(make_teacher, tid) for tid in ids],
        timeout_sec=0.6,
        max_retries=0,
        max_workers=1,
    )
    assert [s.absent_teacher_id for s in out] == ids


def test_parallel_suggestions_are_reconciled(make_teacher, make_entry, make_request) -> None:
    req = _two_absences(make_teacher, make_entry, make_request)

    # both independent answers pick Cara for 08:00
    def oracle(ctx):
        cls = "5A" if ctx.absent_teacher.teacher_id == "A" else "5B"
        return [{"day": "Monday", "time": "08:00", "class": cls, "substituteTeacherId": "C"}]

    plan = build_substitution_plan(req, oracle=oracle, settings=FAST)

    assert [(s.class_name, s.substitute_teacher_id) for s in plan.substitutions] == [
        ("5A", "C"),
        ("5B", "B"),
    ]
    assert plan.substitutions[0].justification.startswith("Suggested")


def test_failing_oracle_falls_back_to_ranking(make_teacher, make_entry, make_request) -> None:
    req = _two_absences(make_teacher, make_entry, make_request)

    def broken(ctx):
        raise TimeoutError("upstream timed out")

    with_oracle = build_substitution_plan(req, oracle=broken, settings=FAST)
    without = build_substitution_plan(req)
    assert with_oracle.to_dict() == without.to_dict()


def test_suggestion_file_oracle(tmp_path, make_teacher) -> None:
    path = tmp_path / "suggestions.json"
    path.write_text(
        json.dumps(
            [
                {"absentTeacherId": "A", "time": "08:00", "class": "5A", "substituteTeacherId": "C"},
                {"absentTeacherId": "D", "time": "08:00", "class": "5B", "substituteTeacherId": "B"},
            ]
        ),
        encoding="utf-8",
    )
    oracle = SuggestionFileOracle(path)

    assert [s["class"] for s in oracle(_ctx(make_teacher, "A"))] == ["5A"]
    assert [s["class"] for s in oracle(_ctx(make_teacher, "D"))] == ["5B"]


def test_suggestion_file_oracle_unreadable(tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{nope", encoding="utf-8")
    with pytest.raises(OracleFailure, match="suggestions_unreadable"):
        SuggestionFileOracle(bad)

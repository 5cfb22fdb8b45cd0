from __future__ import annotations

from assigner import assign_day, slot_key, vacant_slot_order
from models import Substitution, UnresolvedSlot, VacantSlot
from run_context import RunContext
from timetable_index import TimetableIndex


def _run(req, hints=None):
    index = TimetableIndex(req.teachers, req.timetable, req.day)
    ctx = RunContext(index=index)
    vacant = index.vacant_slots(req.absences)
    return assign_day(vacant, req.absent_ids, ctx, hints=hints), ctx


def test_subject_match_beats_lower_workload(monday_school) -> None:
    outcomes, ctx = _run(monday_school)

    assert [(o.time, o.substitute_teacher_id) for o in outcomes] == [("08:00", "B"), ("09:00", "B")]
    # baseline 3 plus two covers
    assert ctx.workload("B") == 5
    assert ctx.workload("C") == 1


def test_overlapping_second_absence_pushes_slot_to_next_candidate(make_teacher, make_entry, make_request) -> None:
    teachers = [
        make_teacher("A", ("Math",), workload=2),
        make_teacher("B", ("Math",), workload=3),
        make_teacher("C", ("Science",), workload=1),
        make_teacher("D", ("Math",), workload=2),
    ]
    timetable = [
        make_entry("08:00", "5A", "Math", "A"),
        make_entry("08:00", "5B", "Math", "D"),
    ]
    outcomes, _ctx = _run(make_request(teachers, timetable, ["A", "D"]))

    assert [(o.class_name, o.substitute_teacher_id) for o in outcomes] == [("5A", "B"), ("5B", "C")]


def test_no_candidate_becomes_unresolved(make_teacher, make_entry, make_request) -> None:
    teachers = [make_teacher("A", ("Math",)), make_teacher("B", ("Math",))]
    timetable = [make_entry("08:00", "5A", "Math", "A"), make_entry("08:00", "4A", "Math", "B")]
    outcomes, _ctx = _run(make_request(teachers, timetable, ["A"]))

    assert len(outcomes) == 1
    u = outcomes[0]
    assert isinstance(u, UnresolvedSlot)
    assert u.reason == "no_eligible_candidate"
    assert u.slot.class_name == "5A"
    assert u.rejected["B"] == ["timetable_clash(4A@08:00)"]


def test_tie_break_picks_smallest_id(make_teacher, make_entry, make_request) -> None:
    teachers = [
        make_teacher("10", ("Math",)),
        make_teacher("11", ("Science",), workload=1),
        make_teacher("2", ("Science",), workload=1),
    ]
    timetable = [make_entry("08:00", "5A", "Math", "10")]

    for _ in range(3):
        outcomes, _ctx = _run(make_request(teachers, timetable, ["10"]))
        assert outcomes[0].substitute_teacher_id == "2"


def test_slots_are_processed_in_fixed_order(make_entry) -> None:
    def vs(time, cls, subject, absent):
        return VacantSlot(
            entry=make_entry(time, cls, subject, absent),
            absent_teacher_id=absent,
            absent_teacher_name=absent,
        )

    slots = [
        vs("09:00", "5A", "Math", "1"),
        vs("08:00", "5B", "Math", "1"),
        vs("08:00", "5A", "Science", "3"),
        vs("08:00", "5A", "Math", "20"),
        vs("08:00", "5A", "Math", "3"),
    ]
    ordered = sorted(slots, key=vacant_slot_order)
    assert [(s.time, s.class_name, s.subject, s.absent_teacher_id) for s in ordered] == [
        ("08:00", "5A", "Math", "3"),
        ("08:00", "5A", "Math", "20"),
        ("08:00", "5A", "Science", "3"),
        ("08:00", "5B", "Math", "1"),
        ("09:00", "5A", "Math", "1"),
    ]


def test_justification_names_criterion_and_absent_teacher(make_teacher, make_entry, make_request) -> None:
    teachers = [
        make_teacher("A", ("Math",), name="Alice"),
        make_teacher("G", ("Art",), ("5",)),
    ]
    timetable = [make_entry("08:00", "5A", "Math", "A")]
    outcomes, _ctx = _run(make_request(teachers, timetable, ["A"]))

    text = outcomes[0].justification
    assert "same grade" in text
    assert "Alice" in text


def test_hint_is_taken_while_still_free(monday_school) -> None:
    index = TimetableIndex(monday_school.teachers, monday_school.timetable, "Monday")
    first = index.vacant_slots(monday_school.absences)[0]
    outcomes, _ctx = _run(monday_school, hints={slot_key(first, index): "C"})

    assert isinstance(outcomes[0], Substitution)
    assert outcomes[0].substitute_teacher_id == "C"
    assert outcomes[0].justification.startswith("Suggested")
    assert outcomes[1].substitute_teacher_id == "B"


def test_hint_that_lost_reconciliation_is_re_ranked(make_teacher, make_entry, make_request) -> None:
    teachers = [
        make_teacher("A", ("Math",)),
        make_teacher("D", ("Math",)),
        make_teacher("B", ("Math",), workload=3),
        make_teacher("C", ("Science",), workload=1),
    ]
    timetable = [make_entry("08:00", "5A", "Math", "A"), make_entry("08:00", "5B", "Math", "D")]
    req = make_request(teachers, timetable, ["A", "D"])
    index = TimetableIndex(teachers, timetable, "Monday")
    hints = {slot_key(v, index): "C" for v in index.vacant_slots(req.absences)}

    outcomes, _ctx = _run(req, hints=hints)

    assert [(o.class_name, o.substitute_teacher_id) for o in outcomes] == [("5A", "C"), ("5B", "B")]
    assert not outcomes[1].justification.startswith("Suggested")


def test_hinted_pick_does_not_claim_lightest_load(make_teacher, make_entry, make_request) -> None:
    teachers = [
        make_teacher("A", ("Math",), ("5A",), name="Alice"),
        make_teacher("E", ("Art",), workload=0),
        make_teacher("F", ("Art",), workload=5),
    ]
    timetable = [make_entry("08:00", "5A", "Math", "A")]
    req = make_request(teachers, timetable, ["A"])
    index = TimetableIndex(teachers, timetable, "Monday")
    hints = {slot_key(index.vacant_slots(req.absences)[0], index): "F"}

    hinted, _ctx = _run(req, hints=hints)
    ranked, _ctx = _run(req)

    assert hinted[0].substitute_teacher_id == "F"
    assert "Lightest" not in hinted[0].justification
    assert "Load before this cover: 5" in hinted[0].justification
    assert ranked[0].substitute_teacher_id == "E"
    assert "Lightest workload" in ranked[0].justification

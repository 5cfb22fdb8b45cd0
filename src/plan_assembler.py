from __future__ import annotations

from dataclasses import dataclass

from errors import InternalInvariantViolation
from models import Substitution, UnresolvedSlot, VacantSlot
from slot_time import parse_slot_time, slot_sort_key, slots_overlap


@dataclass
class SubstitutionPlan:
    day: str
    substitutions: list[Substitution]
    unresolved: list[UnresolvedSlot]

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        return {
            "substitutions": [s.to_dict() for s in self.substitutions],
            "unresolved": [u.to_dict() for u in self.unresolved],
        }


def assemble_plan(day: str, outcomes: list[Substitution | UnresolvedSlot]) -> SubstitutionPlan:
    substitutions = [o for o in outcomes if isinstance(o, Substitution)]
    unresolved = [o for o in outcomes if isinstance(o, UnresolvedSlot)]

    # sorted() is stable, so equal (time, class) keep assignment order
    substitutions = sorted(substitutions, key=lambda s: (slot_sort_key(s.time), s.class_name))
    unresolved = sorted(unresolved, key=lambda u: (slot_sort_key(u.slot.time), u.slot.class_name))

    return SubstitutionPlan(day=day, substitutions=substitutions, unresolved=unresolved)


def audit_plan(plan: SubstitutionPlan, absent_ids: set[str], vacant: list[VacantSlot]) -> None:
    """
    Re-check the plan before anyone sees it. Collects every breach and raises once;
    a plan that reaches the caller has passed every check here.
    """
    problems: list[str] = []

    for s in plan.substitutions:
        if s.substitute_teacher_id in absent_ids:
            problems.append(f"absent_teacher_used_as_substitute({s.substitute_teacher_id}@{s.time})")
        if s.day != plan.day:
            problems.append(f"wrong_day({s.day}@{s.time})")

    by_sub: dict[str, list[Substitution]] = {}
    for s in plan.substitutions:
        by_sub.setdefault(s.substitute_teacher_id, []).append(s)
    for tid, subs in by_sub.items():
        for i, a in enumerate(subs):
            for b in subs[i + 1 :]:
                if slots_overlap(parse_slot_time(a.time), parse_slot_time(b.time)):
                    problems.append(f"double_booked({tid}@{a.time}/{b.time})")

    # a lesson is covered by at most one teacher, whatever `vacant` says
    outcome_keys: dict[tuple[str, str, str], int] = {}
    for k in [(s.absent_teacher_id, s.time, s.class_name) for s in plan.substitutions] + [
        (u.slot.absent_teacher_id, u.slot.time, u.slot.class_name) for u in plan.unresolved
    ]:
        outcome_keys[k] = outcome_keys.get(k, 0) + 1
    for k, n in sorted(outcome_keys.items()):
        if n > 1:
            problems.append(f"slot_resolved_twice({k[0]}: {k[2]}@{k[1]} x{n})")

    # every vacant slot ends up exactly once as a substitution or unresolved
    seen: dict[tuple[str, str, str, str], int] = {}
    for s in plan.substitutions:
        k = (s.absent_teacher_id, s.time, s.class_name, s.subject)
        seen[k] = seen.get(k, 0) + 1
    for u in plan.unresolved:
        k = (u.slot.absent_teacher_id, u.slot.time, u.slot.class_name, u.slot.subject)
        seen[k] = seen.get(k, 0) + 1

    expected: dict[tuple[str, str, str, str], int] = {}
    for v in vacant:
        k = (v.absent_teacher_id, v.time, v.class_name, v.subject)
        expected[k] = expected.get(k, 0) + 1

    if seen != expected:
        missing = sorted(k for k in expected if seen.get(k, 0) < expected[k])
        extra = sorted(k for k in seen if seen[k] > expected.get(k, 0))
        problems.append(f"slot_accounting(missing={missing}, extra={extra})")

    if problems:
        raise InternalInvariantViolation("plan_invariant_violation: " + "; ".join(problems))

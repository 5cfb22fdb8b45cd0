from __future__ import annotations

import re


def match_reason(code: str) -> str:
    # Direct matches
    if code == "is_absent":
        return "Absent today."
    if code == "no_eligible_candidate":
        return "No teacher is free to cover this class."
    if code == "oracle_unknown_teacher":
        return "Suggested teacher is not on the staff list."
    if code == "oracle_unknown_slot":
        return "Suggestion doesn't match any class that needs cover."
    if code == "oracle_not_free":
        return "Suggested teacher isn't free at that time."
    if code == "not_a_candidate":
        return "Not a candidate for this class."

    # Patterned codes
    m = re.match(r"timetable_clash\((.+)@(.+)\)", code)
    if m:
        cls, time = m.group(1), m.group(2)
        return f"Teaching {cls} at {time}."

    m = re.match(r"already_covering\((.+)@(.+)\)", code)
    if m:
        cls, time = m.group(1), m.group(2)
        return f"Already covering {cls} at {time}."

    # Fallback
    return code


def match_reasons(codes: list[str]) -> list[str]:
    return [match_reason(c) for c in codes]

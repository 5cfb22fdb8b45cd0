from __future__ import annotations

import re
from dataclasses import dataclass

from models import Minute

_HHMM = r"(\d{1,2})[:.](\d{2})"
_RANGE_RE = re.compile(rf"^{_HHMM}\s*[-–]\s*{_HHMM}$")
_POINT_RE = re.compile(rf"^{_HHMM}$")


@dataclass(frozen=True)
class SlotTime:
    """
    A timetable slot as written in the input ("08:00", "8.00 - 8.30").
    start/end are None for labels we can't read as clock times.
    """

    label: str
    start: Minute | None = None
    end: Minute | None = None

    @property
    def is_range(self) -> bool:
        return self.start is not None and self.end is not None and self.end > self.start

    @property
    def is_clock(self) -> bool:
        return self.start is not None


def hhmm_to_min(hh: str, mm: str) -> Minute:
    h, m = int(hh), int(mm)
    if not (0 <= h <= 24 and 0 <= m < 60):
        raise ValueError(f"invalid_clock_time: {hh}:{mm}")
    return h * 60 + m


def mm_to_hhmm(m: int) -> str:
    return f"{m // 60:02d}:{m % 60:02d}"


def normalize_label(raw: str) -> str:
    return " ".join(str(raw).split()).upper()


def parse_slot_time(raw: str) -> SlotTime:
    label = normalize_label(raw)

    m = _RANGE_RE.match(label)
    if m:
        start = hhmm_to_min(m.group(1), m.group(2))
        end = hhmm_to_min(m.group(3), m.group(4))
        if end <= start:
            raise ValueError(f"invalid_time_range: {raw!r} (end <= start)")
        return SlotTime(label=f"{mm_to_hhmm(start)}-{mm_to_hhmm(end)}", start=start, end=end)

    m = _POINT_RE.match(label)
    if m:
        start = hhmm_to_min(m.group(1), m.group(2))
        return SlotTime(label=mm_to_hhmm(start), start=start)

    return SlotTime(label=label)


def slot_sort_key(raw: str) -> tuple:
    # clock times first, by start then end; opaque labels after, alphabetically
    st = parse_slot_time(raw)
    if st.start is None:
        return (1, 0, 0, st.label)
    return (0, st.start, st.end if st.end is not None else st.start, st.label)


def slots_overlap(a: SlotTime, b: SlotTime) -> bool:
    if a.is_range and b.is_range:
        return a.start < b.end and b.start < a.end
    if a.is_range and b.is_clock:
        return a.start <= b.start < a.end
    if b.is_range and a.is_clock:
        return b.start <= a.start < b.end
    return a.label == b.label


def same_day(a: str, b: str) -> bool:
    return normalize_label(a) == normalize_label(b)

from __future__ import annotations

from errors import InternalInvariantViolation
from models import AbsenceRecord, ScheduleEntry, Teacher, VacantSlot
from slot_time import SlotTime, parse_slot_time, same_day, slot_sort_key, slots_overlap


def index_teachers_by_id(teachers: list[Teacher]) -> dict[str, Teacher]:
    out: dict[str, Teacher] = {}
    dupes: list[str] = []
    for t in teachers:
        if t.teacher_id in out:
            dupes.append(t.teacher_id)
            continue
        out[t.teacher_id] = t

    if dupes:
        raise InternalInvariantViolation(
            f"duplicate_teacher_id: {sorted(set(dupes))}"
        )
    return out


class TimetableIndex:
    """
    Lookup tables over one day of the timetable.

    Built once per request; never mutated afterwards. Entries for other days
    are dropped at construction, so every lookup is implicitly "on the day".
    """

    def __init__(self, teachers: list[Teacher], timetable: list[ScheduleEntry], day: str):
        self.day = day
        self.teachers_by_id = index_teachers_by_id(teachers)

        self._by_time: dict[str, list[ScheduleEntry]] = {}
        self._by_teacher: dict[str, list[ScheduleEntry]] = {}
        self._slot_times: dict[str, SlotTime] = {}

        for e in timetable:
            if not same_day(e.day, day):
                continue
            st = self.slot_time(e.time)
            self._by_time.setdefault(st.label, []).append(e)
            self._by_teacher.setdefault(e.teacher_id, []).append(e)

        for arr in self._by_teacher.values():
            arr.sort(key=lambda x: (slot_sort_key(x.time), x.class_name, x.subject))

    def slot_time(self, raw: str) -> SlotTime:
        st = self._slot_times.get(raw)
        if st is None:
            st = parse_slot_time(raw)
            self._slot_times[raw] = st
        return st

    def entries_at(self, time: str) -> list[ScheduleEntry]:
        return list(self._by_time.get(self.slot_time(time).label, []))

    def entries_for_teacher(self, teacher_id: str) -> list[ScheduleEntry]:
        return list(self._by_teacher.get(teacher_id, []))

    def teaching_entry_at(self, teacher_id: str, time: str) -> ScheduleEntry | None:
        # per-teacher lists are a handful of lessons, so a scan is fine
        target = self.slot_time(time)
        for e in self._by_teacher.get(teacher_id, []):
            if slots_overlap(self.slot_time(e.time), target):
                return e
        return None

    def is_teaching_at(self, teacher_id: str, time: str) -> bool:
        return self.teaching_entry_at(teacher_id, time) is not None

    def baseline_workload(self, teacher_id: str) -> int:
        t = self.teachers_by_id.get(teacher_id)
        if t is not None and t.workload is not None:
            return t.workload
        return len(self._by_teacher.get(teacher_id, []))

    def vacant_slots(self, absences: list[AbsenceRecord]) -> list[VacantSlot]:
        out: list[VacantSlot] = []
        for a in absences:
            for e in self._by_teacher.get(a.teacher.teacher_id, []):
                out.append(
                    VacantSlot(
                        entry=e,
                        absent_teacher_id=a.teacher.teacher_id,
                        absent_teacher_name=a.teacher.name,
                    )
                )
        return out

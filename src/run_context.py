from __future__ import annotations

from dataclasses import dataclass, field

from errors import InternalInvariantViolation
from models import VacantSlot
from slot_time import SlotTime, slots_overlap
from timetable_index import TimetableIndex


@dataclass
class RunContext:
    """
    Mutable state for one day's assignment run.

    Created fresh per request and thrown away afterwards; nothing here is
    shared between requests or days.
    """

    index: TimetableIndex
    # teacher_id -> slots they've been committed to cover this run
    commitments: dict[str, list[tuple[SlotTime, VacantSlot]]] = field(default_factory=dict)
    # teacher_id -> covers added on top of their baseline
    extra_load: dict[str, int] = field(default_factory=dict)

    @property
    def day(self) -> str:
        return self.index.day

    def workload(self, teacher_id: str) -> int:
        return self.index.baseline_workload(teacher_id) + self.extra_load.get(teacher_id, 0)

    def committed_slot_at(self, teacher_id: str, time: str) -> VacantSlot | None:
        target = self.index.slot_time(time)
        for st, slot in self.commitments.get(teacher_id, []):
            if slots_overlap(st, target):
                return slot
        return None

    def is_claimed_at(self, teacher_id: str, time: str) -> bool:
        return self.committed_slot_at(teacher_id, time) is not None

    def commit(self, teacher_id: str, slot: VacantSlot) -> None:
        if self.is_claimed_at(teacher_id, slot.time):
            raise InternalInvariantViolation(
                f"double_booking: {teacher_id} already covers a class at {slot.time}"
            )
        st = self.index.slot_time(slot.time)
        self.commitments.setdefault(teacher_id, []).append((st, slot))
        self.extra_load[teacher_id] = self.extra_load.get(teacher_id, 0) + 1

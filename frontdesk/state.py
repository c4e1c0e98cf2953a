"""The queue state aggregate persisted as one snapshot."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Set, Tuple

from .models import CheckIn


@dataclass
class QueueState:
    """Active check-ins, both waiting queues, lookup indexes and the id counter."""

    check_ins: Dict[int, CheckIn] = field(default_factory=dict)
    walk_in_queue: List[int] = field(default_factory=list)
    scheduled_queue: List[int] = field(default_factory=list)
    walk_in_appointment_ids: Set[int] = field(default_factory=set)
    appt_index: Dict[int, int] = field(default_factory=dict)
    patient_index: Dict[int, List[int]] = field(default_factory=dict)
    next_check_in_id: int = 1

    def allocate_id(self) -> int:
        check_in_id = self.next_check_in_id
        self.next_check_in_id += 1
        return check_in_id

    def index_new(self, check_in: CheckIn) -> None:
        self.appt_index[check_in.appointment_id] = check_in.id
        self.patient_index.setdefault(check_in.patient_id, []).append(check_in.id)

    def unindex(self, check_in: CheckIn) -> None:
        if self.appt_index.get(check_in.appointment_id) == check_in.id:
            del self.appt_index[check_in.appointment_id]
        ids = self.patient_index.get(check_in.patient_id)
        if ids is not None:
            self.patient_index[check_in.patient_id] = [i for i in ids if i != check_in.id]
            if not self.patient_index[check_in.patient_id]:
                del self.patient_index[check_in.patient_id]

    def remove_from_queues(self, check_in_id: int) -> None:
        for queue in (self.walk_in_queue, self.scheduled_queue):
            while check_in_id in queue:
                queue.remove(check_in_id)

    def replace_with(self, other: "QueueState") -> None:
        """Adopt every field of ``other`` in place."""

        self.check_ins = other.check_ins
        self.walk_in_queue = other.walk_in_queue
        self.scheduled_queue = other.scheduled_queue
        self.walk_in_appointment_ids = other.walk_in_appointment_ids
        self.appt_index = other.appt_index
        self.patient_index = other.patient_index
        self.next_check_in_id = other.next_check_in_id


def reindex(check_ins: Mapping[int, CheckIn]) -> Tuple[Dict[int, int], Dict[int, List[int]]]:
    """Derive ``(appt_index, patient_index)`` from the active check-ins alone."""

    appt_index: Dict[int, int] = {}
    patient_index: Dict[int, List[int]] = {}
    for check_in_id in sorted(check_ins):
        check_in = check_ins[check_in_id]
        appt_index[check_in.appointment_id] = check_in_id
        patient_index.setdefault(check_in.patient_id, []).append(check_in_id)
    return appt_index, patient_index


def dedupe(ids: Iterable[int]) -> List[int]:
    seen: Set[int] = set()
    ordered: List[int] = []
    for check_in_id in ids:
        if check_in_id not in seen:
            seen.add(check_in_id)
            ordered.append(check_in_id)
    return ordered

"""Check-in queue engine for the clinic front desk.

Turns "a patient has arrived" into an entry on one of two waiting queues:
walk-ins ordered by priority and scheduled arrivals ordered by appointment
start. Calling the next patient or completing a check-in removes it from the
live state and appends a copy to the history archive.

Appointment status changes that accompany a check-in are best effort. When
the appointment gateway fails, the check-in change still stands and the
returned :class:`CheckInResult` carries a :class:`SyncWarning` so callers can
see that the two records have diverged.

The service is not thread-safe; callers serialize access to it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple

from . import timeutil
from .config import Settings, load_settings
from .errors import CheckInConflict, CheckInNotFound, InvalidCheckInArgument
from .history import HistoryArchive, HistoryRecord
from .models import CheckIn, clean_text, require_positive_id, require_priority
from .ordering import QueueOrdering, ScheduledOrdering, WalkInOrdering, ordered_insert
from .snapshot import SnapshotStore
from .state import QueueState, dedupe, reindex

if TYPE_CHECKING:
    from connector import AppointmentGateway, ClinicDirectory

logger = logging.getLogger(__name__)

APPOINTMENT_SCHEDULED = "Scheduled"
APPOINTMENT_CHECKED_IN = "Checked In"
APPOINTMENT_COMPLETED = "Completed"

WARNING_APPOINTMENT_STATUS = "appointment_status"
WARNING_HISTORY_ARCHIVE = "history_archive"


@dataclass(frozen=True)
class SyncWarning:
    """A best-effort step that failed after the check-in change was committed."""

    kind: str
    reference_id: int
    message: str


@dataclass(frozen=True)
class CheckInResult:
    check_in: CheckIn
    warnings: Tuple[SyncWarning, ...] = ()

    @property
    def diverged(self) -> bool:
        return bool(self.warnings)


class CheckInService:
    """Owns the queue state and every mutation applied to it."""

    def __init__(
        self,
        appointments: AppointmentGateway,
        directory: ClinicDirectory,
        *,
        store: Optional[SnapshotStore] = None,
        archive: Optional[HistoryArchive] = None,
        clock: Optional[Callable[[], str]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        if appointments is None or directory is None:
            raise ValueError("appointments and directory are required")
        if store is None or archive is None:
            settings = settings or load_settings()
        self._appointments = appointments
        self._directory = directory
        self._store = store or SnapshotStore(settings.snapshot_file)
        self._archive = archive or HistoryArchive(settings.history_file)
        self._clock = clock or timeutil.now_string_seconds
        self._walk_in_ordering = WalkInOrdering()
        self._scheduled_ordering = ScheduledOrdering(self._appointment_start)
        self._state = QueueState()
        self._adopt(self._store.load())

    @property
    def state(self) -> QueueState:
        """The live aggregate. Read it, do not mutate it."""

        return self._state

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def check_in_scheduled(
        self, appointment_id: int, desk: Optional[str] = None, notes: Optional[str] = None
    ) -> CheckInResult:
        """Check a patient in against an existing ``Scheduled`` appointment."""

        require_positive_id(appointment_id, "appointmentId")
        appointment = self._appointments.get_appointment(appointment_id)
        if appointment is None:
            raise InvalidCheckInArgument(f"Appointment {appointment_id} does not exist")
        status = (appointment.status or "").strip()
        if status.lower() != APPOINTMENT_SCHEDULED.lower():
            raise CheckInConflict(
                "Cannot check in. Appointment status must be "
                f"'{APPOINTMENT_SCHEDULED}', found: '{appointment.status}'"
            )
        self._ensure_single_active(appointment_id)
        desk = clean_text(desk, "Desk")
        notes = clean_text(notes, "Notes")

        check_in = CheckIn.create(
            self._state.allocate_id(),
            appointment_id,
            appointment.patient_id,
            walk_in=False,
            desk=desk,
            notes=notes,
            clock=self._clock,
        )
        self._state.check_ins[check_in.id] = check_in
        self._state.index_new(check_in)
        warnings = self._sync_appointment(appointment_id, APPOINTMENT_CHECKED_IN)
        ordered_insert(
            self._state.scheduled_queue, check_in, self._scheduled_ordering, self._state.check_ins
        )
        self._save()
        logger.info(
            "Checked in patient %s for appointment %s as check-in %s",
            check_in.patient_id,
            appointment_id,
            check_in.id,
        )
        return CheckInResult(check_in, tuple(warnings))

    def check_in_walk_in(
        self,
        patient_id: int,
        doctor_id: int,
        date: str,
        time: str,
        duration: str,
        priority: int = 0,
        desk: Optional[str] = None,
        reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> CheckInResult:
        """Create an appointment on the spot and queue the patient as a walk-in."""

        require_positive_id(patient_id, "patientId")
        require_positive_id(doctor_id, "doctorId")
        if not self._directory.patient_exists(patient_id):
            raise InvalidCheckInArgument(f"Patient {patient_id} does not exist")
        if not self._directory.doctor_exists(doctor_id):
            raise InvalidCheckInArgument(f"Doctor {doctor_id} does not exist")
        require_priority(priority)
        desk = clean_text(desk, "Desk")
        notes = clean_text(notes, "Notes")

        try:
            appointment = self._appointments.create_appointment(
                patient_id,
                doctor_id,
                date,
                time,
                duration,
                APPOINTMENT_SCHEDULED,
                None,
                None,
                reason,
                notes,
            )
        except ValueError as exc:
            raise InvalidCheckInArgument(f"Could not create walk-in appointment: {exc}") from exc

        self._ensure_single_active(appointment.id)
        check_in = CheckIn.create(
            self._state.allocate_id(),
            appointment.id,
            patient_id,
            walk_in=True,
            priority=priority,
            desk=desk,
            notes=notes,
            clock=self._clock,
        )
        self._state.check_ins[check_in.id] = check_in
        self._state.walk_in_appointment_ids.add(appointment.id)
        self._state.index_new(check_in)
        warnings = self._sync_appointment(appointment.id, APPOINTMENT_CHECKED_IN)
        ordered_insert(
            self._state.walk_in_queue, check_in, self._walk_in_ordering, self._state.check_ins
        )
        self._save()
        logger.info(
            "Walk-in check-in %s for patient %s (priority %d, appointment %s)",
            check_in.id,
            patient_id,
            priority,
            appointment.id,
        )
        return CheckInResult(check_in, tuple(warnings))

    # ------------------------------------------------------------------
    # Queue operations
    # ------------------------------------------------------------------

    def call_next_walk_in(self) -> Optional[CheckInResult]:
        """Complete and return the front walk-in, or ``None`` if nobody is waiting."""

        return self._call_next(self._walk_in_ordering)

    def call_next_scheduled(self) -> Optional[CheckInResult]:
        """Complete and return the front scheduled arrival, or ``None``."""

        return self._call_next(self._scheduled_ordering)

    def _call_next(self, ordering: QueueOrdering) -> Optional[CheckInResult]:
        queue = self._queue_for(ordering)
        discarded = 0
        while queue:
            check_in_id = queue.pop(0)
            check_in = self._state.check_ins.get(check_in_id)
            if check_in is None or not ordering.accepts(check_in):
                logger.debug("Discarding id %s from the %s queue", check_in_id, ordering.name)
                discarded += 1
                continue
            return self._complete_and_archive(check_in)
        if discarded:
            self._save()
        return None

    # ------------------------------------------------------------------
    # Manual state changes
    # ------------------------------------------------------------------

    def mark_completed(self, check_in_id: int) -> CheckInResult:
        """Complete a check-in wherever it sits and move it to the archive."""

        return self._complete_and_archive(self._require(check_in_id))

    def mark_called(self, check_in_id: int) -> CheckInResult:
        """Calling a patient in completes their check-in; same as :meth:`mark_completed`."""

        return self._complete_and_archive(self._require(check_in_id))

    def update_walk_in_priority(self, check_in_id: int, new_priority: int) -> CheckIn:
        check_in = self._require(check_in_id)
        if not check_in.walk_in:
            raise CheckInConflict("Not a walk-in check-in")
        if not check_in.is_waiting:
            raise CheckInConflict("Priority can only be changed while status is CheckedIn")
        require_priority(new_priority)

        self._state.remove_from_queues(check_in.id)
        check_in.set_priority_and_touch(new_priority)
        ordered_insert(
            self._state.walk_in_queue, check_in, self._walk_in_ordering, self._state.check_ins
        )
        self._save()
        logger.info("Walk-in %s priority set to %d", check_in.id, new_priority)
        return check_in

    def update_desk(self, check_in_id: int, desk: Optional[str]) -> CheckIn:
        check_in = self._require(check_in_id)
        check_in.set_desk(desk)
        self._save()
        return check_in

    def update_notes(self, check_in_id: int, notes: Optional[str]) -> CheckIn:
        check_in = self._require(check_in_id)
        check_in.set_notes(notes)
        self._save()
        return check_in

    def delete_check_in(self, check_in_id: int) -> bool:
        """Drop a check-in from every live structure without archiving it."""

        check_in = self._state.check_ins.pop(check_in_id, None)
        if check_in is None:
            return False
        self._state.remove_from_queues(check_in_id)
        self._state.unindex(check_in)
        if check_in.walk_in:
            self._state.walk_in_appointment_ids.discard(check_in.appointment_id)
        self._save()
        logger.debug("Deleted check-in %s", check_in_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_id(self, check_in_id: int) -> CheckIn:
        return self._require(check_in_id)

    def find_by_appointment_id(self, appointment_id: int) -> Optional[CheckIn]:
        require_positive_id(appointment_id, "appointmentId")
        check_in_id = self._state.appt_index.get(appointment_id)
        if check_in_id is None:
            return None
        return self._state.check_ins.get(check_in_id)

    def list_by_patient(self, patient_id: int) -> List[CheckIn]:
        require_positive_id(patient_id, "patientId")
        ids = self._state.patient_index.get(patient_id, [])
        return [self._state.check_ins[i] for i in ids if i in self._state.check_ins]

    def list_walk_ins_by_patient(self, patient_id: int) -> List[CheckIn]:
        return [c for c in self.list_by_patient(patient_id) if c.walk_in]

    def list_walk_in_queue(self) -> List[CheckIn]:
        return self._resolve(self._state.walk_in_queue)

    def list_scheduled_queue(self) -> List[CheckIn]:
        return self._resolve(self._state.scheduled_queue)

    def list_all(self) -> List[CheckIn]:
        return list(self._state.check_ins.values())

    def list_all_walk_ins(self) -> List[CheckIn]:
        return [c for c in self._state.check_ins.values() if c.walk_in]

    def list_all_scheduled(self) -> List[CheckIn]:
        return [c for c in self._state.check_ins.values() if not c.walk_in]

    def is_walk_in_appointment(self, appointment_id: int) -> bool:
        require_positive_id(appointment_id, "appointmentId")
        return appointment_id in self._state.walk_in_appointment_ids

    def list_history(self, patient_id: Optional[int] = None) -> List[HistoryRecord]:
        records = self._archive.load_all()
        if patient_id is None:
            return records
        return [record for record in records if record.patient_id == patient_id]

    def clear_history(self) -> None:
        self._archive.clear_all()

    # ------------------------------------------------------------------
    # Persistence hooks
    # ------------------------------------------------------------------

    def save_snapshot(self) -> None:
        self._save()

    def reload(self) -> None:
        """Discard in-memory changes and re-read the snapshot."""

        self._adopt(self._store.load())

    def revalidate_indexes(self) -> bool:
        """Rebuild both indexes; return ``True`` if the live ones had drifted."""

        appt_index, patient_index = reindex(self._state.check_ins)
        drifted = (
            appt_index != self._state.appt_index or patient_index != self._state.patient_index
        )
        if drifted:
            logger.warning("Check-in indexes were inconsistent and have been rebuilt")
        self._state.appt_index = appt_index
        self._state.patient_index = patient_index
        return drifted

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _adopt(self, loaded: QueueState) -> None:
        for check_in in loaded.check_ins.values():
            check_in.clock = self._clock
        self._state.replace_with(loaded)
        self._state.appt_index, self._state.patient_index = reindex(self._state.check_ins)
        self._sanitize_queues()

    def _sanitize_queues(self) -> None:
        state = self._state
        for ordering in (self._walk_in_ordering, self._scheduled_ordering):
            queue = self._queue_for(ordering)
            kept = [
                state.check_ins[i]
                for i in dedupe(queue)
                if i in state.check_ins and ordering.accepts(state.check_ins[i])
            ]
            if len(kept) != len(queue):
                logger.warning(
                    "Dropped %d invalid or duplicate ids from the %s queue",
                    len(queue) - len(kept),
                    ordering.name,
                )
            queue[:] = [check_in.id for check_in in ordering.sort(kept)]

        highest = max(state.check_ins, default=0)
        if state.next_check_in_id <= highest:
            logger.warning("Check-in id counter behind stored ids; advancing to %d", highest + 1)
            state.next_check_in_id = highest + 1

    def _queue_for(self, ordering: QueueOrdering) -> List[int]:
        if ordering.walk_in:
            return self._state.walk_in_queue
        return self._state.scheduled_queue

    def _resolve(self, ids: List[int]) -> List[CheckIn]:
        return [self._state.check_ins[i] for i in ids if i in self._state.check_ins]

    def _appointment_start(self, appointment_id: int) -> Optional[str]:
        appointment = self._appointments.get_appointment(appointment_id)
        if appointment is None:
            return None
        return f"{appointment.date} {appointment.time}"

    def _require(self, check_in_id: int) -> CheckIn:
        require_positive_id(check_in_id, "checkInId")
        check_in = self._state.check_ins.get(check_in_id)
        if check_in is None:
            raise CheckInNotFound(f"CheckIn {check_in_id} not found")
        return check_in

    def _ensure_single_active(self, appointment_id: int) -> None:
        indexed = self._state.appt_index.get(appointment_id)
        if indexed is not None:
            existing = self._state.check_ins.get(indexed)
            if existing is not None and not existing.is_completed:
                raise CheckInConflict(
                    f"Active check-in already exists for appointment {appointment_id}"
                )
        for check_in in self._state.check_ins.values():
            if check_in.appointment_id == appointment_id and not check_in.is_completed:
                logger.warning(
                    "Appointment index missed active check-in %s for appointment %s",
                    check_in.id,
                    appointment_id,
                )
                raise CheckInConflict(
                    f"Active check-in already exists for appointment {appointment_id}"
                )

    def _complete_and_archive(self, check_in: CheckIn) -> CheckInResult:
        self._state.remove_from_queues(check_in.id)
        warnings: List[SyncWarning] = []
        if not check_in.is_completed:
            check_in.mark_completed()
            warnings.extend(self._sync_appointment(check_in.appointment_id, APPOINTMENT_COMPLETED))
            self._save()
        warnings.extend(self._archive_and_delete(check_in))
        logger.info("Check-in %s completed and archived", check_in.id)
        return CheckInResult(check_in, tuple(warnings))

    def _archive_and_delete(self, check_in: CheckIn) -> List[SyncWarning]:
        warnings: List[SyncWarning] = []
        try:
            appointment = self._appointments.get_appointment(check_in.appointment_id)
            doctor_id = appointment.doctor_id if appointment is not None else 0
            self._archive.append(HistoryRecord.from_check_in(check_in, doctor_id))
        except Exception as exc:  # noqa: BLE001 - archiving must not block completion
            logger.exception("Failed to archive check-in %s", check_in.id)
            warnings.append(
                SyncWarning(WARNING_HISTORY_ARCHIVE, check_in.id, f"History append failed: {exc}")
            )
        self.delete_check_in(check_in.id)
        return warnings

    def _sync_appointment(self, appointment_id: int, status: str) -> List[SyncWarning]:
        try:
            outcome = self._appointments.set_appointment_status(appointment_id, status)
        except Exception as exc:  # noqa: BLE001 - appointment sync is best effort
            message = f"Failed to update appointment {appointment_id} status -> '{status}': {exc}"
        else:
            if outcome is not False:
                return []
            message = f"Appointment {appointment_id} rejected status '{status}'"
        logger.warning("%s", message)
        return [SyncWarning(WARNING_APPOINTMENT_STATUS, appointment_id, message)]

    def _save(self) -> None:
        self._store.save(self._state)


__all__ = [
    "CheckInResult",
    "CheckInService",
    "SyncWarning",
]

"""Check-in entity tracked by the front-desk queue engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from . import timeutil
from .errors import InvalidCheckInArgument

STATUS_CHECKED_IN = "CheckedIn"
STATUS_COMPLETED = "Completed"
VALID_STATUSES = (STATUS_CHECKED_IN, STATUS_COMPLETED)

FIELD_DELIMITER = "|"


def canonical_status(value: Optional[str]) -> str:
    """Return the canonical spelling of ``value`` or raise for unknown statuses."""

    if value is None or not str(value).strip():
        raise InvalidCheckInArgument("Status cannot be blank")
    text = str(value).strip()
    for status in VALID_STATUSES:
        if status.lower() == text.lower():
            return status
    raise InvalidCheckInArgument(f"Invalid status: {value!r}")


def require_positive_id(value: Any, label: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCheckInArgument(f"{label} must be an integer")
    if value <= 0:
        raise InvalidCheckInArgument(f"{label} must be positive")
    return value


def require_priority(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidCheckInArgument("Priority must be an integer")
    if value < 0:
        raise InvalidCheckInArgument("Priority must be >= 0")
    return value


def clean_text(value: Optional[str], label: str) -> Optional[str]:
    """Trim optional free text; blank becomes ``None``."""

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    if FIELD_DELIMITER in text:
        raise InvalidCheckInArgument(f"{label} cannot contain '{FIELD_DELIMITER}'")
    if "\n" in text or "\r" in text:
        raise InvalidCheckInArgument(f"{label} cannot contain line breaks")
    return text


@dataclass
class CheckIn:
    """A patient's arrival at the desk, linked to exactly one appointment."""

    id: int
    appointment_id: int
    patient_id: int
    checked_in_at: str
    created_at: str
    updated_at: str
    status: str = STATUS_CHECKED_IN
    walk_in: bool = False
    priority: int = 0
    desk: Optional[str] = None
    notes: Optional[str] = None
    completed_at: Optional[str] = None
    clock: Callable[[], str] = field(default=timeutil.now_string_seconds, repr=False, compare=False)

    def __post_init__(self) -> None:
        require_positive_id(self.id, "checkInId")
        require_positive_id(self.appointment_id, "appointmentId")
        require_positive_id(self.patient_id, "patientId")
        self.status = canonical_status(self.status)
        self.walk_in = bool(self.walk_in)
        self.priority = require_priority(self.priority)
        self.desk = clean_text(self.desk, "Desk")
        self.notes = clean_text(self.notes, "Notes")
        if not self.checked_in_at:
            raise InvalidCheckInArgument("checkedInAt is required")

    @classmethod
    def create(
        cls,
        check_in_id: int,
        appointment_id: int,
        patient_id: int,
        *,
        walk_in: bool,
        priority: int = 0,
        desk: Optional[str] = None,
        notes: Optional[str] = None,
        clock: Callable[[], str] = timeutil.now_string_seconds,
    ) -> "CheckIn":
        """Build a fresh ``CheckedIn`` entry stamped with the current time."""

        stamp = clock()
        return cls(
            id=check_in_id,
            appointment_id=appointment_id,
            patient_id=patient_id,
            checked_in_at=stamp,
            created_at=stamp,
            updated_at=stamp,
            status=STATUS_CHECKED_IN,
            walk_in=walk_in,
            priority=priority,
            desk=desk,
            notes=notes,
            clock=clock,
        )

    @property
    def is_waiting(self) -> bool:
        return self.status == STATUS_CHECKED_IN

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    def touch(self) -> None:
        self.updated_at = self.clock()

    def set_status_and_touch(self, status: str) -> None:
        self.status = canonical_status(status)
        self.touch()

    def set_priority_and_touch(self, priority: int) -> None:
        self.priority = require_priority(priority)
        self.touch()

    def set_desk(self, desk: Optional[str]) -> None:
        self.desk = clean_text(desk, "Desk")
        self.touch()

    def set_notes(self, notes: Optional[str]) -> None:
        self.notes = clean_text(notes, "Notes")
        self.touch()

    def mark_completed(self) -> None:
        self.set_status_and_touch(STATUS_COMPLETED)
        self.completed_at = self.updated_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "appointment_id": self.appointment_id,
            "patient_id": self.patient_id,
            "status": self.status,
            "walk_in": self.walk_in,
            "priority": self.priority,
            "desk": self.desk,
            "notes": self.notes,
            "checked_in_at": self.checked_in_at,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(
        cls, payload: Mapping[str, Any], *, clock: Callable[[], str] = timeutil.now_string_seconds
    ) -> "CheckIn":
        """Restore a stored entry, keeping its timestamps untouched."""

        try:
            created_at = str(payload["created_at"])
            updated_at = payload.get("updated_at") or created_at
            return cls(
                id=payload["id"],
                appointment_id=payload["appointment_id"],
                patient_id=payload["patient_id"],
                status=payload["status"],
                walk_in=payload.get("walk_in", False),
                priority=payload.get("priority", 0),
                desk=payload.get("desk"),
                notes=payload.get("notes"),
                checked_in_at=str(payload["checked_in_at"]),
                completed_at=payload.get("completed_at"),
                created_at=created_at,
                updated_at=str(updated_at),
                clock=clock,
            )
        except KeyError as exc:
            raise InvalidCheckInArgument(f"Missing check-in field {exc.args[0]!r}") from exc


__all__ = [
    "CheckIn",
    "FIELD_DELIMITER",
    "STATUS_CHECKED_IN",
    "STATUS_COMPLETED",
    "VALID_STATUSES",
    "canonical_status",
    "clean_text",
    "require_positive_id",
    "require_priority",
]

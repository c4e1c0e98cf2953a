"""Append-only archive of completed check-ins.

Each completed check-in becomes one ``|``-delimited line::

    checkInId|appointmentId|patientId|doctorId|status|walkIn|priority|desk|notes|checkedInAt|completedAt|updatedAt|createdAt

Files written before the lifecycle was simplified carry 17 fields, with
``calledAt``, ``startedAt`` before ``completedAt`` and ``cancelledAt``,
``noShowAt`` after it. Those extra timestamps are read and dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from . import timeutil
from .models import FIELD_DELIMITER, CheckIn

logger = logging.getLogger(__name__)

FIELD_COUNT = 13
LEGACY_FIELD_COUNT = 17


def _nz(value: Optional[str]) -> str:
    return "" if value is None else value


def _empty_to_none(value: str) -> Optional[str]:
    return value if value else None


def _sanitize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.replace(FIELD_DELIMITER, "/").replace("\r", " ").replace("\n", " ")


@dataclass(frozen=True)
class HistoryRecord:
    """Immutable copy of a completed check-in."""

    check_in_id: int
    appointment_id: int
    patient_id: int
    doctor_id: int
    status: str
    walk_in: bool
    priority: int
    desk: Optional[str]
    notes: Optional[str]
    checked_in_at: Optional[str]
    completed_at: Optional[str]
    updated_at: Optional[str]
    created_at: Optional[str]

    @classmethod
    def from_check_in(cls, check_in: CheckIn, doctor_id: int) -> "HistoryRecord":
        return cls(
            check_in_id=check_in.id,
            appointment_id=check_in.appointment_id,
            patient_id=check_in.patient_id,
            doctor_id=doctor_id,
            status=check_in.status,
            walk_in=check_in.walk_in,
            priority=check_in.priority,
            desk=_sanitize(check_in.desk),
            notes=_sanitize(check_in.notes),
            checked_in_at=check_in.checked_in_at,
            completed_at=check_in.completed_at,
            updated_at=check_in.updated_at,
            created_at=check_in.created_at,
        )

    def serialize(self) -> str:
        fields = [
            str(self.check_in_id),
            str(self.appointment_id),
            str(self.patient_id),
            str(self.doctor_id),
            _nz(self.status),
            "1" if self.walk_in else "0",
            str(self.priority),
            _nz(self.desk),
            _nz(self.notes),
            _nz(self.checked_in_at),
            _nz(self.completed_at),
            _nz(self.updated_at),
            _nz(self.created_at),
        ]
        return FIELD_DELIMITER.join(fields)

    @classmethod
    def parse(cls, line: str) -> "HistoryRecord":
        parts = line.split(FIELD_DELIMITER)
        if len(parts) == FIELD_COUNT:
            completed_at, updated_at, created_at = parts[10], parts[11], parts[12]
        elif len(parts) == LEGACY_FIELD_COUNT:
            # calledAt, startedAt, cancelledAt and noShowAt are no longer tracked.
            completed_at, updated_at, created_at = parts[12], parts[15], parts[16]
        else:
            raise ValueError(f"Bad history record field count: {len(parts)}")

        try:
            return cls(
                check_in_id=int(parts[0]),
                appointment_id=int(parts[1]),
                patient_id=int(parts[2]),
                doctor_id=int(parts[3]),
                status=parts[4],
                walk_in=parts[5] == "1",
                priority=int(parts[6]),
                desk=_empty_to_none(parts[7]),
                notes=_empty_to_none(parts[8]),
                checked_in_at=_empty_to_none(parts[9]),
                completed_at=_empty_to_none(completed_at),
                updated_at=_empty_to_none(updated_at),
                created_at=_empty_to_none(created_at),
            )
        except ValueError as exc:
            raise ValueError(f"Malformed history row: {exc}") from exc


def _recency_key(record: HistoryRecord) -> datetime:
    if record.checked_in_at:
        try:
            return timeutil.parse_datetime(record.checked_in_at)
        except ValueError:
            pass
    return datetime.min


class HistoryArchive:
    """Flat-file store of :class:`HistoryRecord` lines."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: HistoryRecord) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{record.serialize()}\n")
        logger.debug("Archived check-in %s to %s", record.check_in_id, self._path)

    def load_all(self) -> List[HistoryRecord]:
        """Return every readable record, most recent check-in first."""

        if not self._path.exists():
            return []
        records: List[HistoryRecord] = []
        with self._path.open("rb") as handle:
            for line_number, raw_line in enumerate(handle, start=1):
                try:
                    line = raw_line.decode("utf-8").strip()
                    if not line:
                        continue
                    records.append(HistoryRecord.parse(line))
                except ValueError as exc:
                    logger.warning(
                        "Skipping history line %d in %s: %s", line_number, self._path, exc
                    )
        records.sort(key=_recency_key, reverse=True)
        return records

    def clear_all(self) -> None:
        """Delete the archive file. This cannot be undone."""

        if self._path.exists():
            self._path.unlink()
            logger.info("Cleared check-in history at %s", self._path)

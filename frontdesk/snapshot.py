"""Whole-state snapshot persistence for the check-in queues."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .errors import SnapshotSaveError
from .models import CheckIn
from .state import QueueState

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def _int_list(values: Any, label: str) -> List[int]:
    if not isinstance(values, list):
        raise ValueError(f"{label} must be a list")
    result: List[int] = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{label} must contain integers")
        result.append(value)
    return result


def state_to_payload(state: QueueState) -> Dict[str, Any]:
    return {
        "version": SNAPSHOT_VERSION,
        "next_check_in_id": state.next_check_in_id,
        "check_ins": [state.check_ins[key].to_dict() for key in sorted(state.check_ins)],
        "walk_in_queue": list(state.walk_in_queue),
        "scheduled_queue": list(state.scheduled_queue),
        "walk_in_appointment_ids": sorted(state.walk_in_appointment_ids),
        "appt_index": {str(key): value for key, value in state.appt_index.items()},
        "patient_index": {str(key): list(value) for key, value in state.patient_index.items()},
    }


def state_from_payload(payload: Mapping[str, Any]) -> QueueState:
    """Rebuild a :class:`QueueState`; raises ``ValueError`` on any malformed part."""

    if not isinstance(payload, Mapping):
        raise ValueError("Snapshot must be a JSON object")
    version = payload.get("version")
    if version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version {version!r}")

    entries = payload.get("check_ins", [])
    if not isinstance(entries, list):
        raise ValueError("check_ins must be a list")
    check_ins: Dict[int, CheckIn] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            raise ValueError("Each check-in must be a JSON object")
        check_in = CheckIn.from_dict(entry)
        check_ins[check_in.id] = check_in

    next_id = payload.get("next_check_in_id", 1)
    if isinstance(next_id, bool) or not isinstance(next_id, int) or next_id < 1:
        raise ValueError("next_check_in_id must be a positive integer")

    appt_index = payload.get("appt_index", {})
    patient_index = payload.get("patient_index", {})
    if not isinstance(appt_index, Mapping) or not isinstance(patient_index, Mapping):
        raise ValueError("Indexes must be JSON objects")

    return QueueState(
        check_ins=check_ins,
        walk_in_queue=_int_list(payload.get("walk_in_queue", []), "walk_in_queue"),
        scheduled_queue=_int_list(payload.get("scheduled_queue", []), "scheduled_queue"),
        walk_in_appointment_ids=set(
            _int_list(payload.get("walk_in_appointment_ids", []), "walk_in_appointment_ids")
        ),
        appt_index={int(key): int(value) for key, value in appt_index.items()},
        patient_index={
            int(key): _int_list(value, "patient_index") for key, value in patient_index.items()
        },
        next_check_in_id=next_id,
    )


class SnapshotStore:
    """Reads and atomically replaces the queue snapshot file."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def temp_path(self) -> Path:
        return self._path.with_name(f"{self._path.name}.tmp")

    def load(self) -> QueueState:
        """Return the stored state, or an empty one if it is missing or unreadable."""

        if not self._path.exists():
            return QueueState()
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
            state = state_from_payload(payload)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning(
                "Check-in snapshot %s could not be read (%s); starting empty", self._path, exc
            )
            return QueueState()
        logger.debug("Loaded %d active check-ins from %s", len(state.check_ins), self._path)
        return state

    def save(self, state: QueueState) -> None:
        """Write ``state`` beside the target, then move it into place."""

        if state is None:
            raise ValueError("state must be provided")
        temp_path = self.temp_path
        try:
            serialized = json.dumps(state_to_payload(state), indent=2)
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with temp_path.open("w", encoding="utf-8") as handle:
                handle.write(f"{serialized}\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self._path)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Failed to save check-in snapshot to %s: %s", self._path, exc)
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Could not remove temporary snapshot %s", temp_path)
            raise SnapshotSaveError(f"Failed to save check-in state to {self._path}") from exc

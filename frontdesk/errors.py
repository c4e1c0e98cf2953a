"""Exceptions raised by the check-in engine."""
from __future__ import annotations


class CheckInError(RuntimeError):
    """Base exception for check-in engine errors."""


class InvalidCheckInArgument(CheckInError, ValueError):
    """Raised when an id, priority or text field is malformed or missing."""


class CheckInNotFound(CheckInError, LookupError):
    """Raised when no active check-in exists for the given id."""


class CheckInConflict(CheckInError):
    """Raised when the current state does not allow the requested change."""


class SnapshotSaveError(CheckInError):
    """Raised when the queue snapshot could not be written to disk."""


__all__ = [
    "CheckInConflict",
    "CheckInError",
    "CheckInNotFound",
    "InvalidCheckInArgument",
    "SnapshotSaveError",
]

"""Check-in queue and lifecycle engine for the clinic front desk."""

from .errors import (
    CheckInConflict,
    CheckInError,
    CheckInNotFound,
    InvalidCheckInArgument,
    SnapshotSaveError,
)
from .history import HistoryArchive, HistoryRecord
from .models import STATUS_CHECKED_IN, STATUS_COMPLETED, CheckIn
from .service import CheckInResult, CheckInService, SyncWarning
from .snapshot import SnapshotStore
from .state import QueueState, reindex

__all__ = [
    "CheckIn",
    "CheckInConflict",
    "CheckInError",
    "CheckInNotFound",
    "CheckInResult",
    "CheckInService",
    "HistoryArchive",
    "HistoryRecord",
    "InvalidCheckInArgument",
    "QueueState",
    "STATUS_CHECKED_IN",
    "STATUS_COMPLETED",
    "SnapshotSaveError",
    "SnapshotStore",
    "SyncWarning",
    "reindex",
]

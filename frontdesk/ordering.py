"""Queue ordering strategies and the shared ordered-insert primitive.

Each waiting queue keeps a total order without re-sorting on every insert:
a new id is placed by scanning from the front and stopping at the first
entry it should precede. The walk-in and scheduled queues differ only in the
comparator they plug into that scan.
"""
from __future__ import annotations

import logging
from functools import cmp_to_key
from typing import Callable, Iterable, List, MutableMapping, Optional

from . import timeutil
from .models import CheckIn

logger = logging.getLogger(__name__)

StartResolver = Callable[[int], Optional[str]]


def _compare_checked_in_at(left: CheckIn, right: CheckIn) -> int:
    try:
        return timeutil.compare_datetimes(left.checked_in_at, right.checked_in_at)
    except ValueError:
        return 0


class QueueOrdering:
    """Strategy deciding membership and order for one waiting queue."""

    name = "queue"
    walk_in = False

    def accepts(self, check_in: CheckIn) -> bool:
        return check_in.walk_in == self.walk_in and check_in.is_waiting

    def compare(self, left: CheckIn, right: CheckIn) -> int:
        """Negative when ``left`` should be served before ``right``."""

        raise NotImplementedError

    def sort(self, check_ins: Iterable[CheckIn]) -> List[CheckIn]:
        return sorted(check_ins, key=cmp_to_key(self.compare))


class WalkInOrdering(QueueOrdering):
    """Highest priority first, then earliest arrival."""

    name = "walk-in"
    walk_in = True

    def compare(self, left: CheckIn, right: CheckIn) -> int:
        if left.priority != right.priority:
            return -1 if left.priority > right.priority else 1
        return _compare_checked_in_at(left, right)


class ScheduledOrdering(QueueOrdering):
    """Earliest appointment start first, then earliest arrival.

    ``start_of`` maps an appointment id to its ``dd-MM-yyyy HH:mm`` start, or
    ``None`` when the appointment cannot be resolved. Unresolved entries
    compare as equal so the insertion scan moves past them.
    """

    name = "scheduled"
    walk_in = False

    def __init__(self, start_of: StartResolver) -> None:
        self._start_of = start_of

    def compare(self, left: CheckIn, right: CheckIn) -> int:
        left_start = self._start_of(left.appointment_id)
        right_start = self._start_of(right.appointment_id)
        if left_start is None or right_start is None:
            return 0
        try:
            cmp = timeutil.compare_datetimes(left_start, right_start)
        except ValueError:
            return 0
        if cmp != 0:
            return cmp
        return _compare_checked_in_at(left, right)


def ordered_insert(
    queue: List[int],
    check_in: CheckIn,
    ordering: QueueOrdering,
    check_ins: MutableMapping[int, CheckIn],
) -> Optional[int]:
    """Insert ``check_in.id`` into ``queue`` at its ordered position.

    Ids no longer present in ``check_ins`` are dropped from ``queue`` while
    scanning. Returns the insertion index, or ``None`` when the entry does not
    belong in this queue.
    """

    if not ordering.accepts(check_in):
        logger.debug(
            "Check-in %s not eligible for the %s queue", check_in.id, ordering.name
        )
        return None

    index = 0
    while index < len(queue):
        existing = check_ins.get(queue[index])
        if existing is None:
            logger.debug("Pruning stale id %s from the %s queue", queue[index], ordering.name)
            del queue[index]
            continue
        if ordering.compare(check_in, existing) < 0:
            break
        index += 1

    queue.insert(index, check_in.id)
    logger.debug("Queued check-in %s at position %d (%s)", check_in.id, index, ordering.name)
    return index

import unittest

from frontdesk import CheckIn
from frontdesk.ordering import ScheduledOrdering, WalkInOrdering, ordered_insert


def make_check_in(check_in_id: int, *, walk_in: bool, priority: int = 0, at: str, appointment_id=None):
    return CheckIn.create(
        check_in_id,
        appointment_id or check_in_id,
        1,
        walk_in=walk_in,
        priority=priority,
        clock=lambda: at,
    )


class WalkInOrderingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ordering = WalkInOrdering()

    def test_higher_priority_first_then_earlier_arrival(self) -> None:
        check_ins = {
            1: make_check_in(1, walk_in=True, priority=1, at="01-01-2026 09:00:00"),
            2: make_check_in(2, walk_in=True, priority=5, at="01-01-2026 09:05:00"),
            3: make_check_in(3, walk_in=True, priority=5, at="01-01-2026 09:01:00"),
        }
        queue = []
        for check_in in check_ins.values():
            ordered_insert(queue, check_in, self.ordering, check_ins)

        self.assertEqual(queue, [3, 2, 1])

    def test_equal_entries_keep_insertion_order(self) -> None:
        check_ins = {
            1: make_check_in(1, walk_in=True, at="01-01-2026 09:00:00"),
            2: make_check_in(2, walk_in=True, at="01-01-2026 09:00:00"),
        }
        queue = [1]

        index = ordered_insert(queue, check_ins[2], self.ordering, check_ins)

        self.assertEqual(index, 1)
        self.assertEqual(queue, [1, 2])

    def test_scan_prunes_stale_ids(self) -> None:
        check_ins = {
            1: make_check_in(1, walk_in=True, priority=1, at="01-01-2026 09:00:00"),
            2: make_check_in(2, walk_in=True, priority=0, at="01-01-2026 09:01:00"),
        }
        queue = [99, 1]

        ordered_insert(queue, check_ins[2], self.ordering, check_ins)

        self.assertEqual(queue, [1, 2])

    def test_ineligible_entries_are_not_inserted(self) -> None:
        scheduled = make_check_in(1, walk_in=False, at="01-01-2026 09:00:00")
        completed = make_check_in(2, walk_in=True, at="01-01-2026 09:00:00")
        completed.mark_completed()
        queue = []

        self.assertIsNone(ordered_insert(queue, scheduled, self.ordering, {1: scheduled}))
        self.assertIsNone(ordered_insert(queue, completed, self.ordering, {2: completed}))
        self.assertEqual(queue, [])

    def test_unparseable_arrival_compares_equal(self) -> None:
        left = make_check_in(1, walk_in=True, at="not a time")
        right = make_check_in(2, walk_in=True, at="01-01-2026 09:00:00")

        self.assertEqual(self.ordering.compare(left, right), 0)


class ScheduledOrderingTests(unittest.TestCase):
    def test_earlier_appointment_start_first(self) -> None:
        starts = {10: "01-01-2026 11:00", 11: "01-01-2026 09:30"}
        ordering = ScheduledOrdering(starts.get)
        check_ins = {
            1: make_check_in(1, walk_in=False, at="01-01-2026 08:50:00", appointment_id=10),
            2: make_check_in(2, walk_in=False, at="01-01-2026 08:55:00", appointment_id=11),
        }
        queue = []
        for check_in in check_ins.values():
            ordered_insert(queue, check_in, ordering, check_ins)

        self.assertEqual(queue, [2, 1])

    def test_same_start_falls_back_to_arrival(self) -> None:
        ordering = ScheduledOrdering(lambda appointment_id: "01-01-2026 09:00")
        early = make_check_in(1, walk_in=False, at="01-01-2026 08:40:00", appointment_id=10)
        late = make_check_in(2, walk_in=False, at="01-01-2026 08:45:00", appointment_id=11)

        self.assertEqual(ordering.compare(early, late), -1)
        self.assertEqual([c.id for c in ordering.sort([late, early])], [1, 2])

    def test_unresolved_appointment_compares_equal(self) -> None:
        ordering = ScheduledOrdering(lambda appointment_id: None)
        first = make_check_in(1, walk_in=False, at="01-01-2026 08:40:00")
        second = make_check_in(2, walk_in=False, at="01-01-2026 08:30:00")

        self.assertEqual(ordering.compare(first, second), 0)


if __name__ == "__main__":
    unittest.main()

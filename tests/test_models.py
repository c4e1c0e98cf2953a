import unittest

from frontdesk import CheckIn, InvalidCheckInArgument, STATUS_CHECKED_IN, STATUS_COMPLETED
from frontdesk.models import canonical_status


def fixed_clock(*stamps: str):
    values = iter(stamps)
    return lambda: next(values)


class CheckInModelTests(unittest.TestCase):
    def test_create_stamps_all_timestamps(self) -> None:
        check_in = CheckIn.create(
            1, 10, 20, walk_in=True, priority=3, clock=fixed_clock("01-01-2026 09:00:00")
        )

        self.assertEqual(check_in.status, STATUS_CHECKED_IN)
        self.assertEqual(check_in.checked_in_at, "01-01-2026 09:00:00")
        self.assertEqual(check_in.created_at, check_in.updated_at)
        self.assertIsNone(check_in.completed_at)
        self.assertTrue(check_in.is_waiting)

    def test_mark_completed_sets_completed_at_from_update(self) -> None:
        check_in = CheckIn.create(
            1,
            10,
            20,
            walk_in=False,
            clock=fixed_clock("01-01-2026 09:00:00", "01-01-2026 09:15:00"),
        )

        check_in.mark_completed()

        self.assertEqual(check_in.status, STATUS_COMPLETED)
        self.assertEqual(check_in.completed_at, "01-01-2026 09:15:00")
        self.assertEqual(check_in.updated_at, "01-01-2026 09:15:00")
        self.assertEqual(check_in.checked_in_at, "01-01-2026 09:00:00")

    def test_rejects_non_positive_ids_and_negative_priority(self) -> None:
        with self.assertRaises(InvalidCheckInArgument):
            CheckIn.create(0, 10, 20, walk_in=False)
        with self.assertRaises(InvalidCheckInArgument):
            CheckIn.create(1, True, 20, walk_in=False)
        with self.assertRaises(InvalidCheckInArgument):
            CheckIn.create(1, 10, 20, walk_in=True, priority=-1)

    def test_desk_and_notes_are_trimmed_and_blank_becomes_none(self) -> None:
        check_in = CheckIn.create(1, 10, 20, walk_in=False, desk="  A1 ", notes="   ")

        self.assertEqual(check_in.desk, "A1")
        self.assertIsNone(check_in.notes)

    def test_field_delimiter_is_rejected(self) -> None:
        check_in = CheckIn.create(1, 10, 20, walk_in=False)

        with self.assertRaises(InvalidCheckInArgument):
            check_in.set_notes("left|right")

    def test_line_breaks_are_rejected(self) -> None:
        check_in = CheckIn.create(1, 10, 20, walk_in=False)

        for value in ("line one\nline two", "line one\rline two"):
            with self.subTest(value=value):
                with self.assertRaises(InvalidCheckInArgument):
                    check_in.set_notes(value)
        with self.assertRaises(InvalidCheckInArgument):
            CheckIn.create(2, 11, 20, walk_in=False, desk="A\nB")

    def test_status_spelling_is_canonicalised(self) -> None:
        self.assertEqual(canonical_status(" completed "), STATUS_COMPLETED)
        with self.assertRaises(InvalidCheckInArgument):
            canonical_status("Called")

    def test_dict_round_trip_preserves_timestamps(self) -> None:
        original = CheckIn.create(
            4, 10, 20, walk_in=True, priority=2, desk="B", clock=fixed_clock("02-02-2026 10:00:00")
        )

        restored = CheckIn.from_dict(original.to_dict())

        self.assertEqual(restored, original)

    def test_from_dict_reports_missing_fields(self) -> None:
        payload = CheckIn.create(1, 10, 20, walk_in=False).to_dict()
        del payload["checked_in_at"]

        with self.assertRaises(InvalidCheckInArgument):
            CheckIn.from_dict(payload)


if __name__ == "__main__":
    unittest.main()

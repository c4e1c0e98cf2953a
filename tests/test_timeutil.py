import unittest
from datetime import date, datetime, time

from frontdesk import timeutil


class SanitizeTests(unittest.TestCase):
    def test_folds_lookalike_characters(self) -> None:
        raw = "\u200b01\u201301\u20132026\u00a009\uff1a30"
        self.assertEqual(timeutil.sanitize_for_parsing(raw), "01-01-2026 09:30")

    def test_collapses_whitespace_and_drops_letters(self) -> None:
        self.assertEqual(timeutil.sanitize_for_parsing("  09 :  30 h "), "09 : 30")

    def test_non_ascii_digits_become_ascii(self) -> None:
        self.assertEqual(timeutil.sanitize_for_parsing("\u0660\u0669:\u0663\u0660"), "09:30")


class ParseTests(unittest.TestCase):
    def test_parse_date(self) -> None:
        self.assertEqual(timeutil.parse_date("05-03-2026"), date(2026, 3, 5))

    def test_parse_date_rejects_iso_format(self) -> None:
        with self.assertRaises(ValueError):
            timeutil.parse_date("2026-03-05")

    def test_parse_time_with_and_without_seconds(self) -> None:
        self.assertEqual(timeutil.parse_time("09:30"), time(9, 30))
        self.assertEqual(timeutil.parse_time("09:30:15"), time(9, 30, 15))

    def test_parse_datetime_accepts_both_layouts(self) -> None:
        self.assertEqual(
            timeutil.parse_datetime("05-03-2026 09:30"), datetime(2026, 3, 5, 9, 30)
        )
        self.assertEqual(
            timeutil.parse_datetime("05-03-2026 09:30:45"), datetime(2026, 3, 5, 9, 30, 45)
        )

    def test_blank_values_are_rejected(self) -> None:
        for parser in (timeutil.parse_date, timeutil.parse_time, timeutil.parse_datetime):
            with self.subTest(parser=parser.__name__):
                with self.assertRaises(ValueError):
                    parser("  ")

    def test_normalize_keeps_seconds_only_when_given(self) -> None:
        self.assertEqual(timeutil.normalize_time("9:05"), "09:05")
        self.assertEqual(timeutil.normalize_time("9:05:07"), "09:05:07")
        self.assertEqual(timeutil.normalize_date("5-3-2026"), "05-03-2026")


class DurationTests(unittest.TestCase):
    def test_parse_duration(self) -> None:
        self.assertEqual(timeutil.parse_duration_to_minutes("01:15"), 75)
        self.assertEqual(timeutil.parse_duration_to_minutes("0:30"), 30)

    def test_parse_duration_rejects_zero_and_bad_minutes(self) -> None:
        for value in ("00:00", "01:75", "90", ""):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    timeutil.parse_duration_to_minutes(value)

    def test_format_duration(self) -> None:
        self.assertEqual(timeutil.format_duration_from_minutes(75), "01:15")
        with self.assertRaises(ValueError):
            timeutil.format_duration_from_minutes(0)

    def test_compute_end_and_overlap(self) -> None:
        start = datetime(2026, 1, 1, 9, 0)
        end = timeutil.compute_end(start, 30)
        self.assertEqual(end, datetime(2026, 1, 1, 9, 30))
        self.assertTrue(timeutil.overlaps(start, end, datetime(2026, 1, 1, 9, 15), end))
        self.assertFalse(
            timeutil.overlaps(start, end, end, datetime(2026, 1, 1, 10, 0))
        )
        with self.assertRaises(ValueError):
            timeutil.overlaps(end, start, start, end)


class CompareTests(unittest.TestCase):
    def test_compare_mixed_precision(self) -> None:
        self.assertEqual(
            timeutil.compare_datetimes("01-01-2026 09:00", "01-01-2026 09:00:01"), -1
        )
        self.assertEqual(
            timeutil.compare_datetimes("02-01-2026 09:00:00", "01-01-2026 23:59:59"), 1
        )
        self.assertEqual(
            timeutil.compare_datetimes("01-01-2026 09:00:00", "01-01-2026 09:00"), 0
        )

    def test_compare_raises_on_garbage(self) -> None:
        with self.assertRaises(ValueError):
            timeutil.compare_datetimes("soon", "01-01-2026 09:00")

    def test_now_string_has_seconds(self) -> None:
        stamp = timeutil.now_string_seconds()
        self.assertEqual(
            timeutil.format_datetime_seconds(timeutil.parse_datetime(stamp)), stamp
        )


if __name__ == "__main__":
    unittest.main()

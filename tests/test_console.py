import io
import tempfile
import unittest

from console.main import main
from frontdesk.config import load_settings


class ConsoleTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.settings = load_settings({"FRONTDESK_DATA_DIR": self._tmp.name})

    def run_command(self, *argv: str):
        out, err = io.StringIO(), io.StringIO()
        code = main(list(argv), settings=self.settings, out=out, err=err)
        return code, out.getvalue(), err.getvalue()

    def test_scheduled_visit_from_booking_to_history(self) -> None:
        self.assertEqual(self.run_command("add-patient", "Ada")[0], 0)
        self.assertEqual(self.run_command("add-doctor", "Hopper")[0], 0)
        code, out, _ = self.run_command("book", "1", "1", "05-01-2026", "10:00")
        self.assertEqual(code, 0)
        self.assertIn("Appointment 1 booked for 05-01-2026 10:00", out)

        code, out, _ = self.run_command("check-in", "1", "--desk", "A")
        self.assertEqual(code, 0)
        self.assertIn("#1 appt=1 patient=1 scheduled CheckedIn", out)

        _, out, _ = self.run_command("queue")
        self.assertIn("Scheduled queue (1)", out)
        self.assertIn("Walk-in queue (0)", out)

        _, out, _ = self.run_command("appointments")
        self.assertIn("[Checked In]", out)

        code, out, _ = self.run_command("call-next", "scheduled")
        self.assertEqual(code, 0)
        self.assertIn("Completed", out)

        _, out, _ = self.run_command("history", "--patient-id", "1")
        self.assertIn("#1 appt=1 patient=1 doctor=1 scheduled", out)

    def test_walk_in_priority_changes(self) -> None:
        self.run_command("add-patient", "Ada")
        self.run_command("add-doctor", "Hopper")

        code, out, _ = self.run_command("walk-in", "1", "1", "05-01-2026", "09:00", "--priority", "2")
        self.assertEqual(code, 0)
        self.assertIn("walk-in p2", out)

        _, out, _ = self.run_command("priority", "1", "6")
        self.assertIn("walk-in p6", out)

        _, out, _ = self.run_command("call-next", "walk-in")
        self.assertIn("#1", out)
        _, out, _ = self.run_command("call-next", "walk-in")
        self.assertIn("No walk-in patients waiting.", out)

    def test_errors_are_reported_with_exit_code(self) -> None:
        code, _, err = self.run_command("complete", "99")
        self.assertEqual(code, 1)
        self.assertIn("error: CheckIn 99 not found", err)

        code, _, err = self.run_command("check-in", "5")
        self.assertEqual(code, 1)
        self.assertIn("Appointment 5 does not exist", err)

    def test_clear_history_needs_confirmation(self) -> None:
        code, _, err = self.run_command("clear-history")
        self.assertEqual(code, 1)
        self.assertIn("--yes", err)

        code, out, _ = self.run_command("clear-history", "--yes")
        self.assertEqual(code, 0)
        self.assertIn("History cleared.", out)

    def test_delete_reports_missing_entries(self) -> None:
        _, out, _ = self.run_command("delete", "3")
        self.assertIn("Check-in 3 not found", out)


if __name__ == "__main__":
    unittest.main()

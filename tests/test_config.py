import unittest
from pathlib import Path

from frontdesk.config import load_settings


class LoadSettingsTests(unittest.TestCase):
    def test_defaults_live_under_data_dir(self) -> None:
        settings = load_settings({"FRONTDESK_DATA_DIR": "/srv/desk"})

        self.assertEqual(settings.data_dir, Path("/srv/desk"))
        self.assertEqual(settings.snapshot_file, Path("/srv/desk/checkins.json"))
        self.assertEqual(settings.history_file, Path("/srv/desk/checkins_history.txt"))
        self.assertEqual(settings.records_file, Path("/srv/desk/records.json"))
        self.assertEqual(settings.log_level, "INFO")

    def test_individual_overrides(self) -> None:
        settings = load_settings(
            {
                "FRONTDESK_DATA_DIR": "/srv/desk",
                "FRONTDESK_HISTORY_FILE": "/var/log/history.txt",
                "FRONTDESK_LOG_LEVEL": "debug",
            }
        )

        self.assertEqual(settings.history_file, Path("/var/log/history.txt"))
        self.assertEqual(settings.snapshot_file, Path("/srv/desk/checkins.json"))
        self.assertEqual(settings.log_level, "DEBUG")

    def test_default_data_dir_is_project_local(self) -> None:
        settings = load_settings({})

        self.assertEqual(settings.data_dir.name, "data")


if __name__ == "__main__":
    unittest.main()

import unittest

import logging_utils
from gameplay_models import HitRating


class TestLoggingUtils(unittest.TestCase):
    def setUp(self):
        previous = logging_utils.get_log_level()
        self.addCleanup(logging_utils.set_log_level, previous)

    def test_fields_are_formatted_for_engine_values(self):
        text = logging_utils.format_fields({"rating": HitRating.GREAT, "delta_ms": 40.04, "cell": 5, "target": None})

        self.assertEqual(text, "rating=great delta_ms=40.0 cell=5")

    def test_log_event_carries_tag_and_fields(self):
        logging_utils.set_log_level("DEBUG")

        with self.assertLogs(logging_utils.LOGGER_NAME, level="DEBUG") as captured:
            logging_utils.log_event("debug", "Judge", "Judgement", kind="hit", delta_ms=12.5)

        record = captured.records[0]
        self.assertEqual(record.tag, "Judge")
        self.assertEqual(record.levelname, "DEBUG")
        self.assertEqual(record.getMessage(), "Judgement | kind=hit delta_ms=12.5")

    def test_disabled_level_is_dropped(self):
        logging_utils.set_log_level("WARNING")

        with self.assertLogs(logging_utils.LOGGER_NAME, level="WARNING") as captured:
            logging_utils.log_event("INFO", "Session", "Session started")
            logging_utils.log_event("WARNING", "Session", "Late frame")

        self.assertEqual([record.getMessage() for record in captured.records], ["Late frame"])

    def test_set_log_level_accepts_lowercase(self):
        logging_utils.set_log_level("error")

        self.assertEqual(logging_utils.get_log_level(), "ERROR")


if __name__ == "__main__":
    unittest.main()

from __future__ import annotations

import unittest
from datetime import date, datetime

from core.helpers.date_time_helper import format_display_date, format_request_date, parse_request_date


class TestRequestDates(unittest.TestCase):
    def test_parse_accepts_dates_and_iso_strings(self) -> None:
        self.assertEqual(parse_request_date("2024-05-01"), date(2024, 5, 1))
        self.assertEqual(parse_request_date("2024-05-01T00:00:00.000Z"), date(2024, 5, 1))
        self.assertEqual(parse_request_date(datetime(2024, 5, 1, 13, 0)), date(2024, 5, 1))
        self.assertEqual(parse_request_date(date(2024, 5, 1)), date(2024, 5, 1))

    def test_parse_rejects_garbage(self) -> None:
        self.assertIsNone(parse_request_date(""))
        self.assertIsNone(parse_request_date(None))
        self.assertIsNone(parse_request_date("yesterday"))

    def test_formats(self) -> None:
        self.assertEqual(format_request_date(date(2024, 5, 1)), "2024-05-01")
        self.assertEqual(format_request_date(None), "")
        self.assertEqual(format_display_date(date(2024, 5, 1)), "May 1, 2024")
        self.assertEqual(format_display_date(None), "")


if __name__ == "__main__":
    unittest.main()

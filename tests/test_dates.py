import unittest

from leadsync.dates import parse_received_date
from leadsync.models import DateParts


class ReceivedDateTests(unittest.TestCase):
    def test_pm_hour_is_shifted_to_24_hour_clock(self) -> None:
        self.assertEqual(
            parse_received_date("Feb 05, 2026 1:02 pm PST"),
            DateParts(year=2026, month=2, day=5, hour=13, minute=2),
        )

    def test_am_hour_is_kept(self) -> None:
        parsed = parse_received_date("Feb 05, 2026 11:04 am PST")
        self.assertIsNotNone(parsed)
        assert parsed is not None
        self.assertEqual((parsed.hour, parsed.minute), (11, 4))

    def test_midnight_and_noon(self) -> None:
        midnight = parse_received_date("Mar 10, 2025 12:15 am")
        noon = parse_received_date("Mar 10, 2025 12:15 pm")
        assert midnight is not None and noon is not None
        self.assertEqual(midnight.hour, 0)
        self.assertEqual(noon.hour, 12)

    def test_hours_past_twelve_are_folded_back(self) -> None:
        folded = parse_received_date("Feb 05, 2026 14:30 am")
        with_pm = parse_received_date("Feb 05, 2026 13:02 pm")
        assert folded is not None and with_pm is not None
        self.assertEqual(folded.hour, 2)
        self.assertEqual(with_pm.hour, 1)

    def test_meridiem_is_case_insensitive(self) -> None:
        parsed = parse_received_date("Dec 31, 2024 3:45 PM")
        assert parsed is not None
        self.assertEqual((parsed.month, parsed.hour), (12, 15))

    def test_unknown_or_full_month_names_are_rejected(self) -> None:
        self.assertIsNone(parse_received_date("February 05, 2026 1:02 pm"))
        self.assertIsNone(parse_received_date("feb 05, 2026 1:02 pm"))

    def test_unmatched_text_returns_none(self) -> None:
        self.assertIsNone(parse_received_date(""))
        self.assertIsNone(parse_received_date("yesterday at noon"))
        self.assertIsNone(parse_received_date(None))  # type: ignore[arg-type]

    def test_display_format(self) -> None:
        self.assertEqual(DateParts(2026, 2, 5, 13, 2).display(), "2/5/2026 13:02")


if __name__ == "__main__":
    unittest.main()

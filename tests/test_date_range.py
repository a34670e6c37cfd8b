import unittest
from datetime import date, datetime

from openfx.errors import InvalidDateError
from openfx.utils.date_range import DateRange, daily_range, parse_date


class DateRangeTests(unittest.TestCase):
    def test_daily_range_is_half_open(self) -> None:
        days = list(daily_range("2021-01-30", "2021-02-02"))
        self.assertEqual(days, [date(2021, 1, 30), date(2021, 1, 31), date(2021, 2, 1)])

    def test_empty_range(self) -> None:
        self.assertEqual(list(daily_range("2021-01-01", "2021-01-01")), [])
        self.assertEqual(len(DateRange(date(2021, 1, 1), date(2021, 1, 1))), 0)

    def test_date_range_iterates(self) -> None:
        window = DateRange(date(2024, 2, 28), date(2024, 3, 1))
        self.assertEqual(len(window), 2)
        self.assertEqual(list(window), [date(2024, 2, 28), date(2024, 2, 29)])

    def test_parse_date(self) -> None:
        self.assertEqual(parse_date(" 2021-01-05 "), date(2021, 1, 5))
        self.assertEqual(parse_date(date(2021, 1, 5)), date(2021, 1, 5))
        self.assertEqual(parse_date(datetime(2021, 1, 5, 13, 30)), date(2021, 1, 5))

    def test_invalid_input(self) -> None:
        for value in ("2021-02-30", "05/01/2021", "", "yesterday"):
            with self.assertRaises(InvalidDateError):
                parse_date(value)
        with self.assertRaises(InvalidDateError):
            parse_date(20210101)  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            list(daily_range("2021-02-01", "2021-01-01"))


if __name__ == "__main__":
    unittest.main()

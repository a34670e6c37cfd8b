"""Date helpers for historical and time-series requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator

from openfx.errors import InvalidDateError

ISO_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class DateRange:
    """Half-open daily window ``[start, end)``."""

    start: date
    end: date

    def __len__(self) -> int:
        return max((self.end - self.start).days, 0)

    def __iter__(self) -> Iterator[date]:
        return daily_range(self.start, self.end)


def parse_date(value: str | date) -> date:
    """Parse an ISO ``YYYY-MM-DD`` string (or pass a :class:`date` through).

    Anything that is not a real calendar date raises :class:`InvalidDateError`;
    nothing is coerced.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"Expected an ISO date string, got {type(value).__name__}")
    try:
        return datetime.strptime(value.strip(), ISO_FORMAT).date()
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date '{value}', expected YYYY-MM-DD") from exc


def daily_range(start: str | date, end: str | date) -> Iterator[date]:
    """Yield each calendar day from ``start`` up to but excluding ``end``."""

    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date > end_date:
        raise InvalidDateError("start date must not be after end date")

    current = start_date
    while current < end_date:
        yield current
        current += timedelta(days=1)


__all__ = ["DateRange", "ISO_FORMAT", "daily_range", "parse_date"]

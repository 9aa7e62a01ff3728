from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..core.constants import DATE_FORMAT
from ..core.exceptions import ValidationError


def parse_iso_date(value: str | date) -> date:
    """Parse YYYY-MM-DD string into date."""
    if isinstance(value, datetime):
        raise ValidationError("Date must be a calendar day without time of day")
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime((value or "").strip(), DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def format_iso_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def today_local() -> date:
    """Current local date.

    Note: Wrapped so tests can patch/mock easier.
    """
    return date.today()


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValidationError("End date must be >= start date")

    @classmethod
    def parse(cls, start: str | date, end: str | date) -> "DateRange":
        return cls(parse_iso_date(start), parse_iso_date(end))

    @classmethod
    def trailing(cls, end: date, days: int) -> "DateRange":
        """The `days` calendar days ending at `end` (inclusive)."""
        if days < 1:
            raise ValidationError("Range must cover at least one day")
        try:
            start = end - timedelta(days=days - 1)
        except OverflowError:
            raise ValidationError(f"Range of {days} days is out of bounds")
        return cls(start, end)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end


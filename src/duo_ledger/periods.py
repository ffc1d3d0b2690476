"""Month and year period arithmetic for ledger queries."""

import calendar
from datetime import date, datetime, time

from pydantic import BaseModel

from .exceptions import InvalidPeriodError

MIN_YEAR = 2000
MAX_YEAR = 2100


class Period(BaseModel):
    """A calendar month, inclusive of both endpoints."""

    year: int
    month: int
    start: datetime
    end: datetime

    @property
    def name(self) -> str:
        return f"{calendar.month_name[self.month]} {self.year}"

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def contains(self, moment: datetime) -> bool:
        """Check whether a moment falls within this month."""
        return self.start <= moment.replace(tzinfo=None) <= self.end


def month_period(year: int, month: int) -> Period:
    """Build the period for a given year and month."""
    last_day = calendar.monthrange(year, month)[1]
    return Period(
        year=year,
        month=month,
        start=datetime.combine(date(year, month, 1), time.min),
        end=datetime.combine(date(year, month, last_day), time.max),
    )


def month_range(month_input: str | None = None, today: date | None = None) -> Period:
    """
    Resolve a month argument to a period.

    Args:
        month_input: "YYYY-MM", "MM" (current year), or None (current month)
        today: Reference date, defaults to date.today()

    Returns:
        The matching period

    Raises:
        InvalidPeriodError: If the input is not a valid month
    """
    today = today or date.today()
    if not month_input:
        return month_period(today.year, today.month)

    value = month_input.strip()
    if "-" in value:
        try:
            parsed = datetime.strptime(value, "%Y-%m")
        except ValueError as e:
            raise InvalidPeriodError(
                f"Invalid month: {value}. Use YYYY-MM (e.g. 2025-12)"
            ) from e
        return month_period(parsed.year, parsed.month)

    try:
        month = int(value)
    except ValueError:
        month = 0
    if not 1 <= month <= 12:
        raise InvalidPeriodError(f"Invalid month: {value}. Must be between 1 and 12.")
    return month_period(today.year, month)


def parse_year(year_input: str | int | None = None, today: date | None = None) -> int:
    """Resolve a year argument, defaulting to the current year."""
    if year_input is None or year_input == "":
        return (today or date.today()).year

    try:
        year = int(year_input)
    except ValueError as e:
        raise InvalidPeriodError(f"Invalid year: {year_input}") from e

    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidPeriodError(
            f"Invalid year: {year_input}. Must be between {MIN_YEAR} and {MAX_YEAR}."
        )
    return year


def year_month_ranges(
    year_input: str | int | None = None, today: date | None = None
) -> list[Period]:
    """Return the twelve month periods of a year."""
    year = parse_year(year_input, today)
    return [month_period(year, month) for month in range(1, 13)]

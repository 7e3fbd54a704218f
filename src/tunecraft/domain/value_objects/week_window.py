"""Calendar windows used by the aggregation and affinity computations."""

import calendar
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta

# The last instant counted as part of a day. Events stamped later in the final
# second of Sunday fall outside the window.
END_OF_DAY = time(23, 59, 59)


@dataclass(frozen=True)
class WeekWindow:
    """A Monday-to-Sunday calendar week.

    Bounds are inclusive: ``[start_date 00:00:00, end_date 23:59:59]`` in UTC.
    """

    start_date: date
    end_date: date

    def __post_init__(self) -> None:
        if self.start_date.weekday() != 0:
            raise ValueError(f"Week must start on a Monday, got {self.start_date}")
        if self.end_date != self.start_date + timedelta(days=6):
            raise ValueError(f"Week must end on the Sunday after {self.start_date}")

    @classmethod
    def containing(cls, day: date | datetime) -> "WeekWindow":
        """Return the week containing ``day``.

        Week start is the most recent Monday on or before the day, week end the
        nearest Sunday on or after it.
        """
        if isinstance(day, datetime):
            day = to_utc(day).date()
        start = day - timedelta(days=day.weekday())
        return cls(start_date=start, end_date=start + timedelta(days=6))

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.start_date, time.min, tzinfo=UTC)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.end_date, END_OF_DAY, tzinfo=UTC)

    def contains(self, moment: datetime) -> bool:
        """Check whether a timestamp falls inside the window."""
        return self.starts_at <= to_utc(moment) <= self.ends_at

    def __str__(self) -> str:
        return f"{self.start_date.isoformat()}..{self.end_date.isoformat()}"


def to_utc(moment: datetime) -> datetime:
    """Normalize a datetime to UTC, treating naive values as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


# Hey future me - "3 months ago" is CALENDAR months, not 90 days. May 31 minus 3 months is
# Feb 28 (or 29), the day gets clamped to the length of the target month.
def subtract_months(moment: datetime, months: int) -> datetime:
    """Return ``moment`` shifted back by a number of calendar months."""
    if months < 0:
        raise ValueError("months must be non-negative")
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)

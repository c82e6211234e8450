"""Due-date arithmetic for recurring expenses."""

import calendar
from datetime import date, timedelta
from typing import Optional

from .schemas import Frequency


def _add_months(current: date, months: int, day_of_month: Optional[int]) -> date:
    month_index = current.month - 1 + months
    year = current.year + month_index // 12
    month = month_index % 12 + 1
    day = day_of_month or current.day
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def _next_weekday(current: date, day_of_week: int) -> date:
    """First date after `current` on `day_of_week` (0 = Sunday ... 6 = Saturday)."""
    target = (day_of_week - 1) % 7  # date.weekday() counts from Monday
    return current + timedelta(days=(target - current.weekday()) % 7 or 7)


def next_due_date(
    current: date,
    frequency,
    day_of_month: Optional[int] = None,
    day_of_week: Optional[int] = None,
) -> date:
    """
    Next occurrence after `current`.

    Weekly steps land on `day_of_week` when it is set, otherwise 7 days on.
    Month-based steps clamp to the last day of the target month, so a
    schedule on the 31st falls on Feb 28 (or 29) and returns to the 31st
    in March when `day_of_month` is set. Unknown frequencies step monthly.
    """
    try:
        frequency = Frequency(frequency)
    except ValueError:
        frequency = Frequency.MONTHLY

    if frequency == Frequency.DAILY:
        return current + timedelta(days=1)
    if frequency == Frequency.WEEKLY:
        if day_of_week is not None:
            return _next_weekday(current, day_of_week)
        return current + timedelta(days=7)
    if frequency == Frequency.YEARLY:
        return _add_months(current, 12, day_of_month)
    return _add_months(current, 1, day_of_month)


def advance_schedule(
    current_due: date,
    frequency,
    day_of_month: Optional[int] = None,
    end_date: Optional[date] = None,
    day_of_week: Optional[int] = None,
) -> tuple[date, bool]:
    """Return (next due date, still active); a schedule ends once it passes end_date."""
    upcoming = next_due_date(current_due, frequency, day_of_month, day_of_week)
    is_active = end_date is None or upcoming <= end_date
    return upcoming, is_active

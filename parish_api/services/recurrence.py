"""Expansion of recurring event configurations into concrete start times."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

DEFAULT_MAX_OCCURRENCES = 52


def _add_months(value: datetime, months: int) -> datetime:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _sunday_based_weekday(value: datetime) -> int:
    # Python counts Monday as 0; weekday lists use 0 for Sunday.
    return (value.weekday() + 1) % 7


def _next_custom_day(current: datetime, days: set[int]) -> Optional[datetime]:
    candidate = current + timedelta(days=1)
    for _ in range(7):
        if _sunday_based_weekday(candidate) in days:
            return candidate
        candidate += timedelta(days=1)
    return None


def generate_recurrence_dates(
    start: datetime,
    recurrence_type: str,
    interval: int = 1,
    days: Optional[Iterable[int]] = None,
    end_date: Optional[date] = None,
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> list[datetime]:
    """Return ``start`` followed by each later occurrence, up to ``max_occurrences`` in total.

    Generation stops at the first occurrence falling after ``end_date``.
    ``CUSTOM`` walks forward day by day to the next weekday in ``days``.
    """
    interval = max(interval, 1)
    weekdays = set(days or ())
    dates = [start]
    current = start

    while len(dates) < max_occurrences:
        if recurrence_type == "DAILY":
            candidate = current + timedelta(days=interval)
        elif recurrence_type == "WEEKLY":
            candidate = current + timedelta(weeks=interval)
        elif recurrence_type == "MONTHLY":
            # Computed from the series start so a 31st does not drift to the 28th.
            candidate = _add_months(start, interval * len(dates))
        elif recurrence_type == "CUSTOM":
            if not weekdays:
                break
            candidate = _next_custom_day(current, weekdays)
            if candidate is None:
                break
        else:
            raise ValueError(f"Unsupported recurrence type: {recurrence_type}")

        if end_date is not None and candidate.date() > end_date:
            break
        dates.append(candidate)
        current = candidate

    return dates


def event_duration(start: datetime, end: Optional[datetime]) -> Optional[timedelta]:
    if end is None:
        return None
    return end - start


def apply_duration(new_start: datetime, duration: Optional[timedelta]) -> Optional[datetime]:
    if duration is None:
        return None
    return new_start + duration

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable

from .project_models import ScheduledProject, TimeWindow

# Anchor dates equal to `now` are "today": neither overdue nor upcoming.


def week_window(now: date, week_start: int = calendar.SUNDAY) -> TimeWindow:
    """Week containing `now`; `week_start` uses calendar weekday numbers (MONDAY=0 .. SUNDAY=6)."""
    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be a weekday number 0-6, got {week_start}")
    today = _as_date(now)
    start = today - timedelta(days=(today.weekday() - week_start) % 7)
    return TimeWindow(start=start, end=start + timedelta(days=6))


def month_window(now: date) -> TimeWindow:
    today = _as_date(now)
    last_day = calendar.monthrange(today.year, today.month)[1]
    return TimeWindow(start=today.replace(day=1), end=today.replace(day=last_day))


def this_week(
    projects: Iterable[ScheduledProject], now: date, week_start: int = calendar.SUNDAY
) -> list[ScheduledProject]:
    window = week_window(now, week_start)
    return [project for project in projects if window.contains(project.anchor_date)]


def this_month(projects: Iterable[ScheduledProject], now: date) -> list[ScheduledProject]:
    window = month_window(now)
    return [project for project in projects if window.contains(project.anchor_date)]


def overdue(projects: Iterable[ScheduledProject], now: date) -> list[ScheduledProject]:
    """Projects whose event date has passed and that are not completed."""
    today = _as_date(now)
    return [
        project
        for project in projects
        if project.anchor_date < today and project.status != "completed"
    ]


def upcoming(
    projects: Iterable[ScheduledProject], now: date, horizon_days: int = 30
) -> list[ScheduledProject]:
    """Projects whose event date lies strictly between `now` and `now + horizon_days`."""
    today = _as_date(now)
    horizon = today + timedelta(days=horizon_days)
    return [project for project in projects if today < project.anchor_date < horizon]


REPORT_RANGES = ("this_week", "this_month", "last_3_months", "this_year")


def report_window(now: date, range_name: str, week_start: int = calendar.SUNDAY) -> TimeWindow:
    """
    Window behind a report date-range selector.

    `last_3_months` runs from the same day three calendar months back up to `now`.
    """

    today = _as_date(now)
    if range_name == "this_week":
        return week_window(today, week_start)
    if range_name == "this_month":
        return month_window(today)
    if range_name == "last_3_months":
        return TimeWindow(start=shift_months(today, -3), end=today)
    if range_name == "this_year":
        return TimeWindow(start=date(today.year, 1, 1), end=date(today.year, 12, 31))
    raise ValueError(f"Unknown report range '{range_name}' (known: {list(REPORT_RANGES)})")


def in_report_range(
    projects: Iterable[ScheduledProject], now: date, range_name: str, week_start: int = calendar.SUNDAY
) -> list[ScheduledProject]:
    window = report_window(now, range_name, week_start)
    return [project for project in projects if window.contains(project.anchor_date)]


def shift_months(day: date, months: int) -> date:
    """Move `day` by whole calendar months, clamping to the last day of the target month."""
    index = day.year * 12 + day.month - 1 + months
    year, month = divmod(index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last_day))


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Iterable, Mapping

from .project_models import PhaseDateRange, ScheduledProject
from .scheduling import schedule_bounds


def progress(ranges: Mapping[str, PhaseDateRange], now: date) -> int:
    """
    Linear time-elapsed percentage between the earliest phase start and latest phase end.

    Returns 0 before the schedule (or when there are no ranges), 100 after it.
    A single-day schedule counts as complete on its day.
    """

    bounds = schedule_bounds(ranges)
    if bounds is None:
        return 0

    today = now.date() if isinstance(now, datetime) else now
    start, end = bounds
    if today < start:
        return 0
    if today > end or start == end:
        return 100

    elapsed = (today - start).days
    total = (end - start).days
    return _round_half_up(100 * elapsed / total)


def average_progress(projects: Iterable[ScheduledProject], now: date) -> int:
    """Mean progress over the given projects, rounded to a whole percent (0 when empty)."""
    values = [progress(project.phases, now) for project in projects]
    if not values:
        return 0
    return _round_half_up(sum(values) / len(values))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

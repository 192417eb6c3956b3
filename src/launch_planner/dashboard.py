from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from .classify import overdue, shift_months, this_month, this_week, upcoming
from .progress import average_progress
from .project_models import PROJECT_STATUSES, EngineSettings, ScheduledProject

RECENT_LIMIT = 5
TREND_MONTHS = 6


@dataclass(frozen=True)
class MonthlyCount:
    """Projects created in one calendar month; `month` is the first day of that month."""

    month: date
    count: int


@dataclass
class DashboardSummary:
    """Aggregated figures shown on the dashboard and report pages."""

    total: int
    by_status: dict[str, int]
    this_week: int
    this_month: int
    overdue: int
    upcoming: int
    average_progress: int
    total_budget: float = 0.0
    recent_projects: list[ScheduledProject] = field(default_factory=list)
    upcoming_events: list[ScheduledProject] = field(default_factory=list)
    creation_trend: list[MonthlyCount] = field(default_factory=list)


def status_counts(projects: Iterable[ScheduledProject]) -> dict[str, int]:
    counts = {status: 0 for status in PROJECT_STATUSES}
    for project in projects:
        counts[project.status] = counts.get(project.status, 0) + 1
    return counts


def build_dashboard(
    projects: Iterable[ScheduledProject], now: date, settings: EngineSettings | None = None
) -> DashboardSummary:
    settings = settings or EngineSettings()
    items = list(projects)
    soon = upcoming(items, now, settings.upcoming_horizon_days)

    # Projects without a creation date sort last.
    recent = sorted(
        items,
        key=lambda p: (p.created_at is not None, p.created_at or date.min),
        reverse=True,
    )[:RECENT_LIMIT]

    return DashboardSummary(
        total=len(items),
        by_status=status_counts(items),
        this_week=len(this_week(items, now, settings.week_start)),
        this_month=len(this_month(items, now)),
        overdue=len(overdue(items, now)),
        upcoming=len(soon),
        average_progress=average_progress(items, now),
        recent_projects=recent,
        upcoming_events=sorted(soon, key=lambda p: p.anchor_date)[:RECENT_LIMIT],
        total_budget=total_budget(items),
        creation_trend=monthly_creation_trend(items, now),
    )


def total_budget(projects: Iterable[ScheduledProject]) -> float:
    return sum(project.budget or 0.0 for project in projects)


def monthly_creation_trend(
    projects: Iterable[ScheduledProject], now: date, months: int = TREND_MONTHS
) -> list[MonthlyCount]:
    """Creation counts for the `months` calendar months ending with the month of `now`, oldest first."""
    if months < 1:
        raise ValueError(f"months must be positive, got {months}")

    current = date(now.year, now.month, 1)
    buckets = {shift_months(current, -offset): 0 for offset in range(months - 1, -1, -1)}
    for project in projects:
        if project.created_at is None:
            continue
        month = project.created_at.replace(day=1)
        if month in buckets:
            buckets[month] += 1
    return [MonthlyCount(month=month, count=count) for month, count in buckets.items()]


def search_projects(projects: Iterable[ScheduledProject], query: str) -> list[ScheduledProject]:
    """Case-insensitive match on name, client and description; a blank query matches everything."""
    needle = query.strip().lower()
    if not needle:
        return list(projects)
    return [
        project
        for project in projects
        if any(needle in (text or "").lower() for text in (project.name, project.client, project.description))
    ]


def filter_by_status(projects: Iterable[ScheduledProject], status: str) -> list[ScheduledProject]:
    if status == "all":
        return list(projects)
    if status not in PROJECT_STATUSES:
        raise ValueError(f"Unknown status '{status}'")
    return [project for project in projects if project.status == status]

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Literal, get_args


ProjectStatus = Literal["planning", "active", "completed", "paused", "cancelled"]
"""Lifecycle states a launch project can be in."""

PROJECT_STATUSES: tuple[str, ...] = get_args(ProjectStatus)

Priority = Literal["low", "medium", "high", "critical"]


@dataclass(frozen=True)
class PhaseDurationConfig:
    """Configured length of one phase; sequence position gives chronological order."""

    key: str
    name: str
    duration_days: int
    color: str | None = None


@dataclass(frozen=True)
class PhaseDateRange:
    """Inclusive calendar range of a scheduled phase (a 1-day phase has start == end)."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"phase range end {self.end} precedes start {self.start}")

    @property
    def duration_days(self) -> int:
        return (self.end - self.start).days + 1


@dataclass
class ScheduledProject:
    """
    A launch anchored to an event date.

    `phases` is derived from `phase_configs` and `anchor_date`; insertion order
    follows the configured phase order.
    """

    id: str
    name: str
    anchor_date: date
    phases: dict[str, PhaseDateRange] = field(default_factory=dict)
    status: ProjectStatus = "planning"
    created_at: date | None = None
    client: str | None = None
    description: str | None = None
    priority: Priority | None = None
    budget: float | None = None
    tags: list[str] = field(default_factory=list)
    phase_configs: list[PhaseDurationConfig] = field(default_factory=list)


@dataclass(frozen=True)
class TimeWindow:
    """Date window, inclusive on both ends."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class TimelineSpan:
    """Visible date range of a timeline; used to normalise dates into percentages."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise ValueError(f"timeline span end {self.end} precedes start {self.start}")

    @property
    def total_days(self) -> int:
        return (self.end - self.start).days + 1

    def days(self) -> list[date]:
        return [self.start + timedelta(days=offset) for offset in range(self.total_days)]


@dataclass(frozen=True)
class BarLayout:
    """Horizontal placement of one phase bar, in percent of the timeline width."""

    key: str
    left_percent: float
    width_percent: float


@dataclass(frozen=True)
class AxisLabel:
    """One day column on the date axis; `secondary_label` is set every few days."""

    day: date
    offset: int
    label: str
    secondary_label: str | None = None


@dataclass
class TimelineRow:
    """
    Flattened view of one project used by renderers.

    Only the fields relevant to drawing are kept: positional order, identity,
    the caption lines and the laid-out phase bars.
    """

    order: int
    project_id: str
    name: str
    client: str | None
    bars: list[BarLayout] = field(default_factory=list)


@dataclass(frozen=True)
class EngineSettings:
    """Tunable knobs for classification and timeline layout."""

    week_start: int = calendar.SUNDAY
    upcoming_horizon_days: int = 30
    timeline_padding_days: int = 5
    min_bar_width_percent: float = 1.0
    label_stride_days: int = 5

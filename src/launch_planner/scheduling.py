from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Sequence

from .project_models import PhaseDateRange, PhaseDurationConfig, ProjectStatus, ScheduledProject

logger = logging.getLogger(__name__)


class ProjectValidationError(Exception):
    """Raised when the project input is invalid (duplicate keys, unknown references, bad fields)."""


class SchedulingError(Exception):
    """Raised when a schedule cannot be computed or an existing schedule is inconsistent."""


def compute_phase_ranges(
    anchor_date: date, phases: Sequence[PhaseDurationConfig]
) -> dict[str, PhaseDateRange]:
    """
    Derive inclusive date ranges for every phase, anchored backward from `anchor_date`.

    - The last phase ends on the anchor date; each earlier phase ends the day
      before the following phase starts.
    - Durations below one day are clamped to one day.
    - The returned mapping follows the order of `phases`, not computation order.
    """

    anchor = _require_date(anchor_date, "anchor_date")
    _validate_unique_keys(phases)

    computed: dict[str, PhaseDateRange] = {}
    current_end = anchor
    for idx in range(len(phases) - 1, -1, -1):
        phase = phases[idx]
        days = clamp_duration(phase.duration_days, phase.key)
        try:
            start = current_end - timedelta(days=days - 1)
        except OverflowError:
            raise SchedulingError(f"phase '{phase.key}' starts before {date.min}") from None
        computed[phase.key] = PhaseDateRange(start=start, end=current_end)
        if idx > 0:
            if start == date.min:
                raise SchedulingError(f"phase '{phases[idx - 1].key}' starts before {date.min}")
            current_end = start - timedelta(days=1)

    ordered = {phase.key: computed[phase.key] for phase in phases}
    logger.debug("Computed %d phase ranges anchored at %s", len(ordered), anchor)
    return ordered


def clamp_duration(duration_days: int, key: str = "?") -> int:
    """Normalise a user-entered duration to at least one day."""
    if duration_days < 1:
        logger.debug("Clamping duration of phase '%s' from %s to 1 day", key, duration_days)
        return 1
    return int(duration_days)


def schedule_project(
    project_id: str,
    name: str,
    anchor_date: date,
    phases: Sequence[PhaseDurationConfig],
    status: ProjectStatus = "planning",
    **extra,
) -> ScheduledProject:
    """Build a ScheduledProject whose ranges are derived from `phases` and `anchor_date`."""

    anchor = _require_date(anchor_date, "anchor_date")
    return ScheduledProject(
        id=project_id,
        name=name,
        anchor_date=anchor,
        phases=compute_phase_ranges(anchor, phases),
        status=status,
        phase_configs=list(phases),
        **extra,
    )


def reschedule(
    project: ScheduledProject,
    anchor_date: date | None = None,
    phases: Sequence[PhaseDurationConfig] | None = None,
) -> ScheduledProject:
    """
    Return a copy of `project` with every phase range recomputed.

    Either input may be replaced; whatever is not given is taken from the project.
    The original project is left untouched.
    """

    new_anchor = project.anchor_date if anchor_date is None else _require_date(anchor_date, "anchor_date")
    new_phases = list(project.phase_configs if phases is None else phases)
    if not new_phases and project.phases:
        raise SchedulingError(f"Project '{project.id}' has no phase durations to reschedule from")

    logger.debug("Rescheduling project '%s' to anchor %s", project.id, new_anchor)
    return replace(
        project,
        anchor_date=new_anchor,
        phase_configs=new_phases,
        phases=compute_phase_ranges(new_anchor, new_phases),
    )


def update_phase_duration(
    phases: Sequence[PhaseDurationConfig], key: str, duration_days: int
) -> list[PhaseDurationConfig]:
    """Return a new config list with one phase's duration replaced (clamped to one day)."""

    if key not in {phase.key for phase in phases}:
        raise ProjectValidationError(f"Unknown phase key '{key}'")
    days = clamp_duration(duration_days, key)
    return [replace(phase, duration_days=days) if phase.key == key else phase for phase in phases]


def schedule_bounds(ranges: Mapping[str, PhaseDateRange] | Iterable[PhaseDateRange]) -> tuple[date, date] | None:
    """Earliest start and latest end across the given ranges, or None when there are none."""

    values = list(ranges.values()) if isinstance(ranges, Mapping) else list(ranges)
    if not values:
        return None
    return min(r.start for r in values), max(r.end for r in values)


def validate_schedule(project: ScheduledProject) -> None:
    """
    Check that stored ranges are anchored and contiguous in configured order.

    Raises SchedulingError on the first violation found.
    """

    order = [phase.key for phase in project.phase_configs] or list(project.phases)
    missing = [key for key in order if key not in project.phases]
    if missing:
        raise SchedulingError(f"Project '{project.id}' has no range for phases {missing}")
    if not order:
        return

    ranges = [project.phases[key] for key in order]
    latest = max(ranges, key=lambda r: r.end)
    if latest.end != project.anchor_date:
        raise SchedulingError(
            f"Project '{project.id}' ends {latest.end}, expected anchor date {project.anchor_date}"
        )

    for idx in range(1, len(order)):
        prev, nxt = ranges[idx - 1], ranges[idx]
        if prev.end + timedelta(days=1) != nxt.start:
            raise SchedulingError(
                f"Project '{project.id}': phase '{order[idx]}' starts {nxt.start} "
                f"but '{order[idx - 1]}' ends {prev.end}"
            )


def _validate_unique_keys(phases: Sequence[PhaseDurationConfig]) -> None:
    seen: set[str] = set()
    for phase in phases:
        if phase.key in seen:
            raise ProjectValidationError(f"Duplicate phase key '{phase.key}'")
        seen.add(phase.key)


def _require_date(value: object, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, date):
        raise SchedulingError(f"{name} must be a date, got {type(value).__name__}")
    return value

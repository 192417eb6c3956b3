from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .project_models import PhaseDurationConfig

FALLBACK_COLOR = "#6B7280"


@dataclass(frozen=True)
class LaunchTemplate:
    """Named, reusable phase plan."""

    id: str
    name: str
    phases: tuple[PhaseDurationConfig, ...]
    description: str | None = None


def _phases(*rows: tuple[str, str, int, str]) -> tuple[PhaseDurationConfig, ...]:
    return tuple(PhaseDurationConfig(key=key, name=name, duration_days=days, color=color) for key, name, days, color in rows)


DEFAULT_PHASES: tuple[PhaseDurationConfig, ...] = _phases(
    ("planning", "Planning", 30, "#3B82F6"),
    ("acquisition", "Acquisition", 21, "#10B981"),
    ("warm_up", "Warm-up", 7, "#F59E0B"),
    ("event", "Event", 3, "#8B5CF6"),
    ("open_cart", "Open Cart", 7, "#EC4899"),
    ("recovery", "Recovery", 14, "#F97316"),
    ("downsell", "Downsell", 7, "#EF4444"),
    ("debriefing", "Debriefing", 7, "#6B7280"),
)

TEMPLATES: dict[str, LaunchTemplate] = {
    "default": LaunchTemplate(
        id="default",
        name="Standard Launch",
        description="Default phases for a launch",
        phases=DEFAULT_PHASES,
    ),
    "product_launch": LaunchTemplate(
        id="product_launch",
        name="Product Launch",
        description="Standard template for digital product launches",
        phases=_phases(
            ("planning", "Strategic Planning", 45, "#3B82F6"),
            ("pre_launch", "Pre-launch", 30, "#10B981"),
            ("warm_up", "Warm-up", 14, "#F59E0B"),
            ("launch", "Launch", 7, "#8B5CF6"),
            ("post_launch", "Post-launch", 14, "#EC4899"),
        ),
    ),
    "online_event": LaunchTemplate(
        id="online_event",
        name="Online Event",
        description="Template for webinars and virtual events",
        phases=_phases(
            ("planning", "Planning", 21, "#3B82F6"),
            ("promotion", "Promotion", 14, "#10B981"),
            ("warm_up", "Warm-up", 7, "#F59E0B"),
            ("event", "Event", 1, "#8B5CF6"),
            ("follow_up", "Follow-up", 7, "#EC4899"),
        ),
    ),
    "marketing_campaign": LaunchTemplate(
        id="marketing_campaign",
        name="Marketing Campaign",
        description="Template for advertising campaigns",
        phases=_phases(
            ("research", "Research and Analysis", 14, "#3B82F6"),
            ("creation", "Content Creation", 21, "#10B981"),
            ("testing", "A/B Testing", 7, "#F59E0B"),
            ("launch", "Launch", 30, "#8B5CF6"),
            ("optimization", "Optimization", 14, "#EC4899"),
        ),
    ),
}

_PHASE_COLORS: dict[str, str] = {
    phase.key: phase.color
    for template in TEMPLATES.values()
    for phase in template.phases
    if phase.color
}

STATUS_LABELS: dict[str, str] = {
    "planning": "Planning",
    "active": "Active",
    "completed": "Completed",
    "paused": "Paused",
    "cancelled": "Cancelled",
}

PRIORITY_LABELS: dict[str, str] = {
    "low": "Low",
    "medium": "Medium",
    "high": "High",
    "critical": "Critical",
}


def get_template(template_id: str, extra: dict[str, LaunchTemplate] | None = None) -> LaunchTemplate:
    """Look up a built-in or user-supplied template; raises KeyError for unknown ids."""
    registry = {**TEMPLATES, **(extra or {})}
    try:
        return registry[template_id]
    except KeyError:
        raise KeyError(f"Unknown template '{template_id}' (known: {sorted(registry)})") from None


def phase_color(key: str, phases: Sequence[PhaseDurationConfig] | None = None) -> str:
    """Colour for a phase: its configured colour, then the built-in palette, then grey."""
    for phase in phases or ():
        if phase.key == key and phase.color:
            return phase.color
    return _PHASE_COLORS.get(key, FALLBACK_COLOR)


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status)


def priority_label(priority: str | None) -> str:
    """Display label for a priority; unknown or missing priorities read as medium."""
    return PRIORITY_LABELS.get(priority or "medium", PRIORITY_LABELS["medium"])

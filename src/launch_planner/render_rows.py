from __future__ import annotations

from typing import Iterable, List

from .project_models import EngineSettings, ScheduledProject, TimelineRow, TimelineSpan
from .timeline_layout import layout, timeline_span


def to_timeline_rows(
    projects: Iterable[ScheduledProject],
    span: TimelineSpan | None = None,
    settings: EngineSettings | None = None,
) -> tuple[list[TimelineRow], TimelineSpan]:
    """
    Convert scheduled projects into one render row per project, in input order.

    When `span` is not given it is inferred from every phase of every project,
    padded by the configured number of days. Returns the rows and the span used.
    """

    settings = settings or EngineSettings()
    items = list(projects)
    if span is None:
        span = timeline_span(
            (phase_range for project in items for phase_range in project.phases.values()),
            padding_days=settings.timeline_padding_days,
        )

    rows: List[TimelineRow] = []
    for order, project in enumerate(items):
        rows.append(
            TimelineRow(
                order=order,
                project_id=project.id,
                name=project.name,
                client=project.client,
                bars=layout(project.phases, span, settings.min_bar_width_percent),
            )
        )
    return rows, span

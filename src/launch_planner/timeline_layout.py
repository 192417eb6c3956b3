from __future__ import annotations

import logging
from datetime import timedelta
from typing import Iterable, Mapping

from .project_models import AxisLabel, BarLayout, PhaseDateRange, TimelineSpan
from .scheduling import schedule_bounds

logger = logging.getLogger(__name__)

DEFAULT_PADDING_DAYS = 5
DEFAULT_MIN_WIDTH_PERCENT = 1.0
DEFAULT_LABEL_STRIDE_DAYS = 5


def timeline_span(ranges: Iterable[PhaseDateRange], padding_days: int = DEFAULT_PADDING_DAYS) -> TimelineSpan:
    """
    Union of all ranges, padded by `padding_days` on each side.

    Raises ValueError when there is nothing to span.
    """

    bounds = schedule_bounds(list(ranges))
    if bounds is None:
        raise ValueError("Cannot infer timeline span; no phase ranges given")
    if padding_days < 0:
        raise ValueError(f"padding_days must not be negative, got {padding_days}")

    start, end = bounds
    pad = timedelta(days=padding_days)
    span = TimelineSpan(start=start - pad, end=end + pad)
    logger.debug("Timeline span %s..%s (%d days)", span.start, span.end, span.total_days)
    return span


def layout(
    ranges: Mapping[str, PhaseDateRange],
    span: TimelineSpan,
    min_width_percent: float = DEFAULT_MIN_WIDTH_PERCENT,
) -> list[BarLayout]:
    """
    Place every range on the [0, 100] timeline of `span`, in input order.

    Widths never drop below `min_width_percent` so very short phases stay visible.
    `span` must cover every range (see `timeline_span`); values are not clipped,
    so a range starting before `span.start` gets a negative `left_percent` and
    one ending after `span.end` reaches past 100.
    """

    total = span.total_days
    bars: list[BarLayout] = []
    for key, phase_range in ranges.items():
        offset = (phase_range.start - span.start).days
        bars.append(
            BarLayout(
                key=key,
                left_percent=100 * offset / total,
                width_percent=max(100 * phase_range.duration_days / total, min_width_percent),
            )
        )
    return bars


def axis_labels(span: TimelineSpan, stride_days: int = DEFAULT_LABEL_STRIDE_DAYS) -> list[AxisLabel]:
    """One label per day of `span`; every `stride_days`-th column also carries the month name."""
    if stride_days < 1:
        raise ValueError(f"stride_days must be positive, got {stride_days}")

    return [
        AxisLabel(
            day=day,
            offset=offset,
            label=day.strftime("%d"),
            secondary_label=day.strftime("%b") if offset % stride_days == 0 else None,
        )
        for offset, day in enumerate(span.days())
    ]

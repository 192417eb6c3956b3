from __future__ import annotations

import datetime as dt
from importlib import metadata
from pathlib import Path
from typing import Mapping

import matplotlib

matplotlib.use("Agg")  # ensure headless, deterministic output
import matplotlib.pyplot as plt

from .project_models import AxisLabel, TimelineRow, TimelineSpan
from .templates import phase_color
from .timeline_layout import DEFAULT_LABEL_STRIDE_DAYS, axis_labels

FONT_SCALE = 1.0
TITLE_FONT = 14 * FONT_SCALE
LABEL_FONT = 10 * FONT_SCALE
CAPTION_FONT = 8 * FONT_SCALE
FOOTER_FONT = 8 * FONT_SCALE
TICK_FONT = 8 * FONT_SCALE
BAR_TEXT_FONT = 7 * FONT_SCALE
TOP_MARGIN_FRAC = 0.85
TITLE_Y = 0.985
ROW_HEIGHT = 0.6
BAR_TEXT_MIN_DAYS = 3  # phases this short get no inline caption


def render_gantt(
    rows: list[TimelineRow],
    span: TimelineSpan,
    out_path: str,
    title: str,
    labels: list[AxisLabel] | None = None,
    colors: Mapping[str, str] | None = None,
    year: int | None = None,
    today: dt.date | None = None,
) -> None:
    """
    Render a static SVG timeline of projects to `out_path`.

    - Expects rows whose bars are already laid out in percent of `span`.
    - The x axis runs from 0 to 100; day ticks come from `labels`.
    - Bar colours come from `colors`, then the built-in phase palette.
    """

    if not rows:
        raise ValueError("rows must not be empty")

    labels = labels if labels is not None else axis_labels(span, DEFAULT_LABEL_STRIDE_DAYS)
    colors = colors or {}
    total = span.total_days
    day_width = 100 / total

    fig_height = max(3.0, ROW_HEIGHT * 2 * len(rows) + 2.0)
    fig_width = max(12.0, min(24.0, total / 7.0 * 1.5 + 6.0))
    fig = plt.figure(figsize=(fig_width, fig_height))
    # Explicit grid: left column for project captions, right for the timeline.
    gs = fig.add_gridspec(1, 2, width_ratios=[1.0, 4.0], wspace=0.05, left=0.04, right=0.98, top=TOP_MARGIN_FRAC, bottom=0.08)
    label_ax = fig.add_subplot(gs[0, 0])
    ax = fig.add_subplot(gs[0, 1], sharey=label_ax)

    ax.set_ylim(-1, len(rows))
    ax.invert_yaxis()
    ax.set_xlim(0, 100)
    ax.xaxis.tick_top()
    ax.set_xticks([label.offset * day_width for label in labels], minor=True)
    major = [label for label in labels if label.secondary_label]
    ax.set_xticks([label.offset * day_width for label in major])
    ax.set_xticklabels([f"{label.secondary_label}\n{label.label}" for label in major], fontsize=TICK_FONT)
    ax.grid(True, axis="x", which="major", linestyle="--", alpha=0.4)
    ax.grid(True, axis="x", which="minor", linestyle=":", alpha=0.15)
    ax.set_yticks([])

    label_ax.set_ylim(-1, len(rows))
    label_ax.invert_yaxis()
    label_ax.set_xlim(0, 1)
    label_ax.axis("off")

    fig.suptitle(title, x=0.5, fontsize=TITLE_FONT, y=TITLE_Y)
    footer_year = year or span.end.year
    fig.text(0.99, 0.01, f"© {footer_year} launch-planner v{_tool_version()}", ha="right", va="bottom", fontsize=FOOTER_FONT, alpha=0.8)

    for idx, row in enumerate(rows):
        y = idx
        label_ax.text(0.98, y - 0.12, row.name, ha="right", va="center", fontsize=LABEL_FONT, fontweight="bold")
        label_ax.text(0.98, y + 0.22, row.client or "No client", ha="right", va="center", fontsize=CAPTION_FONT, alpha=0.7)

        for bar in row.bars:
            ax.barh(
                y,
                width=bar.width_percent,
                left=bar.left_percent,
                height=ROW_HEIGHT,
                color=colors.get(bar.key) or phase_color(bar.key),
                edgecolor="black",
                linewidth=0.4,
            )
            if bar.width_percent > BAR_TEXT_MIN_DAYS * day_width:
                ax.text(
                    bar.left_percent + day_width * 0.3,
                    y,
                    bar.key,
                    ha="left",
                    va="center",
                    fontsize=BAR_TEXT_FONT,
                    color="white",
                    clip_on=True,
                )

    if today is not None:
        marker = today_marker(span, today)
        if marker is not None:
            ax.axvline(marker + day_width / 2, color="#EF4444", linewidth=1.0, linestyle="-", alpha=0.8, zorder=3)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, format="svg", bbox_inches="tight")
    plt.close(fig)


def today_marker(span: TimelineSpan, today: dt.date) -> float | None:
    """Percent position of `today` on the timeline, or None when outside the span."""
    if not span.start <= today <= span.end:
        return None
    return 100 * (today - span.start).days / span.total_days


def _tool_version() -> str:
    try:
        return metadata.version("launch_planner")
    except metadata.PackageNotFoundError:
        return "0.0.0"

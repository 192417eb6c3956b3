from __future__ import annotations

import argparse
import dataclasses
import datetime as dt
import logging
import sys
import webbrowser
from pathlib import Path

import yaml

from .classify import REPORT_RANGES, in_report_range
from .dashboard import build_dashboard
from .parse_project import Portfolio, load_portfolio, parse_weekday
from .progress import progress
from .render_gantt import render_gantt
from .render_rows import to_timeline_rows
from .scheduling import ProjectValidationError, SchedulingError, compute_phase_ranges, update_phase_duration
from .templates import TEMPLATES, get_template, priority_label, status_label
from .timeline_layout import axis_labels


def _parse_date(value: str) -> dt.date:
    try:
        return dt.date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from exc


def _parse_phase_override(value: str) -> tuple[str, int]:
    key, sep, days = value.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"invalid phase override '{value}', expected KEY=DAYS")
    try:
        return key, int(days)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid day count in '{value}'") from exc


def _parse_weekday_arg(value: str) -> int:
    try:
        return parse_weekday(int(value) if value.isdigit() else value, "--week-start")
    except ProjectValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="launch-planner",
        description="Launch phase planner",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    calc = sub.add_parser("calc", help="Compute phase dates for an event date", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    calc.add_argument("anchor_date", type=_parse_date, help="Event date (YYYY-MM-DD)")
    calc.add_argument("--template", default="default", choices=sorted(TEMPLATES), help="Phase template")
    calc.add_argument(
        "--phase",
        dest="overrides",
        action="append",
        type=_parse_phase_override,
        default=[],
        help="Override a phase duration as KEY=DAYS (repeatable)",
    )

    dashboard = sub.add_parser("dashboard", help="Summarise a portfolio file", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    dashboard.add_argument("portfolio", help="Path to portfolio YAML")
    dashboard.add_argument("--today", type=_parse_date, help="Pin the current date (YYYY-MM-DD)")
    dashboard.add_argument("--week-start", type=_parse_weekday_arg, help="First day of week (name or 0-6, Monday=0)")
    dashboard.add_argument("--range", dest="report_range", choices=REPORT_RANGES, help="Also list projects whose event date falls in this range")

    gantt = sub.add_parser("gantt", help="Render a portfolio timeline as SVG", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    gantt.add_argument("portfolio", help="Path to portfolio YAML")
    gantt.add_argument("--out", default="output/launch_timeline.svg", help="Output SVG path")
    gantt.add_argument("--today", type=_parse_date, help="Pin the current date (YYYY-MM-DD)")
    gantt.add_argument("--padding-days", type=int, help="Override timeline padding in days")
    gantt.add_argument("--title", default="Project Timeline", help="Chart title")
    gantt.add_argument(
        "--view",
        dest="view",
        action="store_true",
        default=False,
        help="Best-effort open the output file after rendering",
    )
    gantt.add_argument(
        "--no-view",
        dest="view",
        action="store_false",
        help="Do not open the output file after rendering",
    )
    return parser


def _load(path: str) -> tuple[Portfolio | None, int]:
    try:
        return load_portfolio(path), 0
    except (yaml.YAMLError, ProjectValidationError, SchedulingError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return None, 2
    except FileNotFoundError:
        print(f"Error: portfolio file not found: {path}", file=sys.stderr)
        return None, 1


def _cmd_calc(args: argparse.Namespace) -> int:
    phases = list(get_template(args.template).phases)
    try:
        for key, days in args.overrides:
            phases = update_phase_duration(phases, key, days)
        ranges = compute_phase_ranges(args.anchor_date, phases)
    except (ProjectValidationError, SchedulingError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    width = max((len(phase.name) for phase in phases), default=0)
    for phase in phases:
        phase_range = ranges[phase.key]
        print(f"{phase.name:<{width}}  {phase_range.start} -> {phase_range.end}  ({phase_range.duration_days} days)")
    return 0


def _cmd_dashboard(args: argparse.Namespace) -> int:
    portfolio, code = _load(args.portfolio)
    if portfolio is None:
        return code
    now = args.today or dt.date.today()
    settings = portfolio.settings
    if args.week_start is not None:
        settings = dataclasses.replace(settings, week_start=args.week_start)

    summary = build_dashboard(portfolio.projects, now, settings)
    print(f"Projects: {summary.total}")
    for status, count in summary.by_status.items():
        print(f"  {status_label(status)}: {count}")
    print(f"This week: {summary.this_week}")
    print(f"This month: {summary.this_month}")
    print(f"Overdue: {summary.overdue}")
    print(f"Upcoming ({settings.upcoming_horizon_days} days): {summary.upcoming}")
    print(f"Average progress: {summary.average_progress}%")
    print(f"Total budget: {summary.total_budget:,.2f}")
    print("Created per month:")
    for bucket in summary.creation_trend:
        print(f"  {bucket.month:%b %Y}: {bucket.count}")
    if summary.upcoming_events:
        print("Upcoming events:")
        for project in summary.upcoming_events:
            print(f"  {project.anchor_date}  {project.name}  ({progress(project.phases, now)}%)")
    if args.report_range:
        print(f"Projects ({args.report_range}):")
        for project in in_report_range(portfolio.projects, now, args.report_range, settings.week_start):
            print(f"  {project.anchor_date}  {project.name}  [{status_label(project.status)}, {priority_label(project.priority)}]")
    return 0


def _cmd_gantt(args: argparse.Namespace) -> int:
    portfolio, code = _load(args.portfolio)
    if portfolio is None:
        return code
    projects = [project for project in portfolio.projects if project.phases]
    if not projects:
        print("No projects to display", file=sys.stderr)
        return 1

    settings = portfolio.settings
    if args.padding_days is not None:
        if args.padding_days < 0:
            print("Error: --padding-days must not be negative", file=sys.stderr)
            return 2
        settings = dataclasses.replace(settings, timeline_padding_days=args.padding_days)

    rows, span = to_timeline_rows(projects, settings=settings)
    colors = {
        phase.key: phase.color
        for project in projects
        for phase in project.phase_configs
        if phase.color
    }

    try:
        render_gantt(
            rows=rows,
            span=span,
            out_path=args.out,
            title=args.title,
            labels=axis_labels(span, settings.label_stride_days),
            colors=colors,
            today=args.today or dt.date.today(),
        )
    except OSError as exc:
        print(f"Error: could not write {args.out}: {exc}", file=sys.stderr)
        return 1

    if args.view:
        try:
            webbrowser.open(Path(args.out).resolve().as_uri())
        except webbrowser.Error:
            pass

    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    handlers = {"calc": _cmd_calc, "dashboard": _cmd_dashboard, "gantt": _cmd_gantt}
    return handlers[args.command](args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())

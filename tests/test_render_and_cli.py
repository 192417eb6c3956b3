import datetime as dt
import textwrap

from launch_planner.__main__ import main
from launch_planner.render_gantt import render_gantt, today_marker
from launch_planner.render_rows import to_timeline_rows
from launch_planner.scheduling import schedule_project
from launch_planner.templates import DEFAULT_PHASES, get_template
from launch_planner.timeline_layout import axis_labels

PORTFOLIO = textwrap.dedent(
    """
    projects:
      - {id: a, name: Alpha, anchor_date: 2024-06-10, status: active, created_at: 2024-01-05, template: online_event}
      - {id: b, name: Beta, anchor_date: 2024-06-20, status: planning}
      - {id: c, name: Gamma, anchor_date: 2024-06-01, status: completed}
    """
)


def _write_portfolio(tmp_path):
    path = tmp_path / "portfolio.yaml"
    path.write_text(PORTFOLIO, encoding="utf-8")
    return path


def test_renderer_produces_svg(tmp_path):
    project = schedule_project("a", "Alpha", dt.date(2024, 6, 10), list(get_template("online_event").phases))
    rows, span = to_timeline_rows([project])

    out_file = tmp_path / "chart.svg"
    render_gantt(rows, span, out_path=str(out_file), title="Launches", labels=axis_labels(span), today=dt.date(2024, 6, 1))

    assert out_file.exists()
    assert out_file.stat().st_size > 0
    assert "<svg" in out_file.read_text(encoding="utf-8")


def test_today_marker_only_inside_span():
    project = schedule_project("a", "Alpha", dt.date(2024, 6, 10), list(DEFAULT_PHASES))
    _, span = to_timeline_rows([project])

    assert today_marker(span, span.start) == 0.0
    assert today_marker(span, span.end + dt.timedelta(days=1)) is None


def test_cli_calc_prints_backward_schedule(capsys):
    assert main(["calc", "2024-06-10", "--template", "online_event"]) == 0

    out = capsys.readouterr().out
    assert "2024-06-04 -> 2024-06-10  (7 days)" in out
    assert "2024-06-03 -> 2024-06-03  (1 days)" in out
    assert out.splitlines()[0].startswith("Planning")


def test_cli_calc_applies_and_clamps_overrides(capsys):
    assert main(["calc", "2024-06-10", "--template", "online_event", "--phase", "follow_up=0"]) == 0

    assert "2024-06-10 -> 2024-06-10  (1 days)" in capsys.readouterr().out


def test_cli_calc_rejects_unknown_phase(capsys):
    assert main(["calc", "2024-06-10", "--phase", "nope=3"]) == 2
    assert "Unknown phase key 'nope'" in capsys.readouterr().err


def test_cli_dashboard_with_pinned_today(tmp_path, capsys):
    path = _write_portfolio(tmp_path)

    assert main(["dashboard", str(path), "--today", "2024-06-12"]) == 0

    out = capsys.readouterr().out
    assert "Projects: 3" in out
    assert "Overdue: 1" in out
    assert "Upcoming (30 days): 1" in out
    assert "2024-06-20  Beta" in out


def test_cli_dashboard_reports_missing_file(tmp_path, capsys):
    assert main(["dashboard", str(tmp_path / "missing.yaml")]) == 1
    assert "not found" in capsys.readouterr().err


def test_cli_dashboard_reports_invalid_file(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("projects: [{id: x}]\n", encoding="utf-8")

    assert main(["dashboard", str(path)]) == 2
    assert capsys.readouterr().err.startswith("Error:")


def test_cli_gantt_writes_svg(tmp_path):
    path = _write_portfolio(tmp_path)
    out_file = tmp_path / "out" / "timeline.svg"

    assert main(["gantt", str(path), "--out", str(out_file), "--today", "2024-06-12", "--no-view"]) == 0
    assert out_file.exists()


def test_cli_calc_reports_schedule_out_of_range(capsys):
    assert main(["calc", "2024-06-10", "--phase", "planning=1000000"]) == 2
    assert "starts before" in capsys.readouterr().err


def test_cli_dashboard_reports_non_string_template(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("projects: [{id: x, name: X, anchor_date: 2024-01-01, template: [x]}]\n", encoding="utf-8")

    assert main(["dashboard", str(path)]) == 2
    assert "template: expected string" in capsys.readouterr().err


def test_cli_dashboard_lists_report_range_with_budget_and_trend(tmp_path, capsys):
    path = tmp_path / "portfolio.yaml"
    path.write_text(
        textwrap.dedent(
            """
            projects:
              - {id: a, name: Alpha, anchor_date: 2024-06-10, created_at: 2024-05-02, budget: 1000, priority: high}
              - {id: b, name: Beta, anchor_date: 2023-12-20, created_at: 2023-11-01, budget: 250.5}
            """
        ),
        encoding="utf-8",
    )

    assert main(["dashboard", str(path), "--today", "2024-06-12", "--range", "this_year"]) == 0

    out = capsys.readouterr().out
    assert "Total budget: 1,250.50" in out
    assert "  May 2024: 1" in out
    assert "  Jan 2024: 0" in out
    assert "Projects (this_year):" in out
    assert "2024-06-10  Alpha  [Planning, High]" in out
    assert "Beta  [" not in out

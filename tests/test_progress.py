import datetime as dt

from launch_planner.progress import average_progress, progress
from launch_planner.project_models import PhaseDateRange
from launch_planner.scheduling import schedule_project
from launch_planner.templates import DEFAULT_PHASES

JANUARY = {
    "first": PhaseDateRange(dt.date(2024, 1, 1), dt.date(2024, 1, 15)),
    "second": PhaseDateRange(dt.date(2024, 1, 16), dt.date(2024, 1, 31)),
}


def test_progress_interpolates_linearly_between_start_and_end():
    assert progress(JANUARY, dt.date(2024, 1, 16)) == 50


def test_progress_boundaries():
    assert progress(JANUARY, dt.date(2024, 1, 1)) == 0
    assert progress(JANUARY, dt.date(2024, 1, 31)) == 100
    assert progress(JANUARY, dt.date(2023, 12, 31)) == 0
    assert progress(JANUARY, dt.date(2024, 2, 1)) == 100


def test_empty_ranges_report_zero():
    assert progress({}, dt.date(2024, 1, 1)) == 0


def test_single_day_schedule_is_complete_on_its_day():
    ranges = {"event": PhaseDateRange(dt.date(2024, 5, 5), dt.date(2024, 5, 5))}

    assert progress(ranges, dt.date(2024, 5, 4)) == 0
    assert progress(ranges, dt.date(2024, 5, 5)) == 100


def test_progress_rounds_half_up():
    ranges = {"a": PhaseDateRange(dt.date(2024, 1, 1), dt.date(2024, 1, 9))}

    # 1 of 8 days elapsed is 12.5%.
    assert progress(ranges, dt.date(2024, 1, 2)) == 13


def test_progress_ignores_time_of_day():
    assert progress(JANUARY, dt.datetime(2024, 1, 16, 23, 59)) == 50


def test_progress_is_monotonic_over_the_schedule():
    project = schedule_project("p", "Launch", dt.date(2024, 9, 1), list(DEFAULT_PHASES))
    day = dt.date(2024, 3, 1)
    previous = -1
    while day <= dt.date(2024, 10, 1):
        value = progress(project.phases, day)
        assert 0 <= value <= 100
        assert value >= previous
        previous = value
        day += dt.timedelta(days=1)


def test_average_progress_over_projects():
    done = schedule_project("a", "Done", dt.date(2024, 1, 10), list(DEFAULT_PHASES))
    future = schedule_project("b", "Future", dt.date(2030, 1, 10), list(DEFAULT_PHASES))
    now = dt.date(2024, 6, 1)

    assert average_progress([done, future], now) == 50
    assert average_progress([], now) == 0

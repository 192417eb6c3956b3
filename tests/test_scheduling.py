import datetime as dt

import pytest

from launch_planner.project_models import PhaseDateRange, PhaseDurationConfig
from launch_planner.scheduling import (
    ProjectValidationError,
    SchedulingError,
    compute_phase_ranges,
    reschedule,
    schedule_bounds,
    schedule_project,
    update_phase_duration,
    validate_schedule,
)
from launch_planner.templates import DEFAULT_PHASES


def _phases(*pairs):
    return [PhaseDurationConfig(key=key, name=key.title(), duration_days=days) for key, days in pairs]


def test_phases_are_anchored_backward_from_event_date():
    ranges = compute_phase_ranges(dt.date(2024, 6, 10), _phases(("planning", 30), ("launch", 3)))

    assert ranges["launch"] == PhaseDateRange(dt.date(2024, 6, 8), dt.date(2024, 6, 10))
    assert ranges["planning"] == PhaseDateRange(dt.date(2024, 5, 9), dt.date(2024, 6, 7))
    assert (ranges["launch"].end - ranges["planning"].start).days + 1 == 33


def test_result_follows_configured_order_not_computation_order():
    phases = _phases(("c", 2), ("a", 4), ("b", 1))

    ranges = compute_phase_ranges(dt.date(2024, 3, 1), phases)

    assert list(ranges) == ["c", "a", "b"]


def test_consecutive_phases_are_contiguous_and_last_ends_on_anchor():
    anchor = dt.date(2025, 2, 28)
    ranges = compute_phase_ranges(anchor, list(DEFAULT_PHASES))
    values = list(ranges.values())

    for prev, nxt in zip(values, values[1:]):
        assert prev.end + dt.timedelta(days=1) == nxt.start
    assert values[-1].end == anchor
    total = sum(phase.duration_days for phase in DEFAULT_PHASES)
    assert (values[-1].end - values[0].start).days + 1 == total


@pytest.mark.parametrize("days", [0, -3])
def test_non_positive_duration_is_clamped_to_one_day(days):
    ranges = compute_phase_ranges(dt.date(2024, 1, 10), _phases(("prep", 2), ("event", days)))

    assert ranges["event"].start == ranges["event"].end == dt.date(2024, 1, 10)
    assert ranges["prep"] == PhaseDateRange(dt.date(2024, 1, 8), dt.date(2024, 1, 9))


def test_empty_phase_config_yields_empty_mapping():
    assert compute_phase_ranges(dt.date(2024, 1, 1), []) == {}


def test_missing_anchor_date_fails_loudly():
    with pytest.raises(SchedulingError):
        compute_phase_ranges(None, _phases(("a", 1)))


def test_datetime_anchor_is_reduced_to_its_date():
    ranges = compute_phase_ranges(dt.datetime(2024, 1, 10, 18, 30), _phases(("a", 2)))

    assert ranges["a"] == PhaseDateRange(dt.date(2024, 1, 9), dt.date(2024, 1, 10))


def test_duplicate_phase_keys_are_rejected():
    with pytest.raises(ProjectValidationError):
        compute_phase_ranges(dt.date(2024, 1, 1), _phases(("a", 1), ("a", 2)))


def test_inverted_range_cannot_be_constructed():
    with pytest.raises(ValueError):
        PhaseDateRange(dt.date(2024, 1, 2), dt.date(2024, 1, 1))


def test_update_phase_duration_recomputes_every_range():
    phases = _phases(("planning", 10), ("warm_up", 5), ("event", 2))
    project = schedule_project("p1", "Launch", dt.date(2024, 4, 20), phases)

    updated = update_phase_duration(phases, "event", 4)
    moved = reschedule(project, phases=updated)

    assert moved.phases["event"] == PhaseDateRange(dt.date(2024, 4, 17), dt.date(2024, 4, 20))
    assert moved.phases["warm_up"].end == dt.date(2024, 4, 16)
    assert moved.phases["planning"].start == dt.date(2024, 4, 2)
    # Input project is untouched.
    assert project.phases["event"].start == dt.date(2024, 4, 19)
    assert [phase.duration_days for phase in phases] == [10, 5, 2]


def test_update_phase_duration_clamps_and_rejects_unknown_keys():
    phases = _phases(("a", 3))

    assert update_phase_duration(phases, "a", 0)[0].duration_days == 1
    with pytest.raises(ProjectValidationError):
        update_phase_duration(phases, "missing", 2)


def test_reschedule_to_new_anchor_shifts_all_phases():
    project = schedule_project("p1", "Launch", dt.date(2024, 4, 20), _phases(("a", 3), ("b", 2)))

    moved = reschedule(project, anchor_date=dt.date(2024, 5, 1))

    assert moved.anchor_date == dt.date(2024, 5, 1)
    assert moved.phases["b"].end == dt.date(2024, 5, 1)
    assert moved.phases["a"].start == dt.date(2024, 4, 27)
    validate_schedule(moved)


def test_schedule_bounds_spans_earliest_start_to_latest_end():
    ranges = compute_phase_ranges(dt.date(2024, 1, 31), _phases(("a", 16), ("b", 15)))

    assert schedule_bounds(ranges) == (dt.date(2024, 1, 1), dt.date(2024, 1, 31))
    assert schedule_bounds({}) is None


def test_validate_schedule_detects_gap_and_wrong_anchor():
    project = schedule_project("p1", "Launch", dt.date(2024, 4, 20), _phases(("a", 3), ("b", 2)))
    validate_schedule(project)

    project.phases["a"] = PhaseDateRange(dt.date(2024, 4, 10), dt.date(2024, 4, 12))
    with pytest.raises(SchedulingError):
        validate_schedule(project)

    shifted = reschedule(project)
    shifted.anchor_date = dt.date(2024, 4, 21)
    with pytest.raises(SchedulingError):
        validate_schedule(shifted)


def test_schedule_reaching_before_earliest_date_raises_scheduling_error():
    with pytest.raises(SchedulingError, match="phase 'a' starts before"):
        compute_phase_ranges(dt.date(2024, 1, 1), _phases(("a", 10**6)))


def test_earlier_phase_with_no_room_left_raises_scheduling_error():
    anchor = dt.date.min + dt.timedelta(days=1)

    with pytest.raises(SchedulingError, match="phase 'prep' starts before"):
        compute_phase_ranges(anchor, _phases(("prep", 1), ("event", 2)))
    assert compute_phase_ranges(anchor, _phases(("event", 2)))["event"].start == dt.date.min

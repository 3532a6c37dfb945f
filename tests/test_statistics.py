from __future__ import annotations

import datetime
from zoneinfo import ZoneInfo

import pytest
from workout_charts.models import StatisticsOption, WorkoutRef
from workout_charts.statistics import collect_statistics
from workout_charts.units import WATT

START = datetime.datetime(2026, 3, 1, 8, 0, tzinfo=ZoneInfo("UTC"))


def _workout(duration_s: int | None) -> WorkoutRef:
    end = START + datetime.timedelta(seconds=duration_s) if duration_s is not None else None
    return WorkoutRef(id=1, start=START, end=end)


def test_buckets_are_anchored_at_workout_start() -> None:
    # 1 Hz for five minutes, 200 W in even minutes and 100 W in odd ones
    offsets = [t * 1000 for t in range(300)]
    values = [200.0 if (t // 60) % 2 == 0 else 100.0 for t in range(300)]

    stats = collect_statistics(_workout(300), offsets, values, WATT, interval_s=60)

    assert len(stats) == 5
    assert [s.average_quantity().value for s in stats] == [200.0, 100.0, 200.0, 100.0, 200.0]
    assert stats[0].start == START
    assert stats[0].end == START + datetime.timedelta(minutes=1)
    assert stats[-1].end == START + datetime.timedelta(minutes=5)
    assert all(s.average_quantity().unit == WATT for s in stats)


def test_gaps_leave_buckets_without_average() -> None:
    offsets = [t * 1000 for t in range(180) if not 60 <= t < 120]
    values = [150.0] * len(offsets)

    stats = collect_statistics(_workout(180), offsets, values, WATT, interval_s=60)

    assert len(stats) == 3
    assert stats[1].average_quantity() is None
    assert stats[0].average_quantity().value == 150.0
    assert stats[2].average_quantity().value == 150.0


def test_last_bucket_ends_at_workout_end() -> None:
    stats = collect_statistics(_workout(150), [0, 70_000, 140_000], [1.0, 2.0, 3.0], WATT, interval_s=60)
    assert len(stats) == 3
    assert stats[-1].end == START + datetime.timedelta(seconds=150)
    assert stats[-1].average_quantity().value == 3.0


def test_samples_outside_workout_are_ignored() -> None:
    stats = collect_statistics(
        _workout(60), [-5_000, 10_000, 90_000], [999.0, 100.0, 999.0], WATT, interval_s=60
    )
    assert len(stats) == 1
    assert stats[0].average_quantity().value == 100.0


def test_open_workout_ends_at_last_sample() -> None:
    stats = collect_statistics(_workout(None), [0, 30_000, 95_000], [1.0, 3.0, 5.0], WATT, interval_s=60)
    assert len(stats) == 2
    assert stats[0].average_quantity().value == 2.0
    assert stats[-1].end == START + datetime.timedelta(seconds=95)


def test_min_max_options() -> None:
    stats = collect_statistics(
        _workout(60),
        [0, 10_000, 20_000],
        [120.0, 300.0, 180.0],
        WATT,
        options=(StatisticsOption.DISCRETE_MIN, StatisticsOption.DISCRETE_MAX),
    )
    (stat,) = stats
    assert stat.average_quantity() is None
    assert stat.minimum_quantity().value == 120.0
    assert stat.maximum_quantity().value == 300.0


def test_no_samples_still_enumerates_intervals() -> None:
    stats = collect_statistics(_workout(120), [], [], WATT, interval_s=60)
    assert len(stats) == 2
    assert all(s.average_quantity() is None for s in stats)


def test_bad_arguments() -> None:
    with pytest.raises(ValueError):
        collect_statistics(_workout(60), [0], [1.0], WATT, interval_s=0)
    with pytest.raises(ValueError):
        collect_statistics(_workout(60), [0, 1000], [1.0], WATT)


def test_fractional_end_keeps_last_samples() -> None:
    workout = WorkoutRef(id=1, start=START, end=START + datetime.timedelta(seconds=90.5))

    stats = collect_statistics(workout, [0, 90_000, 90_400], [1.0, 2.0, 4.0], WATT, interval_s=60)

    assert len(stats) == 2
    assert stats[-1].end == workout.end
    assert stats[-1].average_quantity().value == 3.0

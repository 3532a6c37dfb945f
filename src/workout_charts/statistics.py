from __future__ import annotations

import datetime
from collections.abc import Sequence

import numpy as np

from workout_charts.models import RawStatistic, StatisticsOption, WorkoutRef
from workout_charts.units import Quantity, Unit

DEFAULT_INTERVAL_S = 60.0


def collect_statistics(
    workout: WorkoutRef,
    offsets_ms: Sequence[int],
    values: Sequence[float],
    unit: Unit,
    interval_s: float = DEFAULT_INTERVAL_S,
    options: StatisticsOption | Sequence[StatisticsOption] = StatisticsOption.DISCRETE_AVERAGE,
) -> list[RawStatistic]:
    """
    Bucket a workout's samples into fixed intervals anchored at the workout start.

    Every interval between the start and the end of the workout gets one
    statistic, even when it holds no samples; those carry no quantities. The
    last interval ends at the workout end rather than on the interval grid.
    Without an end time the last sample closes the workout.
    """
    if interval_s <= 0:
        raise ValueError("interval_s must be positive")
    if isinstance(options, StatisticsOption):
        options = (options,)
    wanted = set(options)

    t = np.asarray(offsets_ms, dtype=float) / 1000.0
    v = np.asarray(values, dtype=float)
    if t.shape != v.shape:
        raise ValueError("offsets_ms and values must have the same length")

    # Samples outside the workout window are not part of any bucket
    keep = t >= 0.0
    if workout.end is not None:
        total_s = max(0.0, (workout.end - workout.start).total_seconds())
        keep &= t <= total_s
    else:
        total_s = float(t[keep].max()) if keep.any() else 0.0
    t, v = t[keep], v[keep]

    if total_s <= 0.0 and t.size == 0:
        return []

    n_buckets = max(1, int(np.ceil(total_s / interval_s)))
    idx = np.minimum((t // interval_s).astype(int), n_buckets - 1)

    counts = np.bincount(idx, minlength=n_buckets)
    sums = np.bincount(idx, weights=v, minlength=n_buckets)
    mins = np.full(n_buckets, np.inf)
    maxs = np.full(n_buckets, -np.inf)
    np.minimum.at(mins, idx, v)
    np.maximum.at(maxs, idx, v)

    out: list[RawStatistic] = []
    for k in range(n_buckets):
        b_start = workout.start + datetime.timedelta(seconds=k * interval_s)
        b_end_s = min((k + 1) * interval_s, total_s)
        b_end = workout.start + datetime.timedelta(seconds=b_end_s)

        if counts[k] == 0:
            out.append(RawStatistic(start=b_start, end=b_end))
            continue

        avg = mn = mx = None
        if StatisticsOption.DISCRETE_AVERAGE in wanted:
            avg = Quantity(float(sums[k] / counts[k]), unit)
        if StatisticsOption.DISCRETE_MIN in wanted:
            mn = Quantity(float(mins[k]), unit)
        if StatisticsOption.DISCRETE_MAX in wanted:
            mx = Quantity(float(maxs[k]), unit)
        out.append(RawStatistic(start=b_start, end=b_end, average=avg, minimum=mn, maximum=mx))
    return out

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from workout_charts.models import ChartPoint, QuantityKind, RawStatistic
from workout_charts.units import (
    COUNT_PER_MINUTE,
    MILES_PER_HOUR,
    WATT,
    IncompatibleUnitError,
    Unit,
)


@dataclass(frozen=True)
class SeriesSpec:
    key: str
    category: str
    kind: QuantityKind
    unit: Unit
    ylabel: str


# Fetch order of a refresh
SERIES: tuple[SeriesSpec, ...] = (
    SeriesSpec("speed", "Speed", QuantityKind.CYCLING_SPEED, MILES_PER_HOUR, "Speed (mph)"),
    SeriesSpec("power", "Power", QuantityKind.CYCLING_POWER, WATT, "Watts"),
    SeriesSpec("cadence", "Cadence", QuantityKind.CYCLING_CADENCE, COUNT_PER_MINUTE, "Cadence (rpm)"),
)


def map_statistics(
    statistics: Iterable[RawStatistic], unit: Unit, category: str
) -> list[ChartPoint]:
    """
    Turn per-interval statistics into chart points, one per interval that has
    an average convertible to ``unit``. Everything else is dropped; input order
    is kept as-is.
    """
    points: list[ChartPoint] = []
    for stat in statistics:
        avg = stat.average_quantity()
        if avg is None:
            continue
        try:
            value = avg.value_in(unit)
        except IncompatibleUnitError:
            continue
        points.append(ChartPoint(category=category, timestamp=stat.end, value=value))
    return points

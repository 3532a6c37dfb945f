from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime

from workout_charts.units import (
    COUNT_PER_MINUTE,
    METERS_PER_SECOND,
    WATT,
    Quantity,
    Unit,
)


class QuantityKind(enum.Enum):
    CYCLING_SPEED = "cycling_speed"
    CYCLING_POWER = "cycling_power"
    CYCLING_CADENCE = "cycling_cadence"

    @property
    def canonical_unit(self) -> Unit:
        """Unit the health store keeps samples of this kind in."""
        return _CANONICAL_UNITS[self]


_CANONICAL_UNITS = {
    QuantityKind.CYCLING_SPEED: METERS_PER_SECOND,
    QuantityKind.CYCLING_POWER: WATT,
    QuantityKind.CYCLING_CADENCE: COUNT_PER_MINUTE,
}


class StatisticsOption(enum.Enum):
    DISCRETE_AVERAGE = "discrete_average"
    DISCRETE_MIN = "discrete_min"
    DISCRETE_MAX = "discrete_max"


@dataclass(frozen=True)
class WorkoutRef:
    id: int
    start: datetime
    end: datetime | None = None
    activity_type: str = "cycling"
    distance_m: float | None = None
    energy_kj: float | None = None

    @property
    def duration_s(self) -> int | None:
        if self.end is None:
            return None
        return max(0, int((self.end - self.start).total_seconds()))


@dataclass(frozen=True)
class RawStatistic:
    start: datetime
    end: datetime
    average: Quantity | None = None
    minimum: Quantity | None = None
    maximum: Quantity | None = None

    def average_quantity(self) -> Quantity | None:
        return self.average

    def minimum_quantity(self) -> Quantity | None:
        return self.minimum

    def maximum_quantity(self) -> Quantity | None:
        return self.maximum


@dataclass(frozen=True)
class ChartPoint:
    category: str
    timestamp: datetime
    value: float

    @property
    def id(self) -> datetime:
        return self.timestamp


@dataclass(frozen=True)
class SeriesSnapshot:
    workout: WorkoutRef | None = None
    speed: tuple[ChartPoint, ...] = ()
    power: tuple[ChartPoint, ...] = ()
    cadence: tuple[ChartPoint, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.speed or self.power or self.cadence)


@dataclass
class SeriesState:
    """Published chart series; written only by the refresh pipeline."""

    workout: WorkoutRef | None = None
    speed: list[ChartPoint] = field(default_factory=list)
    power: list[ChartPoint] = field(default_factory=list)
    cadence: list[ChartPoint] = field(default_factory=list)

    SERIES_KEYS = ("speed", "power", "cadence")

    def replace(self, key: str, points: list[ChartPoint]) -> None:
        if key not in self.SERIES_KEYS:
            raise KeyError(key)
        setattr(self, key, list(points))

    def clear(self) -> None:
        self.workout = None
        self.speed = []
        self.power = []
        self.cadence = []

    def snapshot(self) -> SeriesSnapshot:
        return SeriesSnapshot(
            workout=self.workout,
            speed=tuple(self.speed),
            power=tuple(self.power),
            cadence=tuple(self.cadence),
        )

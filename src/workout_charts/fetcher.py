from __future__ import annotations

import asyncio
from typing import Protocol

from workout_charts.database import HealthStore
from workout_charts.models import QuantityKind, RawStatistic, StatisticsOption, WorkoutRef
from workout_charts.statistics import DEFAULT_INTERVAL_S, collect_statistics


class StatisticsFetcher(Protocol):
    async def fetch(
        self,
        workout: WorkoutRef,
        kind: QuantityKind,
        aggregation: StatisticsOption,
    ) -> list[RawStatistic]: ...


class HealthStoreFetcher:
    """Reads samples from the health store and buckets them per interval."""

    def __init__(self, store: HealthStore, interval_s: float = DEFAULT_INTERVAL_S):
        self.store = store
        self.interval_s = float(interval_s)

    async def fetch(
        self,
        workout: WorkoutRef,
        kind: QuantityKind,
        aggregation: StatisticsOption = StatisticsOption.DISCRETE_AVERAGE,
    ) -> list[RawStatistic]:
        # SQLAlchemy sessions block; keep them off the event loop
        return await asyncio.to_thread(self._fetch_sync, workout, kind, aggregation)

    def _fetch_sync(
        self, workout: WorkoutRef, kind: QuantityKind, aggregation: StatisticsOption
    ) -> list[RawStatistic]:
        rows = self.store.samples(workout.id, kind)
        if not rows:
            return []
        offsets = [t for t, _ in rows]
        values = [v for _, v in rows]
        return collect_statistics(
            workout,
            offsets,
            values,
            kind.canonical_unit,
            interval_s=self.interval_s,
            options=aggregation,
        )

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from typing import Generic, TypeVar

from workout_charts.fetcher import StatisticsFetcher
from workout_charts.models import (
    ChartPoint,
    SeriesSnapshot,
    SeriesState,
    StatisticsOption,
    WorkoutRef,
)
from workout_charts.series import SERIES, SeriesSpec, map_statistics

T = TypeVar("T")


class SlotClosed(Exception):
    pass


class LatestSlot(Generic[T]):
    """
    One-element mailbox: ``put`` overwrites whatever has not been taken yet,
    ``get`` waits for a value. Only the newest pending value is ever delivered.
    """

    def __init__(self):
        self._value: T | None = None
        self._full = False
        self._closed = False
        self._event = asyncio.Event()

    @property
    def empty(self) -> bool:
        return not self._full

    def put(self, value: T) -> None:
        if self._closed:
            raise SlotClosed
        self._value = value
        self._full = True
        self._event.set()

    async def get(self) -> T:
        while not self._full:
            if self._closed:
                raise SlotClosed
            self._event.clear()
            await self._event.wait()
        value = self._value
        self._value = None
        self._full = False
        self._event.clear()
        return value

    def close(self) -> None:
        self._closed = True
        self._event.set()


class RefreshPipeline:
    """
    Keeps the speed/power/cadence series in sync with the selected workout.

    Selections go through a latest-wins slot; a single consumer task takes one
    workout at a time and refreshes all three series before looking at the slot
    again, so refreshes never overlap. A workout selected while a refresh runs
    is picked up next; anything it replaced in the slot is skipped.
    """

    def __init__(
        self,
        fetcher: StatisticsFetcher,
        *,
        on_publish: Callable[[SeriesSnapshot], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        aggregation: StatisticsOption = StatisticsOption.DISCRETE_AVERAGE,
        discard_stale_results: bool = False,
    ):
        self.fetcher = fetcher
        self.on_publish = on_publish
        self.on_error = on_error or print
        self.aggregation = aggregation
        self.discard_stale_results = bool(discard_stale_results)

        self.state = SeriesState()
        self.workout: WorkoutRef | None = None

        self._slot: LatestSlot[WorkoutRef] = LatestSlot()
        self._task: asyncio.Task | None = None
        self._refreshing = False
        self._idle = asyncio.Event()
        self._idle.set()
        # bumped on every selection; only consulted when discarding stale results
        self._generation = 0

    # ---- Selection ----
    def on_workout_selected(self, workout: WorkoutRef | None) -> None:
        self.workout = workout
        self._generation += 1
        if workout is None:
            self.state.clear()
            self._publish()
            return
        self._idle.clear()
        self._slot.put(workout)

    # ---- Lifecycle ----
    def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._consume())

    async def stop(self) -> None:
        self._slot.close()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        self._idle.set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    async def wait_idle(self) -> None:
        """Wait until nothing is pending in the slot and no refresh is running."""
        await self._idle.wait()

    async def _consume(self) -> None:
        while True:
            try:
                workout = await self._slot.get()
            except SlotClosed:
                return
            self._refreshing = True
            try:
                await self.refresh(workout)
            except Exception as e:
                self.on_error(f"⚠️  Refresh of workout {workout.id} failed: {e}")
            finally:
                self._refreshing = False
                if self._slot.empty:
                    self._idle.set()

    # ---- Refresh ----
    async def refresh(self, workout: WorkoutRef) -> None:
        generation = self._generation
        for spec in SERIES:
            points = await self._load_series(workout, spec)
            if self.discard_stale_results and generation != self._generation:
                return
            self.state.workout = workout
            self.state.replace(spec.key, points)
            self._publish()

    async def _load_series(self, workout: WorkoutRef, spec: SeriesSpec) -> list[ChartPoint]:
        try:
            stats = await self.fetcher.fetch(workout, spec.kind, self.aggregation)
            if not stats:
                return []
            return map_statistics(stats, spec.unit, spec.category)
        except Exception as e:
            self.on_error(f"⚠️  Could not load {spec.category.lower()} for workout {workout.id}: {e}")
            return []

    def _publish(self) -> None:
        if self.on_publish is not None:
            self.on_publish(self.state.snapshot())

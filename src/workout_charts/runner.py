import asyncio
import concurrent.futures
import threading
from collections.abc import Callable

from workout_charts.fetcher import StatisticsFetcher
from workout_charts.models import SeriesSnapshot, WorkoutRef
from workout_charts.pipeline import RefreshPipeline


class PipelineRunner:
    """Runs a RefreshPipeline on its own asyncio loop in a daemon thread."""

    def __init__(
        self,
        fetcher: StatisticsFetcher,
        on_publish: Callable[[SeriesSnapshot], None],
        on_error: Callable[[str], None],
        *,
        discard_stale_results: bool = False,
    ):
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()

        self.loop = asyncio.new_event_loop()
        self._stop_event = asyncio.Event()
        self.pipeline = RefreshPipeline(
            fetcher,
            on_publish=on_publish,
            on_error=on_error,
            discard_stale_results=discard_stale_results,
        )

    def start(self, timeout: float = 3.0) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        # selections made right after start() need the loop up
        self._ready.wait(timeout=timeout)

    def select(self, workout: WorkoutRef | None) -> None:
        """Thread-safe entry point for selection changes."""
        if not self.loop.is_running():
            return
        self.loop.call_soon_threadsafe(self.pipeline.on_workout_selected, workout)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block the calling thread until the pipeline has nothing left to do."""
        if not self.loop.is_running():
            return True

        async def _idle():
            # let any select() queued ahead of us land first
            await asyncio.sleep(0)
            await self.pipeline.wait_idle()

        fut = asyncio.run_coroutine_threadsafe(_idle(), self.loop)
        try:
            fut.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            fut.cancel()
            return False
        return True

    def shutdown(self) -> None:
        if not self.loop.is_running():
            return

        def _stop():
            self._stop_event.set()

        self.loop.call_soon_threadsafe(_stop)
        if self._thread:
            self._thread.join(timeout=3)
        self._thread = None

    def _run(self):
        asyncio.set_event_loop(self.loop)
        try:
            self.loop.run_until_complete(self._workflow())
        finally:
            self.loop.close()

    async def _workflow(self):
        self.pipeline.start()
        self._ready.set()
        try:
            await self._stop_event.wait()
        finally:
            await self.pipeline.stop()

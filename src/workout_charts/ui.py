import contextlib

import gi

from workout_charts.config import APP_ID, Settings
from workout_charts.database import HealthStore
from workout_charts.demo import seed_demo_workout
from workout_charts.fetcher import HealthStoreFetcher
from workout_charts.runner import PipelineRunner
from workout_charts.ui_charts import ChartPageUI

gi.require_versions({"Gtk": "4.0", "Adw": "1"})

from gi.repository import Adw, GLib  # noqa: E402

Adw.init()


class WorkoutChartsApp(Adw.Application):
    def __init__(self, settings: Settings, test_mode: bool = False):
        super().__init__(application_id=APP_ID)
        self.settings = settings
        self.test_mode = test_mode

        if settings.dark_mode == "auto":
            self.dark = Adw.StyleManager.get_default().get_dark()
        else:
            self.dark = settings.dark_mode == "true"

        self.window = None
        self.toast_overlay = None
        self.charts: ChartPageUI | None = None
        self.runner: PipelineRunner | None = None

        settings.database.parent.mkdir(parents=True, exist_ok=True)
        self.store = HealthStore(settings.database_url)
        if test_mode and not self.store.list_workouts():
            seed_demo_workout(self.store)

    def show_toast(self, message: str) -> None:
        print(message)
        if self.toast_overlay is None:
            return
        toast = Adw.Toast.new(message)
        self.toast_overlay.add_toast(toast)

    def _on_error(self, message: str) -> None:
        # Called on the pipeline thread
        GLib.idle_add(self.show_toast, message)

    def do_activate(self):
        if not self.window:
            self._build_ui()
        self.window.present()

    def _build_ui(self):
        self.window = Adw.ApplicationWindow(application=self)
        self.window.connect("close-request", lambda *a: (self.quit(), False)[1])
        self.window.set_title("Workout Charts")
        self.window.set_default_size(720, 1280)
        self.window.set_resizable(True)
        self.toast_overlay = Adw.ToastOverlay()
        self.window.set_content(self.toast_overlay)

        toolbar_view = Adw.ToolbarView()
        self.toast_overlay.set_child(toolbar_view)
        toolbar_view.add_top_bar(Adw.HeaderBar())

        self.charts = ChartPageUI(self)
        page = self.charts.build_page()

        self.runner = PipelineRunner(
            HealthStoreFetcher(self.store, interval_s=self.settings.bucket_seconds),
            on_publish=self.charts.on_publish,
            on_error=self._on_error,
            discard_stale_results=self.settings.discard_stale_results,
        )
        self.runner.start()

        toolbar_view.set_content(page)

    def do_shutdown(self):
        try:
            if self.runner:
                with contextlib.suppress(Exception):
                    self.runner.shutdown()
            with contextlib.suppress(Exception):
                self.store.flush()
        finally:
            # chain up by calling the base class with self
            Adw.Application.do_shutdown(self)

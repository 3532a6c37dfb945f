from typing import TYPE_CHECKING

import gi
from matplotlib.backends.backend_gtk4agg import FigureCanvasGTK4Agg as FigureCanvas

from workout_charts.charts import ChartSurface
from workout_charts.database import as_utc
from workout_charts.models import SeriesSnapshot, WorkoutRef
from workout_charts.summary import format_hms

gi.require_versions({"Gtk": "4.0", "Adw": "1"})
from gi.repository import GLib, Gtk  # noqa: E402

if TYPE_CHECKING:
    from workout_charts.ui import WorkoutChartsApp

NO_WORKOUT_ID = "none"


def _workout_label(w: WorkoutRef) -> str:
    text = as_utc(w.start).astimezone().strftime("%a, %b %d • %I:%M %p")
    if w.duration_s is not None:
        text += f"  ({format_hms(w.duration_s)})"
    return text


class ChartPageUI:
    def __init__(self, app: "WorkoutChartsApp"):
        self.app = app
        self.surface = ChartSurface(dark=app.dark)
        self._canvas: FigureCanvas | None = None
        self._workouts: dict[str, WorkoutRef] = {}

    # ---- Public: build page ----
    def build_page(self) -> Gtk.Widget:
        outer = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=12)
        for m in ("top", "bottom", "start", "end"):
            getattr(outer, f"set_margin_{m}")(12)

        row = Gtk.Box(orientation=Gtk.Orientation.HORIZONTAL, spacing=6)
        lbl = Gtk.Label(label="Workout")
        lbl.add_css_class("dim-label")
        lbl.set_xalign(0)
        self.workout_combo = Gtk.ComboBoxText()
        self.workout_combo.set_hexpand(True)
        self.workout_combo.connect("changed", self._on_workout_changed)
        row.append(lbl)
        row.append(self.workout_combo)
        outer.append(row)

        frame = Gtk.Frame()
        scroller = Gtk.ScrolledWindow()
        scroller.set_policy(Gtk.PolicyType.NEVER, Gtk.PolicyType.AUTOMATIC)
        scroller.set_vexpand(True)
        self._canvas = FigureCanvas(self.surface.figure)
        self._canvas.set_size_request(-1, 860)
        scroller.set_child(self._canvas)
        frame.set_child(scroller)
        outer.append(frame)

        GLib.idle_add(self.reload_workouts)
        return outer

    def reload_workouts(self):
        # Safe to call from GLib.idle_add
        current = self.workout_combo.get_active_id()
        self.workout_combo.remove_all()
        self._workouts.clear()

        self.workout_combo.append(NO_WORKOUT_ID, "No workout")
        for w in self.app.store.list_workouts():
            key = str(w.id)
            self._workouts[key] = w
            self.workout_combo.append(key, _workout_label(w))

        if current in self._workouts:
            self.workout_combo.set_active_id(current)
        elif self._workouts:
            # newest first
            self.workout_combo.set_active(1)
        else:
            self.workout_combo.set_active_id(NO_WORKOUT_ID)
        return False

    # ---- Event handlers ----
    def _on_workout_changed(self, combo: Gtk.ComboBoxText):
        active = combo.get_active_id()
        if active is None:
            return
        self.app.runner.select(self._workouts.get(active))

    def on_publish(self, snapshot: SeriesSnapshot) -> None:
        # Called on the pipeline thread
        GLib.idle_add(self._redraw, snapshot)

    def _redraw(self, snapshot: SeriesSnapshot):
        self.surface.render(snapshot)
        if self._canvas is not None:
            self._canvas.draw_idle()
        return False

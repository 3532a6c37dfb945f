from __future__ import annotations

from pathlib import Path

import numpy as np
from matplotlib.figure import Figure
from matplotlib.ticker import FuncFormatter

from workout_charts.models import ChartPoint, SeriesSnapshot
from workout_charts.series import SERIES
from workout_charts.summary import WorkoutSummary

DARK_THEME = {"bg": "#2e3436", "fg": "#ffffff", "grid": "#555555"}
LIGHT_THEME = {"bg": "#f9f9f9", "fg": "#000000", "grid": "#cccccc"}

SERIES_COLORS = {
    "speed": "#28b0ff",
    "power": "#ffac2f",
    "cadence": "#a0e0a0",
}


def catmull_rom(xs, ys, samples_per_segment: int = 8) -> tuple[np.ndarray, np.ndarray]:
    """
    Smooth a polyline with a uniform Catmull-Rom spline through every point.
    Fewer than three points are returned unchanged.
    """
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if x.size < 3 or samples_per_segment < 2:
        return x, y

    # pad ends so the curve starts and ends on the real points
    px = np.concatenate(([2 * x[0] - x[1]], x, [2 * x[-1] - x[-2]]))
    py = np.concatenate(([2 * y[0] - y[1]], y, [2 * y[-1] - y[-2]]))

    t = np.linspace(0.0, 1.0, samples_per_segment, endpoint=False)
    t2, t3 = t * t, t * t * t
    out_x, out_y = [], []
    for i in range(1, len(px) - 2):
        for p, out in ((px, out_x), (py, out_y)):
            p0, p1, p2, p3 = p[i - 1], p[i], p[i + 1], p[i + 2]
            out.append(
                0.5
                * (
                    2 * p1
                    + (-p0 + p2) * t
                    + (2 * p0 - 5 * p1 + 4 * p2 - p3) * t2
                    + (-p0 + 3 * p1 - 3 * p2 + p3) * t3
                )
            )
    sx = np.concatenate(out_x + [x[-1:]])
    sy = np.concatenate(out_y + [y[-1:]])
    return sx, sy


def _mmss(x, _pos):
    m, s = divmod(int(max(0, x)), 60)
    return f"{m:d}:{s:02d}"


class ChartSurface:
    """Speed, power and cadence charts plus a summary panel on one figure."""

    def __init__(self, dark: bool = False, figsize: tuple[float, float] = (6, 9), dpi: int = 96):
        self.theme = DARK_THEME if dark else LIGHT_THEME
        self.figure = Figure(figsize=figsize, dpi=dpi, constrained_layout=True)
        grid = self.figure.add_gridspec(4, 1, height_ratios=[3, 3, 3, 2])
        self.axes = {spec.key: self.figure.add_subplot(grid[i, 0]) for i, spec in enumerate(SERIES)}
        self.summary_ax = self.figure.add_subplot(grid[3, 0])
        self.figure.patch.set_facecolor(self.theme["bg"])
        self.render(SeriesSnapshot())

    def render(self, snapshot: SeriesSnapshot) -> Figure:
        # share one time origin so the three charts line up
        t0 = None
        if snapshot.workout is not None:
            t0 = snapshot.workout.start
        else:
            firsts = [
                getattr(snapshot, spec.key)[0].timestamp
                for spec in SERIES
                if getattr(snapshot, spec.key)
            ]
            t0 = min(firsts) if firsts else None

        for spec in SERIES:
            ax = self.axes[spec.key]
            ax.clear()
            self._apply_chart_style(ax)
            points = getattr(snapshot, spec.key)
            ax.set_ylabel(spec.ylabel, color=self.theme["fg"])
            if not points:
                ax.set_title(f"{spec.category}: no data", color=self.theme["fg"])
                continue
            ax.set_title(spec.category, color=self.theme["fg"])
            xs, ys = self._xy(points, t0)
            color = SERIES_COLORS[spec.key]
            if spec.key == "speed":
                sx, sy = catmull_rom(xs, ys)
                ax.plot(sx, sy, lw=2, color=color)
                ax.plot(xs, ys, linestyle="none", marker="o", ms=3, color=color)
            else:
                ax.plot(xs, ys, lw=2, color=color)
            ax.xaxis.set_major_formatter(FuncFormatter(_mmss))

        self.axes[SERIES[-1].key].set_xlabel("Time", color=self.theme["fg"])
        self._render_summary(snapshot)
        return self.figure

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        self.figure.savefig(path, facecolor=self.figure.get_facecolor())
        return path

    def _render_summary(self, snapshot: SeriesSnapshot) -> None:
        ax = self.summary_ax
        ax.clear()
        ax.axis("off")
        ax.set_title("Summary", color=self.theme["fg"])
        if snapshot.workout is None:
            ax.text(0.5, 0.5, "No workout selected.", ha="center", va="center", color=self.theme["fg"])
            return
        rows = WorkoutSummary.from_snapshot(snapshot.workout, snapshot).rows()
        half = (len(rows) + 1) // 2
        for col, chunk in enumerate((rows[:half], rows[half:])):
            for i, (label, value) in enumerate(chunk):
                y = 0.9 - i * (0.8 / max(1, half - 1)) if half > 1 else 0.5
                ax.text(0.02 + col * 0.5, y, f"{label}:", ha="left", va="center",
                        color=self.theme["fg"], alpha=0.7)
                ax.text(0.22 + col * 0.5, y, value, ha="left", va="center", color=self.theme["fg"])

    @staticmethod
    def _xy(points: tuple[ChartPoint, ...], t0) -> tuple[np.ndarray, np.ndarray]:
        origin = t0 or points[0].timestamp
        xs = np.array([(p.timestamp - origin).total_seconds() for p in points])
        ys = np.array([p.value for p in points])
        return xs, ys

    def _apply_chart_style(self, ax):
        ax.set_facecolor(self.theme["bg"])
        ax.xaxis.label.set_color(self.theme["fg"])
        ax.yaxis.label.set_color(self.theme["fg"])
        ax.tick_params(colors=self.theme["fg"])
        ax.grid(color=self.theme["grid"])

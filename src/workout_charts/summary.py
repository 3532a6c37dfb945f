import dataclasses
import datetime
from collections.abc import Iterable
from typing import Optional

from workout_charts.models import ChartPoint, SeriesSnapshot, WorkoutRef


def _safe_avg(vals: Iterable[float]) -> Optional[float]:
    vals = [v for v in vals if v is not None]
    return (sum(vals) / len(vals)) if vals else None


def format_hms(seconds: int) -> str:
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h:d}:{m:02d}:{s:02d}" if h else f"{m:d}:{s:02d}"


def format_distance_m(distance_m: Optional[float]) -> str:
    if not distance_m:
        return "—"
    miles = distance_m * 0.00062137119
    return f"{miles:.2f} mi"


def format_float(v: Optional[float], unit: str = "", digits: int = 0) -> str:
    if v is None:
        return "—"
    fmt = f"{{:.{digits}f}}"
    return (fmt.format(v) + (f" {unit}" if unit else "")).strip()


@dataclasses.dataclass
class WorkoutSummary:
    start_local: datetime.datetime
    duration_s: Optional[int]
    distance_m: Optional[float]
    energy_kj: Optional[float]
    avg_speed_mph: Optional[float]
    avg_power: Optional[float]
    max_power: Optional[float]
    avg_cadence: Optional[float]

    @classmethod
    def from_snapshot(cls, workout: WorkoutRef, snapshot: SeriesSnapshot) -> "WorkoutSummary":
        def values(points: tuple[ChartPoint, ...]) -> list[float]:
            return [p.value for p in points]

        power = values(snapshot.power)
        duration_s = workout.duration_s
        if duration_s is None and snapshot.speed:
            # still open: measure up to the newest point we have
            duration_s = max(0, int((snapshot.speed[-1].timestamp - workout.start).total_seconds()))

        return cls(
            start_local=workout.start.astimezone(),
            duration_s=duration_s,
            distance_m=workout.distance_m,
            energy_kj=workout.energy_kj,
            avg_speed_mph=_safe_avg(values(snapshot.speed)),
            avg_power=_safe_avg(power),
            max_power=max(power) if power else None,
            avg_cadence=_safe_avg(values(snapshot.cadence)),
        )

    def rows(self) -> list[tuple[str, str]]:
        return [
            ("Start", self.start_local.strftime("%a, %b %d • %I:%M %p")),
            ("Duration", format_hms(self.duration_s) if self.duration_s is not None else "—"),
            ("Distance", format_distance_m(self.distance_m)),
            ("Energy", format_float(self.energy_kj, "kJ", 1)),
            ("Avg Speed", format_float(self.avg_speed_mph, "mph", 1)),
            ("Avg Power", format_float(self.avg_power, "W", 0)),
            ("Max Power", format_float(self.max_power, "W", 0)),
            ("Avg Cadence", format_float(self.avg_cadence, "rpm", 0)),
        ]

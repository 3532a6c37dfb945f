from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from workout_charts.models import QuantityKind, WorkoutRef

if TYPE_CHECKING:
    from pathlib import Path

    from workout_charts.database import HealthStore


@dataclass
class ParsedRide:
    start: datetime.datetime
    end: datetime.datetime
    distance_m: float | None = None
    energy_kj: float | None = None
    # kind -> [(offset_ms, value in canonical unit)]
    samples: dict[QuantityKind, list[tuple[int, float]]] = field(default_factory=dict)


def _fnum(x) -> float | None:
    try:
        return float(x)
    except (TypeError, ValueError):
        return None


def _utc(ts: datetime.datetime) -> datetime.datetime:
    # FIT timestamps decode naive but are UTC
    if ts.tzinfo is None:
        return ts.replace(tzinfo=ZoneInfo("UTC"))
    return ts.astimezone(ZoneInfo("UTC"))


def build_ride(records: list[dict], session: dict | None = None) -> ParsedRide:
    """
    Turn decoded FIT ``record`` messages (plus the optional ``session``
    message) into per-kind samples.

    ``enhanced_speed`` wins over ``speed``; both are m/s. Records without a
    timestamp are skipped, fields that are missing just leave that kind out.
    """
    stamped = [r for r in records if isinstance(r.get("timestamp"), datetime.datetime)]
    if not stamped:
        raise ValueError("FIT file has no timestamped records")
    stamped.sort(key=lambda r: r["timestamp"])

    start = _utc(stamped[0]["timestamp"])
    end = _utc(stamped[-1]["timestamp"])
    session = session or {}

    ride = ParsedRide(start=start, end=end)
    if session.get("start_time") is not None:
        ride.start = min(start, _utc(session["start_time"]))
    elapsed = _fnum(session.get("total_elapsed_time"))
    if elapsed:
        ride.end = max(end, ride.start + datetime.timedelta(seconds=elapsed))

    ride.distance_m = _fnum(session.get("total_distance"))
    if ride.distance_m is None:
        dists = [_fnum(r.get("distance")) for r in stamped]
        dists = [d for d in dists if d is not None]
        ride.distance_m = dists[-1] if dists else None

    calories = _fnum(session.get("total_calories"))
    ride.energy_kj = calories * 4.184 if calories is not None else None

    fields = {
        QuantityKind.CYCLING_SPEED: ("enhanced_speed", "speed"),
        QuantityKind.CYCLING_POWER: ("power",),
        QuantityKind.CYCLING_CADENCE: ("cadence",),
    }
    for r in stamped:
        t_ms = int((_utc(r["timestamp"]) - ride.start).total_seconds() * 1000)
        for kind, keys in fields.items():
            value = None
            for k in keys:
                value = _fnum(r.get(k))
                if value is not None:
                    break
            if value is None:
                continue
            ride.samples.setdefault(kind, []).append((t_ms, value))
    return ride


def read_fit(path: Path) -> ParsedRide:
    from fitparse import FitFile

    ff = FitFile(str(path))
    records = [{f.name: f.value for f in msg} for msg in ff.get_messages("record")]
    sessions = [{f.name: f.value for f in msg} for msg in ff.get_messages("session")]
    return build_ride(records, sessions[0] if sessions else None)


def store_ride(ride: ParsedRide, store: HealthStore) -> WorkoutRef:
    workout = store.create_workout(start=ride.start, activity_type="cycling")
    for kind, rows in ride.samples.items():
        for t_ms, value in rows:
            store.insert_sample(workout.id, kind, t_ms, value)
    return store.finish_workout(
        workout.id, end=ride.end, distance_m=ride.distance_m, energy_kj=ride.energy_kj
    )


def import_fit(path: Path, store: HealthStore) -> WorkoutRef:
    return store_ride(read_fit(path), store)

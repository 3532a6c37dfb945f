from __future__ import annotations

import datetime
from pathlib import Path

import pytest
from workout_charts.database import HealthStore
from workout_charts.importers import build_ride, store_ride
from workout_charts.models import QuantityKind

T0 = datetime.datetime(2026, 1, 10, 7, 30, 0)  # FIT timestamps decode naive


def _records() -> list[dict]:
    return [
        {"timestamp": T0, "speed": 5.0, "power": 150, "cadence": 80, "distance": 0.0},
        {"timestamp": T0 + datetime.timedelta(seconds=1), "enhanced_speed": 6.0, "speed": 5.9,
         "power": None, "cadence": 82, "distance": 6.0},
        # no timestamp: skipped
        {"speed": 99.0},
        {"timestamp": T0 + datetime.timedelta(seconds=2), "speed": 6.5, "power": 170,
         "distance": 12.5},
    ]


def test_build_ride_from_records() -> None:
    ride = build_ride(_records())

    assert ride.start == T0.replace(tzinfo=datetime.timezone.utc)
    assert ride.end - ride.start == datetime.timedelta(seconds=2)
    assert ride.distance_m == 12.5
    assert ride.energy_kj is None
    assert ride.samples[QuantityKind.CYCLING_SPEED] == [(0, 5.0), (1000, 6.0), (2000, 6.5)]
    assert ride.samples[QuantityKind.CYCLING_POWER] == [(0, 150.0), (2000, 170.0)]
    assert ride.samples[QuantityKind.CYCLING_CADENCE] == [(0, 80.0), (1000, 82.0)]


def test_session_totals_take_precedence() -> None:
    session = {
        "start_time": T0,
        "total_elapsed_time": 60.0,
        "total_distance": 400.0,
        "total_calories": 10,
    }
    ride = build_ride(_records(), session)

    assert ride.end - ride.start == datetime.timedelta(seconds=60)
    assert ride.distance_m == 400.0
    assert ride.energy_kj == pytest.approx(41.84)


def test_no_records_is_an_error() -> None:
    with pytest.raises(ValueError):
        build_ride([{"speed": 3.0}])


def test_store_ride(tmp_path: Path) -> None:
    store = HealthStore(f"sqlite:///{tmp_path / 'workouts.db'}")
    w = store_ride(build_ride(_records()), store)

    assert w.duration_s == 2
    assert w.distance_m == 12.5
    assert store.samples(w.id, QuantityKind.CYCLING_POWER) == [(0, 150.0), (2000, 170.0)]

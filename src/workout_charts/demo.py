import datetime
import math
import random
from zoneinfo import ZoneInfo

from workout_charts.database import HealthStore
from workout_charts.models import QuantityKind, WorkoutRef


def seed_demo_workout(
    store: HealthStore,
    minutes: int = 30,
    seed: int | None = None,
    start: datetime.datetime | None = None,
) -> WorkoutRef:
    """
    Write a synthetic ride at 1 Hz: interval-style power, speed that follows
    power, cadence drifting between 75 and 100 rpm. The power meter drops out
    for a couple of minutes mid-ride so the charts show a gap.
    """
    rng = random.Random(seed)
    if start is None:
        start = datetime.datetime.now(tz=ZoneInfo("UTC")) - datetime.timedelta(minutes=minutes)

    workout = store.create_workout(start=start, activity_type="cycling")
    total_s = max(1, int(minutes * 60))
    dropout = (total_s // 2, total_s // 2 + 150)

    power = 150.0
    cadence = 86.0
    distance_m = 0.0
    energy_j = 0.0
    for t in range(total_s):
        # free-ride waves
        phase = t % 240
        target_power = rng.uniform(230, 300) if phase < 60 else rng.uniform(140, 180)
        power += 0.35 * (target_power - power)

        # crude drag model: v ~ cbrt(P)
        speed_mps = max(0.0, 2.0 * math.pow(power, 1 / 3) + rng.uniform(-0.2, 0.2))
        cadence = max(75.0, min(100.0, cadence + rng.uniform(-2, 2)))

        distance_m += speed_mps
        energy_j += power

        t_ms = t * 1000
        store.insert_sample(workout.id, QuantityKind.CYCLING_SPEED, t_ms, speed_mps)
        store.insert_sample(workout.id, QuantityKind.CYCLING_CADENCE, t_ms, cadence)
        if not (dropout[0] <= t < dropout[1]):
            store.insert_sample(workout.id, QuantityKind.CYCLING_POWER, t_ms, power)

    return store.finish_workout(
        workout.id,
        end=start + datetime.timedelta(seconds=total_s),
        distance_m=distance_m,
        energy_kj=energy_j / 1000.0,
    )

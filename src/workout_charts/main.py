import argparse
import asyncio
import signal
import sys
from pathlib import Path

from workout_charts.charts import ChartSurface
from workout_charts.config import Settings, load_settings
from workout_charts.database import HealthStore
from workout_charts.demo import seed_demo_workout
from workout_charts.fetcher import HealthStoreFetcher
from workout_charts.importers import import_fit
from workout_charts.models import WorkoutRef
from workout_charts.pipeline import RefreshPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Workout Charts")
    parser.add_argument(
        "--test",
        action="store_true",
        help="Seed a synthetic ride when the store is empty.",
    )
    parser.add_argument("--config", type=Path, help="Path to config.ini.")
    parser.add_argument("--database", type=Path, help="SQLite file to read workouts from.")
    parser.add_argument(
        "--import", dest="import_fit", type=Path, metavar="FIT", help="Import a FIT activity file."
    )
    parser.add_argument(
        "--render", type=Path, metavar="PNG", help="Render charts to an image instead of the UI."
    )
    parser.add_argument(
        "--workout", type=int, help="Workout id to render (default: most recent)."
    )
    return parser


async def render_workout(
    store: HealthStore, settings: Settings, workout: WorkoutRef, out: Path
) -> Path:
    pipeline = RefreshPipeline(
        HealthStoreFetcher(store, interval_s=settings.bucket_seconds),
        on_error=print,
        discard_stale_results=settings.discard_stale_results,
    )
    pipeline.start()
    try:
        pipeline.on_workout_selected(workout)
        await pipeline.wait_idle()
    finally:
        await pipeline.stop()

    surface = ChartSurface(dark=settings.dark_mode == "true")
    surface.render(pipeline.state.snapshot())
    return surface.save(out)


def _run_headless(args, settings: Settings) -> int:
    settings.database.parent.mkdir(parents=True, exist_ok=True)
    store = HealthStore(settings.database_url)

    if args.test and not store.list_workouts():
        w = seed_demo_workout(store)
        print(f"Seeded demo workout {w.id}")

    if args.import_fit:
        try:
            w = import_fit(args.import_fit, store)
        except (OSError, ValueError) as e:
            print(f"❌  Could not import {args.import_fit}: {e}")
            return 1
        print(f"Imported workout {w.id} from {args.import_fit.name}")

    if args.render:
        try:
            if args.workout is not None:
                workout = store.get_workout(args.workout)
            else:
                workouts = store.list_workouts()
                if not workouts:
                    print("❌  No workouts in the store")
                    return 1
                workout = workouts[0]
        except LookupError as e:
            print(f"❌  {e}")
            return 1
        out = asyncio.run(render_workout(store, settings, workout, args.render))
        print(f"Charts for workout {workout.id} written to {out}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings(args.config)
    if args.database:
        settings.database = args.database

    if args.import_fit or args.render:
        return _run_headless(args, settings)

    # GTK is only needed for the interactive UI
    from workout_charts.ui import WorkoutChartsApp
    from gi.repository import GLib

    app = WorkoutChartsApp(settings, test_mode=args.test)

    # Convert Unix signals to a graceful quit so do_shutdown() runs
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGINT, lambda *a: (app.quit(), False)[1])
    GLib.unix_signal_add(GLib.PRIORITY_DEFAULT, signal.SIGTERM, lambda *a: (app.quit(), False)[1])

    return app.run(None)


if __name__ == "__main__":
    sys.exit(main())

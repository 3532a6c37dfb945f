from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path

from workout_charts.statistics import DEFAULT_INTERVAL_S

APP_ID = "io.Luigi311.WorkoutCharts"


def default_app_dir() -> Path:
    return Path(f"~/.local/share/{APP_ID}").expanduser()


@dataclass
class Settings:
    database: Path
    bucket_seconds: float = DEFAULT_INTERVAL_S
    # "auto" follows the desktop style; otherwise "true"/"false"
    dark_mode: str = "auto"
    discard_stale_results: bool = False

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.database}"


def load_settings(config_file: Path | None = None, app_dir: Path | None = None) -> Settings:
    app_dir = app_dir or default_app_dir()
    config_file = config_file or app_dir / "config.ini"
    settings = Settings(database=app_dir / "workouts.db")

    if not config_file.exists():
        return settings

    cfg = ConfigParser()
    cfg.read(config_file)

    database = cfg.get("store", "database", fallback="")
    if database:
        settings.database = Path(database).expanduser()

    settings.bucket_seconds = cfg.getfloat(
        "charts", "bucket_seconds", fallback=settings.bucket_seconds
    )
    if settings.bucket_seconds <= 0:
        print(f"Ignoring bucket_seconds={settings.bucket_seconds}; using {DEFAULT_INTERVAL_S}")
        settings.bucket_seconds = DEFAULT_INTERVAL_S

    dark_mode = cfg.get("charts", "dark_mode", fallback="auto").strip().lower()
    settings.dark_mode = dark_mode if dark_mode in ("auto", "true", "false") else "auto"

    settings.discard_stale_results = cfg.getboolean(
        "pipeline", "discard_stale_results", fallback=settings.discard_stale_results
    )
    return settings


def save_settings(settings: Settings, config_file: Path) -> None:
    cfg = ConfigParser()
    cfg["store"] = {"database": str(settings.database)}
    cfg["charts"] = {
        "bucket_seconds": str(settings.bucket_seconds),
        "dark_mode": settings.dark_mode,
    }
    cfg["pipeline"] = {"discard_stale_results": str(settings.discard_stale_results)}

    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        cfg.write(f)

from __future__ import annotations

from pathlib import Path

from workout_charts.config import Settings, load_settings, save_settings
from workout_charts.statistics import DEFAULT_INTERVAL_S


def test_defaults_without_config_file(tmp_path: Path) -> None:
    settings = load_settings(app_dir=tmp_path)
    assert settings.database == tmp_path / "workouts.db"
    assert settings.bucket_seconds == DEFAULT_INTERVAL_S
    assert settings.dark_mode == "auto"
    assert settings.discard_stale_results is False
    assert settings.database_url == f"sqlite:///{tmp_path / 'workouts.db'}"


def test_save_and_load(tmp_path: Path) -> None:
    cfg = tmp_path / "conf" / "config.ini"
    save_settings(
        Settings(
            database=tmp_path / "other.db",
            bucket_seconds=30.0,
            dark_mode="true",
            discard_stale_results=True,
        ),
        cfg,
    )

    loaded = load_settings(cfg, app_dir=tmp_path)

    assert loaded.database == tmp_path / "other.db"
    assert loaded.bucket_seconds == 30.0
    assert loaded.dark_mode == "true"
    assert loaded.discard_stale_results is True


def test_invalid_values_fall_back(tmp_path: Path) -> None:
    cfg = tmp_path / "config.ini"
    cfg.write_text("[charts]\nbucket_seconds = -5\ndark_mode = purple\n")

    loaded = load_settings(cfg, app_dir=tmp_path)

    assert loaded.bucket_seconds == DEFAULT_INTERVAL_S
    assert loaded.dark_mode == "auto"
    assert loaded.database == tmp_path / "workouts.db"

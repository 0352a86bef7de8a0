import os
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest.mock import patch

from activity import ActivityKind
from app_config import AppConfigurationError, load_app_config, resolve_config_path
from app_config_schema import ActivitySettings, TimerSettings
from runtime import CycleConfig, CycleConfigurationError


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class AppConfigLoadingTests(unittest.TestCase):
    def test_empty_config_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "")

            app_config = load_app_config(str(config_path))

            self.assertEqual(str(config_path), app_config.source_file)
            self.assertEqual(1200.0, app_config.timer.work_duration_seconds)
            self.assertEqual(20.0, app_config.timer.break_duration_seconds)
            self.assertEqual(0.1, app_config.timer.tick_interval_seconds)
            self.assertEqual(3000.0, app_config.activities.manual_selection_window_ms)
            self.assertEqual(2, app_config.activities.history_depth)
            self.assertTrue(app_config.activities.auto_launch)
            self.assertEqual(8765, app_config.ui_server.port)
            self.assertEqual(100, app_config.statistics.max_records)
            self.assertEqual("INFO", app_config.logging.level)

    def test_load_app_config_resolves_relative_paths(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            config_path = root / "config.toml"
            _write_text(
                config_path,
                textwrap.dedent(
                    """
                    [ui_server]
                    index_file = "web/index.html"

                    [statistics]
                    export_file = "data/stats.json"
                    """
                ).strip(),
            )

            app_config = load_app_config(str(config_path))

            self.assertEqual(
                str((root / "web/index.html").resolve()),
                app_config.ui_server.index_file,
            )
            self.assertEqual(
                str((root / "data/stats.json").resolve()),
                app_config.statistics.export_file,
            )

    def test_load_app_config_parses_activity_section(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(
                config_path,
                textwrap.dedent(
                    """
                    [timer]
                    work_duration_seconds = 1500
                    break_duration_seconds = 30

                    [activities]
                    preferred_kind = "Blink_Exercise"
                    history_depth = 1
                    auto_launch = false

                    [logging]
                    level = "debug"
                    """
                ).strip(),
            )

            app_config = load_app_config(str(config_path))

            self.assertEqual(1500.0, app_config.timer.work_duration_seconds)
            self.assertEqual("blink_exercise", app_config.activities.preferred_kind)
            self.assertEqual(1, app_config.activities.history_depth)
            self.assertFalse(app_config.activities.auto_launch)
            self.assertEqual("DEBUG", app_config.logging.level)

    def test_load_app_config_rejects_non_positive_durations(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[timer]\nbreak_duration_seconds = 0\n")

            with self.assertRaises(AppConfigurationError) as context:
                load_app_config(str(config_path))

            self.assertIn("timer.break_duration_seconds", str(context.exception))

    def test_load_app_config_rejects_wrong_types(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[activities]\nauto_launch = \"maybe\"\n")

            with self.assertRaises(AppConfigurationError) as context:
                load_app_config(str(config_path))

            self.assertIn("activities.auto_launch", str(context.exception))

    def test_load_app_config_rejects_invalid_toml(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[timer\n")

            with self.assertRaises(AppConfigurationError):
                load_app_config(str(config_path))

    def test_load_app_config_rejects_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            with self.assertRaises(AppConfigurationError):
                load_app_config(str(Path(temp_dir) / "missing.toml"))

    def test_resolve_config_path_honours_environment(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "custom.toml"
            _write_text(config_path, "")

            with patch.dict(os.environ, {"APP_CONFIG_FILE": str(config_path)}):
                resolved = resolve_config_path()

            self.assertEqual(config_path, resolved)


class CycleConfigTests(unittest.TestCase):
    def test_from_settings_parses_preferred_kind(self) -> None:
        config = CycleConfig.from_settings(
            TimerSettings(work_duration_seconds=60),
            ActivitySettings(preferred_kind="near-far-focus"),
        )

        self.assertEqual(60.0, config.work_duration_seconds)
        self.assertEqual(ActivityKind.NEAR_FAR_FOCUS, config.preferred_kind)

    def test_from_settings_rejects_unknown_kind(self) -> None:
        with self.assertRaises(CycleConfigurationError):
            CycleConfig.from_settings(TimerSettings(), ActivitySettings(preferred_kind="yoga"))

    def test_history_depth_must_be_positive(self) -> None:
        with self.assertRaises(CycleConfigurationError):
            CycleConfig(history_depth=0)


if __name__ == "__main__":
    unittest.main()

"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    ActivitySettings,
    AppConfig,
    AppConfigurationError,
    LoggingSettings,
    StatisticsSettings,
    TimerSettings,
    UIServerSettings,
)

_ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        timer=_parse_timer_settings(_section(raw, "timer")),
        activities=_parse_activity_settings(_section(raw, "activities")),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir),
        statistics=_parse_statistics_settings(
            _section(raw, "statistics"),
            base_dir=base_dir,
        ),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    defaults = TimerSettings()
    return TimerSettings(
        work_duration_seconds=_as_positive_float(
            section.get("work_duration_seconds", defaults.work_duration_seconds),
            "timer.work_duration_seconds",
        ),
        break_duration_seconds=_as_positive_float(
            section.get("break_duration_seconds", defaults.break_duration_seconds),
            "timer.break_duration_seconds",
        ),
        tick_interval_seconds=_as_positive_float(
            section.get("tick_interval_seconds", defaults.tick_interval_seconds),
            "timer.tick_interval_seconds",
        ),
    )


def _parse_activity_settings(section: Mapping[str, Any]) -> ActivitySettings:
    defaults = ActivitySettings()
    return ActivitySettings(
        manual_selection_window_ms=_as_float(
            section.get("manual_selection_window_ms", defaults.manual_selection_window_ms),
            "activities.manual_selection_window_ms",
        ),
        history_depth=_as_int(
            section.get("history_depth", defaults.history_depth),
            "activities.history_depth",
        ),
        preferred_kind=_as_str(
            section.get("preferred_kind", defaults.preferred_kind),
            "activities.preferred_kind",
        ).lower(),
        auto_launch=_as_bool(
            section.get("auto_launch", defaults.auto_launch),
            "activities.auto_launch",
        ),
        enable_manual_selection=_as_bool(
            section.get("enable_manual_selection", defaults.enable_manual_selection),
            "activities.enable_manual_selection",
        ),
        launch_delay_seconds=_as_float(
            section.get("launch_delay_seconds", defaults.launch_delay_seconds),
            "activities.launch_delay_seconds",
        ),
        completion_delay_seconds=_as_float(
            section.get("completion_delay_seconds", defaults.completion_delay_seconds),
            "activities.completion_delay_seconds",
        ),
        completed_grace_seconds=_as_float(
            section.get("completed_grace_seconds", defaults.completed_grace_seconds),
            "activities.completed_grace_seconds",
        ),
    )


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file),
    )


def _parse_statistics_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StatisticsSettings:
    max_records = _as_int(section.get("max_records", 100), "statistics.max_records")
    if max_records < 1:
        raise AppConfigurationError("statistics.max_records must be >= 1.")
    export_file = _as_str(section.get("export_file", ""), "statistics.export_file")
    return StatisticsSettings(
        enabled=_as_bool(section.get("enabled", True), "statistics.enabled"),
        max_records=max_records,
        export_file=_resolve_path(base_dir, export_file),
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper() or "INFO"
    if level not in _ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(_ALLOWED_LOG_LEVELS))
        raise AppConfigurationError(f"logging.level must be one of: {allowed}.")
    return LoggingSettings(level=level)


def log_level(settings: LoggingSettings) -> int:
    return logging.getLevelName(settings.level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_positive_float(value: Any, field: str) -> float:
    number = _as_float(value, field)
    if number <= 0:
        raise AppConfigurationError(f"{field} must be > 0.")
    return number


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)

"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Work/break timing values loaded from `[timer]`."""
    work_duration_seconds: float = 1200.0
    break_duration_seconds: float = 20.0
    tick_interval_seconds: float = 0.1


@dataclass(frozen=True)
class ActivitySettings:
    """Break activity selection and pacing values from `[activities]`."""
    manual_selection_window_ms: float = 3000.0
    history_depth: int = 2
    preferred_kind: str = ""
    auto_launch: bool = True
    enable_manual_selection: bool = True
    launch_delay_seconds: float = 0.3
    completion_delay_seconds: float = 0.5
    completed_grace_seconds: float = 1.5


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class StatisticsSettings:
    """Session statistics settings from `[statistics]`."""
    enabled: bool = True
    max_records: int = 100
    export_file: str = ""


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings
    activities: ActivitySettings
    ui_server: UIServerSettings
    statistics: StatisticsSettings
    logging: LoggingSettings
    source_file: str

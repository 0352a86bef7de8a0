"""Cycle orchestration and runtime engine exports."""

from .config import CycleConfig, CycleConfigurationError
from .loop import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from .orchestrator import CycleActionResult, CycleSnapshot, Orchestrator

__all__ = [
    "CycleActionResult",
    "CycleConfig",
    "CycleConfigurationError",
    "CycleSnapshot",
    "Orchestrator",
    "RuntimeBootstrap",
    "RuntimeEngine",
    "RuntimeHooks",
]

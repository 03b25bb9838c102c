"""Core LevelList utilities.

This module exports core utilities for use throughout the application.
"""

from levelist.core.config import Settings, get_settings
from levelist.core.exceptions import (
    FieldError,
    ItemNotFoundError,
    ItemValidationError,
    LevelListError,
    ParseError,
    StorageError,
)
from levelist.core.logging import (
    LoggingContext,
    bind_session_id,
    clear_context,
    configure_logging,
    get_logger,
)
from levelist.core.scheduler import AsyncioScheduler, CancelToken, Scheduler, TimerSlot

__all__ = [
    "AsyncioScheduler",
    "CancelToken",
    "FieldError",
    "ItemNotFoundError",
    "ItemValidationError",
    "LevelListError",
    "LoggingContext",
    "ParseError",
    "Scheduler",
    "Settings",
    "StorageError",
    "TimerSlot",
    "bind_session_id",
    "clear_context",
    "configure_logging",
    "get_logger",
]

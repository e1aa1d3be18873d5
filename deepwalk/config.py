"""
Runtime configuration for deepwalk.

Values are read once from the environment at import time. Everything has
a safe default, so the library works with no configuration at all.

    DEEPWALK_STEP_LIMIT   default bounce budget for driver.run (0 = unlimited)
    DEEPWALK_LOG_LEVEL    log level applied by the command-line front end
"""

from __future__ import annotations

import logging
import os


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


# 0 means "no budget": the driver bounces until a terminal value appears.
DEFAULT_STEP_LIMIT = _int_from_env("DEEPWALK_STEP_LIMIT", 0)

LOG_LEVEL = os.environ.get("DEEPWALK_LOG_LEVEL", "WARNING").upper()


def log_level() -> int:
    """Return the configured log level as a logging constant."""
    level = logging.getLevelName(LOG_LEVEL)
    if not isinstance(level, int):
        raise ValueError(f"DEEPWALK_LOG_LEVEL is not a log level: {LOG_LEVEL!r}")
    return level

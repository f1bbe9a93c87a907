"""Helper utilities for debugging DRIFT-SIM execution."""

import os
import logging


def is_debug_enabled() -> bool:
    """Return ``True`` if ``DRIFT_SIM_DEBUG`` is set to a truthy value."""
    val = os.environ.get("DRIFT_SIM_DEBUG", "")
    return bool(val) and val.lower() not in {"0", "false", "no"}


def debug_print(*args, **kwargs) -> None:
    """Print only when ``DRIFT_SIM_DEBUG`` is enabled."""
    if is_debug_enabled():
        print(*args, **kwargs)


def verbose_to_level(verbose: int) -> int:
    """Map a process verbosity (0 quiet .. 3 chatty) onto a logging level."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def enable_debug_logging(default_level: str = "DEBUG") -> None:
    """Configure the ``drift_sim`` logger when debug mode is active.

    If ``DRIFT_SIM_DEBUG`` is enabled this sets up the ``drift_sim`` logger to
    emit messages to ``stderr`` using the log level from
    ``DRIFT_SIM_LOG_LEVEL`` if defined or ``default_level`` otherwise.
    """
    if not is_debug_enabled():
        return

    level_name = os.environ.get("DRIFT_SIM_LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level = logging.DEBUG

    logger = logging.getLogger("drift_sim")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)

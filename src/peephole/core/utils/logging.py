"""Logging utilities for peephole (thin wrappers).

The library only creates module loggers under the ``peephole`` namespace and
never installs handlers on import. ``configure_logging`` is provided for test
suites that want to see resolution and binding traces.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

ROOT_LOGGER_NAME = "peephole"

# Component groups that can be tuned together
COMPONENT_LOGGERS = {
    "resolver": ["peephole.core.resolver"],
    "binder": ["peephole.core.binder", "peephole.core.overloads", "peephole.core.members"],
    "events": ["peephole.core.events", "peephole.events"],
    "config": ["peephole.core.config"],
}

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a module logger by name (no prefixing).

    Args:
        name: Logger name (typically ``__name__``).

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)


def configure_logging(verbose: bool = False, level: Optional[Union[str, int]] = None) -> None:
    """Attach a stream handler to the ``peephole`` logger.

    Args:
        verbose: Log at DEBUG when True.
        level: Explicit level; defaults to the configured ``logging.level``.
    """
    if level is None:
        from peephole.core.config import get_config

        level = "DEBUG" if verbose else get_config().logging.level

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(_level_value(level))
    if not any(getattr(handler, "_peephole_handler", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._peephole_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)


def set_component_level(component: str, level: Union[str, int]) -> None:
    """Set log level for a specific component or group.

    Accepts either string levels (e.g., "INFO") or numeric constants.
    """
    level_value = _level_value(level)
    for name in COMPONENT_LOGGERS.get(component, [component]):
        logging.getLogger(name).setLevel(level_value)


def _level_value(level: Union[str, int]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level

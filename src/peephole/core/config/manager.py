"""Process-wide holder for the active configuration.

The configuration is loaded lazily on first access. Tests replace it with
``set_config`` and restore the defaults with ``reset_config``.
"""

import logging
import threading
from typing import Optional

from .loader import load_config
from .schema import PeepholeConfig

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_active: Optional[PeepholeConfig] = None


def get_config() -> PeepholeConfig:
    """Return the active configuration, loading it on first use."""
    global _active
    config = _active
    if config is not None:
        return config
    loaded = load_config()
    with _lock:
        if _active is None:
            _active = loaded
            logger.debug("Loaded peephole configuration: %s", loaded.model_dump())
        return _active


def set_config(config: PeepholeConfig) -> None:
    """Install ``config`` as the active configuration."""
    global _active
    with _lock:
        _active = config


def reset_config() -> None:
    """Drop the active configuration so the next access reloads it."""
    global _active
    with _lock:
        _active = None

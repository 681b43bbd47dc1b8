"""peephole configuration system.

Configuration is read from a YAML file and ``PEEPHOLE_*`` environment
variables, validated with Pydantic, and held process-wide.

Example usage:
```python
from peephole.core.config import get_config

config = get_config()
if not config.resolver.auto_import:
    ...
```

Environment overrides use the section and setting names, for example
``PEEPHOLE_RESOLVER_AUTO_IMPORT=false`` or
``PEEPHOLE_BINDING_STATIC_MASK=non_public,static``.
"""

from .exceptions import ConfigError
from .loader import load_config
from .manager import get_config, reset_config, set_config
from .schema import (
    BindingConfig,
    EventsConfig,
    LoggingConfig,
    PeepholeConfig,
    ResolverConfig,
)

__all__ = [
    "PeepholeConfig",
    "ResolverConfig",
    "BindingConfig",
    "EventsConfig",
    "LoggingConfig",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
    "ConfigError",
]

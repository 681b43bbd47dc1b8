"""Configuration exception module.

This module defines exception types specific to the configuration system.
"""

from peephole.core.exceptions import PeepholeError


class ConfigError(PeepholeError):
    """Exception raised for configuration errors.

    This includes errors such as:
    - Invalid configuration format
    - Configuration validation failures
    - File access errors
    """
    pass

"""Configuration schema module.

This module defines the data structures used for configuration in peephole.
The schemas are designed to be minimal but extensible through Pydantic.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator

from peephole.core.visibility import VisibilityMask


class ResolverConfig(BaseModel):
    """Configuration for type resolution.

    Attributes:
        auto_import: Import modules that are not loaded yet while resolving
        cache_enabled: Keep resolved type handles in the process-wide cache
    """

    auto_import: bool = True
    cache_enabled: bool = True

    # Allow arbitrary extension
    model_config = {"extra": "allow"}


class BindingConfig(BaseModel):
    """Configuration for member binding.

    Attributes:
        static_mask: Flags used by the static accessor helpers
    """

    static_mask: List[str] = Field(
        default_factory=lambda: ["public", "non_public", "static"]
    )

    model_config = {"extra": "allow"}

    @field_validator("static_mask")
    @classmethod
    def _known_flags(cls, value: List[str]) -> List[str]:
        mask = VisibilityMask.parse(value)
        if not mask & VisibilityMask.STATIC:
            raise ValueError("static_mask must include 'static'")
        return value

    @property
    def static_visibility(self) -> VisibilityMask:
        return VisibilityMask.parse(self.static_mask)


class EventsConfig(BaseModel):
    """Configuration for the event bridge.

    Attributes:
        check_signatures: Reject handlers that cannot accept the event's arguments
    """

    check_signatures: bool = True

    model_config = {"extra": "allow"}


class LoggingConfig(BaseModel):
    """Configuration for logging.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: str = "WARNING"

    # Allow arbitrary extension
    model_config = {"extra": "allow"}


class PeepholeConfig(BaseModel):
    """Root configuration with minimal required sections.

    Attributes:
        resolver: Type resolution configuration
        binding: Member binding configuration
        events: Event bridge configuration
        logging: Logging configuration
    """

    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    binding: BindingConfig = Field(default_factory=BindingConfig)
    events: EventsConfig = Field(default_factory=EventsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # Allow arbitrary extension
    model_config = {"extra": "allow"}

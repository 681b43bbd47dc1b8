"""Core components of peephole: resolution, binding, overloads and events."""

from __future__ import annotations

from peephole.core.exceptions import (
    AccessorError,
    AmbiguousMatchError,
    ArgumentNullError,
    ConstructorNotFoundError,
    EventSignatureError,
    GenericConstraintError,
    MemberNotFoundError,
    MissingEventError,
    PeepholeError,
    TargetInvocationError,
    TypeNotFoundError,
)
from peephole.core.visibility import VisibilityMask

__all__ = [
    "VisibilityMask",
    "PeepholeError",
    "AccessorError",
    "ArgumentNullError",
    "TypeNotFoundError",
    "MemberNotFoundError",
    "ConstructorNotFoundError",
    "AmbiguousMatchError",
    "GenericConstraintError",
    "MissingEventError",
    "EventSignatureError",
    "TargetInvocationError",
]

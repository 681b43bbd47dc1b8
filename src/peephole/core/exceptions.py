"""Exception hierarchy for peephole.

Every lookup or resolution failure maps to exactly one ``AccessorError``
subclass so tests can assert on the failure category rather than on message
text. Several kinds also derive from the closest builtin exception, which keeps
``except AttributeError`` style handling in calling code working.
"""

from typing import Any, Optional, Sequence


class PeepholeError(Exception):
    """Base class for all custom exceptions in the peephole library."""

    pass


class AccessorError(PeepholeError):
    """Base class for errors raised by the accessor layer itself."""

    pass


class ArgumentNullError(AccessorError, ValueError):
    """Raised when a required argument is ``None``.

    Checked before any lookup is attempted.
    """

    def __init__(self, argument: str) -> None:
        super().__init__(f"Argument '{argument}' must not be None.")
        self.argument = argument


class TypeNotFoundError(AccessorError):
    """Raised when a module or type cannot be resolved."""

    def __init__(self, assembly: str, type_name: str, reason: str = "") -> None:
        message = f"Type '{type_name}' was not found in '{assembly}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.assembly = assembly
        self.type_name = type_name


class MemberNotFoundError(AccessorError, AttributeError):
    """Raised when a field, property or method is not visible under the mask."""

    def __init__(self, type_name: str, member_name: str, reason: str = "") -> None:
        message = f"Member '{member_name}' not found on '{type_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.type_name = type_name
        self.member_name = member_name


class ConstructorNotFoundError(AccessorError):
    """Raised when no constructor accepts the supplied arguments."""

    def __init__(self, type_name: str, reason: str = "") -> None:
        message = f"No matching constructor on '{type_name}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.type_name = type_name


class AmbiguousMatchError(AccessorError):
    """Raised when overload resolution finds several equally good candidates."""

    def __init__(self, type_name: str, member_name: str, candidates: Sequence[Any]) -> None:
        rendered = ", ".join(str(candidate) for candidate in candidates)
        super().__init__(
            f"Ambiguous match for '{member_name}' on '{type_name}' between: {rendered}"
        )
        self.type_name = type_name
        self.member_name = member_name
        self.candidates = tuple(candidates)


class GenericConstraintError(AccessorError, TypeError):
    """Raised when generic arguments violate arity, bounds or constraints."""

    def __init__(self, type_name: str, message: str) -> None:
        super().__init__(f"{type_name}: {message}")
        self.type_name = type_name


class MissingEventError(AccessorError, AttributeError):
    """Raised when the named event does not exist on the instance's type."""

    def __init__(self, type_name: str, event_name: str) -> None:
        super().__init__(f"Event '{event_name}' not found on '{type_name}'")
        self.type_name = type_name
        self.event_name = event_name


class EventSignatureError(AccessorError, TypeError):
    """Raised when a handler cannot accept the event's declared arguments."""

    def __init__(self, event_name: str, handler: Any, arity: int) -> None:
        super().__init__(
            f"Handler {handler!r} cannot be bound to event '{event_name}' "
            f"which passes {arity} argument(s)"
        )
        self.event_name = event_name
        self.handler = handler
        self.arity = arity


class TargetInvocationError(PeepholeError):
    """Wraps an exception raised by tested code during a reflected call.

    The binder never lets this escape; ``peephole.core.unwrap`` strips it so the
    caller sees the inner exception unchanged.
    """

    def __init__(self, inner: BaseException, member_name: Optional[str] = None) -> None:
        super().__init__(f"Exception raised by invocation target '{member_name}': {inner!r}")
        self.inner = inner
        self.member_name = member_name


__all__ = [
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

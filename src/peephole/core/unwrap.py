"""Removal of invocation-wrapper packaging.

The introspection primitives report failures of tested code as
``TargetInvocationError``. ``unwrapped`` strips exactly one such layer and
re-raises the inner exception itself, so its class, message, traceback,
``__cause__`` and ``__context__`` are the ones a direct call would have shown.
Errors raised by the accessor layer (``AccessorError``) are never wrapped and
pass through unchanged.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from peephole.core.exceptions import TargetInvocationError

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def unwrapped(func: F) -> F:
    """Decorate an operation so tested-code failures surface unwrapped."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except TargetInvocationError as invocation:
            inner = invocation.inner
            logger.debug(
                "Unwrapping %s raised by '%s'", type(inner).__name__, invocation.member_name
            )
        # Raised outside the handler so the wrapper does not become the context
        raise inner

    return wrapper  # type: ignore[return-value]


def call_unwrapped(operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run ``operation`` once with unwrapping, for one-off calls."""
    return unwrapped(operation)(*args, **kwargs)

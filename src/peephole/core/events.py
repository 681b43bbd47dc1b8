"""Attaching handlers to events of a live instance.

Events are found on the instance's runtime class whatever their visibility,
so a private ``__changed`` event is as reachable as a public one. The bridge
only registers handlers; when tested code raises the event it runs its own
raiser, and nothing defined on an accessor is involved.
"""

import inspect
import logging
from typing import Any, Callable, Optional

from peephole.core.config import get_config
from peephole.core.exceptions import ArgumentNullError, EventSignatureError, MissingEventError
from peephole.core.members import MemberLookup, find_event

logger = logging.getLogger(__name__)


class EventBridge:
    """Subscribes and unsubscribes handlers by event name.

    Args:
        check_signatures: Reject handlers that cannot take the event's
            arguments. Defaults to the ``events.check_signatures`` setting.
    """

    def __init__(self, check_signatures: Optional[bool] = None) -> None:
        if check_signatures is None:
            check_signatures = get_config().events.check_signatures
        self.check_signatures = check_signatures

    def subscribe(self, instance: Any, event_name: str, handler: Callable[..., Any]) -> None:
        """Add ``handler`` to the event ``event_name`` of ``instance``.

        Raises:
            ArgumentNullError: If any argument is None.
            MissingEventError: If the instance's class declares no such event.
            EventSignatureError: If the handler cannot accept the event's arguments.
        """
        lookup = self._prepare(instance, event_name, handler)
        lookup.raw.add_handler(instance, handler)
        logger.debug("Subscribed %r to %s.%s", handler, type(instance).__name__, event_name)

    def unsubscribe(self, instance: Any, event_name: str, handler: Callable[..., Any]) -> None:
        """Remove ``handler`` from the event; unknown handlers are ignored.

        Raises:
            ArgumentNullError: If any argument is None.
            MissingEventError: If the instance's class declares no such event.
            EventSignatureError: If the handler cannot accept the event's arguments.
        """
        lookup = self._prepare(instance, event_name, handler)
        lookup.raw.remove_handler(instance, handler)
        logger.debug("Unsubscribed %r from %s.%s", handler, type(instance).__name__, event_name)

    def _prepare(self, instance: Any, event_name: str, handler: Callable[..., Any]) -> MemberLookup:
        if event_name is None:
            raise ArgumentNullError("event_name")
        if handler is None:
            raise ArgumentNullError("handler")
        if instance is None:
            raise ArgumentNullError("instance")

        cls = type(instance)
        lookup = find_event(cls, event_name)
        if not lookup.found:
            raise MissingEventError(cls.__qualname__, event_name)

        arity = lookup.raw.arity
        if self.check_signatures and arity is not None and not _accepts(handler, arity):
            raise EventSignatureError(event_name, handler, arity)
        return lookup


def _accepts(handler: Callable[..., Any], arity: int) -> bool:
    if not callable(handler):
        return False
    try:
        signature = inspect.signature(handler)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures are taken on trust
        return True
    try:
        signature.bind(*range(arity))
    except TypeError:
        return False
    return True


def subscribe(instance: Any, event_name: str, handler: Callable[..., Any]) -> None:
    EventBridge().subscribe(instance, event_name, handler)


def unsubscribe(instance: Any, event_name: str, handler: Callable[..., Any]) -> None:
    EventBridge().unsubscribe(instance, event_name, handler)

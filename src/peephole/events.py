"""Declarative events for classes under test.

An ``Event`` is a class attribute holding a per-instance list of handlers::

    class Downloader:
        progress = Event(object, int)

        def _on_progress(self, percent):
            self.progress.fire(self, percent)

    downloader.progress += handler
    downloader.progress -= handler

Handlers run in subscription order. Removing a handler that was never added
does nothing; a handler added twice runs twice and is removed one at a time.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class Event:
    """Class-level event declaration.

    Args:
        *arg_types: Types of the arguments passed to handlers; only their
            count is enforced when handlers are attached through the bridge.
        doc: Optional description.
    """

    def __init__(self, *arg_types: Any, doc: Optional[str] = None) -> None:
        self.arg_types: Tuple[Any, ...] = arg_types
        self.name = ""
        self._storage = ""
        self.__doc__ = doc

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name
        self._storage = f"_event_handlers_{name}"

    @property
    def arity(self) -> Optional[int]:
        return len(self.arg_types)

    def __get__(self, instance: Any, owner: Optional[type] = None) -> Any:
        if instance is None:
            return self
        return BoundEvent(self, instance)

    def __set__(self, instance: Any, value: Any) -> None:
        # ``obj.event += handler`` assigns the bound event back to the attribute
        if isinstance(value, BoundEvent) and value.event is self and value.instance is instance:
            return
        raise AttributeError(f"Event '{self.name}' cannot be reassigned")

    def handlers(self, instance: Any) -> List[Handler]:
        return vars(instance).setdefault(self._storage, [])

    def add_handler(self, instance: Any, handler: Handler) -> None:
        self.handlers(instance).append(handler)

    def remove_handler(self, instance: Any, handler: Handler) -> None:
        handlers = self.handlers(instance)
        for index in range(len(handlers) - 1, -1, -1):
            if handlers[index] == handler:
                del handlers[index]
                return
        logger.debug("Handler %r was not subscribed to '%s'", handler, self.name)

    def fire(self, instance: Any, *args: Any) -> None:
        for handler in list(self.handlers(instance)):
            handler(*args)


class BoundEvent:
    """An ``Event`` seen through one instance."""

    def __init__(self, event: Event, instance: Any) -> None:
        self.event = event
        self.instance = instance

    def add(self, handler: Handler) -> None:
        self.event.add_handler(self.instance, handler)

    def remove(self, handler: Handler) -> None:
        self.event.remove_handler(self.instance, handler)

    def fire(self, *args: Any) -> None:
        self.event.fire(self.instance, *args)

    def __iadd__(self, handler: Handler) -> "BoundEvent":
        self.add(handler)
        return self

    def __isub__(self, handler: Handler) -> "BoundEvent":
        self.remove(handler)
        return self

    def __len__(self) -> int:
        return len(self.event.handlers(self.instance))

    def __repr__(self) -> str:
        return f"<BoundEvent {self.event.name} handlers={len(self)}>"

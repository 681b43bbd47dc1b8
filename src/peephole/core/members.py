"""Name-driven member lookup.

``find_member`` answers "what is ``name`` on this class/instance under this
mask" with a tagged ``MemberLookup`` instead of reflection metadata objects.
The primitives here never guess: anything that does not match the mask comes
back as ``MemberKind.NOT_FOUND``.

Classification:

* instance field: entry in the instance ``__dict__`` or a ``__slots__`` slot
* static field: plain class attribute on the MRO
* property: data descriptor on the class (``property`` and friends)
* method: function (instance), ``staticmethod``/``classmethod`` (static);
  ``singledispatchmethod`` takes the scope of its dispatch function
* event: an object honouring the ``EventSource`` protocol
"""

import functools
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from types import FunctionType, MemberDescriptorType
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from peephole.core.exceptions import TargetInvocationError
from peephole.core.visibility import VisibilityMask, mangled_names

logger = logging.getLogger(__name__)

_MISSING = object()


class MemberKind(Enum):
    FIELD = "field"
    PROPERTY = "property"
    METHOD = "method"
    EVENT = "event"
    NOT_FOUND = "not-found"


@runtime_checkable
class EventSource(Protocol):
    """What a class attribute must provide to be treated as an event."""

    def add_handler(self, instance: Any, handler: Callable[..., Any]) -> None: ...

    def remove_handler(self, instance: Any, handler: Callable[..., Any]) -> None: ...

    @property
    def arity(self) -> Optional[int]: ...


@dataclass(frozen=True)
class MemberLookup:
    """Outcome of a member lookup.

    Attributes:
        kind: What was found.
        name: Requested name.
        attribute: Name the member is stored under (differs for mangled names).
        owner: Class on the MRO declaring it, None for instance fields.
        raw: The class-level object (descriptor, function, value).
        is_static: Whether the member is static.
    """

    kind: MemberKind
    name: str
    attribute: str = ""
    owner: Optional[type] = None
    raw: Any = None
    is_static: bool = False

    @property
    def found(self) -> bool:
        return self.kind is not MemberKind.NOT_FOUND


def not_found(name: str) -> MemberLookup:
    return MemberLookup(MemberKind.NOT_FOUND, name)


def _class_entry(cls: type, attribute: str) -> Any:
    for klass in cls.__mro__:
        if attribute in vars(klass):
            return klass, vars(klass)[attribute]
    return None, _MISSING


def _is_data_descriptor(value: Any) -> bool:
    kind = type(value)
    return hasattr(kind, "__get__") and (hasattr(kind, "__set__") or hasattr(kind, "__delete__"))


def _method_scope(value: Any) -> Optional[bool]:
    """None when ``value`` is not a method, else whether it is static."""
    if isinstance(value, (staticmethod, classmethod)):
        return True
    if isinstance(value, FunctionType):
        return False
    if isinstance(value, functools.singledispatchmethod):
        return isinstance(value.func, (staticmethod, classmethod))
    if isinstance(value, functools.partialmethod):
        return False
    return None


def classify(cls: type, instance: Any, attribute: str, name: str) -> MemberLookup:
    """Classify ``attribute`` on ``cls`` (and ``instance``) ignoring the mask."""
    owner, value = _class_entry(cls, attribute)

    if value is not _MISSING:
        if isinstance(value, EventSource):
            return MemberLookup(MemberKind.EVENT, name, attribute, owner, value, False)
        if isinstance(value, MemberDescriptorType):
            # __slots__ entry; an instance field
            return MemberLookup(MemberKind.FIELD, name, attribute, owner, value, False)
        scope = _method_scope(value)
        if scope is not None:
            return MemberLookup(MemberKind.METHOD, name, attribute, owner, value, scope)
        if _is_data_descriptor(value) or isinstance(value, functools.cached_property):
            return MemberLookup(MemberKind.PROPERTY, name, attribute, owner, value, False)

    if instance is not None:
        instance_dict = getattr(instance, "__dict__", None)
        if instance_dict is not None and attribute in instance_dict:
            return MemberLookup(
                MemberKind.FIELD, name, attribute, None, instance_dict[attribute], False
            )

    if value is not _MISSING:
        if callable(value) and not isinstance(value, type):
            # Callable objects stored on the class behave like static methods
            return MemberLookup(MemberKind.METHOD, name, attribute, owner, value, True)
        return MemberLookup(MemberKind.FIELD, name, attribute, owner, value, True)

    return not_found(name)


def find_member(cls: type, instance: Any, name: str, mask: VisibilityMask) -> MemberLookup:
    """Look ``name`` up on ``cls``/``instance`` under ``mask``.

    Name-mangled spellings are tried for ``__private`` names; the visibility
    check uses the requested spelling.
    """
    if not mask.allows_name(name):
        return not_found(name)
    for attribute in mangled_names(name, cls):
        lookup = classify(cls, instance, attribute, name)
        if not lookup.found:
            continue
        if lookup.kind is MemberKind.EVENT:
            # Events are reached through the event bridge only
            continue
        if not mask.allows_scope(lookup.is_static):
            continue
        if not lookup.is_static and instance is None:
            continue
        return lookup
    return not_found(name)


def find_event(cls: type, name: str) -> MemberLookup:
    """Look an event up regardless of visibility."""
    for attribute in mangled_names(name, cls):
        lookup = classify(cls, None, attribute, name)
        if lookup.kind is MemberKind.EVENT:
            return lookup
    return not_found(name)


def read_value(lookup: MemberLookup, cls: type, instance: Any) -> Any:
    """Read a field or property found by ``find_member``.

    Raises:
        AttributeError: For a ``__slots__`` field that was never assigned.
    """
    if lookup.kind is MemberKind.PROPERTY:
        return call_target(lookup.name, lookup.raw.__get__, instance, cls)
    if lookup.is_static:
        return lookup.raw
    if isinstance(lookup.raw, MemberDescriptorType):
        return lookup.raw.__get__(instance, cls)
    return vars(instance)[lookup.attribute]


def can_write(lookup: MemberLookup) -> bool:
    if lookup.kind is MemberKind.PROPERTY:
        if isinstance(lookup.raw, property):
            return lookup.raw.fset is not None
        return isinstance(lookup.raw, functools.cached_property) or hasattr(
            type(lookup.raw), "__set__"
        )
    return lookup.kind is MemberKind.FIELD


def write_value(lookup: MemberLookup, instance: Any, value: Any) -> None:
    """Write a field or property found by ``find_member``."""
    if isinstance(lookup.raw, functools.cached_property):
        vars(instance)[lookup.attribute] = value
    elif lookup.kind is MemberKind.PROPERTY:
        call_target(lookup.name, lookup.raw.__set__, instance, value)
    elif lookup.is_static:
        setattr(lookup.owner, lookup.attribute, value)
    elif isinstance(lookup.raw, MemberDescriptorType):
        lookup.raw.__set__(instance, value)
    else:
        vars(instance)[lookup.attribute] = value


def call_target(member_name: str, target: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Call tested code, packaging anything it raises in ``TargetInvocationError``."""
    try:
        return target(*args, **kwargs)
    except Exception as e:
        raise TargetInvocationError(e, member_name) from e


def describe(lookup: MemberLookup) -> str:
    scope = "static" if lookup.is_static else "instance"
    return f"{scope} {lookup.kind.value} {lookup.attribute or lookup.name}"


def signature_of(func: Callable[..., Any]) -> Optional[inspect.Signature]:
    """Signature with string annotations evaluated where possible."""
    try:
        return inspect.signature(func, eval_str=True)
    except NameError:
        logger.debug("Unresolvable annotations on %r, using them unevaluated", func)
    except (TypeError, ValueError):
        return None
    try:
        return inspect.signature(func)
    except (TypeError, ValueError):
        return None

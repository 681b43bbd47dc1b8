"""Base class for accessors to public and non-public members of a class.

An accessor is a hand-written proxy class that mirrors the class under test
and forwards every member by name::

    class CounterAccessor(AccessorBase):
        binding_flags = VisibilityMask.PUBLIC | VisibilityMask.NON_PUBLIC | VisibilityMask.INSTANCE

        def __init__(self, start):
            super().__init__("app.counters", "Counter", start)

        @property
        def count(self):
            return self._get_field_or_property("_count")

        def increment(self, step):
            return self._invoke("_increment", step)

Construction variants:

* direct: ``AccessorBase.__init__(assembly, type_name, *args)`` resolves the
  type and constructs a new instance;
* from a handle: ``Accessor.from_handle(handle, *args)``, used for nested
  types resolved with ``TypeHandle.nested``;
* wrap: ``Accessor.wrap(obj_or_binder)`` adopts an object some other call
  returned and yields None when that object is None;
* chained: a derived accessor calls ``self._construct_named(assembly,
  type_name, *args)`` or ``self._construct(handle, *args)`` so the accessor
  hierarchy can mirror the tested class hierarchy. Both paths end in
  ``_construct``; levels that keep their own state override it and forward
  to ``super()._construct``.
"""

import logging
from typing import Any, Callable, Optional, Sequence, Type, TypeVar, Union

from peephole.core.binder import ObjectBinder
from peephole.core.config import get_config
from peephole.core.events import EventBridge
from peephole.core.exceptions import ArgumentNullError
from peephole.core.resolver import TypeHandle, resolve_type
from peephole.core.visibility import VisibilityMask

logger = logging.getLogger(__name__)

A = TypeVar("A", bound="AccessorBase")


class AccessorBase:
    """Proxy base composing a resolved type handle and an ``ObjectBinder``.

    Attributes:
        binding_flags: Mask used by every member access of this accessor.
            Override it on the subclass to widen or narrow the scope, or
            assign it on an instance.
    """

    binding_flags: VisibilityMask = VisibilityMask.PUBLIC | VisibilityMask.INSTANCE

    _binder: ObjectBinder

    def __init__(
        self,
        assembly: str,
        type_name: str,
        *args: Any,
        generic_args: Sequence[Any] = (),
        param_types: Optional[Sequence[Any]] = None,
    ) -> None:
        """Resolve ``type_name`` in module ``assembly`` and construct it.

        Args:
            assembly: Module path containing the class.
            type_name: Qualified class name, nested classes separated by ``.``.
            *args: Constructor arguments.
            generic_args: Type arguments for a generic class.
            param_types: Exact constructor parameter types.

        Raises:
            ArgumentNullError: If ``assembly`` or ``type_name`` is None.
            TypeNotFoundError: If the class cannot be found.
            GenericConstraintError: If ``generic_args`` do not fit the class.
            ConstructorNotFoundError: If no constructor accepts ``args``.
        """
        self._construct_named(
            assembly, type_name, *args, generic_args=generic_args, param_types=param_types
        )

    def _construct_named(
        self,
        assembly: str,
        type_name: str,
        *args: Any,
        generic_args: Sequence[Any] = (),
        param_types: Optional[Sequence[Any]] = None,
    ) -> None:
        """Chained construction from a module path and class name."""
        handle = resolve_type(assembly, type_name, generic_args)
        self._construct(handle, *args, param_types=param_types)

    def _construct(
        self,
        handle: TypeHandle,
        *args: Any,
        param_types: Optional[Sequence[Any]] = None,
    ) -> None:
        """Chained construction entry point for derived accessors."""
        self._attach(
            ObjectBinder.create_instance(handle, args, param_types, self.binding_flags)
        )

    def _attach(self, binder: ObjectBinder) -> None:
        self._binder = binder

    @classmethod
    def from_handle(
        cls: Type[A],
        handle: TypeHandle,
        *args: Any,
        param_types: Optional[Sequence[Any]] = None,
    ) -> A:
        """Construct a new instance of ``handle`` behind an accessor of this class."""
        if handle is None:
            raise ArgumentNullError("handle")
        accessor = cls.__new__(cls)
        accessor._construct(handle, *args, param_types=param_types)
        return accessor

    @classmethod
    def wrap(cls: Type[A], target: Union[ObjectBinder, Any, None]) -> Optional[A]:
        """Adopt an existing binder or object without constructing anything.

        Returns:
            The accessor, or None when there is no object to wrap.
        """
        binder = target if isinstance(target, ObjectBinder) else ObjectBinder.wrap(target)
        if binder is None or binder.instance is None:
            return None
        accessor = cls.__new__(cls)
        accessor._attach(binder)
        return accessor

    @property
    def __target__(self) -> Any:
        """The wrapped live instance, for passing into other reflected calls."""
        return self._binder.instance

    @property
    def binder(self) -> ObjectBinder:
        return self._binder

    def _get_field_or_property(self, name: str) -> Any:
        return self._binder.get(name, self.binding_flags)

    def _set_field_or_property(self, name: str, value: Any) -> None:
        self._binder.set(name, self.binding_flags, value)

    def _invoke(
        self,
        name: str,
        *args: Any,
        param_types: Optional[Sequence[Any]] = None,
        generic_args: Optional[Sequence[Any]] = None,
    ) -> Any:
        return self._binder.invoke(name, self.binding_flags, args, param_types, generic_args)

    def _add_event_handler(self, event_name: str, handler: Callable[..., Any]) -> None:
        """Subscribe to an event; ``binding_flags`` does not apply to events."""
        EventBridge().subscribe(self._binder.instance, event_name, handler)

    def _remove_event_handler(self, event_name: str, handler: Callable[..., Any]) -> None:
        """Unsubscribe from an event; ``binding_flags`` does not apply to events."""
        EventBridge().unsubscribe(self._binder.instance, event_name, handler)

    @staticmethod
    def get_static(handle: TypeHandle, name: str, mask: Optional[VisibilityMask] = None) -> Any:
        """Read a static field of ``handle``."""
        return ObjectBinder.create_static(handle).get(name, _static_mask(mask))

    @staticmethod
    def set_static(
        handle: TypeHandle, name: str, value: Any, mask: Optional[VisibilityMask] = None
    ) -> None:
        """Assign a static field of ``handle``."""
        ObjectBinder.create_static(handle).set(name, _static_mask(mask), value)

    @staticmethod
    def invoke_static(
        handle: TypeHandle,
        name: str,
        *args: Any,
        param_types: Optional[Sequence[Any]] = None,
        generic_args: Optional[Sequence[Any]] = None,
        mask: Optional[VisibilityMask] = None,
    ) -> Any:
        """Call a static or class method of ``handle``."""
        return ObjectBinder.create_static(handle).invoke(
            name, _static_mask(mask), args, param_types, generic_args
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} for {self._binder.handle.display()}>"


def _static_mask(mask: Optional[VisibilityMask]) -> VisibilityMask:
    if mask is None:
        return get_config().binding.static_visibility
    return mask | VisibilityMask.STATIC

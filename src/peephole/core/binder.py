"""Binding of get/set/invoke operations to a resolved type.

An ``ObjectBinder`` pairs a ``TypeHandle`` with an optional live instance.
Binders made for static access never hold an instance; instance binders hold
exactly one, fixed at construction. The binder does not own the instance.

Every operation runs through ``unwrapped`` so exceptions raised by tested code
reach the caller as if the member had been called directly.
"""

import inspect
import logging
from typing import Any, Dict, Optional, Sequence, TypeVar

from peephole.core.exceptions import (
    ArgumentNullError,
    ConstructorNotFoundError,
    MemberNotFoundError,
)
from peephole.core.generics import inherited_bindings
from peephole.core.members import (
    MemberKind,
    MemberLookup,
    call_target,
    can_write,
    describe,
    find_member,
    read_value,
    write_value,
)
from peephole.core.overloads import constructor_candidates, method_candidates, select_candidate
from peephole.core.resolver import TypeHandle, get_type_resolver
from peephole.core.unwrap import unwrapped
from peephole.core.visibility import VisibilityMask

logger = logging.getLogger(__name__)


def _normalize_types(types: Optional[Sequence[Any]]) -> Optional[Sequence[Any]]:
    if types is None:
        return None
    return [t.runtime_type if isinstance(t, TypeHandle) else t for t in types]


class ObjectBinder:
    """Get/set/invoke by name against a type handle and optional instance.

    Use ``create_instance``, ``create_static`` or ``wrap`` rather than the
    constructor.
    """

    __slots__ = ("_handle", "_instance")

    def __init__(self, handle: TypeHandle, instance: Any = None) -> None:
        if handle is None:
            raise ArgumentNullError("handle")
        self._handle = handle
        self._instance = instance

    @property
    def handle(self) -> TypeHandle:
        return self._handle

    @property
    def instance(self) -> Any:
        """The wrapped live instance, None for static binders."""
        return self._instance

    @property
    def is_static(self) -> bool:
        return self._instance is None

    @property
    def target_type(self) -> type:
        """Class members are looked up on: the instance's class or the handle's."""
        if self._instance is not None:
            return type(self._instance)
        return self._handle.type

    @classmethod
    @unwrapped
    def create_instance(
        cls,
        handle: TypeHandle,
        ctor_args: Sequence[Any] = (),
        ctor_param_types: Optional[Sequence[Any]] = None,
        mask: VisibilityMask = VisibilityMask.DEFAULT,
    ) -> "ObjectBinder":
        """Construct an instance of ``handle`` and bind to it.

        ``mask`` is accepted for symmetry with the other operations; Python
        constructors carry no visibility, so every ``__init__`` is reachable.

        Raises:
            ConstructorNotFoundError: If no constructor accepts the arguments or
                the class is abstract.
            AmbiguousMatchError: If several constructors fit equally well.
        """
        if handle is None:
            raise ArgumentNullError("handle")
        target = handle.type
        display = handle.display()
        if inspect.isabstract(target):
            raise ConstructorNotFoundError(display, "class is abstract")

        selection = select_candidate(
            constructor_candidates(target, handle.runtime_type),
            list(ctor_args),
            owner=display,
            member="__init__",
            param_types=_normalize_types(ctor_param_types),
            class_bindings=handle.type_bindings,
            not_found=lambda reason: ConstructorNotFoundError(display, reason),
        )
        factory = selection.candidate.bind(None)
        instance = call_target("__init__", factory, *ctor_args)
        logger.debug("Constructed %s via %s", display, selection.candidate)
        return cls(handle, instance)

    @classmethod
    def create_static(cls, handle: TypeHandle) -> "ObjectBinder":
        """Bind to the type itself; later calls need ``VisibilityMask.STATIC``."""
        return cls(handle)

    @classmethod
    def wrap(cls, instance: Any, handle: Optional[TypeHandle] = None) -> Optional["ObjectBinder"]:
        """Bind to an existing object; None stays None."""
        if instance is None:
            return None
        if handle is None:
            handle = get_type_resolver().handle_for(instance)
        return cls(handle, instance)

    def lookup(self, name: str, mask: VisibilityMask) -> MemberLookup:
        """Tagged lookup of ``name`` under ``mask`` (no side effects)."""
        if name is None:
            raise ArgumentNullError("name")
        return find_member(self.target_type, self._instance, name, mask)

    @unwrapped
    def get(self, name: str, mask: VisibilityMask) -> Any:
        """Value of the field or property ``name``.

        Raises:
            ArgumentNullError: If ``name`` is None.
            MemberNotFoundError: If no field or property is visible under ``mask``.
        """
        if name is None:
            raise ArgumentNullError("name")
        lookup = self._require_value_member(name, mask)
        try:
            return read_value(lookup, self.target_type, self._instance)
        except AttributeError:
            # Only unset __slots__ fields get here; property getters are wrapped
            raise MemberNotFoundError(self._display(), name, "slot has no value") from None

    @unwrapped
    def set(self, name: str, mask: VisibilityMask, value: Any) -> None:
        """Assign ``value`` to the field or property ``name``.

        Raises:
            ArgumentNullError: If ``name`` or ``value`` is None.
            MemberNotFoundError: If no writable field or property is visible.
        """
        if name is None:
            raise ArgumentNullError("name")
        if value is None:
            raise ArgumentNullError("value")
        lookup = self._require_value_member(name, mask)
        if not can_write(lookup):
            raise MemberNotFoundError(self._display(), name, "property has no setter")
        write_value(lookup, self._instance, value)

    @unwrapped
    def invoke(
        self,
        name: str,
        mask: VisibilityMask,
        args: Sequence[Any] = (),
        param_types: Optional[Sequence[Any]] = None,
        method_generic_args: Optional[Sequence[Any]] = None,
    ) -> Any:
        """Call the method ``name`` and return its result.

        Args:
            name: Method name; ``__private`` names are mangled automatically.
            mask: Visibility and scope to search.
            args: Positional arguments.
            param_types: Exact parameter types, skipping best-fit selection.
            method_generic_args: Type arguments of a generic method.

        Raises:
            ArgumentNullError: If ``name`` is None.
            MemberNotFoundError: If no visible method accepts the arguments.
            AmbiguousMatchError: If several overloads fit equally well.
            GenericConstraintError: If generic arguments are missing or invalid.
        """
        if name is None:
            raise ArgumentNullError("name")
        lookup = find_member(self.target_type, self._instance, name, mask)
        if lookup.kind is not MemberKind.METHOD:
            raise MemberNotFoundError(self._display(), name, self._not_found_reason(lookup, "method"))

        display = self._display()
        selection = select_candidate(
            method_candidates(name, lookup.raw, self.target_type, lookup.is_static),
            list(args),
            owner=display,
            member=name,
            param_types=_normalize_types(param_types),
            generic_args=_normalize_types(method_generic_args),
            class_bindings=self._class_bindings(),
            not_found=lambda reason: MemberNotFoundError(display, name, reason),
        )
        target = None if lookup.is_static else self._instance
        method = selection.candidate.bind(target)
        logger.debug("Invoking %s on %s", selection.candidate, display)
        return call_target(name, method, *args)

    def _require_value_member(self, name: str, mask: VisibilityMask) -> MemberLookup:
        lookup = find_member(self.target_type, self._instance, name, mask)
        if lookup.kind not in (MemberKind.FIELD, MemberKind.PROPERTY):
            raise MemberNotFoundError(
                self._display(), name, self._not_found_reason(lookup, "field or property")
            )
        return lookup

    def _not_found_reason(self, lookup: MemberLookup, wanted: str) -> str:
        if lookup.found:
            return f"found {describe(lookup)}, expected a {wanted}"
        scope = "static" if self._instance is None else "instance"
        return f"no {wanted} visible to a {scope} binder"

    def _class_bindings(self) -> Dict[TypeVar, Any]:
        bindings = self._handle.type_bindings
        if not bindings and self._instance is not None:
            orig = getattr(self._instance, "__orig_class__", None)
            parameters = getattr(type(self._instance), "__parameters__", ())
            if orig is not None and parameters:
                bindings = dict(zip(parameters, getattr(orig, "__args__", ())))
        bindings = inherited_bindings(self.target_type, bindings)
        # Unbound class parameters stay as themselves, not as method type parameters
        for parameter in getattr(self.target_type, "__parameters__", ()):
            bindings.setdefault(parameter, parameter)
        return bindings

    def _display(self) -> str:
        return self._handle.display()

    def __repr__(self) -> str:
        kind = "static" if self._instance is None else "instance"
        return f"<ObjectBinder {kind} {self._display()}>"

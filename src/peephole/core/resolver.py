"""Type resolution for accessors.

A type is identified by a structured ``TypeHandle``: the module path (the
"assembly"), the qualified class name inside that module, the ordered generic
arguments and, for nested classes, the parent handle. The string rendering
``module:Outer.Inner[int, str]`` is for display only.

Resolved handles are kept in an explicit ``TypeCache``. The process-wide
default resolver and its cache are created on first use; ``reset_type_cache``
empties the cache.

Example:
    >>> from peephole.core.resolver import resolve_type
    >>> box = resolve_type("peephole_samples.widgets", "Box", [int])
    >>> box.nested("Lid") == resolve_type("peephole_samples.widgets", "Box.Lid", [int])
    True
"""

from __future__ import annotations

import importlib
import inspect
import logging
import sys
import threading
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Dict, Hashable, List, Optional, Sequence, Tuple, TypeVar

from peephole.core.config import get_config
from peephole.core.exceptions import ArgumentNullError, GenericConstraintError, TypeNotFoundError
from peephole.core.generics import (
    check_type_arguments,
    inherited_bindings,
    runtime_class,
    type_display,
)

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, str, Tuple[Any, ...], Optional["TypeHandle"]]


@dataclass(frozen=True)
class TypeHandle:
    """Resolved, cacheable identity of a possibly generic, possibly nested class.

    Equality and hashing use ``assembly``, ``name``, ``generic_args`` and
    ``parent`` only; the class objects ride along for binding.

    Attributes:
        assembly: Module path the outermost class lives in.
        name: Qualified name inside the module, nested levels joined by ``.``.
        generic_args: Effective generic arguments, parent arguments first.
        parent: Handle of the enclosing class for nested classes.
        type: The class object.
        runtime_type: What gets instantiated; the parameterised alias for
            generic classes, else ``type``.
    """

    assembly: str
    name: str
    generic_args: Tuple[Any, ...] = ()
    parent: Optional["TypeHandle"] = None
    type: type = field(default=object, compare=False, repr=False)
    runtime_type: Any = field(default=object, compare=False, repr=False)
    bindings: Tuple[Tuple[TypeVar, Any], ...] = field(default=(), compare=False, repr=False)

    @property
    def simple_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    @property
    def type_bindings(self) -> Dict[TypeVar, Any]:
        return dict(self.bindings)

    @property
    def is_generic(self) -> bool:
        return bool(self.generic_args)

    def key(self) -> CacheKey:
        return (self.assembly, self.name, self.generic_args, self.parent)

    def nested(self, nested_name: str, *generic_args: Any) -> "TypeHandle":
        """Resolve a nested class of this type with the default resolver."""
        return get_type_resolver().nested_type(self, nested_name, generic_args)

    def display(self) -> str:
        rendered = f"{self.assembly}:{self.name}"
        if self.generic_args:
            rendered += f"[{', '.join(type_display(arg) for arg in self.generic_args)}]"
        return rendered

    def __str__(self) -> str:
        return self.display()


class TypeCache:
    """Thread-safe cache of resolved type handles.

    Population follows "resolve redundantly, keep the first": callers resolve
    outside the lock and ``put`` returns whichever handle was stored first.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: Dict[Hashable, TypeHandle] = {}

    def get(self, key: Hashable) -> Optional[TypeHandle]:
        return self._handles.get(key)

    def put(self, key: Hashable, handle: TypeHandle) -> TypeHandle:
        with self._lock:
            return self._handles.setdefault(key, handle)

    def clear(self) -> None:
        with self._lock:
            self._handles.clear()

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._handles


class TypeResolver:
    """Resolves module/class names and generic arguments to ``TypeHandle``s.

    Args:
        cache: Cache to populate; a private one is created when omitted.
        auto_import: Import modules that are not loaded yet. Defaults to the
            ``resolver.auto_import`` setting.
        cache_enabled: Defaults to the ``resolver.cache_enabled`` setting.
    """

    def __init__(
        self,
        cache: Optional[TypeCache] = None,
        auto_import: Optional[bool] = None,
        cache_enabled: Optional[bool] = None,
    ) -> None:
        settings = get_config().resolver
        self.cache = cache if cache is not None else TypeCache()
        self.auto_import = settings.auto_import if auto_import is None else auto_import
        self.cache_enabled = settings.cache_enabled if cache_enabled is None else cache_enabled

    def resolve(
        self,
        assembly: str,
        type_name: str,
        generic_args: Sequence[Any] = (),
    ) -> TypeHandle:
        """Resolve ``type_name`` inside module ``assembly``.

        A dotted ``type_name`` is resolved level by level; ``generic_args`` are
        split across the levels by each level's declared arity, the last level
        taking the remainder.

        Raises:
            ArgumentNullError: If ``assembly`` or ``type_name`` is None.
            TypeNotFoundError: If the module or a class on the path is missing.
            GenericConstraintError: If the generic arguments do not fit.
        """
        if assembly is None:
            raise ArgumentNullError("assembly")
        if type_name is None:
            raise ArgumentNullError("type_name")
        arguments = _normalize_arguments(f"{assembly}:{type_name}", generic_args)
        request_key = (assembly, type_name, arguments, None)

        cached = self._cached(request_key)
        if cached is not None:
            return cached

        module = self._load_module(assembly, type_name)
        segments = type_name.split(".")
        remaining = list(arguments)

        owner: Any = module
        handle: Optional[TypeHandle] = None
        for index, segment in enumerate(segments):
            cls = _class_attribute(owner, segment)
            if cls is None:
                reason = (
                    f"no class named '{segment}'"
                    if handle is None
                    else f"'{handle.name}' has no nested class '{segment}'"
                )
                raise TypeNotFoundError(assembly, type_name, reason)
            last = index == len(segments) - 1
            own_arity = len(_own_parameters(cls, handle))
            take = len(remaining) if last else min(own_arity, len(remaining))
            own_args, remaining = tuple(remaining[:take]), remaining[take:]
            handle = self._build(assembly, cls, handle, segment, own_args)
            owner = cls

        return self._store(request_key, handle)

    def nested_type(
        self,
        parent: TypeHandle,
        nested_name: str,
        generic_args: Sequence[Any] = (),
    ) -> TypeHandle:
        """Resolve the class ``nested_name`` declared inside ``parent``.

        The result's effective generic arguments are the parent's followed by
        ``generic_args``.

        Raises:
            ArgumentNullError: If ``parent`` or ``nested_name`` is None.
            TypeNotFoundError: If ``parent`` declares no such class.
            GenericConstraintError: If the generic arguments do not fit.
        """
        if parent is None:
            raise ArgumentNullError("parent")
        if nested_name is None:
            raise ArgumentNullError("nested_name")
        full_name = f"{parent.name}.{nested_name}"
        own_args = _normalize_arguments(f"{parent.assembly}:{full_name}", generic_args)
        key = (parent.assembly, full_name, parent.generic_args + own_args, parent)

        cached = self._cached(key)
        if cached is not None:
            return cached

        segments = nested_name.split(".")
        handle = parent
        for index, segment in enumerate(segments):
            cls = _class_attribute(handle.type, segment)
            if cls is None:
                raise TypeNotFoundError(
                    parent.assembly, full_name, f"'{handle.name}' has no nested class '{segment}'"
                )
            # Only the innermost level consumes the supplied arguments
            level_args = own_args if index == len(segments) - 1 else ()
            handle = self._build(parent.assembly, cls, handle, segment, level_args)

        return self._store(key, handle)

    def handle_for(self, obj: Any) -> TypeHandle:
        """Handle for the runtime class of an existing object.

        Generic instances created through an alias (``Box[int]()``) keep their
        arguments via ``__orig_class__``.
        """
        cls = type(obj)
        orig = getattr(obj, "__orig_class__", None)
        arguments = tuple(getattr(orig, "__args__", ())) if orig is not None else ()
        unparameterized = bool(getattr(cls, "__parameters__", ())) and not arguments
        if "<locals>" not in cls.__qualname__ and not unparameterized:
            return self.resolve(cls.__module__, cls.__qualname__, arguments)
        # Function-local classes cannot be reached by name; generic instances
        # built without an alias have no arguments to resolve with
        bindings = dict(zip(getattr(cls, "__parameters__", ()), arguments))
        return TypeHandle(
            assembly=cls.__module__,
            name=cls.__qualname__,
            generic_args=arguments,
            type=cls,
            runtime_type=orig if orig is not None else cls,
            bindings=tuple(inherited_bindings(cls, bindings).items()),
        )

    def _build(
        self,
        assembly: str,
        cls: type,
        parent: Optional[TypeHandle],
        segment: str,
        own_args: Tuple[Any, ...],
    ) -> TypeHandle:
        name = segment if parent is None else f"{parent.name}.{segment}"
        inherited = parent.type_bindings if parent is not None else {}
        own_parameters = _own_parameters(cls, parent)
        display = f"{assembly}:{name}"
        bindings = dict(inherited)
        bindings.update(check_type_arguments(display, own_parameters, own_args))

        declared = tuple(getattr(cls, "__parameters__", ()))
        runtime_type: Any = cls
        if declared:
            runtime_type = cls[tuple(bindings[p] for p in declared)]
        bindings = inherited_bindings(cls, bindings)

        handle = TypeHandle(
            assembly=assembly,
            name=name,
            generic_args=(parent.generic_args if parent is not None else ()) + own_args,
            parent=parent,
            type=cls,
            runtime_type=runtime_type,
            bindings=tuple(bindings.items()),
        )
        return self._store(handle.key(), handle)

    def _cached(self, key: CacheKey) -> Optional[TypeHandle]:
        if not self.cache_enabled:
            return None
        return self.cache.get(key)

    def _store(self, key: CacheKey, handle: TypeHandle) -> TypeHandle:
        if not self.cache_enabled:
            return handle
        stored = self.cache.put(key, handle)
        if stored is handle:
            logger.debug("Resolved %s", handle.display())
        return stored

    def _load_module(self, assembly: str, type_name: str) -> ModuleType:
        module = sys.modules.get(assembly)
        if module is not None:
            return module
        if not self.auto_import:
            raise TypeNotFoundError(assembly, type_name, "module is not loaded")
        try:
            return importlib.import_module(assembly)
        except ModuleNotFoundError as e:
            # A missing dependency of an existing module is the module's own failure
            if e.name and not (assembly == e.name or assembly.startswith(e.name + ".")):
                raise
            raise TypeNotFoundError(assembly, type_name, "no such module") from e


def _normalize_arguments(owner: str, generic_args: Optional[Sequence[Any]]) -> Tuple[Any, ...]:
    """Type arguments as a hashable tuple, handles replaced by their runtime types.

    Raises:
        GenericConstraintError: If an argument is not a type.
    """
    if not generic_args:
        return ()
    arguments = tuple(
        arg.runtime_type if isinstance(arg, TypeHandle) else arg for arg in generic_args
    )
    for arg in arguments:
        if arg is not Any and not isinstance(runtime_class(arg), type):
            raise GenericConstraintError(owner, f"type argument {arg!r} is not a type")
    try:
        hash(arguments)
    except TypeError as e:
        raise GenericConstraintError(owner, f"type arguments {arguments!r} are not hashable") from e
    return arguments


def _class_attribute(owner: Any, name: str) -> Optional[type]:
    candidate = inspect.getattr_static(owner, name, None)
    if inspect.isclass(candidate):
        return candidate
    return None


def _own_parameters(cls: type, parent: Optional[TypeHandle]) -> List[TypeVar]:
    """Type parameters of ``cls`` not already bound by its enclosing classes."""
    inherited = parent.type_bindings if parent is not None else {}
    return [p for p in getattr(cls, "__parameters__", ()) if p not in inherited]


_default_lock = threading.Lock()
_default_resolver: Optional[TypeResolver] = None


def get_type_resolver() -> TypeResolver:
    """Return the process-wide resolver, creating it on first use."""
    global _default_resolver
    resolver = _default_resolver
    if resolver is None:
        with _default_lock:
            if _default_resolver is None:
                _default_resolver = TypeResolver()
            resolver = _default_resolver
    return resolver


def resolve_type(assembly: str, type_name: str, generic_args: Sequence[Any] = ()) -> TypeHandle:
    """Resolve a type with the process-wide resolver."""
    return get_type_resolver().resolve(assembly, type_name, generic_args)


def nested_type(parent: TypeHandle, nested_name: str, generic_args: Sequence[Any] = ()) -> TypeHandle:
    """Resolve a nested type with the process-wide resolver."""
    return get_type_resolver().nested_type(parent, nested_name, generic_args)


def reset_type_cache() -> None:
    """Empty the process-wide type cache and drop the default resolver.

    The next resolution creates a fresh resolver, so configuration changes made
    since the last resolution take effect.
    """
    global _default_resolver
    with _default_lock:
        if _default_resolver is not None:
            _default_resolver.cache.clear()
        _default_resolver = None

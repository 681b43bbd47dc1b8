"""Overload resolution for reflected calls.

Overloads come from ``functools.singledispatchmethod`` and
``functools.singledispatch`` registries; any other callable is a single
candidate described by its signature annotations.

Best-fit selection scores every argument against the parameter it binds to:

    exact class                          0
    subclass                             MRO distance
    numeric promotion                    int->float 10, float->complex 10, int->complex 11
    TypeVar-typed parameter              cost against its bound (or constraints) + 1
    None into an Optional parameter      50
    untyped / object / Any               100

A call that relies on defaults or ``*args`` gets one extra point in a trailing
slot. A candidate is selected only if it is no worse than every other
applicable candidate on each slot and strictly better on at least one;
otherwise the match is ambiguous.
"""

import functools
import inspect
import logging
import types
from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Literal,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from peephole.core.exceptions import AmbiguousMatchError, GenericConstraintError
from peephole.core.generics import check_type_arguments, collect_type_vars, substitute, type_display
from peephole.core.members import signature_of

logger = logging.getLogger(__name__)

UNTYPED_COST = 100
NONE_COST = 50
TYPEVAR_PENALTY = 1
EXPANSION_PENALTY = 1

_PROMOTIONS = {
    (int, float): 10,
    (float, complex): 10,
    (int, complex): 11,
}

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


@dataclass(frozen=True)
class Candidate:
    """One callable overload.

    Attributes:
        label: Rendering used in error messages.
        signature: Signature without the ``self``/``cls`` parameter, or None
            when the callable cannot be introspected (accepts anything).
        bind: Turns the target instance (None for static calls) into a callable.
        dispatch_type: Registry key for singledispatch overloads.
    """

    label: str
    signature: Optional[inspect.Signature]
    bind: Callable[[Any], Callable[..., Any]] = field(compare=False)
    dispatch_type: Optional[type] = None

    def parameter_types(self) -> Tuple[Any, ...]:
        """Declared positional parameter types, ``object`` where unannotated."""
        if self.signature is None:
            return ()
        declared = []
        for index, parameter in enumerate(self.signature.parameters.values()):
            if parameter.kind not in _POSITIONAL:
                continue
            if index == 0 and self.dispatch_type is not None:
                declared.append(self.dispatch_type)
            elif parameter.annotation is inspect.Parameter.empty:
                declared.append(object)
            else:
                declared.append(parameter.annotation)
        return tuple(declared)

    def type_parameters(self, bound: Sequence[TypeVar]) -> List[TypeVar]:
        """Method-level type variables: those not bound by the owning class."""
        if self.signature is None:
            return []
        annotations = [p.annotation for p in self.signature.parameters.values()]
        annotations.append(self.signature.return_annotation)
        return [tv for tv in collect_type_vars(annotations) if tv not in bound]

    def __str__(self) -> str:
        return self.label


@dataclass
class Selection:
    """The chosen candidate and the type variables it was resolved with."""

    candidate: Candidate
    type_bindings: Dict[TypeVar, Any]


def _drop_first(signature: Optional[inspect.Signature]) -> Optional[inspect.Signature]:
    if signature is None:
        return None
    parameters = list(signature.parameters.values())[1:]
    return signature.replace(parameters=parameters)


def _label(name: str, signature: Optional[inspect.Signature], dispatch_type: Optional[type]) -> str:
    if signature is None:
        return f"{name}(...)"
    rendered = []
    for index, parameter in enumerate(signature.parameters.values()):
        annotation = parameter.annotation
        if index == 0 and dispatch_type is not None:
            annotation = dispatch_type
        if annotation is inspect.Parameter.empty:
            rendered.append(parameter.name)
        else:
            rendered.append(type_display(annotation))
    return f"{name}({', '.join(rendered)})"


def _static_binder(func: Callable[..., Any]) -> Callable[[Any], Callable[..., Any]]:
    return lambda target: func


def _descriptor_binder(raw: Any, cls: type) -> Callable[[Any], Callable[..., Any]]:
    return lambda target: raw.__get__(target, cls) if hasattr(raw, "__get__") else raw


def _dispatch_candidates(
    name: str,
    registry: Dict[Any, Any],
    cls: type,
    drop_first: bool,
    static: bool,
) -> List[Candidate]:
    candidates = []
    for dispatch_type, impl in registry.items():
        func = impl.__func__ if isinstance(impl, (staticmethod, classmethod)) else impl
        signature = signature_of(func)
        if drop_first or isinstance(impl, classmethod):
            signature = _drop_first(signature)
        binder = _static_binder(func) if static and not isinstance(impl, classmethod) else (
            _descriptor_binder(impl, cls)
        )
        key = None if dispatch_type is object else dispatch_type
        candidates.append(
            Candidate(
                label=_label(name, signature, key),
                signature=signature,
                bind=binder,
                dispatch_type=key,
            )
        )
    return candidates


def method_candidates(name: str, raw: Any, cls: type, is_static: bool) -> List[Candidate]:
    """Overload candidates for the class-level method object ``raw``."""
    if isinstance(raw, functools.singledispatchmethod):
        inner = raw.func
        drop_first = not isinstance(inner, staticmethod)
        return _dispatch_candidates(
            name, dict(raw.dispatcher.registry), cls, drop_first=drop_first, static=is_static
        )

    func = raw.__func__ if isinstance(raw, staticmethod) else raw
    registry = getattr(func, "registry", None)
    if isinstance(raw, staticmethod) and registry is not None and hasattr(func, "dispatch"):
        return _dispatch_candidates(name, dict(registry), cls, drop_first=False, static=True)

    binder = _descriptor_binder(raw, cls)
    if isinstance(raw, (staticmethod, classmethod)):
        signature = signature_of(raw.__func__)
        if isinstance(raw, classmethod):
            signature = _drop_first(signature)
    elif isinstance(raw, types.FunctionType):
        signature = _drop_first(signature_of(raw)) if not is_static else signature_of(raw)
    else:
        # partialmethod and callable objects: introspect what binding produces
        signature = signature_of(raw.__get__(None, cls) if hasattr(raw, "__get__") else raw)
        if isinstance(raw, functools.partialmethod) and signature is not None:
            signature = _drop_first(signature)
    return [Candidate(label=_label(name, signature, None), signature=signature, bind=binder)]


def constructor_candidates(cls: type, runtime_type: Any) -> List[Candidate]:
    """Constructor candidates; ``bind(None)`` yields a callable creating the instance."""
    init = inspect.getattr_static(cls, "__init__", None)
    if isinstance(init, functools.singledispatchmethod):
        candidates = []
        for overload in _dispatch_candidates(
            cls.__name__, dict(init.dispatcher.registry), cls, drop_first=True, static=False
        ):
            candidates.append(
                Candidate(
                    label=overload.label,
                    signature=overload.signature,
                    bind=_dispatch_constructor(cls, runtime_type, overload),
                    dispatch_type=overload.dispatch_type,
                )
            )
        return candidates

    try:
        signature: Optional[inspect.Signature] = inspect.signature(cls, eval_str=True)
    except NameError:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        signature = None
    return [
        Candidate(
            label=_label(cls.__name__, signature, None),
            signature=signature,
            bind=lambda target: runtime_type,
        )
    ]


def _dispatch_constructor(cls: type, runtime_type: Any, overload: Candidate) -> Callable[[Any], Callable[..., Any]]:
    def construct(*args: Any, **kwargs: Any) -> Any:
        instance = cls.__new__(cls)
        overload.bind(instance)(*args, **kwargs)
        if runtime_type is not cls:
            try:
                instance.__orig_class__ = runtime_type
            except AttributeError:
                pass
        return instance

    return lambda target: construct


def conversion_cost(value: Any, annotation: Any) -> Optional[int]:
    """Cost of passing ``value`` to a parameter annotated ``annotation``.

    Returns None when the value is not acceptable.
    """
    if annotation is inspect.Parameter.empty or annotation is Any or annotation is object:
        return UNTYPED_COST
    if annotation is None:
        annotation = type(None)

    if isinstance(annotation, TypeVar):
        if annotation.__constraints__:
            costs = [conversion_cost(value, c) for c in annotation.__constraints__]
            valid = [c for c in costs if c is not None]
            return min(valid) + TYPEVAR_PENALTY if valid else None
        bound = annotation.__bound__ if annotation.__bound__ is not None else object
        cost = conversion_cost(value, bound)
        return None if cost is None else cost + TYPEVAR_PENALTY

    origin = get_origin(annotation)
    if origin is Union or (hasattr(types, "UnionType") and origin is types.UnionType):
        costs = [conversion_cost(value, member) for member in get_args(annotation)]
        valid = [c for c in costs if c is not None]
        return min(valid) if valid else None
    if origin is Literal:
        return 0 if value in get_args(annotation) else None

    if value is None:
        return NONE_COST if annotation is type(None) else None

    target = origin if origin is not None else annotation
    if not isinstance(target, type):
        # String annotations and exotic typing constructs cannot be checked
        return UNTYPED_COST

    try:
        matches = isinstance(value, target)
    except TypeError:
        # Protocols without runtime checks
        return UNTYPED_COST
    if matches:
        mro = type(value).__mro__
        return mro.index(target) if target in mro else len(mro)

    for (source, promoted), cost in _PROMOTIONS.items():
        if target is promoted and isinstance(value, source):
            return cost
    return None


def _argument_costs(
    signature: Optional[inspect.Signature],
    args: Sequence[Any],
    dispatch_type: Optional[type],
    bindings: Dict[TypeVar, Any],
) -> Optional[Tuple[int, ...]]:
    if signature is None:
        return tuple(UNTYPED_COST for _ in args) + (EXPANSION_PENALTY,)
    try:
        signature.bind(*args)
    except TypeError:
        return None

    parameters = list(signature.parameters.values())
    costs: List[int] = []
    expanded = 0
    for index, value in enumerate(args):
        if index < len(parameters) and parameters[index].kind in _POSITIONAL:
            parameter = parameters[index]
            annotation = parameter.annotation
            if index == 0 and dispatch_type is not None:
                annotation = dispatch_type
        else:
            variadic = next(
                p for p in parameters if p.kind is inspect.Parameter.VAR_POSITIONAL
            )
            annotation = variadic.annotation
            expanded = EXPANSION_PENALTY
        annotation = substitute(annotation, bindings)
        cost = conversion_cost(value, annotation)
        if cost is None:
            return None
        costs.append(cost)

    positional = [p for p in parameters if p.kind in _POSITIONAL]
    if len(args) < len(positional):
        expanded = EXPANSION_PENALTY
    return tuple(costs) + (expanded,)


def _dominates(left: Tuple[int, ...], right: Tuple[int, ...]) -> bool:
    return all(a <= b for a, b in zip(left, right)) and any(a < b for a, b in zip(left, right))


def _same_type(declared: Any, requested: Any) -> bool:
    if declared == requested:
        return True
    return declared in (object, Any) and requested in (object, Any)


def select_candidate(
    candidates: Sequence[Candidate],
    args: Sequence[Any],
    *,
    owner: str,
    member: str,
    param_types: Optional[Sequence[Any]] = None,
    generic_args: Optional[Sequence[Any]] = None,
    class_bindings: Optional[Dict[TypeVar, Any]] = None,
    not_found: Callable[[str], Exception],
) -> Selection:
    """Pick the candidate to call.

    Args:
        candidates: Overloads of the member.
        args: Positional arguments of the call.
        owner: Display name of the owning type for messages.
        member: Member name for messages.
        param_types: Exact parameter types; disables best-fit matching.
        generic_args: Type arguments for a generic method.
        class_bindings: Type variables bound by the owning class.
        not_found: Builds the error raised when nothing applies.

    Raises:
        AmbiguousMatchError: If no single candidate is best.
        GenericConstraintError: If generic arguments are missing or invalid.
    """
    class_bindings = dict(class_bindings or {})
    generic_failure: Optional[GenericConstraintError] = None
    applicable: List[Tuple[Candidate, Dict[TypeVar, Any], Tuple[int, ...]]] = []

    for candidate in candidates:
        method_parameters = candidate.type_parameters(list(class_bindings))
        bindings = dict(class_bindings)
        if method_parameters or generic_args:
            if not generic_args:
                generic_failure = generic_failure or GenericConstraintError(
                    f"{owner}.{member}",
                    f"generic method requires type arguments for "
                    f"{', '.join(tv.__name__ for tv in method_parameters)}",
                )
                continue
            try:
                bindings.update(
                    check_type_arguments(f"{owner}.{member}", method_parameters, list(generic_args))
                )
            except GenericConstraintError as e:
                generic_failure = generic_failure or e
                continue

        if param_types is not None:
            declared = tuple(substitute(t, bindings) for t in candidate.parameter_types())
            requested = tuple(param_types)
            if len(declared) != len(requested) or not all(
                _same_type(d, r) for d, r in zip(declared, requested)
            ):
                continue

        costs = _argument_costs(candidate.signature, args, candidate.dispatch_type, bindings)
        if costs is None:
            continue
        if param_types is not None:
            # Exact signatures are not ranked
            costs = tuple(0 for _ in costs)
        applicable.append((candidate, bindings, costs))

    if not applicable:
        if generic_failure is not None:
            raise generic_failure
        rendered = ", ".join(type_display(type(a)) for a in args)
        if param_types is not None:
            rendered = ", ".join(type_display(t) for t in param_types)
        raise not_found(f"no overload accepts ({rendered})")

    best = [
        entry
        for entry in applicable
        if all(entry is other or _dominates(entry[2], other[2]) for other in applicable)
    ]
    if len(best) != 1:
        tied = [entry[0] for entry in applicable]
        raise AmbiguousMatchError(owner, member, tied)

    candidate, bindings, costs = best[0]
    logger.debug("Selected %s for %s.%s with costs %s", candidate, owner, member, costs)
    return Selection(candidate=candidate, type_bindings=bindings)

"""Checks for generic arguments against ``TypeVar`` declarations."""

from typing import Any, Dict, Generic, Iterable, List, Sequence, Tuple, TypeVar, Union, get_args, get_origin

from peephole.core.exceptions import GenericConstraintError


def type_display(tp: Any) -> str:
    """Short rendering of a type or typing construct for messages and reprs."""
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__qualname__
    return repr(tp).replace("typing.", "")


def runtime_class(tp: Any) -> Any:
    """Class used for ``issubclass`` checks: the origin of an alias, else ``tp``."""
    origin = get_origin(tp)
    return origin if origin is not None else tp


def _satisfies(arg: Any, requirement: Any) -> bool:
    if requirement is Any or requirement is object:
        return True
    if get_origin(requirement) is Union:
        return any(_satisfies(arg, member) for member in get_args(requirement))
    arg_class = runtime_class(arg)
    required = runtime_class(requirement)
    if not isinstance(required, type):
        # Forward references and other unevaluated bounds are not checked
        return True
    if not isinstance(arg_class, type):
        return False
    return issubclass(arg_class, required)


def check_type_arguments(
    owner: str,
    parameters: Sequence[TypeVar],
    arguments: Sequence[Any],
) -> Dict[TypeVar, Any]:
    """Validate ``arguments`` against ``parameters`` and return the bindings.

    Raises:
        GenericConstraintError: On an arity mismatch, a non-type argument, or a
            violated bound or value constraint.
    """
    if len(parameters) != len(arguments):
        if not parameters:
            raise GenericConstraintError(
                owner, f"is not generic but {len(arguments)} type argument(s) were given"
            )
        raise GenericConstraintError(
            owner,
            f"expects {len(parameters)} type argument(s) "
            f"({', '.join(p.__name__ for p in parameters)}), got {len(arguments)}",
        )

    bindings: Dict[TypeVar, Any] = {}
    for parameter, argument in zip(parameters, arguments):
        if argument is not Any and not isinstance(runtime_class(argument), type):
            raise GenericConstraintError(
                owner, f"type argument for {parameter.__name__} is not a type: {argument!r}"
            )
        bound = getattr(parameter, "__bound__", None)
        if bound is not None and argument is not Any and not _satisfies(argument, bound):
            raise GenericConstraintError(
                owner,
                f"{type_display(argument)} violates the bound {type_display(bound)} "
                f"of {parameter.__name__}",
            )
        constraints = getattr(parameter, "__constraints__", ())
        if constraints and argument is not Any and not any(
            _satisfies(argument, constraint) for constraint in constraints
        ):
            allowed = ", ".join(type_display(c) for c in constraints)
            raise GenericConstraintError(
                owner,
                f"{type_display(argument)} is not one of the allowed types "
                f"({allowed}) for {parameter.__name__}",
            )
        bindings[parameter] = argument
    return bindings


def collect_type_vars(annotations: Iterable[Any]) -> List[TypeVar]:
    """Type variables referenced by ``annotations``, in first-seen order."""
    found: List[TypeVar] = []

    def _walk(tp: Any) -> None:
        if isinstance(tp, TypeVar):
            if tp not in found:
                found.append(tp)
            return
        for arg in get_args(tp):
            if isinstance(arg, (list, tuple)):
                for item in arg:
                    _walk(item)
            else:
                _walk(arg)

    for annotation in annotations:
        _walk(annotation)
    return found


def substitute(tp: Any, bindings: Dict[TypeVar, Any]) -> Any:
    """Replace type variables in ``tp`` using ``bindings``."""
    if isinstance(tp, TypeVar):
        return bindings.get(tp, tp)
    parameters: Tuple[Any, ...] = getattr(tp, "__parameters__", ())
    if parameters and get_origin(tp) is not None:
        return tp[tuple(bindings.get(p, p) for p in parameters)]
    return tp


def inherited_bindings(cls: Any, bindings: Dict[TypeVar, Any]) -> Dict[TypeVar, Any]:
    """Extend ``bindings`` with type variables fixed by parameterised bases.

    ``class IntBox(Box[int])`` binds ``Box``'s ``T`` to ``int``; partial
    specialisations such as ``class Keyed(Pair[str, U])`` resolve ``U`` through
    the bindings already known. Bindings of more derived classes win.
    """
    resolved = dict(bindings)
    for klass in getattr(cls, "__mro__", ()):
        for base in vars(klass).get("__orig_bases__", ()):
            origin = get_origin(base)
            if origin is Generic:
                continue
            parameters = getattr(origin, "__parameters__", ())
            for parameter, argument in zip(parameters, get_args(base)):
                value = substitute(argument, resolved)
                if value is parameter:
                    continue
                resolved.setdefault(parameter, value)
    return resolved

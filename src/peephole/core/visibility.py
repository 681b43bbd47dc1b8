"""Visibility masks and the naming rules that decide member visibility."""

from enum import Flag, auto
from typing import Iterator, List


class VisibilityMask(Flag):
    """Combinable selector over {public, non-public} x {instance, static}.

    A lookup must match at least one visibility flag and at least one scope
    flag, so ``PUBLIC`` alone selects nothing.
    """

    PUBLIC = auto()
    NON_PUBLIC = auto()
    INSTANCE = auto()
    STATIC = auto()

    DEFAULT = PUBLIC | INSTANCE
    ALL = PUBLIC | NON_PUBLIC | INSTANCE | STATIC

    @classmethod
    def parse(cls, names: List[str]) -> "VisibilityMask":
        """Build a mask from flag names such as ``["public", "static"]``."""
        mask = cls(0)
        for name in names:
            try:
                mask |= cls[name.strip().upper().replace("-", "_")]
            except KeyError:
                raise ValueError(f"Unknown visibility flag: {name!r}") from None
        return mask

    def allows_name(self, name: str) -> bool:
        if is_public_name(name):
            return bool(self & VisibilityMask.PUBLIC)
        return bool(self & VisibilityMask.NON_PUBLIC)

    def allows_scope(self, is_static: bool) -> bool:
        if is_static:
            return bool(self & VisibilityMask.STATIC)
        return bool(self & VisibilityMask.INSTANCE)


def is_dunder(name: str) -> bool:
    return len(name) > 4 and name.startswith("__") and name.endswith("__")


def is_public_name(name: str) -> bool:
    """Dunders are public; any other leading underscore marks a non-public name."""
    return is_dunder(name) or not name.startswith("_")


def mangled_names(name: str, owner: type) -> Iterator[str]:
    """Yield the attribute names ``name`` may be stored under on ``owner``.

    ``__secret`` declared inside ``class Widget`` is stored as
    ``_Widget__secret``; each class on the MRO mangles with its own name.
    """
    yield name
    if name.startswith("__") and not name.endswith("__"):
        for klass in owner.__mro__:
            stripped = klass.__name__.lstrip("_")
            if stripped:
                yield f"_{stripped}{name}"

"""Overloaded members built with functools.singledispatch."""

import functools


@functools.singledispatch
def _render(value) -> str:
    return f"object:{value!r}"


@_render.register
def _(value: int) -> str:
    return f"int:{value}"


@_render.register
def _(value: list) -> str:
    return f"list:{len(value)}"


class Calculator:
    _render = staticmethod(_render)

    @functools.singledispatchmethod
    def _twice(self, value) -> str:
        raise NotImplementedError(f"cannot double {value!r}")

    @_twice.register
    def _(self, value: int) -> str:
        return f"int:{value * 2}"

    @_twice.register
    def _(self, value: float) -> str:
        return f"float:{value * 2}"

    @_twice.register
    def _(self, value: str) -> str:
        return f"str:{value * 2}"

    @functools.singledispatchmethod
    def _pair(self, first, second: int) -> str:
        return "generic"

    @_pair.register
    def _(self, first: int, second) -> str:
        return "int-first"

    def _scale(self, value: float, factor: float = 2.0) -> float:
        return value * factor


class Temperature:
    @functools.singledispatchmethod
    def __init__(self, reading):
        raise TypeError(f"unsupported reading {reading!r}")

    @__init__.register
    def _(self, reading: float):
        self._celsius = reading

    @__init__.register
    def _(self, reading: str):
        self._celsius = float(reading.rstrip("C"))

    def _fahrenheit(self) -> float:
        return self._celsius * 9 / 5 + 32

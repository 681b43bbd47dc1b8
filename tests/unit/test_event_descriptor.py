"""
Tests for the Event descriptor used by classes under test.
"""

import pytest

from peephole.events import BoundEvent, Event


class Button:
    clicked = Event(int, int, doc="Raised with the click position.")

    def click(self, x, y):
        self.clicked.fire(x, y)


def test_class_access_returns_the_descriptor():
    assert isinstance(Button.clicked, Event)
    assert Button.clicked.name == "clicked"
    assert Button.clicked.arity == 2
    assert Button.clicked.__doc__ == "Raised with the click position."


def test_in_place_operators():
    button = Button()
    clicks = []
    handler = lambda x, y: clicks.append((x, y))  # noqa: E731

    button.clicked += handler
    assert isinstance(button.clicked, BoundEvent)
    assert len(button.clicked) == 1
    button.click(1, 2)

    button.clicked -= handler
    button.click(3, 4)
    assert clicks == [(1, 2)]


def test_handlers_are_per_instance():
    first, second = Button(), Button()
    calls = []
    first.clicked.add(lambda x, y: calls.append("first"))
    second.click(0, 0)
    assert calls == []
    first.click(0, 0)
    assert calls == ["first"]


def test_duplicate_handlers_are_removed_one_at_a_time():
    button = Button()
    calls = []
    handler = lambda x, y: calls.append(x)  # noqa: E731
    button.clicked.add(handler)
    button.clicked.add(handler)
    button.clicked.remove(handler)
    button.click(7, 0)
    assert calls == [7]


def test_event_cannot_be_reassigned():
    button = Button()
    with pytest.raises(AttributeError):
        button.clicked = None


def test_handler_errors_propagate():
    button = Button()

    def failing(x, y):
        raise RuntimeError("handler failed")

    button.clicked.add(failing)
    with pytest.raises(RuntimeError, match="handler failed"):
        button.click(0, 0)

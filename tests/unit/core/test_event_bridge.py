"""
Tests for attaching handlers to events by name.
"""

import pytest

from peephole.core.config import EventsConfig, PeepholeConfig, set_config
from peephole.core.events import EventBridge, subscribe, unsubscribe
from peephole.core.exceptions import ArgumentNullError, EventSignatureError, MissingEventError
from peephole_samples.events import Downloader, Silent


@pytest.fixture
def downloader():
    return Downloader("http://example.com/file")


def test_subscribed_handler_receives_raised_events(downloader):
    received = []
    subscribe(downloader, "progress", received.append)
    downloader._advance(40)
    downloader._advance(80)
    assert received == [40, 80]


def test_unsubscribed_handler_is_not_called(downloader):
    received = []
    subscribe(downloader, "progress", received.append)
    unsubscribe(downloader, "progress", received.append)
    downloader._advance(10)
    assert received == []


def test_handlers_run_in_subscription_order(downloader):
    calls = []
    subscribe(downloader, "progress", lambda p: calls.append(("first", p)))
    subscribe(downloader, "progress", lambda p: calls.append(("second", p)))
    downloader._advance(5)
    assert calls == [("first", 5), ("second", 5)]


def test_private_events_are_reachable(downloader):
    paths = []
    subscribe(downloader, "__finished", paths.append)
    downloader._finish("/tmp/file")
    assert paths == ["/tmp/file"]


def test_multi_argument_event(downloader):
    failures = []
    subscribe(downloader, "_failed", lambda url, error: failures.append((url, str(error))))
    downloader._fail(IOError("disk full"))
    assert failures == [("http://example.com/file", "disk full")]


def test_unsubscribing_an_unknown_handler_is_a_no_op(downloader):
    unsubscribe(downloader, "progress", print)


def test_missing_event(downloader):
    with pytest.raises(MissingEventError) as excinfo:
        subscribe(downloader, "completed", print)
    assert excinfo.value.event_name == "completed"

    with pytest.raises(MissingEventError):
        subscribe(Silent(), "progress", print)

    with pytest.raises(MissingEventError):
        unsubscribe(downloader, "_advance", print)


def test_null_arguments_are_checked_first(downloader):
    with pytest.raises(ArgumentNullError) as excinfo:
        subscribe(None, None, None)
    assert excinfo.value.argument == "event_name"

    with pytest.raises(ArgumentNullError) as excinfo:
        subscribe(None, "missing", None)
    assert excinfo.value.argument == "handler"

    with pytest.raises(ArgumentNullError) as excinfo:
        subscribe(None, "missing", print)
    assert excinfo.value.argument == "instance"


def test_incompatible_handler(downloader):
    with pytest.raises(EventSignatureError) as excinfo:
        subscribe(downloader, "progress", lambda: None)
    assert excinfo.value.arity == 1

    with pytest.raises(EventSignatureError):
        subscribe(downloader, "_failed", lambda only: None)


def test_flexible_handlers_are_accepted(downloader):
    seen = []
    subscribe(downloader, "progress", lambda *args: seen.append(args))
    subscribe(downloader, "progress", lambda percent, extra=None: seen.append(percent))
    downloader._advance(1)
    assert seen == [(1,), 1]


def test_signature_checks_can_be_disabled(downloader):
    set_config(PeepholeConfig(events=EventsConfig(check_signatures=False)))
    bridge = EventBridge()
    assert bridge.check_signatures is False
    bridge.subscribe(downloader, "progress", lambda: None)
    with pytest.raises(TypeError):
        downloader._advance(1)

"""
Peephole: Accessors for Non-Public Members in Tests
===================================================

Peephole lets test code construct objects and reach their private fields,
properties, methods and events by name, through small hand-written accessor
classes that mirror the classes under test.

Examples:
    from peephole import AccessorBase, VisibilityMask

    class LedgerAccessor(AccessorBase):
        binding_flags = VisibilityMask.ALL

        def __init__(self, owner):
            super().__init__("bank.ledger", "Ledger", owner)

        @property
        def balance(self):
            return self._get_field_or_property("_balance")

        def post(self, amount):
            return self._invoke("_post", amount)

    ledger = LedgerAccessor("alice")
    ledger.post(10)
    assert ledger.balance == 10

Exceptions raised by the tested code reach the test unchanged; failures of
the accessor layer itself derive from ``peephole.AccessorError``.
"""

from __future__ import annotations

import importlib.metadata

from peephole.accessor import AccessorBase
from peephole.core.binder import ObjectBinder
from peephole.core.events import EventBridge, subscribe, unsubscribe
from peephole.core.exceptions import (
    AccessorError,
    AmbiguousMatchError,
    ArgumentNullError,
    ConstructorNotFoundError,
    EventSignatureError,
    GenericConstraintError,
    MemberNotFoundError,
    MissingEventError,
    PeepholeError,
    TargetInvocationError,
    TypeNotFoundError,
)
from peephole.core.resolver import (
    TypeCache,
    TypeHandle,
    TypeResolver,
    nested_type,
    reset_type_cache,
    resolve_type,
)
from peephole.core.unwrap import call_unwrapped, unwrapped
from peephole.core.visibility import VisibilityMask
from peephole.events import BoundEvent, Event

try:
    __version__ = importlib.metadata.version("peephole")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.1.0"

__all__ = [
    "AccessorBase",
    "ObjectBinder",
    "VisibilityMask",
    "TypeHandle",
    "TypeResolver",
    "TypeCache",
    "resolve_type",
    "nested_type",
    "reset_type_cache",
    "Event",
    "BoundEvent",
    "EventBridge",
    "subscribe",
    "unsubscribe",
    "unwrapped",
    "call_unwrapped",
    "PeepholeError",
    "AccessorError",
    "ArgumentNullError",
    "TypeNotFoundError",
    "MemberNotFoundError",
    "ConstructorNotFoundError",
    "AmbiguousMatchError",
    "GenericConstraintError",
    "MissingEventError",
    "EventSignatureError",
    "TargetInvocationError",
    "__version__",
]

from __future__ import annotations

import pytest

from oakwire._internal.providers import Lifetime, ProviderSpecFactory
from oakwire._internal.registry import ProvidersRegistrations
from oakwire._internal.resolver import Resolver
from oakwire.exceptions import (
    OakwireConstructorError,
    OakwireProviderNotFoundError,
    OakwireTypeMismatchError,
)


class Clock:
    pass


class Request:
    def __init__(self, clock: Clock) -> None:
        self.clock = clock


class AdminRequest(Request):
    pass


def _resolver(*, singletons: dict[object, object] | None = None) -> tuple[Resolver, ProvidersRegistrations]:
    registrations = ProvidersRegistrations()
    return Resolver(registrations, {} if singletons is None else singletons), registrations


def test_singleton_is_served_from_cache_without_lookup() -> None:
    clock = Clock()
    resolver, _ = _resolver(singletons={Clock: clock})

    assert resolver.resolve(Clock) is clock


def test_transient_is_built_from_registry_each_time() -> None:
    factory = ProviderSpecFactory()
    clock = Clock()
    resolver, registrations = _resolver(singletons={Clock: clock})
    registrations.add(factory.create(Request, lifetime=Lifetime.TRANSIENT))

    first = resolver.resolve(Request)
    second = resolver.resolve(Request)

    assert first is not second
    assert first.clock is second.clock is clock


def test_resolve_does_not_write_to_singleton_cache() -> None:
    factory = ProviderSpecFactory()
    singletons: dict[object, object] = {}
    resolver, registrations = _resolver(singletons=singletons)
    registrations.add(factory.create(Clock, lifetime=Lifetime.TRANSIENT))

    resolver.resolve(Clock)

    assert singletons == {}


def test_missing_transitive_dependency_names_requester() -> None:
    factory = ProviderSpecFactory()
    resolver, registrations = _resolver()
    registrations.add(factory.create(Request, lifetime=Lifetime.TRANSIENT))

    with pytest.raises(OakwireProviderNotFoundError) as exc_info:
        resolver.resolve(Request)

    assert exc_info.value.dependency is Clock
    assert exc_info.value.requested_by is Request


def test_named_subclass_satisfies_base_request() -> None:
    factory = ProviderSpecFactory()
    resolver, registrations = _resolver(singletons={Clock: Clock()})
    registrations.add(factory.create(AdminRequest, lifetime=Lifetime.SINGLETON, name="admin"))

    assert isinstance(resolver.resolve_named("admin", Request), AdminRequest)
    with pytest.raises(OakwireTypeMismatchError):
        resolver.resolve_named("admin", Clock)


def test_constructor_failure_is_wrapped_once() -> None:
    def broken_clock() -> Clock:
        msg = "clock skew"
        raise RuntimeError(msg)

    factory = ProviderSpecFactory()
    resolver, registrations = _resolver()
    registrations.add(factory.create(broken_clock, lifetime=Lifetime.TRANSIENT))
    registrations.add(factory.create(Request, lifetime=Lifetime.TRANSIENT))

    with pytest.raises(OakwireConstructorError) as exc_info:
        resolver.resolve(Request)

    assert exc_info.value.chain == (Request, Clock)
    assert isinstance(exc_info.value.cause, RuntimeError)

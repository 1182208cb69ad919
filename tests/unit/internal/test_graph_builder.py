from __future__ import annotations

from typing import Annotated, Any

import pytest

from oakwire._internal.builder import GraphBuilder
from oakwire._internal.providers import Lifetime, ProviderSpecFactory
from oakwire._internal.registry import ProvidersRegistrations
from oakwire.exceptions import (
    OakwireCircularDependencyError,
    OakwireConstructorError,
    OakwireProviderNotFoundError,
)

_DEEP_CHAIN_LENGTH = 3000


class Settings:
    pass


class Engine:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.closed = False

    def close(self) -> None:
        self.closed = True


class Session:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine


class Left:
    def __init__(self, right: Right) -> None:
        self.right = right


class Right:
    def __init__(self, left: Left) -> None:
        self.left = left


def _registrations(*constructors: Any, lifetime: Lifetime = Lifetime.SINGLETON) -> ProvidersRegistrations:
    factory = ProviderSpecFactory()
    registrations = ProvidersRegistrations()
    for constructor in constructors:
        registrations.add(factory.create(constructor, lifetime=lifetime))
    return registrations


def _level_key(level: int) -> Any:
    return Annotated[int, f"level-{level}"]


def _level_constructor(level: int) -> Any:
    if level == 0:

        def first() -> int:
            return 0

        return first

    def next_level(previous: int) -> int:
        return previous + 1

    next_level.__annotations__ = {"previous": _level_key(level - 1), "return": _level_key(level)}
    return next_level


def test_build_fills_singletons_order_and_closers() -> None:
    builder = GraphBuilder(_registrations(Session, Engine, Settings))

    builder.build()

    assert builder.order == [Settings, Engine, Session]
    assert builder.singletons[Session].engine is builder.singletons[Engine]
    assert builder.closers == [(Engine, builder.singletons[Engine])]


def test_transient_providers_are_validated_but_not_constructed() -> None:
    builder = GraphBuilder(_registrations(Session, Engine, Settings, lifetime=Lifetime.TRANSIENT))

    builder.build()

    assert builder.order == []
    assert builder.singletons == {}
    assert builder.closers == []


def test_missing_dependency_names_requesting_provider() -> None:
    builder = GraphBuilder(_registrations(Session))

    with pytest.raises(OakwireProviderNotFoundError) as exc_info:
        builder.build()

    assert exc_info.value.dependency is Engine
    assert exc_info.value.requested_by is Session


def test_cycle_chain_starts_and_ends_with_repeated_key() -> None:
    builder = GraphBuilder(_registrations(Left, Right))

    with pytest.raises(OakwireCircularDependencyError) as exc_info:
        builder.build()

    assert exc_info.value.chain == (Left, Right, Left)


def test_failed_constructor_leaves_partial_results_for_rollback() -> None:
    def make_session(engine: Engine) -> Session:
        msg = "no connection"
        raise ConnectionError(msg)

    factory = ProviderSpecFactory()
    registrations = _registrations(Engine, Settings)
    registrations.add(factory.create(make_session, lifetime=Lifetime.SINGLETON))
    builder = GraphBuilder(registrations)

    with pytest.raises(OakwireConstructorError) as exc_info:
        builder.build()

    assert exc_info.value.chain == (Session,)
    assert builder.order == [Settings, Engine]
    assert [key for key, _ in builder.closers] == [Engine]


def test_deep_chain_does_not_hit_recursion_limit() -> None:
    factory = ProviderSpecFactory()
    registrations = ProvidersRegistrations()
    for level in reversed(range(_DEEP_CHAIN_LENGTH)):
        registrations.add(
            factory.create(
                _level_constructor(level),
                lifetime=Lifetime.SINGLETON,
                provides=_level_key(level),
            ),
        )
    builder = GraphBuilder(registrations)

    builder.build()

    assert builder.singletons[_level_key(_DEEP_CHAIN_LENGTH - 1)] == _DEEP_CHAIN_LENGTH - 1
    assert builder.order[0] == _level_key(0)
    assert len(builder.order) == _DEEP_CHAIN_LENGTH

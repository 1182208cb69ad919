from __future__ import annotations

from typing import Annotated, Protocol, runtime_checkable

from oakwire._internal.type_checks import (
    is_assignable,
    is_closable,
    is_runtime_class,
    is_static_protocol,
)


class Base:
    pass


class Child(Base):
    pass


class WithClose:
    def close(self) -> None:
        pass


class WithCloseAttribute:
    close = "not callable"


@runtime_checkable
class Named(Protocol):
    def name(self) -> str: ...


class StaticNamed(Protocol):
    def name(self) -> str: ...


@runtime_checkable
class HasLabel(Protocol):
    label: str


class Implementation:
    label = "x"

    def name(self) -> str:
        return "impl"


def test_is_runtime_class() -> None:
    assert is_runtime_class(Base)
    assert not is_runtime_class(list[int])
    assert not is_runtime_class(Annotated[Base, "x"])
    assert not is_runtime_class(Base())


def test_is_closable() -> None:
    assert is_closable(WithClose())
    assert not is_closable(WithClose)
    assert not is_closable(WithCloseAttribute())
    assert not is_closable(Base())


def test_is_assignable_for_equal_keys() -> None:
    assert is_assignable(Base, Base)
    assert is_assignable(Annotated[Base, "x"], Annotated[Base, "x"])
    assert not is_assignable(Annotated[Base, "x"], Annotated[Base, "y"])


def test_is_assignable_for_subclasses_and_protocols() -> None:
    assert is_assignable(Child, Base)
    assert not is_assignable(Base, Child)
    assert is_assignable(Implementation, Named)
    assert not is_assignable(Implementation, StaticNamed)
    assert not is_assignable(Implementation, HasLabel)


def test_is_static_protocol() -> None:
    assert is_static_protocol(StaticNamed)
    assert not is_static_protocol(Named)
    assert not is_static_protocol(Base)

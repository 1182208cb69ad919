"""Common errors and what they look like.

Graph problems are reported by ``build`` before any resolution happens.
Constructor failures carry the chain of providers that was being built.
"""

from __future__ import annotations

from oakwire import (
    Container,
    OakwireAlreadySealedError,
    OakwireCircularDependencyError,
    OakwireConstructorError,
    OakwireNotBuiltError,
    OakwireProviderNotFoundError,
)


class Config:
    pass


class Database:
    def __init__(self, config: Config) -> None:
        self.config = config


class Repository:
    def __init__(self, database: Database) -> None:
        self.database = database


class Parent:
    def __init__(self, child: Child) -> None:
        self.child = child


class Child:
    def __init__(self, parent: Parent) -> None:
        self.parent = parent


def broken_config() -> Config:
    msg = "missing DATABASE_URL"
    raise KeyError(msg)


def main() -> None:
    container = Container()
    container.register(Database)
    try:
        container.build()
    except OakwireProviderNotFoundError as error:
        print(error)  # => Provider not found: Config (required by Database).

    container = Container()
    container.register(Parent)
    container.register(Child)
    try:
        container.build()
    except OakwireCircularDependencyError as error:
        print(error)  # => Circular dependency detected: Parent -> Child -> Parent.

    container = Container()
    container.register(Repository)
    container.register(Database)
    container.register(broken_config)
    try:
        container.build()
    except OakwireConstructorError as error:
        print(f"chain={'>'.join(key.__name__ for key in error.chain)}")  # => chain=Repository>Database>Config
        print(f"cause={type(error.cause).__name__}")  # => cause=KeyError

    container = Container()
    container.register(Config)
    try:
        container.resolve(Config)
    except OakwireNotBuiltError as error:
        print(type(error).__name__)  # => OakwireNotBuiltError

    container.build()
    try:
        container.register(Database)
    except OakwireAlreadySealedError as error:
        print(type(error).__name__)  # => OakwireAlreadySealedError


if __name__ == "__main__":
    main()

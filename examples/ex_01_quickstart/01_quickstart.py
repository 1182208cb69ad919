"""Quickstart: register constructors, build once, resolve from anywhere.

Providers can be registered in any order. ``build`` works out the dependency
order, creates every singleton and seals the container.
"""

from __future__ import annotations

from oakwire import Container


class Database:
    def __init__(self) -> None:
        self.host = "localhost"


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database


class UserService:
    def __init__(self, repository: UserRepository) -> None:
        self.repository = repository


def main() -> None:
    container = Container()
    container.register(UserService)
    container.register(UserRepository)
    container.register(Database)
    container.build()

    service = container.resolve(UserService)

    print(f"db_host={service.repository.database.host}")  # => db_host=localhost

    order = ">".join(key.__name__ for key in container.singleton_order)
    print(f"build_order={order}")  # => build_order=Database>UserRepository>UserService

    print(f"same_instance={service is container.resolve(UserService)}")  # => same_instance=True


if __name__ == "__main__":
    main()

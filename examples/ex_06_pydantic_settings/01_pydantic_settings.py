"""Pydantic settings as singleton configuration.

``BaseSettings`` subclasses are registered without injected parameters: their
fields come from the environment. Everything else depends on them by type.
"""

from __future__ import annotations

import os

from pydantic_settings import BaseSettings

from oakwire import Container


class AppSettings(BaseSettings):
    database_url: str = "sqlite://"
    pool_size: int = 5


class Database:
    def __init__(self, settings: AppSettings) -> None:
        self.url = settings.database_url
        self.pool_size = settings.pool_size


def main() -> None:
    os.environ["POOL_SIZE"] = "20"

    container = Container()
    container.register(AppSettings)
    container.register(Database)
    container.build()

    database = container.resolve(Database)

    print(f"url={database.url}")  # => url=sqlite://
    print(f"pool_size={database.pool_size}")  # => pool_size=20
    print(f"settings_singleton={container.resolve(AppSettings) is container.resolve(AppSettings)}")  # => settings_singleton=True


if __name__ == "__main__":
    main()

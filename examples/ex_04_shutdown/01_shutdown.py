"""Closing singletons on shutdown.

Singletons exposing ``close()`` are closed in reverse construction order, so
dependents go before their dependencies. Close failures are collected into a
single ``OakwireShutdownError``. Using the container as a context manager
shuts it down on exit.
"""

from __future__ import annotations

import logging

from oakwire import Container, OakwireShutdownError

closed: list[str] = []


class Pool:
    def close(self) -> None:
        closed.append("pool")


class Cache:
    def close(self) -> None:
        closed.append("cache")
        msg = "cache flush failed"
        raise OSError(msg)


class Service:
    def __init__(self, pool: Pool) -> None:
        self.pool = pool

    def close(self) -> None:
        closed.append("service")


class Repository:
    def __init__(self, pool: Pool, cache: Cache) -> None:
        self.pool = pool
        self.cache = cache

    def close(self) -> None:
        closed.append("repository")


def main() -> None:
    # Close failures are also logged as warnings; keep stderr quiet here.
    logging.getLogger("oakwire").setLevel(logging.ERROR)

    with Container() as container:
        container.register(Service)
        container.register(Pool)
        container.build()
    print(f"closed={','.join(closed)}")  # => closed=service,pool
    print(f"state={container.state.value}")  # => state=shut_down

    closed.clear()
    container = Container()
    container.register(Pool)
    container.register(Cache)
    container.register(Repository)
    container.build()
    try:
        container.shutdown(timeout=5.0)
    except OakwireShutdownError as error:
        print(f"errors={len(error.errors)}")  # => errors=1
        print(f"timed_out={error.timed_out}")  # => timed_out=False
    print(f"closed={','.join(closed)}")  # => closed=repository,cache,pool


if __name__ == "__main__":
    main()

"""Singleton and transient lifetimes.

Singletons are created once during ``build``. Transient providers run on
every ``resolve`` call, but their singleton dependencies are shared.
"""

from __future__ import annotations

from itertools import count

from oakwire import Container, Lifetime

_request_ids = count(1)


class Config:
    def __init__(self) -> None:
        self.env = "dev"


class RequestContext:
    def __init__(self, config: Config) -> None:
        self.config = config
        self.request_id = next(_request_ids)


def main() -> None:
    container = Container()
    container.register(Config)
    container.register(RequestContext, lifetime=Lifetime.TRANSIENT)
    container.build()

    first = container.resolve(RequestContext)
    second = container.resolve(RequestContext)

    print(f"ids={first.request_id},{second.request_id}")  # => ids=1,2
    print(f"transient_distinct={first is not second}")  # => transient_distinct=True
    print(f"config_shared={first.config is second.config}")  # => config_shared=True

    transient_default = Container(default_lifetime=Lifetime.TRANSIENT)
    transient_default.register(Config)
    transient_default.build()
    print(
        f"default_transient={transient_default.resolve(Config) is not transient_default.resolve(Config)}",
    )  # => default_transient=True


if __name__ == "__main__":
    main()

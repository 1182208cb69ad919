"""Named providers for alternate implementations of one interface.

A type keeps its default provider while any number of named providers offer
alternatives. Named providers are constructed on every ``resolve_named``
call. ``oakwire.resolve_named`` also checks the type of the result.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import oakwire
from oakwire import Container


class Logger:
    def __init__(self) -> None:
        self.prefix = "app"


@runtime_checkable
class Notifier(Protocol):
    def send(self, message: str) -> str: ...


class EmailNotifier:
    def __init__(self, logger: Logger) -> None:
        self.logger = logger

    def send(self, message: str) -> str:
        return f"{self.logger.prefix}:email:{message}"


class SmsNotifier:
    def __init__(self, logger: Logger) -> None:
        self.logger = logger

    def send(self, message: str) -> str:
        return f"{self.logger.prefix}:sms:{message}"


def main() -> None:
    container = Container()
    container.register(Logger)
    container.register_named("email", EmailNotifier)
    container.register_named("sms", SmsNotifier)
    container.build()

    email = oakwire.resolve_named(container, "email", Notifier)
    sms = oakwire.resolve_named(container, "sms", Notifier)

    print(email.send("hi"))  # => app:email:hi
    print(sms.send("hi"))  # => app:sms:hi

    again = container.resolve_named("email", Notifier)
    print(f"fresh_instance={again is not email}")  # => fresh_instance=True
    print(f"shared_logger={again.logger is email.logger}")  # => shared_logger=True


if __name__ == "__main__":
    main()

from __future__ import annotations

import types
from typing import Any, Protocol, TypeGuard, runtime_checkable


@runtime_checkable
class SupportsClose(Protocol):
    """Instance exposing an explicit synchronous ``close()`` operation."""

    def close(self) -> object: ...


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_closable(instance: object) -> TypeGuard[SupportsClose]:
    """Return true when a constructed instance should be tracked for shutdown.

    Classes themselves are never treated as closable even though they carry a
    ``close`` function attribute.
    """
    if isinstance(instance, type):
        return False
    return isinstance(instance, SupportsClose) and callable(instance.close)


def is_assignable(provides: Any, requested: Any) -> bool:
    """Return whether a provider output key satisfies a requested key.

    Runtime classes are compared with ``issubclass`` so a named provider of a
    subclass satisfies a request for its base class or a runtime-checkable
    protocol. Any other key must be equal to the requested key.
    """
    if provides == requested:
        return True
    if not (is_runtime_class(provides) and is_runtime_class(requested)):
        return False
    if is_static_protocol(requested):
        return False
    try:
        return issubclass(provides, requested)
    except TypeError:
        # Protocols with data members do not support issubclass().
        return False


def is_static_protocol(candidate: type[Any]) -> bool:
    """Return true for ``Protocol`` classes that are not ``runtime_checkable``."""
    return bool(getattr(candidate, "_is_protocol", False)) and not getattr(
        candidate,
        "_is_runtime_protocol",
        False,
    )


__all__ = [
    "SupportsClose",
    "is_assignable",
    "is_closable",
    "is_runtime_class",
    "is_static_protocol",
]

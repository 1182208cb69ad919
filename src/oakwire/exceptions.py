from __future__ import annotations

from collections.abc import Sequence
from typing import Any


def format_key(key: Any) -> str:
    """Return a readable name for a dependency key used in error messages."""
    if isinstance(key, type):
        return key.__qualname__
    return repr(key)


def format_chain(chain: Sequence[Any]) -> str:
    """Join dependency keys into an ``A -> B -> C`` breadcrumb."""
    return " -> ".join(format_key(key) for key in chain)


class OakwireError(Exception):
    """Represent a base class for all oakwire-specific failures.

    Catch this type when you want to handle any oakwire error path without
    matching each concrete exception class individually.
    """


class OakwireInvalidRegistrationError(OakwireError):
    """Signal invalid registration arguments.

    Raised by ``Container.register`` and ``Container.register_named`` when the
    arguments cannot describe a provider, for example an empty name.
    """


class OakwireInvalidConstructorError(OakwireInvalidRegistrationError):
    """Signal a constructor whose shape cannot be used as a provider.

    Common triggers are non-callable values, functions without a return
    annotation, required parameters without a type annotation, and
    coroutine or generator functions.

    Typical fixes include annotating the constructor or passing
    ``provides=...`` explicitly during registration.
    """


class OakwireDuplicateProviderError(OakwireInvalidRegistrationError):
    """Signal a second provider for an occupied type slot or name.

    Unnamed providers are unique per type and named providers are unique per
    name. Use ``register_named`` to add alternate providers of one type.
    """

    def __init__(self, *, provides: Any = None, name: str | None = None) -> None:
        self.provides = provides
        self.name = name
        if name is not None:
            msg = f"Duplicate provider: named {name!r} is already registered."
        else:
            msg = f"Duplicate provider: {format_key(provides)} is already registered."
        super().__init__(msg)


class OakwireAlreadySealedError(OakwireError):
    """Signal registration or build on a container that was already built.

    After ``Container.build`` succeeds the container is read-only. Register
    every provider before building.
    """


class OakwireBuildFailedError(OakwireAlreadySealedError):
    """Signal use of a container whose build failed.

    A failed build is terminal. Fix the registrations and build a new
    container.
    """


class OakwireNotBuiltError(OakwireError):
    """Signal resolution or shutdown before ``Container.build`` succeeded."""


class OakwireProviderNotFoundError(OakwireError):
    """Signal that a dependency key or name has no provider.

    Raised by ``build`` when some provider depends on an unregistered type and
    by ``resolve``/``resolve_named`` for unknown keys or names.

    Attributes:
        dependency: Missing dependency key, or ``None`` for a missing name.
        name: Missing provider name, if the lookup was by name.
        requested_by: Key (or name) of the provider that declared the
            missing dependency, if any.

    """

    def __init__(
        self,
        dependency: Any = None,
        *,
        name: str | None = None,
        requested_by: Any = None,
    ) -> None:
        self.dependency = dependency
        self.name = name
        self.requested_by = requested_by

        if name is not None and dependency is None:
            msg = f"Provider not found: named {name!r}."
        else:
            msg = f"Provider not found: {format_key(dependency)}"
            if requested_by is not None:
                msg += f" (required by {_format_requester(requested_by)})"
            msg += "."
        super().__init__(msg)


class OakwireCircularDependencyError(OakwireError):
    """Signal a dependency cycle found while building the graph.

    Attributes:
        chain: Keys from the first provider on the cycle through the provider
            that closes it. The repeated key appears at both ends.

    """

    def __init__(self, chain: Sequence[Any]) -> None:
        self.chain = tuple(chain)
        msg = f"Circular dependency detected: {format_chain(self.chain)}."
        super().__init__(msg)


class OakwireTypeMismatchError(OakwireError):
    """Signal that a named provider does not produce the requested type.

    Attributes:
        name: Provider name, if the lookup was by name.
        provides: Type produced by the provider.
        requested: Type requested by the caller.

    """

    def __init__(self, msg: str, *, name: str | None, provides: Any, requested: Any) -> None:
        self.name = name
        self.provides = provides
        self.requested = requested
        super().__init__(msg)


class OakwireTypeAssertionError(OakwireTypeMismatchError):
    """Signal a resolved value that fails the typed helpers' ``isinstance`` check.

    Raised by ``oakwire.resolve`` and ``oakwire.resolve_named`` when a
    constructor returns a value that does not match its declared type.
    """


class OakwireConstructorError(OakwireError):
    """Wrap an exception raised by a user constructor.

    The original exception is available as ``cause`` and as ``__cause__``.

    Attributes:
        chain: Keys that were being constructed, from the outermost request
            down to the provider whose constructor failed.
        cause: Exception raised by the constructor.

    """

    def __init__(self, chain: Sequence[Any], cause: BaseException) -> None:
        self.chain = tuple(chain)
        self.cause = cause
        msg = f"Failed to construct {format_chain(self.chain)}: {cause!r}"
        super().__init__(msg)

    @property
    def failed_key(self) -> Any:
        """Key of the provider whose constructor raised."""
        return self.chain[-1]


class OakwireReentrantCallError(OakwireError):
    """Signal a call that needs exclusive access made while resolving on the same thread.

    A constructor running inside ``resolve`` or ``resolve_named`` cannot
    register providers, build or shut down the container that is resolving it.
    """


class OakwireAlreadyShutDownError(OakwireError):
    """Signal a second ``Container.shutdown`` call.

    Shutdown is not retryable; resources closed by the first call are never
    closed twice.
    """


class OakwireShutdownError(OakwireError):
    """Aggregate failures collected while closing singletons.

    Attributes:
        errors: Exceptions raised by ``close()`` calls, in closing order,
            followed by a ``TimeoutError`` when the deadline expired.
        skipped: Instances that were not closed because the deadline expired.

    """

    def __init__(self, errors: Sequence[BaseException], skipped: Sequence[Any] = ()) -> None:
        self.errors = tuple(errors)
        self.skipped = tuple(skipped)
        details = "; ".join(repr(error) for error in self.errors)
        msg = f"Shutdown finished with {len(self.errors)} error(s): {details}"
        super().__init__(msg)

    @property
    def timed_out(self) -> bool:
        """Whether the shutdown deadline expired before every closer ran."""
        return any(isinstance(error, TimeoutError) for error in self.errors)


def _format_requester(requested_by: Any) -> str:
    if isinstance(requested_by, str):
        return f"named {requested_by!r}"
    return format_key(requested_by)


__all__ = [
    "OakwireAlreadySealedError",
    "OakwireAlreadyShutDownError",
    "OakwireBuildFailedError",
    "OakwireCircularDependencyError",
    "OakwireConstructorError",
    "OakwireDuplicateProviderError",
    "OakwireError",
    "OakwireInvalidConstructorError",
    "OakwireInvalidRegistrationError",
    "OakwireNotBuiltError",
    "OakwireProviderNotFoundError",
    "OakwireReentrantCallError",
    "OakwireShutdownError",
    "OakwireTypeAssertionError",
    "OakwireTypeMismatchError",
    "format_chain",
    "format_key",
]

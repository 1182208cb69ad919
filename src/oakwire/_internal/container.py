from __future__ import annotations

import logging
from collections.abc import Generator
from contextlib import contextmanager
from enum import Enum
from types import TracebackType
from typing import Any, TypeVar, overload

from typing_extensions import Self

from oakwire._internal.builder import GraphBuilder
from oakwire._internal.locks import ReadWriteLock
from oakwire._internal.providers import (
    Lifetime,
    ProviderSpecFactory,
    UserConstructor,
    UserDependency,
)
from oakwire._internal.registry import ProvidersRegistrations
from oakwire._internal.resolver import Resolver
from oakwire._internal.shutdown import ShutdownCoordinator
from oakwire._internal.type_checks import SupportsClose, is_runtime_class, is_static_protocol
from oakwire.exceptions import (
    OakwireAlreadySealedError,
    OakwireAlreadyShutDownError,
    OakwireBuildFailedError,
    OakwireInvalidRegistrationError,
    OakwireNotBuiltError,
    OakwireReentrantCallError,
    OakwireShutdownError,
    OakwireTypeAssertionError,
    format_key,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ContainerState(Enum):
    """Lifecycle state of a container."""

    EMPTY = "empty"
    """No provider has been registered yet."""

    REGISTERING = "registering"
    """At least one provider is registered and ``build`` has not run."""

    BUILDING = "building"
    """``build`` is running."""

    SEALED = "sealed"
    """``build`` succeeded; the container serves resolutions and is read-only."""

    FAILED = "failed"
    """``build`` failed; the container cannot be used anymore."""

    SHUT_DOWN = "shut_down"
    """``shutdown`` ran; terminal."""


class Container:
    """Register constructors, build the dependency graph and serve instances.

    Dependency keys are usually classes or protocols, but any hashable
    annotation works, for example ``Annotated[Db, "replica"]`` or a
    ``NewType``. A class is a constructor of itself; a function is a
    constructor of its return annotation. Constructor parameters without a
    default value are the provider's dependencies, matched by their type
    annotation.

    The lifecycle is explicit: register every provider, call ``build`` once
    to validate the graph and create every singleton, resolve from any number
    of threads, then call ``shutdown`` to close singletons that expose
    ``close()``.
    """

    def __init__(self, *, default_lifetime: Lifetime = Lifetime.SINGLETON) -> None:
        """Initialize an empty container.

        Args:
            default_lifetime: Lifetime used by registrations that omit
                ``lifetime``.

        Examples:
            .. code-block:: python

                container = Container()
                transient_by_default = Container(default_lifetime=Lifetime.TRANSIENT)

        """
        self._default_lifetime = default_lifetime

        self._provider_spec_factory = ProviderSpecFactory()
        self._providers_registrations = ProvidersRegistrations()
        self._shutdown_coordinator = ShutdownCoordinator()
        self._lock = ReadWriteLock()

        self._state = ContainerState.EMPTY
        self._singletons: dict[UserDependency, Any] = {}
        self._singleton_order: tuple[UserDependency, ...] = ()
        self._closers: list[tuple[UserDependency, SupportsClose]] = []
        self._resolver: Resolver | None = None

    @property
    def state(self) -> ContainerState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_built(self) -> bool:
        """Whether ``build`` succeeded (the container may since have been shut down)."""
        return self._state in (ContainerState.SEALED, ContainerState.SHUT_DOWN)

    @property
    def singleton_order(self) -> tuple[UserDependency, ...]:
        """Singleton keys in the order their constructors ran during ``build``."""
        return self._singleton_order

    @contextmanager
    def _exclusive(self, operation: str) -> Generator[None, None, None]:
        if self._lock.is_reading():
            msg = f"Cannot {operation} from a constructor running inside resolve()."
            raise OakwireReentrantCallError(msg)
        with self._lock.write():
            yield

    # region Registration Methods

    def register(
        self,
        constructor: UserConstructor,
        *,
        provides: UserDependency | None = None,
        lifetime: Lifetime | None = None,
    ) -> None:
        """Register the default provider for a dependency key.

        Args:
            constructor: Class or callable producing the dependency. Its
                required parameters are resolved by type annotation.
            provides: Explicit dependency key. Defaults to the class itself or
                to the constructor's return annotation.
            lifetime: ``Lifetime.SINGLETON`` or ``Lifetime.TRANSIENT``.
                Defaults to the container's ``default_lifetime``.

        Raises:
            OakwireInvalidConstructorError: If the constructor cannot be used
                as a provider.
            OakwireDuplicateProviderError: If the key already has a default
                provider.
            OakwireAlreadySealedError: If the container was already built.
            OakwireReentrantCallError: If called from a constructor running
                inside ``resolve``.

        Examples:
            .. code-block:: python

                def make_database(config: Config) -> Database:
                    return Database(config.url)


                container.register(Config)
                container.register(make_database)
                container.register(Session, lifetime=Lifetime.TRANSIENT)

        """
        self._register(constructor, name=None, provides=provides, lifetime=lifetime)

    def register_named(
        self,
        name: str,
        constructor: UserConstructor,
        *,
        provides: UserDependency | None = None,
        lifetime: Lifetime | None = None,
    ) -> None:
        """Register an alternate provider under a name.

        Named providers live in their own namespace: a type can have a default
        provider and any number of named ones. They are validated by ``build``
        but constructed on every ``resolve_named`` call.

        Args:
            name: Non-empty registration name.
            constructor: Class or callable producing the dependency.
            provides: Explicit output key, inferred like in ``register``.
            lifetime: Lifetime recorded for the provider. Named instances are
                never cached; singleton dependencies they declare are shared.

        Raises:
            OakwireInvalidRegistrationError: If ``name`` is empty.
            OakwireInvalidConstructorError: If the constructor cannot be used
                as a provider.
            OakwireDuplicateProviderError: If ``name`` is already registered.
            OakwireAlreadySealedError: If the container was already built.
            OakwireReentrantCallError: If called from a constructor running
                inside ``resolve``.

        """
        if not isinstance(name, str) or not name:
            msg = f"Provider name must be a non-empty string, got {name!r}."
            raise OakwireInvalidRegistrationError(msg)
        self._register(constructor, name=name, provides=provides, lifetime=lifetime)

    def _register(
        self,
        constructor: UserConstructor,
        *,
        name: str | None,
        provides: UserDependency | None,
        lifetime: Lifetime | None,
    ) -> None:
        with self._exclusive("register providers"):
            self._ensure_accepting_registrations()
            spec = self._provider_spec_factory.create(
                constructor,
                lifetime=self._default_lifetime if lifetime is None else lifetime,
                provides=provides,
                name=name,
            )
            self._providers_registrations.add(spec)
            self._state = ContainerState.REGISTERING

        logger.debug(
            "Registered %s provider %s for %s%s",
            spec.lifetime.name.lower(),
            spec.display_name,
            format_key(spec.provides),
            "" if name is None else f" as {name!r}",
        )

    def _ensure_accepting_registrations(self) -> None:
        if self._state is ContainerState.FAILED:
            msg = "Container build failed; create a new container."
            raise OakwireBuildFailedError(msg)
        if self._state not in (ContainerState.EMPTY, ContainerState.REGISTERING):
            msg = "Container is already built; no further registrations are accepted."
            raise OakwireAlreadySealedError(msg)

    # endregion Registration Methods

    # region Build

    def build(self) -> None:
        """Validate the dependency graph and create every singleton.

        Every unnamed provider is visited depth-first. Missing and circular
        dependencies are reported here, and singleton constructors run in
        dependency order so each one receives fully built inputs. Named
        providers are only checked for registered dependencies.

        On success the container is sealed. On failure it becomes unusable:
        singletons already created that expose ``close()`` are closed in
        reverse order, and a new container must be built.

        Raises:
            OakwireProviderNotFoundError: If a dependency has no provider.
            OakwireCircularDependencyError: If providers depend on each other
                in a cycle.
            OakwireConstructorError: If a singleton constructor raised.
            OakwireAlreadySealedError: If called a second time.
            OakwireReentrantCallError: If called from a constructor running
                inside ``resolve``.

        """
        with self._exclusive("build the container"):
            self._ensure_accepting_registrations()
            self._state = ContainerState.BUILDING

            builder = GraphBuilder(self._providers_registrations)
            try:
                builder.build()
            except BaseException as error:
                self._state = ContainerState.FAILED
                self._rollback(builder, error)
                raise

            self._singletons = builder.singletons
            self._singleton_order = tuple(builder.order)
            self._closers = builder.closers
            self._resolver = Resolver(self._providers_registrations, self._singletons)
            self._state = ContainerState.SEALED

        logger.info(
            "Built container with %d provider(s), %d singleton(s), %d closer(s)",
            len(self._providers_registrations),
            len(self._singleton_order),
            len(self._closers),
        )

    def _rollback(self, builder: GraphBuilder, error: BaseException) -> None:
        if not builder.closers:
            return
        try:
            self._shutdown_coordinator.close_all(builder.closers)
        except OakwireShutdownError as close_error:
            logger.warning("Closing partially built singletons failed: %s", close_error)
            error.add_note(f"While closing partially built singletons: {close_error}")

    # endregion Build

    # region Resolution

    @overload
    def resolve(self, dependency: type[T]) -> T: ...

    @overload
    def resolve(self, dependency: Any) -> Any: ...

    def resolve(self, dependency: Any) -> Any:
        """Resolve a dependency by key.

        Singletons are returned from the cache built by ``build``; transient
        providers construct a new instance on every call.

        Args:
            dependency: Dependency key to resolve.

        Returns:
            Resolved dependency value.

        Raises:
            OakwireNotBuiltError: If ``build`` has not succeeded.
            OakwireAlreadyShutDownError: If the container was shut down.
            OakwireProviderNotFoundError: If no default provider is
                registered for the key.
            OakwireConstructorError: If a transient constructor raised.

        Examples:
            .. code-block:: python

                container.build()
                service = container.resolve(UserService)

        """
        with self._lock.read():
            return self._active_resolver().resolve(dependency)

    @overload
    def resolve_named(self, name: str, dependency: type[T]) -> T: ...

    @overload
    def resolve_named(self, name: str, dependency: Any) -> Any: ...

    def resolve_named(self, name: str, dependency: Any) -> Any:
        """Construct a new instance from the provider registered under ``name``.

        Args:
            name: Registration name.
            dependency: Expected key. The named provider's output must be the
                same key or, for classes, a subclass of it.

        Returns:
            A freshly constructed instance.

        Raises:
            OakwireNotBuiltError: If ``build`` has not succeeded.
            OakwireAlreadyShutDownError: If the container was shut down.
            OakwireProviderNotFoundError: If ``name`` is not registered.
            OakwireTypeMismatchError: If the provider output is not
                compatible with ``dependency``.
            OakwireConstructorError: If a constructor raised.

        """
        with self._lock.read():
            return self._active_resolver().resolve_named(name, dependency)

    def _active_resolver(self) -> Resolver:
        if self._state is ContainerState.SHUT_DOWN:
            msg = "Container has been shut down."
            raise OakwireAlreadyShutDownError(msg)
        if self._resolver is None or self._state is not ContainerState.SEALED:
            msg = f"Container is not built (state: {self._state.value}); call build() first."
            raise OakwireNotBuiltError(msg)
        return self._resolver

    # endregion Resolution

    # region Shutdown

    def shutdown(self, timeout: float | None = None) -> None:
        """Close singletons that expose ``close()`` in reverse construction order.

        Dependents are closed before their dependencies. The container is
        marked shut down whatever the outcome; a second call raises.

        Args:
            timeout: Seconds allowed for the whole shutdown. Checked before
                each ``close()`` call; remaining closers are skipped once it
                expires. ``None`` waits for every closer.

        Raises:
            OakwireNotBuiltError: If ``build`` has not succeeded.
            OakwireAlreadyShutDownError: If called a second time.
            OakwireShutdownError: If any ``close()`` raised or the timeout
                expired.
            OakwireReentrantCallError: If called from a constructor running
                inside ``resolve``.

        """
        with self._exclusive("shut down the container"):
            if self._state is ContainerState.SHUT_DOWN:
                msg = "Container is already shut down."
                raise OakwireAlreadyShutDownError(msg)
            if self._state is not ContainerState.SEALED:
                msg = f"Container is not built (state: {self._state.value}); nothing to shut down."
                raise OakwireNotBuiltError(msg)

            self._state = ContainerState.SHUT_DOWN
            closers, self._closers = self._closers, []
            try:
                self._shutdown_coordinator.close_all(closers, timeout=timeout)
            finally:
                logger.info("Container shut down after closing %d closer(s)", len(closers))

    def __enter__(self) -> Self:
        """Return the container; ``__exit__`` shuts it down if it was built."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """Shut down a sealed container.

        Containers that were never built, failed to build or are already shut
        down are left as they are.
        """
        if self._state is ContainerState.SEALED:
            self.shutdown()

    # endregion Shutdown


def resolve(container: Container, dependency: type[T]) -> T:
    """Resolve ``dependency`` and check that the value is an instance of it.

    The ``isinstance`` check runs for runtime classes only. Other keys, such
    as ``Annotated`` tokens, are returned unchecked.

    Raises:
        OakwireTypeAssertionError: If the resolved value is not an instance
            of ``dependency``.

    Examples:
        .. code-block:: python

            service = oakwire.resolve(container, UserService)

    """
    value = container.resolve(dependency)
    return _narrow(value, dependency, name=None)


def resolve_named(container: Container, name: str, dependency: type[T]) -> T:
    """Resolve a named provider and check that the value is an instance of ``dependency``.

    Raises:
        OakwireTypeAssertionError: If the resolved value is not an instance
            of ``dependency``.

    """
    value = container.resolve_named(name, dependency)
    return _narrow(value, dependency, name=name)


def _narrow(value: Any, dependency: Any, *, name: str | None) -> Any:
    if not is_runtime_class(dependency) or is_static_protocol(dependency):
        return value
    if isinstance(value, dependency):
        return value

    prefix = "" if name is None else f"named {name!r}: "
    msg = f"{prefix}cannot convert {format_key(type(value))} to {format_key(dependency)}."
    raise OakwireTypeAssertionError(msg, name=name, provides=type(value), requested=dependency)


__all__ = ["Container", "ContainerState", "resolve", "resolve_named"]

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from oakwire._internal.providers import ProviderSpec, UserDependency
from oakwire._internal.registry import ProvidersRegistrations
from oakwire._internal.type_checks import is_assignable
from oakwire.exceptions import (
    OakwireConstructorError,
    OakwireError,
    OakwireProviderNotFoundError,
    OakwireTypeMismatchError,
    format_key,
)


class Resolver:
    """Serve instances from a sealed registry and singleton cache.

    The resolver never writes to the registry or the cache. Transient
    instances are built into local variables only, so any number of threads
    can resolve through one resolver at the same time.
    """

    def __init__(
        self,
        registrations: ProvidersRegistrations,
        singletons: Mapping[UserDependency, Any],
    ) -> None:
        self._registrations = registrations
        self._singletons = singletons

    def resolve(self, dependency: UserDependency) -> Any:
        """Resolve a dependency by its key.

        Raises:
            OakwireProviderNotFoundError: If no unnamed provider is registered
                for the key.
            OakwireConstructorError: If a constructor raised.

        """
        if not _is_hashable(dependency):
            raise OakwireProviderNotFoundError(dependency)

        if dependency in self._singletons:
            return self._singletons[dependency]

        spec = self._registrations.find_by_type(dependency)
        if spec is None:
            raise OakwireProviderNotFoundError(dependency)
        return self.construct(spec, chain=(dependency,))

    def resolve_named(self, name: str, dependency: UserDependency) -> Any:
        """Construct a fresh instance from the provider registered under ``name``.

        Named providers are never cached, whatever their declared lifetime.
        Their dependencies are served like any other dependency.

        Raises:
            OakwireProviderNotFoundError: If the name is not registered.
            OakwireTypeMismatchError: If the named provider's output is not
                compatible with ``dependency``.
            OakwireConstructorError: If a constructor raised.

        """
        spec = self._registrations.find_by_name(name)
        if spec is None:
            raise OakwireProviderNotFoundError(name=name)

        if not is_assignable(spec.provides, dependency):
            msg = (
                f"Named provider {name!r} returns {format_key(spec.provides)}, "
                f"which is not assignable to {format_key(dependency)}."
            )
            raise OakwireTypeMismatchError(
                msg,
                name=name,
                provides=spec.provides,
                requested=dependency,
            )

        return self.construct(spec, chain=(spec.provides,))

    def construct(self, spec: ProviderSpec, *, chain: Sequence[UserDependency]) -> Any:
        """Build a new instance of ``spec``, satisfying each declared input.

        Singleton inputs come from the cache and transient inputs are built
        recursively. ``chain`` lists the keys being constructed so far, ending
        with the key of ``spec``; it prefixes constructor failures.
        """
        values: list[Any] = []
        for dependency in spec.dependencies:
            key = dependency.provides
            if key in self._singletons:
                values.append(self._singletons[key])
                continue

            dependency_spec = self._registrations.find_by_type(key)
            if dependency_spec is None:
                raise OakwireProviderNotFoundError(
                    key,
                    requested_by=spec.name if spec.name is not None else spec.provides,
                )
            values.append(self.construct(dependency_spec, chain=(*chain, key)))

        try:
            return spec.invoke(values)
        except OakwireError:
            raise
        except Exception as error:
            raise OakwireConstructorError(chain, error) from error


def _is_hashable(value: object) -> bool:
    try:
        hash(value)
    except TypeError:
        return False
    return True


__all__ = ["Resolver"]

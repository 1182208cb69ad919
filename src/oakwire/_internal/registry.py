from __future__ import annotations

from collections.abc import Iterator

from oakwire._internal.providers import ProviderSpec, UserDependency
from oakwire.exceptions import OakwireDuplicateProviderError


class ProvidersRegistrations:
    """Holds all provider specifications registered in a container.

    Unnamed providers are keyed by the dependency they provide and named
    providers by their name. The two namespaces are independent, so a type
    may have one default provider and any number of named ones.
    """

    def __init__(self) -> None:
        self._registrations_by_type: dict[UserDependency, ProviderSpec] = {}
        self._registrations_by_name: dict[str, ProviderSpec] = {}

    def add(self, spec: ProviderSpec) -> None:
        """Add a provider specification.

        Raises:
            OakwireDuplicateProviderError: If the type slot or the name is
                already taken.

        """
        if spec.name is not None:
            if spec.name in self._registrations_by_name:
                raise OakwireDuplicateProviderError(name=spec.name)
            self._registrations_by_name[spec.name] = spec
            return

        if spec.provides in self._registrations_by_type:
            raise OakwireDuplicateProviderError(provides=spec.provides)
        self._registrations_by_type[spec.provides] = spec

    def find_by_type(self, dep_type: UserDependency) -> ProviderSpec | None:
        """Get the unnamed provider specification for a dependency, if it exists."""
        return self._registrations_by_type.get(dep_type)

    def find_by_name(self, name: str) -> ProviderSpec | None:
        """Get a named provider specification, if it exists."""
        return self._registrations_by_name.get(name)

    def unnamed(self) -> list[ProviderSpec]:
        """Get unnamed provider specifications in registration order."""
        return list(self._registrations_by_type.values())

    def named(self) -> list[ProviderSpec]:
        """Get named provider specifications in registration order."""
        return list(self._registrations_by_name.values())

    def __contains__(self, dep_type: object) -> bool:
        return dep_type in self._registrations_by_type

    def __iter__(self) -> Iterator[ProviderSpec]:
        yield from self._registrations_by_type.values()
        yield from self._registrations_by_name.values()

    def __len__(self) -> int:
        return len(self._registrations_by_type) + len(self._registrations_by_name)


__all__ = ["ProvidersRegistrations"]

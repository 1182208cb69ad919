from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

from oakwire._internal.providers import (
    Lifetime,
    ProviderDependency,
    ProviderSpec,
    UserDependency,
)
from oakwire._internal.registry import ProvidersRegistrations
from oakwire._internal.resolver import Resolver
from oakwire._internal.type_checks import SupportsClose, is_closable
from oakwire.exceptions import OakwireCircularDependencyError, OakwireProviderNotFoundError

logger = logging.getLogger(__name__)


class _VisitState(Enum):
    IN_PROGRESS = auto()
    DONE = auto()


@dataclass(slots=True)
class _Frame:
    spec: ProviderSpec
    pending: Iterator[ProviderDependency]


@dataclass(slots=True)
class GraphBuilder:
    """Validate the dependency graph and instantiate singletons in dependency order.

    The traversal is depth-first with an explicit frame stack instead of
    Python recursion, so graph depth is not bounded by the interpreter
    recursion limit. The frame stack doubles as the current path used to
    report cycles.

    ``singletons``, ``order`` and ``closers`` are filled as the build
    progresses and stay populated when it fails, so the caller can release
    what was already created.
    """

    registrations: ProvidersRegistrations
    singletons: dict[UserDependency, Any] = field(default_factory=dict)
    order: list[UserDependency] = field(default_factory=list)
    closers: list[tuple[UserDependency, SupportsClose]] = field(default_factory=list)
    _states: dict[UserDependency, _VisitState] = field(default_factory=dict, init=False)
    _resolver: Resolver = field(init=False)

    def __post_init__(self) -> None:
        self._resolver = Resolver(self.registrations, self.singletons)

    def build(self) -> None:
        """Run the build pass.

        Raises:
            OakwireProviderNotFoundError: If a declared input has no provider.
            OakwireCircularDependencyError: If the unnamed providers form a cycle.
            OakwireConstructorError: If a singleton constructor raised.

        """
        for spec in self.registrations.unnamed():
            self._visit(spec.provides)

        for spec in self.registrations.named():
            self._validate_named(spec)

        self._states.clear()

    def _visit(self, root: UserDependency) -> None:
        if self._states.get(root) is _VisitState.DONE:
            return

        path: list[UserDependency] = []
        frames: list[_Frame] = []
        self._enter(root, requested_by=None, path=path, frames=frames)

        while frames:
            frame = frames[-1]
            dependency = next(frame.pending, None)

            if dependency is None:
                self._complete(frame.spec, path=path)
                self._states[frame.spec.provides] = _VisitState.DONE
                frames.pop()
                path.pop()
                continue

            key = dependency.provides
            state = self._states.get(key)
            if state is _VisitState.DONE:
                continue
            if state is _VisitState.IN_PROGRESS:
                cycle_start = path.index(key)
                raise OakwireCircularDependencyError([*path[cycle_start:], key])

            self._enter(key, requested_by=frame.spec.provides, path=path, frames=frames)

    def _enter(
        self,
        key: UserDependency,
        *,
        requested_by: UserDependency | None,
        path: list[UserDependency],
        frames: list[_Frame],
    ) -> None:
        spec = self.registrations.find_by_type(key)
        if spec is None:
            raise OakwireProviderNotFoundError(key, requested_by=requested_by)

        self._states[key] = _VisitState.IN_PROGRESS
        path.append(key)
        frames.append(_Frame(spec=spec, pending=iter(spec.dependencies)))

    def _complete(self, spec: ProviderSpec, *, path: list[UserDependency]) -> None:
        if spec.lifetime is not Lifetime.SINGLETON:
            return

        instance = self._resolver.construct(spec, chain=tuple(path))
        self.singletons[spec.provides] = instance
        self.order.append(spec.provides)
        logger.debug("Constructed singleton %s via %s", spec.provides, spec.display_name)

        if is_closable(instance):
            self.closers.append((spec.provides, instance))

    def _validate_named(self, spec: ProviderSpec) -> None:
        for dependency in spec.dependencies:
            if dependency.provides not in self.registrations:
                raise OakwireProviderNotFoundError(dependency.provides, requested_by=spec.name)


__all__ = ["GraphBuilder"]

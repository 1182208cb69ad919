from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum, auto
from inspect import Parameter
from typing import Any, NoReturn, TypeAlias, get_type_hints

from typing_extensions import Never

from oakwire._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from oakwire._internal.type_checks import is_runtime_class
from oakwire.exceptions import OakwireInvalidConstructorError

UserDependency: TypeAlias = Any
"""A dependency key that has been registered or is being resolved from user code."""

UserConstructor: TypeAlias = Callable[..., Any]
"""A class or callable supplied by the user to produce a dependency."""

_MISSING_ANNOTATION: Any = object()
_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}
_NO_VALUE_RETURN_TYPES: tuple[Any, ...] = (None, type(None), NoReturn, Never)


class Lifetime(Enum):
    """Defines how many instances of a provider the container creates."""

    SINGLETON = auto()
    """One instance is built during ``Container.build`` and shared by every resolution."""

    TRANSIENT = auto()
    """A new instance is constructed on every resolution."""


@dataclass(frozen=True, slots=True)
class ProviderDependency:
    """Represents one declared input of a constructor."""

    provides: UserDependency
    parameter: Parameter


@dataclass(frozen=True, slots=True, kw_only=True)
class ProviderSpec:
    """A registered constructor with its output key, inputs, lifetime and name."""

    provides: UserDependency
    """The dependency key that this provider supplies."""
    constructor: UserConstructor
    """The callable invoked to produce the dependency."""
    dependencies: tuple[ProviderDependency, ...] = ()
    """Declared inputs, in signature order."""
    lifetime: Lifetime = Lifetime.SINGLETON
    """How many instances the container creates."""
    name: str | None = None
    """Registration name, or ``None`` for the default provider of ``provides``."""

    @property
    def display_name(self) -> str:
        """Return the constructor name used in logs."""
        return getattr(self.constructor, "__qualname__", repr(self.constructor))

    def invoke(self, values: Sequence[Any]) -> Any:
        """Call the constructor with one value per declared dependency."""
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for dependency, value in zip(self.dependencies, values, strict=True):
            if dependency.parameter.kind is Parameter.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[dependency.parameter.name] = value
        return self.constructor(*args, **kwargs)


@dataclass(slots=True)
class ProviderSpecFactory:
    """Builds provider specifications from user-defined constructors."""

    def create(
        self,
        constructor: UserConstructor,
        *,
        lifetime: Lifetime,
        provides: UserDependency | None = None,
        name: str | None = None,
    ) -> ProviderSpec:
        """Inspect a constructor and return its provider specification.

        Args:
            constructor: Class or callable producing the dependency.
            lifetime: Lifetime of the produced instances.
            provides: Explicit output key. Inferred from the class itself or
                from the return annotation when omitted.
            name: Registration name for alternate providers.

        Raises:
            OakwireInvalidConstructorError: If the constructor is not callable,
                is asynchronous or a generator, or its inputs or output cannot
                be inferred.

        """
        if not callable(constructor):
            msg = f"Constructor must be callable, got {constructor!r}."
            raise OakwireInvalidConstructorError(msg)

        provider_name = self._provider_name(constructor)

        if is_runtime_class(constructor):
            if inspect.isabstract(constructor):
                msg = f"Constructor '{provider_name}' cannot be an abstract class."
                raise OakwireInvalidConstructorError(msg)
            if is_pydantic_settings_subclass(constructor):
                dependencies: list[ProviderDependency] = []
            else:
                dependencies = self._extract_dependencies(
                    provider=constructor.__init__,
                    provider_name=provider_name,
                    skip_first_parameter=True,
                )
            output = constructor if provides is None else provides
        else:
            target = self._inspection_target(constructor)
            self._ensure_synchronous(target, provider_name=provider_name)
            dependencies = self._extract_dependencies(
                provider=target,
                provider_name=provider_name,
                skip_first_parameter=False,
            )
            output = self._extract_return_type(target, provider_name) if provides is None else provides

        self._ensure_hashable(output, provider_name=provider_name, role="output")
        for dependency in dependencies:
            self._ensure_hashable(
                dependency.provides,
                provider_name=provider_name,
                role=f"parameter '{dependency.parameter.name}'",
            )

        return ProviderSpec(
            provides=output,
            constructor=constructor,
            dependencies=tuple(dependencies),
            lifetime=lifetime,
            name=name,
        )

    def _inspection_target(self, constructor: UserConstructor) -> Callable[..., Any]:
        if inspect.isfunction(constructor) or inspect.ismethod(constructor):
            return constructor
        call = getattr(type(constructor), "__call__", None)
        if inspect.isfunction(call):
            # Callable instance: inspect the bound ``__call__``.
            return constructor.__call__  # type: ignore[no-any-return]
        return constructor

    def _ensure_synchronous(self, constructor: UserConstructor, *, provider_name: str) -> None:
        unwrapped = inspect.unwrap(constructor)
        if inspect.iscoroutinefunction(unwrapped) or inspect.isasyncgenfunction(unwrapped):
            msg = f"Constructor '{provider_name}' is asynchronous; only synchronous constructors are supported."
            raise OakwireInvalidConstructorError(msg)
        if inspect.isgeneratorfunction(unwrapped):
            msg = f"Constructor '{provider_name}' is a generator; return the instance instead of yielding it."
            raise OakwireInvalidConstructorError(msg)

    def _extract_dependencies(
        self,
        *,
        provider: Callable[..., Any],
        provider_name: str,
        skip_first_parameter: bool,
    ) -> list[ProviderDependency]:
        parameters = self._provider_parameters(
            provider=provider,
            provider_name=provider_name,
            skip_first_parameter=skip_first_parameter,
        )
        annotations, annotation_error = self._resolved_type_hints(provider)
        dependencies: list[ProviderDependency] = []

        for parameter in parameters:
            if not self._is_required_parameter(parameter):
                continue
            provides = self._resolve_parameter_annotation(
                parameter=parameter,
                annotations=annotations,
                annotation_error=annotation_error,
                provider_name=provider_name,
            )
            dependencies.append(ProviderDependency(provides=provides, parameter=parameter))

        return dependencies

    def _resolve_parameter_annotation(
        self,
        *,
        parameter: Parameter,
        annotations: dict[str, Any],
        annotation_error: Exception | None,
        provider_name: str,
    ) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation

        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            return raw_annotation

        error_message = (
            f"Unable to infer dependency for required parameter '{parameter.name}' "
            f"in constructor '{provider_name}'. Add a type annotation or a default value."
        )
        if annotation_error is None:
            raise OakwireInvalidConstructorError(error_message)
        msg = f"{error_message} Original annotation error: {annotation_error}"
        raise OakwireInvalidConstructorError(msg) from annotation_error

    def _extract_return_type(self, provider: Callable[..., Any], provider_name: str) -> Any:
        annotations, annotation_error = self._resolved_type_hints(provider)
        return_annotation = annotations.get("return", _MISSING_ANNOTATION)
        if return_annotation is _MISSING_ANNOTATION:
            raw_return = self._raw_return_annotation(provider)
            if raw_return is not inspect.Signature.empty and not isinstance(raw_return, str):
                return_annotation = raw_return

        if return_annotation is _MISSING_ANNOTATION:
            msg = (
                f"Unable to infer return type for constructor '{provider_name}'. "
                "Add a return type annotation or pass provides= explicitly."
            )
            if annotation_error is None:
                raise OakwireInvalidConstructorError(msg)
            full_msg = f"{msg} Original annotation error: {annotation_error}"
            raise OakwireInvalidConstructorError(full_msg) from annotation_error

        if any(return_annotation is no_value for no_value in _NO_VALUE_RETURN_TYPES):
            msg = (
                f"Constructor '{provider_name}' must return a value, "
                f"but its return annotation is {return_annotation!r}."
            )
            raise OakwireInvalidConstructorError(msg)

        return return_annotation

    def _ensure_hashable(self, key: Any, *, provider_name: str, role: str) -> None:
        try:
            hash(key)
        except TypeError as error:
            msg = f"Constructor '{provider_name}' {role} key {key!r} is not hashable."
            raise OakwireInvalidConstructorError(msg) from error

    def _raw_return_annotation(self, provider: Callable[..., Any]) -> Any:
        try:
            return inspect.signature(provider).return_annotation
        except (TypeError, ValueError):
            return inspect.Signature.empty

    def _provider_parameters(
        self,
        *,
        provider: Callable[..., Any],
        provider_name: str,
        skip_first_parameter: bool,
    ) -> tuple[Parameter, ...]:
        try:
            parameters = tuple(inspect.signature(provider).parameters.values())
        except (TypeError, ValueError) as error:
            msg = f"Unable to read the signature of constructor '{provider_name}'."
            raise OakwireInvalidConstructorError(msg) from error
        if (
            skip_first_parameter
            and parameters
            and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES
        ):
            return parameters[1:]
        return parameters

    def _resolved_type_hints(
        self,
        provider: Callable[..., Any],
    ) -> tuple[dict[str, Any], Exception | None]:
        try:
            return get_type_hints(provider, include_extras=True), None
        except (AttributeError, NameError, TypeError) as error:
            return {}, error

    def _is_required_parameter(self, parameter: Parameter) -> bool:
        return (
            parameter.default is Parameter.empty
            and parameter.kind is not Parameter.VAR_POSITIONAL
            and parameter.kind is not Parameter.VAR_KEYWORD
        )

    def _provider_name(self, provider: Callable[..., Any]) -> str:
        return getattr(provider, "__qualname__", repr(provider))


__all__ = [
    "Lifetime",
    "ProviderDependency",
    "ProviderSpec",
    "ProviderSpecFactory",
    "UserConstructor",
    "UserDependency",
]

from oakwire.container import Container, ContainerState, resolve, resolve_named
from oakwire.exceptions import (
    OakwireAlreadySealedError,
    OakwireAlreadyShutDownError,
    OakwireBuildFailedError,
    OakwireCircularDependencyError,
    OakwireConstructorError,
    OakwireDuplicateProviderError,
    OakwireError,
    OakwireInvalidConstructorError,
    OakwireInvalidRegistrationError,
    OakwireNotBuiltError,
    OakwireProviderNotFoundError,
    OakwireReentrantCallError,
    OakwireShutdownError,
    OakwireTypeAssertionError,
    OakwireTypeMismatchError,
)
from oakwire.providers import Lifetime

__all__ = [
    "Container",
    "ContainerState",
    "Lifetime",
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
    "resolve",
    "resolve_named",
]

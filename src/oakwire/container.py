from oakwire._internal.container import Container, ContainerState, resolve, resolve_named

__all__ = ["Container", "ContainerState", "resolve", "resolve_named"]

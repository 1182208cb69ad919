from __future__ import annotations

import importlib
import warnings
from typing import Any

from oakwire._internal.type_checks import is_runtime_class

_SETTINGS_MODULES = ("pydantic_settings", "pydantic.v1")
"""Modules that may define ``BaseSettings``, newest first."""


def _load_base_settings(module_name: str) -> type[Any] | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    return base_settings if isinstance(base_settings, type) else None


def _discover_settings_bases() -> tuple[type[Any], ...]:
    # pydantic.v1 warns on import under newer interpreters.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", UserWarning)
        loaded = [_load_base_settings(module_name) for module_name in _SETTINGS_MODULES]
    return tuple(dict.fromkeys(base for base in loaded if base is not None))


SETTINGS_BASES: tuple[type[Any], ...] = _discover_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether ``register`` should treat a class as a settings model.

    Settings models are constructed with no arguments so that Pydantic reads
    their fields from the environment. Without Pydantic installed no class
    qualifies.
    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
]

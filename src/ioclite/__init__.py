"""Minimal inversion-of-control container.

This package provides a lightweight IoC container for Python, binding service
tokens to pre-built instances, zero-argument factories or concrete types, and
resolving object graphs by constructor injection.

Exports:
- `Container`: the registry and resolver.
- `Lifetime`: `SINGLETON` (built once, then cached) or `TRANSIENT`.
- `InstanceBinding`, `FactoryBinding`, `TypeBinding`: the stored bindings.
- `constructor`, `injection_constructor`: mark alternate and preferred
  constructors used when auto-wiring a type.
- `candidates_from_module`: classes of a module, for `Container.register_conventions`.
- `ResolutionError`, `NotRegisteredError`, `TypeMismatchError`: failures.
"""

from ._container import (
    Container,
    FactoryBinding,
    InstanceBinding,
    Lifetime,
    NotRegisteredError,
    ResolutionError,
    TypeBinding,
    TypeMismatchError,
)
from ._conventions import candidates_from_module
from ._markers import constructor, injection_constructor


__all__ = [
    "Container",
    "FactoryBinding",
    "InstanceBinding",
    "Lifetime",
    "NotRegisteredError",
    "ResolutionError",
    "TypeBinding",
    "TypeMismatchError",
    "candidates_from_module",
    "constructor",
    "injection_constructor",
]

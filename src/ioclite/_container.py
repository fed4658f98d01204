from __future__ import annotations

import inspect
import logging
import threading
import typing
from dataclasses import dataclass
from enum import Enum
from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    TypeVar,
    Union,
    cast,
    get_type_hints,
    overload,
)

from ._constructor import Constructor
from ._conventions import matching_conventions


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable

    T = TypeVar("T")


class Lifetime(Enum):
    SINGLETON = "singleton"
    TRANSIENT = "transient"


@dataclass(frozen=True)
class InstanceBinding:
    instance: object


@dataclass(frozen=True)
class FactoryBinding:
    factory: Callable[[], object]
    lifetime: Lifetime = Lifetime.TRANSIENT


@dataclass(frozen=True)
class TypeBinding:
    impl: type
    lifetime: Lifetime = Lifetime.TRANSIENT


Binding = Union[InstanceBinding, FactoryBinding, TypeBinding]


class ResolutionError(RuntimeError):
    pass


class NotRegisteredError(ResolutionError, KeyError):
    """Raised when a token, or one of its transitive dependencies, has no binding."""

    def __init__(self, token: Hashable) -> None:
        self.token = token
        super().__init__(f"No registration found for token: {token!r}")

    def __str__(self) -> str:
        return str(self.args[0])


class TypeMismatchError(ResolutionError, TypeError):
    def __init__(self, token: type, value: object) -> None:
        self.token = token
        self.value = value
        super().__init__(f"Resolved instance {type(value).__name__} does not satisfy {token.__name__}")


_MISSING = object()


class Container:
    """Minimal IoC container.

    - bind tokens to instances, factories or concrete types
    - resolve with constructor injection
    - lifetimes: singleton / transient
    - convention registration (``IFoo`` -> ``Foo``).

    A single reentrant lock guards registration and the whole
    read-construct-promote sequence of ``resolve``, so a singleton is built
    once even under concurrent first resolutions.
    """

    def __init__(self, *, check_types: bool = True) -> None:
        self._bindings: dict[Any, Binding] = {}
        self._lock = threading.RLock()
        self._check_types = check_types
        self._constructor = Constructor(self)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._bindings

    def register_instance(self, token: Hashable, instance: object) -> None:
        """Register a pre-built instance (always returned as-is)."""
        self._bind(token, InstanceBinding(instance))

    def register_factory(
        self,
        token: Hashable,
        factory: Callable[[], object],
        *,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None:
        """Register a zero-argument factory.

        With ``Lifetime.SINGLETON`` the first produced value replaces the
        factory binding, so the factory runs at most once.
        """
        if not callable(factory):
            msg = f"Factory for {token!r} must be callable, got {type(factory).__name__}"
            raise TypeError(msg)
        self._bind(token, FactoryBinding(factory, lifetime))

    def register_type(
        self,
        token: Hashable,
        impl: type,
        *,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None:
        """Register a concrete class built by constructor injection.

        Constructibility is only checked when the token is resolved.
        """
        if not inspect.isclass(impl):
            msg = f"Implementation for {token!r} must be a class, got {impl!r}"
            raise TypeError(msg)
        self._bind(token, TypeBinding(impl, lifetime))

    def register(
        self,
        token: Hashable,
        impl: type | None = None,
        *,
        factory: Callable[[], object] | None = None,
        instance: object = _MISSING,
        lifetime: Lifetime = Lifetime.TRANSIENT,
    ) -> None:
        """Register a concrete type, a factory or an instance for a token.

        Example:
          container.register(IFoo, Foo)
          container.register("db", factory=create_db, lifetime=Lifetime.SINGLETON)
          container.register(Settings, instance=settings)

        """
        given = sum((impl is not None, factory is not None, instance is not _MISSING))
        if given != 1:
            msg = "Provide exactly one of `impl`, `factory` or `instance`."
            raise ValueError(msg)

        if impl is not None:
            self.register_type(token, impl, lifetime=lifetime)
        elif factory is not None:
            self.register_factory(token, factory, lifetime=lifetime)
        else:
            self.register_instance(token, instance)

    def register_conventions(self, candidates: Iterable[object]) -> list[tuple[type, type]]:
        """Bind ``I<Name>`` bases to each candidate class ``<Name>`` deriving from them.

        Candidates without a matching base are skipped. Returns the
        ``(token, impl)`` pairs registered, in candidate order.
        """
        registered = []
        with self._lock:
            for token, impl in matching_conventions(candidates):
                self.register_type(token, impl, lifetime=Lifetime.TRANSIENT)
                registered.append((token, impl))
        return registered

    def reset(self) -> None:
        """Drop every binding."""
        with self._lock:
            self._bindings.clear()
        logger.debug("Container reset")

    @overload
    def resolve(self, token: type[T]) -> T: ...

    @overload
    def resolve(self, token: Hashable) -> Any: ...

    def resolve(self, token: Hashable) -> object:
        """Resolve the token to a value.

        - Instance bindings return the stored value.
        - Factory bindings call the factory.
        - Type bindings construct the class, resolving its constructor
          parameters recursively.
        Singleton factory/type bindings are replaced by an instance binding
        once the value has been built and checked.
        """
        with self._lock:
            binding = self._bindings.get(token)
            if binding is None:
                raise NotRegisteredError(token)

            if isinstance(binding, InstanceBinding):
                value = binding.instance
            elif isinstance(binding, FactoryBinding):
                value = binding.factory()
            else:
                value = self._constructor.construct(binding.impl)

            self._check_type(token, value)

            if not isinstance(binding, InstanceBinding) and binding.lifetime is Lifetime.SINGLETON:
                # a nested resolve may have re-registered the token meanwhile
                if self._bindings.get(token) is binding:
                    self._bindings[token] = InstanceBinding(value)
                    logger.debug("Promoted %r to a cached singleton", token)

            return value

    def _bind(self, token: Hashable, binding: Binding) -> None:
        with self._lock:
            replaced = token in self._bindings
            self._bindings[token] = binding
        logger.debug("%s %r -> %r", "Replaced" if replaced else "Registered", token, binding)

    def _check_type(self, token: Hashable, value: object) -> None:
        if not self._check_types or not inspect.isclass(token):
            return

        if _is_protocol(token):
            if _is_runtime_checkable_protocol(token):
                ok = isinstance(value, token)
            else:
                ok = _conforms_to_protocol(token, value)
        else:
            ok = isinstance(value, token)

        if not ok:
            raise TypeMismatchError(cast("type", token), value)


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: type) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def _is_protocol(tp: type) -> bool:
        return inspect.isclass(tp) and getattr(tp, "_is_protocol", False) and issubclass(tp, cast("type", Protocol))


def _is_runtime_checkable_protocol(tp: type) -> bool:
    try:
        isinstance(None, tp)
    except TypeError:
        return False
    else:
        return True


def _conforms_to_protocol(proto_cls: type, value: object) -> bool:
    """Best-effort structural conformance: member presence and positional arity.

    Data members are looked up on the value, so attributes set in ``__init__``
    count; methods are compared on its class.
    """
    impl = type(value)
    if proto_cls in getattr(impl, "__mro__", ()):
        return True

    try:
        proto_hints = get_type_hints(proto_cls)
    except (NameError, TypeError):
        proto_hints = {}

    for name in proto_hints:
        if not name.startswith("_") and not hasattr(value, name):
            logger.debug("%s lacks attribute %r of %s", impl.__name__, name, proto_cls.__name__)
            return False

    for name, proto_attr in vars(proto_cls).items():
        if name.startswith("_") or not inspect.isfunction(proto_attr):
            continue

        impl_attr = getattr(impl, name, None)
        if not callable(impl_attr):
            logger.debug("%s lacks method %r of %s", impl.__name__, name, proto_cls.__name__)
            return False

        try:
            proto_sig = inspect.signature(proto_attr)
            impl_sig = inspect.signature(impl_attr)
        except (TypeError, ValueError):
            continue

        if any(p.kind is p.VAR_POSITIONAL for p in impl_sig.parameters.values()):
            continue

        if _positional_arity(impl_sig) < _positional_arity(proto_sig):
            logger.debug("%s.%s takes fewer positional parameters than %s", impl.__name__, name, proto_cls.__name__)
            return False

    return True


def _positional_arity(sig: inspect.Signature) -> int:
    return sum(
        1
        for p in sig.parameters.values()
        if p.name != "self" and p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    )

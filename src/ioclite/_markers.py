from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from collections.abc import Callable


CONSTRUCTOR_ATTR = "__ioclite_constructor__"
INJECTION_ATTR = "__ioclite_injection__"


def _target(func: Any) -> Callable[..., Any]:
    # classmethod objects carry the real function in __func__
    return getattr(func, "__func__", func)


def constructor(func: Any) -> Any:
    """Declare a classmethod as an alternate constructor.

    Works with either decorator order around ``@classmethod``::

        class Baz:
            @constructor
            @classmethod
            def with_extra(cls, extra: object) -> Baz: ...
    """
    setattr(_target(func), CONSTRUCTOR_ATTR, True)
    return func


def injection_constructor(func: Any) -> Any:
    """Mark ``__init__`` or an alternate constructor as preferred for auto-wiring."""
    target = _target(func)
    setattr(target, CONSTRUCTOR_ATTR, True)
    setattr(target, INJECTION_ATTR, True)
    return func


def is_constructor(func: Any) -> bool:
    return bool(getattr(_target(func), CONSTRUCTOR_ATTR, False))


def is_injection_constructor(func: Any) -> bool:
    return bool(getattr(_target(func), INJECTION_ATTR, False))

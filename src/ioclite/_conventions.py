"""Convention scanning: ``Foo`` implements the service ``IFoo``."""

from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, TypeGuard


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator
    from types import ModuleType


SERVICE_PREFIX = "I"


def is_eligible_concrete(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when a candidate is a class that can be constructed."""
    if not inspect.isclass(candidate):
        return False
    if candidate.__module__ == "builtins":
        return False
    return not inspect.isabstract(candidate)


def service_for(impl: type) -> type | None:
    """Return the base of ``impl`` named ``I<impl name>``, if any."""
    wanted = SERVICE_PREFIX + impl.__name__
    for base in impl.__mro__[1:]:
        if base.__name__ == wanted:
            return base
    return None


def matching_conventions(candidates: Iterable[object]) -> Iterator[tuple[type, type]]:
    for candidate in candidates:
        if not is_eligible_concrete(candidate):
            logger.debug("Skipping %r: not a concrete class", candidate)
            continue

        service = service_for(candidate)
        if service is None:
            logger.debug("Skipping %s: no %s%s base", candidate.__qualname__, SERVICE_PREFIX, candidate.__name__)
            continue

        logger.debug("Convention match %s -> %s", service.__qualname__, candidate.__qualname__)
        yield service, candidate


def candidates_from_module(module: ModuleType) -> list[type]:
    """List the classes defined in ``module``, in definition order."""
    return [
        obj
        for obj in vars(module).values()
        if inspect.isclass(obj) and obj.__module__ == module.__name__
    ]

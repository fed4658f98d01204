from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, get_type_hints

from ._markers import is_constructor, is_injection_constructor


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

    from ._container import Container


@dataclass(frozen=True)
class ConstructorCandidate:
    """One way of building a class: ``__init__`` or an alternate classmethod."""

    name: str
    call: Callable[..., Any]
    parameters: tuple[inspect.Parameter, ...]
    hints: dict[str, Any]
    preferred: bool

    @property
    def arity(self) -> int:
        return len(self.parameters)


class Constructor:
    def __init__(self, resolver: Container) -> None:
        self._resolver = resolver

    def construct(self, cls: type) -> Any:
        candidate = select_constructor(cls)
        if candidate is None:
            return cls()

        logger.debug("Building %s via %s (%d parameters)", cls.__qualname__, candidate.name, candidate.arity)
        if not candidate.parameters:
            return candidate.call()

        args, kwargs = [], {}
        for p in candidate.parameters:
            value = self._resolve_param(p, _param_token(p, candidate.hints))
            if p.kind is p.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[p.name] = value

        return candidate.call(*args, **kwargs)

    def _resolve_param(self, p: inspect.Parameter, token: Hashable) -> Any:
        if p.default is not p.empty and token not in self._resolver:
            return p.default
        return self._resolver.resolve(token)


def select_constructor(cls: type) -> ConstructorCandidate | None:
    """Pick the constructor used to auto-wire ``cls``.

    Marked injection constructors are kept over unmarked ones; among the
    survivors the one with most parameters wins, first declared on ties.
    ``None`` means the class declares no constructor at all.
    """
    candidates = constructor_candidates(cls)
    if not candidates:
        return None

    preferred = [c for c in candidates if c.preferred]
    if len(preferred) > 1:
        logger.warning(
            "%s marks %d injection constructors; choosing by parameter count",
            cls.__qualname__,
            len(preferred),
        )

    return max(preferred or candidates, key=lambda c: c.arity)


def constructor_candidates(cls: type) -> list[ConstructorCandidate]:
    candidates = []

    init = cls.__init__
    if init is not object.__init__ and inspect.isfunction(init):
        params = tuple(inspect.signature(init).parameters.values())[1:]
        candidates.append(_candidate(cls, "__init__", cls, init, params))

    seen = {"__init__"}
    for klass in cls.__mro__:
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(attr, classmethod) and is_constructor(attr):
                bound = getattr(cls, name)
                params = tuple(inspect.signature(bound).parameters.values())
                candidates.append(_candidate(cls, name, bound, attr.__func__, params))

    return candidates


def _candidate(
    cls: type,
    name: str,
    call: Callable[..., Any],
    func: Callable[..., Any],
    params: tuple[inspect.Parameter, ...],
) -> ConstructorCandidate:
    return ConstructorCandidate(
        name=f"{cls.__name__}.{name}",
        call=call,
        parameters=tuple(p for p in params if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)),
        hints=_get_type_hints(cls, func),
        preferred=is_injection_constructor(func),
    )


def _param_token(p: inspect.Parameter, hints: dict[str, Any]) -> Hashable:
    """Annotated parameters resolve by type, unannotated ones by name."""
    ann = hints.get(p.name, p.annotation)
    if ann is p.empty or isinstance(ann, str):
        return p.name
    return ann


def _get_type_hints(cls: type, func: Callable[..., Any]) -> dict[str, Any]:
    try:
        return get_type_hints(func)
    except TypeError:
        return {}
    except NameError:
        pass

    # evaluate parameter by parameter; the return annotation is never needed
    globalns = getattr(func, "__globals__", {})
    hints = {}
    for name, ann in getattr(func, "__annotations__", {}).items():
        if name == "return":
            continue
        if not isinstance(ann, str):
            hints[name] = ann
            continue
        try:
            hints[name] = eval(ann, globalns)
        except NameError as exc:
            logger.warning("'%s' name error retrieving %s (%s) type hints", exc.name, cls.__name__, cls.__qualname__)

    return hints

"""Structural eligibility and search-mode classification.

Raw classes and functions are first catalogued into candidate descriptors;
classification then only looks at those descriptors. Which mode to try
after an empty result depends on the scope being searched:

    scope   | declarative | convention | everything
    --------+-------------+------------+-----------
    types   | -           | everything | -
    methods | convention  | everything | -
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, NamedTuple

from microbench.metadata import (
    BenchmarkMetadata,
    MethodMetadata,
    get_benchmark_metadata,
    get_hook_kind,
    get_test_metadata,
)
from microbench.options import SearchMode

BENCHMARK_MARKER = "benchmark"
TEST_MARKER = "test"

_NO_RETURN = (inspect.Signature.empty, None, type(None), "None")
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)


class Scope(StrEnum):
    """What a search pass walks over."""

    TYPES = "types"
    METHODS = "methods"


_FALLBACKS: dict[tuple[Scope, SearchMode], SearchMode | None] = {
    (Scope.TYPES, SearchMode.DECLARATIVE): None,
    (Scope.TYPES, SearchMode.CONVENTION): SearchMode.EVERYTHING,
    (Scope.TYPES, SearchMode.EVERYTHING): None,
    (Scope.METHODS, SearchMode.DECLARATIVE): SearchMode.CONVENTION,
    (Scope.METHODS, SearchMode.CONVENTION): SearchMode.EVERYTHING,
    (Scope.METHODS, SearchMode.EVERYTHING): None,
}


class Classification(NamedTuple):
    """Inclusion decision plus the mode to retry with if the scope ends up empty."""

    include: bool
    fallback: SearchMode | None


@dataclass(frozen=True)
class CandidateType:
    """A structurally eligible class and its optional overrides."""

    name: str
    type: type
    metadata: BenchmarkMetadata | None


@dataclass(frozen=True)
class CandidateMethod:
    """A structurally eligible instance method and its optional overrides."""

    name: str
    function: Callable[..., Any]
    metadata: MethodMetadata | None
    hook: str | None


def fallback_mode(scope: Scope, mode: SearchMode) -> SearchMode | None:
    """Return the next, more permissive mode for an empty scope, or None."""
    return _FALLBACKS[(scope, SearchMode(mode))]


def type_ineligibility(cls: Any) -> str | None:
    """Explain why a class cannot be a benchmark, or return None if it can.

    A benchmark class must be concrete, constructible without arguments and
    not an unparameterised generic.
    """
    if not inspect.isclass(cls):
        return f"{cls!r} is not a class"
    if inspect.isabstract(cls) or getattr(cls, "_is_protocol", False):
        return f"{cls.__qualname__} is abstract"
    if getattr(cls, "__parameters__", ()):
        return f"{cls.__qualname__} is generic"
    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return f"{cls.__qualname__} has no inspectable constructor"
    for param in signature.parameters.values():
        if param.kind not in _VARIADIC and param.default is param.empty:
            return f"{cls.__qualname__} requires constructor argument '{param.name}'"
    return None


def is_eligible_type(cls: Any) -> bool:
    """True if the class satisfies the structural benchmark rules."""
    return type_ineligibility(cls) is None


def is_invokable_method(name: str, attr: Any) -> bool:
    """True for public, parameterless, non-returning plain instance functions."""
    if name.startswith("_") or not inspect.isfunction(attr):
        return False
    if getattr(attr, "__isabstractmethod__", False):
        return False
    try:
        signature = inspect.signature(attr)
    except (TypeError, ValueError):
        return False

    # The first parameter binds the instance.
    params = list(signature.parameters.values())
    if not params or params[0].kind not in _POSITIONAL:
        return False
    for param in params[1:]:
        if param.kind not in _VARIADIC and param.default is param.empty:
            return False

    return signature.return_annotation in _NO_RETURN


def invokable_methods(cls: type) -> list[CandidateMethod]:
    """Catalogue the invokable methods of a class, hooks included.

    Names are ordered base-class-first by definition order; the most-derived
    definition of each name is the one catalogued. Members of ``object`` are
    never considered.
    """
    names: dict[str, None] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name in vars(klass):
            names.setdefault(name, None)

    methods = []
    for name in names:
        attr = inspect.getattr_static(cls, name)
        if not is_invokable_method(name, attr):
            continue
        methods.append(
            CandidateMethod(
                name=name,
                function=attr,
                metadata=get_test_metadata(attr),
                hook=get_hook_kind(attr),
            )
        )
    return methods


def catalog_type(cls: type) -> CandidateType:
    """Describe a structurally eligible class."""
    return CandidateType(
        name=cls.__name__,
        type=cls,
        metadata=get_benchmark_metadata(cls),
    )


def classify_type(candidate: CandidateType, mode: SearchMode) -> Classification:
    """Decide whether a catalogued class is a benchmark under the given mode."""
    mode = SearchMode(mode)
    if mode is SearchMode.DECLARATIVE:
        include = candidate.metadata is not None
    elif mode is SearchMode.CONVENTION:
        lowered = candidate.name.lower()
        include = lowered.startswith(BENCHMARK_MARKER) or lowered.endswith(
            BENCHMARK_MARKER
        )
    else:
        include = True
    return Classification(include, fallback_mode(Scope.TYPES, mode))


def classify_method(candidate: CandidateMethod, mode: SearchMode) -> Classification:
    """Decide whether a catalogued method is a test under the given mode.

    Hooks are never tests.
    """
    mode = SearchMode(mode)
    if candidate.hook is not None:
        include = False
    elif mode is SearchMode.DECLARATIVE:
        include = candidate.metadata is not None
    elif mode is SearchMode.CONVENTION:
        include = candidate.name.lower().startswith(TEST_MARKER)
    else:
        include = True
    return Classification(include, fallback_mode(Scope.METHODS, mode))

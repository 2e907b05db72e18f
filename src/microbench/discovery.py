"""Benchmark discovery from explicit types or from modules.

Factories validate their whole input when constructed and only search when
``create()`` is called. A search over one scope (the explicit type list, one
module, the methods of one class) that yields nothing is retried with the
next, more permissive search mode; exhausting every mode yields an empty
result, never an error.
"""

from __future__ import annotations

import importlib
import inspect
import os
import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from types import ModuleType

from microbench.descriptors import BenchmarkDescriptor, TestDescriptor
from microbench.metadata import CLEANUP_HOOK, SETUP_HOOK, resolve_text, resolve_value
from microbench.options import BenchmarkOptions, SearchMode
from microbench.policy import (
    CandidateMethod,
    CandidateType,
    Scope,
    catalog_type,
    classify_method,
    classify_type,
    fallback_mode,
    invokable_methods,
    is_eligible_type,
    type_ineligibility,
)


def exported_types(module: ModuleType) -> list[type]:
    """Return the public classes a module exports.

    Honours ``__all__`` (in its order) when defined, otherwise returns the
    public classes defined in the module itself, in definition order.
    """
    names = getattr(module, "__all__", None)
    if names is not None:
        members = [getattr(module, name, None) for name in names]
        return [member for member in members if inspect.isclass(member)]

    return [
        value
        for name, value in vars(module).items()
        if not name.startswith("_")
        and inspect.isclass(value)
        and value.__module__ == module.__name__
    ]


def is_materialized_module(module: ModuleType) -> bool:
    """True if the module was loaded from a file that exists on disk."""
    path = getattr(module, "__file__", None)
    return bool(path) and os.path.exists(path)


def locate_type(module_name: str, qualname: str) -> type:
    """Import a module and resolve a (possibly nested) class by qualified name.

    Raises:
        ImportError: If the module cannot be imported.
        AttributeError: If the qualified name does not resolve.
        TypeError: If the resolved object is not a class.
    """
    target = importlib.import_module(module_name)
    for part in qualname.split("."):
        target = getattr(target, part)
    if not inspect.isclass(target):
        raise TypeError(f"{module_name}:{qualname} is not a class")
    return target


def is_importable_type(cls: type) -> bool:
    """True if a worker process can re-import the class by module and qualname."""
    if "<locals>" in cls.__qualname__:
        return False
    module = sys.modules.get(cls.__module__)
    if module is None or not is_materialized_module(module):
        return False
    try:
        return locate_type(cls.__module__, cls.__qualname__) is cls
    except (ImportError, AttributeError, TypeError):
        return False


class BenchmarkFactory(ABC):
    """Creates fully populated benchmark descriptors from a candidate universe.

    Every per-test field is resolved from, in order: a non-blank override
    attached with the metadata decorators, then the structural default (class
    or method name) or the value from the options.

    Args:
        options: Options providing search mode, warm-up and repetitions.

    Raises:
        ValueError: If options is None.
        TypeError: If options is not a BenchmarkOptions.
    """

    def __init__(self, options: BenchmarkOptions) -> None:
        if options is None:
            raise ValueError("options must not be None")
        if not isinstance(options, BenchmarkOptions):
            raise TypeError(
                f"Invalid options; expected BenchmarkOptions but got {type(options).__name__}"
            )
        self.options = options

    @abstractmethod
    def _scopes(self) -> list[list[type]]:
        """Return the candidate types grouped by fallback scope."""

    def create(self) -> list[BenchmarkDescriptor]:
        """Discover benchmarks across every scope, in candidate order."""
        benchmarks: list[BenchmarkDescriptor] = []
        for scope in self._scopes():
            benchmarks.extend(self._search_scope(scope))
        return benchmarks

    def _search_scope(self, types: list[type]) -> list[BenchmarkDescriptor]:
        mode: SearchMode | None = self.options.search_mode
        while mode is not None:
            found = self.find_benchmarks(types, mode)
            if found:
                return found
            mode = fallback_mode(Scope.TYPES, mode)
        return []

    def find_benchmarks(
        self, types: Iterable[type], mode: SearchMode
    ) -> list[BenchmarkDescriptor]:
        """Single pass over the given types with one search mode, no fallback.

        Classes whose test search comes back empty are dropped.
        """
        benchmarks = []
        for cls in types:
            candidate = catalog_type(cls)
            if not classify_type(candidate, mode).include:
                continue
            benchmark = self.create_benchmark(candidate)
            if benchmark.tests:
                benchmarks.append(benchmark)
        return benchmarks

    def create_benchmark(self, candidate: CandidateType) -> BenchmarkDescriptor:
        """Build the descriptor for an included class, tests and hooks resolved."""
        metadata = candidate.metadata
        methods = invokable_methods(candidate.type)

        return BenchmarkDescriptor(
            benchmark_type=candidate.type,
            group=resolve_text(metadata.group if metadata else None, ""),
            name=resolve_text(metadata.name if metadata else None, candidate.name),
            description=resolve_text(metadata.description if metadata else None, ""),
            tests=self.find_tests(methods),
            setup_hooks=tuple(m.name for m in methods if m.hook == SETUP_HOOK),
            cleanup_hooks=tuple(m.name for m in methods if m.hook == CLEANUP_HOOK),
        )

    def find_tests(self, methods: Sequence[CandidateMethod]) -> list[TestDescriptor]:
        """Select tests among catalogued methods, relaxing the mode while empty."""
        mode: SearchMode | None = self.options.search_mode
        while mode is not None:
            selected = [m for m in methods if classify_method(m, mode).include]
            if selected:
                return [self.create_test(m) for m in selected]
            mode = fallback_mode(Scope.METHODS, mode)
        return []

    def create_test(self, method: CandidateMethod) -> TestDescriptor:
        """Build the descriptor for one selected method."""
        metadata = method.metadata
        if metadata is None:
            return TestDescriptor(
                name=method.name,
                description="",
                method_name=method.name,
                warm_up=self.options.warm_up,
                repetitions=self.options.repetitions,
            )

        return TestDescriptor(
            name=resolve_text(metadata.name, method.name),
            description=resolve_text(metadata.description, ""),
            method_name=method.name,
            warm_up=resolve_value(metadata.warm_up, self.options.warm_up),
            repetitions=resolve_value(metadata.repetitions, self.options.repetitions),
        )


class TypesBenchmarkFactory(BenchmarkFactory):
    """Discovers benchmarks among an explicit list of classes.

    The whole list is one fallback scope.

    Args:
        options: Discovery options.
        types: Candidate classes, every one structurally eligible.

    Raises:
        ValueError: If types is None, a class is structurally ineligible, or
            isolation is requested and a class cannot be re-imported by name.
        TypeError: If an entry is not a class.
    """

    def __init__(self, options: BenchmarkOptions, types: Iterable[type]) -> None:
        super().__init__(options)
        if types is None:
            raise ValueError("types must not be None")

        self._types = list(types)
        for cls in self._types:
            if not inspect.isclass(cls):
                raise TypeError(f"Invalid benchmark type; expected a class but got {cls!r}")
            reason = type_ineligibility(cls)
            if reason is not None:
                raise ValueError(f"Ineligible benchmark type: {reason}")
            if options.isolate_repetitions and not is_importable_type(cls):
                raise ValueError(
                    f"Cannot isolate {cls.__qualname__}; benchmark types must be "
                    "importable by module and qualified name"
                )

    def _scopes(self) -> list[list[type]]:
        return [self._types]


class ModulesBenchmarkFactory(BenchmarkFactory):
    """Discovers benchmarks among the exported classes of modules.

    Each module is its own fallback scope; structurally ineligible classes are
    silently skipped. This differs from a suite-wide retry: a module with no
    match under the requested mode falls back on its own, even when other
    modules matched.

    Args:
        options: Discovery options.
        modules: Modules whose exported classes are candidates.

    Raises:
        ValueError: If modules is None, or isolation is requested and a module
            was not loaded from a file on disk.
        TypeError: If an entry is not a module.
    """

    def __init__(self, options: BenchmarkOptions, modules: Iterable[ModuleType]) -> None:
        super().__init__(options)
        if modules is None:
            raise ValueError("modules must not be None")

        self._modules = list(modules)
        for module in self._modules:
            if not isinstance(module, ModuleType):
                raise TypeError(f"Invalid module; expected a module but got {module!r}")
            if options.isolate_repetitions and not is_materialized_module(module):
                raise ValueError(
                    f"Cannot isolate module {module.__name__}; dynamic modules or "
                    "modules without a file on disk are not supported"
                )

    def _scopes(self) -> list[list[type]]:
        return [
            [cls for cls in exported_types(module) if is_eligible_type(cls)]
            for module in self._modules
        ]


def create_factory(
    options: BenchmarkOptions,
    *,
    types: Iterable[type] | None = None,
    modules: Iterable[ModuleType] | None = None,
) -> BenchmarkFactory:
    """Build the factory matching the candidate source.

    Raises:
        ValueError: If both or neither of types and modules are given.
    """
    if (types is None) == (modules is None):
        raise ValueError("Exactly one of types or modules must be provided")
    if types is not None:
        return TypesBenchmarkFactory(options, types)
    return ModulesBenchmarkFactory(options, modules)


def discover(
    options: BenchmarkOptions,
    *,
    types: Iterable[type] | None = None,
    modules: Iterable[ModuleType] | None = None,
) -> list[BenchmarkDescriptor]:
    """Discover benchmarks from explicit types or from modules."""
    return create_factory(options, types=types, modules=modules).create()

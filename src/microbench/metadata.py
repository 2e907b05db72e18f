"""Out-of-band descriptor overrides attached to benchmark classes and methods.

Decorators never affect structural eligibility. They attach an immutable
metadata struct that discovery reads: under SearchMode.DECLARATIVE its
presence selects the candidate, under every mode its non-blank values
override the structural defaults (class or method name, global options).
"""

from collections.abc import Callable
from typing import Any, TypeVar

from msgspec import Struct

T = TypeVar("T")

BENCHMARK_ATTR = "__microbench_benchmark__"
TEST_ATTR = "__microbench_test__"
HOOK_ATTR = "__microbench_hook__"

SETUP_HOOK = "setup"
CLEANUP_HOOK = "cleanup"


class BenchmarkMetadata(Struct, frozen=True):
    """Overrides for a benchmark class."""

    name: str | None = None
    description: str | None = None
    group: str | None = None


class MethodMetadata(Struct, frozen=True):
    """Overrides for a single test method."""

    name: str | None = None
    description: str | None = None
    warm_up: bool | None = None
    repetitions: int | None = None

    def __post_init__(self) -> None:
        """Validate the repetition override when present."""
        if self.repetitions is not None and self.repetitions <= 0:
            raise ValueError(
                f"Invalid repetitions override; expected >0 but got {self.repetitions}"
            )


def benchmark(
    cls: type[T] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    group: str | None = None,
) -> type[T] | Callable[[type[T]], type[T]]:
    """Mark a class as a benchmark, optionally overriding its display fields.

    Usable bare (``@benchmark``) or with keywords (``@benchmark(name=...)``).
    """
    metadata = BenchmarkMetadata(name=name, description=description, group=group)

    def decorator(klass: type[T]) -> type[T]:
        if not isinstance(klass, type):
            raise TypeError(f"@benchmark expects a class but got {klass!r}")
        setattr(klass, BENCHMARK_ATTR, metadata)
        return klass

    if cls is not None:
        return decorator(cls)
    return decorator


def benchmarked(
    func: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    warm_up: bool | None = None,
    repetitions: int | None = None,
) -> Callable[..., Any]:
    """Mark a method as a test, optionally overriding name, warm-up and repetitions."""
    metadata = MethodMetadata(
        name=name,
        description=description,
        warm_up=warm_up,
        repetitions=repetitions,
    )

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        setattr(fn, TEST_ATTR, metadata)
        return fn

    if func is not None:
        return decorator(func)
    return decorator


def setup(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark a method to run on the fresh instance before each measured call."""
    setattr(func, HOOK_ATTR, SETUP_HOOK)
    return func


def cleanup(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark a method to run on the instance after each measured call."""
    setattr(func, HOOK_ATTR, CLEANUP_HOOK)
    return func


def get_benchmark_metadata(cls: type) -> BenchmarkMetadata | None:
    """Return the class metadata, inherited through the MRO, or None."""
    metadata = getattr(cls, BENCHMARK_ATTR, None)
    return metadata if isinstance(metadata, BenchmarkMetadata) else None


def get_test_metadata(func: Any) -> MethodMetadata | None:
    """Return the metadata attached to a method, or None."""
    metadata = getattr(func, TEST_ATTR, None)
    return metadata if isinstance(metadata, MethodMetadata) else None


def get_hook_kind(func: Any) -> str | None:
    """Return SETUP_HOOK, CLEANUP_HOOK or None."""
    return getattr(func, HOOK_ATTR, None)


def resolve_text(override: str | None, default: str) -> str:
    """Blank or missing overrides fall back to the default."""
    if override is None or not override.strip():
        return default
    return override


def resolve_value(override: T | None, default: T) -> T:
    """Missing overrides fall back to the default."""
    return default if override is None else override

"""Search modes and engine options."""

import multiprocessing
from enum import StrEnum
from typing import Self

from msgspec import Struct, structs


class SearchMode(StrEnum):
    """How benchmarks (classes) and tests (methods) are discovered."""

    DECLARATIVE = "declarative"
    CONVENTION = "convention"
    EVERYTHING = "everything"


class BenchmarkOptions(Struct, frozen=True):
    """Immutable options consumed by discovery and execution.

    Args:
        search_mode: Discovery strictness. Defaults to SearchMode.DECLARATIVE.
        isolate_repetitions: Run every repetition in a fresh worker process.
            Defaults to True.
        warm_up: Invoke each test once, unmeasured, before the measured call.
            Defaults to True.
        repetitions: Measured repetitions per test. Must be > 0. Defaults to 100.
        start_method: multiprocessing start method for isolated repetitions,
            None for the platform default.

    Raises:
        ValueError: If repetitions <= 0 or start_method is unknown.
    """

    search_mode: SearchMode = SearchMode.DECLARATIVE
    isolate_repetitions: bool = True
    warm_up: bool = True
    repetitions: int = 100
    start_method: str | None = None

    def __post_init__(self) -> None:
        """Validate repetition count and start method."""
        if isinstance(self.repetitions, bool) or not isinstance(self.repetitions, int):
            raise ValueError(
                f"Invalid repetitions; expected int but got {type(self.repetitions).__name__}"
            )
        if self.repetitions <= 0:
            raise ValueError(
                f"Invalid repetitions; expected >0 but got {self.repetitions}"
            )
        # Plain string values compare equal to their SearchMode members.
        SearchMode(self.search_mode)
        if (
            self.start_method is not None
            and self.start_method not in multiprocessing.get_all_start_methods()
        ):
            raise ValueError(f"Unknown multiprocessing start method: {self.start_method}")

    @classmethod
    def default(cls) -> Self:
        """Return declarative search, isolated, warmed up, 100 repetitions."""
        return cls()

    def replace(self, **changes) -> Self:
        """Return a validated copy with the given fields changed."""
        return type(self)(**{**structs.asdict(self), **changes})

"""Descriptors for discovered benchmarks and their tests.

Discovery creates them; the engine appends samples and records execution
times; renderers only read them.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class TestDescriptor:
    """One measured operation within a benchmark.

    Args:
        name: Display name.
        description: Optional description, empty when not given.
        method_name: Attribute name of the test method on the benchmark class.
        warm_up: Resolved warm-up flag.
        repetitions: Resolved number of measured repetitions.
        samples_ns: Measured durations in nanoseconds, in execution order.
    """

    __test__ = False

    name: str
    description: str
    method_name: str
    warm_up: bool
    repetitions: int
    samples_ns: list[int] = field(default_factory=list)

    def add_sample(self, elapsed_ns: int) -> None:
        """Append one measured duration.

        Args:
            elapsed_ns: Elapsed time of one measured invocation.

        Raises:
            ValueError: If the duration is negative.
        """
        if elapsed_ns < 0:
            raise ValueError(f"Invalid sample; expected >=0 but got {elapsed_ns}")
        self.samples_ns.append(elapsed_ns)

    @property
    def sample_count(self) -> int:
        """Number of collected samples."""
        return len(self.samples_ns)

    @property
    def total_ns(self) -> int:
        """Sum of all samples, 0 when empty."""
        return sum(self.samples_ns)

    @property
    def mean_ns(self) -> int:
        """Integer mean of all samples, 0 when empty."""
        if not self.samples_ns:
            return 0
        return self.total_ns // len(self.samples_ns)


@dataclass
class BenchmarkDescriptor:
    """One benchmark class and the tests discovered on it.

    Args:
        benchmark_type: The class instantiated fresh for every repetition.
        group: Logical group, empty when not given.
        name: Display name.
        description: Optional description, empty when not given.
        tests: Tests in discovery order.
        setup_hooks: Names of methods run before each measured call.
        cleanup_hooks: Names of methods run after each measured call.
        execution_time_ns: Wall time of the whole benchmark, set after it ran.
    """

    benchmark_type: type
    group: str
    name: str
    description: str
    tests: list[TestDescriptor] = field(default_factory=list)
    setup_hooks: tuple[str, ...] = ()
    cleanup_hooks: tuple[str, ...] = ()
    execution_time_ns: int = 0

    @property
    def execution_time_s(self) -> float:
        """Execution time in seconds."""
        return self.execution_time_ns / 1e9

    def get_test(self, name: str) -> TestDescriptor | None:
        """Return the test with the given display name, if any."""
        for test in self.tests:
            if test.name == name:
                return test
        return None

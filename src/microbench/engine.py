"""Suite orchestration.

Benchmarks, their tests and every repetition run strictly one after the
other on the calling thread; nothing here overlaps.
"""

from __future__ import annotations

import inspect
import os
import sys
import tempfile
import threading
from collections.abc import Callable, Iterable
from types import ModuleType

from msgspec import Struct

from microbench.descriptors import BenchmarkDescriptor
from microbench.discovery import create_factory
from microbench.isolation import IsolatedRunner
from microbench.logging import Logger, LoggerConfig
from microbench.options import BenchmarkOptions, SearchMode
from microbench.performer import accumulate_results
from microbench.reporting import TextReporter
from microbench.stats import BasicStatistics, Statistics
from microbench.time import perf_ns

DEFAULT_REPORT_NAME = "microbench-report.txt"


class ProgressEvent(Struct, frozen=True):
    """Progress notification: truncated percentage and the current item's name."""

    percentage: int
    label: str


ProgressCallback = Callable[[ProgressEvent], None]


def _percentage(done: int, total: int) -> int:
    return int(done / total * 100) if total else 100


def _default_logger() -> Logger:
    return Logger(
        name="microbench",
        config=LoggerConfig.quiet(),
    )


class BenchmarkEngine:
    """Discovers benchmarks and collects their samples.

    Exactly one of ``types`` or ``modules`` must be given. Everything about
    the input is validated here, before any discovery or execution.

    Progress is reported on two channels. ``suite_progress`` receives one
    event before each benchmark (percentage across benchmarks) and a final
    100 event; ``benchmark_progress`` receives one event before each test
    (percentage across the tests of the current benchmark) and a final 100
    event per benchmark, so it sweeps 0 to 100 once per benchmark.

    Args:
        options: Engine options.
        types: Explicit benchmark classes.
        modules: Modules whose exported classes are searched.
        suite_progress: Suite-level progress callback.
        benchmark_progress: Benchmark-level progress callback.
        logger: Logger for discovery and timing information.

    Raises:
        ValueError: If options is None, if both or neither of types and
            modules are given, or if a candidate is ineligible.
    """

    def __init__(
        self,
        options: BenchmarkOptions,
        *,
        types: Iterable[type] | None = None,
        modules: Iterable[ModuleType] | None = None,
        suite_progress: ProgressCallback | None = None,
        benchmark_progress: ProgressCallback | None = None,
        logger: Logger | None = None,
    ) -> None:
        if options is None:
            raise ValueError("options must not be None")

        self.options = options
        self._factory = create_factory(options, types=types, modules=modules)
        self.suite_progress = suite_progress
        self.benchmark_progress = benchmark_progress
        self._logger = logger if logger is not None else _default_logger()
        self._cancel_event = threading.Event()

    @property
    def logger(self) -> Logger:
        return self._logger

    def cancel(self) -> None:
        """Ask a running ``execute()`` to stop before its next repetition.

        A repetition that already started is measured to completion.
        """
        self._cancel_event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def discover(self) -> list[BenchmarkDescriptor]:
        """Run discovery only."""
        benchmarks = self._factory.create()
        self._logger.info(
            f"Discovered {len(benchmarks)} benchmark(s) with "
            f"{sum(len(b.tests) for b in benchmarks)} test(s) "
            f"using {self.options.search_mode} search"
        )
        return benchmarks

    def execute(
        self, benchmarks: list[BenchmarkDescriptor] | None = None
    ) -> list[BenchmarkDescriptor]:
        """Run every repetition of every test, discovering first if needed.

        Args:
            benchmarks: Previously discovered benchmarks, or None to discover now.

        Returns:
            The same benchmarks, carrying samples and execution times.

        Raises:
            BenchmarkCancelledError: If ``cancel()`` was called.
            Exception: Anything raised by a benchmark's constructor, hooks or
                tests, which aborts the whole run.
        """
        if benchmarks is None:
            benchmarks = self.discover()

        runner = None
        if self.options.isolate_repetitions:
            runner = IsolatedRunner(self.options.start_method)
            self._logger.debug(f"Isolating repetitions with '{runner.start_method}' workers")

        total = len(benchmarks)
        for index, benchmark in enumerate(benchmarks):
            self._notify(self.suite_progress, _percentage(index, total), benchmark.name)
            self.perform(benchmark, runner)

        if benchmarks:
            self._notify(self.suite_progress, 100, benchmarks[-1].name)
        return benchmarks

    def perform(
        self, benchmark: BenchmarkDescriptor, runner: IsolatedRunner | None = None
    ) -> None:
        """Run all tests of one benchmark and record its execution time."""
        start = perf_ns()

        total = len(benchmark.tests)
        for index, test in enumerate(benchmark.tests):
            self._notify(self.benchmark_progress, _percentage(index, total), test.name)
            accumulate_results(
                benchmark,
                test,
                self.options,
                isolated_runner=runner,
                is_cancelled=self._cancel_event.is_set,
                logger=self._logger,
            )
            self._logger.debug(
                f"{benchmark.name}.{test.name}: {test.sample_count} sample(s), "
                f"mean {test.mean_ns} ns"
            )

        benchmark.execution_time_ns = perf_ns() - start
        self._notify(self.benchmark_progress, 100, benchmark.name)
        self._logger.info(
            f"Benchmark {benchmark.name} completed in {benchmark.execution_time_s:.3f}s"
        )

    @staticmethod
    def _notify(callback: ProgressCallback | None, percentage: int, label: str) -> None:
        if callback is not None:
            callback(ProgressEvent(percentage=percentage, label=label))


def execute_single(benchmark_type: type, options: BenchmarkOptions | None = None) -> int:
    """Measure a class expected to hold exactly one test.

    Args:
        benchmark_type: The benchmark class.
        options: Engine options; defaults to convention search.

    Returns:
        Mean sample duration in nanoseconds, 0 when there are no samples.

    Raises:
        RuntimeError: If discovery does not yield exactly one benchmark with
            exactly one test.
    """
    if options is None:
        options = BenchmarkOptions(search_mode=SearchMode.CONVENTION)

    engine = BenchmarkEngine(options, types=[benchmark_type])
    benchmarks = engine.discover()
    if len(benchmarks) != 1 or len(benchmarks[0].tests) != 1:
        found = [(b.name, len(b.tests)) for b in benchmarks]
        raise RuntimeError(
            f"Expected exactly one benchmark with exactly one test in "
            f"{benchmark_type.__qualname__}, found {found}"
        )

    engine.execute(benchmarks)
    return benchmarks[0].tests[0].mean_ns


def execute_and_render(
    output_path: str | None = None,
    options: BenchmarkOptions | None = None,
    modules: Iterable[ModuleType] | None = None,
    statistics: Statistics | None = None,
) -> str:
    """Run the caller's module (or the given modules) and write a text report.

    Args:
        output_path: Report path; defaults to DEFAULT_REPORT_NAME in the
            temporary directory.
        options: Engine options; defaults to convention search.
        modules: Modules to search; defaults to the calling module.
        statistics: Summary to render; defaults to BasicStatistics with
            tails cut.

    Returns:
        The path of the written report.
    """
    if modules is None:
        caller = sys.modules.get(inspect.currentframe().f_back.f_globals.get("__name__"))
        if caller is None:
            raise ValueError("Cannot determine the calling module; pass modules explicitly")
        modules = [caller]

    if not output_path or not output_path.strip():
        output_path = os.path.join(tempfile.gettempdir(), DEFAULT_REPORT_NAME)
    if options is None:
        options = BenchmarkOptions(search_mode=SearchMode.CONVENTION)
    if statistics is None:
        statistics = BasicStatistics(cut_tails=True)

    benchmarks = BenchmarkEngine(options, modules=modules).execute()
    return TextReporter(statistics).render_to(output_path, benchmarks)

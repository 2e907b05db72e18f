"""Report rendering for completed benchmark runs.

Renderers only read descriptors; every summary value comes from the
``Statistics`` object they are constructed with.
"""

from __future__ import annotations

from collections.abc import Sequence

import msgspec

from microbench.descriptors import BenchmarkDescriptor, TestDescriptor
from microbench.stats import Statistics
from microbench.time import time_iso8601

_RULE_WIDTH = 100


def _require_statistics(statistics: Statistics | None) -> Statistics:
    if statistics is None:
        raise ValueError("A statistics calculator is required to render a report")
    return statistics


def best_test(
    benchmark: BenchmarkDescriptor,
    statistics: Statistics,
    results: dict[str, dict[str, float]] | None = None,
) -> TestDescriptor | None:
    """Test with the lowest ``statistics.key_header`` value.

    Ties go to the test discovered first.

    Args:
        benchmark: A completed benchmark.
        statistics: Summary used for ranking.
        results: Precomputed summaries keyed by method name, which stays
            unique when display names collide.

    Returns:
        The best test, or None when the benchmark has no tests.
    """
    statistics = _require_statistics(statistics)
    key = statistics.key_header

    best, best_value = None, None
    for test in benchmark.tests:
        summary = results[test.method_name] if results is not None else statistics.calculate(test)
        if best_value is None or summary[key] < best_value:
            best, best_value = test, summary[key]
    return best


class TextReporter:
    """Plain-text tables, one per benchmark.

    Values are in milliseconds. The best test of each benchmark is flagged
    with ``*``.

    Args:
        statistics: Summary rendered for every test.
        title: First line of the report.
    """

    def __init__(self, statistics: Statistics, title: str = "Benchmark Report") -> None:
        self.statistics = statistics
        self.title = title

    def render(self, benchmarks: Sequence[BenchmarkDescriptor]) -> str:
        statistics = _require_statistics(self.statistics)
        headers = statistics.headers()

        lines = ["=" * _RULE_WIDTH, self.title, f"Generated: {time_iso8601()}", "=" * _RULE_WIDTH]

        for benchmark in benchmarks:
            lines.append("")
            heading = f"{benchmark.group} / {benchmark.name}" if benchmark.group else benchmark.name
            lines.append(heading)
            if benchmark.description:
                lines.append(benchmark.description)
            lines.append(f"Execution time: {benchmark.execution_time_s:.3f}s")
            lines.append("-" * _RULE_WIDTH)
            lines.append(
                f"{'Test':<30} {'Samples':>8}"
                + "".join(f" {header:>14}" for header in headers)
            )

            results = {test.method_name: statistics.calculate(test) for test in benchmark.tests}
            best = best_test(benchmark, statistics, results)
            for test in benchmark.tests:
                summary = results[test.method_name]
                marker = " *" if test is best else ""
                lines.append(
                    f"{test.name:<30} {test.sample_count:>8}"
                    + "".join(f" {summary[header]:>14.4f}" for header in headers)
                    + marker
                )
                if test.description:
                    lines.append(f"    {test.description}")

        lines.append("=" * _RULE_WIDTH)
        return "\n".join(lines) + "\n"

    def render_to(self, path: str, benchmarks: Sequence[BenchmarkDescriptor]) -> str:
        """Write the report to ``path`` and return the path."""
        content = self.render(benchmarks)
        with open(path, "w", encoding="utf-8") as file:
            file.write(content)
        return path

    def print_report(self, benchmarks: Sequence[BenchmarkDescriptor]) -> None:
        print(self.render(benchmarks), end="")


class TestReport(msgspec.Struct):
    __test__ = False

    name: str
    description: str
    warm_up: bool
    repetitions: int
    is_best: bool
    results: dict[str, float]
    samples_ns: list[int]


class BenchmarkReport(msgspec.Struct):
    group: str
    name: str
    description: str
    execution_time_ns: int
    tests: list[TestReport]


class SuiteReport(msgspec.Struct):
    generated: str
    headers: list[str]
    key_header: str
    benchmarks: list[BenchmarkReport]


class JsonReporter:
    """JSON document holding every summary plus the raw samples.

    Args:
        statistics: Summary rendered for every test.
    """

    def __init__(self, statistics: Statistics) -> None:
        self.statistics = statistics
        self._encoder = msgspec.json.Encoder()

    def build(self, benchmarks: Sequence[BenchmarkDescriptor]) -> SuiteReport:
        statistics = _require_statistics(self.statistics)

        reports = []
        for benchmark in benchmarks:
            results = {test.method_name: statistics.calculate(test) for test in benchmark.tests}
            best = best_test(benchmark, statistics, results)
            reports.append(
                BenchmarkReport(
                    group=benchmark.group,
                    name=benchmark.name,
                    description=benchmark.description,
                    execution_time_ns=benchmark.execution_time_ns,
                    tests=[
                        TestReport(
                            name=test.name,
                            description=test.description,
                            warm_up=test.warm_up,
                            repetitions=test.repetitions,
                            is_best=test is best,
                            results=results[test.method_name],
                            samples_ns=list(test.samples_ns),
                        )
                        for test in benchmark.tests
                    ],
                )
            )

        return SuiteReport(
            generated=time_iso8601(),
            headers=statistics.headers(),
            key_header=statistics.key_header,
            benchmarks=reports,
        )

    def render(self, benchmarks: Sequence[BenchmarkDescriptor]) -> bytes:
        return self._encoder.encode(self.build(benchmarks))

    def render_to(self, path: str, benchmarks: Sequence[BenchmarkDescriptor]) -> str:
        """Write the report to ``path`` and return the path."""
        content = self.render(benchmarks)
        with open(path, "wb") as file:
            file.write(content)
        return path

    @staticmethod
    def decode(content: bytes | str) -> SuiteReport:
        """Parse a document produced by ``render``."""
        return msgspec.json.decode(content, type=SuiteReport)

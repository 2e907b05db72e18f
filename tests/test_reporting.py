"""Tests for text and JSON report rendering."""

import pytest

from microbench import BasicStatistics, JsonReporter, TextReporter
from microbench.descriptors import BenchmarkDescriptor, TestDescriptor
from microbench.reporting import SuiteReport, best_test
from microbench.stats import AVERAGE


def _test(
    name: str, samples_ns: list[int], description: str = "", method_name: str | None = None
) -> TestDescriptor:
    return TestDescriptor(
        name=name,
        description=description,
        method_name=method_name or name,
        warm_up=False,
        repetitions=len(samples_ns),
        samples_ns=list(samples_ns),
    )


@pytest.fixture
def benchmarks() -> list[BenchmarkDescriptor]:
    slow = _test("slow", [3_000_000, 3_000_000, 3_000_000])
    fast = _test("fast", [1_000_000, 1_000_000, 1_000_000], description="the quick one")
    return [
        BenchmarkDescriptor(
            benchmark_type=object,
            group="lists",
            name="Appends",
            description="append vs extend",
            tests=[slow, fast],
            execution_time_ns=2_500_000_000,
        ),
        BenchmarkDescriptor(
            benchmark_type=object,
            group="",
            name="Lonely",
            description="",
            tests=[_test("only", [])],
        ),
    ]


class TestBestTest:
    def test_lowest_key_value_wins(self, benchmarks) -> None:
        assert best_test(benchmarks[0], BasicStatistics()).name == "fast"

    def test_ties_go_to_first(self) -> None:
        bench = BenchmarkDescriptor(
            benchmark_type=object,
            group="",
            name="Tie",
            description="",
            tests=[_test("a", [5]), _test("b", [5])],
        )
        assert best_test(bench, BasicStatistics()).name == "a"

    def test_empty_benchmark(self) -> None:
        bench = BenchmarkDescriptor(benchmark_type=object, group="", name="E", description="")
        assert best_test(bench, BasicStatistics()) is None

    def test_statistics_required(self, benchmarks) -> None:
        with pytest.raises(ValueError):
            best_test(benchmarks[0], None)


class TestTextReporter:
    """Plain-text tables."""

    def test_render_contents(self, benchmarks) -> None:
        content = TextReporter(BasicStatistics()).render(benchmarks)

        assert "lists / Appends" in content
        assert "append vs extend" in content
        assert "Execution time: 2.500s" in content
        assert "the quick one" in content
        for header in BasicStatistics().headers():
            assert header in content

        fast_line = next(line for line in content.splitlines() if line.startswith("fast"))
        slow_line = next(line for line in content.splitlines() if line.startswith("slow"))
        assert fast_line.endswith(" *")
        assert not slow_line.endswith(" *")
        assert "1.0000" in fast_line

    def test_render_to_file(self, benchmarks, tmp_path) -> None:
        path = str(tmp_path / "report.txt")
        reporter = TextReporter(BasicStatistics(cut_tails=True), title="Lists")
        assert reporter.render_to(path, benchmarks) == path
        with open(path, encoding="utf-8") as file:
            assert file.read().splitlines()[1] == "Lists"

    def test_print_report(self, benchmarks, capsys) -> None:
        TextReporter(BasicStatistics()).print_report(benchmarks)
        assert "Lonely" in capsys.readouterr().out

    def test_statistics_required(self, benchmarks) -> None:
        with pytest.raises(ValueError):
            TextReporter(None).render(benchmarks)


class TestJsonReporter:
    """msgspec-encoded reports."""

    def test_round_trip(self, benchmarks) -> None:
        reporter = JsonReporter(BasicStatistics())
        report = JsonReporter.decode(reporter.render(benchmarks))

        assert isinstance(report, SuiteReport)
        assert report.key_header == AVERAGE
        assert report.headers == BasicStatistics().headers()

        appends = report.benchmarks[0]
        assert appends.group == "lists"
        assert appends.execution_time_ns == 2_500_000_000
        assert [t.name for t in appends.tests] == ["slow", "fast"]
        assert [t.is_best for t in appends.tests] == [False, True]
        assert appends.tests[1].samples_ns == [1_000_000] * 3
        assert appends.tests[1].results[AVERAGE] == pytest.approx(1.0)

        lonely = report.benchmarks[1]
        assert lonely.tests[0].results == dict.fromkeys(BasicStatistics().headers(), 0.0)

    def test_render_to_file(self, benchmarks, tmp_path) -> None:
        path = str(tmp_path / "report.json")
        JsonReporter(BasicStatistics()).render_to(path, benchmarks)
        with open(path, "rb") as file:
            report = JsonReporter.decode(file.read())
        assert len(report.benchmarks) == 2

    def test_statistics_required(self, benchmarks) -> None:
        with pytest.raises(ValueError):
            JsonReporter(None).render(benchmarks)


class TestSharedDisplayNames:
    """Two methods renamed to the same display name keep their own summaries."""

    @pytest.fixture
    def renamed(self) -> BenchmarkDescriptor:
        return BenchmarkDescriptor(
            benchmark_type=object,
            group="",
            name="Renamed",
            description="",
            tests=[
                _test("same", [1_000_000], method_name="first"),
                _test("same", [9_000_000], method_name="second"),
            ],
        )

    def test_json_rows(self, renamed) -> None:
        report = JsonReporter(BasicStatistics()).build([renamed])
        tests = report.benchmarks[0].tests
        assert [t.results[AVERAGE] for t in tests] == pytest.approx([1.0, 9.0])
        assert [t.is_best for t in tests] == [True, False]

    def test_text_rows(self, renamed) -> None:
        text = TextReporter(BasicStatistics()).render([renamed])
        rows = [line for line in text.splitlines() if line.startswith("same ")]
        assert len(rows) == 2
        assert "1.0000" in rows[0] and rows[0].endswith(" *")
        assert "9.0000" in rows[1] and not rows[1].endswith(" *")

    def test_best_test_with_precomputed_results(self, renamed) -> None:
        statistics = BasicStatistics()
        results = {t.method_name: statistics.calculate(t) for t in renamed.tests}
        assert best_test(renamed, statistics, results) is renamed.tests[0]

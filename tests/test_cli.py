"""Tests for the command-line runner."""

import json

import bench_render
import pytest

from microbench import SearchMode
from microbench.cli import BenchmarkCLI, build_options, main


def _args(*argv: str):
    return BenchmarkCLI("test").add_output_args().parse(list(argv))


class TestBenchmarkCLI:
    """Argument parsing."""

    def test_defaults(self) -> None:
        args = _args("pkg.module")
        assert args.modules == ["pkg.module"]
        assert args.repetitions == 100
        assert args.search == "convention"
        assert args.format == "text"
        assert args.output is None

        options = build_options(args)
        assert options.search_mode == SearchMode.CONVENTION
        assert options.isolate_repetitions is True
        assert options.warm_up is True

    def test_flags_map_to_options(self) -> None:
        options = build_options(
            _args("m", "-n", "7", "--search", "everything", "--no-warmup", "--no-isolation")
        )
        assert options.repetitions == 7
        assert options.search_mode == SearchMode.EVERYTHING
        assert options.warm_up is False
        assert options.isolate_repetitions is False

    def test_invalid_search_mode_exits(self) -> None:
        with pytest.raises(SystemExit):
            _args("m", "--search", "random")

    def test_invalid_repetitions_exit_with_usage_error(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            main(["bench_render", "-n", "0"])
        assert excinfo.value.code == 2


class TestMain:
    """End-to-end runs over a small benchmark module."""

    def test_text_report_to_stdout(self, capsys) -> None:
        code = main([bench_render.__name__, "-n", "3", "--no-warmup", "--no-isolation"])
        assert code == 0
        out = capsys.readouterr().out
        assert "RenderBenchmark" in out
        assert "test_noop" in out

    def test_json_report_to_file(self, tmp_path) -> None:
        path = tmp_path / "report.json"
        code = main(
            [
                bench_render.__name__,
                "-n",
                "2",
                "--no-isolation",
                "--cut-tails",
                "--format",
                "json",
                "-o",
                str(path),
            ]
        )
        assert code == 0
        report = json.loads(path.read_text())
        (bench,) = report["benchmarks"]
        assert bench["name"] == "RenderBenchmark"
        assert [len(t["samples_ns"]) for t in bench["tests"]] == [2, 2]

    def test_verbose_logs_to_stderr(self, capsys) -> None:
        main([bench_render.__name__, "-n", "1", "--no-isolation", "-v"])
        captured = capsys.readouterr()
        assert "Discovered 1 benchmark(s)" in captured.err
        assert "Discovered" not in captured.out

"""Command-line runner.

Imports the named modules, benchmarks their exported classes and prints
(or writes) a report.
"""

from __future__ import annotations

import argparse
import importlib
import os
import sys

from microbench.engine import BenchmarkEngine, ProgressEvent
from microbench.logging import Logger, LoggerConfig, LogLevel, StreamLogHandler
from microbench.options import BenchmarkOptions, SearchMode
from microbench.reporting import JsonReporter, TextReporter
from microbench.stats import BasicStatistics


class BenchmarkCLI:
    """Builder for the microbench command line.

    Args:
        description: Description shown by --help.
    """

    def __init__(self, description: str) -> None:
        self.parser = argparse.ArgumentParser(prog="microbench", description=description)
        self._add_common_args()

    def _add_common_args(self) -> None:
        """Add the arguments that map onto BenchmarkOptions."""
        self.parser.add_argument(
            "modules",
            nargs="+",
            metavar="MODULE",
            help="Importable module names to search for benchmarks",
        )
        self.parser.add_argument(
            "--repetitions",
            "-n",
            type=int,
            default=100,
            help="Measured repetitions per test (default: 100)",
        )
        self.parser.add_argument(
            "--search",
            choices=[mode.value for mode in SearchMode],
            default=SearchMode.CONVENTION.value,
            help="Discovery search mode (default: convention)",
        )
        self.parser.add_argument(
            "--no-warmup",
            action="store_true",
            help="Skip the unmeasured invocation before each repetition",
        )
        self.parser.add_argument(
            "--no-isolation",
            action="store_true",
            help="Run repetitions in this process instead of one process each",
        )
        self.parser.add_argument(
            "--start-method",
            default=None,
            help="Multiprocessing start method for isolated repetitions",
        )
        self.parser.add_argument(
            "--verbose",
            "-v",
            action="store_true",
            help="Log discovery, progress and timings",
        )

    def add_output_args(self) -> BenchmarkCLI:
        """Add report format and destination arguments.

        Returns:
            Self for method chaining.
        """
        self.parser.add_argument(
            "--cut-tails",
            action="store_true",
            help="Drop the smallest and largest sample of each test",
        )
        self.parser.add_argument(
            "--format",
            choices=["text", "json"],
            default="text",
            help="Report format (default: text)",
        )
        self.parser.add_argument(
            "--output",
            "-o",
            default=None,
            help="Write the report to this path instead of stdout",
        )
        return self

    def parse(self, argv: list[str] | None = None) -> argparse.Namespace:
        """Parse command-line arguments."""
        return self.parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> BenchmarkOptions:
    """Translate parsed arguments into validated options.

    Raises:
        ValueError: If a value is out of range.
    """
    return BenchmarkOptions(
        search_mode=SearchMode(args.search),
        isolate_repetitions=not args.no_isolation,
        warm_up=not args.no_warmup,
        repetitions=args.repetitions,
        start_method=args.start_method,
    )


def main(argv: list[str] | None = None) -> int:
    cli = BenchmarkCLI("Discover and run micro-benchmarks").add_output_args()
    args = cli.parse(argv)

    try:
        options = build_options(args)
    except ValueError as exc:
        cli.parser.error(str(exc))

    # Console scripts do not put the working directory on sys.path.
    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())
    modules = [importlib.import_module(name) for name in args.modules]

    # Log lines go to stderr so stdout stays a clean report.
    logger = Logger(
        name="microbench",
        config=LoggerConfig(
            base_level=LogLevel.DEBUG if args.verbose else LogLevel.WARNING,
            do_stdout=False,
            buffer_size=1,
        ),
        handlers=[StreamLogHandler(sys.stderr)],
    )

    def on_suite(event: ProgressEvent) -> None:
        logger.info(f"[{event.percentage:>3}%] {event.label}")

    def on_benchmark(event: ProgressEvent) -> None:
        logger.debug(f"  [{event.percentage:>3}%] {event.label}")

    try:
        engine = BenchmarkEngine(
            options,
            modules=modules,
            suite_progress=on_suite,
            benchmark_progress=on_benchmark,
            logger=logger,
        )
        benchmarks = engine.execute()
    finally:
        logger.shutdown()

    if not benchmarks:
        print("No benchmarks found", file=sys.stderr)
        return 1

    statistics = BasicStatistics(cut_tails=args.cut_tails)
    reporter = JsonReporter(statistics) if args.format == "json" else TextReporter(statistics)
    if args.output:
        reporter.render_to(args.output, benchmarks)
    elif args.format == "json":
        sys.stdout.write(reporter.render(benchmarks).decode("utf-8") + "\n")
    else:
        reporter.print_report(benchmarks)
    return 0

"""Execution of single measured repetitions.

A repetition instantiates the benchmark class fresh, runs the setup hooks,
optionally warms the test up with one unmeasured call, times exactly one
call, runs the cleanup hooks and releases the instance. Any exception raised
along the way propagates and aborts the run.

Note that the measured interval includes the bound-method call overhead. For
bodies in the range of a few hundred nanoseconds that overhead is comparable
to the work itself and the numbers should be read with care.
"""

from __future__ import annotations

import gc
from collections.abc import Callable, Iterable
from contextlib import ExitStack
from typing import TYPE_CHECKING, Any

from microbench.time import perf_ns

if TYPE_CHECKING:
    from microbench.descriptors import BenchmarkDescriptor, TestDescriptor
    from microbench.isolation import IsolatedRunner
    from microbench.logging import Logger
    from microbench.options import BenchmarkOptions


class BenchmarkCancelledError(RuntimeError):
    """Raised between repetitions after the engine was asked to stop."""


def _invoke_all(instance: Any, method_names: Iterable[str]) -> None:
    for name in method_names:
        getattr(instance, name)()


def _exit_without_suppressing(manager: Any) -> Callable[..., bool]:
    exit_method = type(manager).__exit__

    def _exit(exc_type, exc, tb) -> bool:
        exit_method(manager, exc_type, exc, tb)
        return False

    return _exit


def _register_release(stack: ExitStack, instance: Any) -> Any:
    """Tie the instance's release protocol, if any, to the stack.

    A context manager is entered and the object its ``__enter__`` returns is
    what hooks and tests run on. Its ``__exit__`` still sees any failure, but
    a truthy return value never suppresses it.

    Returns:
        The object the repetition runs on.
    """
    benchmark_type = type(instance)
    if hasattr(benchmark_type, "__enter__") and hasattr(benchmark_type, "__exit__"):
        target = benchmark_type.__enter__(instance)
        stack.push(_exit_without_suppressing(instance))
        return target
    if callable(getattr(instance, "close", None)):
        stack.callback(instance.close)
    return instance


class BenchmarkPerformer:
    """Performs one measured repetition of one test method.

    Args:
        warm_up: Invoke the test once, unmeasured, before the measured call.
    """

    def __init__(self, warm_up: bool) -> None:
        self.warm_up = warm_up

    def run(
        self,
        benchmark_type: type,
        method_name: str,
        setup_hooks: Iterable[str] = (),
        cleanup_hooks: Iterable[str] = (),
    ) -> int:
        """Run one repetition on a fresh instance.

        Args:
            benchmark_type: Class to instantiate with no arguments.
            method_name: Name of the test method to measure.
            setup_hooks: Method names invoked before the measured call.
            cleanup_hooks: Method names invoked after the measured call.

        Returns:
            Elapsed time of the measured call in nanoseconds.
        """
        with ExitStack() as stack:
            target = _register_release(stack, benchmark_type())

            _invoke_all(target, setup_hooks)
            method = getattr(target, method_name)

            if self.warm_up:
                method()

            start = perf_ns()
            method()
            elapsed = perf_ns() - start

            _invoke_all(target, cleanup_hooks)
            return elapsed


def run_one_repetition(
    benchmark_type: type,
    method_name: str,
    setup_hooks: Iterable[str] = (),
    cleanup_hooks: Iterable[str] = (),
    warm_up: bool = True,
) -> int:
    """Measure one call of ``benchmark_type().method_name()`` in nanoseconds."""
    return BenchmarkPerformer(warm_up).run(
        benchmark_type, method_name, setup_hooks, cleanup_hooks
    )


def perform_in_process(benchmark: BenchmarkDescriptor, test: TestDescriptor) -> int:
    """Run one repetition in this process, then collect its garbage.

    Finalizers of this repetition's objects have run before the next
    measured call starts.
    """
    elapsed = run_one_repetition(
        benchmark.benchmark_type,
        test.method_name,
        benchmark.setup_hooks,
        benchmark.cleanup_hooks,
        test.warm_up,
    )
    gc.collect()
    return elapsed


def accumulate_results(
    benchmark: BenchmarkDescriptor,
    test: TestDescriptor,
    options: BenchmarkOptions,
    isolated_runner: IsolatedRunner | None = None,
    is_cancelled: Callable[[], bool] | None = None,
    logger: Logger | None = None,
) -> None:
    """Run every repetition of one test, appending one sample per repetition.

    Args:
        benchmark: Benchmark owning the test.
        test: Test to measure; receives exactly ``test.repetitions`` samples.
        options: Decides between isolated and in-process repetitions.
        isolated_runner: Runner used when repetitions are isolated.
        is_cancelled: Polled before every repetition.
        logger: Receives one trace line per repetition.

    Raises:
        BenchmarkCancelledError: If cancellation was requested.
        ValueError: If isolation is requested without a runner.
    """
    if options.isolate_repetitions and isolated_runner is None:
        raise ValueError("An isolated runner is required when repetitions are isolated")

    for index in range(test.repetitions):
        if is_cancelled is not None and is_cancelled():
            raise BenchmarkCancelledError(
                f"Cancelled before repetition {index + 1} of {benchmark.name}.{test.name}"
            )

        if options.isolate_repetitions:
            elapsed = isolated_runner.run(benchmark, test)
        else:
            elapsed = perform_in_process(benchmark, test)

        test.add_sample(elapsed)
        if logger is not None:
            logger.trace(
                f"{benchmark.name}.{test.name} repetition {index + 1}/{test.repetitions}: {elapsed} ns"
            )

"""Process-per-repetition isolation.

Each repetition runs in a freshly started worker process that re-imports the
benchmark class by module and qualified name, performs exactly one
repetition, reports back over a one-way pipe and exits. Caches, imports and
heap state from one repetition never reach the next.
"""

from __future__ import annotations

import multiprocessing
import pickle
import traceback
from collections.abc import Iterable
from multiprocessing.connection import Connection
from typing import TYPE_CHECKING

from microbench.discovery import locate_type
from microbench.performer import run_one_repetition

if TYPE_CHECKING:
    from microbench.descriptors import BenchmarkDescriptor, TestDescriptor

_OK = "ok"
_ERROR = "error"


def _portable_error(exc: Exception, remote_tb: str) -> Exception:
    """Return the exception if it survives a pickle round trip, else a RuntimeError copy."""
    exc.add_note(f"Raised in isolated worker:\n{remote_tb}")
    try:
        pickle.loads(pickle.dumps(exc))
    except Exception:
        return RuntimeError(f"{type(exc).__qualname__}: {exc}\n{remote_tb}")
    return exc


def _worker_main(
    conn: Connection,
    module_name: str,
    qualname: str,
    method_name: str,
    setup_hooks: tuple[str, ...],
    cleanup_hooks: tuple[str, ...],
    warm_up: bool,
) -> None:
    """Entry point of the worker process."""
    try:
        benchmark_type = locate_type(module_name, qualname)
        elapsed = run_one_repetition(
            benchmark_type, method_name, setup_hooks, cleanup_hooks, warm_up
        )
    except Exception as exc:
        conn.send((_ERROR, _portable_error(exc, traceback.format_exc())))
    else:
        conn.send((_OK, elapsed))
    finally:
        conn.close()


class IsolatedRunner:
    """Runs single repetitions in disposable worker processes.

    Args:
        start_method: multiprocessing start method, None for the platform default.
    """

    def __init__(self, start_method: str | None = None) -> None:
        self._ctx = multiprocessing.get_context(start_method)

    @property
    def start_method(self) -> str:
        """The start method actually used."""
        return self._ctx.get_start_method()

    def run(self, benchmark: BenchmarkDescriptor, test: TestDescriptor) -> int:
        """Run one repetition of a discovered test in a new process."""
        return self.run_repetition(
            benchmark.benchmark_type,
            test.method_name,
            benchmark.setup_hooks,
            benchmark.cleanup_hooks,
            test.warm_up,
        )

    def run_repetition(
        self,
        benchmark_type: type,
        method_name: str,
        setup_hooks: Iterable[str] = (),
        cleanup_hooks: Iterable[str] = (),
        warm_up: bool = True,
    ) -> int:
        """Spawn a worker, wait for its single result and reap it.

        Returns:
            Elapsed time of the measured call in nanoseconds.

        Raises:
            Exception: Whatever the worker's setup, test or cleanup raised.
            RuntimeError: If the worker exited without reporting a result.
        """
        reader, writer = self._ctx.Pipe(duplex=False)
        proc = self._ctx.Process(
            target=_worker_main,
            args=(
                writer,
                benchmark_type.__module__,
                benchmark_type.__qualname__,
                method_name,
                tuple(setup_hooks),
                tuple(cleanup_hooks),
                warm_up,
            ),
            name=f"microbench-{benchmark_type.__qualname__}.{method_name}",
        )
        proc.start()
        # Only the worker holds the write end now, so EOF means it died.
        writer.close()

        status, payload = None, None
        try:
            status, payload = reader.recv()
        except EOFError:
            pass
        finally:
            reader.close()
            proc.join()

        if status == _OK:
            return payload
        if status == _ERROR:
            raise payload
        raise RuntimeError(
            f"Isolated repetition of {benchmark_type.__qualname__}.{method_name} "
            f"exited without a result (exit code {proc.exitcode})"
        )

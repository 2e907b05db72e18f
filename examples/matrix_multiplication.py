"""Compares loop orderings for a small matrix product.

Not a real benchmark of matrix code, just a tour of the engine options:

    python examples/matrix_multiplication.py
    microbench matrix_multiplication --search declarative -n 20 --cut-tails
"""

import random
import sys

import numpy as np

from microbench import (
    BasicStatistics,
    BenchmarkEngine,
    BenchmarkOptions,
    SearchMode,
    TextReporter,
    benchmark,
    benchmarked,
    execute_and_render,
)

ROWS = 64
COLUMNS = 16


def _create(rows: int, columns: int) -> list[list[float]]:
    return [[random.random() for _ in range(columns)] for _ in range(rows)]


@benchmark(name="Matrix multiplication", description="Loop orderings for C += A x B")
class MatrixBenchmark:
    def __init__(self):
        self.a = _create(ROWS, COLUMNS)
        self.b = _create(COLUMNS, ROWS)
        self.c = _create(ROWS, ROWS)

    @benchmarked(name="Textbook implementation")
    def textbook(self):
        a, b, c = self.a, self.b, self.c
        for i in range(ROWS):
            for j in range(ROWS):
                for k in range(COLUMNS):
                    c[i][j] += a[i][k] * b[k][j]

    @benchmarked(name="Inner loop moved outside")
    def reordered(self):
        a, b, c = self.a, self.b, self.c
        for i in range(ROWS):
            for k in range(COLUMNS):
                for j in range(ROWS):
                    c[i][j] += a[i][k] * b[k][j]

    @benchmarked(name="Manual loop unrolling")
    def unrolled(self):
        a, b, c = self.a, self.b, self.c
        for i in range(ROWS):
            for j in range(ROWS):
                for k in range(0, COLUMNS, 2):
                    c[i][j] += a[i][k] * b[k][j]
                    c[i][j] += a[i][k + 1] * b[k + 1][j]

    @benchmarked(name="numpy matmul", repetitions=200)
    def vectorized(self):
        np.asarray(self.c) + np.asarray(self.a) @ np.asarray(self.b)


def main():
    options = BenchmarkOptions(repetitions=25)

    def on_progress(event):
        print(f"[{event.percentage:>3}%] {event.label}")

    engine = BenchmarkEngine(
        options, modules=[sys.modules[__name__]], benchmark_progress=on_progress
    )
    TextReporter(BasicStatistics(cut_tails=True)).print_report(engine.execute())

    # Same run in one call, written to the temporary directory.
    path = execute_and_render(options=options.replace(search_mode=SearchMode.CONVENTION))
    print(f"Report written to {path}")


if __name__ == "__main__":
    main()

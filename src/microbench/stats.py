"""Summary statistics over collected samples.

Samples are treated as an unordered multiset and converted to fractional
milliseconds before anything is computed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from microbench.descriptors import TestDescriptor
from microbench.time import ns_to_ms

MINIMUM = "min"
LOWER_QUARTILE = "lower_quartile"
AVERAGE = "mean"
UPPER_QUARTILE = "upper_quartile"
MAXIMUM = "max"


def percentile(sorted_values: np.ndarray, fraction: float) -> float:
    """Linear interpolation between order statistics.

    The real index ``fraction * (n - 1)`` is split into floor and fractional
    part; the result is interpolated between the floor and the next order
    statistic, or is the last element itself when the floor already is.

    Args:
        sorted_values: Values in ascending order.
        fraction: Percentile as a fraction in [0, 1].

    Returns:
        The interpolated value, 0.0 for an empty array.
    """
    if sorted_values.size == 0:
        return 0.0
    return float(np.percentile(sorted_values, fraction * 100.0, method="linear"))


class Statistics(ABC):
    """A statistical summary computed per test.

    ``headers()`` is ordered and ``calculate()`` returns values in that same
    order. ``key_header`` names the value renderers use to rank tests, lower
    being better.
    """

    @property
    @abstractmethod
    def key_header(self) -> str:
        """Header used to pick the best test of a benchmark."""

    @abstractmethod
    def headers(self) -> list[str]:
        """Ordered names of the computed values."""

    @abstractmethod
    def calculate(self, test: TestDescriptor) -> dict[str, float]:
        """Compute every header for one test."""


class BasicStatistics(Statistics):
    """Minimum, quartiles, mean and maximum in milliseconds.

    Args:
        cut_tails: Drop the single smallest and single largest sample before
            computing, when there are more than two samples.
    """

    def __init__(self, cut_tails: bool = False) -> None:
        self.cut_tails = cut_tails

    @property
    def key_header(self) -> str:
        return AVERAGE

    def headers(self) -> list[str]:
        # Consumers such as box-plot renderers read values positionally.
        return [MINIMUM, LOWER_QUARTILE, AVERAGE, UPPER_QUARTILE, MAXIMUM]

    def measures_to_analyze(self, test: TestDescriptor) -> np.ndarray:
        """Samples in milliseconds, sorted ascending, tails cut if enabled."""
        measures = np.sort(ns_to_ms(np.asarray(test.samples_ns, dtype=np.float64)))
        if not self.cut_tails or measures.size <= 2:
            return measures
        return measures[1:-1]

    def calculate(self, test: TestDescriptor) -> dict[str, float]:
        """Compute the five-value summary.

        Raises:
            ValueError: If test is None.
        """
        if test is None:
            raise ValueError("test must not be None")

        measures = self.measures_to_analyze(test)
        if measures.size == 0:
            return dict.fromkeys(self.headers(), 0.0)

        return {
            MINIMUM: float(measures[0]),
            LOWER_QUARTILE: percentile(measures, 0.25),
            AVERAGE: float(np.mean(measures)),
            UPPER_QUARTILE: percentile(measures, 0.75),
            MAXIMUM: float(measures[-1]),
        }

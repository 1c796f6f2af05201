"""
Numeric Statistics Primitives
===============================
Pure functions over finite real sequences. Callers pre-filter nulls/NaN;
degenerate inputs (zero variance, too-short series) yield 0.0 instead of
NaN or Infinity so downstream aggregation stays finite.
"""

import math
from typing import Sequence


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean. Empty input returns 0.0."""
    if not values:
        return 0.0
    return sum(values) / len(values)


def variance(values: Sequence[float]) -> float:
    """Population variance."""
    if not values:
        return 0.0
    m = mean(values)
    return sum((v - m) ** 2 for v in values) / len(values)


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation."""
    return math.sqrt(variance(values))


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson r between two equal-length sequences.

    Returns 0.0 for empty input or when either side has zero variance.
    Raises ValueError when lengths differ.
    """
    if len(x) != len(y):
        raise ValueError(f"pearson_correlation needs equal lengths, got {len(x)} and {len(y)}")
    n = len(x)
    if n == 0:
        return 0.0

    x_mean = sum(x) / n
    y_mean = sum(y) / n

    numerator = 0.0
    x_var = 0.0
    y_var = 0.0
    for xi, yi in zip(x, y):
        x_diff = xi - x_mean
        y_diff = yi - y_mean
        numerator += x_diff * y_diff
        x_var += x_diff * x_diff
        y_var += y_diff * y_diff

    if x_var == 0 or y_var == 0:
        return 0.0
    r = numerator / math.sqrt(x_var * y_var)
    # Rounding noise can push |r| a hair past 1
    return max(-1.0, min(1.0, r))


def autocorrelation(values: Sequence[float], lag: int) -> float:
    """
    Sample autocorrelation at `lag`, normalised by the full-series variance.
    Returns 0.0 if the series is not longer than the lag.
    """
    n = len(values)
    if lag < 1 or n <= lag:
        return 0.0

    m = sum(values) / n
    numerator = 0.0
    for i in range(n - lag):
        numerator += (values[i] - m) * (values[i + lag] - m)
    denominator = sum((v - m) ** 2 for v in values)

    return numerator / denominator if denominator != 0 else 0.0


def index_quantile(sorted_values: Sequence[float], q: float) -> float:
    """Non-interpolated quantile: element at floor(n × q) of a sorted sequence."""
    if not sorted_values:
        return 0.0
    idx = min(int(math.floor(len(sorted_values) * q)), len(sorted_values) - 1)
    return sorted_values[idx]

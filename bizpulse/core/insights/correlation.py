"""
Correlation Matrix Builder
============================
Pairwise Pearson r across every column holding at least one numeric cell.
Pairs are correlated over rows where both columns have a value, each
unordered pair is computed once and mirrored, and the diagonal is exactly 1.

Cost is O(columns² × rows).
"""

import logging
from typing import Dict, List, Sequence

from .columns import Column
from .statistics import pearson_correlation

logger = logging.getLogger(__name__)

CorrelationMatrix = Dict[str, Dict[str, float]]


def _paired_values(a: Column, b: Column):
    xs: List[float] = []
    ys: List[float] = []
    for x, y in zip(a.numeric_values, b.numeric_values):
        if x is not None and y is not None:
            xs.append(x)
            ys.append(y)
    return xs, ys


def build_correlation_matrix(columns: Sequence[Column]) -> CorrelationMatrix:
    """Symmetric {name: {name: r}} over numeric-bearing columns."""
    numeric = [c for c in columns if c.has_numeric]
    matrix: CorrelationMatrix = {c.name: {} for c in numeric}

    for i, a in enumerate(numeric):
        matrix[a.name][a.name] = 1.0
        for b in numeric[i + 1:]:
            xs, ys = _paired_values(a, b)
            r = pearson_correlation(xs, ys)
            matrix[a.name][b.name] = r
            matrix[b.name][a.name] = r

    # Restore input column order inside each row
    order = [c.name for c in numeric]
    matrix = {name: {other: matrix[name][other] for other in order} for name in order}

    logger.debug(f"Correlation matrix built over {len(numeric)} numeric columns")
    return matrix


def strong_pairs(matrix: CorrelationMatrix, threshold: float = 0.7) -> List[Dict[str, object]]:
    """Off-diagonal pairs with |r| above threshold, each pair listed once."""
    pairs = []
    names = list(matrix)
    for i, a in enumerate(names):
        for b in names[i + 1:]:
            r = matrix[a].get(b, 0.0)
            if abs(r) > threshold:
                pairs.append({"column_a": a, "column_b": b, "correlation": r})
    return pairs

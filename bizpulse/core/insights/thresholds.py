"""
Analysis Thresholds — Single Source of Every Tunable Constant
===============================================================
Every cut-off used by the trend analyzer, column scorer and dataset
aggregator is a field here, so callers can recalibrate the engine without
touching the algorithms.

Usage:
  thresholds = AnalysisThresholds()
  strict = thresholds.override({"trend_correlation_floor": 0.5})
"""

import math
from copy import deepcopy
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Tuple

# Counts and divisors: must be integers >= 1
POSITIVE_INT_FIELDS = ("min_valid_points", "sample_size_target", "confidence_column_target")


def _positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Threshold '{key}' must be an integer >= 1, got {value!r}")
    return value


def _validated(key: str, value: Any) -> Any:
    """Type/range check for one override; raises ValueError."""
    if key == "seasonal_lags":
        if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
            raise ValueError(f"Threshold 'seasonal_lags' must be a list of integers, got {value!r}")
        return tuple(_positive_int(key, lag) for lag in value)
    if key in POSITIVE_INT_FIELDS:
        return _positive_int(key, value)
    if (isinstance(value, bool) or not isinstance(value, (int, float))
            or not math.isfinite(value) or value < 0):
        raise ValueError(f"Threshold '{key}' must be a finite number >= 0, got {value!r}")
    return float(value)


@dataclass
class AnalysisThresholds:
    """All configurable thresholds used across the engine."""

    # ── Trend Analyzer ──
    min_valid_points: int = 3
    trend_correlation_floor: float = 0.3      # below this a series has no clear direction
    volatility_mean_ratio: float = 0.2        # volatile if mean |Δ| > ratio × mean
    seasonal_lags: Tuple[int, ...] = field(default=(7, 12, 24, 30))
    seasonality_threshold: float = 0.6
    irregular_correlation: float = 0.5
    exponential_slope_ratio: float = 0.1
    sample_size_target: int = 50
    iqr_multiplier: float = 1.5

    # ── Column Health ──
    criticality_high_correlation: float = 0.7
    criticality_medium_correlation: float = 0.4
    health_critical: float = 0.3
    health_warning: float = 0.6

    # ── Dataset Aggregation ──
    confidence_column_target: int = 10
    consistency_factor: float = 0.9
    accuracy_factor: float = 0.95
    timeliness: float = 0.8
    strong_correlation: float = 0.7

    def to_dict(self) -> Dict[str, Any]:
        return {k: (list(v) if isinstance(v, tuple) else v) for k, v in self.__dict__.items()}

    def get(self, key: str, default: Any = None) -> Any:
        return getattr(self, key, default)

    def override(self, overrides: Dict[str, Any]) -> 'AnalysisThresholds':
        """
        Return a new AnalysisThresholds with overrides applied.
        Unknown keys are ignored; out-of-range values raise ValueError.
        """
        new = deepcopy(self)
        names = {f.name for f in fields(self)}
        for k, v in (overrides or {}).items():
            if k in names:
                setattr(new, k, _validated(k, v))
        return new


DEFAULT_THRESHOLDS = AnalysisThresholds()

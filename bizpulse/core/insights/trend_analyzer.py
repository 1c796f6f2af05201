"""
Trend Analyzer — Linear Trend, Volatility, Outliers & Seasonality
===================================================================
Takes an index-ordered sequence of cells (numbers, None, NaN) and returns a
`TrendAnalysis`:

  1. Filter          — keep finite numbers, preserve order
  2. Least squares   — slope & |r| of value against position
  3. Volatility      — mean absolute first difference
  4. Change rate     — % change first → last valid value
  5. Outliers        — IQR fences on index-based Q1/Q3
  6. Direction       — volatile | stable | increasing | decreasing
  7. Seasonality     — autocorrelation at canonical lags
  8. Pattern         — cyclical | irregular | exponential | linear
  9. Confidence      — mean of sample-size, correlation, completeness scores

Fewer than `min_valid_points` valid values yields the insufficient_data
sentinel rather than an error.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .statistics import autocorrelation, index_quantile, mean
from .thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds

logger = logging.getLogger(__name__)

DIRECTIONS = ("increasing", "decreasing", "stable", "volatile", "insufficient_data")
PATTERNS = ("linear", "exponential", "cyclical", "irregular")


@dataclass
class TrendAnalysis:
    """Trend verdict for one ordered numeric series."""
    direction: str = "insufficient_data"
    slope: float = 0.0
    confidence: float = 0.0               # 0-1 blend of sample size, |r|, completeness
    correlation: float = 0.0              # |Pearson r| between position and value
    seasonality: bool = False
    change_rate: float = 0.0              # % change first → last valid value
    volatility: float = 0.0               # mean |v[i] - v[i-1]|
    outliers: List[int] = field(default_factory=list)
    pattern: str = "irregular"

    @classmethod
    def insufficient(cls) -> 'TrendAnalysis':
        return cls()

    @property
    def is_sufficient(self) -> bool:
        return self.direction != "insufficient_data"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "direction": self.direction,
            "slope": round(self.slope, 6),
            "confidence": round(self.confidence, 6),
            "correlation": round(self.correlation, 6),
            "seasonality": self.seasonality,
            "change_rate": round(self.change_rate, 6),
            "volatility": round(self.volatility, 6),
            "outliers": list(self.outliers),
            "pattern": self.pattern,
        }


def _is_valid(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


class TrendAnalyzer:
    """
    Computes a TrendAnalysis per series.
    Stateless apart from its thresholds, so one instance can be shared
    across threads.
    """

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def analyze(self, values: Sequence[Optional[float]]) -> TrendAnalysis:
        t = self.thresholds
        raw_count = len(values) if values is not None else 0
        valid = [float(v) for v in (values or []) if _is_valid(v)]
        n = len(valid)

        if n < t.min_valid_points:
            return TrendAnalysis.insufficient()

        # ── Least squares against position ──
        x_mean = (n - 1) / 2.0
        y_mean = mean(valid)
        numerator = 0.0
        x_var = 0.0
        y_var = 0.0
        for i, y in enumerate(valid):
            dx = i - x_mean
            dy = y - y_mean
            numerator += dx * dy
            x_var += dx * dx
            y_var += dy * dy

        slope = numerator / x_var if x_var != 0 else 0.0
        if x_var != 0 and y_var != 0:
            correlation = min(abs(numerator) / math.sqrt(x_var * y_var), 1.0)
        else:
            correlation = 0.0

        volatility = self._volatility(valid)
        change_rate = self._change_rate(valid)
        outliers = self._outliers(valid)

        # ── Direction ──
        if correlation < t.trend_correlation_floor:
            direction = "volatile" if volatility > t.volatility_mean_ratio * y_mean else "stable"
        elif slope > 0:
            direction = "increasing"
        elif slope < 0:
            direction = "decreasing"
        else:
            direction = "stable"

        seasonality = self._detect_seasonality(valid)

        # ── Pattern ──
        if seasonality:
            pattern = "cyclical"
        elif correlation < t.irregular_correlation:
            pattern = "irregular"
        elif abs(slope) > t.exponential_slope_ratio * y_mean:
            pattern = "exponential"
        else:
            pattern = "linear"

        # ── Confidence ──
        sample_size_score = _clamp01(n / t.sample_size_target)
        correlation_score = _clamp01(correlation)
        completeness_score = _clamp01(n / raw_count) if raw_count else 0.0
        confidence = (sample_size_score + correlation_score + completeness_score) / 3

        return TrendAnalysis(
            direction=direction,
            slope=slope,
            confidence=confidence,
            correlation=correlation,
            seasonality=seasonality,
            change_rate=change_rate,
            volatility=volatility,
            outliers=outliers,
            pattern=pattern,
        )

    @staticmethod
    def _volatility(valid: List[float]) -> float:
        if len(valid) < 2:
            return 0.0
        diffs = [abs(valid[i] - valid[i - 1]) for i in range(1, len(valid))]
        return sum(diffs) / len(diffs)

    @staticmethod
    def _change_rate(valid: List[float]) -> float:
        # A zero baseline has no defined percentage change
        first, last = valid[0], valid[-1]
        if first == 0:
            return 0.0
        return abs((last - first) / first * 100)

    def _outliers(self, valid: List[float]) -> List[int]:
        ordered = sorted(valid)
        q1 = index_quantile(ordered, 0.25)
        q3 = index_quantile(ordered, 0.75)
        fence = self.thresholds.iqr_multiplier * (q3 - q1)
        lower, upper = q1 - fence, q3 + fence
        return [i for i, v in enumerate(valid) if v < lower or v > upper]

    def _detect_seasonality(self, valid: List[float]) -> bool:
        for lag in self.thresholds.seasonal_lags:
            if len(valid) >= lag * 2:
                if autocorrelation(valid, lag) > self.thresholds.seasonality_threshold:
                    return True
        return False


_default_analyzer = TrendAnalyzer()


def analyze_trend(values: Sequence[Optional[float]],
                  thresholds: Optional[AnalysisThresholds] = None) -> TrendAnalysis:
    """Analyze one ordered series with default (or given) thresholds."""
    if thresholds is None:
        return _default_analyzer.analyze(values)
    return TrendAnalyzer(thresholds).analyze(values)

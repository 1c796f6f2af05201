"""
Column Health Scorer
======================
Turns a column's trend plus name heuristics into business-facing metrics:
criticality, health score, risk level and impacted business areas.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds
from .trend_analyzer import TrendAnalysis

logger = logging.getLogger(__name__)

# Name fragments that make a column business-critical on sight
CRITICAL_KEYWORDS: Tuple[str, ...] = ("revenue", "profit", "sales", "cost", "customer", "user")

# (business area, name fragments), evaluated in order
IMPACT_AREAS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Revenue", ("revenue", "sales")),
    ("Cost Management", ("cost", "expense")),
    ("Customer Success", ("customer", "user")),
    ("Operations", ("product", "inventory")),
    ("Human Resources", ("employee", "staff")),
)
DEFAULT_IMPACT_AREA = "General Performance"

# Health score adjustment per trend direction
DIRECTION_HEALTH_DELTA: Dict[str, float] = {
    "increasing": 0.3,
    "stable": 0.1,
    "decreasing": -0.3,
    "volatile": -0.2,
}


@dataclass
class ColumnHealth:
    criticality: str = "low"             # high | medium | low
    health_score: float = 0.5            # 0-1
    risk_level: str = "warning"          # critical | warning | good
    impact_area: List[str] = field(default_factory=lambda: [DEFAULT_IMPACT_AREA])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "criticality": self.criticality,
            "health_score": round(self.health_score, 6),
            "risk_level": self.risk_level,
            "impact_area": list(self.impact_area),
        }


class ColumnHealthScorer:
    """Scores one column at a time; holds nothing but thresholds."""

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None):
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def score(self, column_name: str, trend: TrendAnalysis,
              correlations: Optional[Mapping[str, float]] = None) -> ColumnHealth:
        health = self.health_score(trend)
        return ColumnHealth(
            criticality=self.criticality(column_name, correlations),
            health_score=health,
            risk_level=self.risk_level(trend, health),
            impact_area=self.impact_area(column_name),
        )

    def criticality(self, column_name: str,
                    correlations: Optional[Mapping[str, float]] = None) -> str:
        name = column_name.lower()
        if any(k in name for k in CRITICAL_KEYWORDS):
            return "high"

        others = [abs(r) for other, r in (correlations or {}).items() if other != column_name]
        max_corr = max(others) if others else 0.0
        if max_corr > self.thresholds.criticality_high_correlation:
            return "high"
        if max_corr > self.thresholds.criticality_medium_correlation:
            return "medium"
        return "low"

    @staticmethod
    def health_score(trend: TrendAnalysis) -> float:
        score = 0.5
        score += DIRECTION_HEALTH_DELTA.get(trend.direction, 0.0)
        score += trend.confidence * 0.2
        score -= min(trend.volatility / 100, 0.2)
        return max(0.0, min(1.0, score))

    def risk_level(self, trend: TrendAnalysis, health_score: float) -> str:
        if health_score < self.thresholds.health_critical or trend.direction == "decreasing":
            return "critical"
        if health_score < self.thresholds.health_warning or trend.direction == "volatile":
            return "warning"
        return "good"

    @staticmethod
    def impact_area(column_name: str) -> List[str]:
        name = column_name.lower()
        areas = [area for area, keys in IMPACT_AREAS if any(k in name for k in keys)]
        return areas or [DEFAULT_IMPACT_AREA]


def score_column(column_name: str, trend: TrendAnalysis,
                 correlations: Optional[Mapping[str, float]] = None,
                 thresholds: Optional[AnalysisThresholds] = None) -> ColumnHealth:
    return ColumnHealthScorer(thresholds).score(column_name, trend, correlations)

"""
Dataset Insight Aggregator — Dataset-Wide Business Health
===========================================================
Single entry point of the engine. Runs, in order:

  Columns → TrendAnalyzer (per column) → CorrelationMatrix
          → ColumnHealthScorer (per column) → DomainClassifier
          → DatasetInsights

Every call recomputes from its input; the aggregator keeps no state
between calls, so concurrent analyses need nothing more than their own
input lists.

Usage:
  aggregator = DatasetInsightAggregator()
  insights = aggregator.aggregate(build_columns(descriptors), file_name="q3_sales.csv")
  payload = insights.to_dict()
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .column_health import ColumnHealth, ColumnHealthScorer
from .columns import Column, ColumnValidationError, build_columns
from .correlation import CorrelationMatrix, build_correlation_matrix
from .domain_profiles import DomainClassifier
from .statistics import mean
from .thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds
from .trend_analyzer import TrendAnalysis, TrendAnalyzer

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# RESULT DATA CLASSES
# ═══════════════════════════════════════════════════════════════

@dataclass
class ColumnStatistics:
    """Per-column trend plus business metrics."""
    name: str
    column_type: str
    trend: TrendAnalysis
    correlations: Dict[str, float] = field(default_factory=dict)
    health: ColumnHealth = field(default_factory=ColumnHealth)

    @property
    def criticality(self) -> str:
        return self.health.criticality

    @property
    def health_score(self) -> float:
        return self.health.health_score

    @property
    def risk_level(self) -> str:
        return self.health.risk_level

    @property
    def impact_area(self) -> List[str]:
        return self.health.impact_area

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.column_type,
            "trend": self.trend.to_dict(),
            "correlations": {k: round(v, 6) for k, v in self.correlations.items()},
            **self.health.to_dict(),
        }


@dataclass
class BusinessHealth:
    score: float = 0.0
    critical_issues: List[str] = field(default_factory=list)
    opportunities: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": round(self.score, 6),
            "critical_issues": list(self.critical_issues),
            "opportunities": list(self.opportunities),
            "recommendations": list(self.recommendations),
        }


@dataclass
class DataQuality:
    """
    Only completeness is measured. Consistency and accuracy are fixed
    fractions of it and timeliness is a constant.
    """
    completeness: float = 0.0
    consistency: float = 0.0
    accuracy: float = 0.0
    timeliness: float = 0.0

    @property
    def combined(self) -> float:
        return (self.completeness + self.consistency + self.accuracy) / 3

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completeness": round(self.completeness, 6),
            "consistency": round(self.consistency, 6),
            "accuracy": round(self.accuracy, 6),
            "timeliness": round(self.timeliness, 6),
        }


@dataclass
class DatasetInsights:
    """Top-level analysis result consumed by narrative and dashboard layers."""
    overall_trend: TrendAnalysis = field(default_factory=TrendAnalysis.insufficient)
    key_columns: List[ColumnStatistics] = field(default_factory=list)
    correlation_matrix: CorrelationMatrix = field(default_factory=dict)
    business_health: BusinessHealth = field(default_factory=BusinessHealth)
    data_quality: DataQuality = field(default_factory=DataQuality)
    confidence_level: float = 0.0
    domain_type: str = "customer"

    def column(self, name: str) -> Optional[ColumnStatistics]:
        return next((c for c in self.key_columns if c.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_trend": self.overall_trend.to_dict(),
            "key_columns": [c.to_dict() for c in self.key_columns],
            "correlation_matrix": {
                a: {b: round(r, 6) for b, r in row.items()}
                for a, row in self.correlation_matrix.items()
            },
            "business_health": self.business_health.to_dict(),
            "data_quality": self.data_quality.to_dict(),
            "confidence_level": round(self.confidence_level, 6),
            "domain_type": self.domain_type,
        }


# ═══════════════════════════════════════════════════════════════
# AGGREGATOR
# ═══════════════════════════════════════════════════════════════

class DatasetInsightAggregator:
    """
    Combines per-column analyses into dataset-wide insights.
    Collaborators are injected so thresholds and domain scorers can be
    swapped per request.
    """

    def __init__(self, thresholds: Optional[AnalysisThresholds] = None,
                 classifier: Optional[DomainClassifier] = None):
        self.thresholds = thresholds or DEFAULT_THRESHOLDS
        self.trend_analyzer = TrendAnalyzer(self.thresholds)
        self.health_scorer = ColumnHealthScorer(self.thresholds)
        self.classifier = classifier or DomainClassifier()

    def aggregate(self, columns: Sequence[Column], file_name: Optional[str] = None) -> DatasetInsights:
        columns = list(columns)
        if not columns:
            logger.info("Aggregation over empty column set")
            return DatasetInsights(domain_type=self.classifier.detect([], file_name))

        correlation_matrix = build_correlation_matrix(columns)

        key_columns: List[ColumnStatistics] = []
        for col in columns:
            trend = self.trend_analyzer.analyze(col.numeric_values)
            correlations = dict(correlation_matrix.get(col.name, {}))
            health = self.health_scorer.score(col.name, trend, correlations)
            logger.debug(
                f"Column '{col.name}': direction={trend.direction} "
                f"health={health.health_score:.3f} risk={health.risk_level}"
            )
            key_columns.append(ColumnStatistics(
                name=col.name,
                column_type=col.column_type.value,
                trend=trend,
                correlations=correlations,
                health=health,
            ))

        overall_trend = self.overall_trend([c.trend for c in key_columns if c.trend.is_sufficient])
        business_health = self.business_health(key_columns)
        data_quality = self.data_quality(columns)
        confidence_level = self.confidence_level(key_columns, data_quality)
        domain_type = self.classifier.detect([c.name for c in columns], file_name)

        logger.info(
            f"Analyzed {len(columns)} columns: domain={domain_type}, "
            f"health={business_health.score:.3f}, "
            f"critical={len(business_health.critical_issues)}, "
            f"confidence={confidence_level:.3f}"
        )

        return DatasetInsights(
            overall_trend=overall_trend,
            key_columns=key_columns,
            correlation_matrix=correlation_matrix,
            business_health=business_health,
            data_quality=data_quality,
            confidence_level=confidence_level,
            domain_type=domain_type,
        )

    # ──────────────────────────────────────────────────────────
    # OVERALL TREND
    # ──────────────────────────────────────────────────────────

    @staticmethod
    def overall_trend(trends: Sequence[TrendAnalysis]) -> TrendAnalysis:
        """Vote/average across columns that had enough data."""
        if not trends:
            return TrendAnalysis.insufficient()

        # Counter.most_common keeps first-seen order among equal counts
        direction = Counter(t.direction for t in trends).most_common(1)[0][0]
        avg_confidence = mean([t.confidence for t in trends])

        return TrendAnalysis(
            direction=direction,
            slope=mean([t.slope for t in trends]),
            confidence=avg_confidence,
            correlation=mean([t.correlation for t in trends]),
            seasonality=any(t.seasonality for t in trends),
            change_rate=mean([t.change_rate for t in trends]),
            volatility=mean([t.volatility for t in trends]),
            outliers=[],
            pattern="linear" if avg_confidence > 0.7 else "irregular",
        )

    # ──────────────────────────────────────────────────────────
    # BUSINESS HEALTH
    # ──────────────────────────────────────────────────────────

    @staticmethod
    def business_health(key_columns: Sequence[ColumnStatistics]) -> BusinessHealth:
        health = BusinessHealth(score=mean([c.health_score for c in key_columns]))

        for col in key_columns:
            if col.risk_level == "critical":
                health.critical_issues.append(
                    f"{col.name}: {col.trend.direction} trend with "
                    f"{col.trend.confidence * 100:.0f}% confidence"
                )
                health.recommendations.append(
                    f"Immediate attention needed for {col.name} - implement stabilization measures"
                )
            if col.trend.direction == "increasing" and col.criticality == "high":
                health.opportunities.append(
                    f"{col.name} showing positive {col.trend.direction} trend - potential for scaling"
                )

        return health

    # ──────────────────────────────────────────────────────────
    # DATA QUALITY & CONFIDENCE
    # ──────────────────────────────────────────────────────────

    def data_quality(self, columns: Sequence[Column]) -> DataQuality:
        total = sum(c.total_cells for c in columns)
        non_null = sum(c.non_null_cells for c in columns)
        completeness = non_null / total if total > 0 else 0.0
        return DataQuality(
            completeness=completeness,
            consistency=completeness * self.thresholds.consistency_factor,
            accuracy=completeness * self.thresholds.accuracy_factor,
            timeliness=self.thresholds.timeliness,
        )

    def confidence_level(self, key_columns: Sequence[ColumnStatistics],
                         data_quality: DataQuality) -> float:
        if not key_columns:
            return 0.0
        trend_confidence = mean([c.trend.confidence for c in key_columns])
        coverage = min(len(key_columns) / self.thresholds.confidence_column_target, 1.0)
        return (trend_confidence + data_quality.combined + coverage) / 3


def aggregate(columns: Sequence[Any], file_name: Optional[str] = None,
              thresholds: Optional[AnalysisThresholds] = None) -> DatasetInsights:
    """
    Analyze a dataset with a fresh aggregator.
    Accepts Column objects, raw {name, type, values} descriptors, or a mix.
    """
    converted: List[Column] = []
    seen = set()
    for i, col in enumerate(columns or []):
        if isinstance(col, dict):
            col = build_columns([col])[0]
        elif not isinstance(col, Column):
            raise ColumnValidationError(f"Column #{i} must be a Column or a descriptor object")
        if col.name in seen:
            raise ColumnValidationError(f"Duplicate column name '{col.name}'")
        seen.add(col.name)
        converted.append(col)
    return DatasetInsightAggregator(thresholds).aggregate(converted, file_name)


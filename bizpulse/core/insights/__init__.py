"""
Business Insight Engine — Core Module
=======================================
Statistical trend analysis and business-health scoring over tabular data.

Components:
  ┌──────────────────────────────────────────────────────┐
  │ Column / build_columns — Boundary validation/coercion │
  │ statistics             — mean, std, Pearson, autocorr │
  │ TrendAnalyzer          — Slope, volatility, outliers  │
  │ ColumnHealthScorer     — Criticality, health, risk    │
  │ build_correlation_matrix — Pairwise Pearson matrix    │
  │ DomainClassifier       — Pluggable domain scoring     │
  │ DatasetInsightAggregator — Dataset-wide insights      │
  │ generate_adapted_response — Domain-flavoured summary  │
  └──────────────────────────────────────────────────────┘

Usage:
  from bizpulse.core.insights import aggregate, build_columns
  insights = aggregate(build_columns(descriptors), file_name="sales_q3.csv")
  payload = insights.to_dict()
"""

from .thresholds import AnalysisThresholds, DEFAULT_THRESHOLDS
from .statistics import mean, standard_deviation, pearson_correlation, autocorrelation
from .columns import (
    Column,
    ColumnType,
    ColumnValidationError,
    build_columns,
    columns_from_dataframe,
    columns_from_records,
)
from .trend_analyzer import TrendAnalysis, TrendAnalyzer, analyze_trend
from .column_health import ColumnHealth, ColumnHealthScorer, score_column
from .correlation import build_correlation_matrix
from .domain_profiles import (
    DomainClassifier,
    DomainContext,
    DomainScorer,
    KeywordDomainScorer,
    detect_domain,
    get_domain_context,
)
from .aggregator import (
    BusinessHealth,
    ColumnStatistics,
    DataQuality,
    DatasetInsightAggregator,
    DatasetInsights,
    aggregate,
)
from .narrative import AdaptedResponse, generate_adapted_response

__all__ = [
    "AnalysisThresholds", "DEFAULT_THRESHOLDS",
    "mean", "standard_deviation", "pearson_correlation", "autocorrelation",
    "Column", "ColumnType", "ColumnValidationError",
    "build_columns", "columns_from_dataframe", "columns_from_records",
    "TrendAnalysis", "TrendAnalyzer", "analyze_trend",
    "ColumnHealth", "ColumnHealthScorer", "score_column",
    "build_correlation_matrix",
    "DomainClassifier", "DomainContext", "DomainScorer", "KeywordDomainScorer",
    "detect_domain", "get_domain_context",
    "BusinessHealth", "ColumnStatistics", "DataQuality",
    "DatasetInsightAggregator", "DatasetInsights", "aggregate",
    "AdaptedResponse", "generate_adapted_response",
]

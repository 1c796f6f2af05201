"""
Domain-Adapted Narrative
==========================
Renders a DatasetInsights object as short, domain-flavoured prose for
executive dashboards: urgency verdict, one-line summary, key findings,
recommendations and a confidence statement.

Template-driven and deterministic: identical insights always yield the
identical narrative.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .aggregator import DatasetInsights
from .correlation import strong_pairs
from .domain_profiles import DomainContext, get_domain_context
from .thresholds import DEFAULT_THRESHOLDS, AnalysisThresholds

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 5

# Overall direction → terminology key of the domain vocabulary
DIRECTION_TERMS: Dict[str, str] = {
    "increasing": "improvement",
    "decreasing": "decline",
    "stable": "stability",
    "volatile": "volatility",
}

URGENCY_SENTENCES: Dict[str, str] = {
    "immediate": "IMMEDIATE ACTION REQUIRED: Critical issues detected requiring urgent intervention.",
    "urgent": "URGENT ATTENTION NEEDED: Declining patterns require prompt action.",
    "moderate": "OPTIMIZATION OPPORTUNITY: Performance can be enhanced through targeted improvements.",
    "low": "STABLE PERFORMANCE: Continue current strategies with minor adjustments.",
}

# Urgency level → action-verb bucket in the domain vocabulary
URGENCY_VERB_BUCKET: Dict[str, str] = {
    "immediate": "critical",
    "urgent": "urgent",
    "moderate": "moderate",
    "low": "low",
}


@dataclass
class AdaptedResponse:
    executive_summary: str
    key_findings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    urgency_level: str = "low"            # immediate | urgent | moderate | low
    terminology: str = "customer"
    confidence_statement: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "executive_summary": self.executive_summary,
            "key_findings": list(self.key_findings),
            "recommendations": list(self.recommendations),
            "urgency_level": self.urgency_level,
            "terminology": self.terminology,
            "confidence_statement": self.confidence_statement,
        }


def determine_urgency(insights: DatasetInsights) -> str:
    health = insights.business_health
    direction = insights.overall_trend.direction
    if health.score < 0.3 or len(health.critical_issues) > 2:
        return "immediate"
    if health.score < 0.5 or direction == "decreasing":
        return "urgent"
    if health.score < 0.7 or direction == "volatile":
        return "moderate"
    return "low"


def executive_summary(insights: DatasetInsights, domain: DomainContext, urgency: str) -> str:
    score = insights.business_health.score
    if score > 0.7:
        health_desc = "strong"
    elif score > 0.4:
        health_desc = "moderate"
    else:
        health_desc = "concerning"

    direction = insights.overall_trend.direction
    trend_desc = domain.term(DIRECTION_TERMS.get(direction, ""), direction.replace("_", " "))

    confidence = insights.confidence_level
    if confidence > 0.8:
        confidence_desc = "high confidence"
    elif confidence > 0.5:
        confidence_desc = "moderate confidence"
    else:
        confidence_desc = "limited confidence"

    summary = (
        f"{domain.domain.upper()} ANALYSIS: {health_desc} {domain.term('trend', 'performance')} "
        f"showing {trend_desc} ({confidence_desc})."
    )
    return f"{summary} {URGENCY_SENTENCES[urgency]}"


def key_findings(insights: DatasetInsights, domain: DomainContext,
                 thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS) -> List[str]:
    findings = []
    critical = [c for c in insights.key_columns if c.risk_level == "critical"]
    improving = [c for c in insights.key_columns if c.trend.direction == "increasing"]
    metric_word = domain.term("pattern", "metrics")

    if critical:
        findings.append(
            f"{len(critical)} critical {metric_word} showing {domain.term('decline', 'negative trends')}"
        )
    if improving:
        findings.append(
            f"{len(improving)} {metric_word} demonstrate {domain.term('improvement', 'positive growth')}"
        )
    if strong_pairs(insights.correlation_matrix, thresholds.strong_correlation):
        findings.append(
            f"Strong {domain.term('correlation', 'relationships')} identified between key "
            f"{domain.term('pattern', 'variables')}"
        )
    opportunities = insights.business_health.opportunities
    if opportunities:
        findings.append(
            f"{len(opportunities)} strategic opportunities for {domain.term('improvement', 'enhancement')}"
        )
    return findings


def domain_recommendations(insights: DatasetInsights, domain: DomainContext, urgency: str) -> List[str]:
    recommendations = []
    verbs = (domain.action_verbs.get(URGENCY_VERB_BUCKET[urgency])
             or domain.action_verbs.get("moderate")
             or ["review"])

    critical = [c for c in insights.key_columns if c.risk_level == "critical"]
    for i, col in enumerate(critical):
        verb = verbs[i % len(verbs)]
        recommendations.append(
            f"{verb} {col.name} - showing {col.trend.direction} trend with "
            f"{col.trend.confidence * 100:.0f}% confidence"
        )

    recommendations.extend(insights.business_health.recommendations)

    if urgency == "immediate":
        for indicator in domain.urgency_indicators.get("immediate", []):
            recommendations.append(
                f"Address {indicator} through immediate {domain.term('improvement', 'corrective action')}"
            )

    return recommendations[:MAX_RECOMMENDATIONS]


def confidence_statement(insights: DatasetInsights) -> str:
    confidence = insights.confidence_level
    pct = f"{confidence * 100:.0f}"
    quality = f"{insights.data_quality.completeness * 100:.0f}"
    if confidence > 0.8:
        return (f"HIGH CONFIDENCE ({pct}%): Analysis based on {quality}% complete data "
                f"with strong statistical patterns.")
    if confidence > 0.5:
        return (f"MODERATE CONFIDENCE ({pct}%): Analysis based on {quality}% complete data "
                f"with identifiable patterns.")
    return (f"LIMITED CONFIDENCE ({pct}%): Analysis based on {quality}% complete data "
            f"with weak patterns. Additional data recommended.")


def generate_adapted_response(insights: DatasetInsights,
                              domain_context: Optional[DomainContext] = None,
                              thresholds: AnalysisThresholds = DEFAULT_THRESHOLDS) -> AdaptedResponse:
    """Narrate insights in the vocabulary of their (or the given) domain."""
    domain = domain_context or get_domain_context(insights.domain_type)
    urgency = determine_urgency(insights)
    logger.debug(f"Narrating {domain.domain} insights at urgency={urgency}")
    return AdaptedResponse(
        executive_summary=executive_summary(insights, domain, urgency),
        key_findings=key_findings(insights, domain, thresholds),
        recommendations=domain_recommendations(insights, domain, urgency),
        urgency_level=urgency,
        terminology=domain.domain,
        confidence_statement=confidence_statement(insights),
    )

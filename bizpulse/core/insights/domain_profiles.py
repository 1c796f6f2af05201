"""
Domain Profiles — Business Context Detection & Vocabulary
===========================================================
Infers which business domain a dataset belongs to from its column names and
file name, and carries the vocabulary each domain uses when insights are
narrated (terminology, success metrics, warning signals, action verbs).

Architecture:
  - One `DomainScorer` strategy per domain (sales, financial, marketing,
    operations, customer, scientific)
  - `DomainClassifier` runs every registered scorer and picks the argmax
  - Ties resolve by registration order; no signal falls back to 'customer'
  - New domains are added with `DomainClassifier.register()`, the
    aggregator never changes

Usage:
  domain = detect_domain(["revenue", "sales_region"], "sales_report.csv")
  context = get_domain_context(domain)
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "customer"
FILENAME_WEIGHT = 5
COLUMN_WEIGHT = 3


# ═══════════════════════════════════════════════════════════════
# DOMAIN VOCABULARY
# ═══════════════════════════════════════════════════════════════

@dataclass
class DomainContext:
    """Narrative vocabulary for one business domain."""
    domain: str
    name: str
    terminology: Dict[str, str] = field(default_factory=dict)
    success_metrics: List[str] = field(default_factory=list)
    warning_signals: List[str] = field(default_factory=list)
    action_verbs: Dict[str, List[str]] = field(default_factory=dict)
    urgency_indicators: Dict[str, List[str]] = field(default_factory=dict)

    def term(self, key: str, default: str) -> str:
        return self.terminology.get(key) or default

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "name": self.name,
            "terminology": dict(self.terminology),
            "success_metrics": list(self.success_metrics),
            "warning_signals": list(self.warning_signals),
            "action_verbs": {k: list(v) for k, v in self.action_verbs.items()},
            "urgency_indicators": {k: list(v) for k, v in self.urgency_indicators.items()},
        }


DOMAIN_PROFILES: Dict[str, Dict[str, Any]] = {
    "sales": {
        "name": "Sales",
        "column_keywords": ["sales", "revenue", "customer"],
        "terminology": {
            "improvement": "revenue growth",
            "decline": "sales drop",
            "stability": "consistent performance",
            "volatility": "fluctuating sales",
            "trend": "sales trajectory",
            "pattern": "buying behavior",
            "correlation": "sales relationship",
        },
        "success_metrics": ["revenue growth", "conversion rates", "customer acquisition", "deal closure"],
        "warning_signals": ["declining conversion", "longer sales cycles", "customer churn", "pipeline shrinkage"],
        "action_verbs": {
            "critical": ["intervene immediately", "escalate", "redirect resources", "implement emergency measures"],
            "urgent": ["accelerate", "prioritize", "focus efforts", "optimize"],
            "moderate": ["enhance", "improve", "develop", "strengthen"],
            "low": ["maintain", "monitor", "continue", "sustain"],
        },
        "urgency_indicators": {
            "immediate": ["critical revenue decline", "major customer loss", "pipeline collapse"],
            "urgent": ["declining trends", "competitive pressure", "missed targets"],
            "moderate": ["optimization opportunities", "growth potential", "efficiency gains"],
            "low": ["stable performance", "minor adjustments", "maintenance"],
        },
    },

    "financial": {
        "name": "Financial",
        "column_keywords": ["cost", "profit", "budget"],
        "terminology": {
            "improvement": "financial strengthening",
            "decline": "financial deterioration",
            "stability": "fiscal stability",
            "volatility": "financial volatility",
            "trend": "financial trajectory",
            "pattern": "spending behavior",
            "correlation": "financial relationship",
        },
        "success_metrics": ["profitability", "cash flow", "cost efficiency", "ROI"],
        "warning_signals": ["cash flow issues", "rising costs", "declining margins", "budget overruns"],
        "action_verbs": {
            "critical": ["restructure immediately", "cut costs", "secure funding", "implement controls"],
            "urgent": ["optimize spending", "improve margins", "accelerate collections", "reduce expenses"],
            "moderate": ["enhance efficiency", "diversify revenue", "invest wisely", "plan strategically"],
            "low": ["maintain reserves", "monitor performance", "continue practices", "steady growth"],
        },
        "urgency_indicators": {
            "immediate": ["cash flow crisis", "major losses", "bankruptcy risk"],
            "urgent": ["declining profitability", "cost overruns", "margin pressure"],
            "moderate": ["efficiency opportunities", "investment needs", "growth planning"],
            "low": ["stable finances", "adequate reserves", "controlled spending"],
        },
    },

    "marketing": {
        "name": "Marketing",
        "column_keywords": ["campaign", "engagement", "conversion"],
        "terminology": {
            "improvement": "campaign success",
            "decline": "engagement drop",
            "stability": "consistent reach",
            "volatility": "variable performance",
            "trend": "marketing momentum",
            "pattern": "audience behavior",
            "correlation": "channel synergy",
        },
        "success_metrics": ["engagement rates", "lead generation", "brand awareness", "conversion"],
        "warning_signals": ["declining engagement", "poor conversion", "audience fatigue", "channel saturation"],
        "action_verbs": {
            "critical": ["pivot strategy", "reallocate budget", "launch emergency campaign", "rebrand"],
            "urgent": ["optimize campaigns", "retarget audience", "test new channels", "adjust messaging"],
            "moderate": ["enhance content", "expand reach", "test variations", "improve targeting"],
            "low": ["maintain momentum", "continue strategy", "monitor metrics", "sustain efforts"],
        },
        "urgency_indicators": {
            "immediate": ["brand crisis", "massive engagement drop", "negative viral spread"],
            "urgent": ["declining performance", "competitive threats", "audience loss"],
            "moderate": ["optimization needs", "growth opportunities", "new channels"],
            "low": ["stable performance", "minor tweaks", "maintenance mode"],
        },
    },

    "operations": {
        "name": "Operations",
        "column_keywords": ["efficiency", "process", "production"],
        "terminology": {
            "improvement": "operational efficiency",
            "decline": "performance degradation",
            "stability": "steady operations",
            "volatility": "operational instability",
            "trend": "performance trajectory",
            "pattern": "operational rhythm",
            "correlation": "process dependency",
        },
        "success_metrics": ["efficiency ratios", "throughput", "quality metrics", "uptime"],
        "warning_signals": ["bottlenecks", "quality issues", "downtime", "capacity constraints"],
        "action_verbs": {
            "critical": ["halt operations", "emergency repairs", "bypass systems", "crisis management"],
            "urgent": ["eliminate bottlenecks", "increase capacity", "fix processes", "optimize workflow"],
            "moderate": ["streamline processes", "improve efficiency", "upgrade systems", "train staff"],
            "low": ["maintain standards", "monitor performance", "routine maintenance", "continuous improvement"],
        },
        "urgency_indicators": {
            "immediate": ["system failure", "safety issues", "complete shutdown"],
            "urgent": ["major bottlenecks", "quality problems", "capacity issues"],
            "moderate": ["efficiency opportunities", "process improvements", "upgrades needed"],
            "low": ["stable operations", "minor optimizations", "preventive maintenance"],
        },
    },

    "customer": {
        "name": "Customer Experience",
        "column_keywords": ["satisfaction", "support", "feedback"],
        "terminology": {
            "improvement": "customer satisfaction growth",
            "decline": "satisfaction decline",
            "stability": "consistent experience",
            "volatility": "inconsistent service",
            "trend": "customer journey",
            "pattern": "usage behavior",
            "correlation": "satisfaction drivers",
        },
        "success_metrics": ["satisfaction scores", "retention rates", "loyalty metrics", "referrals"],
        "warning_signals": ["churn increase", "satisfaction decline", "complaint rise", "negative feedback"],
        "action_verbs": {
            "critical": ["recover customers", "address grievances", "prevent churn", "crisis response"],
            "urgent": ["improve experience", "resolve issues", "enhance service", "rebuild trust"],
            "moderate": ["enhance satisfaction", "expand services", "improve touchpoints", "strengthen relationships"],
            "low": ["maintain service", "monitor feedback", "continue excellence", "steady improvement"],
        },
        "urgency_indicators": {
            "immediate": ["mass customer exodus", "viral complaints", "service crisis"],
            "urgent": ["rising churn", "satisfaction drop", "competitive losses"],
            "moderate": ["experience gaps", "service improvements", "loyalty building"],
            "low": ["stable satisfaction", "minor enhancements", "relationship maintenance"],
        },
    },

    "scientific": {
        "name": "Scientific / Research",
        "column_keywords": ["test", "experiment", "measurement"],
        "terminology": {
            "improvement": "positive correlation",
            "decline": "negative trend",
            "stability": "statistical stability",
            "volatility": "high variance",
            "trend": "statistical trend",
            "pattern": "data pattern",
            "correlation": "statistical correlation",
        },
        "success_metrics": ["statistical significance", "effect size", "confidence intervals", "reproducibility"],
        "warning_signals": ["low significance", "high variance", "outliers", "bias indicators"],
        "action_verbs": {
            "critical": ["investigate anomalies", "validate findings", "control variables", "verify data"],
            "urgent": ["analyze further", "increase sample size", "control confounders", "replicate study"],
            "moderate": ["explore patterns", "expand analysis", "investigate relationships", "refine methods"],
            "low": ["monitor variables", "maintain protocols", "continue observation", "document findings"],
        },
        "urgency_indicators": {
            "immediate": ["data corruption", "methodological flaws", "critical errors"],
            "urgent": ["statistical concerns", "validity issues", "reproducibility problems"],
            "moderate": ["analysis opportunities", "pattern exploration", "method improvements"],
            "low": ["stable measurements", "routine analysis", "ongoing monitoring"],
        },
    },
}


def get_domain_context(domain: str) -> DomainContext:
    """Vocabulary for a domain key; unknown keys get the default domain's."""
    key = domain if domain in DOMAIN_PROFILES else DEFAULT_DOMAIN
    profile = DOMAIN_PROFILES[key]
    return DomainContext(
        domain=key,
        name=profile["name"],
        terminology=dict(profile["terminology"]),
        success_metrics=list(profile["success_metrics"]),
        warning_signals=list(profile["warning_signals"]),
        action_verbs={k: list(v) for k, v in profile["action_verbs"].items()},
        urgency_indicators={k: list(v) for k, v in profile["urgency_indicators"].items()},
    )


# ═══════════════════════════════════════════════════════════════
# SCORING STRATEGIES
# ═══════════════════════════════════════════════════════════════

@dataclass
class DomainScore:
    domain: str
    score: int = 0
    evidence: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"domain": self.domain, "score": self.score, "evidence": list(self.evidence)}


class DomainScorer:
    """Strategy interface: score how strongly a dataset signals one domain."""

    domain: str = ""

    def score(self, column_names: Sequence[str], file_name: Optional[str] = None) -> DomainScore:
        raise NotImplementedError


class KeywordDomainScorer(DomainScorer):
    """
    Substring scoring: +5 when the file name mentions the domain,
    +3 per column whose name contains any domain keyword.
    """

    def __init__(self, domain: str, column_keywords: Sequence[str],
                 file_keywords: Optional[Sequence[str]] = None):
        self.domain = domain
        self.column_keywords = tuple(k.lower() for k in column_keywords)
        self.file_keywords = tuple(k.lower() for k in (file_keywords or (domain,)))

    def score(self, column_names: Sequence[str], file_name: Optional[str] = None) -> DomainScore:
        result = DomainScore(domain=self.domain)
        file_lower = (file_name or "").lower()

        if file_lower and any(k in file_lower for k in self.file_keywords):
            result.score += FILENAME_WEIGHT
            result.evidence.append(f"file name '{file_name}' mentions {self.domain}")

        for col in column_names:
            col_lower = str(col).lower()
            hit = next((k for k in self.column_keywords if k in col_lower), None)
            if hit:
                result.score += COLUMN_WEIGHT
                result.evidence.append(f"column '{col}' matches '{hit}'")

        return result


def default_scorers() -> List[DomainScorer]:
    return [KeywordDomainScorer(key, p["column_keywords"]) for key, p in DOMAIN_PROFILES.items()]


class DomainClassifier:
    """Runs every registered scorer and returns the best-scoring domain."""

    def __init__(self, scorers: Optional[Sequence[DomainScorer]] = None,
                 default_domain: str = DEFAULT_DOMAIN):
        self._scorers: List[DomainScorer] = list(scorers) if scorers is not None else default_scorers()
        self.default_domain = default_domain

    def register(self, scorer: DomainScorer) -> None:
        """Add a scorer; replaces any existing scorer for the same domain in place."""
        for i, existing in enumerate(self._scorers):
            if existing.domain == scorer.domain:
                self._scorers[i] = scorer
                return
        self._scorers.append(scorer)

    @property
    def domains(self) -> List[str]:
        return [s.domain for s in self._scorers]

    def score(self, column_names: Sequence[str], file_name: Optional[str] = None) -> List[DomainScore]:
        return [s.score(column_names, file_name) for s in self._scorers]

    def classify(self, column_names: Sequence[str],
                 file_name: Optional[str] = None) -> Tuple[str, List[DomainScore]]:
        scores = self.score(column_names, file_name)
        best: Optional[DomainScore] = None
        for s in scores:
            # Strict '>' keeps the earliest-registered domain on ties
            if s.score > 0 and (best is None or s.score > best.score):
                best = s
        domain = best.domain if best else self.default_domain
        table = {s.domain: s.score for s in scores}
        logger.debug(f"Domain scores: {table} -> {domain}")
        return domain, scores

    def detect(self, column_names: Sequence[str], file_name: Optional[str] = None) -> str:
        return self.classify(column_names, file_name)[0]

    @staticmethod
    def list_domains() -> List[Dict[str, str]]:
        return [{"key": key, "name": p["name"]} for key, p in DOMAIN_PROFILES.items()]


_default_classifier = DomainClassifier()


def detect_domain(column_names: Sequence[str], file_name: Optional[str] = None) -> str:
    """Most likely business domain for the given column names / file name."""
    return _default_classifier.detect(column_names, file_name)

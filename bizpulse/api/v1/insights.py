"""
Business Insights — API Endpoints
===================================
FastAPI router exposing the analysis engine.

Endpoints:
  POST /analyze        — Column descriptors → DatasetInsights (+ narrative)
  POST /analyze-rows   — Row records → inferred columns → DatasetInsights
  POST /trend          — One ordered series → TrendAnalysis
  POST /domain         — Column/file names → detected domain + score table
  GET  /domains        — Available domains and their vocabulary
  GET  /health         — Engine health check

Integration (in main.py):
  from bizpulse.api.router import api_router
  app.include_router(api_router, prefix="/api/v1")
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from bizpulse.config import settings
from bizpulse.core.insights import (
    DEFAULT_THRESHOLDS,
    AnalysisThresholds,
    Column,
    ColumnValidationError,
    DatasetInsightAggregator,
    DomainClassifier,
    analyze_trend,
    build_columns,
    columns_from_records,
    generate_adapted_response,
    get_domain_context,
)

logger = logging.getLogger(__name__)
router = APIRouter()

VERSION = "1.0.0"


# ═══════════════════════════════════════════════════════════════
# REQUEST SCHEMAS
# ═══════════════════════════════════════════════════════════════

class ColumnPayload(BaseModel):
    name: str = Field(..., min_length=1)
    type: str = Field(default="numeric", description="numeric|date|categorical|text")
    values: List[Any] = Field(default_factory=list)


class AnalyzeRequest(BaseModel):
    columns: List[ColumnPayload]
    file_name: Optional[str] = Field(default=None, description="Used only for domain detection")
    include_narrative: bool = True
    threshold_overrides: Optional[Dict[str, Any]] = None


class AnalyzeRowsRequest(BaseModel):
    rows: List[Dict[str, Any]]
    file_name: Optional[str] = None
    type_hints: Optional[Dict[str, str]] = Field(
        default=None, description="Column name → type, skips inference for those columns"
    )
    include_narrative: bool = True
    threshold_overrides: Optional[Dict[str, Any]] = None


class TrendRequest(BaseModel):
    values: List[Optional[float]]
    threshold_overrides: Optional[Dict[str, Any]] = None


class DomainRequest(BaseModel):
    column_names: List[str]
    file_name: Optional[str] = None


# ═══════════════════════════════════════════════════════════════
# RESPONSE SCHEMAS
# ═══════════════════════════════════════════════════════════════

class AnalyzeResponse(BaseModel):
    status: str = "ok"
    insights: Dict[str, Any] = {}
    narrative: Optional[Dict[str, Any]] = None
    domain: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    timing: Dict[str, float] = {}


class TrendResponse(BaseModel):
    trend: Dict[str, Any]


class DomainResponse(BaseModel):
    domain: str
    name: str
    scores: List[Dict[str, Any]] = []


class HealthResponse(BaseModel):
    status: str
    components: Dict[str, str]
    version: str
    uptime_seconds: Optional[float] = None


# ═══════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════

def _thresholds(overrides: Optional[Dict[str, Any]]) -> AnalysisThresholds:
    try:
        return DEFAULT_THRESHOLDS.override(overrides or {})
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _check_limits(n_columns: int, n_rows: int) -> None:
    if n_columns > settings.MAX_COLUMNS:
        raise HTTPException(
            status_code=422,
            detail=f"Too many columns: {n_columns} > {settings.MAX_COLUMNS}",
        )
    if n_rows > settings.MAX_ROWS:
        raise HTTPException(
            status_code=422,
            detail=f"Too many rows: {n_rows} > {settings.MAX_ROWS}",
        )


async def _run_analysis(columns: List[Column], file_name: Optional[str],
                        include_narrative: bool,
                        thresholds: AnalysisThresholds) -> AnalyzeResponse:
    """Run the aggregator off the event loop under the configured wall-clock budget."""
    start = time.time()

    def work():
        insights = DatasetInsightAggregator(thresholds).aggregate(columns, file_name)
        narrative = None
        if include_narrative and settings.ENABLE_NARRATIVE:
            narrative = generate_adapted_response(insights, thresholds=thresholds)
        return insights, narrative

    try:
        insights, narrative = await asyncio.wait_for(
            run_in_threadpool(work), timeout=settings.ANALYSIS_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.warning(
            f"Analysis of {len(columns)} columns exceeded {settings.ANALYSIS_TIMEOUT_SECONDS}s"
        )
        raise HTTPException(
            status_code=504,
            detail=f"Analysis exceeded {settings.ANALYSIS_TIMEOUT_SECONDS:.0f}s budget",
        )

    context = get_domain_context(insights.domain_type)
    return AnalyzeResponse(
        insights=insights.to_dict(),
        narrative=narrative.to_dict() if narrative else None,
        domain={"key": context.domain, "name": context.name},
        timing={"total_ms": round((time.time() - start) * 1000, 2)},
    )


# ═══════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════

_start_time = time.time()


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze_columns(request: AnalyzeRequest):
    """
    Full pipeline: Columns → Trends → Correlations → Column Health →
    Domain Detection → Dataset Insights → Narrative (optional)
    """
    longest = max((len(c.values) for c in request.columns), default=0)
    _check_limits(len(request.columns), longest)
    thresholds = _thresholds(request.threshold_overrides)

    try:
        columns = build_columns([c.model_dump() for c in request.columns])
    except ColumnValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        return await _run_analysis(
            columns, request.file_name, request.include_narrative, thresholds,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Insight analysis error: {e}", exc_info=True)
        return AnalyzeResponse(status="error", error=str(e))


@router.post("/analyze-rows", response_model=AnalyzeResponse)
async def analyze_rows(request: AnalyzeRowsRequest):
    """Row-oriented input (parsed CSV/Excel/JSON); column types are inferred."""
    n_columns = len({key for row in request.rows for key in row})
    _check_limits(n_columns, len(request.rows))
    thresholds = _thresholds(request.threshold_overrides)

    try:
        columns = columns_from_records(request.rows, request.type_hints)
    except ColumnValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        return await _run_analysis(
            columns, request.file_name, request.include_narrative, thresholds,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Row analysis error: {e}", exc_info=True)
        return AnalyzeResponse(status="error", error=str(e))


@router.post("/trend", response_model=TrendResponse)
async def trend(request: TrendRequest):
    _check_limits(1, len(request.values))
    thresholds = _thresholds(request.threshold_overrides)
    result = await run_in_threadpool(analyze_trend, request.values, thresholds)
    return TrendResponse(trend=result.to_dict())


@router.post("/domain", response_model=DomainResponse)
async def domain(request: DomainRequest):
    detected, scores = DomainClassifier().classify(request.column_names, request.file_name)
    context = get_domain_context(detected)
    return DomainResponse(
        domain=detected,
        name=context.name,
        scores=[s.to_dict() for s in scores],
    )


@router.get("/domains")
async def list_domains():
    return {
        "domains": [
            get_domain_context(d["key"]).to_dict() for d in DomainClassifier.list_domains()
        ]
    }


@router.get("/health", response_model=HealthResponse)
async def health():
    components = {}
    try:
        probe = analyze_trend([1.0, 2.0, 3.0])
        components["trend_analyzer"] = "ok" if probe.direction == "increasing" else "degraded"
    except Exception as e:
        logger.warning(f"Trend analyzer probe failed: {e}")
        components["trend_analyzer"] = f"error: {e}"
    components["domain_classifier"] = f"ok ({len(DomainClassifier().domains)} domains)"
    components["narrative"] = "enabled" if settings.ENABLE_NARRATIVE else "disabled"

    status = "healthy" if all(not v.startswith("error") for v in components.values()) else "degraded"
    return HealthResponse(
        status=status,
        components=components,
        version=VERSION,
        uptime_seconds=round(time.time() - _start_time, 1),
    )

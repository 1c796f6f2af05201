"""
Business Insight Engine — FastAPI Server (Port 8002)
======================================================
Statistical trend analysis and business-health scoring over tabular data:
per-column trends, correlation matrix, column health and risk, domain
detection, and domain-adapted executive narrative.

Run:
  uvicorn main:app --host 0.0.0.0 --port 8002 --reload
  # or
  python main.py
"""

import logging
from contextlib import asynccontextmanager

# Load .env file BEFORE anything reads os.getenv()
from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from bizpulse.config import settings  # noqa: E402

# ── Logging ──
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("bizpulse")


# ── Lifespan: warm up ──
@asynccontextmanager
async def lifespan(app: FastAPI):
    from bizpulse.core.insights import DomainClassifier, analyze_trend

    classifier = DomainClassifier()
    probe = analyze_trend([1.0, 2.0, 3.0, 4.0])
    logger.info(
        f"Engine warmed up: {len(classifier.domains)} domain scorers, "
        f"trend probe={probe.direction}, "
        f"timeout={settings.ANALYSIS_TIMEOUT_SECONDS}s, "
        f"narrative={'on' if settings.ENABLE_NARRATIVE else 'off'}"
    )

    yield
    logger.info("Shutting down Business Insight Engine")


# ── Create FastAPI app ──
app = FastAPI(
    title="Business Insight Engine",
    description=(
        "Trend analysis (slope, volatility, IQR outliers, seasonality), "
        "pairwise Pearson correlation, column health and risk scoring, "
        "keyword-based domain detection and domain-adapted narrative."
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS ──
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Mount all API routes ──
from bizpulse.api.router import api_router  # noqa: E402
app.include_router(api_router, prefix="/api/v1")


# ── Root ──
@app.get("/", tags=["Root"])
async def root():
    return {
        "service": "Business Insight Engine",
        "version": "1.0.0",
        "docs": "/docs",
        "endpoints": {
            "insights": "/api/v1/insights/ (6 endpoints)",
        },
        "health": "/api/v1/insights/health",
    }


# ── Direct run ──
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )

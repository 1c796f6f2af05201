"""
Application Settings — All via environment variables with sensible defaults.
"""
import os


class Settings:
    # ── Server ──
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8002"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # ── CORS ──
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000,*")

    # ── Analysis limits (rejected at the boundary, never inside the engine) ──
    ANALYSIS_TIMEOUT_SECONDS: float = float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", "30"))
    MAX_COLUMNS: int = int(os.getenv("MAX_COLUMNS", "500"))
    MAX_ROWS: int = int(os.getenv("MAX_ROWS", "1000000"))

    # ── Feature Flags ──
    ENABLE_NARRATIVE: bool = os.getenv("ENABLE_NARRATIVE", "true").lower() == "true"


settings = Settings()

"""
Business Insights API — Endpoint Tests
========================================
Exercises /api/v1/insights/* through FastAPI's TestClient: happy paths,
boundary validation (422), limits, timeout (504) and the error envelope.

Run: pytest bizpulse/api/tests/ -v
"""

import asyncio
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

BASE = "/api/v1/insights"


# ═══════════════════════════════════════════════════════════════
# TEST FIXTURES
# ═══════════════════════════════════════════════════════════════

@pytest.fixture(scope="module")
def client():
    from main import app
    return TestClient(app)


def make_payload(file_name=None, include_narrative=True, **extra):
    """Revenue rising, cost falling, 12 periods."""
    payload = {
        "columns": [
            {"name": "revenue", "type": "numeric", "values": [100 + 10 * i for i in range(12)]},
            {"name": "cost", "type": "numeric", "values": [50 - 2 * i for i in range(12)]},
        ],
        "file_name": file_name,
        "include_narrative": include_narrative,
    }
    payload.update(extra)
    return payload


# ═══════════════════════════════════════════════════════════════
# 1. ANALYZE
# ═══════════════════════════════════════════════════════════════

class TestAnalyzeEndpoint:
    """POST /analyze"""

    def test_full_pipeline(self, client):
        r = client.post(f"{BASE}/analyze", json=make_payload())
        assert r.status_code == 200
        body = r.json()
        assert body["status"] == "ok"
        assert body["insights"]["domain_type"] == "sales"
        assert body["domain"] == {"key": "sales", "name": "Sales"}
        assert body["narrative"]["urgency_level"] == "moderate"
        assert "total_ms" in body["timing"]

        columns = {c["name"]: c for c in body["insights"]["key_columns"]}
        assert columns["revenue"]["risk_level"] == "good"
        assert columns["cost"]["risk_level"] == "critical"

    def test_without_narrative(self, client):
        r = client.post(f"{BASE}/analyze", json=make_payload(include_narrative=False))
        assert r.status_code == 200
        assert r.json()["narrative"] is None

    def test_narrative_feature_flag(self, client, monkeypatch):
        from bizpulse.config import settings
        monkeypatch.setattr(settings, "ENABLE_NARRATIVE", False)
        r = client.post(f"{BASE}/analyze", json=make_payload())
        assert r.json()["narrative"] is None

    def test_threshold_overrides(self, client):
        r = client.post(f"{BASE}/analyze", json=make_payload(
            threshold_overrides={"min_valid_points": 20},
        ))
        body = r.json()
        assert body["insights"]["overall_trend"]["direction"] == "insufficient_data"

    @pytest.mark.parametrize("overrides", [
        {"confidence_column_target": 0},
        {"sample_size_target": 0},
        {"seasonal_lags": 7},
        {"iqr_multiplier": -1},
    ])
    def test_invalid_threshold_overrides(self, client, overrides):
        r = client.post(f"{BASE}/analyze", json=make_payload(threshold_overrides=overrides))
        assert r.status_code == 422
        assert "Threshold" in r.json()["detail"]

    def test_empty_columns(self, client):
        r = client.post(f"{BASE}/analyze", json={"columns": [], "file_name": "sales.csv"})
        assert r.status_code == 200
        body = r.json()
        assert body["insights"]["key_columns"] == []
        assert body["insights"]["domain_type"] == "sales"

    def test_duplicate_names_rejected(self, client):
        payload = make_payload()
        payload["columns"].append({"name": "revenue", "values": [1, 2, 3]})
        r = client.post(f"{BASE}/analyze", json=payload)
        assert r.status_code == 422
        assert "Duplicate" in r.json()["detail"]

    def test_unknown_type_rejected(self, client):
        payload = make_payload()
        payload["columns"][0]["type"] = "currency"
        assert client.post(f"{BASE}/analyze", json=payload).status_code == 422

    def test_column_limit(self, client, monkeypatch):
        from bizpulse.config import settings
        monkeypatch.setattr(settings, "MAX_COLUMNS", 1)
        r = client.post(f"{BASE}/analyze", json=make_payload())
        assert r.status_code == 422
        assert "Too many columns" in r.json()["detail"]

    def test_row_limit(self, client, monkeypatch):
        from bizpulse.config import settings
        monkeypatch.setattr(settings, "MAX_ROWS", 5)
        r = client.post(f"{BASE}/analyze", json=make_payload())
        assert r.status_code == 422
        assert "Too many rows" in r.json()["detail"]

    def test_timeout(self, client, monkeypatch):
        import bizpulse.api.v1.insights as insights_api

        async def expired(awaitable, timeout):
            awaitable.close()
            raise asyncio.TimeoutError()

        monkeypatch.setattr(insights_api, "asyncio", SimpleNamespace(
            wait_for=expired, TimeoutError=asyncio.TimeoutError,
        ))
        r = client.post(f"{BASE}/analyze", json=make_payload())
        assert r.status_code == 504

    def test_unexpected_error_envelope(self, client, monkeypatch):
        import bizpulse.api.v1.insights as insights_api

        class Broken:
            def __init__(self, *args, **kwargs):
                pass

            def aggregate(self, columns, file_name=None):
                raise RuntimeError("boom")

        monkeypatch.setattr(insights_api, "DatasetInsightAggregator", Broken)
        r = client.post(f"{BASE}/analyze", json=make_payload())
        assert r.status_code == 200
        assert r.json()["status"] == "error"
        assert r.json()["error"] == "boom"


# ═══════════════════════════════════════════════════════════════
# 2. ROWS / TREND / DOMAIN
# ═══════════════════════════════════════════════════════════════

class TestOtherEndpoints:
    """POST /analyze-rows, /trend, /domain and GET /domains, /health"""

    def test_analyze_rows(self, client):
        rows = [{"revenue": 100 + 10 * i, "region": "north" if i % 2 else "south"} for i in range(12)]
        r = client.post(f"{BASE}/analyze-rows", json={"rows": rows, "include_narrative": False})
        assert r.status_code == 200
        columns = {c["name"]: c for c in r.json()["insights"]["key_columns"]}
        assert columns["revenue"]["type"] == "numeric"
        assert columns["region"]["type"] == "categorical"
        assert columns["revenue"]["trend"]["direction"] == "increasing"

    def test_analyze_rows_type_hints(self, client):
        rows = [{"code": i} for i in range(5)]
        r = client.post(f"{BASE}/analyze-rows", json={"rows": rows, "type_hints": {"code": "text"}})
        assert r.json()["insights"]["key_columns"][0]["type"] == "text"

    def test_analyze_rows_nested_cells(self, client):
        rows = [{"revenue": 100 + i, "tags": ["a", "b"]} for i in range(5)]
        r = client.post(f"{BASE}/analyze-rows", json={"rows": rows})
        assert r.status_code == 422
        assert "tags" in r.json()["detail"]

    def test_analyze_rows_invalid_overrides(self, client):
        r = client.post(f"{BASE}/analyze-rows", json={
            "rows": [{"revenue": 1}], "threshold_overrides": {"min_valid_points": 0},
        })
        assert r.status_code == 422

    def test_analyze_rows_bad_hint(self, client):
        r = client.post(f"{BASE}/analyze-rows", json={
            "rows": [{"code": 1}], "type_hints": {"code": "currency"},
        })
        assert r.status_code == 422

    def test_trend(self, client):
        r = client.post(f"{BASE}/trend", json={"values": [1, 2, 3, 4, 5, 100]})
        assert r.status_code == 200
        assert r.json()["trend"]["outliers"] == [5]

    @pytest.mark.parametrize("overrides", [
        {"sample_size_target": 0},
        {"seasonal_lags": 7},
        {"min_valid_points": "three"},
    ])
    def test_trend_invalid_overrides(self, client, overrides):
        r = client.post(f"{BASE}/trend", json={"values": [1, 2, 3, 4], "threshold_overrides": overrides})
        assert r.status_code == 422

    def test_trend_valid_overrides(self, client):
        r = client.post(f"{BASE}/trend", json={
            "values": [1, 2, 3, 4], "threshold_overrides": {"min_valid_points": 5},
        })
        assert r.status_code == 200
        assert r.json()["trend"]["direction"] == "insufficient_data"

    def test_trend_with_nulls(self, client):
        r = client.post(f"{BASE}/trend", json={"values": [1, None, 2]})
        assert r.json()["trend"]["direction"] == "insufficient_data"

    def test_domain(self, client):
        r = client.post(f"{BASE}/domain", json={
            "column_names": ["revenue", "sales_region"], "file_name": "sales_report.csv",
        })
        body = r.json()
        assert body["domain"] == "sales"
        assert body["name"] == "Sales"
        scores = {s["domain"]: s["score"] for s in body["scores"]}
        assert scores["sales"] == 11
        assert len(scores) == 6

    def test_domains(self, client):
        body = client.get(f"{BASE}/domains").json()
        assert [d["domain"] for d in body["domains"]] == [
            "sales", "financial", "marketing", "operations", "customer", "scientific",
        ]
        assert body["domains"][0]["terminology"]["improvement"] == "revenue growth"

    def test_health(self, client):
        body = client.get(f"{BASE}/health").json()
        assert body["status"] == "healthy"
        assert body["components"]["trend_analyzer"] == "ok"
        assert body["version"] == "1.0.0"

    def test_root(self, client):
        body = client.get("/").json()
        assert body["service"] == "Business Insight Engine"


# ═══════════════════════════════════════════════════════════════
# RUN
# ═══════════════════════════════════════════════════════════════

if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])

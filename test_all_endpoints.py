"""
Business Insight Engine — Live API Smoke Test
===============================================
Hits every endpoint of a running server. Prints response body on failure
for debugging.

HOW TO RUN:
  Step 1:  python main.py                 (Terminal 1 — keep running)
  Step 2:  python test_all_endpoints.py   (Terminal 2)
"""

import json
import os
import sys

import httpx

HOST = os.getenv("BIZPULSE_URL", "http://localhost:8002")
BASE = f"{HOST}/api/v1/insights"
PASS = 0
FAIL = 0
TOTAL = 0


def get(url, **kw):
    return httpx.get(url, timeout=30, **kw)


def post(url, **kw):
    return httpx.post(url, timeout=30, **kw)


def test(name, method, url, expected_status=200, body=None,
         check_field=None, check_value=None, check_no_error=True):
    """Run one test. On failure, prints actual response for debugging."""
    global PASS, FAIL, TOTAL
    TOTAL += 1
    full_url = f"{BASE}{url}"
    try:
        if method == "GET":
            r = get(full_url)
        else:
            r = post(full_url, json=body)

        status_ok = r.status_code == expected_status

        try:
            data = r.json()
        except ValueError:
            data = r.text

        has_error = isinstance(data, dict) and bool(data.get("error")) and check_no_error
        field_ok = True
        value_ok = True

        if check_field and isinstance(data, dict):
            if check_field not in data:
                field_ok = False
        if check_value is not None and isinstance(data, dict) and check_field:
            if data.get(check_field) != check_value:
                value_ok = False

        success = status_ok and field_ok and value_ok and not has_error

        if success:
            PASS += 1
            print(f"  ✅ TEST {TOTAL:2d} PASS │ {name}")
        else:
            FAIL += 1
            reason = ""
            if not status_ok:
                reason += f" status={r.status_code}"
            if has_error:
                reason += f' error="{str(data.get("error", ""))[:80]}"'
            if not field_ok:
                reason += f" missing '{check_field}'"
            if not value_ok:
                reason += f" {check_field}={data.get(check_field)!r}"
            print(f"  ❌ TEST {TOTAL:2d} FAIL │ {name} │{reason}")
            if isinstance(data, dict):
                truncated = json.dumps(data, default=str)[:200]
                print(f"         ↳ Response: {truncated}")

        return data

    except httpx.ConnectError:
        FAIL += 1
        print(f"  ❌ TEST {TOTAL:2d} FAIL │ {name} │ Cannot connect — is server running on {HOST}?")
        return None
    except httpx.HTTPError as e:
        FAIL += 1
        print(f"  ❌ TEST {TOTAL:2d} FAIL │ {name} │ {type(e).__name__}: {e}")
        return None


REVENUE = [100 + 10 * i for i in range(12)]
COST = [50 - 2 * i for i in range(12)]


# ═══════════════════════════════════════════════════════════════
# PRE-FLIGHT
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 72)
print("  Business Insight Engine — Live API Smoke Test")
print(f"  Testing all endpoints on {HOST}")
print("=" * 72)
print()

try:
    r = get(f"{HOST}/")
    data = r.json()
    print(f"  🟢 Server online: {data.get('service', '?')} v{data.get('version', '?')}")
except httpx.ConnectError:
    print("  🔴 Server NOT running! Start with: python main.py")
    sys.exit(1)
except (httpx.HTTPError, ValueError) as e:
    print(f"  🔴 Server error: {e}")
    sys.exit(1)


# ═══════════════════════════════════════════════════════════════
# GROUP 1: ANALYSIS
# ═══════════════════════════════════════════════════════════════

print()
print("─" * 72)
print("  GROUP 1: Analysis Endpoints")
print("─" * 72)
print()

data = test("POST /analyze — revenue vs cost", "POST", "/analyze",
            body={"columns": [
                {"name": "revenue", "type": "numeric", "values": REVENUE},
                {"name": "cost", "type": "numeric", "values": COST},
            ], "file_name": "q3_sales.csv"},
            check_field="status", check_value="ok")
if data and isinstance(data, dict) and data.get("insights"):
    insights = data["insights"]
    health = insights["business_health"]
    print(f"         → Domain: {insights['domain_type']}, "
          f"Health: {health['score']:.3f}, "
          f"Confidence: {insights['confidence_level']:.3f}")
    for issue in health["critical_issues"]:
        print(f"           • critical: {issue}")
    if data.get("narrative"):
        print(f"         → {data['narrative']['executive_summary'][:100]}")

test("POST /analyze — empty dataset", "POST", "/analyze",
     body={"columns": []}, check_field="insights")

test("POST /analyze — duplicate names rejected", "POST", "/analyze",
     body={"columns": [{"name": "x", "values": [1]}, {"name": "x", "values": [2]}]},
     expected_status=422)

test("POST /analyze-rows — inferred types", "POST", "/analyze-rows",
     body={"rows": [{"revenue": v, "region": "north" if i % 2 else "south"}
                    for i, v in enumerate(REVENUE)]},
     check_field="status", check_value="ok")


# ═══════════════════════════════════════════════════════════════
# GROUP 2: TREND & DOMAIN
# ═══════════════════════════════════════════════════════════════

print()
print("─" * 72)
print("  GROUP 2: Trend & Domain Endpoints")
print("─" * 72)
print()

data = test("POST /trend — outlier series", "POST", "/trend",
            body={"values": [1, 2, 3, 4, 5, 100]}, check_field="trend")
if data and isinstance(data, dict) and "trend" in data:
    t = data["trend"]
    print(f"         → {t['direction']} / {t['pattern']}, outliers={t['outliers']}")

test("POST /domain — sales report", "POST", "/domain",
     body={"column_names": ["revenue", "sales_region"], "file_name": "sales_report.csv"},
     check_field="domain", check_value="sales")

test("GET /domains", "GET", "/domains", check_field="domains")


# ═══════════════════════════════════════════════════════════════
# GROUP 3: HEALTH
# ═══════════════════════════════════════════════════════════════

print()
print("─" * 72)
print("  GROUP 3: Health")
print("─" * 72)
print()

data = test("GET /health", "GET", "/health",
            check_field="status", check_value="healthy")
if data and isinstance(data, dict):
    print(f"         → Status: {data.get('status')}, Version: {data.get('version')}")
    for comp, info in data.get("components", {}).items():
        print(f"           • {comp}: {info}")


# ═══════════════════════════════════════════════════════════════
# REPORT
# ═══════════════════════════════════════════════════════════════

print()
print("=" * 72)
if FAIL == 0:
    print(f"  🎉 ALL {TOTAL} TESTS PASSED — 100% SUCCESS")
else:
    pct = PASS / TOTAL * 100 if TOTAL else 0
    print(f"  📊 RESULTS: {PASS}/{TOTAL} passed, {FAIL} failed ({pct:.0f}%)")
    print()
    print("  💡 TIP: Check the 'Response:' lines above for error details.")
print("=" * 72)
print()

sys.exit(0 if FAIL == 0 else 1)

from decimal import Decimal

import pytest

pytestmark = pytest.mark.integration

HEADERS = {"X-User-Id": "user-1"}

PLAN = {
    "monthly_budget": "1000000",
    "cycle_count": 2,
    "cycle_weights": ["0.5", "0.5"],
    "schedule": {"days": [5, 19], "timezone": "Asia/Seoul"},
    "email": "investor@example.com",
}

PORTFOLIO = {
    "name": "Core",
    "holdings": [
        {"ticker": "069500", "name": "KODEX 200", "market": "KRX", "target_weight": "0.5"},
        {"ticker": "379800", "name": "KODEX US S&P500", "market": "KRX", "target_weight": "0.3"},
        {"ticker": "439870", "name": "KODEX Treasury", "market": "KRX", "target_weight": "0.2"},
    ],
}


async def _seed(client):
    resp = await client.put("/api/v1/plan", json=PLAN, headers=HEADERS)
    assert resp.status_code == 200
    resp = await client.put("/api/v1/portfolio", json=PORTFOLIO, headers=HEADERS)
    assert resp.status_code == 200


async def test_health(client):
    assert (await client.get("/health")).json() == {"status": "ok"}
    ready = (await client.get("/ready")).json()
    assert ready["db_connected"] is True


async def test_user_header_is_required(client):
    resp = await client.get("/api/v1/plan")
    assert resp.status_code == 422


async def test_plan_and_portfolio_upsert(client):
    assert (await client.get("/api/v1/plan", headers=HEADERS)).status_code == 404
    await _seed(client)

    plan = (await client.get("/api/v1/plan", headers=HEADERS)).json()
    assert plan["cycle_count"] == 2
    assert plan["schedule"]["days"] == [5, 19]
    assert plan["notification_channels"] == ["EMAIL"]

    portfolio = (await client.get("/api/v1/portfolio", headers=HEADERS)).json()
    assert [h["ticker"] for h in portfolio["holdings"]] == ["069500", "379800", "439870"]


async def test_invalid_plan_maps_to_422(client):
    bad = dict(PLAN, cycle_weights=["0.7", "0.7"])
    resp = await client.put("/api/v1/plan", json=bad, headers=HEADERS)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_CYCLE_WEIGHTS"


async def test_invalid_portfolio_maps_to_422(client):
    bad = {"holdings": PORTFOLIO["holdings"][:2]}
    resp = await client.put("/api/v1/portfolio", json=bad, headers=HEADERS)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_TARGET_WEIGHT_SUM"


async def test_trigger_without_plan_is_skipped(client):
    resp = await client.post("/api/v1/scheduler/trigger", json={}, headers=HEADERS)
    body = resp.json()
    assert resp.status_code == 200
    assert body["ok"] is True
    assert body["status"] == "skipped"
    assert body["execution"] is None


async def test_trigger_dry_run_then_real_then_exists(client):
    await _seed(client)

    dry = (await client.post("/api/v1/scheduler/trigger", json={"dry_run": True}, headers=HEADERS)).json()
    assert dry["status"] == "created"
    assert dry["dry_run"] is True
    assert dry["execution"]["ym_cycle"] == "2026-02#1"
    assert dry["execution"]["item_count"] == 3
    assert (await client.get("/api/v1/executions", params={"ym": "2026-02"}, headers=HEADERS)).json()[
        "executions"
    ] == []

    real = (await client.post("/api/v1/scheduler/trigger", headers=HEADERS)).json()
    assert real["status"] == "created"
    assert real["execution"]["cycle_index"] == 1

    again = (await client.post("/api/v1/scheduler/trigger", json={"dry_run": False}, headers=HEADERS)).json()
    assert again["status"] == "exists"
    assert again["ok"] is True


async def test_trigger_reports_price_failure(client, price_feed):
    await _seed(client)
    price_feed.failing.add("439870")

    body = (await client.post("/api/v1/scheduler/trigger", json={}, headers=HEADERS)).json()

    assert body["ok"] is False
    assert body["status"] == "error"
    assert "439870" in body["message"]


async def test_execution_detail_confirm_and_delete(client):
    await _seed(client)
    await client.post("/api/v1/scheduler/trigger", headers=HEADERS)

    listed = (await client.get("/api/v1/executions", params={"ym": "2026-02"}, headers=HEADERS)).json()
    assert [e["ym_cycle"] for e in listed["executions"]] == ["2026-02#1"]
    assert listed["executions"][0]["status"] == "SENT"

    detail = await client.get("/api/v1/executions/2026-02%231", headers=HEADERS)
    assert detail.status_code == 200
    body = detail.json()
    assert Decimal(body["cycle_budget"]) == Decimal("500000")
    assert [i["shares"] for i in body["items"]] == [7, 10, 8]
    assert Decimal(body["carry_by_ticker"]["069500"]) == Decimal("5000")

    confirm = await client.post(
        "/api/v1/executions/2026-02%231/confirm", json={"note": "filled"}, headers=HEADERS
    )
    assert confirm.status_code == 200
    assert confirm.json()["status"] == "CONFIRMED"
    assert confirm.json()["confirm_note"] == "filled"

    again = await client.post("/api/v1/executions/2026-02%231/confirm", headers=HEADERS)
    assert again.status_code == 409

    delete = await client.delete("/api/v1/executions/2026-02%231", headers=HEADERS)
    assert delete.status_code == 409


async def test_delete_unconfirmed_execution(client):
    await _seed(client)
    await client.post("/api/v1/scheduler/trigger", headers=HEADERS)

    resp = await client.delete("/api/v1/executions/2026-02%231", headers=HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"deleted": True}

    assert (await client.get("/api/v1/executions/2026-02%231", headers=HEADERS)).status_code == 404


async def test_malformed_key_and_month(client):
    assert (await client.get("/api/v1/executions/2026-02-1", headers=HEADERS)).status_code == 422
    assert (await client.get("/api/v1/executions", params={"ym": "2026/02"}, headers=HEADERS)).status_code == 422
    assert (await client.get("/api/v1/executions/2026-02%239", headers=HEADERS)).status_code == 404

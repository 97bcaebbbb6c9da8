from __future__ import annotations

import asyncio

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from credit_ledger.main import create_app

from conftest import DEST_WALLET, PROJECT_WALLET, SOURCE_WALLET

CODE = "int add(int a, int b) {\n    // sum of both\n    return a + b;\n}\n"


@pytest_asyncio.fixture
async def client(settings):
    app = create_app(settings)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.state.settlement_engine.shutdown(wait=True)


async def _wait_verified(client: AsyncClient, transaction_id: str) -> bool:
    for _ in range(100):
        resp = await client.get(f"/api/payments/{transaction_id}/verification")
        if resp.json()["verified"]:
            return True
        await asyncio.sleep(0.02)
    return False


async def _create_contribution(client: AsyncClient, **overrides) -> dict:
    body = {"contributor": "alice", "file_id": "main.cpp", "line_start": 0, "line_end": 3, "code": CODE}
    body.update(overrides)
    resp = await client.post("/api/contributions", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.mark.asyncio
async def test_health_returns_ok(client: AsyncClient) -> None:
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert set(data) == {"status", "version", "timestamp", "uptime_seconds"}


@pytest.mark.asyncio
async def test_metrics_lists_all_kinds(client: AsyncClient) -> None:
    resp = await client.get("/api/metrics")
    assert resp.status_code == 200
    assert [row["kind"] for row in resp.json()] == [
        "impact",
        "simplicity",
        "cleanness",
        "comment",
        "creditability",
        "novelty",
    ]


@pytest.mark.asyncio
async def test_valuation_returns_six_evaluations_and_mean(client: AsyncClient) -> None:
    resp = await client.post("/api/valuations", json={"code": CODE})
    assert resp.status_code == 200
    data = resp.json()
    assert len(data["evaluations"]) == 6
    values = [row["value"] for row in data["evaluations"]]
    assert data["score"] == pytest.approx(sum(values) / 6)


@pytest.mark.asyncio
async def test_contribution_lifecycle(client: AsyncClient) -> None:
    created = await _create_contribution(client)
    assert len(created["evaluations"]) == 6
    assert 0.0 <= created["value"] <= 1.0

    resp = await client.get(f"/api/contributions/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["id"] == created["id"]

    resp = await client.get("/api/contributions", params={"file_id": "main.cpp"})
    assert [row["id"] for row in resp.json()] == [created["id"]]


@pytest.mark.asyncio
async def test_overlapping_contribution_conflicts(client: AsyncClient) -> None:
    await _create_contribution(client, line_start=100, line_end=200, code=None)
    await _create_contribution(client, contributor="bob", line_start=201, line_end=300, code=None)

    resp = await client.post(
        "/api/contributions",
        json={"contributor": "carol", "file_id": "main.cpp", "line_start": 150, "line_end": 250},
    )
    assert resp.status_code == 409
    assert "main.cpp" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_invalid_contribution_422(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/contributions",
        json={"contributor": "alice", "file_id": "main.cpp", "line_start": 10, "line_end": 5},
    )
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_unknown_contribution_404(client: AsyncClient) -> None:
    resp = await client.get("/api/contributions/missing")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Contribution not found"

    resp = await client.post(
        "/api/contributions/missing/evaluations",
        json={"kind": "impact", "value": 0.5, "rationale": "manual"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_attach_evaluation_replaces_same_kind(client: AsyncClient) -> None:
    created = await _create_contribution(client, code=None)
    url = f"/api/contributions/{created['id']}/evaluations"
    await client.post(url, json={"kind": "impact", "value": 0.75, "rationale": "first"})
    await client.post(url, json={"kind": "simplicity", "value": 0.85, "rationale": "second"})
    resp = await client.post(url, json={"kind": "impact", "value": 0.95, "rationale": "third"})

    data = resp.json()
    assert resp.status_code == 200
    assert len(data["evaluations"]) == 2
    assert data["value"] == pytest.approx(0.9)


@pytest.mark.asyncio
async def test_settle_contribution_credits_ledger(client: AsyncClient) -> None:
    created = await _create_contribution(client, line_start=0, line_end=99, code=None)
    await client.post(
        f"/api/contributions/{created['id']}/evaluations",
        json={"kind": "impact", "value": 0.5, "rationale": "manual"},
    )

    resp = await client.post(
        f"/api/contributions/{created['id']}/settlements",
        json={"source_wallet": SOURCE_WALLET, "destination_wallet": DEST_WALLET},
    )
    assert resp.status_code == 202, resp.text
    transaction = resp.json()
    assert transaction["amount"] == pytest.approx(0.5 * 100 * 0.00001)
    assert await _wait_verified(client, transaction["id"])

    for _ in range(100):
        ledger = (await client.get("/api/ledger")).json()
        if ledger["entries"]:
            break
        await asyncio.sleep(0.02)
    assert ledger["project_wallet"] == PROJECT_WALLET
    assert ledger["entries"] == [{"contributor": "alice", "total_paid": pytest.approx(0.0005)}]

    report = await client.get("/api/reports/payments")
    assert "alice: 0.00050000 BTC" in report.text


@pytest.mark.asyncio
async def test_payment_endpoints(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/payments",
        json={
            "source_wallet": SOURCE_WALLET,
            "destination_wallet": DEST_WALLET,
            "amount": 0.001,
            "contribution_id": "c-1",
        },
    )
    assert resp.status_code == 202
    transaction_id = resp.json()["id"]
    assert await _wait_verified(client, transaction_id)

    resp = await client.get(f"/api/payments/{transaction_id}")
    assert resp.status_code == 200
    assert resp.json()["verified"] is True

    resp = await client.get("/api/payments", params={"contribution_id": "c-1"})
    assert [row["id"] for row in resp.json()] == [transaction_id]

    assert (await client.get("/api/payments/missing")).status_code == 404
    resp = await client.get("/api/payments/missing/verification")
    assert resp.json() == {"transaction_id": "missing", "verified": False}


@pytest.mark.asyncio
async def test_payment_validation_422(client: AsyncClient) -> None:
    base = {"source_wallet": SOURCE_WALLET, "destination_wallet": DEST_WALLET, "contribution_id": "c-1"}
    resp = await client.post("/api/payments", json={**base, "amount": 0})
    assert resp.status_code == 422
    resp = await client.post("/api/payments", json={**base, "amount": 1.0, "destination_wallet": "1234567890"})
    assert resp.status_code == 422
    assert (await client.get("/api/payments")).json() == []


@pytest.mark.asyncio
async def test_license_info(client: AsyncClient) -> None:
    resp = await client.get("/api/license")
    assert resp.status_code == 200
    assert "Project: Credit Ledger" in resp.text
    assert "Validation Status: Valid" in resp.text


@pytest.mark.asyncio
async def test_subscription_endpoints(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/subscriptions",
        json={"contributor_id": "alice", "wallet_address": DEST_WALLET, "period_days": 30},
    )
    assert resp.status_code == 201
    assert resp.json()["period_days"] == 30

    assert len((await client.get("/api/subscriptions")).json()) == 1

    # first payment is a full period away
    resp = await client.post("/api/subscriptions/process", json={})
    assert resp.json() == {"processed": 0}

    assert (await client.delete("/api/subscriptions/alice")).status_code == 204
    assert (await client.delete("/api/subscriptions/alice")).status_code == 404


@pytest.mark.asyncio
async def test_subscription_validation_422(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/subscriptions",
        json={"contributor_id": "alice", "wallet_address": "bad", "period_days": 30},
    )
    assert resp.status_code == 422
    resp = await client.post(
        "/api/subscriptions",
        json={"contributor_id": "alice", "wallet_address": DEST_WALLET, "period_days": 0},
    )
    assert resp.status_code == 422

"""Integration tests for monthly health, transaction assessment and health analysis endpoints"""

from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from spendio_gateway.domain.exceptions import AIServiceRateLimitError


def add_txn(client: TestClient, user_id: str, tx_type: str, amount: float, day: str = "2026-03-10"):
    return client.post(
        f"/api/users/{user_id}/transactions",
        json={"type": tx_type, "amount": amount, "date": day, "category": tx_type},
    )


def seed_balanced_month(client: TestClient, user_id: str = "user_pro"):
    add_txn(client, user_id, "income", 3000)
    add_txn(client, user_id, "expense", 1200)
    add_txn(client, user_id, "savings", 400)
    add_txn(client, user_id, "investing", 200)
    add_txn(client, user_id, "debt_payment", 150)


def test_month_health_without_history(client: TestClient, pro_user: dict):
    seed_balanced_month(client)

    response = client.get("/api/users/user_pro/months/2026-03/health")

    assert response.status_code == 200
    data = response.json()
    assert data["health"]["total"] == 102
    assert data["trend"] is None
    assert [t["title"] for t in data["tips"]] == ["Excellent savings discipline"]


def test_month_health_with_trend(client: TestClient, pro_user: dict):
    seed_balanced_month(client)
    add_txn(client, "user_pro", "income", 1000, "2025-12-05")

    data = client.get("/api/users/user_pro/months/2026-03/health").json()

    assert data["trend"]["trend"] == "improving"
    assert data["trend"]["change_points"] == 57
    assert data["trend"]["expense_control"] == {"current": 25, "previous": 0, "change": 25}
    assert data["tips"][-1]["title"] == "Health score improved by 57 points"


def test_month_health_uses_previous_month(client: TestClient, pro_user: dict):
    seed_balanced_month(client)
    add_txn(client, "user_pro", "income", 3000, "2026-02-01")
    add_txn(client, "user_pro", "savings", 400, "2026-02-01")

    health = client.get("/api/users/user_pro/months/2026-03/health").json()["health"]

    assert health["income_score"] == 25
    assert health["adherence_score"] == 25


def test_month_health_empty_month(client: TestClient, free_user: dict):
    data = client.get("/api/users/user_free/months/2026-03/health").json()

    assert data["health"]["total"] == 0
    assert data["health"]["explanation"] == "No financial data recorded this month"


def test_month_health_rejects_bad_month(client: TestClient, free_user: dict):
    response = client.get("/api/users/user_free/months/2026-3/health")

    assert response.status_code == 400


def test_assess_large_expense(client: TestClient, pro_user: dict):
    add_txn(client, "user_pro", "income", 3000, "2026-03-01")

    response = client.post(
        "/api/users/user_pro/transactions/assess",
        json={"type": "expense", "amount": 2000, "date": "2026-03-15"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["risk_level"] == "red"
    assert data["should_warn"] is True
    assert "€2,000" in data["message"]

    listed = client.get("/api/users/user_pro/transactions", params={"month": "2026-03"}).json()
    assert len(listed["transactions"]) == 1


def test_assess_uses_the_transaction_month(client: TestClient, pro_user: dict):
    add_txn(client, "user_pro", "income", 3000, "2026-03-01")

    response = client.post(
        "/api/users/user_pro/transactions/assess",
        json={"type": "expense", "amount": 100, "date": "2026-04-02"},
    )

    assert response.json()["title"] == "No income recorded"


def test_assess_does_not_consume_quota(client: TestClient, free_user: dict):
    body = {"type": "income", "amount": 100, "date": "2026-03-02"}
    for _ in range(3):
        assert client.post("/api/users/user_free/transactions/assess", json=body).status_code == 200

    assert add_txn(client, "user_free", "income", 100).status_code == 201


@patch("spendio_gateway.infrastructure.clients.chat.ChatCompletionClient.complete")
def test_health_analysis_from_model(mock_complete: AsyncMock, client: TestClient, pro_user: dict):
    seed_balanced_month(client)
    mock_complete.return_value = 'Here you go: {"score": 74, "rating": "Good", "summary": "Solid"}'

    response = client.post("/api/users/user_pro/health-analysis")

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "ai"
    assert data["score"] == 74
    assert data["strengths"] == []

    messages = mock_complete.call_args.args[0]
    assert messages[0]["role"] == "system"
    assert "financial health of Alex" in messages[1]["content"]
    assert "- Income: EUR 3000.00" in messages[1]["content"]


@patch("spendio_gateway.infrastructure.clients.chat.ChatCompletionClient.complete")
def test_health_analysis_falls_back_on_upstream_error(mock_complete: AsyncMock, client: TestClient, pro_user: dict):
    seed_balanced_month(client)
    mock_complete.side_effect = AIServiceRateLimitError("429")

    response = client.post("/api/users/user_pro/health-analysis")

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "fallback"
    assert data["rating"] in ("Poor", "Fair", "Good", "Excellent")
    assert data["weaknesses"] == ["Opportunity to build more wealth"]


@patch("spendio_gateway.infrastructure.clients.chat.ChatCompletionClient.complete")
def test_health_analysis_falls_back_on_bad_reply(mock_complete: AsyncMock, client: TestClient, free_user: dict):
    mock_complete.return_value = "No JSON here."

    response = client.post("/api/users/user_free/health-analysis")

    assert response.status_code == 200
    assert response.json()["source"] == "fallback"
    assert response.json()["score"] == 60


def test_health_analysis_unknown_user(client: TestClient):
    response = client.post("/api/users/ghost/health-analysis")

    assert response.status_code == 404

"""Integration tests for users, transactions and monthly metrics endpoints"""

from fastapi.testclient import TestClient


def add_txn(client: TestClient, user_id: str, tx_type: str, amount: float, day: str = "2026-03-10"):
    return client.post(
        f"/api/users/{user_id}/transactions",
        json={"type": tx_type, "amount": amount, "date": day, "category": tx_type},
    )


def test_create_and_get_user(client: TestClient, free_user: dict):
    assert free_user["plan"] == "free"

    response = client.get("/api/users/user_free")
    assert response.status_code == 200
    assert response.json()["email"] == "user_free@example.com"


def test_duplicate_user_conflict(client: TestClient, free_user: dict):
    response = client.post(
        "/api/users",
        json={"user_id": "user_free", "email": "other@example.com"},
    )
    assert response.status_code == 409


def test_unknown_user_is_404(client: TestClient):
    response = client.get("/api/users/ghost/months/2026-03/metrics")
    assert response.status_code == 404
    assert response.json() == {"error": "User not found"}


def test_free_user_limited_to_one_per_category(client: TestClient, free_user: dict):
    assert add_txn(client, "user_free", "income", 3000).status_code == 201

    response = add_txn(client, "user_free", "income", 200)
    assert response.status_code == 403
    assert "Upgrade to Pro" in response.json()["error"]

    # Other categories still open
    assert add_txn(client, "user_free", "expense", 900).status_code == 201


def test_free_quota_resets_each_month(client: TestClient, free_user: dict):
    assert add_txn(client, "user_free", "income", 3000, "2026-03-01").status_code == 201
    assert add_txn(client, "user_free", "income", 3000, "2026-04-01").status_code == 201


def test_income_sources_share_the_income_allowance(client: TestClient, free_user: dict):
    created = add_txn(client, "user_free", "salary", 1000)
    assert created.status_code == 201
    assert created.json()["type"] == "income"

    assert add_txn(client, "user_free", "salary", 1000).status_code == 403
    assert add_txn(client, "user_free", "Freelance", 1000).status_code == 403
    assert add_txn(client, "user_free", "income", 1000).status_code == 403

    quota = client.get("/api/users/user_free/months/2026-03/quota").json()
    assert quota["counts"]["income"] == 1
    assert quota["can_add"]["income"] is False

    metrics = client.get("/api/users/user_free/months/2026-03/metrics").json()
    assert metrics["totals"]["income"] == 1000
    assert client.get("/api/users/user_free/snapshot").json()["cash"] == 1000


def test_emergency_fund_consumes_savings_allowance(client: TestClient, free_user: dict):
    assert add_txn(client, "user_free", "emergency_fund", 100).status_code == 201
    assert add_txn(client, "user_free", "savings", 100).status_code == 403


def test_untracked_types_skip_quota(client: TestClient, free_user: dict):
    assert add_txn(client, "user_free", "cash_adjustment", 50).status_code == 201
    assert add_txn(client, "user_free", "cash_adjustment", 50).status_code == 201


def test_user_without_subscription_gets_free_quota(client: TestClient, create_user):
    create_user("user_none", None)

    assert add_txn(client, "user_none", "debt_payment", 100).status_code == 201
    assert add_txn(client, "user_none", "debt_payment", 100).status_code == 403


def test_pro_user_unlimited(client: TestClient, pro_user: dict):
    for _ in range(5):
        assert add_txn(client, "user_pro", "expense", 10).status_code == 201


def test_upgrade_lifts_quota(client: TestClient, free_user: dict):
    add_txn(client, "user_free", "investing", 100)
    assert add_txn(client, "user_free", "investing", 100).status_code == 403

    response = client.put("/api/users/user_free/subscription", json={"status": "pro"})
    assert response.json()["plan"] == "pro"

    assert add_txn(client, "user_free", "investing", 100).status_code == 201


def test_quota_endpoint(client: TestClient, free_user: dict):
    add_txn(client, "user_free", "income", 3000)
    add_txn(client, "user_free", "debt_payment", 150)

    response = client.get("/api/users/user_free/months/2026-03/quota")

    assert response.status_code == 200
    data = response.json()
    assert data["plan"] == "free"
    assert data["limit"] == 1
    assert data["counts"] == {"income": 1, "expenses": 0, "savings": 0, "investing": 0, "debts": 1}
    assert data["can_add"] == {
        "income": False,
        "expenses": True,
        "savings": True,
        "investing": True,
        "debt": False,
    }


def test_quota_endpoint_pro_has_no_limit(client: TestClient, pro_user: dict):
    data = client.get("/api/users/user_pro/months/2026-03/quota").json()

    assert data["plan"] == "pro"
    assert data["limit"] is None
    assert all(data["can_add"].values())


def test_transactions_listed_by_month(client: TestClient, pro_user: dict):
    add_txn(client, "user_pro", "income", 3000, "2026-03-01")
    add_txn(client, "user_pro", "expense", 40, "2026-03-20")
    add_txn(client, "user_pro", "expense", 55, "2026-04-02")

    response = client.get("/api/users/user_pro/transactions", params={"month": "2026-03"})

    assert response.status_code == 200
    txns = response.json()["transactions"]
    assert [t["date"] for t in txns] == ["2026-03-20", "2026-03-01"]


def test_invalid_month(client: TestClient, pro_user: dict):
    response = client.get("/api/users/user_pro/transactions", params={"month": "March"})
    assert response.status_code == 400


def test_transactions_move_snapshot(client: TestClient, pro_user: dict):
    client.put("/api/users/user_pro/snapshot", json={"cash": 1000, "emergency": 200})

    add_txn(client, "user_pro", "income", 500)
    created = add_txn(client, "user_pro", "expense", 300).json()
    add_txn(client, "user_pro", "emergency_fund", 100)

    snapshot = client.get("/api/users/user_pro/snapshot").json()
    assert snapshot["cash"] == 1200
    assert snapshot["emergency"] == 300

    response = client.delete(f"/api/users/user_pro/transactions/{created['transaction_id']}")
    assert response.status_code == 204
    assert client.get("/api/users/user_pro/snapshot").json()["cash"] == 1500


def test_delete_missing_transaction(client: TestClient, pro_user: dict):
    response = client.delete("/api/users/user_pro/transactions/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404

    response = client.delete("/api/users/user_pro/transactions/not-a-uuid")
    assert response.status_code == 400


def test_month_metrics(client: TestClient, pro_user: dict):
    client.put("/api/users/user_pro/snapshot", json={"cash": 2000, "emergency": 1200})
    for tx_type, amount in [
        ("income", 1000),
        ("expense", 400),
        ("savings", 200),
        ("investing", 100),
        ("debt_payment", 50),
    ]:
        add_txn(client, "user_pro", tx_type, amount)

    response = client.get("/api/users/user_pro/months/2026-03/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["totals"]["net"] == 250
    assert data["metrics"] == {
        "cashflow_ratio": 75.0,
        "wealth_rate": 30.0,
        "debt_ratio": 5.0,
        "emergency_fund_months": 3.0,
    }
    assert data["counts"]["debts"] == 1
    assert 0 <= data["health"]["score"] <= 100
    assert data["health"]["label"]
    assert data["actions"]


def test_empty_month_metrics(client: TestClient, free_user: dict):
    response = client.get("/api/users/user_free/months/2026-03/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["metrics"]["cashflow_ratio"] == 0
    assert data["health"]["score"] == 0
    assert data["actions"][0]["title"] == "Get Started with Your Finances"


def test_free_user_sees_limited_actions(client: TestClient, free_user: dict):
    for tx_type, amount in [("income", 1000), ("expense", 400), ("savings", 200), ("investing", 100)]:
        add_txn(client, "user_free", tx_type, amount)

    response = client.get("/api/users/user_free/months/2026-03/metrics")

    assert len(response.json()["actions"]) <= 2


def test_financial_context_endpoint(client: TestClient, pro_user: dict):
    client.put("/api/users/user_pro/targets", json={"savings": 300, "investing": 150})
    client.post("/api/users/user_pro/debts", json={"name": "Car loan", "total": 8000, "monthly": 50})
    add_txn(client, "user_pro", "income", 1000)

    response = client.get("/api/users/user_pro/months/2026-03/context")

    assert response.status_code == 200
    context = response.json()["financial_context"]
    assert "Current Month: 2026-03" in context
    assert "- Income: 1000" in context
    assert "- Car loan: 8000 total, 50/month" in context
    assert "- Savings Target: 300" in context


def test_debts_and_targets_round_trip(client: TestClient, free_user: dict):
    assert client.get("/api/users/user_free/targets").json() == {"savings": 0, "investing": 0}

    created = client.post(
        "/api/users/user_free/debts",
        json={"name": "Card", "total": 1500, "monthly": 75, "type": "credit_card"},
    )
    assert created.status_code == 201

    debts = client.get("/api/users/user_free/debts").json()
    assert [d["name"] for d in debts] == ["Card"]

    deleted = client.delete(f"/api/users/user_free/debts/{created.json()['debt_id']}")
    assert deleted.status_code == 204
    assert client.get("/api/users/user_free/debts").json() == []
    assert client.delete("/api/users/user_free/debts/not-a-uuid").status_code == 400


def test_snapshot_history_newest_first(client: TestClient, free_user: dict):
    client.put("/api/users/user_free/snapshot", json={"cash": 100})
    client.put("/api/users/user_free/snapshot", json={"cash": 200})

    history = client.get("/api/users/user_free/snapshot/history").json()
    assert [s["cash"] for s in history] == [200, 100]

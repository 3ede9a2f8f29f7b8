"""HTTP surface: routing, auth and error mapping."""

import pytest


async def _create_account(client, headers, name="Checking", type="debit"):
    response = await client.post("/accounts/", json={"name": name, "type": type, "currency": "MXN"}, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health_check/")

    assert response.status_code == 200
    assert response.json() == {"service_name": "Finance Ledger", "status": "healthy"}


@pytest.mark.asyncio
async def test_missing_or_bad_token_is_401(client):
    response = await client.get("/accounts/")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"

    response = await client.get("/accounts/", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_account_starts_at_zero_and_moves_with_transactions(client, factory, auth_headers):
    food = await factory.category("Food")
    account = await _create_account(client, auth_headers)
    assert account["current_balance"] == 0

    response = await client.post("/transactions/", json={
        "account_id": account["id"],
        "category_id": food.id,
        "description": "Groceries",
        "amount": -2500,
        "currency": "MXN",
        "date": "2024-01-10",
    }, headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["source"] == "manual"

    response = await client.get(f"/accounts/{account['id']}", headers=auth_headers)
    assert response.json()["current_balance"] == -2500

    response = await client.get(f"/accounts/{account['id']}/reconcile", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["expected_balance"] == -2500


@pytest.mark.asyncio
async def test_domain_validation_is_400(client, factory, auth_headers):
    food = await factory.category("Food")
    account = await _create_account(client, auth_headers)

    response = await client.post("/transactions/", json={
        "account_id": account["id"],
        "category_id": food.id,
        "description": "Refund booked as expense",
        "amount": 2500,
        "currency": "MXN",
        "date": "2024-01-10",
    }, headers=auth_headers)

    assert response.status_code == 400
    assert response.json() == {"detail": "Expense transactions must have a negative amount"}


@pytest.mark.asyncio
async def test_other_owners_rows_are_404(client, auth_headers, other_auth_headers):
    account = await _create_account(client, auth_headers)

    response = await client.get(f"/accounts/{account['id']}", headers=other_auth_headers)
    assert response.status_code == 404

    response = await client.get("/accounts/", headers=other_auth_headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_duplicate_statement_close_is_409(client, auth_headers):
    card = await _create_account(client, auth_headers, name="Gold Card", type="credit_card")
    response = await client.put(
        f"/accounts/{card['id']}/credit-card-settings",
        json={"statement_day": 15, "grace_days": 20},
        headers=auth_headers,
    )
    assert response.status_code == 200

    payload = {
        "account_id": card["id"],
        "period_start": "2024-01-01",
        "period_end": "2024-01-15",
        "closing_date": "2024-01-15",
    }
    first = await client.post("/statements/close", json=payload, headers=auth_headers)
    second = await client.post("/statements/close", json=payload, headers=auth_headers)

    assert first.status_code == 201
    assert first.json()["due_date"] == "2024-02-04"
    assert second.status_code == 409

    response = await client.get("/statements/", params={"account_id": card["id"]}, headers=auth_headers)
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_budget_month_flow(client, factory, auth_headers):
    food = await factory.category("Food")
    buffer = await factory.category("Buffer", kind="savings")

    response = await client.post(
        "/budget-periods/",
        json={"month": "2024-01", "currency": "MXN", "expected_income_amount": 100000},
        headers=auth_headers,
    )
    period = response.json()
    again = await client.post("/budget-periods/", json={"month": "2024-01", "currency": "MXN"}, headers=auth_headers)
    assert again.json()["id"] == period["id"]
    assert again.json()["expected_income_amount"] == 100000

    for order, (category_id, rule_type, value) in enumerate(
        [(food.id, "fixed", 18000), (buffer.id, "percent_of_income", 1000)]
    ):
        response = await client.post("/budget-rules/", json={
            "name": f"rule {order}",
            "category_id": category_id,
            "rule_type": rule_type,
            "value": value,
            "apply_order": order,
        }, headers=auth_headers)
        assert response.status_code == 201

    response = await client.post(f"/budget-periods/{period['id']}/allocations/generate", headers=auth_headers)
    assert response.status_code == 200
    assert {row["category_id"]: row["planned_amount"] for row in response.json()} == {
        food.id: 18000,
        buffer.id: 8200,
    }

    response = await client.get("/budget-periods/by-month/2024-02", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_installment_preview_writes_nothing(client, auth_headers):
    card = await _create_account(client, auth_headers, name="Gold Card", type="credit_card")

    response = await client.post("/installment-plans/preview", json={
        "account_id": card["id"],
        "category_id": 1,
        "description": "Phone",
        "total_amount": 1000,
        "currency": "MXN",
        "months": 3,
        "start_date": "2024-01-31",
    }, headers=auth_headers)

    assert response.status_code == 200
    assert [row["amount"] for row in response.json()] == [334, 333, 333]
    assert [row["month"] for row in response.json()] == ["2024-01", "2024-02", "2024-03"]

    response = await client.get("/installment-plans/", headers=auth_headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_unknown_account_type_is_rejected(client, auth_headers):
    response = await client.post(
        "/accounts/", json={"name": "Wallet", "type": "crypto", "currency": "MXN"}, headers=auth_headers
    )

    assert response.status_code == 422
    response = await client.get("/accounts/", headers=auth_headers)
    assert response.json() == []

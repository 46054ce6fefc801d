# tests/test_api.py
import uuid

import pytest


async def first_wallet(client, headers):
    response = await client.get("/api/v1/wallets", headers=headers)
    assert response.status_code == 200
    return response.json()[0]


async def category_named(client, headers, name, type):
    response = await client.get("/api/v1/categories", params={"type": type}, headers=headers)
    assert response.status_code == 200
    return next(c for c in response.json() if c["name"] == name)


@pytest.mark.asyncio
async def test_root_and_auth_flow(client, auth_headers):
    response = await client.get("/")
    assert response.status_code == 200

    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["email"] == "chi@example.com"

    response = await client.post(
        "/api/v1/auth/login", json={"email": "chi@example.com", "password": "secret123"}
    )
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"

    response = await client.post(
        "/api/v1/auth/login", json={"email": "chi@example.com", "password": "nope-nope"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_requests_without_token_are_rejected(client):
    response = await client.get("/api/v1/wallets")
    assert response.status_code == 401

    response = await client.get("/api/v1/wallets", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_transaction_lifecycle_over_http(client, auth_headers):
    wallet = await first_wallet(client, auth_headers)
    salary = await category_named(client, auth_headers, "Lương", "income")
    food = await category_named(client, auth_headers, "Ăn uống", "expense")

    response = await client.post(
        "/api/v1/transactions",
        json={"wallet_id": wallet["id"], "category_id": salary["id"], "type": "income", "amount": "1000"},
        headers=auth_headers,
    )
    assert response.status_code == 201

    response = await client.post(
        "/api/v1/transactions",
        json={"wallet_id": wallet["id"], "category_id": food["id"], "type": "expense", "amount": "5000"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "insufficient_balance"

    response = await client.post(
        "/api/v1/transactions",
        json={"wallet_id": wallet["id"], "category_id": food["id"], "type": "income", "amount": "10"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["code"] == "type_mismatch"

    response = await client.post(
        "/api/v1/transactions",
        json={"wallet_id": wallet["id"], "category_id": food["id"], "type": "expense", "amount": "100"},
        headers=auth_headers,
    )
    tx_id = response.json()["id"]
    response = await client.patch(
        f"/api/v1/transactions/{tx_id}", json={"amount": "150"}, headers=auth_headers
    )
    assert response.status_code == 200

    response = await client.get(f"/api/v1/wallets/{wallet['id']}", headers=auth_headers)
    assert float(response.json()["balance"]) == 850

    response = await client.get("/api/v1/transactions", params={"type": "expense"}, headers=auth_headers)
    page = response.json()
    assert page["total"] == 1
    assert page["total_pages"] == 1

    response = await client.get(f"/api/v1/wallets/{wallet['id']}/reconcile", headers=auth_headers)
    assert float(response.json()["drift"]) == 0

    response = await client.delete(f"/api/v1/transactions/{tx_id}", headers=auth_headers)
    assert response.status_code == 204
    response = await client.get(f"/api/v1/transactions/{tx_id}", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_other_users_resources_are_forbidden(client, auth_headers):
    wallet = await first_wallet(client, auth_headers)

    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "khoa@example.com", "name": "Khoa", "password": "secret123"},
    )
    other_headers = {"Authorization": f"Bearer {response.json()['access_token']}"}

    response = await client.get(f"/api/v1/wallets/{wallet['id']}", headers=other_headers)
    assert response.status_code == 403
    response = await client.get(f"/api/v1/wallets/{uuid.uuid4()}", headers=other_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_debt_endpoints(client, auth_headers):
    response = await client.post(
        "/api/v1/debts",
        json={"type": "lend", "person_name": "Lan", "amount": "1000"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    debt_id = response.json()["id"]

    response = await client.post(
        f"/api/v1/debts/{debt_id}/payments", json={"amount": "1000"}, headers=auth_headers
    )
    assert response.status_code == 201
    assert response.json()["debt"]["status"] == "completed"
    payment_id = response.json()["payment"]["id"]

    response = await client.post(
        f"/api/v1/debts/{debt_id}/payments", json={"amount": "1"}, headers=auth_headers
    )
    assert response.json()["code"] == "invalid_state"

    response = await client.delete(f"/api/v1/debts/{debt_id}/payments/{payment_id}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "pending"

    response = await client.get("/api/v1/dashboard/summary", headers=auth_headers)
    assert float(response.json()["debts"]["total_lending"]) == 1000


@pytest.mark.asyncio
async def test_goal_endpoints(client, auth_headers):
    wallet = await first_wallet(client, auth_headers)
    salary = await category_named(client, auth_headers, "Lương", "income")
    await client.post(
        "/api/v1/transactions",
        json={"wallet_id": wallet["id"], "category_id": salary["id"], "type": "income", "amount": "1000"},
        headers=auth_headers,
    )

    response = await client.post(
        "/api/v1/goals", json={"name": "Du lịch", "target_amount": "500"}, headers=auth_headers
    )
    assert response.status_code == 201
    goal_id = response.json()["id"]

    response = await client.post(
        f"/api/v1/goals/{goal_id}/contributions",
        json={"wallet_id": wallet["id"], "amount": "500"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    assert response.json()["status"] == "completed"

    response = await client.post(
        f"/api/v1/goals/{goal_id}/contributions",
        json={"wallet_id": wallet["id"], "amount": "1"},
        headers=auth_headers,
    )
    assert response.json()["code"] == "exceeds_target"

    response = await client.delete(f"/api/v1/goals/{goal_id}", headers=auth_headers)
    assert response.status_code == 200
    assert float(response.json()["refunds"][wallet["id"]]) == 500

    response = await client.get(f"/api/v1/wallets/{wallet['id']}", headers=auth_headers)
    assert float(response.json()["balance"]) == 1000


@pytest.mark.asyncio
async def test_null_name_leaves_category_unchanged(client, auth_headers):
    food = await category_named(client, auth_headers, "Ăn uống", "expense")

    response = await client.patch(
        f"/api/v1/categories/{food['id']}", json={"name": None, "color": "#ff0000"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Ăn uống"
    assert response.json()["color"] == "#ff0000"


@pytest.mark.asyncio
async def test_null_name_leaves_wallet_unchanged(client, auth_headers):
    wallet = await first_wallet(client, auth_headers)

    response = await client.patch(f"/api/v1/wallets/{wallet['id']}", json={"name": None}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == wallet["name"]


@pytest.mark.asyncio
async def test_null_person_name_leaves_debt_unchanged(client, auth_headers):
    response = await client.post(
        "/api/v1/debts",
        json={"type": "borrow", "person_name": "Lan", "amount": "200", "description": "Tiền ăn"},
        headers=auth_headers,
    )
    debt_id = response.json()["id"]

    response = await client.patch(
        f"/api/v1/debts/{debt_id}", json={"person_name": None, "description": None}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["person_name"] == "Lan"
    assert response.json()["description"] is None


@pytest.mark.asyncio
async def test_null_name_leaves_goal_unchanged(client, auth_headers):
    response = await client.post(
        "/api/v1/goals", json={"name": "Du lịch", "target_amount": "500"}, headers=auth_headers
    )
    goal_id = response.json()["id"]

    response = await client.patch(
        f"/api/v1/goals/{goal_id}", json={"name": None, "target_amount": None}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Du lịch"
    assert float(response.json()["target_amount"]) == 500


@pytest.mark.asyncio
async def test_dashboard_reports(client, auth_headers):
    wallet = await first_wallet(client, auth_headers)
    salary = await category_named(client, auth_headers, "Lương", "income")
    food = await category_named(client, auth_headers, "Ăn uống", "expense")
    for category, type, amount in ((salary, "income", "1000"), (food, "expense", "300"), (food, "expense", "200")):
        response = await client.post(
            "/api/v1/transactions",
            json={"wallet_id": wallet["id"], "category_id": category["id"], "type": type, "amount": amount},
            headers=auth_headers,
        )
        assert response.status_code == 201

    response = await client.get("/api/v1/dashboard/trends", params={"months": 1}, headers=auth_headers)
    assert response.status_code == 200
    [month] = response.json()
    assert float(month["income"]) == 1000
    assert float(month["balance"]) == 500

    response = await client.get(
        "/api/v1/dashboard/category-breakdown", params={"type": "expense"}, headers=auth_headers
    )
    assert response.status_code == 200
    [item] = response.json()["breakdown"]
    assert item["category_name"] == "Ăn uống"
    assert item["count"] == 2
    assert float(response.json()["total_amount"]) == 500

    response = await client.get(
        "/api/v1/dashboard/category-breakdown", params={"period": "2024-13"}, headers=auth_headers
    )
    assert response.status_code == 422

    response = await client.get("/api/v1/dashboard/recent-transactions", params={"limit": 2}, headers=auth_headers)
    assert response.status_code == 200
    assert len(response.json()) == 2
    assert response.json()[0]["wallet_name"] == wallet["name"]


@pytest.mark.asyncio
async def test_profile_endpoint(client, auth_headers):
    response = await client.put(
        "/api/v1/auth/profile",
        json={"name": "Chi Tran", "current_password": "secret123", "new_password": "newsecret"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Chi Tran"

    response = await client.post(
        "/api/v1/auth/login", json={"email": "chi@example.com", "password": "newsecret"}
    )
    assert response.status_code == 200

    await client.post(
        "/api/v1/auth/register",
        json={"email": "khoa@example.com", "name": "Khoa", "password": "secret123"},
    )
    response = await client.put(
        "/api/v1/auth/profile", json={"email": "khoa@example.com"}, headers=auth_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_state"

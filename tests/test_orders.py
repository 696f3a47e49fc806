"""Tests for the order lifecycle: escrow, delivery, confirmation and payout."""
import pytest
from sqlalchemy import event

from conftest import VALORANT_LISTING, load_user, register, set_balance
from monlyking.core.database import AsyncSessionLocal, engine
from monlyking.models import User

CREDENTIALS = {
    "username": "immortal_main",
    "email": "immortal.main@monlyking.gg",
    "password": "hunter22",
    "additional_info": "Email change is unlocked",
}


async def place_order(client, buyer, listing):
    await set_balance(buyer["id"], 1500)
    response = await client.post(
        "/api/v1/orders/",
        json={"account_id": listing["id"]},
        headers=buyer["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()


async def deliver(client, seller, order):
    response = await client.post(
        f"/api/v1/orders/{order['id']}/account-details",
        json=CREDENTIALS,
        headers=seller["headers"],
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_purchase_moves_funds_into_escrow(client, buyer, seller, listing):
    order = await place_order(client, buyer, listing)

    assert order["status"] == "escrow"
    assert order["amount"] == 1000
    assert order["escrow_amount"] == 1000
    assert order["reference"].startswith("GV-")
    assert order["commission"] is None

    buyer_row = await load_user(buyer["id"])
    assert buyer_row.wallet_balance == 500

    response = await client.get(f"/api/v1/listings/{listing['id']}")
    assert response.json()["status"] == "pending"

    response = await client.get("/api/v1/wallet/", headers=buyer["headers"])
    transactions = response.json()["transactions"]
    assert transactions[0]["type"] == "purchase"
    assert transactions[0]["amount"] == -1000


@pytest.mark.asyncio
async def test_cannot_buy_own_listing(client, seller, listing):
    await set_balance(seller["id"], 5000)
    response = await client.post(
        "/api/v1/orders/",
        json={"account_id": listing["id"]},
        headers=seller["headers"],
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot purchase your own account"


@pytest.mark.asyncio
async def test_insufficient_balance(client, buyer, listing):
    await set_balance(buyer["id"], 999.99)
    response = await client.post(
        "/api/v1/orders/",
        json={"account_id": listing["id"]},
        headers=buyer["headers"],
    )
    assert response.status_code == 400
    assert "Insufficient wallet balance" in response.json()["detail"]

    buyer_row = await load_user(buyer["id"])
    assert float(buyer_row.wallet_balance) == 999.99


@pytest.mark.asyncio
async def test_listing_cannot_be_bought_twice(client, buyer, listing):
    await place_order(client, buyer, listing)
    response = await client.post(
        "/api/v1/orders/",
        json={"account_id": listing["id"]},
        headers=buyer["headers"],
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_unknown_listing(client, buyer):
    await set_balance(buyer["id"], 1000)
    response = await client.post("/api/v1/orders/", json={"account_id": 999}, headers=buyer["headers"])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_full_lifecycle_pays_seller_once(client, buyer, seller, listing):
    order = await place_order(client, buyer, listing)

    response = await client.post(f"/api/v1/orders/{order['id']}/start-delivery", headers=seller["headers"])
    assert response.status_code == 200
    assert response.json()["status"] == "delivering"

    order = await deliver(client, seller, order)
    assert order["status"] == "awaiting_confirmation"
    assert order["account_details"]["username"] == "immortal_main"
    assert order["account_details"]["phone_number"] is None

    response = await client.post(f"/api/v1/orders/{order['id']}/confirm", headers=buyer["headers"])
    assert response.status_code == 200
    confirmed = response.json()
    assert confirmed["status"] == "delivered"
    assert confirmed["commission"] == 50
    assert confirmed["seller_payout"] == 950
    assert confirmed["delivered_at"] is not None

    seller_row = await load_user(seller["id"])
    assert seller_row.wallet_balance == 950
    assert seller_row.total_trades == 1

    # a second confirmation is rejected and pays nothing
    response = await client.post(f"/api/v1/orders/{order['id']}/confirm", headers=buyer["headers"])
    assert response.status_code == 409

    seller_row = await load_user(seller["id"])
    assert seller_row.wallet_balance == 950

    response = await client.get(f"/api/v1/listings/{listing['id']}")
    assert response.json()["status"] == "sold"


@pytest.mark.asyncio
async def test_confirmation_recalculates_levels(client, buyer, seller, listing):
    order = await place_order(client, buyer, listing)
    await deliver(client, seller, order)
    await client.post(f"/api/v1/orders/{order['id']}/confirm", headers=buyer["headers"])

    for party in (buyer, seller):
        response = await client.get(f"/api/v1/users/{party['id']}")
        profile = response.json()
        # 1000 EGP crosses the 500 threshold of level 2 but not the 2000 of level 3
        assert profile["level"] == 2
        assert profile["level_progress"]["total_transaction_value"] == 1000


@pytest.mark.asyncio
async def test_details_can_be_sent_straight_from_escrow(client, buyer, seller, listing):
    order = await place_order(client, buyer, listing)
    order = await deliver(client, seller, order)
    assert order["status"] == "awaiting_confirmation"


@pytest.mark.asyncio
async def test_confirm_before_delivery_rejected(client, buyer, listing):
    order = await place_order(client, buyer, listing)
    response = await client.post(f"/api/v1/orders/{order['id']}/confirm", headers=buyer["headers"])
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_only_parties_act_on_order(client, buyer, seller, listing):
    order = await place_order(client, buyer, listing)

    response = await client.post(
        f"/api/v1/orders/{order['id']}/account-details",
        json=CREDENTIALS,
        headers=buyer["headers"],
    )
    assert response.status_code == 403

    await deliver(client, seller, order)
    response = await client.post(f"/api/v1/orders/{order['id']}/confirm", headers=seller["headers"])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_order_visibility(client, buyer, seller, admin, listing):
    order = await place_order(client, buyer, listing)
    outsider = await register(client, "outsider")

    for party in (buyer, seller, admin):
        response = await client.get(f"/api/v1/orders/{order['id']}", headers=party["headers"])
        assert response.status_code == 200

    response = await client.get(f"/api/v1/orders/{order['id']}", headers=outsider["headers"])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_orders_by_role(client, buyer, seller, listing):
    await place_order(client, buyer, listing)

    response = await client.get("/api/v1/orders/", params={"role": "buyer"}, headers=buyer["headers"])
    assert response.json()["total"] == 1

    response = await client.get("/api/v1/orders/", params={"role": "seller"}, headers=buyer["headers"])
    assert response.json()["total"] == 0

    response = await client.get("/api/v1/orders/", headers=seller["headers"])
    assert response.json()["total"] == 1


async def confirmed_order(client, buyer, seller, listing):
    response = await client.post("/api/v1/orders/", json={"account_id": listing["id"]}, headers=buyer["headers"])
    assert response.status_code == 201, response.text
    order = response.json()
    await deliver(client, seller, order)
    response = await client.post(f"/api/v1/orders/{order['id']}/confirm", headers=buyer["headers"])
    assert response.status_code == 200, response.text
    return response.json()


@pytest.mark.asyncio
async def test_crosswise_confirmations_lock_users_in_id_order(client, buyer, seller, listing):
    response = await client.post("/api/v1/listings/", json=VALORANT_LISTING, headers=buyer["headers"])
    buyer_listing = response.json()
    await set_balance(buyer["id"], 1500)
    await set_balance(seller["id"], 1500)

    statements = []

    def capture(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine.sync_engine, "before_cursor_execute", capture)
    try:
        # each user is the seller of one order and the buyer of the other
        await confirmed_order(client, buyer, seller, listing)
        await confirmed_order(client, seller, buyer, buyer_listing)
    finally:
        event.remove(engine.sync_engine, "before_cursor_execute", capture)

    party_locks = [
        s for s in statements
        if s.lstrip().startswith("SELECT") and "FROM users" in s and " IN (" in s
    ]
    assert len(party_locks) == 2
    assert all("ORDER BY users.id" in s for s in party_locks)

    assert (await load_user(buyer["id"])).wallet_balance == 1450
    assert (await load_user(seller["id"])).wallet_balance == 1450


@pytest.mark.asyncio
async def test_level_is_summed_from_every_settled_order(client, buyer, seller, admin, listing):
    response = await client.post("/api/v1/listings/", json=VALORANT_LISTING, headers=seller["headers"])
    second_listing = response.json()
    await set_balance(buyer["id"], 2000)

    await confirmed_order(client, buyer, seller, listing)
    await confirmed_order(client, buyer, seller, second_listing)

    response = await client.get(f"/api/v1/users/{buyer['id']}")
    profile = response.json()
    assert profile["level"] == 3
    assert profile["level_progress"]["total_transaction_value"] == 2000

    # a stale stored level is replaced by the recomputed one, not added to
    async with AsyncSessionLocal() as session:
        row = await session.get(User, buyer["id"])
        row.level = 7
        row.total_transaction_value = 99999
        await session.commit()

    for _ in range(2):
        response = await client.post(
            f"/api/v1/admin/users/{buyer['id']}/recalculate-level",
            headers=admin["headers"],
        )
        assert response.status_code == 200
        assert response.json()["level"] == 3
        assert response.json()["total_transaction_value"] == 2000

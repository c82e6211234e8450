"""HTTP tests for the POS cart routes, plus versioned cart saves."""

import asyncio

import pytest
from fastapi import HTTPException

from aymur.pos.repository import MongoCartRepository
from aymur.pos.service import CartService
from tests.fakes import FakeDatabase, InMemoryCartRepository

STAFF = {"X-Test-Role": "staff"}
MANAGER = {"X-Test-Role": "manager"}
OWNER = {"X-Test-Role": "owner"}
FINANCE = {"X-Test-Role": "finance"}


def add(client, item, headers=STAFF, **params):
    response = client.post("/pos/cart/items", json=item, headers=headers, params=params)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestAccess:

    def test_no_role_is_forbidden(self, client):
        response = client.get("/pos/cart")
        assert response.status_code == 403
        body = response.json()
        assert body["success"] is False
        assert body["error"]["message"] == "Permission denied. Requires: sales.create"

    def test_finance_cannot_sell_by_default(self, client):
        assert client.get("/pos/cart", headers=FINANCE).status_code == 403

    def test_override_grants_sales_to_finance(self, client):
        headers = {**FINANCE, "X-Test-Overrides": '{"sales.create": true}'}
        assert client.get("/pos/cart", headers=headers).status_code == 200

    def test_override_revokes_sales_from_staff(self, client):
        headers = {**STAFF, "X-Test-Overrides": '{"sales.create": false}'}
        assert client.get("/pos/cart", headers=headers).status_code == 403

    def test_owner_ignores_revoking_overrides(self, client):
        headers = {**OWNER, "X-Test-Overrides": '{"sales.create": false}'}
        assert client.get("/pos/cart", headers=headers).status_code == 200

    def test_staff_cannot_discount(self, client, catalog_ring):
        data = add(client, catalog_ring)
        response = client.put(
            f"/pos/cart/items/{data['line_id']}/discount",
            json={"type": "percentage", "value": 10},
            headers=STAFF,
        )
        assert response.status_code == 403
        response = client.put("/pos/cart/discount", json={"type": "fixed", "value": 5}, headers=STAFF)
        assert response.status_code == 403

    def test_manager_can_discount(self, client, catalog_ring):
        data = add(client, catalog_ring, headers=MANAGER)
        response = client.put(
            f"/pos/cart/items/{data['line_id']}/discount",
            json={"type": "percentage", "value": 10},
            headers=MANAGER,
        )
        assert response.status_code == 200
        assert response.json()["data"]["totals"]["subtotal"] == pytest.approx(90)


class TestCartRoutes:

    def test_empty_cart(self, client):
        response = client.get("/pos/cart", headers=STAFF)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["items"] == []
        assert data["totals"]["grand_total"] == 0

    def test_add_coalesces_and_persists(self, client, cart_repository, catalog_ring):
        first = add(client, catalog_ring)
        second = add(client, {**catalog_ring, "quantity": 2})

        assert first["line_id"] == second["line_id"]
        cart = client.get("/pos/cart", headers=STAFF).json()["data"]
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 3
        assert cart["items"][0]["line_total"] == 300
        assert cart_repository.docs["user-1"]["items"][0]["quantity"] == 3

    def test_carts_are_per_user(self, client, catalog_ring):
        add(client, catalog_ring)
        other = client.get("/pos/cart", headers={**STAFF, "X-Test-User": "user-2"})
        assert other.json()["data"]["items"] == []

    def test_invalid_item_is_rejected(self, client):
        response = client.post(
            "/pos/cart/items",
            json={"item_id": "x", "name": "Bad", "price": -5},
            headers=STAFF,
        )
        assert response.status_code == 422

    def test_quantity_zero_removes_line(self, client, catalog_ring):
        line_id = add(client, catalog_ring)["line_id"]
        response = client.put(
            f"/pos/cart/items/{line_id}/quantity", json={"quantity": 0}, headers=STAFF
        )
        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

    def test_remove_item(self, client, catalog_ring, catalog_chain):
        ring = add(client, catalog_ring)["line_id"]
        add(client, catalog_chain)
        data = client.delete(f"/pos/cart/items/{ring}", headers=STAFF).json()["data"]
        assert [line["item_id"] for line in data["items"]] == ["item-chain-002"]

    def test_customer_and_notes(self, client):
        response = client.put(
            "/pos/cart/customer",
            json={"customer": {"id": "cust-1", "name": "Sara"}},
            headers=STAFF,
        )
        assert response.json()["data"]["customer"]["name"] == "Sara"
        response = client.put("/pos/cart/notes", json={"notes": "Engrave initials"}, headers=STAFF)
        assert response.json()["data"]["notes"] == "Engrave initials"

    def test_order_discount_and_tax(self, client, catalog_ring):
        add(client, {**catalog_ring, "quantity": 2}, headers=MANAGER)
        response = client.put(
            "/pos/cart/discount",
            json={"type": "fixed", "value": 500},
            headers=MANAGER,
            params={"tax_rate": 10},
        )
        totals = response.json()["data"]["totals"]
        assert totals["order_discount"] == 200
        assert totals["tax_amount"] == 0
        assert totals["grand_total"] == 0

    def test_tax_rate_out_of_range(self, client):
        response = client.get("/pos/cart", headers=STAFF, params={"tax_rate": 150})
        assert response.status_code == 422

    def test_checkout_payload(self, client, catalog_ring, catalog_chain):
        line_id = add(client, {**catalog_ring, "quantity": 2}, headers=MANAGER)["line_id"]
        add(client, catalog_chain, headers=MANAGER)
        client.put(
            f"/pos/cart/items/{line_id}/discount",
            json={"type": "percentage", "value": 10},
            headers=MANAGER,
        )
        client.put("/pos/cart/discount", json={"type": "fixed", "value": 30}, headers=MANAGER)

        response = client.get("/pos/cart/checkout", headers=MANAGER, params={"tax_rate": 10})

        assert response.status_code == 200
        sale = response.json()["data"]
        assert sale["subtotal"] == pytest.approx(230)
        assert sale["bill_discount_type"] == "fixed"
        assert sale["bill_discount_amount"] == 30
        assert sale["total_discount"] == pytest.approx(50)
        assert sale["total_tax"] == pytest.approx(20)
        assert sale["grand_total"] == pytest.approx(220)
        ring = sale["items"][0]
        assert ring["unit_price"] == 100
        assert ring["discount_amount"] == pytest.approx(20)
        assert ring["line_total"] == pytest.approx(180)

    def test_checkout_empty_cart_conflicts(self, client):
        response = client.get("/pos/cart/checkout", headers=STAFF)
        assert response.status_code == 409


class TestHeldOrderRoutes:

    def test_hold_empty_cart_conflicts(self, client, cart_repository):
        response = client.post("/pos/held-orders", json={}, headers=STAFF)
        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Cannot hold an empty cart"
        assert cart_repository.saves == 0

    def test_hold_and_restore(self, client, catalog_ring, catalog_chain):
        add(client, catalog_ring)
        response = client.post("/pos/held-orders", json={"label": "Walk-in"}, headers=STAFF)
        assert response.status_code == 201
        held_id = response.json()["data"]["held_order_id"]
        assert response.json()["data"]["cart"]["items"] == []

        listed = client.get("/pos/held-orders", headers=STAFF).json()["data"]
        assert listed["total"] == 1
        assert listed["held_orders"][0]["label"] == "Walk-in"

        add(client, catalog_chain)
        response = client.post(f"/pos/held-orders/{held_id}/restore", headers=STAFF)
        assert response.status_code == 200
        data = response.json()["data"]
        assert [line["item_id"] for line in data["items"]] == ["item-ring-001"]
        assert data["held_orders"] == []

    def test_restore_unknown_is_not_found(self, client, catalog_ring):
        add(client, catalog_ring)
        response = client.post("/pos/held-orders/hold_missing/restore", headers=STAFF)
        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Held order not found"
        cart = client.get("/pos/cart", headers=STAFF).json()["data"]
        assert len(cart["items"]) == 1

    def test_clear_cart_keeps_held_and_reset_drops_them(self, client, catalog_ring, catalog_chain):
        add(client, catalog_ring)
        client.post("/pos/held-orders", json={}, headers=STAFF)
        add(client, catalog_chain)

        data = client.delete("/pos/cart", headers=STAFF).json()["data"]
        assert data["items"] == []
        assert len(data["held_orders"]) == 1

        data = client.post("/pos/cart/reset", headers=STAFF).json()["data"]
        assert data["held_orders"] == []

    def test_delete_held_orders(self, client, catalog_ring, catalog_chain):
        add(client, catalog_ring)
        first = client.post("/pos/held-orders", json={}, headers=STAFF).json()["data"]["held_order_id"]
        add(client, catalog_chain)
        client.post("/pos/held-orders", json={}, headers=STAFF)

        response = client.delete(f"/pos/held-orders/{first}", headers=STAFF)
        assert response.json()["data"]["total"] == 1
        response = client.delete("/pos/held-orders", headers=STAFF)
        assert response.status_code == 200
        assert client.get("/pos/held-orders", headers=STAFF).json()["data"]["total"] == 0


# =============================================================================
# Concurrent saves
# =============================================================================

def run(coro):
    return asyncio.run(coro)


class InterleavingCartRepository(InMemoryCartRepository):
    """Runs `interleave` once, between a load and the save that follows it."""

    def __init__(self):
        super().__init__()
        self.interleave = None

    async def save(self, user_id, state, version):
        if self.interleave is not None:
            interleave, self.interleave = self.interleave, None
            await interleave()
        return await super().save(user_id, state, version)


class StaleCartRepository(InMemoryCartRepository):
    async def save(self, user_id, state, version):
        return False


class TestCartServiceConcurrency:

    @pytest.fixture
    def repository(self):
        return InterleavingCartRepository()

    def test_hold_replays_after_concurrent_add(self, repository, catalog_ring, catalog_chain):
        tab_a = CartService(repository, "user-1")
        tab_b = CartService(repository, "user-1")
        run(tab_a.apply(lambda c: c.add_item(catalog_ring)))

        repository.interleave = lambda: tab_b.apply(lambda c: c.add_item(catalog_chain))
        cart, held_id = run(tab_a.apply(lambda c: c.hold_order()))

        assert cart.is_empty
        held = cart.get_held_order(held_id)
        assert {line.item_id for line in held.items} == {"item-ring-001", "item-chain-002"}
        assert repository.versions["user-1"] == 3

    def test_concurrent_restores_only_one_wins(self, repository, catalog_ring):
        tab_a = CartService(repository, "user-1")
        tab_b = CartService(repository, "user-1")
        run(tab_a.apply(lambda c: c.add_item(catalog_ring)))
        _, held_id = run(tab_a.apply(lambda c: c.hold_order()))

        repository.interleave = lambda: tab_b.apply(lambda c: c.restore_order(held_id))
        cart, restored = run(tab_a.apply(lambda c: c.restore_order(held_id)))

        assert restored is False
        assert [line.item_id for line in cart.items] == ["item-ring-001"]
        assert cart.held_orders == []

    def test_gives_up_after_repeated_conflicts(self, catalog_ring):
        svc = CartService(StaleCartRepository(), "user-1")
        with pytest.raises(HTTPException) as exc:
            run(svc.apply(lambda c: c.add_item(catalog_ring)))
        assert exc.value.status_code == 409

    def test_unchanged_cart_is_not_saved(self, repository):
        svc = CartService(repository, "user-1")
        run(svc.apply(lambda c: c.remove_item("cart_missing")))
        assert repository.saves == 0


class TestMongoCartRepository:

    def test_saves_are_versioned(self):
        repo = MongoCartRepository(FakeDatabase(), "shop-1")

        async def scenario():
            assert await repo.load("user-1") == (None, 0)
            assert await repo.save("user-1", {"items": []}, 0) is True
            assert await repo.save("user-1", {"items": [], "notes": "a"}, 1) is True
            return await repo.load("user-1")

        state, version = run(scenario())
        assert version == 2
        assert state["notes"] == "a"

    def test_stale_saves_are_rejected(self):
        db = FakeDatabase()
        repo = MongoCartRepository(db, "shop-1")

        async def scenario():
            await repo.save("user-1", {"notes": "first"}, 0)
            await repo.save("user-1", {"notes": "second"}, 1)
            stale_update = await repo.save("user-1", {"notes": "stale"}, 1)
            stale_create = await repo.save("user-1", {"notes": "stale"}, 0)
            return stale_update, stale_create

        assert run(scenario()) == (False, False)
        docs = db["shop_1_carts"].docs
        assert len(docs) == 1
        assert docs[0]["state"] == {"notes": "second"}
        assert docs[0]["version"] == 2

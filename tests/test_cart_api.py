from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from checkout_service.main import app

from .conftest import OTHER_CUSTOMER_ID


CART_URL = "/api/v1/cart"


def add(client, listing_id, quantity=None, **extra):
    body = {"listing_id": listing_id, **extra}
    if quantity is not None:
        body["quantity"] = quantity
    return client.post(CART_URL, json=body)


def item_id_for(body, listing_id):
    return next(item["id"] for item in body["cart"]["items"] if item["listing_id"] == listing_id)


class TestAuth:
    def test_missing_customer_header(self, client):
        anonymous = TestClient(app)

        for method in ("get", "delete"):
            response = getattr(anonymous, method)(CART_URL)
            assert response.status_code == 401
            assert response.json() == {"error": "Unauthorized"}

    def test_blank_customer_header(self, client):
        response = client.get(CART_URL, headers={"X-Customer-Id": "  "})
        assert response.status_code == 401

    def test_anonymous_bad_body_is_unauthorized(self, client):
        for method in ("post", "patch"):
            response = client.request(
                method.upper(),
                CART_URL,
                content=b"{not json",
                headers={"X-Customer-Id": "", "Content-Type": "application/json"}
            )
            assert response.status_code == 401
            assert response.json() == {"error": "Unauthorized"}

        response = client.post(CART_URL, json={"quantity": 1}, headers={"X-Customer-Id": ""})
        assert response.status_code == 401

    def test_bad_body_with_customer_is_invalid_request(self, client):
        response = client.post(CART_URL, content=b"{not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"


class TestGetCart:
    def test_empty(self, client):
        response = client.get(CART_URL)

        assert response.status_code == 200
        assert response.json() == {"cart": None, "vendor": None}
        assert response.headers["cache-control"] == "no-store"

    def test_with_items(self, client):
        add(client, "L1", 2)

        body = client.get(CART_URL).json()

        assert body["cart"]["vendor_id"] == "V1"
        assert body["cart"]["total_items"] == 2
        assert Decimal(body["cart"]["subtotal"]) == Decimal("20.00")
        assert body["vendor"]["business_name"] == "Barrio Bakery"


class TestAddItem:
    def test_default_quantity_is_one(self, client):
        response = add(client, "L1")

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"
        items = response.json()["cart"]["items"]
        assert [(i["listing_id"], i["quantity"]) for i in items] == [("L1", 1)]

    def test_sums_quantities(self, client):
        add(client, "L1", 2)
        body = add(client, "L1", 3).json()

        assert body["cart"]["items"][0]["quantity"] == 5

    def test_missing_listing_id(self, client):
        response = client.post(CART_URL, json={"quantity": 1})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    def test_zero_quantity(self, client):
        response = add(client, "L1", 0)

        assert response.status_code == 400
        assert response.json() == {"error": "Quantity must be at least 1"}
        assert client.get(CART_URL).json()["cart"] is None

    def test_fractional_quantity(self, client):
        assert add(client, "L1", 1.5).status_code == 400

    @pytest.mark.parametrize("quantity", [True, "2", "abc"])
    def test_non_integer_quantity(self, client, quantity):
        response = add(client, "L1", quantity)

        assert response.status_code == 400
        assert response.json() == {"error": "Quantity must be at least 1"}
        assert client.get(CART_URL).json()["cart"] is None

    def test_unknown_listing(self, client):
        response = add(client, "NOPE")

        assert response.status_code == 404
        assert response.json() == {"error": "Listing not found"}

    def test_catalog_unavailable(self, client):
        response = add(client, "DOWN")

        assert response.status_code == 503
        assert response.json() == {"error": "Failed to load listing"}

    def test_vendor_mismatch(self, client):
        add(client, "L1", 2)

        response = add(client, "L3")

        assert response.status_code == 409
        assert response.json() == {
            "error": "Cart vendor mismatch",
            "code": "vendor_mismatch",
            "cart_vendor_id": "V1",
        }
        cart = client.get(CART_URL).json()["cart"]
        assert [(i["listing_id"], i["quantity"]) for i in cart["items"]] == [("L1", 2)]

    def test_clear_existing_switches_vendor(self, client):
        old_cart_id = add(client, "L1").json()["cart"]["id"]

        response = add(client, "L3", clear_existing=True)

        assert response.status_code == 200
        body = response.json()
        assert body["cart"]["id"] != old_cart_id
        assert body["cart"]["vendor_id"] == "V2"
        assert body["vendor"]["business_name"] == "Casa Tamal"


class TestUpdateCart:
    def test_update_quantity(self, client):
        body = add(client, "L1").json()

        response = client.patch(CART_URL, json={"item_id": item_id_for(body, "L1"), "quantity": 4})

        assert response.status_code == 200
        assert response.headers["cache-control"] == "no-store"
        assert response.json()["cart"]["items"][0]["quantity"] == 4

    def test_zero_removes_item(self, client):
        add(client, "L1")
        body = add(client, "L2").json()

        response = client.patch(CART_URL, json={"item_id": item_id_for(body, "L1"), "quantity": 0})

        assert [i["listing_id"] for i in response.json()["cart"]["items"]] == ["L2"]

    def test_negative_quantity(self, client):
        body = add(client, "L1").json()

        response = client.patch(CART_URL, json={"item_id": item_id_for(body, "L1"), "quantity": -1})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid quantity"}

    @pytest.mark.parametrize("quantity", [True, "2", "abc", None])
    def test_non_integer_quantity(self, client, quantity):
        body = add(client, "L1", 2).json()

        response = client.patch(CART_URL, json={"item_id": item_id_for(body, "L1"), "quantity": quantity})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid quantity"}
        assert client.get(CART_URL).json()["cart"]["items"][0]["quantity"] == 2

    def test_quantity_without_item_id(self, client):
        add(client, "L1")
        assert client.patch(CART_URL, json={"quantity": 2}).status_code == 400

    def test_unknown_item(self, client):
        add(client, "L1")

        response = client.patch(CART_URL, json={"item_id": "missing", "quantity": 2})

        assert response.status_code == 404
        assert response.json() == {"error": "Cart item not found"}

    def test_other_customers_item(self, client):
        their_body = client.post(
            CART_URL,
            json={"listing_id": "L1", "quantity": 2},
            headers={"X-Customer-Id": OTHER_CUSTOMER_ID}
        ).json()
        add(client, "L2")

        response = client.patch(CART_URL, json={"item_id": item_id_for(their_body, "L1"), "quantity": 0})

        assert response.status_code == 404

    def test_no_active_cart(self, client):
        response = client.patch(CART_URL, json={"fulfillment_type": "pickup"})

        assert response.status_code == 404
        assert response.json() == {"error": "Cart not found"}

    def test_set_and_reset_fulfillment_type(self, client):
        add(client, "L1")

        body = client.patch(CART_URL, json={"fulfillment_type": "delivery"}).json()
        assert body["cart"]["fulfillment_type"] == "delivery"

        body = client.patch(CART_URL, json={}).json()
        assert body["cart"]["fulfillment_type"] == "delivery"

        body = client.patch(CART_URL, json={"fulfillment_type": None}).json()
        assert body["cart"]["fulfillment_type"] is None

    def test_unknown_fulfillment_type(self, client):
        add(client, "L1")
        assert client.patch(CART_URL, json={"fulfillment_type": "drone"}).status_code == 400


class TestClearCart:
    def test_clear(self, client):
        add(client, "L1")

        response = client.delete(CART_URL)

        assert response.status_code == 200
        assert response.json() == {"cart": None, "vendor": None}
        assert response.headers["cache-control"] == "no-store"
        assert client.get(CART_URL).json()["cart"] is None

    def test_clear_is_idempotent(self, client):
        assert client.delete(CART_URL).json() == {"cart": None, "vendor": None}
        assert client.delete(CART_URL).status_code == 200

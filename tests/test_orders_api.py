from decimal import Decimal

import pytest

from medistore.api.deps import get_lock_service
from medistore.main import app

from conftest import UnreachableReleaseLock, auth, stock_of

SHIPPING = {"shippingName": "Rahim", "shippingPhone": "+8801700000000", "shippingAddress": "12 Road, Dhaka"}


@pytest.fixture
def seller(make_user):
    return make_user("SELLER")


@pytest.fixture
def customer(make_user):
    return make_user()


def _checkout(client, user, body=SHIPPING):
    return client.post("/order", json=body, headers=auth(user))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ---------- authentication ----------

def test_missing_user_header(client):
    response = client.get("/order")
    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized", "code": "UNAUTHORIZED"}


def test_unknown_user(client):
    assert client.get("/order", headers={"X-User-Id": "9999"}).status_code == 401
    assert client.get("/order", headers={"X-User-Id": "abc"}).status_code == 401


def test_banned_user(client, make_user):
    banned = make_user(status="BAN")
    response = client.get("/order", headers=auth(banned))
    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


def test_only_customers_check_out(client, seller):
    response = _checkout(client, seller)
    assert response.status_code == 403


# ---------- checkout ----------

def test_checkout_envelope(client, db, seller, customer, make_medicine, add_to_cart, notifier):
    a = make_medicine(seller, price="10.00", stock=5)
    b = make_medicine(seller, price="15.00", stock=3)
    add_to_cart(customer, a, 2)
    add_to_cart(customer, b, 1)

    response = _checkout(client, customer)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Order created successfully"
    order = body["data"]
    assert order["status"] == "PLACED"
    assert Decimal(order["total"]) == Decimal("35.00")
    assert order["userId"] == customer.id
    assert order["shippingAddress"] == "12 Road, Dhaka"
    assert order["user"]["email"] == customer.email
    assert {i["medicineId"] for i in order["items"]} == {a.id, b.id}
    assert Decimal(order["items"][0]["unitPrice"]) == Decimal("10.00")
    assert stock_of(db, a.id) == 3
    assert notifier.events[0][0] == "ORDER_PLACED"


def test_checkout_missing_phone(client, seller, customer, make_medicine, add_to_cart):
    add_to_cart(customer, make_medicine(seller))
    response = _checkout(client, customer, {"shippingAddress": "Dhaka"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_checkout_empty_cart(client, customer):
    response = _checkout(client, customer)
    assert response.status_code == 400
    assert response.json()["code"] == "EMPTY_CART"


def test_checkout_in_progress(client, seller, customer, make_medicine, add_to_cart, fake_lock):
    add_to_cart(customer, make_medicine(seller))
    fake_lock.held[customer.id] = "another-request"

    response = _checkout(client, customer)
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


def test_checkout_survives_unreachable_lock_release(client, db, seller, customer, make_medicine, add_to_cart):
    app.dependency_overrides[get_lock_service] = UnreachableReleaseLock
    medicine = make_medicine(seller, stock=2)
    add_to_cart(customer, medicine, 2)

    response = _checkout(client, customer)

    assert response.status_code == 201
    assert response.json()["data"]["status"] == "PLACED"
    assert stock_of(db, medicine.id) == 0


def test_empty_cart_survives_unreachable_lock_release(client, customer):
    app.dependency_overrides[get_lock_service] = UnreachableReleaseLock

    response = _checkout(client, customer)

    assert response.status_code == 400
    assert response.json()["code"] == "EMPTY_CART"


def test_last_unit_goes_to_one_buyer(client, db, seller, make_user, make_medicine, add_to_cart):
    medicine = make_medicine(seller, stock=1)
    first, second = make_user(), make_user()
    add_to_cart(first, medicine, 1)
    add_to_cart(second, medicine, 1)

    responses = [_checkout(client, first), _checkout(client, second)]

    assert sorted(r.status_code for r in responses) == [201, 409]
    assert responses[1].json()["code"] == "INSUFFICIENT_STOCK"
    assert stock_of(db, medicine.id) == 0


# ---------- queries ----------

def test_get_and_track_are_scoped(client, seller, customer, make_user, make_medicine, add_to_cart):
    add_to_cart(customer, make_medicine(seller))
    order_id = _checkout(client, customer).json()["data"]["id"]

    assert client.get(f"/order/{order_id}", headers=auth(customer)).status_code == 200
    assert client.get(f"/order/{order_id}", headers=auth(seller)).status_code == 200

    stranger = client.get(f"/order/{order_id}", headers=auth(make_user()))
    assert stranger.status_code == 404
    assert stranger.json()["code"] == "NOT_FOUND"

    track = client.get(f"/order/{order_id}/track", headers=auth(customer))
    assert track.json() == {"message": "Order status retrieved successfully", "data": {"status": "PLACED"}}


def test_list_meta_and_sort_validation(client, seller, customer, make_medicine, add_to_cart):
    add_to_cart(customer, make_medicine(seller))
    _checkout(client, customer)

    response = client.get("/order", params={"page": 1, "limit": 5}, headers=auth(customer))
    assert response.status_code == 200
    body = response.json()
    assert body["meta"] == {"page": 1, "limit": 5, "total": 1}
    assert len(body["data"]) == 1

    bad = client.get("/order", params={"sortBy": "name"}, headers=auth(customer))
    assert bad.status_code == 400


# ---------- status changes ----------

def test_seller_moves_status(client, seller, customer, make_medicine, add_to_cart):
    add_to_cart(customer, make_medicine(seller))
    order_id = _checkout(client, customer).json()["data"]["id"]
    url = f"/order/seller/{order_id}/status"

    response = client.patch(url, json={"status": "PROCESSING"}, headers=auth(seller))
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "PROCESSING"

    assert client.patch(url, json={"status": "DELIVERED"}, headers=auth(seller)).json()["code"] == "ILLEGAL_TRANSITION"
    assert client.patch(url, json={"status": "NOPE"}, headers=auth(seller)).status_code == 400
    assert client.patch(url, json={}, headers=auth(seller)).status_code == 400
    assert client.patch(url, json={"status": "SHIPPED"}, headers=auth(customer)).status_code == 403


def test_status_of_missing_order(client, make_user):
    response = client.patch("/order/seller/404/status", json={"status": "PROCESSING"}, headers=auth(make_user("ADMIN")))
    assert response.status_code == 404


def test_customer_cancel(client, db, seller, customer, make_medicine, add_to_cart):
    medicine = make_medicine(seller, stock=3)
    add_to_cart(customer, medicine, 2)
    order_id = _checkout(client, customer).json()["data"]["id"]

    response = client.patch(f"/order/{order_id}/cancel", headers=auth(customer))

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "CANCELLED"
    assert stock_of(db, medicine.id) == 3

    again = client.patch(f"/order/{order_id}/cancel", headers=auth(customer))
    assert again.status_code == 400
    assert again.json()["code"] == "CANCEL_NOT_ALLOWED"

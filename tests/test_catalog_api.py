from conftest import auth, stock_of


def test_register_and_me(client):
    response = client.post("/users", json={"name": "Karim", "email": "Karim@Example.com", "role": "SELLER"})

    assert response.status_code == 201
    user = response.json()["data"]
    assert user["email"] == "karim@example.com"
    assert user["role"] == "SELLER"
    assert "createdAt" in user

    me = client.get("/users/me", headers={"X-User-Id": str(user["id"])})
    assert me.json()["data"]["id"] == user["id"]


def test_register_rules(client):
    client.post("/users", json={"name": "A", "email": "a@example.com"})

    duplicate = client.post("/users", json={"name": "B", "email": "a@example.com"})
    assert duplicate.status_code == 409

    admin = client.post("/users", json={"name": "C", "email": "c@example.com", "role": "ADMIN"})
    assert admin.status_code == 400

    invalid = client.post("/users", json={"name": "D", "email": "not-an-email"})
    assert invalid.status_code == 400
    assert invalid.json()["code"] == "VALIDATION_ERROR"


def test_categories(client, make_user):
    admin = make_user("ADMIN")

    created = client.post("/categories", json={"name": "Pain Relief"}, headers=auth(admin))
    assert created.status_code == 201
    assert created.json()["data"]["slug"] == "pain-relief"

    assert client.post("/categories", json={"name": "Pain Relief"}, headers=auth(admin)).status_code == 409
    assert client.post("/categories", json={"name": "Other"}, headers=auth(make_user())).status_code == 403
    assert [c["name"] for c in client.get("/categories").json()["data"]] == ["Pain Relief"]


def test_seller_manages_own_medicine(client, db, make_user):
    seller = make_user("SELLER")
    body = {"name": "Napa", "genericName": "Paracetamol", "price": "1.50", "stock": 100}

    created = client.post("/medicines", json=body, headers=auth(seller))
    assert created.status_code == 201
    medicine = created.json()["data"]
    assert medicine["sellerId"] == seller.id
    assert medicine["genericName"] == "Paracetamol"

    updated = client.patch(f"/medicines/{medicine['id']}", json={"stock": 7, "price": "2.00"}, headers=auth(seller))
    assert updated.status_code == 200
    assert updated.json()["data"]["stock"] == 7
    assert stock_of(db, medicine["id"]) == 7

    other = client.patch(f"/medicines/{medicine['id']}", json={"stock": 1}, headers=auth(make_user("SELLER")))
    assert other.status_code == 403

    assert client.post("/medicines", json=body, headers=auth(make_user())).status_code == 403
    assert client.patch(f"/medicines/{medicine['id']}", json={"stock": -1}, headers=auth(seller)).status_code == 400


def test_public_medicine_listing(client, make_user, make_medicine):
    seller = make_user("SELLER")
    make_medicine(seller, stock=0)
    in_stock = make_medicine(seller, stock=3)
    hidden = make_medicine(seller, is_active=False)

    listing = client.get("/medicines", params={"inStock": "true"}).json()
    assert [m["id"] for m in listing["data"]] == [in_stock.id]
    assert listing["meta"]["total"] == 1

    assert client.get("/medicines").json()["meta"]["total"] == 2
    assert client.get(f"/medicines/{hidden.id}").status_code == 404


def test_cart_endpoints(client, make_user, make_medicine):
    seller = make_user("SELLER")
    customer = make_user()
    medicine = make_medicine(seller, price="3.00", stock=4)

    added = client.post("/cart/items", json={"medicineId": medicine.id, "quantity": 2}, headers=auth(customer))
    assert added.status_code == 201
    item_id = added.json()["data"]["id"]

    cart = client.get("/cart", headers=auth(customer)).json()["data"]
    assert cart["items"][0]["medicine"]["name"] == medicine.name
    assert cart["subtotal"] == "6.00"

    too_many = client.patch(f"/cart/items/{item_id}", json={"quantity": 5}, headers=auth(customer))
    assert too_many.status_code == 409

    removed = client.patch(f"/cart/items/{item_id}", json={"quantity": 0}, headers=auth(customer))
    assert removed.json() == {"message": "Item removed from cart", "data": None}

    assert client.get("/cart", headers=auth(seller)).status_code == 403


# ---------- admin and profile ----------

def test_admin_bans_and_unbans(client, make_user):
    admin = make_user("ADMIN")
    customer = make_user()

    banned = client.patch(f"/users/{customer.id}/status", json={"status": "BAN"}, headers=auth(admin))
    assert banned.status_code == 200
    assert banned.json()["data"]["status"] == "BAN"
    assert client.get("/users/me", headers=auth(customer)).status_code == 403

    client.patch(f"/users/{customer.id}/status", json={"status": "UNBAN"}, headers=auth(admin))
    assert client.get("/users/me", headers=auth(customer)).status_code == 200

    own = client.patch(f"/users/{admin.id}/status", json={"status": "BAN"}, headers=auth(admin))
    assert own.status_code == 400
    assert client.patch("/users/9999/status", json={"status": "BAN"}, headers=auth(admin)).status_code == 404
    assert client.patch(f"/users/{customer.id}/status", json={"status": "GONE"}, headers=auth(admin)).status_code == 400


def test_user_listing_is_admin_only(client, make_user):
    admin = make_user("ADMIN")
    customer = make_user()
    make_user("SELLER")

    listing = client.get("/users", params={"role": "seller"}, headers=auth(admin)).json()
    assert listing["meta"]["total"] == 1
    assert listing["data"][0]["role"] == "SELLER"

    assert client.get("/users", headers=auth(admin)).json()["meta"]["total"] == 3
    assert client.get("/users", params={"role": "ROOT"}, headers=auth(admin)).status_code == 400
    assert client.get("/users", headers=auth(customer)).status_code == 403
    assert client.patch(f"/users/{admin.id}/status", json={"status": "BAN"}, headers=auth(customer)).status_code == 403


def test_update_profile(client, make_user):
    customer = make_user()

    updated = client.put("/users/me", json={"name": "  Rahim  "}, headers=auth(customer))
    assert updated.status_code == 200
    assert updated.json()["data"]["name"] == "Rahim"

    assert client.put("/users/me", json={"name": ""}, headers=auth(customer)).status_code == 400


def test_category_update_and_delete(client, db, make_user, make_medicine):
    admin = make_user("ADMIN")
    seller = make_user("SELLER")
    first = client.post("/categories", json={"name": "Pain Relief"}, headers=auth(admin)).json()["data"]
    client.post("/categories", json={"name": "Vitamins"}, headers=auth(admin))

    medicine = client.post(
        "/medicines",
        json={"name": "Napa", "price": "1.50", "stock": 5, "categoryId": first["id"]},
        headers=auth(seller),
    ).json()["data"]

    renamed = client.put(f"/categories/{first['id']}", json={"name": "Analgesics"}, headers=auth(admin))
    assert renamed.status_code == 200
    assert renamed.json()["data"] == {**first, "name": "Analgesics"}

    reslugged = client.put(f"/categories/{first['id']}", json={"slug": "Pain Killers"}, headers=auth(admin))
    assert reslugged.json()["data"]["slug"] == "pain-killers"

    taken = client.put(f"/categories/{first['id']}", json={"name": "Vitamins"}, headers=auth(admin))
    assert taken.status_code == 409
    assert client.put(f"/categories/{first['id']}", json={"name": "X"}, headers=auth(seller)).status_code == 403

    assert client.get(f"/categories/{first['id']}").json()["data"]["name"] == "Analgesics"

    deleted = client.delete(f"/categories/{first['id']}", headers=auth(admin))
    assert deleted.json() == {"message": "Category deleted successfully", "data": None}
    assert client.get(f"/categories/{first['id']}").status_code == 404
    assert client.delete(f"/categories/{first['id']}", headers=auth(admin)).status_code == 404
    assert client.get(f"/medicines/{medicine['id']}").json()["data"]["categoryId"] is None


def test_seller_deletes_own_medicine(client, make_user, make_medicine):
    seller = make_user("SELLER")
    medicine = make_medicine(seller)

    assert client.delete(f"/medicines/{medicine.id}", headers=auth(make_user("SELLER"))).status_code == 403
    assert client.delete(f"/medicines/{medicine.id}", headers=auth(make_user())).status_code == 403

    deleted = client.delete(f"/medicines/{medicine.id}", headers=auth(seller))
    assert deleted.status_code == 200
    assert client.get(f"/medicines/{medicine.id}").status_code == 404
    assert client.get("/medicines").json()["meta"]["total"] == 0
    assert client.delete("/medicines/9999", headers=auth(seller)).status_code == 404


def test_deleted_medicine_blocks_checkout(client, make_user, make_medicine, add_to_cart):
    seller = make_user("SELLER")
    customer = make_user()
    medicine = make_medicine(seller)
    add_to_cart(customer, medicine)

    client.delete(f"/medicines/{medicine.id}", headers=auth(make_user("ADMIN")))

    response = client.post(
        "/order",
        json={"shippingPhone": "0170", "shippingAddress": "Dhaka"},
        headers=auth(customer),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "MEDICINE_UNAVAILABLE"


def test_stock_patch(client, db, make_user, make_medicine):
    seller = make_user("SELLER")
    medicine = make_medicine(seller, stock=3)

    updated = client.patch(f"/medicines/{medicine.id}/stock", json={"stock": 40}, headers=auth(seller))
    assert updated.status_code == 200
    assert updated.json()["data"]["stock"] == 40
    assert stock_of(db, medicine.id) == 40

    assert client.patch(f"/medicines/{medicine.id}/stock", json={"stock": -2}, headers=auth(seller)).status_code == 400
    assert client.patch(f"/medicines/{medicine.id}/stock", json={"stock": 1}, headers=auth(make_user("SELLER"))).status_code == 403

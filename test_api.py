# test_api.py
from fastapi import Depends

from checkout import CheckoutPipeline
from database import database
from dependencies import get_broadcaster, get_checkout_pipeline
from models import Customer, Order
import main

def _override_payment(payment):
    def pipeline(broadcaster=Depends(get_broadcaster)):
        return CheckoutPipeline(database, broadcaster, payment=payment)
    main.app.dependency_overrides[get_checkout_pipeline] = pipeline

def _admin_token(client):
    response = client.post("/api/admin/login", json={"email": "admin@grocerymart.com", "password": "admin123"})
    assert response.status_code == 200
    return response.json()["accessToken"]

# ========== SERVICE ==========
def test_root_and_health(client):
    assert client.get("/").json()["endpoints"]["admin_socket"] == "/ws"

    health = client.get("/health").json()
    assert health["database"] == "connected"
    assert health["admin_connections"] == 0

# ========== ORDERS ==========
def test_place_cod_order(client, checkout_payload):
    response = client.post("/api/orders", json=checkout_payload("cod"))

    assert response.status_code == 201
    body = response.json()
    order, customer = body["order"], body["customer"]
    assert order["subtotal"] == "9.47"
    assert order["deliveryFee"] == "2.99"
    assert order["total"] == "12.46"
    assert order["status"] == "pending"
    assert order["paymentMethod"] == "cod"
    assert order["customerId"] == customer["id"]
    assert order["userId"] is None
    assert order["items"][0]["quantity"] == 2
    assert customer["fullName"] == "Ayesha Khan"
    assert customer["city"] == "Lahore"

def test_admin_socket_receives_new_order(client, checkout_payload):
    with client.websocket_connect("/ws") as socket:
        assert client.get("/health").json()["admin_connections"] == 1

        order = client.post("/api/orders", json=checkout_payload()).json()["order"]
        event = socket.receive_json()

    assert event["type"] == "NEW_ORDER"
    assert event["order"]["id"] == order["id"]
    assert event["order"]["total"] == "12.46"
    assert event["order"]["customer"]["fullName"] == "Ayesha Khan"
    assert event["order"]["items"] == checkout_payload()["cart"]

def test_every_admin_socket_gets_the_event(client, checkout_payload):
    with client.websocket_connect("/ws") as first, client.websocket_connect("/ws") as second:
        order_id = client.post("/api/orders", json=checkout_payload()).json()["order"]["id"]
        assert first.receive_json()["order"]["id"] == order_id
        assert second.receive_json()["order"]["id"] == order_id

def test_checkout_validation_error(client, checkout_payload, count_rows):
    payload = checkout_payload()
    del payload["customer"]["city"]

    response = client.post("/api/orders", json=payload)

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request data"
    assert count_rows(Customer) == 0

def test_checkout_rejects_empty_cart_and_bad_method(client, checkout_payload):
    assert client.post("/api/orders", json=checkout_payload(cart=[])).status_code == 400
    assert client.post("/api/orders", json=checkout_payload("bitcoin")).status_code == 400

def test_declined_payment_returns_400(client, checkout_payload, fixed_payment, count_rows):
    _override_payment(fixed_payment(False))

    response = client.post("/api/orders", json=checkout_payload("jazzcash"))

    assert response.status_code == 400
    assert response.json() == {"message": "Payment failed", "error": "JazzCash payment could not be processed"}
    assert count_rows(Order) == 0
    assert count_rows(Customer) == 0

def test_online_payment_accepted(client, checkout_payload, fixed_payment):
    payment = fixed_payment(True)
    _override_payment(payment)

    response = client.post("/api/orders", json=checkout_payload("online"))

    assert response.status_code == 201
    assert response.json()["order"]["paymentMethod"] == "jazzcash"
    assert len(payment.calls) == 1

def test_list_orders_includes_customer(client, checkout_payload):
    client.post("/api/orders", json=checkout_payload())

    orders = client.get("/api/orders").json()

    assert len(orders) == 1
    assert orders[0]["customer"]["phone"] == "0300-1234567"
    assert orders[0]["items"][1]["product"]["name"] == "Fresh Milk"

def test_read_single_order(client, checkout_payload):
    order_id = client.post("/api/orders", json=checkout_payload()).json()["order"]["id"]

    assert client.get(f"/api/orders/{order_id}").json()["customer"]["fullName"] == "Ayesha Khan"
    assert client.get("/api/orders/9999").status_code == 404

def test_update_order_status(client, checkout_payload):
    order_id = client.post("/api/orders", json=checkout_payload()).json()["order"]["id"]

    response = client.put(f"/api/orders/{order_id}/status", json={"status": "processing"})
    assert response.status_code == 200
    assert response.json()["status"] == "processing"

    bad = client.put(f"/api/orders/{order_id}/status", json={"status": "shipped"})
    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid status"

    backwards = client.put(f"/api/orders/{order_id}/status", json={"status": "pending"})
    assert backwards.status_code == 400

    assert client.get(f"/api/orders/{order_id}").json()["status"] == "processing"

def test_update_status_of_missing_order(client):
    response = client.put("/api/orders/9999/status", json={"status": "completed"})
    assert response.status_code == 404
    assert response.json() == {"message": "Order not found"}

def test_delete_order(client, checkout_payload, count_rows):
    order_id = client.post("/api/orders", json=checkout_payload()).json()["order"]["id"]

    assert client.delete("/api/orders/9999").status_code == 404
    assert count_rows(Order) == 1

    assert client.delete(f"/api/orders/{order_id}").status_code == 204
    assert count_rows(Order) == 0
    assert client.delete(f"/api/orders/{order_id}").status_code == 404

def test_user_orders(client, checkout_payload):
    signup = client.post(
        "/api/auth/signup",
        json={"email": "sara@grocerymart.com", "password": "secret1", "name": "Sara"},
    )
    user_id = signup.json()["user"]["id"]

    client.post("/api/orders", json=checkout_payload(userId=user_id))
    client.post("/api/orders", json=checkout_payload())

    orders = client.get(f"/api/user/{user_id}/orders").json()
    assert len(orders) == 1
    assert orders[0]["userId"] == user_id

def test_checkout_with_unknown_user(client, checkout_payload):
    response = client.post("/api/orders", json=checkout_payload(userId=777))
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid order data"

# ========== PRODUCTS ==========
def test_seeded_products(client):
    products = client.get("/api/products").json()
    assert len(products) == 12
    assert products[0]["name"] == "Organic Bananas"
    assert products[0]["price"] == "2.99"

def test_product_crud(client):
    created = client.post(
        "/api/products",
        json={"name": "Brown Eggs", "price": "5.25", "category": "Dairy", "unit": "per dozen"},
    )
    assert created.status_code == 201
    product_id = created.json()["id"]

    updated = client.put(f"/api/products/{product_id}", json={"price": "4.75"})
    assert updated.json()["price"] == "4.75"
    assert updated.json()["name"] == "Brown Eggs"

    assert client.delete(f"/api/products/{product_id}").status_code == 204
    assert client.get(f"/api/products/{product_id}").status_code == 404
    assert client.put(f"/api/products/{product_id}", json={"price": "1.00"}).status_code == 404

def test_product_requires_fields(client):
    response = client.post("/api/products", json={"name": "Mystery", "price": "1.00"})
    assert response.status_code == 400

# ========== USERS ==========
def test_signup_and_login(client):
    user = {"email": "omar@grocerymart.com", "password": "hunter22", "name": "Omar", "phone": "0333-0000000"}

    signup = client.post("/api/auth/signup", json=user)
    assert signup.status_code == 201
    assert set(signup.json()["user"]) == {"id", "email", "name"}

    assert client.post("/api/auth/signup", json=user).status_code == 400

    login = client.post("/api/auth/login", json={"email": user["email"], "password": "hunter22"})
    assert login.status_code == 200
    assert login.json()["user"]["name"] == "Omar"

    wrong = client.post("/api/auth/login", json={"email": user["email"], "password": "nope"})
    assert wrong.status_code == 401

def test_signup_password_too_short(client):
    response = client.post("/api/auth/signup", json={"email": "x@grocerymart.com", "password": "123", "name": "Xi"})
    assert response.status_code == 400

# ========== ADMIN ==========
def test_admin_login_and_me(client):
    token = _admin_token(client)

    me = client.get("/api/admin/me", headers={"Authorization": f"Bearer {token}"}).json()
    assert me["email"] == "admin@grocerymart.com"

def test_dashboard_stats_are_open_and_revenue_is_a_number(client, checkout_payload):
    client.post("/api/orders", json=checkout_payload())
    client.post("/api/orders", json=checkout_payload())

    response = client.get("/api/admin/stats")

    assert response.status_code == 200
    stats = response.json()
    assert stats == {"products": 12, "orders": 2, "revenue": 24.92, "customers": 2}
    assert isinstance(stats["revenue"], float)

def test_admin_me_needs_token(client):
    assert client.get("/api/admin/me").status_code in (401, 403)
    bad = client.get("/api/admin/me", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401

def test_admin_login_wrong_password(client):
    response = client.post("/api/admin/login", json={"email": "admin@grocerymart.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid credentials"}

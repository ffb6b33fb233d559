import re

from fastapi.testclient import TestClient

from storefront.exceptions import EmailDeliveryError
from storefront.main import app
from storefront.services import email_service
from storefront.services.license_service import KEY_PATTERN

from tests.conftest import TEST_CARD


def test_checkout_single_seat(client, checkout_payload):
    response = client.post("/api/orders/checkout", json=checkout_payload())
    assert response.status_code == 200
    body = response.json()

    assert body["success"] is True
    assert body["total"] == 98.99
    assert body["transactionId"].startswith("DEMO_")
    assert re.match(r"^NK2IT-\d+-[A-Z0-9]{6}$", body["orderId"])

    groups = body["licenseKeys"]
    assert len(groups) == 1
    assert groups[0]["productName"] == "Symantec Endpoint Protection Enterprise"
    keys = groups[0]["keys"]
    assert len(keys) == 1
    assert keys[0].startswith("SEPEP-")
    assert KEY_PATTERN.match(keys[0])

    details = client.get(f"/api/orders/{body['orderId']}").json()
    assert details["order"]["status"] == "completed"
    assert details["order"]["paymentStatus"] == "completed"
    assert details["order"]["paymentReference"] == body["transactionId"]
    assert details["order"]["subtotal"] == "89.99"
    assert details["order"]["gst"] == "9.00"
    assert details["order"]["total"] == "98.99"


def test_checkout_issues_one_key_per_seat(client, checkout_payload, repos):
    items = [
        {"productId": "endpoint-protection", "quantity": 3},
        {"productId": "endpoint-complete", "quantity": 2},
    ]
    body = client.post("/api/orders/checkout", json=checkout_payload(items=items)).json()

    # 3 * 89.99 + 2 * 149.99 = 569.95, GST 57.00 (56.995 rounds up)
    assert body["total"] == 626.95

    by_product = {group["productName"]: group["keys"] for group in body["licenseKeys"]}
    assert len(by_product["Symantec Endpoint Protection Enterprise"]) == 3
    assert len(by_product["Symantec Endpoint Security Complete"]) == 2
    assert all(key.startswith("SESCO-") for key in by_product["Symantec Endpoint Security Complete"])

    stored = repos.license_keys.list_for_order(body["orderId"])
    assert len(stored) == 5
    assert len({record.license_key for record in stored}) == 5
    assert all(record.status == "active" for record in stored)


def test_declined_card_keeps_failed_order(client, checkout_payload, repos):
    response = client.post("/api/orders/checkout", json=checkout_payload(card_number="0000000000000000"))
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Invalid card number. Use 4111 1111 1111 1111 for testing."

    order = repos.orders.get(body["orderId"])
    assert order is not None
    assert order.status == "failed"
    assert order.payment_status == "failed"
    assert len(repos.order_items.list_for_order(order.id)) == 1
    assert repos.license_keys.list_for_order(order.id) == []


def test_unknown_product_creates_nothing(client, checkout_payload, db):
    from storefront.models import Customer, Order

    items = [{"productId": "endpoint-lite", "quantity": 1}]
    response = client.post("/api/orders/checkout", json=checkout_payload(items=items))
    assert response.status_code == 400
    assert response.json() == {"message": "Product endpoint-lite not found"}
    assert db.query(Order).count() == 0
    assert db.query(Customer).count() == 0


def test_client_prices_are_ignored(client, checkout_payload):
    items = [{"productId": "endpoint-protection", "quantity": 1, "price": 0.01}]
    body = client.post("/api/orders/checkout", json=checkout_payload(items=items)).json()
    assert body["total"] == 98.99


def test_customer_is_reused_by_email(client, checkout_payload, db):
    from storefront.models import Customer

    first = client.post("/api/orders/checkout", json=checkout_payload()).json()
    second = client.post("/api/orders/checkout", json=checkout_payload()).json()
    assert first["orderId"] != second["orderId"]
    assert db.query(Customer).filter(Customer.email == "jane@example.com").count() == 1


def test_billing_snapshot_stored_on_order(client, checkout_payload, repos):
    body = client.post("/api/orders/checkout", json=checkout_payload()).json()
    billing = repos.orders.get(body["orderId"]).billing_address
    assert billing["street"] == "1 George St"
    assert billing["postcode"] == "2000"


def test_empty_items_rejected(client, checkout_payload):
    response = client.post("/api/orders/checkout", json=checkout_payload(items=[]))
    assert response.status_code == 400
    assert response.json()["message"].startswith("items:")


def test_short_postcode_rejected(client, checkout_payload, billing):
    billing["postcode"] = "200"
    response = client.post("/api/orders/checkout", json=checkout_payload())
    assert response.status_code == 400
    assert response.json()["message"].startswith("billing.postcode:")


def test_zero_quantity_rejected(client, checkout_payload):
    items = [{"productId": "endpoint-protection", "quantity": 0}]
    response = client.post("/api/orders/checkout", json=checkout_payload(items=items))
    assert response.status_code == 400


def test_verified_email_required_when_enabled(client, checkout_payload, test_settings):
    test_settings.REQUIRE_VERIFIED_EMAIL = True

    response = client.post("/api/orders/checkout", json=checkout_payload())
    assert response.status_code == 403

    code = client.post("/api/auth/send-otp", json={"email": "jane@example.com"}).json()["demoOtp"]
    client.post("/api/auth/verify-otp", json={"email": "jane@example.com", "code": code})

    response = client.post("/api/orders/checkout", json=checkout_payload())
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_license_email_failure_after_payment(client, db, checkout_payload, repos, monkeypatch):
    from storefront.models import Order

    async def broken_send_email(*args, **kwargs):
        raise EmailDeliveryError("smtp down")

    monkeypatch.setattr(email_service, "send_email", broken_send_email)

    response = TestClient(app, raise_server_exceptions=False).post(
        "/api/orders/checkout", json=checkout_payload()
    )
    assert response.status_code == 500
    assert response.json() == {"message": "Failed to send license keys email"}

    # Payment went through and keys were stored before the email step
    order = db.query(Order).one()
    assert order.status == "completed"
    assert len(repos.license_keys.list_for_order(order.id)) == 1


def test_test_card_without_spaces(client, checkout_payload):
    response = client.post("/api/orders/checkout", json=checkout_payload(card_number=TEST_CARD.replace(" ", "")))
    assert response.json()["success"] is True


def test_inactive_product_cannot_be_bought(client, checkout_payload, db, repos):
    from storefront.models import Order

    repos.products.get("endpoint-complete").is_active = False
    db.commit()

    items = [{"productId": "endpoint-complete", "quantity": 1}]
    response = client.post("/api/orders/checkout", json=checkout_payload(items=items))
    assert response.status_code == 400
    assert response.json() == {"message": "Product endpoint-complete not found"}
    assert db.query(Order).count() == 0

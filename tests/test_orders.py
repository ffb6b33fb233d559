import pytest

from storefront.exceptions import EmailDeliveryError
from storefront.services import email_service


@pytest.fixture
def order_id(client, checkout_payload):
    items = [
        {"productId": "endpoint-protection", "quantity": 2},
        {"productId": "endpoint-complete", "quantity": 1},
    ]
    return client.post("/api/orders/checkout", json=checkout_payload(items=items)).json()["orderId"]


def test_order_details(client, order_id):
    response = client.get(f"/api/orders/{order_id}")
    assert response.status_code == 200
    body = response.json()

    assert body["order"]["id"] == order_id
    assert body["order"]["total"] == "362.97"
    assert [item["quantity"] for item in body["items"]] == [2, 1]
    assert len(body["licenseKeys"]) == 3
    assert body["customer"]["email"] == "jane@example.com"
    assert body["customer"]["firstName"] == "Jane"


def test_unknown_order_is_404(client):
    assert client.get("/api/orders/NK2IT-0-NOPE").status_code == 404
    response = client.get("/api/orders/NK2IT-0-NOPE/invoice")
    assert response.status_code == 404
    assert response.json() == {"message": "Order not found"}


def test_invoice_pdf_download(client, order_id):
    response = client.get(f"/api/orders/{order_id}/invoice")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == f'attachment; filename="NK2IT-Invoice-{order_id}.pdf"'
    assert response.content.startswith(b"%PDF")


def test_invoice_html_view(client, order_id, repos):
    response = client.get(f"/api/orders/{order_id}/invoice", params={"format": "html"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")

    html = response.text
    assert order_id in html
    assert "Jane Citizen" in html
    assert "$362.97" in html
    assert "GST (10%)" in html
    for record in repos.license_keys.list_for_order(order_id):
        assert record.license_key in html


def test_failed_order_invoice_has_no_keys(client, checkout_payload):
    order_id = client.post(
        "/api/orders/checkout", json=checkout_payload(card_number="5555555555554444")
    ).json()["orderId"]
    html = client.get(f"/api/orders/{order_id}/invoice", params={"format": "html"}).text
    assert "LICENSE KEYS" not in html
    assert client.get(f"/api/orders/{order_id}/invoice").content.startswith(b"%PDF")


def test_email_invoice(client, order_id, monkeypatch):
    sent = []

    async def capture(to, subject, html_content, attachments=None):
        sent.append((to, subject, attachments))

    monkeypatch.setattr(email_service, "send_email", capture)

    response = client.post(f"/api/orders/{order_id}/email-invoice")
    assert response.status_code == 200
    assert response.json() == {"message": "Invoice sent successfully"}

    to, subject, attachments = sent[0]
    assert to == "jane@example.com"
    assert order_id in subject
    filename, content, subtype = attachments[0]
    assert filename == f"NK2IT-Invoice-{order_id}.pdf"
    assert content.startswith(b"%PDF")
    assert subtype == "pdf"


def test_email_invoice_failure(client, order_id, monkeypatch):
    async def broken(*args, **kwargs):
        raise EmailDeliveryError("smtp down")

    monkeypatch.setattr(email_service, "send_email", broken)

    response = client.post(f"/api/orders/{order_id}/email-invoice")
    assert response.status_code == 500
    assert response.json() == {"message": "Failed to send invoice email"}


def test_email_invoice_unknown_order(client):
    response = client.post("/api/orders/missing/email-invoice")
    assert response.status_code == 404

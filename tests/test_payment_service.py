import asyncio
import json
from decimal import Decimal

import httpx
import pytest

from storefront.config import Settings
from storefront.services.payment_service import (
    TEST_CARD_ERROR,
    BillingDetails,
    PaymentDetails,
    PaymentService,
)


def make_details(card_number="4111 1111 1111 1111", amount=Decimal("98.99")):
    return PaymentDetails(
        card_number=card_number,
        expiry_date="12/29",
        cvv="123",
        cardholder_name="Jane Citizen",
        amount=amount,
        currency="AUD",
        order_id="NK2IT-1-ABCDEF",
        customer_email="jane@example.com",
        billing_address=BillingDetails(
            first_name="Jane",
            last_name="Citizen",
            street="1 George St",
            city="Sydney",
            state="NSW",
            postcode="2000",
        ),
    )


@pytest.fixture
def production():
    return Settings(
        ENVIRONMENT="production",
        PAYMENT_API_URL="https://gateway.test/webapi/v3",
        PAYMENT_MERCHANT_ID="merchant",
        PAYMENT_API_KEY="secret",
    )


# ============================================================
# SIMULATED GATEWAY
# ============================================================

@pytest.mark.parametrize("card_number", ["4111 1111 1111 1111", "4111111111111111", "4111 111111111111"])
def test_simulated_test_card_succeeds(test_settings, card_number):
    result = asyncio.run(PaymentService(test_settings).process_payment(make_details(card_number)))
    assert result.success
    assert result.transaction_id.startswith("DEMO_")
    assert result.reference == "NK2IT-1-ABCDEF"
    assert result.raw_response["amount"] == 9899


@pytest.mark.parametrize("card_number", ["5555 5555 5555 4444", "4111 1111 1111 1112", ""])
def test_simulated_other_cards_decline(test_settings, card_number):
    result = asyncio.run(PaymentService(test_settings).process_payment(make_details(card_number)))
    assert not result.success
    assert result.error == TEST_CARD_ERROR
    assert result.transaction_id is None


def test_simulated_refund(test_settings):
    result = asyncio.run(PaymentService(test_settings).refund_payment("DEMO_1_X", Decimal("10.00")))
    assert result.success
    assert result.transaction_id.startswith("REFUND_")
    assert result.reference == "DEMO_1_X"


def test_test_mode_follows_environment(production, test_settings):
    assert PaymentService(test_settings).test_mode
    assert not PaymentService(production).test_mode


# ============================================================
# LIVE GATEWAY
# ============================================================

def test_live_payment_posts_transaction(production):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization", "")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={"responseCode": "SUCCESS", "transactionNumber": "TXN-1", "merchantReference": "NK2IT-1-ABCDEF"},
        )

    service = PaymentService(production, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.process_payment(make_details()))

    assert result.success
    assert result.transaction_id == "TXN-1"
    assert seen["url"] == "https://gateway.test/webapi/v3/transactions"
    assert seen["auth"].startswith("Basic ")

    body = seen["body"]
    assert body["amount"] == 9899
    assert body["type"] == "payment"
    assert body["card"]["cardNumber"] == "4111111111111111"
    assert body["card"]["expiryDateMonth"] == "12"
    assert body["card"]["expiryDateYear"] == "2029"
    assert body["customer"]["address"]["countryCode"] == "AU"


def test_live_payment_decline_uses_gateway_text(production):
    def handler(request):
        return httpx.Response(200, json={"responseCode": "DECLINED", "responseText": "Insufficient funds"})

    service = PaymentService(production, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.process_payment(make_details()))
    assert not result.success
    assert result.error == "Insufficient funds"


def test_live_payment_http_error_without_text(production):
    def handler(request):
        return httpx.Response(502, json={})

    service = PaymentService(production, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.process_payment(make_details()))
    assert result.error == "Payment processing failed"


def test_live_payment_unreachable(production):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = PaymentService(production, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.process_payment(make_details()))
    assert not result.success
    assert result.error == "Payment service unavailable. Please try again later."


def test_live_refund(production):
    seen = {}

    def handler(request):
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"responseCode": "SUCCESS", "transactionNumber": "RF-9"})

    service = PaymentService(production, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.refund_payment("TXN-1", Decimal("98.99"), reason="Duplicate order"))
    assert result.success
    assert result.transaction_id == "RF-9"
    assert seen["body"] == {
        "originalTxnNumber": "TXN-1",
        "amount": 9899,
        "type": "refund",
        "merchantReference": "Duplicate order",
    }


def test_live_refund_unreachable(production):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    service = PaymentService(production, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.refund_payment("TXN-1", "5.00"))
    assert result.error == "Refund service unavailable. Please try again later."


@pytest.mark.parametrize("body", [["oops"], "SUCCESS", 42, None])
def test_live_payment_non_object_response(production, body):
    def handler(request):
        return httpx.Response(200, json=body)

    service = PaymentService(production, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.process_payment(make_details()))
    assert not result.success
    assert result.error == "Payment processing failed"
    assert result.transaction_id is None


def test_live_refund_non_object_response(production):
    def handler(request):
        return httpx.Response(200, json=["oops"])

    service = PaymentService(production, transport=httpx.MockTransport(handler))
    result = asyncio.run(service.refund_payment("TXN-1", "5.00"))
    assert not result.success
    assert result.error == "Refund processing failed"

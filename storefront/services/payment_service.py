"""
License Storefront - Card Payment Service
Posts card transactions to a BPOINT style REST gateway in production.
Everywhere else payments are simulated: only the test card 4111 1111 1111 1111 succeeds.
"""
import asyncio
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx

from storefront.config import Settings, settings

logger = logging.getLogger(__name__)

TEST_CARD_NUMBER = "4111111111111111"
TEST_CARD_ERROR = "Invalid card number. Use 4111 1111 1111 1111 for testing."


@dataclass
class BillingDetails:
    first_name: str
    last_name: str
    street: str
    city: str
    state: str
    postcode: str
    country: str = "Australia"


@dataclass
class PaymentDetails:
    card_number: str
    expiry_date: str  # MM/YY
    cvv: str
    cardholder_name: str
    amount: Decimal
    currency: str
    order_id: str
    customer_email: str
    billing_address: BillingDetails


@dataclass
class PaymentResult:
    success: bool
    transaction_id: Optional[str] = None
    reference: Optional[str] = None
    error: Optional[str] = None
    raw_response: Dict[str, Any] = field(default_factory=dict)


def _to_cents(amount) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1")))


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(length))


class PaymentService:
    """Card payment gateway adapter"""

    def __init__(self, config: Settings = settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    @property
    def test_mode(self) -> bool:
        return self.config.payment_test_mode

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.PAYMENT_API_URL,
            auth=(self.config.PAYMENT_MERCHANT_ID, self.config.PAYMENT_API_KEY),
            timeout=self.config.PAYMENT_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    async def _post_transaction(self, payload: dict, failure_message: str, unavailable_message: str) -> PaymentResult:
        try:
            async with self._client() as client:
                response = await client.post("/transactions", json=payload)
            result = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Payment gateway error: {e}")
            return PaymentResult(success=False, error=unavailable_message)

        if not isinstance(result, dict):
            logger.error(f"Unexpected payment gateway response: {result!r}")
            return PaymentResult(success=False, error=failure_message)

        if response.is_success and result.get("responseCode") == "SUCCESS":
            return PaymentResult(
                success=True,
                transaction_id=result.get("transactionNumber"),
                reference=result.get("merchantReference"),
                raw_response=result,
            )

        return PaymentResult(
            success=False,
            error=result.get("responseText") or failure_message,
            raw_response=result,
        )

    # ============================================================
    # PAYMENTS
    # ============================================================

    async def process_payment(self, details: PaymentDetails) -> PaymentResult:
        if self.test_mode:
            return await self.simulate_payment(details)

        month, _, year = details.expiry_date.partition("/")
        billing = details.billing_address
        payload = {
            "amount": _to_cents(details.amount),
            "currency": details.currency,
            "reference": details.order_id,
            "customer": {
                "contactDetails": {
                    "emailAddress": details.customer_email,
                    "firstName": billing.first_name,
                    "lastName": billing.last_name,
                },
                "address": {
                    "addressLine1": billing.street,
                    "city": billing.city,
                    "state": billing.state,
                    "postCode": billing.postcode,
                    "countryCode": self.config.BILLING_COUNTRY_CODE,
                },
            },
            "card": {
                "cardNumber": details.card_number.replace(" ", ""),
                "expiryDateMonth": month.strip(),
                "expiryDateYear": f"20{year.strip()}",
                "cvn": details.cvv,
                "cardHolderName": details.cardholder_name,
            },
            "type": "payment",
        }

        result = await self._post_transaction(
            payload,
            failure_message="Payment processing failed",
            unavailable_message="Payment service unavailable. Please try again later.",
        )
        logger.info(f"Payment for order {details.order_id}: {'approved' if result.success else 'declined'}")
        return result

    async def simulate_payment(self, details: PaymentDetails) -> PaymentResult:
        """No Luhn, expiry or CVV checks; only the test card number matters"""
        if self.config.PAYMENT_SIMULATION_DELAY_SECONDS > 0:
            await asyncio.sleep(self.config.PAYMENT_SIMULATION_DELAY_SECONDS)

        if details.card_number.replace(" ", "") != TEST_CARD_NUMBER:
            logger.info(f"Demo payment declined for order {details.order_id}")
            return PaymentResult(success=False, error=TEST_CARD_ERROR)

        transaction_id = f"DEMO_{int(time.time() * 1000)}_{_random_suffix(9)}"
        logger.info(
            f"Demo payment processed: {transaction_id} "
            f"${Decimal(str(details.amount)):.2f} {details.currency}"
        )
        return PaymentResult(
            success=True,
            transaction_id=transaction_id,
            reference=details.order_id,
            raw_response={
                "responseCode": "SUCCESS",
                "transactionNumber": transaction_id,
                "merchantReference": details.order_id,
                "amount": _to_cents(details.amount),
                "currency": details.currency,
                "testMode": True,
            },
        )

    # ============================================================
    # REFUNDS
    # ============================================================

    async def refund_payment(self, transaction_id: str, amount, reason: Optional[str] = None) -> PaymentResult:
        if self.test_mode:
            logger.info(f"Demo refund: {transaction_id} - ${Decimal(str(amount)):.2f}")
            return PaymentResult(
                success=True,
                transaction_id=f"REFUND_{int(time.time() * 1000)}",
                reference=transaction_id,
            )

        payload = {
            "originalTxnNumber": transaction_id,
            "amount": _to_cents(amount),
            "type": "refund",
        }
        if reason:
            payload["merchantReference"] = reason

        return await self._post_transaction(
            payload,
            failure_message="Refund processing failed",
            unavailable_message="Refund service unavailable. Please try again later.",
        )


payment_service = PaymentService()


def get_payment_service() -> PaymentService:
    return payment_service

"""
License Storefront - Checkout
Runs one checkout attempt end to end:
resolve products -> totals -> customer -> order -> items -> payment -> keys -> email.

Steps run strictly in order with no rollback. The order and its items are kept
even when the payment is declined.
"""
import logging
import secrets
import string
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from storefront.config import settings
from storefront.exceptions import EmailNotVerified, ProductNotFound
from storefront.models import Customer, Order, OrderItem, OrderStatus, PaymentStatus
from storefront.repositories import Repositories
from storefront.schemas import CheckoutRequest
from storefront.services import email_service
from storefront.services.license_service import generate_license_keys
from storefront.services.payment_service import BillingDetails, PaymentDetails, PaymentService
from storefront.services.pricing import calculate_totals, to_money

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    success: bool
    order_id: str
    total: Decimal
    transaction_id: Optional[str] = None
    license_keys: List[dict] = field(default_factory=list)
    message: Optional[str] = None

    def to_dict(self) -> dict:
        if self.success:
            return {
                "success": True,
                "orderId": self.order_id,
                "transactionId": self.transaction_id,
                "licenseKeys": self.license_keys,
                "total": float(self.total),
            }
        return {
            "success": False,
            "message": self.message,
            "orderId": self.order_id,
        }


def generate_order_id() -> str:
    suffix = "".join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(6))
    return f"{settings.ORDER_ID_PREFIX}-{int(time.time() * 1000)}-{suffix}"


class CheckoutService:
    def __init__(self, repos: Repositories, payments: PaymentService):
        self.repos = repos
        self.payments = payments

    def _resolve_products(self, request: CheckoutRequest) -> List[tuple]:
        lines = []
        for item in request.items:
            product = self.repos.products.get(item.product_id)
            if not product or not product.is_active:
                raise ProductNotFound(item.product_id)
            lines.append((product, item.quantity))
        return lines

    def _get_or_create_customer(self, request: CheckoutRequest) -> Customer:
        customer = self.repos.customers.get_by_email(request.email)
        if customer:
            return customer
        billing = request.billing
        return self.repos.customers.create(
            email=request.email,
            first_name=billing.first_name,
            last_name=billing.last_name,
            company=billing.company,
            phone=billing.phone,
        )

    def _create_items(self, order: Order, lines: List[tuple]) -> List[OrderItem]:
        items = []
        for product, quantity in lines:
            price = to_money(product.price)
            items.append(
                self.repos.order_items.create(
                    order_id=order.id,
                    product_id=product.id,
                    product_name=product.name,
                    price=price,
                    quantity=quantity,
                    total=to_money(price * quantity),
                )
            )
        return items

    def _issue_license_keys(self, order: Order, items: List[OrderItem]) -> List[dict]:
        issued = []
        for item in items:
            keys = generate_license_keys(item.product_id, item.quantity)
            for key in keys:
                self.repos.license_keys.create(
                    order_id=order.id,
                    order_item_id=item.id,
                    product_id=item.product_id,
                    license_key=key,
                )
            issued.append({"productName": item.product_name, "keys": keys})
        logger.info(f"Issued {sum(len(g['keys']) for g in issued)} license keys for order {order.id}")
        return issued

    async def checkout(self, request: CheckoutRequest) -> CheckoutResult:
        if settings.REQUIRE_VERIFIED_EMAIL and not self.repos.otp_codes.has_verified(request.email):
            raise EmailNotVerified(request.email)

        lines = self._resolve_products(request)
        totals = calculate_totals((product.price, quantity) for product, quantity in lines)

        customer = self._get_or_create_customer(request)

        order = self.repos.orders.create(
            id=generate_order_id(),
            customer_id=customer.id,
            email=request.email,
            status=OrderStatus.PROCESSING.value,
            subtotal=totals.subtotal,
            gst=totals.gst,
            total=totals.total,
            payment_method="credit_card",
            payment_status=PaymentStatus.PENDING.value,
            billing_address=request.billing.model_dump(by_alias=True),
        )
        items = self._create_items(order, lines)
        logger.info(f"Order {order.id} created for {request.email}: ${totals.total:.2f} {settings.CURRENCY}")

        billing = request.billing
        payment = await self.payments.process_payment(
            PaymentDetails(
                card_number=request.payment.card_number,
                expiry_date=request.payment.expiry_date,
                cvv=request.payment.cvv,
                cardholder_name=request.payment.cardholder_name,
                amount=totals.total,
                currency=settings.CURRENCY,
                order_id=order.id,
                customer_email=request.email,
                billing_address=BillingDetails(
                    first_name=billing.first_name,
                    last_name=billing.last_name,
                    street=billing.street,
                    city=billing.city,
                    state=billing.state,
                    postcode=billing.postcode,
                    country=settings.BILLING_COUNTRY,
                ),
            )
        )

        if not payment.success:
            self.repos.orders.update_status(order.id, OrderStatus.FAILED.value)
            logger.info(f"Order {order.id} failed: {payment.error}")
            return CheckoutResult(
                success=False,
                order_id=order.id,
                total=totals.total,
                message=payment.error or "Payment processing failed",
            )

        self.repos.orders.update_status(order.id, OrderStatus.COMPLETED.value, payment.transaction_id)
        license_keys = self._issue_license_keys(order, items)

        # Not guarded: a delivery failure here surfaces as an internal error after the charge
        await email_service.send_license_keys(request.email, order.id, license_keys)

        return CheckoutResult(
            success=True,
            order_id=order.id,
            total=totals.total,
            transaction_id=payment.transaction_id,
            license_keys=license_keys,
        )

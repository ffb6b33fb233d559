"""
License Storefront - Orders Router
Handles: checkout, order details, invoice download, invoice email
"""
import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response

from storefront.exceptions import NotFoundError
from storefront.repositories import Repositories, get_repositories
from storefront.schemas import CheckoutRequest
from storefront.services import email_service
from storefront.services.checkout import CheckoutService
from storefront.services.invoice_service import (
    InvoiceData,
    group_license_keys,
    render_invoice_html,
    render_invoice_pdf,
)
from storefront.services.payment_service import PaymentService, get_payment_service

logger = logging.getLogger(__name__)

router = APIRouter()


def get_checkout_service(
    repos: Repositories = Depends(get_repositories),
    payments: PaymentService = Depends(get_payment_service),
) -> CheckoutService:
    return CheckoutService(repos, payments)


def load_invoice_data(order_id: str, repos: Repositories) -> InvoiceData:
    order = repos.orders.get(order_id)
    if not order:
        raise NotFoundError("Order not found")

    customer = repos.customers.get(order.customer_id)
    if not customer:
        raise NotFoundError("Customer not found")

    items = repos.order_items.list_for_order(order.id)
    license_keys = repos.license_keys.list_for_order(order.id)
    return InvoiceData(
        order=order,
        customer=customer,
        items=items,
        license_keys=group_license_keys(items, license_keys),
    )


@router.post("/checkout")
async def checkout(request: CheckoutRequest, service: CheckoutService = Depends(get_checkout_service)):
    """Charge the card and issue one license key per seat"""
    result = await service.checkout(request)
    if not result.success:
        return JSONResponse(status_code=400, content=result.to_dict())
    return result.to_dict()


@router.get("/{order_id}")
async def get_order(order_id: str, repos: Repositories = Depends(get_repositories)):
    order = repos.orders.get(order_id)
    if not order:
        raise NotFoundError("Order not found")

    customer = repos.customers.get(order.customer_id)
    return {
        "order": order.to_dict(),
        "items": [item.to_dict() for item in repos.order_items.list_for_order(order.id)],
        "licenseKeys": [key.to_dict() for key in repos.license_keys.list_for_order(order.id)],
        "customer": customer.to_dict() if customer else None,
    }


@router.get("/{order_id}/invoice")
async def download_invoice(
    order_id: str,
    fmt: str = Query("pdf", alias="format"),
    repos: Repositories = Depends(get_repositories),
):
    """PDF by default, ?format=html for the browser view"""
    data = load_invoice_data(order_id, repos)

    if fmt == "html":
        return HTMLResponse(render_invoice_html(data))

    return Response(
        content=render_invoice_pdf(data),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{data.filename}"'},
    )


@router.post("/{order_id}/email-invoice")
async def email_invoice(order_id: str, repos: Repositories = Depends(get_repositories)):
    data = load_invoice_data(order_id, repos)
    await email_service.send_invoice(data.order.email, data.order.id, render_invoice_pdf(data))
    logger.info(f"Invoice for order {order_id} emailed to {data.order.email}")
    return {"message": "Invoice sent successfully"}

"""
License Storefront - Invoice Rendering
Turns an order, its customer, line items and license keys into a PDF (ReportLab)
or an HTML page (Jinja2). Pure formatting: nothing is read or written here.
"""
from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from typing import Dict, List, Optional

from jinja2 import Environment, PackageLoader, select_autoescape
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from storefront.config import settings
from storefront.models import Customer, LicenseKey, Order, OrderItem

ORANGE = colors.HexColor("#FF7A00")
GREEN = colors.HexColor("#00A65A")

TERMS = [
    "Payment Terms: Once the payment is processed, a license key will be sent to the registered email address.",
    "",
    "Refund Policy: All sales are final. No refunds will be issued after the software has been purchased or "
    "delivered. If the software is defective or an incorrect product is delivered, please contact customer "
    "support within 7 days.",
    "",
    "License Terms: The purchase provides a non-transferable license to use the software. Ownership remains "
    "with the vendor and is subject to the terms of the EULA (End-User License Agreement).",
    "",
    "Support: Basic customer support is available through {support_email}. If you require extended support, "
    "you must coordinate with respective vendors.",
    "",
    "Limitation of Liability: Our liability is limited to the purchase price of the software. We are not "
    "responsible for any consequential, incidental, or indirect damages arising from the use or inability "
    "to use the software.",
]


@dataclass
class InvoiceData:
    order: Order
    customer: Customer
    items: List[OrderItem]
    license_keys: List[dict] = field(default_factory=list)  # [{"productName", "keys"}]
    issued_at: Optional[datetime] = None

    @property
    def invoice_date(self) -> str:
        return (self.issued_at or self.order.created_at or datetime.now()).strftime("%d/%m/%Y")

    @property
    def filename(self) -> str:
        return f"{settings.ORDER_ID_PREFIX}-Invoice-{self.order.id}.pdf"


def group_license_keys(items: List[OrderItem], license_keys: List[LicenseKey]) -> List[dict]:
    """Group keys under the product name of the order item they were issued for"""
    names = {item.id: item.product_name for item in items}
    grouped: Dict[str, List[str]] = {}
    for record in license_keys:
        name = names.get(record.order_item_id)
        if name is None:
            continue
        grouped.setdefault(name, []).append(record.license_key)
    return [{"productName": name, "keys": keys} for name, keys in grouped.items()]


def terms_lines() -> List[str]:
    return [line.format(support_email=settings.SUPPORT_EMAIL) for line in TERMS]


# ============================================================
# PDF
# ============================================================

class _PageWriter:
    """Keeps a cursor and starts a new page when the next block would not fit"""

    left = 50
    right = A4[0] - 50
    top = A4[1] - 50
    bottom = 90

    def __init__(self, pdf: canvas.Canvas, footer):
        self.pdf = pdf
        self.footer = footer
        self.y = self.top

    def ensure(self, height: float) -> None:
        if self.y - height < self.bottom:
            self.footer(self.pdf)
            self.pdf.showPage()
            self.y = self.top

    def text(self, value: str, size: int = 12, bold: bool = False, x: Optional[float] = None,
             color=colors.black, gap: float = 16) -> None:
        self.ensure(gap)
        self.pdf.setFillColor(color)
        self.pdf.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.pdf.drawString(self.left if x is None else x, self.y, value)
        self.y -= gap

    def wrapped(self, value: str, size: int = 10, leading: float = 13) -> None:
        for line in simpleSplit(value, "Helvetica", size, self.right - self.left):
            self.text(line, size=size, gap=leading)


def _draw_footer(pdf: canvas.Canvas) -> None:
    width = A4[0]
    pdf.setFillColor(GREEN)
    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawCentredString(width / 2, 60, f"Thank you for your purchase! Powered by {settings.EMAIL_FROM_NAME}")
    pdf.setFillColor(colors.black)
    pdf.setFont("Helvetica", 9)
    pdf.drawCentredString(
        width / 2,
        42,
        f"Email: {settings.SUPPORT_EMAIL} | Phone: {settings.SUPPORT_PHONE} | Website: {settings.COMPANY_WEBSITE}",
    )


def render_invoice_pdf(data: InvoiceData) -> bytes:
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(f"Invoice {data.order.id}")
    page = _PageWriter(pdf, _draw_footer)

    # Header and company block
    page.text("INVOICE", size=28, bold=True, color=ORANGE, gap=40)
    header_y = page.y
    page.text(settings.COMPANY_NAME, size=16, bold=True, gap=20)
    for line in settings.COMPANY_ADDRESS:
        page.text(line)
    pdf.setFont("Helvetica", 11)
    pdf.drawString(330, header_y, f"INVOICE NUMBER: {data.order.id}")
    pdf.drawString(330, header_y - 18, f"Date: {data.invoice_date}")
    page.y -= 20

    # Bill to
    billing = data.order.billing_address or {}
    page.text("BILL TO", size=14, bold=True, gap=20)
    page.text(data.customer.full_name)
    if data.customer.company:
        page.text(data.customer.company)
    street = billing.get("street")
    if street:
        page.text(street)
        page.text(f"{billing.get('city', '')} {billing.get('state', '')} {billing.get('postcode', '')}".strip())
    page.text(f"Email: {data.order.email}")
    page.y -= 20

    # Line items
    columns = (("NO", 50), ("QTY", 85), ("PRODUCT DESCRIPTION", 130), ("UNIT PRICE", 390), ("TOTAL PRICE", 475))
    page.ensure(40)
    pdf.setFont("Helvetica-Bold", 11)
    for label, x in columns:
        pdf.drawString(x, page.y, label)
    pdf.line(page.left, page.y - 6, page.right, page.y - 6)
    page.y -= 24

    for number, item in enumerate(data.items, start=1):
        name_lines = simpleSplit(item.product_name, "Helvetica", 11, 250)
        page.ensure(16 * len(name_lines))
        pdf.setFillColor(colors.black)
        pdf.setFont("Helvetica", 11)
        pdf.drawString(50, page.y, str(number))
        pdf.drawString(85, page.y, str(item.quantity))
        pdf.drawString(390, page.y, f"${item.price:.2f}")
        pdf.drawString(475, page.y, f"${item.total:.2f}")
        for line in name_lines:
            pdf.drawString(130, page.y, line)
            page.y -= 16

    # Totals
    page.y -= 10
    page.ensure(60)
    for label, amount, bold in (
        ("SUBTOTAL:", data.order.subtotal, False),
        ("GST (10%):", data.order.gst, False),
        ("TOTAL:", data.order.total, True),
    ):
        pdf.setFont("Helvetica-Bold" if bold else "Helvetica", 11)
        pdf.drawString(390, page.y, label)
        pdf.drawString(475, page.y, f"${amount:.2f}")
        page.y -= 18
    page.y -= 12

    # License keys
    if data.license_keys:
        page.text("LICENSE KEYS", size=14, bold=True, gap=20)
        for group in data.license_keys:
            page.text(group["productName"], size=11, bold=True)
            for key in group["keys"]:
                page.text(key, size=10, x=page.left + 15, gap=14)
            page.y -= 6
        page.y -= 10

    # Terms
    page.text("TERMS & CONDITIONS:", size=14, bold=True, gap=20)
    for line in terms_lines():
        if not line:
            page.y -= 8
            continue
        page.wrapped(line)

    _draw_footer(pdf)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


# ============================================================
# HTML
# ============================================================

_templates = Environment(
    loader=PackageLoader("storefront", "templates"),
    autoescape=select_autoescape(["html"]),
)


def render_invoice_html(data: InvoiceData) -> str:
    template = _templates.get_template("invoice.html")
    return template.render(
        invoice=data,
        order=data.order,
        customer=data.customer,
        billing=data.order.billing_address or {},
        items=data.items,
        license_keys=data.license_keys,
        terms=[line for line in terms_lines() if line],
        settings=settings,
    )

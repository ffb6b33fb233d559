"""
License Storefront - Pricing
Money rounding and GST, shared by the cart and the checkout.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple, Union

from storefront.config import settings

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_money(value: Number) -> Decimal:
    """Round to cents, half-up"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_gst(subtotal: Number) -> Decimal:
    return to_money(to_money(subtotal) * Decimal(settings.GST_RATE))


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    gst: Decimal
    total: Decimal


def calculate_totals(lines: Iterable[Tuple[Number, int]]) -> Totals:
    """Totals for (unit price, quantity) pairs: total = subtotal + round(subtotal * GST, 2)"""
    subtotal = to_money(sum((to_money(price) * quantity for price, quantity in lines), Decimal("0")))
    gst = calculate_gst(subtotal)
    return Totals(subtotal=subtotal, gst=gst, total=subtotal + gst)

"""
License Storefront - Cart
Client-side cart: quantities and displayed prices, GST, and local JSON persistence.
Prices here are for display only; checkout sends product ids and quantities.
"""
import json
import logging
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Union

from storefront.services.pricing import calculate_gst, to_money

logger = logging.getLogger(__name__)

DEFAULT_CART_FILE = "nk2it-cart.json"


@dataclass
class CartItem:
    id: str
    name: str
    price: Decimal
    quantity: int
    description: str = ""

    @property
    def line_total(self) -> Decimal:
        return to_money(self.price * self.quantity)


@dataclass
class Cart:
    items: List[CartItem] = field(default_factory=list)

    def _find(self, product_id: str) -> Optional[CartItem]:
        for item in self.items:
            if item.id == product_id:
                return item
        return None

    def add_item(self, product, quantity: int = 1) -> None:
        """Add a product (any object or dict with id, name, price, description). Merges by id."""
        if isinstance(product, dict):
            data = product
        else:
            data = {key: getattr(product, key, "") for key in ("id", "name", "price", "description")}
        existing = self._find(data["id"])
        if existing:
            existing.quantity += quantity
            return
        self.items.append(
            CartItem(
                id=data["id"],
                name=data["name"],
                price=to_money(data["price"]),
                quantity=quantity,
                description=data.get("description", ""),
            )
        )

    def remove_item(self, product_id: str) -> None:
        self.items = [item for item in self.items if item.id != product_id]

    def update_quantity(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return
        item = self._find(product_id)
        if item:
            item.quantity = quantity

    def clear(self) -> None:
        self.items = []

    # ============================================================
    # TOTALS
    # ============================================================

    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def subtotal(self) -> Decimal:
        return to_money(sum((item.price * item.quantity for item in self.items), Decimal("0")))

    def gst(self) -> Decimal:
        return calculate_gst(self.subtotal())

    def total(self) -> Decimal:
        return self.subtotal() + self.gst()

    def checkout_items(self) -> List[dict]:
        return [{"productId": item.id, "quantity": item.quantity} for item in self.items]

    # ============================================================
    # PERSISTENCE
    # ============================================================

    def save(self, path: Union[str, Path] = DEFAULT_CART_FILE) -> None:
        payload = {"items": [dict(asdict(item), price=str(item.price)) for item in self.items]}
        Path(path).write_text(json.dumps(payload, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Union[str, Path] = DEFAULT_CART_FILE) -> "Cart":
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable cart file {path}")
            return cls()
        items = [
            CartItem(
                id=raw["id"],
                name=raw["name"],
                price=to_money(raw["price"]),
                quantity=int(raw["quantity"]),
                description=raw.get("description", ""),
            )
            for raw in payload.get("items", [])
        ]
        return cls(items=items)

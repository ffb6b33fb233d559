"""
License Storefront - Catalog
Static seed data for the product catalog and read-only lookups.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from storefront.models import Product
from storefront.repositories import ProductRepository

logger = logging.getLogger(__name__)


# ============================================================
# SEED DATA
# ============================================================

SEED_PRODUCTS = [
    {
        "id": "endpoint-protection",
        "name": "Symantec Endpoint Protection Enterprise",
        "description": "Comprehensive endpoint security with advanced threat protection for enterprise environments.",
        "price": Decimal("89.99"),
        "features": [
            "Advanced malware protection",
            "Real-time threat detection",
            "Centralized management console",
            "Network and email protection",
            "Device and application control",
        ],
    },
    {
        "id": "endpoint-complete",
        "name": "Symantec Endpoint Security Complete",
        "description": "Complete security suite with EDR, threat hunting, and advanced analytics capabilities.",
        "price": Decimal("149.99"),
        "features": [
            "Everything in Enterprise +",
            "Endpoint Detection & Response (EDR)",
            "Advanced threat hunting",
            "Behavioral forensics",
            "AI-driven adaptive protection",
            "Global Intelligence Network",
        ],
    },
]


def seed_products(products: ProductRepository) -> int:
    """Insert or refresh the seed catalog. Returns the number of products written."""
    for data in SEED_PRODUCTS:
        existing = products.get(data["id"])
        # Keep a product's active flag across restarts
        is_active = existing.is_active if existing is not None else True
        products.upsert(Product(is_active=is_active, **data))
    logger.info(f"Catalog seeded with {len(SEED_PRODUCTS)} products")
    return len(SEED_PRODUCTS)


# ============================================================
# CATALOG STORE
# ============================================================

class CatalogStore:
    """Read-only view over the product table"""

    def __init__(self, products: ProductRepository):
        self.products = products

    def list_products(self) -> List[Product]:
        return self.products.list_active()

    def get_product(self, product_id: str) -> Optional[Product]:
        return self.products.get(product_id)

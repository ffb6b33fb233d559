"""
License Storefront - License Key Service
Key generation, format validation and status changes.

Key format: <PRODUCT-PREFIX>-XXXXX-XXXXX-XXXXX-XXXX over [A-Z0-9].
Validation is a shape check only; keys carry no checksum.
"""
import logging
import re
import secrets
import string
from dataclasses import dataclass
from typing import Dict, List, Optional

from storefront.models import LicenseKey, LicenseStatus
from storefront.repositories import LicenseKeyRepository

logger = logging.getLogger(__name__)

KEY_ALPHABET = string.ascii_uppercase + string.digits
KEY_PATTERN = re.compile(r"^[A-Z0-9]+-[A-Z0-9]{5}-[A-Z0-9]{5}-[A-Z0-9]{5}-[A-Z0-9]{4}$")
SEGMENT_LENGTHS = (5, 5, 5, 4)

PRODUCT_PREFIXES: Dict[str, str] = {
    "endpoint-protection": "SEPEP",
    "endpoint-complete": "SESCO",
}
DEFAULT_PREFIX = "SYMNT"


@dataclass
class KeyRequest:
    """One line of a batch generation"""
    product_id: Optional[str]
    quantity: int
    order_id: Optional[str] = None
    order_item_id: Optional[str] = None


@dataclass
class KeyBatch:
    product_id: Optional[str]
    keys: List[str]
    order_id: Optional[str] = None
    order_item_id: Optional[str] = None


def _segment(length: int) -> str:
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(length))


def product_prefix(product_id: Optional[str]) -> str:
    return PRODUCT_PREFIXES.get(product_id or "", DEFAULT_PREFIX)


def generate_license_key(product_id: Optional[str]) -> str:
    segments = [product_prefix(product_id)] + [_segment(n) for n in SEGMENT_LENGTHS]
    return "-".join(segments)


def generate_license_keys(product_id: Optional[str], quantity: int) -> List[str]:
    """Return exactly `quantity` keys for the product"""
    return [generate_license_key(product_id) for _ in range(max(quantity, 0))]


def generate_batch(requests: List[KeyRequest]) -> List[KeyBatch]:
    return [
        KeyBatch(
            product_id=req.product_id,
            keys=generate_license_keys(req.product_id, req.quantity),
            order_id=req.order_id,
            order_item_id=req.order_item_id,
        )
        for req in requests
    ]


def is_valid_format(license_key: str) -> bool:
    return bool(license_key) and KEY_PATTERN.match(license_key) is not None


def product_for_key(license_key: str) -> Optional[str]:
    """Map a key's prefix back to its product id"""
    if not is_valid_format(license_key):
        return None
    prefix = license_key.split("-", 1)[0]
    for product_id, known in PRODUCT_PREFIXES.items():
        if known == prefix:
            return product_id
    return None


# ============================================================
# STATUS CHANGES
# ============================================================

class LicenseService:
    def __init__(self, license_keys: LicenseKeyRepository):
        self.license_keys = license_keys

    def lookup(self, license_key: str) -> Optional[LicenseKey]:
        if not is_valid_format(license_key):
            return None
        return self.license_keys.get_by_key(license_key)

    def revoke(self, license_key: str, reason: str = "User requested") -> bool:
        record = self.license_keys.update_status(license_key, LicenseStatus.REVOKED.value)
        if not record:
            return False
        logger.info(f"License revoked: {license_key} - Reason: {reason}")
        return True

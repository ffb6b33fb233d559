import enum
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey
from storefront.database import Base, utcnow


class LicenseStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


class LicenseKey(Base):
    """One row per purchased seat. Only the status ever changes."""
    __tablename__ = "license_keys"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String(64), ForeignKey("orders.id"), nullable=True, index=True)
    order_item_id = Column(String(36), ForeignKey("order_items.id"), nullable=True)
    product_id = Column(String(100), ForeignKey("products.id"), nullable=True)
    license_key = Column(String(64), unique=True, nullable=False, index=True)
    status = Column(String(20), default=LicenseStatus.ACTIVE.value)
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "orderId": self.order_id,
            "orderItemId": self.order_item_id,
            "productId": self.product_id,
            "licenseKey": self.license_key,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

from sqlalchemy import Column, String, Text, Numeric, Boolean, DateTime, JSON
from storefront.database import Base, utcnow


class Product(Base):
    """Catalog entry, seeded at startup and read-only afterwards"""
    __tablename__ = "products"

    id = Column(String(100), primary_key=True)  # endpoint-protection, endpoint-complete
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    features = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": f"{self.price:.2f}",
            "features": list(self.features or []),
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

import enum
import uuid

from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from storefront.database import Base, utcnow


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)  # NK2IT-<epoch ms>-<6 chars>
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    subtotal = Column(Numeric(10, 2), nullable=False)
    gst = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String(50), nullable=True)
    payment_status = Column(String(20), nullable=True)
    payment_reference = Column(String(100), nullable=True)
    billing_address = Column(JSON, nullable=False)  # snapshot at checkout time
    created_at = Column(DateTime, default=utcnow)

    items = relationship("OrderItem", back_populates="order", lazy="selectin")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "email": self.email,
            "status": self.status,
            "subtotal": f"{self.subtotal:.2f}",
            "gst": f"{self.gst:.2f}",
            "total": f"{self.total:.2f}",
            "paymentMethod": self.payment_method,
            "paymentStatus": self.payment_status,
            "paymentReference": self.payment_reference,
            "billingAddress": self.billing_address,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class OrderItem(Base):
    """Line item with product name and price captured at purchase time"""
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id = Column(String(64), ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String(100), ForeignKey("products.id"), nullable=True)
    product_name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "orderId": self.order_id,
            "productId": self.product_id,
            "productName": self.product_name,
            "price": f"{self.price:.2f}",
            "quantity": self.quantity,
            "total": f"{self.total:.2f}",
        }

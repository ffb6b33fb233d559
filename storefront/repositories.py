"""
License Storefront - Repositories
One repository per table, built per request and handed to the services.
Every write commits on its own; there is no transaction spanning a checkout.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from storefront.database import get_db, utcnow
from storefront.models import (
    Customer,
    LicenseKey,
    Order,
    OrderItem,
    OtpCode,
    Product,
)


class _Repository:
    def __init__(self, db: Session):
        self.db = db

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj


# ============================================================
# CATALOG
# ============================================================

class ProductRepository(_Repository):
    def list_active(self) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.is_active.is_(True))
            .order_by(Product.price)
            .all()
        )

    def get(self, product_id: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def upsert(self, product: Product) -> Product:
        """Used by catalog seeding only"""
        merged = self.db.merge(product)
        self.db.commit()
        return merged


# ============================================================
# CUSTOMERS
# ============================================================

class CustomerRepository(_Repository):
    def get(self, customer_id: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def get_by_email(self, email: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.email == email).first()

    def create(self, **fields) -> Customer:
        return self._save(Customer(**fields))


# ============================================================
# ORDERS
# ============================================================

class OrderRepository(_Repository):
    def create(self, **fields) -> Order:
        return self._save(Order(**fields))

    def get(self, order_id: str) -> Optional[Order]:
        return self.db.query(Order).filter(Order.id == order_id).first()

    def update_status(self, order_id: str, status: str, payment_reference: Optional[str] = None) -> None:
        order = self.get(order_id)
        if not order:
            return
        order.status = status
        order.payment_status = status
        if payment_reference:
            order.payment_reference = payment_reference
        self.db.commit()


class OrderItemRepository(_Repository):
    def create(self, **fields) -> OrderItem:
        return self._save(OrderItem(**fields))

    def list_for_order(self, order_id: str) -> List[OrderItem]:
        return self.db.query(OrderItem).filter(OrderItem.order_id == order_id).all()


# ============================================================
# LICENSE KEYS
# ============================================================

class LicenseKeyRepository(_Repository):
    def create(self, **fields) -> LicenseKey:
        return self._save(LicenseKey(**fields))

    def list_for_order(self, order_id: str) -> List[LicenseKey]:
        return (
            self.db.query(LicenseKey)
            .filter(LicenseKey.order_id == order_id)
            .order_by(LicenseKey.created_at)
            .all()
        )

    def get_by_key(self, license_key: str) -> Optional[LicenseKey]:
        return self.db.query(LicenseKey).filter(LicenseKey.license_key == license_key).first()

    def update_status(self, license_key: str, status: str) -> Optional[LicenseKey]:
        record = self.get_by_key(license_key)
        if record:
            record.status = status
            self.db.commit()
        return record


# ============================================================
# OTP CODES
# ============================================================

class OtpCodeRepository(_Repository):
    def create(self, email: str, code: str, expires_at: datetime) -> OtpCode:
        return self._save(OtpCode(email=email, code=code, expires_at=expires_at, verified=False))

    def get_valid(self, email: str, code: str, now: Optional[datetime] = None) -> Optional[OtpCode]:
        """Match on email + code, unexpired and not yet used"""
        now = now or utcnow()
        return (
            self.db.query(OtpCode)
            .filter(
                OtpCode.email == email,
                OtpCode.code == code,
                OtpCode.expires_at > now,
                OtpCode.verified.is_(False),
            )
            .order_by(OtpCode.created_at.desc())
            .first()
        )

    def mark_verified(self, otp_id: str) -> None:
        otp = self.db.query(OtpCode).filter(OtpCode.id == otp_id).first()
        if otp:
            otp.verified = True
            self.db.commit()

    def has_verified(self, email: str) -> bool:
        return (
            self.db.query(OtpCode)
            .filter(OtpCode.email == email, OtpCode.verified.is_(True))
            .first()
            is not None
        )


# ============================================================
# BUNDLE
# ============================================================

@dataclass
class Repositories:
    products: ProductRepository
    customers: CustomerRepository
    orders: OrderRepository
    order_items: OrderItemRepository
    license_keys: LicenseKeyRepository
    otp_codes: OtpCodeRepository

    @classmethod
    def from_session(cls, db: Session) -> "Repositories":
        return cls(
            products=ProductRepository(db),
            customers=CustomerRepository(db),
            orders=OrderRepository(db),
            order_items=OrderItemRepository(db),
            license_keys=LicenseKeyRepository(db),
            otp_codes=OtpCodeRepository(db),
        )


def get_repositories(db: Session = Depends(get_db)) -> Repositories:
    return Repositories.from_session(db)

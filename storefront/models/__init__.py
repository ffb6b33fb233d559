from storefront.models.product import Product
from storefront.models.customer import Customer
from storefront.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from storefront.models.license import LicenseKey, LicenseStatus
from storefront.models.otp import OtpCode

__all__ = [
    "Product",
    "Customer",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "LicenseKey",
    "LicenseStatus",
    "OtpCode",
]

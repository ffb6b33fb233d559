"""
License Storefront - Domain Errors
Mapped to HTTP responses by the handlers registered in main.py
"""


class StorefrontError(Exception):
    """Base error carrying the HTTP status it should surface as"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(StorefrontError):
    status_code = 404


class ProductNotFound(StorefrontError):
    """Unknown product id inside a checkout request"""
    status_code = 400

    def __init__(self, product_id: str):
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class InvalidVerificationCode(StorefrontError):
    # Wrong and expired codes share one message
    status_code = 400

    def __init__(self):
        super().__init__("Invalid or expired verification code")


class EmailNotVerified(StorefrontError):
    status_code = 403

    def __init__(self, email: str):
        super().__init__(f"Email {email} has not been verified")
        self.email = email


class EmailDeliveryError(StorefrontError):
    status_code = 500

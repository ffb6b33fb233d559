"""
License Storefront - Request Schemas
Validated before any business logic runs. JSON bodies use camelCase.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# VERIFICATION
# ============================================================

class SendOtpRequest(CamelModel):
    email: EmailStr


class VerifyOtpRequest(CamelModel):
    email: EmailStr
    code: str = Field(min_length=6, max_length=6, description="OTP must be 6 digits")


# ============================================================
# CHECKOUT
# ============================================================

class BillingInfo(CamelModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    company: Optional[str] = None
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    postcode: str = Field(min_length=4)
    phone: Optional[str] = None


class PaymentInfo(CamelModel):
    card_number: str = Field(min_length=1)
    expiry_date: str = Field(min_length=1)
    cvv: str = Field(min_length=3)
    cardholder_name: str = Field(min_length=1)


class CheckoutItem(CamelModel):
    product_id: str
    quantity: int = Field(ge=1)


class CheckoutRequest(CamelModel):
    email: EmailStr
    billing: BillingInfo
    payment: PaymentInfo
    items: List[CheckoutItem] = Field(min_length=1)


# ============================================================
# LICENSES
# ============================================================

class LicenseValidateRequest(CamelModel):
    license_key: str

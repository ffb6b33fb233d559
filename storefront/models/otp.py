import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from storefront.database import Base, utcnow


class OtpCode(Base):
    """
    Email verification codes.
    Codes expire after OTP_EXPIRY_MINUTES; used and expired rows are never cleaned up.
    """
    __tablename__ = "otp_codes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    verified = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)

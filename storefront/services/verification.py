"""
License Storefront - Email Verification
Issues and checks 6-digit one-time codes bound to an email address.
"""
import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from storefront.config import settings
from storefront.database import utcnow
from storefront.exceptions import InvalidVerificationCode
from storefront.models import OtpCode
from storefront.repositories import OtpCodeRepository
from storefront.services import email_service

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


def generate_verification_code() -> str:
    """Uniform random 6-digit code, leading zeros included"""
    return f"{secrets.randbelow(10 ** CODE_LENGTH):0{CODE_LENGTH}d}"


class VerificationService:
    def __init__(self, otp_codes: OtpCodeRepository):
        self.otp_codes = otp_codes

    async def send_code(self, email: str) -> OtpCode:
        """Store a fresh code and email it. Earlier codes stay valid until they expire."""
        code = generate_verification_code()
        expires_at = utcnow() + timedelta(minutes=settings.OTP_EXPIRY_MINUTES)
        otp = self.otp_codes.create(email=email, code=code, expires_at=expires_at)

        await email_service.send_verification_code(email, code)
        logger.info(f"Verification code issued for {email}")
        return otp

    def verify_code(self, email: str, code: str, now: Optional[datetime] = None) -> OtpCode:
        otp = self.otp_codes.get_valid(email, code, now=now)
        if not otp:
            logger.info(f"Verification failed for {email}")
            raise InvalidVerificationCode()

        self.otp_codes.mark_verified(otp.id)
        return otp

    def is_verified(self, email: str) -> bool:
        return self.otp_codes.has_verified(email)

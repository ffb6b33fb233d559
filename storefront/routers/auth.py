"""
License Storefront - Email Verification Router
Handles: send one-time code, verify one-time code
"""
from fastapi import APIRouter, Depends

from storefront.config import settings
from storefront.repositories import Repositories, get_repositories
from storefront.schemas import SendOtpRequest, VerifyOtpRequest
from storefront.services.verification import VerificationService

router = APIRouter()


def get_verification_service(repos: Repositories = Depends(get_repositories)) -> VerificationService:
    return VerificationService(repos.otp_codes)


@router.post("/send-otp")
async def send_otp(request: SendOtpRequest, service: VerificationService = Depends(get_verification_service)):
    """Email a 6-digit code valid for OTP_EXPIRY_MINUTES"""
    otp = await service.send_code(request.email)

    response = {
        "message": "OTP sent successfully",
        "email": request.email,
    }
    # Lets demos run without a mail server
    if settings.is_development:
        response["demoOtp"] = otp.code
    return response


@router.post("/verify-otp")
async def verify_otp(request: VerifyOtpRequest, service: VerificationService = Depends(get_verification_service)):
    service.verify_code(request.email, request.code)
    return {
        "message": "Email verified successfully",
        "verified": True,
    }

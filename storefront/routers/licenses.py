"""
License Storefront - License Router
Handles: license key format and status check
"""
from fastapi import APIRouter, Depends

from storefront.repositories import Repositories, get_repositories
from storefront.schemas import LicenseValidateRequest
from storefront.services.license_service import LicenseService, is_valid_format, product_for_key

router = APIRouter()


@router.post("/validate")
async def validate_license(request: LicenseValidateRequest, repos: Repositories = Depends(get_repositories)):
    """Shape check plus lookup; keys carry no checksum"""
    key = request.license_key.strip().upper()
    if not is_valid_format(key):
        return {"valid": False, "productId": None, "status": None}

    record = LicenseService(repos.license_keys).lookup(key)
    return {
        "valid": record is not None and record.status == "active",
        "productId": record.product_id if record else product_for_key(key),
        "status": record.status if record else None,
    }

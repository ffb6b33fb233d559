"""
License Storefront - Configuration
Environment variables and settings
"""
import logging
import os
from typing import List

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "License Storefront API"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")  # development, staging, production
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://localhost:8000",
    ]

    # SMTP Email
    EMAIL_DEV_MODE: bool = os.getenv("EMAIL_DEV_MODE", "true").lower() == "true"
    SMTP_HOST: str = os.getenv("SMTP_HOST", "smtp.ethereal.email")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "noreply@nk2it.com.au")
    EMAIL_FROM_NAME: str = "NK2IT"

    # Verification
    OTP_EXPIRY_MINUTES: int = 10
    REQUIRE_VERIFIED_EMAIL: bool = False

    # Pricing
    GST_RATE: str = "0.10"
    CURRENCY: str = "AUD"
    BILLING_COUNTRY: str = "Australia"
    BILLING_COUNTRY_CODE: str = "AU"

    # Card Payments (BPOINT style REST gateway)
    PAYMENT_API_URL: str = os.getenv("PAYMENT_API_URL", "https://www.bpoint.com.au/webapi/v3")
    PAYMENT_MERCHANT_ID: str = os.getenv("PAYMENT_MERCHANT_ID", "demo_merchant")
    PAYMENT_API_KEY: str = os.getenv("PAYMENT_API_KEY", "demo_api_key")
    PAYMENT_TIMEOUT_SECONDS: float = 30.0
    PAYMENT_SIMULATION_DELAY_SECONDS: float = 2.0

    # Orders & Invoices
    ORDER_ID_PREFIX: str = "NK2IT"
    COMPANY_NAME: str = "NK2IT PTY LTD"
    COMPANY_ADDRESS: List[str] = [
        "222, 20B Lexington Drive",
        "Norwest Business Park",
        "Baulkham Hills NSW 2153",
    ]
    SUPPORT_EMAIL: str = "support@nk2it.com.au"
    SUPPORT_PHONE: str = "1300 NK2 IT"
    COMPANY_WEBSITE: str = "nk2it.com.au"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def payment_test_mode(self) -> bool:
        """Card payments are simulated everywhere except production"""
        return not self.is_production


settings = Settings()


# ============================================================
# ENVIRONMENT VALIDATION
# ============================================================

def validate_email_environment(config: Settings = settings) -> bool:
    """Check SMTP credentials are present when real email delivery is expected"""
    if config.EMAIL_DEV_MODE:
        return True

    required = {
        "SMTP_HOST": config.SMTP_HOST,
        "SMTP_USER": config.SMTP_USER,
        "SMTP_PASSWORD": config.SMTP_PASSWORD,
        "EMAIL_FROM": config.EMAIL_FROM,
    }
    missing = [name for name, value in required.items() if not value]
    if not missing:
        return True

    message = f"Missing required email environment variables: {', '.join(missing)}"
    if config.is_production:
        raise RuntimeError(message)

    logger.warning(message)
    return False


def validate_database_environment(config: Settings = settings) -> bool:
    """Production deployments must set DATABASE_URL (environment, .env or constructor)"""
    explicit = "DATABASE_URL" in config.model_fields_set or bool(os.getenv("DATABASE_URL"))
    if config.is_production and not explicit:
        raise RuntimeError(
            "DATABASE_URL environment variable is required in production."
        )
    return explicit

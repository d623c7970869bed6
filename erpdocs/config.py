"""
Configuration module for the ERP documents backend.

Loads environment variables, validates required settings, and builds the
business constants (home jurisdiction, GST rate, company and bank details)
that are injected into the totals and rendering engine.
"""
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from dotenv import load_dotenv

# Load .env file
load_dotenv()

DEFAULT_GST_RATE = Decimal("18")


def parse_tax_rate(raw: str) -> Optional[Decimal]:
    """Return the GST rate as a Decimal, or None unless it is a finite number from 0 to 100."""
    try:
        rate = Decimal(raw.strip())
    except InvalidOperation:
        return None
    if not rate.is_finite() or rate < 0 or rate > 100:
        return None
    return rate


@dataclass(frozen=True)
class BankDetails:
    """Bank account printed on quotations and proforma invoices."""
    bank_name: str = ""
    account_no: str = ""
    ifsc: str = ""
    branch: str = ""
    upi: str = ""

    def is_empty(self) -> bool:
        return not any((self.bank_name, self.account_no, self.ifsc, self.branch, self.upi))


@dataclass(frozen=True)
class CompanyProfile:
    """Issuing company shown in the document header."""
    name: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    gstin: str = ""
    tagline: str = ""


@dataclass(frozen=True)
class BusinessConfig:
    """
    Business constants consumed by the engine.

    Passed explicitly to the tax resolver, aggregator and renderer so they
    can be exercised against other jurisdictions and rates without touching
    environment variables.

    Attributes:
        home_region: Region (state) of the issuing company
        home_country: Country of the issuing company
        tax_rate: Composite tax rate in percent (split in halves intra-region)
        currency: ISO currency code printed next to amounts
        currency_label: Word used in the amount-in-words line
    """
    home_region: str = "Maharashtra"
    home_country: str = "India"
    tax_rate: Decimal = Decimal("18")
    currency: str = "INR"
    currency_label: str = "Rupees"
    company: CompanyProfile = field(default_factory=CompanyProfile)
    bank: BankDetails = field(default_factory=BankDetails)


class Settings:
    """Application settings loaded from environment variables."""

    # Supabase Configuration
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_PUBLISHABLE_KEY: str = os.getenv("SUPABASE_PUBLISHABLE_KEY", "")

    # JWT verification uses the project's JWKS endpoint
    @property
    def SUPABASE_JWKS_URL(self) -> str:
        """Get the JWKS URL for JWT verification."""
        if not self.SUPABASE_URL:
            return ""
        return f"{self.SUPABASE_URL}/auth/v1/.well-known/jwks.json"

    # Rendered markup is uploaded here for the PDF rasterizer
    SUPABASE_STORAGE_BUCKET: str = os.getenv("SUPABASE_STORAGE_BUCKET", "documents")

    # Home jurisdiction and tax regime
    HOME_REGION: str = os.getenv("HOME_REGION", "Maharashtra")
    HOME_COUNTRY: str = os.getenv("HOME_COUNTRY", "India")
    GST_RATE: str = os.getenv("GST_RATE", "18")
    CURRENCY: str = os.getenv("CURRENCY", "INR")
    CURRENCY_LABEL: str = os.getenv("CURRENCY_LABEL", "Rupees")

    # Issuing company
    COMPANY_NAME: str = os.getenv("COMPANY_NAME", "")
    COMPANY_ADDRESS: str = os.getenv("COMPANY_ADDRESS", "")
    COMPANY_PHONE: str = os.getenv("COMPANY_PHONE", "")
    COMPANY_EMAIL: str = os.getenv("COMPANY_EMAIL", "")
    COMPANY_GSTIN: str = os.getenv("COMPANY_GSTIN", "")
    COMPANY_TAGLINE: str = os.getenv("COMPANY_TAGLINE", "")

    # Default bank details
    BANK_NAME: str = os.getenv("BANK_NAME", "")
    BANK_ACCOUNT_NO: str = os.getenv("BANK_ACCOUNT_NO", "")
    BANK_IFSC: str = os.getenv("BANK_IFSC", "")
    BANK_BRANCH: str = os.getenv("BANK_BRANCH", "")
    BANK_UPI: str = os.getenv("BANK_UPI", "")

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Settings
    CORS_ORIGINS: List[str] = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://localhost:5173"
    ).split(",")

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing or GST_RATE is not a
                number from 0 to 100.
        """
        required_settings = {
            "SUPABASE_URL": cls.SUPABASE_URL,
            "HOME_REGION": cls.HOME_REGION,
            "HOME_COUNTRY": cls.HOME_COUNTRY,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

        if parse_tax_rate(cls.GST_RATE) is None:
            raise ValueError(f"GST_RATE must be between 0 and 100, got {cls.GST_RATE!r}")

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_staging(cls) -> bool:
        """Check if running in staging environment."""
        return cls.ENVIRONMENT.lower() == "staging"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

_business_config: Optional[BusinessConfig] = None


def get_business_config() -> BusinessConfig:
    """
    Build (once) the BusinessConfig from the loaded settings.

    Returns:
        The process-wide BusinessConfig used when callers do not inject one.
    """
    global _business_config

    if _business_config is None:
        tax_rate = parse_tax_rate(settings.GST_RATE)
        if tax_rate is None:
            tax_rate = DEFAULT_GST_RATE

        _business_config = BusinessConfig(
            home_region=settings.HOME_REGION,
            home_country=settings.HOME_COUNTRY,
            tax_rate=tax_rate,
            currency=settings.CURRENCY,
            currency_label=settings.CURRENCY_LABEL,
            company=CompanyProfile(
                name=settings.COMPANY_NAME,
                address=settings.COMPANY_ADDRESS,
                phone=settings.COMPANY_PHONE,
                email=settings.COMPANY_EMAIL,
                gstin=settings.COMPANY_GSTIN,
                tagline=settings.COMPANY_TAGLINE,
            ),
            bank=BankDetails(
                bank_name=settings.BANK_NAME,
                account_no=settings.BANK_ACCOUNT_NO,
                ifsc=settings.BANK_IFSC,
                branch=settings.BANK_BRANCH,
                upi=settings.BANK_UPI,
            ),
        )

    return _business_config


# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"⚠️  Warning: {e}")
            print("   The app may not work correctly until you configure your .env file.")
        else:
            # In production or staging, fail immediately
            raise

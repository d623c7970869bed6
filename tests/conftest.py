"""
Pytest configuration for erpdocs tests.

Sets up test environment and global fixtures.
"""
import os
from decimal import Decimal

import pytest

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
os.environ.setdefault("HOME_REGION", "Maharashtra")
os.environ.setdefault("HOME_COUNTRY", "India")
os.environ.setdefault("GST_RATE", "18")

from erpdocs.config import BankDetails, BusinessConfig, CompanyProfile  # noqa: E402
from erpdocs.schemas.line_items import Jurisdiction  # noqa: E402


@pytest.fixture
def business_config():
    """Home jurisdiction Maharashtra/India at 18% GST, with company and bank details."""
    return BusinessConfig(
        home_region="Maharashtra",
        home_country="India",
        tax_rate=Decimal("18"),
        currency="INR",
        currency_label="Rupees",
        company=CompanyProfile(
            name="Acme Graphics",
            address="Plot 7, MIDC, Bhosari, Pune",
            phone="+91 98220 00000",
            email="sales@acme.example",
            gstin="27AAACA1234B1Z5",
            tagline="Print Finishing Machinery",
        ),
        bank=BankDetails(
            bank_name="HDFC Bank",
            account_no="50100012345678",
            ifsc="HDFC0000123",
            branch="Bhosari",
        ),
    )


@pytest.fixture
def intra_state():
    return Jurisdiction(region="Maharashtra", country="India")


@pytest.fixture
def inter_state():
    return Jurisdiction(region="Karnataka", country="India")


@pytest.fixture
def foreign():
    return Jurisdiction(region="Bavaria", country="Germany")


@pytest.fixture
def region_pending():
    return Jurisdiction(region="", country="India")


"""
Shared fixtures: request factories with dates relative to today.
"""

from datetime import date
from decimal import Decimal

import pytest

from autoquote.repository import InMemoryQuoteRepository
from autoquote.schemas import Driver, QuoteRequest, Vehicle
from autoquote.services.quotation import QuotationService

TODAY = date.today()
VALID_VIN = "1HGCM82633A004352"


def birth_date_for_age(age: int) -> date:
    """January 1st birthdays keep the age stable for the whole year."""
    return date(TODAY.year - age, 1, 1)


@pytest.fixture
def make_vehicle():
    def _make(**overrides) -> Vehicle:
        data = {
            "make": "Toyota",
            "model": "Camry",
            "year": TODAY.year - 3,
            "vin": VALID_VIN,
            "current_value": Decimal("25000.00"),
        }
        data.update(overrides)
        return Vehicle(**data)
    return _make


@pytest.fixture
def make_driver():
    def _make(age: int = 38, **overrides) -> Driver:
        data = {
            "first_name": "John",
            "last_name": "Doe",
            "date_of_birth": birth_date_for_age(age),
            "license_number": "D123456789",
            "license_state": "CA",
            "years_of_experience": 15,
            "safe_driver_discount": False,
            "multi_policy_discount": False,
        }
        data.update(overrides)
        return Driver(**data)
    return _make


@pytest.fixture
def make_request(make_vehicle, make_driver):
    def _make(drivers=None, vehicle=None, **overrides) -> QuoteRequest:
        data = {
            "vehicle": vehicle if vehicle is not None else make_vehicle(),
            "drivers": drivers if drivers is not None else [make_driver()],
            "coverage_amount": Decimal("100000.00"),
            "deductible": Decimal("1000.00"),
        }
        data.update(overrides)
        return QuoteRequest(**data)
    return _make


@pytest.fixture
def repository():
    return InMemoryQuoteRepository()


@pytest.fixture
def service(repository):
    return QuotationService(repository=repository)


@pytest.fixture
def quote_payload():
    """JSON body for the concrete two-discount scenario."""
    return {
        "vehicle": {
            "make": "Toyota",
            "model": "Camry",
            "year": TODAY.year - 3,
            "vin": VALID_VIN,
            "currentValue": 25000.00,
        },
        "drivers": [
            {
                "firstName": "John",
                "lastName": "Doe",
                "dateOfBirth": birth_date_for_age(38).isoformat(),
                "licenseNumber": "D123456789",
                "licenseState": "CA",
                "yearsOfExperience": 15,
                "safeDriverDiscount": True,
                "multiPolicyDiscount": True,
            }
        ],
        "coverageAmount": 100000.00,
        "deductible": 1000.00,
    }

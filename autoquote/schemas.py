"""
Pydantic schemas for request/response validation.

Request fields are optional at the type level: presence and business rules are
checked by the validation engine so callers get one consistent error format.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Money keeps Decimal precision in Python and serializes as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base model exposing camelCase JSON keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# Request schemas
class Vehicle(CamelModel):
    """Vehicle to be insured."""
    make: Optional[str] = Field(None, description="Manufacturer, e.g. Toyota")
    model: Optional[str] = Field(None, description="Model name, e.g. Camry")
    year: Optional[int] = Field(None, description="Model year")
    vin: Optional[str] = Field(None, description="17-character VIN (no I, O or Q)")
    current_value: Optional[Money] = Field(None, description="Current market value in dollars")


class Driver(CamelModel):
    """Driver covered by the quote. Unknown discount flags never earn a discount."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    date_of_birth: Optional[date] = None
    license_number: Optional[str] = None
    license_state: Optional[str] = Field(None, description="Licensing state/region code")
    years_of_experience: Optional[int] = Field(None, ge=0, description="Licensed years; null when unknown")
    safe_driver_discount: Optional[bool] = None
    multi_policy_discount: Optional[bool] = None


class QuoteRequest(CamelModel):
    """Quote request. The first driver is the primary driver."""
    vehicle: Optional[Vehicle] = None
    drivers: Optional[Tuple[Driver, ...]] = None
    coverage_amount: Optional[Money] = Field(None, description="Coverage amount in dollars")
    deductible: Optional[Money] = Field(None, description="Deductible in dollars")


# Response schemas
class QuoteResponse(CamelModel):
    """Quote as returned to callers. Carries no driver PII."""
    quote_id: str
    premium: Money = Field(description="Annual premium after discounts")
    monthly_premium: Money
    coverage_amount: Money
    deductible: Money
    valid_until: date
    discounts_applied: List[str] = Field(default_factory=list)


class PremiumResponse(CamelModel):
    """Base premium estimate (before discounts)."""
    premium: Money


class ErrorResponse(CamelModel):
    """Error body returned for every failed request."""
    message: str
    error_code: str
    timestamp: int = Field(description="Epoch milliseconds")

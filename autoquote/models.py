"""
Domain records and SQLModel tables for quotes.
"""

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

CENT = Decimal("0.01")
MONTHS_PER_YEAR = 12


def to_cents(amount: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round a money amount to 2 decimal places (half-up unless told otherwise)."""
    return amount.quantize(CENT, rounding=rounding)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Attach UTC to naive timestamps and convert aware ones to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _freeze_discounts(value):
    # None and [] both become an empty tuple
    if value is None:
        return ()
    return tuple(value)


class PremiumCalculation(BaseModel):
    """Intermediate pricing result for one request."""
    model_config = ConfigDict(frozen=True)

    base_premium: Decimal
    total_discount: Decimal
    final_premium: Decimal
    monthly_premium: Decimal
    applied_discounts: Tuple[str, ...] = ()

    @field_validator("applied_discounts", mode="before")
    @classmethod
    def normalize_discounts(cls, value):
        return _freeze_discounts(value)

    @classmethod
    def from_components(
        cls,
        base_premium: Decimal,
        total_discount: Decimal,
        applied_discounts=None,
    ) -> "PremiumCalculation":
        """
        Derive final and monthly premiums from the base premium and discount.

        final = base - discount; monthly = final / 12 rounded half-up to cents.
        """
        final_premium = base_premium - total_discount
        monthly_premium = to_cents(final_premium / MONTHS_PER_YEAR)
        return cls(
            base_premium=base_premium,
            total_discount=total_discount,
            final_premium=final_premium,
            monthly_premium=monthly_premium,
            applied_discounts=applied_discounts,
        )


class Quote(BaseModel):
    """A priced quote. Financial fields never change after creation."""
    model_config = ConfigDict(frozen=True)

    id: str
    premium: Decimal
    monthly_premium: Decimal
    coverage_amount: Decimal
    deductible: Decimal
    valid_until: date
    created_at: Optional[datetime] = None

    # Vehicle information
    vehicle_make: str
    vehicle_model: str
    vehicle_year: int
    vehicle_vin: str
    vehicle_current_value: Decimal

    # Primary driver information
    primary_driver_name: str
    primary_driver_license: str

    discounts_applied: Tuple[str, ...] = ()

    @field_validator("discounts_applied", mode="before")
    @classmethod
    def normalize_discounts(cls, value):
        return _freeze_discounts(value)


class QuoteRecord(SQLModel, table=True):
    """Persisted quote row."""
    __tablename__ = "quotes"

    id: str = Field(primary_key=True)
    premium: Decimal = Field(max_digits=12, decimal_places=2)
    monthly_premium: Decimal = Field(max_digits=12, decimal_places=2)
    coverage_amount: Decimal = Field(max_digits=12, decimal_places=2)
    deductible: Decimal = Field(max_digits=12, decimal_places=2)
    valid_until: date
    created_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    vehicle_make: str
    vehicle_model: str
    vehicle_year: int
    vehicle_vin: str = Field(index=True)
    vehicle_current_value: Decimal = Field(max_digits=12, decimal_places=2)
    primary_driver_name: str
    primary_driver_license: str


class QuoteDiscount(SQLModel, table=True):
    """One applied discount description, ordered within its quote."""
    __tablename__ = "quote_discounts"

    id: Optional[int] = Field(default=None, primary_key=True)
    quote_id: str = Field(foreign_key="quotes.id", index=True)
    position: int
    description: str

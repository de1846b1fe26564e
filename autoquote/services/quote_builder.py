"""
Builds persistable quotes from a request and its premium calculation.
"""

from datetime import datetime, timedelta
from typing import Callable, Optional
import uuid

from autoquote.config import QuoteRules, rules_cache
from autoquote.models import PremiumCalculation, Quote, to_cents, utc_now
from autoquote.schemas import Driver, QuoteRequest


def primary_driver(request: QuoteRequest) -> Driver:
    """The primary driver is always the first driver listed on the request."""
    return request.drivers[0]


def new_quote_id() -> str:
    return str(uuid.uuid4())


class QuoteBuilder:
    """
    Assembles ``Quote`` records.

    Only the id and the creation timestamp vary between calls with the same
    input; the validity date is derived from the creation date.
    """

    def __init__(
        self,
        rules: Optional[QuoteRules] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_quote_id,
    ):
        self.rules = rules or rules_cache.get_rules().quote
        self._clock = clock
        self._id_factory = id_factory

    def build(self, request: QuoteRequest, premium_calculation: PremiumCalculation) -> Quote:
        created_at = self._clock()
        driver = primary_driver(request)
        vehicle = request.vehicle

        return Quote(
            id=self._id_factory(),
            premium=to_cents(premium_calculation.final_premium),
            monthly_premium=to_cents(premium_calculation.monthly_premium),
            coverage_amount=to_cents(request.coverage_amount),
            deductible=to_cents(request.deductible),
            valid_until=created_at.date() + timedelta(days=self.rules.validity_days),
            created_at=created_at,
            vehicle_make=vehicle.make,
            vehicle_model=vehicle.model,
            vehicle_year=vehicle.year,
            vehicle_vin=vehicle.vin,
            vehicle_current_value=to_cents(vehicle.current_value),
            primary_driver_name=f"{driver.first_name} {driver.last_name}",
            primary_driver_license=driver.license_number,
            discounts_applied=premium_calculation.applied_discounts,
        )

"""
Risk calculator for deterministic base premiums.

Formula: base_premium = base_rate * coverage * deductible * vehicle_age * drivers

Where:
- coverage: coverage_amount / reference_coverage
- deductible: reference_deductible / deductible (floored at the minimum rated deductible)
- vehicle_age: 1 + increment * (current_year - model_year)
- drivers: highest driver factor + load * sum(other driver factors),
  each driver factor being age_band * experience
"""

from datetime import date
from decimal import Decimal
from functools import reduce
from typing import Callable, Dict, List, Optional, Tuple
import logging
import operator

from autoquote.config import RatingRules, rules_cache
from autoquote.models import to_cents
from autoquote.schemas import Driver, QuoteRequest
from autoquote.services.validation import calculate_age

logger = logging.getLogger("autoquote")

ONE = Decimal("1")

FactorFn = Callable[[QuoteRequest, date], Decimal]


class RiskCalculator:
    """Turns a validated request into a base premium."""

    def __init__(
        self,
        rules: Optional[RatingRules] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.rules = rules or rules_cache.get_rules().rating
        self._clock = clock

    def factors(self) -> List[Tuple[str, FactorFn]]:
        """Ordered named factors applied to the base rate."""
        return [
            ("coverage", self.coverage_factor),
            ("deductible", self.deductible_factor),
            ("vehicle_age", self.vehicle_age_factor),
            ("drivers", self.drivers_factor),
        ]

    def factor_breakdown(self, request: QuoteRequest) -> Dict[str, Decimal]:
        today = self._clock()
        return {name: factor(request, today) for name, factor in self.factors()}

    def calculate_base_premium(self, request: QuoteRequest) -> Decimal:
        """
        Calculate the pre-discount annual premium.

        Args:
            request: A request that already passed validation

        Returns:
            Base premium rounded half-up to cents
        """
        breakdown = self.factor_breakdown(request)
        premium = to_cents(reduce(operator.mul, breakdown.values(), self.rules.base_premium))

        logger.debug(
            f"Base premium calculated | premium={premium} | "
            + " | ".join(f"{name}={value:.4f}" for name, value in breakdown.items())
        )
        return premium

    # Factors
    def coverage_factor(self, request: QuoteRequest, today: date) -> Decimal:
        return request.coverage_amount / self.rules.reference_coverage

    def deductible_factor(self, request: QuoteRequest, today: date) -> Decimal:
        # Lower deductible means more insurer exposure
        rated = max(request.deductible, self.rules.minimum_rated_deductible)
        return self.rules.reference_deductible / rated

    def vehicle_age_factor(self, request: QuoteRequest, today: date) -> Decimal:
        vehicle_age = max(today.year - request.vehicle.year, 0)
        return ONE + self.rules.vehicle_age_increment * vehicle_age

    def drivers_factor(self, request: QuoteRequest, today: date) -> Decimal:
        driver_factors = sorted(
            (self.driver_risk_factor(driver, today) for driver in request.drivers),
            reverse=True,
        )
        highest, others = driver_factors[0], driver_factors[1:]
        return highest + self.rules.additional_driver_load * sum(others, Decimal("0"))

    # Per-driver multipliers
    def driver_risk_factor(self, driver: Driver, today: date) -> Decimal:
        return self.age_multiplier(driver, today) * self.experience_multiplier(driver.years_of_experience)

    def age_multiplier(self, driver: Driver, today: date) -> Decimal:
        if driver.date_of_birth is None:
            return ONE
        age = calculate_age(driver.date_of_birth, today)
        for band in self.rules.driver_age_bands:
            if band.max_age is None or age <= band.max_age:
                return band.multiplier
        return ONE

    def experience_multiplier(self, years_of_experience: Optional[int]) -> Decimal:
        # Unknown experience is rated as a new driver
        if years_of_experience is None:
            return ONE
        tiers = sorted(self.rules.experience_tiers, key=lambda tier: tier.min_years, reverse=True)
        for tier in tiers:
            if years_of_experience >= tier.min_years:
                return tier.multiplier
        return ONE

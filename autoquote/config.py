"""
Rules configuration for the quotation pipeline.

Validation bounds, rating tables and discount definitions are kept in a YAML
file so they can be tuned without code changes. The file is parsed once and
cached in memory.
"""

import os
import re
from decimal import Decimal
from threading import Lock
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field

DEFAULT_RULES_PATH = os.path.join(os.path.dirname(__file__), "data", "quote_rules.yaml")


class AmountLimits(BaseModel):
    """Inclusive bounds for a money amount. A missing bound is not enforced."""
    min: Optional[Decimal] = None
    max: Optional[Decimal] = None


class ValidationRules(BaseModel):
    vin_pattern: str = "^[A-HJ-NPR-Z0-9]{17}$"
    min_driver_age: int = 18
    max_driver_age: int = 85
    max_vehicle_age: int = 20
    coverage_limits: AmountLimits = Field(default_factory=AmountLimits)
    deductible_limits: AmountLimits = Field(default_factory=AmountLimits)

    def compiled_vin_pattern(self) -> "re.Pattern[str]":
        return re.compile(self.vin_pattern)


class AgeBand(BaseModel):
    """Driver age band; ``max_age`` of None closes the table."""
    max_age: Optional[int] = None
    multiplier: Decimal


class ExperienceTier(BaseModel):
    min_years: int
    multiplier: Decimal


class RatingRules(BaseModel):
    base_premium: Decimal = Decimal("500.00")
    reference_coverage: Decimal = Decimal("100000.00")
    reference_deductible: Decimal = Decimal("1000.00")
    minimum_rated_deductible: Decimal = Decimal("100.00")
    vehicle_age_increment: Decimal = Decimal("0.02")
    driver_age_bands: List[AgeBand] = Field(default_factory=lambda: [
        AgeBand(max_age=24, multiplier=Decimal("1.50")),
        AgeBand(max_age=64, multiplier=Decimal("1.00")),
        AgeBand(max_age=None, multiplier=Decimal("1.20")),
    ])
    experience_tiers: List[ExperienceTier] = Field(default_factory=lambda: [
        ExperienceTier(min_years=11, multiplier=Decimal("0.93")),
        ExperienceTier(min_years=6, multiplier=Decimal("0.95")),
        ExperienceTier(min_years=3, multiplier=Decimal("0.97")),
    ])
    additional_driver_load: Decimal = Decimal("0.10")


class DiscountRule(BaseModel):
    flag: Literal["safe_driver_discount", "multi_policy_discount"]
    description: str
    rate: Decimal


class DiscountRules(BaseModel):
    cap: Decimal = Decimal("0.25")
    rules: List[DiscountRule] = Field(default_factory=lambda: [
        DiscountRule(flag="safe_driver_discount",
                     description="Safe Driver Discount - 15%", rate=Decimal("0.15")),
        DiscountRule(flag="multi_policy_discount",
                     description="Multi-Policy Discount - 10%", rate=Decimal("0.10")),
    ])


class QuoteRules(BaseModel):
    validity_days: int = 30


class RulesConfig(BaseModel):
    validation: ValidationRules = Field(default_factory=ValidationRules)
    rating: RatingRules = Field(default_factory=RatingRules)
    discounts: DiscountRules = Field(default_factory=DiscountRules)
    quote: QuoteRules = Field(default_factory=QuoteRules)


def load_rules(path: str) -> RulesConfig:
    """Parse a rules file into a ``RulesConfig``."""
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    return RulesConfig.model_validate(raw)


class RulesCache:
    """Thread-safe cache for the rules file."""

    def __init__(self, path: Optional[str] = None):
        self._path = path
        self._rules: Optional[RulesConfig] = None
        self._lock = Lock()

    @property
    def path(self) -> str:
        return self._path or os.getenv("QUOTE_RULES_PATH", DEFAULT_RULES_PATH)

    def get_rules(self) -> RulesConfig:
        """Get cached rules, loading from disk if not cached."""
        if self._rules is None:
            with self._lock:
                if self._rules is None:  # Double-check locking
                    self._rules = load_rules(self.path)
        return self._rules

    def clear_cache(self):
        """Drop the cached rules (useful for testing)."""
        with self._lock:
            self._rules = None


# Global cache instance
rules_cache = RulesCache()

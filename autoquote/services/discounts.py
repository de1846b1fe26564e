"""
Discount calculator.

Each discount type is earned once per request if any driver carries its flag.
The summed rate is applied to the base premium and the resulting amount is
capped (25% of base premium by default). The cap only limits the dollar
amount: every earned discount is still reported as applied.
"""

from decimal import ROUND_DOWN, Decimal
from typing import List, Optional, Tuple
import logging

from pydantic import BaseModel, ConfigDict

from autoquote.config import DiscountRule, DiscountRules, rules_cache
from autoquote.models import to_cents
from autoquote.schemas import QuoteRequest
from autoquote.services.risk import RiskCalculator

logger = logging.getLogger("autoquote")


class DiscountOutcome(BaseModel):
    """Discount amount and the descriptions that produced it."""
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    rate: Decimal
    descriptions: Tuple[str, ...] = ()


class DiscountCalculator:
    """
    Earned discounts for a request, capped at a share of the base premium.

    The amount is rounded half-up, then clipped to the cap amount rounded
    down. At the cap this can be one cent below a plain half-up result
    (123.22 rather than 123.23 on a 492.90 base), so the discount never
    exceeds the cap.
    """

    def __init__(
        self,
        risk_calculator: Optional[RiskCalculator] = None,
        rules: Optional[DiscountRules] = None,
    ):
        self.risk_calculator = risk_calculator or RiskCalculator()
        self.rules = rules or rules_cache.get_rules().discounts

    def earned_rules(self, request: QuoteRequest) -> List[DiscountRule]:
        """Discount rules earned by at least one driver, one entry per description."""
        earned = {}
        for rule in self.rules.rules:
            if rule.description in earned:
                continue
            # Unknown (None) flags never qualify
            if any(getattr(driver, rule.flag) is True for driver in request.drivers):
                earned[rule.description] = rule
        return list(earned.values())

    def evaluate(self, request: QuoteRequest, base_premium: Optional[Decimal] = None) -> DiscountOutcome:
        """
        Compute the capped discount for a request.

        Args:
            request: A validated quote request
            base_premium: Pre-computed base premium; calculated when omitted

        Returns:
            DiscountOutcome with the amount in cents precision
        """
        if base_premium is None:
            base_premium = self.risk_calculator.calculate_base_premium(request)

        earned = self.earned_rules(request)
        raw_rate = sum((rule.rate for rule in earned), Decimal("0"))
        rate = min(raw_rate, self.rules.cap)

        amount = to_cents(base_premium * rate)
        cap_amount = to_cents(base_premium * self.rules.cap, ROUND_DOWN)
        amount = min(amount, cap_amount)

        if raw_rate > self.rules.cap:
            logger.debug(f"Discount capped | requested_rate={raw_rate} | cap={self.rules.cap}")
        logger.info(f"Total discount applied | rate={rate * 100}% | amount={amount}")

        return DiscountOutcome(
            amount=amount,
            rate=rate,
            descriptions=tuple(rule.description for rule in earned),
        )

    def calculate_total_discount(self, request: QuoteRequest, base_premium: Optional[Decimal] = None) -> Decimal:
        return self.evaluate(request, base_premium).amount

    def get_applied_discounts(self, request: QuoteRequest) -> Tuple[str, ...]:
        return tuple(rule.description for rule in self.earned_rules(request))

"""
Quotation service: orchestrates validation, pricing, quote building and storage.

Pipeline: validate -> base premium -> discounts -> build quote -> save -> respond
"""

from decimal import Decimal
from typing import Optional
import logging

from autoquote.exceptions import InvalidRequest, QuoteNotFound
from autoquote.models import PremiumCalculation, Quote
from autoquote.repository import QuoteRepository
from autoquote.schemas import QuoteRequest, QuoteResponse
from autoquote.services.discounts import DiscountCalculator
from autoquote.services.quote_builder import QuoteBuilder
from autoquote.services.risk import RiskCalculator
from autoquote.services.validation import ValidationEngine

logger = logging.getLogger("autoquote")


def to_response(quote: Quote) -> QuoteResponse:
    """Map a stored quote to the public response. Driver details are left out."""
    return QuoteResponse(
        quote_id=quote.id,
        premium=quote.premium,
        monthly_premium=quote.monthly_premium,
        coverage_amount=quote.coverage_amount,
        deductible=quote.deductible,
        valid_until=quote.valid_until,
        discounts_applied=list(quote.discounts_applied or ()),
    )


class QuotationService:
    """Entry point for generating, pricing and retrieving quotes."""

    def __init__(
        self,
        repository: QuoteRepository,
        validation_engine: Optional[ValidationEngine] = None,
        risk_calculator: Optional[RiskCalculator] = None,
        discount_calculator: Optional[DiscountCalculator] = None,
        quote_builder: Optional[QuoteBuilder] = None,
    ):
        self.repository = repository
        self.validation_engine = validation_engine or ValidationEngine()
        self.risk_calculator = risk_calculator or RiskCalculator()
        self.discount_calculator = discount_calculator or DiscountCalculator(self.risk_calculator)
        self.quote_builder = quote_builder or QuoteBuilder()

    def generate_quote(self, request: Optional[QuoteRequest]) -> QuoteResponse:
        """
        Run the full pipeline and persist the resulting quote.

        Raises:
            InvalidRequest: request failed validation (nothing is stored)
            PersistenceFailure: the repository rejected the write
        """
        logger.info("Starting quote generation process")
        self.validation_engine.validate(request)

        vin = request.vehicle.vin
        calculation = self.price(request)
        quote = self.quote_builder.build(request, calculation)

        try:
            saved = self.repository.save(quote)
        except Exception as e:
            logger.error(f"Failed to save quote | vin={vin} | error={e}")
            raise

        logger.info(
            f"Quote created | quote_id={saved.id} | vin={vin} | "
            f"premium={saved.premium} | discounts={len(saved.discounts_applied)}"
        )
        return to_response(saved)

    def calculate_premium(self, request: Optional[QuoteRequest]) -> Decimal:
        """Validate and return the base premium without discounts or storage."""
        logger.info("Starting premium calculation")
        if request is None:
            raise InvalidRequest("Quote request cannot be null")
        self.validation_engine.validate(request)

        premium = self.risk_calculator.calculate_base_premium(request)
        logger.info(f"Premium calculated | vin={request.vehicle.vin} | premium={premium}")
        return premium

    def get_quote_by_id(self, quote_id: Optional[str]) -> QuoteResponse:
        logger.debug(f"Retrieving quote | quote_id={quote_id}")
        if quote_id is None or not quote_id.strip():
            raise InvalidRequest("Quote ID cannot be null or empty")

        quote = self.repository.find_by_id(quote_id)
        if quote is None:
            logger.warning(f"Quote not found | quote_id={quote_id}")
            raise QuoteNotFound(f"Quote not found with ID: {quote_id}")
        return to_response(quote)

    def price(self, request: QuoteRequest) -> PremiumCalculation:
        """Price a validated request: base premium, capped discount, final and monthly premiums."""
        base_premium = self.risk_calculator.calculate_base_premium(request)
        outcome = self.discount_calculator.evaluate(request, base_premium)
        return PremiumCalculation.from_components(base_premium, outcome.amount, outcome.descriptions)

"""
Quotes router for auto insurance quote requests.
"""

import logging

from fastapi import APIRouter, Depends, Request, status

from autoquote.deps import get_quotation_service
from autoquote.schemas import ErrorResponse, PremiumResponse, QuoteRequest, QuoteResponse
from autoquote.services.quotation import QuotationService

logger = logging.getLogger("autoquote")

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid quote request"},
    503: {"model": ErrorResponse, "description": "Quote store unavailable"},
}


@router.post(
    "/quotes",
    response_model=QuoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def create_quote(
    request: QuoteRequest,
    request_obj: Request,
    service: QuotationService = Depends(get_quotation_service),
):
    """
    Generate and store an auto insurance quote.

    This endpoint:
    1. Validates vehicle, drivers and coverage
    2. Calculates the risk-based base premium
    3. Applies eligible discounts (capped at 25%)
    4. Stores the quote with a 30-day validity window
    """
    request_id = getattr(request_obj.state, "request_id", "unknown")
    logger.info(f"Processing quote request | request_id={request_id}")

    response = service.generate_quote(request)

    logger.info(f"Quote returned | request_id={request_id} | quote_id={response.quote_id}")
    return response


@router.post("/quotes/calculate", response_model=PremiumResponse, responses=ERROR_RESPONSES)
def calculate_premium(
    request: QuoteRequest,
    service: QuotationService = Depends(get_quotation_service),
):
    """Estimate the base premium (before discounts) without storing a quote."""
    return PremiumResponse(premium=service.calculate_premium(request))


@router.get(
    "/quotes/{quote_id}",
    response_model=QuoteResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse, "description": "Quote not found"}},
)
def get_quote(
    quote_id: str,
    service: QuotationService = Depends(get_quotation_service),
):
    """Retrieve a previously generated quote."""
    return service.get_quote_by_id(quote_id)

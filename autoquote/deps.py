"""
FastAPI dependencies wiring the quotation service to the database.
"""

from fastapi import Depends
from sqlmodel import Session

from autoquote.db import get_session
from autoquote.repository import SqlQuoteRepository
from autoquote.services.quotation import QuotationService


def get_quotation_service(session: Session = Depends(get_session)) -> QuotationService:
    """Build a quotation service whose repository uses the request's session."""
    return QuotationService(repository=SqlQuoteRepository(session))

"""
Quote repositories.

A repository stores each quote once: ``created_at`` is kept in UTC and filled
in on the first save when the caller did not set it, and saving an id that
already exists is rejected so stored financial fields are never overwritten.
"""

from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from autoquote.exceptions import PersistenceFailure
from autoquote.models import Quote, QuoteDiscount, QuoteRecord, as_utc, to_cents, utc_now

logger = logging.getLogger("autoquote")

MONEY_FIELDS = ("premium", "monthly_premium", "coverage_amount", "deductible", "vehicle_current_value")


class QuoteRepository(ABC):
    """Key-value store for quotes."""

    @abstractmethod
    def save(self, quote: Quote) -> Quote:
        """Persist a new quote and return the stored version."""

    @abstractmethod
    def find_by_id(self, quote_id: str) -> Optional[Quote]:
        """Return the stored quote or None."""


def _stamp_created_at(quote: Quote) -> Quote:
    # Stored timestamps are always timezone-aware UTC
    created_at = as_utc(quote.created_at) if quote.created_at is not None else utc_now()
    return quote.model_copy(update={"created_at": created_at})


class InMemoryQuoteRepository(QuoteRepository):
    """Thread-safe in-process repository."""

    def __init__(self):
        self._quotes: Dict[str, Quote] = {}
        self._lock = Lock()

    def save(self, quote: Quote) -> Quote:
        with self._lock:
            if quote.id in self._quotes:
                raise PersistenceFailure(f"Quote {quote.id} already exists")
            saved = _stamp_created_at(quote)
            self._quotes[saved.id] = saved
        return saved

    def find_by_id(self, quote_id: str) -> Optional[Quote]:
        with self._lock:
            return self._quotes.get(quote_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._quotes)


class SqlQuoteRepository(QuoteRepository):
    """Repository backed by the ``quotes`` and ``quote_discounts`` tables."""

    def __init__(self, session: Session):
        self.session = session

    def save(self, quote: Quote) -> Quote:
        saved = _stamp_created_at(quote)
        try:
            if self.session.get(QuoteRecord, saved.id) is not None:
                raise PersistenceFailure(f"Quote {saved.id} already exists")

            self.session.add(QuoteRecord(**saved.model_dump(exclude={"discounts_applied"})))
            # Parent row first so discount rows can reference it
            self.session.flush()
            for position, description in enumerate(saved.discounts_applied):
                self.session.add(
                    QuoteDiscount(quote_id=saved.id, position=position, description=description)
                )
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Quote save failed | quote_id={saved.id} | error={e.__class__.__name__}")
            raise PersistenceFailure("Failed to save quote") from e
        return saved

    def find_by_id(self, quote_id: str) -> Optional[Quote]:
        try:
            record = self.session.get(QuoteRecord, quote_id)
            if record is None:
                return None
            discounts = self.session.exec(
                select(QuoteDiscount)
                .where(QuoteDiscount.quote_id == quote_id)
                .order_by(QuoteDiscount.position)
            ).all()
        except SQLAlchemyError as e:
            logger.error(f"Quote lookup failed | quote_id={quote_id} | error={e.__class__.__name__}")
            raise PersistenceFailure("Failed to load quote") from e

        data = record.model_dump()
        data["created_at"] = as_utc(data["created_at"])
        for field in MONEY_FIELDS:
            data[field] = to_cents(data[field])
        data["discounts_applied"] = [discount.description for discount in discounts]
        return Quote.model_validate(data)

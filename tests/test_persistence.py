"""
Tests for the SQL-backed quote repository.
Uses an in-memory SQLite database per test.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from autoquote.exceptions import PersistenceFailure
from autoquote.models import Quote, QuoteRecord
from autoquote.repository import SqlQuoteRepository


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def sql_repository(session):
    return SqlQuoteRepository(session)


def make_quote(quote_id="quote-1", **overrides) -> Quote:
    data = {
        "id": quote_id,
        "premium": Decimal("369.68"),
        "monthly_premium": Decimal("30.81"),
        "coverage_amount": Decimal("100000.00"),
        "deductible": Decimal("1000.00"),
        "valid_until": date(2026, 3, 31),
        "vehicle_make": "Toyota",
        "vehicle_model": "Camry",
        "vehicle_year": 2023,
        "vehicle_vin": "1HGCM82633A004352",
        "vehicle_current_value": Decimal("25000.00"),
        "primary_driver_name": "John Doe",
        "primary_driver_license": "D123456789",
        "discounts_applied": ("Safe Driver Discount - 15%", "Multi-Policy Discount - 10%"),
    }
    data.update(overrides)
    return Quote(**data)


class TestSqlQuoteRepository:

    def test_round_trip(self, sql_repository):
        saved = sql_repository.save(make_quote())
        loaded = sql_repository.find_by_id("quote-1")

        assert loaded is not None
        assert loaded.premium == Decimal("369.68")
        assert loaded.monthly_premium == Decimal("30.81")
        assert loaded.coverage_amount == Decimal("100000.00")
        assert loaded.deductible == Decimal("1000.00")
        assert loaded.vehicle_current_value == Decimal("25000.00")
        assert loaded.valid_until == date(2026, 3, 31)
        assert loaded.vehicle_vin == "1HGCM82633A004352"
        assert loaded.primary_driver_name == "John Doe"
        assert loaded.created_at == saved.created_at

    def test_money_fields_keep_two_decimals(self, sql_repository):
        sql_repository.save(make_quote())
        loaded = sql_repository.find_by_id("quote-1")
        for amount in (loaded.premium, loaded.monthly_premium, loaded.coverage_amount, loaded.deductible):
            assert amount.as_tuple().exponent == -2

    def test_discount_order_preserved(self, sql_repository):
        discounts = ("Multi-Policy Discount - 10%", "Safe Driver Discount - 15%")
        sql_repository.save(make_quote(discounts_applied=discounts))
        assert sql_repository.find_by_id("quote-1").discounts_applied == discounts

    def test_no_discounts(self, sql_repository):
        sql_repository.save(make_quote(discounts_applied=None))
        assert sql_repository.find_by_id("quote-1").discounts_applied == ()

    def test_created_at_stamped_in_utc(self, sql_repository):
        saved = sql_repository.save(make_quote())
        assert saved.created_at.utcoffset() == timedelta(0)

        loaded = sql_repository.find_by_id("quote-1")
        assert loaded.created_at.utcoffset() == timedelta(0)
        assert loaded.created_at == saved.created_at

    def test_created_at_preserved(self, sql_repository):
        created = datetime(2026, 3, 1, 10, 30, tzinfo=timezone.utc)
        saved = sql_repository.save(make_quote(created_at=created))
        assert saved.created_at == created
        assert sql_repository.find_by_id("quote-1").created_at == created

    def test_naive_created_at_is_treated_as_utc(self, sql_repository):
        sql_repository.save(make_quote(created_at=datetime(2026, 3, 1, 10, 30)))
        loaded = sql_repository.find_by_id("quote-1")
        assert loaded.created_at == datetime(2026, 3, 1, 10, 30, tzinfo=timezone.utc)

    def test_offset_created_at_is_converted_to_utc(self, sql_repository):
        created = datetime(2026, 3, 1, 12, 30, tzinfo=timezone(timedelta(hours=2)))
        sql_repository.save(make_quote(created_at=created))
        loaded = sql_repository.find_by_id("quote-1")
        assert loaded.created_at == created
        assert loaded.created_at.utcoffset() == timedelta(0)

    def test_missing_quote(self, sql_repository):
        assert sql_repository.find_by_id("does-not-exist") is None

    def test_duplicate_id_rejected(self, sql_repository):
        sql_repository.save(make_quote())
        with pytest.raises(PersistenceFailure):
            sql_repository.save(make_quote(premium=Decimal("1.00")))

        # Original financial fields are untouched
        assert sql_repository.find_by_id("quote-1").premium == Decimal("369.68")

    def test_quotes_are_independent(self, sql_repository):
        sql_repository.save(make_quote("quote-1"))
        sql_repository.save(make_quote("quote-2", discounts_applied=()))

        assert len(sql_repository.find_by_id("quote-1").discounts_applied) == 2
        assert sql_repository.find_by_id("quote-2").discounts_applied == ()

    def test_visible_from_a_new_session(self, engine, sql_repository):
        sql_repository.save(make_quote())
        with Session(engine) as other:
            assert other.get(QuoteRecord, "quote-1") is not None
            assert SqlQuoteRepository(other).find_by_id("quote-1").premium == Decimal("369.68")

    def test_missing_tables_raise_persistence_failure(self):
        engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
        with Session(engine) as session:
            repository = SqlQuoteRepository(session)
            with pytest.raises(PersistenceFailure, match="Failed to save quote"):
                repository.save(make_quote())
            with pytest.raises(PersistenceFailure, match="Failed to load quote"):
                repository.find_by_id("quote-1")

"""
Validation engine for quote requests.

Rules run in a fixed order and the first violation stops validation:
request, vehicle presence, drivers presence, coverage, deductible, vehicle
details, each driver, then the coverage/deductible limits.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional
import logging

from autoquote.config import AmountLimits, ValidationRules, rules_cache
from autoquote.exceptions import InvalidRequest
from autoquote.schemas import Driver, QuoteRequest, Vehicle

logger = logging.getLogger("autoquote")


def calculate_age(born: date, today: date) -> int:
    """Whole years between ``born`` and ``today``."""
    had_birthday = (today.month, today.day) >= (born.month, born.day)
    return today.year - born.year - (0 if had_birthday else 1)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


class ValidationEngine:
    """Rejects invalid quote requests before any pricing happens."""

    def __init__(
        self,
        rules: Optional[ValidationRules] = None,
        clock: Callable[[], date] = date.today,
    ):
        self.rules = rules or rules_cache.get_rules().validation
        self._vin_pattern = self.rules.compiled_vin_pattern()
        self._clock = clock

    def validate(self, request: Optional[QuoteRequest]) -> None:
        """
        Validate a quote request.

        Raises:
            InvalidRequest: on the first rule that fails
        """
        logger.debug("Starting validation for quote request")

        if request is None:
            raise InvalidRequest("Quote request cannot be null")
        if request.vehicle is None:
            raise InvalidRequest("Vehicle information is required")
        if not request.drivers:
            raise InvalidRequest("At least one driver is required")
        if request.coverage_amount is None or request.coverage_amount <= 0:
            raise InvalidRequest("Valid coverage amount is required")
        if request.deductible is None or request.deductible < 0:
            raise InvalidRequest("Valid deductible amount is required")

        today = self._clock()
        self.validate_vehicle(request.vehicle, today)
        for driver in request.drivers:
            self.validate_driver(driver, today)

        self._validate_limits("Coverage amount", request.coverage_amount, self.rules.coverage_limits)
        self._validate_limits("Deductible", request.deductible, self.rules.deductible_limits)

        logger.debug("Quote request validation completed successfully")

    def validate_vehicle(self, vehicle: Optional[Vehicle], today: Optional[date] = None) -> None:
        if vehicle is None:
            raise InvalidRequest("Vehicle information is required")
        today = today or self._clock()

        # VIN
        if _is_blank(vehicle.vin):
            raise InvalidRequest("VIN is required")
        if not self._vin_pattern.fullmatch(vehicle.vin):
            raise InvalidRequest(
                f"Invalid VIN format: {vehicle.vin}. Expected format: {self.rules.vin_pattern}"
            )

        # Model year
        if vehicle.year is None:
            raise InvalidRequest("Vehicle year is required")
        vehicle_age = today.year - vehicle.year
        if vehicle_age < 0:
            raise InvalidRequest("Vehicle year cannot be in the future")
        if vehicle_age > self.rules.max_vehicle_age:
            raise InvalidRequest(
                f"Vehicle age exceeds maximum limit of {self.rules.max_vehicle_age} years. "
                f"Vehicle age: {vehicle_age} years"
            )

        # Basic info
        if _is_blank(vehicle.make):
            raise InvalidRequest("Vehicle make is required")
        if _is_blank(vehicle.model):
            raise InvalidRequest("Vehicle model is required")
        if vehicle.current_value is None or vehicle.current_value <= 0:
            raise InvalidRequest("Valid vehicle current value is required")

    def validate_driver(self, driver: Optional[Driver], today: Optional[date] = None) -> None:
        if driver is None:
            raise InvalidRequest("Driver information cannot be null")
        today = today or self._clock()

        if _is_blank(driver.first_name):
            raise InvalidRequest("Driver first name is required")
        if _is_blank(driver.last_name):
            raise InvalidRequest("Driver last name is required")
        if driver.date_of_birth is None:
            raise InvalidRequest("Driver date of birth is required")

        age = calculate_age(driver.date_of_birth, today)
        if age < self.rules.min_driver_age:
            raise InvalidRequest(
                f"Driver must be at least {self.rules.min_driver_age} years old. "
                f"Current age: {age} years"
            )
        if age > self.rules.max_driver_age:
            raise InvalidRequest(
                f"Driver age exceeds maximum limit of {self.rules.max_driver_age} years. "
                f"Current age: {age} years"
            )

        if _is_blank(driver.license_number):
            raise InvalidRequest("Driver license number is required")
        if _is_blank(driver.license_state):
            raise InvalidRequest("Driver license state is required")

    def _validate_limits(self, label: str, amount: Decimal, limits: AmountLimits) -> None:
        if limits.min is not None and amount < limits.min:
            raise InvalidRequest(
                f"{label} must be at least {_money(limits.min)}. Provided: {_money(amount)}"
            )
        if limits.max is not None and amount > limits.max:
            raise InvalidRequest(
                f"{label} cannot exceed {_money(limits.max)}. Provided: {_money(amount)}"
            )

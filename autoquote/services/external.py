"""
HTTP clients for external risk-assessment and credit-check services.

These collaborators are optional and are called synchronously by the caller,
never by the quotation pipeline itself. Any failure surfaces as a
``RiskAssessmentError`` / ``CreditCheckError`` instead of a silent fallback.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Type
import logging
import os

import httpx

from autoquote.exceptions import CreditCheckError, ExternalServiceError, RiskAssessmentError
from autoquote.schemas import CamelModel, Money

logger = logging.getLogger("autoquote")

RISK_ASSESSMENT_BASE_URL = os.getenv("RISK_ASSESSMENT_BASE_URL", "http://localhost:9001")
CREDIT_CHECK_BASE_URL = os.getenv("CREDIT_CHECK_BASE_URL", "http://localhost:9002")
CREDIT_CHECK_API_KEY = os.getenv("CREDIT_CHECK_API_KEY", "test-token")
EXTERNAL_SERVICE_TIMEOUT = float(os.getenv("EXTERNAL_SERVICE_TIMEOUT", "10.0"))


# Wire contracts
class RiskAssessmentRequest(CamelModel):
    driver_age: int
    vehicle_age: int
    years_of_experience: int
    vehicle_value: Money


class RiskAssessmentResponse(CamelModel):
    risk_score: float
    risk_category: str
    risk_factors: List[str] = []
    base_multiplier: float


class Address(CamelModel):
    street: str
    city: str
    state: str
    zip_code: str


class CreditCheckRequest(CamelModel):
    first_name: str
    last_name: str
    ssn: str
    date_of_birth: date
    address: Optional[Address] = None


class CreditCheckResponse(CamelModel):
    credit_score: int
    credit_tier: str
    discount_eligible: bool
    discount_percentage: int
    report_date: Optional[str] = None


class ExternalServiceClient:
    """Base JSON-over-HTTP client."""

    error_class: Type[ExternalServiceError] = ExternalServiceError
    service_name = "external service"

    def __init__(self, base_url: str, timeout: Optional[float] = None, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout or EXTERNAL_SERVICE_TIMEOUT)

    def _post(self, path: str, payload: CamelModel, response_model, headers: Optional[Dict[str, str]] = None):
        url = f"{self.base_url}{path}"
        try:
            response = self._client.post(
                url,
                json=payload.model_dump(mode="json", by_alias=True),
                headers=headers,
            )
            response.raise_for_status()
            return response_model.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(f"{self.service_name} returned an error | url={url} | status={e.response.status_code}")
            raise self.error_class(f"{self.service_name} request failed") from e
        except httpx.HTTPError as e:
            logger.error(f"{self.service_name} unreachable | url={url} | error={e.__class__.__name__}")
            raise self.error_class(f"{self.service_name} is unavailable") from e
        except ValueError as e:
            # Covers undecodable JSON and bodies that do not match the contract
            logger.error(f"{self.service_name} returned an invalid response | url={url}")
            raise self.error_class(f"{self.service_name} returned an invalid response") from e

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info: Any):
        self.close()


class RiskAssessmentClient(ExternalServiceClient):
    error_class = RiskAssessmentError
    service_name = "Risk assessment service"

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 client: Optional[httpx.Client] = None):
        super().__init__(base_url or RISK_ASSESSMENT_BASE_URL, timeout, client)

    def assess_risk(self, request: RiskAssessmentRequest) -> RiskAssessmentResponse:
        logger.debug(
            f"Calling risk assessment | driver_age={request.driver_age} | vehicle_age={request.vehicle_age}"
        )
        result = self._post("/api/v1/risk-assessment", request, RiskAssessmentResponse)
        logger.info(
            f"Risk assessment completed | score={result.risk_score} | "
            f"category={result.risk_category} | multiplier={result.base_multiplier}"
        )
        return result


class CreditCheckClient(ExternalServiceClient):
    error_class = CreditCheckError
    service_name = "Credit check service"

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None, client: Optional[httpx.Client] = None):
        super().__init__(base_url or CREDIT_CHECK_BASE_URL, timeout, client)
        self.api_key = api_key or CREDIT_CHECK_API_KEY

    def check_credit(self, request: CreditCheckRequest) -> CreditCheckResponse:
        result = self._post(
            "/api/v1/credit-check",
            request,
            CreditCheckResponse,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        logger.info(
            f"Credit check completed | score={result.credit_score} | "
            f"tier={result.credit_tier} | discount_pct={result.discount_percentage}"
        )
        return result

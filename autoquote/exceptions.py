"""
Error taxonomy for the quotation pipeline.

Messages are shown to API callers as-is, so they describe the problem in
business terms and never include storage or transport internals.
"""


class QuotationError(Exception):
    """Base class for errors surfaced to callers."""
    error_code = "QUOTATION_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(QuotationError):
    """The request is missing data or breaks a business rule. Not retryable."""
    error_code = "INVALID_QUOTE_REQUEST"


class QuoteNotFound(QuotationError):
    """No quote exists for the requested id."""
    error_code = "QUOTE_NOT_FOUND"


class PersistenceFailure(QuotationError):
    """The record store rejected a read or write. Callers own the retry policy."""
    error_code = "PERSISTENCE_FAILURE"


class ExternalServiceError(QuotationError):
    """A remote collaborator failed or returned an unusable answer."""
    error_code = "EXTERNAL_SERVICE_ERROR"


class RiskAssessmentError(ExternalServiceError):
    error_code = "RISK_ASSESSMENT_FAILED"


class CreditCheckError(ExternalServiceError):
    error_code = "CREDIT_CHECK_FAILED"

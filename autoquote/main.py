"""
Main FastAPI application entry point.
"""

import logging
import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from autoquote.config import rules_cache
from autoquote.db import initialize_database
from autoquote.exceptions import (
    ExternalServiceError,
    InvalidRequest,
    PersistenceFailure,
    QuotationError,
    QuoteNotFound,
)
from autoquote.middleware import RequestTracingMiddleware
from autoquote.routers import quotes
from autoquote.schemas import ErrorResponse

logger = logging.getLogger("autoquote")

# Most specific first
ERROR_STATUS_CODES = [
    (InvalidRequest, 400),
    (QuoteNotFound, 404),
    (ExternalServiceError, 502),
    (PersistenceFailure, 503),
]

app = FastAPI(
    title="Auto Insurance Quote API",
    description="Risk-based auto insurance quotes with capped discounts and a 30-day validity window",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestTracingMiddleware)

# Add CORS middleware (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_body(message: str, error_code: str) -> dict:
    return ErrorResponse(
        message=message,
        error_code=error_code,
        timestamp=int(time.time() * 1000),
    ).model_dump(by_alias=True)


@app.exception_handler(QuotationError)
async def quotation_error_handler(request: Request, exc: QuotationError):
    status_code = next((code for cls, code in ERROR_STATUS_CODES if isinstance(exc, cls)), 500)
    logger.warning(f"Quote request rejected | path={request.url.path} | code={exc.error_code} | message={exc.message}")
    return JSONResponse(status_code=status_code, content=error_body(exc.message, exc.error_code))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Body fields are reported as e.g. "vehicle.year: Input should be a valid integer"
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in exc.errors()
    )
    logger.warning(f"Validation error | path={request.url.path} | message={message}")
    return JSONResponse(status_code=400, content=error_body(message, "VALIDATION_ERROR"))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error | path={request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content=error_body("An unexpected error occurred", "INTERNAL_ERROR"))


@app.on_event("startup")
async def startup_event():
    """Initialize database and load quote rules on startup."""
    logger.info("Starting Auto Insurance Quote API...")

    initialize_database()

    rules = rules_cache.get_rules()
    logger.info(
        f"Quote rules loaded: base_premium={rules.rating.base_premium}, "
        f"{len(rules.discounts.rules)} discount types, validity_days={rules.quote.validity_days}"
    )

    logger.info("Startup complete")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Auto Insurance Quote API", "status": "healthy"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


app.include_router(quotes.router, prefix="/api/v1", tags=["quotes"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""
Middleware for request tracing and timing.
"""

import logging
import os
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Configure structured logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("autoquote")

QUOTES_PATH_PREFIX = "/api/v1/quotes"
SLOW_REQUEST_THRESHOLD_MS = float(os.getenv("SLOW_REQUEST_THRESHOLD_MS", "250"))


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id and logs its duration.

    - Uses the caller's X-Request-ID or generates a UUID
    - Echoes X-Request-ID and X-Response-Time-Ms on the response
    - Warns about slow quote requests
    """

    def __init__(self, app: ASGIApp, slow_threshold_ms: float = SLOW_REQUEST_THRESHOLD_MS):
        super().__init__(app)
        self.slow_threshold_ms = slow_threshold_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        logger.info(
            f"Request started | "
            f"request_id={request_id} | "
            f"method={request.method} | "
            f"path={request.url.path}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed | "
                f"request_id={request_id} | "
                f"path={request.url.path} | "
                f"duration_ms={duration_ms:.2f} | "
                f"error={e.__class__.__name__}"
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Request completed | "
            f"request_id={request_id} | "
            f"status={response.status_code} | "
            f"duration_ms={duration_ms:.2f}"
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"

        if duration_ms > self.slow_threshold_ms and request.url.path.startswith(QUOTES_PATH_PREFIX):
            logger.warning(
                f"Slow quote request | "
                f"request_id={request_id} | "
                f"duration_ms={duration_ms:.2f} | "
                f"threshold_ms={self.slow_threshold_ms:.0f}"
            )

        return response

"""
API Middleware - Request/response processing.

Provides:
- Request ID and latency headers on every response
- Error taxonomy to HTTP status mapping, with retry hints on exhaustion
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from dinnerwise.config.errors import DinnerwiseError, ErrorCode, ExhaustedError
from dinnerwise.domains.inference import FailureKind

logger = logging.getLogger(__name__)

# Seconds a client should back off after every model failed transiently
EXHAUSTED_RETRY_AFTER = 30

_STATUS_BY_CODE = {
    ErrorCode.INFERENCE_INVALID_REQUEST: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INFERENCE_EXHAUSTED: 503,
    ErrorCode.LLM_UNAVAILABLE: 503,
}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log its latency."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = f"{duration_ms:.2f}"
        logger.info(
            "%s %s status=%d latency_ms=%.2f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
        )
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Convert DinnerwiseError exceptions to structured JSON responses."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = getattr(request.state, "request_id", "unknown")
        try:
            return await call_next(request)
        except ExhaustedError as e:
            summary = ", ".join(
                f"{f.model.value}:{f.kind.value}x{f.attempts}" for f in e.failures
            )
            logger.error("Inference exhausted (%s) request_id=%s", summary, request_id)
            headers = {}
            if e.failures and all(f.kind == FailureKind.TRANSIENT for f in e.failures):
                headers["Retry-After"] = str(EXHAUSTED_RETRY_AFTER)
            return _error_response(e, request_id, headers)
        except DinnerwiseError as e:
            logger.error(
                "DinnerwiseError: %s request_id=%s details=%s", e.message, request_id, e.details
            )
            return _error_response(e, request_id)
        except Exception as e:
            logger.exception("Unhandled error: %s request_id=%s", e, request_id)
            return JSONResponse(
                status_code=500,
                content={
                    "error": {
                        "code": ErrorCode.INTERNAL_ERROR.value,
                        "message": "Internal server error",
                        "details": {},
                    },
                    "request_id": request_id,
                },
            )


def _error_response(
    error: DinnerwiseError, request_id: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=error_code_to_status(error.code),
        content={"error": error.to_dict(), "request_id": request_id},
        headers=headers,
    )


def error_code_to_status(code: ErrorCode) -> int:
    """Map error codes to HTTP status codes."""
    return _STATUS_BY_CODE.get(code, 500)

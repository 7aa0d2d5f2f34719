"""Structured logging middleware"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from portal.core.config import logger

CORRELATION_HEADER = "X-Correlation-ID"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with a correlation ID and the calling portal user"""

    async def dispatch(self, request: Request, call_next):
        # Reuse the caller's correlation ID when given
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        start_time = time.time()
        context = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "operator": request.headers.get("X-Portal-User"),
        }

        logger.debug(f"Request started: {request.method} {request.url.path}", extra=context)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {e}",
                extra={**context, "duration_ms": round((time.time() - start_time) * 1000, 2)},
                exc_info=True,
            )
            raise

        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={
                **context,
                "status_code": response.status_code,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

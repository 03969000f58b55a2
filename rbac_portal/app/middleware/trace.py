import time
import uuid
import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from rbac_portal.app.core.logging import (
    correlation_id_ctx,
    event_id_ctx,
    principal_id_ctx,
    tenant_id_ctx,
)

logger = logging.getLogger(__name__)


class TracingMiddleware(BaseHTTPMiddleware):
    """
    Assigns a correlation ID and an event ID to every request, logs the
    outcome and echoes both IDs back in the response headers.
    """
    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        event_id = str(uuid.uuid4())

        correlation_id_ctx.set(correlation_id)
        event_id_ctx.set(event_id)
        # Filled in by the auth guard once the principal is known
        tenant_id_ctx.set(None)
        principal_id_ctx.set(None)

        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    "extra_data": {
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": 500,
                        "duration_ms": round((time.time() - start_time) * 1000, 2),
                        "error": str(e),
                    }
                },
                exc_info=True,
            )
            raise

        logger.info(
            f"{request.method} {request.url.path} completed",
            extra={
                "extra_data": {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                    "client_ip": request.client.host if request.client else None,
                }
            },
        )

        response.headers["X-Correlation-ID"] = correlation_id
        response.headers["X-Event-ID"] = event_id
        return response

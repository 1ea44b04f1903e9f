import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from mida_app.core.logging_config import get_logger, set_request_id, set_user_id

logger = get_logger("http")

SKIP_LOGGING_PATHS = ("/api/health",)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Registra método, ruta, estado y duración de cada petición
    y devuelve el X-Request-ID para correlacionar logs.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        set_request_id(request_id)
        set_user_id("")

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        if request.url.path not in SKIP_LOGGING_PATHS:
            user_id = getattr(request.state, "user_id", None)
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                extra={"user": user_id, "duration_ms": round(duration_ms, 1)},
            )

        response.headers["X-Request-ID"] = request_id
        return response

"""
Límite global de peticiones por cliente (slowapi, ventana fija).
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from mida_app.core.config import settings
from mida_app.core.logging_config import get_logger

logger = get_logger("rate_limit")

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("Límite de peticiones excedido para %s: %s", get_remote_address(request), exc.detail)

    return JSONResponse(
        status_code=429,
        content={
            "error": "Demasiadas solicitudes desde esta IP, intente de nuevo más tarde.",
            "code": "RATE_LIMIT_EXCEEDED",
        },
    )

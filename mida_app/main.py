from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from mida_app.api import auth, certificates, inventory, reports, treatments, users
from mida_app.core.config import settings
from mida_app.core.exceptions import MidaError
from mida_app.core.logging_config import logger
from mida_app.core.middleware import RequestLoggingMiddleware
from mida_app.core.rate_limiter import limiter, rate_limit_exceeded_handler
from mida_app.db.init_db import init_db
from mida_app.db.session import SessionLocal, engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Iniciando %s (%s)", settings.APP_NAME, settings.ENVIRONMENT)

    db = SessionLocal()
    try:
        init_db(engine, db)
    finally:
        db.close()

    yield

    logger.info("Deteniendo %s", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# el último agregado es el primero en ejecutarse
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
)


# ------------------ MANEJO DE ERRORES ------------------ #

@app.exception_handler(MidaError)
async def mida_error_handler(request: Request, exc: MidaError):
    if exc.status_code >= 500:
        logger.error("%s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "body"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """
    Devuelve todas las violaciones juntas, no solo la primera.
    """
    details = [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Datos de entrada inválidos", "code": "VALIDATION_ERROR", "details": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Error en la solicitud"
    if exc.status_code == 404 and message == "Not Found":
        message = "Ruta no encontrada"
    return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("Error no controlado en %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Error interno del servidor"})


# ------------------ RUTAS ------------------ #

app.include_router(auth.router, prefix="/api")
app.include_router(inventory.router, prefix="/api")
app.include_router(certificates.router, prefix="/api")
app.include_router(treatments.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(reports.router, prefix="/api")


@app.get("/")
def root():
    return {"message": "API del Sistema de Inventarios Químicos - MIDA funcionando"}


@app.get("/api/health")
def health():
    return {
        "status": "OK",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
    }

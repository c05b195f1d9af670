import time
import logging
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .infrastructure.db import engine, dispose_engine
from .infrastructure.models import Base
from .infrastructure.cache import close_redis
from .infrastructure.metrics import (
    metrics_endpoint,
    http_requests_total,
    http_request_duration_seconds
)
from .interfaces.http.routers import classes as classes_router
from .interfaces.http.routers import selected_classes as selected_classes_router
from .interfaces.http.routers import payments as payments_router
from .domain.errors import (
    ConflictError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
)
from .config import settings

# Structured logging
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

app = FastAPI(title="LensCraft Classes Service", version="0.1.0")

ERROR_STATUS = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidTransitionError, 409),
    (PersistenceError, 500),
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    status_code = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 400)
    if status_code >= 500:
        logger.error("persistence_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=status_code, content={"detail": "storage failure"})
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.middleware("http")
async def add_charset_header(request: Request, call_next):
    start_time = time.time()
    method = request.method

    response = await call_next(request)

    if response.headers.get("content-type", "").startswith("application/json"):
        response.headers["content-type"] = "application/json; charset=utf-8"

    # label by route template so emails and ids don't explode cardinality
    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    duration = time.time() - start_time
    status_code = response.status_code
    http_requests_total.labels(method=method, endpoint=path, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=path).observe(duration)

    logger.info(
        "http_request",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=round(duration * 1000, 2)
    )

    return response


@app.on_event("startup")
def on_startup():
    logger.info("Starting classes service", version="0.1.0")
    Base.metadata.create_all(bind=engine)

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection established")


@app.on_event("shutdown")
def on_shutdown():
    close_redis()
    dispose_engine()
    logger.info("Classes service stopped")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint"""
    return metrics_endpoint()


app.include_router(classes_router.router)
app.include_router(selected_classes_router.router)
app.include_router(payments_router.router)

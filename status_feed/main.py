"""
Status Feed API — entry point.

Startup sequence:
  1. Configure OTel tracing (→ Jaeger via OTLP)
  2. Initialise DB connection pool (TiDB) and create tables if not present
  3. Expose Prometheus /metrics endpoint

Every response body leaves through status_feed.envelope: routers return
success envelopes and the exception handlers below turn every failure into
an error envelope with a stable code.
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from status_feed.config import settings
from status_feed.database import dispose_db, init_db
from status_feed.envelope import render_data, render_error
from status_feed.errors import (
    INTERNAL_ERROR,
    NOT_FOUND,
    VALIDATION_ERROR,
    StatusFeedError,
    ValidationError,
)
from status_feed.routers import comments, reactions, status_updates
from status_feed.schemas import DataEnvelope, HealthPayload
from status_feed.telemetry import instrument_app, setup_tracing

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1/status_updates"

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of the database pool."""
    logger.info("Starting Status Feed API (env=%s)", settings.environment)

    await init_db()

    logger.info("Database connected. API ready.")
    yield

    logger.info("Shutting down...")
    await dispose_db()


app = FastAPI(
    title="Status Feed API",
    description=(
        "Status updates with moods, an append-only transition timeline, "
        "comments and reactions behind one response envelope."
    ),
    version="1.0.0",
    lifespan=lifespan,
    redirect_slashes=False,
)

# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(status_updates.router, prefix=API_PREFIX, tags=["Status updates"])
app.include_router(comments.router, prefix=API_PREFIX, tags=["Comments"])
app.include_router(reactions.router, prefix=API_PREFIX, tags=["Reactions"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
# Served at /metrics exactly; slash redirects are off
async def metrics(request: Request) -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.add_route("/metrics", metrics, include_in_schema=False)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


# ── Error envelopes ────────────────────────────────────────────────────────
@app.exception_handler(StatusFeedError)
async def handle_status_feed_error(request: Request, exc: StatusFeedError):
    if isinstance(exc, ValidationError):
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.messages)
        return render_error(exc.code, exc.status_code, messages=exc.messages)
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return render_error(exc.code, exc.status_code, message=exc.message)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location} {error.get('msg', 'is invalid')}".strip())
    return render_error(VALIDATION_ERROR, 422, messages=messages or ["Request is invalid"])


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    if exc.status_code in (404, 405):
        return render_error(NOT_FOUND, exc.status_code, message=str(exc.detail))
    if exc.status_code < 500:
        return render_error(VALIDATION_ERROR, exc.status_code, messages=[str(exc.detail)])
    return render_error(INTERNAL_ERROR, exc.status_code, message=str(exc.detail))


@app.exception_handler(SQLAlchemyError)
async def handle_storage_error(request: Request, exc: SQLAlchemyError):
    logger.error("Storage failure on %s %s", request.method, request.url.path, exc_info=exc)
    return render_error(INTERNAL_ERROR, 500, message="Internal server error")


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return render_error(INTERNAL_ERROR, 500, message="Internal server error")


@app.get("/health", tags=["Health"], response_model=DataEnvelope[HealthPayload])
async def health():
    return render_data(HealthPayload(status="ok", service=settings.service_name))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

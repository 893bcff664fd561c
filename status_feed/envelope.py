"""
The only way handlers build response bodies.

  render_data(payload)            → { "data": payload }
  render_paginated(page)          → { "meta": {...}, "data": [...] }
  render_error(code, ...)         → JSONResponse { "error": {...} }

Success envelopes are returned as models so FastAPI validates them against
the route's response_model; error envelopes are finished JSONResponses
because they are produced by exception handlers.
"""
import logging
from typing import Any, Optional

from fastapi.responses import JSONResponse

from status_feed.errors import ERROR_CODES, INTERNAL_ERROR, VALIDATION_ERROR
from status_feed.pagination import Page
from status_feed.schemas import DataEnvelope, ErrorBody, ErrorEnvelope, PageMeta, PaginatedEnvelope
from status_feed.serializers import serialize_many
from status_feed.telemetry import ERROR_RESPONSES_TOTAL

logger = logging.getLogger(__name__)


def render_data(payload: Any) -> DataEnvelope:
    return DataEnvelope(data=payload)


def render_paginated(page: Page) -> PaginatedEnvelope:
    return PaginatedEnvelope(
        meta=PageMeta(page=page.page, page_size=page.page_size, total_count=page.total_count),
        data=serialize_many(page.items),
    )


def render_error(
    code: str,
    status_code: int,
    message: Optional[str] = None,
    messages: Optional[list[str]] = None,
) -> JSONResponse:
    """Validation errors carry ``messages``; every other code a single ``message``."""
    if code not in ERROR_CODES:
        logger.error("Unknown error code %r, reporting as %s", code, INTERNAL_ERROR)
        code = INTERNAL_ERROR

    if code == VALIDATION_ERROR:
        body = ErrorBody(code=code, messages=messages or ([message] if message else []))
    else:
        body = ErrorBody(code=code, message=message or (messages[0] if messages else code))

    ERROR_RESPONSES_TOTAL.labels(code=code).inc()
    return JSONResponse(
        status_code=status_code,
        content=ErrorEnvelope(error=body).model_dump(exclude_none=True),
    )

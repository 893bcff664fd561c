"""
Comment endpoints:
  GET  /status_updates/{id}/comments — paginated, newest first, q/since filters
  POST /status_updates/{id}/comments — add a comment
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from status_feed.database import get_db
from status_feed.envelope import render_data, render_paginated
from status_feed.pagination import PageParams
from status_feed.schemas import CommentCreate, CommentPayload, DataEnvelope, PaginatedEnvelope
from status_feed.serializers import serialize_one
from status_feed.store.comments import CommentStore

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get("/{status_update_id}/comments", response_model=PaginatedEnvelope[CommentPayload])
async def list_comments(
    status_update_id: str,
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    since: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    params = PageParams.from_raw(page, page_size)
    result = await CommentStore(db).list(status_update_id, params, q=q, since=since)
    return render_paginated(result)


@router.post(
    "/{status_update_id}/comments",
    response_model=DataEnvelope[CommentPayload],
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    status_update_id: str,
    body: CommentCreate,
    db: AsyncSession = Depends(get_db),
):
    with tracer.start_as_current_span("create_comment") as span:
        span.set_attribute("status_update.id", status_update_id)
        comment = await CommentStore(db).create(status_update_id, body.body)
        return render_data(serialize_one(comment))

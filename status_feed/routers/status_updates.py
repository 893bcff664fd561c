"""
Status update endpoints:
  GET    /status_updates                 — paginated, filterable listing
  POST   /status_updates                 — create
  GET    /status_updates/{id}            — fetch one
  PATCH  /status_updates/{id}            — partial update (records transitions)
  DELETE /status_updates/{id}            — delete with cascade
  POST   /status_updates/{id}/like       — atomic like
  GET    /status_updates/{id}/transitions — transition timeline
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from status_feed import vocabulary
from status_feed.database import get_db
from status_feed.envelope import render_data, render_paginated
from status_feed.pagination import PageParams
from status_feed.schemas import (
    DataEnvelope,
    LikesPayload,
    PaginatedEnvelope,
    StatusChangePayload,
    StatusUpdateCreate,
    StatusUpdatePatch,
    StatusUpdatePayload,
)
from status_feed.serializers import serialize_many, serialize_one
from status_feed.store.status_updates import StatusUpdateStore
from status_feed.store.transitions import CHRONOLOGICAL, REVERSE_CHRONOLOGICAL

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get("", response_model=PaginatedEnvelope[StatusUpdatePayload])
async def list_status_updates(
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Case-insensitive text search on body"),
    since: Optional[str] = Query(None, description="ISO-8601; created at or after"),
    mood: Optional[str] = Query(None),
    status_: Optional[str] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """
    Newest first. Malformed paging values fall back to defaults and unknown
    filter values are ignored rather than rejected.
    """
    with tracer.start_as_current_span("list_status_updates") as span:
        params = PageParams.from_raw(page, page_size)
        result = await StatusUpdateStore(db).list(
            params, q=q, since=since, mood=mood, status=status_
        )
        span.set_attribute("page.number", result.page)
        span.set_attribute("page.total_count", result.total_count)
        return render_paginated(result)


@router.post(
    "",
    response_model=DataEnvelope[StatusUpdatePayload],
    status_code=status.HTTP_201_CREATED,
)
async def create_status_update(body: StatusUpdateCreate, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("create_status_update") as span:
        update = await StatusUpdateStore(db).create(body.body, body.mood, body.status)
        span.set_attribute("status_update.id", update.id)
        return render_data(serialize_one(update))


@router.get("/{status_update_id}", response_model=DataEnvelope[StatusUpdatePayload])
async def get_status_update(status_update_id: str, db: AsyncSession = Depends(get_db)):
    update = await StatusUpdateStore(db).get(status_update_id)
    return render_data(serialize_one(update))


@router.patch("/{status_update_id}", response_model=DataEnvelope[StatusUpdatePayload])
async def patch_status_update(
    status_update_id: str,
    body: StatusUpdatePatch,
    db: AsyncSession = Depends(get_db),
):
    """
    Partial update. A changed ``mood`` or ``status`` appends one transition
    per field to the timeline; writing the current value appends nothing.
    """
    with tracer.start_as_current_span("patch_status_update") as span:
        span.set_attribute("status_update.id", status_update_id)
        update = await StatusUpdateStore(db).update(
            status_update_id, body.changed_fields(), reason=body.reason
        )
        return render_data(serialize_one(update))


@router.delete(
    "/{status_update_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_status_update(status_update_id: str, db: AsyncSession = Depends(get_db)):
    with tracer.start_as_current_span("delete_status_update") as span:
        span.set_attribute("status_update.id", status_update_id)
        await StatusUpdateStore(db).delete(status_update_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{status_update_id}/like", response_model=DataEnvelope[LikesPayload])
async def like_status_update(status_update_id: str, db: AsyncSession = Depends(get_db)):
    likes_count = await StatusUpdateStore(db).increment_likes(status_update_id)
    return render_data(LikesPayload(id=status_update_id, likes_count=likes_count))


@router.get(
    "/{status_update_id}/transitions",
    response_model=DataEnvelope[list[StatusChangePayload]],
)
async def list_transitions(
    status_update_id: str,
    order: Optional[str] = Query(None, description="chronological | reverse_chronological"),
    field: Optional[str] = Query(None, description="mood | status"),
    db: AsyncSession = Depends(get_db),
):
    """Timeline of tracked-field changes, oldest first unless reversed."""
    store = StatusUpdateStore(db)
    await store.get(status_update_id)

    order = REVERSE_CHRONOLOGICAL if order == REVERSE_CHRONOLOGICAL else CHRONOLOGICAL
    if field not in vocabulary.TRACKED_FIELDS:
        field = None

    changes = await store.transitions.list_for_entity(status_update_id, order=order, field=field)
    return render_data(serialize_many(changes))

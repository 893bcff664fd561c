"""
Reaction endpoints:
  GET    /status_updates/{id}/reactions       — counts grouped by kind
  POST   /status_updates/{id}/reactions       — toggle (create or remove)
  DELETE /status_updates/{id}/reactions/{rid} — remove by id
"""
import logging
from typing import Union

from fastapi import APIRouter, Depends, Response, status
from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from status_feed.database import get_db
from status_feed.envelope import render_data
from status_feed.schemas import (
    DataEnvelope,
    ReactionPayload,
    ReactionSummary,
    ReactionToggle,
    ToggledOff,
)
from status_feed.serializers import serialize_one
from status_feed.store.reactions import ReactionStore

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get(
    "/{status_update_id}/reactions",
    response_model=DataEnvelope[list[ReactionSummary]],
)
async def list_reactions(status_update_id: str, db: AsyncSession = Depends(get_db)):
    summary = await ReactionStore(db).summary(status_update_id)
    return render_data([ReactionSummary(**group) for group in summary])


@router.post(
    "/{status_update_id}/reactions",
    response_model=DataEnvelope[Union[ReactionPayload, ToggledOff]],
    status_code=status.HTTP_201_CREATED,
)
async def toggle_reaction(
    status_update_id: str,
    body: ReactionToggle,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Toggle a reaction: 201 with the reaction when it was created, 200 with
    ``{"toggled": false}`` when an identical reaction existed and was removed.
    """
    with tracer.start_as_current_span("toggle_reaction") as span:
        span.set_attribute("status_update.id", status_update_id)
        reaction = await ReactionStore(db).toggle(
            status_update_id, body.kind, body.actor_identifier
        )
        if reaction is None:
            response.status_code = status.HTTP_200_OK
            return render_data(ToggledOff())
        return render_data(serialize_one(reaction))


@router.delete(
    "/{status_update_id}/reactions/{reaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_reaction(
    status_update_id: str,
    reaction_id: int,
    db: AsyncSession = Depends(get_db),
):
    await ReactionStore(db).delete(status_update_id, reaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

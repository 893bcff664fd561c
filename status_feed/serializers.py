"""
Record → response payload, dispatched on the record's ``record_kind`` tag.

Serializers register themselves at import time; lookups never inspect the
record's class hierarchy. Internal columns are never copied by default: each
serializer lists the fields it exposes.
"""
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel

from status_feed.models import Comment, Reaction, StatusChange, StatusUpdate
from status_feed.schemas import (
    CommentPayload,
    ReactionPayload,
    StatusChangePayload,
    StatusUpdatePayload,
    TransitionDisplay,
)
from status_feed.vocabulary import humanize

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_SERIALIZERS: dict[str, Callable[[Any], BaseModel]] = {}


def serializer(record_kind: str):
    def register(fn: Callable[[Any], BaseModel]) -> Callable[[Any], BaseModel]:
        if record_kind in _SERIALIZERS:
            raise ValueError(f"Serializer for '{record_kind}' already registered")
        _SERIALIZERS[record_kind] = fn
        return fn
    return register


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """UTC, second precision, explicit Z designator."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def serialize_one(record: Any) -> BaseModel:
    try:
        fn = _SERIALIZERS[record.record_kind]
    except (AttributeError, KeyError):
        raise TypeError(f"No serializer registered for {record!r}") from None
    return fn(record)


def serialize_many(records: Iterable[Any]) -> list[BaseModel]:
    return [serialize_one(record) for record in records]


@serializer(StatusUpdate.record_kind)
def _status_update(update: StatusUpdate) -> StatusUpdatePayload:
    return StatusUpdatePayload(
        id=update.id,
        body=update.body,
        mood=update.mood,
        status=update.status,
        likes_count=update.likes_count,
        created_at=format_timestamp(update.created_at),
        updated_at=format_timestamp(update.updated_at),
    )


@serializer(StatusChange.record_kind)
def _status_change(change: StatusChange) -> StatusChangePayload:
    return StatusChangePayload(
        id=change.id,
        status_update_id=change.status_update_id,
        field=change.field,
        from_=change.from_value,
        to=change.to_value,
        display=TransitionDisplay(
            from_=humanize(change.from_value),
            to=humanize(change.to_value),
        ),
        reason=change.reason,
        changed_at=format_timestamp(change.created_at),
    )


@serializer(Comment.record_kind)
def _comment(comment: Comment) -> CommentPayload:
    return CommentPayload(
        id=comment.id,
        status_update_id=comment.status_update_id,
        body=comment.body,
        created_at=format_timestamp(comment.created_at),
        updated_at=format_timestamp(comment.updated_at),
    )


@serializer(Reaction.record_kind)
def _reaction(reaction: Reaction) -> ReactionPayload:
    return ReactionPayload(
        id=reaction.id,
        status_update_id=reaction.status_update_id,
        kind=reaction.kind,
        actor_identifier=reaction.actor_identifier,
        created_at=format_timestamp(reaction.created_at),
    )

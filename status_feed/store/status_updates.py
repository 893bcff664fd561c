"""
Entity store for status updates.

  create           — validate, insert (no transition is recorded on create)
  get              — fetch by id
  update           — partial update under a row lock + transition recording
  delete           — cascade transitions, comments, reactions, then the row
  list             — filtered, paginated listing, newest first
  increment_likes  — single atomic UPDATE ... SET likes_count = likes_count + 1

The store never commits: the caller's session is the transaction. Failures
that must leave no trace (recorder, cascade) roll the session back before
raising.
"""
import logging
from typing import Any, Optional

from sqlalchemy import delete as sql_delete
from sqlalchemy import select
from sqlalchemy import update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from status_feed import vocabulary
from status_feed.config import settings
from status_feed.errors import (
    InternalError,
    NotFoundError,
    StatusFeedError,
    TransitionRecordError,
    ValidationError,
)
from status_feed.models import Comment, Reaction, StatusUpdate
from status_feed.pagination import Page, PageParams, enum_filter, paginate, since_filter, text_filter
from status_feed.store.recorder import TransitionRecorder, snapshot
from status_feed.store.transitions import TransitionLog
from status_feed.telemetry import LIKES_TOTAL, STATUS_UPDATES_CREATED_TOTAL

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("body", "mood", "status")


def validate_status_update(
    body: Optional[str],
    mood: Optional[str],
    status: Optional[str] = None,
) -> list[str]:
    """Every violated rule, in field order. Empty when the values are valid."""
    errors = []
    if body is None or not body.strip():
        errors.append("Body can't be blank")
    elif len(body) > settings.body_max_length:
        errors.append(f"Body is too long (maximum is {settings.body_max_length} characters)")

    if mood is None or not str(mood).strip():
        errors.append("Mood can't be blank")
    elif not vocabulary.is_valid(vocabulary.MOOD, mood):
        errors.append(
            f"Mood '{mood}' is not one of: {', '.join(vocabulary.values(vocabulary.MOOD))}"
        )

    if status is not None and not vocabulary.is_valid(vocabulary.STATUS, status):
        errors.append(
            f"Status '{status}' is not one of: {', '.join(vocabulary.values(vocabulary.STATUS))}"
        )
    return errors


class StatusUpdateStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.transitions = TransitionLog(db)
        self.recorder = TransitionRecorder(self.transitions)

    async def create(self, body: str, mood: str, status: Optional[str] = None) -> StatusUpdate:
        errors = validate_status_update(body, mood, status)
        if errors:
            raise ValidationError(errors)

        update = StatusUpdate(body=body, mood=mood, status=status)
        self.db.add(update)
        await self.db.flush()  # materialise id and timestamps

        STATUS_UPDATES_CREATED_TOTAL.inc()
        logger.info("Status update created: %s (mood=%s)", update.id, update.mood)
        return update

    async def get(self, status_update_id: str) -> StatusUpdate:
        update = await self.db.get(StatusUpdate, status_update_id)
        if update is None:
            raise NotFoundError("status_update", status_update_id)
        return update

    async def _get_locked(self, status_update_id: str) -> StatusUpdate:
        """Fetch with SELECT ... FOR UPDATE so same-row writers serialize."""
        rows = await self.db.execute(
            select(StatusUpdate)
            .where(StatusUpdate.id == status_update_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        update = rows.scalar_one_or_none()
        if update is None:
            raise NotFoundError("status_update", status_update_id)
        return update

    async def update(
        self,
        status_update_id: str,
        fields: dict[str, Any],
        reason: Optional[str] = None,
    ) -> StatusUpdate:
        """
        Apply a partial update and record transitions for changed tracked fields.

        Keys absent from ``fields`` are left alone. The recorder runs after the
        flush inside the same transaction; if it fails the whole update is
        rolled back and TransitionRecordError is raised.
        """
        unknown = sorted(set(fields) - set(UPDATABLE_FIELDS))
        if unknown:
            raise ValidationError([f"Unknown field '{name}'" for name in unknown])

        update = await self._get_locked(status_update_id)
        before = snapshot(update)

        body = fields.get("body", update.body)
        mood = fields.get("mood", update.mood)
        status = fields.get("status", update.status)

        errors = validate_status_update(body, mood, status)
        if "status" in fields and status is None and update.status is not None:
            errors.append("Status can't be cleared once set")
        if errors:
            raise ValidationError(errors)

        for name, value in (("body", body), ("mood", mood), ("status", status)):
            if getattr(update, name) != value:
                setattr(update, name, value)
        await self.db.flush()

        try:
            await self.recorder.record(update, before, reason=reason)
        except (StatusFeedError, SQLAlchemyError) as exc:
            logger.error(
                "Transition recording failed for status update %s: %s", status_update_id, exc
            )
            await self.db.rollback()
            raise TransitionRecordError(
                f"Could not record transition for status update {status_update_id}"
            ) from exc

        logger.info("Status update %s updated (%s)", update.id, ", ".join(sorted(fields)) or "no fields")
        return update

    async def delete(self, status_update_id: str) -> None:
        """Remove the update and every row referencing it, all or nothing."""
        update = await self._get_locked(status_update_id)
        try:
            removed_transitions = await self.transitions.delete_for_entity(update.id)
            removed_comments = await self.db.execute(
                sql_delete(Comment).where(Comment.status_update_id == update.id)
            )
            removed_reactions = await self.db.execute(
                sql_delete(Reaction).where(Reaction.status_update_id == update.id)
            )
            await self.db.delete(update)
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.error("Cascade delete failed for status update %s: %s", status_update_id, exc)
            await self.db.rollback()
            raise InternalError(f"Could not delete status update {status_update_id}") from exc

        logger.info(
            "Status update %s deleted (%d transitions, %d comments, %d reactions)",
            status_update_id,
            removed_transitions,
            removed_comments.rowcount or 0,
            removed_reactions.rowcount or 0,
        )

    async def list(
        self,
        params: PageParams,
        q: Optional[str] = None,
        since: Optional[str] = None,
        mood: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Page[StatusUpdate]:
        stmt = select(StatusUpdate)
        stmt = text_filter(stmt, StatusUpdate.body, q)
        stmt = since_filter(stmt, StatusUpdate.created_at, since)
        stmt = enum_filter(stmt, StatusUpdate.mood, vocabulary.MOOD, mood)
        stmt = enum_filter(stmt, StatusUpdate.status, vocabulary.STATUS, status)
        stmt = stmt.order_by(StatusUpdate.created_at.desc(), StatusUpdate.id.desc())
        return await paginate(self.db, stmt, params)

    async def increment_likes(self, status_update_id: str) -> int:
        result = await self.db.execute(
            sql_update(StatusUpdate)
            .where(StatusUpdate.id == status_update_id)
            .values(likes_count=StatusUpdate.likes_count + 1)
        )
        if not result.rowcount:
            raise NotFoundError("status_update", status_update_id)

        likes_count = (
            await self.db.execute(
                select(StatusUpdate.likes_count).where(StatusUpdate.id == status_update_id)
            )
        ).scalar_one()

        LIKES_TOTAL.inc()
        logger.debug("Status update %s liked (likes_count=%d)", status_update_id, likes_count)
        return likes_count

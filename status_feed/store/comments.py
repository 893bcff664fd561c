"""Comments on a status update — create and paginated listing."""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from status_feed.config import settings
from status_feed.errors import ValidationError
from status_feed.models import Comment
from status_feed.pagination import Page, PageParams, paginate, since_filter, text_filter
from status_feed.store.status_updates import StatusUpdateStore

logger = logging.getLogger(__name__)


class CommentStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.status_updates = StatusUpdateStore(db)

    async def create(self, status_update_id: str, body: Optional[str]) -> Comment:
        await self.status_updates.get(status_update_id)

        if body is None or not body.strip():
            raise ValidationError(["Body can't be blank"])
        if len(body) > settings.comment_max_length:
            raise ValidationError(
                [f"Body is too long (maximum is {settings.comment_max_length} characters)"]
            )

        comment = Comment(status_update_id=status_update_id, body=body)
        self.db.add(comment)
        await self.db.flush()
        logger.info("Comment %s added to status update %s", comment.id, status_update_id)
        return comment

    async def list(
        self,
        status_update_id: str,
        params: PageParams,
        q: Optional[str] = None,
        since: Optional[str] = None,
    ) -> Page[Comment]:
        await self.status_updates.get(status_update_id)

        stmt = select(Comment).where(Comment.status_update_id == status_update_id)
        stmt = text_filter(stmt, Comment.body, q)
        stmt = since_filter(stmt, Comment.created_at, since)
        stmt = stmt.order_by(Comment.created_at.desc(), Comment.id.desc())
        return await paginate(self.db, stmt, params)

"""
Append-only transition log for the tracked fields of status updates.

Rows are only ever inserted here; the single destructive path is the cascade
in StatusUpdateStore.delete. Reads are always totally ordered by
(created_at, id) so ties on the timestamp fall back to insertion sequence.
"""
import logging
from typing import Literal, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from status_feed import vocabulary
from status_feed.errors import ValidationError
from status_feed.models import StatusChange

logger = logging.getLogger(__name__)

CHRONOLOGICAL = "chronological"
REVERSE_CHRONOLOGICAL = "reverse_chronological"
Order = Literal["chronological", "reverse_chronological"]


class TransitionLog:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(
        self,
        status_update_id: str,
        from_value: Optional[str],
        to_value: str,
        reason: Optional[str] = None,
        field: str = "mood",
    ) -> StatusChange:
        """Insert one transition after checking both ends against the field's vocabulary."""
        try:
            set_name = vocabulary.vocabulary_for_field(field)
        except ValueError as exc:
            raise ValidationError([str(exc)]) from None

        errors = []
        if not vocabulary.is_valid(set_name, to_value):
            errors.append(f"To {field} '{to_value}' is not a valid {set_name}")
        if from_value is not None and not vocabulary.is_valid(set_name, from_value):
            errors.append(f"From {field} '{from_value}' is not a valid {set_name}")
        if errors:
            raise ValidationError(errors)

        change = StatusChange(
            status_update_id=status_update_id,
            field=field,
            from_value=from_value,
            to_value=to_value,
            reason=reason,
        )
        self.db.add(change)
        await self.db.flush()
        logger.info(
            "Recorded %s transition %s → %s for status update %s",
            field, from_value, to_value, status_update_id,
        )
        return change

    async def list_for_entity(
        self,
        status_update_id: str,
        order: Order = CHRONOLOGICAL,
        field: Optional[str] = None,
    ) -> list[StatusChange]:
        stmt = select(StatusChange).where(StatusChange.status_update_id == status_update_id)
        if field is not None:
            stmt = stmt.where(StatusChange.field == field)

        if order == REVERSE_CHRONOLOGICAL:
            stmt = stmt.order_by(StatusChange.created_at.desc(), StatusChange.id.desc())
        else:
            stmt = stmt.order_by(StatusChange.created_at.asc(), StatusChange.id.asc())

        rows = await self.db.execute(stmt)
        return list(rows.scalars().all())

    async def current_state(self, status_update_id: str, field: str = "status") -> Optional[str]:
        """The ``to`` value of the latest transition, or None when uninitialized."""
        latest = await self.list_for_entity(status_update_id, REVERSE_CHRONOLOGICAL, field)
        return latest[0].to_value if latest else None

    async def delete_for_entity(self, status_update_id: str) -> int:
        result = await self.db.execute(
            delete(StatusChange).where(StatusChange.status_update_id == status_update_id)
        )
        return result.rowcount or 0

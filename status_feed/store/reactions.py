"""
Emoji reactions on a status update.

At most one reaction per (status update, kind, actor), enforced by a unique
constraint. Posting a reaction that already exists removes it instead:

  toggle(...) → Reaction  (created)
  toggle(...) → None      (removed)
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from status_feed import vocabulary
from status_feed.errors import InternalError, NotFoundError, ValidationError
from status_feed.models import Reaction
from status_feed.store.status_updates import StatusUpdateStore
from status_feed.telemetry import REACTION_TOGGLES_TOTAL

logger = logging.getLogger(__name__)

# Matches the width of reactions.actor_identifier
ACTOR_IDENTIFIER_MAX_LENGTH = 255


def validate_reaction(kind: Optional[str], actor_identifier: Optional[str]) -> list[str]:
    errors = []
    if not kind:
        errors.append("Kind can't be blank")
    elif not vocabulary.is_valid(vocabulary.REACTION, kind):
        errors.append(
            f"Kind '{kind}' is not one of: {' '.join(vocabulary.values(vocabulary.REACTION))}"
        )
    if actor_identifier is None or not actor_identifier.strip():
        errors.append("Actor identifier can't be blank")
    elif len(actor_identifier) > ACTOR_IDENTIFIER_MAX_LENGTH:
        errors.append(
            f"Actor identifier is too long (maximum is {ACTOR_IDENTIFIER_MAX_LENGTH} characters)"
        )
    return errors


class ReactionStore:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.status_updates = StatusUpdateStore(db)

    async def _find(self, status_update_id: str, kind: str, actor_identifier: str) -> Optional[Reaction]:
        rows = await self.db.execute(
            select(Reaction)
            .where(
                Reaction.status_update_id == status_update_id,
                Reaction.kind == kind,
                Reaction.actor_identifier == actor_identifier,
            )
            .with_for_update()
        )
        return rows.scalar_one_or_none()

    async def summary(self, status_update_id: str) -> list[dict]:
        """Reactions grouped by kind, in order of each kind's first use."""
        await self.status_updates.get(status_update_id)

        rows = await self.db.execute(
            select(Reaction)
            .where(Reaction.status_update_id == status_update_id)
            .order_by(Reaction.created_at.asc(), Reaction.id.asc())
        )
        grouped: dict[str, list[str]] = {}
        for reaction in rows.scalars().all():
            grouped.setdefault(reaction.kind, []).append(reaction.actor_identifier)

        return [
            {"kind": kind, "count": len(actors), "actors": actors}
            for kind, actors in grouped.items()
        ]

    async def toggle(
        self,
        status_update_id: str,
        kind: Optional[str],
        actor_identifier: Optional[str],
    ) -> Optional[Reaction]:
        """Create the reaction if absent, delete it if present."""
        await self.status_updates.get(status_update_id)
        errors = validate_reaction(kind, actor_identifier)
        if errors:
            raise ValidationError(errors)

        # A concurrent toggle can win the insert race; the retry then sees its
        # row and removes it, as if the two requests had arrived in order.
        last_error = None
        for _ in range(2):
            existing = await self._find(status_update_id, kind, actor_identifier)
            if existing is not None:
                await self.db.delete(existing)
                await self.db.flush()
                REACTION_TOGGLES_TOTAL.labels(outcome="removed").inc()
                logger.info(
                    "Reaction %s by %s removed from status update %s",
                    kind, actor_identifier, status_update_id,
                )
                return None

            reaction = Reaction(
                status_update_id=status_update_id,
                kind=kind,
                actor_identifier=actor_identifier,
            )
            self.db.add(reaction)
            try:
                await self.db.flush()
            except IntegrityError as exc:
                await self.db.rollback()
                last_error = exc
                logger.info(
                    "Reaction %s by %s raced on status update %s, retrying",
                    kind, actor_identifier, status_update_id,
                )
                continue

            REACTION_TOGGLES_TOTAL.labels(outcome="created").inc()
            logger.info(
                "Reaction %s by %s added to status update %s",
                kind, actor_identifier, status_update_id,
            )
            return reaction

        raise InternalError("Could not toggle reaction") from last_error

    async def delete(self, status_update_id: str, reaction_id: int) -> None:
        await self.status_updates.get(status_update_id)
        rows = await self.db.execute(
            select(Reaction).where(
                Reaction.id == reaction_id,
                Reaction.status_update_id == status_update_id,
            )
        )
        reaction = rows.scalar_one_or_none()
        if reaction is None:
            raise NotFoundError("reaction", reaction_id)
        await self.db.delete(reaction)
        await self.db.flush()
        logger.info("Reaction %s removed from status update %s", reaction_id, status_update_id)

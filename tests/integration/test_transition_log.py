"""
Integration tests for TransitionLog.

Tests cover:
- append validation against the field's vocabulary
- Chronological and reverse ordering, ties broken by id
- Field filtering and current state
"""

from datetime import datetime

import pytest

from status_feed.errors import ValidationError
from status_feed.models import StatusChange
from status_feed.store.status_updates import StatusUpdateStore
from status_feed.store.transitions import REVERSE_CHRONOLOGICAL, TransitionLog


class TestTransitionLog:
    """Tests for TransitionLog."""

    @pytest.fixture
    async def update(self, db):
        update = await StatusUpdateStore(db).create("Proposal", "focused")
        await db.commit()
        return update

    @pytest.fixture
    def log(self, db):
        return TransitionLog(db)

    @pytest.mark.asyncio
    async def test_append_status_transition(self, log, update):
        change = await log.append(update.id, None, "submitted", reason="Opened", field="status")

        assert change.id is not None
        assert change.from_value is None
        assert change.to_value == "submitted"
        assert change.reason == "Opened"
        assert change.created_at is not None

    @pytest.mark.asyncio
    async def test_append_rejects_out_of_vocabulary_values(self, log, update):
        with pytest.raises(ValidationError) as exc_info:
            await log.append(update.id, "limbo", "archived", field="status")
        assert len(exc_info.value.messages) == 2

    @pytest.mark.asyncio
    async def test_append_checks_the_field_vocabulary(self, log, update):
        with pytest.raises(ValidationError):
            await log.append(update.id, None, "happy", field="status")
        with pytest.raises(ValidationError):
            await log.append(update.id, "focused", "in_review", field="mood")

    @pytest.mark.asyncio
    async def test_append_rejects_untracked_field(self, log, update):
        with pytest.raises(ValidationError):
            await log.append(update.id, None, "hello", field="body")

    @pytest.mark.asyncio
    async def test_every_registered_value_accepted(self, log, update):
        for status in ("submitted", "in_review", "approved", "denied", "needs_info"):
            await log.append(update.id, None, status, field="status")
        for mood in ("focused", "calm", "happy", "blocked"):
            await log.append(update.id, None, mood, field="mood")

        assert len(await log.list_for_entity(update.id)) == 9

    @pytest.mark.asyncio
    async def test_ordering_and_reverse(self, log, update):
        first = await log.append(update.id, None, "submitted", field="status")
        second = await log.append(update.id, "submitted", "in_review", field="status")
        third = await log.append(update.id, "in_review", "approved", field="status")

        ordered = await log.list_for_entity(update.id)
        reverse = await log.list_for_entity(update.id, order=REVERSE_CHRONOLOGICAL)

        assert [c.id for c in ordered] == [first.id, second.id, third.id]
        assert [c.id for c in reverse] == [third.id, second.id, first.id]

    @pytest.mark.asyncio
    async def test_timestamp_ties_broken_by_id(self, db, log, update):
        tied = datetime(2026, 1, 17, 10, 0, 0)
        for to_value in ("submitted", "in_review", "approved"):
            db.add(StatusChange(
                status_update_id=update.id, field="status",
                to_value=to_value, created_at=tied,
            ))
        await db.flush()

        ordered = await log.list_for_entity(update.id)
        reverse = await log.list_for_entity(update.id, order=REVERSE_CHRONOLOGICAL)

        assert [c.to_value for c in ordered] == ["submitted", "in_review", "approved"]
        assert [c.to_value for c in reverse] == ["approved", "in_review", "submitted"]

    @pytest.mark.asyncio
    async def test_field_filter_and_current_state(self, log, update):
        assert await log.current_state(update.id, "status") is None

        await log.append(update.id, "focused", "calm", field="mood")
        await log.append(update.id, None, "submitted", field="status")
        await log.append(update.id, "submitted", "denied", field="status")

        mood_changes = await log.list_for_entity(update.id, field="mood")
        assert [c.to_value for c in mood_changes] == ["calm"]
        assert await log.current_state(update.id, "status") == "denied"
        assert await log.current_state(update.id, "mood") == "calm"

    @pytest.mark.asyncio
    async def test_other_entities_not_listed(self, db, log, update):
        other = await StatusUpdateStore(db).create("Other", "calm")
        await log.append(other.id, "calm", "happy", field="mood")

        assert await log.list_for_entity(update.id) == []

"""
Unit tests for serializers and envelope construction.

Tests cover:
- Canonical UTC timestamp format
- Serializer dispatch by record kind
- Transition display labels and the from/to aliases
- Error envelope shapes
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from status_feed.envelope import render_data, render_error, render_paginated
from status_feed.errors import INTERNAL_ERROR, NOT_FOUND, VALIDATION_ERROR
from status_feed.models import Comment, Reaction, StatusChange, StatusUpdate
from status_feed.pagination import Page
from status_feed.serializers import format_timestamp, serialize_many, serialize_one

CREATED = datetime(2026, 1, 17, 10, 30, 45, 123456)


def make_update(**overrides) -> StatusUpdate:
    values = dict(
        id="su-1",
        body="Shipping the timeline",
        mood="focused",
        status=None,
        likes_count=3,
        created_at=CREATED,
        updated_at=CREATED,
    )
    values.update(overrides)
    return StatusUpdate(**values)


class TestFormatTimestamp:
    """Tests for format_timestamp."""

    def test_naive_treated_as_utc(self):
        assert format_timestamp(CREATED) == "2026-01-17T10:30:45Z"

    def test_aware_converted_to_utc(self):
        aware = datetime(2026, 1, 17, 12, 30, 45, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(aware) == "2026-01-17T10:30:45Z"

    def test_none(self):
        assert format_timestamp(None) is None


class TestSerializeOne:
    """Tests for dispatch through the serializer registry."""

    def test_status_update(self):
        payload = serialize_one(make_update()).model_dump()
        assert payload == {
            "id": "su-1",
            "body": "Shipping the timeline",
            "mood": "focused",
            "status": None,
            "likes_count": 3,
            "created_at": "2026-01-17T10:30:45Z",
            "updated_at": "2026-01-17T10:30:45Z",
        }

    def test_status_change_uses_from_to_aliases(self):
        change = StatusChange(
            id=7,
            status_update_id="su-1",
            field="status",
            from_value="submitted",
            to_value="in_review",
            reason="Needs legal review",
            created_at=CREATED,
        )
        payload = serialize_one(change).model_dump(by_alias=True)

        assert payload["from"] == "submitted"
        assert payload["to"] == "in_review"
        assert payload["display"] == {"from": "Submitted", "to": "In Review"}
        assert payload["reason"] == "Needs legal review"
        assert payload["changed_at"] == "2026-01-17T10:30:45Z"
        assert "from_value" not in payload

    def test_status_change_without_prior_state(self):
        change = StatusChange(
            id=1, status_update_id="su-1", field="status",
            from_value=None, to_value="submitted", created_at=CREATED,
        )
        payload = serialize_one(change).model_dump(by_alias=True)
        assert payload["from"] is None
        assert payload["display"] == {"from": None, "to": "Submitted"}
        assert payload["reason"] is None

    def test_stored_value_not_mutated(self):
        change = StatusChange(
            id=1, status_update_id="su-1", field="status",
            from_value="in_review", to_value="needs_info", created_at=CREATED,
        )
        serialize_one(change)
        assert change.to_value == "needs_info"

    def test_comment_and_reaction(self):
        comment = Comment(id=1, status_update_id="su-1", body="Nice", created_at=CREATED, updated_at=CREATED)
        reaction = Reaction(id=2, status_update_id="su-1", kind="🔥", actor_identifier="ana", created_at=CREATED)

        payloads = [p.model_dump() for p in serialize_many([comment, reaction])]

        assert payloads[0]["body"] == "Nice"
        assert payloads[1]["kind"] == "🔥"
        assert payloads[1]["actor_identifier"] == "ana"

    def test_unregistered_type_rejected(self):
        with pytest.raises(TypeError):
            serialize_one({"id": 1})


class TestEnvelopes:
    """Tests for the three envelope shapes."""

    def test_data_envelope(self):
        envelope = render_data(serialize_one(make_update())).model_dump()
        assert list(envelope) == ["data"]
        assert envelope["data"]["id"] == "su-1"

    def test_paginated_envelope(self):
        page = Page(items=[make_update()], page=2, page_size=1, total_count=5)
        envelope = render_paginated(page).model_dump()
        assert set(envelope) == {"meta", "data"}
        assert envelope["meta"] == {"page": 2, "page_size": 1, "total_count": 5}
        assert len(envelope["data"]) == 1

    def test_validation_error_uses_messages(self):
        response = render_error(VALIDATION_ERROR, 422, messages=["Body can't be blank", "Mood can't be blank"])
        body = json.loads(response.body)
        assert response.status_code == 422
        assert body == {
            "error": {
                "code": "validation_error",
                "messages": ["Body can't be blank", "Mood can't be blank"],
            }
        }

    def test_other_errors_use_message(self):
        response = render_error(NOT_FOUND, 404, message="Status update x not found")
        body = json.loads(response.body)
        assert body == {"error": {"code": "not_found", "message": "Status update x not found"}}

    def test_unknown_code_reported_as_internal(self):
        response = render_error("teapot", 500, message="boom")
        body = json.loads(response.body)
        assert body["error"]["code"] == INTERNAL_ERROR

"""
API tests for status update and transition endpoints.

Tests cover:
- CRUD through the HTTP surface
- Envelope shapes on success and error
- Transition timeline through PATCH
- Pagination clamping and filters
- Cascade delete and likes
"""

import pytest

from status_feed.errors import ValidationError
from status_feed.store.transitions import TransitionLog


async def create(client, api, body="Writing tests", mood="focused", **extra):
    response = await client.post(api(), json={"body": body, "mood": mood, **extra})
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCreateAndRead:
    """POST / GET single status update."""

    @pytest.mark.asyncio
    async def test_create_returns_data_envelope(self, client, api):
        response = await client.post(api(), json={"body": "Hello", "mood": "happy"})

        assert response.status_code == 201
        body = response.json()
        assert list(body) == ["data"]
        assert body["data"]["body"] == "Hello"
        assert body["data"]["mood"] == "happy"
        assert body["data"]["likes_count"] == 0
        assert body["data"]["created_at"].endswith("Z")

    @pytest.mark.asyncio
    async def test_create_validation_error_lists_every_rule(self, client, api):
        response = await client.post(api(), json={"body": "", "mood": "grumpy"})

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert len(error["messages"]) == 2
        assert "message" not in error

    @pytest.mark.asyncio
    async def test_malformed_json_is_validation_error(self, client, api):
        response = await client.post(
            api(), content="{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    @pytest.mark.asyncio
    async def test_get(self, client, api):
        created = await create(client, api)
        response = await client.get(api(f"/{created['id']}"))

        assert response.status_code == 200
        assert response.json() == {"data": created}

    @pytest.mark.asyncio
    async def test_get_missing(self, client, api):
        response = await client.get(api("/does-not-exist"))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"
        assert isinstance(response.json()["error"]["message"], str)


class TestPatchAndTransitions:
    """PATCH drives the transition recorder; GET transitions reads it back."""

    @pytest.mark.asyncio
    async def test_mood_scenario(self, client, api):
        created = await create(client, api, mood="focused")
        path = api(f"/{created['id']}")

        for mood in ("calm", "happy", "happy"):
            response = await client.patch(path, json={"mood": mood})
            assert response.status_code == 200
            assert response.json()["data"]["mood"] == mood

        timeline = (await client.get(f"{path}/transitions")).json()
        assert list(timeline) == ["data"]
        assert [(t["from"], t["to"]) for t in timeline["data"]] == [
            ("focused", "calm"),
            ("calm", "happy"),
        ]
        first = timeline["data"][0]
        assert first["display"] == {"from": "Focused", "to": "Calm"}
        assert first["reason"] is None
        assert first["changed_at"].endswith("Z")
        assert set(first) == {
            "id", "status_update_id", "field", "from", "to", "display", "reason", "changed_at",
        }

    @pytest.mark.asyncio
    async def test_status_timeline_with_reason(self, client, api):
        created = await create(client, api)
        path = api(f"/{created['id']}")

        await client.patch(path, json={"status": "submitted"})
        await client.patch(path, json={"status": "in_review", "reason": "Needs legal review"})

        timeline = (await client.get(f"{path}/transitions", params={"field": "status"})).json()["data"]
        assert timeline[0]["from"] is None
        assert timeline[0]["display"] == {"from": None, "to": "Submitted"}
        assert timeline[1]["display"]["to"] == "In Review"
        assert timeline[1]["reason"] == "Needs legal review"

        reverse = (await client.get(f"{path}/transitions", params={"order": "reverse_chronological"})).json()
        assert [t["id"] for t in reverse["data"]] == [t["id"] for t in reversed(timeline)]

    @pytest.mark.asyncio
    async def test_empty_timeline(self, client, api):
        created = await create(client, api)
        response = await client.get(api(f"/{created['id']}/transitions"))
        assert response.json() == {"data": []}

    @pytest.mark.asyncio
    async def test_timeline_for_missing_update(self, client, api):
        response = await client.get(api("/missing/transitions"))
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_patch_invalid_mood(self, client, api):
        created = await create(client, api)
        response = await client.patch(api(f"/{created['id']}"), json={"mood": "HAPPY"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"
        timeline = (await client.get(api(f"/{created['id']}/transitions"))).json()
        assert timeline["data"] == []

    @pytest.mark.asyncio
    async def test_patch_missing(self, client, api):
        response = await client.patch(api("/missing"), json={"mood": "calm"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_recorder_failure_is_internal_error(self, client, api, monkeypatch):
        created = await create(client, api, mood="focused")

        async def failing_append(self, *args, **kwargs):
            raise ValidationError(["log unavailable"])

        monkeypatch.setattr(TransitionLog, "append", failing_append)
        response = await client.patch(api(f"/{created['id']}"), json={"mood": "calm"})
        monkeypatch.undo()

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_error"
        fetched = (await client.get(api(f"/{created['id']}"))).json()["data"]
        assert fetched["mood"] == "focused"


class TestListing:
    """GET /status_updates pagination and filters."""

    @pytest.mark.asyncio
    async def test_page_zero_and_huge_page_size_clamped(self, client, api):
        await create(client, api)
        response = await client.get(api(), params={"page": 0, "page_size": 500})

        body = response.json()
        assert response.status_code == 200
        assert set(body) == {"meta", "data"}
        assert body["meta"] == {"page": 1, "page_size": 100, "total_count": 1}

    @pytest.mark.asyncio
    async def test_garbage_parameters_degrade(self, client, api):
        await create(client, api)
        response = await client.get(
            api(), params={"page": "x", "page_size": "y", "since": "soon", "mood": "grumpy"}
        )

        assert response.status_code == 200
        assert response.json()["meta"] == {"page": 1, "page_size": 25, "total_count": 1}

    @pytest.mark.asyncio
    async def test_huge_page_returns_empty_page(self, client, api):
        await create(client, api)
        response = await client.get(api(), params={"page": "99999999999999999999"})

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["meta"]["total_count"] == 1
        assert body["meta"]["page_size"] == 25

    @pytest.mark.asyncio
    async def test_out_of_range_since_is_ignored(self, client, api):
        await create(client, api)
        response = await client.get(api(), params={"since": "0001-01-01T00:00:00+01:00"})

        assert response.status_code == 200
        assert response.json()["meta"]["total_count"] == 1

    @pytest.mark.asyncio
    async def test_trailing_slash_is_not_found(self, client, api):
        response = await client.get(api("/"))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_filters_and_total_count(self, client, api):
        await create(client, api, body="Coffee first", mood="calm")
        await create(client, api, body="Coffee second", mood="happy")
        await create(client, api, body="Tea", mood="calm")

        response = await client.get(api(), params={"q": "coffee", "mood": "calm"})
        body = response.json()
        assert body["meta"]["total_count"] == 1
        assert [u["body"] for u in body["data"]] == ["Coffee first"]

        paged = (await client.get(api(), params={"q": "coffee", "page_size": 1, "page": 2})).json()
        assert paged["meta"] == {"page": 2, "page_size": 1, "total_count": 2}
        assert [u["body"] for u in paged["data"]] == ["Coffee first"]

    @pytest.mark.asyncio
    async def test_repeated_requests_identical(self, client, api):
        for i in range(5):
            await create(client, api, body=f"Update {i}")

        first = await client.get(api(), params={"page": 2, "page_size": 2})
        second = await client.get(api(), params={"page": 2, "page_size": 2})
        assert first.content == second.content


class TestDeleteAndLike:
    """DELETE cascades; like increments."""

    @pytest.mark.asyncio
    async def test_delete_cascades(self, client, api):
        created = await create(client, api, mood="focused")
        path = api(f"/{created['id']}")
        await client.patch(path, json={"mood": "calm"})
        await client.post(f"{path}/comments", json={"body": "Nice"})
        await client.post(f"{path}/reactions", json={"kind": "🔥", "actor_identifier": "ana"})

        response = await client.delete(path)
        assert response.status_code == 204
        assert response.content == b""

        for suffix in ("", "/transitions", "/comments", "/reactions"):
            missing = await client.get(f"{path}{suffix}")
            assert missing.status_code == 404
            assert missing.json()["error"]["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_delete_missing(self, client, api):
        response = await client.delete(api("/missing"))
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_like(self, client, api):
        created = await create(client, api)
        path = api(f"/{created['id']}/like")

        await client.post(path)
        response = await client.post(path)

        assert response.json() == {"data": {"id": created["id"], "likes_count": 2}}
        fetched = (await client.get(api(f"/{created['id']}"))).json()["data"]
        assert fetched["likes_count"] == 2

    @pytest.mark.asyncio
    async def test_like_missing(self, client, api):
        response = await client.post(api("/missing/like"))
        assert response.status_code == 404

"""Integration tests for event ingestion and queries."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from chronicle.core.auth.schemas import AuthResult
from chronicle.modules.api_keys.services import ApiKeyService
from tests.conftest import api_key_header, bearer, error_code


pytestmark = pytest.mark.integration


@pytest.fixture
async def key_a(api_key_service: ApiKeyService, owner_a: AuthResult) -> dict:
    """An API key of tenant A as (id, plaintext)."""
    api_key, plaintext = await api_key_service.create_api_key(owner_a.tenant.id, "ingest")
    return {"id": str(api_key.id), "plaintext": plaintext}


async def ingest(client: AsyncClient, plaintext: str, **event) -> dict:
    response = await client.post("/api/v1/events", json=event, headers=api_key_header(plaintext))
    assert response.status_code == 201, response.text
    return response.json()


class TestIngestEvent:
    """Tests for POST /api/v1/events."""

    async def test_event_attributed_to_service_account(
        self,
        client: AsyncClient,
        owner_a: AuthResult,
        key_a: dict,
    ):
        event = await ingest(
            client,
            key_a["plaintext"],
            type="page_view",
            source="web",
            payload={"path": "/pricing"},
        )

        assert event["tenant_id"] == str(owner_a.tenant.id)
        assert event["actor_type"] == "service_account"
        assert event["actor_id"] == key_a["id"]
        assert event["payload"] == {"path": "/pricing"}

    async def test_timestamp_defaults_to_now(self, client: AsyncClient, key_a: dict):
        event = await ingest(client, key_a["plaintext"], type="signup")

        assert event["timestamp"]
        assert event["source"] is None

    async def test_explicit_timestamp_kept(self, client: AsyncClient, key_a: dict):
        event = await ingest(
            client,
            key_a["plaintext"],
            type="signup",
            timestamp="2026-01-02T03:04:05Z",
        )

        assert event["timestamp"].startswith("2026-01-02T03:04:05")

    async def test_tenant_id_in_body_is_ignored(
        self,
        client: AsyncClient,
        owner_a: AuthResult,
        owner_b: AuthResult,
        key_a: dict,
    ):
        """The tenant always comes from the credential."""
        event = await ingest(
            client,
            key_a["plaintext"],
            type="signup",
            tenant_id=str(owner_b.tenant.id),
        )

        assert event["tenant_id"] == str(owner_a.tenant.id)

    async def test_empty_type_rejected(self, client: AsyncClient, key_a: dict):
        response = await client.post(
            "/api/v1/events",
            json={"type": ""},
            headers=api_key_header(key_a["plaintext"]),
        )

        assert response.status_code == 422


class TestQueryEvents:
    """Tests for GET /api/v1/events."""

    async def test_list_newest_first(self, client: AsyncClient, owner_a: AuthResult, key_a: dict):
        await ingest(client, key_a["plaintext"], type="a", timestamp="2026-01-01T00:00:00Z")
        await ingest(client, key_a["plaintext"], type="b", timestamp="2026-01-03T00:00:00Z")
        await ingest(client, key_a["plaintext"], type="c", timestamp="2026-01-02T00:00:00Z")

        response = await client.get("/api/v1/events", headers=bearer(owner_a))

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert [e["type"] for e in data["items"]] == ["b", "c", "a"]

    async def test_filter_and_paginate(self, client: AsyncClient, owner_a: AuthResult, key_a: dict):
        for _ in range(3):
            await ingest(client, key_a["plaintext"], type="click", source="ios")
        await ingest(client, key_a["plaintext"], type="click", source="web")
        await ingest(client, key_a["plaintext"], type="view", source="ios")

        response = await client.get(
            "/api/v1/events",
            params={"type": "click", "source": "ios", "limit": 2, "offset": 0},
            headers=bearer(owner_a),
        )

        data = response.json()
        assert data["total"] == 3
        assert len(data["items"]) == 2
        assert data["limit"] == 2

    async def test_limit_is_bounded(self, client: AsyncClient, owner_a: AuthResult):
        response = await client.get(
            "/api/v1/events",
            params={"limit": 1000},
            headers=bearer(owner_a),
        )

        assert response.status_code == 422

    async def test_time_range_is_half_open(self, client: AsyncClient, owner_a: AuthResult, key_a: dict):
        """`from` is inclusive and `to` exclusive."""
        await ingest(client, key_a["plaintext"], type="a", timestamp="2026-01-01T00:00:00Z")
        await ingest(client, key_a["plaintext"], type="b", timestamp="2026-01-02T00:00:00Z")
        await ingest(client, key_a["plaintext"], type="c", timestamp="2026-01-03T00:00:00Z")

        response = await client.get(
            "/api/v1/events",
            params={"from": "2026-01-02T00:00:00Z", "to": "2026-01-03T00:00:00Z"},
            headers=bearer(owner_a),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert [e["type"] for e in data["items"]] == ["b"]

    async def test_naive_range_bound_is_utc(self, client: AsyncClient, owner_a: AuthResult, key_a: dict):
        await ingest(client, key_a["plaintext"], type="a", timestamp="2026-01-01T00:00:00Z")
        await ingest(client, key_a["plaintext"], type="b", timestamp="2026-01-02T00:00:00Z")

        response = await client.get(
            "/api/v1/events",
            params={"from": "2026-01-02T00:00:00"},
            headers=bearer(owner_a),
        )

        assert [e["type"] for e in response.json()["items"]] == ["b"]

    async def test_inverted_range_rejected(self, client: AsyncClient, owner_a: AuthResult):
        response = await client.get(
            "/api/v1/events",
            params={"from": "2026-01-03T00:00:00Z", "to": "2026-01-01T00:00:00Z"},
            headers=bearer(owner_a),
        )

        assert response.status_code == 400
        assert error_code(response) == "bad_request"

    @pytest.mark.parametrize(
        ("sort_by", "sort_direction", "expected"),
        [
            ("type", "asc", ["a", "b", "c"]),
            ("type", "desc", ["c", "b", "a"]),
            ("timestamp", "asc", ["b", "c", "a"]),
            ("source", "asc", ["c", "a", "b"]),
        ],
    )
    async def test_sort(
        self,
        client: AsyncClient,
        owner_a: AuthResult,
        key_a: dict,
        sort_by: str,
        sort_direction: str,
        expected: list[str],
    ):
        await ingest(client, key_a["plaintext"], type="b", source="y", timestamp="2026-01-01T00:00:00Z")
        await ingest(client, key_a["plaintext"], type="c", source="w", timestamp="2026-01-02T00:00:00Z")
        await ingest(client, key_a["plaintext"], type="a", source="x", timestamp="2026-01-03T00:00:00Z")

        response = await client.get(
            "/api/v1/events",
            params={"sort_by": sort_by, "sort_direction": sort_direction},
            headers=bearer(owner_a),
        )

        assert response.status_code == 200
        assert [e["type"] for e in response.json()["items"]] == expected

    @pytest.mark.parametrize(
        "params",
        [{"sort_by": "payload"}, {"sort_by": "tenant_id"}, {"sort_direction": "sideways"}],
    )
    async def test_unknown_sort_rejected(self, client: AsyncClient, owner_a: AuthResult, params: dict):
        """Only whitelisted columns and directions are accepted."""
        response = await client.get("/api/v1/events", params=params, headers=bearer(owner_a))

        assert response.status_code == 422

    async def test_get_event(self, client: AsyncClient, owner_a: AuthResult, key_a: dict):
        event = await ingest(client, key_a["plaintext"], type="signup")

        response = await client.get(f"/api/v1/events/{event['id']}", headers=bearer(owner_a))

        assert response.status_code == 200
        assert response.json()["id"] == event["id"]

    async def test_get_unknown_event(self, client: AsyncClient, owner_a: AuthResult):
        response = await client.get(f"/api/v1/events/{uuid4()}", headers=bearer(owner_a))

        assert response.status_code == 404
        assert error_code(response) == "not_found"

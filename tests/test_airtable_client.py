"""Tests for the httpx-backed Airtable client."""

import asyncio
import json

import httpx
import pytest

from club_scheduler.adapters.airtable_client import HttpxAirtableClient
from club_scheduler.domain.errors import RepositoryError, RepositoryUnavailable


def _client(handler) -> HttpxAirtableClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxAirtableClient(
        api_key="key",
        base_id="appTEST",
        table_name="Matches",
        http_client=httpx.AsyncClient(transport=transport),
        base_url="https://airtable.test/v0",
    )


def test_list_records_follows_offsets_with_sort() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if "offset" not in request.url.params:
            return httpx.Response(
                200, json={"records": [{"id": "rec1", "fields": {}}], "offset": "pg2"}
            )
        return httpx.Response(200, json={"records": [{"id": "rec2", "fields": {}}]})

    records = asyncio.run(_client(handler).list_records(sort_field="Date"))

    assert [record["id"] for record in records] == ["rec1", "rec2"]
    assert len(seen) == 2
    assert seen[0].url.path == "/v0/appTEST/Matches"
    assert seen[0].url.params["sort[0][field]"] == "Date"
    assert seen[0].url.params["sort[0][direction]"] == "asc"
    assert seen[1].url.params["offset"] == "pg2"
    assert seen[0].headers["Authorization"] == "Bearer key"


def test_create_update_delete_payloads() -> None:
    seen: list[tuple[str, str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content.decode()) if request.content else None
        seen.append((request.method, request.url.path, body))
        if request.method == "DELETE":
            return httpx.Response(200, json={"id": "rec9", "deleted": True})
        return httpx.Response(200, json={"id": "rec9", "fields": {}})

    client = _client(handler)
    created = asyncio.run(client.create_record({"Date": "2026-10-21"}))
    asyncio.run(client.update_record("rec9", {"Signups": "Amy\nBo"}))
    asyncio.run(client.delete_record("rec9"))

    assert created["id"] == "rec9"
    assert seen == [
        ("POST", "/v0/appTEST/Matches", {"fields": {"Date": "2026-10-21"}}),
        ("PATCH", "/v0/appTEST/Matches/rec9", {"fields": {"Signups": "Amy\nBo"}}),
        ("DELETE", "/v0/appTEST/Matches/rec9", None),
    ]


def test_rejected_request_raises_repository_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(422, json={"error": {"type": "INVALID_VALUE"}})

    with pytest.raises(RepositoryError) as excinfo:
        asyncio.run(_client(handler).create_record({"Courts": "many"}))

    assert excinfo.value.status == 422
    assert "INVALID_VALUE" in excinfo.value.body


def test_transport_failure_raises_repository_unavailable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RepositoryUnavailable):
        asyncio.run(_client(handler).list_records(sort_field="Date"))

"""Airtable REST API client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from club_scheduler.domain.errors import RepositoryError, RepositoryUnavailable

logger = logging.getLogger(__name__)


class AirtableClient(Protocol):
    """Interface for record operations on a single Airtable table."""

    async def list_records(self, sort_field: str) -> list[dict[str, object]]:
        """Return every record, sorted ascending by ``sort_field``."""

    async def create_record(self, fields: dict[str, object]) -> dict[str, object]:
        """Insert a record and return it."""

    async def update_record(
        self, record_id: str, fields: dict[str, object]
    ) -> dict[str, object]:
        """Replace the named fields of a record and return it."""

    async def delete_record(self, record_id: str) -> None:
        """Delete a record."""


@dataclass
class HttpxAirtableClient(AirtableClient):
    """HTTPX-backed Airtable client for one table."""

    api_key: str
    base_id: str
    table_name: str
    http_client: httpx.AsyncClient
    base_url: str = "https://api.airtable.com/v0"
    timeout: float = 15

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        base_id: str,
        table_name: str,
        base_url: str = "https://api.airtable.com/v0",
        timeout: float = 15,
    ) -> "HttpxAirtableClient":
        """Create an Airtable client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_id=base_id,
            table_name=table_name,
            http_client=httpx.AsyncClient(),
            base_url=base_url,
            timeout=timeout,
        )

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/{self.base_id}/{self.table_name}"

    async def list_records(self, sort_field: str) -> list[dict[str, object]]:
        """Fetch all pages of records sorted by ``sort_field``."""
        records: list[dict[str, object]] = []
        params: dict[str, str] = {
            "sort[0][field]": sort_field,
            "sort[0][direction]": "asc",
        }
        while True:
            payload = await self._request("GET", self.table_url, params=params)
            records.extend(payload.get("records", []))
            offset = payload.get("offset")
            if not offset:
                return records
            params = {**params, "offset": str(offset)}

    async def create_record(self, fields: dict[str, object]) -> dict[str, object]:
        """Insert a single record."""
        return await self._request("POST", self.table_url, json={"fields": fields})

    async def update_record(
        self, record_id: str, fields: dict[str, object]
    ) -> dict[str, object]:
        """Patch the given fields of a record."""
        return await self._request(
            "PATCH", f"{self.table_url}/{record_id}", json={"fields": fields}
        )

    async def delete_record(self, record_id: str) -> None:
        """Delete a record by id."""
        await self._request("DELETE", f"{self.table_url}/{record_id}")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        json: dict[str, object] | None = None,
    ) -> dict[str, object]:
        try:
            response = await self.http_client.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except httpx.TransportError as exc:
            logger.warning("Airtable %s %s failed: %s", method, url, exc)
            raise RepositoryUnavailable(str(exc)) from exc
        if response.is_error:
            logger.warning(
                "Airtable %s %s returned %s", method, url, response.status_code
            )
            raise RepositoryError(response.status_code, response.text)
        return response.json()

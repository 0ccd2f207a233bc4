"""Repositories backed by a hosted table API over HTTP.

Every endpoint answers with a JSON envelope::

    {"success": true, "message": "...", "data": ..., "results": [...]}

Reads return records in ``data``; writes return per-record outcomes in
``results``, each ``{"success": bool, "data": {...}, "message": "..."}``.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

import httpx
from pydantic import ValidationError

from property_browser.logging import get_logger
from property_browser.models import Property, SavedProperty
from property_browser.repositories.base import (
    PropertyRepository,
    RepositoryError,
    SavedPropertyRepository,
    snake_keys,
)
from property_browser.repositories.field_mapping import (
    PROPERTY_COLUMNS,
    SAVED_PROPERTY_COLUMNS,
    parse_records,
    property_to_record,
    query_fields,
    record_to_property,
    record_to_saved_property,
    saved_property_to_record,
)

logger = get_logger(__name__)

_TIMEOUT = 10.0


class TableClient:
    """Thin async client for the hosted table API."""

    def __init__(
        self,
        base_url: str,
        project_id: str,
        public_key: str,
        *,
        timeout: float = _TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root, e.g. ``https://api.example.com/v1``.
            project_id: Project identifier sent with every request.
            public_key: Public API key, sent as a bearer token.
            timeout: Per-request timeout in seconds.
            client: Shared httpx client. One is created (and owned) if omitted.
        """
        self.base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {public_key}",
            "X-Project-Id": project_id,
        }
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    def _url(self, table: str, *parts: object) -> str:
        return "/".join([self.base_url, "tables", table, "records", *(str(p) for p in parts)])

    async def _send(self, method: str, url: str, payload: Mapping[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, url, json=payload, headers=self._headers)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPError as e:
            raise RepositoryError(f"{method} {url} failed: {e}") from e
        except ValueError as e:
            raise RepositoryError(f"{method} {url} returned invalid JSON") from e
        if not isinstance(body, dict):
            raise RepositoryError(f"{method} {url} returned an unexpected payload")
        return body

    def _successful(
        self, body: Mapping[str, Any], *, table: str, action: str
    ) -> list[dict[str, Any]]:
        if not body.get("success"):
            raise RepositoryError(body.get("message") or f"{action} on {table} failed")
        results = body.get("results") or []
        failed = [r for r in results if not r.get("success")]
        if failed:
            logger.error(
                "table_records_failed",
                table=table,
                action=action,
                failed=len(failed),
                messages=[r.get("message") for r in failed],
            )
        return [r.get("data") or {} for r in results if r.get("success")]

    async def fetch_records(self, table: str, params: Mapping[str, Any]) -> list[dict[str, Any]]:
        """Query a table.

        Raises:
            RepositoryError: On transport errors or an unsuccessful response.
        """
        body = await self._send("POST", self._url(table, "query"), params)
        if not body.get("success"):
            raise RepositoryError(body.get("message") or f"fetch on {table} failed")
        data = body.get("data") or []
        return [r for r in data if isinstance(r, dict)]

    async def get_record_by_id(
        self, table: str, record_id: int, params: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Fetch one record. Returns None when the API reports no such record.

        Raises:
            RepositoryError: On transport errors.
        """
        body = await self._send("POST", self._url(table, record_id, "query"), params)
        if not body.get("success"):
            logger.warning(
                "table_record_lookup_failed",
                table=table,
                record_id=record_id,
                message=body.get("message"),
            )
            return None
        data = body.get("data")
        return data if isinstance(data, dict) else None

    async def create_records(
        self, table: str, records: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Create records, returning the ones the API accepted."""
        body = await self._send("POST", self._url(table), {"records": records})
        return self._successful(body, table=table, action="create")

    async def update_records(
        self, table: str, records: list[dict[str, Any]]
    ) -> list[dict[str, Any]]:
        """Update records (each carrying its ``Id``), returning the accepted ones."""
        body = await self._send("PATCH", self._url(table), {"records": records})
        return self._successful(body, table=table, action="update")

    async def delete_records(self, table: str, record_ids: list[int]) -> bool:
        """Delete records. True only if every deletion succeeded."""
        body = await self._send("DELETE", self._url(table), {"RecordIds": record_ids})
        if not body.get("success"):
            logger.error("table_delete_failed", table=table, message=body.get("message"))
            return False
        results = body.get("results")
        if not results:
            return False
        return len(self._successful(body, table=table, action="delete")) == len(results)


class RemotePropertyRepository(PropertyRepository):
    """Listings stored in the hosted ``property_c`` table."""

    def __init__(
        self, client: TableClient, *, table: str = "property_c", page_size: int = 50
    ) -> None:
        self._client = client
        self._table = table
        self._page_size = page_size

    async def close(self) -> None:
        await self._client.close()

    async def get_all(self) -> list[Property]:
        params = {
            "fields": query_fields(PROPERTY_COLUMNS),
            "orderBy": [{"fieldName": "listing_date_c", "sorttype": "DESC"}],
            "pagingInfo": {"limit": self._page_size, "offset": 0},
        }
        try:
            records = await self._client.fetch_records(self._table, params)
        except RepositoryError as e:
            logger.error("property_fetch_failed", error=str(e))
            raise
        return parse_records(records, record_to_property, table=self._table)

    async def get_by_id(self, property_id: int) -> Property | None:
        params = {"fields": query_fields(PROPERTY_COLUMNS)}
        try:
            record = await self._client.get_record_by_id(self._table, property_id, params)
        except RepositoryError as e:
            logger.error("property_lookup_failed", property_id=property_id, error=str(e))
            return None
        if record is None:
            return None
        try:
            return record_to_property(record)
        except ValidationError:
            logger.warning("property_record_invalid", property_id=property_id, exc_info=True)
            return None

    async def create(self, data: Mapping[str, Any]) -> Property:
        record = property_to_record(snake_keys(data))
        try:
            created = await self._client.create_records(self._table, [record])
        except RepositoryError as e:
            logger.error("property_create_failed", error=str(e))
            raise
        if not created:
            raise RepositoryError("property was not created")
        try:
            return record_to_property(created[0])
        except ValidationError as e:
            raise RepositoryError("created property record is invalid") from e

    async def update(self, property_id: int, changes: Mapping[str, Any]) -> Property | None:
        record = property_to_record(snake_keys(changes), partial=True)
        record["Id"] = property_id
        try:
            updated = await self._client.update_records(self._table, [record])
        except RepositoryError as e:
            logger.error("property_update_failed", property_id=property_id, error=str(e))
            raise
        if not updated:
            return None
        try:
            return record_to_property(updated[0])
        except ValidationError as e:
            raise RepositoryError("updated property record is invalid") from e

    async def delete(self, property_id: int) -> bool:
        try:
            return await self._client.delete_records(self._table, [property_id])
        except RepositoryError as e:
            logger.error("property_delete_failed", property_id=property_id, error=str(e))
            return False


class RemoteSavedPropertyRepository(SavedPropertyRepository):
    """Bookmarks stored in the hosted ``saved_property_c`` table."""

    def __init__(
        self, client: TableClient, *, table: str = "saved_property_c", page_size: int = 50
    ) -> None:
        self._client = client
        self._table = table
        self._page_size = page_size

    async def close(self) -> None:
        await self._client.close()

    async def get_all(self) -> list[SavedProperty]:
        params = {
            "fields": query_fields(SAVED_PROPERTY_COLUMNS),
            "orderBy": [{"fieldName": "saved_date_c", "sorttype": "DESC"}],
            "pagingInfo": {"limit": self._page_size, "offset": 0},
        }
        try:
            records = await self._client.fetch_records(self._table, params)
        except RepositoryError as e:
            logger.error("saved_property_fetch_failed", error=str(e))
            raise
        return parse_records(records, record_to_saved_property, table=self._table)

    async def get_by_id(self, saved_id: int) -> SavedProperty | None:
        params = {"fields": query_fields(SAVED_PROPERTY_COLUMNS)}
        try:
            record = await self._client.get_record_by_id(self._table, saved_id, params)
        except RepositoryError as e:
            logger.error("saved_property_lookup_failed", saved_id=saved_id, error=str(e))
            return None
        if record is None:
            return None
        try:
            return record_to_saved_property(record)
        except ValidationError:
            logger.warning("saved_property_record_invalid", saved_id=saved_id, exc_info=True)
            return None

    async def create(self, property_id: int, notes: str | None = None) -> SavedProperty:
        record = saved_property_to_record(
            {
                "name": f"Saved Property {property_id}",
                "property_id": property_id,
                "saved_date": datetime.now(UTC),
                "notes": notes or "",
            }
        )
        try:
            created = await self._client.create_records(self._table, [record])
        except RepositoryError as e:
            logger.error("saved_property_create_failed", property_id=property_id, error=str(e))
            raise
        if not created:
            raise RepositoryError("saved property was not created")
        try:
            return record_to_saved_property(created[0])
        except ValidationError as e:
            raise RepositoryError("created saved property record is invalid") from e

    async def update(self, saved_id: int, *, notes: str) -> SavedProperty | None:
        record = saved_property_to_record({"notes": notes})
        record["Id"] = saved_id
        try:
            updated = await self._client.update_records(self._table, [record])
        except RepositoryError as e:
            logger.error("saved_property_update_failed", saved_id=saved_id, error=str(e))
            raise
        if not updated:
            return None
        try:
            return record_to_saved_property(updated[0])
        except ValidationError as e:
            raise RepositoryError("updated saved property record is invalid") from e

    async def delete(self, saved_id: int) -> bool:
        try:
            return await self._client.delete_records(self._table, [saved_id])
        except RepositoryError as e:
            logger.error("saved_property_delete_failed", saved_id=saved_id, error=str(e))
            return False

# checktable/client/api.py
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load data"
SAVE_FAILED_MESSAGE = "Failed to save changes"


class ClientError(Exception):
    """A request to the table service did not succeed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class TableApiClient:
    """
    Async HTTP client for the table service.

    No timeout is set; the transport's own failure modes apply.
    """

    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(base_url=self.base_url, timeout=None, transport=transport)

    async def __aenter__(self) -> "TableApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def get_table(self) -> Dict[str, Any]:
        """Fetch the whole table"""
        try:
            r = await self.client.get("/api/data", headers={"Cache-Control": "no-store"})
        except httpx.HTTPError as e:
            logger.error(f"Error loading table: {str(e)}")
            raise ClientError(str(e) or LOAD_FAILED_MESSAGE)

        if r.status_code != 200:
            raise ClientError(LOAD_FAILED_MESSAGE, r.status_code)

        try:
            return r.json()
        except ValueError:
            raise ClientError(LOAD_FAILED_MESSAGE, r.status_code)

    async def update_cell(self, row_id: str, column_key: str, value: str) -> Dict[str, Any]:
        """Send one cell value; returns the response payload (``success`` and ``row``)"""
        url = f"/api/rows/{quote(row_id, safe='')}/columns/{quote(column_key, safe='')}"
        try:
            r = await self.client.patch(url, json={"value": value})
        except httpx.HTTPError as e:
            logger.error(f"Error saving {row_id}/{column_key}: {str(e)}")
            raise ClientError(str(e) or SAVE_FAILED_MESSAGE)

        payload: Dict[str, Any] = {}
        if r.content:
            try:
                parsed = r.json()
            except ValueError:
                parsed = None
            if isinstance(parsed, dict):
                payload = parsed

        if not r.is_success:
            raise ClientError(payload.get("error") or SAVE_FAILED_MESSAGE, r.status_code)

        # A row that is not an object cannot confirm the save
        if not isinstance(payload.get("row", {}), dict):
            raise ClientError(SAVE_FAILED_MESSAGE, r.status_code)

        return payload

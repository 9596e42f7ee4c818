"""
Directory API Client

Thin async client for the directory-of-record (a Notion-compatible REST API).

Two endpoints are used:
- POST /databases/{collection_id}/query - paginated collection query
- GET /pages/{record_id} - point lookup of a single record
"""

from datetime import datetime
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

import httpx
from loguru import logger
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator

from opsdash_api.errors import DirectoryAPIError

DEFAULT_BASE_URL = "https://api.notion.com/v1"
DEFAULT_API_VERSION = "2022-06-28"
MAX_PAGE_SIZE = 100


class ExternalRecord(BaseModel):
    """A record fetched from the directory. Read-only input to the sync."""

    id: str
    properties: Dict[str, Any] = Field(default_factory=dict)
    created_time: Optional[datetime] = None
    last_edited_time: Optional[datetime] = None

    @field_validator("created_time", "last_edited_time", mode="wrap")
    @classmethod
    def lenient_timestamp(cls, value, handler):
        """Unparseable timestamps read as None; the sync never depends on them."""
        try:
            return handler(value)
        except ValidationError:
            return None


class DirectoryClient:
    """
    Async client for the directory API.

    Use as an async context manager so the underlying connection pool is closed:

        async with DirectoryClient(api_key) as client:
            records = await client.query_collection(collection_id)

    Args:
        api_key: Bearer credential for the directory API
        base_url: API base URL
        api_version: Value of the Notion-Version header
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass an httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": api_version,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "DirectoryClient":
        return self

    async def __aexit__(self, exc_type, exc_value, traceback) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.RequestError as e:
            raise DirectoryAPIError(0, f"Request to directory failed: {e}", path=path) from e

        if response.status_code >= 400:
            try:
                message = response.json().get("message") or response.text
            except ValueError:
                message = response.text
            raise DirectoryAPIError(response.status_code, message, path=path)

        return response.json()

    async def query_collection(self, collection_id: str, page_size: int = MAX_PAGE_SIZE) -> List[ExternalRecord]:
        """
        Fetch every record of a collection, following the pagination cursor.

        Args:
            collection_id: Directory collection (database) id
            page_size: Records per request, capped at 100

        Returns:
            All records in the order the directory returned them

        Raises:
            DirectoryAPIError: On any non-success response
        """
        page_size = max(1, min(page_size, MAX_PAGE_SIZE))
        records: List[ExternalRecord] = []
        next_cursor: Optional[str] = None
        pages = 0

        while True:
            body: Dict[str, Any] = {"page_size": page_size}
            if next_cursor:
                body["start_cursor"] = next_cursor

            data = await self._request("POST", f"/databases/{collection_id}/query", json=body)
            pages += 1
            records.extend(ExternalRecord.model_validate(result) for result in data.get("results", []))

            if not data.get("has_more") or not data.get("next_cursor"):
                break
            next_cursor = data["next_cursor"]

        logger.debug(
            "Directory collection fetched",
            collection_id=collection_id,
            record_count=len(records),
            page_count=pages,
        )
        return records

    async def get_record(self, record_id: str) -> ExternalRecord:
        """
        Fetch a single record by id.

        Raises:
            DirectoryAPIError: On any non-success response
        """
        data = await self._request("GET", f"/pages/{record_id}")
        return ExternalRecord.model_validate(data)

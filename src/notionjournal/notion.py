"""Async wrapper for the Notion REST API."""

import logging
from typing import Any

import httpx

from notionjournal.config import NotionConfig

logger = logging.getLogger(__name__)


class NotionAPIError(Exception):
    """Raised when a Notion API call fails.

    The message is the raw text reported by Notion (or by the transport),
    so it can be surfaced to callers unchanged.
    """

    def __init__(self, message: str, status: int | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    @property
    def is_not_found(self) -> bool:
        return self.status == 404


class NotionClient:
    """Minimal Notion API client for pages and databases.

    Handles:
    - Database retrieval, creation and querying
    - Page retrieval, creation and property updates
    - Translating error responses into NotionAPIError

    Calls are made one at a time with no retries. When no httpx client is
    injected a short-lived one is opened per request.
    """

    def __init__(
        self,
        config: NotionConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the client.

        Args:
            config: NotionConfig with token, API version and base URL
            client: Preconfigured httpx.AsyncClient (injected for testing)
        """
        self.config = config or NotionConfig()
        self._client = client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.token}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    async def _send(
        self, client: httpx.AsyncClient, method: str, path: str, body: dict | None
    ) -> httpx.Response:
        url = f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"
        return await client.request(method, url, json=body, headers=self._headers())

    async def _request(
        self, method: str, path: str, body: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Perform a request against the Notion API.

        Args:
            method: HTTP method
            path: Path relative to the API base URL
            body: JSON body (optional)

        Returns:
            Decoded JSON response

        Raises:
            NotionAPIError: On transport failure or an error status
        """
        try:
            if self._client is not None:
                response = await self._send(self._client, method, path, body)
            else:
                async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                    response = await self._send(client, method, path, body)
        except httpx.HTTPError as e:
            logger.error("Notion request %s %s failed: %s", method, path, e)
            raise NotionAPIError(str(e) or e.__class__.__name__) from e

        try:
            payload = response.json()
        except ValueError:
            payload = {"message": response.text}
        if not isinstance(payload, dict):
            payload = {"message": response.text}

        if response.status_code >= 400:
            message = payload.get("message") or response.reason_phrase or "Unknown error"
            logger.error(
                "Notion API error %d on %s %s: %s", response.status_code, method, path, message
            )
            raise NotionAPIError(message, status=response.status_code, code=payload.get("code"))

        return payload

    async def retrieve_database(self, database_id: str) -> dict[str, Any]:
        return await self._request("GET", f"databases/{database_id}")

    async def create_database(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "databases", payload)

    async def query_database(
        self,
        database_id: str,
        filter: dict[str, Any] | None = None,
        sorts: list[dict[str, Any]] | None = None,
        page_size: int | None = None,
    ) -> list[dict[str, Any]]:
        """Query a database for pages.

        Returns a single page of results; no pagination is attempted.

        Args:
            database_id: Database to query
            filter: Notion filter object (optional)
            sorts: Notion sort list (optional)
            page_size: Maximum results (optional)

        Returns:
            List of page objects
        """
        body: dict[str, Any] = {}
        if filter:
            body["filter"] = filter
        if sorts:
            body["sorts"] = sorts
        if page_size:
            body["page_size"] = page_size

        response = await self._request("POST", f"databases/{database_id}/query", body)
        return response.get("results", [])

    async def retrieve_page(self, page_id: str) -> dict[str, Any]:
        return await self._request("GET", f"pages/{page_id}")

    async def create_page(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "pages", payload)

    async def update_page(self, page_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        return await self._request("PATCH", f"pages/{page_id}", {"properties": properties})

"""
Search Client
Thin HTTP client for the search service: submit a mutation,
fetch a task by uid, and the few read routes setup code needs.
Responses are returned as decoded JSON; any HTTP failure surfaces
as the `httpx.HTTPError` raised by `raise_for_status()`.
"""

from typing import Any, Dict, Optional

import httpx

from .config import Config
from .models import TaskUid

USER_AGENT = "search-tasks (python)"


class SearchClient:
    """HTTP client for a Meilisearch-compatible search service."""

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or Config.SEARCH_URL).rstrip("/")
        self.api_key = Config.SEARCH_API_KEY if api_key is None else api_key
        headers = {"User-Agent": USER_AGENT}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout or Config.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def submit(
        self,
        method: str,
        path: str,
        payload: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> dict:
        r = await self._client.request(
            method.upper(), path, json=payload, params=params
        )
        r.raise_for_status()
        return r.json()

    async def fetch_task(self, task_uid: TaskUid) -> dict:
        r = await self._client.get(f"/tasks/{task_uid}")
        r.raise_for_status()
        return r.json()

    async def get_indexes(self, limit: Optional[int] = None) -> dict:
        params = {"limit": limit} if limit is not None else None
        r = await self._client.get("/indexes", params=params)
        r.raise_for_status()
        return r.json()

    async def update_experimental_features(
        self, features: Dict[str, Any]
    ) -> dict:
        r = await self._client.patch("/experimental-features", json=features)
        r.raise_for_status()
        return r.json()

    async def search_similar_documents(
        self, index_uid: str, query: Dict[str, Any]
    ) -> dict:
        r = await self._client.post(
            f"/indexes/{index_uid}/similar", json=query
        )
        r.raise_for_status()
        return r.json()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "SearchClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

"""HTTP page-data fetcher for the client router, backed by httpx."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx

from prowl._errors import ClientError
from prowl.server.dispatcher import DATA_MARKER

if TYPE_CHECKING:
    from prowl._types import PageData


def data_url(url: str) -> str:
    """Append the data-only marker, keeping any existing query.

    ``/blog/1`` -> ``/blog/1?_prowl_data=1``;
    ``/search?q=x#top`` -> ``/search?q=x&_prowl_data=1``
    """
    url = url.split("#", 1)[0]
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{DATA_MARKER}=1"


class HttpxFetcher:
    """Fetches ``{"pageProps", "query", "page"}`` payloads from a prowl server.

    Args:
        base_url: Server origin, e.g. ``http://127.0.0.1:3000``.
        client: Existing ``httpx.AsyncClient`` to reuse (not closed by us).
        timeout: Request timeout in seconds for an owned client.

    """

    __slots__ = ("_client", "_owns_client")

    def __init__(
        self,
        base_url: str = "",
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(
            base_url=base_url, timeout=timeout,
        )

    async def fetch(self, url: str) -> PageData:
        """GET the data payload for *url*.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response.
            ClientError: If the body is not a JSON object.

        """
        response = await self._client.get(data_url(url))
        response.raise_for_status()
        data: Any = response.json()
        if not isinstance(data, dict):
            msg = f"Page data for {url} must be a JSON object, got {type(data).__name__}"
            raise ClientError(msg)
        return data

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpxFetcher:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

"""
HTTP connection pooling for the REST adapters.

Each Jira, TestRail or Confluence adapter owns exactly one pool, created on
``connect`` and closed on ``disconnect``. Pools carry the service's basic-auth
credentials, so there is no module-level registry to share them through.
"""

import asyncio
from typing import Any

import httpx
import structlog

log = structlog.get_logger(__name__)

KEEPALIVE_EXPIRY = 30.0


class HTTPConnectionPool:
    """A lazily opened ``httpx.AsyncClient`` bound to one API base URL.

    Attributes:
        base_url: Prefix for every relative request path.
        headers: Default headers sent with every request.
        auth: ``(username, secret)`` for HTTP basic auth, or None.
    """

    def __init__(
        self,
        base_url: str,
        max_connections: int = 10,
        max_keepalive_connections: int = 5,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        auth: tuple[str, str] | None = None,
    ) -> None:
        self.base_url = base_url
        self.max_connections = max_connections
        self.max_keepalive_connections = max_keepalive_connections
        self.timeout = timeout
        self.headers = headers or {}
        self.auth = auth
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._client is not None

    async def initialize(self) -> None:
        """Open the underlying client. Calling it again is a no-op."""
        async with self._lock:
            if self._client is not None:
                return

            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                auth=self.auth,
                timeout=self.timeout,
                http2=True,
                limits=httpx.Limits(
                    max_connections=self.max_connections,
                    max_keepalive_connections=self.max_keepalive_connections,
                    keepalive_expiry=KEEPALIVE_EXPIRY,
                ),
            )
            log.debug("http_pool_opened", base_url=self.base_url, max_connections=self.max_connections)

    async def close(self) -> None:
        """Close the underlying client, if open."""
        async with self._lock:
            if self._client is None:
                return

            client, self._client = self._client, None
            await client.aclose()
            log.debug("http_pool_closed", base_url=self.base_url)

    async def _open_client(self) -> httpx.AsyncClient:
        if self._client is None:
            await self.initialize()
        assert self._client is not None
        return self._client

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._open_client()
        return await client.get(path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._open_client()
        return await client.post(path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        client = await self._open_client()
        return await client.put(path, **kwargs)

    async def __aenter__(self) -> "HTTPConnectionPool":
        await self.initialize()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

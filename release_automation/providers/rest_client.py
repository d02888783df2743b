"""Shared plumbing for the httpx-based adapters (Jira, TestRail, Confluence)."""

from typing import Any

import httpx
import structlog

from release_automation.exceptions import NotFoundError, UpstreamError
from release_automation.utils.connection_pool import HTTPConnectionPool

log = structlog.get_logger(__name__)


class RestServiceClient:
    """Base class owning an HTTP connection pool for one service.

    Subclasses set ``service`` and call ``_request``; every transport or
    HTTP error comes back as ``UpstreamError`` chained to the httpx cause.
    """

    service = "rest"

    def __init__(
        self,
        api_base: str,
        username: str,
        secret: str,
        timeout: float = 30.0,
    ) -> None:
        self.api_base = api_base
        self.username = username
        self._secret = secret.strip() if secret else secret
        self.timeout = timeout
        self._pool: HTTPConnectionPool | None = None

    async def connect(self) -> None:
        """Create the connection pool."""
        if self._pool is None:
            self._pool = HTTPConnectionPool(
                base_url=self.api_base,
                timeout=self.timeout,
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                auth=(self.username, self._secret),
            )
        await self._pool.initialize()
        log.info(f"{self.service}_connected", api_base=self.api_base)

    async def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def __aenter__(self) -> "RestServiceClient":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        not_found: str | None = None,
        **kwargs: Any,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: "get", "post" or "put"
            path: Path relative to ``api_base``
            action: Short description used in error messages ("create test plan")
            not_found: When set, a 404 raises ``NotFoundError`` with this message
            **kwargs: Passed through to httpx (``json``, ``params``)

        Raises:
            NotFoundError: On 404 when ``not_found`` is given
            UpstreamError: On any other transport or HTTP failure
        """
        if self._pool is None:
            await self.connect()
        assert self._pool is not None

        try:
            response = await getattr(self._pool, method)(path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.error(f"{self.service}_request_failed", action=action, status=status)
            if status == 404 and not_found:
                raise NotFoundError(not_found, service=self.service, status_code=status) from e
            raise UpstreamError(
                f"Failed to {action}: {_error_detail(e.response)}",
                service=self.service,
                status_code=status,
                response_text=e.response.text,
            ) from e
        except httpx.RequestError as e:
            log.error(f"{self.service}_request_error", action=action, error=str(e))
            raise UpstreamError(f"Failed to {action}: {e}", service=self.service) from e

        if not response.content:
            return None
        return response.json()


def _error_detail(response: httpx.Response) -> str:
    """Best-effort extraction of the remote error message."""
    try:
        data = response.json()
    except ValueError:
        return response.text or response.reason_phrase

    if isinstance(data, dict):
        # TestRail: {"error": ...}; Jira: {"errorMessages": [...], "errors": {...}};
        # Confluence: {"message": ...}
        if data.get("error"):
            return str(data["error"])
        messages = list(data.get("errorMessages") or [])
        messages.extend(f"{k}: {v}" for k, v in (data.get("errors") or {}).items())
        if messages:
            return "; ".join(messages)
        if data.get("message"):
            return str(data["message"])
    return response.text or response.reason_phrase

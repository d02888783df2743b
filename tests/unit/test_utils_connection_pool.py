"""Tests for release_automation/utils/connection_pool.py - HTTP connection pooling."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from release_automation.utils.connection_pool import HTTPConnectionPool


class TestHTTPConnectionPool:
    def test_init_defaults(self):
        pool = HTTPConnectionPool("https://example.testrail.io")

        assert pool.base_url == "https://example.testrail.io"
        assert pool.max_connections == 10
        assert pool.max_keepalive_connections == 5
        assert pool.timeout == 30.0
        assert pool.headers == {}
        assert pool.auth is None
        assert pool.is_open is False

    @pytest.mark.asyncio
    async def test_initialize_creates_client_with_auth(self):
        pool = HTTPConnectionPool(
            "https://example.atlassian.net/rest/api/3",
            headers={"Accept": "application/json"},
            auth=("qa@example.com", "token"),
        )

        await pool.initialize()

        assert isinstance(pool._client, httpx.AsyncClient)
        assert pool._client.headers["Accept"] == "application/json"
        assert isinstance(pool._client.auth, httpx.BasicAuth)
        assert pool.is_open is True

        await pool.close()

    @pytest.mark.asyncio
    async def test_initialize_idempotent(self):
        pool = HTTPConnectionPool("https://example.testrail.io")

        await pool.initialize()
        client1 = pool._client
        await pool.initialize()

        assert pool._client is client1

        await pool.close()

    @pytest.mark.asyncio
    async def test_close_clears_client(self):
        pool = HTTPConnectionPool("https://example.testrail.io")
        await pool.initialize()

        await pool.close()

        assert pool._client is None
        assert pool.is_open is False

    @pytest.mark.asyncio
    async def test_close_when_not_initialized(self):
        pool = HTTPConnectionPool("https://example.testrail.io")

        await pool.close()

        assert pool._client is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["get", "post", "put"])
    async def test_request_auto_initializes(self, method):
        pool = HTTPConnectionPool("https://example.testrail.io")
        mock_client = MagicMock()
        setattr(mock_client, method, AsyncMock(return_value=MagicMock(status_code=200)))

        async def init_and_set_client():
            pool._client = mock_client

        with patch.object(pool, "initialize", new_callable=AsyncMock) as mock_init:
            mock_init.side_effect = init_and_set_client

            await getattr(pool, method)("/index.php?/api/v2/get_suites/1")

            mock_init.assert_called_once()
            getattr(mock_client, method).assert_awaited_once_with("/index.php?/api/v2/get_suites/1")

    @pytest.mark.asyncio
    async def test_context_manager(self):
        async with HTTPConnectionPool("https://example.testrail.io") as pool:
            assert pool.is_open

        assert not pool.is_open

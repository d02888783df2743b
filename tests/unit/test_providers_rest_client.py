"""Tests for release_automation/providers/rest_client.py."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from release_automation.exceptions import NotFoundError, UpstreamError
from release_automation.providers.rest_client import RestServiceClient, _error_detail


class DummyClient(RestServiceClient):
    service = "dummy"


@pytest.fixture
def client(mock_pool: AsyncMock) -> DummyClient:
    client = DummyClient("https://api.example.com", "qa@example.com", " secret \n")
    client._pool = mock_pool
    return client


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "https://api.example.com/x"), **kwargs)


class TestConnection:
    def test_secret_is_stripped(self, client: DummyClient) -> None:
        assert client._secret == "secret"

    @pytest.mark.asyncio
    @patch("release_automation.providers.rest_client.HTTPConnectionPool")
    async def test_connect_creates_pool_with_basic_auth(self, mock_pool_cls) -> None:
        mock_pool_cls.return_value.initialize = AsyncMock()
        client = DummyClient("https://api.example.com", "qa@example.com", "secret")

        await client.connect()

        kwargs = mock_pool_cls.call_args.kwargs
        assert kwargs["base_url"] == "https://api.example.com"
        assert kwargs["auth"] == ("qa@example.com", "secret")
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert client._pool is mock_pool_cls.return_value

    @pytest.mark.asyncio
    async def test_disconnect_closes_pool(self, client: DummyClient, mock_pool: AsyncMock) -> None:
        await client.disconnect()

        mock_pool.close.assert_awaited_once()
        assert client._pool is None


class TestRequest:
    @pytest.mark.asyncio
    async def test_returns_json(self, client, mock_pool) -> None:
        mock_pool.get.return_value = _response(200, json={"id": 1})

        assert await client._request("get", "/thing", "fetch thing") == {"id": 1}

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, client, mock_pool) -> None:
        mock_pool.post.return_value = _response(204)

        assert await client._request("post", "/thing", "create thing") is None

    @pytest.mark.asyncio
    async def test_404_without_not_found_is_upstream(self, client, mock_pool) -> None:
        mock_pool.get.return_value = _response(404, json={"message": "gone"})

        with pytest.raises(UpstreamError) as exc_info:
            await client._request("get", "/thing", "fetch thing")

        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.message == "Failed to fetch thing: gone"

    @pytest.mark.asyncio
    async def test_404_with_not_found(self, client, mock_pool) -> None:
        mock_pool.get.return_value = _response(404, json={"message": "gone"})

        with pytest.raises(NotFoundError, match="Thing 1 not found"):
            await client._request("get", "/thing/1", "fetch thing", not_found="Thing 1 not found")

    @pytest.mark.asyncio
    async def test_timeout(self, client, mock_pool) -> None:
        mock_pool.put.side_effect = httpx.ReadTimeout("timed out")

        with pytest.raises(UpstreamError) as exc_info:
            await client._request("put", "/thing", "update thing")

        assert exc_info.value.service == "dummy"
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)


class TestErrorDetail:
    def test_testrail_error(self) -> None:
        assert _error_detail(_response(400, json={"error": "Field :name is required"})) == "Field :name is required"

    def test_jira_errors(self) -> None:
        response = _response(400, json={"errorMessages": ["Bad JQL"], "errors": {"name": "taken"}})

        assert _error_detail(response) == "Bad JQL; name: taken"

    def test_confluence_message(self) -> None:
        assert _error_detail(_response(403, json={"message": "Not permitted"})) == "Not permitted"

    def test_non_json_body(self) -> None:
        assert _error_detail(_response(502, text="Bad Gateway from proxy")) == "Bad Gateway from proxy"

    def test_empty_body_uses_reason(self) -> None:
        assert _error_detail(_response(503)) == "Service Unavailable"

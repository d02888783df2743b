"""Tests for release_automation/providers/github_rest.py - GitHub release source."""

from datetime import UTC, datetime, timedelta
from unittest.mock import Mock, patch

import pytest
import requests
from github import GithubException

from release_automation.exceptions import NotFoundError, UpstreamError
from release_automation.models.domain import Release
from release_automation.providers.base import ReleaseSource
from release_automation.providers.github_rest import GitHubReleaseSource

NOW = datetime(2024, 1, 16, 12, 0, tzinfo=UTC)


@pytest.fixture
def mock_github_repo():
    """Create a mock GitHub repository."""
    return Mock()


@pytest.fixture
def source(mock_github_repo):
    """Create a connected GitHubReleaseSource."""
    source = GitHubReleaseSource(
        token="ghp_test_token_123",
        owner="example-org",
        repo="example-app",
    )
    source._client = Mock()
    source._repo = mock_github_repo
    return source


def _gh_release(tag: str = "v1.0.0", body: str | None = "Release notes", created_at: datetime = NOW) -> Mock:
    release = Mock()
    release.tag_name = tag
    release.body = body
    release.created_at = created_at
    release.published_at = created_at + timedelta(minutes=5)
    release.title = tag.lstrip("v")
    release.html_url = f"https://github.com/example-org/example-app/releases/tag/{tag}"
    return release


def _release(created_at: datetime) -> Release:
    return Release(tag_name="v1.0.0", body="", created_at=created_at)


class TestExtractVersion:
    @pytest.mark.parametrize(
        ("tag", "expected"),
        [
            ("v1.2.3", "1.2.3"),
            ("1.2.3", "1.2.3"),
            ("vv1", "v1"),
            ("V1.0", "V1.0"),
            ("release-v1", "release-v1"),
            ("v", ""),
        ],
    )
    def test_extract_version(self, tag, expected) -> None:
        assert ReleaseSource.extract_version(tag) == expected


class TestIsNew:
    def test_created_23_hours_ago(self) -> None:
        assert ReleaseSource.is_new(_release(NOW - timedelta(hours=23)), now=NOW) is True

    def test_created_25_hours_ago(self) -> None:
        assert ReleaseSource.is_new(_release(NOW - timedelta(hours=25)), now=NOW) is False

    def test_exactly_24_hours_is_new(self) -> None:
        assert ReleaseSource.is_new(_release(NOW - timedelta(hours=24)), now=NOW) is True

    def test_naive_timestamp_treated_as_utc(self) -> None:
        naive = (NOW - timedelta(hours=2)).replace(tzinfo=None)

        assert ReleaseSource.is_new(_release(naive), now=NOW) is True


class TestConnection:
    @pytest.mark.asyncio
    @patch("release_automation.providers.github_rest.Github")
    async def test_connect(self, mock_github_class, mock_github_repo) -> None:
        mock_client = Mock()
        mock_client.get_repo = Mock(return_value=mock_github_repo)
        mock_github_class.return_value = mock_client
        source = GitHubReleaseSource(token="ghp_test", owner="example-org", repo="example-app")

        await source.connect()

        assert mock_github_class.call_args.kwargs["base_url"] == "https://api.github.com"
        mock_client.get_repo.assert_called_once_with("example-org/example-app")
        assert source._repo is mock_github_repo

    @pytest.mark.asyncio
    @patch("release_automation.providers.github_rest.Github")
    async def test_connect_bad_credentials(self, mock_github_class) -> None:
        mock_github_class.return_value.get_repo.side_effect = GithubException(
            401, {"message": "Bad credentials"}, None
        )
        source = GitHubReleaseSource(token="bad", owner="example-org", repo="example-app")

        with pytest.raises(UpstreamError) as exc_info:
            await source.connect()

        assert exc_info.value.status_code == 401
        assert "Bad credentials" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_disconnect(self, source) -> None:
        client = source._client

        await source.disconnect()

        client.close.assert_called_once()
        assert source._client is None
        assert source._repo is None


class TestReleases:
    @pytest.mark.asyncio
    async def test_get_latest(self, source, mock_github_repo) -> None:
        mock_github_repo.get_latest_release.return_value = _gh_release()

        release = await source.get_latest()

        assert release.tag_name == "v1.0.0"
        assert release.body == "Release notes"
        assert release.created_at == NOW
        assert release.published_date == "2024-01-16"
        assert release.name == "1.0.0"

    @pytest.mark.asyncio
    async def test_get_latest_empty_body(self, source, mock_github_repo) -> None:
        mock_github_repo.get_latest_release.return_value = _gh_release(body=None)

        release = await source.get_latest()

        assert release.body == ""

    @pytest.mark.asyncio
    async def test_get_by_tag(self, source, mock_github_repo) -> None:
        mock_github_repo.get_release.return_value = _gh_release("v2.0.0")

        release = await source.get_by_tag("v2.0.0")

        mock_github_repo.get_release.assert_called_once_with("v2.0.0")
        assert release.tag_name == "v2.0.0"

    @pytest.mark.asyncio
    async def test_get_by_tag_not_found(self, source, mock_github_repo) -> None:
        mock_github_repo.get_release.side_effect = GithubException(404, {"message": "Not Found"}, None)

        with pytest.raises(NotFoundError, match="No release with tag v9.9.9"):
            await source.get_by_tag("v9.9.9")

    @pytest.mark.asyncio
    async def test_server_error(self, source, mock_github_repo) -> None:
        mock_github_repo.get_latest_release.side_effect = GithubException(
            502, {"message": "Server Error"}, None
        )

        with pytest.raises(UpstreamError) as exc_info:
            await source.get_latest()

        assert not isinstance(exc_info.value, NotFoundError)
        assert exc_info.value.service == "github"
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_transport_error(self, source, mock_github_repo) -> None:
        mock_github_repo.get_latest_release.side_effect = requests.ConnectionError("Name resolution failed")

        with pytest.raises(UpstreamError, match="Name resolution failed"):
            await source.get_latest()

    @pytest.mark.asyncio
    async def test_list_releases_respects_limit(self, source, mock_github_repo) -> None:
        mock_github_repo.get_releases.return_value = iter(
            [_gh_release("v3.0.0"), _gh_release("v2.0.0"), _gh_release("v1.0.0")]
        )

        releases = await source.list_releases(limit=2)

        assert [r.tag_name for r in releases] == ["v3.0.0", "v2.0.0"]

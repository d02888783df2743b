"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from release_automation.models.domain import Release
from release_automation.utils.connection_pool import HTTPConnectionPool

ENV_VARS = {
    "GITHUB_TOKEN": "ghp_test_token",
    "GITHUB_OWNER": "example-org",
    "GITHUB_REPO": "example-app",
    "TESTRAIL_HOST": "https://example.testrail.io",
    "TESTRAIL_USERNAME": "qa@example.com",
    "TESTRAIL_API_KEY": "testrail-key",
    "TESTRAIL_PROJECT_ID": "1",
    "JIRA_HOST": "https://example.atlassian.net",
    "JIRA_USERNAME": "qa@example.com",
    "JIRA_API_TOKEN": "jira-token",
    "JIRA_PROJECT_KEY": "PROJ",
    "CONFLUENCE_HOST": "https://example.atlassian.net",
    "CONFLUENCE_USERNAME": "qa@example.com",
    "CONFLUENCE_API_TOKEN": "confluence-token",
    "CONFLUENCE_SPACE_KEY": "QA",
    "CONFLUENCE_QA_PARENT_PAGE_ID": "12345",
}

OPTIONAL_ENV_VARS = [
    "GITHUB_BASE_URL",
    "JIRA_MAX_RESULTS",
    "CONFLUENCE_CONTEXT_PATH",
]


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo any structlog configuration made by a test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every release-automation variable from the environment."""
    for name in [*ENV_VARS, *OPTIONAL_ENV_VARS]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def full_env(clean_env: pytest.MonkeyPatch) -> dict[str, str]:
    """Set a complete, valid configuration in the environment."""
    for name, value in ENV_VARS.items():
        clean_env.setenv(name, value)
    return dict(ENV_VARS)


@pytest.fixture
def mock_pool() -> AsyncMock:
    """Create a mock HTTPConnectionPool."""
    return AsyncMock(spec=HTTPConnectionPool)


@pytest.fixture
def make_response():
    """Factory for successful JSON responses as returned by the pool."""

    def _make(data: Any = None) -> MagicMock:
        response = MagicMock()
        response.json.return_value = data
        response.content = b"" if data is None else b"{}"
        response.raise_for_status = MagicMock()
        return response

    return _make


@pytest.fixture
def new_release() -> Release:
    """A release created an hour ago."""
    now = datetime.now(UTC)
    return Release(
        tag_name="v1.0.0",
        body="Release notes",
        created_at=now - timedelta(hours=1),
        published_at=datetime(2024, 1, 15, 9, 30, tzinfo=UTC),
        name="1.0.0",
        url="https://github.com/example-org/example-app/releases/tag/v1.0.0",
    )


@pytest.fixture
def old_release() -> Release:
    """A release created two days ago."""
    return Release(
        tag_name="v0.9.0",
        body="Old notes",
        created_at=datetime.now(UTC) - timedelta(days=2),
        published_at=datetime(2024, 1, 1, tzinfo=UTC),
    )

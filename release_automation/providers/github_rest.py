"""GitHub release source implementation using PyGithub."""

import asyncio
from collections.abc import Callable
from itertools import islice
from typing import Any, TypeVar

import requests
import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.GitRelease import GitRelease  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from release_automation.exceptions import NotFoundError, UpstreamError
from release_automation.models.domain import Release
from release_automation.providers.base import ReleaseSource

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    This prevents blocking the event loop when calling synchronous
    PyGithub methods.
    """
    return await asyncio.to_thread(func)


class GitHubReleaseSource(ReleaseSource):
    """Read releases of one GitHub repository."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub release source.

        Args:
            token: GitHub personal access token or App token
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    async def connect(self) -> None:
        """Initialize GitHub client and resolve the repository."""

        def _connect() -> tuple[Github, GHRepository]:
            client = Github(auth=Auth.Token(self.token), base_url=self.base_url)
            return client, client.get_repo(f"{self.owner}/{self.repo}")

        self._client, self._repo = await self._call(_connect, f"access repository {self.owner}/{self.repo}")
        log.info("github_connected", base_url=self.base_url, owner=self.owner, repo=self.repo)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    async def __aenter__(self) -> "GitHubReleaseSource":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()

    async def _repository(self) -> GHRepository:
        if self._repo is None:
            await self.connect()
        assert self._repo is not None
        return self._repo

    async def _call(self, func: Callable[[], T], action: str, not_found: str | None = None) -> T:
        """Run a PyGithub call, translating its failures.

        Raises:
            NotFoundError: On 404 when ``not_found`` is given
            UpstreamError: On any other API or transport failure
        """
        try:
            return await _run_sync(func)
        except GithubException as e:
            log.error("github_request_failed", action=action, status=e.status, error=str(e))
            if e.status == 404 and not_found:
                raise NotFoundError(not_found, service="github", status_code=404) from e
            raise _upstream(f"Failed to {action}", e) from e
        except requests.RequestException as e:
            log.error("github_request_error", action=action, error=str(e))
            raise UpstreamError(f"Failed to {action}: {e}", service="github") from e

    async def get_latest(self) -> Release:
        """Get the latest published release."""
        log.info("get_latest_release", owner=self.owner, repo=self.repo)
        repo = await self._repository()

        gh_release = await self._call(repo.get_latest_release, "fetch latest release")

        release = self._convert_release(gh_release)
        log.info("latest_release", tag=release.tag_name)
        return release

    async def get_by_tag(self, tag: str) -> Release:
        """Get the release with an exact tag name."""
        log.info("get_release_by_tag", tag=tag)
        repo = await self._repository()

        gh_release = await self._call(
            lambda: repo.get_release(tag),
            f"fetch release {tag}",
            not_found=f"No release with tag {tag}",
        )
        return self._convert_release(gh_release)

    async def list_releases(self, limit: int = 100) -> list[Release]:
        """List up to ``limit`` releases, newest first."""
        log.info("list_releases", limit=limit)
        repo = await self._repository()

        gh_releases = await self._call(lambda: list(islice(repo.get_releases(), limit)), "list releases")

        log.info("releases_found", count=len(gh_releases))
        return [self._convert_release(r) for r in gh_releases]

    def _convert_release(self, gh_release: GitRelease) -> Release:
        """Convert PyGithub release to domain model."""
        return Release(
            tag_name=gh_release.tag_name,
            body=gh_release.body or "",
            created_at=gh_release.created_at,
            published_at=gh_release.published_at,
            name=gh_release.title,
            url=gh_release.html_url,
        )


def _upstream(message: str, error: GithubException) -> UpstreamError:
    detail = error.data.get("message") if isinstance(error.data, dict) else None
    if detail:
        message = f"{message}: {detail}"
    return UpstreamError(message, service="github", status_code=error.status)

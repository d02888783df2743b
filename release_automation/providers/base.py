"""
Abstract base classes for the service adapters.

The release orchestrator depends only on these four interfaces, so any of
them can be replaced by a test double or an alternative backend:

- ``ReleaseSource``: release metadata (GitHub)
- ``IssueTracker``: versions and issues (Jira)
- ``TestCaseManager``: plans, sections and cases (TestRail)
- ``DocumentationHost``: QA report pages (Confluence)

All network operations are async. Implementations raise
``release_automation.exceptions.UpstreamError`` for any failed call and
``NotFoundError`` where an expected remote entity is absent. None of them
retry.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta

from release_automation.models.domain import (
    Issue,
    PlanEntry,
    Release,
    ReportPage,
    Section,
    Suite,
    TestCase,
    TestCaseFields,
    TestPlan,
    Version,
)
from release_automation.utils.find_or_create import find_or_create

NEW_RELEASE_WINDOW = timedelta(hours=24)


class ReleaseSource(ABC):
    """Abstract base class for release metadata sources."""

    @abstractmethod
    async def get_latest(self) -> Release:
        """Get the most recent published release.

        Raises:
            UpstreamError: On transport or authentication failure.
        """
        pass

    @abstractmethod
    async def get_by_tag(self, tag: str) -> Release:
        """Get the release with exactly this tag.

        Raises:
            NotFoundError: If no release has this tag.
            UpstreamError: On any other failure.
        """
        pass

    @abstractmethod
    async def list_releases(self, limit: int = 100) -> list[Release]:
        """List the most recent releases, newest first."""
        pass

    @staticmethod
    def extract_version(tag: str) -> str:
        """Strip one leading ``v`` from a tag ("v1.2.3" -> "1.2.3").

        Case-sensitive; only position 0 is considered.
        """
        return tag[1:] if tag.startswith("v") else tag

    @staticmethod
    def is_new(release: Release, now: datetime | None = None) -> bool:
        """Whether the release was created within the last 24 hours.

        The boundary is inclusive. Naive ``created_at`` values are treated
        as UTC. Clock skew is not accounted for.
        """
        now = now or datetime.now(UTC)
        created_at = release.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return now - created_at <= NEW_RELEASE_WINDOW


class IssueTracker(ABC):
    """Abstract base class for issue trackers holding release versions."""

    @abstractmethod
    async def find_or_create_version(self, name: str, description: str | None = None) -> Version:
        """Find a version by exact name, creating it when absent.

        The created version's description defaults to ``"Release {name}"``.
        """
        pass

    @abstractmethod
    async def get_issues_for_version(self, name: str) -> list[Issue]:
        """Get issues of the configured project whose fix version is ``name``.

        Returns at most one page of results (see ``JiraConfig.max_results``).

        Raises:
            UpstreamError: If the query fails.
        """
        pass

    @abstractmethod
    def map_to_test_case(self, issue: Issue) -> TestCaseFields:
        """Map an issue to test-case fields. Pure; no network access."""
        pass


class TestCaseManager(ABC):
    """Abstract base class for test-case management systems."""

    __test__ = False

    @abstractmethod
    async def create_plan(self, name: str, description: str | None = None) -> TestPlan:
        """Create a plan titled ``"Release {name} Test Plan"``. Never deduplicated."""
        pass

    @abstractmethod
    async def list_suites(self) -> list[Suite]:
        """List all suites of the configured project."""
        pass

    @abstractmethod
    async def find_or_create_section(self, suite_id: int, name: str) -> Section:
        """Find section ``"Release {name}"`` in the suite, creating it when absent."""
        pass

    @abstractmethod
    async def create_case(
        self,
        section_id: int,
        title: str,
        type_id: int = 1,
        priority_id: int = 2,
        estimate: str = "15m",
        refs: str = "",
        jira_ticket: str = "",
    ) -> TestCase:
        """Create one test case. Never deduplicated."""
        pass

    @abstractmethod
    async def add_cases_to_plan(self, plan_id: int, suite_id: int, case_ids: list[int]) -> PlanEntry:
        """Attach an explicit, non-empty list of cases to a plan as one entry.

        Raises:
            ValueError: If ``case_ids`` is empty.
        """
        pass

    @abstractmethod
    def plan_url(self, plan_id: int) -> str:
        """Browser URL of a plan."""
        pass


class DocumentationHost(ABC):
    """Abstract base class for the wiki hosting QA report pages."""

    @staticmethod
    def report_title(version: str) -> str:
        return f"Release {version} - QA Report"

    @abstractmethod
    async def find_report_page(self, version: str) -> ReportPage | None:
        """Find the report page for ``version`` by exact title."""
        pass

    @abstractmethod
    async def create_report_page(self, version: str, date: str | None = None) -> ReportPage:
        """Render the report template and create the page.

        Args:
            version: Release version
            date: Release date, ``YYYY-MM-DD``; defaults to today
        """
        pass

    async def find_or_create_report_page(self, version: str, date: str | None = None) -> ReportPage:
        """Return the existing report page verbatim, or create one."""
        return await find_or_create(
            lambda: self.find_report_page(version),
            lambda: self.create_report_page(version, date),
            kind="report_page",
            key=self.report_title(version),
        )

    @abstractmethod
    async def patch_test_rail_link(self, page_id: str, url: str) -> ReportPage:
        """Replace the placeholder TestRail link in a page with ``url``.

        Raises:
            NotFoundError: If the page has no placeholder link.
        """
        pass

"""
Domain models for release-automation.

These dataclasses are the normalized internal representation of the entities
read from or written to GitHub, Jira, TestRail and Confluence. Adapters
convert provider payloads into these models; the orchestrator works with
nothing else.

Example:
    Converting a TestRail section payload::

        section = Section(
            id=payload["id"],
            name=payload["name"],
            suite_id=payload.get("suite_id"),
        )
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Release:
    """An immutable snapshot of a GitHub release."""

    tag_name: str
    body: str
    created_at: datetime
    """When the release object was created; drives the "is new" check."""

    published_at: datetime | None = None
    name: str | None = None
    url: str | None = None

    @property
    def published_date(self) -> str | None:
        """Publication date formatted ``YYYY-MM-DD``, if published."""
        if self.published_at is None:
            return None
        return self.published_at.strftime("%Y-%m-%d")


@dataclass
class Version:
    """A release-tracking label (fixVersion) in Jira."""

    id: str
    name: str
    description: str | None = None
    released: bool = False


@dataclass
class Issue:
    """A Jira issue filed against a version."""

    key: str
    summary: str
    description: str = ""
    issue_type: str | None = None
    priority: str | None = None
    status: str | None = None


@dataclass
class TestCaseFields:
    """Test-case fields derived from a single Jira issue."""

    __test__ = False

    title: str
    jira_ticket: str
    priority_id: int
    type_id: int
    description: str = ""


@dataclass
class TestPlan:
    """A TestRail test plan for one release."""

    __test__ = False

    id: int
    name: str
    description: str | None = None
    url: str | None = None


@dataclass
class Suite:
    """A TestRail test suite."""

    id: int
    name: str = ""


@dataclass
class Section:
    """A named grouping of test cases within a suite."""

    id: int
    name: str
    suite_id: int | None = None
    parent_id: int | None = None


@dataclass
class TestCase:
    """A TestRail test case."""

    __test__ = False

    id: int
    title: str
    section_id: int | None = None
    type_id: int | None = None
    priority_id: int | None = None
    estimate: str | None = None
    refs: str = ""
    jira_ticket: str = ""


@dataclass
class PlanEntry:
    """A plan entry attaching explicit case ids to a plan."""

    id: str
    suite_id: int
    case_ids: list[int] = field(default_factory=list)


@dataclass
class ReportPage:
    """A Confluence QA report page.

    ``body`` holds the storage-format markup and is only populated when the
    page was fetched with ``expand=body.storage``.
    """

    id: str
    title: str
    version_number: int = 1
    body: str | None = None
    space_key: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

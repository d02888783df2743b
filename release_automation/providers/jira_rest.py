"""Jira Cloud issue tracker implementation using the REST API v3."""

from typing import Any

import structlog

from release_automation.models.domain import Issue, TestCaseFields, Version
from release_automation.providers.base import IssueTracker
from release_automation.providers.rest_client import RestServiceClient
from release_automation.utils.find_or_create import find_or_create

log = structlog.get_logger(__name__)

SEARCH_FIELDS = ["summary", "description", "status", "issuetype", "priority"]

# Jira priority name -> TestRail priority ID
PRIORITY_MAP = {
    "Highest": 1,  # Critical
    "High": 2,
    "Medium": 3,
    "Low": 4,
    "Lowest": 5,  # Minor
}
DEFAULT_PRIORITY_ID = 3

# Jira issue type name -> TestRail case type ID
TYPE_MAP = {
    "Bug": 1,  # Functional
    "Task": 2,  # Acceptance
    "Story": 3,
    "Improvement": 6,  # Performance
    "Epic": 7,  # Compatibility
}
DEFAULT_TYPE_ID = 1


class JiraRestTracker(RestServiceClient, IssueTracker):
    """Jira implementation scoped to one project."""

    service = "jira"

    def __init__(
        self,
        host: str,
        username: str,
        api_token: str,
        project_key: str,
        max_results: int = 1000,
    ):
        """Initialize Jira tracker.

        Args:
            host: Jira base URL (e.g., https://example.atlassian.net)
            username: Account email
            api_token: Atlassian API token
            project_key: Project key (e.g., PROJ)
            max_results: Maximum issues returned by a version query
        """
        self.host = host.rstrip("/")
        super().__init__(f"{self.host}/rest/api/3", username, api_token)
        self.project_key = project_key
        self.max_results = max_results

    async def get_versions(self) -> list[Version]:
        """List all versions of the project."""
        data = await self._request(
            "get",
            f"/project/{self.project_key}/versions",
            "list versions",
        )
        return [self._parse_version(v) for v in data or []]

    async def get_version_by_name(self, name: str) -> Version | None:
        """Find a project version by exact name."""
        log.info("get_version_by_name", name=name)
        for version in await self.get_versions():
            if version.name == name:
                log.info("version_found", name=name, version_id=version.id)
                return version

        log.info("version_not_found", name=name)
        return None

    async def create_version(self, name: str, description: str | None = None) -> Version:
        """Create a project version."""
        log.info("create_version", name=name)
        data = await self._request(
            "post",
            "/version",
            f"create version {name}",
            json={
                "name": name,
                "description": description or f"Release {name}",
                "project": self.project_key,
            },
        )
        version = self._parse_version(data)
        log.info("version_created", name=name, version_id=version.id)
        return version

    async def find_or_create_version(self, name: str, description: str | None = None) -> Version:
        return await find_or_create(
            lambda: self.get_version_by_name(name),
            lambda: self.create_version(name, description),
            kind="version",
            key=name,
        )

    async def get_issues_for_version(self, name: str) -> list[Issue]:
        """Search issues whose fixVersion is ``name``.

        A single page of up to ``max_results`` issues is fetched. When Jira
        reports more pages, a warning is logged and the rest are ignored.
        """
        jql = f'project = {self.project_key} AND fixVersion = "{_escape_jql(name)}"'
        log.info("get_issues_for_version", version=name, jql=jql)

        data = await self._request(
            "post",
            "/search/jql",
            f"search issues for version {name}",
            json={"jql": jql, "maxResults": self.max_results, "fields": SEARCH_FIELDS},
        )
        issues = [self._parse_issue(raw) for raw in data.get("issues", [])]

        if data.get("nextPageToken") or data.get("isLast") is False:
            log.warning("issue_search_truncated", version=name, returned=len(issues), cap=self.max_results)

        log.info("issues_found", version=name, count=len(issues))
        return issues

    async def get_issue(self, key: str) -> Issue:
        """Fetch a single issue by key."""
        log.info("get_issue", key=key)
        data = await self._request(
            "get",
            f"/issue/{key}",
            f"fetch issue {key}",
            not_found=f"Issue {key} not found",
            params={"fields": ",".join(SEARCH_FIELDS)},
        )
        return self._parse_issue(data)

    def map_to_test_case(self, issue: Issue) -> TestCaseFields:
        return TestCaseFields(
            title=f"{issue.key} - {issue.summary}",
            description=issue.description or "",
            jira_ticket=issue.key,
            priority_id=map_priority(issue.priority),
            type_id=map_issue_type(issue.issue_type),
        )

    def _parse_version(self, data: dict[str, Any]) -> Version:
        return Version(
            id=str(data["id"]),
            name=data["name"],
            description=data.get("description"),
            released=bool(data.get("released", False)),
        )

    def _parse_issue(self, data: dict[str, Any]) -> Issue:
        fields = data.get("fields") or {}
        return Issue(
            key=data["key"],
            summary=fields.get("summary") or "",
            description=adf_to_text(fields.get("description")),
            issue_type=(fields.get("issuetype") or {}).get("name"),
            priority=(fields.get("priority") or {}).get("name"),
            status=(fields.get("status") or {}).get("name"),
        )


def map_priority(name: str | None) -> int:
    """Map a Jira priority name to a TestRail priority ID (default Medium)."""
    return PRIORITY_MAP.get(name or "", DEFAULT_PRIORITY_ID)


def map_issue_type(name: str | None) -> int:
    """Map a Jira issue type name to a TestRail case type ID (default Functional)."""
    return TYPE_MAP.get(name or "", DEFAULT_TYPE_ID)


def adf_to_text(node: Any) -> str:
    """Flatten an Atlassian Document Format node to plain text.

    Plain strings (API v2, Server) pass through unchanged.
    """
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    if isinstance(node, list):
        return "".join(adf_to_text(child) for child in node)

    node_type = node.get("type")
    if node_type == "text":
        return node.get("text", "")
    if node_type == "hardBreak":
        return "\n"

    text = adf_to_text(node.get("content", []))
    if node_type in ("paragraph", "heading", "listItem", "codeBlock", "blockquote"):
        text = text.rstrip("\n") + "\n"
    return text if node_type != "doc" else text.strip()


def _escape_jql(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')

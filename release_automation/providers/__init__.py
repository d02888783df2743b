"""Service adapters for GitHub, Jira, TestRail and Confluence.

Key Components:
    - ReleaseSource / GitHubReleaseSource: release metadata
    - IssueTracker / JiraRestTracker: versions and issues
    - TestCaseManager / TestRailManager: plans, sections and cases
    - DocumentationHost / ConfluenceRestHost: QA report pages

Example:
    >>> from release_automation.providers import JiraRestTracker
    >>> jira = JiraRestTracker(host="...", username="...", api_token="...", project_key="PROJ")
    >>> async with jira:
    ...     version = await jira.find_or_create_version("1.2.3")
"""

from release_automation.providers.base import DocumentationHost, IssueTracker, ReleaseSource, TestCaseManager
from release_automation.providers.confluence_rest import ConfluenceRestHost
from release_automation.providers.github_rest import GitHubReleaseSource
from release_automation.providers.jira_rest import JiraRestTracker
from release_automation.providers.testrail_rest import TestRailManager

__all__ = [
    "ConfluenceRestHost",
    "DocumentationHost",
    "GitHubReleaseSource",
    "IssueTracker",
    "JiraRestTracker",
    "ReleaseSource",
    "TestCaseManager",
    "TestRailManager",
]

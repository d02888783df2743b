"""Build service adapters from settings."""

from contextlib import AsyncExitStack
from dataclasses import dataclass

import structlog

from release_automation.config.settings import AutomationSettings
from release_automation.providers.confluence_rest import ConfluenceRestHost
from release_automation.providers.github_rest import GitHubReleaseSource
from release_automation.providers.jira_rest import JiraRestTracker
from release_automation.providers.testrail_rest import TestRailManager

log = structlog.get_logger(__name__)


@dataclass
class ServiceAdapters:
    """The four adapters one orchestrator run needs."""

    releases: GitHubReleaseSource
    issues: JiraRestTracker
    test_cases: TestRailManager
    docs: ConfluenceRestHost

    async def connect(self, stack: AsyncExitStack) -> None:
        """Connect every adapter; ``stack`` disconnects them on exit."""
        for adapter in (self.releases, self.issues, self.test_cases, self.docs):
            await stack.enter_async_context(adapter)


def create_adapters(settings: AutomationSettings) -> ServiceAdapters:
    """Create the adapters for the configured services.

    Example:
        >>> settings = AutomationSettings.from_env()
        >>> adapters = create_adapters(settings)
        >>> async with AsyncExitStack() as stack:
        ...     await adapters.connect(stack)
        ...     release = await adapters.releases.get_latest()
    """
    log.info(
        "creating_adapters",
        github=f"{settings.github.owner}/{settings.github.repo}",
        jira_project=settings.jira.project_key,
        testrail_project=settings.testrail.project_id,
        confluence_space=settings.confluence.space_key,
    )
    return ServiceAdapters(
        releases=create_release_source(settings),
        issues=JiraRestTracker(
            host=settings.jira.host,
            username=settings.jira.username,
            api_token=settings.jira.api_token.get_secret_value(),
            project_key=settings.jira.project_key,
            max_results=settings.jira.max_results,
        ),
        test_cases=TestRailManager(
            host=settings.testrail.host,
            username=settings.testrail.username,
            api_key=settings.testrail.api_key.get_secret_value(),
            project_id=settings.testrail.project_id,
        ),
        docs=ConfluenceRestHost(
            host=settings.confluence.host,
            username=settings.confluence.username,
            api_token=settings.confluence.api_token.get_secret_value(),
            space_key=settings.confluence.space_key,
            parent_page_id=settings.confluence.qa_parent_page_id,
            context_path=settings.confluence.context_path,
        ),
    )


def create_release_source(settings: AutomationSettings) -> GitHubReleaseSource:
    return GitHubReleaseSource(
        token=settings.github.token.get_secret_value(),
        owner=settings.github.owner,
        repo=settings.github.repo,
        base_url=settings.github.base_url,
    )

"""
Release orchestrator for the QA release checklist.

This module provides the ReleaseOrchestrator class, which runs the fixed
pipeline that turns a GitHub release into QA artifacts:

    resolve release -> derive version -> create test plan
    -> ensure Jira version -> fetch issues -> pick suite -> ensure section
    -> create one test case per issue -> attach cases to plan
    -> ensure report page -> patch plan link into page

Steps run strictly in sequence; each one needs the ids produced by the
previous ones. Only the section, the Jira version and the report page are
protected by find-or-create. Plans and cases are created on every run that
reaches them, so re-running a release produces duplicates.

Failure Model:
    ``process_release`` lets every exception propagate unchanged and
    performs no rollback of steps already completed. ``run`` is the
    boundary used by drivers: it converts exceptions into a
    ``ReleaseFailed`` value. "Latest release is not new" is never an error;
    it returns ``ReleaseSkipped`` before any side effect.

Example:
    >>> orchestrator = ReleaseOrchestrator(releases, issues, test_cases, docs)
    >>> outcome = await orchestrator.run()
    >>> outcome.to_dict()
    {'success': True, 'version': '1.0.0', 'testPlanId': 123, ...}
"""

import structlog

from release_automation.exceptions import NotFoundError, ReleaseAutomationError
from release_automation.models.domain import Issue, Suite
from release_automation.models.results import (
    ReleaseFailed,
    ReleaseOutcome,
    ReleaseProcessed,
    ReleaseSkipped,
)
from release_automation.providers.base import DocumentationHost, IssueTracker, ReleaseSource, TestCaseManager

log = structlog.get_logger(__name__)


class ReleaseOrchestrator:
    """Run the release QA checklist across the four services.

    Attributes:
        releases: Source of release metadata.
        issues: Issue tracker holding versions and issues.
        test_cases: Test case manager receiving plans, sections and cases.
        docs: Documentation host for the QA report page.
        current_step: Name of the step in progress, kept after a failure.
    """

    def __init__(
        self,
        releases: ReleaseSource,
        issues: IssueTracker,
        test_cases: TestCaseManager,
        docs: DocumentationHost,
    ) -> None:
        self.releases = releases
        self.issues = issues
        self.test_cases = test_cases
        self.docs = docs
        self.current_step: str | None = None

    async def run(self, tag: str | None = None) -> ReleaseOutcome:
        """Process a release and report the outcome as a value.

        Service failures become ``ReleaseFailed`` carrying the name of the
        step that was running; anything else still propagates.
        """
        try:
            return await self.process_release(tag)
        except ReleaseAutomationError as e:
            log.error("release_failed", tag=tag, step=self.current_step, error=str(e))
            return ReleaseFailed(kind=type(e).__name__, message=str(e), step=self.current_step)

    async def process_release(self, tag: str | None = None) -> ReleaseProcessed | ReleaseSkipped:
        """Run the full pipeline for ``tag``, or for the latest release.

        A release requested by tag is always processed. The latest release
        is processed only when it was created within the last 24 hours.

        Returns:
            ``ReleaseProcessed`` on success, ``ReleaseSkipped`` when the
            latest release is not new.

        Raises:
            UpstreamError: If any service call fails.
            NotFoundError: If the tag, a suite or the page placeholder is absent.
        """
        self._enter("resolve_release")
        if tag:
            release = await self.releases.get_by_tag(tag)
        else:
            release = await self.releases.get_latest()
            if not self.releases.is_new(release):
                log.info("release_not_new", tag=release.tag_name, created_at=release.created_at.isoformat())
                return ReleaseSkipped(tag_name=release.tag_name)

        version = self.releases.extract_version(release.tag_name)
        log.info("processing_release", tag=release.tag_name, version=version)

        self._enter("create_test_plan")
        plan = await self.test_cases.create_plan(version, release.body)

        self._enter("fetch_issues")
        await self.issues.find_or_create_version(version)
        issues = await self.issues.get_issues_for_version(version)

        self._enter("resolve_suite")
        suite = await self._target_suite()

        self._enter("ensure_section")
        section = await self.test_cases.find_or_create_section(suite.id, version)

        self._enter("create_test_cases")
        case_ids = await self._create_cases(issues, section.id)

        self._enter("attach_test_cases")
        if case_ids:
            await self.test_cases.add_cases_to_plan(plan.id, suite.id, case_ids)
        else:
            log.warning("no_test_cases_to_attach", plan_id=plan.id)

        self._enter("ensure_report_page")
        page = await self.docs.find_or_create_report_page(version, release.published_date)

        self._enter("patch_report_page")
        await self.docs.patch_test_rail_link(page.id, self.test_cases.plan_url(plan.id))

        self.current_step = None
        log.info("release_processed", version=version, plan_id=plan.id, cases=len(case_ids), page_id=page.id)
        return ReleaseProcessed(
            version=version,
            test_plan_id=plan.id,
            test_cases_count=len(case_ids),
            report_page_id=page.id,
        )

    def _enter(self, step: str) -> None:
        self.current_step = step
        log.debug("step_started", step=step)

    async def _target_suite(self) -> Suite:
        # Multi-suite projects are not discriminated; the first suite wins.
        suites = await self.test_cases.list_suites()
        if not suites:
            raise NotFoundError("No test suites found in TestRail", service="testrail")
        return suites[0]

    async def _create_cases(self, issues: list[Issue], section_id: int) -> list[int]:
        """Create one case per issue, in tracker order. Any failure aborts."""
        case_ids: list[int] = []
        for issue in issues:
            fields = self.issues.map_to_test_case(issue)
            case = await self.test_cases.create_case(
                section_id,
                fields.title,
                type_id=fields.type_id,
                priority_id=fields.priority_id,
                jira_ticket=fields.jira_ticket,
            )
            case_ids.append(case.id)

        log.info("test_cases_created", count=len(case_ids))
        return case_ids

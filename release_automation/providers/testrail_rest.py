"""TestRail test case manager implementation using the API v2.

TestRail routes every API call through the query string
(``index.php?/api/v2/add_plan/1``), so paths are built by ``_endpoint``
instead of passing ``params`` to httpx, which would re-encode them.
"""

from typing import Any

import structlog

from release_automation.models.domain import PlanEntry, Section, Suite, TestCase, TestPlan
from release_automation.providers.base import TestCaseManager
from release_automation.providers.rest_client import RestServiceClient
from release_automation.utils.find_or_create import find_or_create

log = structlog.get_logger(__name__)


def _endpoint(method: str, *ids: int | str, **filters: Any) -> str:
    """Build an API v2 path: ``_endpoint("get_sections", 1, suite_id=2)``."""
    path = "/".join([f"/index.php?/api/v2/{method}", *(str(i) for i in ids)])
    for key, value in filters.items():
        if value is not None:
            path += f"&{key}={value}"
    return path


def section_name(release: str) -> str:
    return f"Release {release}"


class TestRailManager(RestServiceClient, TestCaseManager):
    """TestRail implementation scoped to one project."""

    __test__ = False

    service = "testrail"

    def __init__(self, host: str, username: str, api_key: str, project_id: int):
        """Initialize TestRail manager.

        Args:
            host: TestRail base URL (e.g., https://example.testrail.io)
            username: TestRail user email
            api_key: TestRail API key
            project_id: Project ID receiving plans, sections and cases
        """
        self.host = host.rstrip("/")
        super().__init__(self.host, username, api_key)
        self.project_id = project_id

    def plan_url(self, plan_id: int) -> str:
        return f"{self.host}/index.php?/plans/view/{plan_id}"

    async def create_plan(self, name: str, description: str | None = None) -> TestPlan:
        log.info("create_test_plan", release=name)
        data = await self._request(
            "post",
            _endpoint("add_plan", self.project_id),
            "create test plan",
            json={
                "name": f"Release {name} Test Plan",
                "description": description or f"Test plan for release {name}",
            },
        )
        plan = TestPlan(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description"),
            url=data.get("url") or self.plan_url(data["id"]),
        )
        log.info("test_plan_created", plan_id=plan.id)
        return plan

    async def list_suites(self) -> list[Suite]:
        log.info("list_suites", project_id=self.project_id)
        data = await self._request("get", _endpoint("get_suites", self.project_id), "list test suites")
        suites = [Suite(id=s["id"], name=s.get("name", "")) for s in _items(data, "suites")]
        log.info("suites_found", count=len(suites))
        return suites

    async def get_sections(self, suite_id: int) -> list[Section]:
        """List every section of a suite, following pagination links."""
        log.info("get_sections", suite_id=suite_id)
        sections: list[Section] = []
        offset = 0

        while True:
            data = await self._request(
                "get",
                _endpoint("get_sections", self.project_id, suite_id=suite_id, offset=offset or None),
                "list sections",
            )
            page = _items(data, "sections")
            sections.extend(self._parse_section(s) for s in page)

            # Paginated responses (TestRail 6.7+) carry _links.next
            if not isinstance(data, dict) or not (data.get("_links") or {}).get("next") or not page:
                break
            offset += len(page)

        log.info("sections_found", suite_id=suite_id, count=len(sections))
        return sections

    async def create_section(self, suite_id: int, name: str, parent_id: int | None = None) -> Section:
        log.info("create_section", suite_id=suite_id, name=name)
        payload: dict[str, Any] = {"name": name, "suite_id": suite_id}
        if parent_id:
            payload["parent_id"] = parent_id

        data = await self._request(
            "post",
            _endpoint("add_section", self.project_id),
            f"create section {name}",
            json=payload,
        )
        section = self._parse_section(data)
        log.info("section_created", section_id=section.id)
        return section

    async def find_or_create_section(self, suite_id: int, name: str) -> Section:
        title = section_name(name)

        async def find() -> Section | None:
            return next((s for s in await self.get_sections(suite_id) if s.name == title), None)

        return await find_or_create(
            find,
            lambda: self.create_section(suite_id, title),
            kind="section",
            key=title,
        )

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
        log.info("create_test_case", section_id=section_id, title=title)
        data = await self._request(
            "post",
            _endpoint("add_case", section_id),
            f"create test case {title!r}",
            json={
                "title": title,
                "type_id": type_id,
                "priority_id": priority_id,
                "estimate": estimate,
                "refs": refs,
                "custom_jira_ticket": jira_ticket,
            },
        )
        case = self._parse_case(data)
        log.info("test_case_created", case_id=case.id)
        return case

    async def get_case(self, case_id: int) -> TestCase:
        data = await self._request(
            "get",
            _endpoint("get_case", case_id),
            f"fetch test case {case_id}",
            not_found=f"Test case {case_id} not found",
        )
        return self._parse_case(data)

    async def get_cases_in_section(self, suite_id: int, section_id: int) -> list[TestCase]:
        data = await self._request(
            "get",
            _endpoint("get_cases", self.project_id, suite_id=suite_id, section_id=section_id),
            f"list test cases in section {section_id}",
        )
        return [self._parse_case(c) for c in _items(data, "cases")]

    async def add_cases_to_plan(self, plan_id: int, suite_id: int, case_ids: list[int]) -> PlanEntry:
        if not case_ids:
            raise ValueError("case_ids must not be empty")

        log.info("add_cases_to_plan", plan_id=plan_id, suite_id=suite_id, count=len(case_ids))
        data = await self._request(
            "post",
            _endpoint("add_plan_entry", plan_id),
            f"add test cases to plan {plan_id}",
            json={"suite_id": suite_id, "include_all": False, "case_ids": list(case_ids)},
        )
        entry = PlanEntry(id=str(data["id"]), suite_id=suite_id, case_ids=list(case_ids))
        log.info("plan_entry_created", plan_id=plan_id, entry_id=entry.id)
        return entry

    def _parse_section(self, data: dict[str, Any]) -> Section:
        return Section(
            id=data["id"],
            name=data["name"],
            suite_id=data.get("suite_id"),
            parent_id=data.get("parent_id"),
        )

    def _parse_case(self, data: dict[str, Any]) -> TestCase:
        return TestCase(
            id=data["id"],
            title=data.get("title", ""),
            section_id=data.get("section_id"),
            type_id=data.get("type_id"),
            priority_id=data.get("priority_id"),
            estimate=data.get("estimate"),
            refs=data.get("refs") or "",
            jira_ticket=data.get("custom_jira_ticket") or "",
        )


def _items(data: Any, key: str) -> list[dict[str, Any]]:
    """Unwrap bulk responses, which are bare lists before TestRail 6.7."""
    if isinstance(data, dict):
        return data.get(key, [])
    return data or []

"""Confluence documentation host implementation using the content REST API."""

from datetime import date as date_cls
from typing import Any

import structlog

from release_automation.exceptions import NotFoundError
from release_automation.models.domain import ReportPage
from release_automation.providers.base import DocumentationHost
from release_automation.providers.rest_client import RestServiceClient
from release_automation.rendering.engine import TESTRAIL_PLACEHOLDER, ReportRenderer, plan_link

log = structlog.get_logger(__name__)


class ConfluenceRestHost(RestServiceClient, DocumentationHost):
    """Confluence implementation scoped to one space and parent page."""

    service = "confluence"

    def __init__(
        self,
        host: str,
        username: str,
        api_token: str,
        space_key: str,
        parent_page_id: str,
        context_path: str = "/wiki",
        renderer: ReportRenderer | None = None,
    ):
        """Initialize Confluence host.

        Args:
            host: Confluence base URL (e.g., https://example.atlassian.net)
            username: Account email
            api_token: Atlassian API token
            space_key: Space holding report pages
            parent_page_id: Page under which report pages are created
            context_path: "/wiki" for Confluence Cloud, "" for Server/Data Center
            renderer: Report template renderer
        """
        self.host = host.rstrip("/")
        super().__init__(f"{self.host}{context_path.rstrip('/')}/rest/api", username, api_token)
        self.space_key = space_key
        self.parent_page_id = parent_page_id
        self.renderer = renderer or ReportRenderer()

    async def find_report_page(self, version: str) -> ReportPage | None:
        title = self.report_title(version)
        log.info("find_report_page", title=title, space=self.space_key)

        data = await self._request(
            "get",
            "/content",
            f"search page {title!r}",
            params={"spaceKey": self.space_key, "title": title, "type": "page", "expand": "version"},
        )
        results = (data or {}).get("results") or []
        if not results:
            log.info("report_page_not_found", title=title)
            return None

        page = self._parse_page(results[0])
        log.info("report_page_found", title=title, page_id=page.id)
        return page

    async def create_report_page(self, version: str, date: str | None = None) -> ReportPage:
        title = self.report_title(version)
        body = self.renderer.render_report(version, date or date_cls.today().isoformat())
        log.info("create_report_page", title=title, parent_id=self.parent_page_id)

        data = await self._request(
            "post",
            "/content",
            f"create page {title!r}",
            json={
                "type": "page",
                "title": title,
                "space": {"key": self.space_key},
                "ancestors": [{"id": self.parent_page_id}],
                "body": {"storage": {"value": body, "representation": "storage"}},
            },
        )
        page = self._parse_page(data)
        log.info("report_page_created", page_id=page.id)
        return page

    async def get_page(self, page_id: str) -> ReportPage:
        """Fetch a page with its storage body and version counter."""
        data = await self._request(
            "get",
            f"/content/{page_id}",
            f"fetch page {page_id}",
            not_found=f"Page {page_id} not found",
            params={"expand": "body.storage,version"},
        )
        return self._parse_page(data)

    async def update_page(self, page: ReportPage, body: str) -> ReportPage:
        """Replace a page body, bumping its version counter by exactly one.

        Args:
            page: The page as last fetched; its ``version_number`` is the base
            body: New storage-format body
        """
        log.info("update_page", page_id=page.id, version=page.version_number + 1)
        data = await self._request(
            "put",
            f"/content/{page.id}",
            f"update page {page.id}",
            json={
                "id": page.id,
                "type": "page",
                "title": page.title,
                "space": {"key": self.space_key},
                "body": {"storage": {"value": body, "representation": "storage"}},
                "version": {"number": page.version_number + 1},
            },
        )
        return self._parse_page(data)

    async def patch_test_rail_link(self, page_id: str, url: str) -> ReportPage:
        log.info("patch_test_rail_link", page_id=page_id, url=url)
        page = await self.get_page(page_id)
        body = page.body or ""

        if TESTRAIL_PLACEHOLDER not in body:
            log.warning("testrail_placeholder_missing", page_id=page_id)
            raise NotFoundError(
                f"Page {page_id} has no TestRail placeholder link",
                service=self.service,
            )

        return await self.update_page(page, body.replace(TESTRAIL_PLACEHOLDER, plan_link(url), 1))

    def _parse_page(self, data: dict[str, Any]) -> ReportPage:
        storage = ((data.get("body") or {}).get("storage") or {}).get("value")
        return ReportPage(
            id=str(data["id"]),
            title=data.get("title", ""),
            version_number=(data.get("version") or {}).get("number", 1),
            body=storage,
            space_key=(data.get("space") or {}).get("key"),
            raw=data,
        )

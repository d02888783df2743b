"""Template rendering for Confluence QA report pages."""

from release_automation.rendering.engine import TESTRAIL_PLACEHOLDER, ReportRenderer, plan_link

__all__ = ["ReportRenderer", "TESTRAIL_PLACEHOLDER", "plan_link"]

"""Sandboxed Jinja2 rendering for Confluence report pages.

Templates live in the package's ``templates`` directory and are rendered
with ``StrictUndefined`` so a missing variable fails instead of producing an
empty field on a published page. Values are HTML-escaped because the output
is Confluence storage format.
"""

from pathlib import Path
from typing import Any

from jinja2 import FileSystemLoader, StrictUndefined, TemplateError, select_autoescape
from jinja2.sandbox import SandboxedEnvironment

from release_automation.exceptions import ReleaseAutomationError

REPORT_TEMPLATE = "qa_report.html.j2"

# Literal anchor written into new report pages and later replaced with the
# TestRail plan URL. Must match templates/qa_report.html.j2 byte for byte.
TESTRAIL_PLACEHOLDER = '<a href="#">Link to TestRail Plan</a>'


def plan_link(url: str) -> str:
    return f'<a href="{url}">Link to TestRail Plan</a>'


class ReportRenderer:
    """Render report templates.

    Attributes:
        template_dir: Resolved path to the template directory.
        env: The SandboxedEnvironment instance.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        """Initialize renderer.

        Args:
            template_dir: Root directory for templates. If None, uses the
                package's built-in templates directory.

        Raises:
            ValueError: If template_dir doesn't exist or isn't a directory.
        """
        if template_dir is None:
            template_dir = Path(__file__).parent.parent / "templates"

        self.template_dir = template_dir.resolve()
        if not self.template_dir.is_dir():
            raise ValueError(f"Template directory does not exist: {self.template_dir}")

        self.env = SandboxedEnvironment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            autoescape=select_autoescape(["html", "j2"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        """Render a template.

        Raises:
            ReleaseAutomationError: If the template is missing or fails to render.
        """
        try:
            return self.env.get_template(template_name).render(**context)
        except TemplateError as e:
            raise ReleaseAutomationError(f"Failed to render {template_name}: {e}") from e

    def render_report(self, version: str, date: str) -> str:
        """Render the QA report page body for a release."""
        return self.render(REPORT_TEMPLATE, {"version": version, "release_date": date})

"""CLI entry point for release automation."""

import asyncio
import sys
from contextlib import AsyncExitStack
from pathlib import Path

import click
import structlog

from release_automation.config.settings import AutomationSettings
from release_automation.engine.orchestrator import ReleaseOrchestrator
from release_automation.exceptions import ConfigurationError, ReleaseAutomationError
from release_automation.models.results import ReleaseFailed, ReleaseOutcome, ReleaseProcessed, ReleaseSkipped
from release_automation.providers.factory import create_adapters, create_release_source
from release_automation.utils.logging_config import configure_logging

log = structlog.get_logger(__name__)

# (section title, [(variable, prompt label, default, secret)])
SETUP_FIELDS: list[tuple[str, list[tuple[str, str, str, bool]]]] = [
    (
        "GitHub",
        [
            ("GITHUB_TOKEN", "GitHub Token", "", True),
            ("GITHUB_OWNER", "GitHub Owner/Organization", "", False),
            ("GITHUB_REPO", "GitHub Repository", "", False),
        ],
    ),
    (
        "TestRail",
        [
            ("TESTRAIL_HOST", "TestRail Host", "https://your-instance.testrail.io", False),
            ("TESTRAIL_USERNAME", "TestRail Username", "", False),
            ("TESTRAIL_API_KEY", "TestRail API Key", "", True),
            ("TESTRAIL_PROJECT_ID", "TestRail Project ID", "1", False),
        ],
    ),
    (
        "Jira",
        [
            ("JIRA_HOST", "Jira Host", "https://your-domain.atlassian.net", False),
            ("JIRA_USERNAME", "Jira Username", "", False),
            ("JIRA_API_TOKEN", "Jira API Token", "", True),
            ("JIRA_PROJECT_KEY", "Jira Project Key", "", False),
        ],
    ),
    (
        "Confluence",
        [
            ("CONFLUENCE_HOST", "Confluence Host", "https://your-domain.atlassian.net", False),
            ("CONFLUENCE_USERNAME", "Confluence Username", "", False),
            ("CONFLUENCE_API_TOKEN", "Confluence API Token", "", True),
            ("CONFLUENCE_SPACE_KEY", "Confluence Space Key", "", False),
            ("CONFLUENCE_QA_PARENT_PAGE_ID", "Confluence QA Parent Page ID", "", False),
        ],
    ),
]


@click.group()
@click.option("--config", default=None, help="Path to a YAML configuration file (default: environment)")
@click.option("--env-file", default=".env", show_default=True, help="Path to the .env file")
@click.option("--log-level", default="INFO", help="Logging level")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON lines")
@click.pass_context
def cli(ctx: click.Context, config: str | None, env_file: str, log_level: str, json_logs: bool) -> None:
    """release-automation: QA checklist automation for GitHub releases."""
    configure_logging(log_level, json_output=json_logs)
    ctx.obj = {"config": config, "env_file": env_file}


def _load_settings(ctx: click.Context) -> AutomationSettings:
    """Load settings for a command, exiting with status 1 if they are invalid."""
    config = ctx.obj["config"]
    try:
        if config:
            return AutomationSettings.from_yaml(config)
        return AutomationSettings.from_env(ctx.obj["env_file"])
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        log.debug("config_error", exc_info=True)
        sys.exit(1)


@cli.command()
@click.option("--release-tag", "-r", default=None, help="Process a specific release by tag")
@click.option(
    "--check-interval",
    "-i",
    type=click.IntRange(min=0),
    default=0,
    help="Minutes between checks for new releases (0 for a one-time check)",
)
@click.pass_context
def run(ctx: click.Context, release_tag: str | None, check_interval: int) -> None:
    """Process a release, or the latest one if it is new."""
    settings = _load_settings(ctx)
    try:
        if check_interval > 0:
            asyncio.run(_daemon_mode(settings, release_tag, check_interval))
            return

        outcome = asyncio.run(_process_once(settings, release_tag))
    except ReleaseAutomationError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("run_error", exc_info=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        log.error("run_unexpected", exc_info=True)
        sys.exit(1)

    if isinstance(outcome, ReleaseFailed):
        sys.exit(1)


@cli.command()
@click.option("--limit", type=click.IntRange(min=1), default=10, show_default=True, help="Number of releases")
@click.pass_context
def releases(ctx: click.Context, limit: int) -> None:
    """List recent releases and whether each is new."""
    settings = _load_settings(ctx)
    try:
        asyncio.run(_list_releases(settings, limit))
    except ReleaseAutomationError as e:
        click.echo(f"Error: {e}", err=True)
        log.debug("list_releases_error", exc_info=True)
        sys.exit(1)


@cli.command()
@click.pass_context
def setup(ctx: click.Context) -> None:
    """Create a .env file interactively."""
    env_path = Path(ctx.obj["env_file"])

    click.echo("Welcome to the release automation setup!")
    click.echo("This will create your .env file with the required configuration.")
    click.echo("Press Enter to use the default values (shown in brackets).")

    if env_path.exists() and not click.confirm(f"\n{env_path} already exists. Overwrite?", default=False):
        click.echo("Setup cancelled. Existing .env file was not modified.")
        return

    values: dict[str, str] = {}
    for title, fields in SETUP_FIELDS:
        click.echo()
        click.echo(click.style(f"--- {title} Configuration ---", bold=True))
        for name, label, default, secret in fields:
            values[name] = click.prompt(
                label,
                default=default,
                show_default=bool(default),
                hide_input=secret,
            )

    env_path.write_text(render_env_file(values))
    click.echo(f"\n{env_path} has been created successfully!")
    click.echo(f"You can edit it manually at {env_path.resolve()} if needed.")


@cli.command(name="check-config")
@click.pass_context
def check_config(ctx: click.Context) -> None:
    """Validate configuration and print a summary with secrets masked."""
    settings = _load_settings(ctx)

    click.echo(click.style("Configuration OK", fg="green", bold=True))
    for section, config in settings:
        click.echo()
        click.echo(click.style(f"  {section}:", bold=True))
        for field, value in config:
            click.echo(f"    {field}: {value}")


def render_env_file(values: dict[str, str]) -> str:
    """Render ``values`` as .env content grouped by service."""
    blocks = []
    for title, fields in SETUP_FIELDS:
        lines = [f"# {title} Configuration"]
        lines.extend(f"{name}={values.get(name, '')}" for name, _, _, _ in fields)
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"


def _report(outcome: ReleaseOutcome) -> None:
    match outcome:
        case ReleaseProcessed():
            log.info("release_outcome", **outcome.to_dict())
            click.echo(f"Successfully processed release {outcome.version}")
            click.echo(f"  TestRail Plan ID: {outcome.test_plan_id}")
            click.echo(f"  Test Cases Created: {outcome.test_cases_count}")
            click.echo(f"  Confluence Report Page ID: {outcome.report_page_id}")
        case ReleaseSkipped():
            log.info("release_outcome", tag=outcome.tag_name, **outcome.to_dict())
            click.echo(f"No new release to process: {outcome.message}")
        case ReleaseFailed():
            click.echo(f"Error: {outcome.message}", err=True)
            if outcome.step:
                click.echo(f"  Failed during step: {outcome.step}", err=True)


async def _process_once(settings: AutomationSettings, tag: str | None) -> ReleaseOutcome:
    """Run the orchestrator once.

    Args:
        settings: Automation settings
        tag: Release tag, or None for the latest release
    """
    log.info("processing_release_requested", tag=tag)

    adapters = create_adapters(settings)
    async with AsyncExitStack() as stack:
        await adapters.connect(stack)
        orchestrator = ReleaseOrchestrator(adapters.releases, adapters.issues, adapters.test_cases, adapters.docs)
        outcome = await orchestrator.run(tag)

    _report(outcome)
    return outcome


async def _daemon_mode(settings: AutomationSettings, tag: str | None, interval: int) -> None:
    """Run once, then check for a new latest release every ``interval`` minutes.

    A requested tag only applies to the first run. Failures are logged and
    the next check happens on schedule.

    Args:
        settings: Automation settings
        tag: Release tag for the first run, or None
        interval: Minutes between checks
    """
    log.info("daemon_mode_started", interval_minutes=interval)
    click.echo(f"Checking for new releases every {interval} minute(s)")

    adapters = create_adapters(settings)
    async with AsyncExitStack() as stack:
        await adapters.connect(stack)
        orchestrator = ReleaseOrchestrator(adapters.releases, adapters.issues, adapters.test_cases, adapters.docs)

        while True:
            try:
                _report(await orchestrator.run(tag))
            except Exception as e:
                log.error("daemon_error_unexpected", error=str(e), exc_info=True)
                click.echo(f"Unexpected error: {e}", err=True)

            tag = None
            await asyncio.sleep(interval * 60)
            log.info("checking_for_new_releases")


async def _list_releases(settings: AutomationSettings, limit: int) -> None:
    source = create_release_source(settings)
    async with source:
        items = await source.list_releases(limit)

    if not items:
        click.echo("No releases found")
        return

    for release in items:
        marker = click.style("new", fg="green") if source.is_new(release) else "   "
        click.echo(f"{marker}  {release.tag_name:<20} {release.created_at:%Y-%m-%d %H:%M}  {release.name or ''}")

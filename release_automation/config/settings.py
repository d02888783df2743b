"""
Configuration system using Pydantic for type-safe settings management.

Settings are built once at process start and passed explicitly into each
adapter's constructor. Two sources are supported:

- Environment variables (optionally read from a ``.env`` file), using the
  ``GITHUB_*``, ``TESTRAIL_*``, ``JIRA_*`` and ``CONFLUENCE_*`` names.
- A YAML file with ``${VAR}`` / ``${VAR:-default}`` interpolation.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import AfterValidator, BaseModel, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from release_automation.exceptions import ConfigurationError


def _normalize_host(value: str) -> str:
    value = value.strip().rstrip("/")
    if not value:
        raise ValueError("must not be empty")
    if not value.startswith(("http://", "https://")):
        value = f"https://{value}"
    return value


def _require_secret(value: SecretStr) -> SecretStr:
    if not value.get_secret_value().strip():
        raise ValueError("must not be empty")
    return value


Host = Annotated[str, AfterValidator(_normalize_host)]
Secret = Annotated[SecretStr, AfterValidator(_require_secret)]
ContextPath = Annotated[str, AfterValidator(lambda value: value.rstrip("/"))]


class GitHubConfig(BaseModel):
    """GitHub repository whose releases are watched."""

    token: Secret = Field(..., description="Personal access token")
    owner: str = Field(..., min_length=1, description="Repository owner/organization")
    repo: str = Field(..., min_length=1, description="Repository name")
    base_url: Host = Field(default="https://api.github.com", description="API base URL (GitHub Enterprise)")


class TestRailConfig(BaseModel):
    """TestRail instance and project receiving plans and cases."""

    __test__ = False

    host: Host = Field(..., description="TestRail URL, e.g. https://example.testrail.io")
    username: str = Field(..., min_length=1, description="TestRail user email")
    api_key: Secret = Field(..., description="TestRail API key")
    project_id: int = Field(..., ge=1, description="TestRail project ID")


class JiraConfig(BaseModel):
    """Jira Cloud project holding release versions and issues."""

    host: Host = Field(..., description="Jira URL, e.g. https://example.atlassian.net")
    username: str = Field(..., min_length=1, description="Jira user email")
    api_token: Secret = Field(..., description="Atlassian API token")
    project_key: str = Field(..., min_length=1, description="Jira project key, e.g. PROJ")
    max_results: int = Field(default=1000, ge=1, le=5000, description="Issue search page cap")


class ConfluenceConfig(BaseModel):
    """Confluence space where QA report pages are published."""

    host: Host = Field(..., description="Confluence URL, e.g. https://example.atlassian.net")
    username: str = Field(..., min_length=1, description="Confluence user email")
    api_token: Secret = Field(..., description="Atlassian API token")
    space_key: str = Field(..., min_length=1, description="Space key for report pages")
    qa_parent_page_id: str = Field(..., min_length=1, description="Parent page ID for report pages")
    context_path: ContextPath = Field(default="/wiki", description="Context path ('/wiki' on Cloud, '' on Server)")


# The *Env variants read the same fields from prefixed environment variables.
# Blank variables count as unset so they are reported as missing.


class GitHubEnv(BaseSettings, GitHubConfig):
    model_config = SettingsConfigDict(env_prefix="GITHUB_", env_ignore_empty=True, extra="ignore")


class TestRailEnv(BaseSettings, TestRailConfig):
    __test__ = False

    model_config = SettingsConfigDict(env_prefix="TESTRAIL_", env_ignore_empty=True, extra="ignore")


class JiraEnv(BaseSettings, JiraConfig):
    model_config = SettingsConfigDict(env_prefix="JIRA_", env_ignore_empty=True, extra="ignore")


class ConfluenceEnv(BaseSettings, ConfluenceConfig):
    model_config = SettingsConfigDict(env_prefix="CONFLUENCE_", env_ignore_empty=True, extra="ignore")


# Section name -> (YAML model, environment model, environment prefix)
SECTIONS: dict[str, tuple[type[BaseModel], type[BaseSettings], str]] = {
    "github": (GitHubConfig, GitHubEnv, "GITHUB_"),
    "testrail": (TestRailConfig, TestRailEnv, "TESTRAIL_"),
    "jira": (JiraConfig, JiraEnv, "JIRA_"),
    "confluence": (ConfluenceConfig, ConfluenceEnv, "CONFLUENCE_"),
}


class AutomationSettings(BaseModel):
    """Complete settings for one release-automation process."""

    github: GitHubConfig
    testrail: TestRailConfig
    jira: JiraConfig
    confluence: ConfluenceConfig

    @classmethod
    def from_env(cls, env_file: str | Path | None = ".env") -> AutomationSettings:
        """Load settings from environment variables.

        Values in ``env_file`` are used when the file exists; real environment
        variables take precedence over it.

        Raises:
            ConfigurationError: Listing every missing or invalid variable
        """
        if env_file is not None and not Path(env_file).exists():
            env_file = None

        sections: dict[str, Any] = {}
        missing: list[str] = []
        invalid: list[str] = []

        for name, (_, env_cls, prefix) in SECTIONS.items():
            try:
                sections[name] = env_cls(_env_file=env_file)  # type: ignore[call-arg]
            except ValidationError as e:
                for error in e.errors():
                    var = f"{prefix}{str(error['loc'][0]).upper()}"
                    if error["type"] == "missing":
                        missing.append(var)
                    else:
                        invalid.append(f"{var}: {error['msg']}")

        if missing or invalid:
            parts = []
            if missing:
                parts.append(f"Missing required environment variables: {', '.join(missing)}")
            if invalid:
                parts.append(f"Invalid environment variables: {'; '.join(invalid)}")
            raise ConfigurationError(". ".join(parts), missing=missing)

        return cls(**sections)

    @classmethod
    def from_yaml(cls, config_path: str) -> AutomationSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} syntax for environment variable substitution.

        Raises:
            ConfigurationError: If config file is invalid or missing required fields
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            # Plain models: only the YAML values apply, never the environment.
            sections = {
                name: config_cls.model_validate(config_dict.get(name) or {})
                for name, (config_cls, _, _) in SECTIONS.items()
            }
            return cls(**sections)
        except ValidationError as e:
            raise ConfigurationError(f"Missing or invalid configuration fields: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        Supports two syntaxes:
        - ${VAR_NAME} - Required environment variable (raises if not set)
        - ${VAR_NAME:-default} - Optional with default value

        YAML comment lines are left unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))

"""Configuration system for release automation.

Key Components:
    - AutomationSettings: Container for the four service sections, loaded
      from environment variables or a YAML file
    - GitHubConfig, TestRailConfig, JiraConfig, ConfluenceConfig: Per-service
      settings; the *Env subclasses read them from prefixed environment
      variables

Example:
    >>> from release_automation.config import AutomationSettings
    >>> settings = AutomationSettings.from_env(".env")
    >>> settings.jira.project_key
    'PROJ'
"""

from release_automation.config.settings import (
    AutomationSettings,
    ConfluenceConfig,
    GitHubConfig,
    JiraConfig,
    TestRailConfig,
)

__all__ = [
    "AutomationSettings",
    "ConfluenceConfig",
    "GitHubConfig",
    "JiraConfig",
    "TestRailConfig",
]

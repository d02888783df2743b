"""QA release checklist automation across GitHub, Jira, TestRail and Confluence."""

__version__ = "0.1.0"

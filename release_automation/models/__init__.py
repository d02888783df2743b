"""Domain and result models for release-automation."""

from release_automation.models.domain import (
    Issue,
    PlanEntry,
    Release,
    ReportPage,
    Section,
    Suite,
    TestCase,
    TestCaseFields,
    TestPlan,
    Version,
)
from release_automation.models.results import (
    ReleaseFailed,
    ReleaseOutcome,
    ReleaseProcessed,
    ReleaseSkipped,
)

__all__ = [
    "Issue",
    "PlanEntry",
    "Release",
    "ReleaseFailed",
    "ReleaseOutcome",
    "ReleaseProcessed",
    "ReleaseSkipped",
    "ReportPage",
    "Section",
    "Suite",
    "TestCase",
    "TestCaseFields",
    "TestPlan",
    "Version",
]

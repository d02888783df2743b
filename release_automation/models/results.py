"""
Outcome types returned by the release orchestrator.

A run ends in exactly one of three variants:

- ``ReleaseProcessed``: every step completed.
- ``ReleaseSkipped``: the latest release is not new; nothing was touched.
- ``ReleaseFailed``: a step raised; carries the error kind and message.

Callers pattern-match on the variant instead of catching exceptions::

    match await orchestrator.run(tag):
        case ReleaseProcessed(version=version):
            ...
        case ReleaseSkipped(message=message):
            ...
        case ReleaseFailed(kind=kind, message=message):
            ...

``to_dict`` produces the flat ``{"success": ..., ...}`` shape used in logs
and CLI output.
"""

from dataclasses import dataclass
from typing import Any

NOT_NEW_MESSAGE = "Release is not new"


@dataclass(frozen=True)
class ReleaseProcessed:
    version: str
    test_plan_id: int
    test_cases_count: int
    report_page_id: str

    success = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "version": self.version,
            "testPlanId": self.test_plan_id,
            "testCasesCount": self.test_cases_count,
            "reportPageId": self.report_page_id,
        }


@dataclass(frozen=True)
class ReleaseSkipped:
    tag_name: str | None = None
    message: str = NOT_NEW_MESSAGE

    success = False

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "message": self.message}


@dataclass(frozen=True)
class ReleaseFailed:
    kind: str
    """Exception class name, e.g. ``UpstreamError``."""

    message: str
    step: str | None = None

    success = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": False, "error": self.kind, "message": self.message}
        if self.step:
            data["step"] = self.step
        return data


ReleaseOutcome = ReleaseProcessed | ReleaseSkipped | ReleaseFailed

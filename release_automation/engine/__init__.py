"""Release orchestration engine.

Key Components:
    - ReleaseOrchestrator: Runs the release-to-QA-artifacts pipeline and
      reports a ReleaseProcessed, ReleaseSkipped or ReleaseFailed outcome
"""

from release_automation.engine.orchestrator import ReleaseOrchestrator

__all__ = ["ReleaseOrchestrator"]

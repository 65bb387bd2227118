"""Exception hierarchy for hakbuild.

The runner and stager raise these internally and convert them into
StageOutcome values at their boundary, so the orchestrator only ever sees
typed outcomes. StageFailedError is the exception form of a failed pipeline
for callers that prefer to raise.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import StageOutcome


class HakBuildError(Exception):
    """Base class for all hakbuild errors."""

    pass


class ToolLaunchError(HakBuildError):
    """Raised when an external executable cannot be found or started."""

    def __init__(self, executable: str, reason: str):
        self.executable = executable
        self.reason = reason
        super().__init__(f"Could not launch {executable}: {reason}")


class ArtifactStagingError(HakBuildError):
    """Raised when a build output cannot be copied into the dependency prefix."""

    def __init__(self, source: Path, destination: Path, reason: str):
        self.source = source
        self.destination = destination
        self.reason = reason
        super().__init__(f"Could not stage {source} -> {destination}: {reason}")


class StageFailedError(HakBuildError):
    """Raised by PipelineResult.raise_for_failure() when a stage failed."""

    def __init__(self, stage_name: str, outcome: "StageOutcome", stage_index: Optional[int] = None):
        self.stage_name = stage_name
        self.outcome = outcome
        self.stage_index = stage_index
        super().__init__(f"Stage '{stage_name}' failed: {outcome.describe()}")

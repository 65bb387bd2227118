"""Data models for the native dependency build pipeline.

Defines the core dataclasses used throughout the pipeline:
- BuildStage: One external-tool invocation (pure description, no side effects)
- StagedArtifact: A build output copied into the dependency prefix
- StagePlan: A named pipeline stage (sub-invocations plus artifacts to stage)
- StageOutcome: Terminal result of running a stage
- PipelineState / PipelineResult: Pipeline-level state and aggregated result
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .errors import StageFailedError


class FailureKind(Enum):
    """Why a stage failed."""

    NON_ZERO_EXIT = "non_zero_exit"
    LAUNCH_FAILURE = "launch_failure"
    ARTIFACT_STAGING = "artifact_staging"


class PipelineState(Enum):
    """State of the pipeline as a whole."""

    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class BuildStage:
    """A single external-tool invocation.

    Attributes:
        executable: Executable name (resolved on PATH) or absolute path
        args: Ordered argument list, not including the executable
        cwd: Working directory for the process
        env_overrides: Stage-specific environment entries
        create_cwd: Create the working directory before launching
    """

    executable: str
    args: tuple[str, ...]
    cwd: Path
    env_overrides: Mapping[str, str] = field(default_factory=dict)
    create_cwd: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "env_overrides", MappingProxyType(dict(self.env_overrides)))

    @property
    def command(self) -> list[str]:
        """Full command line as passed to the process."""
        return [self.executable, *self.args]

    def describe(self) -> str:
        return " ".join(self.command)


@dataclass(frozen=True)
class StagedArtifact:
    """A (source, destination) pair copied between stages."""

    source: Path
    destination: Path


@dataclass(frozen=True)
class StagePlan:
    """A named pipeline stage.

    The steps run in order; the artifacts are staged only after every step
    has succeeded.
    """

    name: str
    steps: tuple[BuildStage, ...]
    artifacts: tuple[StagedArtifact, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))
        object.__setattr__(self, "artifacts", tuple(self.artifacts))


@dataclass(frozen=True)
class StageOutcome:
    """Terminal result of a stage: success, or a failure of a given kind.

    Attributes:
        success: True if the stage completed
        kind: Failure kind (None on success)
        exit_code: Process exit code for NON_ZERO_EXIT failures
        detail: Human-readable detail for launch/staging failures
    """

    success: bool
    kind: Optional[FailureKind] = None
    exit_code: Optional[int] = None
    detail: str = ""

    @classmethod
    def ok(cls) -> "StageOutcome":
        return cls(success=True)

    @classmethod
    def non_zero_exit(cls, exit_code: int) -> "StageOutcome":
        return cls(success=False, kind=FailureKind.NON_ZERO_EXIT, exit_code=exit_code)

    @classmethod
    def launch_failure(cls, detail: str) -> "StageOutcome":
        return cls(success=False, kind=FailureKind.LAUNCH_FAILURE, detail=detail)

    @classmethod
    def staging_failure(cls, detail: str) -> "StageOutcome":
        return cls(success=False, kind=FailureKind.ARTIFACT_STAGING, detail=detail)

    def describe(self) -> str:
        """Short description for logs and summaries."""
        if self.success:
            return "ok"
        if self.kind == FailureKind.NON_ZERO_EXIT:
            return f"exited with code {self.exit_code}"
        if self.kind == FailureKind.LAUNCH_FAILURE:
            return f"could not launch tool ({self.detail})"
        return f"artifact staging failed ({self.detail})"


SUCCESS = StageOutcome.ok()


@dataclass
class PipelineResult:
    """Aggregated result of running the full pipeline.

    Attributes:
        state: SUCCEEDED or FAILED
        stage_names: Names of all stages in the selected sequence
        completed: Names of stages that completed successfully, in order
        failed_stage: Name of the stage that failed (None on success)
        failed_index: 0-based index of the failed stage (None on success)
        outcome: The failing stage's outcome, or SUCCESS
        total_elapsed: Total wall-clock time in seconds
    """

    state: PipelineState
    stage_names: list[str]
    completed: list[str] = field(default_factory=list)
    failed_stage: Optional[str] = None
    failed_index: Optional[int] = None
    outcome: StageOutcome = SUCCESS
    total_elapsed: float = 0.0

    @property
    def success(self) -> bool:
        return self.state == PipelineState.SUCCEEDED

    @property
    def exit_code(self) -> Optional[int]:
        """Exit code of the failing process, if the failure was a nonzero exit."""
        return self.outcome.exit_code

    def raise_for_failure(self) -> None:
        """Raise StageFailedError if the pipeline failed."""
        if not self.success:
            raise StageFailedError(self.failed_stage or "<unknown>", self.outcome, self.failed_index)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "state": self.state.value,
            "stage_names": list(self.stage_names),
            "completed": list(self.completed),
            "failed_stage": self.failed_stage,
            "failed_index": self.failed_index,
            "failure_kind": self.outcome.kind.value if self.outcome.kind else None,
            "exit_code": self.outcome.exit_code,
            "detail": self.outcome.detail,
            "total_elapsed": self.total_elapsed,
        }

"""Progress callback protocol for the build pipeline.

Defines the interface the orchestrator uses to report stage lifecycle
events (Idle -> Running(i) -> Running(i+1) ... -> Succeeded | Failed).
"""

from typing import Protocol, runtime_checkable

from .models import PipelineState, StageOutcome
from .output import log_error, log_phase, log_success


@runtime_checkable
class PipelineCallback(Protocol):
    """Protocol for receiving pipeline state transitions."""

    def on_stage_start(self, index: int, total: int, stage_name: str) -> None:
        """Called before stage `index` (0-based) starts."""
        ...

    def on_stage_end(self, index: int, total: int, stage_name: str, outcome: StageOutcome) -> None:
        """Called when stage `index` reaches a terminal outcome."""
        ...

    def on_pipeline_end(self, state: PipelineState, elapsed: float) -> None:
        """Called once when the pipeline reaches SUCCEEDED or FAILED."""
        ...


class NullCallback:
    """No-op callback for tests and embedding callers."""

    def on_stage_start(self, index: int, total: int, stage_name: str) -> None:
        pass

    def on_stage_end(self, index: int, total: int, stage_name: str, outcome: StageOutcome) -> None:
        pass

    def on_pipeline_end(self, state: PipelineState, elapsed: float) -> None:
        pass


class ConsoleCallback:
    """Prints timestamped [N/M] phase lines around each stage."""

    def on_stage_start(self, index: int, total: int, stage_name: str) -> None:
        log_phase(index + 1, total, f"{stage_name}...")

    def on_stage_end(self, index: int, total: int, stage_name: str, outcome: StageOutcome) -> None:
        if not outcome.success:
            log_error(f"{stage_name} {outcome.describe()}")

    def on_pipeline_end(self, state: PipelineState, elapsed: float) -> None:
        if state == PipelineState.SUCCEEDED:
            log_success(f"Native build succeeded in {elapsed:.2f}s")
        else:
            log_error(f"Native build failed after {elapsed:.2f}s")

"""
Build orchestration for the native dependency pipeline.

The stage sequence is chosen once, from the platform alone, out of a closed
set of variants:

    PipelineVariant.WINDOWS: build-openssl, build-sqlcipher-windows, build-module
    PipelineVariant.UNIX:    build-sqlcipher-unix, build-module

Stages then run strictly in order through a StageRunner. Within a stage the
sub-invocations run in order, then any artifacts are staged. The first
failure of any kind (nonzero exit, launch failure, staging failure) ends the
pipeline and is returned unchanged; no later stage or step is started.
"""

import logging
import time
from concurrent.futures import Executor, Future
from enum import Enum
from typing import Callable, Optional

from .callbacks import ConsoleCallback, PipelineCallback
from .environment import EnvironmentComposer
from .layout import ModuleLayout
from .models import SUCCESS, PipelineResult, PipelineState, StageOutcome, StagePlan
from .output import TimedLogger, log_detail
from .platform_env import PlatformEnvironment
from .runner import ProcessStageRunner, StageRunner
from .stager import ArtifactStager
from .stages import (
    build_module,
    build_openssl,
    build_sqlcipher_unix,
    build_sqlcipher_windows,
)

logger = logging.getLogger(__name__)

StageDefinition = Callable[[PlatformEnvironment, ModuleLayout], StagePlan]


class PipelineVariant(Enum):
    """Platform-tagged stage sequences."""

    WINDOWS = "windows"
    UNIX = "unix"

    @classmethod
    def for_platform(cls, platform: PlatformEnvironment) -> "PipelineVariant":
        return cls.WINDOWS if platform.is_windows() else cls.UNIX


STAGE_SEQUENCES: dict[PipelineVariant, tuple[StageDefinition, ...]] = {
    PipelineVariant.WINDOWS: (build_openssl, build_sqlcipher_windows, build_module),
    PipelineVariant.UNIX: (build_sqlcipher_unix, build_module),
}


def select_stages(platform: PlatformEnvironment, layout: ModuleLayout) -> tuple[StagePlan, ...]:
    """Build the ordered stage plans for this platform."""
    variant = PipelineVariant.for_platform(platform)
    return tuple(definition(platform, layout) for definition in STAGE_SEQUENCES[variant])


class BuildPipeline:
    """
    Drives the selected stage sequence for one platform and layout.

    The stage list is fixed at construction and never recomputed.

    Args:
        platform: Host platform facts
        layout: Module filesystem layout
        runner: Executes one tool invocation (defaults to ProcessStageRunner)
        stager: Copies artifacts after a stage's tools succeed
        callback: Receives stage lifecycle events
        composer: Builds each step's environment
    """

    def __init__(
        self,
        platform: PlatformEnvironment,
        layout: ModuleLayout,
        runner: Optional[StageRunner] = None,
        stager: Optional[ArtifactStager] = None,
        callback: Optional[PipelineCallback] = None,
        composer: Optional[EnvironmentComposer] = None,
    ):
        self.platform = platform
        self.layout = layout
        self.runner = runner if runner is not None else ProcessStageRunner()
        self.stager = stager if stager is not None else ArtifactStager()
        self.callback = callback if callback is not None else ConsoleCallback()
        self.composer = composer if composer is not None else EnvironmentComposer(platform)
        self.variant = PipelineVariant.for_platform(platform)
        self.stages = select_stages(platform, layout)
        self.state = PipelineState.IDLE

    @property
    def stage_names(self) -> list[str]:
        return [stage.name for stage in self.stages]

    def run(self) -> PipelineResult:
        """Run every stage in order, stopping at the first failure."""
        start_time = time.monotonic()
        total = len(self.stages)
        completed: list[str] = []
        logger.info("Building %s (%s) with %d stages", self.layout.module_build_dir, self.variant.value, total)

        for index, stage in enumerate(self.stages):
            self.state = PipelineState.RUNNING
            self.callback.on_stage_start(index, total, stage.name)
            outcome = self._run_stage(stage)
            self.callback.on_stage_end(index, total, stage.name, outcome)

            if not outcome.success:
                return self._finish(
                    PipelineState.FAILED,
                    start_time,
                    completed,
                    failed_stage=stage.name,
                    failed_index=index,
                    outcome=outcome,
                )
            completed.append(stage.name)

        return self._finish(PipelineState.SUCCEEDED, start_time, completed)

    def submit(self, executor: Executor) -> "Future[PipelineResult]":
        """Run the pipeline on `executor` and return a Future for its result."""
        return executor.submit(self.run)

    def _run_stage(self, stage: StagePlan) -> StageOutcome:
        for step in stage.steps:
            if step.create_cwd:
                try:
                    step.cwd.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    return StageOutcome.launch_failure(f"Could not create {step.cwd}: {e}")
            log_detail(f"$ {step.describe()}", verbose_only=True)
            env = self.composer.for_stage(step)
            outcome = self.runner.run(step.executable, list(step.args), step.cwd, env)
            if not outcome.success:
                return outcome

        if stage.artifacts:
            with TimedLogger(f"Staging {len(stage.artifacts)} artifacts", verbose_only=True):
                return self.stager.stage(stage.artifacts)
        return SUCCESS

    def _finish(
        self,
        state: PipelineState,
        start_time: float,
        completed: list[str],
        failed_stage: Optional[str] = None,
        failed_index: Optional[int] = None,
        outcome: StageOutcome = SUCCESS,
    ) -> PipelineResult:
        self.state = state
        elapsed = time.monotonic() - start_time
        self.callback.on_pipeline_end(state, elapsed)
        return PipelineResult(
            state=state,
            stage_names=self.stage_names,
            completed=completed,
            failed_stage=failed_stage,
            failed_index=failed_index,
            outcome=outcome,
            total_elapsed=elapsed,
        )


def build_native_module(
    platform: PlatformEnvironment,
    layout: ModuleLayout,
    runner: Optional[StageRunner] = None,
    stager: Optional[ArtifactStager] = None,
    callback: Optional[PipelineCallback] = None,
) -> PipelineResult:
    """Compile the vendored dependencies and build the native module.

    This is the entry point used by the enclosing packaging tool.

    Returns:
        PipelineResult: SUCCEEDED, or FAILED carrying the first failing
        stage's outcome (exit code, launch failure or staging failure)
    """
    pipeline = BuildPipeline(platform, layout, runner=runner, stager=stager, callback=callback)
    return pipeline.run()

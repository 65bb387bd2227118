"""Tests for pipeline data models."""

from pathlib import Path

import pytest

from hakbuild.errors import StageFailedError
from hakbuild.models import (
    SUCCESS,
    BuildStage,
    FailureKind,
    PipelineResult,
    PipelineState,
    StageOutcome,
    StagePlan,
)


class TestBuildStage:
    def test_args_and_overrides_are_frozen(self):
        overrides = {"LTLIBS": "libcrypto.lib"}
        stage = BuildStage("nmake", ["build_libs"], Path("/src"), env_overrides=overrides)
        overrides["LTLIBS"] = "changed"

        assert stage.args == ("build_libs",)
        assert stage.env_overrides["LTLIBS"] == "libcrypto.lib"
        with pytest.raises(TypeError):
            stage.env_overrides["X"] = "1"  # type: ignore[index]

    def test_command_and_describe(self):
        stage = BuildStage("make", ("install",), Path("/src"))
        assert stage.command == ["make", "install"]
        assert stage.describe() == "make install"
        assert not stage.create_cwd

    def test_stage_plan_normalizes_sequences(self):
        plan = StagePlan("build-module", [BuildStage("neon", ("build",), Path("/b"))])
        assert isinstance(plan.steps, tuple)
        assert plan.artifacts == ()


class TestStageOutcome:
    def test_success(self):
        assert SUCCESS.success
        assert SUCCESS.kind is None
        assert SUCCESS.describe() == "ok"

    def test_non_zero_exit(self):
        outcome = StageOutcome.non_zero_exit(2)
        assert not outcome.success
        assert outcome.kind == FailureKind.NON_ZERO_EXIT
        assert outcome.exit_code == 2
        assert outcome.describe() == "exited with code 2"

    def test_launch_failure(self):
        outcome = StageOutcome.launch_failure("Could not launch perl: not found on PATH")
        assert outcome.kind == FailureKind.LAUNCH_FAILURE
        assert outcome.exit_code is None
        assert "perl" in outcome.describe()

    def test_staging_failure(self):
        outcome = StageOutcome.staging_failure("source file does not exist")
        assert outcome.kind == FailureKind.ARTIFACT_STAGING
        assert outcome.describe().startswith("artifact staging failed")


class TestPipelineResult:
    @pytest.fixture
    def failed(self):
        return PipelineResult(
            state=PipelineState.FAILED,
            stage_names=["build-sqlcipher-unix", "build-module"],
            completed=["build-sqlcipher-unix"],
            failed_stage="build-module",
            failed_index=1,
            outcome=StageOutcome.non_zero_exit(101),
            total_elapsed=12.5,
        )

    def test_failed_result(self, failed):
        assert not failed.success
        assert failed.exit_code == 101

    def test_raise_for_failure(self, failed):
        with pytest.raises(StageFailedError) as exc_info:
            failed.raise_for_failure()
        err = exc_info.value
        assert err.stage_name == "build-module"
        assert err.stage_index == 1
        assert err.outcome.exit_code == 101
        assert "exited with code 101" in str(err)

    def test_success_does_not_raise(self):
        result = PipelineResult(state=PipelineState.SUCCEEDED, stage_names=["build-module"], completed=["build-module"])
        result.raise_for_failure()
        assert result.success
        assert result.exit_code is None

    def test_to_dict(self, failed):
        data = failed.to_dict()
        assert data == {
            "state": "failed",
            "stage_names": ["build-sqlcipher-unix", "build-module"],
            "completed": ["build-sqlcipher-unix"],
            "failed_stage": "build-module",
            "failed_index": 1,
            "failure_kind": "non_zero_exit",
            "exit_code": 101,
            "detail": "",
            "total_elapsed": 12.5,
        }

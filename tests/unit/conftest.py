"""Shared fixtures for hakbuild unit tests."""

from pathlib import Path
from typing import Mapping, Optional

import pytest

from hakbuild.layout import ModuleLayout
from hakbuild.models import SUCCESS, PipelineState, StageOutcome
from hakbuild.platform_env import OsFamily, PlatformEnvironment

# ─── Helpers ──────────────────────────────────────────────────────────────────


class FakeRunner:
    """Records every invocation and returns injected outcomes.

    Args:
        outcomes: Outcome to return for a given 0-based invocation index;
                  every other invocation succeeds.
    """

    def __init__(self, outcomes: Optional[dict[int, StageOutcome]] = None) -> None:
        self.outcomes = outcomes or {}
        self.calls: list[tuple[str, list[str], Path, dict[str, str]]] = []

    def run(self, executable: str, args: list[str], cwd: Path, env: Mapping[str, str]) -> StageOutcome:
        index = len(self.calls)
        self.calls.append((executable, list(args), cwd, dict(env)))
        return self.outcomes.get(index, SUCCESS)

    @property
    def executables(self) -> list[str]:
        return [Path(call[0]).name for call in self.calls]

    def env_for(self, executable_name: str) -> dict[str, str]:
        for executable, _args, _cwd, env in self.calls:
            if Path(executable).name == executable_name:
                return env
        raise AssertionError(f"{executable_name} was never invoked")


class RecordingStager:
    """Stager that records artifact batches and returns a fixed outcome."""

    def __init__(self, outcome: StageOutcome = SUCCESS) -> None:
        self.outcome = outcome
        self.batches: list[list] = []

    def stage(self, artifacts) -> StageOutcome:
        self.batches.append(list(artifacts))
        return self.outcome


class RecordingCallback:
    """Callback that records stage lifecycle events."""

    def __init__(self) -> None:
        self.started: list[str] = []
        self.ended: list[tuple[str, StageOutcome]] = []
        self.final_state: Optional[PipelineState] = None

    def on_stage_start(self, index: int, total: int, stage_name: str) -> None:
        self.started.append(stage_name)

    def on_stage_end(self, index: int, total: int, stage_name: str, outcome: StageOutcome) -> None:
        self.ended.append((stage_name, outcome))

    def on_pipeline_end(self, state: PipelineState, elapsed: float) -> None:
        self.final_state = state


# ─── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def layout(tmp_path: Path) -> ModuleLayout:
    return ModuleLayout.for_module(tmp_path / ".hak", "matrix-seshat")


@pytest.fixture
def windows_platform() -> PlatformEnvironment:
    return PlatformEnvironment(os_family=OsFamily.WINDOWS, architecture="x64", target_version="8.2.0")


@pytest.fixture
def mac_platform() -> PlatformEnvironment:
    return PlatformEnvironment(os_family=OsFamily.MACOS, architecture="x64", target_version="8.2.0")


@pytest.fixture
def linux_platform() -> PlatformEnvironment:
    return PlatformEnvironment(os_family=OsFamily.OTHER_UNIX, architecture="x64", target_version="8.2.0")


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def recording_stager() -> RecordingStager:
    return RecordingStager()


@pytest.fixture
def recording_callback() -> RecordingCallback:
    return RecordingCallback()

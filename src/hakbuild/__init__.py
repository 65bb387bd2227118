"""
hakbuild - platform-conditional native dependency build pipeline.

Compiles vendored native dependencies (OpenSSL on Windows, SQLCipher
everywhere) into a dependency prefix, then builds the native module against
them.

Public API:
    build_native_module: Entry point taking a PlatformEnvironment and ModuleLayout
    BuildPipeline: Lower-level pipeline object (run() / submit())
"""

__version__ = "0.1.0"

from .errors import ArtifactStagingError, HakBuildError, StageFailedError, ToolLaunchError
from .layout import ModuleLayout
from .models import (
    BuildStage,
    FailureKind,
    PipelineResult,
    PipelineState,
    StagedArtifact,
    StageOutcome,
    StagePlan,
)
from .orchestrator import BuildPipeline, PipelineVariant, build_native_module, select_stages
from .platform_env import OsFamily, PlatformEnvironment

__all__ = [
    "ArtifactStagingError",
    "BuildPipeline",
    "BuildStage",
    "FailureKind",
    "HakBuildError",
    "ModuleLayout",
    "OsFamily",
    "PipelineResult",
    "PipelineState",
    "PipelineVariant",
    "PlatformEnvironment",
    "StageFailedError",
    "StageOutcome",
    "StagePlan",
    "StagedArtifact",
    "ToolLaunchError",
    "build_native_module",
    "select_stages",
]

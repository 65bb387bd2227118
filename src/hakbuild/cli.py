"""
Command-line interface for hakbuild.

This module provides the `hakbuild` CLI tool for compiling the vendored
native dependencies and building the native module.

Examples:
    hakbuild build --dot-hak-dir .hak --name matrix-seshat
    hakbuild build --dot-hak-dir .hak --name matrix-seshat --arch ia32
    hakbuild stages --dot-hak-dir .hak --name matrix-seshat --os windows
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.table import Table

from hakbuild import __version__
from hakbuild.layout import ModuleLayout
from hakbuild.models import FailureKind, PipelineResult
from hakbuild.orchestrator import build_native_module, select_stages
from hakbuild.output import init_timer, log, log_warning, set_verbose
from hakbuild.platform_env import DEFAULT_RUNTIME, OsFamily, PlatformEnvironment

ENV_TARGET_VERSION = "HAKBUILD_TARGET_VERSION"
ENV_RUNTIME = "HAKBUILD_RUNTIME"
ENV_VERBOSE = "HAKBUILD_VERBOSE"


@dataclass
class BuildArgs:
    """Arguments shared by the build and stages commands."""

    dot_hak_dir: Path
    name: str
    os_family: Optional[OsFamily] = None
    arch: Optional[str] = None
    runtime: str = DEFAULT_RUNTIME
    target_version: str = ""
    verbose: bool = False


def make_platform(args: BuildArgs) -> PlatformEnvironment:
    return PlatformEnvironment.detect(
        os_family=args.os_family,
        architecture=args.arch,
        runtime=args.runtime,
        target_version=args.target_version,
    )


def exit_code_for(result: PipelineResult) -> int:
    """Process exit status for a pipeline result.

    A tool's own nonzero exit code is passed through; launch and staging
    failures map to 1.
    """
    if result.success:
        return 0
    code = result.outcome.exit_code
    if result.outcome.kind == FailureKind.NON_ZERO_EXIT and code is not None and 0 < code < 256:
        return code
    return 1


def render_summary(result: PipelineResult, console: Console) -> None:
    """Print a per-stage result table."""
    table = Table(title="Native build summary")
    table.add_column("#", justify="right")
    table.add_column("Stage")
    table.add_column("Result")

    for index, name in enumerate(result.stage_names):
        if name in result.completed:
            status = "[green]ok[/green]"
        elif index == result.failed_index:
            status = f"[red]{result.outcome.describe()}[/red]"
        else:
            status = "[dim]not run[/dim]"
        table.add_row(str(index + 1), name, status)

    console.print(table)
    console.print(f"Total time: {result.total_elapsed:.2f}s")


def build_command(args: BuildArgs, console: Optional[Console] = None) -> int:
    """Run the full native build and return the process exit status."""
    console = console if console is not None else Console()
    platform = make_platform(args)
    layout = ModuleLayout.for_module(args.dot_hak_dir, args.name)

    log(f"hakbuild v{__version__}")
    log(f"Platform: {platform.os_family} {platform.architecture} ({platform.runtime} {platform.target_version or 'default'})")
    log(f"Dependency prefix: {layout.dep_prefix}")

    result = build_native_module(platform, layout)
    render_summary(result, console)
    return exit_code_for(result)


def stages_command(args: BuildArgs, console: Optional[Console] = None) -> int:
    """Print the planned stage sequence without running anything."""
    console = console if console is not None else Console()
    platform = make_platform(args)
    layout = ModuleLayout.for_module(args.dot_hak_dir, args.name)

    for index, stage in enumerate(select_stages(platform, layout), start=1):
        console.print(f"[bold]{index}. {stage.name}[/bold]")
        for step in stage.steps:
            console.print(f"   $ {step.describe()}", markup=False, highlight=False)
            console.print(f"     cwd: {step.cwd}", markup=False, highlight=False)
            for key, value in step.env_overrides.items():
                console.print(f"     {key}={value}", markup=False, highlight=False)
        for artifact in stage.artifacts:
            console.print(f"   copy {artifact.source} -> {artifact.destination}", markup=False, highlight=False)
    return 0


def parse_args(argv: Optional[list[str]] = None) -> tuple[str, BuildArgs]:
    parser = argparse.ArgumentParser(
        prog="hakbuild",
        description="Build vendored native dependencies and the native module",
    )
    parser.add_argument("--version", action="version", version=f"hakbuild {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("build", "Compile dependencies and build the module"),
        ("stages", "Show the stage plan without running it"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("--dot-hak-dir", type=Path, default=Path(".hak"), help="Root .hak directory (default: .hak)")
        sub.add_argument("--name", required=True, help="Module name (subdirectory of the .hak directory)")
        sub.add_argument("--os", dest="os_family", choices=[f.value for f in OsFamily], help="Override the detected OS family")
        sub.add_argument("--arch", help="Override the detected architecture (x64, ia32, arm64, ...)")
        sub.add_argument("--runtime", default=os.environ.get(ENV_RUNTIME, DEFAULT_RUNTIME), help="Runtime to build for")
        sub.add_argument("--target-version", default=os.environ.get(ENV_TARGET_VERSION, ""), help="Runtime version to build against")
        sub.add_argument("-v", "--verbose", action="store_true", default=os.environ.get(ENV_VERBOSE) == "1", help="Verbose output")

    ns = parser.parse_args(argv)
    return ns.command, BuildArgs(
        dot_hak_dir=ns.dot_hak_dir,
        name=ns.name,
        os_family=OsFamily(ns.os_family) if ns.os_family else None,
        arch=ns.arch,
        runtime=ns.runtime,
        target_version=ns.target_version,
        verbose=ns.verbose,
    )


def main(argv: Optional[list[str]] = None) -> int:
    command, args = parse_args(argv)

    init_timer()
    set_verbose(args.verbose)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if command == "build":
            return build_command(args)
        return stages_command(args)
    except KeyboardInterrupt:
        log_warning("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())

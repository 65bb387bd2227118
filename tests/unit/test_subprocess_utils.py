"""Tests for subprocess_utils module."""

import os
import subprocess
import sys
from unittest.mock import patch

import pytest

from hakbuild.errors import ToolLaunchError
from hakbuild.subprocess_utils import passthrough_popen, resolve_executable


@patch("subprocess.Popen")
def test_passthrough_popen_inherits_streams(mock_popen):
    """Standard streams are always inherited, even if a caller asks otherwise."""
    passthrough_popen(["make"], cwd="/tmp", stdout=subprocess.PIPE, stdin=subprocess.DEVNULL)

    mock_popen.assert_called_once()
    call_kwargs = mock_popen.call_args[1]
    assert call_kwargs["stdin"] is None
    assert call_kwargs["stdout"] is None
    assert call_kwargs["stderr"] is None
    assert call_kwargs["cwd"] == "/tmp"


def test_resolve_absolute_path():
    assert resolve_executable(sys.executable, dict(os.environ)) == sys.executable


def test_resolve_missing_absolute_path(tmp_path):
    with pytest.raises(ToolLaunchError) as exc_info:
        resolve_executable(str(tmp_path / "configure"), {})
    assert exc_info.value.reason == "not found"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX executable bits")
def test_resolve_uses_child_path(tmp_path):
    """Bare names are looked up on the PATH of the child's environment."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    tool = bin_dir / "hakbuild-fake-tool"
    tool.write_text("#!/bin/sh\nexit 0\n")
    tool.chmod(0o755)

    assert resolve_executable("hakbuild-fake-tool", {"PATH": str(bin_dir)}) == str(tool)
    with pytest.raises(ToolLaunchError):
        resolve_executable("hakbuild-fake-tool", {"PATH": str(tmp_path)})


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX executable bits")
def test_resolve_non_executable_file(tmp_path):
    script = tmp_path / "configure"
    script.write_text("#!/bin/sh\n")
    script.chmod(0o644)

    with pytest.raises(ToolLaunchError) as exc_info:
        resolve_executable(str(script), {})
    assert exc_info.value.reason == "not executable"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX executable bits")
def test_resolve_relative_to_cwd(tmp_path):
    script = tmp_path / "configure"
    script.write_text("#!/bin/sh\n")
    script.chmod(0o755)

    assert resolve_executable("./configure", {}, cwd=tmp_path) == str(tmp_path / "configure")

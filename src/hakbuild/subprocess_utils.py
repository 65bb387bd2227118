"""Subprocess utilities for pass-through process execution.

Build tools run with their standard streams connected directly to ours so
compiler output appears live on the terminal. This module provides the Popen
wrapper used for that, and resolves executables against the PATH of the
environment the child will actually receive.
"""

import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

from .errors import ToolLaunchError


def resolve_executable(executable: str, env: Mapping[str, str], cwd: Optional[Path] = None) -> str:
    """Resolve an executable the way the child's environment would.

    Args:
        executable: Bare name (looked up on PATH) or a path
        env: Environment the child will receive (its PATH is searched)
        cwd: Working directory, used for relative paths containing a separator

    Returns:
        Path to the executable as a string

    Raises:
        ToolLaunchError: If the executable cannot be found
    """
    if os.path.dirname(executable):
        candidate = Path(executable)
        if not candidate.is_absolute() and cwd is not None:
            candidate = Path(cwd) / candidate
        found = shutil.which(str(candidate))
        if found is None:
            reason = "not found" if not candidate.exists() else "not executable"
            raise ToolLaunchError(executable, reason)
        return found

    search_path = _lookup(env, "PATH")
    found = shutil.which(executable, path=search_path)
    if found is None:
        raise ToolLaunchError(executable, "not found on PATH")
    return found


def passthrough_popen(cmd: list[str], **kwargs: Any) -> subprocess.Popen:
    """Execute subprocess.Popen with inherited standard streams.

    stdin, stdout and stderr are forced to None (inherit) so the child talks
    to the controlling terminal directly; nothing is captured or buffered.
    """
    kwargs["stdin"] = None
    kwargs["stdout"] = None
    kwargs["stderr"] = None

    return subprocess.Popen(cmd, **kwargs)


def _lookup(env: Mapping[str, str], key: str) -> Optional[str]:
    if key in env:
        return env[key]
    if sys.platform == "win32":
        for existing, value in env.items():
            if existing.upper() == key:
                return value
    return None

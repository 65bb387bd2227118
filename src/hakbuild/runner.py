"""Process stage runner.

Runs one external build tool to completion with its standard streams
connected to ours, and reports a StageOutcome:

- exit code 0                        -> success
- any other exit code                -> NON_ZERO_EXIT carrying that code
- executable missing / not startable -> LAUNCH_FAILURE

There is no timeout and no retry; the runner waits for as long as the tool
runs.
"""

import logging
from pathlib import Path
from typing import Mapping, Protocol, runtime_checkable

from .errors import ToolLaunchError
from .models import SUCCESS, StageOutcome
from .subprocess_utils import passthrough_popen, resolve_executable

logger = logging.getLogger(__name__)


@runtime_checkable
class StageRunner(Protocol):
    """Protocol for anything that can execute one external-tool invocation.

    The orchestrator depends only on this, so tests can substitute a fake
    that records invocations and injects outcomes.
    """

    def run(self, executable: str, args: list[str], cwd: Path, env: Mapping[str, str]) -> StageOutcome:
        """Run the executable and return its outcome."""
        ...


class ProcessStageRunner:
    """Runs build tools as real OS processes."""

    def run(self, executable: str, args: list[str], cwd: Path, env: Mapping[str, str]) -> StageOutcome:
        try:
            resolved = resolve_executable(executable, env, cwd)
            logger.info("$ %s", " ".join([executable, *args]))
            logger.debug("Resolved %s -> %s (cwd=%s)", executable, resolved, cwd)
            try:
                proc = passthrough_popen([resolved, *args], cwd=str(cwd), env=dict(env))
            except OSError as e:
                raise ToolLaunchError(executable, e.strerror or str(e)) from e
        except ToolLaunchError as e:
            logger.error("%s", e)
            return StageOutcome.launch_failure(str(e))

        try:
            returncode = proc.wait()
        except KeyboardInterrupt:
            # The child shares our console and receives the same Ctrl-C;
            # reap it before propagating.
            logger.warning("Interrupted while waiting for %s", executable)
            proc.wait()
            raise

        if returncode != 0:
            logger.error("%s exited with code %d", executable, returncode)
            return StageOutcome.non_zero_exit(returncode)
        return SUCCESS

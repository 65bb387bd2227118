"""Host platform facts for the native module build.

PlatformEnvironment is an immutable description of the host the build runs
on: operating system family and CPU architecture (node-style names, e.g.
"x64", "ia32", "arm64"), plus the runtime the module is built against.

It also produces the base node-gyp environment used when invoking the module
build tool (see make_gyp_env()).
"""

import platform
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

DEFAULT_RUNTIME = "electron"
ELECTRON_HEADERS_URL = "https://electronjs.org/headers"

# platform.machine() values mapped to node-style architecture names
_MACHINE_TO_ARCH = {
    "amd64": "x64",
    "x86_64": "x64",
    "x64": "x64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "arm64": "arm64",
    "aarch64": "arm64",
    "armv7l": "arm",
}


class OsFamily(Enum):
    """Operating system family."""

    WINDOWS = "windows"
    MACOS = "macos"
    OTHER_UNIX = "other_unix"

    def __str__(self) -> str:
        return self.value


def detect_os_family(sys_platform: Optional[str] = None) -> OsFamily:
    """Map a sys.platform value to an OsFamily."""
    name = sys.platform if sys_platform is None else sys_platform
    if name == "win32" or name == "cygwin":
        return OsFamily.WINDOWS
    if name == "darwin":
        return OsFamily.MACOS
    return OsFamily.OTHER_UNIX


def detect_architecture(machine: Optional[str] = None) -> str:
    """Map a platform.machine() value to a node-style architecture name.

    Unknown machine names are returned lower-cased and unchanged.
    """
    name = (platform.machine() if machine is None else machine).lower()
    return _MACHINE_TO_ARCH.get(name, name)


@dataclass(frozen=True)
class PlatformEnvironment:
    """Read-only host facts.

    Attributes:
        os_family: Operating system family
        architecture: Node-style CPU architecture name
        runtime: Runtime the module is built for (e.g. "electron")
        target_version: Runtime version headers are fetched for (empty = unset)
    """

    os_family: OsFamily
    architecture: str
    runtime: str = DEFAULT_RUNTIME
    target_version: str = ""

    @classmethod
    def detect(
        cls,
        os_family: Optional[OsFamily] = None,
        architecture: Optional[str] = None,
        runtime: str = DEFAULT_RUNTIME,
        target_version: str = "",
    ) -> "PlatformEnvironment":
        """Build a PlatformEnvironment for the running host.

        Explicit arguments take precedence over detected values.
        """
        return cls(
            os_family=os_family if os_family is not None else detect_os_family(),
            architecture=architecture if architecture else detect_architecture(),
            runtime=runtime,
            target_version=target_version,
        )

    def is_windows(self) -> bool:
        return self.os_family == OsFamily.WINDOWS

    def is_mac(self) -> bool:
        return self.os_family == OsFamily.MACOS

    def is_linux(self) -> bool:
        return self.os_family == OsFamily.OTHER_UNIX

    def make_gyp_env(self) -> dict[str, str]:
        """Base environment for invoking the native module build tool.

        Returns only the platform layer; the ambient process environment is
        layered underneath by EnvironmentComposer.
        """
        env = {
            "npm_config_arch": self.architecture,
            "npm_config_target_arch": self.architecture,
            "npm_config_runtime": self.runtime,
            "npm_config_build_from_source": "true",
            "npm_config_devdir": str(Path.home() / ".electron-gyp"),
        }
        if self.runtime == DEFAULT_RUNTIME:
            env["npm_config_disturl"] = ELECTRON_HEADERS_URL
        if self.target_version:
            env["npm_config_target"] = self.target_version
        return env

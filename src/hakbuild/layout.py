"""Filesystem layout of a module build.

Conventional layout under the .hak directory for a module named NAME:

    .hak/NAME/                       vendored dependency working dirs
    .hak/NAME/opt/{lib,include}      dependency install prefix
    .hak/NAME/build/                 module build directory
    .hak/NAME/build/node_modules/.bin  locally installed build tools
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ModuleLayout:
    """Read-only set of absolute paths for one pipeline run.

    Attributes:
        dot_hak_dir: Root of the vendored-dependency working directories
        dep_prefix: Install prefix for built dependencies
        module_build_dir: Directory the final module is built in
        node_module_bin_dir: Directory containing build-tool executables
    """

    dot_hak_dir: Path
    dep_prefix: Path
    module_build_dir: Path
    node_module_bin_dir: Path

    def __post_init__(self) -> None:
        for name in ("dot_hak_dir", "dep_prefix", "module_build_dir", "node_module_bin_dir"):
            value = Path(getattr(self, name))
            if not value.is_absolute():
                raise ValueError(f"ModuleLayout.{name} must be an absolute path, got {value}")
            object.__setattr__(self, name, value)

    @classmethod
    def for_module(cls, dot_hak_dir: Path, name: str) -> "ModuleLayout":
        """Derive the conventional layout for module `name` under `dot_hak_dir`."""
        module_dot_hak_dir = Path(dot_hak_dir).resolve() / name
        module_build_dir = module_dot_hak_dir / "build"
        return cls(
            dot_hak_dir=module_dot_hak_dir,
            dep_prefix=module_dot_hak_dir / "opt",
            module_build_dir=module_build_dir,
            node_module_bin_dir=module_build_dir / "node_modules" / ".bin",
        )

    @property
    def dep_lib_dir(self) -> Path:
        return self.dep_prefix / "lib"

    @property
    def dep_include_dir(self) -> Path:
        return self.dep_prefix / "include"

"""Per-stage process environment composition.

Each stage's subprocess gets a fresh, read-only mapping built from three
layers, later layers winning on key collision:

    1. the ambient process environment (os.environ)
    2. the platform base environment (PlatformEnvironment.make_gyp_env())
    3. the stage's own overrides

No layer removes keys from an earlier one, and os.environ is never modified.
"""

import logging
import os
from types import MappingProxyType
from typing import Mapping, Optional

from .models import BuildStage
from .platform_env import PlatformEnvironment

logger = logging.getLogger(__name__)


class EnvironmentComposer:
    """Builds the environment mapping passed to each stage's process.

    Args:
        platform: Host platform supplying the base environment layer
        ambient: Ambient environment snapshot (defaults to os.environ at compose time)
    """

    def __init__(self, platform: PlatformEnvironment, ambient: Optional[Mapping[str, str]] = None):
        self.platform = platform
        self._ambient = ambient

    def compose(self, overrides: Mapping[str, object]) -> Mapping[str, str]:
        """Compose ambient + platform + overrides into a read-only mapping."""
        ambient = os.environ if self._ambient is None else self._ambient
        env: dict[str, str] = dict(ambient)
        fold_case = self.platform.is_windows()

        for layer in (self.platform.make_gyp_env(), overrides):
            for key, value in layer.items():
                _set_key(env, key, str(value), fold_case)

        return MappingProxyType(env)

    def for_stage(self, stage: BuildStage) -> Mapping[str, str]:
        """Compose the environment for one BuildStage."""
        env = self.compose(stage.env_overrides)
        if stage.env_overrides:
            logger.debug("Environment overrides for %s: %s", stage.executable, dict(stage.env_overrides))
        return env


def _set_key(env: dict[str, str], key: str, value: str, fold_case: bool) -> None:
    # Windows environment names are case-insensitive: replace an existing
    # entry under its original spelling instead of adding a second one.
    if fold_case and key not in env:
        upper = key.upper()
        for existing in env:
            if existing.upper() == upper:
                env[existing] = value
                return
    env[key] = value

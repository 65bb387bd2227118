"""Artifact staging between pipeline stages.

Some build tools name their outputs differently from what later stages
expect (e.g. nmake produces libsqlite3.lib, the module build links
sqlcipher.lib). ArtifactStager copies such outputs into their canonical
locations under the dependency prefix.
"""

import logging
import shutil
from typing import Iterable

from .errors import ArtifactStagingError
from .models import SUCCESS, StagedArtifact, StageOutcome

logger = logging.getLogger(__name__)


class ArtifactStager:
    """Copies staged artifacts, creating destination directories as needed."""

    def stage(self, artifacts: Iterable[StagedArtifact]) -> StageOutcome:
        """Copy every artifact in order; stop at the first failure.

        Returns:
            SUCCESS, or an ARTIFACT_STAGING outcome describing the failure
        """
        try:
            for artifact in artifacts:
                self.copy(artifact)
        except ArtifactStagingError as e:
            logger.error("%s", e)
            return StageOutcome.staging_failure(str(e))
        return SUCCESS

    def copy(self, artifact: StagedArtifact) -> None:
        """Copy one artifact.

        Raises:
            ArtifactStagingError: If the source is missing or the copy fails
        """
        source, destination = artifact.source, artifact.destination
        if not source.is_file():
            raise ArtifactStagingError(source, destination, "source file does not exist")
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
        except OSError as e:
            raise ArtifactStagingError(source, destination, e.strerror or str(e)) from e
        logger.info("Staged %s -> %s", source.name, destination)

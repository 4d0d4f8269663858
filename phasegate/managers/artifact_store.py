"""
ArtifactStore for per-phase artifact tracking.

Artifacts have no ID; within a phase they are identified by path.
"""

from typing import Any, Dict, List, Optional

from phasegate.constants import VALIDATION_PATH_REQUIRED
from phasegate.exceptions import (
    DuplicateError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from phasegate.models.base import ArtifactRecord, PhaseStatus
from phasegate.models.phase import PhaseRecord
from phasegate.models.project import ProjectState


class ArtifactStore:
    """
    Manages the input and output artifacts of each phase.

    Handles:
    - Registering artifacts (inputs or outputs) in insertion order
    - Approving artifacts (idempotent)
    - Looking artifacts up by path
    """

    def __init__(self, project: ProjectState) -> None:
        """
        Initialize ArtifactStore.

        Args:
            project: ProjectState whose phases hold the artifacts.
        """
        self.project = project

    def _phase(self, phase: str) -> PhaseRecord:
        return self.project.phase(phase)

    def add(
        self,
        phase: str,
        path: str,
        artifact_type: Optional[str] = None,
        approved: bool = False,
        metadata: Optional[Dict[str, Any]] = None,
        output: bool = True,
    ) -> ArtifactRecord:
        """Register an artifact on a phase.

        Args:
            phase: Phase name.
            path: Path relative to the project root.
            artifact_type: Free-form tag (e.g. "reference", "github_issue").
            approved: Register the artifact pre-approved.
            metadata: Opaque collaborator data.
            output: Register as an output (default) or as an input.

        Returns:
            The new ArtifactRecord.

        Raises:
            ValidationError: If the path is empty.
            InvalidOperationError: If the phase is skipped or already completed.
            DuplicateError: If the phase already tracks this path.
        """
        if not path or not path.strip():
            raise ValidationError(VALIDATION_PATH_REQUIRED)

        record = self._phase(phase)
        if record.status == PhaseStatus.SKIPPED:
            raise InvalidOperationError(
                f"Cannot add artifact to {phase} phase: phase is skipped."
            )
        if record.status == PhaseStatus.COMPLETED:
            raise InvalidOperationError(
                f"Cannot add artifact to {phase} phase: phase is already completed."
            )
        if self.find(phase, path) is not None:
            raise DuplicateError(
                f"Artifact '{path}' is already tracked by the {phase} phase."
            )

        artifact = ArtifactRecord(
            path=path,
            type=artifact_type,
            approved=approved,
            metadata=dict(metadata or {}),
        )
        if output:
            record.outputs.append(artifact)
        else:
            record.inputs.append(artifact)
        return artifact

    def find(self, phase: str, path: str) -> Optional[ArtifactRecord]:
        """Find an artifact by path among a phase's inputs and outputs."""
        for artifact in self._phase(phase).artifacts:
            if artifact.path == path:
                return artifact
        return None

    def get(self, phase: str, path: str) -> ArtifactRecord:
        """Get an artifact by path.

        Raises:
            NotFoundError: If the phase does not track the path.
        """
        artifact = self.find(phase, path)
        if artifact is None:
            raise NotFoundError(f"Artifact '{path}' not found in {phase} phase.")
        return artifact

    def approve(self, phase: str, path: str) -> ArtifactRecord:
        """Approve an artifact.

        Approving an already-approved artifact is a no-op, so repeated
        invocations are safe.

        Raises:
            NotFoundError: If the phase does not track the path.
        """
        artifact = self.get(phase, path)
        artifact.approved = True
        return artifact

    def list(self, phase: str) -> List[ArtifactRecord]:
        """List a phase's artifacts, inputs first, in insertion order."""
        return self._phase(phase).artifacts

    def unapproved(self, phase: str) -> List[ArtifactRecord]:
        """List a phase's artifacts still awaiting approval."""
        return [a for a in self._phase(phase).artifacts if not a.approved]

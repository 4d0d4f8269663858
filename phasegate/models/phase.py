"""
Phase record model for the Phasegate CLI.

One PhaseRecord exists per phase key of a project. Collections that a
phase does not use (tasks outside implementation, reports outside review)
simply stay empty.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .base import (
    ArtifactRecord,
    PhaseStatus,
    ReviewReportRecord,
    TaskRecord,
)


class PhaseRecord(BaseModel):
    """
    Aggregates one phase's enabled flag, status, artifacts, tasks and reports.

    Phase-specific fields:
    - discovery_type: discovery only, required once discovery is enabled
    - iteration: review only, starts at 1 and only ever increases
    """

    enabled: bool = False
    status: PhaseStatus = PhaseStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    discovery_type: Optional[str] = None
    iteration: Optional[int] = None
    inputs: List[ArtifactRecord] = Field(default_factory=list)
    outputs: List[ArtifactRecord] = Field(default_factory=list)
    tasks: List[TaskRecord] = Field(default_factory=list)
    reports: List[ReviewReportRecord] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def artifacts(self) -> List[ArtifactRecord]:
        """All artifacts of the phase, inputs first, in insertion order."""
        return list(self.inputs) + list(self.outputs)

    @property
    def is_skipped(self) -> bool:
        return self.status == PhaseStatus.SKIPPED

    @property
    def is_decided(self) -> bool:
        """Whether an optional phase has been enabled or skipped."""
        return self.enabled or self.is_skipped

    def latest_report(self) -> Optional[ReviewReportRecord]:
        """Return the most recent review report, if any."""
        if not self.reports:
            return None
        return self.reports[-1]

    def start(self) -> None:
        """Mark the phase in progress, recording the first start time."""
        self.status = PhaseStatus.IN_PROGRESS
        if self.started_at is None:
            self.started_at = datetime.now()

    def complete(self) -> None:
        """Mark the phase completed."""
        now = datetime.now()
        self.status = PhaseStatus.COMPLETED
        self.completed_at = now
        if self.started_at is None:
            self.started_at = now

    def skip(self) -> None:
        """Mark an optional phase as skipped."""
        self.enabled = False
        self.status = PhaseStatus.SKIPPED

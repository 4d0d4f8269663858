"""
Record models for the Phasegate CLI.

Leaf records tracked inside a phase: artifacts, tasks (with feedback),
and review reports.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class PhaseStatus(str, Enum):
    """Valid status values for a phase."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class TaskStatus(str, Enum):
    """Valid status values for an implementation task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    NEEDS_REVIEW = "needs_review"
    COMPLETED = "completed"
    ABANDONED = "abandoned"

    @property
    def is_terminal(self) -> bool:
        """Whether the task no longer blocks implementation completion."""
        return self in (TaskStatus.COMPLETED, TaskStatus.ABANDONED)


class Assessment(str, Enum):
    """Outcome of a review report."""

    PASS = "pass"
    FAIL = "fail"


class FeedbackStatus(str, Enum):
    """Valid status values for task feedback."""

    PENDING = "pending"
    ADDRESSED = "addressed"


class ArtifactRecord(BaseModel):
    """
    A tracked file-based input or output of a phase.

    Artifacts have no ID; they are identified by their path, which is
    relative to the project root.
    """

    path: str
    type: Optional[str] = None
    approved: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Reject empty paths."""
        if not v or not v.strip():
            raise ValueError("Artifact path cannot be empty")
        return v


class FeedbackRecord(BaseModel):
    """Human feedback left on a task, numbered per task ("001", "002", ...)."""

    id: str
    message: str
    status: FeedbackStatus = FeedbackStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.now)


class TaskRecord(BaseModel):
    """
    Unit of implementation work.

    IDs are gap-numbered ("010", "020", ...) so they sort lexicographically
    and leave room for insertions. An ID is never reused.
    """

    id: str
    name: str
    phase: str = "implementation"
    status: TaskStatus = TaskStatus.PENDING
    iteration: int = 1
    assigned_agent: Optional[str] = None
    description: Optional[str] = None
    parallel: bool = False
    dependencies: List[str] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list)
    files_modified: List[str] = Field(default_factory=list)
    feedback: List[FeedbackRecord] = Field(default_factory=list)
    inputs: List[ArtifactRecord] = Field(default_factory=list)
    outputs: List[ArtifactRecord] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @field_validator("iteration")
    @classmethod
    def validate_iteration(cls, v: int) -> int:
        """Iterations start at 1."""
        if v < 1:
            raise ValueError("Task iteration must be at least 1")
        return v

    def touch(self) -> None:
        """Refresh the updated_at timestamp."""
        self.updated_at = datetime.now()


class ReviewReportRecord(BaseModel):
    """A numbered review report with a pass/fail assessment."""

    id: str
    path: str
    assessment: Assessment
    iteration: int = 1
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def passed(self) -> bool:
        return self.assessment == Assessment.PASS

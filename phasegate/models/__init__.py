"""
Data models for the Phasegate CLI.

Import models explicitly from their modules or from this package:
    from phasegate.models.base import ArtifactRecord, TaskRecord, ReviewReportRecord
    from phasegate.models.phase import PhaseRecord
    from phasegate.models.project import ProjectState, StatechartMeta
    from phasegate.models.files import ConfigFile
"""

from .base import (
    ArtifactRecord,
    Assessment,
    FeedbackRecord,
    FeedbackStatus,
    PhaseStatus,
    ReviewReportRecord,
    TaskRecord,
    TaskStatus,
)
from .phase import PhaseRecord
from .project import ProjectState, StatechartMeta

__all__ = [
    "ArtifactRecord",
    "Assessment",
    "FeedbackRecord",
    "FeedbackStatus",
    "PhaseStatus",
    "ReviewReportRecord",
    "TaskRecord",
    "TaskStatus",
    "PhaseRecord",
    "ProjectState",
    "StatechartMeta",
]

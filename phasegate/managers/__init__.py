"""
Managers for the Phasegate CLI.

This package contains focused manager classes that each own one part of a project:
- ArtifactStore: per-phase artifacts and their approval
- TaskLedger: implementation tasks and task feedback
- ReviewReportLedger: numbered review reports
- completion_validator: completion rule per phase
- StorageManager: persistence to the .phasegate/ folder
"""

from phasegate.managers.artifact_store import ArtifactStore
from phasegate.managers.task_ledger import TaskLedger, parse_task_status
from phasegate.managers.report_ledger import ReviewReportLedger, parse_assessment
from phasegate.managers.completion_validator import (
    completion_problems,
    validate_phase_completion,
)
from phasegate.managers.storage_manager import StorageManager
from phasegate.exceptions import StorageError

__all__ = [
    "ArtifactStore",
    "TaskLedger",
    "parse_task_status",
    "ReviewReportLedger",
    "parse_assessment",
    "completion_problems",
    "validate_phase_completion",
    "StorageManager",
    "StorageError",
]

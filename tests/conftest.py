"""
Test fixtures for the Phasegate CLI test suite.

Provides:
- Temporary working trees (isolated from any real .phasegate/)
- Mock data builders for projects, tasks, artifacts and reports
- Helpers that walk a project through the lifecycle
"""

import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator, Optional

import pytest

from phasegate.core import PhasegateCore
from phasegate.models.base import (
    ArtifactRecord,
    Assessment,
    ReviewReportRecord,
    TaskRecord,
    TaskStatus,
)
from phasegate.models.project import ProjectState
from phasegate.statechart.transitions import initial_state


# =============================================================================
# Temporary Directory Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary working tree for test isolation."""
    temp_path = Path(tempfile.mkdtemp(prefix="phasegate_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


# =============================================================================
# Mock Data Builders
# =============================================================================


class MockDataBuilder:
    """Helper class for building Phasegate records for testing."""

    @staticmethod
    def create_project(
        name: str = "add-auth",
        branch: str = "feat/add-auth",
        description: str = "Add authentication",
        project_type: str = "standard",
        discovery: Optional[bool] = False,
        design: Optional[bool] = False,
        discovery_type: Optional[str] = None,
    ) -> ProjectState:
        """Create a ProjectState positioned at its initial state."""
        optional: Dict[str, Optional[bool]] = {"discovery": discovery, "design": design}
        if discovery and discovery_type is None:
            discovery_type = "feature"
        project = ProjectState.new(
            name=name,
            branch=branch,
            description=description,
            project_type=project_type,
            optional_phases=optional,
            discovery_type=discovery_type,
        )
        project.statechart.current_state = initial_state(project).value
        return project

    @staticmethod
    def create_task(
        task_id: str = "010",
        name: str = "Test Task",
        status: TaskStatus = TaskStatus.PENDING,
    ) -> TaskRecord:
        return TaskRecord(id=task_id, name=name, status=status)

    @staticmethod
    def create_artifact(path: str = "notes.md", approved: bool = False) -> ArtifactRecord:
        return ArtifactRecord(path=path, approved=approved)

    @staticmethod
    def create_report(
        report_id: str = "001",
        assessment: Assessment = Assessment.PASS,
        iteration: int = 1,
    ) -> ReviewReportRecord:
        return ReviewReportRecord(
            id=report_id,
            path=f"review-{report_id}.md",
            assessment=assessment,
            iteration=iteration,
        )


@pytest.fixture
def mock_data() -> MockDataBuilder:
    """Provide mock data builder for record creation."""
    return MockDataBuilder()


# =============================================================================
# Core Fixtures
# =============================================================================


@pytest.fixture
def core(temp_dir: Path) -> PhasegateCore:
    """A core bound to an empty working tree."""
    return PhasegateCore(temp_dir)


@pytest.fixture
def standard_core(core: PhasegateCore) -> PhasegateCore:
    """A core with a freshly created standard project."""
    core.create_project("add-auth", "Add authentication", "feat/add-auth")
    return core


class Workflow:
    """Helpers that walk a project through the lifecycle."""

    @staticmethod
    def reload(core: PhasegateCore) -> PhasegateCore:
        """Build a new core on the same working tree, as a new process would."""
        return PhasegateCore(core.storage.root)

    @staticmethod
    def to_review(core: PhasegateCore) -> None:
        """Plan, approve and complete a single task, ending in ReviewActive."""
        task = core.add_task("Write code")
        core.approve_tasks()
        core.set_task_status(task.id, "completed")
        core.complete_phase("implementation")

    @staticmethod
    def to_cleanup(core: PhasegateCore) -> None:
        """Walk a project from planning to FinalizeCleanup."""
        Workflow.to_review(core)
        core.add_review_report("review.md", "pass")
        core.finalize_documentation()
        core.finalize_checks()


@pytest.fixture
def workflow() -> Workflow:
    return Workflow()

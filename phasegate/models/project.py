"""
Project state model for the Phasegate CLI.

The root aggregate persisted to the state file: project metadata, one
PhaseRecord per phase key, and the statechart pointer.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from phasegate.constants import (
    PHASE_DISCOVERY,
    PHASE_NAMES,
    PHASE_REVIEW,
    PROJECT_DELETED_KEY,
    REQUIRED_PHASES,
)
from phasegate.exceptions import NotFoundError

from .phase import PhaseRecord


class StatechartMeta(BaseModel):
    """Tracks the state machine position between CLI invocations."""

    current_state: str
    updated_at: datetime = Field(default_factory=datetime.now)


class ProjectState(BaseModel):
    """
    Root aggregate for a project.

    One project exists per git branch. It is loaded at the start of every
    command, mutated in memory, and written back atomically.

    Fields:
    - name, branch: fixed at creation
    - description: editable
    - type: project type name, fixes the prompts and default enablement
    - phases: phase name -> PhaseRecord, key set fixed at creation
    - statechart: current machine state and when it last changed
    - metadata: opaque collaborator data (issue links, deletion flag)
    """

    name: str
    branch: str
    description: str
    type: str = "standard"
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    phases: Dict[str, PhaseRecord] = Field(default_factory=dict)
    statechart: StatechartMeta
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def new(
        cls,
        name: str,
        branch: str,
        description: str,
        project_type: str,
        optional_phases: Dict[str, Optional[bool]],
        discovery_type: Optional[str] = None,
        initial_state: str = "NoProject",
    ) -> "ProjectState":
        """Build a fresh project with every phase record in place.

        Args:
            name: Kebab-case project name.
            branch: Git branch the project belongs to.
            description: Human-readable description.
            project_type: Registered project type name.
            optional_phases: discovery/design -> True (enabled), False
                (skipped) or None (left for a decision state).
            discovery_type: Discovery sub-type when discovery starts enabled.
            initial_state: Statechart state to start in.

        Returns:
            New ProjectState.
        """
        now = datetime.now()
        phases: Dict[str, PhaseRecord] = {}
        for phase_name in PHASE_NAMES:
            record = PhaseRecord(created_at=now)
            if phase_name in REQUIRED_PHASES:
                record.enabled = True
            else:
                choice = optional_phases.get(phase_name)
                if choice is True:
                    record.enabled = True
                    record.start()
                    if phase_name == PHASE_DISCOVERY:
                        record.discovery_type = discovery_type
                elif choice is False:
                    record.skip()
            if phase_name == PHASE_REVIEW:
                record.iteration = 1
            phases[phase_name] = record

        return cls(
            name=name,
            branch=branch,
            description=description,
            type=project_type,
            created_at=now,
            updated_at=now,
            phases=phases,
            statechart=StatechartMeta(current_state=initial_state, updated_at=now),
        )

    @property
    def current_state(self) -> str:
        return self.statechart.current_state

    def phase(self, name: str) -> PhaseRecord:
        """Get a phase record by name.

        Raises:
            NotFoundError: If the project has no such phase.
        """
        record = self.phases.get(name)
        if record is None:
            raise NotFoundError(f"Phase '{name}' not found in project '{self.name}'.")
        return record

    @property
    def project_deleted(self) -> bool:
        return self.metadata.get(PROJECT_DELETED_KEY) is True

    def touch(self) -> None:
        """Refresh the updated_at timestamp."""
        self.updated_at = datetime.now()

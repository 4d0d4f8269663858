"""
PhasegateCore - Core business logic for the Phasegate CLI.

Orchestrates the state machine and the manager classes for every
business operation. Each operation loads the project, mutates it in
memory and saves it once; a failing operation writes nothing.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from phasegate.constants import (
    DISCOVERY_TYPES,
    PHASE_DESIGN,
    PHASE_DISCOVERY,
    PHASE_FINALIZE,
    PHASE_IMPLEMENTATION,
    PHASE_NAMES,
    PHASE_REVIEW,
    PROJECT_DELETED_KEY,
    VALIDATION_DESCRIPTION_REQUIRED,
    VALIDATION_NAME_KEBAB,
)
from phasegate.exceptions import (
    InvalidOperationError,
    ProjectExistsError,
    ValidationError,
)
from phasegate.managers import (
    ArtifactStore,
    ReviewReportLedger,
    StorageManager,
    TaskLedger,
)
from phasegate.models.base import (
    ArtifactRecord,
    Assessment,
    FeedbackRecord,
    ReviewReportRecord,
    TaskRecord,
)
from phasegate.models.project import ProjectState
from phasegate.project_types import DEFAULT_PROJECT_TYPE, get_project_type
from phasegate.statechart.machine import StateMachine, load_machine
from phasegate.statechart.states import STATE_PHASES, Event, State
from phasegate.statechart.transitions import initial_state
from phasegate.utils import is_kebab_case

_ENABLE_EVENTS = {PHASE_DISCOVERY: Event.ENABLE_DISCOVERY, PHASE_DESIGN: Event.ENABLE_DESIGN}
_SKIP_EVENTS = {PHASE_DISCOVERY: Event.SKIP_DISCOVERY, PHASE_DESIGN: Event.SKIP_DESIGN}
_COMPLETE_EVENTS = {
    PHASE_DISCOVERY: Event.COMPLETE_DISCOVERY,
    PHASE_DESIGN: Event.COMPLETE_DESIGN,
    PHASE_IMPLEMENTATION: Event.COMPLETE_IMPLEMENTATION,
    PHASE_REVIEW: Event.REVIEW_PASS,
}
_TASK_STATES = (State.IMPLEMENTATION_PLANNING, State.IMPLEMENTATION_EXECUTING)


class PhasegateCore:
    """
    Core class for business logic operations.

    Orchestrates:
    - StateMachine: current state and event application
    - StorageManager: persistence to the .phasegate/ folder
    - ArtifactStore: per-phase artifacts
    - TaskLedger: implementation tasks
    - ReviewReportLedger: review reports

    The project is loaded lazily so that create_project can run in a
    working tree that has no project yet.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        """
        Initialize the PhasegateCore for a working tree.

        Args:
            root: Working tree root. Defaults to the current directory.
        """
        self.storage = StorageManager(root)
        self._machine: Optional[StateMachine] = None

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def machine(self) -> StateMachine:
        """The state machine, loaded from the state file on first access."""
        if self._machine is None:
            self._machine = load_machine(storage=self.storage)
        return self._machine

    @property
    def project(self) -> ProjectState:
        project = self.machine.project_state
        if project is None:
            raise InvalidOperationError("No active project.")
        return project

    @property
    def state(self) -> State:
        return self.machine.state

    @property
    def artifacts(self) -> ArtifactStore:
        return ArtifactStore(self.project)

    @property
    def tasks(self) -> TaskLedger:
        settings = self.storage.config.settings
        return TaskLedger(self.project, id_step=settings.task_id_step, id_width=settings.task_id_width)

    @property
    def reports(self) -> ReviewReportLedger:
        return ReviewReportLedger(
            self.project,
            id_width=self.storage.config.settings.report_id_width,
        )

    def _save(self) -> None:
        self.machine.save()

    def _fire(self, event: Event, **payload: Any) -> str:
        prompt = self.machine.fire(event, **payload)
        self._save()
        return prompt

    def _require_state(self, allowed, action: str) -> None:
        if self.state not in allowed:
            names = ", ".join(s.value for s in allowed)
            raise InvalidOperationError(
                f"Cannot {action} in state '{self.state.value}' (allowed in: {names})."
            )

    # =========================================================================
    # Project lifecycle
    # =========================================================================

    def create_project(
        self,
        name: str,
        description: str,
        branch: str,
        project_type: str = DEFAULT_PROJECT_TYPE,
        discovery: Optional[bool] = None,
        design: Optional[bool] = None,
        discovery_type: Optional[str] = None,
    ) -> str:
        """Create the project of this working tree.

        Args:
            name: Kebab-case project name.
            description: Non-empty description.
            branch: Git branch the project belongs to.
            project_type: Registered project type name.
            discovery: Enable (True) or skip (False) discovery; None keeps
                the project type default.
            design: Same as discovery, for the design phase.
            discovery_type: Discovery sub-type when discovery starts enabled.

        Returns:
            Guidance text for the initial state.

        Raises:
            ValidationError: If the name, description, branch or discovery
                type is invalid.
            ConfigurationError: If the project type is unknown.
            ProjectExistsError: If the working tree already has a project.
        """
        if not is_kebab_case(name):
            raise ValidationError(f"{VALIDATION_NAME_KEBAB} Got '{name}'.")
        if not description or not description.strip():
            raise ValidationError(VALIDATION_DESCRIPTION_REQUIRED)
        if not branch:
            raise ValidationError("Branch name cannot be empty.")
        if branch in self.storage.config.settings.protected_branches:
            raise ValidationError(
                f"Cannot create a project on protected branch '{branch}'; "
                f"create a feature branch first."
            )

        config = get_project_type(project_type)
        if self.storage.exists():
            raise ProjectExistsError(
                f"A project already exists at {self.storage.state_path}."
            )

        optional = config.optional_phases(discovery=discovery, design=design)
        if optional[PHASE_DISCOVERY] is True:
            discovery_type = discovery_type or config.default_discovery_type
            if discovery_type not in DISCOVERY_TYPES:
                raise ValidationError(
                    f"A valid discovery type is required when discovery is enabled "
                    f"(one of {', '.join(DISCOVERY_TYPES)}); got '{discovery_type}'."
                )
        else:
            discovery_type = None

        project = ProjectState.new(
            name=name,
            branch=branch,
            description=description.strip(),
            project_type=config.name,
            optional_phases=optional,
            discovery_type=discovery_type,
        )
        project.statechart.current_state = initial_state(project).value

        self._machine = StateMachine(project, self.storage)
        self._save()
        return self.machine.prompt()

    def update_description(self, description: str) -> ProjectState:
        if not description or not description.strip():
            raise ValidationError(VALIDATION_DESCRIPTION_REQUIRED)
        project = self.project
        project.description = description.strip()
        self._save()
        return project

    def set_metadata(self, key: str, value: Any) -> None:
        """Store collaborator data on the project, uninterpreted."""
        if key == PROJECT_DELETED_KEY:
            raise InvalidOperationError(
                f"'{PROJECT_DELETED_KEY}' is managed by the finalize phase."
            )
        self.project.metadata[key] = value
        self._save()

    # =========================================================================
    # Phases
    # =========================================================================

    def enable_phase(self, phase: str, discovery_type: Optional[str] = None) -> str:
        """Enable discovery or design from its decision state."""
        event = _ENABLE_EVENTS.get(phase)
        if event is None:
            raise ValidationError(
                f"Only optional phases can be enabled ({', '.join(_ENABLE_EVENTS)}); got '{phase}'."
            )
        if phase == PHASE_DISCOVERY:
            return self._fire(event, discovery_type=discovery_type)
        return self._fire(event)

    def skip_phase(self, phase: str) -> str:
        """Skip discovery or design from its decision state."""
        event = _SKIP_EVENTS.get(phase)
        if event is None:
            raise ValidationError(
                f"Only optional phases can be skipped ({', '.join(_SKIP_EVENTS)}); got '{phase}'."
            )
        return self._fire(event)

    def complete_phase(self, phase: str) -> str:
        """Complete a phase once its completion rule holds.

        The finalize phase completes only through delete_project.
        """
        if phase == PHASE_FINALIZE:
            raise InvalidOperationError(
                "The finalize phase completes when the project is deleted; "
                "use 'phasegate finalize delete'."
            )
        event = _COMPLETE_EVENTS.get(phase)
        if event is None:
            raise ValidationError(
                f"Invalid phase '{phase}': must be one of {', '.join(PHASE_NAMES)}."
            )
        return self._fire(event)

    # =========================================================================
    # Artifacts
    # =========================================================================

    def add_artifact(
        self,
        phase: str,
        path: str,
        artifact_type: Optional[str] = None,
        approved: bool = False,
        output: bool = True,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ArtifactRecord:
        artifact = self.artifacts.add(
            phase,
            path,
            artifact_type=artifact_type,
            approved=approved,
            metadata=metadata,
            output=output,
        )
        self._save()
        return artifact

    def approve_artifact(self, phase: str, path: str) -> ArtifactRecord:
        artifact = self.artifacts.approve(phase, path)
        self._save()
        return artifact

    def list_artifacts(self, phase: str) -> List[ArtifactRecord]:
        return self.artifacts.list(phase)

    # =========================================================================
    # Tasks
    # =========================================================================

    def add_task(
        self,
        name: str,
        description: Optional[str] = None,
        parallel: bool = False,
        dependencies: Optional[List[str]] = None,
        assigned_agent: Optional[str] = None,
    ) -> TaskRecord:
        """Add a pending task during implementation planning or execution."""
        self._require_state(_TASK_STATES, "add a task")
        task = self.tasks.add(
            name,
            description=description,
            parallel=parallel,
            dependencies=dependencies,
            assigned_agent=assigned_agent,
        )
        self._save()
        return task

    def approve_tasks(self) -> str:
        """Approve the task plan and start executing it."""
        return self._fire(Event.APPROVE_TASKS)

    def set_task_status(self, task_id: str, status: str) -> TaskRecord:
        task = self.tasks.mark_status(task_id, status)
        self._save()
        return task

    def increment_task_iteration(self, task_id: str) -> TaskRecord:
        task = self.tasks.increment_iteration(task_id)
        self._save()
        return task

    def assign_task_agent(self, task_id: str, agent: str) -> TaskRecord:
        task = self.tasks.assign_agent(task_id, agent)
        self._save()
        return task

    def add_task_reference(self, task_id: str, path: str) -> TaskRecord:
        task = self.tasks.add_reference(task_id, path)
        self._save()
        return task

    def add_task_file(self, task_id: str, path: str) -> TaskRecord:
        task = self.tasks.add_file(task_id, path)
        self._save()
        return task

    def add_task_feedback(self, task_id: str, message: str) -> FeedbackRecord:
        feedback = self.tasks.add_feedback(task_id, message)
        self._save()
        return feedback

    def address_task_feedback(self, task_id: str, feedback_id: str) -> FeedbackRecord:
        feedback = self.tasks.mark_feedback_addressed(task_id, feedback_id)
        self._save()
        return feedback

    def list_tasks(self, status: Optional[str] = None) -> List[TaskRecord]:
        return self.tasks.list(status)

    # =========================================================================
    # Review
    # =========================================================================

    def add_review_report(self, path: str, assessment: str) -> ReviewReportRecord:
        """Record a review report and fire the matching review event.

        A passing report moves the project to finalize; a failing one loops
        back to implementation planning with the next review iteration.
        Report and transition are saved together.
        """
        self._require_state((State.REVIEW_ACTIVE,), "add a review report")
        report = self.reports.add(path, assessment)
        event = Event.REVIEW_PASS if report.assessment == Assessment.PASS else Event.REVIEW_FAIL
        self.machine.fire(event)
        self._save()
        return report

    def list_review_reports(self) -> List[ReviewReportRecord]:
        return self.reports.list()

    # =========================================================================
    # Finalize
    # =========================================================================

    def finalize_documentation(
        self,
        updates: Optional[List[str]] = None,
        artifacts_moved: Optional[List[str]] = None,
    ) -> str:
        """Record that documentation was assessed, with any updated files."""
        return self._fire(
            Event.DOCUMENTATION_DONE,
            documentation_updates=list(updates or []),
            artifacts_moved=list(artifacts_moved or []),
        )

    def finalize_checks(self, passed: bool = True, pr_url: Optional[str] = None) -> str:
        """Record the outcome of the final checks."""
        return self._fire(Event.CHECKS_DONE, checks_passed=passed, pr_url=pr_url)

    def delete_project(self) -> str:
        """Delete the project folder and record the final transition.

        Nothing is written afterwards: the state file is gone and the
        machine ends in NoProject.

        Raises:
            TransitionError: If the project is not in finalize cleanup.
        """
        machine = self.machine
        machine.table.get(machine.state, Event.PROJECT_DELETED)
        self.project.metadata[PROJECT_DELETED_KEY] = True
        self.storage.delete_project()
        return machine.fire(Event.PROJECT_DELETED)

    # =========================================================================
    # Status and guidance
    # =========================================================================

    def prompt(self) -> str:
        """Guidance text for the current state."""
        return self.machine.prompt()

    def orchestrator_prompt(self) -> str:
        return self.machine.orchestrator_prompt()

    def status_data(self) -> Dict[str, Any]:
        """JSON-ready view of the whole project. Read-only."""
        project = self.project
        data = project.model_dump(mode="json")
        data["current_state"] = self.state.value
        data["current_phase"] = STATE_PHASES[self.state]
        data["permitted_events"] = [e.value for e in self.machine.permitted_events()]
        data["task_counts"] = self.tasks.counts()
        return data

    def status_text(self) -> str:
        """Human-readable project summary. Read-only."""
        project = self.project
        width = self.storage.config.settings.status_header_width
        lines = [
            f"Project: {project.name}",
            f"Type: {project.type}",
            f"Branch: {project.branch}",
            f"Description: {project.description}",
            f"State: {self.state.value} ({STATE_PHASES[self.state] or 'no'} phase)",
            "",
            "Phases",
            "=" * width,
        ]
        for name in PHASE_NAMES:
            record = project.phase(name)
            mark = "✓" if record.enabled else " "
            detail = ""
            if name == PHASE_DISCOVERY and record.discovery_type:
                detail = f" ({record.discovery_type})"
            elif name == PHASE_REVIEW:
                detail = f" (iteration {record.iteration or 1})"
            lines.append(f"[{mark}] {name:<16} {record.status.value}{detail}")

        tasks = project.phase(PHASE_IMPLEMENTATION).tasks
        if tasks:
            counts = self.tasks.counts()
            summary = ", ".join(f"{count} {status}" for status, count in counts.items() if count)
            lines += ["", f"Tasks: {len(tasks)} ({summary})"]

        events = self.machine.permitted_events()
        if events:
            lines += ["", "Next events: " + ", ".join(e.value for e in events)]
        return "\n".join(lines)

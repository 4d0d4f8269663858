"""
StateMachine: applies events to a project and renders the resulting guidance.

The machine is a disposable view over a ProjectState. It is rebuilt from the
state file at the start of every command (load_machine), mutated through
fire(), and written back with save().
"""

from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from phasegate.exceptions import (
    CorruptStateError,
    InvalidOperationError,
    TransitionError,
    ValidationError,
)
from phasegate.managers.storage_manager import StorageManager
from phasegate.models.project import ProjectState
from phasegate.project_types import get_project_type
from phasegate.statechart.states import Event, State
from phasegate.statechart.transitions import TRANSITIONS, Transition, TransitionTable


def parse_event(value: "Event | str") -> Event:
    """Convert a string to an Event.

    Raises:
        ValidationError: If the value names no event.
    """
    if isinstance(value, Event):
        return value
    try:
        return Event(value)
    except ValueError:
        valid = ", ".join(e.value for e in Event)
        raise ValidationError(f"Unknown event '{value}': must be one of {valid}.")


class StateMachine:
    """
    Finite-state engine for one project.

    Usage:
        machine = load_machine(root)
        settings = machine.storage.config.settings
        ledger = TaskLedger(machine.project_state, settings.task_id_step, settings.task_id_width)
        ledger.add("Write parser")
        prompt = machine.fire(Event.APPROVE_TASKS)
        machine.save()
    """

    def __init__(
        self,
        project: Optional[ProjectState],
        storage: StorageManager,
        table: TransitionTable = TRANSITIONS,
    ) -> None:
        """
        Initialize the machine at the project's persisted position.

        Args:
            project: Loaded project, or None when there is no project.
            storage: Storage the project is saved through.
            table: Transition table to apply events against.

        Raises:
            CorruptStateError: If the persisted state name is unknown.
        """
        self._project = project
        self.storage = storage
        self.table = table
        if project is None:
            self._state = State.NO_PROJECT
        else:
            try:
                self._state = State(project.current_state)
            except ValueError:
                raise CorruptStateError(
                    f"Corrupt state file {storage.state_path} (manual repair required): "
                    f"unknown statechart state '{project.current_state}'"
                )

    @property
    def state(self) -> State:
        return self._state

    @property
    def project_state(self) -> Optional[ProjectState]:
        """Mutable handle on the project for ledgers and validators."""
        return self._project

    def _require_project(self) -> ProjectState:
        if self._project is None:
            raise InvalidOperationError("No active project.")
        return self._project

    # =========================================================================
    # Events
    # =========================================================================

    def _lookup(self, event: "Event | str") -> Transition:
        parsed = parse_event(event)
        if self._project is None:
            raise TransitionError(self._state.value, parsed.value)
        return self.table.get(self._state, parsed)

    def fire(self, event: "Event | str", **payload: Any) -> str:
        """Apply an event to the project.

        Args:
            event: Event to fire.
            **payload: Data the transition needs (e.g. discovery_type).

        Returns:
            Guidance text for the new state.

        Raises:
            TransitionError: If the event is not permitted in the current state.
            ValidationError: If the transition's guard is not satisfied. The
                project and the current state are left unchanged.
        """
        transition = self._lookup(event)
        project = self._require_project()

        problems = transition.check(project, payload)
        if problems:
            raise ValidationError(
                f"Cannot fire '{transition.event.value}' in state "
                f"'{self._state.value}': " + "; ".join(problems) + "."
            )

        if transition.action is not None:
            transition.action(project, payload)

        target = transition.resolve_target(project)
        self._state = target
        project.statechart.current_state = target.value
        project.statechart.updated_at = datetime.now()
        return self.prompt()

    def can_fire(self, event: "Event | str", **payload: Any) -> bool:
        """Whether the event is permitted now and its guard is satisfied."""
        try:
            transition = self._lookup(event)
        except (TransitionError, ValidationError):
            return False
        return not transition.check(self._require_project(), payload)

    def permitted_events(self) -> List[Event]:
        """Events with a transition from the current state, guards ignored."""
        if self._project is None:
            return []
        return self.table.events_from(self._state)

    # =========================================================================
    # Guidance
    # =========================================================================

    def prompt(self) -> str:
        """Guidance text for the current state."""
        if self._project is None:
            return get_project_type("standard").state_prompt(State.NO_PROJECT, None)
        config = get_project_type(self._project.type)
        if self._state == State.NO_PROJECT:
            return config.state_prompt(self._state, None)
        return config.state_prompt(self._state, self._project)

    def orchestrator_prompt(self) -> str:
        """Describe the project and its workflow to the orchestrator."""
        project = self._require_project()
        return get_project_type(project.type).orchestrator_prompt(project)

    # =========================================================================
    # Persistence
    # =========================================================================

    def save(self) -> None:
        """Write the project, current state included, to the state file.

        Raises:
            InvalidOperationError: If there is no project, or it has been deleted.
        """
        project = self._require_project()
        if self._state == State.NO_PROJECT or project.project_deleted:
            raise InvalidOperationError("Cannot save: the project has been deleted.")
        self.storage.save_state(project)


def load_machine(
    root: Optional[Path] = None,
    storage: Optional[StorageManager] = None,
) -> StateMachine:
    """Reconstruct the machine from the state file of a working tree.

    Raises:
        NoProjectError: If the working tree has no project.
        CorruptStateError: If the state file cannot be parsed.
        StorageError: If the state file cannot be read.
    """
    storage = storage or StorageManager(root)
    return StateMachine(storage.load_state(), storage)

"""
Transition table for the project lifecycle statechart.

A pure mapping of (state, event) to a Transition. Each Transition names:
- target: the next state, or a resolver computing it from project state
- guard: returns unmet conditions (empty list when the event may fire)
- action: mutates the record of exactly one phase

Nothing here performs I/O or keeps state between calls.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from phasegate.constants import (
    DISCOVERY_TYPES,
    PHASE_DESIGN,
    PHASE_DISCOVERY,
    PHASE_FINALIZE,
    PHASE_IMPLEMENTATION,
    PHASE_REVIEW,
)
from phasegate.exceptions import TransitionError
from phasegate.managers.completion_validator import completion_problems
from phasegate.models.base import Assessment, PhaseStatus, TaskStatus
from phasegate.models.project import ProjectState
from phasegate.statechart.states import Event, State

Payload = Mapping[str, Any]
Guard = Callable[[ProjectState, Payload], List[str]]
Action = Callable[[ProjectState, Payload], None]
Target = Union[State, Callable[[ProjectState], State]]


@dataclass(frozen=True)
class Transition:
    """One edge of the statechart."""

    source: State
    event: Event
    target: Target
    phase: Optional[str] = None
    guard: Optional[Guard] = None
    action: Optional[Action] = None
    description: str = ""

    def check(self, project: ProjectState, payload: Payload) -> List[str]:
        """Return the guard's unmet conditions (empty if unguarded)."""
        if self.guard is None:
            return []
        return self.guard(project, payload)

    def resolve_target(self, project: ProjectState) -> State:
        """Compute the destination state against the current project state."""
        if isinstance(self.target, State):
            return self.target
        return self.target(project)


# =============================================================================
# Target resolvers
# =============================================================================


def state_after_discovery(project: ProjectState) -> State:
    """Where the workflow goes once discovery is completed or skipped."""
    design = project.phase(PHASE_DESIGN)
    if design.enabled:
        return State.DESIGN_ACTIVE
    if design.is_skipped:
        return State.IMPLEMENTATION_PLANNING
    return State.DESIGN_DECISION


def initial_state(project: ProjectState) -> State:
    """The first state of a freshly created project.

    Follows the default enablement the project type wrote into the
    discovery and design records.
    """
    discovery = project.phase(PHASE_DISCOVERY)
    if discovery.enabled:
        return State.DISCOVERY_ACTIVE
    if not discovery.is_decided:
        return State.DISCOVERY_DECISION
    return state_after_discovery(project)


# =============================================================================
# Guards
# =============================================================================


def _completion_guard(phase: str) -> Guard:
    def guard(project: ProjectState, payload: Payload) -> List[str]:
        return completion_problems(project, phase)
    return guard


def _undecided_guard(phase: str) -> Guard:
    def guard(project: ProjectState, payload: Payload) -> List[str]:
        if project.phase(phase).is_decided:
            return [f"{phase} phase has already been enabled or skipped"]
        return []
    return guard


def _enable_discovery_guard(project: ProjectState, payload: Payload) -> List[str]:
    problems = _undecided_guard(PHASE_DISCOVERY)(project, payload)
    discovery_type = payload.get("discovery_type")
    if not discovery_type:
        problems.append("discovery_type is required when enabling discovery phase")
    elif discovery_type not in DISCOVERY_TYPES:
        problems.append(
            f"invalid discovery_type '{discovery_type}': must be one of "
            f"{', '.join(DISCOVERY_TYPES)}"
        )
    return problems


def _pending_task_guard(project: ProjectState, payload: Payload) -> List[str]:
    tasks = project.phase(PHASE_IMPLEMENTATION).tasks
    if not any(t.status == TaskStatus.PENDING for t in tasks):
        return ["no pending tasks; add at least one task before approving the plan"]
    return []


def _latest_report_guard(expected: Assessment) -> Guard:
    def guard(project: ProjectState, payload: Payload) -> List[str]:
        review = project.phase(PHASE_REVIEW)
        latest = review.latest_report()
        if latest is None:
            return ["no review reports exist; add a review report first"]
        problems = []
        if latest.iteration != (review.iteration or 1):
            problems.append(
                f"no review report filed for iteration {review.iteration}; "
                f"add a review report first"
            )
        if latest.assessment != expected:
            problems.append(
                f"latest review report '{latest.id}' assessment is "
                f"'{latest.assessment.value}', not '{expected.value}'"
            )
        return problems
    return guard


# =============================================================================
# Actions (each touches one phase record)
# =============================================================================


def _enable_discovery(project: ProjectState, payload: Payload) -> None:
    discovery = project.phase(PHASE_DISCOVERY)
    discovery.enabled = True
    discovery.discovery_type = payload["discovery_type"]
    discovery.start()


def _enable_phase(phase: str) -> Action:
    def action(project: ProjectState, payload: Payload) -> None:
        record = project.phase(phase)
        record.enabled = True
        record.start()
    return action


def _skip_phase(phase: str) -> Action:
    def action(project: ProjectState, payload: Payload) -> None:
        project.phase(phase).skip()
    return action


def _complete_phase(phase: str) -> Action:
    def action(project: ProjectState, payload: Payload) -> None:
        record = project.phase(phase)
        if record.status != PhaseStatus.COMPLETED:
            record.complete()
    return action


def _start_implementation(project: ProjectState, payload: Payload) -> None:
    implementation = project.phase(PHASE_IMPLEMENTATION)
    # Status is monotonic: a completed implementation stays completed on rework.
    if implementation.status == PhaseStatus.PENDING:
        implementation.start()


def _loop_back_review(project: ProjectState, payload: Payload) -> None:
    review = project.phase(PHASE_REVIEW)
    review.iteration = (review.iteration or 1) + 1
    review.start()


def _extend_unique(metadata: Dict[str, Any], key: str, values: Optional[List[Any]]) -> None:
    if not values:
        return
    existing = metadata.setdefault(key, [])
    existing.extend(v for v in values if v not in existing)


def _documentation_done(project: ProjectState, payload: Payload) -> None:
    finalize = project.phase(PHASE_FINALIZE)
    finalize.start()
    finalize.metadata["documentation_assessed"] = True
    _extend_unique(finalize.metadata, "documentation_updates", payload.get("documentation_updates"))
    _extend_unique(finalize.metadata, "artifacts_moved", payload.get("artifacts_moved"))


def _checks_done(project: ProjectState, payload: Payload) -> None:
    finalize = project.phase(PHASE_FINALIZE)
    finalize.metadata["checks_assessed"] = True
    finalize.metadata["checks_passed"] = bool(payload.get("checks_passed", True))
    if payload.get("pr_url"):
        finalize.metadata["pr_url"] = payload["pr_url"]


# =============================================================================
# Table
# =============================================================================


class TransitionTable:
    """
    Immutable lookup of transitions keyed on (state, event).

    Keying on the current state makes repeated events safe: once the state
    has advanced, firing the same event again finds no entry.
    """

    def __init__(self, transitions: List[Transition]) -> None:
        table: Dict[Tuple[State, Event], Transition] = {}
        for transition in transitions:
            key = (transition.source, transition.event)
            if key in table:
                raise ValueError(
                    f"Duplicate transition for {transition.source.value} + {transition.event.value}"
                )
            table[key] = transition
        self._table = table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self):
        return iter(self._table.values())

    def find(self, state: State, event: Event) -> Optional[Transition]:
        return self._table.get((state, event))

    def get(self, state: State, event: Event) -> Transition:
        """Look up a transition.

        Raises:
            TransitionError: If the event is not permitted in the state.
        """
        transition = self.find(state, event)
        if transition is None:
            raise TransitionError(state.value, event.value)
        return transition

    def events_from(self, state: State) -> List[Event]:
        """Events with a table entry for the state, in table order."""
        return [t.event for t in self._table.values() if t.source == state]


def build_transition_table() -> TransitionTable:
    """Build the lifecycle transition table shared by every project type."""
    return TransitionTable([
        # Discovery
        Transition(
            State.DISCOVERY_DECISION, Event.ENABLE_DISCOVERY, State.DISCOVERY_ACTIVE,
            phase=PHASE_DISCOVERY,
            guard=_enable_discovery_guard,
            action=_enable_discovery,
            description="Enable discovery with a discovery type",
        ),
        Transition(
            State.DISCOVERY_DECISION, Event.SKIP_DISCOVERY, state_after_discovery,
            phase=PHASE_DISCOVERY,
            guard=_undecided_guard(PHASE_DISCOVERY),
            action=_skip_phase(PHASE_DISCOVERY),
            description="Skip discovery",
        ),
        Transition(
            State.DISCOVERY_ACTIVE, Event.COMPLETE_DISCOVERY, state_after_discovery,
            phase=PHASE_DISCOVERY,
            guard=_completion_guard(PHASE_DISCOVERY),
            action=_complete_phase(PHASE_DISCOVERY),
            description="Complete discovery once every artifact is approved",
        ),
        # Design
        Transition(
            State.DESIGN_DECISION, Event.ENABLE_DESIGN, State.DESIGN_ACTIVE,
            phase=PHASE_DESIGN,
            guard=_undecided_guard(PHASE_DESIGN),
            action=_enable_phase(PHASE_DESIGN),
            description="Enable design",
        ),
        Transition(
            State.DESIGN_DECISION, Event.SKIP_DESIGN, State.IMPLEMENTATION_PLANNING,
            phase=PHASE_DESIGN,
            guard=_undecided_guard(PHASE_DESIGN),
            action=_skip_phase(PHASE_DESIGN),
            description="Skip design",
        ),
        Transition(
            State.DESIGN_ACTIVE, Event.COMPLETE_DESIGN, State.IMPLEMENTATION_PLANNING,
            phase=PHASE_DESIGN,
            guard=_completion_guard(PHASE_DESIGN),
            action=_complete_phase(PHASE_DESIGN),
            description="Complete design once every artifact is approved",
        ),
        # Implementation
        Transition(
            State.IMPLEMENTATION_PLANNING, Event.APPROVE_TASKS, State.IMPLEMENTATION_EXECUTING,
            phase=PHASE_IMPLEMENTATION,
            guard=_pending_task_guard,
            action=_start_implementation,
            description="Approve the task plan and start executing",
        ),
        Transition(
            State.IMPLEMENTATION_EXECUTING, Event.COMPLETE_IMPLEMENTATION, State.REVIEW_ACTIVE,
            phase=PHASE_IMPLEMENTATION,
            guard=_completion_guard(PHASE_IMPLEMENTATION),
            action=_complete_phase(PHASE_IMPLEMENTATION),
            description="Hand off to review once every task is done",
        ),
        # Review
        Transition(
            State.REVIEW_ACTIVE, Event.REVIEW_PASS, State.FINALIZE_DOCUMENTATION,
            phase=PHASE_REVIEW,
            guard=_latest_report_guard(Assessment.PASS),
            action=_complete_phase(PHASE_REVIEW),
            description="Review passed, move to finalize",
        ),
        Transition(
            State.REVIEW_ACTIVE, Event.REVIEW_FAIL, State.IMPLEMENTATION_PLANNING,
            phase=PHASE_REVIEW,
            guard=_latest_report_guard(Assessment.FAIL),
            action=_loop_back_review,
            description="Review failed, loop back to planning with a new iteration",
        ),
        # Finalize
        Transition(
            State.FINALIZE_DOCUMENTATION, Event.DOCUMENTATION_DONE, State.FINALIZE_CHECKS,
            phase=PHASE_FINALIZE,
            action=_documentation_done,
            description="Documentation assessed",
        ),
        Transition(
            State.FINALIZE_CHECKS, Event.CHECKS_DONE, State.FINALIZE_CLEANUP,
            phase=PHASE_FINALIZE,
            action=_checks_done,
            description="Final checks assessed",
        ),
        Transition(
            State.FINALIZE_CLEANUP, Event.PROJECT_DELETED, State.NO_PROJECT,
            phase=PHASE_FINALIZE,
            guard=_completion_guard(PHASE_FINALIZE),
            action=_complete_phase(PHASE_FINALIZE),
            description="Project folder deleted",
        ),
    ])


TRANSITIONS = build_transition_table()

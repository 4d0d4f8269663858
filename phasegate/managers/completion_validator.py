"""
Phase completion rules.

Each phase has exactly one completion gate:
- discovery / design: every artifact approved (and at least one exists,
  unless the phase was skipped)
- implementation: at least one task, every task completed or abandoned
- review: the latest report passed
- finalize: the project has been deleted
"""

from typing import Callable, Dict, List

from phasegate.constants import (
    PHASE_DESIGN,
    PHASE_DISCOVERY,
    PHASE_FINALIZE,
    PHASE_IMPLEMENTATION,
    PHASE_NAMES,
    PHASE_REVIEW,
    PROJECT_DELETED_KEY,
)
from phasegate.exceptions import ValidationError
from phasegate.models.base import Assessment
from phasegate.models.project import ProjectState


def _artifact_problems(state: ProjectState, phase: str) -> List[str]:
    record = state.phase(phase)
    if record.is_skipped:
        return []
    if not record.enabled:
        return [f"{phase} phase is not enabled"]
    artifacts = record.artifacts
    if not artifacts:
        return [f"{phase} phase has no artifacts; register and approve at least one"]
    return [
        f"artifact '{a.path}' is not approved"
        for a in artifacts
        if not a.approved
    ]


def _implementation_problems(state: ProjectState, phase: str) -> List[str]:
    tasks = state.phase(PHASE_IMPLEMENTATION).tasks
    if not tasks:
        return ["implementation phase has no tasks; a plan must exist"]
    return [
        f"task '{t.id}' ({t.name}) is not completed or abandoned (status: {t.status.value})"
        for t in tasks
        if not t.status.is_terminal
    ]


def _review_problems(state: ProjectState, phase: str) -> List[str]:
    latest = state.phase(PHASE_REVIEW).latest_report()
    if latest is None:
        return ["no review reports exist; at least one review report is required"]
    if latest.assessment != Assessment.PASS:
        return [
            f"latest review report '{latest.id}' assessment is "
            f"'{latest.assessment.value}' (must be 'pass' to complete)"
        ]
    return []


def _finalize_problems(state: ProjectState, phase: str) -> List[str]:
    if state.metadata.get(PROJECT_DELETED_KEY) is not True:
        return [
            f"project must be deleted before completing finalize phase "
            f"({PROJECT_DELETED_KEY} must be true)"
        ]
    return []


_RULES: Dict[str, Callable[[ProjectState, str], List[str]]] = {
    PHASE_DISCOVERY: _artifact_problems,
    PHASE_DESIGN: _artifact_problems,
    PHASE_IMPLEMENTATION: _implementation_problems,
    PHASE_REVIEW: _review_problems,
    PHASE_FINALIZE: _finalize_problems,
}


def completion_problems(state: ProjectState, phase: str) -> List[str]:
    """List every unmet completion condition for a phase.

    Args:
        state: Project state to inspect. Not modified.
        phase: Phase name.

    Returns:
        Human-readable descriptions of unmet conditions; empty when the
        phase may be completed.

    Raises:
        ValidationError: If the phase name is not valid.
    """
    rule = _RULES.get(phase)
    if rule is None:
        raise ValidationError(
            f"Invalid phase '{phase}': must be one of {', '.join(PHASE_NAMES)}."
        )
    return rule(state, phase)


def validate_phase_completion(state: ProjectState, phase: str) -> None:
    """Check that a phase may be completed.

    Raises:
        ValidationError: Naming the unmet conditions.
    """
    problems = completion_problems(state, phase)
    if problems:
        raise ValidationError(
            f"Cannot complete {phase} phase: " + "; ".join(problems) + "."
        )

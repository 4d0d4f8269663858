"""
Shared prompt components for project types.

Guidance text is plain text meant for direct display to the orchestrating
agent. Project types compose these components and may replace the
guidance paragraph for any state.
"""

from typing import Dict, List, Mapping, Optional

from phasegate.constants import (
    PHASE_DESIGN,
    PHASE_DISCOVERY,
    PHASE_IMPLEMENTATION,
    PHASE_NAMES,
    PHASE_REVIEW,
)
from phasegate.models.base import TaskStatus
from phasegate.models.project import ProjectState
from phasegate.statechart.states import State

RULE = "━" * 52


class Guidance:
    """Title and body of the guidance shown for one state."""

    def __init__(self, title: str, body: str) -> None:
        self.title = title
        self.body = body.strip("\n")


# =============================================================================
# Components
# =============================================================================


def project_header(project: ProjectState) -> str:
    lines = [
        f"Project: {project.name} ({project.type})",
        f"Branch: {project.branch}",
    ]
    if project.description:
        lines.append(f"Description: {project.description}")
    return "\n".join(lines)


def mode_line(state: State) -> str:
    if state.is_subservient:
        return "MODE: Subservient (act as assistant to the human, never decide alone)"
    if state.is_autonomous:
        return "MODE: Autonomous (execute within established boundaries)"
    return ""


def artifact_section(project: ProjectState, phase: str) -> str:
    record = project.phases.get(phase)
    if record is None:
        return ""
    artifacts = record.artifacts
    approved = sum(1 for a in artifacts if a.approved)
    lines = [f"Artifacts: {len(artifacts)} total, {approved} approved"]
    for artifact in artifacts:
        mark = "approved" if artifact.approved else "pending"
        lines.append(f"  - {artifact.path} ({mark})")
    return "\n".join(lines)


def task_summary(project: ProjectState) -> str:
    record = project.phases.get(PHASE_IMPLEMENTATION)
    tasks = record.tasks if record else []
    if not tasks:
        return "Tasks: none yet"

    counts: Dict[str, int] = {}
    for task in tasks:
        counts[task.status.value] = counts.get(task.status.value, 0) + 1
    details = [f"{counts[s.value]} {s.value}" for s in TaskStatus if counts.get(s.value)]
    lines = [f"Tasks: {len(tasks)} total ({', '.join(details)})"]
    for task in tasks:
        lines.append(f"  [{task.id}] {task.name} ({task.status.value}, iteration {task.iteration})")
    return "\n".join(lines)


def review_history(project: ProjectState) -> str:
    review = project.phases.get(PHASE_REVIEW)
    if review is None:
        return ""
    lines = [f"Review iteration: {review.iteration or 1}"]
    for report in review.reports:
        lines.append(
            f"  Report {report.id} (iteration {report.iteration}): "
            f"{report.assessment.value} - {report.path}"
        )
    return "\n".join(lines)


def phase_overview(project: ProjectState) -> str:
    lines = ["Phases:"]
    for name in PHASE_NAMES:
        record = project.phases.get(name)
        if record is None:
            continue
        mark = "✓" if record.enabled else " "
        lines.append(f"  [{mark}] {name:<16} {record.status.value}")
    return "\n".join(lines)


def frame(title: str, sections: List[str]) -> str:
    """Wrap non-empty sections between horizontal rules under a title."""
    parts = [RULE, "", title.upper(), ""]
    for section in sections:
        if section:
            parts.append(section)
            parts.append("")
    parts.append(RULE)
    return "\n".join(parts)


# =============================================================================
# Default guidance per state
# =============================================================================


DEFAULT_GUIDANCE: Dict[State, Guidance] = {
    State.NO_PROJECT: Guidance("No active project", """
No active project found in this working tree.

NEXT ACTION:
  phasegate new <name> --description "<description>"
"""),
    State.DISCOVERY_DECISION: Guidance("Discovery phase decision", """
Determine if a discovery phase is warranted for this work.

Score each 0-2: context availability, problem clarity,
codebase familiarity, research needs.
  0-2: not warranted (skip)
  3-5: optional (ask the user)
  6-8: recommended (suggest strongly)

NEXT ACTION:
  phasegate phase enable discovery --type <bug|feature|docs|refactor|general>
  phasegate phase skip discovery
"""),
    State.DISCOVERY_ACTIVE: Guidance("Discovery phase", """
RESPONSIBILITIES:
  - Facilitate research and investigation
  - Create research artifacts
  - Request human approval for every artifact

NEXT ACTIONS:
  1. phasegate artifact add <path> --phase discovery
  2. phasegate artifact approve <path> --phase discovery (after human approval)
  3. phasegate phase complete discovery
"""),
    State.DESIGN_DECISION: Guidance("Design phase decision", """
Determine if a design phase is warranted for this work.

Score each 0-2: scope size, architectural impact,
integration complexity, open design decisions. Bug fixes: -3.
  0-2: not warranted (skip)
  3-5: optional (ask the user)
  6-8: recommended (suggest strongly)

NEXT ACTION:
  phasegate phase enable design
  phasegate phase skip design
"""),
    State.DESIGN_ACTIVE: Guidance("Design phase", """
RESPONSIBILITIES:
  - Facilitate design alignment through conversation
  - Create design artifacts (ADRs, design docs)
  - Request human approval for every artifact

NEXT ACTIONS:
  1. phasegate artifact add <path> --phase design
  2. phasegate artifact approve <path> --phase design (after human approval)
  3. phasegate phase complete design
"""),
    State.IMPLEMENTATION_PLANNING: Guidance("Implementation planning", """
Break the work down into tasks. IDs are gap-numbered (010, 020, 030...).

NEXT ACTIONS:
  1. phasegate task add "<name>" [--description "..."]
  2. Present the plan to the human for approval
  3. phasegate task approve
"""),
    State.IMPLEMENTATION_EXECUTING: Guidance("Implementation executing", """
Work the approved tasks. Spawn implementer agents as needed.

NEXT ACTIONS:
  1. phasegate task status <id> in_progress
  2. phasegate task status <id> completed (or abandoned)
  3. phasegate phase complete implementation
"""),
    State.REVIEW_ACTIVE: Guidance("Review", """
Validate the implementation against the original intent.

NEXT ACTIONS:
  1. Write a review report
  2. phasegate review add-report <path> --assessment <pass|fail>
     A failing report loops back to implementation planning.
"""),
    State.FINALIZE_DOCUMENTATION: Guidance("Finalize: documentation", """
Check whether documentation needs updating and update it.

NEXT ACTION:
  phasegate finalize docs [--update <path>]...
"""),
    State.FINALIZE_CHECKS: Guidance("Finalize: checks", """
Run the test suite, linters and any other project checks.

NEXT ACTION:
  phasegate finalize checks
"""),
    State.FINALIZE_CLEANUP: Guidance("Finalize: cleanup", """
The project folder must be deleted before the branch is merged.

NEXT ACTION:
  phasegate finalize delete
"""),
}


def state_context(state: State, project: ProjectState) -> List[str]:
    """Status sections relevant to a state."""
    if state in (State.DISCOVERY_ACTIVE, State.DISCOVERY_DECISION):
        return [artifact_section(project, PHASE_DISCOVERY)]
    if state in (State.DESIGN_ACTIVE, State.DESIGN_DECISION):
        return [artifact_section(project, PHASE_DESIGN)]
    if state in (State.IMPLEMENTATION_PLANNING, State.IMPLEMENTATION_EXECUTING):
        return [task_summary(project), review_history(project)]
    if state == State.REVIEW_ACTIVE:
        return [task_summary(project), review_history(project)]
    if state == State.NO_PROJECT:
        return []
    return [phase_overview(project)]


def render_state_prompt(
    state: State,
    project: Optional[ProjectState],
    overrides: Optional[Mapping[State, Guidance]] = None,
) -> str:
    """Render the guidance for a state.

    Args:
        state: Statechart state.
        project: Project to describe (None when there is no project).
        overrides: Per-type guidance replacing the defaults.

    Returns:
        Display-ready guidance text.
    """
    guidance = (overrides or {}).get(state) or DEFAULT_GUIDANCE[state]
    sections: List[str] = []
    if project is not None and state != State.NO_PROJECT:
        sections.append(project_header(project))
        sections.append(mode_line(state))
        sections.extend(state_context(state, project))
    sections.append(guidance.body)
    return frame(guidance.title, sections)

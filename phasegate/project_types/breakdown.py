"""
Breakdown project type: split a large body of work into small units.
"""

from phasegate.constants import PHASE_DESIGN, PHASE_DISCOVERY, PHASE_IMPLEMENTATION
from phasegate.models.project import ProjectState
from phasegate.statechart.states import State

from .base import DECIDE, ProjectTypeConfig
from .prompts import Guidance


def _dependency_context(state: State, project: ProjectState) -> str:
    if state not in (State.IMPLEMENTATION_PLANNING, State.IMPLEMENTATION_EXECUTING):
        return ""
    lines = []
    for task in project.phase(PHASE_IMPLEMENTATION).tasks:
        if task.dependencies:
            lines.append(f"  {task.id} depends on {', '.join(task.dependencies)}")
        elif task.parallel:
            lines.append(f"  {task.id} can run in parallel")
    if not lines:
        return ""
    return "Dependencies:\n" + "\n".join(lines)


BREAKDOWN = ProjectTypeConfig(
    name="breakdown",
    description="Decompose a large initiative into independently deliverable work units.",
    orchestrator_text="""
This project decomposes a large initiative into small, independently
deliverable work units. Decide with the human whether research and design
are needed first. Each implementation task is one work unit; record
dependencies between units so they can be scheduled.
""",
    phase_defaults={PHASE_DISCOVERY: DECIDE, PHASE_DESIGN: DECIDE},
    guidance={
        State.IMPLEMENTATION_PLANNING: Guidance("Breakdown: work units", """
Split the initiative into work units. Each unit should be reviewable on
its own and small enough for a single implementer.

NEXT ACTIONS:
  1. phasegate task add "<unit>" --description "..." [--depends-on <id>]
  2. Walk the human through the units and their dependencies
  3. phasegate task approve
"""),
    },
    context_hook=_dependency_context,
)

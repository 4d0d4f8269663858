"""
Exploration project type: research first, with discovery enabled from the start.
"""

from phasegate.constants import PHASE_DESIGN, PHASE_DISCOVERY
from phasegate.models.project import ProjectState
from phasegate.statechart.states import State

from .base import ENABLED, SKIPPED, ProjectTypeConfig
from .prompts import Guidance


def _discovery_context(state: State, project: ProjectState) -> str:
    if state != State.DISCOVERY_ACTIVE:
        return ""
    discovery = project.phase(PHASE_DISCOVERY)
    return f"Discovery type: {discovery.discovery_type or 'unspecified'}"


EXPLORATION = ProjectTypeConfig(
    name="exploration",
    description="Open-ended research whose findings are approved before any code changes.",
    orchestrator_text="""
This is an exploration. Investigate the topic with the human, record each
finding as a discovery artifact, and get every artifact approved.
Only move on to implementation once the findings are accepted.
""",
    phase_defaults={PHASE_DISCOVERY: ENABLED, PHASE_DESIGN: SKIPPED},
    default_discovery_type="general",
    guidance={
        State.DISCOVERY_ACTIVE: Guidance("Exploration: research", """
RESPONSIBILITIES:
  - Break the topic into research questions
  - Record one finding document per question
  - Summarize the findings in a final artifact
  - Request human approval for every artifact

NEXT ACTIONS:
  1. phasegate artifact add <path> --phase discovery
  2. phasegate artifact approve <path> --phase discovery (after human approval)
  3. phasegate phase complete discovery
"""),
    },
    context_hook=_discovery_context,
)

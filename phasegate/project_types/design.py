"""
Design project type: design documents and ADRs before implementation.
"""

from phasegate.constants import PHASE_DESIGN, PHASE_DISCOVERY
from phasegate.statechart.states import State

from .base import DECIDE, ENABLED, ProjectTypeConfig
from .prompts import Guidance

DESIGN = ProjectTypeConfig(
    name="design",
    description="Work that needs approved design documents before implementation.",
    orchestrator_text="""
This project produces design documents before any implementation.
Decide with the human whether discovery is needed first, then draft the
design artifacts (design docs, ADRs) and get each one approved.
""",
    phase_defaults={PHASE_DISCOVERY: DECIDE, PHASE_DESIGN: ENABLED},
    guidance={
        State.DESIGN_ACTIVE: Guidance("Design: documents", """
RESPONSIBILITIES:
  - Draft a design document for the change
  - Record each significant decision as an ADR
  - Link the inputs each document relies on
  - Request human approval for every artifact

NEXT ACTIONS:
  1. phasegate artifact add <path> --phase design --input   (for sources)
  2. phasegate artifact add <path> --phase design           (for documents)
  3. phasegate artifact approve <path> --phase design
  4. phasegate phase complete design
"""),
    },
)

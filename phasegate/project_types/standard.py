"""
Standard project type: plan, implement, review, finalize.
"""

from phasegate.constants import PHASE_DESIGN, PHASE_DISCOVERY

from .base import SKIPPED, ProjectTypeConfig

STANDARD = ProjectTypeConfig(
    name="standard",
    description="Feature or fix work that goes straight to implementation planning.",
    orchestrator_text="""
Drive the work through planning, implementation, review and finalize.
Discovery and design are skipped: requirements are assumed to be clear.
Tasks are planned by you and approved by the human before execution.
A failing review loops back to planning with a new iteration.
""",
    phase_defaults={PHASE_DISCOVERY: SKIPPED, PHASE_DESIGN: SKIPPED},
)

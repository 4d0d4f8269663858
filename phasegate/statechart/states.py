"""
States and events of the project lifecycle statechart.
"""

from enum import Enum


class State(str, Enum):
    """A position in the project lifecycle."""

    # No active project (terminal, reached after deletion)
    NO_PROJECT = "NoProject"

    # Decide whether discovery is warranted
    DISCOVERY_DECISION = "DiscoveryDecision"
    # Research with human approval of every artifact
    DISCOVERY_ACTIVE = "DiscoveryActive"

    DESIGN_DECISION = "DesignDecision"
    DESIGN_ACTIVE = "DesignActive"

    # Break the work down into tasks
    IMPLEMENTATION_PLANNING = "ImplementationPlanning"
    # Work the approved tasks
    IMPLEMENTATION_EXECUTING = "ImplementationExecuting"

    REVIEW_ACTIVE = "ReviewActive"

    FINALIZE_DOCUMENTATION = "FinalizeDocumentation"
    FINALIZE_CHECKS = "FinalizeChecks"
    # Project folder must be deleted before merge
    FINALIZE_CLEANUP = "FinalizeCleanup"

    def __str__(self) -> str:
        return self.value

    @property
    def is_subservient(self) -> bool:
        """Human-led states, where the agent only assists."""
        return self in (
            State.DISCOVERY_DECISION,
            State.DISCOVERY_ACTIVE,
            State.DESIGN_DECISION,
            State.DESIGN_ACTIVE,
        )

    @property
    def is_autonomous(self) -> bool:
        """Agent-led states, executing within established boundaries."""
        return self is not State.NO_PROJECT and not self.is_subservient


class Event(str, Enum):
    """A named intent that may move the statechart."""

    ENABLE_DISCOVERY = "enable_discovery"
    SKIP_DISCOVERY = "skip_discovery"
    COMPLETE_DISCOVERY = "complete_discovery"
    ENABLE_DESIGN = "enable_design"
    SKIP_DESIGN = "skip_design"
    COMPLETE_DESIGN = "complete_design"
    APPROVE_TASKS = "approve_tasks"
    COMPLETE_IMPLEMENTATION = "complete_implementation"
    REVIEW_PASS = "review_pass"
    REVIEW_FAIL = "review_fail"
    DOCUMENTATION_DONE = "documentation_done"
    CHECKS_DONE = "checks_done"
    PROJECT_DELETED = "project_deleted"

    def __str__(self) -> str:
        return self.value


# Which phase each state belongs to (None for NoProject)
STATE_PHASES = {
    State.NO_PROJECT: None,
    State.DISCOVERY_DECISION: "discovery",
    State.DISCOVERY_ACTIVE: "discovery",
    State.DESIGN_DECISION: "design",
    State.DESIGN_ACTIVE: "design",
    State.IMPLEMENTATION_PLANNING: "implementation",
    State.IMPLEMENTATION_EXECUTING: "implementation",
    State.REVIEW_ACTIVE: "review",
    State.FINALIZE_DOCUMENTATION: "finalize",
    State.FINALIZE_CHECKS: "finalize",
    State.FINALIZE_CLEANUP: "finalize",
}

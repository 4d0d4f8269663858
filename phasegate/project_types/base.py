"""
ProjectTypeConfig: the capability set of one project type.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional

from phasegate.constants import DISCOVERY_TYPES, PHASE_DESIGN, PHASE_DISCOVERY
from phasegate.exceptions import ConfigurationError
from phasegate.models.project import ProjectState
from phasegate.statechart.states import State

from .prompts import Guidance, frame, phase_overview, project_header, render_state_prompt

# Default enablement of an optional phase
ENABLED = True
SKIPPED = False
DECIDE = None


@dataclass(frozen=True)
class ProjectTypeConfig:
    """
    Everything that differs between project types.

    Types share the statechart and its transition table; they differ only
    in which optional phases start enabled and in the text of their prompts.

    Fields:
    - name: registry key, stored on ProjectState.type
    - phase_defaults: discovery/design -> ENABLED, SKIPPED or DECIDE
    - default_discovery_type: discovery type used when discovery starts enabled
    - orchestrator_text: paragraph describing the type to the orchestrator
    - guidance: per-state guidance replacing the shared defaults
    """

    name: str
    description: str
    orchestrator_text: str
    phase_defaults: Mapping[str, Optional[bool]] = field(
        default_factory=lambda: {PHASE_DISCOVERY: SKIPPED, PHASE_DESIGN: SKIPPED}
    )
    default_discovery_type: Optional[str] = None
    guidance: Mapping[State, Guidance] = field(default_factory=dict)
    context_hook: Optional[Callable[[State, ProjectState], str]] = None

    def __post_init__(self) -> None:
        if self.phase_defaults.get(PHASE_DISCOVERY) is ENABLED:
            if self.default_discovery_type not in DISCOVERY_TYPES:
                raise ConfigurationError(
                    f"Project type '{self.name}' enables discovery by default "
                    f"but has no valid default_discovery_type."
                )

    def optional_phases(
        self,
        discovery: Optional[bool] = None,
        design: Optional[bool] = None,
        use_defaults: bool = True,
    ) -> Dict[str, Optional[bool]]:
        """Resolve discovery/design enablement for a new project.

        Args:
            discovery: Override for discovery (None keeps the type default).
            design: Override for design (None keeps the type default).
            use_defaults: When False, unset phases are left for a decision.

        Returns:
            Mapping of optional phase name to ENABLED, SKIPPED or DECIDE.
        """
        resolved: Dict[str, Optional[bool]] = {}
        for phase, override in ((PHASE_DISCOVERY, discovery), (PHASE_DESIGN, design)):
            if override is not None:
                resolved[phase] = override
            elif use_defaults:
                resolved[phase] = self.phase_defaults.get(phase, DECIDE)
            else:
                resolved[phase] = DECIDE
        return resolved

    def orchestrator_prompt(self, project: ProjectState) -> str:
        """Describe the project and its workflow to the orchestrator."""
        return frame(
            f"{self.name} project",
            [project_header(project), self.orchestrator_text.strip("\n"), phase_overview(project)],
        )

    def state_prompt(self, state: State, project: Optional[ProjectState]) -> str:
        """Render the guidance for a state of a project of this type."""
        text = render_state_prompt(state, project, self.guidance)
        if self.context_hook is not None and project is not None:
            extra = self.context_hook(state, project)
            if extra:
                text = f"{text}\n{extra}"
        return text

"""
Constants for the Phasegate CLI application.

The DEFAULT_* values can be overridden per working tree in
.phasegate/config.json (see phasegate.config). Everything else is fixed.
"""

# =============================================================================
# Default Fallback Values
# These are used if config.json doesn't exist or doesn't specify a value.
# =============================================================================

# Workspace layout defaults
PHASEGATE_DIR_NAME = ".phasegate"
DEFAULT_PROJECT_DIR = "project"
DEFAULT_STATE_FILE = "project/state.yaml"

# Branches a project may never be created on
DEFAULT_PROTECTED_BRANCHES = ["main", "master"]

# ID assignment defaults
DEFAULT_TASK_ID_STEP = 10
DEFAULT_TASK_ID_WIDTH = 3
DEFAULT_REPORT_ID_WIDTH = 3
DEFAULT_FEEDBACK_ID_WIDTH = 3

# Status command defaults
DEFAULT_STATUS_HEADER_WIDTH = 20

# Phase names (not configurable)
PHASE_DISCOVERY = "discovery"
PHASE_DESIGN = "design"
PHASE_IMPLEMENTATION = "implementation"
PHASE_REVIEW = "review"
PHASE_FINALIZE = "finalize"
PHASE_NAMES = [
    PHASE_DISCOVERY,
    PHASE_DESIGN,
    PHASE_IMPLEMENTATION,
    PHASE_REVIEW,
    PHASE_FINALIZE,
]
OPTIONAL_PHASES = [PHASE_DISCOVERY, PHASE_DESIGN]
REQUIRED_PHASES = [PHASE_IMPLEMENTATION, PHASE_REVIEW, PHASE_FINALIZE]

# Discovery sub-types (not configurable)
DISCOVERY_TYPES = ["bug", "feature", "docs", "refactor", "general"]

# Review assessments (not configurable)
ASSESSMENT_PASS = "pass"
ASSESSMENT_FAIL = "fail"
VALID_ASSESSMENTS = [ASSESSMENT_PASS, ASSESSMENT_FAIL]

# Metadata keys interpreted by the core
PROJECT_DELETED_KEY = "project_deleted"

# Validation error messages (not configurable)
VALIDATION_NAME_KEBAB = (
    "Project name must be kebab-case (lowercase letters, digits, and single hyphens only)."
)
VALIDATION_DESCRIPTION_REQUIRED = "Project description cannot be empty."
VALIDATION_PATH_REQUIRED = "Artifact path cannot be empty."
VALIDATION_INVALID_ASSESSMENT = "Assessment must be one of: pass, fail."


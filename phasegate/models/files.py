"""
File models for the Phasegate CLI.

Models representing the structure of files in the .phasegate/ directory.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator

from phasegate.constants import (
    DEFAULT_PROTECTED_BRANCHES,
    DEFAULT_REPORT_ID_WIDTH,
    DEFAULT_STATE_FILE,
    DEFAULT_STATUS_HEADER_WIDTH,
    DEFAULT_TASK_ID_STEP,
    DEFAULT_TASK_ID_WIDTH,
)


class ConfigFile(BaseModel):
    """Model for config.json file.

    Workspace settings. Every key is optional on disk; missing keys fall
    back to the defaults in phasegate.constants.
    """

    schema_version: str = "0.1.0"

    # Layout settings
    state_file: str = DEFAULT_STATE_FILE
    protected_branches: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PROTECTED_BRANCHES)
    )

    # ID settings
    task_id_step: int = DEFAULT_TASK_ID_STEP
    task_id_width: int = DEFAULT_TASK_ID_WIDTH
    report_id_width: int = DEFAULT_REPORT_ID_WIDTH

    # Display settings
    status_header_width: int = DEFAULT_STATUS_HEADER_WIDTH

    @field_validator("task_id_step", "task_id_width", "report_id_width")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """IDs must grow with every record and have at least one digit."""
        if v < 1:
            raise ValueError("ID step and widths must be at least 1")
        return v

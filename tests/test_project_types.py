"""
Tests for the project type registry and prompt rendering.
"""

import pytest

from phasegate.exceptions import ConfigurationError, DuplicateError
from phasegate.project_types import (
    DECIDE,
    ENABLED,
    SKIPPED,
    ProjectTypeConfig,
    get_project_type,
    project_type_names,
    register,
)
from phasegate.statechart.states import State


class TestRegistry:
    """Test registry lookup."""

    def test_builtin_types(self):
        assert project_type_names()[:4] == ["standard", "exploration", "design", "breakdown"]

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError, match="kanban"):
            get_project_type("kanban")

    def test_duplicate_registration(self):
        with pytest.raises(DuplicateError):
            register(get_project_type("standard"))

    def test_enabled_discovery_needs_default_type(self):
        with pytest.raises(ConfigurationError):
            ProjectTypeConfig(
                name="broken",
                description="Broken",
                orchestrator_text="",
                phase_defaults={"discovery": ENABLED, "design": SKIPPED},
            )


class TestPhaseDefaults:
    """Test default enablement per type."""

    @pytest.mark.parametrize(
        "name, discovery, design",
        [
            ("standard", SKIPPED, SKIPPED),
            ("exploration", ENABLED, SKIPPED),
            ("design", DECIDE, ENABLED),
            ("breakdown", DECIDE, DECIDE),
        ],
    )
    def test_defaults(self, name, discovery, design):
        phases = get_project_type(name).optional_phases()
        assert phases == {"discovery": discovery, "design": design}

    def test_overrides(self):
        phases = get_project_type("standard").optional_phases(discovery=True)
        assert phases == {"discovery": True, "design": False}

    def test_without_defaults(self):
        phases = get_project_type("standard").optional_phases(use_defaults=False)
        assert phases == {"discovery": None, "design": None}


class TestPrompts:
    """Test guidance text."""

    def test_state_prompt_includes_project(self, mock_data):
        project = mock_data.create_project()
        text = get_project_type("standard").state_prompt(State.IMPLEMENTATION_PLANNING, project)
        assert "Project: add-auth (standard)" in text
        assert "MODE: Autonomous" in text
        assert "Tasks: none yet" in text

    def test_subservient_mode(self, mock_data):
        project = mock_data.create_project(discovery=True)
        text = get_project_type("standard").state_prompt(State.DISCOVERY_ACTIVE, project)
        assert "MODE: Subservient" in text

    def test_type_guidance_override(self, mock_data):
        project = mock_data.create_project(project_type="exploration", discovery=True)
        text = get_project_type("exploration").state_prompt(State.DISCOVERY_ACTIVE, project)
        assert "EXPLORATION: RESEARCH" in text
        assert "Discovery type: feature" in text

    def test_breakdown_lists_dependencies(self, mock_data):
        project = mock_data.create_project(project_type="breakdown")
        first = mock_data.create_task("010", "Schema")
        second = mock_data.create_task("020", "API")
        second.dependencies = ["010"]
        project.phase("implementation").tasks.extend([first, second])
        text = get_project_type("breakdown").state_prompt(State.IMPLEMENTATION_PLANNING, project)
        assert "020 depends on 010" in text
        assert "BREAKDOWN: WORK UNITS" in text

    def test_review_history(self, mock_data):
        project = mock_data.create_project()
        project.phase("review").reports.append(mock_data.create_report("001", "fail"))
        text = get_project_type("standard").state_prompt(State.REVIEW_ACTIVE, project)
        assert "Report 001 (iteration 1): fail - review-001.md" in text

    def test_orchestrator_prompt(self, mock_data):
        project = mock_data.create_project(project_type="design", design=True)
        text = get_project_type("design").orchestrator_prompt(project)
        assert "DESIGN PROJECT" in text
        assert "design documents" in text

    def test_every_state_has_guidance(self, mock_data):
        project = mock_data.create_project()
        for state in State:
            assert get_project_type("standard").state_prompt(state, project)

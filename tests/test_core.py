"""
Tests for PhasegateCore.

Every operation is checked against a fresh core on the same working tree,
the way each CLI invocation reloads the project.
"""

import json

import pytest

from phasegate.exceptions import (
    ConfigurationError,
    InvalidOperationError,
    NoProjectError,
    ProjectExistsError,
    TransitionError,
    ValidationError,
)
from phasegate.models.base import PhaseStatus, TaskStatus
from phasegate.models.files import ConfigFile
from phasegate.statechart.states import State


class TestCreateProject:
    """Test project creation."""

    def test_standard_project(self, core, workflow):
        prompt = core.create_project("add-auth", "Add authentication", "feat/add-auth")
        assert "IMPLEMENTATION PLANNING" in prompt

        reloaded = workflow.reload(core)
        assert reloaded.state == State.IMPLEMENTATION_PLANNING
        assert reloaded.project.branch == "feat/add-auth"
        assert reloaded.project.phase("discovery").is_skipped

    @pytest.mark.parametrize(
        "project_type, expected",
        [
            ("exploration", State.DISCOVERY_ACTIVE),
            ("design", State.DISCOVERY_DECISION),
            ("breakdown", State.DISCOVERY_DECISION),
        ],
    )
    def test_initial_state_per_type(self, core, project_type, expected):
        core.create_project("work", "Some work", "feat/work", project_type=project_type)
        assert core.state == expected

    def test_exploration_uses_default_discovery_type(self, core):
        core.create_project("spike", "Spike", "feat/spike", project_type="exploration")
        assert core.project.phase("discovery").discovery_type == "general"

    def test_enable_discovery_override(self, core):
        core.create_project(
            "fix-login", "Fix login", "fix/login", discovery=True, discovery_type="bug"
        )
        assert core.state == State.DISCOVERY_ACTIVE
        assert core.project.phase("discovery").discovery_type == "bug"

    def test_enabled_discovery_needs_type(self, core):
        with pytest.raises(ValidationError, match="discovery type"):
            core.create_project("fix-login", "Fix login", "fix/login", discovery=True)
        assert not core.storage.exists()

    @pytest.mark.parametrize("name", ["Add-Auth", "add_auth", "add--auth", ""])
    def test_name_must_be_kebab(self, core, name):
        with pytest.raises(ValidationError, match="kebab-case"):
            core.create_project(name, "Description", "feat/x")

    def test_description_required(self, core):
        with pytest.raises(ValidationError, match="description"):
            core.create_project("add-auth", "  ", "feat/add-auth")

    @pytest.mark.parametrize("branch", ["main", "master"])
    def test_protected_branch(self, core, branch):
        with pytest.raises(ValidationError, match="protected branch"):
            core.create_project("add-auth", "Add authentication", branch)

    def test_configured_protected_branch(self, core):
        core.storage.save_config(ConfigFile(protected_branches=["trunk"]))
        with pytest.raises(ValidationError):
            core.create_project("add-auth", "Add authentication", "trunk")
        core.create_project("add-auth", "Add authentication", "main")

    def test_unknown_type(self, core):
        with pytest.raises(ConfigurationError):
            core.create_project("add-auth", "Add authentication", "feat/x", project_type="kanban")

    def test_existing_project(self, standard_core, workflow):
        with pytest.raises(ProjectExistsError):
            workflow.reload(standard_core).create_project("other", "Other", "feat/other")

    def test_no_project(self, core):
        with pytest.raises(NoProjectError):
            core.status_text()


class TestPhaseDecisions:
    """Test enabling, skipping and completing phases."""

    @pytest.fixture
    def breakdown_core(self, core):
        core.create_project("split-work", "Split the work", "feat/split", project_type="breakdown")
        return core

    def test_enable_discovery(self, breakdown_core, workflow):
        breakdown_core.enable_phase("discovery", discovery_type="refactor")
        reloaded = workflow.reload(breakdown_core)
        assert reloaded.state == State.DISCOVERY_ACTIVE
        assert reloaded.project.phase("discovery").discovery_type == "refactor"

    def test_skip_both(self, breakdown_core):
        breakdown_core.skip_phase("discovery")
        assert breakdown_core.state == State.DESIGN_DECISION
        breakdown_core.skip_phase("design")
        assert breakdown_core.state == State.IMPLEMENTATION_PLANNING

    def test_only_optional_phases(self, breakdown_core):
        with pytest.raises(ValidationError):
            breakdown_core.enable_phase("review")
        with pytest.raises(ValidationError):
            breakdown_core.skip_phase("implementation")

    def test_decision_is_made_once(self, breakdown_core):
        breakdown_core.skip_phase("discovery")
        with pytest.raises(TransitionError):
            breakdown_core.enable_phase("discovery", discovery_type="bug")

    def test_discovery_scenario(self, breakdown_core, workflow):
        breakdown_core.enable_phase("discovery", discovery_type="feature")
        breakdown_core.add_artifact("discovery", "research/findings.md")
        with pytest.raises(ValidationError, match="findings.md"):
            breakdown_core.complete_phase("discovery")

        core = workflow.reload(breakdown_core)
        assert core.state == State.DISCOVERY_ACTIVE
        core.approve_artifact("discovery", "research/findings.md")
        core.complete_phase("discovery")
        assert workflow.reload(core).state == State.DESIGN_DECISION

    def test_finalize_completes_through_delete(self, standard_core):
        with pytest.raises(InvalidOperationError, match="finalize delete"):
            standard_core.complete_phase("finalize")

    def test_invalid_phase(self, standard_core):
        with pytest.raises(ValidationError):
            standard_core.complete_phase("deploy")


class TestTasks:
    """Test task operations through the core."""

    def test_standard_scenario(self, standard_core, workflow):
        first = standard_core.add_task("Write parser")
        second = standard_core.add_task("Write tests", dependencies=[first.id])
        standard_core.approve_tasks()
        assert standard_core.state == State.IMPLEMENTATION_EXECUTING

        core = workflow.reload(standard_core)
        core.set_task_status(first.id, "completed")
        with pytest.raises(ValidationError, match=f"'{second.id}'"):
            core.complete_phase("implementation")
        assert workflow.reload(core).state == State.IMPLEMENTATION_EXECUTING

    def test_task_bookkeeping_persists(self, standard_core, workflow):
        task = standard_core.add_task("Write parser")
        standard_core.assign_task_agent(task.id, "implementer")
        standard_core.add_task_reference(task.id, "docs/grammar.md")
        standard_core.add_task_file(task.id, "src/parser.py")
        standard_core.increment_task_iteration(task.id)
        feedback = standard_core.add_task_feedback(task.id, "Handle empty input")
        standard_core.address_task_feedback(task.id, feedback.id)

        stored = workflow.reload(standard_core).tasks.get(task.id)
        assert stored.assigned_agent == "implementer"
        assert stored.references == ["docs/grammar.md"]
        assert stored.files_modified == ["src/parser.py"]
        assert stored.iteration == 2
        assert stored.feedback[0].status.value == "addressed"

    def test_add_task_outside_implementation(self, core):
        core.create_project("spike", "Spike", "feat/spike", project_type="exploration")
        with pytest.raises(InvalidOperationError, match="add a task"):
            core.add_task("Too early")

    def test_list_tasks(self, standard_core):
        task = standard_core.add_task("One")
        standard_core.add_task("Two")
        standard_core.set_task_status(task.id, "abandoned")
        assert [t.name for t in standard_core.list_tasks("abandoned")] == ["One"]
        assert len(standard_core.list_tasks()) == 2

    def test_invalid_id_step_keeps_ids_unique(self, core):
        core.storage.phasegate_dir.mkdir(parents=True)
        core.storage.config.config_path.write_text(json.dumps({"task_id_step": -10}))
        core.create_project("add-auth", "Add authentication", "feat/add-auth")
        first = core.add_task("One")
        second = core.add_task("Two")
        assert (first.id, second.id) == ("010", "020")

    def test_id_settings_follow_project_tree(self, core, tmp_path, monkeypatch):
        core.storage.phasegate_dir.mkdir(parents=True)
        core.storage.config.config_path.write_text(json.dumps({"task_id_step": 5}))
        elsewhere = tmp_path / "elsewhere"
        (elsewhere / ".phasegate").mkdir(parents=True)
        (elsewhere / ".phasegate" / "config.json").write_text(json.dumps({"task_id_step": 100}))
        monkeypatch.chdir(elsewhere)

        core.create_project("add-auth", "Add authentication", "feat/add-auth")
        assert [core.add_task(name).id for name in ("One", "Two")] == ["005", "010"]

    def test_failed_operation_writes_nothing(self, standard_core, workflow):
        standard_core.add_task("One")
        before = standard_core.storage.state_path.read_text()
        with pytest.raises(ValidationError):
            standard_core.set_task_status("010", "finished")
        assert standard_core.storage.state_path.read_text() == before
        assert workflow.reload(standard_core).tasks.get("010").status == TaskStatus.PENDING


class TestReview:
    """Test review reports and the loop-back."""

    def test_fail_then_pass(self, standard_core, workflow):
        workflow.to_review(standard_core)
        core = workflow.reload(standard_core)

        report = core.add_review_report("review-1.md", "fail")
        assert report.id == "001"
        core = workflow.reload(core)
        assert core.state == State.IMPLEMENTATION_PLANNING
        assert core.project.phase("review").iteration == 2

        fix = core.add_task("Address review")
        assert fix.id == "020"
        core.approve_tasks()
        core.set_task_status(fix.id, "completed")
        core.complete_phase("implementation")

        report = core.add_review_report("review-2.md", "pass")
        assert (report.id, report.iteration) == ("002", 2)
        core = workflow.reload(core)
        assert core.state == State.FINALIZE_DOCUMENTATION
        assert core.project.phase("review").status == PhaseStatus.COMPLETED
        assert core.project.phase("review").iteration == 2

    def test_report_outside_review(self, standard_core):
        with pytest.raises(InvalidOperationError):
            standard_core.add_review_report("review.md", "pass")

    def test_invalid_assessment(self, standard_core, workflow):
        workflow.to_review(standard_core)
        with pytest.raises(ValidationError):
            standard_core.add_review_report("review.md", "meh")
        assert workflow.reload(standard_core).list_review_reports() == []


class TestFinalize:
    """Test the finalize steps and project deletion."""

    def test_full_lifecycle(self, standard_core, workflow):
        workflow.to_review(standard_core)
        standard_core.add_review_report("review.md", "pass")
        standard_core.finalize_documentation(updates=["README.md"], artifacts_moved=["docs/adr-001.md"])
        standard_core.finalize_checks(passed=True, pr_url="https://example.test/pr/7")

        core = workflow.reload(standard_core)
        assert core.state == State.FINALIZE_CLEANUP
        finalize = core.project.phase("finalize")
        assert finalize.metadata["documentation_updates"] == ["README.md"]
        assert finalize.metadata["artifacts_moved"] == ["docs/adr-001.md"]
        assert finalize.metadata["checks_passed"] is True
        assert finalize.status != PhaseStatus.COMPLETED

        prompt = core.delete_project()
        assert core.state == State.NO_PROJECT
        assert core.project.phase("finalize").status == PhaseStatus.COMPLETED
        assert not core.storage.exists()
        assert not core.storage.project_dir.exists()
        assert "NO ACTIVE PROJECT" in prompt

        with pytest.raises(NoProjectError):
            workflow.reload(core).prompt()

    def test_delete_before_cleanup(self, standard_core):
        with pytest.raises(TransitionError):
            standard_core.delete_project()
        assert standard_core.storage.exists()
        assert not standard_core.project.project_deleted

    def test_deletion_flag_is_reserved(self, standard_core):
        with pytest.raises(InvalidOperationError):
            standard_core.set_metadata("project_deleted", True)

    def test_metadata_passthrough(self, standard_core, workflow):
        standard_core.set_metadata("issue", {"number": 12, "url": "https://example.test/12"})
        assert workflow.reload(standard_core).project.metadata["issue"]["number"] == 12


class TestStatus:
    """Test the read-only status views."""

    def test_status_text(self, standard_core):
        standard_core.add_task("Write parser")
        text = standard_core.status_text()
        assert "Project: add-auth" in text
        assert "State: ImplementationPlanning" in text
        assert "[✓] implementation" in text
        assert "[ ] discovery" in text
        assert "Tasks: 1 (1 pending)" in text
        assert "Next events: approve_tasks" in text

    def test_status_data(self, standard_core):
        data = standard_core.status_data()
        assert data["current_state"] == "ImplementationPlanning"
        assert data["current_phase"] == "implementation"
        assert data["permitted_events"] == ["approve_tasks"]
        assert data["phases"]["review"]["iteration"] == 1
        assert data["task_counts"]["pending"] == 0

    def test_status_is_read_only(self, standard_core):
        before = standard_core.storage.state_path.read_text()
        standard_core.status_text()
        standard_core.status_data()
        assert standard_core.storage.state_path.read_text() == before

    def test_update_description(self, standard_core, workflow):
        standard_core.update_description("Add OAuth authentication")
        assert workflow.reload(standard_core).project.description == "Add OAuth authentication"

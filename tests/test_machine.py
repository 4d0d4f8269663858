"""
Tests for StateMachine.

Covers event application, guard failures, loop-backs, and resuming from
the state file.
"""

import pytest

from phasegate.exceptions import (
    CorruptStateError,
    InvalidOperationError,
    NoProjectError,
    TransitionError,
    ValidationError,
)
from phasegate.managers.artifact_store import ArtifactStore
from phasegate.managers.report_ledger import ReviewReportLedger
from phasegate.managers.storage_manager import StorageManager
from phasegate.managers.task_ledger import TaskLedger
from phasegate.models.base import PhaseStatus
from phasegate.statechart.machine import StateMachine, load_machine, parse_event
from phasegate.statechart.states import Event, State


@pytest.fixture
def storage(temp_dir):
    return StorageManager(temp_dir)


@pytest.fixture
def make_machine(storage, mock_data):
    def factory(**kwargs):
        project = mock_data.create_project(**kwargs)
        storage.save_state(project)
        return StateMachine(project, storage)
    return factory


class TestFire:
    """Test event application."""

    def test_standard_project_starts_in_planning(self, make_machine):
        assert make_machine().state == State.IMPLEMENTATION_PLANNING

    def test_approve_tasks(self, make_machine):
        machine = make_machine()
        TaskLedger(machine.project_state, id_step=10, id_width=3).add("Write code")
        prompt = machine.fire(Event.APPROVE_TASKS)
        assert machine.state == State.IMPLEMENTATION_EXECUTING
        assert machine.project_state.current_state == "ImplementationExecuting"
        assert machine.project_state.phase("implementation").status == PhaseStatus.IN_PROGRESS
        assert "IMPLEMENTATION EXECUTING" in prompt

    def test_accepts_event_names(self, make_machine):
        machine = make_machine()
        TaskLedger(machine.project_state, id_step=10, id_width=3).add("Write code")
        machine.fire("approve_tasks")
        assert machine.state == State.IMPLEMENTATION_EXECUTING

    def test_unknown_event_name(self):
        with pytest.raises(ValidationError, match="Unknown event"):
            parse_event("launch")

    def test_invalid_transition_leaves_state(self, make_machine):
        machine = make_machine()
        with pytest.raises(TransitionError):
            machine.fire(Event.REVIEW_PASS)
        assert machine.state == State.IMPLEMENTATION_PLANNING

    def test_guard_failure_leaves_project_untouched(self, make_machine):
        machine = make_machine()
        before = machine.project_state.model_dump()
        with pytest.raises(ValidationError, match="no pending tasks"):
            machine.fire(Event.APPROVE_TASKS)
        assert machine.state == State.IMPLEMENTATION_PLANNING
        assert machine.project_state.model_dump() == before

    def test_repeated_event_is_rejected(self, make_machine):
        machine = make_machine()
        TaskLedger(machine.project_state, id_step=10, id_width=3).add("Write code")
        machine.fire(Event.APPROVE_TASKS)
        with pytest.raises(TransitionError):
            machine.fire(Event.APPROVE_TASKS)

    def test_refreshes_statechart_timestamp(self, make_machine):
        machine = make_machine()
        before = machine.project_state.statechart.updated_at
        TaskLedger(machine.project_state, id_step=10, id_width=3).add("Write code")
        machine.fire(Event.APPROVE_TASKS)
        assert machine.project_state.statechart.updated_at >= before


class TestDiscoveryFlow:
    """Test the optional discovery and design phases."""

    def test_enable_discovery(self, make_machine):
        machine = make_machine(discovery=None, design=None)
        assert machine.state == State.DISCOVERY_DECISION
        machine.fire(Event.ENABLE_DISCOVERY, discovery_type="bug")
        discovery = machine.project_state.phase("discovery")
        assert machine.state == State.DISCOVERY_ACTIVE
        assert discovery.enabled
        assert discovery.discovery_type == "bug"

    def test_enable_discovery_without_type(self, make_machine):
        machine = make_machine(discovery=None)
        with pytest.raises(ValidationError, match="discovery_type is required"):
            machine.fire(Event.ENABLE_DISCOVERY)
        assert not machine.project_state.phase("discovery").enabled

    def test_skip_discovery_goes_to_design_decision(self, make_machine):
        machine = make_machine(discovery=None, design=None)
        machine.fire(Event.SKIP_DISCOVERY)
        assert machine.state == State.DESIGN_DECISION
        assert machine.project_state.phase("discovery").status == PhaseStatus.SKIPPED

    def test_complete_discovery_after_approval(self, make_machine):
        machine = make_machine(discovery=True, design=False)
        store = ArtifactStore(machine.project_state)
        store.add("discovery", "research.md")
        with pytest.raises(ValidationError, match="research.md"):
            machine.fire(Event.COMPLETE_DISCOVERY)
        assert machine.state == State.DISCOVERY_ACTIVE

        store.approve("discovery", "research.md")
        machine.fire(Event.COMPLETE_DISCOVERY)
        assert machine.state == State.IMPLEMENTATION_PLANNING
        assert machine.project_state.phase("discovery").status == PhaseStatus.COMPLETED

    def test_design_path(self, make_machine):
        machine = make_machine(discovery=False, design=None)
        machine.fire(Event.ENABLE_DESIGN)
        assert machine.state == State.DESIGN_ACTIVE
        ArtifactStore(machine.project_state).add("design", "adr-001.md", approved=True)
        machine.fire(Event.COMPLETE_DESIGN)
        assert machine.state == State.IMPLEMENTATION_PLANNING

    def test_skip_design(self, make_machine):
        machine = make_machine(discovery=False, design=None)
        machine.fire(Event.SKIP_DESIGN)
        assert machine.state == State.IMPLEMENTATION_PLANNING
        assert machine.project_state.phase("design").is_skipped


class TestReviewLoop:
    """Test review pass/fail and the iteration counter."""

    @pytest.fixture
    def in_review(self, make_machine):
        machine = make_machine()
        tasks = TaskLedger(machine.project_state, id_step=10, id_width=3)
        task = tasks.add("Write code")
        machine.fire(Event.APPROVE_TASKS)
        tasks.mark_status(task.id, "completed")
        machine.fire(Event.COMPLETE_IMPLEMENTATION)
        assert machine.state == State.REVIEW_ACTIVE
        return machine

    def test_complete_implementation_with_pending_task(self, make_machine):
        machine = make_machine()
        tasks = TaskLedger(machine.project_state, id_step=10, id_width=3)
        tasks.add("Write code")
        machine.fire(Event.APPROVE_TASKS)
        with pytest.raises(ValidationError, match="'010'"):
            machine.fire(Event.COMPLETE_IMPLEMENTATION)

    def test_fail_then_pass(self, in_review):
        machine = in_review
        reports = ReviewReportLedger(machine.project_state, id_width=3)
        review = machine.project_state.phase("review")

        reports.add("review-1.md", "fail")
        machine.fire(Event.REVIEW_FAIL)
        assert machine.state == State.IMPLEMENTATION_PLANNING
        assert review.iteration == 2
        assert review.status == PhaseStatus.IN_PROGRESS

        tasks = TaskLedger(machine.project_state, id_step=10, id_width=3)
        fix = tasks.add("Fix review findings")
        assert fix.id == "020"
        machine.fire(Event.APPROVE_TASKS)
        assert machine.project_state.phase("implementation").status == PhaseStatus.COMPLETED
        tasks.mark_status(fix.id, "completed")
        machine.fire(Event.COMPLETE_IMPLEMENTATION)

        report = reports.add("review-2.md", "pass")
        assert report.iteration == 2
        machine.fire(Event.REVIEW_PASS)
        assert machine.state == State.FINALIZE_DOCUMENTATION
        assert review.iteration == 2
        assert review.status == PhaseStatus.COMPLETED

    def test_pass_requires_passing_report(self, in_review):
        ReviewReportLedger(in_review.project_state, id_width=3).add("review.md", "fail")
        with pytest.raises(ValidationError, match="not 'pass'"):
            in_review.fire(Event.REVIEW_PASS)

    def test_stale_failing_report_cannot_loop_twice(self, in_review):
        machine = in_review
        ReviewReportLedger(machine.project_state, id_width=3).add("review-1.md", "fail")
        machine.fire(Event.REVIEW_FAIL)
        tasks = TaskLedger(machine.project_state, id_step=10, id_width=3)
        task = tasks.add("Rework")
        machine.fire(Event.APPROVE_TASKS)
        tasks.mark_status(task.id, "completed")
        machine.fire(Event.COMPLETE_IMPLEMENTATION)
        with pytest.raises(ValidationError, match="iteration 2"):
            machine.fire(Event.REVIEW_FAIL)
        assert machine.project_state.phase("review").iteration == 2


class TestFinalize:
    """Test the finalize sub-steps."""

    @pytest.fixture
    def in_finalize(self, storage, mock_data):
        project = mock_data.create_project()
        project.phase("review").reports.append(mock_data.create_report("001", "pass"))
        project.statechart.current_state = State.REVIEW_ACTIVE.value
        machine = StateMachine(project, storage)
        machine.fire(Event.REVIEW_PASS)
        return machine

    def test_documentation_then_checks(self, in_finalize):
        machine = in_finalize
        machine.fire(Event.DOCUMENTATION_DONE, documentation_updates=["README.md"])
        assert machine.state == State.FINALIZE_CHECKS
        machine.fire(Event.CHECKS_DONE, checks_passed=True, pr_url="https://example.test/pr/1")
        assert machine.state == State.FINALIZE_CLEANUP

        finalize = machine.project_state.phase("finalize")
        assert finalize.metadata["documentation_updates"] == ["README.md"]
        assert finalize.metadata["pr_url"] == "https://example.test/pr/1"
        assert finalize.status == PhaseStatus.IN_PROGRESS

    def test_cleanup_requires_deletion(self, in_finalize):
        machine = in_finalize
        machine.fire(Event.DOCUMENTATION_DONE)
        machine.fire(Event.CHECKS_DONE)
        with pytest.raises(ValidationError, match="project_deleted"):
            machine.fire(Event.PROJECT_DELETED)
        assert machine.project_state.phase("finalize").status != PhaseStatus.COMPLETED

        machine.project_state.metadata["project_deleted"] = True
        machine.fire(Event.PROJECT_DELETED)
        assert machine.state == State.NO_PROJECT
        assert machine.permitted_events() == []
        with pytest.raises(InvalidOperationError):
            machine.save()


class TestIntrospection:
    """Test can_fire and permitted_events."""

    def test_permitted_events(self, make_machine):
        machine = make_machine(discovery=None)
        assert machine.permitted_events() == [Event.ENABLE_DISCOVERY, Event.SKIP_DISCOVERY]

    def test_can_fire(self, make_machine):
        machine = make_machine(discovery=None)
        assert machine.can_fire(Event.SKIP_DISCOVERY)
        assert not machine.can_fire(Event.ENABLE_DISCOVERY)
        assert machine.can_fire(Event.ENABLE_DISCOVERY, discovery_type="docs")
        assert not machine.can_fire(Event.APPROVE_TASKS)
        assert not machine.can_fire("nonsense")

    def test_machine_without_project(self, storage):
        machine = StateMachine(None, storage)
        assert machine.state == State.NO_PROJECT
        assert machine.permitted_events() == []
        with pytest.raises(TransitionError):
            machine.fire(Event.APPROVE_TASKS)
        assert "phasegate new" in machine.prompt()


class TestPersistence:
    """Test resuming the machine from disk."""

    def test_load_machine_resumes_state(self, make_machine, temp_dir):
        machine = make_machine()
        TaskLedger(machine.project_state, id_step=10, id_width=3).add("Write code")
        machine.fire(Event.APPROVE_TASKS)
        machine.save()

        resumed = load_machine(temp_dir)
        assert resumed.state == State.IMPLEMENTATION_EXECUTING
        assert resumed.project_state == machine.project_state

    def test_unsaved_fire_is_lost(self, make_machine, temp_dir):
        machine = make_machine()
        TaskLedger(machine.project_state, id_step=10, id_width=3).add("Write code")
        machine.fire(Event.APPROVE_TASKS)
        assert load_machine(temp_dir).state == State.IMPLEMENTATION_PLANNING

    def test_load_without_project(self, temp_dir):
        with pytest.raises(NoProjectError):
            load_machine(temp_dir)

    def test_unknown_persisted_state(self, storage, mock_data):
        project = mock_data.create_project()
        project.statechart.current_state = "Deploying"
        storage.save_state(project)
        with pytest.raises(CorruptStateError, match="Deploying"):
            load_machine(storage=storage)

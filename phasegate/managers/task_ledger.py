"""
TaskLedger for implementation task tracking.

Handles:
- Task creation with gap-numbered IDs (010, 020, 030...)
- Status changes
- Iteration, agent assignment, references and modified files
- Task feedback
"""

from typing import Dict, Iterable, List, Optional

from phasegate.constants import (
    DEFAULT_FEEDBACK_ID_WIDTH,
    PHASE_IMPLEMENTATION,
)
from phasegate.exceptions import NotFoundError, ValidationError
from phasegate.models.base import (
    FeedbackRecord,
    FeedbackStatus,
    TaskRecord,
    TaskStatus,
)
from phasegate.models.project import ProjectState
from phasegate.utils import format_sequence_id, next_gap_id


def parse_task_status(value: "TaskStatus | str") -> TaskStatus:
    """Convert a string to a TaskStatus.

    Raises:
        ValidationError: If the value is not a valid task status.
    """
    if isinstance(value, TaskStatus):
        return value
    try:
        return TaskStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in TaskStatus)
        raise ValidationError(
            f"Invalid task status '{value}': must be one of {valid}."
        )


class TaskLedger:
    """
    Ordered ledger of the implementation phase's tasks.
    """

    def __init__(
        self,
        project: ProjectState,
        id_step: int,
        id_width: int,
    ) -> None:
        """
        Initialize TaskLedger.

        Args:
            project: ProjectState holding the implementation phase.
            id_step: Gap between consecutive task IDs (ConfigFile.task_id_step).
            id_width: Zero-padding width of task IDs (ConfigFile.task_id_width).
        """
        self.project = project
        self._id_step = id_step
        self._id_width = id_width

    @property
    def tasks(self) -> List[TaskRecord]:
        return self.project.phase(PHASE_IMPLEMENTATION).tasks

    # =========================================================================
    # Creation and lookup
    # =========================================================================

    def next_id(self) -> str:
        """Return the ID the next task will receive."""
        return next_gap_id((t.id for t in self.tasks), self._id_step, self._id_width)

    def add(
        self,
        name: str,
        description: Optional[str] = None,
        parallel: bool = False,
        dependencies: Optional[Iterable[str]] = None,
        assigned_agent: Optional[str] = None,
    ) -> TaskRecord:
        """Append a new pending task.

        Args:
            name: Task name.
            description: Optional description.
            parallel: Whether the task can run alongside others.
            dependencies: IDs of tasks this one depends on.
            assigned_agent: Agent role expected to work the task.

        Returns:
            The new TaskRecord.

        Raises:
            ValidationError: If the name is empty or a dependency is unknown.
        """
        if not name or not name.strip():
            raise ValidationError("Task name cannot be empty.")

        deps = list(dependencies or [])
        known = {t.id for t in self.tasks}
        for dep in deps:
            if dep not in known:
                raise ValidationError(f"Unknown dependency '{dep}': no task with that ID.")

        task = TaskRecord(
            id=self.next_id(),
            name=name,
            phase=PHASE_IMPLEMENTATION,
            description=description,
            parallel=parallel,
            dependencies=deps,
            assigned_agent=assigned_agent,
        )
        self.tasks.append(task)
        return task

    def find(self, task_id: str) -> Optional[TaskRecord]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get(self, task_id: str) -> TaskRecord:
        """Get a task by ID.

        Raises:
            NotFoundError: If no task has this ID.
        """
        task = self.find(task_id)
        if task is None:
            raise NotFoundError(f"Task '{task_id}' not found.")
        return task

    def list(self, status: "Optional[TaskStatus | str]" = None) -> List[TaskRecord]:
        """List tasks in ID order, optionally filtered by status."""
        if status is None:
            return list(self.tasks)
        wanted = parse_task_status(status)
        return [t for t in self.tasks if t.status == wanted]

    def counts(self) -> Dict[str, int]:
        """Count tasks per status value."""
        counts = {s.value: 0 for s in TaskStatus}
        for task in self.tasks:
            counts[task.status.value] += 1
        return counts

    def incomplete(self) -> List[TaskRecord]:
        """Tasks that still block implementation completion."""
        return [t for t in self.tasks if not t.status.is_terminal]

    # =========================================================================
    # Mutation
    # =========================================================================

    def mark_status(self, task_id: str, status: "TaskStatus | str") -> TaskRecord:
        """Set a task's status.

        Raises:
            NotFoundError: If no task has this ID.
            ValidationError: If the status is not valid.
        """
        new_status = parse_task_status(status)
        task = self.get(task_id)
        task.status = new_status
        task.touch()
        return task

    def increment_iteration(self, task_id: str) -> TaskRecord:
        """Bump a task's iteration counter after a rework round."""
        task = self.get(task_id)
        task.iteration += 1
        task.touch()
        return task

    def assign_agent(self, task_id: str, agent: str) -> TaskRecord:
        """Record which agent works the task."""
        if not agent:
            raise ValidationError("Agent name cannot be empty.")
        task = self.get(task_id)
        task.assigned_agent = agent
        task.touch()
        return task

    def add_reference(self, task_id: str, path: str) -> TaskRecord:
        """Attach a reference path to a task. Already-present paths are ignored."""
        task = self.get(task_id)
        if path not in task.references:
            task.references.append(path)
            task.touch()
        return task

    def add_file(self, task_id: str, path: str) -> TaskRecord:
        """Record a file modified by a task. Already-present paths are ignored."""
        task = self.get(task_id)
        if path not in task.files_modified:
            task.files_modified.append(path)
            task.touch()
        return task

    # =========================================================================
    # Feedback
    # =========================================================================

    def add_feedback(self, task_id: str, message: str) -> FeedbackRecord:
        """Attach numbered feedback ("001", "002", ...) to a task."""
        if not message or not message.strip():
            raise ValidationError("Feedback message cannot be empty.")
        task = self.get(task_id)
        feedback = FeedbackRecord(
            id=format_sequence_id(len(task.feedback) + 1, DEFAULT_FEEDBACK_ID_WIDTH),
            message=message,
        )
        task.feedback.append(feedback)
        task.touch()
        return feedback

    def mark_feedback_addressed(self, task_id: str, feedback_id: str) -> FeedbackRecord:
        """Mark a task's feedback entry as addressed.

        Raises:
            NotFoundError: If the task or feedback entry does not exist.
        """
        task = self.get(task_id)
        for feedback in task.feedback:
            if feedback.id == feedback_id:
                feedback.status = FeedbackStatus.ADDRESSED
                task.touch()
                return feedback
        raise NotFoundError(f"Feedback '{feedback_id}' not found on task '{task_id}'.")

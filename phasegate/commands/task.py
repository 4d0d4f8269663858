"""
Task commands for implementation planning and execution.
"""
import click

from phasegate.core import PhasegateCore
from phasegate.exceptions import PhasegateError
from phasegate.models.base import TaskStatus

_STATUS_CHOICES = [s.value for s in TaskStatus]


@click.group()
def task():
    """Commands for managing implementation tasks."""
    pass


@task.command()
@click.argument("name")
@click.option("--description", "-d", help="Task description.")
@click.option("--parallel", is_flag=True, help="Task can run alongside others.")
@click.option("--depends-on", "dependencies", multiple=True, help="ID of a task this one depends on.")
@click.option("--agent", help="Agent role expected to work the task.")
def add(name, description, parallel, dependencies, agent):
    """Add a pending task."""
    core = PhasegateCore()
    try:
        created = core.add_task(
            name,
            description=description,
            parallel=parallel,
            dependencies=list(dependencies),
            assigned_agent=agent,
        )
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Added task {created.id}: {created.name}")


@task.command()
def approve():
    """Approve the task plan and start executing it."""
    core = PhasegateCore()
    try:
        guidance = core.approve_tasks()
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo("Task plan approved.")
    click.echo(guidance)


@task.command(name="status")
@click.argument("task_id")
@click.argument("new_status", type=click.Choice(_STATUS_CHOICES))
def set_status(task_id, new_status):
    """Set a task's status."""
    core = PhasegateCore()
    try:
        updated = core.set_task_status(task_id, new_status)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Task {updated.id} is now {updated.status.value}.")


@task.command()
@click.argument("task_id")
def rework(task_id):
    """Start another iteration of a task."""
    core = PhasegateCore()
    try:
        updated = core.increment_task_iteration(task_id)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Task {updated.id} is on iteration {updated.iteration}.")


@task.command()
@click.argument("task_id")
@click.argument("agent")
def assign(task_id, agent):
    """Assign an agent to a task."""
    core = PhasegateCore()
    try:
        core.assign_task_agent(task_id, agent)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Assigned {agent} to task {task_id}.")


@task.command()
@click.argument("task_id")
@click.option("--reference", "references", multiple=True, help="Reference path for the task.")
@click.option("--file", "files", multiple=True, help="File modified by the task.")
def record(task_id, references, files):
    """Record references and modified files on a task."""
    if not references and not files:
        raise click.ClickException("Nothing to record. Use --reference or --file.")
    core = PhasegateCore()
    try:
        for path in references:
            core.add_task_reference(task_id, path)
        for path in files:
            core.add_task_file(task_id, path)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Recorded {len(references)} reference(s) and {len(files)} file(s) on task {task_id}.")


@task.command()
@click.argument("task_id")
@click.argument("message", required=False)
@click.option("--addressed", "feedback_id", help="Mark this feedback ID as addressed.")
def feedback(task_id, message, feedback_id):
    """Leave feedback on a task, or mark feedback addressed."""
    core = PhasegateCore()
    try:
        if feedback_id:
            core.address_task_feedback(task_id, feedback_id)
            click.echo(f"Feedback {feedback_id} on task {task_id} addressed.")
            return
        if not message:
            raise click.ClickException("Feedback message required.")
        entry = core.add_task_feedback(task_id, message)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Added feedback {entry.id} to task {task_id}.")


@task.command(name="list")
@click.option("--status", "status_filter", type=click.Choice(_STATUS_CHOICES), help="Only tasks with this status.")
def list_tasks(status_filter):
    """List implementation tasks."""
    core = PhasegateCore()
    try:
        tasks = core.list_tasks(status_filter)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    if not tasks:
        click.echo("No tasks found.")
        return
    for item in tasks:
        agent = f" @{item.assigned_agent}" if item.assigned_agent else ""
        click.echo(f"{item.id}  {item.status.value:<12} {item.name} (iteration {item.iteration}){agent}")

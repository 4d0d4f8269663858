"""
Artifact commands: register, approve and list phase artifacts.
"""
import click

from phasegate.constants import PHASE_NAMES
from phasegate.core import PhasegateCore
from phasegate.exceptions import PhasegateError

_phase_option = click.option(
    "--phase",
    "phase_name",
    type=click.Choice(PHASE_NAMES),
    required=True,
    help="Phase the artifact belongs to.",
)


@click.group()
def artifact():
    """Commands for managing phase artifacts."""
    pass


@artifact.command()
@click.argument("path")
@_phase_option
@click.option("--type", "artifact_type", help="Free-form artifact tag (e.g. reference).")
@click.option("--input", "as_input", is_flag=True, help="Register as an input instead of an output.")
@click.option("--approved", is_flag=True, help="Register the artifact pre-approved.")
def add(path, phase_name, artifact_type, as_input, approved):
    """Register an artifact on a phase."""
    core = PhasegateCore()
    try:
        core.add_artifact(
            phase_name,
            path,
            artifact_type=artifact_type,
            approved=approved,
            output=not as_input,
        )
    except PhasegateError as e:
        raise click.ClickException(str(e))
    kind = "input" if as_input else "output"
    click.echo(f"Added {kind} artifact '{path}' to {phase_name} phase.")


@artifact.command()
@click.argument("path")
@_phase_option
def approve(path, phase_name):
    """Approve an artifact (safe to repeat)."""
    core = PhasegateCore()
    try:
        core.approve_artifact(phase_name, path)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Approved artifact '{path}'.")


@artifact.command(name="list")
@_phase_option
def list_artifacts(phase_name):
    """List a phase's artifacts."""
    core = PhasegateCore()
    try:
        artifacts = core.list_artifacts(phase_name)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    if not artifacts:
        click.echo(f"No artifacts in {phase_name} phase.")
        return
    for item in artifacts:
        mark = "✓" if item.approved else " "
        tag = f" [{item.type}]" if item.type else ""
        click.echo(f"[{mark}] {item.path}{tag}")

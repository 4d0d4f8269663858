"""
Phase commands: decide on optional phases and complete phases.
"""
import click

from phasegate.constants import DISCOVERY_TYPES, OPTIONAL_PHASES, PHASE_NAMES
from phasegate.core import PhasegateCore
from phasegate.exceptions import PhasegateError


@click.group()
def phase():
    """Commands for moving between phases."""
    pass


@phase.command()
@click.argument("name", type=click.Choice(OPTIONAL_PHASES))
@click.option(
    "--type",
    "discovery_type",
    type=click.Choice(DISCOVERY_TYPES),
    help="Discovery type (required for discovery).",
)
def enable(name, discovery_type):
    """Enable an optional phase."""
    core = PhasegateCore()
    try:
        guidance = core.enable_phase(name, discovery_type=discovery_type)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Enabled {name} phase.")
    click.echo(guidance)


@phase.command()
@click.argument("name", type=click.Choice(OPTIONAL_PHASES))
def skip(name):
    """Skip an optional phase."""
    core = PhasegateCore()
    try:
        guidance = core.skip_phase(name)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Skipped {name} phase.")
    click.echo(guidance)


@phase.command()
@click.argument("name", type=click.Choice(PHASE_NAMES))
def complete(name):
    """Complete a phase once its completion rule holds."""
    core = PhasegateCore()
    try:
        guidance = core.complete_phase(name)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Completed {name} phase.")
    click.echo(guidance)

"""
Finalize commands: documentation, checks, and project deletion.
"""
import click

from phasegate.core import PhasegateCore
from phasegate.exceptions import PhasegateError


@click.group()
def finalize():
    """Commands for the finalize phase."""
    pass


@finalize.command()
@click.option("--update", "updates", multiple=True, help="Documentation file that was updated.")
@click.option("--moved", "moved", multiple=True, help="Artifact moved out of the project folder.")
def docs(updates, moved):
    """Record that documentation has been assessed."""
    core = PhasegateCore()
    try:
        guidance = core.finalize_documentation(list(updates), list(moved))
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo("Documentation assessed.")
    click.echo(guidance)


@finalize.command()
@click.option("--failed", is_flag=True, help="Record that checks did not pass.")
@click.option("--pr-url", help="URL of the pull request.")
def checks(failed, pr_url):
    """Record that final checks have been run."""
    core = PhasegateCore()
    try:
        guidance = core.finalize_checks(passed=not failed, pr_url=pr_url)
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo("Checks recorded.")
    click.echo(guidance)


@finalize.command()
@click.confirmation_option(prompt="Delete the project folder?")
def delete():
    """Delete the project folder (required before merge)."""
    core = PhasegateCore()
    try:
        guidance = core.delete_project()
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo("Project deleted.")
    click.echo(guidance)

"""
Project commands: create a project, show its status and guidance.
"""
import json

import click

from phasegate.constants import DISCOVERY_TYPES
from phasegate.core import PhasegateCore
from phasegate.exceptions import PhasegateError
from phasegate.project_types import DEFAULT_PROJECT_TYPE, project_type_names
from phasegate.utils import current_branch


@click.command()
@click.argument("name")
@click.option("--description", "-d", required=True, help="What the project is about.")
@click.option(
    "--type",
    "project_type",
    type=click.Choice(project_type_names()),
    default=DEFAULT_PROJECT_TYPE,
    show_default=True,
    help="Project type.",
)
@click.option("--branch", help="Git branch of the project. Defaults to the checked-out branch.")
@click.option(
    "--discovery/--no-discovery",
    default=None,
    help="Enable or skip discovery instead of the type default.",
)
@click.option(
    "--design/--no-design",
    default=None,
    help="Enable or skip design instead of the type default.",
)
@click.option(
    "--discovery-type",
    type=click.Choice(DISCOVERY_TYPES),
    help="Discovery type when discovery starts enabled.",
)
def new(name, description, project_type, branch, discovery, design, discovery_type):
    """Create the project for the current branch."""
    core = PhasegateCore()
    branch = branch or current_branch()
    if not branch:
        raise click.ClickException(
            "Could not determine the current git branch. Use --branch."
        )
    try:
        guidance = core.create_project(
            name,
            description,
            branch,
            project_type=project_type,
            discovery=discovery,
            design=design,
            discovery_type=discovery_type,
        )
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created {project_type} project '{name}' on branch '{branch}'.")
    click.echo(guidance)


@click.command()
@click.option(
    "-j",
    "--json",
    "json_output",
    is_flag=True,
    help="Output status in JSON format for AI agents.",
)
def status(json_output):
    """Displays a summary of project progress."""
    core = PhasegateCore()
    try:
        if json_output:
            click.echo(json.dumps(core.status_data(), indent=2))
        else:
            click.echo(core.status_text())
    except PhasegateError as e:
        raise click.ClickException(str(e))


@click.command()
@click.option(
    "--orchestrator",
    is_flag=True,
    help="Show the project overview for the orchestrator instead.",
)
def prompt(orchestrator):
    """Show the guidance for the current state."""
    core = PhasegateCore()
    try:
        if orchestrator:
            click.echo(core.orchestrator_prompt())
        else:
            click.echo(core.prompt())
    except PhasegateError as e:
        raise click.ClickException(str(e))

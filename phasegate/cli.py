"""
Phasegate CLI.

Thin click layer over PhasegateCore: each command maps one user-facing
verb to a core operation and prints the result.
"""
import click

from phasegate.commands.artifact import artifact
from phasegate.commands.finalize import finalize
from phasegate.commands.phase import phase
from phasegate.commands.project import new, prompt, status
from phasegate.commands.review import review
from phasegate.commands.task import task


@click.group()
def cli():
    """Phase-gated project workflow for AI coding agents."""
    pass


cli.add_command(new)
cli.add_command(status)
cli.add_command(prompt)
cli.add_command(phase)
cli.add_command(artifact)
cli.add_command(task)
cli.add_command(review)
cli.add_command(finalize)


if __name__ == '__main__':
    cli()

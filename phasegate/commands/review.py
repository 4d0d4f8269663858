"""
Review commands.
"""
import click

from phasegate.constants import VALID_ASSESSMENTS
from phasegate.core import PhasegateCore
from phasegate.exceptions import PhasegateError


@click.group()
def review():
    """Commands for the review phase."""
    pass


@review.command(name="add-report")
@click.argument("path")
@click.option(
    "--assessment",
    type=click.Choice(VALID_ASSESSMENTS),
    required=True,
    help="Outcome of the review.",
)
def add_report(path, assessment):
    """Record a review report; a failing report loops back to planning."""
    core = PhasegateCore()
    try:
        report = core.add_review_report(path, assessment)
        guidance = core.prompt()
    except PhasegateError as e:
        raise click.ClickException(str(e))
    click.echo(
        f"Recorded review report {report.id} ({report.assessment.value}, "
        f"iteration {report.iteration})."
    )
    click.echo(guidance)


@review.command(name="list")
def list_reports():
    """List review reports."""
    core = PhasegateCore()
    try:
        reports = core.list_review_reports()
    except PhasegateError as e:
        raise click.ClickException(str(e))
    if not reports:
        click.echo("No review reports.")
        return
    for report in reports:
        click.echo(f"{report.id}  iteration {report.iteration}  {report.assessment.value:<4}  {report.path}")

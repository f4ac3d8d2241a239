"""
Milestone commands for fddtree.

Record progress of a feature against its Aspect's milestones and edit the
milestone definitions an Aspect shares with its features.
"""
from typing import Optional

import click

from fddtree.commands.common import (
    format_error,
    load_core,
    resolve_aspect,
    resolve_feature,
    save,
)
from fddtree.constants import DATE_FORMAT_ERROR
from fddtree.exceptions import FDDError
from fddtree.models.base import StatusEnum
from fddtree.utils import format_date, parse_date

STATUS_CHOICES = [status.value for status in StatusEnum]


def _parse_optional_date(value: Optional[str]):
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        raise click.ClickException(DATE_FORMAT_ERROR)
    return parsed


@click.group()
def milestone():
    """Show and update feature milestones and aspect milestone definitions."""
    pass


@milestone.command(name="list")
@click.argument("feature")
@click.pass_context
def list_milestones(ctx, feature: str):
    """List the milestones of FEATURE (path or '#N')."""
    core = load_core(ctx)
    try:
        target = resolve_feature(core, feature)
    except FDDError as e:
        raise click.ClickException(format_error(e))

    aspect = target.aspect
    infos = aspect.info.milestone_info if aspect is not None else []
    for i, row in enumerate(target.milestones, 1):
        name = infos[i - 1].name if i <= len(infos) else f"Milestone {i}"
        actual = f", actual {format_date(row.actual)}" if row.actual else ""
        click.echo(
            f"  {i}. {name}: {row.status.value} (planned {format_date(row.planned)}{actual})"
        )


@milestone.command(name="set")
@click.argument("feature")
@click.argument("number", type=int)
@click.option("-s", "--status", type=click.Choice(STATUS_CHOICES), help="New status.")
@click.option("-p", "--planned", help="Planned date.")
@click.option("-a", "--actual", help="Actual date.")
@click.pass_context
def set_milestone(ctx, feature: str, number: int, status: Optional[str],
                  planned: Optional[str], actual: Optional[str]):
    """Update milestone NUMBER (1-based) of FEATURE (path or '#N')."""
    if not any([status, planned, actual]):
        raise click.ClickException(
            "No update parameters provided. "
            "Specify at least one of: -s/--status, -p/--planned, -a/--actual."
        )
    planned_date = _parse_optional_date(planned)
    actual_date = _parse_optional_date(actual)

    core = load_core(ctx)
    try:
        target = resolve_feature(core, feature)
        core.set_milestone(
            target,
            number - 1,
            status=StatusEnum(status) if status else None,
            planned=planned_date,
            actual=actual_date,
        )
        save(core, f"Feature '{target.name}' is {target.progress.completion}% complete.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@milestone.command(name="defs")
@click.argument("aspect")
@click.pass_context
def list_definitions(ctx, aspect: str):
    """List the milestone definitions of ASPECT."""
    core = load_core(ctx)
    try:
        target = resolve_aspect(core, aspect)
    except FDDError as e:
        raise click.ClickException(format_error(e))

    for i, info in enumerate(target.info.milestone_info, 1):
        click.echo(f"  {i}. {info.name} (effort {info.effort})")
    click.echo(f"Total effort: {target.info.total_effort}")


@milestone.command(name="define")
@click.argument("aspect")
@click.argument("name")
@click.option("-e", "--effort", type=int, default=0, help="Effort weight (default: 0).")
@click.option("-n", "--number", type=int, help="Position (1-based, default: last).")
@click.pass_context
def define(ctx, aspect: str, name: str, effort: int, number: Optional[int]):
    """Add milestone NAME to ASPECT; its features get a new row."""
    core = load_core(ctx)
    try:
        target = resolve_aspect(core, aspect)
        index = number - 1 if number is not None else -1
        core.add_milestone_info(target, name, effort, index)
        save(core, f"Milestone '{name}' added to '{target.name}'.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@milestone.command(name="undefine")
@click.argument("aspect")
@click.argument("number", type=int)
@click.pass_context
def undefine(ctx, aspect: str, number: int):
    """Delete milestone NUMBER (1-based) of ASPECT and its feature rows."""
    core = load_core(ctx)
    try:
        target = resolve_aspect(core, aspect)
        core.remove_milestone_info(target, number - 1)
        save(core, f"Milestone {number} removed from '{target.name}'.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@milestone.command(name="redefine")
@click.argument("aspect")
@click.argument("number", type=int)
@click.option("--name", help="New milestone name.")
@click.option("-e", "--effort", type=int, help="New effort weight.")
@click.pass_context
def redefine(ctx, aspect: str, number: int, name: Optional[str], effort: Optional[int]):
    """Rename milestone NUMBER (1-based) of ASPECT or change its effort."""
    if name is None and effort is None:
        raise click.ClickException(
            "No update parameters provided. Specify at least one of: --name, -e/--effort."
        )
    core = load_core(ctx)
    try:
        target = resolve_aspect(core, aspect)
        if core.update_milestone_info(target, number - 1, name=name, effort=effort) is None:
            click.echo("Nothing to change.")
            return
        save(core, f"Milestone {number} of '{target.name}' updated.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@milestone.command(name="reset")
@click.argument("aspect")
@click.pass_context
def reset(ctx, aspect: str):
    """Give ASPECT the standard FDD milestones."""
    core = load_core(ctx)
    try:
        target = resolve_aspect(core, aspect)
        if core.reset_milestone_info(target) is None:
            click.echo("Nothing to change.")
            return
        save(core, f"'{target.name}' uses the standard milestones.")
    except FDDError as e:
        raise click.ClickException(format_error(e))

"""
Work package commands for fddtree.
"""
import click

from fddtree.commands.common import (
    format_error,
    load_core,
    resolve_feature,
    resolve_node,
    save,
)
from fddtree.exceptions import FDDError


@click.group()
def wp():
    """Manage work packages of a project."""
    pass


@wp.command(name="add")
@click.argument("project_path")
@click.argument("name")
@click.pass_context
def add(ctx, project_path: str, name: str):
    """Add work package NAME to the project at PROJECT_PATH."""
    core = load_core(ctx)
    try:
        project = core.project_of(resolve_node(core, project_path))
        if core.add_work_package(project, name) is None:
            raise click.ClickException(f"Work package '{name}' already exists.")
        save(core, f"Work package '{name}' created successfully.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@wp.command(name="assign")
@click.argument("feature")
@click.argument("name", required=False)
@click.pass_context
def assign(ctx, feature: str, name):
    """Put FEATURE (path or '#N') into work package NAME (omit NAME to unassign)."""
    core = load_core(ctx)
    try:
        target = resolve_feature(core, feature)
        core.assign_work_package(target, name)
        if name:
            save(core, f"Feature #{target.seq} assigned to '{name}'.")
        else:
            save(core, f"Feature #{target.seq} removed from its work package.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@wp.command(name="list")
@click.argument("project_path")
@click.pass_context
def list_work_packages(ctx, project_path: str):
    """List the work packages of the project at PROJECT_PATH."""
    core = load_core(ctx)
    try:
        project = core.project_of(resolve_node(core, project_path))
        if not project.work_packages:
            click.echo("No work packages.")
            return
        for work_package in project.work_packages:
            features = core.work_package_manager.features_in(project, work_package.name)
            click.echo(f"{work_package.name} ({len(features)} features)")
            for feature in features:
                click.echo(f"  #{feature.seq} {feature.name} ({feature.progress.completion}%)")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@wp.command(name="prune")
@click.argument("project_path")
@click.pass_context
def prune(ctx, project_path: str):
    """Drop references to deleted features from the project's work packages."""
    core = load_core(ctx)
    try:
        project = core.project_of(resolve_node(core, project_path))
        removed = core.work_package_manager.prune_stale(project)
        core.save()
        click.echo(f"Removed {len(removed)} stale reference(s).")
    except FDDError as e:
        raise click.ClickException(format_error(e))

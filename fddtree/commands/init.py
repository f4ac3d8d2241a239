from pathlib import Path

import click

from fddtree.commands.common import document_path, format_error
from fddtree.core import FDDCore
from fddtree.exceptions import FDDError


@click.command()
@click.argument("name")
@click.option(
    "--force",
    is_flag=True,
    help="Force re-initialization, overwriting an existing document.",
)
@click.pass_context
def init(ctx, name, force):
    """Initializes a new planning document whose root Program is NAME."""
    path = document_path(ctx)
    if path.exists() and not force:
        click.confirm(
            f"A planning document already exists at {path.resolve()}. Do you want to overwrite it?",
            abort=True,
        )

    try:
        core = FDDCore.new(name, path=Path(path))
        core.save()
        click.echo(f"Planning document initialized at {path.resolve()}")
    except FDDError as e:
        raise click.ClickException(format_error(e))

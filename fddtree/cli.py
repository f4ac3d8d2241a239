"""
Command line interface for fddtree.

Every command loads the document, runs its edit through the command stack
and saves the result.
"""
import click

from fddtree.commands.config import config
from fddtree.commands.init import init
from fddtree.commands.milestone import milestone
from fddtree.commands.node import node
from fddtree.commands.search import search
from fddtree.commands.show import show
from fddtree.commands.wp import wp


@click.group()
@click.option(
    "-f",
    "--file",
    "document_path",
    type=click.Path(dir_okay=False),
    help="Planning document (defaults to the configured default document).",
)
@click.pass_context
def cli(ctx, document_path):
    """Edit Feature Driven Development planning documents."""
    ctx.ensure_object(dict)
    ctx.obj["document_path"] = document_path


cli.add_command(init)
cli.add_command(show)
cli.add_command(node)
cli.add_command(milestone)
cli.add_command(search)
cli.add_command(wp)
cli.add_command(config)


if __name__ == '__main__':
    cli()

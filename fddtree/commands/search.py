import click

from fddtree.commands.common import load_core
from fddtree.commands.show import node_label


@click.command()
@click.argument("query")
@click.option("-l", "--limit", type=int, default=10, show_default=True, help="Maximum number of results.")
@click.pass_context
def search(ctx, query: str, limit: int):
    """Find nodes whose names match QUERY (fuzzy)."""
    core = load_core(ctx)
    matches = core.search(query)[:limit]
    if not matches:
        click.echo(f"No nodes match '{query}'.")
        return
    for match in matches:
        path = core.navigator.get_node_path(match.node)
        click.echo(f"{match.score:.2f}  {node_label(match.node)}  ({path})")

"""
Show command for fddtree.

Displays the planning tree with completion and target dates.
"""

import json
from typing import Optional

import click

from fddtree.commands.common import format_error, load_core, resolve_node
from fddtree.exceptions import FDDError
from fddtree.managers.completion_tracker import CompletionTracker
from fddtree.models.nodes import Feature
from fddtree.utils import format_date

INDENT = "  "


def node_label(node) -> str:
    """One-line label: kind, name, sequence for features."""
    if isinstance(node, Feature):
        return f"[{node.kind.value}] #{node.seq} {node.name}"
    return f"[{node.kind.value}] {node.name}"


def display_tree(node, tracker: CompletionTracker, depth: Optional[int], level: int = 0) -> None:
    """Print a node and its descendants, one per line."""
    target = f" → {format_date(node.target_date)}" if node.target_date else ""
    late = " ⚠ late" if tracker.is_late(node) else ""
    click.echo(f"{INDENT * level}{node_label(node)} ({node.progress.completion}%){target}{late}")
    if depth is not None and level >= depth:
        return
    for child in node.children:
        display_tree(child, tracker, depth, level + 1)


def get_tree_data(node, tracker: CompletionTracker) -> dict:
    """Get a node and its descendants in a structured format for JSON output."""
    data = {
        "kind": node.kind.value,
        "name": node.name,
        "completion": node.progress.completion,
        "status": node.progress.status.value if node.progress.status else None,
        "target_date": format_date(node.target_date) or None,
        "late": tracker.is_late(node),
    }
    if isinstance(node, Feature):
        data["seq"] = node.seq
        data["milestones"] = [m.model_dump(mode="json") for m in node.milestones]
    else:
        data["children"] = [get_tree_data(child, tracker) for child in node.children]
    return data


@click.command()
@click.argument("path", required=False)
@click.option("-d", "--depth", type=int, help="Limit the number of levels shown.")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
@click.pass_context
def show(ctx, path: Optional[str], depth: Optional[int], json_output: bool):
    """Show the planning tree.

    PATH selects a subtree (names or 1-based positions from the root, e.g.
    Acme/1/2); '#N' selects the feature with sequence N. Defaults to the root.
    """
    core = load_core(ctx)
    try:
        node = resolve_node(core, path) if path else core.root
    except FDDError as e:
        raise click.ClickException(format_error(e))

    if json_output:
        click.echo(json.dumps(get_tree_data(node, core.tracker), indent=2))
    else:
        display_tree(node, core.tracker, depth)

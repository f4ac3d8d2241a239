"""
Node commands for fddtree.

Structural edits of the planning tree. Nodes are addressed by path (names or
1-based positions from the root) or by '#N' for the feature with sequence N.
"""
from typing import Optional

import click

from fddtree.commands.common import format_error, load_core, resolve_node, save
from fddtree.exceptions import FDDError
from fddtree.models.base import NodeKind
from fddtree.utils import parse_year_month

NODE_KIND_CHOICES = [kind.value for kind in NodeKind]


@click.group()
def node():
    """Add, rename, delete, move and copy nodes."""
    pass


@node.command(name="add")
@click.argument("parent_path")
@click.argument("kind", type=click.Choice(NODE_KIND_CHOICES))
@click.argument("name")
@click.option("-i", "--index", type=int, default=-1, help="Position among siblings (0-based, default: last).")
@click.option("--initials", help="Owner initials (activities and features).")
@click.option("--prefix", help="Prefix (subjects).")
@click.option("--month", help="Target month YYYY-MM (activities).")
@click.pass_context
def add(ctx, parent_path: str, kind: str, name: str, index: int,
        initials: Optional[str], prefix: Optional[str], month: Optional[str]):
    """Add a KIND node called NAME under PARENT_PATH."""
    core = load_core(ctx)
    fields = {}
    if initials:
        fields["initials"] = initials
    if prefix:
        fields["prefix"] = prefix
    if month:
        target_month = parse_year_month(month)
        if target_month is None:
            raise click.ClickException(f"Invalid month '{month}'. Use YYYY-MM.")
        fields["target_month"] = target_month

    try:
        parent = resolve_node(core, parent_path)
        created = core.add_node(parent, kind, name, index, **fields)
        if created is None:
            raise click.ClickException(
                f"'{parent.name}' cannot hold a {kind} next to its current children."
            )
        save(core, f"{kind.capitalize()} '{name}' created successfully.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@node.command(name="rename")
@click.argument("path")
@click.argument("new_name")
@click.pass_context
def rename(ctx, path: str, new_name: str):
    """Rename the node at PATH."""
    core = load_core(ctx)
    try:
        target = resolve_node(core, path)
        old_name = target.name
        if core.edit_node(target, name=new_name) is None:
            click.echo("Nothing to change.")
            return
        save(core, f"Renamed '{old_name}' to '{new_name}'.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@node.command(name="edit")
@click.argument("path")
@click.option("--initials", help="Owner initials (activities and features).")
@click.option("--prefix", help="Prefix (subjects).")
@click.option("--month", help="Target month YYYY-MM (activities).")
@click.pass_context
def edit(ctx, path: str, initials: Optional[str], prefix: Optional[str], month: Optional[str]):
    """Edit owner initials, prefix or target month of the node at PATH."""
    changes = {}
    if initials is not None:
        changes["initials"] = initials
    if prefix is not None:
        changes["prefix"] = prefix
    if month is not None:
        target_month = parse_year_month(month)
        if target_month is None:
            raise click.ClickException(f"Invalid month '{month}'. Use YYYY-MM.")
        changes["target_month"] = target_month
    if not changes:
        raise click.ClickException(
            "No update parameters provided. "
            "Specify at least one of: --initials, --prefix, --month."
        )

    core = load_core(ctx)
    try:
        target = resolve_node(core, path)
        if core.edit_node(target, **changes) is None:
            click.echo("Nothing to change.")
            return
        save(core, f"Node '{target.name}' updated successfully.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@node.command(name="delete")
@click.argument("path")
@click.confirmation_option(prompt="Are you sure you want to delete this node?")
@click.pass_context
def delete(ctx, path: str):
    """Delete the node at PATH.

    WARNING: This will delete all child nodes as well.
    """
    core = load_core(ctx)
    try:
        target = resolve_node(core, path)
        if not core.delete_node(target):
            raise click.ClickException("The root node cannot be deleted.")
        save(core, f"Node '{target.name}' deleted successfully.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@node.command(name="move")
@click.argument("path")
@click.argument("new_parent_path")
@click.option("-i", "--index", type=int, default=-1, help="Position among siblings (0-based, default: last).")
@click.pass_context
def move(ctx, path: str, new_parent_path: str, index: int):
    """Move the node at PATH under NEW_PARENT_PATH."""
    core = load_core(ctx)
    try:
        target = resolve_node(core, path)
        new_parent = resolve_node(core, new_parent_path)
        if not core.move_node(target, new_parent, index):
            raise click.ClickException(
                f"Cannot move '{target.name}' under '{new_parent.name}'."
            )
        save(core, f"Moved '{target.name}' under '{new_parent.name}'.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@node.command(name="place")
@click.argument("path")
@click.argument("reference_path")
@click.option("--after", is_flag=True, help="Place after the reference instead of before it.")
@click.pass_context
def place(ctx, path: str, reference_path: str, after: bool):
    """Move the node at PATH next to the node at REFERENCE_PATH."""
    core = load_core(ctx)
    try:
        target = resolve_node(core, path)
        reference = resolve_node(core, reference_path)
        if not core.insert_sibling(target, reference, after=after):
            raise click.ClickException(
                f"Cannot place '{target.name}' next to '{reference.name}'."
            )
        where = "after" if after else "before"
        save(core, f"Placed '{target.name}' {where} '{reference.name}'.")
    except FDDError as e:
        raise click.ClickException(format_error(e))


@node.command(name="copy")
@click.argument("path")
@click.argument("parent_path")
@click.option("--keep-seq", is_flag=True, help="Keep feature sequence numbers instead of allocating new ones.")
@click.pass_context
def copy(ctx, path: str, parent_path: str, keep_seq: bool):
    """Paste a copy of the node at PATH under PARENT_PATH."""
    core = load_core(ctx)
    try:
        source = resolve_node(core, path)
        parent = resolve_node(core, parent_path)
        pasted = core.paste_node(source, parent, resequence=not keep_seq)
        if pasted is None:
            raise click.ClickException(
                f"Cannot paste '{source.name}' under '{parent.name}'."
            )
        save(core, f"Copied '{source.name}' under '{parent.name}'.")
    except FDDError as e:
        raise click.ClickException(format_error(e))

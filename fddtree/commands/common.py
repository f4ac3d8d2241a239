"""
Helpers shared by the fddtree CLI commands.
"""
from pathlib import Path
from typing import Optional

import click

from fddtree.constants import get_default_document
from fddtree.core import FDDCore
from fddtree.exceptions import (
    FDDError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from fddtree.models.base import BaseNode
from fddtree.models.nodes import Aspect, Feature


def document_path(ctx: click.Context) -> Path:
    """Get the document path chosen on the command line or in config."""
    chosen = (ctx.obj or {}).get("document_path")
    return Path(chosen) if chosen else Path(get_default_document())


def load_core(ctx: click.Context) -> FDDCore:
    """Open the document for a command."""
    path = document_path(ctx)
    if not path.exists():
        raise click.ClickException(
            f"No planning document at {path}. Run 'fddtree init' first."
        )
    try:
        return FDDCore.open(path)
    except FDDError as e:
        raise click.ClickException(format_error(e))


def format_error(error: FDDError) -> str:
    if isinstance(error, NotFoundError):
        return str(error)
    if isinstance(error, ValidationError):
        return f"Validation Error: {error}"
    if isinstance(error, InvalidOperationError):
        return f"Operation Error: {error}"
    return f"Error: {error}"


def resolve_node(core: FDDCore, ref: str) -> BaseNode:
    """Resolve a node reference: a path, or '#N' for the feature with sequence N."""
    if ref.startswith("#"):
        try:
            seq = int(ref[1:])
        except ValueError:
            raise NotFoundError(f"Invalid feature reference '{ref}'.")
        return core.find_feature(seq)
    return core.resolve(ref)


def resolve_feature(core: FDDCore, ref: str) -> Feature:
    node = resolve_node(core, ref)
    if not isinstance(node, Feature):
        raise InvalidOperationError(f"'{node.name}' is not a feature.")
    return node


def save(core: FDDCore, message: Optional[str] = None) -> None:
    """Save the document and report success."""
    core.save()
    if message:
        click.echo(message)


def resolve_aspect(core: FDDCore, ref: str) -> Aspect:
    node = resolve_node(core, ref)
    if not isinstance(node, Aspect):
        raise InvalidOperationError(f"'{node.name}' is not an aspect.")
    return node

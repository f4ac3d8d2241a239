"""
Config command group for fddtree.

Commands for viewing editor configuration.
"""
import json

import click

from fddtree.exceptions import StorageError
from fddtree.managers import StorageManager


@click.group()
def config():
    """View editor configuration.

    Configuration is stored in .fddtree/config.json.
    """
    pass


@config.command(name="show")
@click.option("-j", "--json", "json_output", is_flag=True, help="Output in JSON format.")
def show_config(json_output: bool):
    """Show current configuration (defaults for unset keys)."""
    storage = StorageManager()
    try:
        settings = storage.load_config()
    except StorageError as e:
        raise click.ClickException(f"Error: {e}")

    if json_output:
        click.echo(json.dumps(settings.model_dump(mode="json"), indent=2))
        return
    for key, value in settings.model_dump(mode="json").items():
        click.echo(f"{key}: {value}")
    click.echo(f"\nConfiguration is stored in {storage.fdd_dir / 'config.json'}")

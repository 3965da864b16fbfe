"""Config command implementations."""

import json

import click

from matrixsync.exceptions import MatrixSyncError
from matrixsync.models import AppConfig

from ._common import fail, load_config


@click.group(name="config")
def config_group():
    """Configuration commands."""
    pass


@config_group.command(name="show")
@click.option("--show-secrets", is_flag=True, help="Print the broker password instead of masking it")
@click.pass_context
def show_config(ctx: click.Context, show_secrets: bool):
    """Print the effective configuration (file + environment)."""
    try:
        config = load_config(ctx)
    except MatrixSyncError as e:
        fail(e)

    data = config.model_dump(mode="json")
    if data["broker"].get("password") and not show_secrets:
        data["broker"]["password"] = "********"
    click.echo(json.dumps(data, indent=2))


@config_group.command(name="path")
@click.pass_context
def config_path(ctx: click.Context):
    """Print the config file location."""
    path = ctx.ensure_object(dict).get("config_path") or AppConfig.default_path()
    click.echo(str(path))

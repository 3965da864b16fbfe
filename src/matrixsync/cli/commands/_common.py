"""Helpers shared by CLI commands."""

import logging
from typing import NoReturn

import click

from matrixsync.exceptions import MatrixSyncError
from matrixsync.models import AppConfig
from matrixsync.session import MatrixSession

logger = logging.getLogger(__name__)


def fail(error: Exception) -> NoReturn:
    """Print an error without a traceback and exit with status 1."""
    if isinstance(error, MatrixSyncError):
        error.log(logger)
        message = error.describe()
    else:
        logger.error(f"Unexpected error: {error!r}")
        message = f"{type(error).__name__}: {error}"
    click.echo(f"Error: {message}", err=True)
    raise click.exceptions.Exit(1)


def load_config(ctx: click.Context) -> AppConfig:
    """Load config from the path given on the command line (or the default)."""
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        obj["config"] = AppConfig.load_or_default(obj.get("config_path"))
    return obj["config"]


def open_session(ctx: click.Context) -> MatrixSession:
    """Build a session; ``ctx.obj["session_factory"]`` overrides MatrixSession."""
    try:
        config = load_config(ctx)
    except MatrixSyncError as e:
        fail(e)
    factory = ctx.obj.get("session_factory", MatrixSession)
    return factory(config)


def connect(session: MatrixSession, timeout: float) -> None:
    """Connect and wait, exiting with an error if the broker is unreachable."""
    session.transport.connect()
    if not session.transport.wait_until_connected(timeout):
        click.echo(
            f"Error: could not connect to {session.config.broker.url} within {timeout:g}s",
            err=True,
        )
        raise click.exceptions.Exit(1)
    logger.info(f"CLI connected to {session.config.broker.url}")

"""Device command implementations."""

import logging
import time
from typing import Optional

import click

from matrixsync.codec import render_grid
from matrixsync.exceptions import MatrixSyncError
from matrixsync.models import StoreSnapshot

from ._common import connect, fail, open_session

logger = logging.getLogger(__name__)

timeout_option = click.option(
    "--timeout", "-t",
    type=float,
    default=10.0,
    show_default=True,
    help="Seconds to wait for the broker connection",
)


def format_snapshot(snapshot: StoreSnapshot, broker_url: str) -> str:
    """Human-readable summary of a store snapshot."""
    state = snapshot.confirmed
    device = {None: "unknown", True: "online", False: "offline"}[state.device_online]
    lines = [
        f"Broker:     {broker_url} ({'connected' if state.connected else 'disconnected'})",
        f"Device:     {device}",
        f"Brightness: {state.brightness}",
        f"LEDs on:    {len(state.active_leds)}",
    ]
    if snapshot.last_error is not None:
        lines.append(f"Last error: {snapshot.last_error.message}")
    lines.append("")
    lines.append(render_grid(state.active_leds))
    return "\n".join(lines)


def _send(ctx: click.Context, timeout: float, description: str, send) -> None:
    """Connect, run one store intent and report the outcome."""
    with open_session(ctx) as session:
        connect(session, timeout)
        try:
            sent = send(session.store)
        except MatrixSyncError as e:
            fail(e)
        session.transport.drain(timeout)

        if not sent:
            error = session.store.last_error
            message = error.message if error else "command was not sent"
            click.echo(f"Error: {message}", err=True)
            raise click.exceptions.Exit(1)
        click.echo(f"Sent {description}")


@click.command(name="status")
@timeout_option
@click.option(
    "--settle",
    type=float,
    default=2.0,
    show_default=True,
    help="Seconds to collect device reports before printing",
)
@click.pass_context
def status(ctx: click.Context, timeout: float, settle: float):
    """Connect and print the matrix state reported by the device."""
    with open_session(ctx) as session:
        connect(session, timeout)
        if settle > 0:
            time.sleep(settle)
        session.transport.drain(timeout)
        click.echo(format_snapshot(session.store.snapshot, session.config.broker.url))


@click.command(name="toggle")
@click.argument("index", type=int, required=False)
@click.option("--row", "-r", type=int, default=None, help="Row (0 = top)")
@click.option("--col", "-c", type=int, default=None, help="Column (0 = left)")
@timeout_option
@click.pass_context
def toggle(ctx: click.Context, index: Optional[int], row: Optional[int], col: Optional[int], timeout: float):
    """
    Flip one LED, by strip INDEX or by --row/--col.
    """
    if index is None and (row is None or col is None):
        raise click.UsageError("Give an INDEX or both --row and --col")
    if index is not None and (row is not None or col is not None):
        raise click.UsageError("Give either an INDEX or --row/--col, not both")

    if index is not None:
        _send(ctx, timeout, f"toggle for LED {index}", lambda store: store.toggle(index))
    else:
        _send(ctx, timeout, f"toggle for ({row}, {col})", lambda store: store.toggle_at(row, col))


@click.command(name="brightness")
@click.argument("value", type=int)
@timeout_option
@click.pass_context
def brightness(ctx: click.Context, value: int, timeout: float):
    """Set global brightness (0-255)."""
    _send(ctx, timeout, f"brightness {value}", lambda store: store.set_brightness(value))


@click.command(name="clear")
@timeout_option
@click.pass_context
def clear(ctx: click.Context, timeout: float):
    """Turn every LED off."""
    _send(ctx, timeout, "clear", lambda store: store.clear_all())

"""Status monitor command."""

import logging
import time
from datetime import datetime
from typing import Optional

import click

from matrixsync.addressing import to_coord
from matrixsync.models import (
    BrightnessChanged,
    BulkState,
    Connected,
    Disconnected,
    ErrorStatus,
    LedChanged,
    StatusEvent,
)

from ._common import open_session

logger = logging.getLogger(__name__)


def describe_event(event: StatusEvent) -> str:
    """One-line description of a status event."""
    source = event.source.value
    if isinstance(event, LedChanged):
        row, col = to_coord(event.index)
        return f"led {event.index} (row {row}, col {col}) {'on' if event.on else 'off'}"
    if isinstance(event, BulkState):
        return f"full state: {len(event.active_leds)} LED(s) on"
    if isinstance(event, BrightnessChanged):
        return f"brightness {event.value}"
    if isinstance(event, Connected):
        return f"{source} connected"
    if isinstance(event, Disconnected):
        return f"{source} disconnected" + (f" ({event.reason})" if event.reason else "")
    if isinstance(event, ErrorStatus):
        return f"{source} error [{event.code.value}]: {event.message}"
    return repr(event)


@click.command(name="monitor")
@click.option(
    "--duration",
    type=float,
    default=None,
    help="Stop after this many seconds (default: run until Ctrl+C)",
)
@click.pass_context
def monitor(ctx: click.Context, duration: Optional[float]):
    """
    Stream status events from the broker.

    Connects, subscribes to the status topic and prints every event as it
    arrives, including reconnects. Press Ctrl+C to stop.
    """
    def print_event(event: StatusEvent) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
        click.echo(f"[{timestamp}] {describe_event(event)}")

    with open_session(ctx) as session:
        click.echo(f"Monitoring {session.config.topics.status} on {session.config.broker.url}")
        click.echo("Press Ctrl+C to stop\n")

        unsubscribe = session.transport.subscribe(print_event)
        started = time.monotonic()
        try:
            while duration is None or time.monotonic() - started < duration:
                time.sleep(0.1)
                session.transport.drain(1.0)
        except KeyboardInterrupt:
            click.echo("\nStopping monitor...")
        finally:
            unsubscribe()

"""Pattern file commands.

Files given by bare name (``heart`` or ``heart.json``) that do not exist in
the current directory are looked up in the configured ``patterns_dir``.
"""

import logging
import re
import time
from pathlib import Path
from typing import Optional

import click

from matrixsync.codec import load_pattern_file, render_grid, save_pattern_file, to_state
from matrixsync.exceptions import ErrorContext, MatrixSyncError

from ._common import connect, fail, load_config, open_session

logger = logging.getLogger(__name__)

pattern_file = click.argument("path", type=click.Path(dir_okay=False, path_type=Path))


def _patterns_dir(ctx: click.Context) -> Path:
    try:
        return load_config(ctx).patterns_dir
    except MatrixSyncError as e:
        fail(e)


def _resolve(ctx: click.Context, path: Path) -> Path:
    """Fall back to the patterns directory for relative paths that don't exist."""
    if path.exists() or path.is_absolute():
        return path
    candidate = _patterns_dir(ctx) / path
    if not candidate.suffix:
        candidate = candidate.with_suffix(".json")
    if candidate.exists():
        logger.debug(f"Resolved {path} to {candidate}")
        return candidate
    return path


def _file_name(name: str) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "-", name).strip("-").lower()
    return f"{slug or 'pattern'}.json"


def _load(ctx: click.Context, path: Path):
    try:
        return load_pattern_file(_resolve(ctx, path))
    except MatrixSyncError as e:
        fail(e)


@click.group(name="pattern")
def pattern_group():
    """Pattern file commands."""
    pass


@pattern_group.command(name="list")
@click.pass_context
def list_patterns(ctx: click.Context):
    """List pattern files in the patterns directory."""
    directory = _patterns_dir(ctx)
    files = sorted(directory.glob("*.json")) if directory.is_dir() else []
    if not files:
        click.echo(f"No patterns in {directory}")
        return
    click.echo(f"Patterns in {directory}:")
    for path in files:
        click.echo(f"  {path.stem}")


@pattern_group.command(name="validate")
@pattern_file
@click.pass_context
def validate_pattern(ctx: click.Context, path: Path):
    """Check that a pattern file is well formed."""
    pattern = _load(ctx, path)
    click.echo(f"OK: '{pattern.name}' ({pattern.lit_count} LED(s) on, created {pattern.created_at.isoformat()})")


@pattern_group.command(name="show")
@pattern_file
@click.pass_context
def show_pattern(ctx: click.Context, path: Path):
    """Print a pattern file as a grid."""
    pattern = _load(ctx, path)
    active, colors = to_state(pattern)
    click.echo(f"{pattern.name}  ({len(active)} on, {len(colors)} colored)\n")
    click.echo(render_grid(active))


@pattern_group.command(name="apply")
@pattern_file
@click.option("--timeout", "-t", type=float, default=10.0, show_default=True,
              help="Seconds to wait for the broker connection")
@click.pass_context
def apply_pattern(ctx: click.Context, path: Path, timeout: float):
    """Send the commands that make the matrix show a pattern file."""
    pattern = _load(ctx, path)

    with open_session(ctx) as session:
        connect(session, timeout)
        session.transport.drain(timeout)
        session.store.load_pattern_document(pattern)
        sent = session.store.apply_draft()
        session.transport.drain(timeout)
        click.echo(f"Applied '{pattern.name}': {sent} command(s) sent")


@pattern_group.command(name="export")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.option("--name", "-n", type=str, default=None, help="Pattern name (default: timestamped)")
@click.option("--timeout", "-t", type=float, default=10.0, show_default=True,
              help="Seconds to wait for the broker connection")
@click.option("--settle", type=float, default=2.0, show_default=True,
              help="Seconds to collect device reports before exporting")
@click.pass_context
def export_pattern(ctx: click.Context, path: Optional[Path], name: Optional[str], timeout: float, settle: float):
    """
    Save what the matrix currently shows to a pattern file.

    Without PATH the file is written to the patterns directory, named after
    the pattern.
    """
    with open_session(ctx) as session:
        connect(session, timeout)
        if settle > 0:
            time.sleep(settle)
        session.transport.drain(timeout)
        pattern = session.store.export_pattern(name=name)

    if path is None:
        path = session.config.patterns_dir / _file_name(pattern.name)

    with ErrorContext(f"save pattern to {path}", logger, re_raise=False) as save:
        save_pattern_file(pattern, path)
    if save.error is not None:
        fail(save.error)
    click.echo(f"Saved '{pattern.name}' ({pattern.lit_count} LED(s) on) to {path}")

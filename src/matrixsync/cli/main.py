"""Main CLI entry point."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

import click

from matrixsync import __version__

from .commands import brightness, clear, config_group, monitor, pattern_group, status, toggle

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> Path:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG); also echoes to stderr
        debug: If True, enable debug mode with file logging in the current directory
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)

    Returns:
        Path of the log file
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Explicit log level wins when logging to a custom file
    if log_file:
        level = getattr(logging, log_level.upper())

    if debug and not log_file:
        log_path = Path.cwd() / "matrixsync-debug.log"
    elif log_file:
        log_path = log_file
    else:
        config_dir = Path.home() / ".matrixsync" / "logs"
        config_dir.mkdir(parents=True, exist_ok=True)
        log_path = config_dir / "matrixsync.log"

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    # Rotating file handler (keeps last 5 files, max 10MB each)
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    if verbose:
        stream_handler = logging.StreamHandler()
        stream_handler.setLevel(level)
        stream_handler.setFormatter(formatter)
        root_logger.addHandler(stream_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")
    return log_path


@click.group()
@click.pass_context
@click.version_option(version=__version__, prog_name="matrixsync")
@click.option(
    '--config', '-c',
    'config_path',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file (default: ~/.matrixsync/config.json or $MATRIXSYNC_CONFIG_FILE)'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG) and echo logs to stderr'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./matrixsync-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    config_path: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    Matrixsync - remote control for an MQTT-connected 8x20 LED matrix.

    \b
    Examples:
      # Show what the matrix is displaying
      matrixsync status

      # Flip one LED by strip index or by position
      matrixsync toggle 42
      matrixsync toggle --row 3 --col 7

      # Set brightness, clear everything
      matrixsync brightness 128
      matrixsync clear

      # Watch status traffic
      matrixsync monitor

      # Work with pattern files
      matrixsync pattern validate heart.json
      matrixsync pattern apply heart.json
    """
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config_path", config_path)
    ctx.obj["log_path"] = setup_logging(verbose, debug, log_file, log_level)


cli.add_command(status)
cli.add_command(toggle)
cli.add_command(brightness)
cli.add_command(clear)
cli.add_command(monitor)
cli.add_command(pattern_group)
cli.add_command(config_group)

if __name__ == "__main__":
    cli()

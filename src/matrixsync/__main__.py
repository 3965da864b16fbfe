"""Main entry point for matrixsync."""

from matrixsync.cli.main import cli

if __name__ == "__main__":
    cli()

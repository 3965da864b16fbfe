"""Command-line interface for matrixsync."""

from .main import cli

__all__ = ["cli"]

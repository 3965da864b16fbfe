"""Codecs for pattern files and wire messages."""

from .pattern import from_state, load_pattern_file, render_grid, save_pattern_file, to_state, validate
from .wire import decode_status, encode_command

__all__ = [
    "decode_status",
    "encode_command",
    "from_state",
    "load_pattern_file",
    "render_grid",
    "save_pattern_file",
    "to_state",
    "validate",
]

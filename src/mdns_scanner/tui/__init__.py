"""
Terminal front end: rich rendering and raw keyboard input.
"""
from .keys import RawKeyReader, SpecialKey, decode_keys, key_to_event
from .render import build_view
from .runner import run_scanner, run_tui

__all__ = [
    "RawKeyReader",
    "SpecialKey",
    "build_view",
    "decode_keys",
    "key_to_event",
    "run_scanner",
    "run_tui",
]

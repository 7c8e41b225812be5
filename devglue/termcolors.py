"""printf-style output that passes ANSI colour sequences through or strips them."""

from __future__ import annotations

import os
import re
import sys
from typing import TextIO

_use_colors = False

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_SGR_NUMBER = re.compile(r"(?:[ \t\n\v\f\r]*[+-]?[0-9]+)?")
_ESCAPE_START = "\x1b["


def _parse_leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def init() -> None:
    """Enable colours if stdout is a terminal; the COLOR variable overrides that."""
    global _use_colors
    stdout = sys.stdout
    _use_colors = bool(stdout is not None and stdout.isatty())
    color_env = os.environ.get("COLOR")
    if color_env is not None:
        _use_colors = _parse_leading_int(color_env) != 0


def set_enabled(enabled: bool) -> None:
    """Turn colour output on or off."""
    global _use_colors
    _use_colors = bool(enabled)


def colors_enabled() -> bool:
    """Return whether colour sequences are currently passed through."""
    return _use_colors


def strip_escapes(text: str) -> str:
    """Remove SGR escape sequences (ESC [ n;n... m) from ``text``.

    Raises ValueError for a sequence that is not terminated by 'm'.
    """
    parts = []
    pos = 0
    size = len(text)
    while True:
        start = text.find(_ESCAPE_START, pos)
        if start < 0:
            parts.append(text[pos:])
            break
        parts.append(text[pos:start])
        pos = start + len(_ESCAPE_START)
        if text.startswith("m", pos):
            pos += 1
            continue
        while True:
            end = _SGR_NUMBER.match(text, pos).end()
            if end >= size or text[end] not in ";m":
                raise ValueError("invalid escape sequence, expected ';' or 'm'")
            pos = end + 1
            if text[end] == "m":
                break
    return "".join(parts)


def cfprintf(stream: TextIO, fmt: str, *args) -> int:
    """Write ``fmt % args`` to ``stream``, stripping colours when disabled.

    Returns the number of characters written.
    """
    text = fmt % args
    if not _use_colors:
        text = strip_escapes(text)
    stream.write(text)
    return len(text)


def cprintf(fmt: str, *args) -> int:
    """Like :func:`cfprintf` with standard output as the stream."""
    return cfprintf(sys.stdout, fmt, *args)
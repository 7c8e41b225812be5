"""String, path, size-formatting and whole-file helpers."""

from __future__ import annotations

import os
import random

_UUID_ALPHABET = "ABCDEF0123456789"
_UUID_DASHES = frozenset({8, 13, 18, 23})
_UUID_LENGTH = 36

_SIZE_UNITS = (
    (1_000_000_000_000, "TB"),
    (1_000_000_000, "GB"),
    (1_000_000, "MB"),
    (1_000, "KB"),
)


def string_concat(*args: str) -> str:
    """Join all given strings into one; at least one string is required."""
    if not args:
        raise ValueError("string_concat needs at least one string")
    return "".join(args)


def build_path(*args: str) -> str:
    """Join path elements with '/' separators; at least one element is required."""
    if not args:
        raise ValueError("build_path needs at least one path element")
    return "/".join(args)


def format_size(size: int) -> str:
    """Format a byte count with decimal units, e.g. '1.5 MB' or '999 Bytes'."""
    if size < 0:
        raise ValueError("size must not be negative")
    for threshold, unit in _SIZE_UNITS:
        if size >= threshold:
            return f"{size / threshold:0.1f} {unit}"
    return f"{size} Bytes"


def generate_uuid() -> str:
    """Return a random upper-case UUID-shaped string (8-4-4-4-12 hex digits)."""
    return "".join(
        "-" if i in _UUID_DASHES else random.choice(_UUID_ALPHABET)
        for i in range(_UUID_LENGTH)
    )


def read_file(filename: str | os.PathLike) -> bytes:
    """Return the whole contents of ``filename``; an empty file is an error."""
    with open(filename, "rb") as f:
        data = f.read()
    if not data:
        raise ValueError(f"{os.fspath(filename)!r} is empty")
    return data


def write_file(filename: str | os.PathLike, data) -> None:
    """Write ``data`` to ``filename``, replacing any previous contents."""
    payload = memoryview(data).tobytes()
    with open(filename, "wb") as f:
        written = f.write(payload)
    if written != len(payload):
        raise OSError(f"short write to {os.fspath(filename)!r}")
"""Tag-length-value encoding with one-byte tags and one-byte lengths."""

from __future__ import annotations

from collections.abc import Iterator

_MAX_CHUNK = 255
_UINT_SIZES = (1, 2, 4, 8)


class TlvBuffer:
    """Accumulates TLV entries; values longer than 255 bytes are split."""

    def __init__(self) -> None:
        self._data = bytearray()

    def append(self, tag: int, data) -> None:
        """Append ``data`` under ``tag``, in chunks of at most 255 bytes."""
        if not 0 <= tag <= 0xFF:
            raise ValueError(f"tag {tag} does not fit in one byte")
        value = memoryview(data).tobytes()
        for start in range(0, len(value), _MAX_CHUNK):
            chunk = value[start:start + _MAX_CHUNK]
            self._data.append(tag)
            self._data.append(len(chunk))
            self._data += chunk

    def __bytes__(self) -> bytes:
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)


def _entries(data) -> Iterator[tuple[int, bytes]]:
    raw = memoryview(data).tobytes()
    pos = 0
    while pos < len(raw):
        if pos + 2 > len(raw):
            raise ValueError(f"truncated TLV header at offset {pos}")
        tag, length = raw[pos], raw[pos + 1]
        pos += 2
        if pos + length > len(raw):
            raise ValueError(f"TLV entry with tag {tag} runs past the end of the data")
        yield tag, raw[pos:pos + length]
        pos += length


def find_value(data, tag: int) -> bytes | None:
    """Return the value of the first entry with ``tag``, or None if there is none."""
    for entry_tag, value in _entries(data):
        if entry_tag == tag:
            return value
    return None


def _require(data, tag: int) -> bytes:
    value = find_value(data, tag)
    if value is None:
        raise KeyError(tag)
    return value


def get_uint(data, tag: int) -> int:
    """Return the little-endian unsigned integer (1, 2, 4 or 8 bytes) under ``tag``."""
    value = _require(data, tag)
    if len(value) not in _UINT_SIZES:
        raise ValueError(f"value of tag {tag} has {len(value)} bytes, not an integer size")
    return int.from_bytes(value, "little")


def get_uint8(data, tag: int) -> int:
    """Return the single-byte value under ``tag``."""
    value = _require(data, tag)
    if len(value) != 1:
        raise ValueError(f"value of tag {tag} has {len(value)} bytes, expected 1")
    return value[0]


def copy_data(data, tag: int) -> bytes:
    """Return the values of all entries with ``tag`` joined in order."""
    parts = [value for entry_tag, value in _entries(data) if entry_tag == tag]
    if not parts:
        raise KeyError(tag)
    return b"".join(parts)
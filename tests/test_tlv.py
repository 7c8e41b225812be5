import pytest

from devglue.tlv import TlvBuffer, copy_data, find_value, get_uint, get_uint8


def test_append_short_value_wire_bytes():
    buf = TlvBuffer()
    buf.append(1, b"ab")
    assert bytes(buf) == b"\x01\x02ab"
    assert len(buf) == 4


def test_append_empty_value_adds_nothing():
    buf = TlvBuffer()
    buf.append(7, b"")
    assert bytes(buf) == b""
    assert len(buf) == 0


def test_append_exactly_255_bytes_is_one_entry():
    buf = TlvBuffer()
    buf.append(3, b"z" * 255)
    raw = bytes(buf)
    assert raw[:2] == b"\x03\xff"
    assert len(raw) == 257


def test_long_value_is_split_and_reassembled():
    payload = bytes(i % 256 for i in range(600))
    buf = TlvBuffer()
    buf.append(5, payload)
    raw = bytes(buf)
    assert raw[:2] == b"\x05\xff"
    assert raw[257:259] == b"\x05\xff"
    assert len(raw) == len(payload) + 2 * 3
    assert copy_data(raw, 5) == payload


def test_append_rejects_wide_tag():
    with pytest.raises(ValueError):
        TlvBuffer().append(256, b"x")


def test_find_value_first_match_and_missing():
    buf = TlvBuffer()
    buf.append(1, b"one")
    buf.append(2, b"two")
    buf.append(1, b"uno")
    raw = bytes(buf)
    assert find_value(raw, 1) == b"one"
    assert find_value(raw, 2) == b"two"
    assert find_value(raw, 9) is None


@pytest.mark.parametrize("size", [1, 2, 4, 8])
def test_get_uint_round_trip(size):
    number = (1 << (8 * size)) - 2
    buf = TlvBuffer()
    buf.append(4, number.to_bytes(size, "little"))
    assert get_uint(bytes(buf), 4) == number


def test_get_uint_little_endian():
    assert get_uint(b"\x09\x02\x34\x12", 9) == 0x1234


def test_get_uint_rejects_odd_size():
    with pytest.raises(ValueError):
        get_uint(b"\x09\x03abc", 9)


def test_get_uint_missing_tag():
    with pytest.raises(KeyError):
        get_uint(b"\x01\x01\x00", 2)


def test_get_uint8():
    raw = b"\x06\x01\x2a"
    assert get_uint8(raw, 6) == 0x2A
    with pytest.raises(ValueError):
        get_uint8(b"\x06\x02\x00\x01", 6)
    with pytest.raises(KeyError):
        get_uint8(raw, 7)


def test_copy_data_joins_matching_entries_only():
    buf = TlvBuffer()
    buf.append(1, b"he")
    buf.append(2, b"--")
    buf.append(1, b"llo")
    assert copy_data(bytes(buf), 1) == b"hello"
    assert copy_data(bytes(buf), 2) == b"--"


def test_copy_data_missing_tag():
    with pytest.raises(KeyError):
        copy_data(b"\x01\x01x", 3)


def test_truncated_entry_is_rejected():
    with pytest.raises(ValueError):
        find_value(b"\x01\x05ab", 1)
    with pytest.raises(ValueError):
        copy_data(b"\x01\x01a\x02", 1)
import hashlib

import pytest

from devglue.sha512 import Sha384, Sha512, sha384, sha512

LENGTHS = [0, 1, 3, 55, 111, 112, 113, 127, 128, 129, 255, 256, 1000]


def _message(length):
    return bytes((i * 7 + 3) % 256 for i in range(length))


@pytest.mark.parametrize("length", LENGTHS)
def test_sha512_matches_reference(length):
    data = _message(length)
    assert sha512(data) == hashlib.sha512(data).digest()


@pytest.mark.parametrize("length", LENGTHS)
def test_sha384_matches_reference(length):
    data = _message(length)
    assert sha384(data) == hashlib.sha384(data).digest()


def test_known_abc_vector_prefix():
    assert sha512(b"abc").hex().startswith("ddaf35a193617aba")


def test_digest_sizes():
    assert len(sha512(b"x")) == 64
    assert len(sha384(b"x")) == 48


@pytest.mark.parametrize("cls", [Sha512, Sha384])
def test_incremental_updates_equal_one_shot(cls):
    data = _message(777)
    h = cls()
    for start in range(0, len(data), 37):
        h.update(data[start:start + 37])
    assert h.digest() == cls(data).digest()


def test_digest_does_not_consume_state():
    h = Sha512(b"hello")
    first = h.digest()
    assert h.digest() == first
    h.update(b" world")
    assert h.digest() == hashlib.sha512(b"hello world").digest()


def test_hexdigest_is_hex_of_digest():
    h = Sha384(b"payload")
    assert h.hexdigest() == h.digest().hex()
    assert h.hexdigest() == hashlib.sha384(b"payload").hexdigest()


def test_copy_is_independent():
    original = Sha512(b"abc")
    clone = original.copy()
    clone.update(b"def")
    assert original.digest() == hashlib.sha512(b"abc").digest()
    assert clone.digest() == hashlib.sha512(b"abcdef").digest()
    assert isinstance(Sha384().copy(), Sha384)


def test_accepts_bytes_like_objects():
    data = bytearray(b"some data")
    assert sha512(memoryview(data)) == sha512(bytes(data))


def test_rejects_text():
    with pytest.raises(TypeError):
        Sha512().update("text")
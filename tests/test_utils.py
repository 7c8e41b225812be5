import pytest

from devglue.utils import (
    build_path,
    format_size,
    generate_uuid,
    read_file,
    string_concat,
    write_file,
)


def test_string_concat_joins_in_order():
    assert string_concat("foo", "bar", "baz") == "foo" + "bar" + "baz"


def test_string_concat_single():
    assert string_concat("only") == "only"


def test_string_concat_requires_argument():
    with pytest.raises(ValueError):
        string_concat()


def test_build_path_uses_slash():
    parts = ("usr", "local", "lib")
    result = build_path(*parts)
    assert result.split("/") == list(parts)


def test_build_path_single_element():
    assert build_path("/var") == "/var"


def test_build_path_requires_argument():
    with pytest.raises(ValueError):
        build_path()


@pytest.mark.parametrize(
    "size, expected",
    [(999, "999 Bytes"), (1000, "1.0 KB"), (1_500_000, "1.5 MB")],
)
def test_format_size_pinned(size, expected):
    assert format_size(size) == expected


@pytest.mark.parametrize(
    "size, unit",
    [
        (0, "Bytes"),
        (999_999, "KB"),
        (2_000_000_000, "GB"),
        (5_000_000_000_000, "TB"),
    ],
)
def test_format_size_units(size, unit):
    assert format_size(size).endswith(" " + unit)


def test_format_size_negative():
    with pytest.raises(ValueError):
        format_size(-1)


def test_generate_uuid_shape():
    value = generate_uuid()
    assert len(value) == 36
    assert [len(group) for group in value.split("-")] == [8, 4, 4, 4, 12]
    assert set(value.replace("-", "")) <= set("0123456789ABCDEF")


def test_generate_uuid_varies():
    values = {generate_uuid() for _ in range(20)}
    assert len(values) > 1


def test_file_round_trip(tmp_path):
    path = tmp_path / "data.bin"
    payload = bytes(range(256))
    write_file(path, payload)
    assert read_file(path) == payload


def test_write_file_overwrites(tmp_path):
    path = tmp_path / "data.bin"
    write_file(path, b"first contents")
    write_file(path, b"two")
    assert read_file(path) == b"two"


def test_read_empty_file_fails(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    with pytest.raises(ValueError):
        read_file(path)


def test_read_missing_file_fails(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_file(tmp_path / "missing")
"""Tests for the writer and for write-then-read agreement."""

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

import msgspec
import pytest

from transit_core import dumps, loads
from transit_core.constants import WireProtocol
from transit_core.errors import UnsupportedValueError
from transit_core.reader import Reader
from transit_core.values import URI, Char, TransitList, TypedArray, TypedArrayKind, keyword, symbol
from transit_core.writer import Writer

_SAMPLES: list[object] = [
    "plain",
    "~tilde",
    "^caret",
    keyword("foo"),
    symbol("bar"),
    Decimal("3.14159265358979323846"),
    1.5,
    float("inf"),
    Char("x"),
    dt.datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=dt.UTC),
    uuid.UUID("5a2d1a8b-f8a1-4c3e-9e4b-1b2c3d4e5f60"),
    URI.parse("https://example.com/a?b=c"),
    b"\x00\xffbinary",
    frozenset({keyword("a"), keyword("b")}),
    frozenset({TransitList(((1, 2),))}),
    TransitList((1, "two", keyword("three"))),
    TypedArray(TypedArrayKind.DOUBLES, (1.5, 2.5)),
    [keyword("abcd"), keyword("abcd"), None, True, 3],
    {keyword("name"): "value", keyword("tags"): frozenset({"x"})},
    [{keyword("kind"): 1}, {keyword("kind"): 2}],
]


@pytest.mark.parametrize("protocol", ["json", "msgpack"])
@pytest.mark.parametrize("value", _SAMPLES, ids=repr)
def test_round_trip(value: object, protocol: WireProtocol) -> None:
    """Ensure decoding a written value gives the value back."""
    assert loads(dumps(value, protocol=protocol), protocol=protocol) == value


def test_repeated_keywords_use_tokens() -> None:
    """Ensure the second occurrence of a cacheable string is tokenized."""
    assert Writer().marshal([keyword("foo"), keyword("foo")]) == ["~:foo", "^0"]


def test_repeated_map_keys_use_tokens() -> None:
    """Ensure long map keys are tokenized on repeat."""
    tree = Writer().marshal([{"name": 1}, {"name": 2}])
    assert tree == [{"name": 1}, {"^0": 2}]


def test_tag_like_key_is_escaped() -> None:
    """Ensure a literal key that looks like a tag survives the round trip."""
    value = {"~#set": 1}
    assert Writer().marshal(value) == {"~~#set": 1}
    assert loads(dumps(value)) == value


def test_top_level_scalar_is_quoted() -> None:
    """Ensure scalar documents are wrapped in the quote tag."""
    assert Writer().marshal(keyword("foo")) == {"~#'": "~:foo"}
    assert Writer().marshal(7) == {"~#'": 7}


def test_float_map_key_is_encoded_as_text() -> None:
    """Ensure float keys are written as float directives."""
    assert Writer().marshal({2.5: "x"}) == {"~d2.5": "x"}
    assert loads(dumps({2.5: "x"})) == {2.5: "x"}


def test_naive_datetime_is_written_as_utc() -> None:
    """Ensure naive datetimes are treated as UTC."""
    naive = dt.datetime(2024, 5, 6, 7, 8, 9)
    assert Writer().marshal([naive]) == ["~t2024-05-06T07:08:09Z"]
    assert loads(dumps(naive)) == naive.replace(tzinfo=dt.UTC)


def test_integer_map_key_is_unsupported() -> None:
    """Ensure integer keys are rejected."""
    with pytest.raises(UnsupportedValueError):
        Writer().marshal({1: "x"})


def test_unknown_type_is_unsupported() -> None:
    """Ensure values with no Transit form are rejected."""
    with pytest.raises(UnsupportedValueError):
        dumps([object()])


def test_tagged_map_key_is_unsupported() -> None:
    """Ensure tagged values are rejected in key position."""
    with pytest.raises(UnsupportedValueError):
        Writer().marshal({frozenset({1}): "x"})


def test_write_lines_round_trip() -> None:
    """Ensure JSON Lines output decodes line by line."""
    data = Writer().write_lines([[keyword("abcd")], [keyword("abcd")]])
    assert data.count(b"\n") == 2
    assert list(Reader().read_lines(data)) == [[keyword("abcd")], [keyword("abcd")]]


def test_write_lines_requires_json() -> None:
    """Ensure JSON Lines output is limited to the json protocol."""
    with pytest.raises(ValueError, match="json protocol"):
        Writer("msgpack").write_lines([[1]])


def test_msgpack_output_is_msgpack() -> None:
    """Ensure the msgpack writer emits a MessagePack document."""
    data = Writer("msgpack").write([keyword("abcd")])
    assert msgspec.msgpack.decode(data) == ["~:abcd"]


def test_round_trip_across_cache_reset() -> None:
    """Ensure writer and reader stay in step when the cache wraps."""
    names = [keyword(f"k{index:04d}") for index in range(2000)]
    value = names + names
    assert loads(dumps(value)) == value

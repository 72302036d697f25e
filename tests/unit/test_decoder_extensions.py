"""Tests for the decoder extension registry."""

from __future__ import annotations

from typing import Any

import pytest

from transit_core.decoder import DECODER_ARITY_MESSAGE, Decoder
from transit_core.errors import ExtensionArityError
from transit_core.rolling_cache import RollingCache
from transit_core.values import keyword


def _two_params(payload: object, extra: object) -> object:
    return (payload, extra)


def _optional_second(payload: object, extra: object = None) -> object:
    return (payload, extra)


def _varargs(*payloads: object) -> object:
    return payloads


def _no_params() -> object:
    return None


def test_register_scalar_directive(decoder: Decoder, cache: RollingCache) -> None:
    """Ensure a two-character prefix receives the remainder string."""
    decoder.register("~x", lambda payload: payload.upper())
    assert decoder.decode("~xabc", cache) == "ABC"


def test_register_structural_tag_by_name(decoder: Decoder, cache: RollingCache) -> None:
    """Ensure bare tag names are stored under the ``~#`` prefix."""
    decoder.register("point", lambda payload: tuple(payload))
    assert "~#point" in decoder.decoders
    assert decoder.decode({"~#point": [1, 2]}, cache) == (1, 2)


def test_structural_extension_receives_decoded_payload(
    decoder: Decoder,
    cache: RollingCache,
) -> None:
    """Ensure structural payloads are decoded with the document cache."""
    seen: list[Any] = []
    decoder.register("~#point", seen.append)
    decoder.decode([{"~#point": ["~:axis"]}, {"^0": ["^1"]}], cache)
    assert seen == [[keyword("axis")], [keyword("axis")]]


@pytest.mark.parametrize("fn", [_two_params, _optional_second, _varargs, _no_params, "nope"])
def test_register_rejects_wrong_arity(decoder: Decoder, fn: Any) -> None:
    """Ensure bad decode functions fail at registration and change nothing."""
    before = dict(decoder.decoders)
    with pytest.raises(ExtensionArityError) as excinfo:
        decoder.register("point", fn)
    assert str(excinfo.value) == DECODER_ARITY_MESSAGE
    assert dict(decoder.decoders) == before
    assert "~#point" not in decoder.decoders


def test_arity_error_is_a_type_error(decoder: Decoder) -> None:
    """Ensure arity failures can be caught as TypeError."""
    with pytest.raises(TypeError):
        decoder.register("~y", _two_params)


def test_register_overwrites_builtin(decoder: Decoder, cache: RollingCache) -> None:
    """Ensure registration replaces an existing entry."""
    decoder.register("~:", lambda payload: f"kw:{payload}")
    assert decoder.decode("~:foo", cache) == "kw:foo"


def test_replacing_default_table(cache: RollingCache) -> None:
    """Ensure a construction-time table replaces every built-in."""
    bare = Decoder(decoders={})
    assert bare.decode("~:foo", cache) == "~:foo"
    assert bare.decode({"~#set": [1]}, cache) == {"~#set": [1]}


def test_composing_from_default_table(cache: RollingCache) -> None:
    """Ensure the built-in table can seed a reduced custom table."""
    base = Decoder()
    table = {tag: fn for tag, fn in base.default_decoders().items() if tag != "~#set"}
    custom = Decoder(decoders=table)
    assert custom.decode("~:foo", cache) is keyword("foo")
    assert custom.decode({"~#set": [1]}, cache) == {"~#set": [1]}


def test_decoders_view_is_read_only(decoder: Decoder) -> None:
    """Ensure the exposed tag table cannot be mutated directly."""
    with pytest.raises(TypeError):
        decoder.decoders["~z"] = lambda payload, cache, as_map_key: payload  # type: ignore[index]

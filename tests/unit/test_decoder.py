"""Unit tests for decoder error handling and depth limits."""

from __future__ import annotations

from typing import Any

import pytest

from qpack import (
    Config,
    DecodeError,
    EmptyInputError,
    EncodeError,
    ExcessiveDepthError,
    MalformedStructureError,
    Tag,
    TruncatedError,
    UnknownTagError,
    decode,
    encode,
)


def nested_list(depth: int) -> list[Any]:
    """Build ``depth`` levels of single-item lists around 0."""
    value: Any = 0
    for _ in range(depth):
        value = [value]
    return value


def nesting_depth(value: Any) -> int:
    """Measure single-item list nesting without recursion."""
    depth = 0
    while isinstance(value, list):
        depth += 1
        value = value[0] if value else None
    return depth


class TestMalformedInput:
    """Test rejection of malformed buffers."""

    def test_empty_input(self) -> None:
        """A zero-length buffer has no value."""
        with pytest.raises(EmptyInputError):
            decode(b"")

    def test_unclosed_map(self) -> None:
        """MAP_OPEN without MAP_CLOSE is malformed."""
        data = bytes([Tag.MAP_OPEN]) + encode("k") + encode(1)
        with pytest.raises(MalformedStructureError, match="not closed"):
            decode(data)

    def test_unclosed_array(self) -> None:
        """ARRAY_OPEN without ARRAY_CLOSE is malformed."""
        with pytest.raises(MalformedStructureError):
            decode(bytes([Tag.ARRAY_OPEN, Tag.TRUE]))

    def test_short_fixed_container(self) -> None:
        """A fixed-size container missing children is malformed."""
        with pytest.raises(MalformedStructureError):
            decode(bytes([Tag.ARRAY3, Tag.TRUE]))
        with pytest.raises(MalformedStructureError):
            decode(bytes([Tag.MAP1]) + encode("key"))

    def test_truncated_raw(self) -> None:
        """A raw length past the buffer end is truncation."""
        data = bytes([Tag.RAW]) + (100).to_bytes(4, "little") + b"short"
        with pytest.raises(TruncatedError):
            decode(data)

    def test_unknown_tag(self) -> None:
        """Undefined bytes are rejected."""
        with pytest.raises(UnknownTagError):
            decode(b"\x01")

    @pytest.mark.parametrize("tag", [Tag.ARRAY_CLOSE, Tag.MAP_CLOSE])
    def test_close_as_value(self, tag: Tag) -> None:
        """A close tag is never a value."""
        with pytest.raises(MalformedStructureError, match="Expected a value"):
            decode(bytes([tag]))

    def test_mismatched_close(self) -> None:
        """An array cannot be closed by MAP_CLOSE."""
        with pytest.raises(MalformedStructureError):
            decode(bytes([Tag.ARRAY_OPEN, Tag.TRUE, Tag.MAP_CLOSE]))

    def test_close_inside_fixed_container(self) -> None:
        """Fixed-size containers have no close tag."""
        with pytest.raises(MalformedStructureError):
            decode(bytes([Tag.ARRAY2, Tag.TRUE, Tag.ARRAY_CLOSE]))

    def test_map_close_after_key(self) -> None:
        """A map cannot close between a key and its value."""
        data = bytes([Tag.MAP_OPEN]) + encode("k") + bytes([Tag.MAP_CLOSE])
        with pytest.raises(MalformedStructureError):
            decode(data)

    def test_invalid_decoded_key(self) -> None:
        """Map keys must decode to numbers or strings."""
        with pytest.raises(MalformedStructureError, match="key"):
            decode(bytes([Tag.MAP1, Tag.NULL, Tag.TRUE]))
        with pytest.raises(MalformedStructureError, match="key"):
            decode(bytes([Tag.MAP1, Tag.ARRAY0, Tag.TRUE]))

    def test_trailing_bytes_rejected(self) -> None:
        """Exactly one top-level value is allowed."""
        with pytest.raises(MalformedStructureError, match="trailing"):
            decode(encode(1) + encode(2))

    def test_invalid_utf8_as_str(self) -> None:
        """Text decoding requires valid UTF-8."""
        with pytest.raises(MalformedStructureError, match="UTF-8"):
            decode(encode(b"\xff\xfe"), Config(decode_raw_as_str=True))

    def test_all_errors_are_decode_errors(self) -> None:
        """Every decode failure can be caught as DecodeError."""
        for data in (b"", b"\x00", bytes([Tag.MAP_OPEN]), bytes([Tag.INT64, 1])):
            with pytest.raises(DecodeError):
                decode(data)

    def test_duplicate_keys_last_wins(self) -> None:
        """Repeated keys keep the last value."""
        data = bytes([Tag.MAP2]) + encode(1) + encode("a") + encode(1) + encode("b")
        assert decode(data) == {1: b"b"}


class TestDepthLimits:
    """Test encode and decode depth limits."""

    @pytest.mark.parametrize("max_depth", [1, 2, 17])
    def test_encode_exact_limit(self, max_depth: int) -> None:
        """Nesting to exactly the limit succeeds; one more fails."""
        config = Config(encode_max_depth=max_depth)
        encode(nested_list(max_depth), config)
        with pytest.raises(ExcessiveDepthError) as exc_info:
            encode(nested_list(max_depth + 1), config)
        assert exc_info.value.max_depth == max_depth
        assert exc_info.value.depth == max_depth + 1

    @pytest.mark.parametrize("max_depth", [1, 2, 17])
    def test_decode_exact_limit(self, max_depth: int) -> None:
        """Decoding mirrors the encoder's depth counting."""
        config = Config(decode_max_depth=max_depth)
        assert decode(encode(nested_list(max_depth)), config) == nested_list(max_depth)
        data = encode(nested_list(max_depth + 1))
        with pytest.raises(ExcessiveDepthError):
            decode(data, config)

    def test_empty_containers_count(self) -> None:
        """Empty containers are a nesting level too."""
        with pytest.raises(ExcessiveDepthError):
            encode([[]], Config(encode_max_depth=1))
        with pytest.raises(ExcessiveDepthError):
            decode(bytes([Tag.ARRAY1, Tag.MAP0]), Config(decode_max_depth=1))

    def test_maps_count(self) -> None:
        """Map nesting counts the same as array nesting."""
        value = {"a": {"b": {"c": 1}}}
        encode(value, Config(encode_max_depth=3))
        with pytest.raises(ExcessiveDepthError):
            encode(value, Config(encode_max_depth=2))

    def test_depth_error_is_both(self) -> None:
        """ExcessiveDepthError is an EncodeError and a DecodeError."""
        assert issubclass(ExcessiveDepthError, EncodeError)
        assert issubclass(ExcessiveDepthError, DecodeError)

    def test_default_limit_beyond_recursion_limit(self) -> None:
        """The default limit of 1000 works without hitting Python's recursion limit."""
        data = encode(nested_list(1000))
        assert data.startswith(bytes([Tag.ARRAY1]) * 1000)
        assert nesting_depth(decode(data)) == 1000
        with pytest.raises(ExcessiveDepthError):
            encode(nested_list(1001))
        with pytest.raises(ExcessiveDepthError):
            decode(bytes([Tag.ARRAY1]) * 1001 + encode(0))

    def test_large_limit_deep_input(self) -> None:
        """Deep input within a raised limit still decodes."""
        config = Config(encode_max_depth=5000, decode_max_depth=5000)
        data = encode(nested_list(5000), config)
        assert nesting_depth(decode(data, config)) == 5000

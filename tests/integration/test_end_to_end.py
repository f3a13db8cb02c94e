"""End-to-end integration tests."""

from __future__ import annotations

import json
from typing import Any

from qpack import Config, QPack, Tag, decode, encode, safe
from qpack.codec.bytepack import Unpacker


class TestEndToEndWorkflow:
    """Test complete end-to-end workflows."""

    def test_json_document_workflow(self, sample_document: dict[str, Any],
                                    text_config: Config) -> None:
        """JSON -> QPack -> JSON gives back the same document."""
        # 1. Parse JSON as an application would
        document = json.loads(json.dumps(sample_document))

        # 2. Encode
        data = encode(document)
        assert len(data) < len(json.dumps(document).encode())

        # 3. Decode with text strings
        decoded = decode(data, text_config)
        assert decoded == document
        assert json.dumps(decoded) == json.dumps(document)

    def test_json_document_safe_workflow(self, sample_document: dict[str, Any],
                                         text_config: Config) -> None:
        """The safe API gives the same bytes and values as the raising one."""
        data, error = safe.encode(sample_document)
        assert error is None
        assert data == encode(sample_document)

        decoded, error = safe.decode(data, text_config)
        assert error is None
        assert decoded == sample_document

    def test_token_stream_shape(self, sample_document: dict[str, Any]) -> None:
        """The document is a MAP3 of ARRAY2 series of ARRAY2 points."""
        tags = [token.tag for token in Unpacker(encode(sample_document))]
        assert tags[0] is Tag.MAP3
        assert tags.count(Tag.ARRAY2) == 9
        assert Tag.MAP_CLOSE not in tags
        assert tags.count(Tag.RAW) == 5
        assert tags.count(Tag.INT64) == 6
        assert tags.count(Tag.DOUBLE) == 4

    def test_configured_codec_workflow(self) -> None:
        """A codec instance carries its options across calls."""
        codec = QPack()
        codec.set_encode_empty_as_array(True)
        codec.set_decode_raw_as_str(True)
        codec.set_encode_sparse_array(ratio=2)

        record = {"readings": {1: 10.5, 2: 11.0, 4: 9.75}, "alarms": {}, "unit": "m"}
        decoded = codec.decode(codec.encode(record))

        assert decoded == {"readings": [10.5, 11.0, None, 9.75], "alarms": [], "unit": "m"}

    def test_large_collections(self) -> None:
        """Large arrays and maps use bracketed containers throughout."""
        value = {f"series{i}": list(range(i * 10)) for i in range(20)}
        data = encode(value)
        assert data[0] == Tag.MAP_OPEN
        assert decode(data, Config(decode_raw_as_str=True)) == value

    def test_nested_mixed(self) -> None:
        """Deeply mixed structures survive a round trip."""
        value: Any = {"leaf": b"\x00\x01"}
        for level in range(50):
            value = [level, {"child": value, "n": -level * 1.5}]
        assert decode(encode(value)) == json_safe_bytes(value)


def json_safe_bytes(value: Any) -> Any:
    """Expected decoded form: str keys become bytes."""
    if isinstance(value, list):
        return [json_safe_bytes(item) for item in value]
    if isinstance(value, dict):
        return {
            (key.encode() if isinstance(key, str) else key): json_safe_bytes(item)
            for key, item in value.items()
        }
    return value

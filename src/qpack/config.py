"""Codec configuration.

This module provides the immutable Config model that every encode and decode
call receives. A Config is a frozen Pydantic model: it is never mutated while
a call is in flight, so one instance can be shared freely between threads.
Use ``with_options()`` to derive a modified copy.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigError

# Upper bound for every integer option (C INT_MAX)
MAX_OPTION_VALUE = 2**31 - 1

DEFAULT_ENCODE_MAX_DEPTH = 1000
DEFAULT_DECODE_MAX_DEPTH = 1000
DEFAULT_ENCODE_EMPTY_TABLE_AS_ARRAY = False
DEFAULT_SPARSE_CONVERT = True
DEFAULT_SPARSE_RATIO = 0
DEFAULT_SPARSE_SAFE = 10


class Config(BaseModel):
    """Policy knobs for encoding and decoding.

    Attributes:
        encode_max_depth: Maximum aggregate nesting when encoding (default 1000).
        decode_max_depth: Maximum aggregate nesting when decoding (default 1000).
        encode_empty_table_as_array: Encode an empty mapping as an empty array
            instead of an empty map (default False). Lists are always arrays.
        encode_sparse_convert: Encode an excessively sparse integer-keyed mapping
            as a map (True) or reject it (False). Default True.
        encode_sparse_ratio: Sparse array ratio. 0 disables sparse arrays, so only
            mappings with keys exactly 1..N are encoded as arrays (default 0).
        encode_sparse_safe: Integer-keyed mappings whose largest key is at most this
            value are never considered excessively sparse (default 10).
        decode_raw_as_str: Decode raw values as UTF-8 ``str`` instead of ``bytes``
            (default False).

    Examples:
        ```python
        from qpack import Config, decode, encode

        config = Config(encode_max_depth=32, encode_empty_table_as_array=True)
        data = encode({}, config)
        assert decode(data, config) == []
        ```
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        strict=True,
    )

    encode_max_depth: int = Field(default=DEFAULT_ENCODE_MAX_DEPTH, ge=1, le=MAX_OPTION_VALUE)
    decode_max_depth: int = Field(default=DEFAULT_DECODE_MAX_DEPTH, ge=1, le=MAX_OPTION_VALUE)
    encode_empty_table_as_array: bool = DEFAULT_ENCODE_EMPTY_TABLE_AS_ARRAY

    encode_sparse_convert: bool = DEFAULT_SPARSE_CONVERT
    encode_sparse_ratio: int = Field(default=DEFAULT_SPARSE_RATIO, ge=0, le=MAX_OPTION_VALUE)
    encode_sparse_safe: int = Field(default=DEFAULT_SPARSE_SAFE, ge=0, le=MAX_OPTION_VALUE)

    decode_raw_as_str: bool = False

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as err:
            raise ConfigError(_describe(err)) from err

    def with_options(self, **changes: Any) -> Config:
        """Return a validated copy of this config with some options replaced.

        Args:
            **changes: Option names and their new values

        Returns:
            New Config instance; ``self`` is left untouched

        Raises:
            ConfigError: If an option is unknown or a value is out of range
        """
        return Config(**{**self.model_dump(), **changes})


def _describe(err: ValidationError) -> str:
    """Flatten a Pydantic validation error into a one-line message."""
    parts = []
    for detail in err.errors():
        location = ".".join(str(item) for item in detail["loc"]) or "config"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)

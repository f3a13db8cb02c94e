"""Host value classification.

This module maps Python values onto the wire data model:

====================================  =========
Python                                ValueKind
====================================  =========
None                                  NULL
bool                                  BOOL
int (signed 64-bit range)             INT64
float                                 DOUBLE
str, bytes, bytearray, memoryview     BYTES
list, tuple, other Sequence           ARRAY
Mapping                               ARRAY or MAP (see ``array_length``)
====================================  =========

The classification functions are pure: they never modify the value they
inspect.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping, Sequence
from typing import Any

from ..config import Config
from ..exceptions import ExcessivelySparseError, UnsupportedTypeError
from .tags import INT64_MAX, INT64_MIN


class ValueKind(enum.Enum):
    """Wire data model variants."""

    NULL = "null"
    BOOL = "bool"
    INT64 = "int64"
    DOUBLE = "double"
    BYTES = "bytes"
    ARRAY = "array"
    MAP = "map"

    @property
    def is_aggregate(self) -> bool:
        return self in (ValueKind.ARRAY, ValueKind.MAP)


SCALAR_KEY_KINDS = frozenset({ValueKind.INT64, ValueKind.DOUBLE, ValueKind.BYTES})


def classify_scalar(value: Any) -> ValueKind | None:
    """Classify a non-aggregate value.

    Returns:
        The scalar kind, or None if value is not a scalar

    Raises:
        UnsupportedTypeError: If value is an integer outside the int64 range
    """
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, int):
        if value < INT64_MIN or value > INT64_MAX:
            raise UnsupportedTypeError(f"Integer {value} is outside the signed 64-bit range")
        return ValueKind.INT64
    if isinstance(value, float):
        return ValueKind.DOUBLE
    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return ValueKind.BYTES
    return None


def classify(value: Any, config: Config) -> ValueKind:
    """Classify any host value.

    Args:
        value: Value to classify
        config: Controls how mappings are classified

    Returns:
        Kind the value is encoded as

    Raises:
        UnsupportedTypeError: If value has no wire representation
        ExcessivelySparseError: If value is an excessively sparse mapping and
            sparse conversion is disabled
    """
    kind = classify_scalar(value)
    if kind is not None:
        return kind
    # Text and byte strings are Sequences too, but classify_scalar took them
    if isinstance(value, Sequence):
        return ValueKind.ARRAY
    if isinstance(value, Mapping):
        return ValueKind.MAP if array_length(value, config) is None else ValueKind.ARRAY
    raise UnsupportedTypeError(f"Cannot serialise {type(value).__name__}: type not supported")


def _is_index(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool) and key >= 1


def dense_length(mapping: Mapping[Any, Any]) -> int | None:
    """Return N if the mapping's keys are exactly 1..N, else None.

    An empty mapping yields None; whether it becomes an array is a policy
    decision made by ``array_length``.
    """
    if not mapping:
        return None
    highest = 0
    for key in mapping:
        if not _is_index(key):
            return None
        if key > highest:
            highest = key
    return highest if highest == len(mapping) else None


def array_length(mapping: Mapping[Any, Any], config: Config) -> int | None:
    """Decide whether a mapping is encoded as an array.

    Without sparse arrays (``encode_sparse_ratio == 0``) this is the dense
    array test. With sparse arrays enabled, integer-keyed mappings with gaps
    are arrays of length ``max(keys)`` unless excessively sparse.

    Returns:
        Array length (gaps are padded with null), or None to encode as a map

    Raises:
        ExcessivelySparseError: If the mapping is excessively sparse and
            ``encode_sparse_convert`` is off
    """
    if not mapping:
        return 0 if config.encode_empty_table_as_array else None

    length = dense_length(mapping)
    if length is not None or config.encode_sparse_ratio <= 0:
        return length

    if not all(_is_index(key) for key in mapping):
        return None

    highest = max(mapping)
    if highest > config.encode_sparse_safe and highest > len(mapping) * config.encode_sparse_ratio:
        if not config.encode_sparse_convert:
            raise ExcessivelySparseError(
                f"Cannot serialise mapping: excessively sparse array "
                f"({len(mapping)} items, largest index {highest})"
            )
        return None
    return highest

"""QPack encoder.

This module provides the encode() function that walks a Python value and
writes it to the QPack wire format.

The walk uses an explicit stack of open aggregates instead of recursion, so
the nesting limit is set by ``Config.encode_max_depth`` alone and never by the
interpreter's recursion limit.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Iterator

from ..config import Config
from ..exceptions import (
    ExcessiveDepthError,
    InvalidKeyError,
    UnsupportedTypeError,
)
from .bytepack import Packer
from .tags import MAX_INLINE_COUNT, Tag, fixed_array_tag, fixed_map_tag
from .value import SCALAR_KEY_KINDS, ValueKind, array_length, classify_scalar

logger = logging.getLogger(__name__)


def encode(value: Any, config: Config | None = None) -> bytes:
    """Encode a Python value to QPack bytes.

    Arrays and maps of up to five items always use the inline-count tags
    (``ARRAY0``..``ARRAY5``, ``MAP0``..``MAP5``); only larger ones are
    bracketed by open/close tags. A two-pair dict is therefore written as
    ``MAP2`` followed by its pairs, never as ``MAP_OPEN .. MAP_CLOSE``,
    although ``decode`` accepts both forms.

    Args:
        value: Value to encode (None, bool, int, float, str, bytes, list,
            tuple or any other Sequence, or any Mapping, nested freely)
        config: Encoding policy; defaults to ``Config()``

    Returns:
        Encoded bytes

    Raises:
        UnsupportedTypeError: If a value has no wire representation
        InvalidKeyError: If a map key is not a number or string
        ExcessiveDepthError: If nesting exceeds ``config.encode_max_depth``
        ExcessivelySparseError: If a sparse mapping is rejected by policy
        ResourceExhaustedError: If the output buffer cannot grow

    Examples:
        ```python
        from qpack import encode

        data = encode({"a": 1, "b": [True, None]})
        ```
    """
    if config is None:
        config = Config()

    with Packer() as packer:
        _Walker(packer, config).walk(value)
        encoded = packer.finish()

    logger.debug("Encoded %s into %d bytes", type(value).__name__, len(encoded))
    return encoded


class _Frame:
    """An aggregate being written.

    ``children`` yields (value, is_key) pairs; ``close`` is None for
    fixed-size containers.
    """

    __slots__ = ("children", "close")

    def __init__(self, children: Iterator[tuple[Any, bool]], close: Tag | None) -> None:
        self.children = children
        self.close = close


class _Walker:
    def __init__(self, packer: Packer, config: Config) -> None:
        self._packer = packer
        self._config = config
        self._stack: list[_Frame] = []

    def walk(self, value: Any) -> None:
        stack = self._stack
        self._append_value(value)
        while stack:
            frame = stack[-1]
            item = next(frame.children, None)
            if item is None:
                stack.pop()
                if frame.close is not None:
                    self._packer.append_tag(frame.close)
                continue
            child, is_key = item
            if is_key:
                self._append_key(child)
            else:
                self._append_value(child)

    def _append_key(self, key: Any) -> None:
        try:
            kind = classify_scalar(key)
        except UnsupportedTypeError as err:
            raise InvalidKeyError(f"Invalid map key: {err}") from err
        if kind not in SCALAR_KEY_KINDS:
            raise InvalidKeyError(
                f"Cannot serialise {type(key).__name__}: table key must be a number or string"
            )
        self._append_scalar(key, kind)

    def _append_value(self, value: Any) -> None:
        kind = classify_scalar(value)
        if kind is not None:
            self._append_scalar(value, kind)
            return

        if isinstance(value, Sequence):
            self._enter()
            self._open_array(len(value), ((item, False) for item in value))
            return

        if isinstance(value, Mapping):
            self._enter()
            length = array_length(value, self._config)
            if length is None:
                self._open_map(value)
            else:
                # Sparse arrays read missing indices as null
                items = ((value.get(index), False) for index in range(1, length + 1))
                self._open_array(length, items)
            return

        raise UnsupportedTypeError(f"Cannot serialise {type(value).__name__}: type not supported")

    def _append_scalar(self, value: Any, kind: ValueKind) -> None:
        packer = self._packer
        if kind is ValueKind.NULL:
            packer.append_tag(Tag.NULL)
        elif kind is ValueKind.BOOL:
            packer.append_tag(Tag.TRUE if value else Tag.FALSE)
        elif kind is ValueKind.INT64:
            packer.append_int64(value)
        elif kind is ValueKind.DOUBLE:
            packer.append_double(value)
        else:
            # UnicodeEncodeError (lone surrogates) is a ValueError too
            try:
                if isinstance(value, str):
                    raw = value.encode("utf-8")
                elif isinstance(value, memoryview):
                    raw = value.tobytes()
                else:
                    raw = value
                packer.append_bytes(raw)
            except ValueError as err:
                raise UnsupportedTypeError(
                    f"Cannot serialise {type(value).__name__}: {err}"
                ) from err

    def _enter(self) -> None:
        depth = len(self._stack) + 1
        if depth > self._config.encode_max_depth:
            raise ExcessiveDepthError(depth, self._config.encode_max_depth)

    def _open_array(self, count: int, children: Iterator[tuple[Any, bool]]) -> None:
        if count <= MAX_INLINE_COUNT:
            self._packer.append_tag(fixed_array_tag(count))
            close = None
        else:
            self._packer.append_tag(Tag.ARRAY_OPEN)
            close = Tag.ARRAY_CLOSE
        self._stack.append(_Frame(children, close))

    def _open_map(self, mapping: Mapping[Any, Any]) -> None:
        count = len(mapping)
        if count <= MAX_INLINE_COUNT:
            self._packer.append_tag(fixed_map_tag(count))
            close = None
        else:
            self._packer.append_tag(Tag.MAP_OPEN)
            close = Tag.MAP_CLOSE
        self._stack.append(_Frame(_pairs(mapping), close))


def _pairs(mapping: Mapping[Any, Any]) -> Iterator[tuple[Any, bool]]:
    for key, value in mapping.items():
        yield key, True
        yield value, False

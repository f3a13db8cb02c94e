"""QPack decoder.

This module provides the decode() function that rebuilds a Python value from
QPack bytes. Arrays decode to ``list``, maps to ``dict`` (in wire order) and
raw values to ``bytes``, or to ``str`` when ``Config.decode_raw_as_str`` is set.

Like the encoder, the builder keeps an explicit stack of open containers, so
deeply nested input is bounded by ``Config.decode_max_depth`` only.

A buffer must hold exactly one top-level value: trailing bytes are rejected.
"""

from __future__ import annotations

import logging
from typing import Any

from ..config import Config
from ..exceptions import (
    EmptyInputError,
    ExcessiveDepthError,
    MalformedStructureError,
)
from .bytepack import Token, Unpacker
from .tags import Tag

logger = logging.getLogger(__name__)

_SCALARS: dict[Tag, Any] = {Tag.NULL: None, Tag.TRUE: True, Tag.FALSE: False}

_KEY_TYPES = (int, float, bytes, str)


def decode(data: bytes | bytearray | memoryview, config: Config | None = None) -> Any:
    """Decode QPack bytes to a Python value.

    Args:
        data: Encoded buffer; it is read but never modified
        config: Decoding policy; defaults to ``Config()``

    Returns:
        Decoded value

    Raises:
        EmptyInputError: If the buffer holds no tokens
        TruncatedError: If a payload extends past the end of the buffer
        UnknownTagError: If a byte is not a defined tag
        MalformedStructureError: If the tokens do not form exactly one value
        ExcessiveDepthError: If nesting exceeds ``config.decode_max_depth``

    Examples:
        ```python
        from qpack import Config, decode, encode

        data = encode({"a": 1})
        decode(data)                                  # {b'a': 1}
        decode(data, Config(decode_raw_as_str=True))  # {'a': 1}
        ```
    """
    if config is None:
        config = Config()

    unpacker = Unpacker(data)
    token = unpacker.advance()
    if token.tag is Tag.END:
        raise EmptyInputError("Cannot decode empty input")

    value = _Builder(unpacker, config).build(token)

    if unpacker.remaining:
        raise MalformedStructureError(
            f"Unexpected trailing data at offset {unpacker.offset} "
            f"({unpacker.remaining} bytes after the top-level value)"
        )

    logger.debug("Decoded %d bytes into %s", len(unpacker), type(value).__name__)
    return value


class _Frame:
    """A container being filled.

    ``remaining`` counts outstanding children (or pairs) for fixed-size
    containers and is None for open containers, which end at ``close``.
    """

    __slots__ = ("container", "remaining", "close", "key", "has_key")

    def __init__(self, container: list[Any] | dict[Any, Any], remaining: int | None,
                 close: Tag | None) -> None:
        self.container = container
        self.remaining = remaining
        self.close = close
        self.key: Any = None
        self.has_key = False

    def closes_with(self, tag: Tag) -> bool:
        return self.close is not None and tag is self.close and not self.has_key

    def add(self, value: Any) -> None:
        container = self.container
        if isinstance(container, list):
            container.append(value)
        elif not self.has_key:
            if isinstance(value, bool) or not isinstance(value, _KEY_TYPES):
                raise MalformedStructureError(
                    f"Map key must be a number or string, got {type(value).__name__}"
                )
            self.key = value
            self.has_key = True
            return
        else:
            container[self.key] = value
            self.key = None
            self.has_key = False

        if self.remaining is not None:
            self.remaining -= 1

    @property
    def complete(self) -> bool:
        return self.remaining == 0


class _Builder:
    def __init__(self, unpacker: Unpacker, config: Config) -> None:
        self._unpacker = unpacker
        self._config = config
        self._stack: list[_Frame] = []

    def build(self, token: Token) -> Any:
        stack = self._stack
        while True:
            if stack and stack[-1].closes_with(token.tag):
                value = stack.pop().container
                finished = True
            else:
                value, finished = self._start(token)

            # Attach finished values to their parents, closing any fixed-size
            # containers that become full along the way.
            while finished:
                if not stack:
                    return value
                frame = stack[-1]
                frame.add(value)
                if frame.complete:
                    value = stack.pop().container
                else:
                    finished = False

            token = self._unpacker.advance()

    def _start(self, token: Token) -> tuple[Any, bool]:
        """Handle a token where a value is expected.

        Returns:
            (value, True) for a complete value, or (None, False) when a
            container was opened and still needs children
        """
        tag = token.tag

        if tag in _SCALARS:
            return _SCALARS[tag], True
        if tag is Tag.INT64 or tag is Tag.DOUBLE:
            return token.value, True
        if tag is Tag.RAW:
            return self._raw(token), True

        count = token.count
        if count is not None:
            self._enter()
            container: list[Any] | dict[Any, Any] = {} if tag.is_fixed_map else []
            if count == 0:
                return container, True
            self._stack.append(_Frame(container, count, None))
            return None, False

        if tag is Tag.ARRAY_OPEN:
            self._enter()
            self._stack.append(_Frame([], None, Tag.ARRAY_CLOSE))
            return None, False
        if tag is Tag.MAP_OPEN:
            self._enter()
            self._stack.append(_Frame({}, None, Tag.MAP_CLOSE))
            return None, False

        if tag is Tag.END:
            raise MalformedStructureError(
                f"Unexpected end of input at offset {token.offset}: "
                f"{len(self._stack)} container(s) not closed"
            )
        raise MalformedStructureError(
            f"Expected a value but found {tag.name} at offset {token.offset}"
        )

    def _raw(self, token: Token) -> bytes | str:
        if not self._config.decode_raw_as_str:
            return token.value
        try:
            return token.value.decode("utf-8")
        except UnicodeDecodeError as err:
            raise MalformedStructureError(
                f"Raw value at offset {token.offset} is not valid UTF-8: {err}"
            ) from err

    def _enter(self) -> None:
        depth = len(self._stack) + 1
        if depth > self._config.decode_max_depth:
            raise ExcessiveDepthError(depth, self._config.decode_max_depth)

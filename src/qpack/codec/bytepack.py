"""Byte-level packing and unpacking utilities.

This module provides the Packer, an append-only byte buffer that writes tags
and fixed-width payloads, and the Unpacker, a read-only cursor that turns a
byte buffer back into a flat stream of tokens. Neither knows anything about
host values; see the encoder and decoder for that.
"""

from __future__ import annotations

import struct
from typing import Any, Iterator, NamedTuple

from ..exceptions import ResourceExhaustedError, TruncatedError, UnknownTagError
from .tags import (
    DOUBLE_STRUCT,
    INT64_MAX,
    INT64_MIN,
    INT64_STRUCT,
    RAW_LENGTH_STRUCT,
    RAW_MAX_LENGTH,
    WIRE_TAGS,
    Tag,
)


class Packer:
    """Packs tags and payloads into a growable byte buffer.

    The buffer is released when the packer is used as a context manager and
    the block exits, whether or not it raised.

    Example:
        >>> with Packer() as packer:
        ...     packer.append_tag(Tag.ARRAY2)
        ...     packer.append_int64(42)
        ...     packer.append_bytes(b"hi")
        ...     data = packer.finish()
    """

    def __init__(self) -> None:
        """Initialize an empty packer."""
        self._buffer: bytearray | None = bytearray()

    def __enter__(self) -> Packer:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _writable(self) -> bytearray:
        if self._buffer is None:
            raise ValueError("Packer is closed")
        return self._buffer

    def _extend(self, data: bytes | bytearray | memoryview) -> None:
        buffer = self._writable()
        try:
            buffer += data
        except MemoryError as err:
            raise ResourceExhaustedError(
                f"Unable to grow output buffer beyond {len(buffer)} bytes"
            ) from err

    def append_tag(self, tag: Tag) -> None:
        """Write a single tag byte.

        Args:
            tag: Wire tag to write

        Raises:
            ValueError: If tag is a token-only tag (END or ERR)
        """
        if not tag.on_wire:
            raise ValueError(f"{tag.name} is not a wire tag")
        self._extend(bytes((tag,)))

    def append_bytes(self, data: bytes | bytearray | memoryview, tag: Tag = Tag.RAW) -> None:
        """Write a length-prefixed raw byte string.

        Args:
            data: Content to write
            tag: Tag preceding the length (only RAW is defined)

        Raises:
            ValueError: If data is longer than the length prefix can express
        """
        # The length prefix counts bytes, not items of a wider memoryview
        data = memoryview(data).cast("B")
        length = data.nbytes
        if length > RAW_MAX_LENGTH:
            raise ValueError(f"Raw value of {length} bytes exceeds maximum of {RAW_MAX_LENGTH}")
        self._extend(bytes((tag,)) + RAW_LENGTH_STRUCT.pack(length))
        self._extend(data)

    def append_int64(self, value: int) -> None:
        """Write an INT64 tag and its signed 64-bit payload.

        Raises:
            ValueError: If value does not fit in 64 bits
        """
        if value < INT64_MIN or value > INT64_MAX:
            raise ValueError(f"Value {value} does not fit in a signed 64-bit integer")
        self._extend(bytes((Tag.INT64,)) + INT64_STRUCT.pack(value))

    def append_double(self, value: float) -> None:
        """Write a DOUBLE tag and its IEEE-754 binary64 payload."""
        self._extend(bytes((Tag.DOUBLE,)) + DOUBLE_STRUCT.pack(value))

    def __len__(self) -> int:
        return len(self._writable())

    def finish(self) -> bytes:
        """Return the packed bytes.

        Returns:
            Immutable copy of everything written so far
        """
        return bytes(self._writable())

    def close(self) -> None:
        """Release the buffer. Further writes raise ValueError."""
        self._buffer = None


class Token(NamedTuple):
    """One unit read from the wire.

    ``value`` holds the payload for INT64, DOUBLE and RAW tokens and is None
    otherwise. ``offset`` is the position of the tag byte in the buffer.
    """

    tag: Tag
    value: Any = None
    offset: int = 0

    @property
    def count(self) -> int | None:
        """Child count for fixed-size container tokens."""
        return self.tag.inline_count


class Unpacker:
    """Reads tokens from a byte buffer.

    The buffer is borrowed and never modified. Each call to ``advance()``
    consumes one tag plus its payload; once the buffer is exhausted every
    further call returns an END token.

    Example:
        >>> unpacker = Unpacker(data)
        >>> for token in unpacker:
        ...     print(token.tag.name, token.value)
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        """Initialize an unpacker over the given data.

        Args:
            data: Byte buffer to unpack
        """
        self._data = memoryview(data).cast("B")
        self._position = 0

    @property
    def offset(self) -> int:
        """Current read position in bytes."""
        return self._position

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return max(len(self._data) - self._position, 0)

    def __len__(self) -> int:
        return len(self._data)

    def _take(self, size: int, what: str) -> memoryview:
        start = self._position
        end = start + size
        if end > len(self._data):
            raise TruncatedError(
                f"Truncated {what} at offset {start}: need {size} bytes, "
                f"have {len(self._data) - start}"
            )
        self._position = end
        return self._data[start:end]

    def _unpack(self, layout: struct.Struct, what: str) -> Any:
        return layout.unpack(self._take(layout.size, what))[0]

    def advance(self) -> Token:
        """Read the next token.

        Returns:
            Next token, or an END token when the buffer is exhausted

        Raises:
            UnknownTagError: If the next byte is not a defined tag
            TruncatedError: If the tag's payload extends past the buffer
        """
        offset = self._position
        if offset >= len(self._data):
            return Token(Tag.END, offset=offset)

        byte = self._data[offset]
        tag = WIRE_TAGS.get(byte)
        if tag is None:
            raise UnknownTagError(byte, offset)
        self._position += 1

        if tag is Tag.INT64:
            return Token(tag, self._unpack(INT64_STRUCT, "int64"), offset)
        if tag is Tag.DOUBLE:
            return Token(tag, self._unpack(DOUBLE_STRUCT, "double"), offset)
        if tag is Tag.RAW:
            length = self._unpack(RAW_LENGTH_STRUCT, "raw length")
            return Token(tag, bytes(self._take(length, "raw value")), offset)
        return Token(tag, offset=offset)

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens until the buffer is exhausted (END is not yielded)."""
        while True:
            token = self.advance()
            if token.tag is Tag.END:
                return
            yield token

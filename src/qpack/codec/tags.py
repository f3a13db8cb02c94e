"""Wire tags and payload layouts (wire contract version 1).

Every encoded unit starts with one tag byte. Tags occupy the top of the byte
range; all other byte values are undefined and rejected by the decoder.

==========  ==========  ======================================
Tag         Byte        Payload
==========  ==========  ======================================
RAW         0xE6        uint32 length, then ``length`` bytes
INT64       0xEB        signed 64-bit integer
DOUBLE      0xEC        IEEE-754 binary64
ARRAY0..5   0xED..0xF2  exactly N encoded children
MAP0..5     0xF3..0xF8  exactly N encoded key/value pairs
TRUE        0xF9        none
FALSE       0xFA        none
NULL        0xFB        none
ARRAY_OPEN  0xFC        children until ARRAY_CLOSE
MAP_OPEN    0xFD        key/value pairs until MAP_CLOSE
ARRAY_CLOSE 0xFE        none
MAP_CLOSE   0xFF        none
==========  ==========  ======================================

All multi-byte payloads are little-endian. END and ERR are token-only tags
produced by the unpacker; they are never written to the wire.
"""

from __future__ import annotations

import enum
import struct

WIRE_VERSION = 1

# Largest container emitted with an inline count
MAX_INLINE_COUNT = 5

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1
RAW_MAX_LENGTH = 2**32 - 1

INT64_STRUCT = struct.Struct("<q")
DOUBLE_STRUCT = struct.Struct("<d")
RAW_LENGTH_STRUCT = struct.Struct("<I")


class Tag(enum.IntEnum):
    """Tag byte values plus the token-only END/ERR markers."""

    END = -1
    ERR = -2

    RAW = 0xE6
    INT64 = 0xEB
    DOUBLE = 0xEC

    ARRAY0 = 0xED
    ARRAY1 = 0xEE
    ARRAY2 = 0xEF
    ARRAY3 = 0xF0
    ARRAY4 = 0xF1
    ARRAY5 = 0xF2

    MAP0 = 0xF3
    MAP1 = 0xF4
    MAP2 = 0xF5
    MAP3 = 0xF6
    MAP4 = 0xF7
    MAP5 = 0xF8

    TRUE = 0xF9
    FALSE = 0xFA
    NULL = 0xFB

    ARRAY_OPEN = 0xFC
    MAP_OPEN = 0xFD
    ARRAY_CLOSE = 0xFE
    MAP_CLOSE = 0xFF

    @property
    def is_fixed_array(self) -> bool:
        return Tag.ARRAY0 <= self <= Tag.ARRAY5

    @property
    def is_fixed_map(self) -> bool:
        return Tag.MAP0 <= self <= Tag.MAP5

    @property
    def inline_count(self) -> int | None:
        """Child count carried by a fixed-size container tag, else None."""
        if self.is_fixed_array:
            return self - Tag.ARRAY0
        if self.is_fixed_map:
            return self - Tag.MAP0
        return None

    @property
    def on_wire(self) -> bool:
        return self >= 0


WIRE_TAGS: dict[int, Tag] = {tag.value: tag for tag in Tag if tag.on_wire}


def fixed_array_tag(count: int) -> Tag:
    """Return the ARRAY{count} tag for a count in 0..MAX_INLINE_COUNT."""
    if not 0 <= count <= MAX_INLINE_COUNT:
        raise ValueError(f"No inline array tag for count {count}")
    return Tag(Tag.ARRAY0 + count)


def fixed_map_tag(count: int) -> Tag:
    """Return the MAP{count} tag for a count in 0..MAX_INLINE_COUNT."""
    if not 0 <= count <= MAX_INLINE_COUNT:
        raise ValueError(f"No inline map tag for count {count}")
    return Tag(Tag.MAP0 + count)

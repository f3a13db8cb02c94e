"""Token dump CLI command."""

from __future__ import annotations

from typing import TextIO

from ..codec.bytepack import Token, Unpacker
from ..codec.tags import Tag


def describe_token(token: Token) -> str:
    """Render one token as ``OFFSET TAG [payload]``."""
    line = f"{token.offset:08x}  {token.tag.name}"
    if token.tag is Tag.RAW:
        line += f"  len={len(token.value)} {token.value!r}"
    elif token.value is not None:
        line += f"  {token.value!r}"
    return line


def dump_tokens(data: bytes, out: TextIO) -> int:
    """Write the token stream of a QPack buffer, one token per line.

    Args:
        data: Encoded buffer
        out: Text stream to write to

    Returns:
        Number of tokens written

    Raises:
        TruncatedError: If a payload extends past the end of the buffer
        UnknownTagError: If a byte is not a defined tag
    """
    count = 0
    depth = 0
    for token in Unpacker(data):
        if token.tag in (Tag.ARRAY_CLOSE, Tag.MAP_CLOSE):
            depth = max(depth - 1, 0)
        print("  " * depth + describe_token(token), file=out)
        if token.tag in (Tag.ARRAY_OPEN, Tag.MAP_OPEN):
            depth += 1
        count += 1
    print(f"{count} token{'s' if count != 1 else ''}, {len(data)} bytes", file=out)
    return count

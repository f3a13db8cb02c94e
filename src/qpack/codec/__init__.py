"""QPack codec.

This module provides the wire tags, the byte packer/unpacker pair, value
classification, and the encode/decode functions built on top of them.
"""

from __future__ import annotations

from .bytepack import Packer, Token, Unpacker
from .decoder import decode
from .encoder import encode
from .tags import WIRE_VERSION, Tag
from .value import ValueKind, array_length, classify, dense_length

__all__ = [
    "encode",
    "decode",
    "Packer",
    "Unpacker",
    "Token",
    "Tag",
    "WIRE_VERSION",
    "ValueKind",
    "classify",
    "dense_length",
    "array_length",
]

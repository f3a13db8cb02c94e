"""qpack: compact binary serialization for Python values

A Python implementation of the QPack wire format: a tag-based encoding of
null, booleans, 64-bit integers, doubles, byte strings, arrays and maps,
with one-byte headers for containers of up to five items.

Key Features:
- Arrays and maps of 0-5 items carry their size in the tag byte
- Configurable nesting limits for both encoding and decoding
- Dense/sparse integer-keyed mappings encoded as arrays
- Non-raising ``qpack.safe`` variants returning ``(value, error)`` pairs

Quick Start:
    >>> from qpack import Config, decode, encode
    >>>
    >>> data = encode({"a": 1, "b": [True, None]})
    >>> decode(data, Config(decode_raw_as_str=True))
    {'a': 1, 'b': [True, None]}
"""

from __future__ import annotations

from .codec import WIRE_VERSION, Packer, Tag, Token, Unpacker, decode, encode
from .config import Config
from .exceptions import (
    ConfigError,
    DecodeError,
    EmptyInputError,
    EncodeError,
    ExcessiveDepthError,
    ExcessivelySparseError,
    InvalidKeyError,
    MalformedStructureError,
    QPackError,
    ResourceExhaustedError,
    TruncatedError,
    UnknownTagError,
    UnsupportedTypeError,
)
from .instance import QPack

__version__ = "1.0.0"

# Null sentinel: decodes from and encodes to the NULL tag
null = None

__all__ = [
    # Core API
    "encode",
    "decode",
    "Config",
    "QPack",
    "null",
    # Wire level
    "Packer",
    "Unpacker",
    "Token",
    "Tag",
    "WIRE_VERSION",
    # Exceptions
    "QPackError",
    "ConfigError",
    "EncodeError",
    "DecodeError",
    "UnsupportedTypeError",
    "InvalidKeyError",
    "ExcessivelySparseError",
    "ResourceExhaustedError",
    "ExcessiveDepthError",
    "EmptyInputError",
    "TruncatedError",
    "UnknownTagError",
    "MalformedStructureError",
    # Version
    "__version__",
]

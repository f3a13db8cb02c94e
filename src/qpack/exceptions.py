"""Exception hierarchy for qpack.

This module defines all custom exceptions used throughout the package.
All exceptions inherit from QPackError for easy catching of any qpack-specific error.
"""

from __future__ import annotations


class QPackError(Exception):
    """Base exception for all qpack errors."""

    pass


class ConfigError(QPackError, ValueError):
    """Raised when a configuration value is out of range or of the wrong type."""

    pass


class EncodeError(QPackError):
    """Raised when encoding a value fails.

    Examples:
        - Value has no wire representation (functions, sets, huge integers)
        - Map key is not a number or string
        - Integer-keyed mapping is excessively sparse
    """

    pass


class DecodeError(QPackError):
    """Raised when decoding binary data fails.

    Examples:
        - Empty input
        - Truncated payload
        - Unknown tag byte
        - Unbalanced containers or trailing bytes
    """

    pass


class UnsupportedTypeError(EncodeError):
    """Raised when a value reached by the encoder has no wire representation."""

    pass


class InvalidKeyError(EncodeError):
    """Raised when a map key is neither a number nor a string."""

    pass


class ExcessivelySparseError(EncodeError):
    """Raised when an integer-keyed mapping is too sparse to encode as an array.

    Only raised when sparse arrays are enabled and conversion to a map is off.
    """

    pass


class ResourceExhaustedError(EncodeError):
    """Raised when the output buffer cannot be grown."""

    pass


class ExcessiveDepthError(EncodeError, DecodeError):
    """Raised when nesting exceeds the configured maximum depth.

    Raised by both the encoder and the decoder, so it can be caught as
    either an EncodeError or a DecodeError.
    """

    def __init__(self, depth: int, max_depth: int) -> None:
        super().__init__(f"Excessive nesting: depth {depth} exceeds maximum of {max_depth}")
        self.depth = depth
        self.max_depth = max_depth


class EmptyInputError(DecodeError):
    """Raised when decode is called on a buffer that holds no tokens."""

    pass


class TruncatedError(DecodeError):
    """Raised when a payload extends past the end of the buffer."""

    pass


class UnknownTagError(DecodeError):
    """Raised when a byte does not match any defined tag."""

    def __init__(self, byte: int, offset: int) -> None:
        super().__init__(f"Unknown tag 0x{byte:02x} at offset {offset}")
        self.byte = byte
        self.offset = offset


class MalformedStructureError(DecodeError):
    """Raised when the token stream does not form exactly one well-nested value.

    Examples:
        - A close tag or end of input where a value is expected
        - An open container that is never closed
        - A map key that is not a number or string
        - Bytes left over after the top-level value
    """

    pass

"""Non-raising variants of encode and decode.

Every function here calls the regular API and converts a QPackError into a
``(None, message)`` pair; success returns ``(result, None)``. Running out of
memory is not converted: ResourceExhaustedError still raises.

Example:
    >>> from qpack import safe
    >>> value, error = safe.decode(b"")
    >>> value is None
    True
    >>> error
    'Cannot decode empty input'
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple, TypeVar

from . import codec
from .config import Config
from .exceptions import QPackError, ResourceExhaustedError
from .instance import QPack

T = TypeVar("T")

SafeResult = Tuple[Optional[T], Optional[str]]


def protect(func: Callable[..., T], *args: Any) -> SafeResult[T]:
    """Call func and turn a QPackError into a ``(None, message)`` pair."""
    try:
        return func(*args), None
    except ResourceExhaustedError:
        raise
    except QPackError as err:
        return None, str(err)


def encode(value: Any, config: Config | None = None) -> SafeResult[bytes]:
    """Encode a value; see :func:`qpack.encode`."""
    return protect(codec.encode, value, config)


def decode(data: bytes | bytearray | memoryview, config: Config | None = None) -> SafeResult[Any]:
    """Decode a buffer; see :func:`qpack.decode`."""
    return protect(codec.decode, data, config)


class SafeQPack(QPack):
    """QPack codec whose encode/decode return ``(result, error)`` pairs.

    The setters still raise ConfigError on invalid input.
    """

    def encode(self, value: Any) -> SafeResult[bytes]:  # type: ignore[override]
        return protect(super().encode, value)

    def decode(  # type: ignore[override]
        self, data: bytes | bytearray | memoryview
    ) -> SafeResult[Any]:
        return protect(super().decode, data)

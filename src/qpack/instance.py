"""Configured codec instances.

A QPack object pairs the encode/decode functions with a Config snapshot.
The setters never mutate the current snapshot; they validate the new value
and swap in a fresh Config, so a call already in flight keeps the options it
started with.
"""

from __future__ import annotations

import logging
from typing import Any

from .codec import decode, encode
from .config import Config

logger = logging.getLogger(__name__)


class QPack:
    """QPack codec with its own configuration.

    Example:
        >>> codec = QPack()
        >>> codec.set_encode_max_depth(16)
        16
        >>> codec.set_encode_empty_as_array(True)
        True
        >>> codec.decode(codec.encode({}))
        []
    """

    def __init__(self, config: Config | None = None) -> None:
        self._config = config if config is not None else Config()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._config!r})"

    @property
    def config(self) -> Config:
        """Current configuration snapshot."""
        return self._config

    def new(self) -> QPack:
        """Return a new codec of the same kind with default configuration."""
        return type(self)()

    def encode(self, value: Any) -> bytes:
        """Encode a value using this codec's configuration."""
        return encode(value, self._config)

    def decode(self, data: bytes | bytearray | memoryview) -> Any:
        """Decode a buffer using this codec's configuration."""
        return decode(data, self._config)

    def _update(self, **changes: Any) -> Config:
        changes = {name: value for name, value in changes.items() if value is not None}
        if changes:
            self._config = self._config.with_options(**changes)
            logger.debug("%s options changed: %s", type(self).__name__, changes)
        return self._config

    def set_encode_max_depth(self, depth: int | None = None) -> int:
        """Set the maximum nesting depth when encoding.

        Args:
            depth: New limit in 1..2**31-1, or None to leave it unchanged

        Returns:
            Effective limit

        Raises:
            ConfigError: If depth is out of range
        """
        return self._update(encode_max_depth=depth).encode_max_depth

    def set_decode_max_depth(self, depth: int | None = None) -> int:
        """Set the maximum nesting depth when decoding.

        Args:
            depth: New limit in 1..2**31-1, or None to leave it unchanged

        Returns:
            Effective limit

        Raises:
            ConfigError: If depth is out of range
        """
        return self._update(decode_max_depth=depth).decode_max_depth

    def set_encode_empty_as_array(self, enabled: bool | None = None) -> bool:
        """Choose whether empty mappings encode as arrays (True) or maps (False)."""
        return self._update(encode_empty_table_as_array=enabled).encode_empty_table_as_array

    def set_encode_sparse_array(
        self,
        convert: bool | None = None,
        ratio: int | None = None,
        safe: int | None = None,
    ) -> tuple[bool, int, int]:
        """Configure how integer-keyed mappings with gaps are encoded.

        Args:
            convert: Encode excessively sparse mappings as maps (True) or reject them
            ratio: Sparse ratio; 0 disables sparse arrays
            safe: Largest index that is never considered excessively sparse

        Returns:
            Effective (convert, ratio, safe)
        """
        config = self._update(
            encode_sparse_convert=convert,
            encode_sparse_ratio=ratio,
            encode_sparse_safe=safe,
        )
        return config.encode_sparse_convert, config.encode_sparse_ratio, config.encode_sparse_safe

    def set_decode_raw_as_str(self, enabled: bool | None = None) -> bool:
        """Choose whether raw values decode to ``str`` (True) or ``bytes`` (False)."""
        return self._update(decode_raw_as_str=enabled).decode_raw_as_str

"""ubjread - decode UBJSON buffers into plain Python values.

Quick start:
    >>> from ubjread import decode
    >>> decode(b"[U\\x01U\\x02]")
    [1, 2]
    >>> decode(b"{#i\\x01U\\x01ai\\x05")
    {'a': 5}

Value mapping:
    Z, N          -> None
    T, F          -> bool
    i U I l L     -> int
    d D           -> float
    C S H         -> str
    { }           -> dict (str keys)
    [ ]           -> list

Typed conversion into dataclasses goes through ``decode_as``.
"""

from __future__ import annotations

from typing import Any, Type, TypeVar, Union

from ._core import decode_buffer
from ._errors import (
    ERR_BOUNDS,
    ERR_COUNT,
    ERR_DUP_KEY,
    ERR_LIMIT_DEPTH,
    ERR_LIMIT_SIZE,
    ERR_MALFORMED,
    ERR_SHAPE,
    ERR_UNTERMINATED,
    ERR_UTF8,
    UbjError,
    is_decode_error,
)
from ._markers import MAX_DEPTH
from ._typed import structure

__version__ = "0.3.0"

__all__ = [
    # Public API
    "decode",
    "decode_as",
    "Reader",
    # Exception
    "UbjError",
    "is_decode_error",
    # Error codes
    "ERR_BOUNDS",
    "ERR_UNTERMINATED",
    "ERR_COUNT",
    "ERR_UTF8",
    "ERR_DUP_KEY",
    "ERR_MALFORMED",
    "ERR_LIMIT_DEPTH",
    "ERR_LIMIT_SIZE",
    "ERR_SHAPE",
]

T = TypeVar("T")

BytesLike = Union[bytes, bytearray, memoryview]


def _as_bytes(data: BytesLike) -> bytes:
    # Snapshot mutable buffers so nothing can change under the cursor.
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError("expected a bytes-like object, got {}".format(type(data).__name__))


# ── Core API ──────────────────────────────────────────────────

def decode(data: BytesLike, *, max_depth: int = MAX_DEPTH) -> Any:
    """Decode the root value of a UBJSON buffer.

    Raises UbjError on truncated or malformed input.  Unknown markers
    decode to None rather than failing.
    """
    return decode_buffer(_as_bytes(data), max_depth)


def decode_as(data: BytesLike, cls: Type[T], *, max_depth: int = MAX_DEPTH) -> T:
    """Decode a buffer whose root is an object and convert it to `cls`.

    The object is passed through a JSON text round-trip and then mapped
    onto `cls` (usually a dataclass) with case-insensitive field names.
    A non-object root raises UbjError with code ERR_SHAPE.
    """
    root = decode(data, max_depth=max_depth)
    if not isinstance(root, dict):
        raise UbjError(ERR_SHAPE,
                       "root must be an object, got {}".format(type(root).__name__))
    return structure(root, cls)


class Reader:
    """Decoder bound to one buffer.

    Holds only the immutable buffer; each read threads its own cursor, so
    a Reader can be read repeatedly (or from several threads) with the
    same result every time.
    """

    def __init__(self, data: BytesLike, *, max_depth: int = MAX_DEPTH) -> None:
        self._data = _as_bytes(data)
        self._max_depth = max_depth

    def read(self) -> Any:
        return decode_buffer(self._data, self._max_depth)

    def read_as(self, cls: Type[T]) -> T:
        return decode_as(self._data, cls, max_depth=self._max_depth)


"""UBJSON decoding core - cursor primitives, dispatch, containers, strings.

The decoder is a single recursive-descent pass over an immutable buffer.
There is no reader object holding a mutable offset: every step takes
``(buf, off)`` and returns ``(value, new_off)``, so the cursor only exists
inside one call stack and can't drift between calls.

Wire shapes handled here:

    Z N T F            no payload
    i U I l L          big-endian integers, 1/1/2/4/8 bytes
    d D                big-endian IEEE-754 float32 / float64
    C                  one ASCII byte
    S H                <length marker><UTF-8 bytes>
    { ... }            key (untagged string) / value pairs
    [ ... ]            values
    #  $               count and element-type parameters for containers

A container with a ``#`` count ends after that many entries and carries no
closing marker; without a count it ends only at its closer.
"""

from __future__ import annotations

import struct
from typing import Any, Callable, Dict, List, Optional, Tuple

from ._errors import (
    ERR_BOUNDS,
    ERR_COUNT,
    ERR_DUP_KEY,
    ERR_LIMIT_DEPTH,
    ERR_LIMIT_SIZE,
    ERR_MALFORMED,
    ERR_UNTERMINATED,
    ERR_UTF8,
    UbjError,
)
from ._markers import (
    ARRAY_END,
    ARRAY_START,
    CONTAINER_COUNT,
    CONTAINER_TYPE,
    FIXED_WIDTH,
    MAX_DEPTH,
    MAX_ENTRIES,
    OBJECT_END,
    OBJECT_START,
    TAG_CHAR,
    TAG_FALSE,
    TAG_HIGH_PREC,
    TAG_INT16,
    TAG_INT32,
    TAG_INT64,
    TAG_NOOP,
    TAG_NULL,
    TAG_STRING,
    TAG_TRUE,
)

# (buf, off, tag, depth_left) -> (value, off).  `off` points just past the tag.
DecodeStep = Callable[[bytes, int, str, int], Tuple[Any, int]]


# ── Cursor primitives ────────────────────────────────────────

def peek_tag(buf: bytes, off: int) -> str:
    """Return the marker at `off` without moving the cursor."""
    if off >= len(buf):
        raise UbjError(ERR_BOUNDS, "truncated: expected marker at offset {}".format(off))
    return chr(buf[off])


def consume_tag(buf: bytes, off: int) -> Tuple[str, int]:
    """Return the marker at `off` and the offset just past it."""
    return peek_tag(buf, off), off + 1


def _need(buf: bytes, off: int, n: int, what: str) -> None:
    if off + n > len(buf):
        raise UbjError(ERR_BOUNDS,
                       "truncated {}: need {} bytes at offset {}".format(what, n, off))


# ── Primitive readers ────────────────────────────────────────

def read_fixed(buf: bytes, off: int, tag: str) -> Tuple[Any, int]:
    """Unpack a fixed-width big-endian number whose payload starts at `off`."""
    fmt, width = FIXED_WIDTH[tag]
    _need(buf, off, width, "'{}' payload".format(tag))
    return struct.unpack_from(fmt, buf, off)[0], off + width


def _read_length(buf: bytes, off: int) -> Tuple[int, int]:
    """Decode a string length marker.

    Three encodings are accepted:
      - a single ASCII digit is the length itself (short-string shorthand)
      - I / l / L are followed by a big-endian length of that width
      - any other marker (normally i or U) is followed by one unsigned byte
    """
    marker = peek_tag(buf, off)
    if "0" <= marker <= "9":
        return ord(marker) - ord("0"), off + 1
    if marker in (TAG_INT16, TAG_INT32, TAG_INT64):
        n, end = read_fixed(buf, off + 1, marker)
        if n < 0:
            raise UbjError(ERR_COUNT, "negative string length {}".format(n))
        return n, end
    _need(buf, off + 1, 1, "string length")
    return buf[off + 1], off + 2


def read_string(buf: bytes, off: int) -> Tuple[str, int]:
    """Read ``<length marker><UTF-8 bytes>`` starting at `off`."""
    n, off = _read_length(buf, off)
    _need(buf, off, n, "string payload")
    raw = buf[off:off + n]
    try:
        s = raw.decode("utf-8", errors="strict")
    except UnicodeDecodeError:
        raise UbjError(ERR_UTF8, "invalid utf-8 in string at offset {}".format(off))
    return s, off + n


def decode_key(buf: bytes, off: int) -> Tuple[str, int]:
    """Read an object key.

    Keys are written without the leading ``S`` that standalone strings
    carry, so the payload starts directly with the length marker.
    """
    return read_string(buf, off)


# ── Dispatch steps ───────────────────────────────────────────
# One function per value shape.  `_STEPS` maps marker -> step; anything
# missing from it goes to `_decode_unsupported`.

def _decode_null(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    return None, off


def _decode_noop(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    # No-op padding carries no value; it surfaces as None.
    return None, off


def _decode_bool(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    return tag == TAG_TRUE, off


def _decode_number(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    return read_fixed(buf, off, tag)


def _decode_char(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    _need(buf, off, 1, "char payload")
    return chr(buf[off]), off + 1


def _decode_string(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    # H (high-precision number) is kept as its decimal text.
    return read_string(buf, off)


def _decode_closer(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    # A stray '}' or ']' is handed back as itself.
    return tag, off


def _decode_unsupported(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    # Unknown markers decode to None and consume nothing past the marker.
    return None, off


def _decode_object(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    if depth_left <= 0:
        raise UbjError(ERR_LIMIT_DEPTH, "nesting exceeds max depth")

    obj: Dict[str, Any] = {}
    count: Optional[int] = None

    while off < len(buf):
        marker = chr(buf[off])

        if marker == CONTAINER_COUNT:
            count, off = _decode_count(buf, off + 1, depth_left)
            # Every entry needs at least a key length marker and a value tag.
            if count - len(obj) > len(buf) - off:
                raise UbjError(ERR_UNTERMINATED,
                               "object count {} exceeds remaining input".format(count))
            if len(obj) >= count:
                return obj, off
            continue

        if marker == OBJECT_END:
            return obj, off + 1

        key, off = decode_key(buf, off)
        if key in obj:
            raise UbjError(ERR_DUP_KEY, "duplicate key {!r}".format(key))
        obj[key], off = decode_value(buf, off, depth_left=depth_left - 1)

        if count is not None and len(obj) >= count:
            return obj, off

    raise UbjError(ERR_UNTERMINATED, "unterminated object")


def _decode_array(buf: bytes, off: int, tag: str, depth_left: int) -> Tuple[Any, int]:
    if depth_left <= 0:
        raise UbjError(ERR_LIMIT_DEPTH, "nesting exceeds max depth")

    items: List[Any] = []
    n = 0
    count: Optional[int] = None
    elem_tag: Optional[str] = None

    while True:
        if count is not None:
            if n >= count:
                return items, off
            if elem_tag is not None:
                # Typed and counted: no per-element markers and no closer,
                # so payload bytes are never mistaken for ']'.
                while n < count:
                    items[n], off = decode_value(buf, off, elem_tag,
                                                 depth_left=depth_left - 1)
                    n += 1
                return items, off

        if off >= len(buf):
            raise UbjError(ERR_UNTERMINATED, "unterminated array")
        marker = chr(buf[off])

        if marker == CONTAINER_TYPE:
            elem_tag, off = _decode_type_marker(buf, off)
            continue

        if marker == CONTAINER_COUNT:
            count, off = _decode_count(buf, off + 1, depth_left)
            # "# n $ t" is accepted as well as the usual "$ t # n".
            if off < len(buf) and chr(buf[off]) == CONTAINER_TYPE:
                elem_tag, off = _decode_type_marker(buf, off)
            _check_array_count(count - n, len(buf) - off, elem_tag)
            # A later count replaces an earlier one; drop its unused slots.
            del items[n:]
            items.extend([None] * (count - n))
            continue

        if marker == ARRAY_END:
            del items[n:]
            return items, off + 1

        if elem_tag is not None and not _consumes_payload(elem_tag):
            raise UbjError(ERR_MALFORMED,
                           "array of '{}' elements needs a count".format(elem_tag))

        value, off = decode_value(buf, off, elem_tag, depth_left=depth_left - 1)
        if n < len(items):
            items[n] = value
        else:
            items.append(value)
        n += 1


_STEPS: Dict[str, DecodeStep] = {
    OBJECT_START: _decode_object,
    ARRAY_START: _decode_array,
    OBJECT_END: _decode_closer,
    ARRAY_END: _decode_closer,
    TAG_NULL: _decode_null,
    TAG_NOOP: _decode_noop,
    TAG_TRUE: _decode_bool,
    TAG_FALSE: _decode_bool,
    TAG_CHAR: _decode_char,
    TAG_STRING: _decode_string,
    TAG_HIGH_PREC: _decode_string,
}
_STEPS.update({t: _decode_number for t in FIXED_WIDTH})

_PAYLOAD_STEPS = (_decode_object, _decode_array, _decode_number,
                  _decode_char, _decode_string)


def step_for(tag: str) -> DecodeStep:
    """Return the decode step for a marker; unknown markers map to None-decoding."""
    return _STEPS.get(tag, _decode_unsupported)


def _consumes_payload(tag: str) -> bool:
    """True if a value with this marker reads at least one byte after it."""
    return step_for(tag) in _PAYLOAD_STEPS


# ── Container parameters ─────────────────────────────────────

def _decode_type_marker(buf: bytes, off: int) -> Tuple[str, int]:
    """Read ``$ <marker>`` and return the element marker (not decoded as a value)."""
    return consume_tag(buf, off + 1)


def _decode_count(buf: bytes, off: int, depth_left: int) -> Tuple[int, int]:
    """Decode the value following '#' and coerce it to a non-negative int."""
    marker = peek_tag(buf, off)
    if marker in (OBJECT_START, ARRAY_START):
        raise UbjError(ERR_COUNT, "count must be numeric, got '{}'".format(marker))
    value, off = decode_value(buf, off, depth_left=depth_left - 1)

    if isinstance(value, bool) or value is None:
        raise UbjError(ERR_COUNT, "count must be numeric, got {!r}".format(value))
    if isinstance(value, float):
        if not value.is_integer():
            raise UbjError(ERR_COUNT, "count must be integral, got {!r}".format(value))
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value)
        except ValueError:
            raise UbjError(ERR_COUNT, "count must be numeric, got {!r}".format(value))
    elif not isinstance(value, int):
        raise UbjError(ERR_COUNT,
                       "count must be numeric, got {}".format(type(value).__name__))

    if value < 0:
        raise UbjError(ERR_COUNT, "negative count {}".format(value))
    return value, off


def _check_array_count(pending: int, remaining: int, elem_tag: Optional[str]) -> None:
    if elem_tag is not None and not _consumes_payload(elem_tag):
        # Zero-width elements: the count isn't backed by input bytes.
        if pending > MAX_ENTRIES:
            raise UbjError(ERR_LIMIT_SIZE,
                           "array count {} exceeds MAX_ENTRIES".format(pending))
        return
    # Otherwise every element consumes at least one byte.
    if pending > remaining:
        raise UbjError(ERR_UNTERMINATED,
                       "array count {} exceeds remaining input".format(pending))


# ── Dispatcher ───────────────────────────────────────────────

def decode_value(buf: bytes, off: int, tag: Optional[str] = None,
                 lookahead: bool = False,
                 depth_left: int = MAX_DEPTH) -> Tuple[Any, int]:
    """Decode exactly one value starting at `off`.

    If `tag` is given the caller already knows the marker (object keys,
    typed array elements) and `off` points at the payload; otherwise the
    marker is read from `off`.  With `lookahead` the value is decoded but
    the returned offset is the one passed in.
    """
    start = off
    if tag is None:
        tag, off = consume_tag(buf, off)
    value, off = step_for(tag)(buf, off, tag, depth_left)
    return value, (start if lookahead else off)


def decode_buffer(data: bytes, max_depth: int = MAX_DEPTH) -> Any:
    """Decode the root value of `data`.  Bytes after the root are ignored."""
    value, _end = decode_value(data, 0, depth_left=max_depth)
    return value

"""UBJSON type markers, fixed payload widths, and decode limits.

Every value on the wire starts with a one-byte ASCII marker.  Markers are
kept as one-character strings so dispatch reads like the grammar:
``chr(buf[off])`` is compared directly against these constants.
"""

from __future__ import annotations

from typing import Dict, Tuple

# ── Value markers ────────────────────────────────────────────
TAG_NULL: str = "Z"
TAG_NOOP: str = "N"
TAG_TRUE: str = "T"
TAG_FALSE: str = "F"
TAG_INT8: str = "i"
TAG_UINT8: str = "U"
TAG_INT16: str = "I"
TAG_INT32: str = "l"
TAG_INT64: str = "L"
TAG_FLOAT32: str = "d"
TAG_FLOAT64: str = "D"
TAG_CHAR: str = "C"
TAG_STRING: str = "S"
TAG_HIGH_PREC: str = "H"

# ── Container delimiters and parameters ──────────────────────
OBJECT_START: str = "{"
OBJECT_END: str = "}"
ARRAY_START: str = "["
ARRAY_END: str = "]"
CONTAINER_COUNT: str = "#"
CONTAINER_TYPE: str = "$"

# ── Fixed-width payloads ─────────────────────────────────────
# marker -> (struct format, payload width).  All big-endian.
FIXED_WIDTH: Dict[str, Tuple[str, int]] = {
    TAG_INT8: (">b", 1),
    TAG_UINT8: (">B", 1),
    TAG_INT16: (">h", 2),
    TAG_INT32: (">i", 4),
    TAG_INT64: (">q", 8),
    TAG_FLOAT32: (">f", 4),
    TAG_FLOAT64: (">d", 8),
}

# ── Limits ───────────────────────────────────────────────────
# Each nesting level costs two Python frames (value -> container -> value),
# so this stays well inside the default recursion limit.
MAX_DEPTH: int = 256

# Only reachable by typed arrays of zero-width elements, where a count is
# not backed by any input bytes.
MAX_ENTRIES: int = 1_048_576

"""Error codes and the exception raised by every failing decode.

A decode either returns a complete value tree or raises ``UbjError``; there
is no partial result.  Callers branch on ``.code`` rather than on the
message text.
"""

from __future__ import annotations

from typing import FrozenSet

# ── Malformed or truncated input ─────────────────────────────
ERR_BOUNDS: str = "ERR_BOUNDS"              # read past end of buffer
ERR_UNTERMINATED: str = "ERR_UNTERMINATED"  # container never closed
ERR_COUNT: str = "ERR_COUNT"                # '#' count not a non-negative int
ERR_UTF8: str = "ERR_UTF8"                  # string payload not UTF-8
ERR_DUP_KEY: str = "ERR_DUP_KEY"            # key repeated within one object
ERR_MALFORMED: str = "ERR_MALFORMED"        # container that can never terminate
ERR_LIMIT_DEPTH: str = "ERR_LIMIT_DEPTH"    # nesting exceeds max_depth
ERR_LIMIT_SIZE: str = "ERR_LIMIT_SIZE"      # unbacked count exceeds MAX_ENTRIES

# ── Typed conversion ─────────────────────────────────────────
ERR_SHAPE: str = "ERR_SHAPE"                # value tree doesn't fit target type

DECODE_ERRORS: FrozenSet[str] = frozenset([
    ERR_BOUNDS,
    ERR_UNTERMINATED,
    ERR_COUNT,
    ERR_UTF8,
    ERR_DUP_KEY,
    ERR_MALFORMED,
    ERR_LIMIT_DEPTH,
    ERR_LIMIT_SIZE,
])


class UbjError(Exception):
    """Raised when a buffer can't be decoded or converted.

    The `.code` attribute is one of the ERR_* strings above.
    """

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or code)
        self.code = code


def is_decode_error(code: str) -> bool:
    """True for malformed/truncated input, False for a shape mismatch."""
    return code in DECODE_ERRORS

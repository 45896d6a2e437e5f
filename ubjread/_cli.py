"""ubjread command-line interface.

Usage:
    ubjread decode < payload.ubj
    ubjread decode --input payload.ubj --indent 2
    echo 'W1UBVQJd' | ubjread decode --base64
    ubjread version
"""

from __future__ import annotations

import argparse
import base64
import binascii
import json
import sys
from typing import List, Optional

from . import UbjError, __version__, decode


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ubjread",
        description="Decode UBJSON buffers and print them as JSON",
    )
    sub = parser.add_subparsers(dest="command")

    # ── decode ──
    dec_p = sub.add_parser("decode", help="Decode a buffer and print JSON")
    dec_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read the buffer from FILE instead of stdin")
    dec_p.add_argument("--base64", action="store_true",
                       help="Input is base64 text rather than raw bytes")
    dec_p.add_argument("--indent", type=int, default=None, metavar="N",
                       help="Pretty-print with N spaces of indentation")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read the raw buffer from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("ubjread: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _cmd_decode(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    if args.base64:
        raw = base64.b64decode(raw, validate=False)
    value = decode(raw)
    try:
        text = json.dumps(value, indent=args.indent, ensure_ascii=False,
                          allow_nan=False)
    except ValueError:
        # NaN and infinities decode fine but have no JSON spelling.
        print("ubjread: value contains NaN or Infinity; not representable as JSON",
              file=sys.stderr)
        sys.exit(2)
    print(text)


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"ubjread {__version__}")
        return

    try:
        if args.command == "decode":
            _cmd_decode(args)
    except UbjError as e:
        print(f"ubjread: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except binascii.Error as e:
        print(f"ubjread: base64 error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()

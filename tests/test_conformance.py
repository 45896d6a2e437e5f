"""ubjread golden-vector suite.

Runs every vector in decode_vectors.json and compares the outcome with
decode_expected.json.

Usage:
    python tests/test_conformance.py [--vectors-dir DIR]
    python -m pytest tests/test_conformance.py -v
    UBJREAD_VECTORS_DIR=./conformance python tests/test_conformance.py
"""

from __future__ import annotations

import argparse
import base64
import json
import os
import sys
import unittest
from typing import Any, Dict, List, Optional, Tuple

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from ubjread import UbjError, decode

# ── Locate vector data ────────────────────────────────────────

_VECTORS_DIR: Optional[str] = os.environ.get("UBJREAD_VECTORS_DIR", None)


def _find_vectors_dir() -> str:
    if _VECTORS_DIR:
        return _VECTORS_DIR
    candidates = [
        os.path.join(os.path.dirname(__file__), "..", "conformance"),
        os.path.join(os.path.dirname(__file__), "conformance"),
    ]
    for d in candidates:
        if os.path.isfile(os.path.join(d, "decode_vectors.json")):
            return d
    raise FileNotFoundError(
        "Cannot find decode vectors. Set UBJREAD_VECTORS_DIR or --vectors-dir."
    )


def _load_data() -> Tuple[List[dict], Dict[str, dict]]:
    """Load vectors and expected outcomes."""
    d = _find_vectors_dir()
    with open(os.path.join(d, "decode_vectors.json"), "r", encoding="utf-8") as f:
        vectors = json.load(f)["vectors"]
    with open(os.path.join(d, "decode_expected.json"), "r", encoding="utf-8") as f:
        expected = json.load(f)["expected"]
    return vectors, expected


def _run_vector(vec: dict) -> Dict[str, Any]:
    """Decode one vector.  Returns {"value": ...} or {"err": ...}."""
    raw = base64.b64decode(vec["input_b64"])
    try:
        return {"value": decode(raw)}
    except UbjError as e:
        return {"err": e.code}


# ── unittest integration ──────────────────────────────────────

class ConformanceTests(unittest.TestCase):
    """Dynamically generated: one test method per vector."""
    pass


def _make_test(vec: dict, exp: dict):
    def test_fn(self: unittest.TestCase) -> None:
        got = _run_vector(vec)
        self.assertEqual(got, exp,
                         "{}: got {} expected {}".format(vec["test_id"], got, exp))
    return test_fn


# Attach test methods at import time.
try:
    _vectors, _expected = _load_data()
    for _vec in _vectors:
        _tid = _vec["test_id"]
        _fn = _make_test(_vec, _expected[_tid])
        _fn.__name__ = "test_{}".format(_tid)
        _fn.__qualname__ = "ConformanceTests.test_{}".format(_tid)
        setattr(ConformanceTests, "test_{}".format(_tid), _fn)
except FileNotFoundError:
    pass


class VectorFileTests(unittest.TestCase):
    def test_every_vector_has_an_expectation(self):
        vectors, expected = _load_data()
        ids = [v["test_id"] for v in vectors]
        self.assertEqual(len(ids), len(set(ids)))
        self.assertEqual(set(ids), set(expected))


# ── Standalone CLI runner ─────────────────────────────────────

def main() -> None:
    global _VECTORS_DIR

    parser = argparse.ArgumentParser(description="ubjread golden-vector runner")
    parser.add_argument("--vectors-dir", default=None,
                        help="Directory with decode vector files")
    args, _remaining = parser.parse_known_args()

    if args.vectors_dir:
        _VECTORS_DIR = args.vectors_dir

    vectors, expected = _load_data()

    passed = 0
    failed = 0
    failures: List[Tuple[str, dict, dict]] = []

    for vec in vectors:
        tid = vec["test_id"]
        got = _run_vector(vec)
        exp = expected[tid]
        if got == exp:
            passed += 1
        else:
            failed += 1
            failures.append((tid, got, exp))

    total = passed + failed
    print("VECTORS: {}/{} PASS".format(passed, total))
    for tid, got, exp in failures:
        print("  FAIL {}: got={} expected={}".format(tid, got, exp))

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()

"""Tests for the ubjread command-line interface."""

from __future__ import annotations

import base64
import contextlib
import io
import json
import os
import sys
import tempfile
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from ubjread import __version__
from ubjread._cli import main


class TestCli(unittest.TestCase):
    def _write(self, data: bytes) -> str:
        fd, path = tempfile.mkstemp(suffix=".ubj")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        self.addCleanup(os.remove, path)
        return path

    def _run(self, argv):
        out, err = io.StringIO(), io.StringIO()
        code = 0
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            try:
                main(argv)
            except SystemExit as e:
                code = e.code
        return code, out.getvalue(), err.getvalue()

    def test_decode_file(self):
        path = self._write(b"{U\x01a[U\x01U\x02]}")
        code, out, _ = self._run(["decode", "--input", path])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), {"a": [1, 2]})

    def test_decode_base64(self):
        path = self._write(base64.b64encode(b"[U\x01U\x02]") + b"\n")
        code, out, _ = self._run(["decode", "--base64", "-i", path])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), [1, 2])

    def test_decode_error_exit_code(self):
        path = self._write(b"[U\x01")
        code, out, err = self._run(["decode", "--input", path])
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("[ERR_UNTERMINATED]", err)

    def test_non_finite_float_rejected(self):
        path = self._write(b"[D\x7f\xf8\x00\x00\x00\x00\x00\x00]")
        code, out, err = self._run(["decode", "--input", path])
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("NaN or Infinity", err)

    def test_finite_float_printed(self):
        path = self._write(b"d\x3f\xc0\x00\x00")
        code, out, _ = self._run(["decode", "--input", path])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), 1.5)

    def test_version(self):
        code, out, _ = self._run(["version"])
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "ubjread {}".format(__version__))

    def test_no_command(self):
        code, _, _ = self._run([])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()

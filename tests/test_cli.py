from __future__ import annotations

import contextlib
import io
import os
import tempfile
import unittest

from termpage.cli import main


class CliTests(unittest.TestCase):
    def _run(self, argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out), self.assertRaises(SystemExit) as ctx:
            main(argv)
        return ctx.exception.code, out.getvalue()

    def test_usage(self) -> None:
        code, text = self._run(["--help"])
        self.assertEqual(code, 0)
        self.assertIn("usage: termpage FILE [PAGE [PAGE2]]", text)

    def test_too_many_arguments(self) -> None:
        code, text = self._run(["a.pdf", "1", "2", "3"])
        self.assertEqual(code, 2)
        self.assertIn("usage", text)

    def test_no_arguments(self) -> None:
        code, _ = self._run([])
        self.assertEqual(code, 2)

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            old = os.environ.get("TERMPAGE_CONFIG")
            os.environ["TERMPAGE_CONFIG"] = os.path.join(tmp, "termpage.json")
            try:
                code, text = self._run([os.path.join(tmp, "nope.pdf")])
            finally:
                if old is None:
                    del os.environ["TERMPAGE_CONFIG"]
                else:
                    os.environ["TERMPAGE_CONFIG"] = old
        self.assertEqual(code, 1)
        self.assertIn("File not found", text)


if __name__ == "__main__":
    unittest.main()

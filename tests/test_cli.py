from __future__ import annotations

import io
import json
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

TESTS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = TESTS_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mermaidgen import cli, decode_live_url, live_url


class CLITests(unittest.TestCase):
    def run_cli(self, argv: list[str], stdin_text: str = "") -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        stdin = io.StringIO(stdin_text)
        with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", stderr), mock.patch("sys.stdin", stdin):
            code = cli.main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_requires_subcommand(self) -> None:
        code, _out, err = self.run_cli([])
        self.assertEqual(code, 2)
        self.assertIn("usage", err)

    def test_url_from_text(self) -> None:
        code, out, _err = self.run_cli(["url", "--text", "graph TB\n"])
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["status"], "ok")
        self.assertEqual(data["url"], live_url("graph TB\n"))

    def test_url_from_stdin(self) -> None:
        code, out, _err = self.run_cli(["url"], stdin_text="gantt\n")
        self.assertEqual(code, 0)
        self.assertEqual(decode_live_url(json.loads(out)["url"])["code"], "gantt\n")

    def test_url_from_file(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "chart.mmd"
            path.write_text("graph LR\n", encoding="utf-8")
            code, out, _err = self.run_cli(["url", str(path)])
        self.assertEqual(code, 0)
        self.assertEqual(decode_live_url(json.loads(out)["url"])["code"], "graph LR\n")

    def test_missing_file(self) -> None:
        code, out, _err = self.run_cli(["url", "/nonexistent/chart.mmd"])
        self.assertEqual(code, 1)
        data = json.loads(out)
        self.assertEqual(data["status"], "error")
        self.assertIn("Cannot read", data["error"])

    def test_file_with_invalid_utf8(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "chart.mmd"
            path.write_bytes(b"graph TB\n\xff\n")
            code, out, _err = self.run_cli(["url", str(path)])
        self.assertEqual(code, 1)
        data = json.loads(out)
        self.assertEqual(data["status"], "error")
        self.assertIn("Cannot read", data["error"])

    def test_stdin_with_invalid_utf8(self) -> None:
        stdin = io.TextIOWrapper(io.BytesIO(b"graph TB\n\xff\n"), encoding="utf-8")
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout), mock.patch("sys.stderr", io.StringIO()), \
                mock.patch("sys.stdin", stdin):
            code = cli.main(["url"])
        self.assertEqual(code, 1)
        self.assertIn("Cannot read stdin", json.loads(stdout.getvalue())["error"])

    def test_text_and_file_conflict(self) -> None:
        code, out, _err = self.run_cli(["url", "chart.mmd", "--text", "graph TB\n"])
        self.assertEqual(code, 1)
        self.assertIn("--text", json.loads(out)["error"])

    def test_base_url_option(self) -> None:
        base = "https://viewer.example/view/#pako:"
        code, out, _err = self.run_cli(["--base-url", base, "url", "--text", "graph TB\n"])
        self.assertEqual(code, 0)
        self.assertTrue(json.loads(out)["url"].startswith(base))

    def test_decode(self) -> None:
        url = live_url("graph TB\nA-->B\n")
        code, out, _err = self.run_cli(["decode", url])
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["code"], "graph TB\nA-->B\n")
        self.assertEqual(data["mermaid"], {"theme": "default"})

    def test_decode_error(self) -> None:
        code, out, _err = self.run_cli(["decode", "https://mermaid.live/edit"])
        self.assertEqual(code, 1)
        self.assertEqual(json.loads(out)["status"], "error")

    def test_open(self) -> None:
        with mock.patch("mermaidgen.cli.view_in_browser") as viewer:
            code, out, _err = self.run_cli(["open", "--text", "graph TB\n"])
        self.assertEqual(code, 0)
        data = json.loads(out)
        self.assertEqual(data["status"], "opened")
        viewer.assert_called_once_with(data["url"])

    def test_open_unsupported_platform(self) -> None:
        with mock.patch("mermaidgen.browser.sys.platform", "plan9"), \
                mock.patch("mermaidgen.browser.subprocess.Popen") as popen:
            code, out, _err = self.run_cli(["open", "--text", "graph TB\n"])
        self.assertEqual(code, 1)
        self.assertIn("unsupported platform", json.loads(out)["error"])
        popen.assert_not_called()


if __name__ == "__main__":
    unittest.main()

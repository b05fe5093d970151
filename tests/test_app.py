from __future__ import annotations

import contextlib
import io
import json
import logging
import shutil
import unittest
import uuid
from pathlib import Path
from unittest.mock import patch

from src.app import main


class AppTests(unittest.TestCase):
    def _run(self, argv: list[str]) -> tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with patch("src.app.configure_logging", return_value=Path("tms.log")):
            with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
                code = main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_prints_rewritten_text_and_counts(self) -> None:
        tmp = Path(".test_tmp") / f"app_{uuid.uuid4().hex}"
        tmp.mkdir(parents=True, exist_ok=True)
        try:
            (tmp / "source.txt").write_text("ID:7 and ID:42\nLog noise\n", encoding="utf-8")
            (tmp / "rules.txt").write_text(
                "/// rewrite ids\nID:[num]///#[num]\n[line]Log///[del]\nand\n",
                encoding="utf-8",
            )

            code, out, err = self._run(
                [
                    str(tmp / "source.txt"),
                    str(tmp / "rules.txt"),
                    "--config",
                    str(tmp / "config.json"),
                ]
            )

            self.assertEqual(code, 0)
            self.assertEqual(out, "#7 and #42\n")
            self.assertIn("matches=1 replacements=3", err)
        finally:
            shutil.rmtree(tmp, ignore_errors=True)

    def test_segments_format_and_save_dir(self) -> None:
        tmp = Path(".test_tmp") / f"app_{uuid.uuid4().hex}"
        tmp.mkdir(parents=True, exist_ok=True)
        try:
            (tmp / "source.txt").write_text("a b", encoding="utf-8")
            (tmp / "rules.txt").write_text("b///c", encoding="utf-8")

            code, out, _ = self._run(
                [
                    str(tmp / "source.txt"),
                    str(tmp / "rules.txt"),
                    "--config",
                    str(tmp / "config.json"),
                    "--format",
                    "segments",
                    "--save-dir",
                    str(tmp / "out"),
                ]
            )
            lines = [json.loads(line) for line in out.splitlines()]
            saved = list((tmp / "out").glob("TMS-source_*.txt"))

            self.assertEqual(code, 0)
            self.assertEqual(
                lines,
                [
                    {"kind": "original", "text": "a "},
                    {"kind": "replaced", "text": "c"},
                ],
            )
            self.assertEqual(len(saved), 1)
            self.assertEqual(saved[0].read_text(encoding="utf-8"), "a c")
        finally:
            shutil.rmtree(tmp, ignore_errors=True)

    def test_oversized_rules_file_fails(self) -> None:
        tmp = Path(".test_tmp") / f"app_{uuid.uuid4().hex}"
        tmp.mkdir(parents=True, exist_ok=True)
        try:
            (tmp / "config.json").write_text(
                json.dumps({"max_rules_bytes": 4}),
                encoding="utf-8",
            )
            (tmp / "source.txt").write_text("text", encoding="utf-8")
            (tmp / "rules.txt").write_text("text///TEXT", encoding="utf-8")

            code, out, err = self._run(
                [
                    str(tmp / "source.txt"),
                    str(tmp / "rules.txt"),
                    "--config",
                    str(tmp / "config.json"),
                ]
            )

            self.assertEqual(code, 1)
            self.assertEqual(out, "")
            self.assertIn("File too large", err)
        finally:
            shutil.rmtree(tmp, ignore_errors=True)


    def test_unknown_encoding_in_config_falls_back_to_utf8(self) -> None:
        tmp = Path(".test_tmp") / f"app_{uuid.uuid4().hex}"
        tmp.mkdir(parents=True, exist_ok=True)
        try:
            (tmp / "config.json").write_text(
                json.dumps({"encoding": "no-such-codec"}),
                encoding="utf-8",
            )
            (tmp / "source.txt").write_text("第三章", encoding="utf-8")
            (tmp / "rules.txt").write_text("第[cjk]章///[cjk]", encoding="utf-8")

            code, out, _ = self._run(
                [
                    str(tmp / "source.txt"),
                    str(tmp / "rules.txt"),
                    "--config",
                    str(tmp / "config.json"),
                ]
            )

            self.assertEqual(code, 0)
            self.assertEqual(out, "三")
        finally:
            shutil.rmtree(tmp, ignore_errors=True)

    def test_save_failure_reports_error(self) -> None:
        tmp = Path(".test_tmp") / f"app_{uuid.uuid4().hex}"
        tmp.mkdir(parents=True, exist_ok=True)
        try:
            (tmp / "source.txt").write_text("a b", encoding="utf-8")
            (tmp / "rules.txt").write_text("b///c", encoding="utf-8")
            (tmp / "not_a_dir").write_text("", encoding="utf-8")

            code, _, err = self._run(
                [
                    str(tmp / "source.txt"),
                    str(tmp / "rules.txt"),
                    "--config",
                    str(tmp / "config.json"),
                    "--save-dir",
                    str(tmp / "not_a_dir"),
                ]
            )

            self.assertEqual(code, 1)
            self.assertIn("error: could not save", err)
        finally:
            shutil.rmtree(tmp, ignore_errors=True)

    def test_verbose_enables_debug_logging(self) -> None:
        tmp = Path(".test_tmp") / f"app_{uuid.uuid4().hex}"
        tmp.mkdir(parents=True, exist_ok=True)
        try:
            (tmp / "source.txt").write_text("a", encoding="utf-8")
            (tmp / "rules.txt").write_text("a", encoding="utf-8")
            argv = [
                str(tmp / "source.txt"),
                str(tmp / "rules.txt"),
                "--config",
                str(tmp / "config.json"),
                "--verbose",
            ]

            with patch("src.app.configure_logging", return_value=Path("tms.log")) as configure:
                with contextlib.redirect_stdout(io.StringIO()), contextlib.redirect_stderr(io.StringIO()):
                    code = main(argv)

            self.assertEqual(code, 0)
            configure.assert_called_once_with(level=logging.DEBUG)
        finally:
            shutil.rmtree(tmp, ignore_errors=True)


if __name__ == "__main__":
    unittest.main()

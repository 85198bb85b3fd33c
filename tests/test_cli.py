from pathlib import Path
import tempfile
from contextlib import redirect_stderr, redirect_stdout
import io
import unittest
from unittest import mock

from tapebf.cli import main as cli_main

PROGRAMS = Path(__file__).resolve().parent / "programs"


def _binary_stdout() -> io.TextIOWrapper:
    return io.TextIOWrapper(io.BytesIO(), encoding="latin-1")


def _binary_stdin(data: bytes = b"") -> io.TextIOWrapper:
    return io.TextIOWrapper(io.BytesIO(data), encoding="latin-1")


class CLITests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write_source(self, content: str, name: str = "program.bf") -> Path:
        path = self.tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    def _run(self, argv, stdin: bytes = b""):
        stdout = _binary_stdout()
        stderr = io.StringIO()
        with mock.patch("sys.stdin", _binary_stdin(stdin)), redirect_stdout(stdout), redirect_stderr(stderr):
            exit_code = cli_main([str(arg) for arg in argv])
        return exit_code, stdout.buffer.getvalue(), stderr.getvalue()

    def test_cli_runs_program(self) -> None:
        exit_code, output, _ = self._run([PROGRAMS / "hello.bf"])
        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b"Hello World!\n")

    def test_cli_reads_stdin(self) -> None:
        source_path = self._write_source(",+.")
        exit_code, output, _ = self._run([source_path], stdin=b"s")
        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b"t")

    def test_cli_accepts_short_extension(self) -> None:
        source_path = self._write_source("+" * 65 + ".", name="program.b")
        exit_code, output, _ = self._run([source_path])
        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b"A")

    def test_cli_rejects_unknown_extension(self) -> None:
        source_path = self._write_source("+" * 65 + ".", name="program.txt")
        exit_code, output, errors = self._run([source_path])
        self.assertEqual(exit_code, 2)
        self.assertEqual(output, b"")
        self.assertIn("--force", errors)

    def test_cli_force_overrides_extension(self) -> None:
        source_path = self._write_source("+" * 65 + ".", name="program.txt")
        exit_code, output, _ = self._run([source_path, "--force"])
        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b"A")

    def test_cli_missing_file_errors(self) -> None:
        exit_code, _, errors = self._run(["does_not_exist.bf"])
        self.assertEqual(exit_code, 1)
        self.assertIn("Source file not found", errors)

    def test_cli_rejects_non_utf8_source(self) -> None:
        source_path = self.tmp_path / "binary.bf"
        source_path.write_bytes(b"+\xff.")
        exit_code, output, errors = self._run([source_path])
        self.assertEqual(exit_code, 1)
        self.assertEqual(output, b"")
        self.assertIn("Cannot read", errors)

    def test_cli_rejects_directory_source(self) -> None:
        source_dir = self.tmp_path / "folder.bf"
        source_dir.mkdir()
        exit_code, output, errors = self._run([source_dir])
        self.assertEqual(exit_code, 1)
        self.assertEqual(output, b"")
        self.assertIn("Cannot read", errors)

    def test_cli_reports_parse_error(self) -> None:
        source_path = self._write_source("[]]")
        exit_code, output, errors = self._run([source_path])
        self.assertEqual(exit_code, 1)
        self.assertEqual(output, b"")
        self.assertIn("Parse error: Unclosed loop at token 2", errors)

    def test_cli_reports_runtime_error(self) -> None:
        source_path = self._write_source(".,")
        exit_code, output, errors = self._run([source_path])
        self.assertEqual(exit_code, 1)
        self.assertEqual(output, b"\x00")
        self.assertIn("Runtime error", errors)

    def test_cli_tape_size_wraps_cursor(self) -> None:
        source_path = self._write_source("+>>.")
        exit_code, output, _ = self._run([source_path, "--tape-size", "2"])
        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b"\x01")

    def test_cli_rejects_zero_tape_size(self) -> None:
        source_path = self._write_source("+")
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli_main([str(source_path), "--tape-size", "0"])
        self.assertEqual(ctx.exception.code, 2)

    def test_cli_without_optimizer_or_compression(self) -> None:
        source_path = self._write_source("comment +" + "+" * 64 + ". done")
        exit_code, output, _ = self._run([source_path, "--no-optimize", "--no-compress"])
        self.assertEqual(exit_code, 0)
        self.assertEqual(output, b"A")


if __name__ == "__main__":
    unittest.main()

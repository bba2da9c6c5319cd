import io
import os
import pathlib
import sys
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

ROOT = pathlib.Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mindmeld.cli import PATH_PROMPT, main


class TestMindMeldCLI(unittest.TestCase):
    def run_cli(self, argv, stdin_data=""):
        stdout_buffer = io.StringIO()
        stderr_buffer = io.StringIO()
        with mock.patch("sys.stdin", io.StringIO(stdin_data)):
            with redirect_stdout(stdout_buffer), redirect_stderr(stderr_buffer):
                exit_code = main(argv)
        return exit_code, stdout_buffer.getvalue(), stderr_buffer.getvalue()

    def write_script(self, text):
        with tempfile.NamedTemporaryFile("w", suffix=".mm", delete=False, encoding="utf-8") as tmp:
            tmp.write(text)
        self.addCleanup(os.remove, tmp.name)
        return tmp.name

    def test_inline_program(self):
        exit_code, out, err = self.run_cli(["-e", "+A+A+A.A"])
        self.assertEqual(exit_code, 0)
        self.assertEqual(out, "\x03")
        self.assertEqual(err, "")

    def test_script_file_with_both_strategies(self):
        path = self.write_script("+A+A+A+A+A+A+A+A [A >A +A+A+A+A+A+A+A+A+A <A -A ]A >B .B +B .B")
        for extra in ([], ["--direct"]):
            exit_code, out, _ = self.run_cli([path, *extra])
            self.assertEqual(exit_code, 0)
            self.assertEqual(out, "HI")

    def test_carry_forward_flag(self):
        _, out, _ = self.run_cli(["-e", "++.", "--carry-forward"])
        self.assertEqual(out, "\x02")
        _, out, _ = self.run_cli(["-e", "++."])
        self.assertEqual(out, "")

    def test_show_source_prints_sanitized_program(self):
        _, out, _ = self.run_cli(["-e", "+ A comment . A", "--show-source"])
        self.assertEqual(out, "+A.A\n\x01")

    def test_input_is_read_from_stdin(self):
        _, out, _ = self.run_cli(["-e", ",A.A"], stdin_data="x")
        self.assertEqual(out, "xx")

    def test_trace_flag(self):
        _, out, _ = self.run_cli(["-e", "+A", "--trace"])
        self.assertIn("[PC=0] EXEC: +A", out)

    def test_missing_file_reports_source_error(self):
        exit_code, _, err = self.run_cli([os.path.join(tempfile.gettempdir(), "no-such-program.mm")])
        self.assertEqual(exit_code, 1)
        self.assertIn("mindmeld: cannot read", err)

    def test_unmatched_bracket_reports_malformed_program(self):
        exit_code, out, err = self.run_cli(["-e", "+A.A]A"])
        self.assertEqual(exit_code, 1)
        self.assertEqual(out, "")
        self.assertIn("malformed program: unmatched loop close", err)

    def test_bounds_error_reports_runtime_error(self):
        exit_code, _, err = self.run_cli(["-e", "<A"])
        self.assertEqual(exit_code, 1)
        self.assertIn("runtime error: cursor A moved to -1", err)
        self.assertIn("[PC=0]", err)

    def test_tape_size_must_be_positive(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main(["-e", "+A", "--tape-size", "0"])
        self.assertEqual(ctx.exception.code, 2)

    def test_tape_size_limits_cursor_movement(self):
        exit_code, _, err = self.run_cli(["-e", ">A>A", "--tape-size", "2"])
        self.assertEqual(exit_code, 1)
        self.assertIn("outside tape [0, 2)", err)

    def test_script_and_inline_are_exclusive(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                main(["prog.mm", "-e", "+A"])

    def test_missing_script_without_terminal(self):
        with mock.patch("sys.stdin", io.StringIO("")):
            with redirect_stderr(io.StringIO()):
                with self.assertRaises(SystemExit):
                    main([])

    def test_prompts_for_path_on_terminal(self):
        path = self.write_script("+A.A")
        fake_stdin = mock.MagicMock()
        fake_stdin.isatty.return_value = True
        stdout_buffer = io.StringIO()
        with mock.patch("sys.stdin", fake_stdin), mock.patch("builtins.input", return_value=path) as prompt:
            with redirect_stdout(stdout_buffer):
                exit_code = main([])
        self.assertEqual(exit_code, 0)
        prompt.assert_called_once_with(PATH_PROMPT)
        self.assertEqual(stdout_buffer.getvalue(), "\x01")

    def test_pause_flag_waits_for_a_key(self):
        with mock.patch("mindmeld.cli.pause") as pause_mock:
            exit_code, out, _ = self.run_cli(["-e", "+A.A", "--pause"])
        self.assertEqual(exit_code, 0)
        self.assertEqual(out, "\x01\n")
        pause_mock.assert_called_once()

    def test_cli_visualize_curses_mode(self):
        with mock.patch("mindmeld.visualizer_headless.TapeVisualizer") as mock_vis:
            mock_vis.return_value.run.return_value = None
            exit_code = main(["-e", "+A.A", "--visualize", "curses"])
        self.assertEqual(exit_code, 0)
        mock_vis.assert_called_once()
        mock_vis.return_value.run.assert_called_once()

    def test_visualize_prints_sanitized_source_first(self):
        with mock.patch("mindmeld.visualizer_headless.TapeVisualizer") as mock_vis:
            exit_code, out, _ = self.run_cli(["-e", "+ A . A", "--visualize", "curses", "--show-source"])
        self.assertEqual(exit_code, 0)
        self.assertEqual(out, "+A.A\n")
        mock_vis.return_value.run.assert_called_once()

    def test_visualize_rejects_trace_and_pause(self):
        for flag in ("--trace", "--pause"):
            with redirect_stderr(io.StringIO()) as err:
                with self.assertRaises(SystemExit) as ctx:
                    main(["-e", "+A", "--visualize", "curses", flag])
            self.assertEqual(ctx.exception.code, 2)
            self.assertIn("--visualize cannot be combined", err.getvalue())


if __name__ == "__main__":
    unittest.main()

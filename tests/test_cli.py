"""
Script: tests/test_cli.py
What: Tests for the shared `build_tools` command dispatcher.
Doing: Checks command-map entries, parser behavior, argument pass-through, and exit codes.
Why: CI jobs call helpers by command name and rely on the exit status.
Goal: Protect the main command entry surface.
"""

from __future__ import annotations

import contextlib
import io
import unittest
from unittest import mock

from build_tools.cli import build_parser, command_map, main, run_command
from build_tools.common import BuildToolError, CommandFailedError


class CliTests(unittest.TestCase):
    def test_command_map_contains_expected_entries(self) -> None:
        self.assertEqual(set(command_map()), {"docker-build", "imqs-build"})

    def test_parser_accepts_known_command(self) -> None:
        parser = build_parser({"demo-command": lambda _argv: None})
        args = parser.parse_args(["demo-command"])
        self.assertEqual(args.command, "demo-command")

    def test_run_command_passes_arguments(self) -> None:
        received = {}

        def _target(argv) -> None:
            received["argv"] = argv

        run_command("demo", {"demo": _target}, ["-t", "v1"])
        self.assertEqual(received["argv"], ["-t", "v1"])

    def test_main_exits_one_and_prints_command_output(self) -> None:
        def _failing(_argv) -> None:
            raise CommandFailedError("docker push imqs/router:v1", 1, "denied: requested access\n")

        stdout, stderr = io.StringIO(), io.StringIO()
        with mock.patch("build_tools.cli.command_map", return_value={"docker-build": _failing}):
            with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
                with self.assertRaises(SystemExit) as ctx:
                    main(["docker-build", "-t", "v1"])

        self.assertEqual(ctx.exception.code, 1)
        self.assertEqual(stdout.getvalue(), "denied: requested access\n")
        self.assertIn("docker push imqs/router:v1", stderr.getvalue())

    def test_main_exits_one_on_tool_error(self) -> None:
        def _failing(_argv) -> None:
            raise BuildToolError("Expected build artifact at bin/router")

        stderr = io.StringIO()
        with mock.patch("build_tools.cli.command_map", return_value={"imqs-build": _failing}):
            with contextlib.redirect_stderr(stderr):
                with self.assertRaises(SystemExit) as ctx:
                    main(["imqs-build", "prepare"])

        self.assertEqual(ctx.exception.code, 1)
        self.assertIn("bin/router", stderr.getvalue())

    def test_main_returns_normally_on_success(self) -> None:
        with mock.patch("build_tools.cli.command_map", return_value={"imqs-build": lambda _argv: None}):
            main(["imqs-build", "test_integration"])


if __name__ == "__main__":
    unittest.main()

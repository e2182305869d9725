"""
Script: build_tools/common.py
What: Shared helper functions used by all `build_tools` modules.
Doing: Wraps env reads, shell command execution, env overrides, and artifact copies.
Why: Avoids duplicated helper code between the publisher and the project driver.
Goal: Keep fail-fast behavior consistent across every build step.
"""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class BuildToolError(RuntimeError):
    """Raised when a build helper hits a known error condition."""


class CommandFailedError(BuildToolError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str) -> None:
        super().__init__(f"Command failed with exit status {returncode}: {command}")
        self.command = command
        self.returncode = returncode
        self.output = output


def optional_env(name: str, default: str = "") -> str:
    """Return an environment variable with a fallback default."""
    return os.environ.get(name, default)


def run_cmd(command: str, *, cwd: str | Path | None = None) -> str:
    """
    Run one shell command and return its combined stdout/stderr text.

    When `cwd` is given the process working directory is switched to it for
    the duration of the call and always switched back afterwards, even when
    the command fails. A non-zero exit status raises `CommandFailedError`
    with the captured output attached so the caller can show it.
    """
    original_dir = os.getcwd()
    if cwd is not None:
        try:
            os.chdir(cwd)
        except OSError as exc:
            raise BuildToolError(f"Cannot run `{command}` in {cwd}: {exc}") from exc
    try:
        result = subprocess.run(
            command,
            shell=True,
            text=True,
            # Tool output is shown, never parsed, so undecodable bytes are replaced.
            encoding="utf-8",
            errors="replace",
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as exc:
        raise CommandFailedError(command, 127, str(exc)) from exc
    finally:
        os.chdir(original_dir)

    output = result.stdout or ""
    if result.returncode != 0:
        raise CommandFailedError(command, result.returncode, output)
    return output


@contextmanager
def override_env(name: str, value: str) -> Iterator[str | None]:
    """
    Temporarily set one environment variable.

    Yields the previous value (None when it was unset). On exit the previous
    value is put back, or the variable is removed again if it did not exist.
    `SystemExit` unwinds through here as well, so restoration also covers an
    aborted run.
    """
    previous = os.environ.get(name)
    os.environ[name] = value
    try:
        yield previous
    finally:
        if previous is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = previous


def host_binary_extension() -> str:
    """Executable suffix the Go toolchain uses on this host."""
    if sys.platform.startswith("win32"):
        return ".exe"
    return ""


def copy_artifact(source: Path, destination_dir: Path) -> Path:
    """Copy one built file into `destination_dir`, keeping its file name."""
    if not source.is_file():
        raise BuildToolError(f"Expected build artifact at {source}")
    destination_dir.mkdir(parents=True, exist_ok=True)
    try:
        copied = shutil.copy2(source, destination_dir / source.name)
    except OSError as exc:
        raise BuildToolError(f"Failed to copy {source} to {destination_dir}: {exc}") from exc
    return Path(copied)

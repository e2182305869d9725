from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Mapping, Sequence

from build_tools.common import BuildToolError, CommandFailedError


def command_map() -> dict[str, Callable[[Sequence[str]], None]]:
    """
    Map CLI command names to Python entry functions.

    Each value is a `main(argv)` function from one build helper module.
    """
    from build_tools.docker_build import main as docker_build_main
    from build_tools.imqs_build import main as imqs_build_main

    return {
        "docker-build": docker_build_main,
        "imqs-build": imqs_build_main,
    }


def build_parser(commands: Mapping[str, Callable[[Sequence[str]], None]]) -> argparse.ArgumentParser:
    """Build argument parser with one positional command choice."""
    parser = argparse.ArgumentParser(
        prog="python3 -m build_tools.cli",
        description="Run one build helper command. Arguments after the command are passed through.",
    )
    parser.add_argument("command", choices=sorted(commands.keys()))
    return parser


def run_command(
    command: str,
    commands: Mapping[str, Callable[[Sequence[str]], None]],
    argv: Sequence[str] = (),
) -> None:
    """
    Run one registered command with its own arguments.

    `commands` is passed in to keep this function easy to test.
    """
    commands[command](list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    # Build command registry once so parser and dispatcher use the same keys.
    commands = command_map()
    parser = build_parser(commands)
    # Only the command name is ours; the rest belongs to the helper's own parser.
    args = parser.parse_args(argv[:1])

    try:
        run_command(args.command, commands, argv[1:])
    except CommandFailedError as exc:
        # Show what the tool said first, it is usually the useful part.
        if exc.output:
            print(exc.output, end="" if exc.output.endswith("\n") else "\n")
        print(str(exc), file=sys.stderr)
        raise SystemExit(1) from exc
    except BuildToolError as exc:
        print(str(exc), file=sys.stderr)
        raise SystemExit(1) from exc


def docker_build(argv: Sequence[str] | None = None) -> None:
    main(["docker-build", *(sys.argv[1:] if argv is None else argv)])


def imqs_build(argv: Sequence[str] | None = None) -> None:
    main(["imqs-build", *(sys.argv[1:] if argv is None else argv)])


if __name__ == "__main__":
    main()

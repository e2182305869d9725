"""
Script: build_tools/docker_build.py
What: Builds the router image and publishes it to a Docker registry.
Doing: Compiles a static binary in a Go container, runs `docker build`, tags, optionally logs in, pushes, and logs out.
Why: Keeps the publish sequence in one place instead of repeating docker commands in CI jobs.
Goal: Produce `<registry or imqs>/router:<tag>` from the current checkout.
"""

from __future__ import annotations

import argparse
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from build_tools.common import optional_env, run_cmd


IMAGE_NAME = "router"
DEFAULT_NAMESPACE = "imqs"
GO_PACKAGE = "github.com/IMQS/router"
CONTAINER_SRC_DIR = "/usr/src/router"
DEFAULT_GO_IMAGE = "golang:1.8"


@dataclass(frozen=True)
class PublishOptions:
    tag: str | None = None
    registry: str | None = None
    user: str | None = None
    password: str | None = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docker-build",
        description="Build the router image and push it to a Docker registry.",
    )
    parser.add_argument(
        "-t",
        "--dockertag",
        dest="tag",
        metavar="TAG",
        help="Docker tag to use when pushing the image.",
    )
    parser.add_argument(
        "-r",
        "--dockerregistry",
        dest="registry",
        metavar="REGISTRY",
        help=f"The Docker registry to use. Defaults to Docker hub ({DEFAULT_NAMESPACE} namespace).",
    )
    parser.add_argument(
        "-u",
        "--dockeruser",
        dest="user",
        metavar="USER",
        help="The Docker user to login with.",
    )
    parser.add_argument(
        "-p",
        "--dockerpass",
        dest="password",
        metavar="PASS",
        help="The Docker password to login with.",
    )
    return parser


def parse_options(argv: Sequence[str] | None = None) -> PublishOptions:
    args = build_parser().parse_args(argv)
    return PublishOptions(
        tag=args.tag,
        registry=args.registry,
        user=args.user,
        password=args.password,
    )


def _q(value: str | None) -> str:
    # A missing value is interpolated as empty text, matching how the
    # command line would read if the flag had been left out.
    return shlex.quote(value or "")


def local_ref(options: PublishOptions) -> str:
    return f"{IMAGE_NAME}:{options.tag or ''}"


def destination_ref(options: PublishOptions) -> str:
    """
    Return the image reference that gets tagged and pushed.

    No registry means Docker Hub under the `imqs` namespace.
    """
    if options.registry is None:
        return f"{DEFAULT_NAMESPACE}/{IMAGE_NAME}:{options.tag or ''}"
    return f"{options.registry}/{IMAGE_NAME}:{options.tag or ''}"


def build_commands(
    options: PublishOptions,
    workdir: Path,
    go_image: str = DEFAULT_GO_IMAGE,
) -> list[tuple[str, str]]:
    """Return `(progress message, command)` pairs for compile + image build."""
    compile_command = (
        f"docker run --rm -e GOPATH={CONTAINER_SRC_DIR} "
        f"-v {shlex.quote(f'{workdir}:{CONTAINER_SRC_DIR}')} -w {CONTAINER_SRC_DIR} "
        f"{_q(go_image)} go install "
        '-ldflags "-linkmode external -extldflags -static" '
        f"{GO_PACKAGE}"
    )
    image_command = f"docker build -t {_q(local_ref(options))} ."
    return [
        (f"Building {IMAGE_NAME} binary", compile_command),
        ("Building image", image_command),
    ]


def publish_commands(options: PublishOptions) -> list[tuple[str, str]]:
    """
    Return `(progress message, command)` pairs for tag, login, push, logout.

    Login and logout are emitted as a pair, and only when a user was given.
    When a registry was given both are scoped to it.
    """
    destination = destination_ref(options)
    registry_suffix = f" {_q(options.registry)}" if options.registry is not None else ""

    tag_command = f"docker tag {_q(local_ref(options))} {_q(destination)}"
    push_command = f"docker push {_q(destination)}"

    steps = [(f"Tagging image: {tag_command}", tag_command)]
    logged_in = bool(options.user)
    if logged_in:
        login_command = f"docker login -u {_q(options.user)} -p {_q(options.password)}{registry_suffix}"
        # Progress text never carries the password.
        steps.append(("Login", login_command))
    steps.append((f"Pushing image: {push_command}", push_command))
    if logged_in:
        steps.append(("Logout", f"docker logout{registry_suffix}"))
    return steps


def run_publish(
    options: PublishOptions,
    *,
    runner: Callable[[str], object] = run_cmd,
    workdir: Path | None = None,
    go_image: str | None = None,
) -> None:
    """
    Run the whole build-and-push sequence.

    `runner` is passed in to keep this function easy to test. The first
    failing command raises and stops the sequence; nothing is rolled back.
    """
    workdir = workdir or Path.cwd()
    go_image = go_image or optional_env("GO_BUILD_IMAGE", DEFAULT_GO_IMAGE)

    steps = build_commands(options, workdir, go_image) + publish_commands(options)
    for message, command in steps:
        print(message)
        runner(command)


def main(argv: Sequence[str] | None = None) -> None:
    options = parse_options(argv)
    run_publish(options)


if __name__ == "__main__":
    from build_tools.cli import docker_build

    docker_build()

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for Cognito.

Two subcommands:
    cognito train      train the model and checkpoint it
    cognito interact   load the checkpoint and generate from stdin prompts

Global options (--config, --log-level) are shared by both through argparse's
parent parser mechanism. The chosen command runs on a dedicated thread with
an enlarged stack.

Usage:
    cognito train --config configs/cognito.yaml
    cognito interact --log-level WARNING
"""

import argparse
import sys

from cognito.cli.commands import handle_interact, handle_train
from cognito.cli.exit_codes import USER_ERROR
from cognito.runtime.thread import run_with_large_stack


def _build_global_parser() -> argparse.ArgumentParser:
    """
    Parent parser with the options every subcommand inherits.

    add_help=False so its help doesn't collide with the subcommand parsers.
    """
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (defaults are used when omitted).",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured logging verbosity.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    commands = [
        ("train", "Train the model on the dataset file.", handle_train),
        ("interact", "Generate text interactively from a trained model.", handle_interact),
    ]
    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)


def build_parser() -> argparse.ArgumentParser:
    parent = _build_global_parser()
    root_parser = argparse.ArgumentParser(
        prog="cognito",
        description="Cognito: train and talk to a small decoder-only language model.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)
    return root_parser


def main(argv: list[str] | None = None) -> None:
    """
    Main CLI entrypoint, referenced by pyproject.toml's [project.scripts].

    Parses the command line, runs the handler on the large-stack runtime
    thread and exits with its return code. With no subcommand, prints help
    and exits with USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if getattr(args, "func", None) is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = run_with_large_stack(lambda: args.func(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

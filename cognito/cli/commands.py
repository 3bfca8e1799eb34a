# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the Cognito CLI.

Each handler loads config, bootstraps the runtime, does its work and returns
an exit code. Heavy imports (torch, tokenizers) happen inside the handlers so
`cognito --help` stays fast.

Diagnostics go through the structured logger on stderr. The only thing
written to stdout is generated text in `interact`.
"""

import argparse
import logging
import sys
from pathlib import Path

from cognito.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS
from cognito.config.exceptions import ConfigError
from cognito.config.loader import load_config
from cognito.config.schema import CognitoConfig
from cognito.logging.logger import get_logger, set_global_log_level
from cognito.runtime.bootstrap import bootstrap

QUIT_COMMAND = "quit"


def _load_and_bootstrap(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, CognitoConfig | None, logging.Logger]:
    """
    Shared setup for every command: load config, run bootstrap.

    Without --config the built-in defaults are used. Returns (exit_code,
    config, logger); on a non-SUCCESS code the caller returns it immediately.
    """
    logger = get_logger(f"cognito.cli.{command_name}", log_level=args.log_level)

    config_path = Path(args.config) if args.config is not None else None
    try:
        config = load_config(config_path)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "config": args.config, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger

    if config_path is None:
        logger.debug("No config provided, running with defaults", extra={"command": command_name})

    bootstrap(config.global_config)
    if args.log_level is not None:
        set_global_log_level(args.log_level)

    return SUCCESS, config, logger


def handle_train(args: argparse.Namespace) -> int:
    """Train the model and checkpoint it after every epoch."""
    exit_code, config, logger = _load_and_bootstrap(args, "train")
    if exit_code != SUCCESS:
        return exit_code

    from cognito.data.exceptions import DataError
    from cognito.training.checkpoint.core import CheckpointError
    from cognito.training.engine.core import run_training

    logger.info(
        "Starting training",
        extra={"command": "train", "dataset": config.data.dataset_path},
    )

    try:
        result = run_training(config)
    except DataError as err:
        logger.error("Training aborted on bad data", extra={"error": str(err)})
        return RUNTIME_ERROR
    except CheckpointError as err:
        logger.error("Training aborted, checkpoint not saved", extra={"error": str(err)})
        return RUNTIME_ERROR
    except ValueError as err:
        logger.error("Invalid model configuration", extra={"error": str(err)})
        return CONFIG_ERROR
    except Exception as err:
        logger.error("Training failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    logger.info(
        "Training complete",
        extra={
            "epochs": result.epochs_completed,
            "total_steps": result.total_steps,
            "final_loss": result.final_loss,
            "checkpoint": result.checkpoint_path,
        },
    )
    return SUCCESS


def handle_interact(args: argparse.Namespace) -> int:
    """
    Load the trained model and run a read-prompt / generate / print loop.

    Prompts are read line by line from stdin until the literal `quit` or EOF.
    Generated tokens are written to stdout as they are produced.
    """
    exit_code, config, logger = _load_and_bootstrap(args, "interact")
    if exit_code != SUCCESS:
        return exit_code

    from cognito.data.exceptions import DataError
    from cognito.serving.loader.core import load_session
    from cognito.training.checkpoint.core import CheckpointError, CheckpointNotFoundError

    try:
        agent = load_session(config)
    except CheckpointNotFoundError as err:
        logger.error(
            "No trained model found, run `cognito train` first",
            extra={"checkpoint": config.train.checkpoint_name, "error": str(err)},
        )
        return RUNTIME_ERROR
    except (CheckpointError, DataError) as err:
        logger.error("Cannot load model", extra={"error": str(err)})
        return RUNTIME_ERROR
    except Exception as err:
        logger.error("Session setup failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    interactive = sys.stdin.isatty()
    try:
        while True:
            if interactive:
                sys.stdout.write(f"Enter a prompt ('{QUIT_COMMAND}' to exit): ")
                sys.stdout.flush()

            line = sys.stdin.readline()
            if not line:
                break
            prompt = line.rstrip("\r\n")
            if prompt.strip() == QUIT_COMMAND:
                break
            if not prompt.strip():
                continue

            for chunk in agent.generate_stream(prompt):
                sys.stdout.write(chunk.token_text)
                sys.stdout.flush()
            sys.stdout.write("\n")
            sys.stdout.flush()
    except Exception as err:
        logger.error("Generation failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    logger.info("Interactive session ended", extra={"command": "interact"})
    return SUCCESS

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runtime bootstrap for Cognito.

One-time setup before a command does any real work:
  1. Validate the environment (Python version)
  2. Set deterministic seeds
  3. Apply the configured log level (and optional log file)
  4. Ensure the checkpoint and log directories exist

Every CLI command goes through this first.
"""

import logging
import os
import random
from pathlib import Path

import torch

from cognito.config.schema import GlobalConfig
from cognito.logging.logger import get_logger, set_global_log_level
from cognito.runtime.environment import check_minimum_python, get_system_info
from cognito.utils.paths import ensure_directory, resolve_path


def set_deterministic_seed(seed: int) -> None:
    """
    Seed Python's `random`, PYTHONHASHSEED and torch (CPU and CUDA).

    With CUDA present, cuDNN is also switched to deterministic kernels.
    """
    random.seed(seed)
    os.environ["PYTHONHASHSEED"] = str(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
        torch.backends.cudnn.deterministic = True  # type: ignore[attr-defined]
        torch.backends.cudnn.benchmark = False  # type: ignore[attr-defined]


def _ensure_directories(config: GlobalConfig, base: Path | None) -> None:
    dirs = config.directories
    ensure_directory(resolve_path(dirs.checkpoints, base))
    ensure_directory(resolve_path(dirs.logs, base))


def bootstrap(config: GlobalConfig, base: Path | None = None) -> logging.Logger:
    """
    Run the bootstrap sequence.

    Args:
        config: The validated global configuration.
        base: Directory relative paths are resolved against (defaults to cwd).

    Returns:
        The runtime logger, already configured.
    """
    check_minimum_python()
    set_deterministic_seed(config.seed)

    log_file = None
    if config.log_file is not None:
        log_file = resolve_path(config.log_file, base)

    set_global_log_level(config.log_level)
    logger = get_logger("cognito.runtime", log_level=config.log_level, log_file=log_file)

    _ensure_directories(config, base)

    system_info = get_system_info()
    logger.info(
        "Cognito bootstrap complete",
        extra={
            "seed": config.seed,
            "python_version": system_info.python_version,
            "torch_version": system_info.torch_version,
            "cuda_available": system_info.cuda_available,
            "cuda_devices": system_info.cuda_devices,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
        },
    )
    return logger

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Interpreter and accelerator checks run once at startup.

The snapshot returned by get_system_info() goes into the bootstrap log line
so a training log records what hardware produced a checkpoint.
"""

import platform
import sys
from typing import NamedTuple

import torch

MINIMUM_PYTHON = (3, 10)


class SystemInfo(NamedTuple):
    python_version: str
    platform: str
    architecture: str
    torch_version: str
    cuda_available: bool
    cuda_devices: int


def check_minimum_python() -> None:
    """Raise RuntimeError when the interpreter is older than MINIMUM_PYTHON."""
    if sys.version_info[:2] < MINIMUM_PYTHON:
        required = ".".join(str(part) for part in MINIMUM_PYTHON)
        running = f"{sys.version_info.major}.{sys.version_info.minor}"
        raise RuntimeError(f"Cognito needs Python >= {required}, this is {running}")


def get_system_info() -> SystemInfo:
    cuda = torch.cuda.is_available()
    return SystemInfo(
        python_version=platform.python_version(),
        platform=platform.system(),
        architecture=platform.machine(),
        torch_version=torch.__version__,
        cuda_available=cuda,
        cuda_devices=torch.cuda.device_count() if cuda else 0,
    )

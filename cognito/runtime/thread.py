# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Run a callable on a dedicated thread with an enlarged stack.

A many-layer model builds a deep call chain through autograd, and the
default thread stack on some platforms is too small for it. Commands run on
a named worker thread whose stack size is set up front; the caller blocks
until it finishes and gets its return value, or its exception re-raised.
"""

import logging
import threading
from collections.abc import Callable
from typing import TypeVar

from cognito.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_STACK_MB = 32
RUNTIME_THREAD_NAME = "cognito-runtime"


def run_with_large_stack(
    fn: Callable[[], T],
    stack_mb: int = DEFAULT_STACK_MB,
    name: str = RUNTIME_THREAD_NAME,
) -> T:
    """
    Run `fn()` on a new thread with a `stack_mb` megabyte stack and wait for it.

    The process-wide default stack size is restored afterwards so threads
    created later (e.g. by libraries) are unaffected.

    Raises:
        Whatever `fn` raised, unchanged.
        ValueError: If the platform rejects the requested stack size.
    """
    result: list[T] = []
    errors: list[BaseException] = []

    def _target() -> None:
        try:
            result.append(fn())
        except BaseException as err:  # noqa: BLE001
            errors.append(err)

    previous = threading.stack_size(stack_mb * 1024 * 1024)
    try:
        worker = threading.Thread(target=_target, name=name, daemon=True)
        worker.start()
    finally:
        threading.stack_size(previous)

    logger.debug("Runtime thread started", extra={"thread": name, "stack_mb": stack_mb})
    worker.join()

    if errors:
        raise errors[0]
    return result[0]

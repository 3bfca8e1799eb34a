# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured training metrics for Cognito.

Emits a log line every `log_interval` iterations. The loss arrives as a
device tensor and is only pulled to the host (`.item()`, which waits for the
device) on iterations that actually log, so the other iterations queue work
without stalling.
"""

import logging
import time
from dataclasses import dataclass, field

import torch

from cognito.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


@dataclass
class StepMetrics:
    """Metrics for one logged training iteration."""

    epoch: int = 0
    iteration: int = 0
    loss: float = 0.0
    tokens_per_sec: float = 0.0
    memory_usage_mb: float = 0.0
    tokens_seen: int = 0


@dataclass
class MetricsTracker:
    """
    Tracks iteration timing and logs loss at a fixed cadence.

    Args:
        log_interval: Log metrics every N iterations (iteration 0 included).
    """

    log_interval: int = 10
    history: list[StepMetrics] = field(default_factory=list, init=False)
    _interval_start_time: float = field(default_factory=time.monotonic, init=False)
    _interval_tokens: int = field(default=0, init=False)

    def record_tokens(self, tokens_in_step: int) -> None:
        """Count tokens processed since the last log line."""
        self._interval_tokens += tokens_in_step

    def should_log(self, iteration: int) -> bool:
        return iteration % self.log_interval == 0

    def end_step(
        self,
        epoch: int,
        iteration: int,
        loss: torch.Tensor,
        tokens_seen: int,
    ) -> StepMetrics | None:
        """
        Close an iteration. On logging iterations, read the loss and emit it.

        Returns:
            StepMetrics when this iteration was logged, otherwise None.
        """
        if not self.should_log(iteration):
            return None

        now = time.monotonic()
        elapsed = now - self._interval_start_time
        tokens_per_sec = self._interval_tokens / elapsed if elapsed > 0 else 0.0

        memory_mb = 0.0
        if torch.cuda.is_available():
            memory_mb = torch.cuda.max_memory_allocated() / (1024 * 1024)

        metrics = StepMetrics(
            epoch=epoch,
            iteration=iteration,
            loss=float(loss.item()),
            tokens_per_sec=tokens_per_sec,
            memory_usage_mb=memory_mb,
            tokens_seen=tokens_seen,
        )
        self.history.append(metrics)
        self._log_metrics(metrics)

        self._interval_start_time = now
        self._interval_tokens = 0
        return metrics

    def _log_metrics(self, metrics: StepMetrics) -> None:
        logger.info(
            "Training step",
            extra={
                "epoch": metrics.epoch,
                "iteration": metrics.iteration,
                "loss": round(metrics.loss, 4),
                "tokens_per_sec": round(metrics.tokens_per_sec, 1),
                "memory_mb": round(metrics.memory_usage_mb, 1),
                "tokens_seen": metrics.tokens_seen,
            },
        )

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
AdamW for the reasoning model, at a constant learning rate.

Embedding tables and projection matrices are decayed. Norm scales and
biases (every 1-D parameter) are not.
"""

import logging

import torch
import torch.nn as nn

from cognito.config.schema import TrainConfig
from cognito.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def create_optimizer(model: nn.Module, train_config: TrainConfig) -> torch.optim.AdamW:
    """Build AdamW with a decay group (matrices) followed by a no-decay group (vectors)."""
    decay: list[nn.Parameter] = []
    no_decay: list[nn.Parameter] = []
    for param in model.parameters():
        if not param.requires_grad:
            continue
        (decay if param.ndim >= 2 else no_decay).append(param)

    logger.debug(
        "Optimizer parameter groups",
        extra={
            "decay_tensors": len(decay),
            "no_decay_tensors": len(no_decay),
            "weight_decay": train_config.weight_decay,
        },
    )

    return torch.optim.AdamW(
        [
            {"params": decay, "weight_decay": train_config.weight_decay},
            {"params": no_decay, "weight_decay": 0.0},
        ],
        lr=train_config.learning_rate,
        betas=(train_config.beta1, train_config.beta2),
    )

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared fixtures for serving tests.

The models here have every weight zeroed, so their logits equal the output
bias at every position. That makes the greedy choice fully predictable.
"""

from collections.abc import Callable

import pytest
import torch

from cognito.model.config import TransformerModelConfig
from cognito.model.transformer import ReasoningModel


def _zeroed_model(config: TransformerModelConfig) -> ReasoningModel:
    model = ReasoningModel(config)
    with torch.no_grad():
        for param in model.parameters():
            param.zero_()
    model.eval()
    return model


@pytest.fixture()
def zero_model(tiny_model_config: TransformerModelConfig) -> ReasoningModel:
    """All parameters zero: logits are all zero, greedy always picks id 0."""
    return _zeroed_model(tiny_model_config)


@pytest.fixture()
def biased_model_factory(
    tiny_model_config: TransformerModelConfig,
) -> Callable[..., ReasoningModel]:
    """Build a zeroed model whose output bias prefers one id (optionally a runner-up)."""

    def _make(token_id: int, runner_up: int | None = None, vocab_size: int | None = None) -> ReasoningModel:
        config = tiny_model_config
        if vocab_size is not None:
            config = TransformerModelConfig(**{**config.to_dict(), "vocab_size": vocab_size})
        model = _zeroed_model(config)
        with torch.no_grad():
            model.output.bias[token_id] = 2.0
            if runner_up is not None:
                model.output.bias[runner_up] = 1.0
        return model

    return _make

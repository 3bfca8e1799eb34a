# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Transformer block for Cognito.

Each block contains, in this fixed order:
  1. RMSNorm
  2. Causal self-attention
  3. Dropout + residual
  4. RMSNorm
  5. GELU feedforward
  6. Dropout + residual

Pre-norm: the residual stream itself is never normalized, only the copy fed
into each sub-layer.
"""

import torch
import torch.nn as nn

from cognito.model.attention import CausalSelfAttention
from cognito.model.config import TransformerModelConfig
from cognito.model.layers.rmsnorm import RMSNorm
from cognito.model.mlp import GELUFeedForward


class ReasoningBlock(nn.Module):
    """
    Single decoder layer with pre-norm architecture.

    The structure is:
      x = x + dropout(attention(norm_1(x), mask))
      x = x + dropout(feed_forward(norm_2(x)))

    Args:
        config: TransformerModelConfig with all architecture parameters.
    """

    def __init__(self, config: TransformerModelConfig) -> None:
        super().__init__()
        self.attention_norm = RMSNorm(config.d_model, eps=config.norm_eps)
        self.attention = CausalSelfAttention(
            dim=config.d_model,
            n_heads=config.num_heads,
            dropout=config.dropout,
        )
        self.ffn_norm = RMSNorm(config.d_model, eps=config.norm_eps)
        self.feed_forward = GELUFeedForward(config.d_model, config.hidden_dim)
        self.dropout = nn.Dropout(config.dropout)

    def forward(self, x: torch.Tensor, mask: torch.Tensor) -> torch.Tensor:
        """
        Forward pass through the block.

        Args:
            x: Input tensor of shape (batch, seq_len, d_model).
            mask: Boolean causal mask of shape (batch, seq_len, seq_len).

        Returns:
            Output tensor of shape (batch, seq_len, d_model).
        """
        x = x + self.dropout(self.attention(self.attention_norm(x), mask))
        x = x + self.dropout(self.feed_forward(self.ffn_norm(x)))
        return x

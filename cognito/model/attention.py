# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Multi-head causal self-attention for Cognito.

The attention computation:
  1. Project input to Q, K, V
  2. Split into heads
  3. Scaled dot-product attention restricted by the boolean mask
  4. Merge heads and project back to model dimension

The mask is passed in rather than built here. The model builds it once per
forward call and every block reuses it.
"""

import torch
import torch.nn as nn
import torch.nn.functional as F


class CausalSelfAttention(nn.Module):
    """
    Multi-head self-attention driven by an explicit boolean mask.

    Positions where the mask is False receive a score of -inf before the
    softmax, so with a lower-triangular mask no position can see a later one.

    Uses PyTorch's scaled_dot_product_attention, which dispatches to a fused
    kernel when one is available for the device.

    Args:
        dim: Model hidden dimension.
        n_heads: Number of attention heads. Must divide dim.
        dropout: Dropout on attention weights, active only in training mode.
    """

    def __init__(self, dim: int, n_heads: int, dropout: float = 0.0) -> None:
        super().__init__()
        if dim % n_heads != 0:
            raise ValueError(f"dim ({dim}) must be divisible by n_heads ({n_heads})")
        self.dim = dim
        self.n_heads = n_heads
        self.head_dim = dim // n_heads

        self.wq = nn.Linear(dim, dim)
        self.wk = nn.Linear(dim, dim)
        self.wv = nn.Linear(dim, dim)
        self.wo = nn.Linear(dim, dim)
        self.dropout = dropout

    def forward(self, x: torch.Tensor, mask: torch.Tensor) -> torch.Tensor:
        """
        Compute masked self-attention.

        Args:
            x: Input tensor of shape (batch, seq_len, dim), used as query, key and value.
            mask: Boolean tensor of shape (batch, seq_len, seq_len); True marks
                  key positions a query may attend to.

        Returns:
            Output tensor of shape (batch, seq_len, dim).
        """
        batch_size, seq_len, _ = x.shape

        # (batch, n_heads, seq_len, head_dim)
        xq = self.wq(x).view(batch_size, seq_len, self.n_heads, self.head_dim).transpose(1, 2)
        xk = self.wk(x).view(batch_size, seq_len, self.n_heads, self.head_dim).transpose(1, 2)
        xv = self.wv(x).view(batch_size, seq_len, self.n_heads, self.head_dim).transpose(1, 2)

        # Broadcast the per-sequence mask over heads
        attn_mask = mask.unsqueeze(1)

        dropout_p = self.dropout if self.training else 0.0
        output = F.scaled_dot_product_attention(
            xq,
            xk,
            xv,
            attn_mask=attn_mask,
            dropout_p=dropout_p,
        )

        output = output.transpose(1, 2).contiguous().view(batch_size, seq_len, self.dim)
        return self.wo(output)

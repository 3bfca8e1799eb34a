# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Root-mean-square normalization used before attention, before the
feed-forward network and once more before the output projection.

    y = x / sqrt(mean(x^2) + eps) * weight
"""

import torch
import torch.nn as nn


class RMSNorm(nn.Module):
    """Scale-only normalization over the hidden dimension (no centering, no bias)."""

    def __init__(self, dim: int, eps: float = 1e-5) -> None:
        super().__init__()
        self.dim = dim
        self.eps = eps
        self.weight = nn.Parameter(torch.ones(dim))

    def forward(self, hidden: torch.Tensor) -> torch.Tensor:
        # Statistics in float32 so half-precision activations don't underflow.
        as_float = hidden.float()
        inv_rms = torch.rsqrt(as_float.square().mean(dim=-1, keepdim=True) + self.eps)
        return (as_float * inv_rms).to(hidden.dtype) * self.weight

    def extra_repr(self) -> str:
        return f"{self.dim}, eps={self.eps}"

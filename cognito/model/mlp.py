# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
GELU feedforward network for Cognito.

Structure: Linear (expand 4x) -> GELU -> Linear (compress back to dim).
"""

import torch
import torch.nn as nn


class GELUFeedForward(nn.Module):
    """
    Position-wise feedforward with a GELU nonlinearity.

    Args:
        dim: Model hidden dimension.
        hidden_dim: Expansion width. Defaults to 4 * dim.
    """

    def __init__(self, dim: int, hidden_dim: int | None = None) -> None:
        super().__init__()
        if hidden_dim is None:
            hidden_dim = 4 * dim

        self.fc1 = nn.Linear(dim, hidden_dim)  # expansion
        self.act = nn.GELU()
        self.fc2 = nn.Linear(hidden_dim, dim)  # compression

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Args:
            x: Input tensor of shape (..., dim).

        Returns:
            Output tensor of same shape.
        """
        return self.fc2(self.act(self.fc1(x)))

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Full reasoning model for Cognito.

Topology:
  Tokens -> Token Embedding + Positional Embedding
         -> N x ReasoningBlock (shared causal mask)
         -> Final RMSNorm -> Linear head -> Logits

Positions are learned (a second embedding table indexed 0..T-1), so the
context window is fixed at max_seq_len. All initialization is deterministic.
"""

import torch
import torch.nn as nn

from cognito.model.block import ReasoningBlock
from cognito.model.config import TransformerModelConfig
from cognito.model.init.weights import init_weights
from cognito.model.layers.rmsnorm import RMSNorm


def build_causal_mask(
    seq_len: int,
    batch_size: int = 1,
    device: torch.device | None = None,
) -> torch.Tensor:
    """
    Build a lower-triangular (inclusive) boolean attention mask.

    Entry [i, j] is True when position i may attend to position j, i.e.
    when j <= i.

    Args:
        seq_len: Sequence length T.
        batch_size: Leading dimension to broadcast the mask to.
        device: Device to build the mask on.

    Returns:
        Boolean tensor of shape (batch_size, seq_len, seq_len).
    """
    mask = torch.ones(seq_len, seq_len, dtype=torch.bool, device=device).tril()
    return mask.unsqueeze(0).expand(batch_size, seq_len, seq_len)


def estimate_parameters(config: TransformerModelConfig) -> int:
    """
    Analytic parameter estimate for a config.

    Embeddings + output head + ~12 * d_model^2 per block (4 attention
    projections plus the 4x expansion and compression). Biases and norm
    scales are left out, so this slightly undercounts count_parameters().
    It is a diagnostic, nothing is sized from it.
    """
    d = config.d_model
    embeddings = config.vocab_size * d + config.max_seq_len * d
    blocks = config.num_layers * 12 * d * d
    head = d * config.vocab_size
    return embeddings + blocks + head


class ReasoningModel(nn.Module):
    """
    Decoder-only transformer language model.

    Args:
        config: TransformerModelConfig with all architecture parameters.
    """

    def __init__(self, config: TransformerModelConfig) -> None:
        super().__init__()
        self.config = config

        self.tok_embeddings = nn.Embedding(config.vocab_size, config.d_model)
        self.pos_embeddings = nn.Embedding(config.max_seq_len, config.d_model)

        # Iteration order is evaluation order and state_dict key order
        self.layers = nn.ModuleList([ReasoningBlock(config) for _ in range(config.num_layers)])

        self.norm = RMSNorm(config.d_model, eps=config.norm_eps)
        self.output = nn.Linear(config.d_model, config.vocab_size)

        init_weights(self, seed=config.seed, init_std=config.init_std)

    def forward(self, tokens: torch.Tensor) -> torch.Tensor:
        """
        Forward pass through the model.

        Args:
            tokens: Input token IDs of shape (batch, seq_len).

        Returns:
            Logits tensor of shape (batch, seq_len, vocab_size).

        Raises:
            ValueError: If seq_len exceeds the positional table.
        """
        batch_size, seq_len = tokens.shape
        if seq_len > self.config.max_seq_len:
            raise ValueError(
                f"Sequence length {seq_len} exceeds max_seq_len {self.config.max_seq_len}"
            )
        device = tokens.device

        positions = torch.arange(seq_len, device=device).unsqueeze(0).expand(batch_size, seq_len)
        h = self.tok_embeddings(tokens) + self.pos_embeddings(positions)

        mask = build_causal_mask(seq_len, batch_size, device)

        for layer in self.layers:
            h = layer(h, mask)

        h = self.norm(h)
        return self.output(h)

    def count_parameters(self) -> int:
        """Count total trainable parameters."""
        return sum(p.numel() for p in self.parameters() if p.requires_grad)

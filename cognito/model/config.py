# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Model configuration for Cognito.

All architecture sizes are config-driven. The same class describes the
8-wide test model and the 24-layer reference model by changing values only.

This is a plain data object (not Pydantic) because it's used inside torch
modules and needs to be lightweight. YAML validation happens in
config/schema.py; this class still refuses a head split that doesn't divide
the hidden size, because a model can be built without going through YAML.
"""

from typing import Any


class TransformerModelConfig:
    """
    Configuration for the reasoning transformer.

    Args:
        num_heads: Number of attention heads.
        d_model: Hidden dimension of the model.
        num_layers: Number of transformer blocks.
        vocab_size: Size of the token vocabulary.
        max_seq_len: Number of learned positions.
        dropout: Dropout probability for attention weights and sub-layer outputs.
        norm_eps: Epsilon for RMSNorm.
        init_std: Standard deviation for weight initialization.
        seed: Random seed for deterministic initialization.

    Raises:
        ValueError: If any size is not positive or d_model is not divisible
            by num_heads.
    """

    __slots__ = (
        "num_heads",
        "d_model",
        "num_layers",
        "vocab_size",
        "max_seq_len",
        "dropout",
        "norm_eps",
        "init_std",
        "seed",
    )

    def __init__(
        self,
        num_heads: int = 8,
        d_model: int = 1024,
        num_layers: int = 24,
        vocab_size: int = 102400,
        max_seq_len: int = 1024,
        dropout: float = 0.1,
        norm_eps: float = 1e-5,
        init_std: float = 0.02,
        seed: int = 42,
    ) -> None:
        for name, value in (
            ("num_heads", num_heads),
            ("d_model", d_model),
            ("num_layers", num_layers),
            ("vocab_size", vocab_size),
            ("max_seq_len", max_seq_len),
        ):
            if value < 1:
                raise ValueError(f"{name} must be positive, got {value}")
        if d_model % num_heads != 0:
            raise ValueError(
                f"d_model ({d_model}) must be divisible by num_heads ({num_heads})"
            )
        if not 0.0 <= dropout < 1.0:
            raise ValueError(f"dropout must be in [0, 1), got {dropout}")

        self.num_heads = num_heads
        self.d_model = d_model
        self.num_layers = num_layers
        self.vocab_size = vocab_size
        self.max_seq_len = max_seq_len
        self.dropout = dropout
        self.norm_eps = norm_eps
        self.init_std = init_std
        self.seed = seed

    @property
    def head_dim(self) -> int:
        """Width of a single attention head."""
        return self.d_model // self.num_heads

    @property
    def hidden_dim(self) -> int:
        """MLP expansion width (4x d_model)."""
        return 4 * self.d_model

    def to_dict(self) -> dict[str, Any]:
        """Snapshot of every field, used in checkpoint metadata."""
        return {name: getattr(self, name) for name in self.__slots__}

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.__slots__)
        return f"TransformerModelConfig({fields})"

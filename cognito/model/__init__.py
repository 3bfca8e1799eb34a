# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Cognito model architecture package.

Decoder-only transformer:
  - Learned token and positional embeddings
  - Pre-norm blocks with RMSNorm
  - Multi-head causal self-attention
  - GELU feedforward with 4x expansion
  - Untied linear LM head
"""

from cognito.model.config import TransformerModelConfig
from cognito.model.transformer import ReasoningModel, build_causal_mask

__all__ = ["ReasoningModel", "TransformerModelConfig", "build_causal_mask"]

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Next-token prediction objective.

Cross-entropy over the vocabulary at every position, with padded positions
excluded from both the mean and the gradient via ignore_index. A batch that
is almost all padding therefore still produces a loss on the same scale as a
dense one.
"""

import torch
import torch.nn.functional as F


def next_token_loss(
    logits: torch.Tensor,
    targets: torch.Tensor,
    pad_token_id: int = 0,
) -> torch.Tensor:
    """
    Masked cross-entropy for next-token prediction.

    Args:
        logits: Model output of shape (batch, seq_len, vocab_size).
        targets: Target ids of shape (batch, seq_len).
        pad_token_id: Target id whose positions are ignored.

    Returns:
        Scalar loss tensor (mean over non-pad positions).
    """
    batch_size, seq_len, vocab_size = logits.shape
    return F.cross_entropy(
        logits.reshape(batch_size * seq_len, vocab_size),
        targets.reshape(batch_size * seq_len),
        ignore_index=pad_token_id,
    )

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Batch builder: raw text lines -> (inputs, targets) token tensors.

For next-token prediction the target at each position is the token that
follows it:

    tokens:  [A, B, C, D]
    inputs:  [A, B, C]
    targets: [B, C, D]

Sequences in a batch have different lengths. Every row is right-padded with
the reserved pad id on both sides, to the width of the longest surviving
sequence minus one, capped so no row is ever wider than max_seq_len.
The loss ignores the pad id, so padded positions never produce a gradient.

The builder never skips a bad id or clamps it. A token outside the model
vocabulary means the tokenizer and model disagree, and training on that
would corrupt the embedding lookups, so it raises instead.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

import torch
from tokenizers import Tokenizer

from cognito.data.exceptions import EmptyBatchError, TokenOutOfRangeError
from cognito.logging.logger import get_logger
from cognito.tokenizer.core import encode_batch

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class Batch:
    """A pair of equal-shaped (batch_size, seq_len) long tensors."""

    inputs: torch.Tensor
    targets: torch.Tensor

    def to(self, device: torch.device) -> "Batch":
        """Move both tensors to a device."""
        return Batch(inputs=self.inputs.to(device), targets=self.targets.to(device))

    @property
    def shape(self) -> tuple[int, int]:
        return tuple(self.inputs.shape)  # type: ignore[return-value]


def build_batch(
    sequences: Sequence[Sequence[int]],
    max_seq_len: int,
    vocab_size: int,
    pad_token_id: int = 0,
    append_eos_id: int | None = None,
) -> Batch:
    """
    Turn already-encoded id sequences into one padded Batch.

    Args:
        sequences: Token id lists, one per sample, in batch order.
        max_seq_len: Widest input/target row allowed.
        vocab_size: Every id must be strictly below this.
        pad_token_id: Id written into padded positions.
        append_eos_id: Optional id appended to each sequence before splitting.

    Returns:
        Batch with inputs/targets of shape (num_surviving, seq_len).

    Raises:
        EmptyBatchError: If no sequence has at least two ids.
        TokenOutOfRangeError: If any kept id is >= vocab_size.
    """
    candidates = [list(seq) for seq in sequences]
    valid = [seq for seq in candidates if len(seq) >= 2]
    if not valid:
        raise EmptyBatchError.for_batch(len(candidates))

    extra = 1 if append_eos_id is not None else 0
    max_len_in_batch = min(max(len(seq) for seq in valid) + extra, max_seq_len + 1)
    seq_len = max_len_in_batch - 1

    all_inputs: list[list[int]] = []
    all_targets: list[list[int]] = []

    for row, seq in enumerate(valid):
        if append_eos_id is not None:
            # Truncation must never cut the end-of-text marker
            tokens = seq[: max_len_in_batch - 1] + [append_eos_id]
        else:
            tokens = seq[:max_len_in_batch]
        for token_id in tokens:
            if token_id < 0 or token_id >= vocab_size:
                raise TokenOutOfRangeError.for_token(token_id, row, vocab_size)

        pad = [pad_token_id] * (max_len_in_batch - len(tokens))
        all_inputs.append(tokens[:-1] + pad)
        all_targets.append(tokens[1:] + pad)

    if len(valid) < len(candidates):
        logger.debug(
            "Dropped short sequences",
            extra={"dropped": len(candidates) - len(valid), "kept": len(valid)},
        )

    inputs = torch.tensor(all_inputs, dtype=torch.long).reshape(len(valid), seq_len)
    targets = torch.tensor(all_targets, dtype=torch.long).reshape(len(valid), seq_len)
    return Batch(inputs=inputs, targets=targets)


class ReasoningBatcher:
    """
    Collate function that encodes raw lines and builds a Batch.

    Instances are picklable (the HuggingFace tokenizer is), so a torch
    DataLoader can run this inside a background worker.

    Args:
        tokenizer: Tokenizer used to encode the lines.
        max_seq_len: Widest input/target row allowed.
        vocab_size: Model vocabulary size, used for range validation.
        pad_token_id: Id written into padded positions.
        append_eos_id: Optional end-of-text id appended to every sequence.
    """

    def __init__(
        self,
        tokenizer: Tokenizer,
        max_seq_len: int,
        vocab_size: int,
        pad_token_id: int = 0,
        append_eos_id: int | None = None,
    ) -> None:
        if max_seq_len < 1:
            raise ValueError(f"max_seq_len must be positive, got {max_seq_len}")
        self.tokenizer = tokenizer
        self.max_seq_len = max_seq_len
        self.vocab_size = vocab_size
        self.pad_token_id = pad_token_id
        self.append_eos_id = append_eos_id

    def __call__(self, lines: list[str]) -> Batch:
        sequences = encode_batch(self.tokenizer, list(lines), add_special_tokens=True)
        return build_batch(
            sequences,
            max_seq_len=self.max_seq_len,
            vocab_size=self.vocab_size,
            pad_token_id=self.pad_token_id,
            append_eos_id=self.append_eos_id,
        )

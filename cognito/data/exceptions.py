# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Data integrity exceptions.

Each one means the training data or tokenizer does not match what the model
expects. These are never retried or skipped. The run stops, and the message
carries enough context (ids, counts, paths) to fix the data.

Every exception here must be constructible from its message alone. Batches
built in a DataLoader worker surface in the training loop as
`exc_type(message)`, and anything that needs more arguments turns into a bare
RuntimeError on the way back. Structured context is keyword-only and
optional for that reason.
"""


class DataError(Exception):
    """Base for all data and tokenizer integrity errors."""


class DatasetNotFoundError(DataError):
    """Raised when the dataset file is missing or is not a regular file."""


class EmptyDatasetError(DataError):
    """Raised when no line of the dataset survives the minimum-length filter."""


class EmptyBatchError(DataError):
    """Raised when no line in a batch encodes to at least two tokens."""

    def __init__(self, message: str, *, num_lines: int | None = None) -> None:
        super().__init__(message)
        self.num_lines = num_lines

    @classmethod
    def for_batch(cls, num_lines: int) -> "EmptyBatchError":
        return cls(
            f"Batch of {num_lines} line(s) has no sequence with at least 2 tokens; "
            "the dataset is degenerate",
            num_lines=num_lines,
        )


class TokenOutOfRangeError(DataError):
    """Raised when a token id is at or beyond the model's vocabulary size."""

    def __init__(
        self,
        message: str,
        *,
        token_id: int | None = None,
        row: int | None = None,
        vocab_size: int | None = None,
    ) -> None:
        super().__init__(message)
        self.token_id = token_id
        self.row = row
        self.vocab_size = vocab_size

    @classmethod
    def for_token(cls, token_id: int, row: int, vocab_size: int) -> "TokenOutOfRangeError":
        return cls(
            f"Token id {token_id} in batch row {row} is outside the model vocabulary "
            f"(vocab_size={vocab_size}); tokenizer and model config disagree",
            token_id=token_id,
            row=row,
            vocab_size=vocab_size,
        )


class TokenizerMismatchError(DataError):
    """Raised when the tokenizer can emit ids the model has no embedding for."""

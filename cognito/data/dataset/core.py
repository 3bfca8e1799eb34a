# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Line-per-sample text dataset.

The dataset file is newline-delimited raw text. Each surviving line is one
training sample. Short lines (headers, blank lines, stray fragments) carry
almost no next-token signal, so anything whose stripped length is at or
below `min_chars` is dropped at load time.
"""

import logging
from pathlib import Path

from torch.utils.data import Dataset

from cognito.data.exceptions import DatasetNotFoundError
from cognito.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


class TextFileDataset(Dataset):
    """
    In-memory list of text lines read from a single file.

    Lines keep their original content (only the trailing newline is removed)
    and their original file order.

    Args:
        path: Path to the newline-delimited text file.
        min_chars: Lines with stripped length <= min_chars are discarded.

    Raises:
        DatasetNotFoundError: If the file is missing or unreadable.
    """

    def __init__(self, path: Path, min_chars: int = 50) -> None:
        self.path = path
        self.min_chars = min_chars
        self._lines = self._read_lines()

    def _read_lines(self) -> list[str]:
        if not self.path.is_file():
            raise DatasetNotFoundError(f"Dataset file not found: {self.path}")

        logger.info("Loading dataset", extra={"path": str(self.path)})
        try:
            with open(self.path, encoding="utf-8") as f:
                raw_lines = f.read().splitlines()
        except OSError as err:
            raise DatasetNotFoundError(f"Cannot read dataset file {self.path}: {err}") from err

        lines = [line for line in raw_lines if len(line.strip()) > self.min_chars]
        logger.info(
            "Dataset loaded",
            extra={
                "path": str(self.path),
                "samples": len(lines),
                "discarded": len(raw_lines) - len(lines),
            },
        )
        return lines

    @classmethod
    def from_lines(cls, lines: list[str], min_chars: int = 0) -> "TextFileDataset":
        """Build a dataset from lines already in memory, applying the same filter."""
        dataset = cls.__new__(cls)
        dataset.path = Path("<memory>")
        dataset.min_chars = min_chars
        dataset._lines = [line for line in lines if len(line.strip()) > min_chars]
        return dataset

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index: int) -> str:
        return self._lines[index]

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Batched iteration over a TextFileDataset.

Wraps torch's DataLoader with ReasoningBatcher as the collate function. With
num_workers > 0 the encoding and padding happen in a background worker that
keeps up to `prefetch_factor` batches ready. The training loop only blocks
when none is ready yet. With num_workers == 0 every batch is built inline.

Shuffling is driven by a dedicated generator seeded from the config, so two
runs with the same seed see lines in the same order.
"""

import logging

import torch
from torch.utils.data import DataLoader

from cognito.data.batcher.core import ReasoningBatcher
from cognito.data.dataset.core import TextFileDataset
from cognito.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def create_dataloader(
    dataset: TextFileDataset,
    batcher: ReasoningBatcher,
    batch_size: int,
    seed: int = 42,
    shuffle: bool = True,
    num_workers: int = 0,
    prefetch_factor: int = 2,
) -> DataLoader:
    """
    Create a DataLoader yielding Batch objects.

    The last batch may be smaller than batch_size; the batcher handles any
    row count.

    Args:
        dataset: Source of raw text lines.
        batcher: Collate function turning a list of lines into a Batch.
        batch_size: Lines per batch.
        seed: Seed for the shuffling generator.
        shuffle: Whether to shuffle line order each epoch.
        num_workers: Background workers building batches (0 = inline).
        prefetch_factor: Batches each worker keeps ready ahead of the loop.

    Returns:
        A torch DataLoader over Batch objects.
    """
    generator = torch.Generator()
    generator.manual_seed(seed)

    loader_kwargs: dict[str, object] = {}
    if num_workers > 0:
        loader_kwargs["prefetch_factor"] = prefetch_factor
        loader_kwargs["persistent_workers"] = False

    logger.debug(
        "Creating dataloader",
        extra={
            "samples": len(dataset),
            "batch_size": batch_size,
            "shuffle": shuffle,
            "num_workers": num_workers,
        },
    )

    return DataLoader(
        dataset,
        batch_size=batch_size,
        shuffle=shuffle,
        collate_fn=batcher,
        num_workers=num_workers,
        generator=generator,
        **loader_kwargs,
    )

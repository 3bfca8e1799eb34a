# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build a ready-to-use generation session from config and a saved checkpoint.

Steps, in order:
  1. Pick the device
  2. Build the model architecture from config
  3. Load the named checkpoint into it (checksum verified)
  4. Load the tokenizer and check it fits the model vocabulary
  5. Wrap everything in a ReasoningAgent

Any failure stops here with a specific error; there is no half-loaded
session.
"""

import logging
from pathlib import Path

from tokenizers import Tokenizer

from cognito.config.schema import CognitoConfig
from cognito.logging.logger import get_logger
from cognito.model.transformer import ReasoningModel
from cognito.serving.engine.core import ReasoningAgent
from cognito.tokenizer.core import check_vocab_compatibility, load_tokenizer
from cognito.training.checkpoint.core import load_checkpoint
from cognito.training.engine.core import build_model_config, select_device
from cognito.utils.paths import resolve_path

logger: logging.Logger = get_logger(__name__)


def load_session(
    config: CognitoConfig,
    checkpoint_dir: Path | None = None,
    tokenizer: Tokenizer | None = None,
) -> ReasoningAgent:
    """
    Load the trained model and return a session for interactive generation.

    Args:
        config: Validated configuration (model, tokenizer, generation, train).
        checkpoint_dir: Parent checkpoint directory; defaults to
            config.global.directories.checkpoints.
        tokenizer: Pre-loaded tokenizer; loaded from config when None.

    Raises:
        CheckpointNotFoundError: If nothing has been trained yet.
        CheckpointLoadError: If the checkpoint is corrupt or doesn't fit the model.
        TokenizerMismatchError: If the tokenizer vocabulary exceeds the model's.
    """
    device = select_device()

    if checkpoint_dir is None:
        checkpoint_dir = resolve_path(config.global_config.directories.checkpoints)

    model_config = build_model_config(config)
    model = ReasoningModel(model_config)
    metadata = load_checkpoint(model, checkpoint_dir, config.train.checkpoint_name, device=device)
    model = model.to(device)

    if tokenizer is None:
        tokenizer = load_tokenizer(config.tokenizer)
    check_vocab_compatibility(tokenizer, model_config.vocab_size)

    max_context_length = config.generation.max_context_length or model_config.max_seq_len

    logger.info(
        "Session ready",
        extra={
            "device": str(device),
            "parameters": model.count_parameters(),
            "checkpoint_epoch": metadata.epoch,
            "checkpoint_step": metadata.global_step,
            "max_context_length": max_context_length,
            "strategy": config.generation.strategy,
        },
    )

    return ReasoningAgent(
        model=model,
        tokenizer=tokenizer,
        device=device,
        max_context_length=max_context_length,
        config=config.generation,
    )

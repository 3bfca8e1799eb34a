# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Core training engine for Cognito.

Every iteration runs the same four stages, in order:
  1. FORWARD   - model(inputs) -> logits
  2. LOSS      - masked cross-entropy against the shifted targets
  3. BACKWARD  - loss.backward()
  4. OPTIMIZE  - AdamW step, then zero the gradients

Around that:
  - loss is logged every log_interval iterations
  - an epoch stops early after max_steps_per_epoch iterations
  - the full parameter set is checkpointed after every epoch under a fixed
    artifact name; a failed save aborts the run

No trainer framework, no hidden callbacks. Every step is explicit.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import torch
import torch.nn as nn
from tokenizers import Tokenizer

from cognito.config.schema import CognitoConfig
from cognito.data.batcher.core import Batch, ReasoningBatcher
from cognito.data.dataset.core import TextFileDataset
from cognito.data.exceptions import EmptyDatasetError
from cognito.data.loader.core import create_dataloader
from cognito.logging.logger import get_logger
from cognito.model.config import TransformerModelConfig
from cognito.model.transformer import ReasoningModel, estimate_parameters
from cognito.tokenizer.core import check_vocab_compatibility, load_tokenizer
from cognito.training.checkpoint.core import CheckpointMetadata, save_checkpoint
from cognito.training.metrics.core import MetricsTracker
from cognito.training.objectives import next_token_loss
from cognito.training.optimizer.core import create_optimizer
from cognito.utils.paths import resolve_path

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class TrainingResult:
    """Final result of a training run."""

    epochs_completed: int
    total_steps: int
    final_loss: float
    total_tokens: int
    checkpoint_path: str


def select_device() -> torch.device:
    """Use CUDA when available, otherwise CPU."""
    if torch.cuda.is_available():
        return torch.device("cuda")
    return torch.device("cpu")


def build_model_config(config: CognitoConfig) -> TransformerModelConfig:
    """Construct a TransformerModelConfig from the validated config."""
    model_cfg = config.model
    return TransformerModelConfig(
        num_heads=model_cfg.num_heads,
        d_model=model_cfg.d_model,
        num_layers=model_cfg.num_layers,
        vocab_size=model_cfg.vocab_size,
        max_seq_len=model_cfg.max_seq_len,
        dropout=model_cfg.dropout,
        norm_eps=model_cfg.norm_eps,
        init_std=model_cfg.init_std,
        seed=config.global_config.seed,
    )


def train_step(
    model: nn.Module,
    optimizer: torch.optim.Optimizer,
    batch: Batch,
    pad_token_id: int = 0,
) -> torch.Tensor:
    """
    Run one FORWARD -> LOSS -> BACKWARD -> OPTIMIZE iteration.

    The batch must already be on the model's device. Gradients are zeroed
    after the step, so the parameters are only ever observed either fully
    before or fully after an update.

    Returns:
        The detached scalar loss tensor (still on device).
    """
    logits = model(batch.inputs)
    loss = next_token_loss(logits, batch.targets, pad_token_id)
    loss.backward()
    optimizer.step()
    optimizer.zero_grad(set_to_none=True)
    return loss.detach()


def run_training(
    config: CognitoConfig,
    tokenizer: Tokenizer | None = None,
    dataset: TextFileDataset | None = None,
    checkpoint_dir: Path | None = None,
) -> TrainingResult:
    """
    Execute the full training loop.

    Args:
        config: Validated configuration.
        tokenizer: Tokenizer to use; loaded from config.tokenizer when None.
        dataset: Dataset to train on; read from config.data.dataset_path when None.
        checkpoint_dir: Where to save; config.global.directories.checkpoints when None.

    Returns:
        TrainingResult with final loss, step counts and checkpoint path.

    Raises:
        DataError: Degenerate batches, out-of-range ids, missing or empty dataset,
            tokenizer/model vocabulary mismatch.
        CheckpointSaveError: If the checkpoint cannot be written.
        ValueError: If the model config is invalid.
    """
    train_cfg = config.train
    data_cfg = config.data
    seed = config.global_config.seed

    device = select_device()
    torch.manual_seed(seed)

    # Model
    model_config = build_model_config(config)
    model = ReasoningModel(model_config).to(device)
    logger.info(
        "Model created",
        extra={
            "device": str(device),
            "parameters": model.count_parameters(),
            "estimated_parameters": estimate_parameters(model_config),
            "layers": model_config.num_layers,
        },
    )

    optimizer = create_optimizer(model, train_cfg)

    # Data
    if tokenizer is None:
        tokenizer = load_tokenizer(config.tokenizer)
    check_vocab_compatibility(tokenizer, model_config.vocab_size)

    if dataset is None:
        dataset = TextFileDataset(resolve_path(data_cfg.dataset_path), data_cfg.min_line_chars)
    if len(dataset) == 0:
        raise EmptyDatasetError(
            f"No line of {dataset.path} is longer than {dataset.min_chars} characters "
            "after stripping; nothing to train on"
        )

    batcher = ReasoningBatcher(
        tokenizer,
        max_seq_len=data_cfg.max_seq_len,
        vocab_size=model_config.vocab_size,
        pad_token_id=data_cfg.pad_token_id,
        append_eos_id=data_cfg.append_eos_id,
    )
    dataloader = create_dataloader(
        dataset,
        batcher,
        batch_size=train_cfg.batch_size,
        seed=seed,
        shuffle=data_cfg.shuffle,
        num_workers=data_cfg.num_workers,
        prefetch_factor=data_cfg.prefetch_factor,
    )

    if checkpoint_dir is None:
        checkpoint_dir = resolve_path(config.global_config.directories.checkpoints)

    tracker = MetricsTracker(log_interval=train_cfg.log_interval)

    logger.info(
        "Starting training loop",
        extra={
            "samples": len(dataset),
            "batch_size": train_cfg.batch_size,
            "num_epochs": train_cfg.num_epochs,
            "max_steps_per_epoch": train_cfg.max_steps_per_epoch,
            "learning_rate": train_cfg.learning_rate,
        },
    )

    model.train()
    optimizer.zero_grad(set_to_none=True)
    global_step = 0
    tokens_seen = 0
    last_loss: torch.Tensor | None = None
    saved_path = ""
    epochs_completed = 0

    for epoch in range(1, train_cfg.num_epochs + 1):
        logger.info("Epoch started", extra={"epoch": epoch})

        for iteration, batch in enumerate(dataloader):
            if iteration >= train_cfg.max_steps_per_epoch:
                logger.info(
                    "Reached max steps for epoch, stopping early to save model",
                    extra={"epoch": epoch, "iteration": iteration},
                )
                break

            batch = batch.to(device)
            tokens_in_batch = batch.inputs.numel()
            tracker.record_tokens(tokens_in_batch)

            last_loss = train_step(model, optimizer, batch, data_cfg.pad_token_id)

            global_step += 1
            tokens_seen += tokens_in_batch
            tracker.end_step(epoch, iteration, last_loss, tokens_seen)

        final_loss = float(last_loss.item()) if last_loss is not None else float("nan")
        logger.info("Epoch complete", extra={"epoch": epoch, "steps": global_step})

        metadata = CheckpointMetadata(
            epoch=epoch,
            global_step=global_step,
            loss=final_loss,
            seed=seed,
            model_config=model_config.to_dict(),
        )
        saved_path = str(
            save_checkpoint(model, checkpoint_dir, train_cfg.checkpoint_name, metadata)
        )
        epochs_completed = epoch

    final_loss = float(last_loss.item()) if last_loss is not None else float("nan")
    logger.info(
        "Training complete",
        extra={
            "epochs": epochs_completed,
            "total_steps": global_step,
            "final_loss": final_loss,
            "total_tokens": tokens_seen,
        },
    )

    return TrainingResult(
        epochs_completed=epochs_completed,
        total_steps=global_step,
        final_loss=final_loss,
        total_tokens=tokens_seen,
        checkpoint_path=saved_path,
    )

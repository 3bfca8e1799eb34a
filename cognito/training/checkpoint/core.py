# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Atomic checkpoint save/load for Cognito.

A checkpoint is a directory named after a fixed artifact name:

    <checkpoint_dir>/<name>/
        model.pt        - model state_dict
        metadata.json   - epoch, step, loss, seed, model config, weights sha256

Saves are atomic: everything is written to a temp directory beside the final
one. The previous checkpoint is then renamed aside, the new one renamed into
place, and only then is the old one deleted. At every point a complete
checkpoint exists on disk, either under its own name or under the
`.ckpt_old_` name beside it if the process died between the two renames.

Failures are reported distinctly:
  - CheckpointNotFoundError: nothing saved under that name yet
  - CheckpointLoadError: something is there but it is incomplete or corrupt
  - CheckpointSaveError: writing failed (the training work would be lost)
"""

import json
import logging
import shutil
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path

import torch
import torch.nn as nn

from cognito.logging.logger import get_logger
from cognito.utils.hashing import compute_sha256, verify_checksum

logger: logging.Logger = get_logger(__name__)

WEIGHTS_FILE = "model.pt"
METADATA_FILE = "metadata.json"


class CheckpointError(Exception):
    """Base for checkpoint store failures."""


class CheckpointNotFoundError(CheckpointError):
    """Raised when no checkpoint exists under the requested name."""


class CheckpointLoadError(CheckpointError):
    """Raised when a checkpoint exists but cannot be read or fails verification."""


class CheckpointSaveError(CheckpointError):
    """Raised when a checkpoint cannot be written."""


@dataclass(frozen=True)
class CheckpointMetadata:
    """Metadata stored alongside the weights for tracing."""

    epoch: int
    global_step: int
    loss: float
    seed: int
    model_config: dict[str, object] = field(default_factory=dict)
    weights_sha256: str = ""


def checkpoint_path(checkpoint_dir: Path, name: str) -> Path:
    """Directory a checkpoint with this artifact name lives in."""
    return checkpoint_dir / name


def _aside_path(final_dir: Path) -> Path:
    return final_dir.with_name(f".ckpt_old_{final_dir.name}")


def _swap_into_place(new_dir: Path, final_dir: Path) -> None:
    """Replace final_dir with new_dir without a window where neither exists."""
    aside = _aside_path(final_dir)
    if final_dir.exists():
        if aside.exists():
            shutil.rmtree(aside)
        final_dir.rename(aside)

    try:
        new_dir.rename(final_dir)
    except OSError:
        if aside.exists() and not final_dir.exists():
            aside.rename(final_dir)
        raise

    if aside.exists():
        shutil.rmtree(aside)


def save_checkpoint(
    model: nn.Module,
    checkpoint_dir: Path,
    name: str,
    metadata: CheckpointMetadata,
) -> Path:
    """
    Save model weights and metadata atomically under a fixed name.

    An existing checkpoint with the same name is replaced only after the new
    one has been fully written.

    Args:
        model: The model to checkpoint.
        checkpoint_dir: Parent directory for checkpoints.
        name: Fixed artifact name (e.g. "cognito_model").
        metadata: Epoch, step, loss, seed and config snapshot.

    Returns:
        Path to the saved checkpoint directory.

    Raises:
        CheckpointSaveError: If any part of the write fails.
    """
    final_dir = checkpoint_path(checkpoint_dir, name)

    try:
        checkpoint_dir.mkdir(parents=True, exist_ok=True)
        tmp_dir = Path(tempfile.mkdtemp(dir=checkpoint_dir, prefix=".ckpt_tmp_"))
    except OSError as err:
        raise CheckpointSaveError(f"Cannot prepare checkpoint directory {checkpoint_dir}: {err}") from err

    try:
        weights_path = tmp_dir / WEIGHTS_FILE
        torch.save(model.state_dict(), weights_path)

        meta_dict = asdict(metadata)
        meta_dict["weights_sha256"] = compute_sha256(weights_path)
        (tmp_dir / METADATA_FILE).write_text(
            json.dumps(meta_dict, indent=2, default=str),
            encoding="utf-8",
        )

        _swap_into_place(tmp_dir, final_dir)
    except (OSError, RuntimeError) as err:
        if tmp_dir.exists():
            shutil.rmtree(tmp_dir, ignore_errors=True)
        raise CheckpointSaveError(f"Failed to save checkpoint '{name}' to {final_dir}: {err}") from err

    logger.info(
        "Checkpoint saved",
        extra={
            "name": name,
            "path": str(final_dir),
            "epoch": metadata.epoch,
            "step": metadata.global_step,
            "loss": metadata.loss,
        },
    )
    return final_dir


def load_checkpoint(
    model: nn.Module,
    checkpoint_dir: Path,
    name: str,
    device: torch.device | None = None,
) -> CheckpointMetadata:
    """
    Load a named checkpoint into a model.

    The weights checksum recorded at save time is verified before the
    tensors are loaded.

    Args:
        model: The model to load weights into (must match the saved architecture).
        checkpoint_dir: Parent directory for checkpoints.
        name: Fixed artifact name.
        device: Device to map tensors to (defaults to CPU).

    Returns:
        CheckpointMetadata describing the restored state.

    Raises:
        CheckpointNotFoundError: If no checkpoint exists under that name.
        CheckpointLoadError: If files are missing, corrupt, or don't fit the model.
    """
    ckpt_dir = checkpoint_path(checkpoint_dir, name)
    if not ckpt_dir.is_dir() and _aside_path(ckpt_dir).is_dir():
        logger.warning(
            "Save was interrupted mid-swap, loading the previous checkpoint",
            extra={"name": name, "path": str(_aside_path(ckpt_dir))},
        )
        ckpt_dir = _aside_path(ckpt_dir)
    if not ckpt_dir.is_dir():
        raise CheckpointNotFoundError(f"Checkpoint '{name}' not found in {checkpoint_dir}")

    weights_path = ckpt_dir / WEIGHTS_FILE
    meta_path = ckpt_dir / METADATA_FILE
    if not weights_path.is_file():
        raise CheckpointLoadError(f"{WEIGHTS_FILE} not found in {ckpt_dir}")
    if not meta_path.is_file():
        raise CheckpointLoadError(f"{METADATA_FILE} not found in {ckpt_dir}")

    try:
        meta_dict = json.loads(meta_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as err:
        raise CheckpointLoadError(f"Unreadable metadata in {ckpt_dir}: {err}") from err

    expected_hash = meta_dict.get("weights_sha256") or ""
    if expected_hash:
        if not verify_checksum(weights_path, expected_hash):
            raise CheckpointLoadError(
                f"Weights checksum mismatch for '{name}'. "
                f"Expected: {expected_hash[:16]}... Got: {compute_sha256(weights_path)[:16]}... "
                f"The model file may be corrupted."
            )
    else:
        logger.warning("No checksum recorded for checkpoint weights", extra={"name": name})

    map_location = device if device is not None else "cpu"
    try:
        state_dict = torch.load(weights_path, map_location=map_location, weights_only=True)
        model.load_state_dict(state_dict)
    except (OSError, RuntimeError) as err:
        raise CheckpointLoadError(f"Cannot load weights from {weights_path}: {err}") from err

    metadata = CheckpointMetadata(
        epoch=meta_dict.get("epoch", 0),
        global_step=meta_dict.get("global_step", 0),
        loss=meta_dict.get("loss", 0.0),
        seed=meta_dict.get("seed", 0),
        model_config=meta_dict.get("model_config", {}),
        weights_sha256=expected_hash,
    )

    logger.info(
        "Checkpoint loaded",
        extra={"name": name, "path": str(ckpt_dir), "step": metadata.global_step},
    )
    return metadata

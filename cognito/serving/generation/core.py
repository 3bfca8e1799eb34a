# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Token selection for Cognito.

Given the logits for the last position, decide which id comes next. The
pipeline, in order:

  1. Repetition penalty (optional): subtract a constant from the logit of
     every id seen in the last `repetition_window` ids.
  2. Temperature (optional): divide logits by the temperature. Below 1
     sharpens the distribution, above 1 flattens it.
  3. Selection, one of:
       - "greedy": argmax. Fully deterministic.
       - "perturbed": softmax, add `noise_scale * U[0, 1)` to every
         probability, argmax. This is not categorical sampling; it nudges
         near-ties apart while staying reproducible for a fixed noise seed.
         Results can differ across devices because float summation order
         differs.
       - "multinomial": a real categorical draw from the softmax. Opt-in.

Noise and draws come from an explicit torch.Generator so runs are
reproducible for a given seed.
"""

import logging
from collections.abc import Sequence

import torch

from cognito.config.schema import GenerationConfig
from cognito.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def apply_repetition_penalty(
    logits: torch.Tensor,
    recent_ids: Sequence[int],
    penalty: float,
) -> torch.Tensor:
    """
    Lower the logits of recently generated ids by a fixed amount.

    The logits are copied to host memory, edited there and copied back to
    their original device. On an accelerator that is two transfers of the
    full vocabulary row per call.

    Args:
        logits: 1D logits of shape [vocab_size].
        recent_ids: Ids from the tail of the running sequence.
        penalty: Constant subtracted once per distinct id.

    Returns:
        A new logits tensor on the same device as the input.
    """
    if penalty <= 0.0 or not recent_ids:
        return logits

    host = logits.detach().to("cpu", copy=True)
    vocab_size = host.size(-1)
    for token_id in set(recent_ids):
        if 0 <= token_id < vocab_size:
            host[token_id] -= penalty
    return host.to(logits.device)


def apply_temperature(logits: torch.Tensor, temperature: float) -> torch.Tensor:
    """Divide logits by temperature; a temperature of 0 leaves them untouched."""
    if temperature <= 1e-8:
        return logits
    return logits / temperature


def select_next_token(
    logits: torch.Tensor,
    strategy: str,
    noise_scale: float = 0.05,
    generator: torch.Generator | None = None,
) -> int:
    """
    Pick one id from a logits vector using the named strategy.

    Args:
        logits: Logits for the last position, shape [vocab_size]. A 2D input
            uses its last row.
        strategy: "greedy", "perturbed" or "multinomial".
        noise_scale: Noise amplitude for "perturbed".
        generator: CPU RNG for "perturbed" and "multinomial".

    Raises:
        ValueError: On an unknown strategy.
    """
    if logits.dim() > 1:
        logits = logits[-1]

    if strategy == "greedy":
        return int(logits.argmax(dim=-1).item())

    probs = torch.softmax(logits.float().cpu(), dim=-1)

    if strategy == "perturbed":
        noise = torch.rand(probs.shape, generator=generator)
        return int((probs + noise_scale * noise).argmax(dim=-1).item())

    if strategy == "multinomial":
        selected = torch.multinomial(probs, num_samples=1, generator=generator)
        return int(selected.item())

    raise ValueError(f"Unknown selection strategy: '{strategy}'")


def sample_next_token(
    logits: torch.Tensor,
    context_ids: Sequence[int],
    config: GenerationConfig,
    generator: torch.Generator | None = None,
) -> int:
    """Run the full penalty -> temperature -> selection pipeline for one step."""
    if config.repetition_penalty > 0.0:
        window = list(context_ids[-config.repetition_window:])
        logits = apply_repetition_penalty(logits, window, config.repetition_penalty)
    logits = apply_temperature(logits, config.temperature)
    return select_next_token(logits, config.strategy, config.noise_scale, generator)


def make_generator(config: GenerationConfig) -> torch.Generator | None:
    """Seeded CPU RNG for non-greedy strategies; None for greedy."""
    if config.strategy == "greedy":
        return None
    generator = torch.Generator(device="cpu")
    generator.manual_seed(config.seed)
    return generator

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Generation engine for Cognito.

`ReasoningAgent` is the session object: it owns the model, the tokenizer and
the device, and every generation call goes through it. Nothing lives in
module-level globals.

Each call walks a small state machine:

    ENCODING  -> prompt text is turned into ids
    DECODING  -> one forward pass per produced token
    STOPPED   -> end-of-text id, newline (prose mode), max_tokens,
                 or the context window is full

Running out of context window is not an error. Generation stops and returns
what it has so far with finish_reason "context".

Calls are independent: a failure in one leaves the agent usable for the next.
"""

import enum
import logging
import time
from collections.abc import Generator

import torch
import torch.nn as nn
from tokenizers import Tokenizer

from cognito.config.schema import GenerationConfig
from cognito.logging.logger import get_logger
from cognito.serving.api.schema import GenerateResponse, StreamChunk
from cognito.serving.generation.core import make_generator, sample_next_token
from cognito.serving.streaming.core import TokenStreamer
from cognito.tokenizer.core import decode, encode

logger: logging.Logger = get_logger(__name__)


class GenerationState(enum.Enum):
    ENCODING = "encoding"
    DECODING = "decoding"
    STOPPED = "stopped"


class ReasoningAgent:
    """
    High-level generation API over a loaded model.

    The agent doesn't know about stdin, argparse or file paths. It takes
    prompts and returns tokens; the CLI does the I/O.
    """

    def __init__(
        self,
        model: nn.Module,
        tokenizer: Tokenizer,
        device: torch.device,
        max_context_length: int,
        config: GenerationConfig | None = None,
    ) -> None:
        if max_context_length < 1:
            raise ValueError(f"max_context_length must be positive, got {max_context_length}")
        self._model = model
        self._tokenizer = tokenizer
        self._device = device
        self._max_context_length = max_context_length
        self._config = config if config is not None else GenerationConfig()
        self._state = GenerationState.STOPPED
        self._model.eval()

    @property
    def state(self) -> GenerationState:
        return self._state

    @property
    def config(self) -> GenerationConfig:
        return self._config

    @property
    def max_context_length(self) -> int:
        return self._max_context_length

    def generate(self, prompt: str, config: GenerationConfig | None = None) -> GenerateResponse:
        """
        Generate a continuation and return it in one piece.

        The returned text is the decoded full sequence with the prompt
        stripped from the front, so it holds only new content.
        """
        config = config if config is not None else self._config
        start = time.monotonic()

        prompt_ids = self._encode(prompt)
        generated_ids: list[int] = []
        finish_reason = "context"
        for chunk in self._decode_loop(prompt_ids, config):
            generated_ids.append(chunk.token_id)
            if chunk.finish_reason is not None:
                finish_reason = chunk.finish_reason

        text = self._strip_prompt(prompt, prompt_ids, generated_ids)
        elapsed_ms = (time.monotonic() - start) * 1000.0
        tps = (len(generated_ids) / elapsed_ms * 1000.0) if elapsed_ms > 0 else 0.0

        logger.info(
            "Generation complete",
            extra={
                "prompt_tokens": len(prompt_ids),
                "tokens_generated": len(generated_ids),
                "finish_reason": finish_reason,
                "total_time_ms": round(elapsed_ms, 2),
            },
        )

        return GenerateResponse(
            text=text,
            tokens_generated=len(generated_ids),
            prompt_tokens=len(prompt_ids),
            total_time_ms=round(elapsed_ms, 2),
            tokens_per_second=round(tps, 2),
            finish_reason=finish_reason,
        )

    def generate_stream(
        self,
        prompt: str,
        config: GenerationConfig | None = None,
    ) -> Generator[StreamChunk, None, None]:
        """
        Yield one StreamChunk per generated token as soon as it is decoded.

        The last chunk has done=True and a finish_reason. If the prompt
        already fills the context window nothing is yielded.
        """
        config = config if config is not None else self._config
        prompt_ids = self._encode(prompt)
        yield from self._decode_loop(prompt_ids, config)

    def _decode_loop(
        self,
        prompt_ids: list[int],
        config: GenerationConfig,
    ) -> Generator[StreamChunk, None, None]:
        self._state = GenerationState.DECODING
        streamer = TokenStreamer()
        generator = make_generator(config)
        eos_ids = set(config.eos_token_ids)
        input_ids = list(prompt_ids)

        try:
            for step in range(config.max_tokens):
                if len(input_ids) >= self._max_context_length:
                    logger.info(
                        "Context window full, stopping generation",
                        extra={"sequence_length": len(input_ids), "limit": self._max_context_length},
                    )
                    return

                logits = self._forward(input_ids)
                next_token = sample_next_token(logits, input_ids, config, generator)
                token_text = decode(self._tokenizer, [next_token])
                input_ids.append(next_token)

                finish_reason = None
                if next_token in eos_ids:
                    finish_reason = "eos"
                elif config.stop_on_newline and "\n" in token_text:
                    finish_reason = "newline"
                elif step == config.max_tokens - 1:
                    finish_reason = "length"
                elif len(input_ids) >= self._max_context_length:
                    finish_reason = "context"

                yield streamer.emit(
                    token_text,
                    next_token,
                    done=finish_reason is not None,
                    finish_reason=finish_reason,
                )

                if finish_reason is not None:
                    return
        finally:
            self._state = GenerationState.STOPPED

    @torch.no_grad()
    def _forward(self, token_ids: list[int]) -> torch.Tensor:
        """
        Run the model and return the logits for the last position, shape [vocab_size].

        no_grad keeps the call from building an autograd graph, and eval()
        (set once in __init__) switches dropout off.
        """
        input_tensor = torch.tensor([token_ids], dtype=torch.long, device=self._device)
        output = self._model(input_tensor)
        return output[0, -1, :]

    def _encode(self, prompt: str) -> list[int]:
        self._state = GenerationState.ENCODING
        prompt_ids = encode(self._tokenizer, prompt, add_special_tokens=True)
        if not prompt_ids:
            self._state = GenerationState.STOPPED
            raise ValueError("Prompt encodes to zero tokens; nothing to condition on")
        return prompt_ids

    def _strip_prompt(self, prompt: str, prompt_ids: list[int], generated_ids: list[int]) -> str:
        """Decode prompt + continuation, then drop the prompt text from the front."""
        full_text = decode(self._tokenizer, prompt_ids + generated_ids)
        for prefix in (decode(self._tokenizer, prompt_ids), prompt):
            if prefix and full_text.startswith(prefix):
                return full_text[len(prefix):]
        return decode(self._tokenizer, generated_ids)

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Response schemas for Cognito generation.

Plain dataclasses, not pydantic: these are runtime values handed from the
engine to whoever is consuming it (the interactive CLI, tests), not config.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class GenerateResponse:
    """What comes back once a generation call has stopped."""

    text: str
    tokens_generated: int
    prompt_tokens: int
    total_time_ms: float
    tokens_per_second: float
    finish_reason: str = "length"


@dataclass(frozen=True)
class StreamChunk:
    """
    A single piece of a streaming response.

    Each chunk carries one newly decoded token. The last chunk of a call has
    done=True and says why generation stopped.
    """

    token_text: str
    token_id: int
    position: int
    elapsed_ms: float
    done: bool = False
    finish_reason: str | None = None

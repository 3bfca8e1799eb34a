# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Streaming token emitter.

Each token is handed to the consumer as soon as it is decoded instead of
after the whole answer is ready. The interactive CLI writes every chunk to
stdout the moment it arrives.
"""

import time

from cognito.serving.api.schema import StreamChunk


class TokenStreamer:
    """
    Packages generated tokens as StreamChunks with a position and timing.

    One streamer per generation call.
    """

    def __init__(self) -> None:
        self._position: int = 0
        self._start_time: float = time.monotonic()

    @property
    def token_count(self) -> int:
        return self._position

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self._start_time) * 1000.0

    def emit(
        self,
        token_text: str,
        token_id: int,
        done: bool = False,
        finish_reason: str | None = None,
    ) -> StreamChunk:
        """Create the chunk for a newly generated token and advance the position."""
        chunk = StreamChunk(
            token_text=token_text,
            token_id=token_id,
            position=self._position,
            elapsed_ms=self.elapsed_ms,
            done=done,
            finish_reason=finish_reason,
        )
        self._position += 1
        return chunk

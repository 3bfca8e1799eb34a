# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for ReasoningAgent, the generation session.

Uses zeroed models whose output bias fixes the greedy choice, so every stop
condition can be triggered on purpose.
"""

import pytest
import torch
from tokenizers import Tokenizer

from cognito.config.schema import GenerationConfig
from cognito.model.transformer import ReasoningModel
from cognito.serving.engine.core import GenerationState, ReasoningAgent

EOS_ID = 15
CAT_ID = 7


def _agent(model: ReasoningModel, tokenizer: Tokenizer, max_context_length: int = 8, **overrides) -> ReasoningAgent:
    settings = {"max_tokens": 4, "eos_token_ids": [EOS_ID]}
    settings.update(overrides)
    return ReasoningAgent(
        model=model,
        tokenizer=tokenizer,
        device=torch.device("cpu"),
        max_context_length=max_context_length,
        config=GenerationConfig(**settings),
    )


class TestDeterminism:
    def test_zero_model_greedy_is_reproducible(self, zero_model: ReasoningModel, word_tokenizer: Tokenizer) -> None:
        """Greedy decoding on an all-zero model gives the same ids every run and halts."""
        agent = _agent(zero_model, word_tokenizer, max_tokens=5)
        runs = [[chunk.token_id for chunk in agent.generate_stream("a")] for _ in range(3)]
        assert runs[0] == runs[1] == runs[2]
        assert 0 < len(runs[0]) <= 5
        assert runs[0] == [0] * len(runs[0])

    def test_perturbed_is_reproducible_for_seed(self, zero_model: ReasoningModel, word_tokenizer: Tokenizer) -> None:
        agent = _agent(zero_model, word_tokenizer, strategy="perturbed", seed=11)
        first = agent.generate("the cat")
        second = agent.generate("the cat")
        assert first.text == second.text
        assert first.tokens_generated == second.tokens_generated


class TestStopConditions:
    def test_stops_at_eos(self, biased_model_factory, word_tokenizer: Tokenizer) -> None:
        agent = _agent(biased_model_factory(EOS_ID), word_tokenizer)
        response = agent.generate("the cat")
        assert response.finish_reason == "eos"
        assert response.tokens_generated == 1
        assert response.text.strip() == ""

    def test_stops_at_max_tokens(self, biased_model_factory, word_tokenizer: Tokenizer) -> None:
        agent = _agent(biased_model_factory(CAT_ID), word_tokenizer, max_tokens=3)
        response = agent.generate("the")
        assert response.finish_reason == "length"
        assert response.tokens_generated == 3

    def test_stops_when_context_fills(self, biased_model_factory, word_tokenizer: Tokenizer) -> None:
        """Reaching the context ceiling ends generation quietly."""
        agent = _agent(biased_model_factory(CAT_ID), word_tokenizer, max_context_length=4, max_tokens=10)
        response = agent.generate("the dog")
        assert response.finish_reason == "context"
        assert response.prompt_tokens == 2
        assert response.tokens_generated == 2

    def test_prompt_already_at_context_limit(self, biased_model_factory, word_tokenizer: Tokenizer) -> None:
        agent = _agent(biased_model_factory(CAT_ID), word_tokenizer, max_context_length=3)
        assert list(agent.generate_stream("the dog ran")) == []
        response = agent.generate("the dog ran")
        assert response.finish_reason == "context"
        assert response.tokens_generated == 0
        assert response.text == ""

    def test_stops_on_newline_in_prose_mode(self, biased_model_factory, word_tokenizer_factory) -> None:
        words = ["<pad>", "the", "cat", "\n", "<unk>", "<eos>"]
        tokenizer = word_tokenizer_factory(words)
        model = biased_model_factory(3, vocab_size=16)
        agent = _agent(model, tokenizer, stop_on_newline=True, eos_token_ids=[5], max_tokens=5)
        response = agent.generate("the cat")
        assert response.finish_reason == "newline"
        assert response.tokens_generated == 1

    def test_newline_ignored_outside_prose_mode(self, biased_model_factory, word_tokenizer_factory) -> None:
        words = ["<pad>", "the", "cat", "\n", "<unk>", "<eos>"]
        tokenizer = word_tokenizer_factory(words)
        model = biased_model_factory(3, vocab_size=16)
        agent = _agent(model, tokenizer, stop_on_newline=False, eos_token_ids=[5], max_tokens=3)
        assert agent.generate("the cat").finish_reason == "length"


class TestOutput:
    def test_prompt_stripped_from_text(self, biased_model_factory, word_tokenizer: Tokenizer) -> None:
        agent = _agent(biased_model_factory(CAT_ID), word_tokenizer, max_tokens=2)
        response = agent.generate("the dog")
        assert response.text.strip() == "cat cat"
        assert "dog" not in response.text

    def test_stream_chunks(self, biased_model_factory, word_tokenizer: Tokenizer) -> None:
        agent = _agent(biased_model_factory(CAT_ID), word_tokenizer, max_tokens=3)
        chunks = list(agent.generate_stream("the"))
        assert [chunk.position for chunk in chunks] == [0, 1, 2]
        assert [chunk.token_text for chunk in chunks] == ["cat", "cat", "cat"]
        assert [chunk.done for chunk in chunks] == [False, False, True]
        assert chunks[-1].finish_reason == "length"

    def test_state_returns_to_stopped(self, biased_model_factory, word_tokenizer: Tokenizer) -> None:
        agent = _agent(biased_model_factory(CAT_ID), word_tokenizer)
        stream = agent.generate_stream("the")
        next(stream)
        assert agent.state is GenerationState.DECODING
        list(stream)
        assert agent.state is GenerationState.STOPPED

    def test_repetition_penalty_moves_to_runner_up(self, biased_model_factory, word_tokenizer: Tokenizer) -> None:
        model = biased_model_factory(CAT_ID, runner_up=11)
        agent = _agent(model, word_tokenizer, max_tokens=1, repetition_penalty=5.0)
        chunks = list(agent.generate_stream("the cat"))
        assert chunks[0].token_id == 11

    def test_empty_prompt_rejected(self, zero_model: ReasoningModel, word_tokenizer: Tokenizer) -> None:
        agent = _agent(zero_model, word_tokenizer)
        with pytest.raises(ValueError):
            agent.generate("   ")
        assert agent.state is GenerationState.STOPPED
        assert agent.generate("a").tokens_generated > 0

    def test_invalid_context_length_rejected(self, zero_model: ReasoningModel, word_tokenizer: Tokenizer) -> None:
        with pytest.raises(ValueError):
            _agent(zero_model, word_tokenizer, max_context_length=0)

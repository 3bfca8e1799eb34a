# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the pydantic config schema."""

import pytest
from pydantic import ValidationError

from cognito.config.schema import CognitoConfig, DataConfig, GenerationConfig, ModelConfig, TrainConfig


class TestDefaults:
    def test_empty_config_is_valid(self) -> None:
        config = CognitoConfig()
        assert config.global_config.seed == 42
        assert config.model.d_model == 1024
        assert config.data.max_seq_len == 128
        assert config.train.checkpoint_name == "cognito_model"
        assert config.generation.strategy == "greedy"

    def test_global_alias(self) -> None:
        config = CognitoConfig.model_validate({"global": {"seed": 7}})
        assert config.global_config.seed == 7


class TestValidation:
    def test_head_split_enforced(self) -> None:
        with pytest.raises(ValidationError, match="divisible"):
            ModelConfig(num_heads=3, d_model=8)

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            TrainConfig(warmup_steps=100)

    def test_frozen(self) -> None:
        config = DataConfig()
        with pytest.raises(ValidationError):
            config.max_seq_len = 4  # type: ignore[misc]

    def test_unknown_strategy_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(strategy="beam")

    def test_batch_width_must_fit_model(self) -> None:
        with pytest.raises(ValidationError, match="max_seq_len"):
            CognitoConfig.model_validate(
                {"model": {"num_heads": 2, "d_model": 8, "max_seq_len": 8}, "data": {"max_seq_len": 16}}
            )

    def test_pad_id_must_be_in_vocab(self) -> None:
        with pytest.raises(ValidationError, match="pad_token_id"):
            CognitoConfig.model_validate(
                {
                    "model": {"num_heads": 2, "d_model": 8, "vocab_size": 16},
                    "data": {"pad_token_id": 16},
                }
            )

    def test_context_length_must_fit_model(self) -> None:
        with pytest.raises(ValidationError, match="max_context_length"):
            CognitoConfig.model_validate({"generation": {"max_context_length": 4096}})

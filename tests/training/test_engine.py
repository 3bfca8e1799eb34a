# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the training engine.

One optimizer step on a single batch must not increase that batch's loss,
and a full run must honor the epoch count, the per-epoch step cap and the
checkpoint-after-every-epoch rule.
"""

import json
from pathlib import Path

import pytest
import torch
from tokenizers import Tokenizer

from cognito.config.schema import CognitoConfig, TrainConfig
from cognito.data.batcher.core import build_batch
from cognito.data.dataset.core import TextFileDataset
from cognito.data.exceptions import (
    DataError,
    DatasetNotFoundError,
    EmptyBatchError,
    EmptyDatasetError,
    TokenizerMismatchError,
    TokenOutOfRangeError,
)
from cognito.model.config import TransformerModelConfig
from cognito.model.transformer import ReasoningModel
from cognito.training.checkpoint.core import METADATA_FILE, WEIGHTS_FILE
from cognito.training.engine.core import build_model_config, run_training, train_step
from cognito.training.objectives import next_token_loss
from cognito.training.optimizer.core import create_optimizer


class TestTrainStep:
    def test_single_step_does_not_increase_loss(self, tiny_model_config: TransformerModelConfig) -> None:
        """With lr > 0 and non-zero gradients, loss on the same batch goes down (or stays)."""
        model = ReasoningModel(tiny_model_config)
        optimizer = create_optimizer(model, TrainConfig(learning_rate=1e-4))
        batch = build_batch([[1, 6, 7, 8, 9, 6, 10]], max_seq_len=8, vocab_size=16)

        with torch.no_grad():
            before = next_token_loss(model(batch.inputs), batch.targets).item()
        step_loss = train_step(model, optimizer, batch, pad_token_id=0)
        with torch.no_grad():
            after = next_token_loss(model(batch.inputs), batch.targets).item()

        assert step_loss.item() == pytest.approx(before, rel=1e-5)
        assert after <= before + 1e-6

    def test_gradients_cleared_after_step(self, tiny_model_config: TransformerModelConfig) -> None:
        model = ReasoningModel(tiny_model_config)
        optimizer = create_optimizer(model, TrainConfig())
        batch = build_batch([[1, 2, 3, 4]], max_seq_len=8, vocab_size=16)
        train_step(model, optimizer, batch)
        assert all(p.grad is None for p in model.parameters())

    def test_repeated_steps_fit_a_batch(self, tiny_model_config: TransformerModelConfig) -> None:
        model = ReasoningModel(tiny_model_config)
        optimizer = create_optimizer(model, TrainConfig(learning_rate=1e-2))
        batch = build_batch([[6, 7, 8, 9, 6, 10]], max_seq_len=8, vocab_size=16)
        first = train_step(model, optimizer, batch).item()
        for _ in range(50):
            last = train_step(model, optimizer, batch).item()
        assert last < first


class TestBuildModelConfig:
    def test_copies_sections(self, tiny_cognito_config: CognitoConfig) -> None:
        model_config = build_model_config(tiny_cognito_config)
        assert model_config.d_model == 8
        assert model_config.num_heads == 2
        assert model_config.vocab_size == 16
        assert model_config.seed == 42


class TestRunTraining:
    def test_checkpoints_after_training(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer
    ) -> None:
        result = run_training(tiny_cognito_config, tokenizer=word_tokenizer)

        # 6 usable lines, batch size 2
        assert result.epochs_completed == 1
        assert result.total_steps == 3
        assert result.total_tokens > 0
        assert torch.isfinite(torch.tensor(result.final_loss))

        ckpt = Path(result.checkpoint_path)
        assert ckpt == tmp_path / "checkpoints" / "cognito_model"
        assert (ckpt / WEIGHTS_FILE).is_file()
        meta = json.loads((ckpt / METADATA_FILE).read_text(encoding="utf-8"))
        assert meta["global_step"] == 3
        assert meta["epoch"] == 1

    def test_max_steps_per_epoch_stops_early(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer
    ) -> None:
        config = tiny_cognito_config.model_copy(
            update={"train": tiny_cognito_config.train.model_copy(update={"max_steps_per_epoch": 1, "num_epochs": 2})}
        )
        result = run_training(config, tokenizer=word_tokenizer, checkpoint_dir=tmp_path / "ckpt")
        assert result.epochs_completed == 2
        assert result.total_steps == 2
        meta = json.loads((tmp_path / "ckpt" / "cognito_model" / METADATA_FILE).read_text(encoding="utf-8"))
        assert meta["epoch"] == 2

    def test_explicit_dataset(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer
    ) -> None:
        dataset = TextFileDataset.from_lines(["the cat sat on the mat", "the dog ran far"])
        result = run_training(
            tiny_cognito_config, tokenizer=word_tokenizer, dataset=dataset, checkpoint_dir=tmp_path / "ckpt"
        )
        assert result.total_steps == 1

    def test_same_seed_same_loss(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer
    ) -> None:
        first = run_training(tiny_cognito_config, tokenizer=word_tokenizer, checkpoint_dir=tmp_path / "a")
        second = run_training(tiny_cognito_config, tokenizer=word_tokenizer, checkpoint_dir=tmp_path / "b")
        assert first.final_loss == pytest.approx(second.final_loss, rel=1e-6)

    def test_tokenizer_larger_than_model_rejected(
        self, tiny_cognito_config: CognitoConfig, word_tokenizer_factory
    ) -> None:
        big = word_tokenizer_factory([f"w{i}" for i in range(20)] + ["<unk>"])
        with pytest.raises(TokenizerMismatchError):
            run_training(tiny_cognito_config, tokenizer=big)

    def test_missing_dataset_rejected(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer
    ) -> None:
        config = tiny_cognito_config.model_copy(
            update={"data": tiny_cognito_config.data.model_copy(update={"dataset_path": str(tmp_path / "nope.txt")})}
        )
        with pytest.raises(DatasetNotFoundError):
            run_training(config, tokenizer=word_tokenizer)

    @pytest.mark.parametrize("shuffle", [True, False])
    def test_empty_dataset_is_a_data_error(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer, shuffle: bool
    ) -> None:
        config = tiny_cognito_config.model_copy(
            update={"data": tiny_cognito_config.data.model_copy(update={"shuffle": shuffle})}
        )
        with pytest.raises(EmptyDatasetError, match="nothing to train on"):
            run_training(
                config,
                tokenizer=word_tokenizer,
                dataset=TextFileDataset.from_lines([]),
                checkpoint_dir=tmp_path / "ckpt",
            )
        assert not (tmp_path / "ckpt").exists()

    def test_all_lines_filtered_out_names_the_file(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer
    ) -> None:
        path = tmp_path / "short.txt"
        path.write_text("a b\nc\n", encoding="utf-8")
        config = tiny_cognito_config.model_copy(
            update={"data": tiny_cognito_config.data.model_copy(update={"dataset_path": str(path)})}
        )
        with pytest.raises(EmptyDatasetError) as exc_info:
            run_training(config, tokenizer=word_tokenizer)
        assert str(path) in str(exc_info.value)
        assert "5 characters" in str(exc_info.value)


class TestWorkerBuiltBatchErrors:
    """Errors raised while a background worker builds a batch keep their type."""

    def _worker_config(self, config: CognitoConfig, **data_updates: object) -> CognitoConfig:
        data = config.data.model_copy(update={"num_workers": 1, "prefetch_factor": 2, **data_updates})
        return config.model_copy(update={"data": data})

    def test_out_of_range_id_from_worker(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer
    ) -> None:
        config = self._worker_config(tiny_cognito_config, append_eos_id=40)
        with pytest.raises(TokenOutOfRangeError) as exc_info:
            run_training(config, tokenizer=word_tokenizer, checkpoint_dir=tmp_path / "ckpt")
        assert isinstance(exc_info.value, DataError)
        assert "40" in str(exc_info.value)

    def test_empty_batch_from_worker(
        self, tmp_path: Path, tiny_cognito_config: CognitoConfig, word_tokenizer: Tokenizer
    ) -> None:
        config = self._worker_config(tiny_cognito_config)
        with pytest.raises(EmptyBatchError) as exc_info:
            run_training(
                config,
                tokenizer=word_tokenizer,
                dataset=TextFileDataset.from_lines(["cat", "dog"]),
                checkpoint_dir=tmp_path / "ckpt",
            )
        assert isinstance(exc_info.value, DataError)
        assert "at least 2 tokens" in str(exc_info.value)

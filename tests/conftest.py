# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for Cognito tests.

Fixtures here are available to every test file automatically. The tokenizer
is a real HuggingFace WordLevel tokenizer built in-process, so nothing is
downloaded and ids are easy to reason about:

    <pad>=0 a=1 b=2 c=3 d=4 e=5 the=6 cat=7 sat=8 on=9
    mat=10 dog=11 ran=12 far=13 <unk>=14 <eos>=15
"""

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from tokenizers import Tokenizer
from tokenizers.models import WordLevel
from tokenizers.pre_tokenizers import Whitespace

from cognito.config.schema import CognitoConfig, DataConfig, ModelConfig, TokenizerConfig, TrainConfig
from cognito.model.config import TransformerModelConfig

WORDS = [
    "<pad>", "a", "b", "c", "d", "e", "the", "cat",
    "sat", "on", "mat", "dog", "ran", "far", "<unk>", "<eos>",
]
SPECIAL_TOKENS = ["<pad>", "<unk>", "<eos>"]
PAD_ID = 0
EOS_ID = 15


def _build_word_tokenizer(words: list[str]) -> Tokenizer:
    vocab = {word: idx for idx, word in enumerate(words)}
    tokenizer = Tokenizer(WordLevel(vocab=vocab, unk_token="<unk>"))
    tokenizer.pre_tokenizer = Whitespace()
    tokenizer.add_special_tokens([tok for tok in SPECIAL_TOKENS if tok in vocab])
    return tokenizer


@pytest.fixture()
def word_tokenizer() -> Tokenizer:
    """The 16-id WordLevel tokenizer described in the module docstring."""
    return _build_word_tokenizer(WORDS)


@pytest.fixture()
def word_tokenizer_factory() -> Callable[[list[str]], Tokenizer]:
    """Build a WordLevel tokenizer over an arbitrary word list (index = id)."""
    return _build_word_tokenizer


@pytest.fixture()
def tokenizer_file(tmp_path: Path, word_tokenizer: Tokenizer) -> Path:
    """The word tokenizer saved as tokenizer.json."""
    path = tmp_path / "tokenizer.json"
    word_tokenizer.save(str(path))
    return path


@pytest.fixture()
def tiny_model_config() -> TransformerModelConfig:
    """A miniature model matching the 16-id test tokenizer. Runs instantly on CPU."""
    return TransformerModelConfig(
        num_heads=2,
        d_model=8,
        num_layers=1,
        vocab_size=16,
        max_seq_len=8,
        dropout=0.0,
        seed=42,
    )


@pytest.fixture()
def dataset_file(tmp_path: Path) -> Path:
    """A small newline-delimited dataset built from the test vocabulary."""
    lines = [
        "the cat sat on the mat",
        "the dog ran far",
        "a b c d e",
        "x",
        "the cat ran on the mat",
        "",
        "a dog sat on a cat",
        "the mat ran far",
    ]
    path = tmp_path / "dataset.txt"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture()
def tiny_cognito_config(tmp_path: Path, tokenizer_file: Path, dataset_file: Path) -> CognitoConfig:
    """A full config for the tiny model, pointing at temp files only."""
    return CognitoConfig.model_validate(
        {
            "global": {
                "seed": 42,
                "log_level": "INFO",
                "directories": {
                    "checkpoints": str(tmp_path / "checkpoints"),
                    "logs": str(tmp_path / "logs"),
                },
            },
            "model": ModelConfig(
                num_heads=2, d_model=8, num_layers=1, vocab_size=16, max_seq_len=8, dropout=0.0
            ).model_dump(),
            "tokenizer": TokenizerConfig(tokenizer_path=str(tokenizer_file)).model_dump(),
            "data": DataConfig(
                dataset_path=str(dataset_file),
                min_line_chars=5,
                max_seq_len=8,
                num_workers=0,
            ).model_dump(),
            "train": TrainConfig(
                batch_size=2,
                num_epochs=1,
                learning_rate=1e-3,
                max_steps_per_epoch=100,
                log_interval=1,
            ).model_dump(),
            "generation": {"max_tokens": 4, "eos_token_ids": [EOS_ID]},
        }
    )


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """
    Create a minimal valid config YAML file in a temp directory.

    Tests that need specific config values should write their own files.
    """
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          project_name: "cognito-test"
          seed: 42
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (heads don't divide d_model)."""
    config_content = textwrap.dedent("""\
        model:
          num_heads: 3
          d_model: 8
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    """A file that isn't valid YAML at all."""
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file

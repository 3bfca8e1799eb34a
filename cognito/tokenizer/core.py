# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tokenizer access for Cognito.

The tokenizer is an external collaborator. We use the HuggingFace
`tokenizers` library and only ever touch it through the functions here, so
the rest of the code deals in plain lists of ints and strings.

Every call to encode() with the same tokenizer and the same text produces the
same token IDs. decode(encode(text)) gives back the original text up to the
tokenizer's own normalization.
"""

import logging
from pathlib import Path

from tokenizers import Tokenizer

from cognito.config.schema import TokenizerConfig
from cognito.data.exceptions import TokenizerMismatchError
from cognito.logging.logger import get_logger

logger: logging.Logger = get_logger(__name__)


def load_tokenizer(config: TokenizerConfig) -> Tokenizer:
    """
    Load the tokenizer described by the config.

    A local tokenizer.json is preferred. Without one, the pretrained
    tokenizer is pulled by name (this needs network access the first time).

    Raises:
        FileNotFoundError: If tokenizer_path is set but doesn't exist.
    """
    if config.tokenizer_path is not None:
        path = Path(config.tokenizer_path)
        if not path.is_file():
            raise FileNotFoundError(f"Tokenizer file not found: {path}")
        tokenizer = Tokenizer.from_file(str(path))
        source = str(path)
    else:
        tokenizer = Tokenizer.from_pretrained(config.pretrained_name)
        source = config.pretrained_name

    logger.info(
        "Tokenizer loaded",
        extra={"source": source, "vocab_size": tokenizer.get_vocab_size(with_added_tokens=True)},
    )
    return tokenizer


def encode(tokenizer: Tokenizer, text: str, add_special_tokens: bool = True) -> list[int]:
    """Encode a single text string into a list of token IDs."""
    return tokenizer.encode(text, add_special_tokens=add_special_tokens).ids


def encode_batch(
    tokenizer: Tokenizer,
    texts: list[str],
    add_special_tokens: bool = True,
) -> list[list[int]]:
    """
    Encode multiple texts in one call.

    The underlying Rust implementation parallelizes batch encoding, so this
    is the path the batcher uses.
    """
    encodings = tokenizer.encode_batch(texts, add_special_tokens=add_special_tokens)
    return [enc.ids for enc in encodings]


def decode(tokenizer: Tokenizer, ids: list[int], skip_special_tokens: bool = True) -> str:
    """Decode a list of token IDs back into a text string."""
    return tokenizer.decode(ids, skip_special_tokens=skip_special_tokens)


def check_vocab_compatibility(tokenizer: Tokenizer, vocab_size: int) -> None:
    """
    Make sure every id the tokenizer can produce has a row in the embedding table.

    A tokenizer larger than the model would otherwise only show up as an
    index error (or silent garbage on some backends) the first time a rare
    token appears in a batch.

    Raises:
        TokenizerMismatchError: If the tokenizer vocabulary exceeds vocab_size.
    """
    tokenizer_vocab = tokenizer.get_vocab_size(with_added_tokens=True)
    if tokenizer_vocab > vocab_size:
        raise TokenizerMismatchError(
            f"Tokenizer has {tokenizer_vocab} ids but the model vocabulary is only "
            f"{vocab_size}; raise model.vocab_size or use a smaller tokenizer"
        )
    logger.debug(
        "Tokenizer vocabulary fits model",
        extra={"tokenizer_vocab": tokenizer_vocab, "model_vocab": vocab_size},
    )

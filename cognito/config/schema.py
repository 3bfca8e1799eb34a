# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for Cognito.

Every config section gets its own frozen pydantic model. Frozen means once you
create it, you cannot mutate it. Hyperparameters are created once at process
start and never touched again.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Unlike a multi-stage pipeline, every section here has working defaults, so
`cognito train` with no YAML at all reproduces the reference setup: a
24-layer, 1024-wide model over the GPT-4 tokenizer, trained on dataset.txt.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DirectoryConfig(BaseModel):
    """Paths to the standard project directories, all relative to the working directory."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    checkpoints: str = Field(default="checkpoints", description="Saved model states")
    logs: str = Field(default="logs", description="System and debug logs")


class GlobalConfig(BaseModel):
    """
    Cross-cutting settings that apply to the entire system.

    Controls reproducibility (seed), observability (log_level) and
    where artifacts land.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        default="1.0.0",
        description="Schema version for compatibility tracking",
    )
    project_name: str = Field(default="cognito", description="Human-readable project identifier")
    seed: int = Field(
        default=42,
        ge=0,
        description="Global random seed propagated to all subsystems",
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )
    directories: DirectoryConfig = Field(default_factory=DirectoryConfig)


class ModelConfig(BaseModel):
    """
    Neural architecture hyperparameters.

    The head dimension is d_model // num_heads, so d_model has to be an exact
    multiple of num_heads. That gets checked here, at load time, rather than
    deep inside the first forward pass.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    num_heads: int = Field(default=8, ge=1, description="Number of attention heads")
    d_model: int = Field(default=1024, ge=1, description="Model hidden dimension")
    num_layers: int = Field(default=24, ge=1, description="Number of transformer blocks")
    vocab_size: int = Field(
        default=102400,
        ge=2,
        description="Vocabulary size, large enough to hold every GPT-4 tokenizer id",
    )
    max_seq_len: int = Field(
        default=1024,
        ge=1,
        description="Size of the positional embedding table (context window)",
    )
    dropout: float = Field(default=0.1, ge=0.0, lt=1.0, description="Dropout probability")
    norm_eps: float = Field(default=1e-5, gt=0.0, description="Epsilon for RMSNorm")
    init_std: float = Field(
        default=0.02,
        gt=0.0,
        description="Standard deviation for weight initialization",
    )

    @model_validator(mode="after")
    def _check_head_split(self) -> "ModelConfig":
        if self.d_model % self.num_heads != 0:
            raise ValueError(
                f"d_model ({self.d_model}) must be divisible by num_heads ({self.num_heads})"
            )
        return self


class TokenizerConfig(BaseModel):
    """
    Where the tokenizer comes from.

    A local tokenizer.json wins when tokenizer_path is set. Otherwise the
    named pretrained tokenizer is fetched through the tokenizers hub client.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    pretrained_name: str = Field(
        default="Xenova/gpt-4",
        description="Hub identifier used when no local tokenizer file is given",
    )
    tokenizer_path: Optional[str] = Field(
        default=None,
        description="Path to a serialized tokenizer.json",
    )


class DataConfig(BaseModel):
    """Dataset file, line filtering and batching contract."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    dataset_path: str = Field(default="dataset.txt", description="Newline-delimited raw text")
    min_line_chars: int = Field(
        default=50,
        ge=0,
        description="Lines whose stripped length is at or below this are discarded",
    )
    max_seq_len: int = Field(
        default=128,
        ge=1,
        description="Longest input/target width the batcher will produce",
    )
    pad_token_id: int = Field(
        default=0,
        ge=0,
        description="Reserved id written into padded positions of inputs and targets",
    )
    append_eos_id: Optional[int] = Field(
        default=None,
        ge=0,
        description="When set, appended to every sequence before the input/target split",
    )
    shuffle: bool = Field(default=True, description="Shuffle line order each epoch")
    num_workers: int = Field(
        default=0,
        ge=0,
        description="Background batch-building workers (0 builds batches inline)",
    )
    prefetch_factor: int = Field(
        default=2,
        ge=1,
        description="Batches each worker keeps ready ahead of the training loop",
    )


class TrainConfig(BaseModel):
    """Training hyperparameters and loop policy."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    batch_size: int = Field(default=2, ge=1, description="Lines per batch")
    num_epochs: int = Field(default=1, ge=1, description="Passes over the dataset")
    learning_rate: float = Field(default=1e-4, gt=0.0, description="Fixed AdamW learning rate")
    weight_decay: float = Field(default=1e-5, ge=0.0, description="AdamW weight decay")
    beta1: float = Field(default=0.9, ge=0.0, lt=1.0, description="AdamW beta1")
    beta2: float = Field(default=0.999, ge=0.0, lt=1.0, description="AdamW beta2")
    max_steps_per_epoch: int = Field(
        default=10_000,
        ge=1,
        description="Iterations after which an epoch stops early and checkpoints",
    )
    log_interval: int = Field(default=10, ge=1, description="Log loss every N iterations")
    checkpoint_name: str = Field(
        default="cognito_model",
        min_length=1,
        description="Fixed artifact name the trained weights are saved under",
    )


class GenerationConfig(BaseModel):
    """Decoding settings used by the interactive session."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    max_tokens: int = Field(default=256, ge=1, description="Upper bound on generated tokens")
    strategy: Literal["greedy", "perturbed", "multinomial"] = Field(
        default="greedy",
        description="Token selection policy",
    )
    temperature: float = Field(
        default=0.0,
        ge=0.0,
        description="Logit divisor; 0 disables scaling",
    )
    repetition_penalty: float = Field(
        default=0.0,
        ge=0.0,
        description="Constant subtracted from logits of recently seen ids; 0 disables",
    )
    repetition_window: int = Field(default=64, ge=1, description="How many recent ids are penalized")
    noise_scale: float = Field(
        default=0.05,
        ge=0.0,
        description="Uniform noise amplitude for the perturbed strategy",
    )
    stop_on_newline: bool = Field(
        default=False,
        description="Prose-continuation mode: stop once a newline is generated",
    )
    eos_token_ids: list[int] = Field(
        default_factory=lambda: [50256, 100257],
        description="Ids that end generation (GPT-2 and GPT-4 end-of-text)",
    )
    max_context_length: Optional[int] = Field(
        default=None,
        ge=1,
        description="Hard ceiling on sequence length; defaults to model.max_seq_len",
    )
    seed: int = Field(default=42, ge=0, description="Seed for the sampling noise source")


class CognitoConfig(BaseModel):
    """
    Top-level config container.

    A YAML file may hold any subset of sections. Missing sections fall back
    to their defaults, so an empty file (or no file) is a valid config.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        populate_by_name=True,
    )

    global_config: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    model: ModelConfig = Field(default_factory=ModelConfig)
    tokenizer: TokenizerConfig = Field(default_factory=TokenizerConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    train: TrainConfig = Field(default_factory=TrainConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    @model_validator(mode="after")
    def _check_cross_sections(self) -> "CognitoConfig":
        if self.data.max_seq_len > self.model.max_seq_len:
            raise ValueError(
                f"data.max_seq_len ({self.data.max_seq_len}) exceeds "
                f"model.max_seq_len ({self.model.max_seq_len})"
            )
        if self.data.pad_token_id >= self.model.vocab_size:
            raise ValueError(
                f"data.pad_token_id ({self.data.pad_token_id}) is outside the "
                f"vocabulary (vocab_size={self.model.vocab_size})"
            )
        context = self.generation.max_context_length
        if context is not None and context > self.model.max_seq_len:
            raise ValueError(
                f"generation.max_context_length ({context}) exceeds "
                f"model.max_seq_len ({self.model.max_seq_len})"
            )
        return self

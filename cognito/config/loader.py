# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
YAML to CognitoConfig.

A missing --config means defaults; anything else must be a readable YAML
mapping whose keys are the config sections (global, model, tokenizer, data,
train, generation). Every failure surfaces as a ConfigError subclass before a
model is built or a dataset is opened.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cognito.config.exceptions import ConfigLoadError, ConfigValidationError
from cognito.config.schema import CognitoConfig


def _read_yaml_file(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML file and return the parsed dict.

    An empty file parses to None, which we treat as "all defaults".

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't valid YAML.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping (dict), got {type(parsed).__name__}"
        )

    return parsed


def validate_config(raw_data: dict[str, Any], source: str = "<dict>") -> CognitoConfig:
    """
    Validate an already-parsed mapping into a CognitoConfig.

    Raises:
        ConfigValidationError: Schema violations (missing fields, wrong types,
            unknown keys, d_model not divisible by num_heads).
    """
    try:
        return CognitoConfig.model_validate(raw_data)
    except ValidationError as err:
        locations = tuple(".".join(str(part) for part in item["loc"]) for item in err.errors())
        raise ConfigValidationError(
            f"Config validation failed for {source}:\n{err}", locations=locations
        ) from err


def load_config(config_path: Path | None) -> CognitoConfig:
    """
    Load, validate, and freeze a config file into a CognitoConfig object.

    Passing None returns the default configuration, which is what the CLI
    does when no --config flag is given.

    Raises:
        ConfigLoadError: File I/O or YAML parse failures.
        ConfigValidationError: Schema violations.
    """
    if config_path is None:
        return CognitoConfig()

    raw_data = _read_yaml_file(config_path)
    return validate_config(raw_data, source=str(config_path))

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Configuration errors. The CLI maps every ConfigError to exit code 2."""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """The YAML file is missing, unreadable, not YAML, or not a mapping."""


class ConfigValidationError(ConfigError):
    """
    The YAML parsed but the values don't fit the Cognito schema.

    `locations` lists the dotted field paths pydantic complained about
    (e.g. "model.num_heads"), so callers can report them without parsing
    the message.
    """

    def __init__(self, message: str, locations: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.locations = locations

# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for Cognito.

Relative paths in the config (dataset file, checkpoint directory, log file)
are resolved against the directory the command runs from, so a plain
`dataset.txt` means the file in the working directory.
"""

from pathlib import Path


def resolve_path(path: str | Path, base: Path | None = None) -> Path:
    """
    Turn a config path into an absolute one.

    Absolute paths pass through unchanged. Relative ones are joined onto
    `base`, or onto the current working directory when no base is given.
    """
    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    root = base if base is not None else Path.cwd()
    return (root / candidate).resolve()


def ensure_directory(path: Path) -> Path:
    """
    Create a directory (and parents) if it doesn't exist. Returns the path for chaining.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path

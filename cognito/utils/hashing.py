# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""SHA256 of checkpoint weight files, recorded on save and checked on load."""

import hashlib
from pathlib import Path

_READ_CHUNK = 1 << 16


def compute_sha256(file_path: Path) -> str:
    """Hex digest of a file, streamed so large weight files never sit in memory whole."""
    digest = hashlib.sha256()
    with open(file_path, "rb") as handle:
        for block in iter(lambda: handle.read(_READ_CHUNK), b""):
            digest.update(block)
    return digest.hexdigest()


def verify_checksum(file_path: Path, expected_hash: str) -> bool:
    return compute_sha256(file_path) == expected_hash.strip().lower()

#!/usr/bin/env python3
"""File digests for package integrity manifests."""

from __future__ import annotations

import hashlib
from pathlib import Path

CHUNK_SIZE = 1024 * 1024


def md5_digest(path: Path) -> bytes:
    """Return the 16-byte MD5 digest of a file's contents.

    MD5 is what dpkg expects in ``md5sums``; it is not used for security.
    """
    digest = hashlib.md5(usedforsecurity=False)
    with path.open("rb") as handle:
        while True:
            chunk = handle.read(CHUNK_SIZE)
            if not chunk:
                break
            digest.update(chunk)
    return digest.digest()


def md5_hexdigest(path: Path) -> str:
    return md5_digest(path).hex()

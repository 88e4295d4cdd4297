"""Content hashing and canonical serialization helpers.

``parse_hash128`` is the default hash string parser used when decoding
description documents and staged file names. Callers with a different
hash format pass their own ``HashParser``.
"""

from __future__ import annotations

import hashlib
import json
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

from bundlewright.errors import InvalidHashError
from bundlewright.models.hashes import ContentHash

HashParser = Callable[[str], ContentHash]

_HASH128_RE = re.compile(r"^[0-9a-fA-F]{32}$")
_ZERO_HASH128 = "0" * 32
_CHUNK_SIZE = 1 << 16


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def parse_hash128(text: str) -> ContentHash:
    """Parse a 128-bit hash written as 32 hex characters.

    The all-zero hash is the "no hash" sentinel and is rejected, as is
    anything that is not exactly 32 hex digits. The result is lowercased.
    """
    if not isinstance(text, str) or not _HASH128_RE.match(text):
        raise InvalidHashError(text)
    normalized = text.lower()
    if normalized == _ZERO_HASH128:
        raise InvalidHashError(text)
    return ContentHash(value=normalized)


def hash128_of_bytes(data: bytes) -> ContentHash:
    """Hash raw bytes into a 128-bit content hash."""
    return ContentHash(value=hashlib.md5(data, usedforsecurity=False).hexdigest())


def hash128_of_file(path: Path) -> ContentHash:
    """Hash a file's contents into a 128-bit content hash, streaming."""
    digest = hashlib.md5(usedforsecurity=False)
    with Path(path).open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return ContentHash(value=digest.hexdigest())

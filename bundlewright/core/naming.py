"""Artifact file naming: ``{name}_{platform}_{hash}.{extension}``.

The platform lets every platform variant of one artifact sit in a single
flat directory, and the hash lets every historical build of it coexist,
so a remote store can hold the published and the in-flight versions at
the same time. ``parse_file_name`` is the exact inverse of ``file_name``.
"""

from __future__ import annotations

from typing import NamedTuple

from bundlewright.core.hasher import HashParser, parse_hash128
from bundlewright.core.platforms import parse_platform_key
from bundlewright.errors import (
    InvalidArtifactNameError,
    InvalidHashError,
    MalformedArtifactNameError,
    UnknownPlatformError,
)
from bundlewright.models.hashes import ContentHash
from bundlewright.models.platforms import PlatformKey
from bundlewright.models.staging import DEFAULT_EXTENSION

SEPARATOR = "_"

_FORBIDDEN_NAME_CHARS = (SEPARATOR, "/", "\\")


class ArtifactFileName(NamedTuple):
    """The decoded parts of an artifact file name."""

    name: str
    platform: PlatformKey
    content_hash: ContentHash


def validate_artifact_name(name: str) -> str:
    """Return *name* unchanged, or raise ``InvalidArtifactNameError``."""
    if not isinstance(name, str) or not name:
        raise InvalidArtifactNameError(str(name), "name must be a non-empty string")
    for char in _FORBIDDEN_NAME_CHARS:
        if char in name:
            raise InvalidArtifactNameError(name, f"name must not contain {char!r}")
    return name


def validate_extension(extension: str) -> str:
    """Return *extension* unchanged, or raise ``ValueError``."""
    if not extension or "." in extension or SEPARATOR in extension:
        raise ValueError(f"Invalid artifact file extension: {extension!r}")
    return extension


def file_name(
    name: str,
    platform: PlatformKey,
    content_hash: ContentHash,
    *,
    extension: str = DEFAULT_EXTENSION,
) -> str:
    """Build the canonical file name for one platform build of an artifact."""
    validate_artifact_name(name)
    validate_extension(extension)
    hash_text = str(content_hash)
    if SEPARATOR in hash_text:
        raise InvalidHashError(hash_text, artifact=name, platform=str(platform))
    return f"{name}{SEPARATOR}{PlatformKey(platform).value}{SEPARATOR}{hash_text}.{extension}"


def parse_file_name(
    text: str,
    *,
    extension: str = DEFAULT_EXTENSION,
    hash_parser: HashParser = parse_hash128,
) -> ArtifactFileName:
    """Decode a file name produced by ``file_name``.

    Raises ``MalformedArtifactNameError`` for anything ``file_name`` could
    not have produced.
    """
    validate_extension(extension)
    suffix = f".{extension}"
    if not text.endswith(suffix):
        raise MalformedArtifactNameError(text, f"expected extension {suffix!r}")

    parts = text[: -len(suffix)].split(SEPARATOR)
    if len(parts) != 3:
        raise MalformedArtifactNameError(
            text, f"expected 3 {SEPARATOR!r}-separated fields, found {len(parts)}"
        )
    name, platform_text, hash_text = parts

    try:
        validate_artifact_name(name)
    except InvalidArtifactNameError as exc:
        raise MalformedArtifactNameError(text, exc.reason) from exc
    try:
        platform = parse_platform_key(platform_text, artifact=name)
    except UnknownPlatformError as exc:
        raise MalformedArtifactNameError(text, str(exc)) from exc
    try:
        content_hash = hash_parser(hash_text)
    except (InvalidHashError, TypeError, ValueError) as exc:
        raise MalformedArtifactNameError(text, str(exc)) from exc

    return ArtifactFileName(name, platform, content_hash)

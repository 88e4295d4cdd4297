"""Description codec — artifact descriptions to and from JSON documents.

Wire shape, one record per artifact::

    {"name": "cool-stuff",
     "hashes": {"Android": "<hash>", "WindowsPlayer": "<hash>"},
     "dependencies": ["bundle-1"]}

A record does not have to be the document root. ``decode_descriptions``
ignores fields it does not know about, so records may sit beside
caller-defined metadata, and ``path`` reaches records nested anywhere in
a larger document. Malformed hashes and unknown platform keys are errors,
never silently dropped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from bundlewright.core.hasher import HashParser, parse_hash128
from bundlewright.core.platforms import parse_platform_key
from bundlewright.errors import BundleError, DescriptionDecodeError, InvalidHashError
from bundlewright.models.descriptions import ArtifactDescription
from bundlewright.models.hashes import ContentHash
from bundlewright.models.platforms import PlatformKey

logger = logging.getLogger(__name__)

DocumentPath = str | Sequence[str | int] | None


class _DescriptionRecord(BaseModel):
    """Structural shape of one record; unknown sibling fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    name: str
    hashes: dict[str, Any]
    dependencies: list[str]


class DecodeOutcome(BaseModel):
    """Result of a skip-and-continue decode."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    descriptions: list[ArtifactDescription] = []
    errors: list[BundleError] = []


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------


def encode_description(description: ArtifactDescription) -> dict[str, Any]:
    """Encode one description as a plain-data record."""
    return description.canonical_payload()


def encode_descriptions(descriptions: Iterable[ArtifactDescription]) -> list[dict[str, Any]]:
    """Encode descriptions in the order given."""
    return [encode_description(d) for d in descriptions]


def dumps_descriptions(descriptions: Iterable[ArtifactDescription], *, indent: int | None = 2) -> str:
    """Encode descriptions as JSON text."""
    return json.dumps(encode_descriptions(descriptions), indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------


def _resolve_path(document: Any, path: DocumentPath) -> Any:
    if path is None or path == "":
        return document
    keys: Sequence[str | int] = path.split(".") if isinstance(path, str) else path
    node = document
    for key in keys:
        try:
            if isinstance(node, Mapping):
                node = node[key]
            elif isinstance(node, list) and not isinstance(key, str):
                node = node[key]
            elif isinstance(node, list) and key.isdigit():
                node = node[int(key)]
            else:
                raise KeyError(key)
        except (KeyError, IndexError) as exc:
            raise DescriptionDecodeError(f"path {path!r} not found at {key!r}") from exc
    return node


def _records_at(document: Any, path: DocumentPath) -> list[Any]:
    node = _resolve_path(document, path)
    if isinstance(node, list):
        return node
    if isinstance(node, Mapping):
        return [node]
    raise DescriptionDecodeError(
        f"expected a record or a list of records, found {type(node).__name__}"
    )


def _parse_hash(
    hash_parser: HashParser, value: Any, artifact: str, platform: PlatformKey
) -> ContentHash:
    try:
        return hash_parser(value)
    except InvalidHashError as exc:
        raise InvalidHashError(value, artifact=artifact, platform=platform.value) from exc
    except (TypeError, ValueError) as exc:
        raise InvalidHashError(value, artifact=artifact, platform=platform.value) from exc


def decode_description(
    record: Any,
    *,
    hash_parser: HashParser = parse_hash128,
) -> ArtifactDescription:
    """Decode one record.

    Raises
    ------
    DescriptionDecodeError
        Missing or ill-typed fields.
    UnknownPlatformError
        A key of ``hashes`` is not a canonical platform key.
    InvalidHashError
        A hash value is rejected by *hash_parser*.
    """
    if not isinstance(record, Mapping):
        raise DescriptionDecodeError(f"record must be an object, found {type(record).__name__}")
    artifact = record.get("name") if isinstance(record.get("name"), str) else None
    try:
        parsed = _DescriptionRecord.model_validate(record)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise DescriptionDecodeError(f"invalid field(s): {fields}", artifact=artifact) from exc
    if not parsed.name:
        raise DescriptionDecodeError("name must not be empty")

    hashes: dict[PlatformKey, ContentHash] = {}
    for platform_text, hash_value in parsed.hashes.items():
        platform = parse_platform_key(platform_text, artifact=parsed.name)
        hashes[platform] = _parse_hash(hash_parser, hash_value, parsed.name, platform)

    return ArtifactDescription(
        name=parsed.name,
        hashes=hashes,
        dependencies=frozenset(parsed.dependencies),
    )


def decode_descriptions(
    document: Any,
    *,
    path: DocumentPath = None,
    hash_parser: HashParser = parse_hash128,
) -> list[ArtifactDescription]:
    """Decode every record at *path*, failing on the first bad one.

    *path* is a dotted string (``"release.bundles"``) or a sequence of
    keys; ``None`` means the document itself. The value it reaches may be
    a list of records or a single record.
    """
    return [
        decode_description(record, hash_parser=hash_parser)
        for record in _records_at(document, path)
    ]


def decode_descriptions_lenient(
    document: Any,
    *,
    path: DocumentPath = None,
    hash_parser: HashParser = parse_hash128,
) -> DecodeOutcome:
    """Decode every record at *path*, skipping and reporting bad ones.

    Structural problems with the document itself (a missing path, a
    non-record value) still raise ``DescriptionDecodeError``.
    """
    descriptions: list[ArtifactDescription] = []
    errors: list[BundleError] = []
    for index, record in enumerate(_records_at(document, path)):
        try:
            descriptions.append(decode_description(record, hash_parser=hash_parser))
        except BundleError as exc:
            logger.warning("Skipping description record %d: %s", index, exc)
            errors.append(exc)
    return DecodeOutcome(descriptions=descriptions, errors=errors)


def loads_descriptions(
    text: str,
    *,
    path: DocumentPath = None,
    hash_parser: HashParser = parse_hash128,
) -> list[ArtifactDescription]:
    """Decode descriptions from JSON text."""
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DescriptionDecodeError(f"invalid JSON: {exc}") from exc
    return decode_descriptions(document, path=path, hash_parser=hash_parser)

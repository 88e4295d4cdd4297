"""Artifact descriptions — the cross-platform record of one bundle."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bundlewright.models.hashes import ContentHash
from bundlewright.models.platforms import PlatformKey, canonical_sorted
from bundlewright.models.staging import DEFAULT_EXTENSION


class ArtifactDescription(BaseModel):
    """Name, per-platform content hashes and load-time dependencies.

    Only platforms the artifact was built for appear in ``hashes``; a
    missing key means the artifact is not available on that platform.
    Descriptions are immutable. A new build produces a new description
    that supersedes the old one rather than mutating it.

    Equality compares the name, the hash map contents and the dependency
    set, independent of the order anything was inserted in. ``__hash__``
    and ``canonical_digest`` walk platforms in canonical ``PlatformKey``
    order for the same reason.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    hashes: dict[PlatformKey, ContentHash] = Field(default_factory=dict)
    dependencies: frozenset[str] = frozenset()

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("artifact name must not be empty")
        return v

    @field_validator("hashes", mode="before")
    @classmethod
    def _coerce_hash_strings(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {
                k: ContentHash(value=h) if isinstance(h, str) else h
                for k, h in v.items()
            }
        return v

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def _canonical_items(self) -> tuple[tuple[str, str], ...]:
        return tuple(
            (platform.value, str(self.hashes[platform]))
            for platform in canonical_sorted(self.hashes)
        )

    def __hash__(self) -> int:
        return hash(
            (self.name, self._canonical_items(), tuple(sorted(self.dependencies)))
        )

    def canonical_payload(self) -> dict[str, Any]:
        """Plain-data form with platforms in canonical order and sorted dependencies."""
        return {
            "name": self.name,
            "hashes": dict(self._canonical_items()),
            "dependencies": sorted(self.dependencies),
        }

    def canonical_digest(self) -> str:
        """SHA-256 over the canonical payload; equal descriptions share it."""
        from bundlewright.core.hasher import canonical_json_bytes, sha256_hex

        payload = self.canonical_payload()
        payload["hashes"] = [list(item) for item in payload["hashes"].items()]
        return sha256_hex(canonical_json_bytes(payload))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @property
    def platforms(self) -> list[PlatformKey]:
        """Supported platforms in canonical order."""
        return canonical_sorted(self.hashes)

    def hash_for(self, platform: PlatformKey) -> ContentHash | None:
        """Return the content hash for *platform*, or None if unsupported."""
        return self.hashes.get(PlatformKey(platform))

    def file_name_for(self, platform: PlatformKey, *, extension: str | None = None) -> str | None:
        """Return the staged file name for *platform*, or None if unsupported."""
        from bundlewright.core.naming import file_name

        content_hash = self.hash_for(platform)
        if content_hash is None:
            return None
        return file_name(
            self.name, PlatformKey(platform), content_hash,
            extension=extension or DEFAULT_EXTENSION,
        )

    def with_hash(self, platform: PlatformKey, content_hash: ContentHash) -> ArtifactDescription:
        """Return a superseding description with one platform hash replaced."""
        hashes = dict(self.hashes)
        hashes[PlatformKey(platform)] = content_hash
        return self.model_copy(update={"hashes": hashes})

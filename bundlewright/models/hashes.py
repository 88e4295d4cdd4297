"""Opaque content hash value."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class ContentHash(BaseModel):
    """Identifies the binary content of one artifact build.

    The value is treated as opaque: it is compared, hashed and written
    out, never interpreted. It is stored lower-cased so that a hash
    survives a trip through file names and description documents
    unchanged. Parsers in ``bundlewright.core.hasher`` decide which
    strings are acceptable.
    """

    model_config = ConfigDict(frozen=True)

    value: str

    @field_validator("value")
    @classmethod
    def _normalize(cls, v: str) -> str:
        if not v or v != v.strip():
            raise ValueError("content hash must be a non-blank string")
        return v.lower()

    def __str__(self) -> str:
        return self.value

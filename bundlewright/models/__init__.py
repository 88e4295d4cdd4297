"""Bundlewright data models — all Pydantic v2, all frozen (immutable)."""

from bundlewright.models.descriptions import ArtifactDescription
from bundlewright.models.hashes import ContentHash
from bundlewright.models.platforms import PlatformKey
from bundlewright.models.reconcile import (
    ProbeResult,
    ReconciliationResult,
    RetryPolicy,
)
from bundlewright.models.staging import BuildLayout, StagedArtifactFile

__all__ = [
    # platforms
    "PlatformKey",
    # hashes
    "ContentHash",
    # descriptions
    "ArtifactDescription",
    # staging
    "BuildLayout",
    "StagedArtifactFile",
    # reconciliation
    "ProbeResult",
    "RetryPolicy",
    "ReconciliationResult",
]

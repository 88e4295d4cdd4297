"""Bundlewright: identity, merging and publication checks for build bundles.

A bundle is built once per platform. Bundlewright gives every platform
build a collision-free file name, merges per-platform build manifests
into one description per bundle, encodes those descriptions to JSON, and
works out which staged builds are still missing from a remote store.
"""

__version__ = "0.1.0"
__description__ = (
    "Cross-platform bundle naming, manifest merging and publication reconciliation"
)

from bundlewright.core.codec import decode_descriptions, encode_descriptions
from bundlewright.core.merge import merge_manifests
from bundlewright.core.naming import file_name, parse_file_name
from bundlewright.core.platforms import normalize
from bundlewright.core.reconciler import Reconciler
from bundlewright.models import (
    ArtifactDescription,
    ContentHash,
    PlatformKey,
    ProbeResult,
    StagedArtifactFile,
)

__all__ = [
    "ArtifactDescription",
    "ContentHash",
    "PlatformKey",
    "ProbeResult",
    "Reconciler",
    "StagedArtifactFile",
    "decode_descriptions",
    "encode_descriptions",
    "file_name",
    "merge_manifests",
    "normalize",
    "parse_file_name",
    "__version__",
]

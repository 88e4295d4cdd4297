"""Manifest merge engine — per-platform build manifests into descriptions.

Each platform build reports its own artifact set, content hashes and
direct dependencies. ``merge_report`` folds them into one
``ArtifactDescription`` per artifact name.

Dependency policy: the dependency set of an artifact is taken from the
first manifest, in canonical platform order, that contains it. Later
platforms that compute a different set are not merged in; each such
disagreement is recorded as a ``DependencyDivergence`` and logged.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from bundlewright.core.hasher import HashParser, parse_hash128
from bundlewright.core.platforms import normalize
from bundlewright.errors import BundleError, DuplicatePlatformError, UnsupportedPlatformError
from bundlewright.models.descriptions import ArtifactDescription
from bundlewright.models.hashes import ContentHash
from bundlewright.models.platforms import PlatformKey, canonical_sorted

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Manifest protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class BuildManifest(Protocol):
    """What one platform build reports about its artifacts."""

    def artifact_names(self) -> Iterable[str]:
        """Names of every artifact built for this platform."""
        ...

    def hash_of(self, name: str) -> ContentHash:
        """Content hash of *name* on this platform."""
        ...

    def direct_dependencies_of(self, name: str) -> Sequence[str]:
        """Direct load-time dependencies of *name* on this platform."""
        ...


class ManifestEntry(BaseModel):
    """One artifact inside a ``StaticManifest``."""

    model_config = ConfigDict(frozen=True)

    hash: ContentHash
    dependencies: tuple[str, ...] = ()


class StaticManifest(BaseModel):
    """In-memory ``BuildManifest``, e.g. loaded from a compiler's JSON output.

    JSON shape::

        {"artifacts": {"ui": {"hash": "<32 hex>", "dependencies": ["core"]}}}
    """

    model_config = ConfigDict(frozen=True)

    artifacts: dict[str, ManifestEntry] = {}

    def artifact_names(self) -> list[str]:
        return list(self.artifacts)

    def hash_of(self, name: str) -> ContentHash:
        return self.artifacts[name].hash

    def direct_dependencies_of(self, name: str) -> list[str]:
        return list(self.artifacts[name].dependencies)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, object],
        *,
        hash_parser: HashParser = parse_hash128,
    ) -> StaticManifest:
        """Build a manifest from plain data, parsing hashes with *hash_parser*."""
        if not isinstance(data, Mapping):
            raise ValueError("manifest document must be a JSON object")
        raw_artifacts = data.get("artifacts", {})
        if not isinstance(raw_artifacts, Mapping):
            raise ValueError("manifest 'artifacts' must be a mapping")
        artifacts: dict[str, ManifestEntry] = {}
        for name, entry in raw_artifacts.items():
            if not isinstance(entry, Mapping):
                raise ValueError(f"manifest entry for {name!r} must be a mapping")
            artifacts[name] = ManifestEntry(
                hash=hash_parser(entry.get("hash")),
                dependencies=tuple(entry.get("dependencies", ())),
            )
        return cls(artifacts=artifacts)

    @classmethod
    def load(cls, path: Path, *, hash_parser: HashParser = parse_hash128) -> StaticManifest:
        """Load a manifest from a JSON file."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_mapping(data, hash_parser=hash_parser)


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


class DependencyDivergence(BaseModel):
    """Two platforms computed different dependency sets for one artifact."""

    model_config = ConfigDict(frozen=True)

    artifact: str
    kept_platform: PlatformKey
    kept: frozenset[str]
    platform: PlatformKey
    observed: frozenset[str]

    def summary(self) -> str:
        return (
            f"{self.artifact}: {self.platform.value} dependencies "
            f"{sorted(self.observed)} differ from {self.kept_platform.value} "
            f"dependencies {sorted(self.kept)} (kept)"
        )


class MergeReport(BaseModel):
    """Merged descriptions, sorted by name, plus what was left out.

    ``errors`` holds one entry per manifest that was skipped: unsupported
    build targets, and targets that collide on the same platform key.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    descriptions: list[ArtifactDescription] = []
    divergences: list[DependencyDivergence] = []
    errors: list[BundleError] = []


class _Accumulator:
    __slots__ = ("hashes", "dependencies", "source")

    def __init__(self, dependencies: frozenset[str], source: PlatformKey) -> None:
        self.hashes: dict[PlatformKey, ContentHash] = {}
        self.dependencies = dependencies
        self.source = source


def _key_by_platform(
    manifests: Mapping[str, BuildManifest],
    errors: list[BundleError],
) -> dict[PlatformKey, BuildManifest]:
    by_platform: dict[PlatformKey, BuildManifest] = {}
    claimed: dict[PlatformKey, list[str]] = {}

    for raw, manifest in manifests.items():
        try:
            platform = normalize(raw)
        except UnsupportedPlatformError as exc:
            logger.warning("Skipping manifest for unsupported build target %r", raw)
            errors.append(exc)
            continue
        claimed.setdefault(platform, []).append(
            raw.value if isinstance(raw, PlatformKey) else str(raw)
        )
        by_platform[platform] = manifest

    # Every manifest of a colliding platform is dropped.
    for platform in canonical_sorted(claimed):
        raw_targets = claimed[platform]
        if len(raw_targets) > 1:
            del by_platform[platform]
            error = DuplicatePlatformError(platform.value, raw_targets)
            logger.warning("%s", error)
            errors.append(error)

    return by_platform


def merge_report(manifests: Mapping[str, BuildManifest]) -> MergeReport:
    """Fold per-platform manifests into one description per artifact.

    Platforms are processed in canonical order regardless of the mapping's
    insertion order, and the output is sorted by artifact name, so identical
    inputs always give identical output. Keys may be raw build targets;
    manifests whose target is unsupported, or whose target resolves to the
    same platform as another one, are skipped and reported in ``errors``.
    """
    errors: list[BundleError] = []
    by_platform = _key_by_platform(manifests, errors)
    accumulators: dict[str, _Accumulator] = {}
    divergences: list[DependencyDivergence] = []

    for platform in canonical_sorted(by_platform):
        manifest = by_platform[platform]
        for name in manifest.artifact_names():
            dependencies = frozenset(manifest.direct_dependencies_of(name))
            acc = accumulators.get(name)
            if acc is None:
                acc = _Accumulator(dependencies, platform)
                accumulators[name] = acc
            elif dependencies != acc.dependencies:
                divergence = DependencyDivergence(
                    artifact=name,
                    kept_platform=acc.source,
                    kept=acc.dependencies,
                    platform=platform,
                    observed=dependencies,
                )
                logger.warning("Dependency divergence: %s", divergence.summary())
                divergences.append(divergence)
            acc.hashes[platform] = manifest.hash_of(name)

    descriptions = [
        ArtifactDescription(name=name, hashes=acc.hashes, dependencies=acc.dependencies)
        for name, acc in sorted(accumulators.items())
    ]
    logger.info(
        "Merged %d manifest(s) into %d artifact description(s)",
        len(by_platform),
        len(descriptions),
    )
    return MergeReport(descriptions=descriptions, divergences=divergences, errors=errors)


def merge_manifests(manifests: Mapping[str, BuildManifest]) -> list[ArtifactDescription]:
    """Return only the sorted descriptions from ``merge_report``."""
    return merge_report(manifests).descriptions

"""Artifact compiler boundary.

Compilation itself is engine specific and lives outside this package; a
backend only has to implement ``ArtifactCompiler.build``. ``build_many``
handles target normalization and partial failure on top of it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from bundlewright.core.merge import BuildManifest
from bundlewright.core.platforms import normalize_many
from bundlewright.errors import BundleError
from bundlewright.models.platforms import PlatformKey

logger = logging.getLogger(__name__)


@runtime_checkable
class ArtifactCompiler(Protocol):
    """Builds every artifact of a project for one platform."""

    def build(self, platform: PlatformKey) -> BuildManifest:
        ...


class BuildOutcome(BaseModel):
    """Manifests for the platforms that built, errors for those that did not."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    manifests: dict[PlatformKey, BuildManifest] = {}
    errors: list[BundleError] = []


def build_many(
    compiler: ArtifactCompiler,
    raw_targets: Iterable[str | PlatformKey],
) -> BuildOutcome:
    """Build for several raw targets, once per distinct platform key.

    Targets are normalized and de-duplicated first, so asking for both the
    32 and 64 bit Windows targets builds Windows once. Unsupported targets
    and per-platform build failures are collected, not raised.
    """
    platforms, unsupported = normalize_many(raw_targets)
    errors: list[BundleError] = list(unsupported)
    manifests: dict[PlatformKey, BuildManifest] = {}

    for platform in platforms:
        try:
            manifests[platform] = compiler.build(platform)
        except BundleError as exc:
            logger.warning("Build failed for %s: %s", platform.value, exc)
            errors.append(exc)
            continue
        logger.info("Built artifacts for %s", platform.value)

    return BuildOutcome(manifests=manifests, errors=errors)

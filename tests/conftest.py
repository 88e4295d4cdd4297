"""Shared test fixtures for Bundlewright."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from typing import Any

import pytest

from bundlewright.core.hasher import parse_hash128
from bundlewright.core.merge import ManifestEntry, StaticManifest
from bundlewright.models.descriptions import ArtifactDescription
from bundlewright.models.hashes import ContentHash
from bundlewright.models.platforms import PlatformKey
from bundlewright.models.reconcile import ProbeResult
from bundlewright.models.staging import StagedArtifactFile

# Sample hashes for two bundles across five platforms.
BUNDLE_1_HASHES: dict[PlatformKey, str] = {
    PlatformKey.ANDROID: "982415458cdaf4e60c420f75fe6c8e8b",
    PlatformKey.IPHONE_PLAYER: "bd7a32acc8931e77eb1174baff409f21",
    PlatformKey.WINDOWS_PLAYER: "5425682f11f1eeb1b0ac7e4580cd2237",
    PlatformKey.OSX_PLAYER: "4a8250d93de151328fe1651096ec8bc1",
    PlatformKey.WEBGL_PLAYER: "bc341e351d4813630d417d33558a51ed",
}

BUNDLE_10_HASHES: dict[PlatformKey, str] = {
    PlatformKey.ANDROID: "7de37f7cd9eca4b2a6c9216c6cda8d0c",
    PlatformKey.IPHONE_PLAYER: "e3fe65f3b2b19e4d1550cd7210ca5e0d",
    PlatformKey.WINDOWS_PLAYER: "18a5260b52e33fa6e54ff67e14b6c979",
    PlatformKey.OSX_PLAYER: "25296e04f8fac4a875b4f774b7bea1ba",
    PlatformKey.WEBGL_PLAYER: "7a9b673950467554cad5f25f0ec70da5",
}


def h(text: str) -> ContentHash:
    """Shorthand: parse a 32-hex-char hash."""
    return parse_hash128(text)


@pytest.fixture
def sample_descriptions() -> list[ArtifactDescription]:
    """Two descriptions, the second depending on the first."""
    return [
        ArtifactDescription(
            name="bundle-1",
            hashes={k: h(v) for k, v in BUNDLE_1_HASHES.items()},
            dependencies=frozenset(),
        ),
        ArtifactDescription(
            name="bundle-10",
            hashes={k: h(v) for k, v in BUNDLE_10_HASHES.items()},
            dependencies=frozenset({"bundle-1"}),
        ),
    ]


@pytest.fixture
def make_manifest() -> Callable[..., StaticManifest]:
    """Factory fixture: build a StaticManifest from ``name -> (hash, deps)``."""

    def _factory(artifacts: dict[str, tuple[str, Iterable[str]]]) -> StaticManifest:
        return StaticManifest(
            artifacts={
                name: ManifestEntry(hash=h(hash_text), dependencies=tuple(deps))
                for name, (hash_text, deps) in artifacts.items()
            }
        )

    return _factory


@pytest.fixture
def make_staged() -> Callable[..., StagedArtifactFile]:
    """Factory fixture: build a StagedArtifactFile with sensible defaults."""

    def _factory(
        name: str = "bundle-1",
        platform: PlatformKey = PlatformKey.ANDROID,
        hash_text: str = "982415458cdaf4e60c420f75fe6c8e8b",
        **overrides: Any,
    ) -> StagedArtifactFile:
        return StagedArtifactFile(
            name=name, platform=platform, content_hash=h(hash_text), **overrides
        )

    return _factory


# ---------------------------------------------------------------------------
# Fake existence probes
# ---------------------------------------------------------------------------


class ScriptedProbe:
    """Answers from a per-artifact script, instrumented for concurrency.

    ``script`` maps an artifact name to the answers for successive
    attempts; the last answer repeats. Unscripted artifacts get
    ``default``. Tracks call counts and the peak number of probes in
    flight at once.
    """

    def __init__(
        self,
        script: dict[str, list[ProbeResult]] | None = None,
        *,
        default: ProbeResult = ProbeResult.NOT_FOUND,
        delay: float = 0.0,
        errors: dict[str, Exception] | None = None,
    ) -> None:
        self.script = script or {}
        self.default = default
        self.delay = delay
        self.errors = errors or {}
        self.calls: dict[str, int] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    async def probe(self, file_name: str) -> ProbeResult:
        name = file_name.split("_", 1)[0]
        self.calls[name] = self.calls.get(name, 0) + 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if name in self.errors:
                raise self.errors[name]
            answers = self.script.get(name)
            if not answers:
                return self.default
            return answers[min(self.calls[name], len(answers)) - 1]
        finally:
            self.in_flight -= 1


@pytest.fixture
def scripted_probe() -> type[ScriptedProbe]:
    """The ScriptedProbe class, for tests to instantiate with a script."""
    return ScriptedProbe

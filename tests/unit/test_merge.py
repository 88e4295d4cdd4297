"""Tests for the manifest merge engine."""

from __future__ import annotations

import json
import logging

import pytest

from bundlewright.core.hasher import parse_hash128
from bundlewright.core.merge import (
    BuildManifest,
    StaticManifest,
    merge_manifests,
    merge_report,
)
from bundlewright.errors import (
    DuplicatePlatformError,
    InvalidHashError,
    UnsupportedPlatformError,
)
from bundlewright.models.descriptions import ArtifactDescription
from bundlewright.models.platforms import PlatformKey

A_WIN = "5425682f11f1eeb1b0ac7e4580cd2237"
A_AND = "982415458cdaf4e60c420f75fe6c8e8b"
B_WIN = "18a5260b52e33fa6e54ff67e14b6c979"
B_AND = "7de37f7cd9eca4b2a6c9216c6cda8d0c"


@pytest.fixture
def windows_manifest(make_manifest):
    return make_manifest({"zeta": (B_WIN, ["alpha"]), "alpha": (A_WIN, [])})


@pytest.fixture
def android_manifest(make_manifest):
    return make_manifest({"alpha": (A_AND, []), "zeta": (B_AND, ["alpha"])})


class TestStaticManifest:
    def test_satisfies_protocol(self, windows_manifest):
        assert isinstance(windows_manifest, BuildManifest)

    def test_from_mapping(self):
        manifest = StaticManifest.from_mapping(
            {"artifacts": {"ui": {"hash": A_WIN, "dependencies": ["core"]}}}
        )
        assert manifest.artifact_names() == ["ui"]
        assert manifest.hash_of("ui") == parse_hash128(A_WIN)
        assert manifest.direct_dependencies_of("ui") == ["core"]

    def test_from_mapping_bad_hash(self):
        with pytest.raises(InvalidHashError):
            StaticManifest.from_mapping({"artifacts": {"ui": {"hash": "nope"}}})

    def test_load(self, tmp_path):
        path = tmp_path / "win.json"
        path.write_text(json.dumps({"artifacts": {"ui": {"hash": A_WIN}}}))
        manifest = StaticManifest.load(path)
        assert manifest.direct_dependencies_of("ui") == []


class TestMerge:
    def test_merges_hashes_across_platforms(self, windows_manifest, android_manifest):
        result = merge_manifests(
            {PlatformKey.WINDOWS_PLAYER: windows_manifest, PlatformKey.ANDROID: android_manifest}
        )
        alpha = result[0]
        assert alpha.name == "alpha"
        assert alpha.hash_for(PlatformKey.WINDOWS_PLAYER) == parse_hash128(A_WIN)
        assert alpha.hash_for(PlatformKey.ANDROID) == parse_hash128(A_AND)

    def test_output_sorted_by_name(self, windows_manifest, android_manifest):
        result = merge_manifests({PlatformKey.WINDOWS_PLAYER: windows_manifest})
        assert [d.name for d in result] == ["alpha", "zeta"]

    def test_insertion_order_independent(self, windows_manifest, android_manifest):
        first = merge_manifests(
            {PlatformKey.WINDOWS_PLAYER: windows_manifest, PlatformKey.ANDROID: android_manifest}
        )
        second = merge_manifests(
            {PlatformKey.ANDROID: android_manifest, PlatformKey.WINDOWS_PLAYER: windows_manifest}
        )
        assert first == second

    def test_dependencies_recorded(self, windows_manifest):
        result = merge_manifests({PlatformKey.WINDOWS_PLAYER: windows_manifest})
        assert result[1].dependencies == frozenset({"alpha"})

    def test_artifact_on_one_platform_only(self, make_manifest, windows_manifest):
        android = make_manifest({"mobile-only": (A_AND, [])})
        result = merge_manifests(
            {PlatformKey.WINDOWS_PLAYER: windows_manifest, PlatformKey.ANDROID: android}
        )
        mobile = next(d for d in result if d.name == "mobile-only")
        assert mobile.platforms == [PlatformKey.ANDROID]

    def test_empty_input(self):
        assert merge_manifests({}) == []

    def test_raw_target_keys_are_normalized(self, windows_manifest):
        result = merge_manifests({"StandaloneWindows64": windows_manifest})
        assert result[0].platforms == [PlatformKey.WINDOWS_PLAYER]


class TestDependencyDivergence:
    def test_first_platform_in_canonical_order_wins(self, make_manifest):
        windows = make_manifest({"ui": (A_WIN, ["core"])})
        android = make_manifest({"ui": (A_AND, ["core", "mobile-fonts"])})
        # Android inserted first; WindowsPlayer still comes first canonically.
        report = merge_report({PlatformKey.ANDROID: android, PlatformKey.WINDOWS_PLAYER: windows})
        assert report.descriptions == [
            ArtifactDescription(
                name="ui",
                hashes={PlatformKey.WINDOWS_PLAYER: parse_hash128(A_WIN), PlatformKey.ANDROID: parse_hash128(A_AND)},
                dependencies=frozenset({"core"}),
            )
        ]

    def test_divergence_reported_and_logged(self, make_manifest, caplog):
        windows = make_manifest({"ui": (A_WIN, ["core"])})
        android = make_manifest({"ui": (A_AND, ["core", "mobile-fonts"])})
        with caplog.at_level(logging.WARNING, logger="bundlewright.core.merge"):
            report = merge_report({PlatformKey.WINDOWS_PLAYER: windows, PlatformKey.ANDROID: android})
        assert len(report.divergences) == 1
        divergence = report.divergences[0]
        assert divergence.artifact == "ui"
        assert divergence.kept_platform == PlatformKey.WINDOWS_PLAYER
        assert divergence.platform == PlatformKey.ANDROID
        assert divergence.observed == frozenset({"core", "mobile-fonts"})
        assert "ui" in caplog.text

    def test_dependency_order_is_not_divergence(self, make_manifest):
        windows = make_manifest({"ui": (A_WIN, ["a", "b"])})
        android = make_manifest({"ui": (A_AND, ["b", "a"])})
        report = merge_report({PlatformKey.WINDOWS_PLAYER: windows, PlatformKey.ANDROID: android})
        assert report.divergences == []


class TestSkippedManifests:
    def test_unsupported_target_skipped(self, windows_manifest, android_manifest, caplog):
        with caplog.at_level(logging.WARNING, logger="bundlewright.core.merge"):
            report = merge_report({PlatformKey.ANDROID: android_manifest, "PS4": windows_manifest})
        assert [d.platforms for d in report.descriptions] == [[PlatformKey.ANDROID]] * 2
        assert [type(e) for e in report.errors] == [UnsupportedPlatformError]
        assert report.errors[0].raw_target == "PS4"
        assert "PS4" in caplog.text

    def test_colliding_targets_dropped_in_any_order(self, make_manifest, android_manifest):
        win32 = make_manifest({"alpha": (A_WIN, [])})
        win64 = make_manifest({"alpha": (B_WIN, [])})
        first = merge_report(
            {"StandaloneWindows": win32, "StandaloneWindows64": win64, "Android": android_manifest}
        )
        second = merge_report(
            {"StandaloneWindows64": win64, "Android": android_manifest, "StandaloneWindows": win32}
        )

        assert first.descriptions == second.descriptions
        assert all(d.platforms == [PlatformKey.ANDROID] for d in first.descriptions)
        for report in (first, second):
            assert len(report.errors) == 1
            error = report.errors[0]
            assert isinstance(error, DuplicatePlatformError)
            assert error.platform == "WindowsPlayer"
            assert error.raw_targets == ["StandaloneWindows", "StandaloneWindows64"]

    def test_canonical_key_collides_with_raw_target(self, windows_manifest):
        report = merge_report(
            {PlatformKey.WINDOWS_PLAYER: windows_manifest, "StandaloneWindows64": windows_manifest}
        )
        assert report.descriptions == []
        assert report.errors[0].raw_targets == ["StandaloneWindows64", "WindowsPlayer"]

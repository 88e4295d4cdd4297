"""Tests for env-driven build settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from bundlewright.config import BundleSettings
from bundlewright.models.reconcile import RetryPolicy


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for var in ("BASE_URI", "MAX_RETRIES", "LOG_LEVEL", "STAGING_DIR", "MAX_CONCURRENCY"):
        monkeypatch.delenv(f"BUNDLEWRIGHT_{var}", raising=False)


class TestBundleSettings:
    def test_defaults(self):
        settings = BundleSettings()
        assert settings.log_level == "INFO"
        assert settings.max_retries == 3
        assert settings.max_concurrency == 8
        assert settings.file_extension == "bundle"

    def test_default_paths(self):
        settings = BundleSettings()
        assert settings.staging_dir == Path("AssetBundles/Staging")
        assert settings.upload_dir == Path("AssetBundles/Upload")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BUNDLEWRIGHT_BASE_URI", "https://cdn.example.test")
        monkeypatch.setenv("BUNDLEWRIGHT_MAX_RETRIES", "5")
        settings = BundleSettings()
        assert settings.base_uri == "https://cdn.example.test"
        assert settings.max_retries == 5

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("BUNDLEWRIGHT_LOG_LEVEL=DEBUG\n")
        settings = BundleSettings()
        assert settings.log_level == "DEBUG"

    def test_negative_retries_rejected(self):
        with pytest.raises(ValueError):
            BundleSettings(max_retries=-1)

    def test_layout(self):
        layout = BundleSettings(staging_dir=Path("/tmp/stage")).layout()
        assert layout.staging == Path("/tmp/stage")
        assert layout.root == Path("AssetBundles")

    def test_retry_policy(self):
        policy = BundleSettings(max_retries=1, retry_delay_seconds=2.0, max_concurrency=4).retry_policy()
        assert policy == RetryPolicy(max_retries=1, retry_delay_seconds=2.0, max_concurrency=4)
        assert policy.max_attempts == 2


class TestRetryPolicy:
    def test_concurrency_must_be_positive(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_concurrency=0)

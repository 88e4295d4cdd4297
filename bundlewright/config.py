"""Build settings — env-driven, converted into explicit value objects.

Settings are read from ``BUNDLEWRIGHT_*`` environment variables or a
``.env`` file. Operations never read settings themselves: callers turn
them into a ``BuildLayout`` and ``RetryPolicy`` and pass those in.

Examples
--------
Override via environment::

    export BUNDLEWRIGHT_BASE_URI=https://cdn.example.com/bundles
    export BUNDLEWRIGHT_MAX_RETRIES=5
    export BUNDLEWRIGHT_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bundlewright.models.reconcile import RetryPolicy
from bundlewright.models.staging import BuildLayout


class BundleSettings(BaseSettings):
    """Build and publication settings with environment variable overrides."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BUNDLEWRIGHT_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Build layout
    root_build_path: Path = Path("AssetBundles")
    staging_dir: Path = Path("AssetBundles/Staging")
    upload_dir: Path = Path("AssetBundles/Upload")
    embedded_dir: Path = Path("Assets/StreamingAssets/EmbeddedAssetBundles")
    file_extension: str = "bundle"

    # Remote store
    base_uri: str = ""
    probe_timeout_seconds: float = Field(default=10.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=0.5, ge=0)
    max_concurrency: int = Field(default=8, ge=1)

    def layout(self) -> BuildLayout:
        """The directories of a build, as an explicit value."""
        return BuildLayout(
            root=self.root_build_path,
            staging=self.staging_dir,
            upload=self.upload_dir,
            embedded=self.embedded_dir,
        )

    def retry_policy(self) -> RetryPolicy:
        """Retry and concurrency bounds for reconciliation."""
        return RetryPolicy(
            max_retries=self.max_retries,
            retry_delay_seconds=self.retry_delay_seconds,
            max_concurrency=self.max_concurrency,
        )

"""Staging-area models: build layout and staged artifact files."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from bundlewright.errors import InvalidArtifactNameError
from bundlewright.models.hashes import ContentHash
from bundlewright.models.platforms import PlatformKey

DEFAULT_EXTENSION = "bundle"


class BuildLayout(BaseModel):
    """Directories used by a build, passed explicitly to every operation.

    ``root`` holds one raw build directory per platform; ``staging`` holds
    canonically named artifacts for every built platform; ``upload`` holds
    the subset still missing from the remote store; ``embedded`` holds
    artifacts shipped inside a player build.
    """

    model_config = ConfigDict(frozen=True)

    root: Path = Path("AssetBundles")
    staging: Path = Path("AssetBundles/Staging")
    upload: Path = Path("AssetBundles/Upload")
    embedded: Path = Path("Assets/StreamingAssets/EmbeddedAssetBundles")

    def build_dir_for(self, platform: PlatformKey) -> Path:
        """Raw build output directory for one platform."""
        return self.root / PlatformKey(platform).value


class StagedArtifactFile(BaseModel):
    """A built artifact file, identified by name, platform and content hash.

    The name and extension are checked on construction.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    platform: PlatformKey
    content_hash: ContentHash
    path: Path | None = None
    extension: str = DEFAULT_EXTENSION

    @field_validator("name")
    @classmethod
    def _valid_name(cls, v: str) -> str:
        from bundlewright.core.naming import validate_artifact_name

        try:
            return validate_artifact_name(v)
        except InvalidArtifactNameError as exc:
            raise ValueError(exc.reason) from exc

    @field_validator("extension")
    @classmethod
    def _valid_extension(cls, v: str) -> str:
        from bundlewright.core.naming import validate_extension

        return validate_extension(v)

    def file_name(self) -> str:
        """Canonical file name, also the key probed on the remote store."""
        from bundlewright.core.naming import file_name

        return file_name(
            self.name, self.platform, self.content_hash, extension=self.extension
        )

"""Staging-area file operations.

Raw builds land in one directory per platform under the layout root.
``stage_artifacts`` copies them into the flat staging area under their
canonical names; ``prepare_upload`` copies the reconciled subset into
the upload area. All directories are passed in explicitly.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

from bundlewright.core.hasher import HashParser, parse_hash128
from bundlewright.core.merge import BuildManifest
from bundlewright.core.naming import DEFAULT_EXTENSION, file_name, parse_file_name
from bundlewright.errors import BundleError, MalformedArtifactNameError
from bundlewright.models.platforms import PlatformKey
from bundlewright.models.staging import StagedArtifactFile

logger = logging.getLogger(__name__)


def reset_directory(path: Path) -> Path:
    """Ensure *path* exists and is empty."""
    path = Path(path)
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def stage_artifacts(
    manifest: BuildManifest,
    platform: PlatformKey,
    build_dir: Path,
    staging_dir: Path,
    *,
    extension: str = DEFAULT_EXTENSION,
) -> list[StagedArtifactFile]:
    """Copy every artifact in *manifest* from *build_dir* into *staging_dir*.

    Each file is renamed to its canonical ``name_platform_hash.ext`` form.
    The staging directory is created if needed but not cleared, so several
    platforms can be staged side by side.
    """
    staging_dir = Path(staging_dir)
    staging_dir.mkdir(parents=True, exist_ok=True)
    staged: list[StagedArtifactFile] = []

    for name in manifest.artifact_names():
        content_hash = manifest.hash_of(name)
        target = staging_dir / file_name(name, platform, content_hash, extension=extension)
        shutil.copyfile(Path(build_dir) / name, target)
        logger.debug("Staged %s -> %s", name, target.name)
        staged.append(
            StagedArtifactFile(
                name=name,
                platform=platform,
                content_hash=content_hash,
                path=target,
                extension=extension,
            )
        )
    return staged


def collect_staged(
    staging_dir: Path,
    *,
    extension: str = DEFAULT_EXTENSION,
    hash_parser: HashParser = parse_hash128,
) -> tuple[list[StagedArtifactFile], list[BundleError]]:
    """Read a staging directory back into staged artifact files.

    Files are returned sorted by file name. Files whose names do not follow
    the naming scheme are reported as errors rather than skipped silently.
    """
    staged: list[StagedArtifactFile] = []
    errors: list[BundleError] = []
    for path in sorted(Path(staging_dir).iterdir()):
        if not path.is_file():
            continue
        try:
            parsed = parse_file_name(path.name, extension=extension, hash_parser=hash_parser)
        except MalformedArtifactNameError as exc:
            logger.warning("Ignoring unrecognized staged file %s", path.name)
            errors.append(exc)
            continue
        staged.append(
            StagedArtifactFile(
                name=parsed.name,
                platform=parsed.platform,
                content_hash=parsed.content_hash,
                path=path,
                extension=extension,
            )
        )
    return staged, errors


def prepare_upload(
    files: Iterable[StagedArtifactFile],
    upload_dir: Path,
) -> list[Path]:
    """Reset *upload_dir* and copy *files* into it under their canonical names."""
    upload_dir = reset_directory(upload_dir)
    copied: list[Path] = []
    for staged in files:
        if staged.path is None:
            raise ValueError(f"Staged artifact {staged.file_name()} has no local path")
        target = upload_dir / staged.file_name()
        shutil.copyfile(staged.path, target)
        copied.append(target)
    logger.info("Prepared %d artifact(s) for upload in %s", len(copied), upload_dir)
    return copied


def copy_embedded(
    names: Iterable[str],
    build_dir: Path,
    embedded_dir: Path,
    *,
    known_names: Iterable[str] | None = None,
) -> list[Path]:
    """Copy raw built artifacts into the embedded directory of a player build.

    The embedded directory is reset first, because only one platform's
    artifacts are valid inside a given player. Names missing from
    *known_names* (when given) or not built in *build_dir* are skipped with
    a warning.
    """
    embedded_dir = reset_directory(embedded_dir)
    valid = set(known_names) if known_names is not None else None
    copied: list[Path] = []
    for name in names:
        if valid is not None and name not in valid:
            logger.warning("Unable to embed unknown artifact %s", name)
            continue
        source = Path(build_dir) / name
        if not source.is_file():
            logger.warning(
                "Artifact %s has not been built in %s; build before embedding",
                name,
                build_dir,
            )
            continue
        target = embedded_dir / name
        shutil.copyfile(source, target)
        copied.append(target)
    return copied

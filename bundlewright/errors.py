"""Error taxonomy for bundle naming, merging, decoding and reconciliation.

Every error carries the offending values as attributes so that a summary
can be rendered from a returned error list without re-running anything.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bundlewright.models.staging import StagedArtifactFile


class BundleError(RuntimeError):
    """Base class for all bundlewright errors."""

    def summary(self) -> str:
        """One-line human-readable description."""
        return str(self)


class UnsupportedPlatformError(BundleError):
    """Raised when a raw build target has no normalization mapping."""

    def __init__(self, raw_target: str) -> None:
        self.raw_target = raw_target
        super().__init__(f"Unsupported build target: {raw_target!r}")


class UnknownPlatformError(BundleError):
    """Raised when a string is not a canonical platform key."""

    def __init__(self, value: str, artifact: str | None = None) -> None:
        self.value = value
        self.artifact = artifact
        where = f" in artifact {artifact!r}" if artifact else ""
        super().__init__(f"Unknown platform key {value!r}{where}")


class DuplicatePlatformError(BundleError):
    """Raised when several build targets resolve to the same platform key."""

    def __init__(self, platform: str, raw_targets: Iterable[str]) -> None:
        self.platform = platform
        self.raw_targets = sorted(raw_targets)
        listed = ", ".join(repr(t) for t in self.raw_targets)
        super().__init__(
            f"Build targets {listed} all resolve to platform {platform}; "
            "none of their manifests is used"
        )


class InvalidArtifactNameError(BundleError):
    """Raised when an artifact name cannot be encoded into a file name."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid artifact name {name!r}: {reason}")


class MalformedArtifactNameError(BundleError):
    """Raised when a file name was not produced by the naming scheme."""

    def __init__(self, file_name: str, reason: str) -> None:
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Malformed artifact file name {file_name!r}: {reason}")


class InvalidHashError(BundleError):
    """Raised when a hash string cannot be parsed."""

    def __init__(
        self,
        value: object,
        artifact: str | None = None,
        platform: str | None = None,
    ) -> None:
        self.value = value
        self.artifact = artifact
        self.platform = platform
        where = ""
        if artifact is not None:
            where = f" for artifact {artifact!r}"
            if platform is not None:
                where += f" on platform {platform}"
        super().__init__(f"Invalid content hash {value!r}{where}")


class DescriptionDecodeError(BundleError):
    """Raised when a description record is structurally invalid."""

    def __init__(self, reason: str, artifact: str | None = None) -> None:
        self.reason = reason
        self.artifact = artifact
        where = f" (artifact {artifact!r})" if artifact else ""
        super().__init__(f"Cannot decode artifact description{where}: {reason}")


class ProbeIndeterminateError(BundleError):
    """Raised when a remote existence check never produced an answer."""

    def __init__(
        self,
        staged: StagedArtifactFile,
        attempts: int,
        last_error: str | None = None,
    ) -> None:
        self.staged = staged
        self.attempts = attempts
        self.last_error = last_error
        detail = f": {last_error}" if last_error else ""
        super().__init__(
            f"Could not determine whether {staged.file_name()} is published "
            f"after {attempts} attempt(s){detail}"
        )


def summarize_errors(errors: Iterable[BaseException]) -> list[str]:
    """Return one summary line per error, in input order."""
    lines: list[str] = []
    for error in errors:
        if isinstance(error, BundleError):
            lines.append(f"{type(error).__name__}: {error.summary()}")
        else:
            lines.append(f"{type(error).__name__}: {error}")
    return lines

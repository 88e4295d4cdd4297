"""Platform key normalization.

Several raw build targets share one set of artifacts at runtime: the 32
and 64 bit Windows players, the Linux architecture variants, and each
editor with its corresponding player. ``normalize`` collapses them onto a
single ``PlatformKey``. The mapping is pure and independent of build
order, and every canonical key maps to itself so normalization is
idempotent.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from bundlewright.errors import UnknownPlatformError, UnsupportedPlatformError
from bundlewright.models.platforms import PlatformKey

logger = logging.getLogger(__name__)


_NORMALIZATION_TABLE: dict[str, PlatformKey] = {
    # Windows
    "StandaloneWindows": PlatformKey.WINDOWS_PLAYER,
    "StandaloneWindows64": PlatformKey.WINDOWS_PLAYER,
    "WindowsEditor": PlatformKey.WINDOWS_PLAYER,
    "WindowsPlayer": PlatformKey.WINDOWS_PLAYER,
    # macOS
    "StandaloneOSX": PlatformKey.OSX_PLAYER,
    "StandaloneOSXIntel": PlatformKey.OSX_PLAYER,
    "StandaloneOSXIntel64": PlatformKey.OSX_PLAYER,
    "OSXEditor": PlatformKey.OSX_PLAYER,
    "OSXPlayer": PlatformKey.OSX_PLAYER,
    # Linux
    "StandaloneLinux": PlatformKey.LINUX_PLAYER,
    "StandaloneLinux64": PlatformKey.LINUX_PLAYER,
    "StandaloneLinuxUniversal": PlatformKey.LINUX_PLAYER,
    "LinuxEditor": PlatformKey.LINUX_PLAYER,
    "LinuxPlayer": PlatformKey.LINUX_PLAYER,
    # Mobile and web
    "Android": PlatformKey.ANDROID,
    "iOS": PlatformKey.IPHONE_PLAYER,
    "IPhonePlayer": PlatformKey.IPHONE_PLAYER,
    "WebGL": PlatformKey.WEBGL_PLAYER,
    "WebGLPlayer": PlatformKey.WEBGL_PLAYER,
}

_FOLDED_TABLE: dict[str, PlatformKey] = {
    raw.casefold(): key for raw, key in _NORMALIZATION_TABLE.items()
}

_CANONICAL_BY_VALUE: dict[str, PlatformKey] = {key.value: key for key in PlatformKey}


def supported_raw_targets() -> dict[str, PlatformKey]:
    """Return a copy of the raw target -> platform key mapping table."""
    return dict(_NORMALIZATION_TABLE)


def normalize(raw_target: str | PlatformKey) -> PlatformKey:
    """Map a raw build target onto its canonical platform key.

    Lookup is case-insensitive. Raises ``UnsupportedPlatformError`` for
    targets with no mapping.
    """
    if isinstance(raw_target, PlatformKey):
        return raw_target
    key = _FOLDED_TABLE.get(str(raw_target).strip().casefold())
    if key is None:
        raise UnsupportedPlatformError(str(raw_target))
    return key


def normalize_many(
    raw_targets: Iterable[str | PlatformKey],
) -> tuple[list[PlatformKey], list[UnsupportedPlatformError]]:
    """Normalize a list of raw targets, de-duplicating the results.

    Returns the distinct platform keys in first-seen order, plus one
    ``UnsupportedPlatformError`` per unmapped target. Unsupported targets
    do not abort the remaining ones.
    """
    keys: list[PlatformKey] = []
    errors: list[UnsupportedPlatformError] = []
    for raw in raw_targets:
        try:
            key = normalize(raw)
        except UnsupportedPlatformError as exc:
            logger.warning("Skipping unsupported build target %r", raw)
            errors.append(exc)
            continue
        if key not in keys:
            keys.append(key)
    return keys, errors


def parse_platform_key(value: str, *, artifact: str | None = None) -> PlatformKey:
    """Strictly parse a canonical platform key string.

    Unlike ``normalize`` this accepts only exact canonical names; it is
    used when reading persisted documents and staged file names.
    """
    key = _CANONICAL_BY_VALUE.get(value)
    if key is None:
        raise UnknownPlatformError(value, artifact=artifact)
    return key

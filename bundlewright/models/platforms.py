"""Canonical platform keys used for artifact identity."""

from __future__ import annotations

from enum import Enum


class PlatformKey(str, Enum):
    """A canonical runtime platform.

    Declaration order is the canonical order: descriptions hash, encode
    and merge their platforms in this order, never in map insertion order.
    """

    WINDOWS_PLAYER = "WindowsPlayer"
    OSX_PLAYER = "OSXPlayer"
    LINUX_PLAYER = "LinuxPlayer"
    ANDROID = "Android"
    IPHONE_PLAYER = "IPhonePlayer"
    WEBGL_PLAYER = "WebGLPlayer"

    def __str__(self) -> str:
        return self.value


# Position of each key in the canonical order.
CANONICAL_ORDER: dict[PlatformKey, int] = {
    key: index for index, key in enumerate(PlatformKey)
}


def canonical_sorted(keys) -> list[PlatformKey]:
    """Return *keys* sorted into canonical platform order."""
    return sorted(keys, key=CANONICAL_ORDER.__getitem__)

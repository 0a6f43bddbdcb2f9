"""Infrastructure: current platform detection."""

from __future__ import annotations

import platform

from ffprovision.core.catalog import make_platform_key
from ffprovision.core.models import PlatformKey


def detect_platform() -> PlatformKey:
    """Return the normalised ``(system, arch)`` of the running interpreter."""
    return make_platform_key(platform.system(), platform.machine())

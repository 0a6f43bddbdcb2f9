"""Core layer: models, catalog, protocols and the installer state machine.

Rules
-----
* No imports from ``cli`` or ``infra``.
* No network or subprocess calls; collaborators are injected through
  the protocols in :mod:`ffprovision.core.protocols`.
* Filesystem work is limited to the install directory and its staging
  area.
"""

from ffprovision.core.cancellation import CancellationToken
from ffprovision.core.catalog import resolve_descriptor
from ffprovision.core.installer import FfmpegInstaller
from ffprovision.core.manager import FfmpegManager
from ffprovision.core.models import (
    BinaryDescriptor,
    InstallationState,
    InstallOutcome,
    InstallResult,
    PlatformKey,
)

__all__: list[str] = [
    "BinaryDescriptor",
    "CancellationToken",
    "FfmpegInstaller",
    "FfmpegManager",
    "InstallOutcome",
    "InstallResult",
    "InstallationState",
    "PlatformKey",
    "resolve_descriptor",
]

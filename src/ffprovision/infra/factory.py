"""Default wiring of an :class:`~ffprovision.core.manager.FfmpegManager`.

Host applications supply only what is genuinely theirs (the prompter,
and optionally settings and storage); every other collaborator gets its
concrete infrastructure implementation here.
"""

from __future__ import annotations

from ffprovision.core.installer import FfmpegInstaller
from ffprovision.core.manager import FfmpegManager
from ffprovision.core.models import InstallationState, PlatformKey
from ffprovision.core.protocols import CommandRunner, Prompter, Settings, Storage, Transport
from ffprovision.infra.config import EnvSettings, UserDataStorage
from ffprovision.infra.extractor import ArchiveExtractor
from ffprovision.infra.homebrew import HomebrewInstaller
from ffprovision.infra.locator import FfmpegLocator
from ffprovision.infra.platform_info import detect_platform
from ffprovision.infra.process import SubprocessRunner
from ffprovision.infra.transport import HttpTransport
from ffprovision.infra.verifier import VersionVerifier


def build_manager(
    prompter: Prompter,
    *,
    settings: Settings | None = None,
    storage: Storage | None = None,
    transport: Transport | None = None,
    runner: CommandRunner | None = None,
    platform_key: PlatformKey | None = None,
    state: InstallationState | None = None,
) -> FfmpegManager:
    """Build a manager backed by the real subprocess, HTTP and disk adapters."""
    state = state or InstallationState()
    settings = settings or EnvSettings()
    storage = storage or UserDataStorage()
    transport = transport or HttpTransport()
    runner = runner or SubprocessRunner()
    platform_key = platform_key or detect_platform()

    verifier = VersionVerifier(runner)
    extractor = ArchiveExtractor(runner, platform_key)
    alternate = None
    if platform_key.is_darwin_arm:
        alternate = HomebrewInstaller(
            state,
            prompter=prompter,
            transport=transport,
            extractor=extractor,
            verifier=verifier,
            storage=storage,
            runner=runner,
        )

    return FfmpegManager(
        state,
        locator=FfmpegLocator(
            state,
            storage=storage,
            settings=settings,
            verifier=verifier,
            runner=runner,
            platform_key=platform_key,
        ),
        installer=FfmpegInstaller(
            state,
            prompter=prompter,
            transport=transport,
            extractor=extractor,
            verifier=verifier,
            storage=storage,
            platform_key=platform_key,
            alternate=alternate,
        ),
        verifier=verifier,
        settings=settings,
        prompter=prompter,
    )

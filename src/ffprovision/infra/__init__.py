"""Infrastructure layer: external system integration.

This layer wraps every interaction with the network, external
processes and the host operating system.  Every raw third-party
exception is caught here and re-raised as a
:class:`~ffprovision.exceptions.FfprovisionError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output; consent and notifications go through the
  injected :class:`~ffprovision.core.protocols.Prompter`.
"""

from ffprovision.infra.config import EnvSettings, UserDataStorage
from ffprovision.infra.extractor import ArchiveExtractor
from ffprovision.infra.factory import build_manager
from ffprovision.infra.homebrew import HomebrewInstaller
from ffprovision.infra.locator import FfmpegLocator
from ffprovision.infra.process import SubprocessRunner
from ffprovision.infra.transport import HttpTransport
from ffprovision.infra.verifier import VersionVerifier

__all__: list[str] = [
    "ArchiveExtractor",
    "EnvSettings",
    "FfmpegLocator",
    "HomebrewInstaller",
    "HttpTransport",
    "SubprocessRunner",
    "UserDataStorage",
    "VersionVerifier",
    "build_manager",
]

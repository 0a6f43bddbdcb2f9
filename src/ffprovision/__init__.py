"""ffprovision: locate, download and verify an ffmpeg binary.

Acquires a working ffmpeg executable on Windows, macOS and Linux
without requiring a package manager or build toolchain.
"""

from ffprovision.version import __version__

__all__: list[str] = ["__version__"]

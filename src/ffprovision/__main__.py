"""Allow ``python -m ffprovision`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m ffprovision`` behaves identically to the
``ffprovision`` console script.
"""

from __future__ import annotations

from ffprovision.cli.app import cli

if __name__ == "__main__":
    cli()

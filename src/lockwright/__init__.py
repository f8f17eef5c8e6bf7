"""Lockwright: dependency resolution and lockfiles for package projects."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Default settings shared by the CLI and the registry adapters.
USER_AGENT = f"lockwright/{__version__}"
DEFAULT_TIMEOUT = 15.0

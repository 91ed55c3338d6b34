"""
Single source of truth for the package version.

Reads from pyproject.toml at import time and caches.
All other files import VERSION from here instead of hardcoding.
"""

from __future__ import annotations

from pathlib import Path

__all__ = ["VERSION", "APP_NAME"]

APP_NAME = "jsonrescue"

_FALLBACK_VERSION = "0.1.0"


def _read_version() -> str:
    """Read version directly from pyproject.toml (avoids stale pip cache)."""
    toml_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
    try:
        lines = toml_path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return _FALLBACK_VERSION
    for line in lines:
        if line.strip().startswith("version"):
            # Parse: version = "0.1.0"
            return line.split("=", 1)[1].strip().strip('"').strip("'")
    return _FALLBACK_VERSION


VERSION = _read_version()

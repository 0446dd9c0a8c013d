# app/core/version.py
"""Service version lookup from a VERSION file or installed package metadata."""
from functools import lru_cache
from importlib import metadata
from pathlib import Path


VERSION_FILE = Path(__file__).parent.parent.parent / "VERSION"
DISTRIBUTION_NAME = "micropaid-search"
DEFAULT_VERSION = "0.1.0"


@lru_cache()
def get_version() -> str:
    """Resolve the version string reported by the discovery endpoint.

    Priority:
    1. VERSION file (for Docker/production)
    2. Installed distribution metadata
    3. Fallback to DEFAULT_VERSION
    """
    # Try VERSION file first (used in Docker builds)
    if VERSION_FILE.exists():
        version = VERSION_FILE.read_text().strip()
        if version:
            return version

    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return DEFAULT_VERSION


VERSION = get_version()

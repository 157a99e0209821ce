"""Version management for the Registrar API.

Provides version information using importlib.metadata with fallback to pyproject.toml
for development checkouts that were not installed.
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

PYPROJECT_PATH = Path(__file__).resolve().parents[3] / "pyproject.toml"


def get_version() -> str:
    """Get the application version, e.g. "0.1.0"."""
    try:
        return version("registrar-api")
    except PackageNotFoundError:
        with open(PYPROJECT_PATH, "rb") as f:
            pyproject_data = tomllib.load(f)

        return pyproject_data["project"]["version"]


__version__ = get_version()

"""Library version information."""

from contextlib import suppress
import importlib.metadata
from pathlib import Path


def extract_version() -> str:
    """Return package version.

    Returns version of the installed package or the one found in the nearby
    requirements-independent version file for cases when the package is not
    installed (ie. local development and testing).
    """
    try:
        return importlib.metadata.version("multiwallet")
    except importlib.metadata.PackageNotFoundError:
        with suppress(FileNotFoundError):
            with open(Path(__file__).parent / "VERSION", encoding="utf-8") as version:
                return version.read().strip()
    return "0.0.0"


__version__ = extract_version()

"""
TxBridge - Version Management
===============================
Semantic version of the package.
"""

from typing import NamedTuple


class VersionInfo(NamedTuple):
    """Version information structure"""
    major: int
    minor: int
    patch: int
    prerelease: str = ""


VERSION = VersionInfo(
    major=0,
    minor=3,
    patch=0,
    prerelease=""  # alpha, beta, rc1, etc.
)


def get_version_string() -> str:
    """
    Get version as string.

    Example:
        >>> get_version_string()
        '0.3.0'
    """
    version_str = f"{VERSION.major}.{VERSION.minor}.{VERSION.patch}"

    if VERSION.prerelease:
        version_str += f"-{VERSION.prerelease}"

    return version_str


def get_version_tuple() -> tuple:
    """Get version as tuple"""
    return (VERSION.major, VERSION.minor, VERSION.patch)


__version__ = get_version_string()
__version_info__ = VERSION

__all__ = [
    "__version__",
    "__version_info__",
    "VERSION",
    "get_version_string",
    "get_version_tuple",
]

"""
Expedition Team Optimizer package initializer.

Overview
--------
Provide package metadata. Subpackages are not imported here so that importing
``team_optimizer`` stays side-effect free.

Design
------
- Expose a semantic version string via ``__version__``.
- Declare a minimal public API through ``__all__``.

Usage
-----
>>> import team_optimizer
>>> team_optimizer.package_info()["name"]
'expedition-team-optimizer'
"""

from typing import Final

__version__: Final[str] = "0.1.0"
"""Semantic version of the package, kept in sync with ``pyproject.toml``."""

__all__: Final[list[str]] = ["__version__", "package_info"]


def package_info() -> dict[str, str]:
    """Return basic package information for diagnostics and logs.

    Returns:
        A mapping with the keys ``name`` and ``version``.
    """

    return {
        "name": "expedition-team-optimizer",
        "version": __version__,
    }

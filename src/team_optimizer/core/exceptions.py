"""
Domain-specific exceptions for the Expedition Team Optimizer.

Overview
--------
Provide a small hierarchy of typed exceptions for the failures that callers
can act upon: invalid configuration, unreadable or malformed roster data,
missing entities and malformed constraints.

Design
------
- Dependency-free (stdlib only).
- Every exception carries **context fields** to aid logging and debugging.
- The base class implements a clear ``__str__`` to surface the context.
- Search conditions such as an empty pool or contradictory constraints are
  *not* exceptions: the optimizer reports them as empty results plus
  diagnostics.

Integration
-----------
Raised by the roster loader, the settings loader and the party application
step. The ranking entry points never raise for domain conditions.

Usage
-----
>>> raise DataLoadError(path="data/rosters/missing.yaml", reason="file not found")
Traceback (most recent call last):
...
DataLoadError: Failed to load data file: path='data/rosters/missing.yaml'; reason='file not found'
"""

from __future__ import annotations

from typing import Final, Iterable

__all__: Final[list[str]] = [
    "TeamOptimizerError",
    "ConfigurationError",
    "DataLoadError",
    "RosterValidationError",
    "NotFoundError",
    "ConstraintError",
]


class TeamOptimizerError(Exception):
    """Base class for all domain errors in this project.

    Subclasses attach contextual attributes and rely on the default
    ``__str__`` provided here, which renders the main message and any
    non-empty context as ``key='value'`` pairs.
    """

    #: Default human-readable message used when no explicit message is provided.
    default_message: str = "An error occurred"

    def __init__(self, message: str | None = None, **context: object) -> None:
        self.message = message or self.default_message
        self.context = {k: v for k, v in context.items() if v is not None}
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        if not self.context:
            return self.message
        kv = "; ".join(f"{k}='{v}'" for k, v in self.context.items())
        return f"{self.message}: {kv}"


# ---------------------------------------------------------------------------
# Configuration & data loading
# ---------------------------------------------------------------------------
class ConfigurationError(TeamOptimizerError):
    """Signal invalid or missing configuration."""

    default_message = "Invalid configuration"

    def __init__(self, setting: str | None = None, reason: str | None = None) -> None:
        super().__init__(setting=setting, reason=reason)


class DataLoadError(TeamOptimizerError):
    """Signal failures when reading or parsing a data file."""

    default_message = "Failed to load data file"

    def __init__(self, path: str, reason: str | None = None) -> None:
        super().__init__(path=path, reason=reason)


class RosterValidationError(TeamOptimizerError):
    """Signal schema or semantic issues in a loaded roster."""

    default_message = "Invalid roster data"

    def __init__(self, errors: Iterable[str] | None = None) -> None:
        joined = "; ".join(errors) if errors else None
        super().__init__(errors=joined)


# ---------------------------------------------------------------------------
# Domain lookups & inputs
# ---------------------------------------------------------------------------
class NotFoundError(TeamOptimizerError):
    """Represent missing domain entities (character, recommendation)."""

    default_message = "Entity not found"

    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(kind=kind, identifier=identifier)


class ConstraintError(TeamOptimizerError):
    """Signal a malformed constraint edit (unknown kind or bad value)."""

    default_message = "Invalid constraint"

    def __init__(self, kind: str, value: object = None, reason: str | None = None) -> None:
        super().__init__(kind=kind, value=value, reason=reason)

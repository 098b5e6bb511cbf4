"""
Interfaces of the external collaborators consumed by the optimizer.

Overview
--------
The optimizer does not own game data or persistence. It receives four
collaborators explicitly (constructor injection), each described here as a
``typing.Protocol``:

- ``CharacterCatalog``: enumerates read-only character records.
- ``BuildStore``: returns a character's saved build, if any.
- ``StatsProvider``: computes derived stats for a character and build.
- ``PartySink``: persists the team the user finally applies.

Design
------
- Structural typing: any object with the right methods qualifies, so the
  host application can pass its existing data manager and storage objects.
- Every method is required; there is no optional-capability probing.

Integration
-----------
``team_optimizer.data.roster.InMemoryRoster`` implements all four and is
used by the tests and the demo script.
"""

from __future__ import annotations

from typing import Final, Mapping, Optional, Protocol, runtime_checkable

from team_optimizer.core.models import Build, CharacterRecord, DerivedStats, PartyLayout
from team_optimizer.core.types import AttributeName, CharacterId

__all__: Final[list[str]] = [
    "CharacterCatalog",
    "BuildStore",
    "StatsProvider",
    "PartySink",
]


@runtime_checkable
class CharacterCatalog(Protocol):
    def get_all_characters(self) -> list[CharacterRecord]:
        """Return every character record, in a stable order."""
        ...


@runtime_checkable
class BuildStore(Protocol):
    def load_character_build(self, character_id: CharacterId) -> Optional[Build]:
        """Return the saved build for ``character_id`` or ``None``."""
        ...


@runtime_checkable
class StatsProvider(Protocol):
    def calculate_character_stats(
        self,
        character_id: CharacterId,
        level: int,
        attributes: Mapping[AttributeName, int],
    ) -> Optional[DerivedStats]:
        """Return derived stats, or ``None`` when they cannot be computed."""
        ...


@runtime_checkable
class PartySink(Protocol):
    def save_party(self, layout: PartyLayout) -> None:
        """Persist the applied party layout."""
        ...

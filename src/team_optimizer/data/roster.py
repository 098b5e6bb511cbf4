"""
In-memory roster: a reference implementation of the optimizer's collaborators.

Overview
--------
Provide a small, validated roster model and a YAML loader for it. A roster
lists characters (element, abilities, base stats at levels 1 and 50,
attribute scaling), the player's saved builds and the current party.
``InMemoryRoster`` wraps a loaded roster and implements every collaborator
protocol the optimizer consumes: catalog, build store, stats provider and
party sink.

Design
------
- Pydantic models validate the file; ids must be unique and builds must
  reference known characters.
- Derived stats interpolate linearly between the level-1 and level-50 base
  stats, add ``scaling[attribute][stat] * points`` for each allocated
  attribute and round down. Stats missing at level 50 keep their level-1 value.
- Unknown characters yield ``None`` stats, matching the provider contract.

Integration
-----------
Used by the test-suite fixtures and by ``scripts/optimize_team.py``. Host
applications normally pass their own data manager and storage instead.

Usage
-----
>>> roster = InMemoryRoster(load_roster_from_yaml("data/rosters/sample.yaml"))  # doctest: +SKIP
>>> roster.calculate_character_stats("gustave", 1, {}).attack  # doctest: +SKIP
60.0
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Final, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from team_optimizer.core.exceptions import DataLoadError, NotFoundError, RosterValidationError
from team_optimizer.core.models import Ability, Build, CharacterRecord, DerivedStats, PartyLayout
from team_optimizer.core.types import AttributeName, CharacterId, Element, parse_element
from team_optimizer.infra.logging import generate_thread_id, logger_for

__all__: Final[list[str]] = [
    "BaseStats",
    "RosterCharacter",
    "Roster",
    "InMemoryRoster",
    "load_roster_from_yaml",
]

MAX_INTERPOLATED_LEVEL: Final[int] = 50

StatTable = dict[str, float]


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------
class BaseStats(BaseModel):
    """Base stat tables at level 1 and level 50."""

    level1: StatTable = Field(default_factory=dict)
    level50: StatTable = Field(default_factory=dict)


class RosterCharacter(BaseModel):
    """A roster entry: catalog fields plus the data needed to derive stats."""

    id: CharacterId
    name: str = ""
    element: Optional[Element] = None
    abilities: list[Ability] = Field(default_factory=list)
    base_stats: BaseStats = Field(default_factory=BaseStats)
    attribute_scaling: dict[AttributeName, StatTable] = Field(default_factory=dict)

    @field_validator("element", mode="before")
    @classmethod
    def _v_element(cls, v: object) -> object:
        return parse_element(v)

    def record(self) -> CharacterRecord:
        return CharacterRecord(
            id=self.id,
            name=self.name,
            element=self.element,
            abilities=tuple(self.abilities),
        )


class Roster(BaseModel):
    """A complete roster document."""

    characters: list[RosterCharacter] = Field(default_factory=list)
    builds: dict[CharacterId, Build] = Field(default_factory=dict)
    party: PartyLayout = Field(default_factory=PartyLayout)

    @model_validator(mode="after")
    def _v_references(self) -> "Roster":
        ids = [c.id for c in self.characters]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"duplicate character ids: {duplicates}")
        unknown = sorted(set(self.builds) - set(ids))
        if unknown:
            raise ValueError(f"builds reference unknown characters: {unknown}")
        return self


# ---------------------------------------------------------------------------
# Collaborator implementation
# ---------------------------------------------------------------------------
class InMemoryRoster:
    """Catalog, build store, stats provider and party sink over a :class:`Roster`."""

    def __init__(self, roster: Roster) -> None:
        self._roster = roster
        self._entries: dict[str, RosterCharacter] = {c.id: c for c in roster.characters}
        self._records: list[CharacterRecord] = [c.record() for c in roster.characters]

    # Catalog ------------------------------------------------------------
    def get_all_characters(self) -> list[CharacterRecord]:
        return list(self._records)

    def get_character(self, character_id: CharacterId) -> CharacterRecord:
        for record in self._records:
            if record.id == character_id:
                return record
        raise NotFoundError(kind="character", identifier=character_id)

    # Build store --------------------------------------------------------
    def load_character_build(self, character_id: CharacterId) -> Optional[Build]:
        return self._roster.builds.get(character_id)

    def save_character_build(self, character_id: CharacterId, build: Build) -> None:
        if character_id not in self._entries:
            raise NotFoundError(kind="character", identifier=character_id)
        self._roster.builds[character_id] = build

    # Stats provider -----------------------------------------------------
    def calculate_character_stats(
        self,
        character_id: CharacterId,
        level: int,
        attributes: Mapping[AttributeName, int],
    ) -> Optional[DerivedStats]:
        """Interpolate base stats for ``level`` and add attribute bonuses.

        Returns:
            The derived stats, or ``None`` for an unknown character.
        """

        entry = self._entries.get(character_id)
        if entry is None:
            return None

        level1 = entry.base_stats.level1
        level50 = entry.base_stats.level50
        bonuses: dict[str, float] = {}
        for attribute, points in attributes.items():
            for stat, per_point in entry.attribute_scaling.get(attribute, {}).items():
                bonuses[stat] = bonuses.get(stat, 0.0) + per_point * points

        values: dict[str, float] = {}
        for stat, base1 in level1.items():
            growth = (level50.get(stat, base1) - base1) / (MAX_INTERPOLATED_LEVEL - 1)
            base = base1 + growth * (level - 1)
            values[stat] = max(0.0, float(math.floor(base + bonuses.get(stat, 0.0))))

        known = {k: v for k, v in values.items() if k in DerivedStats.model_fields}
        return DerivedStats(**known)

    # Party sink ---------------------------------------------------------
    def save_party(self, layout: PartyLayout) -> None:
        self._roster.party = layout

    def load_party(self) -> PartyLayout:
        return self._roster.party


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load_roster_from_yaml(path: str | Path, *, thread_id: Optional[str] = None) -> Roster:
    """Load and validate a roster YAML file.

    Args:
        path: Filesystem path to the roster YAML.
        thread_id: Optional correlation ID used in structured logs.

    Returns:
        A validated :class:`Roster`.

    Raises:
        DataLoadError: If the file cannot be opened or parsed as YAML.
        RosterValidationError: If the content fails validation.
    """

    log = logger_for(component="data.roster", event="load", thread_id=thread_id or generate_thread_id())
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        log.error("Roster file not found", path=str(p))
        raise DataLoadError(path=str(p), reason="file not found") from exc
    except OSError as exc:
        log.error("Failed to open roster file", path=str(p), error=str(exc))
        raise DataLoadError(path=str(p), reason=str(exc)) from exc

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - parser variations
        log.error("Invalid YAML syntax", path=str(p), error=str(exc))
        raise DataLoadError(path=str(p), reason="invalid YAML") from exc

    if not isinstance(data, dict):
        log.error("Roster root is not a mapping", path=str(p))
        raise RosterValidationError(errors=["roster root must be a mapping"])

    try:
        roster = Roster(**data)
    except ValidationError as exc:
        log.error("Roster validation error", path=str(p), error=str(exc))
        raise RosterValidationError(errors=[str(exc)]) from exc

    log.info("Roster loaded", path=str(p), characters=len(roster.characters), builds=len(roster.builds))
    return roster

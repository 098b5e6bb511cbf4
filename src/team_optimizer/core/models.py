"""
Domain data models (Pydantic) for characters, builds, constraints and results.

Overview
--------
Define strongly-typed, validated data structures for:
- Catalog records (characters, abilities) and per-character builds.
- Derived stats returned by the stats provider.
- Criteria weight vectors and user constraints.
- Optimizer outputs: team analysis, recommendations and the party layout
  handed to the persistence sink.

Design
------
- Pydantic v2 models for input validation and normalization.
- Catalog records are frozen; builds and constraints are plain models.
- Only ``team_optimizer.core.types`` is imported to avoid cycles.
- Constraint edits mirror the team planner: lists keep insertion order
  and silently ignore duplicates.

Integration
-----------
Produced by the roster (reference collaborator) and by callers; consumed by
the scorer, the constraint engine, the strategies and the ranker.

Usage
-----
>>> c = Constraints()
>>> c.add_required("verso")
>>> c.add_required("verso")
>>> c.required_characters
['verso']
>>> display_score(123.4)
100
"""

from __future__ import annotations

from typing import Final, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from team_optimizer.core.exceptions import ConstraintError
from team_optimizer.core.types import (
    TEAM_SIZE,
    Algorithm,
    AttributeName,
    CharacterId,
    Element,
    RecommendationId,
    Role,
    ScoreClass,
    parse_element,
)

__all__: Final[list[str]] = [
    "Ability",
    "CharacterRecord",
    "Build",
    "DerivedStats",
    "CriteriaWeights",
    "Constraints",
    "ConstraintKind",
    "Synergy",
    "TeamAnalysis",
    "Recommendation",
    "PartyLayout",
    "Team",
    "score_class",
    "display_score",
]

ConstraintKind = Literal["required", "forbidden", "elemental", "minLevel", "maxLevel"]

PARTY_ACTIVE_SLOTS: Final[int] = 3
PARTY_RESERVE_SLOTS: Final[int] = 3

# Lower bounds of each score class, checked in order.
_SCORE_CLASS_THRESHOLDS: Final[list[tuple[float, ScoreClass]]] = [
    (85.0, ScoreClass.EXCELLENT),
    (75.0, ScoreClass.GOOD),
    (60.0, ScoreClass.AVERAGE),
    (40.0, ScoreClass.POOR),
]


def _normalize_id(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("identifier must be non-empty")
    return value


def _unique_preserve_order(values: list[str]) -> list[str]:
    """Return values deduplicated while preserving their first-seen order."""

    out: list[str] = []
    seen: set[str] = set()
    for v in values:
        if v not in seen:
            out.append(v)
            seen.add(v)
    return out


def _checked_id(kind: str, value: str) -> str:
    try:
        return _normalize_id(value)
    except ValueError as exc:
        raise ConstraintError(kind=kind, value=value, reason=str(exc)) from exc


# ---------------------------------------------------------------------------
# Catalog & builds
# ---------------------------------------------------------------------------
class Ability(BaseModel):
    """A tagged capability. ``heal``/``buff``/``debuff`` count as support."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    type: str = "other"

    @field_validator("type")
    @classmethod
    def _v_type(cls, v: str) -> str:
        return (v or "other").strip().lower() or "other"


class CharacterRecord(BaseModel):
    """Immutable catalog entry for a playable character.

    Attributes:
        id: Unique identifier.
        name: Display name (defaults to the id).
        element: Elemental affinity or ``None`` for neutral.
        abilities: Tagged capabilities.
    """

    model_config = ConfigDict(frozen=True)

    id: CharacterId
    name: str = ""
    element: Optional[Element] = None
    abilities: tuple[Ability, ...] = ()

    @field_validator("id")
    @classmethod
    def _v_id(cls, v: str) -> str:
        return _normalize_id(v)

    @field_validator("element", mode="before")
    @classmethod
    def _v_element(cls, v: object) -> object:
        return parse_element(v)

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: object) -> object:
        if isinstance(data, dict) and not str(data.get("name") or "").strip():
            data = {**data, "name": data.get("id", "")}
        return data


#: An ordered list of distinct characters (1–4 members when produced by a strategy).
Team = list[CharacterRecord]


class Build(BaseModel):
    """Saved build of a character: level and allocated attribute points."""

    level: int = Field(default=1, ge=1)
    attributes: dict[AttributeName, int] = Field(default_factory=dict)

    @field_validator("attributes")
    @classmethod
    def _v_attributes(cls, mapping: dict[str, int]) -> dict[str, int]:
        normalized: dict[str, int] = {}
        for raw_name, points in (mapping or {}).items():
            name = raw_name.strip()
            if points < 0:
                raise ValueError(f"invalid points for '{name}': {points} (must be >= 0)")
            normalized[name] = int(points)
        return normalized


class DerivedStats(BaseModel):
    """Computed stats of a character for a given build."""

    attack: float = Field(default=0.0, ge=0)
    defense: float = Field(default=0.0, ge=0)
    speed: float = Field(default=0.0, ge=0)
    hp: float = Field(default=0.0, ge=0)
    crit_rate: float = Field(default=0.0, ge=0)
    crit_damage: float = Field(default=0.0, ge=0)
    magic: float = Field(default=0.0, ge=0)

    @classmethod
    def zero(cls) -> "DerivedStats":
        """Return an all-zero bundle, used when stats are unavailable."""

        return cls()


# ---------------------------------------------------------------------------
# Optimization inputs
# ---------------------------------------------------------------------------
class CriteriaWeights(BaseModel):
    """Relative importance of each stat category for the team score."""

    model_config = ConfigDict(frozen=True)

    damage: float = Field(ge=0)
    survivability: float = Field(ge=0)
    utility: float = Field(ge=0)
    synergy: float = Field(ge=0)
    versatility: float = Field(ge=0)


class Constraints(BaseModel):
    """Session-scoped constraints applied before and after the search.

    Attributes:
        required_characters: Ids that every valid team must include.
        forbidden_characters: Ids removed from the candidate pool.
        elemental_requirements: Elements every valid team must cover.
        min_level: Optional lower bound on a character's saved build level.
        max_level: Optional upper bound on a character's saved build level.
    """

    required_characters: list[CharacterId] = Field(default_factory=list)
    forbidden_characters: list[CharacterId] = Field(default_factory=list)
    elemental_requirements: list[Element] = Field(default_factory=list)
    min_level: Optional[int] = Field(default=None, ge=1)
    max_level: Optional[int] = Field(default=None, ge=1)

    @field_validator("required_characters", "forbidden_characters", mode="before")
    @classmethod
    def _v_ids(cls, values: list[str]) -> list[str]:
        return _unique_preserve_order([_normalize_id(v) for v in (values or [])])

    @field_validator("elemental_requirements", mode="before")
    @classmethod
    def _v_elements(cls, values: list[object]) -> list[object]:
        coerced = [parse_element(v) for v in (values or [])]
        out: list[object] = []
        for v in coerced:
            if v is not None and v not in out:
                out.append(v)
        return out

    # -------------------------
    # Edits
    # -------------------------
    def add_required(self, character_id: CharacterId) -> None:
        character_id = _checked_id("required", character_id)
        if character_id not in self.required_characters:
            self.required_characters.append(character_id)

    def add_forbidden(self, character_id: CharacterId) -> None:
        character_id = _checked_id("forbidden", character_id)
        if character_id not in self.forbidden_characters:
            self.forbidden_characters.append(character_id)

    def add_element(self, element: Element | str) -> None:
        try:
            value = parse_element(element)
        except ValueError as exc:
            raise ConstraintError(kind="elemental", value=element, reason="unknown element") from exc
        if value is None:
            raise ConstraintError(kind="elemental", value=element, reason="element must be set")
        if value not in self.elemental_requirements:
            self.elemental_requirements.append(value)

    def set_level_bounds(self, min_level: Optional[int] = None, max_level: Optional[int] = None) -> None:
        """Set both level bounds. Non-positive values clear a bound."""

        self.min_level = min_level if min_level and min_level > 0 else None
        self.max_level = max_level if max_level and max_level > 0 else None

    def remove(self, kind: ConstraintKind, value: object = None) -> None:
        """Remove a constraint by kind, as the planner's "×" button does.

        Raises:
            ConstraintError: If ``kind`` is not a known constraint kind.
        """

        if kind == "required":
            self.required_characters = [c for c in self.required_characters if c != value]
        elif kind == "forbidden":
            self.forbidden_characters = [c for c in self.forbidden_characters if c != value]
        elif kind == "elemental":
            target = str(getattr(value, "value", value) or "").strip().lower()
            self.elemental_requirements = [e for e in self.elemental_requirements if e.value != target]
        elif kind == "minLevel":
            self.min_level = None
        elif kind == "maxLevel":
            self.max_level = None
        else:
            raise ConstraintError(kind=str(kind), value=value, reason="unknown constraint kind")

    def is_empty(self) -> bool:
        return not (
            self.required_characters
            or self.forbidden_characters
            or self.elemental_requirements
            or self.min_level is not None
            or self.max_level is not None
        )


# ---------------------------------------------------------------------------
# Optimization outputs
# ---------------------------------------------------------------------------
class Synergy(BaseModel):
    """A named bonus unlocked by an element pair present in the team."""

    type: str = "elemental"
    name: str
    bonus: str


class TeamAnalysis(BaseModel):
    """Human-facing report over a finalized team."""

    overall_score: float = 0.0
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    role_distribution: dict[Role, int] = Field(default_factory=dict)
    elemental_coverage: list[Element] = Field(default_factory=list)
    synergies: list[Synergy] = Field(default_factory=list)


class Recommendation(BaseModel):
    """One strategy's team together with its score and analysis."""

    id: RecommendationId
    algorithm: Algorithm
    team: list[CharacterRecord]
    analysis: TeamAnalysis
    score: float

    def member_ids(self) -> list[CharacterId]:
        return [c.id for c in self.team]

    def display_score(self) -> int:
        return display_score(self.score)

    def score_class(self) -> ScoreClass:
        return score_class(self.score)


class PartyLayout(BaseModel):
    """Party shape handed to the persistence sink: three active, three reserve."""

    active: list[Optional[CharacterId]] = Field(default_factory=lambda: [None] * PARTY_ACTIVE_SLOTS)
    reserve: list[Optional[CharacterId]] = Field(default_factory=lambda: [None] * PARTY_RESERVE_SLOTS)

    @classmethod
    def from_team(cls, team: list[CharacterRecord]) -> "PartyLayout":
        """Place the first three members in the active slots and the fourth in reserve."""

        active: list[Optional[str]] = [c.id for c in team[:PARTY_ACTIVE_SLOTS]]
        reserve: list[Optional[str]] = [c.id for c in team[PARTY_ACTIVE_SLOTS:TEAM_SIZE]]
        active.extend([None] * (PARTY_ACTIVE_SLOTS - len(active)))
        reserve.extend([None] * (PARTY_RESERVE_SLOTS - len(reserve)))
        return cls(active=active, reserve=reserve)


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------

def score_class(score: float) -> ScoreClass:
    """Map a team score to its presentation bucket."""

    for threshold, klass in _SCORE_CLASS_THRESHOLDS:
        if score >= threshold:
            return klass
    return ScoreClass.TERRIBLE


def display_score(score: float) -> int:
    """Clamp a score to ``[0, 100]`` and round it for display.

    Ranking always uses the raw score; this is presentation only.
    """

    return int(round(max(0.0, min(100.0, score))))

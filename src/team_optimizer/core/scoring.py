"""
Role classifier and scoring model for characters and teams.

Overview
--------
Compute a scalar fitness for a single character and for a whole team under a
criteria weight profile. A character's score combines five category scores:

- damage: ``(attack + crit_rate + crit_damage) / 3``
- survivability: ``(hp + defense) / 2``
- utility: ``speed + magic``
- synergy: 50, +15 for a non-physical element, +5 per support ability, capped at 100
- versatility: ``100 - stddev(attack, defense, speed, magic)``, floored at 20

weighted by the profile and divided by 5. A team's score is the mean over its
members of the per-member scores plus role and element diversity bonuses.

Design
------
- Weight profiles are fully explicit. Weights a profile does not override
  take the balanced default.
- Derived stats are recomputed on every call (teams are tiny, pools small).
- Missing builds mean level 1 with no attributes; missing stats mean all
  zeros, so one bad data point never aborts an optimization.
- The team score is not clamped; clamping is a presentation concern.

Integration
-----------
``Scorer`` is built by the optimizer from the injected build store and stats
provider, then shared by the strategies and the analyzer.

Usage
-----
>>> from team_optimizer.core.models import DerivedStats
>>> classify_role(DerivedStats(attack=10, defense=30, magic=5)).value
'tank'
>>> classify_role(DerivedStats()).value
'hybrid'
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final, Optional, Sequence

from team_optimizer.core.collaborators import BuildStore, StatsProvider
from team_optimizer.core.models import Build, CharacterRecord, CriteriaWeights, DerivedStats
from team_optimizer.core.types import SUPPORT_ABILITY_TYPES, TEAM_SIZE, Criteria, Element, Role
from team_optimizer.infra.logging import logger_for

__all__: Final[list[str]] = [
    "BALANCED_WEIGHTS",
    "CRITERIA_PROFILES",
    "CharacterScore",
    "Scorer",
    "classify_role",
    "synergy_potential",
    "versatility",
    "weights_for",
]


# ---------------------------------------------------------------------------
# Configuration constants
# ---------------------------------------------------------------------------
BALANCED_WEIGHTS: Final[CriteriaWeights] = CriteriaWeights(
    damage=0.30, survivability=0.25, utility=0.20, synergy=0.15, versatility=0.10
)

CRITERIA_PROFILES: Final[dict[Criteria, CriteriaWeights]] = {
    Criteria.BALANCED: BALANCED_WEIGHTS,
    Criteria.EXPLORATION: BALANCED_WEIGHTS,
    Criteria.BOSS_FIGHT: CriteriaWeights(
        damage=0.50, survivability=0.30, utility=0.10, synergy=0.10, versatility=0.10
    ),
    Criteria.SURVIVAL: CriteriaWeights(
        damage=0.15, survivability=0.50, utility=0.25, synergy=0.10, versatility=0.10
    ),
    Criteria.SPEED_RUN: CriteriaWeights(
        damage=0.60, survivability=0.25, utility=0.05, synergy=0.10, versatility=0.25
    ),
    Criteria.ELEMENTAL: CriteriaWeights(
        damage=0.20, survivability=0.25, utility=0.10, synergy=0.40, versatility=0.30
    ),
}

CATEGORY_COUNT: Final[int] = 5

SYNERGY_BASE: Final[float] = 50.0
SYNERGY_ELEMENT_BONUS: Final[float] = 15.0
SYNERGY_PER_SUPPORT_ABILITY: Final[float] = 5.0
SYNERGY_CAP: Final[float] = 100.0

VERSATILITY_CEILING: Final[float] = 100.0
VERSATILITY_FLOOR: Final[float] = 20.0

ROLE_DIVERSITY_BONUS: Final[float] = 20.0
ELEMENT_DIVERSITY_BONUS: Final[float] = 15.0


def weights_for(criteria: Criteria | str | None) -> CriteriaWeights:
    """Return the weight profile for ``criteria``; unknown or ``None`` → balanced."""

    if criteria is None:
        return BALANCED_WEIGHTS
    try:
        key = Criteria(criteria)
    except ValueError:
        return BALANCED_WEIGHTS
    return CRITERIA_PROFILES.get(key, BALANCED_WEIGHTS)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def classify_role(stats: DerivedStats) -> Role:
    """Derive a coarse role from the strictly dominant of defense, magic and attack.

    Ties (including all-zero stats) yield :attr:`Role.HYBRID`.
    """

    a, d, m = stats.attack, stats.defense, stats.magic
    if d > a and d > m:
        return Role.TANK
    if m > a and m > d:
        return Role.SUPPORT
    if a > d and a > m:
        return Role.ATTACKER
    return Role.HYBRID


def synergy_potential(character: CharacterRecord) -> float:
    """Score how well a character feeds team synergies (element and support kit)."""

    score = SYNERGY_BASE
    if character.element is not None and character.element is not Element.PHYSICAL:
        score += SYNERGY_ELEMENT_BONUS
    supports = sum(1 for ability in character.abilities if ability.type in SUPPORT_ABILITY_TYPES)
    score += supports * SYNERGY_PER_SUPPORT_ABILITY
    return min(score, SYNERGY_CAP)


def versatility(stats: DerivedStats) -> float:
    """Return 100 minus the population standard deviation of the core stats, floored at 20."""

    values = [stats.attack, stats.defense, stats.speed, stats.magic]
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return max(VERSATILITY_FLOOR, VERSATILITY_CEILING - math.sqrt(variance))


# ---------------------------------------------------------------------------
# Data container
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class CharacterScore:
    """Breakdown of a single character's score.

    Attributes:
        total: Weighted average of the category scores.
        damage: Damage category score.
        survivability: Survivability category score.
        utility: Utility category score.
        synergy: Synergy potential score.
        versatility: Versatility score.
        role: Role derived from the same stats.
    """

    total: float
    damage: float
    survivability: float
    utility: float
    synergy: float
    versatility: float
    role: Role


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------
class Scorer:
    """Score characters and teams against the injected build store and stats provider."""

    def __init__(
        self,
        builds: BuildStore,
        stats: StatsProvider,
        *,
        thread_id: Optional[str] = None,
    ) -> None:
        self._builds = builds
        self._stats = stats
        self._log = logger_for(component="core.scoring", event="score", thread_id=thread_id)

    def build_for(self, character: CharacterRecord) -> Build:
        """Return the saved build, or a level-1 build with no attributes."""

        build = self._builds.load_character_build(character.id)
        return build if build is not None else Build()

    def stats_for(self, character: CharacterRecord) -> DerivedStats:
        """Return derived stats for the character's current build (zeros when unavailable)."""

        build = self.build_for(character)
        stats = self._stats.calculate_character_stats(character.id, build.level, dict(build.attributes))
        if stats is None:
            self._log.warning("Stats unavailable; scoring with zero stats", character_id=character.id,
                              level=build.level)
            return DerivedStats.zero()
        return stats

    def role_of(self, character: CharacterRecord) -> Role:
        return classify_role(self.stats_for(character))

    def character_score(self, character: CharacterRecord, weights: CriteriaWeights) -> CharacterScore:
        """Compute the full score breakdown of one character."""

        stats = self.stats_for(character)
        damage = (stats.attack + stats.crit_rate + stats.crit_damage) / 3
        survivability = (stats.hp + stats.defense) / 2
        utility = stats.speed + stats.magic
        synergy = synergy_potential(character)
        versatile = versatility(stats)

        total = (
            damage * weights.damage
            + survivability * weights.survivability
            + utility * weights.utility
            + synergy * weights.synergy
            + versatile * weights.versatility
        ) / CATEGORY_COUNT

        self._log.debug("Character scored", character_id=character.id, total=round(total, 3))
        return CharacterScore(
            total=total,
            damage=damage,
            survivability=survivability,
            utility=utility,
            synergy=synergy,
            versatility=versatile,
            role=classify_role(stats),
        )

    def score(self, character: CharacterRecord, weights: CriteriaWeights) -> float:
        return self.character_score(character, weights).total

    def team_score(self, team: Sequence[CharacterRecord], weights: CriteriaWeights) -> float:
        """Mean member score plus role and element diversity bonuses.

        An empty team scores ``0.0``.
        """

        if not team:
            return 0.0

        total = 0.0
        roles: set[Role] = set()
        elements: set[Element] = set()
        for member in team:
            breakdown = self.character_score(member, weights)
            total += breakdown.total
            roles.add(breakdown.role)
            if member.element is not None:
                elements.add(member.element)

        total += (len(roles) / TEAM_SIZE) * ROLE_DIVERSITY_BONUS
        total += (len(elements) / TEAM_SIZE) * ELEMENT_DIVERSITY_BONUS
        return total / len(team)

"""
Common type aliases and enums for the Expedition Team Optimizer.

Overview
--------
Centralize small, dependency-free contracts shared across the project:
- Type aliases for domain strings (character ids, attribute names).
- Enums for elements, roles, optimization criteria, search algorithms and
  score presentation classes.

Design
------
- Keep this module **standalone** (stdlib only) to avoid import cycles.
- ``str``-valued enums so values round-trip through YAML/JSON unchanged.

Integration
-----------
Imported by models, scoring, strategies and the ranker. No side effects.

Usage
-----
>>> from team_optimizer.core.types import Criteria, Role
>>> Criteria("boss_fight") is Criteria.BOSS_FIGHT
True
>>> Role.HYBRID.value
'hybrid'
"""

from __future__ import annotations

from enum import Enum
from typing import Final, TypeAlias

# ---------------------------------------------------------------------------
# Type aliases (domain strings)
# ---------------------------------------------------------------------------
CharacterId: TypeAlias = str
AttributeName: TypeAlias = str
RecommendationId: TypeAlias = str

__all__: Final[list[str]] = [
    "CharacterId",
    "AttributeName",
    "RecommendationId",
    "Element",
    "Role",
    "Criteria",
    "Algorithm",
    "ScoreClass",
    "SUPPORT_ABILITY_TYPES",
    "TEAM_SIZE",
    "parse_element",
]

#: Maximum number of members in a team.
TEAM_SIZE: Final[int] = 4

#: Ability tags that count towards a character's synergy potential.
SUPPORT_ABILITY_TYPES: Final[frozenset[str]] = frozenset({"heal", "buff", "debuff"})


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class Element(str, Enum):
    """Elemental affinity of a character. ``None`` on a record means neutral."""

    FIRE = "fire"
    WATER = "water"
    ICE = "ice"
    LIGHTNING = "lightning"
    EARTH = "earth"
    LIGHT = "light"
    DARK = "dark"
    VOID = "void"
    PHYSICAL = "physical"


class Role(str, Enum):
    """Coarse behavioural category derived from a character's stats."""

    TANK = "tank"
    SUPPORT = "support"
    ATTACKER = "attacker"
    HYBRID = "hybrid"


class Criteria(str, Enum):
    """Optimization goal selecting a weight profile."""

    BOSS_FIGHT = "boss_fight"
    EXPLORATION = "exploration"
    BALANCED = "balanced"
    SPEED_RUN = "speed_run"
    SURVIVAL = "survival"
    ELEMENTAL = "elemental"


class Algorithm(str, Enum):
    """Search strategies, in the order the ranker runs them."""

    GREEDY_OPTIMIZATION = "greedy_optimization"
    GENETIC_ALGORITHM = "genetic_algorithm"
    WEIGHTED_SCORING = "weighted_scoring"
    ROLE_BALANCED = "role_balanced"


class ScoreClass(str, Enum):
    """Presentation bucket for a team score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    AVERAGE = "average"
    POOR = "poor"
    TERRIBLE = "terrible"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def parse_element(value: object) -> Element | None:
    """Parse an element name; ``None``, empty strings and ``"neutral"`` mean no element.

    Raises:
        ValueError: If ``value`` names an unknown element.
    """

    if value is None or isinstance(value, Element):
        return value
    text = str(value).strip().lower()
    if not text or text == "neutral":
        return None
    return Element(text)

"""
Team analyzer: strengths, weaknesses and elemental synergies.

Overview
--------
Produce a human-facing report over a finalized team: the team score, the
role distribution, the elements covered, rule-based strengths/weaknesses and
the elemental pair synergies present.

Design
------
- Rules are transparent and table-driven; they never affect ranking.
- Criteria-specific rules exist for boss fights, survival and speed runs;
  the other criteria only get the generic role/element rules.

Integration
-----------
Called by the ranker for every valid team; the UI shows the first three
strengths, the first two weaknesses and every synergy.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Final, Optional, Sequence

from team_optimizer.core.models import CharacterRecord, Synergy, TeamAnalysis
from team_optimizer.core.scoring import Scorer, weights_for
from team_optimizer.core.types import Criteria, Element, Role
from team_optimizer.infra.logging import logger_for

__all__: Final[list[str]] = [
    "ElementCombo",
    "ELEMENT_COMBOS",
    "analyze_team",
    "team_synergies",
]


@dataclass(slots=True, frozen=True)
class ElementCombo:
    elements: frozenset[Element]
    name: str
    bonus: str


ELEMENT_COMBOS: Final[list[ElementCombo]] = [
    ElementCombo(frozenset({Element.FIRE, Element.LIGHTNING}), "Explosive Combo", "Increased critical damage"),
    ElementCombo(frozenset({Element.WATER, Element.ICE}), "Freeze Lock", "Enhanced crowd control"),
    ElementCombo(frozenset({Element.LIGHT, Element.DARK}), "Duality", "Balanced offensive/defensive"),
]


def team_synergies(team: Sequence[CharacterRecord]) -> list[Synergy]:
    """Return the element-pair synergies whose elements are all present in ``team``."""

    elements = {c.element for c in team if c.element is not None}
    return [
        Synergy(type="elemental", name=combo.name, bonus=combo.bonus)
        for combo in ELEMENT_COMBOS
        if combo.elements <= elements
    ]


def _criteria_rules(criteria: Criteria, roles: Counter[Role]) -> tuple[list[str], list[str]]:
    strengths: list[str] = []
    weaknesses: list[str] = []
    if criteria is Criteria.BOSS_FIGHT:
        if roles[Role.ATTACKER] >= 2:
            strengths.append("High damage potential")
        if not roles[Role.SUPPORT]:
            weaknesses.append("Lacks healing support")
    elif criteria is Criteria.SURVIVAL:
        if roles[Role.TANK] and roles[Role.SUPPORT]:
            strengths.append("Strong defensive core")
        if roles[Role.ATTACKER] >= 3:
            weaknesses.append("May lack survivability")
    elif criteria is Criteria.SPEED_RUN:
        if roles[Role.ATTACKER] >= 3:
            strengths.append("Maximum damage output")
        if roles[Role.TANK] >= 2:
            weaknesses.append("May be slow due to defensive focus")
    return strengths, weaknesses


def analyze_team(
    team: Sequence[CharacterRecord],
    criteria: Criteria,
    scorer: Scorer,
    *,
    thread_id: Optional[str] = None,
) -> TeamAnalysis:
    """Build the :class:`TeamAnalysis` of ``team`` under ``criteria``.

    An empty team yields an empty analysis with a zero score.
    """

    if not team:
        return TeamAnalysis()

    log = logger_for(component="core.analysis", event="analyze", thread_id=thread_id)
    roles: Counter[Role] = Counter(scorer.role_of(c) for c in team)
    coverage: list[Element] = []
    for member in team:
        if member.element is not None and member.element not in coverage:
            coverage.append(member.element)

    strengths: list[str] = []
    weaknesses: list[str] = []
    if len(roles) >= 3:
        strengths.append("Good role diversity")
    elif len(roles) <= 1:
        weaknesses.append("Limited role diversity")

    if len(coverage) >= 3:
        strengths.append("Excellent elemental coverage")
    elif len(coverage) <= 1:
        weaknesses.append("Limited elemental options")

    extra_strengths, extra_weaknesses = _criteria_rules(criteria, roles)
    strengths.extend(extra_strengths)
    weaknesses.extend(extra_weaknesses)

    analysis = TeamAnalysis(
        overall_score=scorer.team_score(team, weights_for(criteria)),
        strengths=strengths,
        weaknesses=weaknesses,
        role_distribution=dict(roles),
        elemental_coverage=coverage,
        synergies=team_synergies(team),
    )
    log.debug(
        "Team analyzed",
        members=[c.id for c in team],
        score=round(analysis.overall_score, 3),
        strengths=len(strengths),
        weaknesses=len(weaknesses),
        synergies=len(analysis.synergies),
    )
    return analysis

"""
Recommendation ranker: the optimizer's public entry point.

Overview
--------
``TeamOptimizer`` runs the four search strategies over the constrained
candidate pool, discards teams that violate the constraints, analyzes and
scores the rest, and returns them best first (at most four). It can also
apply a chosen team to the party through the injected persistence sink.

Design
------
- Collaborators (catalog, build store, stats provider, party sink) are passed
  to the constructor; there is no global lookup.
- Domain conditions (empty pool, contradictory constraints, no valid team)
  never raise: ``recommend`` returns an empty list and ``optimize`` also
  reports a status and the constraint diagnostics.
- Strategies share no mutable state; with ``settings.parallel`` they run on a
  thread pool. Each parallel run gets its own child random source drawn
  from the optimizer's RNG, so seeded runs stay reproducible.
- Sorting is stable, so equal scores keep strategy order.

Integration
-----------
Host applications build one ``TeamOptimizer`` and call ``optimize`` or
``recommend`` per request. The demo script ``scripts/optimize_team.py`` shows
the wiring with the in-memory roster.

Usage
-----
>>> optimizer = TeamOptimizer(roster, roster, roster, roster)  # doctest: +SKIP
>>> result = optimizer.optimize(Criteria.BOSS_FIGHT, Constraints(required_characters=["maelle"]))  # doctest: +SKIP
>>> result.best.team[0].id  # doctest: +SKIP
'maelle'
"""

from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Final, Optional, Sequence
from uuid import uuid4

from team_optimizer.core.analysis import analyze_team
from team_optimizer.core.collaborators import BuildStore, CharacterCatalog, PartySink, StatsProvider
from team_optimizer.core.constraints import (
    ConstraintIssue,
    IssueCode,
    diagnose,
    filter_pool,
    has_duplicates,
    is_valid_team,
)
from team_optimizer.core.exceptions import ConfigurationError
from team_optimizer.core.models import (
    CharacterRecord,
    Constraints,
    CriteriaWeights,
    PartyLayout,
    Recommendation,
)
from team_optimizer.core.scoring import Scorer, weights_for
from team_optimizer.core.strategies import CancelToken, GeneticParams, run_strategy
from team_optimizer.core.types import Algorithm, Criteria
from team_optimizer.infra.config import OptimizerSettings
from team_optimizer.infra.logging import generate_thread_id, logger_for

__all__: Final[list[str]] = [
    "ALGORITHM_LABELS",
    "CRITERIA_LABELS",
    "CRITERIA_DESCRIPTIONS",
    "OptimizationStatus",
    "OptimizationResult",
    "TeamOptimizer",
]

CRITERIA_LABELS: Final[dict[Criteria, str]] = {
    Criteria.BOSS_FIGHT: "Boss Fight",
    Criteria.EXPLORATION: "Exploration",
    Criteria.BALANCED: "Balanced",
    Criteria.SPEED_RUN: "Speed Run",
    Criteria.SURVIVAL: "Survival",
    Criteria.ELEMENTAL: "Elemental Focus",
}

CRITERIA_DESCRIPTIONS: Final[dict[Criteria, str]] = {
    Criteria.BOSS_FIGHT: (
        "Optimizes for high damage output, survivability, and boss-specific mechanics. "
        "Prioritizes characters with strong single-target abilities."
    ),
    Criteria.EXPLORATION: (
        "Balances movement speed, utility abilities, and resource efficiency for long expeditions. "
        "Includes characters with traversal and support skills."
    ),
    Criteria.BALANCED: (
        "Creates well-rounded teams with good coverage across all aspects of gameplay. "
        "Ensures elemental diversity and role distribution."
    ),
    Criteria.SPEED_RUN: (
        "Maximizes clear speed and efficiency. Prioritizes high-damage characters and minimal setup time."
    ),
    Criteria.SURVIVAL: (
        "Focuses on defensive capabilities, healing, and sustain. "
        "Perfect for challenging content where staying alive is paramount."
    ),
    Criteria.ELEMENTAL: (
        "Optimizes elemental coverage and synergies. Ensures access to multiple elements for tactical advantage."
    ),
}

ALGORITHM_LABELS: Final[dict[Algorithm, str]] = {
    Algorithm.GREEDY_OPTIMIZATION: "Greedy",
    Algorithm.GENETIC_ALGORITHM: "Genetic",
    Algorithm.WEIGHTED_SCORING: "Weighted",
    Algorithm.ROLE_BALANCED: "Balanced",
}


class OptimizationStatus(str, Enum):
    """Outcome of one optimization request."""

    OK = "ok"
    EMPTY_POOL = "empty_pool"
    CONTRADICTORY_CONSTRAINTS = "contradictory_constraints"
    NO_VALID_TEAM = "no_valid_team"


@dataclass(slots=True)
class OptimizationResult:
    """Ranked recommendations plus diagnostics.

    Attributes:
        criteria: The criteria used for scoring.
        recommendations: Valid teams, best first.
        pool_size: Number of characters left after filtering.
        status: Why the list is empty, or ``ok``.
        issues: Constraint diagnostics (may be non-empty even when ``ok``).
        cancelled: Whether the run was cut short by cancellation or time budget.
    """

    criteria: Criteria
    recommendations: list[Recommendation]
    pool_size: int
    status: OptimizationStatus
    issues: list[ConstraintIssue] = field(default_factory=list)
    cancelled: bool = False

    @property
    def best(self) -> Optional[Recommendation]:
        return self.recommendations[0] if self.recommendations else None


class TeamOptimizer:
    """Run every search strategy and rank the valid teams they produce."""

    def __init__(
        self,
        catalog: CharacterCatalog,
        builds: BuildStore,
        stats: StatsProvider,
        party_sink: Optional[PartySink] = None,
        *,
        settings: Optional[OptimizerSettings] = None,
        rng: Optional[random.Random] = None,
        genetic_params: Optional[GeneticParams] = None,
    ) -> None:
        self._catalog = catalog
        self._builds = builds
        self._stats = stats
        self._party_sink = party_sink
        self.settings = settings or OptimizerSettings()
        self._rng = rng if rng is not None else random.Random(self.settings.seed)
        self._genetic_params = genetic_params or GeneticParams()

    # -------------------------
    # Ranking
    # -------------------------
    def recommend(
        self,
        criteria: Criteria | str,
        constraints: Optional[Constraints] = None,
        *,
        cancel: Optional[CancelToken] = None,
        thread_id: Optional[str] = None,
    ) -> list[Recommendation]:
        """Return up to ``settings.max_recommendations`` valid teams, best first."""

        return self.optimize(criteria, constraints, cancel=cancel, thread_id=thread_id).recommendations

    def optimize(
        self,
        criteria: Criteria | str,
        constraints: Optional[Constraints] = None,
        *,
        cancel: Optional[CancelToken] = None,
        thread_id: Optional[str] = None,
    ) -> OptimizationResult:
        """Rank the strategies' teams and explain an empty outcome.

        Args:
            criteria: Optimization goal; unknown values fall back to balanced.
            constraints: Active constraints; ``None`` means unconstrained.
            cancel: Optional cooperative cancellation token. When omitted and
                ``settings.time_budget_s`` is set, a deadline token is created.
            thread_id: Optional correlation ID for structured logging.

        Returns:
            An :class:`OptimizationResult`; never raises for empty pools or
            contradictory constraints.
        """

        thread_id = thread_id or generate_thread_id()
        log = logger_for(component="core.optimizer", event="optimize", thread_id=thread_id)

        criteria = self._resolve_criteria(criteria)
        constraints = constraints if constraints is not None else Constraints()
        if cancel is None and self.settings.time_budget_s is not None:
            cancel = CancelToken(time_budget_s=self.settings.time_budget_s)

        characters = self._catalog.get_all_characters()
        pool = filter_pool(characters, constraints, self._builds)
        issues = diagnose(characters, constraints, self._builds, pool, team_size=self.settings.team_size)
        weights = weights_for(criteria)
        scorer = Scorer(self._builds, self._stats, thread_id=thread_id)

        log.info(
            "Optimization started",
            criteria=criteria.value,
            catalog=len(characters),
            pool=len(pool),
        )
        for issue in issues:
            log.warning("Constraint issue", code=issue.code.value, subject=issue.subject, detail=issue.message)

        recommendations: list[Recommendation] = []
        if pool:
            teams = self._run_strategies(pool, constraints, weights, scorer, cancel, thread_id)
            for algorithm, team in teams:
                if not self._acceptable(team, constraints):
                    log.info("Team discarded", algorithm=algorithm.value, members=[c.id for c in team])
                    continue
                analysis = analyze_team(team, criteria, scorer, thread_id=thread_id)
                recommendations.append(Recommendation(
                    id=f"{algorithm.value}_{uuid4().hex[:8]}",
                    algorithm=algorithm,
                    team=list(team),
                    analysis=analysis,
                    score=analysis.overall_score,
                ))
            recommendations.sort(key=lambda r: r.score, reverse=True)
            recommendations = recommendations[: self.settings.max_recommendations]

        status = self._status(pool, issues, recommendations)
        log.info(
            "Optimization finished",
            status=status.value,
            recommendations=len(recommendations),
            best=round(recommendations[0].score, 3) if recommendations else None,
        )
        return OptimizationResult(
            criteria=criteria,
            recommendations=recommendations,
            pool_size=len(pool),
            status=status,
            issues=issues,
            cancelled=cancel is not None and cancel.cancelled,
        )

    # -------------------------
    # Party application
    # -------------------------
    def apply_team_to_party(
        self,
        team: Sequence[CharacterRecord] | Recommendation,
        *,
        thread_id: Optional[str] = None,
    ) -> PartyLayout:
        """Persist ``team`` as the party: three active members, the fourth in reserve.

        Raises:
            ConfigurationError: If the optimizer was built without a party sink.
        """

        log = logger_for(component="core.optimizer", event="apply_party", thread_id=thread_id)
        if self._party_sink is None:
            raise ConfigurationError(setting="party_sink", reason="no party sink configured")
        members = team.team if isinstance(team, Recommendation) else list(team)
        layout = PartyLayout.from_team(members)
        self._party_sink.save_party(layout)
        log.info("Team applied to party", active=layout.active, reserve=layout.reserve)
        return layout

    # -------------------------
    # Internals
    # -------------------------
    @staticmethod
    def _resolve_criteria(criteria: Criteria | str) -> Criteria:
        try:
            return Criteria(criteria)
        except ValueError:
            return Criteria.BALANCED

    def _acceptable(self, team: Sequence[CharacterRecord], constraints: Constraints) -> bool:
        return (
            0 < len(team) <= self.settings.team_size
            and not has_duplicates(team)
            and is_valid_team(team, constraints)
        )

    def _run_strategies(
        self,
        pool: list[CharacterRecord],
        constraints: Constraints,
        weights: CriteriaWeights,
        scorer: Scorer,
        cancel: Optional[CancelToken],
        thread_id: str,
    ) -> list[tuple[Algorithm, list[CharacterRecord]]]:
        algorithms = list(Algorithm)

        def _run(algorithm: Algorithm, rng: random.Random) -> list[CharacterRecord]:
            return run_strategy(
                algorithm, pool, constraints, weights, scorer,
                rng=rng, params=self._genetic_params, team_size=self.settings.team_size,
                cancel=cancel, thread_id=thread_id,
            )

        if not self.settings.parallel:
            return [(a, _run(a, self._rng)) for a in algorithms]

        rngs = [random.Random(self._rng.getrandbits(64)) for _ in algorithms]
        with ThreadPoolExecutor(max_workers=len(algorithms)) as executor:
            futures = [executor.submit(_run, a, r) for a, r in zip(algorithms, rngs)]
            return [(a, f.result()) for a, f in zip(algorithms, futures)]

    @staticmethod
    def _status(
        pool: Sequence[CharacterRecord],
        issues: Sequence[ConstraintIssue],
        recommendations: Sequence[Recommendation],
    ) -> OptimizationStatus:
        if recommendations:
            return OptimizationStatus.OK
        contradictions = [i for i in issues if i.code is not IssueCode.EMPTY_POOL]
        if contradictions:
            return OptimizationStatus.CONTRADICTORY_CONSTRAINTS
        if not pool:
            return OptimizationStatus.EMPTY_POOL
        return OptimizationStatus.NO_VALID_TEAM

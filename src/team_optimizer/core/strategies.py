"""
Team search strategies.

Overview
--------
Four independent heuristics that each pick one team (up to four members)
from the candidate pool:

- **Greedy optimization**: seed with the required characters, then add the
  candidate that maximizes the resulting team score until the team is full.
- **Genetic algorithm**: evolve random teams with tournament selection,
  single-point crossover and mutation; return the fittest individual.
- **Weighted scoring**: take the required characters, then the best
  individually scored characters.
- **Role-balanced selection**: fill a fixed role quota (2 attackers,
  1 support, 1 tank) with the best individually scored character per role.

Design
------
- Uniform signature ``(pool, constraints, weights, scorer, *, ...)`` returning
  a plain list of characters; the ranker validates the result.
- No shared mutable state between strategies, so they can run concurrently.
- The genetic algorithm draws from an injected ``random.Random``; tests pass a
  seeded instance for reproducible runs.
- Cancellation is cooperative: ``CancelToken`` is checked after each greedy
  insertion and at each generation boundary. A cancelled strategy returns
  the best team it has so far.
- Ties resolve to the first candidate in pool order.

Integration
-----------
Called by ``team_optimizer.core.optimizer.TeamOptimizer`` through
``run_strategy``; each can also be called directly.

Usage
-----
>>> import random
>>> team = genetic_algorithm(pool, Constraints(), weights, scorer, rng=random.Random(7))  # doctest: +SKIP
"""

from __future__ import annotations

import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, Final, Optional, Sequence

from team_optimizer.core.exceptions import ConfigurationError
from team_optimizer.core.models import CharacterRecord, Constraints, CriteriaWeights, Team
from team_optimizer.core.scoring import Scorer
from team_optimizer.core.types import TEAM_SIZE, Algorithm, Role
from team_optimizer.infra.logging import logger_for

__all__: Final[list[str]] = [
    "CancelToken",
    "GeneticParams",
    "ROLE_TARGETS",
    "STRATEGIES",
    "greedy_optimization",
    "genetic_algorithm",
    "weighted_scoring",
    "role_balanced",
    "run_strategy",
]

#: Role quota for role-balanced selection, visited in this order.
ROLE_TARGETS: Final[dict[Role, int]] = {
    Role.ATTACKER: 2,
    Role.SUPPORT: 1,
    Role.TANK: 1,
    Role.HYBRID: 0,
}


# ---------------------------------------------------------------------------
# Cancellation & parameters
# ---------------------------------------------------------------------------
class CancelToken:
    """Cooperative cancellation flag with an optional wall-clock deadline."""

    def __init__(self, *, time_budget_s: Optional[float] = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + time_budget_s if time_budget_s is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline


@dataclass(slots=True, frozen=True)
class GeneticParams:
    """Tuning knobs of the genetic algorithm."""

    population_size: int = 20
    generations: int = 10
    mutation_rate: float = 0.1
    tournament_size: int = 3

    def __post_init__(self) -> None:
        if self.population_size < 2:
            raise ConfigurationError(setting="population_size", reason="must be >= 2")
        if self.generations < 0:
            raise ConfigurationError(setting="generations", reason="must be >= 0")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError(setting="mutation_rate", reason="must be within [0, 1]")
        if self.tournament_size < 1:
            raise ConfigurationError(setting="tournament_size", reason="must be >= 1")


def _is_cancelled(cancel: Optional[CancelToken]) -> bool:
    return cancel is not None and cancel.cancelled


def _seed_required(pool: Sequence[CharacterRecord], constraints: Constraints, team_size: int) -> Team:
    """Return the required characters present in the pool, in constraint order."""

    by_id = {c.id: c for c in pool}
    team: Team = []
    for required in constraints.required_characters:
        if len(team) >= team_size:
            break
        character = by_id.get(required)
        if character is not None and all(c.id != character.id for c in team):
            team.append(character)
    return team


def _unique_by_id(team: Sequence[CharacterRecord]) -> Team:
    seen: set[str] = set()
    out: Team = []
    for c in team:
        if c.id not in seen:
            out.append(c)
            seen.add(c.id)
    return out


# ---------------------------------------------------------------------------
# Greedy optimization
# ---------------------------------------------------------------------------

def greedy_optimization(
    pool: Sequence[CharacterRecord],
    constraints: Constraints,
    weights: CriteriaWeights,
    scorer: Scorer,
    *,
    team_size: int = TEAM_SIZE,
    cancel: Optional[CancelToken] = None,
    thread_id: Optional[str] = None,
) -> Team:
    """Build a team one member at a time, always taking the best next addition.

    Deterministic for a fixed pool order: the first candidate reaching the
    best score wins ties.
    """

    log = logger_for(component="core.strategies", event="greedy", thread_id=thread_id)
    team = _seed_required(pool, constraints, team_size)
    chosen = {c.id for c in team}
    remaining = [c for c in pool if c.id not in chosen]

    while len(team) < team_size and remaining:
        if _is_cancelled(cancel):
            log.info("Greedy search cancelled", size=len(team))
            break
        best: Optional[CharacterRecord] = None
        best_score = 0.0
        for candidate in remaining:
            score = scorer.team_score([*team, candidate], weights)
            if best is None or score > best_score:
                best, best_score = candidate, score
        if best is None:
            break
        team.append(best)
        remaining = [c for c in remaining if c.id != best.id]

    log.info("Greedy team built", members=[c.id for c in team])
    return team


# ---------------------------------------------------------------------------
# Genetic algorithm
# ---------------------------------------------------------------------------

def _random_team(pool: Sequence[CharacterRecord], rng: random.Random, team_size: int) -> Team:
    return rng.sample(list(pool), min(team_size, len(pool)))


def _tournament(population: Sequence[Team], fitness: Sequence[float], rng: random.Random, size: int) -> Team:
    best = rng.randrange(len(population))
    for _ in range(1, size):
        candidate = rng.randrange(len(population))
        if fitness[candidate] > fitness[best]:
            best = candidate
    return population[best]


def _repair(child: Team, pool: Sequence[CharacterRecord], size: int, rng: random.Random) -> Team:
    """Top a de-duplicated child back up to ``size`` with random non-members."""

    if len(child) >= size:
        return child
    members = {c.id for c in child}
    outsiders = [c for c in pool if c.id not in members]
    return [*child, *rng.sample(outsiders, min(size - len(child), len(outsiders)))]


def _crossover(
    parent1: Team,
    parent2: Team,
    pool: Sequence[CharacterRecord],
    rng: random.Random,
) -> tuple[Team, Team]:
    point = rng.randrange(len(parent1)) if parent1 else 0
    size = max(len(parent1), len(parent2))
    child1 = _unique_by_id([*parent1[:point], *parent2[point:]])
    child2 = _unique_by_id([*parent2[:point], *parent1[point:]])
    return _repair(child1, pool, size, rng), _repair(child2, pool, size, rng)


def _mutate(team: Team, pool: Sequence[CharacterRecord], rate: float, rng: random.Random) -> Team:
    if not team or rng.random() >= rate:
        return team
    index = rng.randrange(len(team))
    members = {c.id for c in team}
    outsiders = [c for c in pool if c.id not in members]
    if not outsiders:
        return team
    mutated = list(team)
    mutated[index] = rng.choice(outsiders)
    return mutated


def _fittest(population: Sequence[Team], fitness: Sequence[float]) -> Team:
    best_index = max(range(len(population)), key=lambda i: fitness[i])
    return population[best_index]


def genetic_algorithm(
    pool: Sequence[CharacterRecord],
    constraints: Constraints,
    weights: CriteriaWeights,
    scorer: Scorer,
    *,
    rng: Optional[random.Random] = None,
    params: GeneticParams = GeneticParams(),
    team_size: int = TEAM_SIZE,
    cancel: Optional[CancelToken] = None,
    thread_id: Optional[str] = None,
) -> Team:
    """Evolve random teams and return the fittest individual.

    Constraints are not enforced during evolution; the ranker discards an
    individual that misses a required character or element.

    Args:
        pool: Candidate characters.
        constraints: Active constraints (unused during evolution).
        weights: Criteria weights used for fitness.
        scorer: Team scorer.
        rng: Random source; a fresh unseeded ``random.Random`` when omitted.
        params: Population, generation, mutation and tournament settings.
        team_size: Maximum team size.
        cancel: Optional cancellation token checked per generation.
        thread_id: Optional correlation ID for structured logging.

    Returns:
        The fittest team of the final (or last completed) generation; empty
        when the pool is empty.
    """

    log = logger_for(component="core.strategies", event="genetic", thread_id=thread_id)
    if not pool:
        log.info("Empty pool; genetic search skipped")
        return []

    rng = rng if rng is not None else random.Random()
    population = [_random_team(pool, rng, team_size) for _ in range(params.population_size)]
    fitness = [scorer.team_score(t, weights) for t in population]

    completed = 0
    for generation in range(params.generations):
        if _is_cancelled(cancel):
            log.info("Genetic search cancelled", generation=generation)
            break
        offspring: list[Team] = []
        for _ in range(params.population_size // 2):
            parent1 = _tournament(population, fitness, rng, params.tournament_size)
            parent2 = _tournament(population, fitness, rng, params.tournament_size)
            child1, child2 = _crossover(parent1, parent2, pool, rng)
            offspring.append(_mutate(child1, pool, params.mutation_rate, rng))
            offspring.append(_mutate(child2, pool, params.mutation_rate, rng))
        if not offspring:
            break
        population = offspring
        fitness = [scorer.team_score(t, weights) for t in population]
        completed += 1

    best = _fittest(population, fitness)
    log.info(
        "Genetic search finished",
        generations=completed,
        best=round(max(fitness), 3),
        members=[c.id for c in best],
    )
    return list(best)


# ---------------------------------------------------------------------------
# Weighted scoring
# ---------------------------------------------------------------------------

def weighted_scoring(
    pool: Sequence[CharacterRecord],
    constraints: Constraints,
    weights: CriteriaWeights,
    scorer: Scorer,
    *,
    team_size: int = TEAM_SIZE,
    cancel: Optional[CancelToken] = None,
    thread_id: Optional[str] = None,
) -> Team:
    """Required characters first, then the top individually scored characters."""

    log = logger_for(component="core.strategies", event="weighted", thread_id=thread_id)
    ranked = sorted(pool, key=lambda c: scorer.score(c, weights), reverse=True)

    team = _seed_required(pool, constraints, team_size)
    chosen = {c.id for c in team}
    for character in ranked:
        if len(team) >= team_size:
            break
        if character.id not in chosen:
            team.append(character)
            chosen.add(character.id)

    log.info("Weighted team built", members=[c.id for c in team])
    return team


# ---------------------------------------------------------------------------
# Role-balanced selection
# ---------------------------------------------------------------------------

def role_balanced(
    pool: Sequence[CharacterRecord],
    constraints: Constraints,
    weights: CriteriaWeights,
    scorer: Scorer,
    *,
    team_size: int = TEAM_SIZE,
    cancel: Optional[CancelToken] = None,
    thread_id: Optional[str] = None,
) -> Team:
    """Fill the role quota with the best character of each role.

    Required characters are seeded first and consume their role's quota. The
    team may stay below full size when a role has no available character.
    """

    log = logger_for(component="core.strategies", event="role_balanced", thread_id=thread_id)
    quota = dict(ROLE_TARGETS)

    by_role: dict[Role, list[CharacterRecord]] = {role: [] for role in ROLE_TARGETS}
    for character in pool:
        by_role[scorer.role_of(character)].append(character)

    team = _seed_required(pool, constraints, team_size)
    for member in team:
        quota[scorer.role_of(member)] -= 1

    chosen = {c.id for c in team}
    for role, count in quota.items():
        available = [c for c in by_role[role] if c.id not in chosen]
        filled = 0
        while filled < count and available and len(team) < team_size:
            best = max(available, key=lambda c: scorer.score(c, weights))
            team.append(best)
            chosen.add(best.id)
            available.remove(best)
            filled += 1

    log.info("Role-balanced team built", members=[c.id for c in team],
             unmet={r.value: n for r, n in quota.items() if n > 0})
    return team


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
STRATEGIES: Final[dict[Algorithm, Callable[..., Team]]] = {
    Algorithm.GREEDY_OPTIMIZATION: greedy_optimization,
    Algorithm.GENETIC_ALGORITHM: genetic_algorithm,
    Algorithm.WEIGHTED_SCORING: weighted_scoring,
    Algorithm.ROLE_BALANCED: role_balanced,
}


def run_strategy(
    algorithm: Algorithm,
    pool: Sequence[CharacterRecord],
    constraints: Constraints,
    weights: CriteriaWeights,
    scorer: Scorer,
    *,
    rng: Optional[random.Random] = None,
    params: Optional[GeneticParams] = None,
    team_size: int = TEAM_SIZE,
    cancel: Optional[CancelToken] = None,
    thread_id: Optional[str] = None,
) -> Team:
    """Dispatch to the strategy registered for ``algorithm``."""

    if algorithm is Algorithm.GENETIC_ALGORITHM:
        return genetic_algorithm(
            pool, constraints, weights, scorer,
            rng=rng, params=params or GeneticParams(), team_size=team_size,
            cancel=cancel, thread_id=thread_id,
        )
    strategy = STRATEGIES[algorithm]
    return strategy(pool, constraints, weights, scorer, team_size=team_size, cancel=cancel, thread_id=thread_id)

"""
Search strategy tests.

Overview
--------
Check each strategy on the sample roster: determinism of greedy and weighted
selection, greedy monotonicity, the role quota, seeded reproducibility of the
genetic algorithm, small pools and cooperative cancellation.

Design
------
- Pools come from ``filter_pool`` so the catalog order is preserved.
- The genetic algorithm always receives a seeded ``random.Random``.
"""

from __future__ import annotations

import random
from collections import Counter

import pytest

from team_optimizer.core import models, strategies
from team_optimizer.core.constraints import filter_pool
from team_optimizer.core.exceptions import ConfigurationError
from team_optimizer.core.models import Constraints
from team_optimizer.core.scoring import BALANCED_WEIGHTS, Scorer, weights_for
from team_optimizer.core.strategies import (
    STRATEGIES,
    CancelToken,
    GeneticParams,
    genetic_algorithm,
    greedy_optimization,
    role_balanced,
    run_strategy,
    weighted_scoring,
)
from team_optimizer.core.types import Algorithm, Criteria, Role


def _ids(team) -> list[str]:
    return [c.id for c in team]


@pytest.fixture()
def pool(world):
    return filter_pool(world.get_all_characters(), Constraints(), world)


# ---------------------------------------------------------------------------
# Greedy optimization
# ---------------------------------------------------------------------------


def test_greedy_is_deterministic(pool, scorer: Scorer) -> None:
    first = greedy_optimization(pool, Constraints(), BALANCED_WEIGHTS, scorer)
    second = greedy_optimization(pool, Constraints(), BALANCED_WEIGHTS, scorer)
    assert len(first) == 4
    assert _ids(first) == _ids(second)


def test_greedy_picks_best_candidate_at_each_step(pool, scorer: Scorer) -> None:
    team = greedy_optimization(pool, Constraints(), BALANCED_WEIGHTS, scorer)

    for step in range(len(team)):
        prefix = team[:step]
        chosen = scorer.team_score([*prefix, team[step]], BALANCED_WEIGHTS)
        for candidate in pool:
            if candidate in prefix:
                continue
            assert chosen >= scorer.team_score([*prefix, candidate], BALANCED_WEIGHTS)


def test_greedy_seeds_required_characters(pool, scorer: Scorer) -> None:
    constraints = Constraints(required_characters=["verso", "lune"])
    team = greedy_optimization(pool, constraints, BALANCED_WEIGHTS, scorer)
    assert _ids(team)[:2] == ["verso", "lune"]
    assert len(set(_ids(team))) == 4


def test_greedy_stops_when_cancelled(pool, scorer: Scorer) -> None:
    token = CancelToken()
    token.cancel()
    constraints = Constraints(required_characters=["monoco"])
    assert _ids(greedy_optimization(pool, constraints, BALANCED_WEIGHTS, scorer, cancel=token)) == ["monoco"]


# ---------------------------------------------------------------------------
# Weighted scoring
# ---------------------------------------------------------------------------


def test_weighted_takes_top_individual_scores(pool, scorer: Scorer) -> None:
    weights = weights_for(Criteria.BOSS_FIGHT)
    ranked = sorted(pool, key=lambda c: scorer.score(c, weights), reverse=True)

    team = weighted_scoring(pool, Constraints(), weights, scorer)
    assert _ids(team) == _ids(ranked[:4])
    assert _ids(team) == _ids(weighted_scoring(pool, Constraints(), weights, scorer))


def test_weighted_puts_required_first(pool, scorer: Scorer) -> None:
    team = weighted_scoring(pool, Constraints(required_characters=["sciel"]), BALANCED_WEIGHTS, scorer)
    assert _ids(team)[0] == "sciel"
    assert len(team) == 4
    assert _ids(team).count("sciel") == 1


# ---------------------------------------------------------------------------
# Role-balanced selection
# ---------------------------------------------------------------------------


def test_role_balanced_fills_quota(pool, scorer: Scorer) -> None:
    team = role_balanced(pool, Constraints(), BALANCED_WEIGHTS, scorer)
    roles = Counter(scorer.role_of(c) for c in team)
    assert roles == Counter({Role.ATTACKER: 2, Role.SUPPORT: 1, Role.TANK: 1})
    assert {"gustave", "maelle", "monoco"} <= set(_ids(team))
    assert "verso" not in _ids(team)


def test_role_balanced_best_support_is_chosen(pool, scorer: Scorer) -> None:
    team = role_balanced(pool, Constraints(), BALANCED_WEIGHTS, scorer)
    supports = [c for c in pool if scorer.role_of(c) is Role.SUPPORT]
    best = max(supports, key=lambda c: scorer.score(c, BALANCED_WEIGHTS))
    assert best.id in _ids(team)


def test_role_balanced_required_consumes_quota(pool, scorer: Scorer) -> None:
    constraints = Constraints(required_characters=["lune"])
    team = role_balanced(pool, constraints, BALANCED_WEIGHTS, scorer)
    assert _ids(team)[0] == "lune"
    assert "sciel" not in _ids(team)


def test_role_balanced_may_stay_short(roster_factory) -> None:
    """Without a tank or support the quota cannot be filled."""

    world = roster_factory(
        {"id": "a1", "stats": {"attack": 50}},
        {"id": "a2", "stats": {"attack": 40}},
        {"id": "a3", "stats": {"attack": 30}},
    )
    scorer = Scorer(world, world)
    team = role_balanced(world.get_all_characters(), Constraints(), BALANCED_WEIGHTS, scorer)
    assert _ids(team) == ["a1", "a2"]


# ---------------------------------------------------------------------------
# Genetic algorithm
# ---------------------------------------------------------------------------


def test_genetic_is_reproducible_with_seed(pool, scorer: Scorer) -> None:
    first = genetic_algorithm(pool, Constraints(), BALANCED_WEIGHTS, scorer, rng=random.Random(7))
    second = genetic_algorithm(pool, Constraints(), BALANCED_WEIGHTS, scorer, rng=random.Random(7))
    assert _ids(first) == _ids(second)


@pytest.mark.parametrize("seed", range(10))  # type: ignore[misc]
def test_genetic_teams_have_distinct_members(pool, scorer: Scorer, seed: int) -> None:
    params = GeneticParams(population_size=8, generations=5, mutation_rate=0.5)
    team = genetic_algorithm(pool, Constraints(), BALANCED_WEIGHTS, scorer, rng=random.Random(seed), params=params)
    assert len(team) == 4
    assert len(set(_ids(team))) == 4
    assert set(_ids(team)) <= set(_ids(pool))


def test_genetic_empty_pool(scorer: Scorer) -> None:
    assert genetic_algorithm([], Constraints(), BALANCED_WEIGHTS, scorer, rng=random.Random(1)) == []


def test_genetic_cancelled_returns_initial_fittest(pool, scorer: Scorer) -> None:
    token = CancelToken()
    token.cancel()
    team = genetic_algorithm(pool, Constraints(), BALANCED_WEIGHTS, scorer, rng=random.Random(3), cancel=token)
    assert len(team) == 4


@pytest.mark.parametrize(
    "kwargs",
    [
        {"population_size": 1},
        {"generations": -1},
        {"mutation_rate": 1.5},
        {"tournament_size": 0},
    ],
)  # type: ignore[misc]
def test_genetic_params_are_validated(kwargs: dict) -> None:
    with pytest.raises(ConfigurationError):
        GeneticParams(**kwargs)


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------


def test_registry_covers_every_algorithm() -> None:
    assert list(STRATEGIES) == list(Algorithm)


def test_strategies_share_the_model_team_alias() -> None:
    assert strategies.Team is models.Team


@pytest.mark.parametrize("algorithm", list(Algorithm))  # type: ignore[misc]
def test_two_character_pool_yields_team_of_two(roster_factory, algorithm: Algorithm) -> None:
    world = roster_factory(
        {"id": "blade", "element": "fire", "stats": {"attack": 60, "defense": 10, "hp": 200}},
        {"id": "wall", "element": "earth", "stats": {"attack": 10, "defense": 60, "hp": 400}},
    )
    scorer = Scorer(world, world)
    team = run_strategy(
        algorithm, world.get_all_characters(), Constraints(), BALANCED_WEIGHTS, scorer, rng=random.Random(5)
    )
    assert sorted(_ids(team)) == ["blade", "wall"]


@pytest.mark.parametrize("algorithm", list(Algorithm))  # type: ignore[misc]
def test_strategies_respect_team_size(pool, scorer: Scorer, algorithm: Algorithm) -> None:
    team = run_strategy(
        algorithm, pool, Constraints(), BALANCED_WEIGHTS, scorer, rng=random.Random(11), team_size=3
    )
    assert 0 < len(team) <= 3
    assert len(set(_ids(team))) == len(team)


def test_cancel_token_deadline() -> None:
    assert CancelToken(time_budget_s=0).cancelled
    assert not CancelToken(time_budget_s=60).cancelled
    assert not CancelToken().cancelled

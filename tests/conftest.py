"""
Pytest configuration and shared fixtures.

Overview
--------
Provide test-wide fixtures for logging, the sample roster, small synthetic
rosters, and ready-to-use scorer and optimizer instances. These fixtures keep
tests concise and consistent.

Design
------
- Load the sample roster YAML from the repository once per session and hand
  each test a deep copy, since party application mutates the roster.
- Expose a small factory for synthetic rosters with level-1 stats only, so
  expected scores can be computed by hand.
- Seed the optimizer's random source for reproducible genetic runs.

Integration
-----------
Imported implicitly by pytest. No side effects beyond optional logging setup.

Usage
-----
>>> # Example (inside a test module)
>>> def test_roster_has_characters(world):
...     assert len(world.get_all_characters()) == 6
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Callable, Final

import pytest

from team_optimizer.core.models import Build
from team_optimizer.core.optimizer import TeamOptimizer
from team_optimizer.core.scoring import Scorer
from team_optimizer.data.roster import BaseStats, InMemoryRoster, Roster, RosterCharacter, load_roster_from_yaml
from team_optimizer.infra.logging import generate_thread_id, setup_logging

# ---------------------------------------------------------------------------
# Repository paths for data files used in tests
# ---------------------------------------------------------------------------
ROOT: Final[Path] = Path(__file__).resolve().parents[1]
SAMPLE_ROSTER_PATH: Final[Path] = ROOT / "data" / "rosters" / "sample.yaml"

OPTIMIZER_SEED: Final[int] = 1234


# ---------------------------------------------------------------------------
# Session-scoped fixtures (logging and data)
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def thread_id() -> str:
    """Provide a session-wide correlation ID for structured logs."""

    return generate_thread_id()


@pytest.fixture(scope="session")
def logging_setup() -> None:
    """Initialize structlog so tests can emit structured logs if needed."""

    setup_logging()


@pytest.fixture(scope="session")
def sample_roster(logging_setup: None, thread_id: str) -> Roster:
    """Load the sample roster used across optimizer tests."""

    return load_roster_from_yaml(SAMPLE_ROSTER_PATH, thread_id=thread_id)


# ---------------------------------------------------------------------------
# Function-scoped fixtures (collaborators)
# ---------------------------------------------------------------------------

@pytest.fixture()
def world(sample_roster: Roster) -> InMemoryRoster:
    """Return a fresh in-memory roster (catalog, builds, stats, party sink)."""

    return InMemoryRoster(sample_roster.model_copy(deep=True))


@pytest.fixture()
def scorer(world: InMemoryRoster, thread_id: str) -> Scorer:
    """Return a scorer bound to the sample roster."""

    return Scorer(world, world, thread_id=thread_id)


@pytest.fixture()
def optimizer(world: InMemoryRoster) -> TeamOptimizer:
    """Return an optimizer over the sample roster with a seeded random source."""

    return TeamOptimizer(world, world, world, world, rng=random.Random(OPTIMIZER_SEED))


@pytest.fixture()
def roster_factory() -> Callable[..., InMemoryRoster]:
    """Return a factory building small synthetic rosters.

    Each entry is a mapping with ``id`` plus optional ``element``,
    ``abilities``, ``stats`` (level-1 stat table) and ``level`` (saved
    build level; omitted means no build).
    """

    def _make(*entries: dict[str, Any]) -> InMemoryRoster:
        characters: list[RosterCharacter] = []
        builds: dict[str, Build] = {}
        for entry in entries:
            fields = dict(entry)
            stats = fields.pop("stats", {})
            level = fields.pop("level", None)
            characters.append(RosterCharacter(base_stats=BaseStats(level1=stats), **fields))
            if level is not None:
                builds[fields["id"]] = Build(level=level)
        return InMemoryRoster(Roster(characters=characters, builds=builds))

    return _make

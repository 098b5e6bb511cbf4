"""
Roster loading and stats derivation tests.

Overview
--------
Validate the YAML loader's error mapping and the reference stats provider:
linear interpolation between the level-1 and level-50 tables plus attribute
scaling, rounded down.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from team_optimizer.core.exceptions import DataLoadError, NotFoundError, RosterValidationError
from team_optimizer.core.models import Build
from team_optimizer.data.roster import InMemoryRoster, load_roster_from_yaml

# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "roster.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_sample_roster_loads(sample_roster) -> None:
    assert [c.id for c in sample_roster.characters] == ["gustave", "maelle", "lune", "sciel", "monoco", "verso"]
    assert sample_roster.builds["gustave"].attributes == {"might": 5}
    assert "verso" not in sample_roster.builds


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DataLoadError):
        load_roster_from_yaml(tmp_path / "missing.yaml")


def test_root_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(RosterValidationError):
        load_roster_from_yaml(_write(tmp_path, "- a\n- b\n"))


def test_empty_file_is_an_empty_roster(tmp_path: Path) -> None:
    roster = load_roster_from_yaml(_write(tmp_path, ""))
    assert roster.characters == []


@pytest.mark.parametrize(
    "text",
    [
        "characters:\n  - {id: a}\n  - {id: a}\n",
        "characters:\n  - {id: a}\nbuilds:\n  b: {level: 3}\n",
        "characters:\n  - {id: a, element: plasma}\n",
        "characters:\n  - {id: a}\nbuilds:\n  a: {level: 0}\n",
    ],
)  # type: ignore[misc]
def test_invalid_rosters(tmp_path: Path, text: str) -> None:
    with pytest.raises(RosterValidationError):
        load_roster_from_yaml(_write(tmp_path, text))


# ---------------------------------------------------------------------------
# Stats provider
# ---------------------------------------------------------------------------


def test_stats_interpolate_with_level(world: InMemoryRoster) -> None:
    level1 = world.calculate_character_stats("gustave", 1, {})
    level50 = world.calculate_character_stats("gustave", 50, {})
    assert level1 is not None and level50 is not None
    assert (level1.attack, level1.speed, level1.hp) == (60, 40, 300)
    assert (level50.attack, level50.speed, level50.hp) == (158, 89, 790)
    # no level-50 entry: defense stays flat
    assert level50.defense == level1.defense == 30


def test_stats_include_attribute_scaling(world: InMemoryRoster) -> None:
    stats = world.calculate_character_stats("gustave", 20, {"might": 5, "vitality": 2, "luck": 9})
    assert stats is not None
    assert stats.attack == 108
    assert stats.defense == 32
    assert stats.hp == 510
    assert stats.speed == 59


def test_stats_round_down(roster_factory) -> None:
    world = roster_factory({"id": "x", "stats": {"attack": 10.9}})
    stats = world.calculate_character_stats("x", 1, {})
    assert stats is not None and stats.attack == 10


def test_unknown_character_has_no_stats(world: InMemoryRoster) -> None:
    assert world.calculate_character_stats("esquie", 10, {}) is None


# ---------------------------------------------------------------------------
# Catalog, builds & party
# ---------------------------------------------------------------------------


def test_catalog_lookup(world: InMemoryRoster) -> None:
    assert world.get_character("lune").name == "Lune"
    with pytest.raises(NotFoundError):
        world.get_character("esquie")


def test_save_build(world: InMemoryRoster) -> None:
    world.save_character_build("verso", Build(level=30))
    assert world.load_character_build("verso") == Build(level=30)
    with pytest.raises(NotFoundError):
        world.save_character_build("esquie", Build())


def test_default_party_is_empty(world: InMemoryRoster) -> None:
    party = world.load_party()
    assert party.active == [None, None, None]
    assert party.reserve == [None, None, None]

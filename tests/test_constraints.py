"""
Constraint engine tests: pool filtering, team validity and diagnostics.
"""

from __future__ import annotations

import pytest

from team_optimizer.core.constraints import (
    IssueCode,
    build_level,
    diagnose,
    filter_pool,
    has_duplicates,
    is_valid_team,
)
from team_optimizer.core.models import CharacterRecord, Constraints
from team_optimizer.core.types import Element


def _ids(team) -> list[str]:
    return [c.id for c in team]


def _codes(issues) -> list[IssueCode]:
    return [i.code for i in issues]


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def test_unconstrained_pool_keeps_catalog_order(world) -> None:
    pool = filter_pool(world.get_all_characters(), Constraints(), world)
    assert _ids(pool) == ["gustave", "maelle", "lune", "sciel", "monoco", "verso"]


def test_forbidden_characters_are_removed(world) -> None:
    pool = filter_pool(world.get_all_characters(), Constraints(forbidden_characters=["lune", "verso"]), world)
    assert _ids(pool) == ["gustave", "maelle", "sciel", "monoco"]


def test_level_bounds_use_saved_build_or_level_one(world) -> None:
    characters = world.get_all_characters()

    pool = filter_pool(characters, Constraints(min_level=10), world)
    assert _ids(pool) == ["gustave", "maelle", "lune", "monoco"]

    pool = filter_pool(characters, Constraints(max_level=12), world)
    assert _ids(pool) == ["lune", "sciel", "verso"]

    pool = filter_pool(characters, Constraints(min_level=12, max_level=20), world)
    assert _ids(pool) == ["gustave", "maelle", "lune"]


def test_duplicate_catalog_entries_are_collapsed(world) -> None:
    lune = world.get_character("lune")
    pool = filter_pool([lune, lune], Constraints(), world)
    assert _ids(pool) == ["lune"]


def test_build_level_defaults_to_one(world) -> None:
    assert build_level("monoco", world) == 25
    assert build_level("verso", world) == 1


# ---------------------------------------------------------------------------
# Validity
# ---------------------------------------------------------------------------


def test_empty_or_missing_team_is_invalid() -> None:
    assert not is_valid_team(None, Constraints())
    assert not is_valid_team([], Constraints())


def test_required_characters_must_be_present(world) -> None:
    team = [world.get_character("gustave"), world.get_character("lune")]
    assert is_valid_team(team, Constraints(required_characters=["lune"]))
    assert not is_valid_team(team, Constraints(required_characters=["lune", "monoco"]))


def test_required_elements_must_be_covered(world) -> None:
    team = [world.get_character("gustave"), world.get_character("lune")]
    assert is_valid_team(team, Constraints(elemental_requirements=["lightning", "ice"]))
    assert not is_valid_team(team, Constraints(elemental_requirements=[Element.FIRE]))


def test_neutral_members_never_cover_an_element() -> None:
    team = [CharacterRecord(id="a"), CharacterRecord(id="b", element="neutral")]
    assert is_valid_team(team, Constraints())
    assert not is_valid_team(team, Constraints(elemental_requirements=["physical"]))


def test_has_duplicates() -> None:
    a, b = CharacterRecord(id="a"), CharacterRecord(id="b")
    assert not has_duplicates([a, b])
    assert has_duplicates([a, b, CharacterRecord(id="a", name="other")])


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def test_no_issues_for_satisfiable_constraints(world) -> None:
    constraints = Constraints(required_characters=["maelle"], elemental_requirements=["ice"], min_level=10)
    assert diagnose(world.get_all_characters(), constraints, world) == []


def test_required_and_forbidden_is_reported(world) -> None:
    constraints = Constraints(required_characters=["maelle"], forbidden_characters=["maelle"])
    issues = diagnose(world.get_all_characters(), constraints, world)
    assert _codes(issues) == [IssueCode.REQUIRED_AND_FORBIDDEN]
    assert issues[0].subject == "maelle"


def test_required_outside_level_range_is_reported(world) -> None:
    constraints = Constraints(required_characters=["sciel"], min_level=10)
    assert _codes(diagnose(world.get_all_characters(), constraints, world)) == [
        IssueCode.REQUIRED_OUT_OF_LEVEL_RANGE
    ]


def test_unknown_required_character_is_reported(world) -> None:
    constraints = Constraints(required_characters=["esquie"])
    assert _codes(diagnose(world.get_all_characters(), constraints, world)) == [IssueCode.REQUIRED_UNKNOWN]


def test_unavailable_element_is_reported(world) -> None:
    constraints = Constraints(forbidden_characters=["maelle"], elemental_requirements=["fire", "ice"])
    issues = diagnose(world.get_all_characters(), constraints, world)
    assert _codes(issues) == [IssueCode.ELEMENT_UNAVAILABLE]
    assert issues[0].subject == "fire"


def test_inverted_level_range_empties_the_pool(world) -> None:
    constraints = Constraints(min_level=20, max_level=10)
    issues = diagnose(world.get_all_characters(), constraints, world)
    assert _codes(issues) == [IssueCode.INVERTED_LEVEL_RANGE, IssueCode.EMPTY_POOL]


def test_too_many_required_characters(world) -> None:
    constraints = Constraints(required_characters=["gustave", "maelle", "lune", "sciel", "monoco"])
    issues = diagnose(world.get_all_characters(), constraints, world)
    assert _codes(issues) == [IssueCode.TOO_MANY_REQUIRED]


@pytest.mark.parametrize("team_size", [2, 3])  # type: ignore[misc]
def test_team_size_bounds_required_count(world, team_size: int) -> None:
    constraints = Constraints(required_characters=["gustave", "maelle", "lune"])
    issues = diagnose(world.get_all_characters(), constraints, world, team_size=team_size)
    assert (IssueCode.TOO_MANY_REQUIRED in _codes(issues)) is (team_size < 3)


def test_more_elements_than_team_slots(world) -> None:
    constraints = Constraints(elemental_requirements=["fire", "ice", "lightning", "dark", "earth"])
    issues = diagnose(world.get_all_characters(), constraints, world)
    assert _codes(issues) == [IssueCode.TOO_MANY_ELEMENTS]


def test_required_characters_crowd_out_required_element(world) -> None:
    constraints = Constraints(
        required_characters=["gustave", "maelle", "lune", "sciel"],
        elemental_requirements=["earth"],
    )
    issues = diagnose(world.get_all_characters(), constraints, world)
    assert _codes(issues) == [IssueCode.ELEMENTS_EXCEED_FREE_SLOTS]
    assert issues[0].subject == "earth"


def test_required_characters_covering_elements_leave_room(world) -> None:
    constraints = Constraints(
        required_characters=["gustave", "maelle", "lune"],
        elemental_requirements=["fire", "ice", "earth"],
    )
    assert diagnose(world.get_all_characters(), constraints, world) == []


@pytest.mark.parametrize(("team_size", "flagged"), [(2, True), (3, False)])  # type: ignore[misc]
def test_element_slots_follow_team_size(world, team_size: int, flagged: bool) -> None:
    constraints = Constraints(required_characters=["lune", "sciel"], elemental_requirements=["fire"])
    issues = diagnose(world.get_all_characters(), constraints, world, team_size=team_size)
    assert (IssueCode.ELEMENTS_EXCEED_FREE_SLOTS in _codes(issues)) is flagged

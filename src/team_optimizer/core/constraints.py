"""
Constraint engine: candidate pool filtering, team validation and diagnostics.

Overview
--------
- ``filter_pool`` removes forbidden characters and characters whose saved
  build level lies outside the configured bounds (no build counts as level 1).
- ``is_valid_team`` checks a finished team against the required characters
  and the required elements.
- ``diagnose`` explains *why* a search can only come back empty, so callers
  can tell "your constraints contradict each other" apart from "nothing good
  was found".

Design
------
- Pure functions; constraints are read-only here.
- Filtering preserves catalog order, which keeps greedy and weighted
  selection reproducible.

Usage
-----
>>> from team_optimizer.core.models import CharacterRecord, Constraints
>>> team = [CharacterRecord(id="lune", element="ice")]
>>> is_valid_team(team, Constraints(elemental_requirements=["ice"]))
True
>>> is_valid_team([], Constraints())
False
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable, Optional, Sequence

from team_optimizer.core.collaborators import BuildStore
from team_optimizer.core.models import CharacterRecord, Constraints
from team_optimizer.core.types import CharacterId

__all__: Final[list[str]] = [
    "IssueCode",
    "ConstraintIssue",
    "build_level",
    "filter_pool",
    "is_valid_team",
    "has_duplicates",
    "diagnose",
]


class IssueCode(str, Enum):
    """Reasons a constrained search cannot produce a valid team."""

    EMPTY_POOL = "empty_pool"
    REQUIRED_AND_FORBIDDEN = "required_and_forbidden"
    REQUIRED_OUT_OF_LEVEL_RANGE = "required_out_of_level_range"
    REQUIRED_UNKNOWN = "required_unknown"
    INVERTED_LEVEL_RANGE = "inverted_level_range"
    ELEMENT_UNAVAILABLE = "element_unavailable"
    TOO_MANY_REQUIRED = "too_many_required"
    TOO_MANY_ELEMENTS = "too_many_elements"
    ELEMENTS_EXCEED_FREE_SLOTS = "elements_exceed_free_slots"


@dataclass(slots=True, frozen=True)
class ConstraintIssue:
    """A single diagnostic about the constraints.

    Attributes:
        code: Machine-readable reason.
        message: Short English explanation for display.
        subject: The character id or element concerned, if any.
    """

    code: IssueCode
    message: str
    subject: Optional[str] = None


def build_level(character_id: CharacterId, builds: BuildStore) -> int:
    """Return the saved build level of a character, or 1 when nothing is saved."""

    build = builds.load_character_build(character_id)
    return build.level if build is not None else 1


def _level_in_bounds(level: int, constraints: Constraints) -> bool:
    if constraints.min_level is not None and level < constraints.min_level:
        return False
    if constraints.max_level is not None and level > constraints.max_level:
        return False
    return True


def filter_pool(
    characters: Iterable[CharacterRecord],
    constraints: Constraints,
    builds: BuildStore,
) -> list[CharacterRecord]:
    """Return the candidate pool: catalog order, forbidden and out-of-range removed.

    Duplicate ids in the input keep their first occurrence only.
    """

    forbidden = set(constraints.forbidden_characters)
    pool: list[CharacterRecord] = []
    seen: set[str] = set()
    for character in characters:
        if character.id in forbidden or character.id in seen:
            continue
        if not _level_in_bounds(build_level(character.id, builds), constraints):
            continue
        pool.append(character)
        seen.add(character.id)
    return pool


def has_duplicates(team: Sequence[CharacterRecord]) -> bool:
    ids = [c.id for c in team]
    return len(ids) != len(set(ids))


def is_valid_team(team: Optional[Sequence[CharacterRecord]], constraints: Constraints) -> bool:
    """Return whether ``team`` satisfies the required characters and elements.

    ``None`` and empty teams are never valid.
    """

    if not team:
        return False

    member_ids = {c.id for c in team}
    if any(required not in member_ids for required in constraints.required_characters):
        return False

    elements = {c.element for c in team if c.element is not None}
    return all(element in elements for element in constraints.elemental_requirements)


def diagnose(
    characters: Sequence[CharacterRecord],
    constraints: Constraints,
    builds: BuildStore,
    pool: Optional[Sequence[CharacterRecord]] = None,
    *,
    team_size: int = 4,
) -> list[ConstraintIssue]:
    """List the reasons the constraints make every team invalid.

    An empty list does not guarantee a valid team exists; it only means no
    contradiction was detected up front.

    Args:
        characters: The full catalog.
        constraints: The active constraints.
        builds: Build store used for level checks.
        pool: The filtered pool, if already computed.
        team_size: Maximum team size.

    Returns:
        Issues in a stable order (level range, empty pool, per required id,
        per element, team size, element slots).
    """

    if pool is None:
        pool = filter_pool(characters, constraints, builds)

    issues: list[ConstraintIssue] = []
    if (
        constraints.min_level is not None
        and constraints.max_level is not None
        and constraints.min_level > constraints.max_level
    ):
        issues.append(ConstraintIssue(
            code=IssueCode.INVERTED_LEVEL_RANGE,
            message=f"Minimum level {constraints.min_level} exceeds maximum level {constraints.max_level}",
        ))

    if not pool:
        issues.append(ConstraintIssue(code=IssueCode.EMPTY_POOL, message="No character satisfies the constraints"))

    known = {c.id for c in characters}
    forbidden = set(constraints.forbidden_characters)
    for required in constraints.required_characters:
        if required not in known:
            issues.append(ConstraintIssue(
                code=IssueCode.REQUIRED_UNKNOWN,
                message=f"Required character '{required}' is not in the catalog",
                subject=required,
            ))
        elif required in forbidden:
            issues.append(ConstraintIssue(
                code=IssueCode.REQUIRED_AND_FORBIDDEN,
                message=f"Character '{required}' is both required and forbidden",
                subject=required,
            ))
        elif not _level_in_bounds(build_level(required, builds), constraints):
            issues.append(ConstraintIssue(
                code=IssueCode.REQUIRED_OUT_OF_LEVEL_RANGE,
                message=f"Required character '{required}' is outside the level range",
                subject=required,
            ))

    pool_elements = {c.element for c in pool if c.element is not None}
    for element in constraints.elemental_requirements:
        if element not in pool_elements:
            issues.append(ConstraintIssue(
                code=IssueCode.ELEMENT_UNAVAILABLE,
                message=f"No available character has the {element.value} element",
                subject=element.value,
            ))

    if len(constraints.required_characters) > team_size:
        issues.append(ConstraintIssue(
            code=IssueCode.TOO_MANY_REQUIRED,
            message=f"More than {team_size} characters are required",
        ))

    required_elements = constraints.elemental_requirements
    if len(required_elements) > team_size:
        issues.append(ConstraintIssue(
            code=IssueCode.TOO_MANY_ELEMENTS,
            message=f"{len(required_elements)} elements are required but a team has at most {team_size} members",
        ))
    else:
        # Each member carries one element, so every element the required
        # characters miss takes one of the remaining slots.
        pool_by_id = {c.id: c for c in pool}
        seeded = [pool_by_id[r] for r in constraints.required_characters if r in pool_by_id]
        seeded_elements = {c.element for c in seeded if c.element is not None}
        uncovered = [e for e in required_elements if e not in seeded_elements]
        if len(seeded) <= team_size < len(seeded) + len(uncovered):
            issues.append(ConstraintIssue(
                code=IssueCode.ELEMENTS_EXCEED_FREE_SLOTS,
                message=(
                    f"Required characters leave {team_size - len(seeded)} free slots "
                    f"for {len(uncovered)} uncovered elements"
                ),
                subject=",".join(e.value for e in uncovered),
            ))

    return issues

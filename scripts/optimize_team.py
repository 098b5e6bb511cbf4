#!/usr/bin/env python3
"""Rank team recommendations for a roster file and print them as JSON.

Usage
-----
    python scripts/optimize_team.py --criteria boss_fight --require maelle

The script loads a roster YAML (characters, builds, party), runs the team
optimizer with the given criteria and constraints, and prints the ranked
recommendations plus any constraint diagnostics. With ``--apply`` the best
team is written to the roster's party and the roster is saved back to disk.
Settings not given on the command line come from ``TEAM_OPT_*`` variables.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Optional

import yaml

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from team_optimizer.core.models import Constraints
from team_optimizer.core.optimizer import ALGORITHM_LABELS, CRITERIA_LABELS, OptimizationResult, TeamOptimizer
from team_optimizer.core.types import Criteria, Element
from team_optimizer.data.roster import InMemoryRoster, load_roster_from_yaml
from team_optimizer.infra.config import load_settings
from team_optimizer.infra.logging import generate_thread_id, logger_for, setup_logging


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recommend expedition teams for a roster")
    parser.add_argument(
        "--roster",
        type=Path,
        default=None,
        help="Roster YAML (default: <TEAM_OPT_DATA_DIR>/rosters/sample.yaml)",
    )
    parser.add_argument(
        "--criteria",
        choices=[c.value for c in Criteria],
        default=Criteria.BALANCED.value,
        help="Optimization goal (default: balanced)",
    )
    parser.add_argument("--require", action="append", default=[], help="Character id every team must include")
    parser.add_argument("--forbid", action="append", default=[], help="Character id to exclude")
    parser.add_argument(
        "--element",
        action="append",
        default=[],
        choices=[e.value for e in Element],
        help="Element every team must cover",
    )
    parser.add_argument("--min-level", type=int, default=None, help="Minimum saved build level")
    parser.add_argument("--max-level", type=int, default=None, help="Maximum saved build level")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the genetic search")
    parser.add_argument("--pretty-logs", action="store_true", help="Human-readable log lines instead of JSON")
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Write the best team into the roster party and save the roster file",
    )
    return parser.parse_args(argv)


def render(result: OptimizationResult) -> dict[str, object]:
    """Return a JSON-ready summary of ``result``."""

    return {
        "criteria": CRITERIA_LABELS[result.criteria],
        "status": result.status.value,
        "pool_size": result.pool_size,
        "issues": [{"code": i.code.value, "message": i.message} for i in result.issues],
        "recommendations": [
            {
                "rank": rank,
                "algorithm": ALGORITHM_LABELS[rec.algorithm],
                "score": rec.display_score(),
                "class": rec.score_class().value,
                "team": rec.member_ids(),
                "strengths": rec.analysis.strengths[:3],
                "weaknesses": rec.analysis.weaknesses[:2],
                "synergies": [s.name for s in rec.analysis.synergies],
            }
            for rank, rec in enumerate(result.recommendations, start=1)
        ],
    }


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    settings = load_settings()
    if args.seed is not None:
        settings = settings.model_copy(update={"seed": args.seed})

    setup_logging(settings.log_level, pretty=args.pretty_logs)
    thread_id = generate_thread_id()
    log = logger_for(component="scripts.optimize_team", event="run", thread_id=thread_id)

    roster_path = args.roster or (settings.data_dir / "rosters" / "sample.yaml")
    roster = load_roster_from_yaml(roster_path, thread_id=thread_id)
    world = InMemoryRoster(roster)

    constraints = Constraints(
        required_characters=args.require,
        forbidden_characters=args.forbid,
        elemental_requirements=args.element,
    )
    constraints.set_level_bounds(args.min_level, args.max_level)

    optimizer = TeamOptimizer(world, world, world, world, settings=settings)
    result = optimizer.optimize(args.criteria, constraints, thread_id=thread_id)
    print(json.dumps(render(result), indent=2))

    if args.apply and result.best is not None:
        optimizer.apply_team_to_party(result.best, thread_id=thread_id)
        payload = yaml.safe_dump(roster.model_dump(mode="json"), sort_keys=False, allow_unicode=True)
        roster_path.write_text(payload, encoding="utf-8")
        log.info("Roster saved with applied party", path=str(roster_path))


if __name__ == "__main__":
    main()

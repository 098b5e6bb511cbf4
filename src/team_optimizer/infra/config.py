"""
Runtime settings for the optimizer.

Overview
--------
Collect the few knobs a host application may want to tune without code
changes and read them from ``TEAM_OPT_*`` environment variables:

=========================  ==========================  ==========
Variable                   Setting                     Default
=========================  ==========================  ==========
``TEAM_OPT_LOG_LEVEL``     ``log_level``               ``INFO``
``TEAM_OPT_SEED``          ``seed`` (genetic search)   unset
``TEAM_OPT_PARALLEL``      ``parallel`` strategies     ``false``
``TEAM_OPT_TIME_BUDGET``   ``time_budget_s``           unset
``TEAM_OPT_MAX_RESULTS``   ``max_recommendations``     ``4``
``TEAM_OPT_DATA_DIR``      ``data_dir``                ``./data``
=========================  ==========================  ==========

Design
------
- A frozen Pydantic model validates values; invalid input raises
  :class:`~team_optimizer.core.exceptions.ConfigurationError`.
- ``load_settings`` accepts an explicit mapping so tests never touch
  ``os.environ``.

Usage
-----
>>> load_settings({"TEAM_OPT_SEED": "7"}).seed
7
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Final, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from team_optimizer.core.exceptions import ConfigurationError

__all__: Final[list[str]] = ["OptimizerSettings", "load_settings", "ENV_PREFIX"]

ENV_PREFIX: Final[str] = "TEAM_OPT_"
DEFAULT_DATA_DIR: Final[Path] = Path("data")

_ENV_FIELDS: Final[dict[str, str]] = {
    "LOG_LEVEL": "log_level",
    "SEED": "seed",
    "PARALLEL": "parallel",
    "TIME_BUDGET": "time_budget_s",
    "MAX_RESULTS": "max_recommendations",
    "DATA_DIR": "data_dir",
}


class OptimizerSettings(BaseModel):
    """Validated optimizer settings.

    Attributes:
        max_recommendations: Maximum number of ranked recommendations returned.
        team_size: Maximum members per team.
        seed: Seed for the genetic algorithm's random source (``None`` = random).
        parallel: Run the four strategies on a thread pool.
        time_budget_s: Optional wall-clock budget for one optimization.
        log_level: Minimum level passed to ``setup_logging``.
        data_dir: Directory holding roster files for the demo script.
    """

    model_config = ConfigDict(frozen=True)

    max_recommendations: int = Field(default=4, ge=1)
    team_size: int = Field(default=4, ge=1, le=4)
    seed: Optional[int] = None
    parallel: bool = False
    time_budget_s: Optional[float] = Field(default=None, gt=0)
    log_level: str = "INFO"
    data_dir: Path = DEFAULT_DATA_DIR


def load_settings(environ: Optional[Mapping[str, str]] = None) -> OptimizerSettings:
    """Build settings from ``environ`` (``os.environ`` by default).

    Empty values are treated as unset.

    Raises:
        ConfigurationError: If a variable holds a value of the wrong type or range.
    """

    env = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for suffix, field in _ENV_FIELDS.items():
        raw = env.get(f"{ENV_PREFIX}{suffix}")
        if raw is not None and raw.strip():
            values[field] = raw.strip()

    try:
        return OptimizerSettings(**values)
    except ValidationError as exc:
        first = exc.errors()[0]
        setting = str(first["loc"][0]) if first.get("loc") else None
        raise ConfigurationError(setting=setting, reason=first.get("msg")) from exc

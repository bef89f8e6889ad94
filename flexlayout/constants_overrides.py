"""Overrides for the distributor's tolerance and round-cap constants.

A constant ``NAME`` is looked up in the ``FLEXLAYOUT_NAME`` environment
variable first, then in the ``[flexlayout.constants]`` table of the TOML file
named by ``FLEXLAYOUT_RUN_CONFIG``, then in the packaged ``run_config.toml``.
Every override goes through a parser; a value the parser rejects is logged and
the built-in default is kept.
"""

from __future__ import annotations

import logging
import math
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, TypeVar

try:  # pragma: no cover - Python < 3.11 fallback
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - dependency fallback
    import tomli as tomllib  # type: ignore[import-not-found]


LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "FLEXLAYOUT_"
RUN_CONFIG_ENV = "FLEXLAYOUT_RUN_CONFIG"
PACKAGED_RUN_CONFIG = Path(__file__).resolve().parent / "run_config.toml"

T = TypeVar("T")


def parse_tolerance(value: Any) -> float:
    """Return ``value`` as a finite, non-negative tolerance term.

    An infinite tolerance would make every layout pass the feasibility check,
    so it is rejected along with NaN and negative values.
    """

    if isinstance(value, bool):
        raise ValueError("tolerance must be a number, not a boolean")
    result = float(value)
    if not (result >= 0.0 and math.isfinite(result)):
        raise ValueError(f"tolerance must be finite and non-negative, got {result}")
    return result


def parse_round_factor(value: Any) -> int:
    """Return ``value`` as a per-region round multiplier of at least one."""

    if isinstance(value, bool):
        raise ValueError("iteration factor must be an integer, not a boolean")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"iteration factor must be a whole number, got {value}")
    result = int(value)
    if result < 1:
        raise ValueError("iteration factor must be at least 1")
    return result


def _constants_table(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        LOGGER.warning("Ignoring unreadable run config %s: %s", path, exc)
        return {}

    table = data.get("flexlayout", {})
    table = table.get("constants", {}) if isinstance(table, dict) else {}
    if not isinstance(table, dict):
        LOGGER.warning("Ignoring [flexlayout.constants] in %s: not a table", path)
        return {}
    return {str(key).upper(): value for key, value in table.items()}


@lru_cache(maxsize=1)
def _config_overrides() -> dict[str, Any]:
    """Return the first non-empty constants table among the run config files."""

    paths: list[Path] = []
    configured = os.environ.get(RUN_CONFIG_ENV)
    if configured:
        paths.append(Path(configured).expanduser())
    paths.append(PACKAGED_RUN_CONFIG)

    for path in paths:
        if not path.is_file():
            LOGGER.debug("Run config %s does not exist; skipping", path)
            continue
        table = _constants_table(path)
        if table:
            LOGGER.debug("Using constant overrides from %s", path)
            return table
    return {}


def get_constant(name: str, default: T, parse: Callable[[Any], T]) -> T:
    """Return the override for ``name`` run through ``parse``, or ``default``."""

    key = name.upper()
    raw: Any = os.environ.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        raw = _config_overrides().get(key)
    if raw is None:
        return default

    try:
        return parse(raw)
    except (TypeError, ValueError) as exc:
        LOGGER.warning("Invalid override for %s=%r: %s", key, raw, exc)
        return default


def clear_cache() -> None:
    """Forget the cached run config tables so the next lookup rereads them."""

    _config_overrides.cache_clear()


__all__ = [
    "get_constant",
    "parse_tolerance",
    "parse_round_factor",
    "clear_cache",
]

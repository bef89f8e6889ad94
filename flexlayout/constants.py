"""Authoritative numeric constants for the flex distributor."""

from __future__ import annotations

from .constants_overrides import get_constant, parse_round_factor, parse_tolerance

# Tolerance scales with the requested total: max(ABS_TOL, REL_TOL * |total|).
REL_TOL: float = get_constant("REL_TOL", 1e-9, parse_tolerance)
ABS_TOL: float = get_constant("ABS_TOL", 1e-12, parse_tolerance)

# Each tier runs at most ITERATION_FACTOR * len(tier) water-filling rounds.
ITERATION_FACTOR: int = get_constant("ITERATION_FACTOR", 2, parse_round_factor)

STRATEGY_ITERATIVE = "iterative"
STRATEGY_EXACT = "exact"
STRATEGIES: tuple[str, ...] = (STRATEGY_ITERATIVE, STRATEGY_EXACT)


__all__ = [
    "REL_TOL",
    "ABS_TOL",
    "ITERATION_FACTOR",
    "STRATEGY_ITERATIVE",
    "STRATEGY_EXACT",
    "STRATEGIES",
]

"""Minimum allocation and tiered proportional water-filling.

Every region is first seeded at its minimum. The remaining budget is then
handed to priority tiers from the highest numeric priority down. Inside a
tier the budget is split among the members that still have headroom in
proportion to their ``share``, each member clamped at its own ``max``. Budget
a tier cannot absorb flows to the next tier.

Two fill strategies are available:

``iterative``
    Repeated simultaneous rounds until the tier budget is spent, every member
    is saturated, or the round cap (``ITERATION_FACTOR * len(tier)``) is hit.

``exact``
    Members are ordered by ``headroom / share``; those whose proportional
    portion would overshoot are filled to their ceiling and the rest split
    what is left. Needs no round cap.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from typing import Callable, Sequence

from flexlayout import constants
from flexlayout.types import FlatRegion
from flexlayout.validation import InvalidSpecError

LOGGER = logging.getLogger(__name__)


def resolve_tolerance(total_size: float, tolerance: float | None = None) -> float:
    """Return the numeric tolerance used for a distribution of ``total_size``."""

    if tolerance is not None:
        value = float(tolerance)
        if not (value >= 0.0 and math.isfinite(value)):
            raise InvalidSpecError(f"tolerance must be a finite non-negative number, got {tolerance!r}")
        return value
    return max(constants.ABS_TOL, constants.REL_TOL * abs(total_size))


def allocate_minimums(regions: Sequence[FlatRegion], total_size: float) -> float:
    """Seed every region at its minimum and return the budget left to grow into."""

    for region in regions:
        region.allocated = region.min
    total_min = math.fsum(region.min for region in regions)
    return max(total_size - total_min, 0.0)


def group_by_priority(regions: Sequence[FlatRegion]) -> list[tuple[float, list[FlatRegion]]]:
    """Return ``(priority, members)`` pairs ordered from highest priority down."""

    tiers: dict[float, list[FlatRegion]] = defaultdict(list)
    for region in regions:
        tiers[region.priority].append(region)
    return sorted(tiers.items(), key=lambda item: item[0], reverse=True)


def _growable(region: FlatRegion) -> bool:
    # Zero-share members never grow, so they never count as active.
    return region.share > 0 and not region.saturated


def fill_tier_iterative(tier: Sequence[FlatRegion], budget: float, tolerance: float) -> float:
    """Water-fill ``budget`` into ``tier`` in simultaneous rounds; return what is left."""

    max_rounds = constants.ITERATION_FACTOR * len(tier)
    rounds = 0
    while budget > tolerance and rounds < max_rounds:
        rounds += 1
        active = [region for region in tier if _growable(region)]
        active_share = math.fsum(region.share for region in active)
        if active_share <= 0:
            break

        # Increases are sized from the round's starting state, then applied together.
        increases = []
        for region in active:
            desired = budget * (region.share / active_share)
            increases.append((region, min(desired, region.headroom)))

        distributed = 0.0
        for region, increase in increases:
            if increase >= region.headroom:
                region.allocated = region.max
            else:
                region.allocated += increase
            distributed += increase

        budget -= distributed
        if distributed < tolerance:
            break

    if rounds >= max_rounds and budget > tolerance:
        LOGGER.debug("Tier hit round cap (%d) with %s undistributed", max_rounds, budget)
    return max(budget, 0.0)


def fill_tier_exact(tier: Sequence[FlatRegion], budget: float, tolerance: float) -> float:
    """Fill ``tier`` by saturating the tightest members first; return what is left."""

    active = sorted(
        (region for region in tier if _growable(region)),
        key=lambda region: region.headroom / region.share,
    )
    if not active:
        return budget

    suffix_shares = [math.fsum(region.share for region in active[pos:]) for pos in range(len(active))]
    for pos, region in enumerate(active):
        if budget <= tolerance:
            break
        share_left = suffix_shares[pos]
        headroom = region.headroom
        if budget * (region.share / share_left) >= headroom:
            region.allocated = region.max
            budget -= headroom
            continue
        # Nobody later in the ordering can saturate either; split what is left.
        for rest in active[pos:]:
            portion = budget * (rest.share / share_left)
            rest.allocated = min(rest.allocated + portion, rest.max)
        return 0.0
    return max(budget, 0.0)


_FILLERS: dict[str, Callable[[Sequence[FlatRegion], float, float], float]] = {
    constants.STRATEGY_ITERATIVE: fill_tier_iterative,
    constants.STRATEGY_EXACT: fill_tier_exact,
}


def distribute_tiers(
    regions: Sequence[FlatRegion],
    remaining: float,
    tolerance: float,
    strategy: str = constants.STRATEGY_ITERATIVE,
) -> float:
    """Hand ``remaining`` out tier by tier and return the undistributed leftover."""

    try:
        fill = _FILLERS[strategy]
    except KeyError:
        raise InvalidSpecError(
            f"unknown strategy {strategy!r}; expected one of {', '.join(constants.STRATEGIES)}"
        ) from None

    budget = remaining
    for priority, tier in group_by_priority(regions):
        if budget <= tolerance:
            break
        entering = budget
        budget = fill(tier, budget, tolerance)
        LOGGER.debug(
            "Tier %s (%d regions) consumed %s of %s", priority, len(tier), entering - budget, entering
        )

    if budget > tolerance:
        LOGGER.warning(
            "%s of the requested size could not be placed; no growable region has headroom",
            budget,
        )
    return budget


__all__ = [
    "resolve_tolerance",
    "allocate_minimums",
    "group_by_priority",
    "fill_tier_iterative",
    "fill_tier_exact",
    "distribute_tiers",
]

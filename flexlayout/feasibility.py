"""Aggregate bound checks performed before any space is handed out."""

from __future__ import annotations

import logging
from typing import Sequence

from flexlayout.types import FlatRegion, Infeasible

LOGGER = logging.getLogger(__name__)


def bound_totals(regions: Sequence[FlatRegion]) -> tuple[float, float]:
    """Return ``(Σ min, Σ max)``; any unbounded region keeps the maximum infinite."""

    total_min = sum(region.min for region in regions)
    total_max = sum(region.max for region in regions)
    return float(total_min), float(total_max)


def check_feasibility(
    regions: Sequence[FlatRegion],
    total_size: float,
    tolerance: float = 0.0,
) -> Infeasible | None:
    """Return an :class:`Infeasible` sentinel when the bounds cannot meet ``total_size``."""

    total_min, total_max = bound_totals(regions)
    if total_min > total_size + tolerance:
        LOGGER.debug("Infeasible layout: total_min=%s > total_size=%s", total_min, total_size)
        return Infeasible(Infeasible.BELOW_MINIMUM, total_size, total_min, total_max)
    if total_max < total_size - tolerance:
        LOGGER.debug("Infeasible layout: total_max=%s < total_size=%s", total_max, total_size)
        return Infeasible(Infeasible.ABOVE_MAXIMUM, total_size, total_min, total_max)
    return None


__all__ = ["bound_totals", "check_feasibility"]

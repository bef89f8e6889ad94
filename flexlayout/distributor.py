"""Public entry points for distributing a total size across named groups."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from flexlayout import constants
from flexlayout.aggregate import aggregate, member_sizes
from flexlayout.feasibility import bound_totals, check_feasibility
from flexlayout.flatten import coerce_groups, flatten
from flexlayout.tiers import allocate_minimums, distribute_tiers, resolve_tolerance
from flexlayout.types import Allocation, Infeasible
from flexlayout.validation import InvalidSpecError, validate_regions, validate_total

LOGGER = logging.getLogger(__name__)


def distribute_detailed(
    total_size: float,
    groups: Mapping[str, Any],
    *,
    tolerance: float | None = None,
    strategy: str = constants.STRATEGY_ITERATIVE,
    validate: bool = True,
) -> Allocation | Infeasible:
    """Distribute ``total_size`` and return totals alongside per-member sizes.

    Parameters
    ----------
    total_size : float
        Size to hand out; must be finite.
    groups : Mapping
        Group key to a region (``RegionSpec``, mapping or ``Single``) or an
        ordered list of regions (``Many``).
    tolerance : float, optional
        Absolute numeric tolerance; defaults to one scaled to ``total_size``.
    strategy : str
        ``"iterative"`` or ``"exact"`` tier filling.
    validate : bool
        Reject malformed regions with ``InvalidSpecError`` before distributing.

    Returns
    -------
    Allocation | Infeasible
        ``Infeasible`` when the aggregate bounds cannot meet ``total_size``.
    """

    if strategy not in constants.STRATEGIES:
        raise InvalidSpecError(
            f"unknown strategy {strategy!r}; expected one of {', '.join(constants.STRATEGIES)}"
        )
    total = validate_total(total_size)
    coerced = coerce_groups(groups)
    regions = flatten(coerced)
    if validate:
        validate_regions(regions)
    tol = resolve_tolerance(total, tolerance)

    LOGGER.debug(
        "Distributing %s across %d groups (%d regions) using %s strategy",
        total,
        len(coerced),
        len(regions),
        strategy,
    )

    infeasible = check_feasibility(regions, total, tol)
    if infeasible is not None:
        return infeasible

    remaining = allocate_minimums(regions, total)
    leftover = distribute_tiers(regions, remaining, tol, strategy)

    return Allocation(
        totals=aggregate(coerced, regions),
        members=member_sizes(coerced, regions),
        leftover=leftover,
    )


def distribute(
    total_size: float,
    groups: Mapping[str, Any],
    *,
    tolerance: float | None = None,
    strategy: str = constants.STRATEGY_ITERATIVE,
    validate: bool = True,
) -> dict[str, float] | Infeasible:
    """Return the size of every group, or ``Infeasible`` when the bounds do not fit.

    Every region receives at least its ``min``; remaining space goes to the
    highest priority tier first, split by ``share`` and capped at each ``max``,
    then flows down to lower tiers. Sizes sum to ``total_size`` within the
    tolerance, except when the only regions left with headroom have
    ``share=0``: that budget cannot be placed, the sum falls short, and a
    warning is logged. :func:`distribute_detailed` reports the shortfall as
    ``Allocation.leftover``. Missing fields default to ``min=0``, ``max=inf``,
    ``priority=0`` and ``share=1``.

    >>> distribute(100, {"a": {}, "b": {}})
    {'a': 50.0, 'b': 50.0}
    """

    result = distribute_detailed(
        total_size,
        groups,
        tolerance=tolerance,
        strategy=strategy,
        validate=validate,
    )
    if isinstance(result, Infeasible):
        return result
    return result.totals


def feasibility_report(
    total_size: float,
    groups: Mapping[str, Any],
    *,
    tolerance: float | None = None,
) -> tuple[float, float, Infeasible | None]:
    """Return ``(total_min, total_max, infeasible)`` for ``groups`` at ``total_size``.

    ``infeasible`` is ``None`` when the aggregate bounds can meet the total.
    Malformed regions raise ``InvalidSpecError``.
    """

    total = validate_total(total_size)
    regions = flatten(coerce_groups(groups))
    validate_regions(regions)
    total_min, total_max = bound_totals(regions)
    return total_min, total_max, check_feasibility(regions, total, resolve_tolerance(total, tolerance))


def is_feasible(total_size: float, groups: Mapping[str, Any], *, tolerance: float | None = None) -> bool:
    """Return whether ``groups`` can be sized to exactly ``total_size``."""

    return feasibility_report(total_size, groups, tolerance=tolerance)[2] is None


__all__ = ["distribute", "distribute_detailed", "feasibility_report", "is_feasible"]

"""Fold flat allocations back into the caller's named groups."""

from __future__ import annotations

import math
from typing import Mapping, Sequence

from flexlayout.flatten import group_sizes
from flexlayout.types import FlatRegion, Group, Many, Single


def member_sizes(groups: Mapping[str, Group], regions: Sequence[FlatRegion]) -> dict[str, tuple[float, ...]]:
    """Return each group's member allocations in declaration order."""

    result: dict[str, tuple[float, ...]] = {}
    cursor = 0
    for key, count in zip(groups, group_sizes(list(groups.values()))):
        members = regions[cursor:cursor + count]
        if any(region.key != key for region in members):
            raise ValueError(f"Flat regions are out of step with group '{key}'")
        result[key] = tuple(float(region.allocated) for region in members)
        cursor += count
    if cursor != len(regions):
        raise ValueError("Flat regions do not match the supplied groups")
    return result


def aggregate(groups: Mapping[str, Group], regions: Sequence[FlatRegion]) -> dict[str, float]:
    """Return one size per group: the region's size, or the sum over an array group."""

    sizes = member_sizes(groups, regions)
    result: dict[str, float] = {}
    for key, group in groups.items():
        match group:
            case Single():
                result[key] = sizes[key][0]
            case Many():
                result[key] = math.fsum(sizes[key])
    return result


__all__ = ["aggregate", "member_sizes"]

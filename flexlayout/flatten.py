"""Normalise named groups into the flat working list used by the distributor."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from flexlayout.types import FlatRegion, Group, Many, RegionSpec, Single
from flexlayout.validation import InvalidSpecError

_ALLOWED_KEYS = frozenset({"min", "max", "priority", "share", "width"})


def coerce_region(value: Any, *, key: str | None = None, index: int | None = None) -> RegionSpec:
    """Return ``value`` as a :class:`RegionSpec`."""

    if isinstance(value, RegionSpec):
        return value
    if isinstance(value, Mapping):
        unknown = set(value) - _ALLOWED_KEYS
        if unknown:
            raise InvalidSpecError(
                f"unknown region fields: {', '.join(sorted(map(str, unknown)))}",
                key=key,
                index=index,
            )
        return RegionSpec.from_mapping(value)
    raise InvalidSpecError(
        f"region must be a RegionSpec or mapping, got {type(value).__name__}",
        key=key,
        index=index,
    )


def coerce_group(value: Any, *, key: str | None = None) -> Group:
    """Return ``value`` as the tagged ``Single``/``Many`` variant.

    Accepted shapes: an existing variant, a ``RegionSpec`` or mapping (one
    region), or a list/tuple of those (an array group).
    """

    if isinstance(value, (Single, Many)):
        return value
    if isinstance(value, (RegionSpec, Mapping)):
        return Single(coerce_region(value, key=key))
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return Many(
            tuple(coerce_region(item, key=key, index=idx) for idx, item in enumerate(value))
        )
    raise InvalidSpecError(
        f"group must be a region or a list of regions, got {type(value).__name__}", key=key
    )


def coerce_groups(groups: Mapping[str, Any]) -> dict[str, Group]:
    """Coerce every group of ``groups`` while preserving key order."""

    if not isinstance(groups, Mapping):
        raise InvalidSpecError(f"groups must be a mapping, got {type(groups).__name__}")
    coerced: dict[str, Group] = {}
    for key, value in groups.items():
        if not isinstance(key, str):
            raise InvalidSpecError(f"group keys must be strings, got {key!r}")
        coerced[key] = coerce_group(value, key=key)
    return coerced


def _flat(key: str, index: int | None, region: RegionSpec) -> FlatRegion:
    return FlatRegion(
        key=key,
        index=index,
        min=region.min,
        max=region.max,
        priority=region.priority,
        share=region.share,
    )


def flatten(groups: Mapping[str, Group]) -> list[FlatRegion]:
    """Return one fresh working record per region, in group then member order."""

    regions: list[FlatRegion] = []
    for key, group in groups.items():
        match group:
            case Single(region=region):
                regions.append(_flat(key, None, region))
            case Many(regions=members):
                regions.extend(_flat(key, idx, member) for idx, member in enumerate(members))
            case _:
                raise InvalidSpecError(f"unsupported group type {type(group).__name__}", key=key)
    return regions


def group_sizes(groups: Sequence[Group]) -> list[int]:
    """Return the number of flat regions contributed by each group."""

    sizes: list[int] = []
    for group in groups:
        match group:
            case Single():
                sizes.append(1)
            case Many(regions=members):
                sizes.append(len(members))
    return sizes


__all__ = ["coerce_region", "coerce_group", "coerce_groups", "flatten", "group_sizes"]

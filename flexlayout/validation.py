"""Defensive validation of region specifications."""

from __future__ import annotations

import math
from numbers import Real
from typing import Iterable

from flexlayout.types import FlatRegion, RegionSpec

__all__ = ["InvalidSpecError", "validate_total", "validate_region", "validate_regions"]


class InvalidSpecError(ValueError):
    """Raised when an individual region or the requested total is malformed.

    Aggregate infeasibility is reported through :class:`~flexlayout.types.Infeasible`
    instead; this error only concerns inputs that are wrong on their own.
    """

    def __init__(self, message: str, *, key: str | None = None, index: int | None = None):
        location = ""
        if key is not None:
            location = f"{key}[{index}]" if index is not None else key
        super().__init__(f"{location}: {message}" if location else message)
        self.key = key
        self.index = index


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def validate_total(total_size: object) -> float:
    """Return ``total_size`` as a float, rejecting non-finite or non-numeric values."""

    if not _is_number(total_size):
        raise InvalidSpecError(f"total size must be a number, got {total_size!r}")
    value = float(total_size)  # type: ignore[arg-type]
    if not math.isfinite(value):
        raise InvalidSpecError(f"total size must be finite, got {value!r}")
    return value


def validate_region(
    region: RegionSpec | FlatRegion,
    *,
    key: str | None = None,
    index: int | None = None,
) -> None:
    """Check a single region's fields for internal consistency."""

    for name in ("min", "max", "priority", "share"):
        value = getattr(region, name)
        if not _is_number(value):
            raise InvalidSpecError(f"{name} must be a number, got {value!r}", key=key, index=index)
        if math.isnan(value):
            raise InvalidSpecError(f"{name} must not be NaN", key=key, index=index)

    if not math.isfinite(region.min):
        raise InvalidSpecError(f"min must be finite, got {region.min!r}", key=key, index=index)
    if region.min < 0:
        raise InvalidSpecError(f"min must be non-negative, got {region.min!r}", key=key, index=index)
    if region.min > region.max:
        raise InvalidSpecError(
            f"min ({region.min!r}) exceeds max ({region.max!r})", key=key, index=index
        )
    if not math.isfinite(region.priority):
        raise InvalidSpecError(
            f"priority must be finite, got {region.priority!r}", key=key, index=index
        )
    if region.share < 0 or not math.isfinite(region.share):
        raise InvalidSpecError(
            f"share must be a finite non-negative number, got {region.share!r}",
            key=key,
            index=index,
        )


def validate_regions(regions: Iterable[FlatRegion]) -> None:
    """Validate every flattened region, reporting the first failure."""

    for region in regions:
        if not region.key:
            raise InvalidSpecError("group keys must be non-empty strings")
        validate_region(region, key=region.key, index=region.index)

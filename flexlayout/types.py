"""Data containers shared by the flex distributor stages."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Union

_REGION_FIELDS = ("min", "max", "priority", "share")


@dataclass(frozen=True)
class RegionSpec:
    """Bounds and growth preferences for one resizable region.

    min: smallest size the region accepts
    max: largest size the region accepts (``inf`` when unbounded)
    priority: tier; higher tiers are grown to their ceiling first
    share: relative growth weight among active regions of the same tier
    """

    min: float = 0.0
    max: float = math.inf
    priority: float = 0.0
    share: float = 1.0

    @classmethod
    def fixed(cls, size: float, *, priority: float = 0.0) -> "RegionSpec":
        """Return a region that always receives exactly ``size``."""
        return cls(min=size, max=size, priority=priority)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RegionSpec":
        """Build a region from a loose mapping, substituting defaults.

        ``None`` values count as missing. A ``width`` entry is shorthand for a
        fixed-size region; explicit ``min``/``max`` entries take precedence.
        """

        values: dict[str, Any] = {}
        width = data.get("width")
        if width is not None:
            values["min"] = width
            values["max"] = width
        for name in _REGION_FIELDS:
            value = data.get(name)
            if value is not None:
                values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class Single:
    """Group holding exactly one region."""

    region: RegionSpec = field(default_factory=RegionSpec)


@dataclass(frozen=True)
class Many:
    """Group holding an ordered sequence of sub-regions."""

    regions: tuple[RegionSpec, ...] = ()

    def __post_init__(self) -> None:
        # Lists are accepted for convenience but stored as tuples.
        object.__setattr__(self, "regions", tuple(self.regions))


Group = Union[Single, Many]


@dataclass(slots=True)
class FlatRegion:
    """Working record for one region during a single distribution call."""

    key: str
    index: int | None
    min: float
    max: float
    priority: float
    share: float
    allocated: float = 0.0

    @property
    def headroom(self) -> float:
        return self.max - self.allocated

    @property
    def saturated(self) -> bool:
        return self.allocated >= self.max


@dataclass(frozen=True)
class Infeasible:
    """Sentinel returned when the aggregate bounds cannot meet the total.

    reason: ``"below_minimum"`` when the minima exceed the total,
        ``"above_maximum"`` when the maxima fall short of it
    """

    reason: str
    total_size: float
    total_min: float
    total_max: float

    BELOW_MINIMUM = "below_minimum"
    ABOVE_MAXIMUM = "above_maximum"

    def __bool__(self) -> bool:
        return False

    def describe(self) -> str:
        if self.reason == self.BELOW_MINIMUM:
            return (
                f"minimum sizes sum to {self.total_min:g}, "
                f"exceeding the total of {self.total_size:g}"
            )
        return (
            f"maximum sizes sum to {self.total_max:g}, "
            f"short of the total of {self.total_size:g}"
        )


@dataclass(frozen=True)
class Allocation:
    """Detailed distribution result.

    totals: group key -> allocated size (sum of members for array groups)
    members: group key -> allocation per member, in declaration order
    leftover: budget left undistributed after the lowest tier
    """

    totals: dict[str, float]
    members: dict[str, tuple[float, ...]]
    leftover: float = 0.0

    def __getitem__(self, key: str) -> float:
        return self.totals[key]


__all__ = [
    "RegionSpec",
    "Single",
    "Many",
    "Group",
    "FlatRegion",
    "Infeasible",
    "Allocation",
]

"""One-axis flex distributor public API.

Distributes a fixed total size across named groups of regions, each bounded
by ``min``/``max`` and grown by priority tier and ``share``::

    from flexlayout import distribute

    sizes = distribute(1000, {
        "spaceBefore": {"min": 10, "max": 100, "priority": 2},
        "content": [{"min": 50, "max": 100, "priority": 2, "share": 2},
                    {"min": 100, "max": 500, "priority": 1}],
        "spaceAfter": {},
    })
"""

from __future__ import annotations

from flexlayout.distributor import distribute, distribute_detailed, feasibility_report, is_feasible
from flexlayout.types import Allocation, FlatRegion, Group, Infeasible, Many, RegionSpec, Single
from flexlayout.validation import InvalidSpecError

__all__ = [
    "distribute",
    "distribute_detailed",
    "feasibility_report",
    "is_feasible",
    "Allocation",
    "FlatRegion",
    "Group",
    "Infeasible",
    "Many",
    "RegionSpec",
    "Single",
    "InvalidSpecError",
    "allocation_frame",
    "groups_from_frame",
]


def __getattr__(name: str):
    # pandas adapters are loaded lazily so the core stays importable on its own.
    if name in {"allocation_frame", "groups_from_frame"}:
        from flexlayout import frames

        return getattr(frames, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

"""pandas adapters for tabular layout definitions and results."""

from __future__ import annotations

import math
from typing import Any, Mapping

import pandas as pd

from flexlayout.distributor import distribute_detailed
from flexlayout.flatten import coerce_groups, flatten
from flexlayout.types import Allocation, Group, Infeasible, Many, RegionSpec, Single
from flexlayout.validation import InvalidSpecError

FRAME_COLUMNS = ["group", "index", "min", "max", "priority", "share", "allocated"]
_DEFAULTS = {"min": 0.0, "max": math.inf, "priority": 0.0, "share": 1.0}


class InfeasibleLayoutError(ValueError):
    """Raised by the table adapters when a layout cannot meet its total."""

    def __init__(self, infeasible: Infeasible):
        super().__init__(f"Infeasible layout: {infeasible.describe()}")
        self.infeasible = infeasible


def _coerce_numeric(series: pd.Series, default: float, column: str) -> pd.Series:
    values = pd.to_numeric(series, errors="coerce")
    bad = values.isna() & series.notna()
    if bad.any():
        offenders = ", ".join(repr(value) for value in series[bad].unique()[:5])
        raise InvalidSpecError(f"column '{column}' has non-numeric values: {offenders}")
    return values.fillna(default).astype(float)


def groups_from_frame(df: pd.DataFrame) -> dict[str, Group]:
    """Build groups from a table with one row per region.

    The ``group`` column is required. Optional ``min``, ``max``, ``priority``
    and ``share`` columns fall back to the defaults for missing cells. Rows
    carrying an ``index`` value form an array group ordered by that index;
    a group whose rows have no index must consist of a single row.
    """

    if "group" not in df.columns:
        raise InvalidSpecError("layout table requires a 'group' column")

    working = df.copy()
    working["group"] = working["group"].astype(str).str.strip()
    for column, default in _DEFAULTS.items():
        if column in working.columns:
            working[column] = _coerce_numeric(working[column], default, column)
        else:
            working[column] = default
    if "index" in working.columns:
        working["index"] = pd.to_numeric(working["index"], errors="coerce")
    else:
        working["index"] = float("nan")

    groups: dict[str, Group] = {}
    for key, rows in working.groupby("group", sort=False):
        specs_have_index = rows["index"].notna()
        if specs_have_index.any() and not specs_have_index.all():
            raise InvalidSpecError("rows must either all carry an index or none", key=key)
        if specs_have_index.any():
            ordered = rows.sort_values("index", kind="stable")
            groups[key] = Many(tuple(_row_spec(row) for _, row in ordered.iterrows()))
            continue
        if len(rows) != 1:
            raise InvalidSpecError(
                f"{len(rows)} rows share the group without an index column", key=key
            )
        groups[key] = Single(_row_spec(rows.iloc[0]))
    return groups


def _row_spec(row: pd.Series) -> RegionSpec:
    return RegionSpec(
        min=float(row["min"]),
        max=float(row["max"]),
        priority=float(row["priority"]),
        share=float(row["share"]),
    )


def allocation_frame(total_size: float, groups: Mapping[str, Any] | pd.DataFrame, **kwargs: Any) -> pd.DataFrame:
    """Return one row per region with its bounds and allocated size.

    ``groups`` may be a mapping accepted by :func:`flexlayout.distribute` or a
    table accepted by :func:`groups_from_frame`. Raises
    :class:`InfeasibleLayoutError` when the layout cannot meet ``total_size``.
    """

    if isinstance(groups, pd.DataFrame):
        groups = groups_from_frame(groups)
    coerced = coerce_groups(groups)
    result = distribute_detailed(total_size, coerced, **kwargs)
    if isinstance(result, Infeasible):
        raise InfeasibleLayoutError(result)
    return frame_from_allocation(coerced, result)


def frame_from_allocation(groups: Mapping[str, Any], result: Allocation) -> pd.DataFrame:
    """Tabulate an already computed ``result`` for the ``groups`` it was built from."""

    coerced = coerce_groups(groups)
    records: list[dict[str, Any]] = []
    for region in flatten(coerced):
        records.append(
            {
                "group": region.key,
                "index": region.index,
                "min": float(region.min),
                "max": float(region.max),
                "priority": float(region.priority),
                "share": float(region.share),
                "allocated": result.members[region.key][region.index or 0],
            }
        )
    frame = pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)
    frame["index"] = pd.array([record["index"] for record in records], dtype="Int64")
    return frame


def group_totals(frame: pd.DataFrame) -> pd.Series:
    """Return allocated size per group from an :func:`allocation_frame` table."""

    return frame.groupby("group", sort=False)["allocated"].sum()


__all__ = [
    "FRAME_COLUMNS",
    "InfeasibleLayoutError",
    "groups_from_frame",
    "allocation_frame",
    "frame_from_allocation",
    "group_totals",
]

"""Flattening of named groups and folding allocations back into them."""

from __future__ import annotations

import math

import pytest

from flexlayout.aggregate import aggregate, member_sizes
from flexlayout.flatten import coerce_group, coerce_groups, flatten
from flexlayout.types import Many, RegionSpec, Single
from flexlayout.validation import InvalidSpecError


def test_mapping_becomes_single_with_defaults():
    group = coerce_group({"min": 5})

    assert group == Single(RegionSpec(min=5, max=math.inf, priority=0.0, share=1.0))


def test_list_becomes_many():
    group = coerce_group([{"min": 1}, RegionSpec(share=2)])

    assert isinstance(group, Many)
    assert group.regions == (RegionSpec(min=1), RegionSpec(share=2))


def test_none_values_fall_back_to_defaults():
    assert coerce_group({"max": None, "share": None}) == Single(RegionSpec())


def test_width_is_shorthand_for_fixed_size():
    assert coerce_group({"width": 30}) == Single(RegionSpec(min=30, max=30))
    assert coerce_group({"width": 30, "max": 40}) == Single(RegionSpec(min=30, max=40))


def test_flatten_preserves_group_then_member_order():
    groups = coerce_groups(
        {
            "b": {"priority": 1},
            "a": [{"min": 1}, {"min": 2}],
            "c": {},
        }
    )

    regions = flatten(groups)

    assert [(region.key, region.index) for region in regions] == [
        ("b", None),
        ("a", 0),
        ("a", 1),
        ("c", None),
    ]
    assert regions[0].priority == 1
    assert [region.min for region in regions[1:3]] == [1, 2]


def test_flatten_builds_fresh_records_each_call():
    groups = coerce_groups({"a": {}})

    first = flatten(groups)
    first[0].allocated = 42.0
    second = flatten(groups)

    assert second[0].allocated == 0.0
    assert first[0] is not second[0]


@pytest.mark.parametrize("value", ["wide", 10, None])
def test_unsupported_group_shapes_raise(value):
    with pytest.raises(InvalidSpecError, match="box"):
        coerce_group(value, key="box")


def test_unknown_region_fields_raise():
    with pytest.raises(InvalidSpecError, match=r"content\[1\]: unknown region fields: grow"):
        coerce_groups({"content": [{}, {"grow": 1}]})


def test_group_keys_must_be_strings():
    with pytest.raises(InvalidSpecError):
        coerce_groups({1: {}})


def test_aggregate_sums_array_groups():
    groups = coerce_groups({"a": {}, "b": [{}, {}], "c": []})
    regions = flatten(groups)
    for size, region in zip([1.0, 2.0, 3.0], regions):
        region.allocated = size

    assert aggregate(groups, regions) == {"a": 1.0, "b": 5.0, "c": 0.0}
    assert member_sizes(groups, regions) == {"a": (1.0,), "b": (2.0, 3.0), "c": ()}


def test_aggregate_rejects_mismatched_regions():
    groups = coerce_groups({"a": {}, "b": {}})
    regions = flatten(coerce_groups({"a": {}}))

    with pytest.raises(ValueError):
        aggregate(groups, regions)

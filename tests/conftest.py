"""Shared fixtures for schema-delta tests."""

import pytest

from schema_delta.diff.comparator import are_trees_equal
from schema_delta.engine import build_patches
from schema_delta.patch.apply import apply_schema_patches
from schema_delta.tree import (
    array_node,
    boolean_node,
    build_tree,
    number_node,
    object_node,
    string_node,
)


@pytest.fixture
def person_tree():
    """Object schema with primitives, an array and a nested object, explicit ids."""
    return build_tree(
        object_node(
            {
                "name": string_node(id="name", default="anon"),
                "age": number_node(id="age"),
                "active": boolean_node(id="active", default=True),
                "tags": array_node(string_node(id="tag"), id="tags"),
                "address": object_node(
                    {
                        "city": string_node(id="city"),
                        "zip": string_node(id="zip"),
                    },
                    id="address",
                ),
            },
            id="root",
        )
    )


@pytest.fixture
def assert_round_trip():
    """Diff two trees, replay the schema operations on base and compare with current."""

    def check(base, current):
        operations = build_patches(base, current, enrich=False)
        result = apply_schema_patches(base, operations)
        assert are_trees_equal(result, current), [op.to_json_patch() for op in operations]
        return operations

    return check

"""Tests for replaying operations onto JSON documents."""

import pytest

from schema_delta.errors import PatchApplyError
from schema_delta.patch import PatchBuilder, apply_operation, apply_patches, apply_schema_patches
from schema_delta.diff import are_trees_equal
from schema_delta.path import Path
from schema_delta.tree import remove_node


@pytest.fixture
def builder():
    return PatchBuilder()


class TestApplyPatches:
    def test_input_document_is_not_modified(self):
        document = {"a": {"b": 1}}
        result = apply_patches(document, [{"op": "remove", "path": "/a/b"}])
        assert result == {"a": {}}
        assert document == {"a": {"b": 1}}

    def test_add_to_object_and_list(self):
        document = {"list": [1, 3]}
        ops = [
            {"op": "add", "path": "/list/1", "value": 2},
            {"op": "add", "path": "/list/-", "value": 4},
            {"op": "add", "path": "/name", "value": "x"},
        ]
        assert apply_patches(document, ops) == {"list": [1, 2, 3, 4], "name": "x"}

    def test_replace_keeps_key_order(self):
        result = apply_patches({"a": 1, "b": 2, "c": 3}, [{"op": "replace", "path": "/b", "value": 9}])
        assert list(result.items()) == [("a", 1), ("b", 9), ("c", 3)]

    def test_replace_root(self):
        assert apply_patches({"a": 1}, [{"op": "replace", "path": "", "value": [1]}]) == [1]

    def test_move(self):
        ops = [{"op": "move", "from": "/a/x", "path": "/b/y"}]
        assert apply_patches({"a": {"x": 1}, "b": {}}, ops) == {"a": {}, "b": {"y": 1}}

    def test_move_to_same_location_is_a_no_op(self):
        ops = [{"op": "move", "from": "/a", "path": "/a"}]
        assert apply_patches({"a": 1}, ops) == {"a": 1}

    def test_scope_filter(self, builder):
        ops = [builder.add("/properties/a", {"type": "string"}), builder.add("/a", "", scope="data")]
        assert apply_patches({"properties": {}}, ops) == {"properties": {"a": {"type": "string"}}}
        assert apply_patches({}, ops, scope="data") == {"a": ""}

    def test_dict_operations_carry_their_scope(self):
        ops = [{"op": "add", "path": "/a", "value": 1, "scope": "data"}]
        assert apply_patches({}, ops) == {}
        assert apply_patches({}, ops, scope="data") == {"a": 1}

    def test_values_are_copied(self, builder):
        value = {"type": "string"}
        result = apply_patches({}, [builder.add("/a", value, scope="data")], scope="data")
        result["a"]["type"] = "number"
        assert value == {"type": "string"}


class TestApplyErrors:
    @pytest.mark.parametrize(
        "operation",
        [
            {"op": "remove", "path": "/missing"},
            {"op": "replace", "path": "/missing", "value": 1},
            {"op": "add", "path": "/missing/a", "value": 1},
            {"op": "remove", "path": "/list/5"},
            {"op": "add", "path": "/list/01", "value": 1},
            {"op": "remove", "path": ""},
            {"op": "move", "from": "/a", "path": "/a/b"},
            {"op": "copy", "from": "/a", "path": "/b"},
            {"op": "add", "path": "/a"},
            {"op": "add", "path": "a", "value": 1},
        ],
    )
    def test_invalid_operations(self, operation):
        with pytest.raises(PatchApplyError):
            apply_operation({"a": {}, "list": [1]}, operation)

    def test_error_names_the_operation(self):
        with pytest.raises(PatchApplyError, match=r"\(remove '/x'\)"):
            apply_operation({}, {"op": "remove", "path": "/x"})


class TestApplySchemaPatches:
    def test_round_trip_through_tree(self, person_tree, builder):
        result = apply_schema_patches(person_tree, [builder.remove("/properties/address")])
        assert are_trees_equal(result, remove_node(person_tree, Path.of("address")))

    def test_data_operations_are_ignored(self, person_tree, builder):
        result = apply_schema_patches(person_tree, [builder.add("/email", "", scope="data")])
        assert are_trees_equal(result, person_tree)

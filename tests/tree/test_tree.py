"""Tests for schema_delta.tree -- node model and tree snapshots."""

import pytest

from schema_delta.errors import NotFound
from schema_delta.path import EMPTY_PATH, ITEMS, Path
from schema_delta.tree import NodeType, SchemaNode, SchemaTree


# --- Helpers ---


def _obj(node_id: str, **properties: str) -> SchemaNode:
    return SchemaNode(id=node_id, type=NodeType.OBJECT, properties=properties)


def _str(node_id: str) -> SchemaNode:
    return SchemaNode(id=node_id, type=NodeType.STRING)


# --- Nodes ---


class TestSchemaNode:
    def test_type_is_coerced_from_string(self):
        assert SchemaNode(id="s", type="string").type is NodeType.STRING

    def test_requires_id(self):
        with pytest.raises(ValueError):
            SchemaNode(id="", type=NodeType.STRING)

    def test_only_objects_have_properties(self):
        with pytest.raises(ValueError):
            SchemaNode(id="s", type=NodeType.STRING, properties={"a": "x"})

    def test_array_requires_items(self):
        with pytest.raises(ValueError):
            SchemaNode(id="a", type=NodeType.ARRAY)

    def test_ref_requires_target(self):
        with pytest.raises(ValueError):
            SchemaNode(id="r", type=NodeType.REF)

    def test_properties_are_read_only(self):
        node = _obj("o", a="x")
        with pytest.raises(TypeError):
            node.properties["b"] = "y"

    def test_effective_default_falls_back_per_type(self):
        assert _str("s").effective_default() == ""
        assert SchemaNode(id="n", type=NodeType.NUMBER).effective_default() == 0
        assert SchemaNode(id="b", type=NodeType.BOOLEAN).effective_default() is False
        assert SchemaNode(id="s", type=NodeType.STRING, default="x").effective_default() == "x"
        assert _obj("o").effective_default() is None

    def test_child_ids(self):
        assert _obj("o", a="x", b="y").child_ids() == ("x", "y")
        assert SchemaNode(id="a", type=NodeType.ARRAY, items="i").child_ids() == ("i",)
        assert _str("s").child_ids() == ()


# --- Tree construction ---


class TestSchemaTreeConstruction:
    def test_missing_root(self):
        with pytest.raises(ValueError):
            SchemaTree("root", {})

    def test_dangling_child(self):
        with pytest.raises(ValueError, match="Dangling"):
            SchemaTree.from_nodes("root", [_obj("root", a="missing")])

    def test_node_reachable_twice(self):
        with pytest.raises(ValueError, match="more than once"):
            SchemaTree.from_nodes("root", [_obj("root", a="s", b="s"), _str("s")])

    def test_cycle(self):
        with pytest.raises(ValueError):
            SchemaTree.from_nodes("root", [_obj("root", a="root")])

    def test_unreachable_node(self):
        with pytest.raises(ValueError, match="not reachable"):
            SchemaTree.from_nodes("root", [_obj("root"), _str("orphan")])

    def test_duplicate_ids(self):
        with pytest.raises(ValueError, match="Duplicate"):
            SchemaTree.from_nodes("root", [_obj("root"), _obj("root")])


# --- Lookups ---


class TestSchemaTreeLookups:
    def test_node_ids_are_breadth_first(self, person_tree):
        assert list(person_tree.node_ids()) == [
            "root", "name", "age", "active", "tags", "address", "tag", "city", "zip",
        ]

    def test_node_ids_are_restartable(self, person_tree):
        ids = person_tree.node_ids()
        assert list(ids) == list(ids)
        assert len(ids) == person_tree.count_nodes() == 9
        assert "city" in ids

    def test_path_of_and_node_at_are_inverse(self, person_tree):
        for node_id in person_tree.node_ids():
            assert person_tree.node_at(person_tree.path_of(node_id)).id == node_id

    def test_paths(self, person_tree):
        assert person_tree.path_of("root") == EMPTY_PATH
        assert person_tree.path_of("tag") == Path.of("tags", ITEMS)
        assert person_tree.path_of("city") == Path.of("address", "city")

    def test_unknown_id(self, person_tree):
        assert not person_tree.has_node("nope")
        with pytest.raises(NotFound):
            person_tree.node_by_id("nope")
        with pytest.raises(NotFound):
            person_tree.path_of("nope")

    def test_node_at_missing_property(self, person_tree):
        with pytest.raises(NotFound):
            person_tree.node_at(Path.of("address", "street"))

    def test_node_at_items_on_non_array(self, person_tree):
        with pytest.raises(NotFound):
            person_tree.node_at(Path.of("name", ITEMS))

    def test_parent_and_children(self, person_tree):
        assert person_tree.parent_of("root") is None
        assert person_tree.parent_of("city").id == "address"
        assert [n.id for n in person_tree.children_of("address")] == ["city", "zip"]

    def test_descendant_ids(self, person_tree):
        assert person_tree.descendant_ids("address") == ["city", "zip"]
        assert person_tree.descendant_ids("name") == []


class TestSchemaTreeCopies:
    def test_clone_preserves_ids_and_paths(self, person_tree):
        clone = person_tree.clone()
        assert list(clone.node_ids()) == list(person_tree.node_ids())
        for node_id in person_tree.node_ids():
            assert clone.path_of(node_id) == person_tree.path_of(node_id)
            assert clone.node_by_id(node_id) == person_tree.node_by_id(node_id)

    def test_clone_does_not_share_nodes(self, person_tree):
        clone = person_tree.clone()
        assert clone.node_by_id("address") is not person_tree.node_by_id("address")

    def test_with_nodes_leaves_original_untouched(self, person_tree):
        root = person_tree.root()
        properties = dict(root.properties)
        del properties["age"]
        updated = person_tree.with_nodes({"root": root.evolve(properties=properties)}, removed=["age"])

        assert not updated.has_node("age")
        assert person_tree.has_node("age")

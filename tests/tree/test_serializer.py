"""Tests for schema_delta.tree.serializer and parser."""

import pytest

from schema_delta.diff.comparator import are_trees_equal
from schema_delta.tree import (
    NodeType,
    array_node,
    build_tree,
    object_node,
    parse_schema,
    ref_node,
    serialize_node,
    serialize_tree,
    string_node,
)


class TestSerializer:
    def test_serialize_tree(self, person_tree):
        schema = serialize_tree(person_tree)

        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False
        assert schema["required"] == ["name", "age", "active", "tags", "address"]
        assert schema["properties"]["name"] == {"type": "string", "default": "anon"}
        assert schema["properties"]["age"] == {"type": "number", "default": 0}
        assert schema["properties"]["active"] == {"type": "boolean", "default": True}
        assert schema["properties"]["tags"] == {
            "type": "array",
            "items": {"type": "string", "default": ""},
        }

    def test_string_extras_and_metadata(self):
        tree = build_tree(
            object_node(
                {
                    "body": string_node(
                        content_media_type="text/markdown",
                        title="Body",
                        description="Main text",
                        deprecated=True,
                    ),
                    "owner": string_node(foreign_key="users"),
                }
            )
        )
        properties = serialize_tree(tree)["properties"]

        assert properties["body"] == {
            "type": "string",
            "default": "",
            "contentMediaType": "text/markdown",
            "title": "Body",
            "description": "Main text",
            "deprecated": True,
        }
        assert properties["owner"] == {"type": "string", "default": "", "foreignKey": "users"}

    def test_ref(self):
        tree = build_tree(object_node({"file": ref_node("File")}))
        assert serialize_tree(tree)["properties"]["file"] == {"$ref": "File"}

    def test_exclude_ids(self, person_tree):
        schema = serialize_node(person_tree.root(), person_tree, exclude_ids={"address", "tag"})

        assert "address" not in schema["properties"]
        assert "address" not in schema["required"]
        assert schema["properties"]["tags"] == {"type": "array"}


class TestParser:
    def test_parse_round_trip(self, person_tree):
        parsed = parse_schema(serialize_tree(person_tree))

        assert are_trees_equal(parsed, person_tree)
        assert parsed.root_id != person_tree.root_id

    def test_integer_maps_to_number(self):
        tree = parse_schema({"type": "object", "properties": {"n": {"type": "integer"}}})
        assert tree.node_at(tree.path_of(tree.root().properties["n"])).type is NodeType.NUMBER

    def test_ref_and_metadata(self):
        tree = parse_schema(
            {
                "type": "object",
                "properties": {"file": {"$ref": "File", "title": "Attachment"}},
            }
        )
        file_node = tree.node_by_id(tree.root().properties["file"])
        assert file_node.ref == "File"
        assert file_node.metadata.title == "Attachment"

    def test_nested_array(self):
        schema = serialize_tree(build_tree(object_node({"m": array_node(array_node(string_node()))})))
        tree = parse_schema(schema)
        assert serialize_tree(tree) == schema

    def test_id_prefix_and_factory(self):
        tree = parse_schema({"type": "object", "properties": {}}, id_prefix="n-")
        assert tree.root_id.startswith("n-")

        ids = iter(["root"])
        tree = parse_schema({"type": "object", "properties": {}}, id_factory=lambda: next(ids))
        assert tree.root_id == "root"

    @pytest.mark.parametrize(
        "document",
        [
            {"type": "null"},
            {"properties": {}},
            {"type": "array"},
            {"type": "object", "properties": {"a": "string"}},
        ],
    )
    def test_unsupported_documents(self, document):
        with pytest.raises(ValueError):
            parse_schema(document)

"""Schema tree snapshots: node model, tree, factory, serialization and edits."""

from schema_delta.tree.node import (
    NodeMetadata,
    NodeType,
    SchemaNode,
)
from schema_delta.tree.tree import SchemaTree
from schema_delta.tree.factory import (
    NodeDraft,
    array_node,
    boolean_node,
    build_tree,
    number_node,
    object_node,
    ref_node,
    string_node,
)
from schema_delta.tree.serializer import serialize_node, serialize_tree
from schema_delta.tree.parser import parse_schema
from schema_delta.tree.edit import (
    add_property,
    move_node,
    remove_node,
    rename_property,
    set_items,
    update_node,
)

__all__ = [
    # Node
    "NodeMetadata",
    "NodeType",
    "SchemaNode",
    # Tree
    "SchemaTree",
    # Factory
    "NodeDraft",
    "array_node",
    "boolean_node",
    "build_tree",
    "number_node",
    "object_node",
    "ref_node",
    "string_node",
    # Serialization
    "serialize_node",
    "serialize_tree",
    "parse_schema",
    # Edits
    "add_property",
    "move_node",
    "remove_node",
    "rename_property",
    "set_items",
    "update_node",
]

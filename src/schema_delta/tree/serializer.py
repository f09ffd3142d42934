"""JSON Schema serialization of schema nodes.

  Node type   Serialized form
  -----------------------------------------------------------------------
  object      {"type": "object", "properties": {...},
               "additionalProperties": false, "required": [...]}
  array       {"type": "array", "items": {...}}
  string      {"type": "string", "default": ""} (+ foreignKey, contentMediaType)
  number      {"type": "number", "default": 0}
  boolean     {"type": "boolean", "default": false}
  ref         {"$ref": "<schema id>"}

title, description and deprecated are added to any node when set.
"""

from typing import Any, Collection

from schema_delta.tree.node import NodeType, SchemaNode
from schema_delta.tree.tree import SchemaTree


def serialize_node(
    node: SchemaNode,
    tree: SchemaTree,
    exclude_ids: Collection[str] = (),
) -> dict[str, Any]:
    """Serialize a node and its subtree.

    Args:
        node: The node to serialize.
        tree: The snapshot the node's children are resolved against.
        exclude_ids: Descendant ids to leave out (their own patch operations
            will add them). The node itself is always serialized.
    """
    excluded = frozenset(exclude_ids)

    def serialize(current: SchemaNode) -> dict[str, Any]:
        if current.type is NodeType.REF:
            result: dict[str, Any] = {"$ref": current.ref}
        elif current.type is NodeType.OBJECT:
            properties: dict[str, Any] = {}
            for name, child_id in current.properties.items():
                if child_id in excluded:
                    continue
                properties[name] = serialize(tree.node_by_id(child_id))
            result = {
                "type": "object",
                "properties": properties,
                "additionalProperties": False,
                "required": list(properties),
            }
        elif current.type is NodeType.ARRAY:
            result = {"type": "array"}
            if current.items not in excluded:
                result["items"] = serialize(tree.node_by_id(current.items))
        else:
            result = _serialize_primitive(current)

        _add_metadata(result, current)
        return result

    return serialize(node)


def serialize_tree(tree: SchemaTree) -> dict[str, Any]:
    return serialize_node(tree.root(), tree)


def _serialize_primitive(node: SchemaNode) -> dict[str, Any]:
    result: dict[str, Any] = {"type": node.type.value, "default": node.effective_default()}
    if node.type is NodeType.STRING:
        if node.foreign_key:
            result["foreignKey"] = node.foreign_key
        if node.content_media_type:
            result["contentMediaType"] = node.content_media_type
    return result


def _add_metadata(schema: dict[str, Any], node: SchemaNode) -> None:
    meta = node.metadata
    if meta.title:
        schema["title"] = meta.title
    if meta.description:
        schema["description"] = meta.description
    if meta.deprecated:
        schema["deprecated"] = True

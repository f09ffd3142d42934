"""Parse JSON Schema documents into schema trees.

This is the inverse of the serializer: every node gets a freshly minted id, so
two parses of the same document are structurally equal but share no identity.
"""

from functools import partial
from typing import Any, Callable, Mapping

from schema_delta.tree.factory import NodeDraft, build_tree
from schema_delta.tree.node import NodeMetadata, NodeType
from schema_delta.tree.tree import SchemaTree
from schema_delta.utils import mint_node_id

# JSON Schema spelling -> node type
TYPE_NAMES: dict[str, NodeType] = {
    "object": NodeType.OBJECT,
    "array": NodeType.ARRAY,
    "string": NodeType.STRING,
    "number": NodeType.NUMBER,
    "integer": NodeType.NUMBER,
    "boolean": NodeType.BOOLEAN,
}


def _parse_metadata(schema: Mapping[str, Any]) -> NodeMetadata:
    return NodeMetadata(
        title=schema.get("title") or None,
        description=schema.get("description") or None,
        deprecated=bool(schema.get("deprecated", False)),
    )


def _parse_draft(schema: Any, location: str) -> NodeDraft:
    if not isinstance(schema, Mapping):
        raise ValueError(f"Schema at {location!r} must be an object, got {type(schema).__name__}")

    metadata = _parse_metadata(schema)

    # --- References ---
    # Trigger: "$ref" present
    # Why: a ref node points at another schema and has no children of its own
    # Outcome: REF draft with the target id, other keywords ignored
    if "$ref" in schema:
        return NodeDraft(type=NodeType.REF, metadata=metadata, attrs={"ref": str(schema["$ref"])})

    type_name = schema.get("type")
    node_type = TYPE_NAMES.get(type_name) if isinstance(type_name, str) else None
    if node_type is None:
        raise ValueError(f"Unsupported schema type {type_name!r} at {location!r}")

    if node_type is NodeType.OBJECT:
        properties = schema.get("properties") or {}
        return NodeDraft(
            type=node_type,
            metadata=metadata,
            properties={
                name: _parse_draft(child, f"{location}/properties/{name}")
                for name, child in properties.items()
            },
        )

    if node_type is NodeType.ARRAY:
        if "items" not in schema:
            raise ValueError(f"Array schema at {location!r} has no items")
        return NodeDraft(
            type=node_type,
            metadata=metadata,
            items=_parse_draft(schema["items"], f"{location}/items"),
        )

    attrs: dict[str, Any] = {"default": schema.get("default")}
    if node_type is NodeType.STRING:
        attrs["foreign_key"] = schema.get("foreignKey")
        attrs["content_media_type"] = schema.get("contentMediaType")
    return NodeDraft(type=node_type, metadata=metadata, attrs=attrs)


def parse_schema(
    document: Mapping[str, Any],
    id_factory: Callable[[], str] | None = None,
    id_prefix: str = "",
) -> SchemaTree:
    """Parse a JSON Schema document into a SchemaTree.

    Args:
        document: A schema in the serializer's JSON Schema dialect.
        id_factory: Callable minting node ids. Defaults to uuid4-based ids.
        id_prefix: Prefix for the default id factory.

    Raises:
        ValueError: If the document uses an unsupported type or shape.
    """
    draft = _parse_draft(document, "")
    return build_tree(draft, id_factory or partial(mint_node_id, id_prefix))

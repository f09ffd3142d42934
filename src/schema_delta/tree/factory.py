"""Node factory for building schema trees in code.

Drafts are nested, so a whole tree can be written as one expression:

    tree = build_tree(
        object_node(
            {"name": string_node(id="name"), "tags": array_node(string_node())},
            id="root",
        )
    )

Ids given explicitly are kept; missing ids are minted. Reusing an explicit id
across two trees is how callers express "the same node" in two versions.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from schema_delta.tree.node import NodeMetadata, NodeType, SchemaNode
from schema_delta.tree.tree import SchemaTree
from schema_delta.utils import mint_node_id


@dataclass
class NodeDraft:
    """A node declaration with nested child drafts."""

    type: NodeType
    id: str | None = None
    properties: dict[str, "NodeDraft"] = field(default_factory=dict)
    items: "NodeDraft | None" = None
    metadata: NodeMetadata = field(default_factory=NodeMetadata)
    attrs: dict[str, Any] = field(default_factory=dict)  # ref, default, foreign_key, ...


def _metadata(title: str | None, description: str | None, deprecated: bool) -> NodeMetadata:
    return NodeMetadata(title=title, description=description, deprecated=deprecated)


def object_node(
    properties: Mapping[str, NodeDraft] | None = None,
    *,
    id: str | None = None,
    title: str | None = None,
    description: str | None = None,
    deprecated: bool = False,
) -> NodeDraft:
    return NodeDraft(
        type=NodeType.OBJECT,
        id=id,
        properties=dict(properties or {}),
        metadata=_metadata(title, description, deprecated),
    )


def array_node(
    items: NodeDraft,
    *,
    id: str | None = None,
    title: str | None = None,
    description: str | None = None,
    deprecated: bool = False,
) -> NodeDraft:
    return NodeDraft(
        type=NodeType.ARRAY,
        id=id,
        items=items,
        metadata=_metadata(title, description, deprecated),
    )


def string_node(
    *,
    id: str | None = None,
    default: str | None = None,
    foreign_key: str | None = None,
    content_media_type: str | None = None,
    title: str | None = None,
    description: str | None = None,
    deprecated: bool = False,
) -> NodeDraft:
    return NodeDraft(
        type=NodeType.STRING,
        id=id,
        metadata=_metadata(title, description, deprecated),
        attrs={
            "default": default,
            "foreign_key": foreign_key,
            "content_media_type": content_media_type,
        },
    )


def number_node(
    *,
    id: str | None = None,
    default: int | float | None = None,
    title: str | None = None,
    description: str | None = None,
    deprecated: bool = False,
) -> NodeDraft:
    return NodeDraft(
        type=NodeType.NUMBER,
        id=id,
        metadata=_metadata(title, description, deprecated),
        attrs={"default": default},
    )


def boolean_node(
    *,
    id: str | None = None,
    default: bool | None = None,
    title: str | None = None,
    description: str | None = None,
    deprecated: bool = False,
) -> NodeDraft:
    return NodeDraft(
        type=NodeType.BOOLEAN,
        id=id,
        metadata=_metadata(title, description, deprecated),
        attrs={"default": default},
    )


def ref_node(
    ref: str,
    *,
    id: str | None = None,
    title: str | None = None,
    description: str | None = None,
    deprecated: bool = False,
) -> NodeDraft:
    return NodeDraft(
        type=NodeType.REF,
        id=id,
        metadata=_metadata(title, description, deprecated),
        attrs={"ref": ref},
    )


def flatten_draft(
    draft: NodeDraft,
    id_factory: Callable[[], str] | None = None,
) -> tuple[str, list[SchemaNode]]:
    """Turn a nested draft into (root id, flat node list)."""
    mint = id_factory or mint_node_id
    nodes: list[SchemaNode] = []

    def visit(current: NodeDraft) -> str:
        node_id = current.id or mint()
        properties = {name: visit(child) for name, child in current.properties.items()}
        items = visit(current.items) if current.items is not None else None
        attrs = {k: v for k, v in current.attrs.items() if v is not None}
        nodes.append(
            SchemaNode(
                id=node_id,
                type=current.type,
                properties=properties,
                items=items,
                metadata=current.metadata,
                **attrs,
            )
        )
        return node_id

    root_id = visit(draft)
    return root_id, nodes


def build_tree(
    root: NodeDraft,
    id_factory: Callable[[], str] | None = None,
) -> SchemaTree:
    """Build an immutable SchemaTree from a nested draft."""
    root_id, nodes = flatten_draft(root, id_factory)
    return SchemaTree.from_nodes(root_id, nodes)

"""Equality predicates over schema nodes.

Two levels of equality are used by the change collector:

  are_nodes_content_equal  -> the node's own declaration only (type, metadata,
                              ref target, primitive constraints)
  are_nodes_equal          -> content equality plus recursively equal children

Node ids never take part in either comparison.
"""

from dataclasses import dataclass
from typing import Optional

from schema_delta.tree.node import NodeMetadata, NodeType, SchemaNode
from schema_delta.tree.tree import SchemaTree


@dataclass(frozen=True)
class ComparatorContext:
    """Trees used to resolve the children of the left and right node."""

    base_tree: SchemaTree
    current_tree: SchemaTree


def _metadata_key(meta: NodeMetadata) -> tuple:
    # Empty strings serialize the same as missing values
    return (meta.title or None, meta.description or None, bool(meta.deprecated))


def are_nodes_content_equal(a: SchemaNode, b: SchemaNode) -> bool:
    """Compare the nodes' own attributes without looking at children."""
    if a.type is not b.type:
        return False
    if _metadata_key(a.metadata) != _metadata_key(b.metadata):
        return False

    if a.type is NodeType.REF:
        return a.ref == b.ref
    if a.is_primitive():
        return (
            a.effective_default() == b.effective_default()
            and type(a.effective_default()) is type(b.effective_default())
            and (a.foreign_key or None) == (b.foreign_key or None)
            and (a.content_media_type or None) == (b.content_media_type or None)
        )
    # object / array have no own attributes besides metadata
    return True


def are_nodes_equal(
    a: SchemaNode,
    b: SchemaNode,
    context: Optional[ComparatorContext] = None,
) -> bool:
    """Deep structural equality of two nodes and their subtrees.

    Args:
        a: Node resolved against ``context.base_tree``.
        b: Node resolved against ``context.current_tree``.
        context: Required whenever the nodes are composite.
    """
    if not are_nodes_content_equal(a, b):
        return False

    if a.type is NodeType.OBJECT:
        if a.properties.keys() != b.properties.keys():
            return False
        if not a.properties:
            return True
        context = _require_context(context)
        return all(
            are_nodes_equal(
                context.base_tree.node_by_id(a.properties[name]),
                context.current_tree.node_by_id(b.properties[name]),
                context,
            )
            for name in a.properties
        )

    if a.type is NodeType.ARRAY:
        context = _require_context(context)
        return are_nodes_equal(
            context.base_tree.node_by_id(a.items),
            context.current_tree.node_by_id(b.items),
            context,
        )

    return True


def are_trees_equal(left: SchemaTree, right: SchemaTree) -> bool:
    """Structural equality of two whole trees (roots compared deeply)."""
    return are_nodes_equal(left.root(), right.root(), ComparatorContext(left, right))


def _require_context(context: Optional[ComparatorContext]) -> ComparatorContext:
    if context is None:
        raise ValueError("Comparing composite nodes requires a ComparatorContext")
    return context

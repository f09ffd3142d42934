"""Immutable edits on schema trees.

Every function takes a snapshot and returns a new one. Nodes that are not
touched keep their ids, and moved or renamed nodes keep theirs too, which is
what lets the diff engine tell a move from a remove/add pair.
"""

from typing import Any

from loguru import logger

from schema_delta.path import Path
from schema_delta.tree.factory import NodeDraft, flatten_draft
from schema_delta.tree.node import NodeType, SchemaNode
from schema_delta.tree.tree import SchemaTree


def _require_object(tree: SchemaTree, path: Path) -> SchemaNode:
    node = tree.node_at(path)
    if not node.is_object():
        raise ValueError(f"Node at {path.as_pointer()!r} is not an object")
    return node


def _property_name(path: Path) -> str:
    last = path.last()
    if last is None or last.is_items():
        raise ValueError(f"Path {path.as_pointer()!r} does not name an object property")
    return last.name


def add_property(tree: SchemaTree, parent_path: Path, name: str, draft: NodeDraft) -> SchemaTree:
    """Add a new property (and its subtree) to the object at parent_path."""
    parent = _require_object(tree, parent_path)
    if name in parent.properties:
        raise ValueError(f"Property {name!r} already exists at {parent_path.as_pointer()!r}")

    child_id, new_nodes = flatten_draft(draft)
    clashes = [n.id for n in new_nodes if tree.has_node(n.id)]
    if clashes:
        raise ValueError(f"Node ids already in use: {clashes}")

    updates = {n.id: n for n in new_nodes}
    updates[parent.id] = parent.evolve(properties={**parent.properties, name: child_id})
    logger.debug(f"Adding property {name!r} under {parent_path.as_pointer()!r}")
    return tree.with_nodes(updates)


def remove_node(tree: SchemaTree, path: Path) -> SchemaTree:
    """Remove the property at path together with its subtree."""
    if path.is_empty():
        raise ValueError("Cannot remove the root node")
    node = tree.node_at(path)
    parent = _require_object(tree, path.parent())
    name = _property_name(path)

    properties = dict(parent.properties)
    del properties[name]
    removed = [node.id, *tree.descendant_ids(node.id)]
    return tree.with_nodes({parent.id: parent.evolve(properties=properties)}, removed=removed)


def rename_property(tree: SchemaTree, path: Path, new_name: str) -> SchemaTree:
    """Rename the property at path, keeping the node id."""
    return move_node(tree, path, path.parent(), new_name)


def move_node(
    tree: SchemaTree,
    from_path: Path,
    to_parent_path: Path,
    name: str | None = None,
) -> SchemaTree:
    """Move the property at from_path under the object at to_parent_path."""
    if from_path.is_empty():
        raise ValueError("Cannot move the root node")
    node = tree.node_at(from_path)
    old_name = _property_name(from_path)
    new_name = name or old_name

    if to_parent_path == from_path or to_parent_path.is_child_of(from_path):
        raise ValueError("Cannot move a node into its own subtree")

    source = _require_object(tree, from_path.parent())
    target = _require_object(tree, to_parent_path)

    source_props = dict(source.properties)
    del source_props[old_name]
    if source.id == target.id:
        target_props = source_props
    else:
        target_props = dict(target.properties)
    if new_name in target_props:
        raise ValueError(f"Property {new_name!r} already exists at {to_parent_path.as_pointer()!r}")
    target_props[new_name] = node.id

    updates = {target.id: target.evolve(properties=target_props)}
    if source.id != target.id:
        updates[source.id] = source.evolve(properties=source_props)
    return tree.with_nodes(updates)


def set_items(tree: SchemaTree, array_path: Path, draft: NodeDraft) -> SchemaTree:
    """Replace the item schema of the array at array_path with a new subtree."""
    array = tree.node_at(array_path)
    if not array.is_array():
        raise ValueError(f"Node at {array_path.as_pointer()!r} is not an array")

    items_id, new_nodes = flatten_draft(draft)
    removed = [array.items, *tree.descendant_ids(array.items)]
    updates = {n.id: n for n in new_nodes}
    updates[array.id] = array.evolve(items=items_id)
    return tree.with_nodes(updates, removed=removed)


def update_node(tree: SchemaTree, path: Path, **changes: Any) -> SchemaTree:
    """Change a node's own attributes (metadata, default, ref, ...).

    Changing ``type`` keeps the node id. Switching away from a composite type
    drops the old children; switching to a composite type requires passing
    ``items`` (a NodeDraft) for arrays, and starts objects without properties.
    """
    node = tree.node_at(path)
    removed: list[str] = []
    updates: dict[str, SchemaNode] = {}

    new_type = changes.get("type")
    if new_type is not None and NodeType(new_type) is not node.type:
        new_type = NodeType(new_type)
        removed = tree.descendant_ids(node.id)
        changes.setdefault("properties", {})
        changes.setdefault("items", None)
        if node.type is NodeType.REF:
            changes.setdefault("ref", None)
        if not new_type.is_primitive:
            changes.setdefault("default", None)

    items_draft = changes.get("items")
    if isinstance(items_draft, NodeDraft):
        if node.is_array():
            removed = removed or tree.descendant_ids(node.id)
        items_id, new_nodes = flatten_draft(items_draft)
        updates.update({n.id: n for n in new_nodes})
        changes["items"] = items_id

    if "metadata" not in changes and {"title", "description", "deprecated"} & changes.keys():
        meta = node.metadata
        changes["metadata"] = type(meta)(
            title=changes.pop("title", meta.title),
            description=changes.pop("description", meta.description),
            deprecated=changes.pop("deprecated", meta.deprecated),
        )

    try:
        updates[node.id] = node.evolve(**changes)
    except TypeError as e:
        raise ValueError(f"Invalid node attribute change: {e}") from e
    return tree.with_nodes(updates, removed=removed)

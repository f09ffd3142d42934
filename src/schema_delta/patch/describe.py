"""Human-oriented summaries of schema patch operations.

Each schema operation is described against the two snapshots it was generated
from: which field it touches, which node attributes changed, whether the type
changed, and for moves whether it is a plain rename or crosses into an array.
"""

from typing import Any, Callable, Iterable

from pydantic import BaseModel, Field

from schema_delta.errors import InvalidPath, NotFound
from schema_delta.path import Path, json_pointer_to_path
from schema_delta.patch.generator import PARKING_PREFIX
from schema_delta.patch.operations import AddOperation, BaseOperation, MoveOperation, RemoveOperation
from schema_delta.tree.node import SchemaNode
from schema_delta.tree.tree import SchemaTree


class PropertyChange(BaseModel):
    property: str
    from_value: Any = None
    to_value: Any = None


class TypeChange(BaseModel):
    from_type: str
    to_type: str


class PatchDescription(BaseModel):
    """Summary of one schema operation."""

    operation: BaseOperation
    field_name: str = Field(..., description="Dotted path of the affected field")
    property_changes: list[PropertyChange] = Field(default_factory=list)
    type_change: TypeChange | None = None
    is_rename: bool = False
    moves_into_array: bool = False


# Attribute name -> extractor, in reporting order
_EXTRACTORS: list[tuple[str, Callable[[SchemaNode], Any]]] = [
    ("default", lambda node: node.default if node.is_primitive() else None),
    ("description", lambda node: node.metadata.description),
    ("deprecated", lambda node: node.metadata.deprecated or None),
    ("foreign_key", lambda node: node.foreign_key),
    ("content_media_type", lambda node: node.content_media_type),
    ("ref", lambda node: node.ref),
    ("title", lambda node: node.metadata.title),
]


def type_label(node: SchemaNode, tree: SchemaTree) -> str:
    """Type name with array item types spelled out: ``array<string>``."""
    if node.is_array():
        return f"array<{type_label(tree.node_by_id(node.items), tree)}>"
    return node.type.value


def _to_path(pointer: str) -> Path | None:
    try:
        return json_pointer_to_path(pointer)
    except InvalidPath:
        return None


def _is_parking_slot(path: Path | None) -> bool:
    """True for the temporary properties used to break move cycles."""
    if path is None or path.is_empty():
        return False
    last = path.last()
    return not last.is_items() and last.name.startswith(PARKING_PREFIX)


def _node_at(tree: SchemaTree, path: Path | None) -> SchemaNode | None:
    if path is None:
        return None
    try:
        return tree.node_at(path)
    except NotFound:
        return None


class PatchDescriber:
    def __init__(self, base_tree: SchemaTree, current_tree: SchemaTree):
        self.base_tree = base_tree
        self.current_tree = current_tree

    def describe(self, operation: BaseOperation) -> PatchDescription:
        path = _to_path(operation.path)
        field_name = path.as_simple() if path is not None else ""

        if isinstance(operation, RemoveOperation):
            return PatchDescription(operation=operation, field_name=field_name)

        current = self._current_node(operation, path)

        if isinstance(operation, AddOperation):
            changes = [c for c in self.property_changes(None, current) if c.to_value is not None]
            return PatchDescription(operation=operation, field_name=field_name, property_changes=changes)

        if isinstance(operation, MoveOperation):
            from_path = _to_path(operation.from_)
            if _is_parking_slot(from_path):
                # Leaving a temporary slot: compare with where the node started
                from_path = self._base_path(operation)
            base = self._base_node(operation, from_path)
            comparable = from_path is not None and path is not None and not _is_parking_slot(path)
            return PatchDescription(
                operation=operation,
                field_name=field_name,
                property_changes=self.property_changes(base, current),
                is_rename=comparable and from_path.parent() == path.parent(),
                moves_into_array=comparable and path.items_depth() > from_path.items_depth(),
            )

        base = self._base_node(operation, path)
        return PatchDescription(
            operation=operation,
            field_name=field_name,
            property_changes=self.property_changes(base, current),
            type_change=self.type_change(base, current),
        )

    def property_changes(self, base: SchemaNode | None, current: SchemaNode | None) -> list[PropertyChange]:
        changes: list[PropertyChange] = []
        for name, extract in _EXTRACTORS:
            from_value = extract(base) if base is not None else None
            to_value = extract(current) if current is not None else None
            if from_value != to_value:
                changes.append(PropertyChange(property=name, from_value=from_value, to_value=to_value))
        return changes

    def type_change(self, base: SchemaNode | None, current: SchemaNode | None) -> TypeChange | None:
        if base is None or current is None:
            return None
        from_type = type_label(base, self.base_tree)
        to_type = type_label(current, self.current_tree)
        if from_type == to_type:
            return None
        return TypeChange(from_type=from_type, to_type=to_type)

    def _current_node(self, operation: BaseOperation, path: Path | None) -> SchemaNode | None:
        if operation.node_id is not None and self.current_tree.has_node(operation.node_id):
            return self.current_tree.node_by_id(operation.node_id)
        return _node_at(self.current_tree, path)

    def _base_path(self, operation: BaseOperation) -> Path | None:
        if operation.node_id is not None and self.base_tree.has_node(operation.node_id):
            return self.base_tree.path_of(operation.node_id)
        return None

    def _base_node(self, operation: BaseOperation, path: Path | None) -> SchemaNode | None:
        if operation.node_id is not None and self.base_tree.has_node(operation.node_id):
            return self.base_tree.node_by_id(operation.node_id)
        return _node_at(self.base_tree, path)


def describe_patches(
    operations: Iterable[BaseOperation],
    base_tree: SchemaTree,
    current_tree: SchemaTree,
) -> list[PatchDescription]:
    """Describe every schema-scope operation; data operations are skipped."""
    describer = PatchDescriber(base_tree, current_tree)
    return [describer.describe(op) for op in operations if op.scope == "schema"]

"""Append data-scope default values for newly added schema fields."""

from typing import Any, Mapping, Sequence

from loguru import logger

from schema_delta.errors import EnrichmentError, NotFound
from schema_delta.path import Path, json_pointer_to_path
from schema_delta.patch.builder import PatchBuilder
from schema_delta.patch.defaults import generate_default_value
from schema_delta.patch.operations import AddOperation, BaseOperation
from schema_delta.tree.node import NodeType, SchemaNode
from schema_delta.tree.serializer import serialize_node
from schema_delta.tree.tree import SchemaTree


class PatchEnricher:
    """Give existing data rows a value for every field a schema patch adds.

    For each schema-scope ``add`` of a data-bearing node, one data-scope
    ``add`` is appended carrying the node's default value at its data pointer.
    Input operations are returned unchanged and in order; the data operations
    follow them.

    Fields inside array items are skipped: there is one value per element, not
    one pointer to fill.
    """

    def __init__(
        self,
        current_tree: SchemaTree,
        ref_schemas: Mapping[str, Mapping[str, Any]] | None = None,
        builder: PatchBuilder | None = None,
    ):
        self.current_tree = current_tree
        self.ref_schemas = dict(ref_schemas or {})
        self.builder = builder or PatchBuilder()

    def enrich(self, operations: Sequence[BaseOperation]) -> list[BaseOperation]:
        """Return operations followed by the appended data defaults.

        Raises:
            EnrichmentError: If a referenced schema needed for a default value
                is not in ref_schemas.
        """
        data_operations: list[BaseOperation] = []
        enriched_paths: list[Path] = []

        for operation in operations:
            if not isinstance(operation, AddOperation) or operation.scope != "schema":
                continue

            node = self._node_for(operation)
            if node is None:
                logger.debug(f"No current node for {operation.path!r}, skipping enrichment")
                continue
            path = self.current_tree.path_of(node.id)

            if any(path.is_child_of(done) for done in enriched_paths):
                continue
            if not self.is_data_bearing(node):
                continue
            data_pointer = path.as_data_pointer()
            if data_pointer is None:
                logger.debug(f"Skipping enrichment inside array items at {path.as_simple()!r}")
                continue

            try:
                value = generate_default_value(serialize_node(node, self.current_tree), self.ref_schemas)
            except NotFound as e:
                raise EnrichmentError(
                    f"Cannot build a default value: {e}", operation.path, list(operations)
                ) from e

            data_operations.append(
                self.builder.add(data_pointer, value, scope="data", node_id=node.id)
            )
            enriched_paths.append(path)

        logger.debug(f"Enrichment appended {len(data_operations)} data operations")
        return [*operations, *data_operations]

    def is_data_bearing(self, node: SchemaNode) -> bool:
        """Primitives, refs and arrays hold data; objects only through descendants."""
        if node.type is not NodeType.OBJECT:
            return True
        return any(
            self.is_data_bearing(child) for child in self.current_tree.children_of(node.id)
        )

    def _node_for(self, operation: AddOperation) -> SchemaNode | None:
        if operation.node_id is not None and self.current_tree.has_node(operation.node_id):
            return self.current_tree.node_by_id(operation.node_id)
        try:
            return self.current_tree.node_at(json_pointer_to_path(operation.path))
        except NotFound:
            return None

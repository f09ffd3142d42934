"""Classify every node id of two snapshots as added, removed, moved or modified."""

from loguru import logger

from schema_delta.diff.changes import ChangeType, RawChange
from schema_delta.diff.comparator import are_nodes_content_equal
from schema_delta.diff.index import NodePathIndex
from schema_delta.tree.tree import SchemaTree


class ChangeCollector:
    """Compare a base and a current snapshot by node identity.

    Traversal is id-set driven: every id of the current tree is visited, then
    every base id that is gone from the current tree. A node whose path changed
    is reported as moved even if its content changed too.
    """

    def __init__(self, base_tree: SchemaTree, current_tree: SchemaTree, index: NodePathIndex | None = None):
        self.base_tree = base_tree
        self.current_tree = current_tree
        self.index = index or NodePathIndex(base_tree)

    def collect(self) -> list[RawChange]:
        changes: list[RawChange] = []

        for node_id in self.current_tree.node_ids():
            current_node = self.current_tree.node_by_id(node_id)
            base_path = self.index.base_path(node_id)
            if base_path is None:
                changes.append(RawChange(ChangeType.ADDED, current_node=current_node))
                continue

            base_node = self.base_tree.node_by_id(node_id)
            if base_path != self.current_tree.path_of(node_id):
                changes.append(RawChange(ChangeType.MOVED, base_node, current_node))
            elif not are_nodes_content_equal(base_node, current_node):
                changes.append(RawChange(ChangeType.MODIFIED, base_node, current_node))

        for node_id in self.base_tree.node_ids():
            if not self.current_tree.has_node(node_id):
                changes.append(
                    RawChange(ChangeType.REMOVED, base_node=self.base_tree.node_by_id(node_id))
                )

        logger.debug(
            f"Collected {len(changes)} changes between "
            f"{self.base_tree.count_nodes()} base and {self.current_tree.count_nodes()} current nodes"
        )
        return changes


def collect_changes(
    base_tree: SchemaTree,
    current_tree: SchemaTree,
    index: NodePathIndex | None = None,
) -> list[RawChange]:
    """Raw, unordered node-level changes from base_tree to current_tree."""
    return ChangeCollector(base_tree, current_tree, index).collect()

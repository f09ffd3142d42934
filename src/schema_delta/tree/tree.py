"""Immutable schema tree snapshots.

A SchemaTree holds a root id and a flat id -> node mapping. On construction it
walks the tree once and derives the id -> path index, validating that every node
is reachable exactly once from the root.
"""

import copy
from collections import deque
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

from schema_delta.errors import NotFound
from schema_delta.path import EMPTY_PATH, ITEMS, Path, PropertySegment
from schema_delta.tree.node import SchemaNode


class _NodeIdView:
    """Restartable, lazy view over the node ids of a snapshot."""

    def __init__(self, order: tuple[str, ...]):
        self._order = order

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._order


class SchemaTree:
    """Point-in-time, read-only schema tree."""

    def __init__(self, root_id: str, nodes: Mapping[str, SchemaNode]):
        if root_id not in nodes:
            raise ValueError(f"Root node {root_id!r} is not in the node mapping")
        self._root_id = root_id
        self._nodes: Mapping[str, SchemaNode] = MappingProxyType(dict(nodes))
        self._paths: dict[str, Path] = {}
        self._parents: dict[str, str] = {}
        self._order = self._index()

    @classmethod
    def from_nodes(cls, root_id: str, nodes: Iterable[SchemaNode]) -> "SchemaTree":
        mapping: dict[str, SchemaNode] = {}
        for node in nodes:
            if node.id in mapping:
                raise ValueError(f"Duplicate node id {node.id!r}")
            mapping[node.id] = node
        return cls(root_id, mapping)

    def _index(self) -> tuple[str, ...]:
        """Breadth-first walk building the path and parent indexes."""
        order: list[str] = []
        queue: deque[tuple[str, Path]] = deque([(self._root_id, EMPTY_PATH)])
        while queue:
            node_id, path = queue.popleft()
            if node_id in self._paths:
                raise ValueError(f"Node {node_id!r} is reachable more than once")
            node = self._nodes.get(node_id)
            if node is None:
                raise ValueError(f"Dangling child id {node_id!r} at {path.as_pointer()!r}")
            self._paths[node_id] = path
            order.append(node_id)
            if node.is_object():
                for name, child_id in node.properties.items():
                    self._parents[child_id] = node_id
                    queue.append((child_id, path.join(PropertySegment(name))))
            elif node.is_array():
                self._parents[node.items] = node_id
                queue.append((node.items, path.join(ITEMS)))

        unreachable = set(self._nodes) - set(self._paths)
        if unreachable:
            raise ValueError(f"Nodes not reachable from the root: {sorted(unreachable)}")
        return tuple(order)

    # --- Lookups ---

    @property
    def root_id(self) -> str:
        return self._root_id

    def root(self) -> SchemaNode:
        return self._nodes[self._root_id]

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def node_by_id(self, node_id: str) -> SchemaNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFound(f"Node {node_id!r} not found", key=node_id)
        return node

    def path_of(self, node_id: str) -> Path:
        path = self._paths.get(node_id)
        if path is None:
            raise NotFound(f"Node {node_id!r} not found", key=node_id)
        return path

    def node_at(self, path: Path) -> SchemaNode:
        current = self.root()
        for segment in path.segments:
            if segment.is_items():
                if not current.is_array():
                    raise NotFound(
                        f"No items at {path.as_pointer()!r}: {current.type.value} node",
                        key=path.as_pointer(),
                    )
                child_id = current.items
            else:
                child_id = current.properties.get(segment.name) if current.is_object() else None
                if child_id is None:
                    raise NotFound(
                        f"Property {segment.name!r} not found at {path.as_pointer()!r}",
                        key=path.as_pointer(),
                    )
            current = self._nodes[child_id]
        return current

    def parent_of(self, node_id: str) -> SchemaNode | None:
        """Parent node, or None for the root."""
        self.path_of(node_id)
        parent_id = self._parents.get(node_id)
        return self._nodes[parent_id] if parent_id is not None else None

    def children_of(self, node_id: str) -> list[SchemaNode]:
        return [self._nodes[c] for c in self.node_by_id(node_id).child_ids()]

    def descendant_ids(self, node_id: str) -> list[str]:
        """All ids strictly below node_id, breadth-first."""
        result: list[str] = []
        queue = deque(self.node_by_id(node_id).child_ids())
        while queue:
            child_id = queue.popleft()
            result.append(child_id)
            queue.extend(self._nodes[child_id].child_ids())
        return result

    def node_ids(self) -> _NodeIdView:
        return _NodeIdView(self._order)

    def count_nodes(self) -> int:
        return len(self._order)

    def nodes(self) -> Mapping[str, SchemaNode]:
        return self._nodes

    # --- Copies ---

    def clone(self) -> "SchemaTree":
        """Deep, independent copy with the same ids and paths."""
        return SchemaTree(self._root_id, copy.deepcopy(dict(self._nodes)))

    def with_nodes(
        self,
        updates: Mapping[str, SchemaNode] | None = None,
        removed: Iterable[str] = (),
        root_id: str | None = None,
    ) -> "SchemaTree":
        """New snapshot with nodes replaced/added and ids dropped."""
        nodes = dict(self._nodes)
        for node_id in removed:
            nodes.pop(node_id, None)
        nodes.update(updates or {})
        return SchemaTree(root_id or self._root_id, nodes)

    def __repr__(self) -> str:
        return f"SchemaTree(root={self._root_id!r}, nodes={len(self._order)})"

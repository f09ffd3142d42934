"""Id -> path lookup for the base snapshot of a diff."""

from typing import Iterator

from loguru import logger

from schema_delta.path import Path
from schema_delta.tree.tree import SchemaTree


class NodePathIndex:
    """Constant-time "does this id exist in the base tree, and where" lookups.

    Built once per base snapshot with a full traversal. Rebuild it (or create a
    new one) whenever the base snapshot changes.
    """

    def __init__(self, base_tree: SchemaTree):
        self._paths: dict[str, Path] = {}
        self.rebuild(base_tree)

    def rebuild(self, base_tree: SchemaTree) -> None:
        self._paths = {node_id: base_tree.path_of(node_id) for node_id in base_tree.node_ids()}
        logger.debug(f"Indexed {len(self._paths)} base node paths")

    def base_path(self, node_id: str) -> Path | None:
        return self._paths.get(node_id)

    def has_base_path(self, node_id: str) -> bool:
        return node_id in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

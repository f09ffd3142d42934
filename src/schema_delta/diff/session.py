"""Long-lived diff against a saved baseline."""

from typing import Any, Mapping, Optional

from loguru import logger

from schema_delta.config import SchemaDeltaConfig
from schema_delta.diff.changes import CoalescedChanges, RawChange
from schema_delta.diff.coalescer import coalesce_changes
from schema_delta.diff.collector import collect_changes
from schema_delta.diff.index import NodePathIndex
from schema_delta.engine import build_patches
from schema_delta.patch.operations import BaseOperation
from schema_delta.tree.tree import SchemaTree


class SchemaDiff:
    """Track edits of a schema relative to the last saved version.

    Usage:
        diff = SchemaDiff(tree)         # tree is the saved version
        diff.update(edited_tree)
        if diff.is_dirty():
            save(diff.build_patches())
            diff.mark_as_saved()
    """

    def __init__(self, current_tree: SchemaTree, config: Optional[SchemaDeltaConfig] = None):
        self.config = config or SchemaDeltaConfig()
        self.current_tree = current_tree
        self.base_tree = current_tree.clone()
        self.index = NodePathIndex(self.base_tree)

    def update(self, current_tree: SchemaTree) -> None:
        """Point the diff at a newer snapshot of the edited schema."""
        self.current_tree = current_tree

    def collect_changes(self) -> list[RawChange]:
        return collect_changes(self.base_tree, self.current_tree, self.index)

    def coalesce_changes(self) -> CoalescedChanges:
        return coalesce_changes(self.collect_changes())

    def is_dirty(self) -> bool:
        return bool(self.collect_changes())

    def build_patches(
        self,
        *,
        enrich: Optional[bool] = None,
        ref_schemas: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> list[BaseOperation]:
        return build_patches(
            self.base_tree,
            self.current_tree,
            enrich=enrich,
            ref_schemas=ref_schemas,
            config=self.config,
            index=self.index,
        )

    def mark_as_saved(self) -> None:
        """Make the current snapshot the new baseline."""
        self.base_tree = self.current_tree.clone()
        self.index.rebuild(self.base_tree)
        logger.debug(f"Diff baseline reset to {self.base_tree!r}")

"""Identity-based change detection between two schema tree snapshots.

SchemaDiff lives in schema_delta.diff.session; it depends on the patch package
and is exported from the top-level package instead of here.
"""

from schema_delta.diff.comparator import (
    ComparatorContext,
    are_nodes_content_equal,
    are_nodes_equal,
    are_trees_equal,
)
from schema_delta.diff.index import NodePathIndex
from schema_delta.diff.changes import ChangeType, CoalescedChanges, RawChange
from schema_delta.diff.collector import ChangeCollector, collect_changes
from schema_delta.diff.coalescer import coalesce_changes

__all__ = [
    "ComparatorContext",
    "are_nodes_content_equal",
    "are_nodes_equal",
    "are_trees_equal",
    "NodePathIndex",
    "ChangeType",
    "CoalescedChanges",
    "RawChange",
    "ChangeCollector",
    "collect_changes",
    "coalesce_changes",
]

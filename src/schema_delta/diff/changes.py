"""Change records produced by the collector and grouped by the coalescer."""

from dataclasses import dataclass
from enum import Enum

from schema_delta.tree.node import SchemaNode


class ChangeType(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MOVED = "moved"
    MODIFIED = "modified"


@dataclass(frozen=True)
class RawChange:
    """One node-level change between the base and current snapshot.

    added    -> current_node only
    removed  -> base_node only
    moved    -> both (path differs)
    modified -> both (same path, content differs)
    """

    type: ChangeType
    base_node: SchemaNode | None = None
    current_node: SchemaNode | None = None

    def __post_init__(self):
        if self.type is not ChangeType.ADDED and self.base_node is None:
            raise ValueError(f"{self.type.value} change requires a base node")
        if self.type is not ChangeType.REMOVED and self.current_node is None:
            raise ValueError(f"{self.type.value} change requires a current node")

    @property
    def node_id(self) -> str:
        node = self.current_node if self.current_node is not None else self.base_node
        return node.id


@dataclass(frozen=True)
class CoalescedChanges:
    """Raw changes partitioned by kind, each bucket in collection order."""

    moved: tuple[RawChange, ...] = ()
    added: tuple[RawChange, ...] = ()
    removed: tuple[RawChange, ...] = ()
    modified: tuple[RawChange, ...] = ()

    def is_empty(self) -> bool:
        return not (self.moved or self.added or self.removed or self.modified)

    def total(self) -> int:
        return len(self.moved) + len(self.added) + len(self.removed) + len(self.modified)

    def ids(self, bucket: str) -> frozenset[str]:
        """Node ids in one bucket (``moved``, ``added``, ``removed``, ``modified``)."""
        return frozenset(change.node_id for change in getattr(self, bucket))

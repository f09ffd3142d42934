"""Partition raw changes into moved / added / removed / modified buckets."""

from typing import Iterable

from loguru import logger

from schema_delta.diff.changes import ChangeType, CoalescedChanges, RawChange
from schema_delta.errors import PartitionViolation

_BUCKETS = {
    ChangeType.MOVED: "moved",
    ChangeType.ADDED: "added",
    ChangeType.REMOVED: "removed",
    ChangeType.MODIFIED: "modified",
}


def coalesce_changes(changes: Iterable[RawChange]) -> CoalescedChanges:
    """Group changes by kind, keeping their relative order.

    Raises:
        PartitionViolation: If a node id shows up more than once.
    """
    buckets: dict[str, list[RawChange]] = {name: [] for name in _BUCKETS.values()}
    seen: dict[str, str] = {}

    for change in changes:
        bucket = _BUCKETS[change.type]
        node_id = change.node_id
        if node_id in seen:
            raise PartitionViolation(node_id, seen[node_id], bucket)
        seen[node_id] = bucket
        buckets[bucket].append(change)

    coalesced = CoalescedChanges(**{name: tuple(items) for name, items in buckets.items()})
    logger.debug(
        f"Coalesced changes: moved={len(coalesced.moved)} added={len(coalesced.added)} "
        f"removed={len(coalesced.removed)} modified={len(coalesced.modified)}"
    )
    return coalesced

"""Compile coalesced changes into an ordered, replayable operation list.

Phases, in emission order:

  removed   remove the topmost removed nodes (deeper first, higher index first)
  moved     move nodes to their new parent/name; new containers that a move
            lands in are added first, and nodes whose type changes into an
            object or array are replaced first
  added     add the topmost new nodes (shallower first, lower index first)
  modified  replace changed nodes with their full current declaration

Every pointer is computed against a simulated working state of the document,
so a ``from`` is always where the node sits after the earlier operations ran.
"""

from collections import deque
from typing import Collection, Iterable

from loguru import logger

from schema_delta.diff.changes import CoalescedChanges
from schema_delta.diff.comparator import are_nodes_content_equal
from schema_delta.errors import InvariantViolation
from schema_delta.path import Path, PathSegment, PropertySegment
from schema_delta.patch.builder import PatchBuilder
from schema_delta.patch.operations import BaseOperation
from schema_delta.patch.ordering import order_additions, order_removals
from schema_delta.tree.node import NodeType
from schema_delta.tree.serializer import serialize_node, serialize_tree
from schema_delta.tree.tree import SchemaTree

PARKING_PREFIX = "__parked_"


class WorkingState:
    """Node placement in the document after the operations emitted so far."""

    def __init__(self, tree: SchemaTree):
        self._parent: dict[str, str | None] = {}
        self._segment: dict[str, PathSegment | None] = {}
        self._children: dict[str, dict[PathSegment, str]] = {}
        self._types: dict[str, NodeType] = {}
        for node_id in tree.node_ids():
            parent = tree.parent_of(node_id)
            self._register(
                node_id,
                tree.node_by_id(node_id).type,
                parent.id if parent is not None else None,
                tree.path_of(node_id).last(),
            )

    def _register(
        self,
        node_id: str,
        node_type: NodeType,
        parent_id: str | None,
        segment: PathSegment | None,
    ) -> None:
        self._types[node_id] = node_type
        self._parent[node_id] = parent_id
        self._segment[node_id] = segment
        self._children[node_id] = {}
        if parent_id is not None:
            self._claim(node_id, parent_id, segment)

    def _claim(self, node_id: str, parent_id: str, segment: PathSegment) -> None:
        occupant = self._children[parent_id].get(segment)
        if occupant is not None and occupant != node_id:
            raise InvariantViolation(
                f"Slot {segment!r} of {parent_id!r} is still held by {occupant!r}", node_id
            )
        self._children[parent_id][segment] = node_id

    # --- Queries ---

    def has(self, node_id: str) -> bool:
        return node_id in self._parent

    def type_of(self, node_id: str) -> NodeType:
        return self._types[node_id]

    def parent(self, node_id: str) -> str | None:
        return self._parent[node_id]

    def segment(self, node_id: str) -> PathSegment | None:
        return self._segment[node_id]

    def child_at(self, parent_id: str, segment: PathSegment) -> str | None:
        return self._children[parent_id].get(segment)

    def children(self, node_id: str) -> list[str]:
        return list(self._children[node_id].values())

    def path_of(self, node_id: str) -> Path:
        segments: list[PathSegment] = []
        current = node_id
        while self._parent[current] is not None:
            segments.append(self._segment[current])
            current = self._parent[current]
        return Path(tuple(reversed(segments)))

    def contains(self, ancestor_id: str, node_id: str) -> bool:
        """True if node_id is ancestor_id or lies below it."""
        current: str | None = node_id
        while current is not None:
            if current == ancestor_id:
                return True
            current = self._parent[current]
        return False

    # --- Updates ---

    def relocate(self, node_id: str, parent_id: str, segment: PathSegment) -> None:
        self._detach(node_id)
        self._claim(node_id, parent_id, segment)
        self._parent[node_id] = parent_id
        self._segment[node_id] = segment

    def drop(self, node_id: str) -> None:
        """Remove a node and everything below it."""
        self._detach(node_id)
        queue = deque([node_id])
        while queue:
            current = queue.popleft()
            queue.extend(self._children.pop(current).values())
            del self._parent[current]
            del self._segment[current]
            del self._types[current]

    def insert(self, tree: SchemaTree, node_id: str, parent_id: str, excluded: Collection[str]) -> None:
        """Register a node added from tree, with the descendants its value carries."""
        self._register(node_id, tree.node_by_id(node_id).type, parent_id, tree.path_of(node_id).last())
        self._register_descendants(tree, node_id, excluded)

    def retype(self, tree: SchemaTree, node_id: str, excluded: Collection[str]) -> None:
        """Apply a replace of node_id with its declaration from tree."""
        for child_id in self.children(node_id):
            self.drop(child_id)
        self._types[node_id] = tree.node_by_id(node_id).type
        self._register_descendants(tree, node_id, excluded)

    def _register_descendants(self, tree: SchemaTree, node_id: str, excluded: Collection[str]) -> None:
        queue = deque([node_id])
        while queue:
            current = queue.popleft()
            for child_id in tree.node_by_id(current).child_ids():
                if child_id in excluded:
                    continue
                child = tree.node_by_id(child_id)
                self._register(child_id, child.type, current, tree.path_of(child_id).last())
                queue.append(child_id)

    def _detach(self, node_id: str) -> None:
        parent_id = self._parent[node_id]
        if parent_id is not None:
            del self._children[parent_id][self._segment[node_id]]


class PatchGenerator:
    """Turn coalesced changes between two snapshots into patch operations.

    Usage:
        generator = PatchGenerator(base_tree, current_tree)
        operations = generator.generate(coalesce_changes(collect_changes(...)))
    """

    def __init__(self, base_tree: SchemaTree, current_tree: SchemaTree, builder: PatchBuilder | None = None):
        self.base_tree = base_tree
        self.current_tree = current_tree
        self.builder = builder or PatchBuilder()

    def generate(self, coalesced: CoalescedChanges) -> list[BaseOperation]:
        if coalesced.is_empty():
            return []

        base_root = self.base_tree.root()
        current_root = self.current_tree.root()
        if base_root.id != current_root.id or base_root.type is not current_root.type:
            # --- Root replacement ---
            # Trigger: a different root node, or the root changed type
            # Why: nothing of the old document can be kept in place
            # Outcome: one replace of the whole document
            logger.debug("Root node replaced, emitting a single document replace")
            return [
                self.builder.replace(
                    "", serialize_tree(self.current_tree), node_id=current_root.id
                )
            ]

        return _Schedule(self.base_tree, self.current_tree, coalesced, self.builder).run()


class _Schedule:
    """One generate() run: change sets, working state and emitted operations."""

    def __init__(
        self,
        base_tree: SchemaTree,
        current_tree: SchemaTree,
        coalesced: CoalescedChanges,
        builder: PatchBuilder,
    ):
        self.base = base_tree
        self.current = current_tree
        self.builder = builder
        self.state = WorkingState(base_tree)
        self.operations: list[BaseOperation] = []

        self.removed_ids = coalesced.ids("removed")
        added_ids = coalesced.ids("added")
        moved_ids = [change.node_id for change in coalesced.moved] + self._reparented_ids(coalesced)

        # Kept nodes whose old ancestor is removed disappear with it
        self.readded_ids = [
            node_id
            for node_id in self.current.node_ids()
            if node_id not in added_ids and self._has_removed_ancestor(node_id)
        ]
        readded = set(self.readded_ids)
        self.move_ids = [m for m in moved_ids if m not in readded]
        self.live_move_ids = frozenset(self.move_ids)

        self.add_ids = frozenset(added_ids | readded)
        self.top_add_ids = [
            change.node_id for change in coalesced.added if self._is_top_add(change.node_id)
        ] + [node_id for node_id in self.readded_ids if self._is_top_add(node_id)]

        self.content_changed_moves = [
            change.node_id
            for change in coalesced.moved
            if change.node_id in self.live_move_ids
            and not are_nodes_content_equal(change.base_node, change.current_node)
        ]
        self.modified_ids = [
            change.node_id for change in coalesced.modified if change.node_id not in readded
        ]
        self.retype_ids = [
            node_id
            for node_id in self.modified_ids + self.content_changed_moves
            if self._becomes_composite(node_id)
        ]

        self.pending_retypes: list[str] = []
        self.pending_adds: list[str] = []
        self.pending_moves: list[str] = []
        self.early_adds: set[str] = set()

    def run(self) -> list[BaseOperation]:
        self._emit_removals()
        self._emit_moves()
        self._emit_additions()
        self._emit_replacements()
        logger.debug(f"Generated {len(self.operations)} patch operations")
        return self.operations

    # --- Removed ---

    def _emit_removals(self) -> None:
        top_removed = [
            node_id
            for node_id in self.removed_ids
            if self.base.parent_of(node_id).id not in self.removed_ids
        ]
        pointers = {node_id: self.state.path_of(node_id).as_pointer() for node_id in top_removed}
        for node_id in order_removals(sorted(top_removed, key=pointers.get), key=pointers.get):
            self.operations.append(self.builder.remove(pointers[node_id], node_id=node_id))
            self.state.drop(node_id)
        logger.debug(f"Removal phase: {len(top_removed)} operations")

    # --- Moved ---

    def _emit_moves(self) -> None:
        prerequisite_adds = self._prerequisite_adds()
        self.pending_retypes = self._by_current_depth(self.retype_ids)
        self.pending_adds = order_additions(prerequisite_adds, key=self._current_pointer)
        self.pending_moves = list(self.move_ids)
        self.early_adds.update(prerequisite_adds)

        # Each park lifts a node to a shallower level or into a slot nothing targets
        parks_left = (len(self.pending_moves) + 1) * (self.base.count_nodes() + self.current.count_nodes())
        while self.pending_retypes or self.pending_adds or self.pending_moves:
            if self._advance():
                continue
            if parks_left <= 0 or not self._park_blocker():
                stuck = (self.pending_moves or self.pending_retypes or self.pending_adds)[0]
                raise InvariantViolation(f"Cannot schedule operations for node {stuck!r}", stuck)
            parks_left -= 1
        logger.debug(f"Move phase done, {len(self.operations)} operations so far")

    def _advance(self) -> bool:
        """Emit every operation that is ready. Returns True on any progress."""
        progressed = False

        for node_id in list(self.pending_retypes):
            if not self.state.children(node_id):
                self._emit_retype(node_id)
                self.pending_retypes.remove(node_id)
                progressed = True

        for node_id in list(self.pending_adds):
            if self._add_ready(node_id):
                self._emit_add(node_id)
                self.pending_adds.remove(node_id)
                progressed = True

        for node_id in list(self.pending_moves):
            if self._is_in_place(node_id):
                logger.debug(f"Move of {node_id!r} carried by an ancestor move")
            elif self._move_ready(node_id):
                self._emit_move(node_id, self._current_parent(node_id), self._current_segment(node_id))
            else:
                continue
            self.pending_moves.remove(node_id)
            progressed = True

        return progressed

    def _prerequisite_adds(self) -> list[str]:
        top_adds = set(self.top_add_ids)
        needed: list[str] = []
        for node_id in self.move_ids:
            parent = self.current.parent_of(node_id)
            while parent is not None:
                if parent.id in top_adds and parent.id not in needed:
                    needed.append(parent.id)
                parent = self.current.parent_of(parent.id)
        return needed

    def _reparented_ids(self, coalesced: CoalescedChanges) -> list[str]:
        """Kept nodes at an unchanged path whose parent is a different node."""
        skip = coalesced.ids("moved") | coalesced.ids("added")
        reparented: list[str] = []
        for node_id in self.current.node_ids():
            if node_id in skip or node_id == self.current.root_id:
                continue
            if self.base.parent_of(node_id).id != self.current.parent_of(node_id).id:
                reparented.append(node_id)
        return reparented

    def _add_ready(self, node_id: str) -> bool:
        parent_id = self._current_parent(node_id)
        if not self._parent_ready(parent_id):
            return False
        return self.state.child_at(parent_id, self._current_segment(node_id)) is None

    def _move_ready(self, node_id: str) -> bool:
        parent_id = self._current_parent(node_id)
        if not self._parent_ready(parent_id):
            return False
        if self.state.contains(node_id, parent_id):
            return False
        return self.state.child_at(parent_id, self._current_segment(node_id)) is None

    def _parent_ready(self, parent_id: str) -> bool:
        return self.state.has(parent_id) and parent_id not in self.pending_retypes

    def _is_in_place(self, node_id: str) -> bool:
        return (
            self.state.parent(node_id) == self._current_parent(node_id)
            and self.state.segment(node_id) == self._current_segment(node_id)
        )

    def _park_blocker(self) -> bool:
        """Move one blocking node out of the way. Returns False if none can be."""
        for node_id in self.pending_retypes:
            for child_id in self.state.children(node_id):
                if child_id in self.pending_moves and self._park(child_id, avoid=node_id):
                    return True

        for node_id in self.pending_adds:
            # A new container lands where a node still sits that is moving out,
            # possibly into the container itself
            parent_id = self._current_parent(node_id)
            if not self._parent_ready(parent_id):
                continue
            occupant = self.state.child_at(parent_id, self._current_segment(node_id))
            if occupant in self.pending_moves and self._park(occupant, avoid=occupant):
                return True

        for node_id in self.pending_moves:
            parent_id = self._current_parent(node_id)
            if not self._parent_ready(parent_id):
                continue
            if self.state.contains(node_id, parent_id):
                # Destination lies inside the moving subtree: lift out the part
                # of that subtree which is leaving anyway
                blocker = self._topmost_pending_below(node_id, parent_id)
                if blocker is not None and self._park(blocker, avoid=node_id):
                    return True
                continue
            occupant = self.state.child_at(parent_id, self._current_segment(node_id))
            if occupant in self.pending_moves and self._park(occupant, avoid=occupant):
                return True
        return False

    def _topmost_pending_below(self, ancestor_id: str, node_id: str) -> str | None:
        chain: list[str] = []
        current = node_id
        while current != ancestor_id:
            chain.append(current)
            current = self.state.parent(current)
        for candidate in reversed(chain):
            if candidate in self.pending_moves:
                return candidate
        return None

    def _park(self, node_id: str, avoid: str) -> bool:
        """Move node_id to a temporary property of an object outside avoid."""
        host = self.state.parent(node_id)
        while host is not None:
            if (
                self.state.type_of(host) is NodeType.OBJECT
                and host not in self.pending_retypes
                and not self.state.contains(avoid, host)
            ):
                break
            host = self.state.parent(host)
        if host is None:
            return False

        name = f"{PARKING_PREFIX}{node_id}"
        suffix = 0
        while self.state.child_at(host, PropertySegment(name)) is not None:
            suffix += 1
            name = f"{PARKING_PREFIX}{node_id}_{suffix}"
        logger.debug(f"Parking {node_id!r} as {name!r} to free a blocked slot")
        self._emit_move(node_id, host, PropertySegment(name))
        return True

    # --- Added ---

    def _emit_additions(self) -> None:
        remaining = [node_id for node_id in self.top_add_ids if node_id not in self.early_adds]
        for node_id in order_additions(remaining, key=self._current_pointer):
            self._emit_add(node_id)
        logger.debug(f"Addition phase: {len(remaining)} operations")

    # --- Modified ---

    def _emit_replacements(self) -> None:
        replaced: set[str] = set()
        candidates = [
            node_id
            for node_id in self.modified_ids + self.content_changed_moves
            if node_id not in self.retype_ids
        ]
        for node_id in self._by_current_depth(candidates):
            if self._has_current_ancestor_in(node_id, replaced):
                continue
            node = self.current.node_by_id(node_id)
            self.operations.append(
                self.builder.replace(
                    self.current.path_of(node_id).as_pointer(),
                    serialize_node(node, self.current),
                    node_id=node_id,
                )
            )
            replaced.add(node_id)
        logger.debug(f"Modification phase: {len(replaced)} operations")

    # --- Emitters ---

    def _emit_add(self, node_id: str) -> None:
        parent_id = self._current_parent(node_id)
        pointer = self.state.path_of(parent_id).join(self._current_segment(node_id)).as_pointer()
        node = self.current.node_by_id(node_id)
        value = serialize_node(node, self.current, exclude_ids=self.live_move_ids)
        self.operations.append(self.builder.add(pointer, value, node_id=node_id))
        self.state.insert(self.current, node_id, parent_id, self.live_move_ids)

    def _emit_move(self, node_id: str, parent_id: str, segment: PathSegment) -> None:
        from_pointer = self.state.path_of(node_id).as_pointer()
        to_pointer = self.state.path_of(parent_id).join(segment).as_pointer()
        self.operations.append(self.builder.move(from_pointer, to_pointer, node_id=node_id))
        self.state.relocate(node_id, parent_id, segment)

    def _emit_retype(self, node_id: str) -> None:
        excluded = self.live_move_ids | self.add_ids
        node = self.current.node_by_id(node_id)
        self.operations.append(
            self.builder.replace(
                self.state.path_of(node_id).as_pointer(),
                serialize_node(node, self.current, exclude_ids=excluded),
                node_id=node_id,
            )
        )
        self.state.retype(self.current, node_id, excluded)

    # --- Helpers ---

    def _current_parent(self, node_id: str) -> str:
        return self.current.parent_of(node_id).id

    def _current_segment(self, node_id: str) -> PathSegment:
        return self.current.path_of(node_id).last()

    def _current_pointer(self, node_id: str) -> str:
        return self.current.path_of(node_id).as_pointer()

    def _by_current_depth(self, node_ids: Iterable[str]) -> list[str]:
        return sorted(node_ids, key=lambda node_id: self.current.path_of(node_id).length())

    def _has_removed_ancestor(self, node_id: str) -> bool:
        parent = self.base.parent_of(node_id)
        while parent is not None:
            if parent.id in self.removed_ids:
                return True
            parent = self.base.parent_of(parent.id)
        return False

    def _has_current_ancestor_in(self, node_id: str, ids: set[str]) -> bool:
        parent = self.current.parent_of(node_id)
        while parent is not None:
            if parent.id in ids:
                return True
            parent = self.current.parent_of(parent.id)
        return False

    def _is_top_add(self, node_id: str) -> bool:
        return self.current.parent_of(node_id).id not in self.add_ids

    def _becomes_composite(self, node_id: str) -> bool:
        base_node = self.base.node_by_id(node_id)
        current_node = self.current.node_by_id(node_id)
        return base_node.type is not current_node.type and current_node.type.is_composite

"""Schema node model.

A node is a flat, immutable declaration. Composite nodes reference their
children by id, so the same node value can be shared between snapshots and a
child can move without its parent's declaration changing.

  Node type   Children                      Own attributes
  -----------------------------------------------------------------------
  object      properties: name -> child id  metadata
  array       items: child id               metadata
  string      -                             metadata, default, foreign_key,
                                            content_media_type
  number      -                             metadata, default
  boolean     -                             metadata, default
  ref         -                             metadata, ref
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class NodeType(Enum):
    """Discriminant of a schema node."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    REF = "ref"

    @property
    def is_primitive(self) -> bool:
        return self in PRIMITIVE_TYPES

    @property
    def is_composite(self) -> bool:
        return self in (NodeType.OBJECT, NodeType.ARRAY)


PRIMITIVE_TYPES = frozenset({NodeType.STRING, NodeType.NUMBER, NodeType.BOOLEAN})


@dataclass(frozen=True)
class NodeMetadata:
    """Descriptive metadata shared by all node types."""

    title: str | None = None
    description: str | None = None
    deprecated: bool = False


@dataclass(frozen=True)
class SchemaNode:
    """A single typed node of a schema tree."""

    id: str
    type: NodeType
    properties: Mapping[str, str] = field(default_factory=dict)  # object: name -> child id
    items: str | None = None  # array: child id of the item schema
    metadata: NodeMetadata = field(default_factory=NodeMetadata)
    ref: str | None = None  # ref: referenced schema id
    default: Any = None  # primitives: declared default value
    foreign_key: str | None = None  # string: referenced table id
    content_media_type: str | None = None  # string: e.g. text/markdown

    def __post_init__(self):
        if not self.id:
            raise ValueError("Schema node requires a non-empty id")
        if not isinstance(self.type, NodeType):
            object.__setattr__(self, "type", NodeType(self.type))
        if self.properties and self.type is not NodeType.OBJECT:
            raise ValueError(f"Only object nodes have properties (node {self.id!r})")
        if self.items is not None and self.type is not NodeType.ARRAY:
            raise ValueError(f"Only array nodes have items (node {self.id!r})")
        if self.type is NodeType.ARRAY and self.items is None:
            raise ValueError(f"Array node {self.id!r} must have an items child")
        if self.type is NodeType.REF and not self.ref:
            raise ValueError(f"Ref node {self.id!r} must have a ref target")
        # Freeze the property mapping so snapshots cannot be mutated through it
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def __deepcopy__(self, memo):
        return replace(self)

    # --- Kind checks ---

    def is_object(self) -> bool:
        return self.type is NodeType.OBJECT

    def is_array(self) -> bool:
        return self.type is NodeType.ARRAY

    def is_ref(self) -> bool:
        return self.type is NodeType.REF

    def is_primitive(self) -> bool:
        return self.type.is_primitive

    def child_ids(self) -> tuple[str, ...]:
        """Ids of the direct children, properties first in declaration order."""
        if self.type is NodeType.OBJECT:
            return tuple(self.properties.values())
        if self.type is NodeType.ARRAY and self.items is not None:
            return (self.items,)
        return ()

    def evolve(self, **changes) -> "SchemaNode":
        """Return a copy of this node with some attributes replaced."""
        return replace(self, **changes)

    def effective_default(self) -> Any:
        """Declared default, or the type's fallback for primitives."""
        if self.default is not None or not self.is_primitive():
            return self.default
        return PRIMITIVE_FALLBACK_DEFAULTS[self.type]


PRIMITIVE_FALLBACK_DEFAULTS: dict[NodeType, Any] = {
    NodeType.STRING: "",
    NodeType.NUMBER: 0,
    NodeType.BOOLEAN: False,
}

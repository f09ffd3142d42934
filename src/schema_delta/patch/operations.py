"""Patch operation models.

Operations are RFC 6902 shaped. Two extra fields ride along:

  scope    "schema" for edits of the schema document, "data" for the default
           values the enricher appends for existing data rows
  node_id  the schema node an operation was generated for (never serialized)
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

Scope = Literal["schema", "data"]


class BaseOperation(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str = Field(..., description="JSON Pointer of the target location")
    scope: Scope = Field(default="schema", description="Document the operation applies to")
    node_id: str | None = Field(default=None, exclude=True)

    def to_json_patch(self) -> dict[str, Any]:
        """Plain RFC 6902 dict (no scope, no node id)."""
        body = self.model_dump(by_alias=True, exclude={"op", "scope"})
        return {"op": self.op, **body}


class AddOperation(BaseOperation):
    op: Literal["add"] = "add"
    value: Any = Field(..., description="Value inserted at path")


class RemoveOperation(BaseOperation):
    op: Literal["remove"] = "remove"


class ReplaceOperation(BaseOperation):
    op: Literal["replace"] = "replace"
    value: Any = Field(..., description="Value replacing the one at path")


class MoveOperation(BaseOperation):
    op: Literal["move"] = "move"
    from_: str = Field(..., alias="from", description="JSON Pointer the value is moved from")


PatchOperation = Annotated[
    Union[AddOperation, RemoveOperation, ReplaceOperation, MoveOperation],
    Field(discriminator="op"),
]

_operation_list = TypeAdapter(list[PatchOperation])


def parse_operations(data: list[dict[str, Any]]) -> list[BaseOperation]:
    """Validate plain dicts (e.g. loaded from JSON) into operation models."""
    return _operation_list.validate_python(data)


def dump_operations(operations: list[BaseOperation]) -> list[dict[str, Any]]:
    """RFC 6902 dicts for a list of operations."""
    return [operation.to_json_patch() for operation in operations]

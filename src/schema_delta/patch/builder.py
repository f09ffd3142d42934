"""Validated construction of single patch operations."""

from typing import Any

from pydantic import ValidationError

from schema_delta.errors import InvalidOperation, InvalidPath
from schema_delta.path import json_pointer_to_path, split_pointer
from schema_delta.patch.operations import (
    AddOperation,
    BaseOperation,
    MoveOperation,
    RemoveOperation,
    ReplaceOperation,
    Scope,
)


class _Unset:
    """Marker for "argument not given", distinct from a JSON null value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class PatchBuilder:
    """Build patch operations, rejecting anything that could not be applied.

    Usage:
        builder = PatchBuilder()
        builder.add("/properties/name", {"type": "string", "default": ""})
        builder.move("/properties/a", "/properties/b")

    The builder holds no state; every call returns a fresh operation.
    """

    OPERATIONS = ("add", "remove", "replace", "move")
    _EXTRA_FIELDS = {
        "add": {"value"},
        "remove": set(),
        "replace": {"value"},
        "move": {"from", "from_"},
    }

    def add(self, path: str, value: Any = UNSET, *, scope: Scope = "schema", node_id: str | None = None) -> AddOperation:
        self._check_value("add", value)
        self._check_pointer(path, scope)
        return self._create(AddOperation, path=path, value=value, scope=scope, node_id=node_id)

    def remove(self, path: str, *, scope: Scope = "schema", node_id: str | None = None) -> RemoveOperation:
        self._check_pointer(path, scope)
        if path in ("", "/"):
            raise InvalidOperation("remove operation cannot target the document root")
        return self._create(RemoveOperation, path=path, scope=scope, node_id=node_id)

    def replace(
        self, path: str, value: Any = UNSET, *, scope: Scope = "schema", node_id: str | None = None
    ) -> ReplaceOperation:
        self._check_value("replace", value)
        self._check_pointer(path, scope)
        return self._create(ReplaceOperation, path=path, value=value, scope=scope, node_id=node_id)

    def move(
        self, from_path: str = UNSET, path: str = UNSET, *, scope: Scope = "schema", node_id: str | None = None
    ) -> MoveOperation:
        if from_path is UNSET or from_path is None:
            raise InvalidOperation("move operation requires a from path")
        if path is UNSET or path is None:
            raise InvalidOperation("move operation requires a path")
        self._check_pointer(from_path, scope)
        self._check_pointer(path, scope)
        if path != from_path and path.startswith(f"{from_path}/"):
            raise InvalidOperation(f"Cannot move {from_path!r} into its own child {path!r}")
        return self._create(MoveOperation, from_=from_path, path=path, scope=scope, node_id=node_id)

    def build(self, op: str, **fields: Any) -> BaseOperation:
        """Generic entry point: ``build("move", **{"from": "/a", "path": "/b"})``."""
        if op not in self.OPERATIONS:
            raise InvalidOperation(f"Unknown operation {op!r}, expected one of {self.OPERATIONS}")
        path = fields.pop("path", UNSET)
        if path is UNSET:
            raise InvalidOperation(f"{op} operation requires a path")
        allowed = {"scope", "node_id"} | self._EXTRA_FIELDS[op]
        unexpected = set(fields) - allowed
        if unexpected:
            raise InvalidOperation(f"Unexpected fields for {op} operation: {sorted(unexpected)}")
        if op == "add":
            return self.add(path, fields.pop("value", UNSET), **fields)
        if op == "remove":
            return self.remove(path, **fields)
        if op == "replace":
            return self.replace(path, fields.pop("value", UNSET), **fields)
        from_path = fields.pop("from", fields.pop("from_", UNSET))
        return self.move(from_path, path, **fields)

    # --- Validation ---

    @staticmethod
    def _check_value(op: str, value: Any) -> None:
        if value is UNSET:
            raise InvalidOperation(f"{op} operation requires a value")

    @staticmethod
    def _check_pointer(pointer: Any, scope: Scope) -> None:
        if not isinstance(pointer, str):
            raise InvalidOperation(f"Path must be a JSON Pointer string, got {type(pointer).__name__}")
        try:
            if scope == "schema":
                json_pointer_to_path(pointer)
            else:
                split_pointer(pointer)
        except InvalidPath as e:
            raise InvalidOperation(str(e)) from e

    @staticmethod
    def _create(model: type[BaseOperation], **fields: Any) -> Any:
        try:
            return model(**fields)
        except ValidationError as e:
            raise InvalidOperation(f"Invalid {model.__name__}: {e}") from e

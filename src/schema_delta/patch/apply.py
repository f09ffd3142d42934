"""Replay patch operations onto JSON documents.

RFC 6902 semantics for the four operations the engine emits. Object members
are addressed by name; list elements by index, with ``-`` meaning "append" for
``add``. The input document is never modified.
"""

import copy
from typing import Any, Iterable, Mapping

from loguru import logger

from schema_delta.errors import InvalidPath, PatchApplyError
from schema_delta.path import split_pointer
from schema_delta.patch.operations import BaseOperation, Scope
from schema_delta.tree.parser import parse_schema
from schema_delta.tree.serializer import serialize_tree
from schema_delta.tree.tree import SchemaTree

_MISSING = object()


def _as_dict(operation: BaseOperation | Mapping[str, Any]) -> tuple[dict[str, Any], str]:
    if isinstance(operation, BaseOperation):
        return operation.to_json_patch(), operation.scope
    data = dict(operation)
    return data, data.pop("scope", "schema")


def _tokens(pointer: Any, operation: dict[str, Any]) -> list[str]:
    if not isinstance(pointer, str):
        raise PatchApplyError("Operation pointer must be a string", operation)
    try:
        return split_pointer(pointer)
    except InvalidPath as e:
        raise PatchApplyError(str(e), operation) from e


def _list_index(container: list, token: str, operation: dict[str, Any], allow_end: bool) -> int:
    if token == "-" and allow_end:
        return len(container)
    if not token.isdigit() or (len(token) > 1 and token.startswith("0")):
        raise PatchApplyError(f"Invalid list index {token!r}", operation)
    index = int(token)
    limit = len(container) if allow_end else len(container) - 1
    if index > limit:
        raise PatchApplyError(f"List index {index} out of range", operation)
    return index


def _resolve(document: Any, tokens: list[str], operation: dict[str, Any]) -> Any:
    current = document
    for token in tokens:
        if isinstance(current, dict):
            if token not in current:
                raise PatchApplyError(f"Member {token!r} not found", operation)
            current = current[token]
        elif isinstance(current, list):
            current = current[_list_index(current, token, operation, allow_end=False)]
        else:
            raise PatchApplyError(f"Cannot descend into {type(current).__name__} at {token!r}", operation)
    return current


def _add(document: Any, tokens: list[str], value: Any, operation: dict[str, Any]) -> Any:
    if not tokens:
        return value
    parent = _resolve(document, tokens[:-1], operation)
    key = tokens[-1]
    if isinstance(parent, dict):
        parent[key] = value
    elif isinstance(parent, list):
        parent.insert(_list_index(parent, key, operation, allow_end=True), value)
    else:
        raise PatchApplyError(f"Cannot add into {type(parent).__name__}", operation)
    return document


def _remove(document: Any, tokens: list[str], operation: dict[str, Any]) -> Any:
    if not tokens:
        raise PatchApplyError("Cannot remove the document root", operation)
    parent = _resolve(document, tokens[:-1], operation)
    key = tokens[-1]
    if isinstance(parent, dict):
        if key not in parent:
            raise PatchApplyError(f"Member {key!r} not found", operation)
        return parent.pop(key)
    if isinstance(parent, list):
        return parent.pop(_list_index(parent, key, operation, allow_end=False))
    raise PatchApplyError(f"Cannot remove from {type(parent).__name__}", operation)


def _replace(document: Any, tokens: list[str], value: Any, operation: dict[str, Any]) -> None:
    parent = _resolve(document, tokens[:-1], operation)
    key = tokens[-1]
    if isinstance(parent, dict):
        if key not in parent:
            raise PatchApplyError(f"Member {key!r} not found", operation)
        parent[key] = value
    elif isinstance(parent, list):
        parent[_list_index(parent, key, operation, allow_end=False)] = value
    else:
        raise PatchApplyError(f"Cannot replace inside {type(parent).__name__}", operation)


def _value(operation: dict[str, Any]) -> Any:
    value = operation.get("value", _MISSING)
    if value is _MISSING:
        raise PatchApplyError("Operation has no value", operation)
    return copy.deepcopy(value)


def apply_operation(document: Any, operation: BaseOperation | Mapping[str, Any]) -> Any:
    """Apply one operation in place and return the (possibly new) document root."""
    op, _ = _as_dict(operation)
    kind = op.get("op")
    tokens = _tokens(op.get("path"), op)

    if kind == "add":
        return _add(document, tokens, _value(op), op)
    if kind == "remove":
        _remove(document, tokens, op)
        return document
    if kind == "replace":
        if not tokens:
            return _value(op)
        _replace(document, tokens, _value(op), op)
        return document
    if kind == "move":
        from_tokens = _tokens(op.get("from"), op)
        if from_tokens == tokens:
            return document
        if tokens[: len(from_tokens)] == from_tokens:
            raise PatchApplyError("Cannot move a value into one of its children", op)
        value = _remove(document, from_tokens, op)
        return _add(document, tokens, value, op)
    raise PatchApplyError(f"Unsupported operation {kind!r}", op)


def apply_patches(
    document: Any,
    operations: Iterable[BaseOperation | Mapping[str, Any]],
    scope: Scope = "schema",
) -> Any:
    """Apply the operations of one scope to a deep copy of document.

    Raises:
        PatchApplyError: If an operation does not fit the document.
    """
    result = copy.deepcopy(document)
    applied = 0
    for operation in operations:
        _, op_scope = _as_dict(operation)
        if op_scope != scope:
            continue
        result = apply_operation(result, operation)
        applied += 1
    logger.debug(f"Applied {applied} {scope} operations")
    return result


def apply_schema_patches(
    tree: SchemaTree,
    operations: Iterable[BaseOperation | Mapping[str, Any]],
) -> SchemaTree:
    """Serialize tree, apply the schema operations and parse the result.

    The returned tree has fresh node ids; compare it structurally.
    """
    return parse_schema(apply_patches(serialize_tree(tree), operations, scope="schema"))
